"""Tests for settings, logging setup and error descriptions."""

import logging
import sys

import pytest

from phemex_trade.config import AppSettings, PhemexSettings
from phemex_trade.exceptions import (
    ExchangeAPIError,
    ParameterError,
    PhemexTradeError,
    describe_error,
)
from phemex_trade.logging import redact_secrets, setup_logging


class TestPhemexSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("PHEMEX_API_KEY", "PHEMEX_API_SECRET", "PHEMEX_API_URL"):
            monkeypatch.delenv(name, raising=False)
        settings = PhemexSettings()
        assert settings.api_url == "https://testnet-api.phemex.com"
        assert settings.request_expiry_seconds == 60
        assert not settings.has_credentials

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHEMEX_API_KEY", "k")
        monkeypatch.setenv("PHEMEX_API_SECRET", "s")
        monkeypatch.setenv("PHEMEX_API_URL", "https://api.phemex.com")
        settings = PhemexSettings()
        assert settings.has_credentials
        assert settings.api_secret.get_secret_value() == "s"
        assert settings.api_url == "https://api.phemex.com"

    def test_secret_not_in_repr(self, phemex_settings: PhemexSettings) -> None:
        assert "test-secret" not in repr(phemex_settings)


class TestAppSettings:
    def test_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert AppSettings().log_level == "DEBUG"


class TestDescribeError:
    def test_known_code(self) -> None:
        assert describe_error(10002) == "Too many requests (code: 10002)"

    def test_known_code_with_detail(self) -> None:
        assert describe_error(11074, "TE_ERR_INVALID_LEVERAGE") == (
            "Invalid leverage: TE_ERR_INVALID_LEVERAGE (code: 11074)"
        )

    def test_unknown_code_with_message(self) -> None:
        assert describe_error(12345, "raw text") == "raw text (code: 12345)"

    def test_unknown_code_without_message(self) -> None:
        assert describe_error(12345) == "Unknown error (code: 12345)"

    def test_exchange_api_error_keeps_fields(self) -> None:
        exc = ExchangeAPIError(39996, "order gone")
        assert exc.code == 39996
        assert exc.message == "order gone"
        assert str(exc) == "Order not found: order gone (code: 39996)"
        assert isinstance(exc, PhemexTradeError)

    def test_parameter_error_is_value_error(self) -> None:
        assert issubclass(ParameterError, ValueError)
        assert issubclass(ParameterError, PhemexTradeError)


class TestLogging:
    def test_redacts_credentials(self) -> None:
        event = {"event": "x", "api_key": "k", "signature": "abc", "symbol": "BTCUSD"}
        assert redact_secrets(None, "info", event) == {
            "event": "x",
            "api_key": "***",
            "signature": "***",
            "symbol": "BTCUSD",
        }

    def test_handler_writes_to_stderr(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging("DEBUG", "json")
            assert len(root.handlers) == 1
            assert root.handlers[0].stream is sys.stderr
            assert root.level == logging.DEBUG
            assert logging.getLogger("ccxt").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
