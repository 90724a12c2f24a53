"""Phemex transport implementation via ccxt async.

Uses ccxt.async_support.phemex for the aiohttp session, rate limiting and
HMAC-SHA256 request signing (path + query + expiry + body), but issues raw
REST calls against explicit endpoint paths and hands back the exchange's
own envelope instead of ccxt's unified structures.
"""

from collections.abc import Mapping
from typing import Any

import ccxt.async_support as ccxt_async

from phemex_trade.config import PhemexSettings
from phemex_trade.exceptions import TransportError
from phemex_trade.exchange.client import ExchangeClient, Params
from phemex_trade.logging import get_logger
from phemex_trade.models import ApiResponse, MdError, MdResponse

logger = get_logger(__name__)

# ccxt phemex API groups: "private" is signed, "v2" is the bare host unsigned.
_SIGNED = "private"
_UNSIGNED = "v2"


class _EnvelopePhemex(ccxt_async.phemex):
    """ccxt phemex that leaves non-zero envelope codes to the caller."""

    def handle_errors(self, *args: Any, **kwargs: Any) -> None:
        return None


class PhemexClient(ExchangeClient):
    """Concrete Phemex transport using ccxt async."""

    def __init__(self, settings: PhemexSettings) -> None:
        self._settings = settings
        base_url = settings.api_url.rstrip("/")

        config: dict = {
            "apiKey": settings.api_key.get_secret_value(),
            "secret": settings.api_secret.get_secret_value(),
            "enableRateLimit": settings.enable_rate_limit,
            "options": {
                "x-phemex-request-expiry": settings.request_expiry_seconds,
            },
            # Route every API group to the configured host (mainnet or testnet)
            "urls": {
                "api": {
                    "v1": f"{base_url}/v1",
                    "v2": base_url,
                    "public": f"{base_url}/exchange/public",
                    "private": base_url,
                },
            },
        }

        self._exchange = _EnvelopePhemex(config)

    @property
    def exchange(self) -> ccxt_async.phemex:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_phemex_connection")
        await self._exchange.close()
        logger.info("phemex_connection_closed")

    async def get(self, path: str, params: Params | None = None) -> ApiResponse:
        raw = await self._request(path, _SIGNED, "GET", params)
        return _api_response(raw)

    async def get_public(self, path: str, params: Params | None = None) -> ApiResponse:
        raw = await self._request(path, _UNSIGNED, "GET", params)
        return _api_response(raw)

    async def get_public_md(self, path: str, params: Params | None = None) -> MdResponse:
        raw = await self._request(path, _UNSIGNED, "GET", params)
        return _md_response(raw)

    async def post(self, path: str, body: Params) -> ApiResponse:
        # POST bodies are JSON; keep native types instead of query strings.
        raw = await self._request(path, _SIGNED, "POST", body, encode=False)
        return _api_response(raw)

    async def put_with_query(self, path: str, params: Params) -> ApiResponse:
        raw = await self._request(path, _SIGNED, "PUT", params)
        return _api_response(raw)

    async def delete(self, path: str, params: Params | None = None) -> ApiResponse:
        raw = await self._request(path, _SIGNED, "DELETE", params)
        return _api_response(raw)

    async def _request(
        self,
        path: str,
        api: str,
        method: str,
        params: Params | None,
        encode: bool = True,
    ) -> Any:
        prepared = _encode_params(params) if encode else _drop_none(params)
        logger.debug("phemex_request", method=method, path=path, signed=api == _SIGNED)
        try:
            return await self._exchange.request(path.lstrip("/"), api, method, prepared)
        except ccxt_async.BaseError as exc:
            logger.warning(
                "phemex_request_failed",
                method=method,
                path=path,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise TransportError(f"{method} {path} failed: {exc}") from exc


def _drop_none(params: Params | None) -> Params:
    return {k: v for k, v in (params or {}).items() if v is not None}


def _encode_params(params: Params | None) -> Params:
    """Prepare query parameters: drop None, render booleans as true/false."""
    encoded: Params = {}
    for key, value in _drop_none(params).items():
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = value
    return encoded


def _api_response(raw: Any) -> ApiResponse:
    if not isinstance(raw, Mapping):
        raise TransportError(f"Unexpected response from exchange: {raw!r}")
    code = raw.get("code")
    if code is None:
        raise TransportError(f"Response envelope has no code: {raw!r}")
    message = raw.get("msg") or raw.get("message") or ""
    return ApiResponse(code=int(code), message=str(message), data=raw.get("data"))


def _md_response(raw: Any) -> MdResponse:
    if not isinstance(raw, Mapping):
        raise TransportError(f"Unexpected response from exchange: {raw!r}")
    error = raw.get("error")
    if error is None:
        return MdResponse(error=None, result=raw.get("result"))
    if isinstance(error, Mapping):
        return MdResponse(
            error=MdError(
                code=int(error.get("code", -1)),
                message=str(error.get("message", "")),
            ),
            result=raw.get("result"),
        )
    return MdResponse(error=MdError(code=-1, message=str(error)), result=raw.get("result"))
