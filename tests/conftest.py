"""Shared test fixtures for the Phemex trading tools."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from phemex_trade.config import PhemexSettings
from phemex_trade.exchange.client import ExchangeClient
from phemex_trade.exchange.scale_table import ScaleTable
from phemex_trade.exchange.scaler import ValueScaler
from phemex_trade.models import ApiResponse
from phemex_trade.tools.context import ToolContext

# Trimmed /public/products payload with one entry per family plus
# entries that must be filtered out.
MOCK_PRODUCTS: dict[str, Any] = {
    "currencies": [
        {"currency": "BTC", "valueScale": 8},
        {"currency": "USDT", "valueScale": 8},
        {"currency": "USD", "valueScale": 4},
    ],
    "products": [
        {
            "symbol": "BTCUSD",
            "type": "Perpetual",
            "status": "Listed",
            "settleCurrency": "BTC",
            "priceScale": 4,
            "ratioScale": 8,
            "contractSize": 1,
        },
        {
            "symbol": "ETHUSD",
            "type": "Perpetual",
            "status": "Listed",
            "settleCurrency": "ETH",
            "priceScale": 4,
            "ratioScale": 8,
            "contractSize": "0.005",
        },
        {
            "symbol": "sBTCUSDT",
            "type": "Spot",
            "status": "Listed",
            "settleCurrency": "USDT",
            "priceScale": 8,
            "ratioScale": 8,
        },
        {
            "symbol": "XRPUSD",
            "type": "Perpetual",
            "status": "Delisted",
            "settleCurrency": "XRP",
            "priceScale": 4,
            "ratioScale": 8,
        },
        {
            "symbol": "BTCUSD0326",
            "type": "Future",
            "status": "Listed",
            "settleCurrency": "BTC",
            "priceScale": 4,
            "ratioScale": 8,
        },
    ],
    "perpProductsV2": [
        {"symbol": "BTCUSDT", "status": "Listed", "settleCurrency": "USDT"},
        {"symbol": "LUNAUSDT", "status": "Delisted", "settleCurrency": "USDT"},
    ],
}


@pytest.fixture
def products_payload() -> dict[str, Any]:
    """Return the mock product listing."""
    return MOCK_PRODUCTS


@pytest.fixture
def scale_table() -> ScaleTable:
    """Loaded scale table built from the mock product listing."""
    return ScaleTable.from_products(MOCK_PRODUCTS)


@pytest.fixture
def scaler(scale_table: ScaleTable) -> ValueScaler:
    return ValueScaler(scale_table)


@pytest.fixture
def empty_scaler() -> ValueScaler:
    """Scaler over a table whose load failed."""
    return ValueScaler(ScaleTable.empty())


@pytest.fixture
def mock_client() -> AsyncMock:
    """ExchangeClient mock; every call succeeds with empty data by default."""
    client = AsyncMock(spec=ExchangeClient)
    ok = ApiResponse(code=0, message="", data={})
    client.get.return_value = ok
    client.get_public.return_value = ok
    client.post.return_value = ok
    client.put_with_query.return_value = ok
    client.delete.return_value = ok
    return client


@pytest.fixture
def ctx(mock_client: AsyncMock, scaler: ValueScaler) -> ToolContext:
    return ToolContext(client=mock_client, scaler=scaler)


@pytest.fixture
def unloaded_ctx(mock_client: AsyncMock, empty_scaler: ValueScaler) -> ToolContext:
    """Context whose scale table failed to load."""
    return ToolContext(client=mock_client, scaler=empty_scaler)


@pytest.fixture
def phemex_settings() -> PhemexSettings:
    return PhemexSettings(
        api_key="test-key",  # type: ignore[arg-type]
        api_secret="test-secret",  # type: ignore[arg-type]
        api_url="https://testnet-api.phemex.com",
    )
