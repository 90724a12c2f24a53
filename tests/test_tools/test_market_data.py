"""Tests for public market-data tools."""

from unittest.mock import AsyncMock, patch

import pytest

from phemex_trade.exceptions import ExchangeAPIError, RoutingError
from phemex_trade.models import ApiResponse, MdError, MdResponse
from phemex_trade.tools import market_data
from phemex_trade.tools.context import ToolContext


@pytest.fixture
def md_ok(mock_client: AsyncMock) -> AsyncMock:
    mock_client.get_public_md.return_value = MdResponse(error=None, result={"close": 1})
    return mock_client


class TestTicker:
    @pytest.mark.asyncio
    async def test_linear(self, ctx: ToolContext, md_ok: AsyncMock) -> None:
        result = await market_data.get_ticker(ctx, "BTCUSDT")
        md_ok.get_public_md.assert_awaited_once_with("/md/v2/ticker/24hr", {"symbol": "BTCUSDT"})
        assert result.data == {"close": 1}

    @pytest.mark.asyncio
    async def test_spot_symbol_is_prefixed(self, ctx: ToolContext, md_ok: AsyncMock) -> None:
        await market_data.get_ticker(ctx, "BTCUSDT", market_type="spot")
        md_ok.get_public_md.assert_awaited_once_with(
            "/md/spot/ticker/24hr", {"symbol": "sBTCUSDT"}
        )

    @pytest.mark.asyncio
    async def test_market_data_error_raises(
        self, ctx: ToolContext, mock_client: AsyncMock
    ) -> None:
        mock_client.get_public_md.return_value = MdResponse(
            error=MdError(code=6001, message="invalid argument")
        )
        with pytest.raises(ExchangeAPIError, match="invalid argument"):
            await market_data.get_ticker(ctx, "NOPE")

    @pytest.mark.asyncio
    async def test_invalid_market_type(self, ctx: ToolContext) -> None:
        with pytest.raises(RoutingError):
            await market_data.get_ticker(ctx, "BTCUSDT", market_type="options")


class TestOrderbookAndTrades:
    @pytest.mark.asyncio
    async def test_orderbook_inverse(self, ctx: ToolContext, md_ok: AsyncMock) -> None:
        await market_data.get_orderbook(ctx, "BTCUSD", market_type="inverse")
        md_ok.get_public_md.assert_awaited_once_with("/md/orderbook", {"symbol": "BTCUSD", "id": 0})

    @pytest.mark.asyncio
    async def test_recent_trades_linear(self, ctx: ToolContext, md_ok: AsyncMock) -> None:
        await market_data.get_recent_trades(ctx, "ETHUSDT")
        md_ok.get_public_md.assert_awaited_once_with("/md/v2/trade", {"symbol": "ETHUSDT"})


class TestKlines:
    @pytest.mark.asyncio
    async def test_window_ends_now(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        mock_client.get_public.return_value = ApiResponse(code=0, message="", data={"rows": []})
        with patch("phemex_trade.tools.market_data.time.time", return_value=1_700_000_000.7):
            result = await market_data.get_klines(ctx, "BTCUSDT", 60, limit=10)

        mock_client.get_public.assert_awaited_once_with(
            "/exchange/public/md/v2/kline/list",
            {
                "symbol": "BTCUSDT",
                "resolution": 60,
                "limit": 10,
                "from": 1_700_000_000 - 600,
                "to": 1_700_000_000,
            },
        )
        assert result.data == {"rows": []}

    @pytest.mark.asyncio
    async def test_error_code_raises(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        mock_client.get_public.return_value = ApiResponse(code=10001, message="")
        with pytest.raises(ExchangeAPIError, match="Illegal request"):
            await market_data.get_klines(ctx, "BTCUSDT", 60)


class TestFundingRate:
    @pytest.mark.asyncio
    async def test_linear(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        await market_data.get_funding_rate(ctx, ".BTCUSDTFR8H", limit=5)
        mock_client.get_public.assert_awaited_once_with(
            "/api-data/public/data/funding-rate-history",
            {"symbol": ".BTCUSDTFR8H", "limit": 5},
        )

    @pytest.mark.asyncio
    async def test_spot_not_supported(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        with pytest.raises(RoutingError):
            await market_data.get_funding_rate(ctx, ".BTCFR8H", market_type="spot")
        mock_client.get_public.assert_not_awaited()
