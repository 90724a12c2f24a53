"""Tests for spot/futures transfer tools."""

from unittest.mock import AsyncMock

import pytest

from phemex_trade.exceptions import ParameterError, ScaleInfoMissingError, ScaleTableNotLoadedError
from phemex_trade.models import ApiResponse
from phemex_trade.tools import transfers
from phemex_trade.tools.context import ToolContext

HISTORY_ROWS = [
    {"amountEv": 150_000_000, "currency": "BTC", "bizType": 10, "side": 0, "status": 10},
    {"amountEv": 50_000_000, "currency": "BTC", "bizType": 11, "side": 0, "status": 3},
    {"amountEv": 1, "currency": "BTC", "bizType": 10, "side": 0, "status": 1},
]


class TestTransferFunds:
    @pytest.mark.asyncio
    async def test_spot_to_futures(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        mock_client.post.return_value = ApiResponse(
            code=0,
            message="",
            data={"amountEv": 150_000_000, "currency": "BTC", "status": 10},
        )
        result = await transfers.transfer_funds(ctx, "BTC", "1.5", "spot_to_futures")

        mock_client.post.assert_awaited_once_with(
            "/assets/transfer", {"amountEv": 150_000_000, "currency": "BTC", "moveOp": 2}
        )
        assert result.data == {"amount": "1.5", "currency": "BTC", "status": 10, "statusText": "Success"}
        assert result.message == "Transfer Spot → Futures: 1.5 BTC"

    @pytest.mark.asyncio
    async def test_futures_to_spot_move_op(
        self, ctx: ToolContext, mock_client: AsyncMock
    ) -> None:
        await transfers.transfer_funds(ctx, "USDT", "25", "futures_to_spot")
        body = mock_client.post.await_args.args[1]
        assert body == {"amountEv": 2_500_000_000, "currency": "USDT", "moveOp": 1}

    @pytest.mark.asyncio
    async def test_unknown_status_is_processing(
        self, ctx: ToolContext, mock_client: AsyncMock
    ) -> None:
        mock_client.post.return_value = ApiResponse(code=0, message="", data={"status": 1})
        result = await transfers.transfer_funds(ctx, "BTC", "1", "spot_to_futures")
        assert result.data["statusText"] == "Processing"

    @pytest.mark.asyncio
    async def test_requires_scale_table(
        self, unloaded_ctx: ToolContext, mock_client: AsyncMock
    ) -> None:
        with pytest.raises(ScaleTableNotLoadedError):
            await transfers.transfer_funds(unloaded_ctx, "BTC", "1", "spot_to_futures")
        mock_client.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_currency(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        with pytest.raises(ScaleInfoMissingError, match="DOGE"):
            await transfers.transfer_funds(ctx, "DOGE", "1", "spot_to_futures")
        mock_client.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_direction(self, ctx: ToolContext) -> None:
        with pytest.raises(ParameterError, match="Invalid direction"):
            await transfers.transfer_funds(ctx, "BTC", "1", "sideways")


class TestTransferHistory:
    @pytest.mark.asyncio
    async def test_rows_displayed(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        mock_client.get.return_value = ApiResponse(code=0, message="", data={"rows": HISTORY_ROWS})
        result = await transfers.get_transfer_history(ctx, "BTC")

        mock_client.get.assert_awaited_once_with(
            "/assets/transfer", {"currency": "BTC", "limit": 20}
        )
        assert len(result.data) == 3
        first = result.data[0]
        assert first["amount"] == "1.5"
        assert "amountEv" not in first
        assert first["direction"] == "spot_to_futures"
        assert first["statusText"] == "Success"
        assert result.data[1]["direction"] == "futures_to_spot"
        assert result.data[1]["statusText"] == "Rejected"
        assert result.data[2]["statusText"] == "Processing"

    @pytest.mark.asyncio
    async def test_direction_filter(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        mock_client.get.return_value = ApiResponse(code=0, message="", data={"rows": HISTORY_ROWS})
        result = await transfers.get_transfer_history(ctx, "BTC", direction="futures_to_spot")
        assert [row["amount"] for row in result.data] == ["0.5"]

    @pytest.mark.asyncio
    async def test_plain_list_payload(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        mock_client.get.return_value = ApiResponse(code=0, message="", data=HISTORY_ROWS[:1])
        result = await transfers.get_transfer_history(ctx, "BTC")
        assert result.data[0]["amount"] == "1.5"

    @pytest.mark.asyncio
    async def test_empty(self, ctx: ToolContext, mock_client: AsyncMock) -> None:
        mock_client.get.return_value = ApiResponse(code=0, message="", data={"rows": []})
        result = await transfers.get_transfer_history(ctx, "BTC")
        assert result.data == []
        assert result.message == "No transfer history for BTC."

    @pytest.mark.asyncio
    async def test_raw_amount_when_table_not_loaded(
        self, unloaded_ctx: ToolContext, mock_client: AsyncMock
    ) -> None:
        mock_client.get.return_value = ApiResponse(code=0, message="", data={"rows": HISTORY_ROWS})
        result = await transfers.get_transfer_history(unloaded_ctx, "BTC")
        assert result.data[0]["amountEv"] == 150_000_000
        assert "amount" not in result.data[0]

    @pytest.mark.asyncio
    async def test_limit_bounds(self, ctx: ToolContext) -> None:
        with pytest.raises(ParameterError, match="limit"):
            await transfers.get_transfer_history(ctx, "BTC", limit=500)
