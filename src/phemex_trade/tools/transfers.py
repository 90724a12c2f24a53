"""Transfers between the spot wallet and the futures trading account."""

from collections.abc import Mapping
from typing import Any

from phemex_trade.exceptions import ParameterError, ScaleTableNotLoadedError
from phemex_trade.logging import get_logger
from phemex_trade.models import TRANSFER_STATUS
from phemex_trade.tools.context import ToolContext, ToolResult, unwrap

logger = get_logger(__name__)

TRANSFER_PATH = "/assets/transfer"

SPOT_TO_FUTURES = "spot_to_futures"
FUTURES_TO_SPOT = "futures_to_spot"

# moveOp values for POST /assets/transfer
_MOVE_OPS = {SPOT_TO_FUTURES: 2, FUTURES_TO_SPOT: 1}

# bizType values in transfer history rows; `side` is always 0 there.
_BIZ_TYPES = {SPOT_TO_FUTURES: 10, FUTURES_TO_SPOT: 11}

_DIRECTION_LABELS = {
    SPOT_TO_FUTURES: "Spot → Futures",
    FUTURES_TO_SPOT: "Futures → Spot",
}


def _parse_direction(direction: str) -> str:
    if direction not in _MOVE_OPS:
        raise ParameterError(
            f"Invalid direction: {direction!r}. "
            f"Must be {SPOT_TO_FUTURES} or {FUTURES_TO_SPOT}."
        )
    return direction


def status_text(status: int) -> str:
    """Human text for a transfer status code; unknown codes are still in flight."""
    return TRANSFER_STATUS.get(status, "Processing")


async def transfer_funds(
    ctx: ToolContext,
    currency: str,
    amount: str,
    direction: str,
) -> ToolResult:
    """Move `amount` of `currency` between the spot wallet and futures account.

    The amount is scaled with the currency's value factor, so product
    metadata must be loaded and must list the currency.
    """
    direction = _parse_direction(direction)
    if not ctx.scaler.is_loaded():
        raise ScaleTableNotLoadedError(
            "Product info not loaded. Cannot determine currency scale."
        )
    amount_ev = ctx.scaler.scale_currency_amount(currency, amount)

    logger.info("transferring_funds", currency=currency, amount=amount, direction=direction)
    data = unwrap(
        await ctx.client.post(
            TRANSFER_PATH,
            {"amountEv": amount_ev, "currency": currency, "moveOp": _MOVE_OPS[direction]},
        )
    )

    display = _display_row(ctx, currency, data) if isinstance(data, Mapping) else data
    return ToolResult(
        display, f"Transfer {_DIRECTION_LABELS[direction]}: {amount} {currency}"
    )


async def get_transfer_history(
    ctx: ToolContext,
    currency: str,
    direction: str | None = None,
    limit: int = 20,
) -> ToolResult:
    """Recent spot/futures transfers for a currency, newest first.

    The exchange does not filter by direction reliably, so rows are
    filtered here on bizType.
    """
    if direction is not None:
        direction = _parse_direction(direction)
    if not 1 <= limit <= 200:
        raise ParameterError(f"limit must be between 1 and 200, got {limit}")

    data = unwrap(await ctx.client.get(TRANSFER_PATH, {"currency": currency, "limit": limit}))
    rows = _extract_rows(data)
    if direction is not None:
        rows = [row for row in rows if row.get("bizType") == _BIZ_TYPES[direction]]

    display = [_display_row(ctx, currency, row) for row in rows]
    if not display:
        return ToolResult([], f"No transfer history for {currency}.")
    return ToolResult(display, f"Transfer history ({currency}):")


def _extract_rows(data: Any) -> list[Mapping[str, Any]]:
    if isinstance(data, Mapping):
        rows = data.get("rows")
    else:
        rows = data
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, Mapping)]


def _display_row(ctx: ToolContext, currency: str, row: Mapping[str, Any]) -> dict[str, Any]:
    display = dict(row)

    amount_ev = row.get("amountEv")
    if (
        _is_int(amount_ev)
        and ctx.scaler.is_loaded()
        and ctx.scaler.table.currency(currency) is not None
    ):
        display["amount"] = ctx.scaler.unscale_currency_amount(currency, amount_ev)
        del display["amountEv"]

    biz_type = row.get("bizType")
    if _is_int(biz_type):
        display["direction"] = (
            SPOT_TO_FUTURES if biz_type == _BIZ_TYPES[SPOT_TO_FUTURES] else FUTURES_TO_SPOT
        )

    status = row.get("status")
    if _is_int(status):
        display["statusText"] = status_text(status)
    return display


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
