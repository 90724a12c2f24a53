"""Account read tools: balances, positions, open orders and history."""

from datetime import datetime, timedelta, timezone
from typing import Any

from phemex_trade.exceptions import RoutingError
from phemex_trade.exchange import router
from phemex_trade.models import MarketType, Operation
from phemex_trade.tools.context import ToolContext, ToolResult, unwrap

SPOT_WALLETS_PATH = "/spot/wallets"

# Coin-M reports an empty open-order list as this error message.
NO_OPEN_ORDERS_MESSAGE = "OM_ORDER_NOT_FOUND"


async def get_account(
    ctx: ToolContext,
    currency: str = "USDT",
    market_type: MarketType | str = MarketType.LINEAR,
) -> ToolResult:
    """Account balance and margin info for a settlement currency."""
    market_type = router.parse_market_type(market_type)
    if market_type is MarketType.SPOT:
        raise RoutingError(
            "Spot does not have a futures-style account. "
            "Use get_spot_wallet for spot balances."
        )
    endpoint = router.require_endpoint(market_type, Operation.ACCOUNT)
    response = await ctx.client.get(endpoint, {"currency": currency})
    return ToolResult(unwrap(response))


async def get_positions(
    ctx: ToolContext,
    currency: str = "USDT",
    market_type: MarketType | str = MarketType.LINEAR,
) -> ToolResult:
    """Open positions with unrealized PnL."""
    market_type = router.parse_market_type(market_type)
    if market_type is MarketType.SPOT:
        raise RoutingError("Spot does not have positions. Spot is buy/sell only.")
    endpoint = router.require_endpoint(market_type, Operation.POSITIONS)
    response = await ctx.client.get(endpoint, {"currency": currency})
    return ToolResult(unwrap(response))


async def get_open_orders(
    ctx: ToolContext,
    symbol: str,
    market_type: MarketType | str = MarketType.LINEAR,
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    market_type = router.parse_market_type(market_type)
    ctx.check_symbol(market_type, symbol, allow_symbol_mismatch)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.OPEN_ORDERS)

    response = await ctx.client.get(endpoint, {"symbol": resolved})
    if not response.ok and response.message == NO_OPEN_ORDERS_MESSAGE:
        message = f"No open orders for {symbol}."
        return ToolResult({"message": message, "orders": []}, message)

    data = unwrap(response)
    return ToolResult(ctx.present(market_type, resolved, data))


async def get_order_history(
    ctx: ToolContext,
    symbol: str,
    limit: int = 50,
    market_type: MarketType | str = MarketType.LINEAR,
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    """Closed and filled orders."""
    return await _history(
        ctx, Operation.ORDER_HISTORY, symbol, limit, market_type, allow_symbol_mismatch
    )


async def get_trades(
    ctx: ToolContext,
    symbol: str,
    limit: int = 50,
    market_type: MarketType | str = MarketType.LINEAR,
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    """Trade execution history."""
    return await _history(
        ctx, Operation.TRADE_HISTORY, symbol, limit, market_type, allow_symbol_mismatch
    )


async def _history(
    ctx: ToolContext,
    operation: Operation,
    symbol: str,
    limit: int,
    market_type: MarketType | str,
    allow_symbol_mismatch: bool,
) -> ToolResult:
    market_type = router.parse_market_type(market_type)
    ctx.check_symbol(market_type, symbol, allow_symbol_mismatch)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, operation)
    response = await ctx.client.get(endpoint, {"symbol": resolved, "limit": limit})
    return ToolResult(ctx.present(market_type, resolved, unwrap(response)))


async def get_spot_wallet(ctx: ToolContext) -> ToolResult:
    """Spot wallet balances, available and locked, per currency.

    Balances are unscaled with each wallet's currency factor. Wallets in a
    currency the scale table does not know keep their raw Ev fields.
    """
    data = unwrap(await ctx.client.get(SPOT_WALLETS_PATH))
    if isinstance(data, list) and ctx.scaler.is_loaded():
        data = [_display_wallet(ctx, wallet) for wallet in data]
    return ToolResult(data, "Spot wallets:")


def _display_wallet(ctx: ToolContext, wallet: Any) -> Any:
    if not isinstance(wallet, dict):
        return wallet
    display = dict(wallet)
    currency = wallet.get("currency")
    if not currency or ctx.scaler.table.currency(currency) is None:
        return display

    for field in ("balance", "lockedBalance"):
        scaled = wallet.get(f"{field}Ev")
        if isinstance(scaled, int) and not isinstance(scaled, bool):
            display[field] = ctx.scaler.unscale_currency_amount(currency, scaled)
            del display[f"{field}Ev"]

    updated_ns = wallet.get("lastUpdateTimeNs")
    if isinstance(updated_ns, int) and not isinstance(updated_ns, bool):
        display["lastUpdateTime"] = format_timestamp_ns(updated_ns)
        del display["lastUpdateTimeNs"]
    return display


def format_timestamp_ns(value: int) -> str:
    """Render a nanosecond epoch timestamp as ISO-8601 UTC with milliseconds."""
    seconds, nanos = divmod(value, 1_000_000_000)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(
        microseconds=nanos // 1000
    )
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
