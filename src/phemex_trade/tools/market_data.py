"""Public market-data tools: ticker, order book, klines, trades, funding rates."""

import time

from phemex_trade.exchange import router
from phemex_trade.models import MarketType, Operation
from phemex_trade.tools.context import ToolContext, ToolResult, unwrap, unwrap_md


async def get_ticker(
    ctx: ToolContext, symbol: str, market_type: MarketType | str = MarketType.LINEAR
) -> ToolResult:
    """24hr price ticker."""
    market_type = router.parse_market_type(market_type)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.TICKER)
    response = await ctx.client.get_public_md(endpoint, {"symbol": resolved})
    return ToolResult(unwrap_md(response))


async def get_orderbook(
    ctx: ToolContext, symbol: str, market_type: MarketType | str = MarketType.LINEAR
) -> ToolResult:
    """Order book snapshot (30 levels)."""
    market_type = router.parse_market_type(market_type)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.ORDERBOOK)
    response = await ctx.client.get_public_md(endpoint, {"symbol": resolved, "id": 0})
    return ToolResult(unwrap_md(response))


async def get_klines(
    ctx: ToolContext,
    symbol: str,
    resolution: int,
    limit: int = 100,
    market_type: MarketType | str = MarketType.LINEAR,
) -> ToolResult:
    """Candles ending now, covering `limit` bars of `resolution` seconds."""
    market_type = router.parse_market_type(market_type)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.KLINES)
    to_ts = int(time.time())
    response = await ctx.client.get_public(
        endpoint,
        {
            "symbol": resolved,
            "resolution": resolution,
            "limit": limit,
            "from": to_ts - resolution * limit,
            "to": to_ts,
        },
    )
    return ToolResult(unwrap(response))


async def get_recent_trades(
    ctx: ToolContext, symbol: str, market_type: MarketType | str = MarketType.LINEAR
) -> ToolResult:
    market_type = router.parse_market_type(market_type)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.RECENT_TRADES)
    response = await ctx.client.get_public_md(endpoint, {"symbol": resolved})
    return ToolResult(unwrap_md(response))


async def get_funding_rate(
    ctx: ToolContext,
    symbol: str,
    limit: int = 20,
    market_type: MarketType | str = MarketType.LINEAR,
) -> ToolResult:
    """Funding rate history. The symbol is the funding index, e.g. .BTCFR8H."""
    market_type = router.parse_market_type(market_type)
    endpoint = router.require_endpoint(market_type, Operation.FUNDING_RATE)
    response = await ctx.client.get_public(endpoint, {"symbol": symbol, "limit": limit})
    return ToolResult(unwrap(response))
