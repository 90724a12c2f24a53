"""Tool server exposing the Phemex tools over the MCP stdio protocol.

One tool per operation. Results are rendered as a short headline followed
by pretty-printed JSON; PhemexTradeError becomes a tool error result.
"""

import json
from collections.abc import Awaitable
from typing import Annotated, Any, Literal

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from phemex_trade.exceptions import PhemexTradeError
from phemex_trade.logging import get_logger
from phemex_trade.tools import account, market_data, trading, transfers
from phemex_trade.tools.context import ToolContext, ToolResult

logger = get_logger(__name__)

SERVER_NAME = "phemex-trade"

MarketTypeLiteral = Literal["linear", "inverse", "spot"]
DirectionLiteral = Literal["spot_to_futures", "futures_to_spot"]

SymbolParam = Annotated[
    str,
    Field(description="Trading symbol, e.g. 'BTCUSDT' (linear/spot) or 'BTCUSD' (inverse)."),
]
MarketTypeParam = Annotated[
    MarketTypeLiteral,
    Field(
        description="Market type: 'linear' (USDT-M perpetual, default), "
        "'inverse' (Coin-M perpetual) or 'spot'."
    ),
]
AllowMismatchParam = Annotated[
    bool,
    Field(
        description="Proceed even if the symbol looks like it belongs to a "
        "different market type (the check is a naming heuristic)."
    ),
]
CurrencyParam = Annotated[str, Field(description="Settlement currency, e.g. 'USDT' or 'BTC'.")]


def format_result(result: ToolResult) -> str:
    """Render a tool result as text: headline, then indented JSON."""
    body = json.dumps(result.data, indent=2, default=str)
    if result.message:
        return f"{result.message}\n{body}"
    return body


async def run_tool(name: str, call: Awaitable[ToolResult]) -> str:
    """Await a tool call, translating domain errors into ToolError."""
    try:
        result = await call
    except PhemexTradeError as exc:
        logger.warning("tool_failed", tool=name, error_type=type(exc).__name__, error=str(exc))
        raise ToolError(f"Error: {exc}") from exc
    return format_result(result)


def create_server(ctx: ToolContext) -> FastMCP:
    """Build the FastMCP server with every tool bound to `ctx`."""
    mcp = FastMCP(SERVER_NAME)

    # -- Market data ---------------------------------------------------------

    @mcp.tool(
        name="get_ticker",
        description="Get the 24hr price ticker for a symbol.",
        tags={"market", "public"},
    )
    async def get_ticker(
        symbol: SymbolParam,
        market_type: MarketTypeParam = "linear",
    ) -> str:
        return await run_tool(
            "get_ticker", market_data.get_ticker(ctx, symbol, market_type=market_type)
        )

    @mcp.tool(
        name="get_orderbook",
        description="Get an order book snapshot (30 levels) for a symbol.",
        tags={"market", "public"},
    )
    async def get_orderbook(
        symbol: SymbolParam,
        market_type: MarketTypeParam = "linear",
    ) -> str:
        return await run_tool(
            "get_orderbook", market_data.get_orderbook(ctx, symbol, market_type=market_type)
        )

    @mcp.tool(
        name="get_klines",
        description="Get candlestick data ending now.",
        tags={"market", "public"},
    )
    async def get_klines(
        symbol: SymbolParam,
        resolution: Annotated[
            int,
            Field(description="Candle size in seconds: 60, 300, 900, 1800, 3600, 14400, 86400, ..."),
        ],
        limit: Annotated[int, Field(description="Number of candles (default 100).", ge=1)] = 100,
        market_type: MarketTypeParam = "linear",
    ) -> str:
        return await run_tool(
            "get_klines",
            market_data.get_klines(ctx, symbol, resolution, limit=limit, market_type=market_type),
        )

    @mcp.tool(
        name="get_recent_trades",
        description="Get recent public trades for a symbol.",
        tags={"market", "public"},
    )
    async def get_recent_trades(
        symbol: SymbolParam,
        market_type: MarketTypeParam = "linear",
    ) -> str:
        return await run_tool(
            "get_recent_trades",
            market_data.get_recent_trades(ctx, symbol, market_type=market_type),
        )

    @mcp.tool(
        name="get_funding_rate",
        description="Get funding rate history. Not available for spot.",
        tags={"market", "public"},
    )
    async def get_funding_rate(
        symbol: Annotated[
            str, Field(description="Funding rate index symbol, e.g. '.BTCFR8H' or '.BTCUSDTFR8H'.")
        ],
        limit: Annotated[int, Field(description="Number of records (default 20).", ge=1)] = 20,
        market_type: MarketTypeParam = "linear",
    ) -> str:
        return await run_tool(
            "get_funding_rate",
            market_data.get_funding_rate(ctx, symbol, limit=limit, market_type=market_type),
        )

    # -- Account -------------------------------------------------------------

    @mcp.tool(
        name="get_account",
        description="Get futures account balance and margin info. Not available for spot.",
        tags={"account", "private"},
    )
    async def get_account(
        currency: CurrencyParam = "USDT",
        market_type: MarketTypeParam = "linear",
    ) -> str:
        return await run_tool(
            "get_account", account.get_account(ctx, currency, market_type=market_type)
        )

    @mcp.tool(
        name="get_spot_wallet",
        description="Get spot wallet balances (available and locked) per currency.",
        tags={"account", "private", "spot"},
    )
    async def get_spot_wallet() -> str:
        return await run_tool("get_spot_wallet", account.get_spot_wallet(ctx))

    @mcp.tool(
        name="get_positions",
        description="Get open positions with unrealized PnL. Not available for spot.",
        tags={"account", "private"},
    )
    async def get_positions(
        currency: CurrencyParam = "USDT",
        market_type: MarketTypeParam = "linear",
    ) -> str:
        return await run_tool(
            "get_positions", account.get_positions(ctx, currency, market_type=market_type)
        )

    @mcp.tool(
        name="get_open_orders",
        description="Get open orders for a symbol.",
        tags={"account", "private", "orders"},
    )
    async def get_open_orders(
        symbol: SymbolParam,
        market_type: MarketTypeParam = "linear",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        return await run_tool(
            "get_open_orders",
            account.get_open_orders(
                ctx, symbol, market_type=market_type, allow_symbol_mismatch=allow_symbol_mismatch
            ),
        )

    @mcp.tool(
        name="get_order_history",
        description="Get closed and filled orders for a symbol.",
        tags={"account", "private", "orders"},
    )
    async def get_order_history(
        symbol: SymbolParam,
        limit: Annotated[int, Field(description="Max results (default 50).", ge=1)] = 50,
        market_type: MarketTypeParam = "linear",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        return await run_tool(
            "get_order_history",
            account.get_order_history(
                ctx,
                symbol,
                limit=limit,
                market_type=market_type,
                allow_symbol_mismatch=allow_symbol_mismatch,
            ),
        )

    @mcp.tool(
        name="get_trades",
        description="Get trade execution history for a symbol.",
        tags={"account", "private", "orders"},
    )
    async def get_trades(
        symbol: SymbolParam,
        limit: Annotated[int, Field(description="Max results (default 50).", ge=1)] = 50,
        market_type: MarketTypeParam = "linear",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        return await run_tool(
            "get_trades",
            account.get_trades(
                ctx,
                symbol,
                limit=limit,
                market_type=market_type,
                allow_symbol_mismatch=allow_symbol_mismatch,
            ),
        )

    # -- Trading -------------------------------------------------------------

    @mcp.tool(
        name="place_order",
        description="Place an order (Market, Limit, Stop, StopLimit). "
        "Quantities and prices are decimal strings; Coin-M quantity is whole contracts.",
        tags={"trading", "private", "orders"},
    )
    async def place_order(
        symbol: SymbolParam,
        side: Annotated[Literal["Buy", "Sell"], Field(description="Order side.")],
        order_qty: Annotated[
            str,
            Field(
                description="Quantity. Linear: base amount, e.g. '0.01'. Inverse: contracts, "
                "e.g. '10'. Spot: base or quote amount per qty_type."
            ),
        ],
        ord_type: Annotated[
            Literal["Market", "Limit", "Stop", "StopLimit"], Field(description="Order type.")
        ],
        market_type: MarketTypeParam = "linear",
        price: Annotated[str | None, Field(description="Limit price, e.g. '95000.5'.")] = None,
        time_in_force: Annotated[
            Literal["GoodTillCancel", "PostOnly", "ImmediateOrCancel", "FillOrKill"],
            Field(description="Time in force (default GoodTillCancel)."),
        ] = "GoodTillCancel",
        pos_side: Annotated[
            Literal["Long", "Short", "Merged"],
            Field(description="Position side: Merged for one-way mode, Long/Short for hedged."),
        ] = "Merged",
        stop_px: Annotated[str | None, Field(description="Trigger price for stop orders.")] = None,
        trigger_type: Annotated[
            Literal["ByMarkPrice", "ByLastPrice"] | None,
            Field(description="Trigger source for stop orders."),
        ] = None,
        reduce_only: Annotated[bool, Field(description="Only reduce an existing position.")] = False,
        take_profit: Annotated[str | None, Field(description="Take-profit price.")] = None,
        stop_loss: Annotated[str | None, Field(description="Stop-loss price.")] = None,
        qty_type: Annotated[
            Literal["ByBase", "ByQuote"],
            Field(description="Spot only: whether order_qty is in base or quote currency."),
        ] = "ByBase",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        return await run_tool(
            "place_order",
            trading.place_order(
                ctx,
                symbol,
                side,
                order_qty,
                ord_type,
                market_type=market_type,
                price=price,
                time_in_force=time_in_force,
                pos_side=pos_side,
                stop_px=stop_px,
                trigger_type=trigger_type,
                reduce_only=reduce_only,
                take_profit=take_profit,
                stop_loss=stop_loss,
                qty_type=qty_type,
                allow_symbol_mismatch=allow_symbol_mismatch,
            ),
        )

    @mcp.tool(
        name="amend_order",
        description="Modify the price or quantity of an open order. "
        "Provide order_id or orig_cl_ord_id.",
        tags={"trading", "private", "orders"},
    )
    async def amend_order(
        symbol: SymbolParam,
        order_id: Annotated[str | None, Field(description="Exchange order ID.")] = None,
        orig_cl_ord_id: Annotated[
            str | None, Field(description="Client order ID of the original order.")
        ] = None,
        price: Annotated[str | None, Field(description="New price.")] = None,
        order_qty: Annotated[str | None, Field(description="New quantity.")] = None,
        pos_side: Annotated[
            Literal["Long", "Short", "Merged"], Field(description="Position side (linear only).")
        ] = "Merged",
        market_type: MarketTypeParam = "linear",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        return await run_tool(
            "amend_order",
            trading.amend_order(
                ctx,
                symbol,
                order_id=order_id,
                orig_cl_ord_id=orig_cl_ord_id,
                price=price,
                order_qty=order_qty,
                pos_side=pos_side,
                market_type=market_type,
                allow_symbol_mismatch=allow_symbol_mismatch,
            ),
        )

    @mcp.tool(
        name="cancel_order",
        description="Cancel a single open order. Provide order_id or cl_ord_id.",
        tags={"trading", "private", "orders"},
    )
    async def cancel_order(
        symbol: SymbolParam,
        order_id: Annotated[str | None, Field(description="Exchange order ID.")] = None,
        cl_ord_id: Annotated[str | None, Field(description="Client order ID.")] = None,
        pos_side: Annotated[
            Literal["Long", "Short", "Merged"], Field(description="Position side (linear only).")
        ] = "Merged",
        market_type: MarketTypeParam = "linear",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        return await run_tool(
            "cancel_order",
            trading.cancel_order(
                ctx,
                symbol,
                order_id=order_id,
                cl_ord_id=cl_ord_id,
                pos_side=pos_side,
                market_type=market_type,
                allow_symbol_mismatch=allow_symbol_mismatch,
            ),
        )

    @mcp.tool(
        name="cancel_all_orders",
        description="Cancel all open orders for a symbol.",
        tags={"trading", "private", "orders"},
    )
    async def cancel_all_orders(
        symbol: SymbolParam,
        untriggered: Annotated[
            bool, Field(description="Cancel untriggered conditional orders instead.")
        ] = False,
        market_type: MarketTypeParam = "linear",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        return await run_tool(
            "cancel_all_orders",
            trading.cancel_all_orders(
                ctx,
                symbol,
                untriggered=untriggered,
                market_type=market_type,
                allow_symbol_mismatch=allow_symbol_mismatch,
            ),
        )

    @mcp.tool(
        name="set_leverage",
        description="Set leverage for a symbol. Positive for isolated margin, "
        "negative for cross, 0 for max cross. Not available for spot.",
        tags={"trading", "private", "positions"},
    )
    async def set_leverage(
        symbol: SymbolParam,
        leverage: Annotated[float, Field(description="Leverage, e.g. 10 or -5.")],
        market_type: MarketTypeParam = "linear",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        # JSON clients send 10 as 10.0; keep whole numbers integral on the wire.
        value: Any = int(leverage) if float(leverage).is_integer() else leverage
        return await run_tool(
            "set_leverage",
            trading.set_leverage(
                ctx,
                symbol,
                value,
                market_type=market_type,
                allow_symbol_mismatch=allow_symbol_mismatch,
            ),
        )

    @mcp.tool(
        name="switch_pos_mode",
        description="Switch position mode between OneWay and Hedged. USDT-M (linear) only.",
        tags={"trading", "private", "positions"},
    )
    async def switch_pos_mode(
        symbol: SymbolParam,
        target_pos_mode: Annotated[
            Literal["OneWay", "Hedged"], Field(description="Target position mode.")
        ],
        market_type: MarketTypeParam = "linear",
        allow_symbol_mismatch: AllowMismatchParam = False,
    ) -> str:
        return await run_tool(
            "switch_pos_mode",
            trading.switch_pos_mode(
                ctx,
                symbol,
                target_pos_mode,
                market_type=market_type,
                allow_symbol_mismatch=allow_symbol_mismatch,
            ),
        )

    # -- Transfers -----------------------------------------------------------

    @mcp.tool(
        name="transfer_funds",
        description="Transfer funds between the spot wallet and the futures trading account.",
        tags={"transfer", "private"},
    )
    async def transfer_funds(
        currency: Annotated[str, Field(description="Currency to transfer, e.g. 'BTC', 'USDT'.")],
        amount: Annotated[str, Field(description="Amount as a decimal string, e.g. '1.5'.")],
        direction: Annotated[DirectionLiteral, Field(description="Transfer direction.")],
    ) -> str:
        return await run_tool(
            "transfer_funds", transfers.transfer_funds(ctx, currency, amount, direction)
        )

    @mcp.tool(
        name="get_transfer_history",
        description="Query transfer history between spot and futures accounts.",
        tags={"transfer", "private"},
    )
    async def get_transfer_history(
        currency: Annotated[str, Field(description="Currency to query, e.g. 'BTC', 'USDT'.")],
        direction: Annotated[
            DirectionLiteral | None,
            Field(description="Filter by direction. Omit to show both directions."),
        ] = None,
        limit: Annotated[int, Field(description="Max results (default 20).", ge=1, le=200)] = 20,
    ) -> str:
        return await run_tool(
            "get_transfer_history",
            transfers.get_transfer_history(ctx, currency, direction=direction, limit=limit),
        )

    return mcp
