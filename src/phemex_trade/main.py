"""Entry point for the Phemex tool server.

Wiring order (in build_context):
1. PhemexClient (ccxt transport)
2. ScaleTable (loaded once from /public/products; empty if unavailable)
3. ValueScaler over that snapshot
4. ToolContext shared by every tool call

The server speaks the MCP stdio protocol on stdout, so all logging goes
to stderr.
"""

import asyncio

from phemex_trade.config import AppSettings
from phemex_trade.exchange import PhemexClient, ValueScaler, load_scale_table
from phemex_trade.logging import get_logger, setup_logging
from phemex_trade.tools.context import ToolContext


async def build_context(settings: AppSettings) -> ToolContext:
    """Create the transport and load the scale snapshot.

    The scale table is loaded before any tool can run. If loading fails
    the context still works for linear markets.
    """
    logger = get_logger("phemex_trade.main")

    client = PhemexClient(settings.phemex)
    if not settings.phemex.has_credentials:
        logger.warning(
            "no_api_keys_configured",
            note="Public market data will work. Account and trading tools will fail.",
        )

    table = await load_scale_table(client)
    if not table.is_loaded():
        logger.warning(
            "scaled_markets_disabled",
            note="Coin-M (inverse) and spot tools need product metadata.",
        )

    return ToolContext(client=client, scaler=ValueScaler(table))


async def run() -> None:
    """Run the tool server over stdio until the client disconnects."""
    from phemex_trade.server import create_server

    settings = AppSettings()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("phemex_trade.main")

    ctx = await build_context(settings)
    server = create_server(ctx)

    logger.info("starting_tool_server", api_url=settings.phemex.api_url)
    try:
        await server.run_async(transport="stdio")
    finally:
        await ctx.client.close()
        logger.info("tool_server_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
