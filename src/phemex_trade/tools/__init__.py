"""Tool operations shared by the tool server and the CLI.

Every tool is an async function taking a ToolContext first and returning
a ToolResult; failures raise PhemexTradeError subclasses.
"""

from collections.abc import Awaitable, Callable

from phemex_trade.tools import account, market_data, trading, transfers
from phemex_trade.tools.context import ToolContext, ToolResult

ToolFunc = Callable[..., Awaitable[ToolResult]]

TOOLS: dict[str, ToolFunc] = {
    # Market data
    "get_ticker": market_data.get_ticker,
    "get_orderbook": market_data.get_orderbook,
    "get_klines": market_data.get_klines,
    "get_recent_trades": market_data.get_recent_trades,
    "get_funding_rate": market_data.get_funding_rate,
    # Account
    "get_account": account.get_account,
    "get_spot_wallet": account.get_spot_wallet,
    "get_positions": account.get_positions,
    "get_open_orders": account.get_open_orders,
    "get_order_history": account.get_order_history,
    "get_trades": account.get_trades,
    # Trading
    "place_order": trading.place_order,
    "amend_order": trading.amend_order,
    "cancel_order": trading.cancel_order,
    "cancel_all_orders": trading.cancel_all_orders,
    "set_leverage": trading.set_leverage,
    "switch_pos_mode": trading.switch_pos_mode,
    # Transfers
    "transfer_funds": transfers.transfer_funds,
    "get_transfer_history": transfers.get_transfer_history,
}


__all__ = ["TOOLS", "ToolContext", "ToolFunc", "ToolResult"]
