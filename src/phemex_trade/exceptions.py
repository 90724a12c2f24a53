"""Custom exceptions for the Phemex trading tools.

Routing, scaling, transport and exchange errors all live here so the
tool server and CLI can present them uniformly.
"""

# Human-readable text for exchange codes seen in practice.
EXCHANGE_ERROR_MESSAGES: dict[int, str] = {
    0: "OK",
    10001: "Illegal request",
    10002: "Too many requests",
    10003: "Key is not valid",
    10005: "Request timeout",
    10500: "Missing required parameter",
    11001: "Insufficient available balance",
    11038: "Invalid trigger price",
    11074: "Invalid leverage",
    20004: "Inconsistent position mode (check posSide param matches account pos mode)",
    39108: "Invalid parameter",
    39995: "Too many requests (rate limited)",
    39996: "Order not found",
}


def describe_error(code: int, message: str = "") -> str:
    """Render an exchange error code for humans.

    Known codes get their fixed description, with the raw exchange message
    appended when it adds something. Unknown codes pass the raw message
    and code through unchanged.
    """
    known = EXCHANGE_ERROR_MESSAGES.get(code)
    if known and message and message != known:
        return f"{known}: {message} (code: {code})"
    if known:
        return f"{known} (code: {code})"
    if message:
        return f"{message} (code: {code})"
    return f"Unknown error (code: {code})"


class PhemexTradeError(Exception):
    """Base exception for all phemex_trade errors."""


class RoutingError(PhemexTradeError):
    """Raised when an operation has no endpoint for the requested market type."""


class SymbolMismatchError(PhemexTradeError):
    """Raised when a symbol looks like it belongs to a different market type."""


class ScaleInfoMissingError(PhemexTradeError):
    """Raised when a symbol or currency has no entry in the scale table."""


class ScaleTableNotLoadedError(PhemexTradeError):
    """Raised when product metadata failed to load and scaling is required."""


class ParameterError(PhemexTradeError, ValueError):
    """Raised for missing or malformed tool parameters."""


class TransportError(PhemexTradeError):
    """Raised when the HTTP layer fails or returns an unparseable envelope."""


class ExchangeAPIError(PhemexTradeError):
    """Raised when the exchange reports a non-zero code or a market-data error.

    Args:
        code: Numeric exchange error code.
        message: Raw message returned by the exchange (may be empty).
    """

    def __init__(self, code: int, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(describe_error(code, message))
