"""Contract routing: endpoint lookup and symbol handling per market type.

Each market family lives in its own path namespace. Operations that a
family does not offer map to UNSUPPORTED; callers either check for it or
use require_endpoint(), which raises RoutingError instead.
"""

from phemex_trade.exceptions import RoutingError
from phemex_trade.models import SPOT_SYMBOL_PREFIX, MarketType, Operation

UNSUPPORTED = ""

_LINEAR_SUFFIX = "USDT"
_INVERSE_SUFFIX = "USD"

ENDPOINTS: dict[MarketType, dict[Operation, str]] = {
    MarketType.LINEAR: {
        Operation.PLACE_ORDER: "/g-orders/create",
        Operation.CANCEL_ORDER: "/g-orders/cancel",
        Operation.AMEND_ORDER: "/g-orders/replace",
        Operation.CANCEL_ALL: "/g-orders/all",
        Operation.SET_LEVERAGE: "/g-positions/leverage",
        Operation.SWITCH_POS_MODE: "/g-positions/switch-pos-mode-sync",
        Operation.ACCOUNT: "/g-accounts/accountPositions",
        Operation.POSITIONS: "/g-accounts/positions",
        Operation.OPEN_ORDERS: "/g-orders/activeList",
        Operation.ORDER_HISTORY: "/api-data/g-futures/orders",
        Operation.TRADE_HISTORY: "/api-data/g-futures/trades",
        Operation.TICKER: "/md/v2/ticker/24hr",
        Operation.ORDERBOOK: "/md/v2/orderbook",
        Operation.KLINES: "/exchange/public/md/v2/kline/list",
        Operation.RECENT_TRADES: "/md/v2/trade",
        Operation.FUNDING_RATE: "/api-data/public/data/funding-rate-history",
    },
    MarketType.INVERSE: {
        Operation.PLACE_ORDER: "/orders/create",
        Operation.CANCEL_ORDER: "/orders/cancel",
        Operation.AMEND_ORDER: "/orders/replace",
        Operation.CANCEL_ALL: "/orders/all",
        Operation.SET_LEVERAGE: "/positions/leverage",
        Operation.SWITCH_POS_MODE: "/positions/switch-pos-mode-sync",
        Operation.ACCOUNT: "/accounts/accountPositions",
        Operation.POSITIONS: "/accounts/positions",
        Operation.OPEN_ORDERS: "/orders/activeList",
        Operation.ORDER_HISTORY: "/exchange/order/list",
        Operation.TRADE_HISTORY: "/exchange/order/trade",
        Operation.TICKER: "/md/v1/ticker/24hr",
        Operation.ORDERBOOK: "/md/orderbook",
        Operation.KLINES: "/exchange/public/md/v2/kline",
        Operation.RECENT_TRADES: "/md/trade",
        Operation.FUNDING_RATE: "/api-data/public/data/funding-rate-history",
    },
    MarketType.SPOT: {
        Operation.PLACE_ORDER: "/spot/orders/create",
        Operation.CANCEL_ORDER: "/spot/orders",
        Operation.AMEND_ORDER: "/spot/orders",
        Operation.CANCEL_ALL: "/spot/orders/all",
        Operation.SET_LEVERAGE: UNSUPPORTED,
        Operation.SWITCH_POS_MODE: UNSUPPORTED,
        Operation.ACCOUNT: UNSUPPORTED,
        Operation.POSITIONS: UNSUPPORTED,
        Operation.OPEN_ORDERS: "/spot/orders",
        Operation.ORDER_HISTORY: "/api-data/spots/orders",
        Operation.TRADE_HISTORY: "/api-data/spots/trades",
        Operation.TICKER: "/md/spot/ticker/24hr",
        Operation.ORDERBOOK: "/md/orderbook",
        Operation.KLINES: "/exchange/public/md/v2/kline/list",
        Operation.RECENT_TRADES: "/md/trade",
        Operation.FUNDING_RATE: UNSUPPORTED,
    },
}


def parse_market_type(value: MarketType | str) -> MarketType:
    """Coerce a market type name, raising RoutingError for unknown values."""
    try:
        return MarketType(value)
    except ValueError:
        valid = ", ".join(m.value for m in MarketType)
        raise RoutingError(
            f"Invalid market type: {value!r}. Must be one of: {valid}."
        ) from None


def parse_operation(value: Operation | str) -> Operation:
    """Coerce an operation name, raising RoutingError for unknown values."""
    try:
        return Operation(value)
    except ValueError:
        raise RoutingError(f"Unknown operation: {value!r}") from None


def get_endpoint(market_type: MarketType | str, operation: Operation | str) -> str:
    """Return the endpoint path, or UNSUPPORTED if the family lacks the operation.

    Unknown market types or operation names raise RoutingError.
    """
    return ENDPOINTS[parse_market_type(market_type)][parse_operation(operation)]


def require_endpoint(market_type: MarketType | str, operation: Operation | str) -> str:
    """Return the endpoint path, raising RoutingError if it is UNSUPPORTED."""
    endpoint = get_endpoint(market_type, operation)
    if endpoint == UNSUPPORTED:
        raise RoutingError(
            f"Operation {Operation(operation).value} is not supported "
            f"for {MarketType(market_type).value} markets."
        )
    return endpoint


def resolve_symbol(market_type: MarketType | str, symbol: str) -> str:
    """Canonicalize a symbol for the market type.

    Spot symbols get the "s" prefix if they lack it (BTCUSDT -> sBTCUSDT).
    Idempotent; other market types pass through unchanged.
    """
    if is_spot(market_type) and not symbol.startswith(SPOT_SYMBOL_PREFIX):
        return SPOT_SYMBOL_PREFIX + symbol
    return symbol


def validate_symbol(market_type: MarketType | str, symbol: str) -> str | None:
    """Best-effort check that a symbol's naming fits the market type.

    Returns a description of the likely mistake, or None. This relies on the
    USDT/USD suffix convention only, so callers may choose to ignore it.
    """
    market_type = parse_market_type(market_type)

    if market_type is MarketType.SPOT:
        raw = symbol[len(SPOT_SYMBOL_PREFIX):] if symbol.startswith(SPOT_SYMBOL_PREFIX) else symbol
        if _has_inverse_suffix(raw):
            return (
                f"Symbol {symbol} looks like a Coin-M symbol. "
                "Spot symbols should end in USDT (e.g. BTCUSDT)."
            )
        return None

    if market_type is MarketType.INVERSE and symbol.endswith(_LINEAR_SUFFIX):
        return (
            f"Symbol {symbol} looks like a USDT-M symbol. "
            'Use market_type="linear" for USDT-M symbols.'
        )

    if market_type is MarketType.LINEAR and _has_inverse_suffix(symbol):
        return (
            f"Symbol {symbol} looks like a Coin-M symbol. "
            'Use market_type="inverse" for Coin-M symbols.'
        )

    return None


def _has_inverse_suffix(symbol: str) -> bool:
    # USDT also ends in "USD", so the longer suffix must be excluded first.
    return symbol.endswith(_INVERSE_SUFFIX) and not symbol.endswith(_LINEAR_SUFFIX)


def is_inverse(market_type: MarketType | str) -> bool:
    return parse_market_type(market_type) is MarketType.INVERSE


def is_spot(market_type: MarketType | str) -> bool:
    return parse_market_type(market_type) is MarketType.SPOT


def requires_scaling(market_type: MarketType | str) -> bool:
    """True for market types whose wire values are fixed-point integers."""
    return parse_market_type(market_type) is not MarketType.LINEAR
