"""Shared data models for the Phemex trading tools.

Scale factors are integer powers of ten. Human-facing amounts are decimal
strings or Decimal; never binary floats.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class MarketType(str, Enum):
    """Market family. Selects the endpoint namespace and value encoding."""

    LINEAR = "linear"  # USDT-margined perpetuals, decimal-string fields
    INVERSE = "inverse"  # coin-margined perpetuals, fixed-point fields
    SPOT = "spot"  # fixed-point fields, "s"-prefixed symbols


class Operation(str, Enum):
    """Closed set of logical operations routed per market type."""

    PLACE_ORDER = "placeOrder"
    CANCEL_ORDER = "cancelOrder"
    AMEND_ORDER = "amendOrder"
    CANCEL_ALL = "cancelAll"
    SET_LEVERAGE = "setLeverage"
    SWITCH_POS_MODE = "switchPosMode"
    ACCOUNT = "account"
    POSITIONS = "positions"
    OPEN_ORDERS = "openOrders"
    ORDER_HISTORY = "orderHistory"
    TRADE_HISTORY = "tradeHistory"
    TICKER = "ticker"
    ORDERBOOK = "orderbook"
    KLINES = "klines"
    RECENT_TRADES = "recentTrades"
    FUNDING_RATE = "fundingRate"


# Wire field suffixes for fixed-point encoded fields.
PRICE_SUFFIX = "Ep"
RATIO_SUFFIX = "Er"
VALUE_SUFFIX = "Ev"
SCALED_SUFFIXES = (PRICE_SUFFIX, RATIO_SUFFIX, VALUE_SUFFIX)

SPOT_SYMBOL_PREFIX = "s"


@dataclass(frozen=True)
class ScaleInfo:
    """Fixed-point scale factors for one tradable symbol."""

    symbol: str
    market_type: MarketType
    price_scale: int
    ratio_scale: int
    value_scale: int
    contract_size: Decimal = Decimal("1")

    def __post_init__(self) -> None:
        for name in ("price_scale", "ratio_scale", "value_scale"):
            _check_factor(name, getattr(self, name))


@dataclass(frozen=True)
class CurrencyScale:
    """Value scale factor for a settlement currency (wallets, transfers)."""

    currency: str
    value_scale: int

    def __post_init__(self) -> None:
        _check_factor("value_scale", self.value_scale)


def _check_factor(name: str, factor: int) -> None:
    if isinstance(factor, bool) or not isinstance(factor, int) or factor < 1:
        raise ValueError(f"{name} must be a positive integer, got {factor!r}")


@dataclass
class ApiResponse:
    """Envelope for trading/account endpoints: {code, msg, data}."""

    code: int
    message: str
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.code == 0


@dataclass
class MdError:
    """Error object carried by market-data envelopes."""

    code: int
    message: str


@dataclass
class MdResponse:
    """Envelope for /md/ market-data endpoints: {error, id, result}."""

    error: MdError | None
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


# Status codes reported for spot <-> futures transfers.
TRANSFER_STATUS: dict[int, str] = {
    3: "Rejected",
    6: "Error (waiting for recovery)",
    10: "Success",
    11: "Failed",
}
