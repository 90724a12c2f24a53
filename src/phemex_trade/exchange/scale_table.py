"""Read-once snapshot of per-symbol and per-currency fixed-point scale factors.

Populated a single time from the public /public/products listing. The
snapshot is immutable afterwards and shared by every call site in the
process. When the listing cannot be fetched or parsed the result is an
empty, not-loaded table: linear markets keep working, scaled markets refuse.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any

from phemex_trade.exceptions import ScaleInfoMissingError
from phemex_trade.exchange.client import ExchangeClient
from phemex_trade.logging import get_logger
from phemex_trade.models import CurrencyScale, MarketType, ScaleInfo

logger = get_logger(__name__)

PRODUCTS_PATH = "/public/products"

LISTED_STATUS = "Listed"
DEFAULT_VALUE_EXPONENT = 8

_PRODUCT_TYPES = {
    "Perpetual": MarketType.INVERSE,
    "Spot": MarketType.SPOT,
}


@dataclass(frozen=True)
class ScaleTable:
    """Immutable symbol/currency scale lookup.

    Build with ScaleTable.from_products() or ScaleTable.empty(); the
    constructor wraps both mappings read-only.
    """

    symbols: Mapping[str, ScaleInfo] = field(default_factory=dict)
    currencies: Mapping[str, CurrencyScale] = field(default_factory=dict)
    loaded: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbols", MappingProxyType(dict(self.symbols)))
        object.__setattr__(self, "currencies", MappingProxyType(dict(self.currencies)))

    @classmethod
    def empty(cls) -> "ScaleTable":
        """A table that failed to load: no entries, is_loaded() is False."""
        return cls()

    @classmethod
    def from_products(cls, payload: Mapping[str, Any]) -> "ScaleTable":
        """Build a loaded table from the `data` object of /public/products.

        Raises ValueError (or KeyError/TypeError) on malformed entries so the
        caller can discard the whole listing.
        """
        currencies: dict[str, CurrencyScale] = {}
        for raw in payload.get("currencies") or []:
            currency = raw["currency"]
            currencies[currency] = CurrencyScale(
                currency=currency,
                value_scale=_power_of_ten(raw.get("valueScale"), DEFAULT_VALUE_EXPONENT),
            )

        symbols: dict[str, ScaleInfo] = {}
        for raw in payload.get("products") or []:
            market_type = _PRODUCT_TYPES.get(raw.get("type"))
            if market_type is None or raw.get("status") != LISTED_STATUS:
                continue
            settle = currencies.get(raw.get("settleCurrency"))
            symbols[raw["symbol"]] = ScaleInfo(
                symbol=raw["symbol"],
                market_type=market_type,
                price_scale=_power_of_ten(raw.get("priceScale")),
                ratio_scale=_power_of_ten(raw.get("ratioScale")),
                value_scale=(
                    settle.value_scale
                    if settle is not None
                    else 10**DEFAULT_VALUE_EXPONENT
                ),
                contract_size=(
                    _contract_size(raw.get("contractSize"))
                    if market_type is MarketType.INVERSE
                    else Decimal("1")
                ),
            )

        # Linear products carry decimal-string fields; factors are informational.
        for raw in payload.get("perpProductsV2") or []:
            if raw.get("status") != LISTED_STATUS:
                continue
            symbols[raw["symbol"]] = ScaleInfo(
                symbol=raw["symbol"],
                market_type=MarketType.LINEAR,
                price_scale=_power_of_ten(raw.get("priceScale")),
                ratio_scale=_power_of_ten(raw.get("ratioScale")),
                value_scale=1,
            )

        return cls(symbols=symbols, currencies=currencies, loaded=True)

    def is_loaded(self) -> bool:
        return self.loaded

    def get(self, symbol: str) -> ScaleInfo | None:
        """Return scale info for a symbol, or None if unknown."""
        return self.symbols.get(symbol)

    def require(self, symbol: str) -> ScaleInfo:
        """Return scale info for a symbol, raising ScaleInfoMissingError if unknown."""
        info = self.symbols.get(symbol)
        if info is None:
            raise ScaleInfoMissingError(f"No product info for {symbol}")
        return info

    def currency(self, currency: str) -> CurrencyScale | None:
        return self.currencies.get(currency)

    def require_currency(self, currency: str) -> CurrencyScale:
        """Return a currency's scale, raising ScaleInfoMissingError if unknown."""
        scale = self.currencies.get(currency)
        if scale is None:
            raise ScaleInfoMissingError(f"No currency info for {currency}")
        return scale


def _power_of_ten(exponent: Any, default: int = 0) -> int:
    """Turn a reported scale exponent into an integer factor (4 -> 10000).

    A missing exponent means the family does not use exponent scaling.
    """
    if exponent is None:
        exponent = default
    if isinstance(exponent, bool) or not isinstance(exponent, int) or exponent < 0:
        raise ValueError(f"Invalid scale exponent: {exponent!r}")
    return 10**exponent


def _contract_size(value: Any) -> Decimal:
    if value is None:
        return Decimal("1")
    try:
        size = Decimal(str(value))
    except InvalidOperation:
        return Decimal("1")
    return size if size.is_finite() and size > 0 else Decimal("1")


async def load_scale_table(client: ExchangeClient) -> ScaleTable:
    """Fetch the product listing and build the process-wide scale snapshot.

    Never raises: any failure yields ScaleTable.empty() and a warning, which
    is the one graceful-degradation path in the system.
    """
    logger.info("loading_scale_table", path=PRODUCTS_PATH)
    try:
        response = await client.get_public(PRODUCTS_PATH)
        if not response.ok:
            logger.warning(
                "scale_table_unavailable",
                reason="exchange_error",
                code=response.code,
                message=response.message,
            )
            return ScaleTable.empty()
        if not isinstance(response.data, Mapping):
            logger.warning("scale_table_unavailable", reason="malformed_payload")
            return ScaleTable.empty()
        table = ScaleTable.from_products(response.data)
    except Exception as exc:  # startup must survive metadata failure
        logger.warning(
            "scale_table_unavailable",
            reason=type(exc).__name__,
            error=str(exc),
        )
        return ScaleTable.empty()

    logger.info(
        "scale_table_loaded",
        symbols=len(table.symbols),
        currencies=len(table.currencies),
    )
    return table
