"""Conversion between human decimal values and Phemex fixed-point integers.

Inverse and spot endpoints encode prices, ratios (leverage) and values
(quantities, balances) as integers times a power-of-ten factor, marked by
the Ep / Er / Ev field suffixes. All arithmetic uses Decimal.

Rounding when scaling is ROUND_HALF_UP (ties away from zero), so
"0.00005" at factor 10000 becomes 1 and "-0.00005" becomes -1.
"""

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from phemex_trade.exceptions import ParameterError
from phemex_trade.exchange.scale_table import ScaleTable
from phemex_trade.models import (
    PRICE_SUFFIX,
    RATIO_SUFFIX,
    SCALED_SUFFIXES,
    VALUE_SUFFIX,
    ScaleInfo,
)


def to_decimal(value: str | int | Decimal) -> Decimal:
    """Parse a human amount. Floats go through str() to avoid binary noise."""
    if isinstance(value, bool):
        raise ParameterError(f"Invalid decimal value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ParameterError(f"Invalid decimal value: {value!r}") from None
    if not result.is_finite():
        raise ParameterError(f"Invalid decimal value: {value!r}")
    return result


def _exact_precision(amount: Decimal, factor: int) -> int:
    """Digits needed to multiply or divide amount by a power-of-ten factor exactly."""
    _, digits, exponent = amount.as_tuple()
    return len(digits) + max(int(exponent), 0) + len(str(abs(factor))) + 1


def to_scaled(value: str | int | Decimal, factor: int) -> int:
    """Multiply by the factor and round once to the nearest integer."""
    amount = to_decimal(value)
    with localcontext() as context:
        context.prec = _exact_precision(amount, factor)
        scaled = amount * factor
        return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_scaled(value: int | float | Decimal, factor: int) -> str:
    """Divide by the factor and render as a plain decimal string.

    No exponent notation and no trailing zeros: 150000000 / 10**8 -> "1.5",
    490000000 / 10**4 -> "49000".
    """
    amount = to_decimal(value)
    with localcontext() as context:
        context.prec = _exact_precision(amount, factor)
        quotient = amount / Decimal(factor)
        if quotient == 0:
            return "0"
        return format(quotient.normalize(), "f")


class ValueScaler:
    """Scales values for one ScaleTable snapshot.

    Args:
        table: The process-wide scale snapshot (read-only).
    """

    def __init__(self, table: ScaleTable) -> None:
        self._table = table

    @property
    def table(self) -> ScaleTable:
        return self._table

    def is_loaded(self) -> bool:
        return self._table.is_loaded()

    # -- per-symbol ----------------------------------------------------------

    def scale_price(self, symbol: str, value: str | int | Decimal) -> int:
        return to_scaled(value, self._table.require(symbol).price_scale)

    def scale_ratio(self, symbol: str, value: str | int | Decimal) -> int:
        return to_scaled(value, self._table.require(symbol).ratio_scale)

    def scale_value(self, symbol: str, value: str | int | Decimal) -> int:
        return to_scaled(value, self._table.require(symbol).value_scale)

    def unscale_price(self, symbol: str, scaled: int) -> str:
        return from_scaled(scaled, self._table.require(symbol).price_scale)

    def unscale_ratio(self, symbol: str, scaled: int) -> str:
        return from_scaled(scaled, self._table.require(symbol).ratio_scale)

    def unscale_value(self, symbol: str, scaled: int) -> str:
        return from_scaled(scaled, self._table.require(symbol).value_scale)

    # -- per-currency --------------------------------------------------------

    def scale_currency_amount(self, currency: str, value: str | int | Decimal) -> int:
        return to_scaled(value, self._table.require_currency(currency).value_scale)

    def unscale_currency_amount(self, currency: str, scaled: int) -> str:
        return from_scaled(scaled, self._table.require_currency(currency).value_scale)

    # -- responses -----------------------------------------------------------

    def convert_response(self, symbol: str, data: Any) -> Any:
        """Rewrite Ep/Er/Ev fields of a response tree into decimal strings.

        `priceEp: 500005000` becomes `price: "50000.5"` at factor 10000. A
        plain-named sibling of a scaled field (the `price: null` Phemex sends
        next to `priceEp`) is dropped. Unknown symbols leave the tree as-is.
        """
        info = self._table.get(symbol)
        if info is None:
            return data
        return _convert(data, info)


def _convert(data: Any, info: ScaleInfo) -> Any:
    if isinstance(data, list):
        return [_convert(item, info) for item in data]
    if not isinstance(data, Mapping):
        return data

    factors = {
        PRICE_SUFFIX: info.price_scale,
        RATIO_SUFFIX: info.ratio_scale,
        VALUE_SUFFIX: info.value_scale,
    }
    result: dict[str, Any] = {}
    for key, value in data.items():
        suffix = key[-2:]
        if suffix in factors and len(key) > 2 and _is_number(value):
            result[key[:-2]] = from_scaled(value, factors[suffix])
        elif any(f"{key}{s}" in data for s in SCALED_SUFFIXES):
            continue
        else:
            result[key] = _convert(value, info)
    return result


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)
