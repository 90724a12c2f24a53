"""Shared plumbing for tool operations.

A ToolContext bundles the transport and the scaler built over the
process-wide scale snapshot. Tools return a ToolResult; every failure is a
PhemexTradeError so the tool server and the CLI can present it uniformly.
"""

from dataclasses import dataclass
from typing import Any

from phemex_trade.exceptions import (
    ExchangeAPIError,
    ParameterError,
    ScaleTableNotLoadedError,
    SymbolMismatchError,
)
from phemex_trade.exchange import router
from phemex_trade.exchange.client import ExchangeClient
from phemex_trade.exchange.scaler import ValueScaler
from phemex_trade.logging import get_logger
from phemex_trade.models import ApiResponse, MarketType, MdResponse

logger = get_logger(__name__)


@dataclass
class ToolResult:
    """Outcome of a tool call: structured data plus an optional headline."""

    data: Any
    message: str = ""


@dataclass
class ToolContext:
    """Dependencies shared by every tool call in a process."""

    client: ExchangeClient
    scaler: ValueScaler

    def check_symbol(
        self,
        market_type: MarketType,
        symbol: str,
        allow_mismatch: bool = False,
    ) -> None:
        """Apply the advisory symbol check.

        Raises SymbolMismatchError unless the caller opted out, in which case
        the warning is only logged.
        """
        problem = router.validate_symbol(market_type, symbol)
        if problem is None:
            return
        if allow_mismatch:
            logger.warning(
                "symbol_mismatch_ignored",
                symbol=symbol,
                market_type=market_type.value,
                detail=problem,
            )
            return
        raise SymbolMismatchError(problem)

    def require_scaling(self, market_type: MarketType) -> None:
        """Refuse scaled operations when product metadata is unavailable."""
        if router.requires_scaling(market_type) and not self.scaler.is_loaded():
            raise ScaleTableNotLoadedError(
                f"Product info not loaded. {market_type.value} markets require "
                "product metadata for price/quantity scaling."
            )

    def present(self, market_type: MarketType, symbol: str, data: Any) -> Any:
        """Convert a response tree to decimals for fixed-point market types."""
        if router.requires_scaling(market_type):
            return self.scaler.convert_response(symbol, data)
        return data


def unwrap(response: ApiResponse) -> Any:
    """Return the data of a successful envelope, raising ExchangeAPIError otherwise."""
    if not response.ok:
        raise ExchangeAPIError(response.code, response.message)
    return response.data


def unwrap_md(response: MdResponse) -> Any:
    """Market-data flavour of unwrap()."""
    if response.error is not None:
        raise ExchangeAPIError(response.error.code, response.error.message)
    return response.result


def require_one_of(**candidates: str | None) -> None:
    """Raise ParameterError unless at least one identifier is provided."""
    if not any(candidates.values()):
        names = " or ".join(candidates)
        raise ParameterError(f"Provide either {names}")


def parse_contracts(value: str | int) -> int:
    """Parse a Coin-M quantity, which is a whole number of contracts."""
    try:
        return int(str(value).strip())
    except ValueError:
        raise ParameterError(
            f"Coin-M order quantity must be a whole number of contracts, got {value!r}"
        ) from None
