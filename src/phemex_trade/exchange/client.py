"""Abstract transport interface for the Phemex REST API.

Tool code depends only on this interface, keeping the HTTP, signing and
rate-limiting details isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod
from typing import Any

from phemex_trade.models import ApiResponse, MdResponse

Params = dict[str, Any]


class ExchangeClient(ABC):
    """Abstract base class for Phemex transports.

    Every method returns the exchange envelope unchanged in meaning; a
    non-zero code is not raised here. Network and HTTP-level failures
    raise TransportError. Nothing is retried.
    """

    @abstractmethod
    async def get(self, path: str, params: Params | None = None) -> ApiResponse:
        """Signed GET with query parameters."""
        ...

    @abstractmethod
    async def get_public(self, path: str, params: Params | None = None) -> ApiResponse:
        """Unsigned GET returning a {code, msg, data} envelope."""
        ...

    @abstractmethod
    async def get_public_md(self, path: str, params: Params | None = None) -> MdResponse:
        """Unsigned GET on a market-data endpoint ({error, id, result})."""
        ...

    @abstractmethod
    async def post(self, path: str, body: Params) -> ApiResponse:
        """Signed POST with a JSON body."""
        ...

    @abstractmethod
    async def put_with_query(self, path: str, params: Params) -> ApiResponse:
        """Signed PUT carrying its parameters in the query string."""
        ...

    @abstractmethod
    async def delete(self, path: str, params: Params | None = None) -> ApiResponse:
        """Signed DELETE with query parameters."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release HTTP resources (CRITICAL for ccxt async)."""
        ...
