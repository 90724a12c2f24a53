"""Tests for contract routing: endpoints, symbol resolution and validation."""

import pytest

from phemex_trade.exceptions import RoutingError
from phemex_trade.exchange import router
from phemex_trade.exchange.router import UNSUPPORTED
from phemex_trade.models import MarketType, Operation


# ---------------------------------------------------------------------------
# Endpoint lookup
# ---------------------------------------------------------------------------


class TestGetEndpoint:
    """Tests for get_endpoint / require_endpoint."""

    def test_place_order_differs_per_family(self) -> None:
        linear = router.get_endpoint(MarketType.LINEAR, Operation.PLACE_ORDER)
        inverse = router.get_endpoint(MarketType.INVERSE, Operation.PLACE_ORDER)
        spot = router.get_endpoint(MarketType.SPOT, Operation.PLACE_ORDER)
        assert linear == "/g-orders/create"
        assert inverse == "/orders/create"
        assert spot == "/spot/orders/create"
        assert len({linear, inverse, spot}) == 3

    def test_accepts_plain_strings(self) -> None:
        assert router.get_endpoint("linear", "placeOrder") == "/g-orders/create"
        assert router.get_endpoint("inverse", "setLeverage") == "/positions/leverage"

    def test_linear_namespace_is_g_prefixed(self) -> None:
        for operation in (
            Operation.CANCEL_ORDER,
            Operation.AMEND_ORDER,
            Operation.CANCEL_ALL,
            Operation.SET_LEVERAGE,
            Operation.OPEN_ORDERS,
        ):
            assert router.get_endpoint(MarketType.LINEAR, operation).startswith("/g-")

    def test_spot_leverage_is_unsupported(self) -> None:
        assert router.get_endpoint(MarketType.SPOT, Operation.SET_LEVERAGE) == UNSUPPORTED

    @pytest.mark.parametrize(
        "operation",
        [
            Operation.SET_LEVERAGE,
            Operation.SWITCH_POS_MODE,
            Operation.ACCOUNT,
            Operation.POSITIONS,
            Operation.FUNDING_RATE,
        ],
    )
    def test_spot_unsupported_operations(self, operation: Operation) -> None:
        assert router.get_endpoint(MarketType.SPOT, operation) == UNSUPPORTED
        with pytest.raises(RoutingError, match="not supported for spot"):
            router.require_endpoint(MarketType.SPOT, operation)

    def test_every_operation_defined_for_futures(self) -> None:
        for market_type in (MarketType.LINEAR, MarketType.INVERSE):
            for operation in Operation:
                assert router.require_endpoint(market_type, operation).startswith("/")

    def test_unknown_market_type_raises(self) -> None:
        with pytest.raises(RoutingError, match="Invalid market type"):
            router.get_endpoint("options", Operation.TICKER)

    def test_unknown_operation_raises(self) -> None:
        with pytest.raises(RoutingError, match="Unknown operation"):
            router.get_endpoint(MarketType.LINEAR, "withdraw")


# ---------------------------------------------------------------------------
# Symbol resolution
# ---------------------------------------------------------------------------


class TestResolveSymbol:
    """Tests for resolve_symbol."""

    def test_spot_adds_prefix(self) -> None:
        assert router.resolve_symbol(MarketType.SPOT, "BTCUSDT") == "sBTCUSDT"

    def test_spot_keeps_existing_prefix(self) -> None:
        assert router.resolve_symbol(MarketType.SPOT, "sBTCUSDT") == "sBTCUSDT"

    @pytest.mark.parametrize("symbol", ["BTCUSDT", "sETHUSDT", "", "s", "SOLUSDT"])
    def test_spot_resolution_is_idempotent(self, symbol: str) -> None:
        once = router.resolve_symbol(MarketType.SPOT, symbol)
        assert router.resolve_symbol(MarketType.SPOT, once) == once

    def test_futures_pass_through(self) -> None:
        assert router.resolve_symbol(MarketType.LINEAR, "BTCUSDT") == "BTCUSDT"
        assert router.resolve_symbol(MarketType.INVERSE, "BTCUSD") == "BTCUSD"


# ---------------------------------------------------------------------------
# Symbol validation
# ---------------------------------------------------------------------------


class TestValidateSymbol:
    """Tests for the suffix heuristic."""

    def test_usdt_symbol_on_inverse_points_to_linear(self) -> None:
        problem = router.validate_symbol(MarketType.INVERSE, "BTCUSDT")
        assert problem is not None
        assert "linear" in problem

    def test_usd_symbol_on_linear_points_to_inverse(self) -> None:
        problem = router.validate_symbol(MarketType.LINEAR, "BTCUSD")
        assert problem is not None
        assert "inverse" in problem

    def test_matching_symbols_pass(self) -> None:
        assert router.validate_symbol(MarketType.INVERSE, "BTCUSD") is None
        assert router.validate_symbol(MarketType.LINEAR, "BTCUSDT") is None

    def test_spot_rejects_coin_m_symbol(self) -> None:
        problem = router.validate_symbol(MarketType.SPOT, "BTCUSD")
        assert problem is not None
        assert "Coin-M" in problem

    def test_spot_accepts_prefixed_and_plain(self) -> None:
        assert router.validate_symbol(MarketType.SPOT, "BTCUSDT") is None
        assert router.validate_symbol(MarketType.SPOT, "sBTCUSDT") is None

    def test_unrelated_suffix_passes(self) -> None:
        assert router.validate_symbol(MarketType.LINEAR, "ETHBTC") is None


class TestMarketTypeHelpers:
    def test_requires_scaling(self) -> None:
        assert router.requires_scaling(MarketType.INVERSE)
        assert router.requires_scaling(MarketType.SPOT)
        assert not router.requires_scaling(MarketType.LINEAR)

    def test_is_inverse_and_is_spot(self) -> None:
        assert router.is_inverse("inverse")
        assert not router.is_inverse("spot")
        assert router.is_spot("spot")
        assert not router.is_spot("linear")
