"""Order and position-management tools.

Linear (USDT-M) requests carry decimal strings in Rp/Rq/Rr fields. Inverse
(Coin-M) and spot requests carry fixed-point integers in Ep/Er/Ev fields,
so they need the scale table; their responses are converted back.
"""

import uuid
from typing import Any

from phemex_trade.exceptions import RoutingError
from phemex_trade.exchange import router
from phemex_trade.logging import get_logger
from phemex_trade.models import MarketType, Operation
from phemex_trade.tools.context import (
    ToolContext,
    ToolResult,
    parse_contracts,
    require_one_of,
    unwrap,
)

logger = get_logger(__name__)

CLIENT_ORDER_PREFIX = "betta2moon"


def new_client_order_id() -> str:
    """Client order id: fixed prefix plus 30 hex characters."""
    return CLIENT_ORDER_PREFIX + uuid.uuid4().hex[:30]


async def place_order(
    ctx: ToolContext,
    symbol: str,
    side: str,
    order_qty: str,
    ord_type: str,
    market_type: MarketType | str = MarketType.LINEAR,
    price: str | None = None,
    time_in_force: str = "GoodTillCancel",
    pos_side: str = "Merged",
    stop_px: str | None = None,
    trigger_type: str | None = None,
    reduce_only: bool = False,
    take_profit: str | None = None,
    stop_loss: str | None = None,
    qty_type: str = "ByBase",
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    """Place an order.

    `order_qty` is a decimal string for linear and spot (base or quote
    currency per `qty_type`) and a whole number of contracts for inverse.
    """
    market_type = router.parse_market_type(market_type)
    ctx.check_symbol(market_type, symbol, allow_symbol_mismatch)
    ctx.require_scaling(market_type)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.PLACE_ORDER)

    params: dict[str, Any] = {
        "symbol": resolved,
        "clOrdID": new_client_order_id(),
        "side": side,
        "ordType": ord_type,
        "timeInForce": time_in_force,
    }
    scaler = ctx.scaler

    if market_type is MarketType.INVERSE:
        params["orderQty"] = parse_contracts(order_qty)
        _put_scaled_price(params, "priceEp", scaler.scale_price, resolved, price)
        _put_scaled_price(params, "stopPxEp", scaler.scale_price, resolved, stop_px)
        _put_scaled_price(params, "takeProfitEp", scaler.scale_price, resolved, take_profit)
        _put_scaled_price(params, "stopLossEp", scaler.scale_price, resolved, stop_loss)
        params["posSide"] = pos_side
    elif market_type is MarketType.SPOT:
        params["qtyType"] = qty_type
        qty_field = "quoteQtyEv" if qty_type == "ByQuote" else "baseQtyEv"
        params[qty_field] = scaler.scale_value(resolved, order_qty)
        _put_scaled_price(params, "priceEp", scaler.scale_price, resolved, price)
        _put_scaled_price(params, "stopPxEp", scaler.scale_price, resolved, stop_px)
    else:
        params["orderQtyRq"] = order_qty
        params["posSide"] = pos_side
        _put_if_set(params, "priceRp", price)
        _put_if_set(params, "stopPxRp", stop_px)
        _put_if_set(params, "takeProfitRp", take_profit)
        _put_if_set(params, "stopLossRp", stop_loss)

    _put_if_set(params, "triggerType", trigger_type)
    if reduce_only and market_type is not MarketType.SPOT:
        params["reduceOnly"] = True

    logger.info(
        "placing_order",
        symbol=resolved,
        market_type=market_type.value,
        side=side,
        ord_type=ord_type,
        order_qty=order_qty,
    )
    data = unwrap(await ctx.client.put_with_query(endpoint, params))
    return ToolResult(ctx.present(market_type, resolved, data), "Order placed successfully!")


async def cancel_order(
    ctx: ToolContext,
    symbol: str,
    order_id: str | None = None,
    cl_ord_id: str | None = None,
    pos_side: str = "Merged",
    market_type: MarketType | str = MarketType.LINEAR,
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    """Cancel one open order by exchange or client order id."""
    require_one_of(orderID=order_id, clOrdID=cl_ord_id)
    market_type = router.parse_market_type(market_type)
    ctx.check_symbol(market_type, symbol, allow_symbol_mismatch)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.CANCEL_ORDER)

    params: dict[str, Any] = {"symbol": resolved}
    _put_if_set(params, "orderID", order_id)
    _put_if_set(params, "clOrdID", cl_ord_id)
    if market_type is MarketType.LINEAR:
        params["posSide"] = pos_side

    logger.info("cancelling_order", symbol=resolved, order_id=order_id, cl_ord_id=cl_ord_id)
    data = unwrap(await ctx.client.delete(endpoint, params))
    return ToolResult(ctx.present(market_type, resolved, data), "Order cancelled.")


async def amend_order(
    ctx: ToolContext,
    symbol: str,
    order_id: str | None = None,
    orig_cl_ord_id: str | None = None,
    price: str | None = None,
    order_qty: str | None = None,
    pos_side: str = "Merged",
    market_type: MarketType | str = MarketType.LINEAR,
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    """Modify the price or quantity of an open order."""
    require_one_of(orderID=order_id, origClOrdID=orig_cl_ord_id)
    market_type = router.parse_market_type(market_type)
    ctx.check_symbol(market_type, symbol, allow_symbol_mismatch)
    ctx.require_scaling(market_type)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.AMEND_ORDER)

    params: dict[str, Any] = {"symbol": resolved}
    _put_if_set(params, "orderID", order_id)
    _put_if_set(params, "origClOrdID", orig_cl_ord_id)

    if market_type is MarketType.LINEAR:
        params["posSide"] = pos_side
        _put_if_set(params, "priceRp", price)
        _put_if_set(params, "orderQtyRq", order_qty)
    else:
        _put_scaled_price(params, "priceEp", ctx.scaler.scale_price, resolved, price)
        if order_qty is not None:
            if market_type is MarketType.SPOT:
                params["baseQtyEv"] = ctx.scaler.scale_value(resolved, order_qty)
            else:
                params["orderQty"] = parse_contracts(order_qty)

    logger.info("amending_order", symbol=resolved, order_id=order_id, price=price, order_qty=order_qty)
    data = unwrap(await ctx.client.put_with_query(endpoint, params))
    return ToolResult(ctx.present(market_type, resolved, data), "Order amended.")


async def cancel_all_orders(
    ctx: ToolContext,
    symbol: str,
    untriggered: bool = False,
    market_type: MarketType | str = MarketType.LINEAR,
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    """Cancel every open order for a symbol (conditional ones if untriggered)."""
    market_type = router.parse_market_type(market_type)
    ctx.check_symbol(market_type, symbol, allow_symbol_mismatch)
    resolved = router.resolve_symbol(market_type, symbol)
    endpoint = router.require_endpoint(market_type, Operation.CANCEL_ALL)

    params: dict[str, Any] = {"symbol": resolved}
    if untriggered:
        params["untriggered"] = True

    logger.info("cancelling_all_orders", symbol=resolved, untriggered=untriggered)
    data = unwrap(await ctx.client.delete(endpoint, params))
    return ToolResult(
        ctx.present(market_type, resolved, data), f"All orders cancelled for {symbol}."
    )


async def set_leverage(
    ctx: ToolContext,
    symbol: str,
    leverage: int | float | str,
    market_type: MarketType | str = MarketType.LINEAR,
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    """Set leverage. Positive is isolated margin, negative cross, 0 max cross."""
    market_type = router.parse_market_type(market_type)
    if market_type is MarketType.SPOT:
        raise RoutingError("Spot does not support leverage.")
    ctx.check_symbol(market_type, symbol, allow_symbol_mismatch)
    endpoint = router.require_endpoint(market_type, Operation.SET_LEVERAGE)

    params: dict[str, Any] = {"symbol": symbol}
    if market_type is MarketType.INVERSE:
        ctx.require_scaling(market_type)
        params["leverageEr"] = ctx.scaler.scale_ratio(symbol, str(leverage))
    else:
        params["leverageRr"] = leverage

    logger.info("setting_leverage", symbol=symbol, leverage=str(leverage))
    data = unwrap(await ctx.client.put_with_query(endpoint, params))
    return ToolResult(
        ctx.present(market_type, symbol, data), f"Leverage set to {leverage}x for {symbol}."
    )


async def switch_pos_mode(
    ctx: ToolContext,
    symbol: str,
    target_pos_mode: str,
    market_type: MarketType | str = MarketType.LINEAR,
    allow_symbol_mismatch: bool = False,
) -> ToolResult:
    """Switch a USDT-M symbol between OneWay and Hedged position mode."""
    market_type = router.parse_market_type(market_type)
    if market_type is MarketType.SPOT:
        raise RoutingError("Spot does not have position modes.")
    if market_type is MarketType.INVERSE:
        raise RoutingError(
            "Position mode switching is not supported for Coin-M (inverse) "
            "contracts via API. Use the Phemex web interface instead."
        )
    ctx.check_symbol(market_type, symbol, allow_symbol_mismatch)
    endpoint = router.require_endpoint(market_type, Operation.SWITCH_POS_MODE)

    logger.info("switching_pos_mode", symbol=symbol, target_pos_mode=target_pos_mode)
    data = unwrap(
        await ctx.client.put_with_query(
            endpoint, {"symbol": symbol, "targetPosMode": target_pos_mode}
        )
    )
    return ToolResult(data, f"Position mode switched to {target_pos_mode} for {symbol}.")


def _put_if_set(params: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        params[key] = value


def _put_scaled_price(
    params: dict[str, Any], key: str, scale: Any, symbol: str, value: str | None
) -> None:
    if value is not None:
        params[key] = scale(symbol, value)
