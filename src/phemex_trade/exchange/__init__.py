"""Exchange layer -- Phemex transport, contract routing and fixed-point scaling."""

from phemex_trade.exchange.client import ExchangeClient
from phemex_trade.exchange.phemex_client import PhemexClient
from phemex_trade.exchange.scale_table import ScaleTable, load_scale_table
from phemex_trade.exchange.scaler import ValueScaler

__all__ = [
    "ExchangeClient",
    "PhemexClient",
    "ScaleTable",
    "ValueScaler",
    "load_scale_table",
]
