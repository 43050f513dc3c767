"""Protocol interfaces for the engine's collaborators."""
from .event_sink import EventSink
from .pool import PoolGateway
from .price_oracle import PriceOracle

__all__ = ["EventSink", "PoolGateway", "PriceOracle"]
