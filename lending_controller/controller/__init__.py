"""Risk engine components."""
from .core import Controller
from .registry import MarketRegistry
from .storage import ControllerStorage, GlobalConfig

__all__ = ["Controller", "ControllerStorage", "GlobalConfig", "MarketRegistry"]
