"""Risk engine ("controller") for a pooled lending protocol."""
from .controller import Controller
from .errors import ControllerError
from .events import EventLog

__version__ = "0.1.0"

__all__ = ["Controller", "ControllerError", "EventLog", "__version__"]
