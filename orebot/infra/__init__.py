from .errors import ErrorTracker
from .log import get_logger
from .telemetry import RuntimeEventLogger
from .wallet import load_signer

__all__ = ["ErrorTracker", "RuntimeEventLogger", "get_logger", "load_signer"]
