from .state import AppState, RoundFlags
from .tracker import RoundStateTracker, seconds_until

__all__ = ["AppState", "RoundFlags", "RoundStateTracker", "seconds_until"]
