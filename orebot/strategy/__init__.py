from .analyzer import analyze, reward_value
from .engine import AutomationTrigger, TriggerResult
from .gates import pass_trigger_gates, select_targets
from .valuation import Valuation, evaluate

__all__ = [
    "AutomationTrigger",
    "TriggerResult",
    "Valuation",
    "analyze",
    "evaluate",
    "pass_trigger_gates",
    "reward_value",
    "select_targets",
]
