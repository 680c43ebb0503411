from .automation import AutomationConfig, Mode, parse_bool
from .settings import Settings, load_settings

__all__ = ["AutomationConfig", "Mode", "Settings", "load_settings", "parse_bool"]
