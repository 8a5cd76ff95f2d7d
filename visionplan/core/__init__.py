from .config import Settings, settings
from .observability import get_logger, setup_structured_logging

__all__ = ["Settings", "settings", "get_logger", "setup_structured_logging"]
