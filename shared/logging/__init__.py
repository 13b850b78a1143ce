from .json import JsonFormatter, SensitiveDataFilter, configure_logging
from .logger import get_logger, is_configured

__all__ = [
    "JsonFormatter",
    "SensitiveDataFilter",
    "configure_logging",
    "get_logger",
    "is_configured",
]
