# Core modules

from .config import AcquirerSettings, get_settings

__all__ = ["AcquirerSettings", "get_settings"]
