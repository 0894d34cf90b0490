# Core modules

from .config import Settings, settings, get_settings
from .container import Services, build_services, get_services

__all__ = ["Settings", "settings", "get_settings", "Services", "build_services", "get_services"]
