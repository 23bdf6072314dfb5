"""Core configuration and factory components."""

from slideforms.core.config import Settings, get_settings
from slideforms.core.factory import ComponentFactory, get_factory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
    "get_factory",
]
