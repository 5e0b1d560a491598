"""Configuration helpers for metaobject-kit."""

from .base import (
    ConfigValidationError,
    ConfigValidationResult,
    Configuration,
    ConfigurationError,
    SerializationError,
)
from .store import StoreConfig

__all__ = [
    "ConfigValidationError",
    "ConfigValidationResult",
    "Configuration",
    "ConfigurationError",
    "SerializationError",
    "StoreConfig",
]
