"""Base configuration classes and validation framework.

Configurations validate into a :class:`ConfigValidationResult` that lists
every problem at once, instead of failing on the first one, and serialize to
JSON-compatible dictionaries for display.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List


class ConfigurationError(Exception):
    """Base exception for all configuration errors."""


class ConfigValidationError(ConfigurationError):
    """Raised by :meth:`Configuration.validate_or_raise` for an invalid configuration."""

    def __init__(self, message: str, errors: List[str]):
        super().__init__(message)
        self.errors = list(errors)


class SerializationError(ConfigurationError):
    """Raised when a configuration cannot be converted to or from a dictionary."""


@dataclass
class ConfigValidationResult:
    """Result of configuration validation.

    Attributes:
        success: True if validation passed, False otherwise
        errors: Messages describing each validation failure
    """

    success: bool = True
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.success

    def add_error(self, error: str) -> None:
        """Record an error and mark the result as failed."""
        self.errors.append(error)
        self.success = False

    @classmethod
    def success_result(cls) -> ConfigValidationResult:
        return cls(success=True, errors=[])

    @classmethod
    def failure_result(cls, errors: List[str]) -> ConfigValidationResult:
        return cls(success=False, errors=list(errors))


class Configuration(ABC):
    """Abstract base class for configuration types.

    Subclasses implement ``validate``, ``to_dict`` and ``from_dict``.
    """

    @abstractmethod
    def validate(self) -> ConfigValidationResult:
        """Check every setting and report all problems found."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary.

        Raises:
            SerializationError: If the configuration cannot be serialized
        """

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> Configuration:
        """Inverse of :meth:`to_dict`.

        Raises:
            SerializationError: If data cannot be deserialized
        """

    def is_valid(self) -> bool:
        return self.validate().success

    def validate_or_raise(self) -> None:
        """Validate and raise on failure.

        Raises:
            ConfigValidationError: Listing every validation error
        """
        result = self.validate()
        if not result.success:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in result.errors)
            raise ConfigValidationError(error_msg, result.errors)
