"""Store connection configuration.

:class:`StoreConfig` holds what is needed to reach one store's Admin API and
to find the local schema:

- Shop handle and Admin API access token (required)
- API version (``YYYY-MM``)
- Path of the local schema module
- Request timeout in seconds

Values resolve as explicit arguments, then environment variables, then
defaults. The access token is never serialized.
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, Optional

from .base import ConfigValidationResult, Configuration, SerializationError

DEFAULT_API_VERSION = "2024-01"
DEFAULT_SCHEMA_PATH = "schema.py"
DEFAULT_TIMEOUT = 60.0

ENV_SHOP = "METAOBJECT_SHOP"
ENV_ACCESS_TOKEN = "METAOBJECT_ACCESS_TOKEN"
ENV_API_VERSION = "METAOBJECT_API_VERSION"
ENV_SCHEMA_PATH = "METAOBJECT_SCHEMA_PATH"
ENV_TIMEOUT = "METAOBJECT_TIMEOUT"

_SHOP_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")
_API_VERSION_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_SHOP_SUFFIX = ".myshopify.com"


class StoreConfig(Configuration):
    """Configuration for one store connection.

    Example usage:
        config = StoreConfig.with_defaults(schema_path="models/schema.py")
        config.validate_or_raise()
        print(config.graphql_endpoint)
    """

    def __init__(
        self,
        shop: Optional[str] = None,
        access_token: Optional[str] = None,
        api_version: str = DEFAULT_API_VERSION,
        schema_path: str = DEFAULT_SCHEMA_PATH,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize StoreConfig.

        Args:
            shop: Shop handle (``my-shop``); a full ``my-shop.myshopify.com``
                domain is accepted and reduced to the handle
            access_token: Admin API access token
            api_version: Admin API version, ``YYYY-MM``
            schema_path: Path of the local schema module
            timeout: Request timeout in seconds
        """
        if shop and shop.endswith(_SHOP_SUFFIX):
            shop = shop[: -len(_SHOP_SUFFIX)]
        self.shop = shop
        self.access_token = access_token
        self.api_version = api_version
        self.schema_path = schema_path
        self.timeout = timeout

    @property
    def graphql_endpoint(self) -> str:
        return f"https://{self.shop}{_SHOP_SUFFIX}/admin/api/{self.api_version}/graphql.json"

    def validate(self) -> ConfigValidationResult:
        result = ConfigValidationResult.success_result()

        if not self.shop:
            result.add_error(f"Shop is required (set {ENV_SHOP})")
        elif not _SHOP_PATTERN.match(self.shop):
            result.add_error(
                f"Shop '{self.shop}' is not a valid shop handle. "
                "Use lowercase letters, numbers and hyphens (e.g., 'my-shop')"
            )

        if not self.access_token or not self.access_token.strip():
            result.add_error(f"Access token is required (set {ENV_ACCESS_TOKEN})")

        if not self.api_version or not _API_VERSION_PATTERN.match(self.api_version):
            result.add_error(f"API version '{self.api_version}' must have the form YYYY-MM (e.g., '2024-01')")

        if not self.schema_path:
            result.add_error("Schema path cannot be empty")

        if not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            result.add_error(f"Timeout must be a positive number of seconds, got {self.timeout!r}")

        return result

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the non-secret settings; ``has_access_token`` replaces the token."""
        return {
            "shop": self.shop,
            "api_version": self.api_version,
            "schema_path": self.schema_path,
            "timeout": self.timeout,
            "has_access_token": bool(self.access_token),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoreConfig":
        try:
            return cls(
                shop=data.get("shop"),
                access_token=data.get("access_token"),
                api_version=data.get("api_version", DEFAULT_API_VERSION),
                schema_path=data.get("schema_path", DEFAULT_SCHEMA_PATH),
                timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to deserialize StoreConfig: {e}") from e

    @classmethod
    def from_environment(cls) -> "StoreConfig":
        """Create StoreConfig from ``METAOBJECT_*`` environment variables.

        Raises:
            SerializationError: If ``METAOBJECT_TIMEOUT`` is not a number
        """
        raw_timeout = os.environ.get(ENV_TIMEOUT)
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError as e:
            raise SerializationError(f"{ENV_TIMEOUT} must be a number, got '{raw_timeout}'") from e

        return cls(
            shop=os.environ.get(ENV_SHOP),
            access_token=os.environ.get(ENV_ACCESS_TOKEN),
            api_version=os.environ.get(ENV_API_VERSION) or DEFAULT_API_VERSION,
            schema_path=os.environ.get(ENV_SCHEMA_PATH) or DEFAULT_SCHEMA_PATH,
            timeout=timeout,
        )

    @classmethod
    def with_defaults(cls, **kwargs: Any) -> "StoreConfig":
        """Create StoreConfig with explicit arguments taking precedence over the environment.

        Arguments given as ``None`` fall back to the environment.
        """
        env_config = cls.from_environment()
        resolved = {
            name: kwargs.get(name) if kwargs.get(name) is not None else getattr(env_config, name)
            for name in ("shop", "access_token", "api_version", "schema_path", "timeout")
        }
        return cls(**resolved)
