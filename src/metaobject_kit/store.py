"""Store façade: one entry point per schema.

Example:
    from metaobject_kit import MetaobjectStore, StoreConfig

    store = MetaobjectStore.from_config(StoreConfig.with_defaults(), {"book": book})
    store.push()
    for record in store.book.iterate(query={"displayName": "Dune"}):
        print(record["title"])
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Mapping, Optional

import requests

from metaobject_kit.backends.graphql_client import RequestFunction, StoreGraphQLClient
from metaobject_kit.config.store import StoreConfig
from metaobject_kit.ops.metaobject_ops import MetaobjectOps
from metaobject_kit.reconcile.apply import ApplyReport, ConfirmCallback, introspect_remote_schema, reconcile
from metaobject_kit.reconcile.diff import ChangeSet, diff_schemas
from metaobject_kit.schema.definitions import ObjectDefinition

logger = logging.getLogger(__name__)


class MetaobjectStore:
    """Record operations and schema reconciliation for one schema.

    Every object definition of ``schema`` is exposed as a
    :class:`MetaobjectOps`, by attribute (``store.book``) and by item
    (``store["book"]``). Schema entries that are not object definitions are
    ignored.
    """

    def __init__(self, request: RequestFunction, schema: Mapping[str, Any]):
        self._request = request
        self._schema: Dict[str, ObjectDefinition] = {
            name: value for name, value in schema.items() if isinstance(value, ObjectDefinition)
        }
        self._ops = {name: MetaobjectOps(definition, request) for name, definition in self._schema.items()}

    @classmethod
    def from_config(
        cls,
        config: StoreConfig,
        schema: Mapping[str, Any],
        session: Optional[requests.Session] = None,
    ) -> "MetaobjectStore":
        """Build a store with a ``requests`` transport.

        Raises:
            ConfigValidationError: When the configuration is invalid
        """
        config.validate_or_raise()
        client = StoreGraphQLClient(
            session or requests.Session(),
            config.graphql_endpoint,
            config.access_token,
            timeout=config.timeout,
        )
        logger.debug(f"Connecting to {client.endpoint}")
        return cls(client, schema)

    @property
    def schema(self) -> Dict[str, ObjectDefinition]:
        return dict(self._schema)

    def __getattr__(self, name: str) -> MetaobjectOps:
        ops = self.__dict__.get("_ops", {})
        if name in ops:
            return ops[name]
        raise AttributeError(f"{type(self).__name__} has no object type '{name}'")

    def __getitem__(self, name: str) -> MetaobjectOps:
        return self._ops[name]

    def __contains__(self, name: object) -> bool:
        return name in self._ops

    def __iter__(self) -> Iterator[str]:
        return iter(self._ops)

    def plan(self) -> ChangeSet:
        """Introspect the remote schema and diff it against the local one."""
        return diff_schemas(self._schema, introspect_remote_schema(self._request))

    def push(self, confirm: Optional[ConfirmCallback] = None) -> ApplyReport:
        """Reconcile the remote schema with the local one.

        Raises:
            ReconciliationCancelled: When ``confirm`` declines destructive steps
            PartialApplyError: When a step fails after others were applied
        """
        return reconcile(self._request, self._schema, confirm=confirm)
