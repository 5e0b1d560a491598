"""metaobject-kit - Typed metaobject schemas for the Shopify Admin API.

Declare object types in Python, reconcile the store's metaobject definitions
with them, and read and write records with typed field values.
"""

from __future__ import annotations

from .config import StoreConfig
from .exceptions import (
    DeclarationError,
    MetaobjectKitError,
    QueryShapeError,
    ReconciliationError,
    RemoteError,
    RemoteProtocolError,
    RemoteSemanticError,
    UsageError,
)
from .ops import ListResult, MetaobjectOps, PageInfo
from .query import build_list_query
from .reconcile import ApplyReport, ChangeSet, diff_schemas, reconcile
from .schema import (
    FieldKind,
    Measurement,
    ObjectDefinition,
    RemoteObjectDefinition,
    define_object,
    fields,
    load_local_schema,
)
from .store import MetaobjectStore

__version__ = "0.1.0"

__all__ = [
    "ApplyReport",
    "ChangeSet",
    "DeclarationError",
    "FieldKind",
    "ListResult",
    "Measurement",
    "MetaobjectKitError",
    "MetaobjectOps",
    "MetaobjectStore",
    "ObjectDefinition",
    "PageInfo",
    "QueryShapeError",
    "ReconciliationError",
    "RemoteError",
    "RemoteObjectDefinition",
    "RemoteProtocolError",
    "RemoteSemanticError",
    "StoreConfig",
    "UsageError",
    "build_list_query",
    "define_object",
    "diff_schemas",
    "fields",
    "load_local_schema",
    "reconcile",
]
