"""Schema reconciliation: diff local and remote definitions and apply the result."""

from metaobject_kit.reconcile.apply import (
    ApplyReport,
    apply_change_set,
    introspect_remote_schema,
    reconcile,
)
from metaobject_kit.reconcile.diff import (
    ChangeSet,
    FieldCreate,
    FieldDelete,
    FieldUpdate,
    ObjectUpdate,
    diff_schemas,
)

__all__ = [
    "ApplyReport",
    "ChangeSet",
    "FieldCreate",
    "FieldDelete",
    "FieldUpdate",
    "ObjectUpdate",
    "apply_change_set",
    "diff_schemas",
    "introspect_remote_schema",
    "reconcile",
]
