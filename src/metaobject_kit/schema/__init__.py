"""Schema declaration: field kinds, validations and object definitions."""

from metaobject_kit.schema.definitions import (
    FieldConstructors,
    FieldDeclaration,
    FieldDefinition,
    ObjectDefinition,
    RemoteObjectDefinition,
    define_object,
    fields,
)
from metaobject_kit.schema.field_kinds import FieldKind, Measurement
from metaobject_kit.schema.loader import load_local_schema
from metaobject_kit.schema.validations import Validation, Validators

__all__ = [
    "FieldConstructors",
    "FieldDeclaration",
    "FieldDefinition",
    "FieldKind",
    "Measurement",
    "ObjectDefinition",
    "RemoteObjectDefinition",
    "Validation",
    "Validators",
    "define_object",
    "fields",
    "load_local_schema",
]
