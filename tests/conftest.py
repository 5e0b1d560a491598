"""Test configuration for pytest."""

from typing import Any, Dict, List, Optional

import pytest

from metaobject_kit.schema.definitions import (
    FieldDefinition,
    ObjectDefinition,
    RemoteObjectDefinition,
    define_object,
)
from metaobject_kit.schema.field_kinds import FieldKind
from metaobject_kit.schema.validations import Validation


class ScriptedRequest:
    """Request function returning canned responses in order and recording every call."""

    def __init__(self, responses: Optional[List[Dict[str, Any]]] = None):
        self.responses = list(responses or [])
        self.calls: List[tuple] = []

    def __call__(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append((document, variables))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {document.strip().splitlines()[0]}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def scripted_request():
    """Factory for scripted request functions."""
    return ScriptedRequest


@pytest.fixture
def book() -> ObjectDefinition:
    return define_object(
        "book",
        name="Book",
        fields=lambda f: {
            "title": f.single_line_text_field(name="Title", required=True),
            "price": f.decimal(validations=lambda v: [v.min(0), v.max(999.99)]),
            "published": f.date(key="published_on"),
            "tags": f.single_line_text_list(),
        },
    )


@pytest.fixture
def review() -> ObjectDefinition:
    return define_object(
        "review",
        fields=lambda f: {
            "name": f.single_line_text_field(),
            "stars": f.integer(),
        },
    )


def remote_definition(
    definition: ObjectDefinition,
    definition_id: str,
    name: Optional[str] = None,
) -> RemoteObjectDefinition:
    """Mirror a local definition the way introspection would report it after creation."""
    fields = {}
    for field in definition.fields.values():
        fields[field.key] = FieldDefinition(
            key=field.key,
            kind=field.kind,
            name=field.name or field.key,
            required=bool(field.required),
            description=field.description or "",
            validations=tuple(field.validations or ()),
        )
    return RemoteObjectDefinition(
        id=definition_id,
        type=definition.type,
        fields=fields,
        name=name if name is not None else (definition.name or definition.type),
        description=definition.description,
    )


@pytest.fixture
def mirror():
    return remote_definition


def remote_field(key: str, kind: FieldKind = FieldKind.SINGLE_LINE_TEXT, **kwargs: Any) -> FieldDefinition:
    kwargs.setdefault("name", key)
    kwargs.setdefault("required", False)
    kwargs.setdefault("description", "")
    kwargs.setdefault("validations", ())
    return FieldDefinition(key=key, kind=kind, **kwargs)


@pytest.fixture
def make_remote_field():
    return remote_field


@pytest.fixture
def validation():
    return Validation
