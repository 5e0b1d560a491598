"""Schema diff engine.

Compares local object definitions with introspected remote ones and produces
the change set that converges the remote schema to the local declaration.
The diff performs no I/O.

Attribute defaults used for comparison:

- ``name`` of an object defaults to its ``type``
- ``name`` of a field defaults to its ``key``
- ``description`` defaults to ``''`` and ``required`` to ``False``
- validations are compared sorted by name, and only when the local field
  declares a validation list; an undeclared list never clears remote ones
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from metaobject_kit.exceptions import DeclarationError
from metaobject_kit.schema.definitions import FieldDefinition, ObjectDefinition, RemoteObjectDefinition
from metaobject_kit.schema.validations import sort_validations


@dataclass(frozen=True)
class FieldCreate:
    definition: FieldDefinition

    @property
    def key(self) -> str:
        return self.definition.key

    def to_input(self) -> Dict[str, Any]:
        return {"create": self.definition.to_input()}


@dataclass(frozen=True)
class FieldUpdate:
    """Changed attributes of one field; ``changes`` holds the new values only."""

    key: str
    changes: Mapping[str, Any]

    def to_input(self) -> Dict[str, Any]:
        update: Dict[str, Any] = {"key": self.key}
        for attribute, value in self.changes.items():
            if attribute == "validations":
                update["validations"] = [validation.to_input() for validation in value]
            else:
                update[attribute] = value
        return {"update": update}


@dataclass(frozen=True)
class FieldDelete:
    key: str

    def to_input(self) -> Dict[str, Any]:
        return {"delete": {"key": self.key}}


FieldChange = Union[FieldCreate, FieldUpdate, FieldDelete]


@dataclass
class ObjectUpdate:
    """Update of one existing remote object definition, addressed by id."""

    id: str
    type: str
    changes: Dict[str, Any] = field(default_factory=dict)
    field_changes: List[FieldChange] = field(default_factory=list)

    def field_deletions(self) -> List[str]:
        return [change.key for change in self.field_changes if isinstance(change, FieldDelete)]

    def to_input(self) -> Dict[str, Any]:
        """Wire input for ``metaobjectDefinitionUpdate``."""
        definition = dict(self.changes)
        if self.field_changes:
            definition["fieldDefinitions"] = [change.to_input() for change in self.field_changes]
        return definition


@dataclass
class ChangeSet:
    """Ordered instructions: creates, then updates, then deletes.

    ``delete`` holds remote definition ids; ``deleted_types`` maps those ids
    back to their type for reporting.
    """

    create: List[ObjectDefinition] = field(default_factory=list)
    update: List[ObjectUpdate] = field(default_factory=list)
    delete: List[str] = field(default_factory=list)
    deleted_types: Dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def is_empty(self) -> bool:
        return not (self.create or self.update or self.delete)

    def field_deletions(self) -> List[Tuple[str, str]]:
        """``(type, key)`` pairs of every field definition the change set deletes."""
        return [(update.type, key) for update in self.update for key in update.field_deletions()]

    @property
    def is_destructive(self) -> bool:
        return bool(self.delete) or bool(self.field_deletions())

    def describe(self) -> List[str]:
        """One human-readable line per instruction."""
        lines = [f"+ create {definition.type}" for definition in self.create]
        for update in self.update:
            lines.append(f"~ update {update.type}")
            for attribute, value in update.changes.items():
                lines.append(f"    ~ {attribute} = {value!r}")
            for change in update.field_changes:
                if isinstance(change, FieldCreate):
                    lines.append(f"    + field {change.key} ({change.definition.type_name})")
                elif isinstance(change, FieldUpdate):
                    lines.append(f"    ~ field {change.key}: {', '.join(change.changes)}")
                else:
                    lines.append(f"    - field {change.key}")
        for definition_id in self.delete:
            lines.append(f"- delete {self.deleted_types.get(definition_id, definition_id)}")
        return lines


def _object_name(definition: ObjectDefinition) -> str:
    return definition.name if definition.name is not None else definition.type


def _diff_field(local: FieldDefinition, remote: FieldDefinition) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}

    local_description = local.description or ""
    if local_description != (remote.description or ""):
        changes["description"] = local_description

    local_name = local.name or local.key
    if local_name != (remote.name or remote.key):
        changes["name"] = local_name

    local_required = bool(local.required)
    if local_required != bool(remote.required):
        changes["required"] = local_required

    if local.validations is not None:
        local_validations = sort_validations(local.validations)
        if local_validations != sort_validations(remote.validations):
            changes["validations"] = tuple(local_validations)

    return changes


def _diff_fields(local: ObjectDefinition, remote: RemoteObjectDefinition) -> List[FieldChange]:
    remote_fields = {definition.key: definition for definition in remote.fields.values()}
    local_keys = set()
    changes: List[FieldChange] = []

    for local_field in local.fields.values():
        local_keys.add(local_field.key)
        remote_field = remote_fields.get(local_field.key)
        if remote_field is None:
            changes.append(FieldCreate(local_field))
        elif local_field.type_name != remote_field.type_name:
            # Field types are immutable remotely.
            changes.append(FieldDelete(local_field.key))
            changes.append(FieldCreate(local_field))
        else:
            updated = _diff_field(local_field, remote_field)
            if updated:
                changes.append(FieldUpdate(local_field.key, updated))

    for key in remote_fields:
        if key not in local_keys:
            changes.append(FieldDelete(key))

    return changes


def _diff_object(local: ObjectDefinition, remote: RemoteObjectDefinition) -> Optional[ObjectUpdate]:
    changes: Dict[str, Any] = {}
    local_name = _object_name(local)
    if local_name != _object_name(remote):
        changes["name"] = local_name

    field_changes = _diff_fields(local, remote)
    if not changes and not field_changes:
        return None
    return ObjectUpdate(id=remote.id, type=remote.type, changes=changes, field_changes=field_changes)


def diff_schemas(
    local: Mapping[str, ObjectDefinition],
    remote: Sequence[RemoteObjectDefinition],
) -> ChangeSet:
    """Compute the change set converging ``remote`` to ``local``.

    Args:
        local: Local definitions keyed by schema attribute name
        remote: Introspected remote definitions

    Returns:
        ChangeSet; empty when both sides already agree

    Raises:
        DeclarationError: When two local entries declare the same type
    """
    remote_by_type = {definition.type: definition for definition in remote}
    change_set = ChangeSet()
    local_types: Dict[str, str] = {}

    for name, definition in local.items():
        if definition.type in local_types:
            raise DeclarationError(
                f"Object type '{definition.type}' is declared by both "
                f"'{local_types[definition.type]}' and '{name}'",
                {"type": definition.type},
            )
        local_types[definition.type] = name

        match = remote_by_type.get(definition.type)
        if match is None:
            change_set.create.append(definition)
            continue
        update = _diff_object(definition, match)
        if update is not None:
            change_set.update.append(update)

    for definition in remote:
        if definition.type not in local_types:
            change_set.delete.append(definition.id)
            change_set.deleted_types[definition.id] = definition.type

    return change_set
