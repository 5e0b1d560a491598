"""Field selection, request projection and row decoding.

Every selected field is requested under an ordinal alias, ``fieldN: field(key:
$fieldN) { value }``, with ``$fieldN`` bound to the field's remote key. The
request shape therefore depends only on how many fields are selected, never on
their local alias names. Metafields are requested under their own names
(``_id: id``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from metaobject_kit.exceptions import EmptyFieldSelection, UnknownField
from metaobject_kit.schema.definitions import ObjectDefinition
from metaobject_kit.schema.field_kinds import FieldKind, decode_value

# Built-in attributes of every metaobject: selection name -> (wire name, kind).
METAFIELDS: Dict[str, Tuple[str, FieldKind]] = {
    "_id": ("id", FieldKind.SINGLE_LINE_TEXT),
    "_handle": ("handle", FieldKind.SINGLE_LINE_TEXT),
    "_updatedAt": ("updatedAt", FieldKind.DATE_TIME),
}

FieldSelection = Optional[Mapping[str, Any]]


@dataclass(frozen=True)
class Selection:
    """Resolved selection: metafield names and field aliases, in canonical order."""

    metafields: Tuple[str, ...]
    fields: Tuple[str, ...]

    @property
    def names(self) -> Tuple[str, ...]:
        return self.fields + self.metafields


def resolve_selection(definition: ObjectDefinition, spec: FieldSelection = None) -> Selection:
    """Resolve a field selection against an object definition.

    ``None`` selects every field and metafield. When any value is truthy the
    truthy names are an include list; otherwise all names are excluded from
    the full set.

    Raises:
        EmptyFieldSelection: When the selection is empty or excludes everything
        UnknownField: When a name is neither a field alias nor a metafield
    """
    if spec is None:
        return Selection(tuple(METAFIELDS), tuple(definition.fields))
    if not spec:
        raise EmptyFieldSelection("At least one field must be selected", {"type": definition.type})

    unknown = [name for name in spec if name not in definition.fields and name not in METAFIELDS]
    if unknown:
        raise UnknownField(
            f"Unknown field(s) for '{definition.type}': {', '.join(unknown)}",
            {"type": definition.type, "fields": unknown},
        )

    if any(spec.values()):
        chosen = {name for name, include in spec.items() if include}
    else:
        chosen = {name for name in (*definition.fields, *METAFIELDS) if name not in spec}

    selection = Selection(
        metafields=tuple(name for name in METAFIELDS if name in chosen),
        fields=tuple(alias for alias in definition.fields if alias in chosen),
    )
    if not selection.names:
        raise EmptyFieldSelection("The selection excludes every field", {"type": definition.type})
    return selection


def build_item_selection(selection: Selection) -> str:
    parts = [f"{name}: {METAFIELDS[name][0]}" for name in selection.metafields]
    parts.extend(f"field{index}: field(key: $field{index}) {{ value }}" for index in range(len(selection.fields)))
    return "\n".join(parts)


def variable_definitions(selection: Selection) -> List[str]:
    return [f"$field{index}: String!" for index in range(len(selection.fields))]


def field_variables(definition: ObjectDefinition, selection: Selection) -> Dict[str, str]:
    """Bind each ``$fieldN`` variable to the remote key of the Nth selected field."""
    return {f"field{index}": definition.fields[alias].key for index, alias in enumerate(selection.fields)}


def decode_node(definition: ObjectDefinition, selection: Selection, node: Mapping[str, Any]) -> Dict[str, Any]:
    """Decode one returned node into a record keyed by alias and metafield name."""
    record: Dict[str, Any] = {}
    for name in selection.metafields:
        record[name] = decode_value(METAFIELDS[name][1], node.get(name))
    for index, alias in enumerate(selection.fields):
        slot = node.get(f"field{index}") or {}
        record[alias] = definition.fields[alias].decode(slot.get("value"))
    return record
