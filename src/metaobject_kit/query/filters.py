"""Compile structured filters into the Admin API search syntax.

Grammar::

    "text" / 3 / True / date   ->  "text" / "3" / "true" / "2024-01-31"
    [a, b]                      ->  (a AND b)
    {"$raw": "..."}             ->  passed through unchanged
    {"$or": [a, b]}             ->  (a OR b)
    {"displayName": v}          ->  display_name:<v>
    {"updatedAt": {"$gte": d}}  ->  updated_at:>=<d>

Field values may be wrapped in one of ``$not``, ``$lt``, ``$lte``, ``$gt``,
``$gte``. ``$raw``, ``$or`` and every operator must be the only key of their
mapping.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Mapping, Optional

from metaobject_kit.exceptions import ConflictingQueryKeys, InvalidQueryShape
from metaobject_kit.schema.field_kinds import encode_date, encode_date_time

_OPERATORS = {
    "$not": "NOT ",
    "$lt": "<",
    "$lte": "<=",
    "$gt": ">",
    "$gte": ">=",
}

_NAMED_FIELDS = {
    "displayName": "display_name",
    "display_name": "display_name",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
}

_EXCLUSIVE_KEYS = ("$raw", "$or")


def _literal(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return f'"{str(value).lower()}"'
    if isinstance(value, datetime):
        return f'"{encode_date_time(value)}"'
    if isinstance(value, date):
        return f'"{encode_date(value)}"'
    if isinstance(value, (str, int, float)):
        return f'"{value}"'
    return None


def _only_key(query: Mapping[str, Any], key: str) -> None:
    if len(query) > 1:
        raise ConflictingQueryKeys(
            f"'{key}' must be the only key in its query object, got {sorted(query)}",
            {"keys": sorted(query)},
        )


def build_query_item(item: Any) -> str:
    """Compile the value of a named field."""
    literal = _literal(item)
    if literal is not None:
        return literal
    if not isinstance(item, Mapping) or not item:
        raise InvalidQueryShape(f"Invalid query item: {item!r}", {"item": repr(item)})

    key = next(iter(item))
    _only_key(item, key)
    if key == "$raw":
        return str(item[key])
    if key in _OPERATORS:
        return f"{_OPERATORS[key]}{build_query_item(item[key])}"
    raise InvalidQueryShape(f"Unknown query operator '{key}'", {"operator": key})


def build_list_query(query: Any) -> Optional[str]:
    """Compile a structured filter; ``None`` means no filter at all.

    Raises:
        ConflictingQueryKeys: When ``$raw``, ``$or`` or an operator shares its
            mapping with other keys
        InvalidQueryShape: When the filter has any other malformed shape
    """
    if query is None:
        return None
    literal = _literal(query)
    if literal is not None:
        return literal
    if isinstance(query, (list, tuple)):
        if not query:
            raise InvalidQueryShape("A query list cannot be empty")
        return f"({' AND '.join(build_list_query(part) for part in query)})"
    if not isinstance(query, Mapping) or not query:
        raise InvalidQueryShape(f"Invalid query: {query!r}", {"query": repr(query)})

    for key in _EXCLUSIVE_KEYS:
        if key in query:
            _only_key(query, key)
    if "$raw" in query:
        return str(query["$raw"])
    if "$or" in query:
        members = query["$or"]
        if not isinstance(members, (list, tuple)) or not members:
            raise InvalidQueryShape("'$or' takes a non-empty list", {"query": repr(query)})
        return f"({' OR '.join(build_list_query(member) for member in members)})"

    parts: List[str] = []
    seen = set()
    for key, value in query.items():
        name = _NAMED_FIELDS.get(key)
        if name is None:
            raise InvalidQueryShape(f"Unknown query key '{key}'", {"key": key})
        if name in seen:
            raise ConflictingQueryKeys(f"Query field '{name}' is given twice", {"key": key})
        seen.add(name)
        if value is not None:
            parts.append(f"{name}:{build_query_item(value)}")
    return " AND ".join(parts)
