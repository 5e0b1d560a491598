"""Validation descriptors for field definitions.

A validation is a ``(name, value)`` pair whose value is always a string. The
module-level builders produce the wire encodings the remote store expects;
:class:`Validators` scopes them to one field kind, so a field only offers the
validations that make sense for it.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Pattern, Union

from metaobject_kit.exceptions import EmptyFileTypeSet, ValidationKindMismatch
from metaobject_kit.schema.field_kinds import FieldKind, capabilities


@dataclass(frozen=True)
class Validation:
    """One named validation of a field definition."""

    name: str
    value: str

    def to_input(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


def minimum(value: str) -> Validation:
    return Validation("min", value)


def maximum(value: str) -> Validation:
    return Validation("max", value)


def max_precision(precision: int) -> Validation:
    return Validation("max_precision", str(int(precision)))


def regex(pattern: Union[str, Pattern[str]]) -> Validation:
    """Regex validation; compiled patterns contribute their source only."""
    source = pattern.pattern if isinstance(pattern, re.Pattern) else pattern
    return Validation("regex", source)


def allowed_domains(domains: Iterable[str]) -> Validation:
    return Validation("allowed_domains", json.dumps(list(domains), separators=(",", ":")))


def file_types(images: bool = False, videos: bool = False) -> Validation:
    """Restrict file references to images and/or videos.

    Raises:
        EmptyFileTypeSet: When neither images nor videos are enabled
    """
    if not images and not videos:
        raise EmptyFileTypeSet("At least one file type must be enabled")
    values: List[str] = []
    if images:
        values.append("Image")
    if videos:
        values.append("Video")
    return Validation("file_type_options", json.dumps(values, separators=(",", ":")))


def choices(values: Iterable[str]) -> Validation:
    return Validation("choices", json.dumps(list(values), separators=(",", ":")))


def sort_validations(validations: Optional[Iterable[Validation]]) -> List[Validation]:
    """Normalize a validation list for comparison: sorted by name."""
    return sorted(validations or (), key=lambda validation: validation.name)


class Validators:
    """Validation builders available to one field kind.

    Instances are handed to the ``validations`` callable of a field
    constructor::

        f.decimal(validations=lambda v: [v.min(0), v.max(999.99), v.max_precision(2)])

    Requesting a validation the kind does not support raises
    :class:`ValidationKindMismatch`.
    """

    def __init__(self, kind: FieldKind):
        self._kind = FieldKind(kind)
        self._capabilities = capabilities(self._kind)

    @property
    def kind(self) -> FieldKind:
        return self._kind

    def supports(self, name: str) -> bool:
        return name in self._capabilities.validations

    def require(self, name: str) -> None:
        if not self.supports(name):
            raise ValidationKindMismatch(
                f"Validation '{name}' is not supported for {self._kind.value} fields",
                {"kind": self._kind.value, "validation": name},
            )

    def min(self, value: Any) -> Validation:
        self.require("min")
        return minimum(self._capabilities.bound(value))

    def max(self, value: Any) -> Validation:
        self.require("max")
        return maximum(self._capabilities.bound(value))

    def max_precision(self, precision: int) -> Validation:
        self.require("max_precision")
        return max_precision(precision)

    def regex(self, pattern: Union[str, Pattern[str]]) -> Validation:
        self.require("regex")
        return regex(pattern)

    def choices(self, values: Iterable[str]) -> Validation:
        self.require("choices")
        return choices(values)

    def allowed_domains(self, domains: Iterable[str]) -> Validation:
        self.require("allowed_domains")
        return allowed_domains(domains)

    def file_types(self, *, images: bool = False, videos: bool = False) -> Validation:
        self.require("file_type_options")
        return file_types(images=images, videos=videos)
