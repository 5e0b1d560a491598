"""Object and field definitions.

Definitions are immutable value objects. Local definitions are declared once
with :func:`define_object`; remote definitions are produced by introspection
and additionally carry the id the store assigned at creation time.

Example::

    book = define_object(
        "book",
        name="Book",
        fields=lambda f: {
            "title": f.single_line_text_field(name="Title", required=True),
            "price": f.decimal(validations=lambda v: [v.min(0), v.max(999.99)]),
        },
    )
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from metaobject_kit.exceptions import DeclarationError, DuplicateFieldKey, InvalidIdentifier
from metaobject_kit.schema.field_kinds import FieldKind, decode_value, encode_value
from metaobject_kit.schema.validations import Validation, Validators

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_-]+$")

TYPE_LENGTH = (3, 255)
KEY_LENGTH = (3, 64)

ValidationsSpec = Union[Iterable[Validation], Callable[[Validators], Iterable[Validation]], None]


def check_identifier(value: str, what: str, length: Tuple[int, int]) -> None:
    """Check an object type or field key against the remote identifier rules.

    Raises:
        InvalidIdentifier: When the value is too short, too long or has
            characters other than letters, digits, hyphens and underscores
    """
    low, high = length
    if not isinstance(value, str) or not (low <= len(value) <= high) or not _IDENTIFIER.match(value):
        raise InvalidIdentifier(
            f"Invalid {what} '{value}': must be {low}-{high} characters of letters, digits, '-' or '_'",
            {"value": value, "identifier": what},
        )


@dataclass(frozen=True)
class FieldDefinition:
    """One declared field of an object type.

    ``kind`` is a :class:`FieldKind` for every locally declared field. Remote
    fields whose wire type this library does not model keep the raw tag.
    ``validations`` is ``None`` when no validation list was declared at all.
    """

    key: str
    kind: Union[FieldKind, str]
    name: Optional[str] = None
    required: Optional[bool] = None
    description: Optional[str] = None
    validations: Optional[Tuple[Validation, ...]] = None

    @property
    def type_name(self) -> str:
        return self.kind.value if isinstance(self.kind, FieldKind) else self.kind

    @property
    def display_name(self) -> str:
        return self.name or self.key

    def _codec_kind(self) -> FieldKind:
        if not isinstance(self.kind, FieldKind):
            raise DeclarationError(
                f"Field '{self.key}' has unsupported type '{self.kind}'",
                {"key": self.key, "type": self.kind},
            )
        return self.kind

    def encode(self, value: Any) -> str:
        return encode_value(self._codec_kind(), value)

    def decode(self, raw: Any) -> Any:
        if raw is None:
            return None
        return decode_value(self._codec_kind(), raw)

    def to_input(self) -> Dict[str, Any]:
        """Wire input for creating this field definition."""
        result: Dict[str, Any] = {"key": self.key, "type": self.type_name}
        if self.name is not None:
            result["name"] = self.name
        if self.description is not None:
            result["description"] = self.description
        if self.required is not None:
            result["required"] = self.required
        if self.validations is not None:
            result["validations"] = [validation.to_input() for validation in self.validations]
        return result


@dataclass(frozen=True)
class FieldDeclaration:
    """A field as written in a schema, before its key is resolved."""

    kind: FieldKind
    key: Optional[str] = None
    name: Optional[str] = None
    required: Optional[bool] = None
    description: Optional[str] = None
    validations: Optional[Tuple[Validation, ...]] = None

    def bind(self, alias: str) -> FieldDefinition:
        return FieldDefinition(
            key=self.key or alias,
            kind=self.kind,
            name=self.name,
            required=self.required,
            description=self.description,
            validations=self.validations,
        )


def _resolve_validations(kind: FieldKind, spec: ValidationsSpec) -> Optional[Tuple[Validation, ...]]:
    if spec is None:
        return None
    validators = Validators(kind)
    resolved = tuple(spec(validators) if callable(spec) else spec)
    for validation in resolved:
        validators.require(validation.name)
    return resolved


def _field_constructor(kind: FieldKind) -> Callable[..., FieldDeclaration]:
    def construct(
        *,
        key: Optional[str] = None,
        name: Optional[str] = None,
        required: Optional[bool] = None,
        description: Optional[str] = None,
        validations: ValidationsSpec = None,
    ) -> FieldDeclaration:
        return FieldDeclaration(
            kind=kind,
            key=key,
            name=name,
            required=required,
            description=description,
            validations=_resolve_validations(kind, validations),
        )

    construct.__doc__ = f"Declare a ``{kind.value}`` field."
    return construct


class FieldConstructors:
    """Field constructors handed to the ``fields`` callable of :func:`define_object`."""

    single_line_text_field = staticmethod(_field_constructor(FieldKind.SINGLE_LINE_TEXT))
    single_line_text_list = staticmethod(_field_constructor(FieldKind.SINGLE_LINE_TEXT_LIST))
    multi_line_text_field = staticmethod(_field_constructor(FieldKind.MULTI_LINE_TEXT))
    multi_line_text_list = staticmethod(_field_constructor(FieldKind.MULTI_LINE_TEXT_LIST))
    url = staticmethod(_field_constructor(FieldKind.URL))
    url_list = staticmethod(_field_constructor(FieldKind.URL_LIST))
    integer = staticmethod(_field_constructor(FieldKind.INTEGER))
    integer_list = staticmethod(_field_constructor(FieldKind.INTEGER_LIST))
    decimal = staticmethod(_field_constructor(FieldKind.DECIMAL))
    decimal_list = staticmethod(_field_constructor(FieldKind.DECIMAL_LIST))
    date = staticmethod(_field_constructor(FieldKind.DATE))
    date_list = staticmethod(_field_constructor(FieldKind.DATE_LIST))
    date_time = staticmethod(_field_constructor(FieldKind.DATE_TIME))
    date_time_list = staticmethod(_field_constructor(FieldKind.DATE_TIME_LIST))
    product = staticmethod(_field_constructor(FieldKind.PRODUCT_REFERENCE))
    product_list = staticmethod(_field_constructor(FieldKind.PRODUCT_REFERENCE_LIST))
    file = staticmethod(_field_constructor(FieldKind.FILE_REFERENCE))
    file_list = staticmethod(_field_constructor(FieldKind.FILE_REFERENCE_LIST))
    dimension = staticmethod(_field_constructor(FieldKind.DIMENSION))
    dimension_list = staticmethod(_field_constructor(FieldKind.DIMENSION_LIST))
    volume = staticmethod(_field_constructor(FieldKind.VOLUME))
    volume_list = staticmethod(_field_constructor(FieldKind.VOLUME_LIST))
    weight = staticmethod(_field_constructor(FieldKind.WEIGHT))
    weight_list = staticmethod(_field_constructor(FieldKind.WEIGHT_LIST))
    json = staticmethod(_field_constructor(FieldKind.JSON))
    json_list = staticmethod(_field_constructor(FieldKind.JSON_LIST))


fields = FieldConstructors()


@dataclass(frozen=True)
class ObjectDefinition:
    """One declared object type.

    ``fields`` maps local aliases to field definitions; an alias need not
    equal the field's remote ``key``. ``access`` and ``capabilities`` are
    passed through to the store untouched.
    """

    type: str
    fields: Mapping[str, FieldDefinition] = field(default_factory=dict)
    name: Optional[str] = None
    description: Optional[str] = None
    display_name_key: Optional[str] = None
    access: Optional[Mapping[str, Any]] = None
    capabilities: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def field_keys(self) -> Dict[str, str]:
        """Alias to remote key mapping, in declaration order."""
        return {alias: definition.key for alias, definition in self.fields.items()}

    def field_by_key(self, key: str) -> Optional[FieldDefinition]:
        for definition in self.fields.values():
            if definition.key == key:
                return definition
        return None

    def to_create_input(self) -> Dict[str, Any]:
        """Wire input for ``metaobjectDefinitionCreate``."""
        result: Dict[str, Any] = {"type": self.type}
        if self.name is not None:
            result["name"] = self.name
        if self.description is not None:
            result["description"] = self.description
        if self.display_name_key is not None:
            result["displayNameKey"] = self.display_name_key
        if self.access is not None:
            result["access"] = dict(self.access)
        if self.capabilities is not None:
            result["capabilities"] = dict(self.capabilities)
        result["fieldDefinitions"] = [definition.to_input() for definition in self.fields.values()]
        return result


@dataclass(frozen=True, kw_only=True)
class RemoteObjectDefinition(ObjectDefinition):
    """An object definition as introspected from the store, keyed by field key."""

    id: str


def define_object(
    type: str,
    fields: Union[Callable[[FieldConstructors], Mapping[str, FieldDeclaration]], Mapping[str, FieldDeclaration]],
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    display_name_key: Optional[str] = None,
    access: Optional[Mapping[str, Any]] = None,
    capabilities: Optional[Mapping[str, Any]] = None,
) -> ObjectDefinition:
    """Materialize an object definition from field declarations.

    Args:
        type: Immutable type identifier (3-255 characters)
        fields: Callable receiving :class:`FieldConstructors` and returning an
            alias to declaration mapping, or that mapping directly
        name: Human-readable name of the definition
        description: Administrative description
        display_name_key: Key of the field used as display name
        access: Access policy passed through to the store
        capabilities: Capability settings passed through to the store

    Returns:
        ObjectDefinition with one field definition per alias

    Raises:
        InvalidIdentifier: When the type, a key or an alias is malformed
        DuplicateFieldKey: When two aliases resolve to the same key
        DeclarationError: When a mapping value is not a field declaration or
            ``display_name_key`` names no declared field
    """
    check_identifier(type, "object type", TYPE_LENGTH)
    declarations = fields(FieldConstructors()) if callable(fields) else fields

    resolved: Dict[str, FieldDefinition] = {}
    aliases_by_key: Dict[str, str] = {}
    for alias, declaration in declarations.items():
        if not isinstance(declaration, FieldDeclaration):
            raise DeclarationError(
                f"Field '{alias}' of '{type}' is not a field declaration",
                {"type": type, "alias": alias},
            )
        if alias.startswith("_"):
            raise InvalidIdentifier(
                f"Field alias '{alias}' of '{type}' is reserved: aliases cannot start with '_'",
                {"type": type, "alias": alias},
            )
        definition = declaration.bind(alias)
        check_identifier(definition.key, "field key", KEY_LENGTH)
        if definition.key in aliases_by_key:
            raise DuplicateFieldKey(
                f"Fields '{aliases_by_key[definition.key]}' and '{alias}' of '{type}' "
                f"both use key '{definition.key}'",
                {"type": type, "key": definition.key},
            )
        aliases_by_key[definition.key] = alias
        resolved[alias] = definition

    if display_name_key is not None and display_name_key not in aliases_by_key:
        raise DeclarationError(
            f"display_name_key '{display_name_key}' of '{type}' is not a declared field key",
            {"type": type, "display_name_key": display_name_key},
        )

    return ObjectDefinition(
        type=type,
        fields=resolved,
        name=name,
        description=description,
        display_name_key=display_name_key,
        access=access,
        capabilities=capabilities,
    )
