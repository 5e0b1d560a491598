"""Field kinds and their wire codecs.

Every supported field kind is one member of :class:`FieldKind`, whose value is
the wire type tag used by the remote store (``single_line_text_field``,
``list.number_decimal`` and so on). A single capability table maps each kind to
its encoder, its decoder, the validations it accepts and the way ``min``/``max``
bounds are rendered for it.

List kinds wrap the codec of their scalar kind: values are encoded as a compact
JSON array of the per-element encoded scalars and decoded by parsing the array
and decoding each element.
"""

from __future__ import annotations

import json
import math
import operator
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Union

LIST_PREFIX = "list."

_COMPACT = (",", ":")


class FieldKind(str, Enum):
    """Field kinds supported by metaobject definitions."""

    SINGLE_LINE_TEXT = "single_line_text_field"
    MULTI_LINE_TEXT = "multi_line_text_field"
    URL = "url"
    INTEGER = "number_integer"
    DECIMAL = "number_decimal"
    DATE = "date"
    DATE_TIME = "date_time"
    PRODUCT_REFERENCE = "product_reference"
    FILE_REFERENCE = "file_reference"
    DIMENSION = "dimension"
    VOLUME = "volume"
    WEIGHT = "weight"
    JSON = "json"

    SINGLE_LINE_TEXT_LIST = "list.single_line_text_field"
    MULTI_LINE_TEXT_LIST = "list.multi_line_text_field"
    URL_LIST = "list.url"
    INTEGER_LIST = "list.number_integer"
    DECIMAL_LIST = "list.number_decimal"
    DATE_LIST = "list.date"
    DATE_TIME_LIST = "list.date_time"
    PRODUCT_REFERENCE_LIST = "list.product_reference"
    FILE_REFERENCE_LIST = "list.file_reference"
    DIMENSION_LIST = "list.dimension"
    VOLUME_LIST = "list.volume"
    WEIGHT_LIST = "list.weight"
    JSON_LIST = "list.json"

    @property
    def is_list(self) -> bool:
        return self.value.startswith(LIST_PREFIX)

    @property
    def scalar(self) -> "FieldKind":
        """The element kind of a list kind, or the kind itself."""
        if self.is_list:
            return FieldKind(self.value[len(LIST_PREFIX):])
        return self

    @classmethod
    def from_wire(cls, type_name: str) -> Optional["FieldKind"]:
        """Look up a kind by wire tag; ``None`` for tags this library does not model."""
        try:
            return cls(type_name)
        except ValueError:
            return None


@dataclass(frozen=True)
class Measurement:
    """A dimension, volume or weight value with its unit.

    The unit is passed through untouched, so units the remote store adds later
    keep working.
    """

    value: float
    unit: str


MeasurementLike = Union[Measurement, Mapping[str, Any]]


# ---------------------------------------------------------------------
# Scalar codecs
# ---------------------------------------------------------------------


def _identity(value: Any) -> Any:
    return value


def encode_integer(value: int) -> str:
    return str(operator.index(value))


def decode_integer(value: Any) -> int:
    return int(value)


def encode_decimal(value: Union[int, float, Decimal]) -> str:
    """Encode a number so the wire value always carries a decimal point.

    ``2`` encodes as ``"2.0"`` and ``2.5`` as ``"2.5"``.
    """
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Decimal values must be finite, got {value}")
        text = format(value, "f")
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Decimal values must be finite, got {value}")
        text = repr(value)
        if "e" in text or "E" in text:
            text = format(Decimal(text), "f")
    else:
        text = str(operator.index(value))
    if "." not in text:
        text = f"{text}.0"
    return text


def decode_decimal(value: Any) -> float:
    return float(value)


def _to_utc(value: datetime) -> datetime:
    # Naive datetimes are taken as UTC, never as local time.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def encode_date(value: Union[date, datetime]) -> str:
    """Encode as ``YYYY-MM-DD``; datetimes are converted to UTC first."""
    if isinstance(value, datetime):
        value = _to_utc(value).date()
    elif not isinstance(value, date):
        raise TypeError(f"Expected date or datetime, got {type(value).__name__}")
    return value.isoformat()


def decode_date(value: str) -> date:
    return date.fromisoformat(value[:10])


def encode_date_time(value: Union[date, datetime]) -> str:
    """Encode as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC with seconds precision."""
    if isinstance(value, datetime):
        value = _to_utc(value)
    elif isinstance(value, date):
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    else:
        raise TypeError(f"Expected date or datetime, got {type(value).__name__}")
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def decode_date_time(value: str) -> datetime:
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(text)
    return _to_utc(parsed)


def encode_measurement(value: MeasurementLike) -> str:
    if isinstance(value, Measurement):
        amount, unit = value.value, value.unit
    else:
        amount, unit = value["value"], value["unit"]
    return f'{{"value":{encode_decimal(amount)},"unit":{json.dumps(unit)}}}'


def decode_measurement(value: Any) -> Measurement:
    data = value if isinstance(value, Mapping) else json.loads(value)
    return Measurement(value=float(data["value"]), unit=data["unit"])


def encode_json(value: Any) -> str:
    return json.dumps(value, separators=_COMPACT)


def decode_json(value: str) -> Any:
    return json.loads(value)


def _encode_length(value: int) -> str:
    return str(operator.index(value))


def _preformatted(encoder: Callable[[Any], str]) -> Callable[[Any], str]:
    # Date bounds may be given either as values or as already formatted strings.
    def render(value: Any) -> str:
        if isinstance(value, str):
            return value
        return encoder(value)

    return render


def _list_encoder(encode: Callable[[Any], str]) -> Callable[[Any], str]:
    def encode_list(values: Any) -> str:
        return json.dumps([encode(item) for item in values], separators=_COMPACT)

    return encode_list


def _list_decoder(decode: Callable[[Any], Any]) -> Callable[[Any], list]:
    def decode_list(value: Any) -> list:
        items = json.loads(value) if isinstance(value, str) else value
        return [decode(item) for item in items]

    return decode_list


# ---------------------------------------------------------------------
# Capability table
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class KindCapabilities:
    """Codec and validation capabilities of one field kind."""

    kind: FieldKind
    encode: Callable[[Any], str]
    decode: Callable[[Any], Any]
    validations: FrozenSet[str]
    bound: Optional[Callable[[Any], str]] = None


_BOUNDS = frozenset({"min", "max"})

_SCALARS: Dict[FieldKind, KindCapabilities] = {
    caps.kind: caps
    for caps in (
        KindCapabilities(
            FieldKind.SINGLE_LINE_TEXT,
            _identity,
            _identity,
            _BOUNDS | {"regex", "choices"},
            _encode_length,
        ),
        KindCapabilities(
            FieldKind.MULTI_LINE_TEXT,
            _identity,
            _identity,
            _BOUNDS | {"regex"},
            _encode_length,
        ),
        KindCapabilities(FieldKind.URL, _identity, _identity, frozenset({"allowed_domains"})),
        KindCapabilities(FieldKind.INTEGER, encode_integer, decode_integer, _BOUNDS, encode_integer),
        KindCapabilities(
            FieldKind.DECIMAL,
            encode_decimal,
            decode_decimal,
            _BOUNDS | {"max_precision"},
            encode_decimal,
        ),
        KindCapabilities(FieldKind.DATE, encode_date, decode_date, _BOUNDS, _preformatted(encode_date)),
        KindCapabilities(
            FieldKind.DATE_TIME,
            encode_date_time,
            decode_date_time,
            _BOUNDS,
            _preformatted(encode_date_time),
        ),
        KindCapabilities(FieldKind.PRODUCT_REFERENCE, _identity, _identity, frozenset()),
        KindCapabilities(FieldKind.FILE_REFERENCE, _identity, _identity, frozenset({"file_type_options"})),
        KindCapabilities(FieldKind.DIMENSION, encode_measurement, decode_measurement, _BOUNDS, encode_measurement),
        KindCapabilities(FieldKind.VOLUME, encode_measurement, decode_measurement, _BOUNDS, encode_measurement),
        KindCapabilities(FieldKind.WEIGHT, encode_measurement, decode_measurement, _BOUNDS, encode_measurement),
        KindCapabilities(FieldKind.JSON, encode_json, decode_json, frozenset()),
    )
}


def _build_table() -> Dict[FieldKind, KindCapabilities]:
    table = dict(_SCALARS)
    for kind in FieldKind:
        if not kind.is_list:
            continue
        scalar = _SCALARS[kind.scalar]
        table[kind] = KindCapabilities(
            kind,
            _list_encoder(scalar.encode),
            _list_decoder(scalar.decode),
            scalar.validations,
            scalar.bound,
        )
    return table


KIND_CAPABILITIES: Dict[FieldKind, KindCapabilities] = _build_table()


def capabilities(kind: FieldKind) -> KindCapabilities:
    return KIND_CAPABILITIES[FieldKind(kind)]


def encode_value(kind: FieldKind, value: Any) -> str:
    """Encode a typed value into the wire string for ``kind``."""
    return capabilities(kind).encode(value)


def decode_value(kind: FieldKind, raw: Any) -> Any:
    """Decode a wire value for ``kind``; ``None`` stays ``None`` for every kind."""
    if raw is None:
        return None
    return capabilities(kind).decode(raw)
