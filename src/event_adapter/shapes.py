# =============================================================================
# Shape Classifier
# =============================================================================
# Decides what an inbound payload is: a typed AWS event, a generic JSON
# object, a generic JSON array, or opaque bytes. Every payload gets
# exactly one shape; RAW_BYTES is the fallback.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from src.event_adapter.codec import CodecError, JsonCodec
from src.event_adapter.declared_types import unwrap_message
from src.event_adapter.events import EventFamily, family_for_type


class ShapeKind(str, Enum):
    """Structural categories of an inbound payload."""
    TYPED_PLATFORM_EVENT = "typed_platform_event"
    GENERIC_JSON_OBJECT = "generic_json_object"
    GENERIC_JSON_ARRAY = "generic_json_array"
    RAW_BYTES = "raw_bytes"


@dataclass(frozen=True)
class Shape:
    """
    Classification result.

    Attributes:
        kind: Shape category
        family: Event family (TYPED_PLATFORM_EVENT only)
        value: Parsed JSON value (generic shapes, and scalar RAW_BYTES)
        error: Parse failure that forced RAW_BYTES, if any
    """
    kind: ShapeKind
    family: Optional[EventFamily] = None
    value: Any = field(default=None, compare=False)
    error: Optional[Exception] = field(default=None, compare=False)

    @classmethod
    def typed(cls, family: EventFamily) -> "Shape":
        return cls(kind=ShapeKind.TYPED_PLATFORM_EVENT, family=family)

    @classmethod
    def raw(cls, value: Any = None, error: Exception = None) -> "Shape":
        return cls(kind=ShapeKind.RAW_BYTES, value=value, error=error)

    @property
    def is_typed(self) -> bool:
        return self.kind == ShapeKind.TYPED_PLATFORM_EVENT


def classify_declared(declared: Any) -> Optional[Shape]:
    """Typed shape implied by the declared type alone, if any."""
    family = family_for_type(unwrap_message(declared))
    if family is not None:
        return Shape.typed(family)
    return None


def classify_value(value: Any) -> Shape:
    """Shape of an already parsed generic JSON value."""
    if isinstance(value, dict):
        return Shape(kind=ShapeKind.GENERIC_JSON_OBJECT, value=value)
    if isinstance(value, list):
        return Shape(kind=ShapeKind.GENERIC_JSON_ARRAY, value=value)
    return Shape.raw(value=value)


def classify(declared: Any, payload: bytes, codec: JsonCodec) -> Shape:
    """
    Classify an inbound payload.

    A declared event class wins without looking at the bytes. Otherwise
    the payload is parsed; a parse failure yields RAW_BYTES carrying the
    error so the caller can decide whether that is fatal.
    """
    shape = classify_declared(declared)
    if shape is not None:
        return shape
    try:
        value = codec.loads(payload)
    except CodecError as e:
        return Shape.raw(error=e)
    return classify_value(value)
