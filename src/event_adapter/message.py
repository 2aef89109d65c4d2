# =============================================================================
# Message - Canonical Invocation Message
# =============================================================================
# Every inbound event, whatever its shape, becomes a Message: a payload
# plus a flat header map. Business logic returns a Message as well.
# =============================================================================

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Generic, Iterable, Mapping, Optional, TypeVar

T = TypeVar("T")

# Internal marker headers
GATEWAY_MARKER = "aws-api-gateway"
CONTEXT_MARKER = "aws-context"
MARKER_HEADERS = (GATEWAY_MARKER, CONTEXT_MARKER)


@dataclass(frozen=True)
class Message(Generic[T]):
    """
    Immutable payload + headers pair exchanged with business logic.

    Attributes:
        payload: Raw bytes, a typed event object, or a generic JSON value
        headers: Read-only header map (keys are case-sensitive)
    """
    payload: T
    headers: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.payload is None:
            raise ValueError("Message payload must not be None")
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def is_gateway(self) -> bool:
        """True when the request came from (or must answer) an API Gateway."""
        return self.headers.get(GATEWAY_MARKER) is True

    @property
    def context(self) -> Any:
        """Lambda context object, if one was supplied during normalization."""
        return self.headers.get(CONTEXT_MARKER)


def merge_headers(
    sources: Iterable[Optional[Mapping[str, Any]]],
    markers: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Merge header sources in order; later sources win.

    Markers set during normalization are applied after every source, so
    neither event data nor transport headers can replace them.
    """
    merged: Dict[str, Any] = {}
    for source in sources:
        if source:
            merged.update(source)
    if markers:
        merged.update(markers)
    return merged
