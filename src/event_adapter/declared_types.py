# =============================================================================
# Declared Types
# =============================================================================
# Helpers for the input/output type hints a function is deployed with,
# e.g. Message[SQSEvent], Dict[str, Any], List[int] or a plain class.
# =============================================================================

from typing import Any, Dict, Optional, TypedDict, get_origin

from src.event_adapter.message import Message


class ApiGatewayProxyResponse(TypedDict, total=False):
    """API Gateway REST (v1) proxy integration response."""
    statusCode: int
    headers: Dict[str, str]
    multiValueHeaders: Dict[str, Any]
    body: str
    isBase64Encoded: bool


class ApiGatewayV2HttpResponse(TypedDict, total=False):
    """API Gateway HTTP API (v2) response."""
    statusCode: int
    headers: Dict[str, str]
    multiValueHeaders: Dict[str, Any]
    cookies: Any
    body: str
    isBase64Encoded: bool


GATEWAY_RESPONSE_TYPES = (ApiGatewayProxyResponse, ApiGatewayV2HttpResponse)


def raw_type(declared: Any) -> Optional[type]:
    """Class behind a declared type (Dict[str, Any] -> dict), or None."""
    if declared is None:
        return None
    origin = get_origin(declared)
    candidate = origin if origin is not None else declared
    return candidate if isinstance(candidate, type) else None


def is_message_type(declared: Any) -> bool:
    return raw_type(declared) is Message


def unwrap_message(declared: Any) -> Any:
    """Message[X] -> X; anything else is returned unchanged."""
    if is_message_type(declared):
        args = getattr(declared, "__args__", ())
        return args[0] if args else None
    return declared


def is_mapping_type(declared: Any) -> bool:
    """True for dict, Dict[...], Mapping[...] and similar mapping hints."""
    cls = raw_type(declared)
    if cls is None or cls is object:
        return False
    try:
        return issubclass(dict, cls)
    except TypeError:
        # TypedDict classes refuse subclass checks
        return False


def is_gateway_response_type(declared: Any) -> bool:
    return any(declared is t for t in GATEWAY_RESPONSE_TYPES)
