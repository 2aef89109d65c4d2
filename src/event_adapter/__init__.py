# =============================================================================
# Event Adapter Package - Lambda Event Normalization
# =============================================================================
# Converts raw Lambda invocations into canonical Messages and converts the
# function's response Message back into the bytes the runtime returns.
# Handles:
# - Typed AWS events (SQS, SNS, Kinesis, S3, API Gateway v1/v2)
# - API Gateway requests arriving as generic JSON
# - Generic JSON objects and arrays
# - Opaque bytes
# =============================================================================

from src.event_adapter.codec import JsonCodec, default_codec, ensure_configured
from src.event_adapter.declared_types import ApiGatewayProxyResponse, ApiGatewayV2HttpResponse
from src.event_adapter.encode import encode
from src.event_adapter.errors import (
    ConfigurationError,
    DecodeError,
    EventAdapterError,
    ParseError,
    SerializationError,
    StatusCodeError,
)
from src.event_adapter.events import EventDecoderRegistry, EventFamily, default_registry
from src.event_adapter.message import CONTEXT_MARKER, GATEWAY_MARKER, Message, merge_headers
from src.event_adapter.normalize import normalize
from src.event_adapter.settings import Settings, get_settings
from src.event_adapter.shapes import Shape, ShapeKind, classify

__all__ = [
    "Message",
    "GATEWAY_MARKER",
    "CONTEXT_MARKER",
    "merge_headers",
    "normalize",
    "encode",
    "classify",
    "Shape",
    "ShapeKind",
    "EventFamily",
    "EventDecoderRegistry",
    "default_registry",
    "JsonCodec",
    "default_codec",
    "ensure_configured",
    "Settings",
    "get_settings",
    "ApiGatewayProxyResponse",
    "ApiGatewayV2HttpResponse",
    "EventAdapterError",
    "ConfigurationError",
    "DecodeError",
    "ParseError",
    "SerializationError",
    "StatusCodeError",
]
