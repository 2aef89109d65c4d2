# =============================================================================
# Request Normalizer
# =============================================================================
# Turns the raw invocation payload + transport headers into a canonical
# Message. Typed AWS events are decoded through the event registry;
# everything else is sniffed as generic JSON, with API Gateway shaped
# objects unwrapped into body + headers.
# =============================================================================

import logging
from typing import Any, Dict, List, Mapping, Optional

from src.event_adapter.codec import CodecError, JsonCodec, default_codec, ensure_configured
from src.event_adapter.declared_types import is_mapping_type, unwrap_message
from src.event_adapter.errors import DecodeError, ParseError
from src.event_adapter.events import EventDecoderRegistry, default_registry
from src.event_adapter.message import CONTEXT_MARKER, GATEWAY_MARKER, Message, merge_headers
from src.event_adapter.settings import Settings, get_settings
from src.event_adapter.shapes import Shape, ShapeKind, classify, classify_declared

logger = logging.getLogger(__name__)

# Presence of this key marks a generic object as an API Gateway request
METHOD_INDICATOR = "httpMethod"
BODY_KEY = "body"
HEADERS_KEY = "headers"

HeaderSource = Optional[Mapping[str, Any]]


def normalize(
    payload: bytes,
    headers: Mapping[str, Any] = None,
    input_type: Any = None,
    context: Any = None,
    *,
    codec: JsonCodec = None,
    registry: EventDecoderRegistry = None,
    settings: Settings = None,
) -> Message:
    """
    Normalize an inbound Lambda payload into a Message.

    Args:
        payload: Raw invocation bytes
        headers: Transport headers from the runtime; applied last
        input_type: Declared function input type (Message[X] is unwrapped)
        context: Lambda context, carried opaquely as a marker header
        codec: JSON codec (process default if omitted)
        registry: Typed event decoder registry (process default if omitted)
        settings: Adapter settings (environment if omitted)

    Returns:
        Immutable Message whose payload is the typed event, the generic
        JSON value, the extracted gateway body, or the original bytes

    Raises:
        ConfigurationError: declared event family has no decoder
        DecodeError: the typed decoder rejected the payload
        ParseError: payload is not JSON and lenient parsing is off
    """
    codec = codec or default_codec()
    registry = registry or default_registry()
    settings = settings or get_settings()
    payload = bytes(payload)

    if settings.log_payloads:
        logger.info(f"Incoming JSON Event: {payload.decode('utf-8', errors='replace')}")

    input_type = unwrap_message(input_type)

    shape = classify_declared(input_type)
    if shape is None:
        ensure_configured(codec)
        shape = classify(input_type, payload, codec)
    logger.info(f"Detected payload shape: {shape.kind.value}")

    sources: List[HeaderSource] = []
    markers: Dict[str, Any] = {}

    if shape.is_typed:
        body = registry.decode(input_type, payload)
        if shape.family.is_gateway_request:
            markers[GATEWAY_MARKER] = True
            logger.info("Incoming request is API Gateway")
    elif shape.kind == ShapeKind.GENERIC_JSON_OBJECT:
        body = _normalize_object(shape.value, payload, input_type, codec, sources, markers)
    elif shape.kind == ShapeKind.GENERIC_JSON_ARRAY:
        body = shape.value
    else:
        body = _normalize_raw(shape, payload, settings)

    if context is not None:
        markers[CONTEXT_MARKER] = context

    logger.info(f"Incoming request headers: {dict(headers or {})}")
    sources.append(headers)

    return Message(payload=body, headers=merge_headers(sources, markers))


def _normalize_object(
    request: Dict[str, Any],
    payload: bytes,
    input_type: Any,
    codec: JsonCodec,
    sources: List[HeaderSource],
    markers: Dict[str, Any],
) -> Any:
    """
    Unwrap a generic JSON object.

    Objects carrying httpMethod are API Gateway requests: a mapping-typed
    function receives the object minus its "headers" entry, any other
    function receives the extracted body with the remaining fields as
    headers. A nested "headers" object is always lifted into the message
    headers.
    """
    body: Any = payload
    provided = request.get(HEADERS_KEY)

    if METHOD_INDICATOR in request:
        if is_mapping_type(input_type):
            body = {key: value for key, value in request.items() if key != HEADERS_KEY}
            sources.append({METHOD_INDICATOR: request[METHOD_INDICATOR]})
        else:
            body = _body_bytes(request.get(BODY_KEY), codec)
            sources.append({
                key: value for key, value in request.items()
                if key not in (BODY_KEY, HEADERS_KEY)
            })
        markers[GATEWAY_MARKER] = True
        logger.info("Incoming request is API Gateway")

    if isinstance(provided, dict):
        sources.append(provided)

    return body


def _body_bytes(body: Any, codec: JsonCodec) -> bytes:
    """Textual bodies become UTF-8 bytes; structured bodies are re-serialized."""
    if isinstance(body, str):
        return body.encode("utf-8")
    try:
        return codec.dumps(body)
    except CodecError as e:
        raise DecodeError(f"Failed to re-serialize request body: {e}") from e


def _normalize_raw(shape: Shape, payload: bytes, settings: Settings) -> bytes:
    if shape.error is not None:
        if not settings.lenient_parse:
            raise ParseError(f"Payload is not valid JSON: {shape.error}") from shape.error
        logger.warning(f"Payload is not valid JSON, passing raw bytes through: {shape.error}")
    return payload
