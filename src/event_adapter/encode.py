# =============================================================================
# Response Encoder
# =============================================================================
# Turns the function's response Message back into the bytes the Lambda
# runtime returns. Requests that came in through API Gateway get a proxy
# response envelope; everything else is returned as-is.
# =============================================================================

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

from src.event_adapter.codec import CodecError, JsonCodec, default_codec, ensure_configured
from src.event_adapter.declared_types import is_gateway_response_type, unwrap_message
from src.event_adapter.errors import SerializationError, StatusCodeError
from src.event_adapter.events import EventFamily, family_of
from src.event_adapter.message import MARKER_HEADERS, Message
from src.event_adapter.settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_BODY = b'"OK"'
STATUS_CODE_HEADER = "statusCode"
STREAM_RECORDS_HEADER = "Records"

# Never copied into the envelope "headers" object
ENVELOPE_EXCLUDED_HEADERS = (STATUS_CODE_HEADER,) + MARKER_HEADERS


def encode(
    request: Message,
    response: Optional[Message] = None,
    output_type: Any = None,
    *,
    codec: JsonCodec = None,
    settings: Settings = None,
) -> bytes:
    """
    Encode a function result for the Lambda runtime.

    Args:
        request: The normalized request (source of the gateway marker)
        response: The function's response, or None for "no result"
        output_type: Declared function output type
        codec: JSON codec (process default if omitted)
        settings: Adapter settings (environment if omitted)

    Returns:
        Response bytes: the payload verbatim for declared API Gateway
        response types, a serialized proxy envelope for gateway requests,
        otherwise the payload (or '"OK"') unchanged

    Raises:
        StatusCodeError: statusCode header is not a valid integer status
        SerializationError: the envelope or payload cannot be serialized
    """
    codec = codec or default_codec()
    settings = settings or get_settings()

    if is_gateway_response_type(unwrap_message(output_type)):
        return DEFAULT_BODY if response is None else payload_bytes(response.payload, codec)

    ensure_configured(codec)
    body = DEFAULT_BODY if response is None else payload_bytes(response.payload, codec)

    if not request.is_gateway:
        return body

    envelope = build_gateway_response(request, response, body, settings)
    logger.info(f"Outgoing API Gateway response: statusCode={envelope['statusCode']}")
    try:
        return codec.dumps(envelope)
    except CodecError as e:
        raise SerializationError("Failed to serialize AWS Lambda output") from e


def build_gateway_response(
    request: Message,
    response: Optional[Message],
    body: bytes,
    settings: Settings,
) -> Dict[str, Any]:
    """Build the API Gateway proxy response envelope."""
    status_code = response_status_code(response)

    envelope: Dict[str, Any] = {
        "isBase64Encoded": False,
        "statusCode": status_code,
    }
    if is_stream_record_request(request):
        envelope["statusDescription"] = status_description(status_code)

    envelope["body"] = response_body_text(response, body, settings)

    if response is not None:
        envelope["headers"] = {
            key: str(value) for key, value in response.headers.items()
            if key not in ENVELOPE_EXCLUDED_HEADERS
        }
    return envelope


def payload_bytes(payload: Any, codec: JsonCodec) -> bytes:
    """Response payload as bytes; non-byte payloads are serialized."""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")
    try:
        return codec.dumps(payload)
    except CodecError as e:
        raise SerializationError(f"Failed to serialize response payload: {e}") from e


def response_status_code(response: Optional[Message]) -> int:
    """statusCode response header as an int, 200 when absent."""
    if response is None or STATUS_CODE_HEADER not in response.headers:
        return HTTPStatus.OK.value

    value = response.headers[STATUS_CODE_HEADER]
    if isinstance(value, bool):
        raise StatusCodeError(f"statusCode header must be an integer, got {value!r}")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise StatusCodeError(f"statusCode header must be an integer, got {value!r}")


# =============================================================================
# Compatibility policies
# =============================================================================

def is_stream_record_request(request: Message) -> bool:
    """Kinesis requests also get a statusDescription in the envelope."""
    if family_of(request.payload) == EventFamily.STREAM_RECORD_BATCH:
        return True
    return STREAM_RECORDS_HEADER in request.headers


def status_description(status_code: int) -> str:
    """Status text in the "<code> <NAME>" form, e.g. "404 NOT_FOUND"."""
    try:
        status = HTTPStatus(status_code)
    except ValueError as e:
        raise StatusCodeError(f"Unknown HTTP status code: {status_code}") from e
    return f"{status.value} {status.name}"


def response_body_text(response: Optional[Message], body: bytes, settings: Settings) -> str:
    """
    Envelope body text.

    With strip_body_quotes on, every '"' is removed from the body, not
    only the quotes around a JSON string scalar. The default '"OK"' body
    is left as is.
    """
    if response is None:
        return DEFAULT_BODY.decode("utf-8")
    text = body.decode("utf-8", errors="replace")
    if settings.strip_body_quotes:
        text = text.replace('"', "")
    return text
