# =============================================================================
# Typed Event Families - Decoder Registry
# =============================================================================
# AWS trigger events with a dedicated decoder. A function declared with one
# of these classes (or a subclass) as its input type receives the decoded
# Powertools event object instead of a generic JSON tree.
# =============================================================================

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEvent,
    APIGatewayProxyEventV2,
    KinesisStreamEvent,
    S3Event,
    SNSEvent,
    SQSEvent,
)

from src.event_adapter.codec import CodecError, JsonCodec
from src.event_adapter.declared_types import raw_type
from src.event_adapter.errors import ConfigurationError, DecodeError

logger = logging.getLogger(__name__)

# (payload bytes, event class) -> decoded event
EventDecoder = Callable[[bytes, type], Any]


class EventFamily(str, Enum):
    """Trigger event families with a typed decoder."""
    QUEUE_MESSAGE_BATCH = "queue_message_batch"      # SQS
    NOTIFICATION_BATCH = "notification_batch"        # SNS
    STREAM_RECORD_BATCH = "stream_record_batch"      # Kinesis Data Streams
    OBJECT_STORAGE_EVENT = "object_storage_event"    # S3
    GATEWAY_REQUEST_V1 = "gateway_request_v1"        # API Gateway REST proxy
    GATEWAY_REQUEST_V2 = "gateway_request_v2"        # API Gateway HTTP API

    @property
    def is_gateway_request(self) -> bool:
        return self in (EventFamily.GATEWAY_REQUEST_V1, EventFamily.GATEWAY_REQUEST_V2)

    @property
    def event_class(self) -> type:
        return FAMILY_EVENT_CLASSES[self]


FAMILY_EVENT_CLASSES: Dict[EventFamily, type] = {
    EventFamily.QUEUE_MESSAGE_BATCH: SQSEvent,
    EventFamily.NOTIFICATION_BATCH: SNSEvent,
    EventFamily.STREAM_RECORD_BATCH: KinesisStreamEvent,
    EventFamily.OBJECT_STORAGE_EVENT: S3Event,
    EventFamily.GATEWAY_REQUEST_V1: APIGatewayProxyEvent,
    EventFamily.GATEWAY_REQUEST_V2: APIGatewayProxyEventV2,
}


def family_for_type(declared: Any) -> Optional[EventFamily]:
    """Family whose event class the declared type is (or derives from)."""
    cls = raw_type(declared)
    if cls is None:
        return None
    for family, event_cls in FAMILY_EVENT_CLASSES.items():
        try:
            if issubclass(cls, event_cls):
                return family
        except TypeError:
            return None
    return None


def family_of(event: Any) -> Optional[EventFamily]:
    """Family of an already decoded event object."""
    for family, event_cls in FAMILY_EVENT_CLASSES.items():
        if isinstance(event, event_cls):
            return family
    return None


class EventDecoderRegistry:
    """
    Maps each event family to the decoder that builds its typed object.

    Usage:
        registry = EventDecoderRegistry()
        event = registry.decode(SQSEvent, payload)
        event.records  # typed access
    """

    def __init__(self, codec: JsonCodec = None, decoders: Dict[EventFamily, EventDecoder] = None):
        self._codec = codec or JsonCodec()
        if decoders is None:
            decoders = {family: self._decode_data_class for family in EventFamily}
        self._decoders: Dict[EventFamily, EventDecoder] = dict(decoders)

    def register(self, family: EventFamily, decoder: EventDecoder) -> None:
        self._decoders[family] = decoder

    def unregister(self, family: EventFamily) -> None:
        self._decoders.pop(family, None)

    def decoder_for(self, family: EventFamily) -> EventDecoder:
        decoder = self._decoders.get(family)
        if decoder is None:
            raise ConfigurationError(f"No decoder registered for event family '{family.value}'")
        return decoder

    def decode(self, declared: Any, payload: bytes) -> Any:
        """Decode payload into the event class named by the declared type."""
        event_cls = raw_type(declared)
        family = family_for_type(event_cls)
        if family is None:
            raise ConfigurationError(f"Unsupported event type: {declared!r}")
        decoder = self.decoder_for(family)
        logger.debug(f"Decoding {family.value} event as {event_cls.__name__}")
        try:
            return decoder(payload, event_cls)
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"Failed to decode {event_cls.__name__}: {e}") from e

    def _decode_data_class(self, payload: bytes, event_cls: type) -> Any:
        try:
            data = self._codec.loads(payload)
        except CodecError as e:
            raise DecodeError(f"Failed to decode {event_cls.__name__}: {e}") from e
        if not isinstance(data, dict):
            raise DecodeError(
                f"Failed to decode {event_cls.__name__}: expected JSON object, got {type(data).__name__}"
            )
        return event_cls(data)


# Global registry instance
_global_registry: Optional[EventDecoderRegistry] = None


def default_registry() -> EventDecoderRegistry:
    """Get or create the process-wide decoder registry."""
    global _global_registry
    if _global_registry is None:
        _global_registry = EventDecoderRegistry()
    return _global_registry
