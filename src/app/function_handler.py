# =============================================================================
# Function Handler
# =============================================================================
# Lambda entry adapter around a single business function:
# raw event -> normalize -> function -> encode -> runtime response.
# =============================================================================

import logging
from typing import Any, Callable, Mapping, Optional

from src.event_adapter.codec import CodecError, JsonCodec, default_codec
from src.event_adapter.declared_types import is_message_type
from src.event_adapter.encode import encode
from src.event_adapter.errors import EventAdapterError
from src.event_adapter.events import EventDecoderRegistry, default_registry
from src.event_adapter.message import Message
from src.event_adapter.normalize import normalize
from src.event_adapter.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class FunctionHandler:
    """
    Wraps a business function as a Lambda handler.

    Usage:
        def orders(event: SQSEvent) -> Dict[str, Any]:
            return {"processed": len(list(event.records))}

        handler = FunctionHandler(orders, input_type=SQSEvent)
        # Lambda handler setting: module.handler

    Functions declared with Message[X] receive the whole Message;
    otherwise they receive only the payload. A returned Message is encoded
    as-is, any other non-None result becomes its payload.
    """

    def __init__(
        self,
        function: Callable[[Any], Any],
        input_type: Any = None,
        output_type: Any = None,
        codec: JsonCodec = None,
        registry: EventDecoderRegistry = None,
        settings: Settings = None,
    ):
        self.function = function
        self.input_type = input_type
        self.output_type = output_type
        self.codec = codec or default_codec()
        self.registry = registry or default_registry()
        self.settings = settings or get_settings()
        logging.getLogger().setLevel(self.settings.log_level)

    def __call__(self, event: Any, context: Any = None) -> Any:
        return self.handle(self.to_bytes(event), context)

    def to_bytes(self, event: Any) -> bytes:
        """The Python runtime hands over parsed JSON; re-serialize it."""
        if isinstance(event, (bytes, bytearray)):
            return bytes(event)
        if isinstance(event, str):
            return event.encode("utf-8")
        return self.codec.dumps(event)

    def handle(self, payload: bytes, context: Any = None, headers: Optional[Mapping[str, Any]] = None) -> Any:
        """Run one invocation and return a JSON-compatible runtime response."""
        function_name = getattr(self.function, "__name__", repr(self.function))
        try:
            request = normalize(
                payload,
                headers,
                self.input_type,
                context,
                codec=self.codec,
                registry=self.registry,
                settings=self.settings,
            )
            argument = request if is_message_type(self.input_type) else request.payload
            result = self.function(argument)
            response = self.to_message(result)
            output = encode(request, response, self.output_type, codec=self.codec, settings=self.settings)
        except EventAdapterError as e:
            logger.exception(f"Event adapter error for function '{function_name}': {e}")
            raise
        return self.to_runtime_response(output)

    @staticmethod
    def to_message(result: Any) -> Optional[Message]:
        if result is None:
            return None
        if isinstance(result, Message):
            return result
        return Message(payload=result)

    def to_runtime_response(self, output: bytes) -> Any:
        """JSON output is returned parsed; anything else as text."""
        try:
            return self.codec.loads(output)
        except CodecError:
            return output.decode("utf-8", errors="replace")


def lambda_handler(function: Callable = None, **options: Any):
    """
    Decorator form of FunctionHandler.

    Usage:
        @lambda_handler(input_type=Dict[str, Any])
        def handler(request):
            ...
    """
    def decorator(func: Callable) -> FunctionHandler:
        return FunctionHandler(func, **options)
    if function is not None:
        return decorator(function)
    return decorator
