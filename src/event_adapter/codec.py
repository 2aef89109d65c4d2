# =============================================================================
# JSON Codec
# =============================================================================
# Parse/serialize facility shared by the normalizer and the encoder.
# Payloads are parsed into plain dict/list trees. Registered modules supply
# scalar deserializers (datetime, date, time) keyed by target type.
# =============================================================================

import dataclasses
import json
import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple, Union

from aws_lambda_powertools.utilities.data_classes.common import DictWrapper

logger = logging.getLogger(__name__)

# Codec features
ACCEPT_CASE_INSENSITIVE_PROPERTIES = "accept_case_insensitive_properties"

Deserializer = Callable[[Any], Any]


class CodecError(Exception):
    """Raised when a value cannot be parsed or serialized."""


@dataclass(frozen=True)
class CodecModule:
    """A named bundle of deserializers keyed by target type."""
    name: str
    deserializers: Dict[type, Deserializer]


class JsonCodec:
    """
    Configurable JSON codec.

    A fresh codec parses and serializes plain JSON and knows no scalar
    deserializers. Use ensure_configured() to apply the Lambda conventions.
    """

    def __init__(self):
        self._features = set()
        self._deserializers: Dict[type, Deserializer] = {}
        self._modules = []
        self.lock = threading.Lock()

    # ==========================================================================
    # Configuration
    # ==========================================================================

    def is_enabled(self, feature: str) -> bool:
        return feature in self._features

    def configure(self, feature: str, enabled: bool = True) -> "JsonCodec":
        if enabled:
            self._features.add(feature)
        else:
            self._features.discard(feature)
        return self

    def register_module(self, module: CodecModule) -> "JsonCodec":
        self._modules.append(module.name)
        self._deserializers.update(module.deserializers)
        return self

    @property
    def registered_modules(self) -> Tuple[str, ...]:
        return tuple(self._modules)

    def deserializer_for(self, target: type) -> Optional[Deserializer]:
        return self._deserializers.get(target)

    # ==========================================================================
    # Parse / Serialize
    # ==========================================================================

    def loads(self, data: Union[bytes, str]) -> Any:
        """Parse JSON bytes or text into a generic dict/list/scalar tree."""
        try:
            return json.loads(data)
        except (TypeError, ValueError) as e:
            raise CodecError(f"Invalid JSON: {e}") from e

    def dumps(self, value: Any) -> bytes:
        """Serialize a value to compact UTF-8 JSON bytes."""
        try:
            return json.dumps(
                value, ensure_ascii=False, separators=(",", ":"), default=self._default
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot serialize {type(value).__name__}: {e}") from e

    @staticmethod
    def _default(o: Any) -> Any:
        if isinstance(o, datetime):
            if o.tzinfo is None:
                o = o.replace(tzinfo=timezone.utc)
            return int(o.timestamp() * 1000)
        if isinstance(o, (date, time)):
            return o.isoformat()
        if isinstance(o, Decimal):
            return int(o) if o % 1 == 0 else float(o)
        if isinstance(o, DictWrapper):
            return o.raw_event
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return dataclasses.asdict(o)
        if isinstance(o, (bytes, bytearray)):
            return o.decode("utf-8")
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


# =============================================================================
# Modules
# =============================================================================

def _epoch_millis(millis: Union[int, float]) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _epoch_millis(value)
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return _epoch_millis(int(text))
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as e:
            raise CodecError(f"Invalid datetime: {value!r}") from e
    raise CodecError(f"Cannot convert {type(value).__name__} to datetime")


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise CodecError(f"Invalid date: {value!r}") from e


def _parse_time(value: Any) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError as e:
        raise CodecError(f"Invalid time: {value!r}") from e


def epoch_millis_module() -> CodecModule:
    """datetime from bare numeric epoch milliseconds (ISO strings also accepted)."""
    return CodecModule(name="epoch-millis", deserializers={datetime: _parse_datetime})


def iso_dates_module() -> CodecModule:
    """date and time from ISO-8601 strings."""
    return CodecModule(name="iso-dates", deserializers={date: _parse_date, time: _parse_time})


def ensure_configured(codec: JsonCodec) -> JsonCodec:
    """
    Apply the Lambda codec conventions exactly once.

    The case-insensitive feature flag doubles as the "already configured"
    marker. It is set last, under the codec lock, so a reader that sees
    the flag also sees the registered modules.
    """
    if codec.is_enabled(ACCEPT_CASE_INSENSITIVE_PROPERTIES):
        return codec
    with codec.lock:
        if not codec.is_enabled(ACCEPT_CASE_INSENSITIVE_PROPERTIES):
            codec.register_module(epoch_millis_module())
            codec.register_module(iso_dates_module())
            codec.configure(ACCEPT_CASE_INSENSITIVE_PROPERTIES, True)
            logger.debug(f"JSON codec configured with modules {codec.registered_modules}")
    return codec


# Global codec instance
_global_codec: Optional[JsonCodec] = None


def default_codec() -> JsonCodec:
    """Get or create the process-wide codec."""
    global _global_codec
    if _global_codec is None:
        _global_codec = JsonCodec()
    return _global_codec
