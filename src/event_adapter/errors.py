# =============================================================================
# Event Adapter Errors
# =============================================================================
# Every failure in normalization or encoding aborts the invocation.
# Callers should let these propagate to the Lambda runtime.
# =============================================================================


class EventAdapterError(Exception):
    """Base class for all event adapter failures."""


class ConfigurationError(EventAdapterError):
    """A recognized event family has no decoder registered."""


class DecodeError(EventAdapterError):
    """A typed event decoder could not convert the payload."""


class ParseError(EventAdapterError):
    """A generic payload could not be parsed as JSON."""


class SerializationError(EventAdapterError):
    """The outbound response could not be serialized."""


class StatusCodeError(EventAdapterError):
    """A statusCode response header is not a usable HTTP status."""
