"""Domain-specific errors for bluezevents."""


class BluezEventsError(Exception):
    """Base error for bluezevents."""


class MessageDecodeError(BluezEventsError):
    """Raised when a bus message does not have the PropertiesChanged shape."""


class CaptureLoadError(BluezEventsError):
    """Raised when a capture file cannot be found or read."""


class CaptureValidationError(BluezEventsError):
    """Raised when a capture file does not conform to schema or value types."""
