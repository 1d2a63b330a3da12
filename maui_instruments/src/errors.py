"""Exceptions raised by the MAUI oscilloscope driver."""


class MauiError(Exception):
    """Base class for all driver errors."""


class ChannelError(MauiError, ConnectionError):
    """Transport failure or instrument not connected. Never retried."""


class EncodingError(MauiError, ValueError):
    """Payload cannot be framed as a definite-length block."""


class DecodingError(MauiError, ValueError):
    """Response is not a well-formed definite-length block."""


class ValidationError(MauiError, ValueError):
    """Bad path, extension or parameter. Raised before any channel I/O."""


class InvalidExtension(ValidationError):
    """File does not carry the extension the operation requires."""


class DestinationExists(ValidationError, FileExistsError):
    """Local destination already exists and would be overwritten."""


class ProtocolViolation(MauiError):
    """The instrument answered with a value outside its documented set."""


class WaitTimeout(MauiError, TimeoutError):
    """A bounded completion wait ran out of time."""
