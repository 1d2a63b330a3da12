__version__ = "1.0.0"

from .src.device_manager import DeviceManager
from .src.lecroy_maui import LeCroy_MAUI
from .src.polling import PollConfig
from .src.terminal import ColorPrinter
from .src.errors import (
    MauiError,
    ChannelError,
    EncodingError,
    DecodingError,
    ValidationError,
    InvalidExtension,
    DestinationExists,
    ProtocolViolation,
    WaitTimeout,
)

__all__ = [
    "DeviceManager",
    "LeCroy_MAUI",
    "PollConfig",
    "ColorPrinter",
    "MauiError",
    "ChannelError",
    "EncodingError",
    "DecodingError",
    "ValidationError",
    "InvalidExtension",
    "DestinationExists",
    "ProtocolViolation",
    "WaitTimeout",
]
