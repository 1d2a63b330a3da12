"""
Definite-length block framing used by MAUI file and setup transfers.

Wire layout::

    #9 <9 decimal digits> <payload bytes> <8 byte trailer>

The trailer is a checksum field, but the instrument family accepts the
literal ``ffffffff`` and this driver never computes or verifies a real
checksum. Replacing it with a CRC would break interoperability with the
device, so the placeholder is kept on purpose.
"""

from .errors import DecodingError, EncodingError

BLOCK_MARKER = b"#9"
LENGTH_DIGITS = 9
HEADER_LENGTH = len(BLOCK_MARKER) + LENGTH_DIGITS  # 11
CHECKSUM_PLACEHOLDER = b"ffffffff"
TRAILER_LENGTH = len(CHECKSUM_PLACEHOLDER)  # 8
MAX_PAYLOAD = 10**LENGTH_DIGITS - 1


def encode_block(payload: bytes, trailer: bytes = CHECKSUM_PLACEHOLDER) -> bytes:
    """
    Frame a payload as a definite-length block.

    Args:
        payload: Raw bytes to send.
        trailer: Bytes appended after the payload. Not counted in the
            length field.

    Returns:
        bytes: ``#9`` + zero-padded length + payload + trailer.

    Raises:
        EncodingError: If the payload does not fit the 9-digit length field.
    """
    size = len(payload)
    if size > MAX_PAYLOAD:
        raise EncodingError(
            f"Payload of {size} bytes exceeds the {LENGTH_DIGITS}-digit block length field"
        )
    return BLOCK_MARKER + b"%09d" % size + bytes(payload) + trailer


def frame_upload(content: bytes) -> bytes:
    """
    Frame file content for upload to the instrument.

    The device expects the checksum placeholder to be part of the declared
    length on uploads, so it is appended to the content before encoding.
    """
    return encode_block(bytes(content) + CHECKSUM_PLACEHOLDER, trailer=b"")


def decode_block(wire) -> bytes:
    """
    Strip the block header and trailer from a device response.

    Only the header marker and overall size are checked; the declared length
    and the trailer are not validated.

    Args:
        wire (bytes|str): Full response. Text is converted with latin-1 so
            every character maps back to one byte.

    Returns:
        bytes: The payload between the 11-byte header and the 8-byte trailer.

    Raises:
        DecodingError: If the response is too short or is not a ``#9`` block.
    """
    if isinstance(wire, str):
        wire = wire.encode("latin-1")

    if len(wire) < HEADER_LENGTH + TRAILER_LENGTH:
        raise DecodingError(
            f"Block response too short: {len(wire)} bytes, "
            f"need at least {HEADER_LENGTH + TRAILER_LENGTH}"
        )
    if not wire.startswith(BLOCK_MARKER):
        raise DecodingError(f"Expected block marker {BLOCK_MARKER!r}, got {wire[:2]!r}")

    length_field = wire[len(BLOCK_MARKER):HEADER_LENGTH]
    if not length_field.isdigit():
        raise DecodingError(f"Invalid block length field {length_field!r}")

    return bytes(wire[HEADER_LENGTH:len(wire) - TRAILER_LENGTH])
