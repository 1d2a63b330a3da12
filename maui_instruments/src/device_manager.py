import threading
from contextlib import contextmanager

import pyvisa

from .block import BLOCK_MARKER, LENGTH_DIGITS, TRAILER_LENGTH
from .errors import ChannelError, DecodingError
from .terminal import ColorPrinter


class DeviceManager:
    """
    Base class for SCPI instrument management using PyVISA.

    One instance owns one VISA session. All traffic goes through
    ``command``, ``query`` and ``query_raw``, which are serialized by a
    per-instance lock; ``transaction()`` holds that lock across several
    calls so a multi-step operation cannot be interleaved with another
    thread's traffic.
    """

    READ_TERMINATION = "\n"
    WRITE_TERMINATION = "\n"

    def __init__(self, resource_name, timeout=5000, visa_library="", verbose=False):
        """
        Args:
            resource_name (str): VISA resource string,
                e.g. 'TCPIP0::192.168.1.10::inst0::INSTR'.
            timeout (int): I/O timeout in milliseconds.
            visa_library (str): Backend passed to pyvisa.ResourceManager
                ('' for the system default, '@py' for pyvisa-py).
            verbose (bool): Print connection events and SCPI traffic.
        """
        self.resource_name = resource_name
        self.timeout = timeout
        self.visa_library = visa_library
        self.verbose = verbose
        self.rm = None
        self.instrument = None
        self._lock = threading.RLock()

    def connect(self):
        """Connects to the instrument."""
        try:
            if self.rm is None:
                self.rm = pyvisa.ResourceManager(self.visa_library)
            self.instrument = self.rm.open_resource(self.resource_name)
            self.instrument.timeout = self.timeout
            self.instrument.read_termination = self.READ_TERMINATION
            self.instrument.write_termination = self.WRITE_TERMINATION
        except pyvisa.VisaIOError as e:
            if self.verbose:
                ColorPrinter.error(f"Failed to connect to {self.resource_name}: {e}")
            raise ChannelError(f"Failed to connect to {self.resource_name}: {e}") from e
        if self.verbose:
            ColorPrinter.success(f"Connected to {self.resource_name}")

    def disconnect(self):
        """Disconnects from the instrument."""
        with self._lock:
            if self.instrument:
                self.instrument.close()
                self.instrument = None
                if self.verbose:
                    ColorPrinter.info(f"Disconnected from {self.resource_name}")

    @property
    def connected(self):
        return self.instrument is not None

    @contextmanager
    def transaction(self):
        """Hold the channel for the duration of the block."""
        with self._lock:
            yield self

    def _require_instrument(self):
        if not self.instrument:
            raise ChannelError("Instrument not connected.")
        return self.instrument

    def command(self, command):
        """
        Sends a command to the instrument without waiting for a response.

        Args:
            command (str|bytes): Command text. Bytes are written verbatim
                (followed by the write termination) so block payloads
                survive unchanged.
        """
        with self._lock:
            instrument = self._require_instrument()
            try:
                if isinstance(command, (bytes, bytearray)):
                    instrument.write_raw(bytes(command) + self.WRITE_TERMINATION.encode("ascii"))
                else:
                    instrument.write(command)
            except pyvisa.VisaIOError as e:
                if self.verbose:
                    ColorPrinter.error(f"Command failed: {e}")
                raise ChannelError(f"Command failed on {self.resource_name}: {e}") from e
            if self.verbose:
                ColorPrinter.traffic(">>", command)

    def send_command(self, command):
        """Alias of ``command``."""
        self.command(command)

    def query(self, command):
        """Sends a command and returns the response with whitespace stripped."""
        with self._lock:
            instrument = self._require_instrument()
            try:
                response = instrument.query(command)
            except pyvisa.VisaIOError as e:
                if self.verbose:
                    ColorPrinter.error(f"Query {command!r} failed: {e}")
                raise ChannelError(f"Query {command!r} failed on {self.resource_name}: {e}") from e
            if self.verbose:
                ColorPrinter.traffic(">>", command)
                ColorPrinter.traffic("<<", response.strip())
            return response.strip()

    def query_raw(self, command):
        """
        Sends a command and returns the raw response bytes.

        A reply starting with ``#9`` is read as a definite-length block:
        header, declared payload and trailer are read by count, so payload
        bytes equal to the read termination do not end the read. Any other
        reply is read up to the read termination. One trailing termination
        is removed; the rest of the response is returned untouched.

        Raises:
            ChannelError: VISA I/O failed or timed out.
            DecodingError: A block header carries a non-numeric length.
        """
        terminator = self.READ_TERMINATION.encode("ascii")
        with self._lock:
            instrument = self._require_instrument()
            try:
                instrument.write(command)
                response = instrument.read_bytes(len(BLOCK_MARKER), break_on_termchar=True)
                if response == BLOCK_MARKER:
                    response += self._read_block_body(instrument)
                    instrument.read_bytes(len(terminator), break_on_termchar=True)
                else:
                    if not response.endswith(terminator):
                        response += instrument.read_raw()
                    if response.endswith(terminator):
                        response = response[: -len(terminator)]
            except pyvisa.VisaIOError as e:
                if self.verbose:
                    ColorPrinter.error(f"Query {command!r} failed: {e}")
                raise ChannelError(f"Query {command!r} failed on {self.resource_name}: {e}") from e
            if self.verbose:
                ColorPrinter.traffic(">>", command)
                ColorPrinter.traffic("<<", response)
            return response

    def _read_block_body(self, instrument):
        """Read the length field, payload and trailer that follow '#9'."""
        length = instrument.read_bytes(LENGTH_DIGITS, break_on_termchar=True)
        if not length.isdigit():
            # Leave the input buffer empty for the next query
            if not length.endswith(self.READ_TERMINATION.encode("ascii")):
                instrument.read_raw()
            raise DecodingError(f"Block length field is not numeric: {length!r}")
        return length + instrument.read_bytes(int(length) + TRAILER_LENGTH)

    def set_timeout(self, seconds):
        """Sets the I/O timeout in seconds for the open session."""
        with self._lock:
            self.timeout = int(seconds * 1000)
            if self.instrument:
                self.instrument.timeout = self.timeout

    def identify(self):
        """Returns the *IDN? string."""
        return self.query("*IDN?")

    def clear_status(self):
        """Clears the instrument status byte."""
        self.command("*CLS")

    def reset(self):
        """Resets the instrument to its default state."""
        self.command("*RST")
        self.clear_status()
