"""
Mock MAUI oscilloscope for testing the driver and the REPL without hardware.

Usage:
    python -m maui_instruments.repl --mock
"""

import threading
from collections import defaultdict, deque
from contextlib import contextmanager

from .src.block import CHECKSUM_PLACEHOLDER, decode_block, encode_block
from .src.errors import ChannelError
from .src.terminal import ColorPrinter

# Smallest valid JPEG-looking payload; only the markers matter here
MOCK_SCREEN_IMAGE = b"\xff\xd8\xff\xe0MOCKSCREEN\xff\xd9"

MOCK_PANEL_SETUP = (
    b"' XStreamDSO ConfigurationVBScript ...\r\n"
    b"Set app = CreateObject(\"LeCroy.XStreamApplication\")\r\n"
    b"app.Acquisition.C1.VerScale = 0.05\r\n"
)


class MockMAUI:
    """
    In-memory stand-in for a connected ``LeCroy_MAUI``.

    Implements the three channel primitives plus ``transaction()``. Every
    call is appended to ``log`` as ``(kind, text)``. Queries are answered
    from answers queued with ``script()`` first, then from the fixed
    ``responses`` table, then from the simulated instrument state.
    """

    def __init__(self):
        self.log = []
        self.responses = {}
        self.panel_setup = MOCK_PANEL_SETUP
        self.screen_image = MOCK_SCREEN_IMAGE
        self.files = {}
        self.directories = set()
        self.vbs_directory = "\\"
        self.connected = True
        self._queues = defaultdict(deque)
        self._lock = threading.RLock()

    # ------------------------------------------
    # Channel primitives
    # ------------------------------------------
    @contextmanager
    def transaction(self):
        with self._lock:
            yield self

    def _check(self):
        if not self.connected:
            raise ChannelError("Instrument not connected.")

    def command(self, command):
        self._check()
        self.log.append(("command", command))
        if isinstance(command, (bytes, bytearray)):
            self._handle_block_command(bytes(command))
        else:
            self._handle_command(command)

    def send_command(self, command):
        self.command(command)

    def query(self, command):
        self._check()
        self.log.append(("query", command))
        response = self._scripted(command)
        if response is None:
            response = self._answer(command)
        if isinstance(response, bytes):
            response = response.decode("latin-1")
        return response.strip()

    def query_raw(self, command):
        self._check()
        self.log.append(("query_raw", command))
        response = self._scripted(command)
        if response is None:
            response = self._answer(command)
        if isinstance(response, str):
            response = response.encode("latin-1")
        return response

    def disconnect(self):
        self.connected = False

    def set_timeout(self, seconds):
        self.log.append(("timeout", seconds))

    def identify(self):
        return self.query("*IDN?")

    # ------------------------------------------
    # Helpers for tests
    # ------------------------------------------
    def script(self, query, *answers):
        """Queue answers for ``query``; each call consumes one."""
        self._queues[query].extend(answers)

    def calls(self, kind=None):
        return [text for k, text in self.log if kind is None or k == kind]

    # ------------------------------------------
    # Simulated instrument
    # ------------------------------------------
    def _scripted(self, command):
        if self._queues[command]:
            return self._queues[command].popleft()
        return self.responses.get(command)

    def _answer(self, command):
        if command == "*IDN?":
            return "LECROY,MOCK-MAUI,LCRY0000N00000,9.9.0"
        if command == "*OPC?":
            return "1"
        if command == "STST?":
            return "C1,HDD,AUTO,OFF,FORMAT,BINARY"
        if command == "PNSU?":
            return encode_block(self.panel_setup)
        if command == "SCDP?":
            return encode_block(self.screen_image)
        if command.startswith("TRANSFER_FILE? "):
            path = command.split("'")[1]
            if path not in self.files:
                return "#9000000000" + CHECKSUM_PLACEHOLDER.decode("ascii")
            return encode_block(self.files[path])
        return "0"

    def _handle_command(self, command):
        if command.startswith("VBS 'app.SaveRecall.Utilities.Directory="):
            self.vbs_directory = command.split('"')[1]
        elif command.startswith("VBS 'app.SaveRecall.Utilities.CreateDir'"):
            self.directories.add(self.vbs_directory)
        elif command.startswith("VBS 'app.SaveRecall.Utilities.DeleteAll'"):
            for path in [p for p in self.files if p.startswith(self.vbs_directory)]:
                del self.files[path]
        elif command.startswith("DELETE_FILE "):
            self.files.pop(command.split("'")[1], None)

    def _handle_block_command(self, command):
        block_start = command.index(b"#9")
        payload = decode_block(command[block_start:])
        if command.startswith(b"PNSU "):
            self.panel_setup = payload
        elif command.startswith(b"TRANSFER_FILE "):
            path = command[:block_start].split(b"'")[1].decode("latin-1")
            self.files[path] = payload


def get_mock_scope(verbose=True):
    if verbose:
        ColorPrinter.warning("Mock mode: no real instrument connected")
    return MockMAUI()
