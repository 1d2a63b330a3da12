import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import pyvisa

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from maui_instruments import LeCroy_MAUI
from maui_instruments.mock_instruments import MockMAUI


@pytest.fixture
def mock_scope():
    """Simulated instrument exposing the channel primitives."""
    return MockMAUI()


@pytest.fixture
def visa_resource(monkeypatch):
    """A MagicMock standing in for the pyvisa resource opened by connect()."""
    resource = MagicMock()
    resource.query.return_value = "0\n"
    rm = MagicMock()
    rm.open_resource.return_value = resource
    monkeypatch.setattr(pyvisa, "ResourceManager", MagicMock(return_value=rm))
    return resource


@pytest.fixture
def scope(visa_resource):
    """A connected LeCroy_MAUI whose connect-time traffic has been cleared."""
    driver = LeCroy_MAUI("TCPIP0::10.0.0.2::inst0::INSTR")
    driver.connect()
    visa_resource.reset_mock()
    yield driver
    driver.disconnect()



class ReplyBuffer:
    """
    Instrument output buffer with VISA read semantics: ``read_raw`` stops
    after the first read termination, ``read_bytes`` returns exactly
    ``count`` bytes unless ``break_on_termchar`` is set.
    """

    def __init__(self):
        self.data = b""

    def load(self, data):
        self.data += data

    def _take(self, size):
        chunk, self.data = self.data[:size], self.data[size:]
        return chunk

    def read_raw(self, size=None):
        end = self.data.find(b"\n")
        return self._take(len(self.data) if end < 0 else end + 1)

    def read_bytes(self, count, chunk_size=None, break_on_termchar=False):
        if break_on_termchar:
            end = self.data.find(b"\n", 0, count)
            if end >= 0:
                return self._take(end + 1)
        if len(self.data) < count:
            raise pyvisa.VisaIOError(pyvisa.constants.VI_ERROR_TMO)
        return self._take(count)


@pytest.fixture
def replies(visa_resource):
    """Feed instrument output to the mocked resource's read calls."""
    buffer = ReplyBuffer()
    visa_resource.read_raw.side_effect = buffer.read_raw
    visa_resource.read_bytes.side_effect = buffer.read_bytes
    return buffer
