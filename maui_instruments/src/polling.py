"""
Completion polling.

The instrument has no way to push events over the VISA session, so the
controller asks for status repeatedly until a terminal answer arrives.
Each wait is a small state machine: in progress, done, or error. A reply
outside the documented set is an error straight away and is never retried.
"""

import time
from dataclasses import dataclass
from typing import Optional

from .errors import ProtocolViolation, WaitTimeout


@dataclass(frozen=True)
class PollConfig:
    """
    Timing for a completion wait.

    Attributes:
        poll_interval: Seconds to sleep between status queries.
        max_wait: Give up with WaitTimeout after this many seconds.
            None waits forever, which is how the instrument is normally
            driven; the channel timeout is then the only way out.
    """
    poll_interval: float
    max_wait: Optional[float] = None


OPC_POLL = PollConfig(poll_interval=10e-6)
FILL_POLL = PollConfig(poll_interval=0.05)

OPC_QUERY = "*OPC?"
OPC_DONE = "1"
OPC_PENDING = "0"

STATUS_QUERY = "STST?"
AUTOSAVE_FIELD = 3
AUTOSAVE_DONE = "OFF"
AUTOSAVE_PENDING = {"FILL", "WRAP"}


def _poll(channel, query, classify, config, description):
    start = time.monotonic()
    while True:
        if classify(channel.query(query)):
            return
        if config.max_wait is not None and time.monotonic() - start >= config.max_wait:
            raise WaitTimeout(f"{description} not complete after {config.max_wait} s")
        time.sleep(config.poll_interval)


def wait_operation_complete(channel, config: PollConfig = OPC_POLL) -> None:
    """
    Block until ``*OPC?`` reports completion.

    Raises:
        ProtocolViolation: The reply was neither '0' nor '1'.
        WaitTimeout: ``config.max_wait`` elapsed first.
        ChannelError: The query itself failed.
    """
    def classify(response):
        response = response.strip()
        if response == OPC_DONE:
            return True
        if response == OPC_PENDING:
            return False
        raise ProtocolViolation(f"Invalid response from {OPC_QUERY}: {response!r}")

    _poll(channel, OPC_QUERY, classify, config, "Operation")


def wait_fill_complete(channel, config: PollConfig = FILL_POLL) -> None:
    """
    Block until the autosave mode reported by ``STST?`` returns to OFF.

    A FILL autosave switches itself off once the destination directory is
    full, so this is how the controller waits for a fill run to finish.

    Raises:
        ProtocolViolation: The reply has no autosave field, or the field is
            not one of OFF, FILL or WRAP.
        WaitTimeout: ``config.max_wait`` elapsed first.
        ChannelError: The query itself failed.
    """
    def classify(response):
        fields = response.strip().split(",")
        if len(fields) <= AUTOSAVE_FIELD:
            raise ProtocolViolation(f"Malformed {STATUS_QUERY} response: {response!r}")
        mode = fields[AUTOSAVE_FIELD].strip().upper()
        if mode == AUTOSAVE_DONE:
            return True
        if mode in AUTOSAVE_PENDING:
            return False
        raise ProtocolViolation(f"Unknown autosave mode in {STATUS_QUERY} response: {mode!r}")

    _poll(channel, STATUS_QUERY, classify, config, "Autosave fill")
