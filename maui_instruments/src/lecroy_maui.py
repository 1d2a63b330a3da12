# Teledyne LeCroy MAUI oscilloscopes
"""
Driver for Teledyne LeCroy oscilloscopes running the MAUI user interface
(WaveRunner, WavePro, HDO and similar).
Instrument Type: Digital Oscilloscope

Protocol: LeCroy remote commands over VISA (VICP/LXI/USB-TMC), plus VBS
automation commands. Based on the MAUI Remote Control and Automation manual.
"""

from . import polling, transfer
from .device_manager import DeviceManager
from .errors import ChannelError, ProtocolViolation, ValidationError
from .paths import to_device_path


class LeCroy_MAUI(DeviceManager):
    """
    Driver for Teledyne LeCroy MAUI oscilloscopes.

    Usage:
        >>> with LeCroy_MAUI("TCPIP0::192.168.1.10::inst0::INSTR") as scope:
        ...     scope.save_panel_setup("bench")
        ...     scope.get_screen_capture("screen")
    """

    # Applied on connect. The mask values are the ones the instrument is
    # known to work with; see the *ESE and INE entries of the manual.
    COMM_HEADER_OFF = "CHDR OFF"
    STANDARD_EVENT_MASK = 0b1111_1111
    INTERNAL_STATE_MASK = 0b0111_1111_1101_1111

    CHANNELS = (1, 2, 3, 4)

    TRACES = ("C1", "C2", "C3", "C4", "F1", "F2", "F3", "F4", "ALL_DISPLAYED")

    # BWL? reply token -> limit in Hz (None means no limit)
    BANDWIDTH_LIMITS = {
        "OFF": None,
        "20MHZ": 20_000_000,
        "200MHZ": 200_000_000,
        "500MHZ": 500_000_000,
        "1GHZ": 1_000_000_000,
        "2GHZ": 2_000_000_000,
        "3GHZ": 3_000_000_000,
        "4GHZ": 4_000_000_000,
        "6GHZ": 6_000_000_000,
    }

    # CHLP token -> description
    LOG_LEVELS = {
        "OFF": "off",
        "FD": "full dialog",
        "EO": "errors only",
    }

    TRIGGER_MODES = ("AUTO", "NORM", "SINGLE", "STOP")
    AUTOSAVE_MODES = ("FILL", "WRAP", "OFF")
    AUTOSAVE_FORMATS = ("ASCII", "BINARY")
    CLOCK_SOURCES = ("INTERNAL", "EXTERNAL")

    ATTENUATION_RANGE = (1, 10000)

    def __enter__(self):
        """Context manager entry: connect and configure the session."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        """Context manager exit: close the session."""
        self.disconnect()

    def connect(self):
        """
        Connect and put the remote interface into the state the driver
        relies on: no command headers in replies, and all standard and
        internal state events reflected in the status byte.
        """
        super().connect()
        try:
            with self.transaction():
                self.command(self.COMM_HEADER_OFF)
                self.command(f"*ESE {self.STANDARD_EVENT_MASK}")
                self.command(f"INE {self.INTERNAL_STATE_MASK}")
        except ChannelError:
            self.disconnect()
            raise

    # ==========================================
    # INTERNAL HELPERS
    # ==========================================

    def _validate_channel(self, channel):
        if channel not in self.CHANNELS:
            raise ValidationError(
                f"Invalid channel {channel}. Must be one of: {list(self.CHANNELS)}"
            )

    def _validate_choice(self, name, value, choices):
        value = str(value).upper()
        if value not in choices:
            raise ValidationError(f"Invalid {name} {value!r}. Must be one of: {list(choices)}")
        return value

    # ==========================================
    # SYNCHRONIZATION
    # ==========================================

    def wait_operation_complete(self, config=polling.OPC_POLL):
        """Block until *OPC? reports that pending operations are done."""
        with self.transaction():
            polling.wait_operation_complete(self, config)

    def wait_fill_complete(self, config=polling.FILL_POLL):
        """
        Block until a FILL autosave has finished, i.e. the autosave mode
        went back to OFF because the directory is full or it was stopped.
        """
        with self.transaction():
            polling.wait_fill_complete(self, config)

    # ==========================================
    # PANEL SETUP
    # ==========================================

    def save_panel_setup(self, filepath):
        """Save the panel setup to a new local .lss file."""
        with self.transaction():
            return transfer.save_panel_setup(self, filepath)

    def load_panel_setup(self, filepath):
        """Load a local .lss panel setup onto the instrument."""
        with self.transaction():
            transfer.load_panel_setup(self, filepath)

    # ==========================================
    # STORAGE
    # ==========================================

    def transfer_file_to_device(self, device_filepath, controller_filepath):
        """Copy a local file to the instrument's hard disk."""
        with self.transaction():
            transfer.transfer_file_to_device(self, device_filepath, controller_filepath)

    def transfer_file_from_device(self, device_filepath, controller_filepath):
        """Copy a file from the instrument's hard disk to a new local file."""
        with self.transaction():
            return transfer.transfer_file_from_device(self, device_filepath, controller_filepath)

    def delete_file_on_device(self, device_filepath):
        """Delete a single file on the instrument's hard disk."""
        with self.transaction():
            transfer.delete_file_on_device(self, device_filepath)

    def create_directory_on_device(self, directory):
        """Create a directory on the instrument through SaveRecall."""
        with self.transaction():
            transfer.create_directory_on_device(self, directory)

    def delete_all_files_in_directory_on_device(self, directory):
        """Delete every file inside a directory on the instrument."""
        with self.transaction():
            transfer.delete_all_files_in_directory_on_device(self, directory)

    def get_screen_capture(self, filepath):
        """Save a full-screen JPEG screenshot to a new local file."""
        with self.transaction():
            return transfer.get_screen_capture(self, filepath)

    # ==========================================
    # TRIGGER EXECUTION
    # ==========================================

    def arm_acquisition(self):
        """Arm the scope; forces a single acquisition if already armed."""
        self.command("ARM")

    def force_trigger(self):
        """Force one acquisition when in an active trigger mode."""
        self.command("FRTR")

    def stop(self):
        """Stop acquiring immediately."""
        self.command("STOP")

    def wait(self, timeout=None):
        """
        Make the instrument hold off new commands until the current
        acquisition completes.

        Args:
            timeout (float|None): Seconds after which the instrument stops
                waiting. None or 0 waits indefinitely.
        """
        if timeout:
            self.command(f"WAIT {int(timeout)}")
        else:
            self.command("WAIT")

    def set_trigger_mode(self, mode):
        """Set trigger mode: AUTO, NORM, SINGLE or STOP."""
        mode = self._validate_choice("trigger mode", mode, self.TRIGGER_MODES)
        self.command(f"TRMD {mode}")

    def get_trigger_mode(self):
        return self.query("TRMD?")

    # ==========================================
    # CLOCKS
    # ==========================================

    def get_sample_clock_state(self):
        """Returns 'INTERNAL' or 'EXTERNAL'."""
        return self.query("SAMPLE_CLOCK?")

    def get_reference_clock_state(self):
        """Returns 'INTERNAL' or 'EXTERNAL'."""
        return self.query("REFERENCE_CLOCK?")

    def set_sample_clock(self, source):
        source = self._validate_choice("clock source", source, self.CLOCK_SOURCES)
        self.command(f"SAMPLE_CLOCK {source}")

    def set_reference_clock(self, source):
        source = self._validate_choice("clock source", source, self.CLOCK_SOURCES)
        self.command(f"REFERENCE_CLOCK {source}")

    # ==========================================
    # VERTICAL & HORIZONTAL
    # ==========================================

    def auto_setup(self, channel, find=False):
        """
        Run AUTO_SETUP. With ``find`` only gain and offset of ``channel``
        are adjusted; otherwise timebase and trigger are set up too.
        """
        self._validate_channel(channel)
        suffix = " FIND" if find else ""
        self.command(f"C{channel}:ASET{suffix}")

    def set_attenuation(self, channel, attenuation):
        """Set the probe attenuation factor (1 to 10000)."""
        self._validate_channel(channel)
        low, high = self.ATTENUATION_RANGE
        if not low <= attenuation <= high:
            raise ValidationError(
                f"Attenuation factor {attenuation} is out of range ({low} to {high})"
            )
        self.command(f"C{channel}:ATTN {attenuation}")

    def get_attenuation(self, channel):
        self._validate_channel(channel)
        return int(float(self.query(f"C{channel}:ATTN?")))

    def set_bandwidth_limit(self, channel, limit_hz=None):
        """
        Enable a bandwidth-limiting filter on a channel.

        Args:
            channel (int): Channel number (1-4).
            limit_hz (int|None): One of the limits in BANDWIDTH_LIMITS,
                or None to switch the filter off.
        """
        self._validate_channel(channel)
        tokens = {hz: token for token, hz in self.BANDWIDTH_LIMITS.items()}
        if limit_hz not in tokens:
            allowed = [hz for hz in tokens if hz is not None]
            raise ValidationError(
                f"{limit_hz} is not a valid bandwidth limit. Must be None or one of: {allowed}"
            )
        self.command(f"C{channel}:BWL {tokens[limit_hz]}")

    def get_bandwidth_limit(self, channel):
        """Returns the bandwidth limit in Hz, or None when the filter is off."""
        self._validate_channel(channel)
        token = self.query(f"C{channel}:BWL?").upper()
        if token not in self.BANDWIDTH_LIMITS:
            raise ProtocolViolation(f"Device returned invalid bandwidth limit value: {token}")
        return self.BANDWIDTH_LIMITS[token]

    def set_vertical_offset(self, channel, offset):
        """
        Set the DC offset at the probe tip in volts. Out-of-range values
        are clamped by the instrument.
        """
        self._validate_channel(channel)
        self.command(f"C{channel}:OFST {offset}V")

    def get_vertical_offset(self, channel):
        self._validate_channel(channel)
        return float(self.query(f"C{channel}:OFST?"))

    def set_time_div(self, time_div):
        """Set the timebase in seconds per division (rounded by the device)."""
        self.command(f"TDIV {time_div}")

    def get_time_div(self):
        return float(self.query("TDIV?"))

    def set_volt_div(self, channel, volt_div):
        """Set the vertical scale in volts per division (rounded by the device)."""
        self._validate_channel(channel)
        self.command(f"C{channel}:VDIV {volt_div}")

    def get_volt_div(self, channel):
        self._validate_channel(channel)
        return float(self.query(f"C{channel}:VDIV?"))

    # ==========================================
    # COMMUNICATION
    # ==========================================

    def read_remote_log(self, clear_log=False):
        """Return the remote control log, optionally clearing it afterwards."""
        return self.query("CHL? CLR" if clear_log else "CHL?")

    def get_log_level(self):
        """Return the remote log level as 'off', 'full dialog' or 'errors only'."""
        token = self.query("CHLP?").split(",")[0].strip().upper()
        if token not in self.LOG_LEVELS:
            raise ProtocolViolation(f"Unrecognized log level value: {token}")
        return self.LOG_LEVELS[token]

    def set_log_level(self, level):
        """Set the remote log level: 'OFF', 'EO' (errors only) or 'FD' (full dialog)."""
        level = self._validate_choice("log level", level, self.LOG_LEVELS)
        self.command(f"CHLP {level},YES")

    # ==========================================
    # VBS AUTOMATION
    # ==========================================

    def vbs_command(self, vbs_cmd):
        """Run a VBS automation statement."""
        self.command(f"VBS'{vbs_cmd}';")

    def vbs_query(self, vbs_cmd):
        """
        Evaluate a VBS expression and return the result as text.
        Omit the 'Return=' part; it is added here.
        """
        return self.query(f"VBS'Return={vbs_cmd}';")

    def vbs_query_raw(self, vbs_cmd):
        """Same as vbs_query but returns the raw reply bytes."""
        return self.query_raw(f"VBS'Return={vbs_cmd}';")

    # ==========================================
    # WAVEFORM AUTOSAVE
    # ==========================================

    def set_autosave_mode(self, mode):
        """
        Set the autosave mode. FILL and WRAP start saving immediately;
        OFF stops it.
        """
        mode = self._validate_choice("autosave mode", mode, self.AUTOSAVE_MODES)
        self.command(f"STORE_SETUP AUTO,{mode}")

    def set_autosave_format(self, fmt):
        """Set the saved waveform file format: ASCII or BINARY."""
        fmt = self._validate_choice("autosave format", fmt, self.AUTOSAVE_FORMATS)
        self.command(f"STORE_SETUP FORMAT,{fmt}")

    def set_autosave_trace(self, trace):
        """Select the trace (channel or function) that autosave writes to disk."""
        trace = self._validate_choice("trace", trace, self.TRACES)
        self.command(f"STORE_SETUP {trace},HDD")

    def set_autosave_path(self, directory, trace_title):
        """Save waveforms to files in ``directory`` named after ``trace_title``."""
        device_dir = to_device_path(str(directory), is_directory=True)
        with self.transaction():
            self.command("VBS 'app.SaveRecall.Waveform.SaveTo=\"File\"'")
            self.command(f"VBS 'app.SaveRecall.Waveform.WaveformDir=\"{device_dir}\"'")
            self.command(f"VBS 'app.SaveRecall.Waveform.TraceTitle=\"{trace_title}\"'")
