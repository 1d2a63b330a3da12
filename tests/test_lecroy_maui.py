"""
Test LeCroy_MAUI Driver
=======================
Command strings produced by the driver, checked against a mocked VISA
resource.
"""

from contextlib import contextmanager

import pytest

from maui_instruments import (
    InvalidExtension,
    PollConfig,
    ProtocolViolation,
    ValidationError,
)
from maui_instruments.src.block import encode_block


def sent(resource):
    return [c.args[0] for c in resource.write.call_args_list]


# ==========================================
# TRANSFERS THROUGH THE VISA SESSION
# ==========================================

def test_save_panel_setup_over_visa(scope, visa_resource, replies, tmp_path):
    replies.load(b"#9000000003abcffffffff\n")

    path = scope.save_panel_setup(tmp_path / "bench")

    assert path.read_bytes() == b"abc"
    assert sent(visa_resource) == ["PNSU?"]


def test_load_panel_setup_over_visa(scope, visa_resource, tmp_path):
    setup_file = tmp_path / "bench.lss"
    setup_file.write_bytes(b"abc")

    scope.load_panel_setup(setup_file)

    visa_resource.write_raw.assert_called_once_with(b"PNSU #9000000011abcffffffff\n")


def test_load_panel_setup_wrong_extension_never_writes(scope, visa_resource, tmp_path):
    with pytest.raises(InvalidExtension):
        scope.load_panel_setup(tmp_path / "foo.txt")

    visa_resource.write.assert_not_called()
    visa_resource.write_raw.assert_not_called()


def test_screen_capture_over_visa(scope, visa_resource, replies, tmp_path):
    replies.load(b"#9000000004\xff\xd8\xff\xd9ffffffff\n")

    path = scope.get_screen_capture(tmp_path / "screen")

    assert path.name == "screen.jpeg"
    assert path.read_bytes() == b"\xff\xd8\xff\xd9"
    assert sent(visa_resource) == [
        "HCSU DEV,JPEG,FORMAT,LANDSCAPE,BCKG,BLACK,DEST,REMOTE,AREA,FULLSCREEN",
        "SCDP?",
    ]


def test_screen_capture_keeps_newline_bytes(scope, replies, tmp_path):
    image = b"\xff\xd8" + b"A" * 10 + b"\n" + b"B" * 20 + b"\xff\xd9"
    replies.load(encode_block(image) + b"\n")

    path = scope.get_screen_capture(tmp_path / "screen")

    assert path.read_bytes() == image


@pytest.mark.parametrize(
    "method, args, expected",
    [
        ("delete_file_on_device", ("D:/old.trc",), ["DELETE_FILE DISK,HDD,FILE,'D:\\old.trc'"]),
        (
            "create_directory_on_device",
            ("D:/Waveforms",),
            [
                "VBS 'app.SaveRecall.Utilities.Directory=\"\\D:\\Waveforms\\\"'",
                "VBS 'app.SaveRecall.Utilities.CreateDir';",
            ],
        ),
    ],
)
def test_storage_housekeeping_holds_the_channel(scope, visa_resource, monkeypatch, method, args, expected):
    held = []
    hold = scope.transaction

    @contextmanager
    def tracking_transaction():
        with hold():
            held.append(method)
            yield scope

    monkeypatch.setattr(scope, "transaction", tracking_transaction)

    getattr(scope, method)(*args)

    assert held == [method]
    assert sent(visa_resource) == expected


def test_wait_operation_complete_over_visa(scope, visa_resource):
    visa_resource.query.side_effect = ["0\n", "0\n", "1\n"]

    scope.wait_operation_complete(PollConfig(poll_interval=0))

    assert visa_resource.query.call_count == 3


def test_wait_fill_complete_over_visa(scope, visa_resource):
    visa_resource.query.side_effect = ["C1,HDD,AUTO,FILL\n", "C1,HDD,AUTO,OFF\n"]

    scope.wait_fill_complete(PollConfig(poll_interval=0))

    assert visa_resource.query.call_count == 2


# ==========================================
# ACQUISITION
# ==========================================

def test_trigger_execution_commands(scope, visa_resource):
    scope.arm_acquisition()
    scope.force_trigger()
    scope.stop()
    scope.wait()
    scope.wait(10)

    assert sent(visa_resource) == ["ARM", "FRTR", "STOP", "WAIT", "WAIT 10"]


@pytest.mark.parametrize("mode", ["auto", "NORM", "Single", "STOP"])
def test_set_trigger_mode(scope, visa_resource, mode):
    scope.set_trigger_mode(mode)
    assert sent(visa_resource) == [f"TRMD {mode.upper()}"]


def test_set_trigger_mode_rejects_unknown(scope, visa_resource):
    with pytest.raises(ValidationError):
        scope.set_trigger_mode("NORMAL")
    visa_resource.write.assert_not_called()


def test_clock_commands(scope, visa_resource):
    scope.set_sample_clock("external")
    scope.set_reference_clock("INTERNAL")
    visa_resource.query.return_value = "EXTERNAL\n"

    assert scope.get_sample_clock_state() == "EXTERNAL"
    assert sent(visa_resource) == ["SAMPLE_CLOCK EXTERNAL", "REFERENCE_CLOCK INTERNAL"]


def test_auto_setup(scope, visa_resource):
    scope.auto_setup(1)
    scope.auto_setup(3, find=True)
    assert sent(visa_resource) == ["C1:ASET", "C3:ASET FIND"]


@pytest.mark.parametrize("channel", [0, 5, "C1"])
def test_invalid_channel_rejected_before_io(scope, visa_resource, channel):
    with pytest.raises(ValidationError):
        scope.set_volt_div(channel, 0.1)
    visa_resource.write.assert_not_called()


def test_attenuation(scope, visa_resource):
    scope.set_attenuation(2, 10)
    visa_resource.query.return_value = "10\n"

    assert scope.get_attenuation(2) == 10
    assert sent(visa_resource) == ["C2:ATTN 10"]
    visa_resource.query.assert_called_once_with("C2:ATTN?")


@pytest.mark.parametrize("attenuation", [0, 10001])
def test_attenuation_out_of_range(scope, visa_resource, attenuation):
    with pytest.raises(ValidationError):
        scope.set_attenuation(1, attenuation)


def test_bandwidth_limit_set(scope, visa_resource):
    scope.set_bandwidth_limit(1, 20_000_000)
    scope.set_bandwidth_limit(4, None)
    assert sent(visa_resource) == ["C1:BWL 20MHZ", "C4:BWL OFF"]


def test_bandwidth_limit_set_rejects_unknown_value(scope, visa_resource):
    with pytest.raises(ValidationError):
        scope.set_bandwidth_limit(1, 100_000_000)


@pytest.mark.parametrize(
    "reply, expected",
    [("OFF", None), ("200MHZ", 200_000_000), ("1GHZ", 1_000_000_000)],
)
def test_bandwidth_limit_get(scope, visa_resource, reply, expected):
    visa_resource.query.return_value = reply + "\n"
    assert scope.get_bandwidth_limit(1) == expected


def test_bandwidth_limit_get_unknown_reply(scope, visa_resource):
    visa_resource.query.return_value = "350MHZ\n"
    with pytest.raises(ProtocolViolation):
        scope.get_bandwidth_limit(1)


def test_vertical_and_horizontal_scale(scope, visa_resource):
    scope.set_vertical_offset(1, 0.25)
    scope.set_volt_div(2, 0.05)
    scope.set_time_div(1e-6)
    visa_resource.query.return_value = "5E-07\n"

    assert scope.get_time_div() == pytest.approx(5e-7)
    assert sent(visa_resource) == ["C1:OFST 0.25V", "C2:VDIV 0.05", "TDIV 1e-06"]


# ==========================================
# COMMUNICATION
# ==========================================

def test_read_remote_log(scope, visa_resource):
    scope.read_remote_log()
    scope.read_remote_log(clear_log=True)
    assert [c.args[0] for c in visa_resource.query.call_args_list] == ["CHL?", "CHL? CLR"]


@pytest.mark.parametrize(
    "reply, expected",
    [("OFF,YES", "off"), ("FD,YES", "full dialog"), ("EO,NO", "errors only")],
)
def test_get_log_level(scope, visa_resource, reply, expected):
    visa_resource.query.return_value = reply
    assert scope.get_log_level() == expected


def test_get_log_level_unknown(scope, visa_resource):
    visa_resource.query.return_value = "XX,YES"
    with pytest.raises(ProtocolViolation):
        scope.get_log_level()


def test_set_log_level(scope, visa_resource):
    scope.set_log_level("eo")
    assert sent(visa_resource) == ["CHLP EO,YES"]


# ==========================================
# VBS
# ==========================================

def test_vbs_command_and_queries(scope, visa_resource, replies):
    visa_resource.query.return_value = "0.05\n"
    replies.load(b"0.05\n")

    scope.vbs_command("app.Acquisition.C1.VerScale = 0.05")
    assert scope.vbs_query("app.Acquisition.C1.VerScale") == "0.05"
    assert scope.vbs_query_raw("app.Acquisition.C1.VerScale") == b"0.05"

    assert sent(visa_resource) == [
        "VBS'app.Acquisition.C1.VerScale = 0.05';",
        "VBS'Return=app.Acquisition.C1.VerScale';",
    ]
    visa_resource.query.assert_called_once_with("VBS'Return=app.Acquisition.C1.VerScale';")


# ==========================================
# WAVEFORM AUTOSAVE
# ==========================================

def test_autosave_settings(scope, visa_resource):
    scope.set_autosave_mode("fill")
    scope.set_autosave_format("BINARY")
    scope.set_autosave_trace("F1")
    scope.set_autosave_mode("OFF")

    assert sent(visa_resource) == [
        "STORE_SETUP AUTO,FILL",
        "STORE_SETUP FORMAT,BINARY",
        "STORE_SETUP F1,HDD",
        "STORE_SETUP AUTO,OFF",
    ]


@pytest.mark.parametrize("trace", ["C5", "M1", ""])
def test_autosave_trace_rejects_unknown(scope, visa_resource, trace):
    with pytest.raises(ValidationError):
        scope.set_autosave_trace(trace)


def test_autosave_path(scope, visa_resource):
    scope.set_autosave_path("D:/Waveforms/run1", "shot")

    assert sent(visa_resource) == [
        "VBS 'app.SaveRecall.Waveform.SaveTo=\"File\"'",
        "VBS 'app.SaveRecall.Waveform.WaveformDir=\"\\D:\\Waveforms\\run1\\\"'",
        "VBS 'app.SaveRecall.Waveform.TraceTitle=\"shot\"'",
    ]
