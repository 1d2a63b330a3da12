"""
Block transfers between the controller and a MAUI oscilloscope.

Every function takes the channel as its first argument: any object with
``command``, ``query`` and ``query_raw`` (normally a ``LeCroy_MAUI``).
Validation of names, extensions and local destinations happens before the
first channel call, so a rejected request never touches the instrument.
"""

from pathlib import Path

from .block import decode_block, frame_upload
from .errors import DestinationExists, InvalidExtension, ValidationError
from .paths import to_device_path

PANEL_SETUP_EXTENSION = ".lss"
SCREEN_CAPTURE_EXTENSION = ".jpeg"

PANEL_SETUP_QUERY = "PNSU?"
PANEL_SETUP_COMMAND = "PNSU"

FILE_LOCATION = "DISK,HDD,FILE"

SCREEN_CAPTURE_SETUP = (
    "HCSU DEV,JPEG,FORMAT,LANDSCAPE,BCKG,BLACK,DEST,REMOTE,AREA,FULLSCREEN"
)
SCREEN_CAPTURE_QUERY = "SCDP?"

SAVE_RECALL_DIRECTORY = "VBS 'app.SaveRecall.Utilities.Directory=\"{}\"'"
SAVE_RECALL_CREATE_DIR = "VBS 'app.SaveRecall.Utilities.CreateDir';"
SAVE_RECALL_DELETE_ALL = "VBS 'app.SaveRecall.Utilities.DeleteAll'"


def _with_extension(filepath, extension):
    """Append ``extension`` unless the name already ends with it."""
    name = str(filepath)
    if not name.lower().endswith(extension):
        name += extension
    return Path(name)


def _require_extension(filepath, extension):
    if not str(filepath).lower().endswith(extension):
        raise InvalidExtension(
            f"{filepath} is not a {extension} file"
        )
    return Path(filepath)


def _new_destination(filepath):
    """Check that a local file can be created without overwriting anything."""
    path = Path(filepath)
    if path.exists():
        raise DestinationExists(f"{path} already exists")
    if not path.parent.is_dir():
        raise FileNotFoundError(f"Directory {path.parent} does not exist")
    return path


def _write_new(path, data):
    with open(path, "xb") as f:
        f.write(data)
    return path


def _quoted_device_path(device_filepath, is_directory=False):
    device_path = to_device_path(str(device_filepath), is_directory)
    if "'" in device_path:
        raise ValidationError(f"Device path may not contain quotes: {device_filepath}")
    return device_path


# ==========================================
# PANEL SETUP
# ==========================================

def save_panel_setup(channel, filepath):
    """
    Save the instrument's panel setup to a new local .lss file.

    Args:
        channel: Transaction channel.
        filepath (str|Path): Destination. '.lss' is appended if missing.

    Returns:
        Path: The file that was written.

    Raises:
        DestinationExists: The destination file already exists.
        DecodingError: The instrument did not answer with a block.
    """
    path = _new_destination(_with_extension(filepath, PANEL_SETUP_EXTENSION))
    setup = decode_block(channel.query_raw(PANEL_SETUP_QUERY))
    return _write_new(path, setup)


def load_panel_setup(channel, filepath):
    """
    Send a saved .lss panel setup to the instrument.

    Raises:
        InvalidExtension: The file name does not end in '.lss'.
        FileNotFoundError: The file does not exist.
    """
    path = _require_extension(filepath, PANEL_SETUP_EXTENSION)
    setup = path.read_bytes()
    channel.command(PANEL_SETUP_COMMAND.encode("ascii") + b" " + frame_upload(setup))


# ==========================================
# FILE TRANSFER
# ==========================================

def transfer_file_to_device(channel, device_filepath, controller_filepath):
    """
    Copy a local file onto the instrument's hard disk.

    Args:
        channel: Transaction channel.
        device_filepath (str): Destination on the instrument; '/' is
            accepted and translated.
        controller_filepath (str|Path): Existing local file.
    """
    device_path = _quoted_device_path(device_filepath)
    data = Path(controller_filepath).read_bytes()
    prefix = f"TRANSFER_FILE {FILE_LOCATION},'{device_path}',".encode("latin-1")
    channel.command(prefix + frame_upload(data))


def transfer_file_from_device(channel, device_filepath, controller_filepath):
    """
    Copy a file from the instrument's hard disk to a new local file.

    Returns:
        Path: The file that was written.

    Raises:
        DestinationExists: The local file already exists.
        DecodingError: The instrument did not answer with a block.
    """
    device_path = _quoted_device_path(device_filepath)
    path = _new_destination(controller_filepath)
    data = decode_block(channel.query_raw(f"TRANSFER_FILE? {FILE_LOCATION},'{device_path}'"))
    return _write_new(path, data)


def delete_file_on_device(channel, device_filepath):
    """Delete a single file on the instrument's hard disk."""
    device_path = _quoted_device_path(device_filepath)
    channel.command(f"DELETE_FILE {FILE_LOCATION},'{device_path}'")


def create_directory_on_device(channel, directory):
    """Create a directory on the instrument."""
    device_dir = to_device_path(str(directory), is_directory=True)
    channel.command(SAVE_RECALL_DIRECTORY.format(device_dir))
    channel.command(SAVE_RECALL_CREATE_DIR)


def delete_all_files_in_directory_on_device(channel, directory):
    """Delete every file inside a directory on the instrument."""
    device_dir = to_device_path(str(directory), is_directory=True)
    channel.command(SAVE_RECALL_DIRECTORY.format(device_dir))
    channel.command(SAVE_RECALL_DELETE_ALL)


# ==========================================
# SCREEN CAPTURE
# ==========================================

def get_screen_capture(channel, filepath):
    """
    Save a JPEG screenshot of the full instrument screen.

    Args:
        channel: Transaction channel.
        filepath (str|Path): Destination. '.jpeg' is appended if missing.

    Returns:
        Path: The file that was written.
    """
    path = _new_destination(_with_extension(filepath, SCREEN_CAPTURE_EXTENSION))
    channel.command(SCREEN_CAPTURE_SETUP)
    image = decode_block(channel.query_raw(SCREEN_CAPTURE_QUERY))
    return _write_new(path, image)
