"""Translate controller-side paths to the instrument's DOS path dialect."""

DEVICE_SEPARATOR = "\\"


def to_device_path(path: str, is_directory: bool = False) -> str:
    """
    Convert a path to the form the instrument expects in commands.

    Forward slashes become backslashes. Directories additionally start and
    end with exactly one backslash, so running the function twice gives the
    same result.

    Examples:
        >>> to_device_path("a/b/c", is_directory=True)
        '\\\\a\\\\b\\\\c\\\\'
        >>> to_device_path("", is_directory=True)
        '\\\\'
    """
    device_path = path.replace("/", DEVICE_SEPARATOR)
    if not is_directory:
        return device_path

    core = device_path.strip(DEVICE_SEPARATOR)
    if not core:
        return DEVICE_SEPARATOR
    return f"{DEVICE_SEPARATOR}{core}{DEVICE_SEPARATOR}"
