"""Terminal utility for colored output."""


class ColorPrinter:
    """
    Utility for printing colored text to the terminal using ANSI escape codes.

    The drivers only print through this class when they are created with
    ``verbose=True``; the REPL always prints.
    """

    # ANSI Color Codes
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    GREY = "\033[90m"
    RESET = "\033[0m"

    # Binary payloads are shortened to this many bytes in traffic lines
    TRAFFIC_PREVIEW = 48

    @staticmethod
    def info(message):
        """Print an informational message in blue."""
        print(f"{ColorPrinter.BLUE}[INFO] {message}{ColorPrinter.RESET}")

    @staticmethod
    def success(message):
        """Print a success message in green."""
        print(f"{ColorPrinter.GREEN}[SUCCESS] {message}{ColorPrinter.RESET}")

    @staticmethod
    def warning(message):
        """Print a warning message in yellow."""
        print(f"{ColorPrinter.YELLOW}[WARNING] {message}{ColorPrinter.RESET}")

    @staticmethod
    def error(message):
        """Print an error message in red."""
        print(f"{ColorPrinter.RED}[ERROR] {message}{ColorPrinter.RESET}")

    @staticmethod
    def cyan(message):
        """Print a message in cyan."""
        print(f"{ColorPrinter.CYAN}{message}{ColorPrinter.RESET}")

    @staticmethod
    def traffic(direction, message):
        """
        Print one line of SCPI traffic in grey.

        Args:
            direction (str): '>>' for controller to device, '<<' for replies.
            message (str|bytes): The command or response. Bytes are shown
                as a truncated repr with their total length.
        """
        if isinstance(message, (bytes, bytearray)):
            shown = bytes(message[: ColorPrinter.TRAFFIC_PREVIEW])
            suffix = "..." if len(message) > ColorPrinter.TRAFFIC_PREVIEW else ""
            message = f"{shown!r}{suffix} ({len(message)} bytes)"
        print(f"{ColorPrinter.GREY}{direction} {message}{ColorPrinter.RESET}")
