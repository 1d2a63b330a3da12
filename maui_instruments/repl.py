#!/usr/bin/env python3
"""
Interactive REPL for Teledyne LeCroy MAUI oscilloscopes.

Use to send raw commands, move panel setups and files, grab screenshots and
wait on the instrument from a terminal.
"""

import argparse
import cmd
import shlex
import sys
from typing import Optional

from maui_instruments import ColorPrinter, LeCroy_MAUI, PollConfig
from maui_instruments.mock_instruments import get_mock_scope
from maui_instruments.src import polling, transfer
from maui_instruments.src.errors import MauiError

FAILED = object()


class MauiRepl(cmd.Cmd):
    intro = "LeCroy MAUI REPL. Type 'help' for commands."
    prompt = "maui> "

    def __init__(self, scope):
        super().__init__()
        self.scope = scope

    # --------------------------
    # Core helpers
    # --------------------------
    def _parse_args(self, arg):
        try:
            return shlex.split(arg)
        except ValueError as exc:
            ColorPrinter.error(f"Parse error: {exc}")
            return []

    def _print_usage(self, lines):
        for line in lines:
            ColorPrinter.cyan(line)

    def _max_wait(self, args) -> Optional[float]:
        if not args:
            return None
        return float(args[0])

    def _run(self, func, *args):
        """Run one operation under the channel lock and report failures."""
        try:
            with self.scope.transaction():
                return func(self.scope, *args)
        except (MauiError, OSError, ValueError) as exc:
            ColorPrinter.error(f"{type(exc).__name__}: {exc}")
            return FAILED

    # --------------------------
    # Commands
    # --------------------------
    def do_idn(self, arg):
        "idn: query *IDN?"
        result = self._run(lambda scope: scope.identify())
        if result is not FAILED:
            ColorPrinter.cyan(result)

    def do_raw(self, arg):
        "raw <scpi>: send raw command; if it ends with ?, query and print"
        if not arg.strip():
            self._print_usage(["raw <scpi>", "  - example: raw TDIV?", "  - example: raw TRMD AUTO"])
            return
        cmd_str = arg.strip()
        if cmd_str.endswith("?"):
            result = self._run(lambda scope: scope.query(cmd_str))
            if result is not FAILED:
                ColorPrinter.cyan(result)
        else:
            self._run(lambda scope: scope.command(cmd_str))

    def do_setup(self, arg):
        "setup save|load <file>: save or load a .lss panel setup"
        args = self._parse_args(arg)
        if len(args) != 2 or args[0] not in ("save", "load"):
            self._print_usage(["setup save <file>", "setup load <file.lss>"])
            return
        if args[0] == "save":
            path = self._run(transfer.save_panel_setup, args[1])
            if path is not FAILED:
                ColorPrinter.success(f"Panel setup saved to {path}")
        elif self._run(transfer.load_panel_setup, args[1]) is not FAILED:
            ColorPrinter.info("Panel setup sent")

    def do_upload(self, arg):
        "upload <device_path> <local_file>: copy a local file to the scope"
        args = self._parse_args(arg)
        if len(args) != 2:
            self._print_usage(["upload <device_path> <local_file>", "  - example: upload D:/Setups/a.lss a.lss"])
            return
        self._run(transfer.transfer_file_to_device, args[0], args[1])

    def do_download(self, arg):
        "download <device_path> <local_file>: copy a file from the scope"
        args = self._parse_args(arg)
        if len(args) != 2:
            self._print_usage(["download <device_path> <local_file>"])
            return
        path = self._run(transfer.transfer_file_from_device, args[0], args[1])
        if path is not FAILED:
            ColorPrinter.success(f"Saved {path}")

    def do_screenshot(self, arg):
        "screenshot <file>: save a JPEG screen capture"
        args = self._parse_args(arg)
        if len(args) != 1:
            self._print_usage(["screenshot <file>"])
            return
        path = self._run(transfer.get_screen_capture, args[0])
        if path is not FAILED:
            ColorPrinter.success(f"Screen saved to {path}")

    def do_mkdir(self, arg):
        "mkdir <directory>: create a directory on the scope"
        args = self._parse_args(arg)
        if len(args) != 1:
            self._print_usage(["mkdir <directory>"])
            return
        self._run(transfer.create_directory_on_device, args[0])

    def do_rm(self, arg):
        "rm <device_path>: delete a file on the scope"
        args = self._parse_args(arg)
        if len(args) != 1:
            self._print_usage(["rm <device_path>"])
            return
        self._run(transfer.delete_file_on_device, args[0])

    def do_rmall(self, arg):
        "rmall <directory>: delete every file in a directory on the scope"
        args = self._parse_args(arg)
        if len(args) != 1:
            self._print_usage(["rmall <directory>"])
            return
        self._run(transfer.delete_all_files_in_directory_on_device, args[0])

    def do_opc(self, arg):
        "opc [max_wait_s]: wait for *OPC? to report completion"
        args = self._parse_args(arg)
        self._run(lambda scope: polling.wait_operation_complete(
            scope, PollConfig(polling.OPC_POLL.poll_interval, self._max_wait(args))))

    def do_fill(self, arg):
        "fill [max_wait_s]: wait for a FILL autosave to finish"
        args = self._parse_args(arg)
        self._run(lambda scope: polling.wait_fill_complete(
            scope, PollConfig(polling.FILL_POLL.poll_interval, self._max_wait(args))))

    def do_timeout(self, arg):
        "timeout <seconds>: set the I/O timeout"
        args = self._parse_args(arg)
        if len(args) != 1:
            self._print_usage(["timeout <seconds>"])
            return
        self._run(lambda scope: scope.set_timeout(float(args[0])))

    def do_exit(self, arg):
        "exit: quit the REPL"
        return True

    def do_quit(self, arg):
        "quit: quit the REPL"
        return True

    def do_EOF(self, arg):
        print()
        return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Interactive shell for LeCroy MAUI oscilloscopes")
    parser.add_argument("-r", "--resource", help="VISA resource, e.g. TCPIP0::192.168.1.10::inst0::INSTR")
    parser.add_argument("-t", "--timeout", type=int, default=5000, help="I/O timeout in ms")
    parser.add_argument("--visa-library", default="", help="pyvisa backend, e.g. @py")
    parser.add_argument("-v", "--verbose", action="store_true", help="print SCPI traffic")
    parser.add_argument("--mock", action="store_true", help="use a simulated instrument")
    args = parser.parse_args(argv)

    if args.mock:
        scope = get_mock_scope()
    elif args.resource:
        scope = LeCroy_MAUI(
            args.resource,
            timeout=args.timeout,
            visa_library=args.visa_library,
            verbose=args.verbose,
        )
        try:
            scope.connect()
        except MauiError as exc:
            ColorPrinter.error(str(exc))
            return 1
    else:
        parser.error("either --resource or --mock is required")

    try:
        MauiRepl(scope).cmdloop()
    finally:
        scope.disconnect()
    return 0


if __name__ == "__main__":
    sys.exit(main())
