"""
Logger utility for the Banker's Safety Checker.

Diagnostics go to stderr (or a supplied stream) so that standard output
carries only the evaluation report.
"""

import sys
from typing import Optional, TextIO
from datetime import datetime


class CheckerLogger:
    """
    Logger for parse failures and evaluation diagnostics.

    Format: "[LEVEL] message" for error, warning and debug; info is unprefixed.
    """

    def __init__(
        self,
        verbose: bool = False,
        log_file: Optional[str] = None,
        stream: Optional[TextIO] = None
    ):
        """
        Initialize logger.

        Args:
            verbose: Enable debug output
            log_file: Optional file path for logging
            stream: Console stream (defaults to sys.stderr at log time)
        """
        self.verbose = verbose
        self.log_file = log_file
        self.stream = stream
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Safety Check Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        stream = self.stream if self.stream is not None else sys.stderr
        print(formatted, file=stream)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def debug(self, message: str) -> None:
        self.log(message, "debug")

    def warning(self, message: str) -> None:
        self.log(message, "warning")

    def error(self, message: str) -> None:
        self.log(message, "error")

    def log_safety(self, context: str, safe: bool, sequence) -> None:
        """
        Log the outcome of a safety check (debug only).

        Args:
            context: When the check ran (e.g. "before request")
            safe: Safety verdict
            sequence: Virtual completion order, or None when unsafe
        """
        if safe:
            seq_str = " -> ".join(f"P{pid}" for pid in sequence) or "(no processes)"
            self.debug(f"Safety check {context}: SAFE (sequence: {seq_str})")
        else:
            self.debug(f"Safety check {context}: UNSAFE")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()


class _NullLogger(CheckerLogger):
    """Logger that discards every message."""

    def __init__(self):
        super().__init__(verbose=False)

    def log(self, message: str, level: str = "info") -> None:
        return


NULL_LOGGER = _NullLogger()
