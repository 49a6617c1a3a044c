"""
This module provides file-based logging for command failures.

Console logging goes through loguru. In addition, when an error log directory
is configured, every failed ffmpeg invocation is appended to a plain-text
`error.txt` so the full captured output survives after the terminal scrollback
is gone.
"""

import threading
from pathlib import Path

from loguru import logger

from ..config.common import ERROR_LOG_FILE_NAME


class Log:
    """
    A base class for file log handlers.

    The log directory is created on the first write.
    """

    # A decorative separator line used in text-based logs for better readability.
    linesep_marker: str = "=" * 50

    def __init__(self, log_dir: Path):
        self.log_file_path: Path  # To be defined by the subclass.
        self.log_dir: Path = log_dir.resolve()

    def write(self, *messages: str):
        raise NotImplementedError("Subclasses must implement the write() method.")


class ErrorLog(Log):
    """
    Appends human-readable error records to a text file.

    Each `write` call produces one record followed by a separator line. Writes
    from concurrent workers are serialized by a process-wide lock so records
    never interleave.
    """

    _write_lock = threading.Lock()

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        """
        Appends one error record to the log file.

        Args:
            *error_messages: The parts of the record, written one per line.
        """
        if not error_messages:
            return

        content_to_write = "\n".join(error_messages) + "\n" + self.linesep_marker + "\n"

        try:
            with self._write_lock:
                self.log_dir.mkdir(parents=True, exist_ok=True)
                with self.log_file_path.open("a", encoding="utf-8") as f:
                    f.write(content_to_write)
        except OSError as e:
            # The record is still on the console; losing the file copy is not fatal.
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            for msg in error_messages:
                logger.error(f"  - {msg}")
