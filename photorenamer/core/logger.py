"""Logging utilities for Photo Renamer."""

import os
import time
from typing import List, Optional, TextIO, Tuple, Union

from photorenamer.core.models import OperationResult


class BufferedLogger:
    """Buffered file logger with context manager support.

    Usage:
        with BufferedLogger("/path/to/logs") as logger:
            logger.log("Rename started")
            logger.log("Renamed: IMG_0001.jpg")
        # File is automatically closed
    """

    def __init__(self, output_dir: str, filename: str = "rename_log.txt"):
        """Initialize logger.

        Args:
            output_dir: Directory to write log file.
            filename: Name of log file (default: rename_log.txt).
        """
        self.output_dir = output_dir
        self.filename = filename
        self.filepath = os.path.join(output_dir, filename)
        self._handle: Optional[TextIO] = None

    def _open(self) -> None:
        """Open the log file for appending (lazy initialization)."""
        if self._handle is None:
            os.makedirs(self.output_dir, exist_ok=True)
            self._handle = open(self.filepath, "a", encoding="utf-8")

    def log(self, message: str) -> None:
        """Write a timestamped message to the log."""
        self._open()
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        self._handle.write(f"{timestamp} - {message}\n")

    def flush(self) -> None:
        if self._handle:
            self._handle.flush()

    def close(self) -> None:
        if self._handle:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "BufferedLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._handle is not None


class NullLogger:
    """A logger that does nothing - useful for testing or when logging is disabled."""

    def log(self, message: str) -> None:
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "NullLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        pass

    @property
    def is_open(self) -> bool:
        return True


def create_logger(output_dir: Optional[str], enabled: bool = True) -> Union[BufferedLogger, NullLogger]:
    """Create a logger instance.

    Args:
        output_dir: Directory for log file.
        enabled: If False (or no directory), returns a NullLogger.

    Returns:
        Configured logger instance.
    """
    if enabled and output_dir:
        return BufferedLogger(output_dir)
    return NullLogger()


def summarize_results(results: List[OperationResult]) -> Tuple[int, int, List[str]]:
    """Summarize a batch from its results alone.

    Returns:
        Tuple of (success_count, failure_count, failure_messages), where
        each message names the file and why it failed.
    """
    successes = 0
    messages = []
    for result in results:
        if result.success:
            successes += 1
        else:
            name = os.path.basename(result.source_path)
            messages.append(f"{name}: {result.error_message or 'Unknown error'}")
    return successes, len(results) - successes, messages


def write_batch_summary(
    output_dir: str,
    folder: str,
    results: List[OperationResult],
    elapsed_time: float,
    start_time: str,
    end_time: str,
    pattern_id: Optional[str] = None,
    filename: str = "summary.txt"
) -> str:
    """Write a summary of a rename batch.

    Returns:
        Path to summary file.
    """
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, filename)
    successes, failures, messages = summarize_results(results)

    if elapsed_time >= 60:
        minutes = int(elapsed_time // 60)
        seconds = int(elapsed_time % 60)
        duration = f"{minutes}m {seconds}s"
    else:
        duration = f"{elapsed_time:.1f}s"

    with open(filepath, "w", encoding="utf-8") as f:
        f.write("Photo Renamer - Rename Summary\n")
        f.write("=" * 40 + "\n\n")
        f.write(f"Folder:    {folder}\n")
        if pattern_id:
            f.write(f"Pattern:   {pattern_id}\n")
        f.write(f"Started:   {start_time}\n")
        f.write(f"Completed: {end_time}\n")
        f.write(f"Duration:  {duration}\n\n")

        f.write(f"Renamed:   {successes:,}\n")
        f.write(f"Failed:    {failures:,}\n")

        if successes:
            f.write("\nRenamed files:\n\n")
            for result in results:
                if result.success:
                    f.write(
                        f"    {os.path.basename(result.source_path)} -> "
                        f"{os.path.basename(result.target_path)}\n"
                    )

        if messages:
            f.write("\nFailures:\n\n")
            for message in messages:
                f.write(f"    {message}\n")

    return filepath
