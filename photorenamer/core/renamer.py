"""File rename operations for Photo Renamer.

Renames files in batches, preserving timestamps and permission bits, and
records every completed batch in an UndoLog so it can be reverted.
"""

import logging
import os
import stat
import threading
from datetime import datetime
from typing import List, Optional

import filedate

from photorenamer.core.logger import BufferedLogger
from photorenamer.core.models import (
    ErrorKind, OperationRecord, OperationResult, ProgressCallback, RenameOperation
)
from photorenamer.core.undo import UndoLog

logger = logging.getLogger(__name__)

MSG_SOURCE_MISSING = "Source file does not exist."
MSG_TARGET_EXISTS = "Target file already exists."
MSG_ACCESS_DENIED = "Access denied. Check file permissions."
MSG_CANCELLED = "Cancelled before this file was renamed."

# filedate can only set the creation time on Windows
SETS_CREATION_TIME = os.name == "nt"


class FileRenamer:
    """Renames files and keeps an undo history of completed batches.

    Callers must not run two batches (or a batch and an undo) at the same
    time on one renamer: the undo log is a plain stack.

    Usage:
        renamer = FileRenamer(undo_log=UndoLog())

        results = renamer.rename_batch([
            RenameOperation("/photos/IMG_0001.jpg", "/photos/2023-06-15_14-30.jpg"),
        ])
        failed = [r for r in results if not r.success]

        if renamer.can_undo():
            renamer.undo_last()
    """

    def __init__(
        self,
        undo_log: Optional[UndoLog] = None,
        logger: Optional[BufferedLogger] = None,
        verbose: bool = False
    ):
        """Initialize renamer.

        Args:
            undo_log: History that completed batches are pushed to.
                A fresh in-memory log is used if not given.
            logger: Optional file logger for detailed logging.
            verbose: If True, log every rename. If False, only failures.
        """
        self.undo_log = undo_log if undo_log is not None else UndoLog()
        self.logger = logger
        self.verbose = verbose
        self.last_undo_results: List[OperationResult] = []

    def rename_one(self, source: str, target: str) -> OperationResult:
        """Rename a single file, keeping its timestamps and permissions.

        Never overwrites an existing target. If the move itself fails
        nothing has changed; no rollback is attempted. A failure after the
        move is reported with moved=True.

        Args:
            source: Current path of the file.
            target: New path for the file.

        Returns:
            OperationResult describing the outcome.
        """
        if not os.path.exists(source):
            return self._fail(source, target, MSG_SOURCE_MISSING, ErrorKind.SOURCE_MISSING)

        if os.path.exists(target):
            return self._fail(source, target, MSG_TARGET_EXISTS, ErrorKind.TARGET_EXISTS)

        moved = False
        try:
            st = os.stat(source)
            created = filedate.File(source).get()["created"] if SETS_CREATION_TIME else None

            os.rename(source, target)
            moved = True

            # Not every filesystem keeps these across a move. filedate works in
            # whole seconds, so utime must run after it.
            if created is not None:
                filedate.File(target).set(created=created)
            os.utime(target, ns=(st.st_atime_ns, st.st_mtime_ns))
            os.chmod(target, stat.S_IMODE(st.st_mode))
        except PermissionError as e:
            return self._fail(source, target, MSG_ACCESS_DENIED, ErrorKind.ACCESS_DENIED, e, moved)
        except OSError as e:
            return self._fail(
                source, target, f"File operation failed: {e}", ErrorKind.IO_FAILURE, e, moved
            )
        except Exception as e:
            return self._fail(source, target, str(e), ErrorKind.UNKNOWN, e, moved)

        if self.logger and self.verbose:
            self.logger.log(f"Renamed: {source} -> {target}")

        return OperationResult.succeeded(source, target)

    def _fail(
        self,
        source: str,
        target: str,
        message: str,
        kind: ErrorKind,
        error: Optional[BaseException] = None,
        moved: bool = False
    ) -> OperationResult:
        logger.warning(f"Rename failed ({kind.value}): {source} -> {target}: {error or message}")
        if self.logger:
            self.logger.log(f"Error: {message} ({source} -> {target})")
        return OperationResult.failed(source, target, message, kind, error, moved)

    def rename_batch(
        self,
        operations: List[RenameOperation],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> List[OperationResult]:
        """Rename files in order, continuing past individual failures.

        If at least one file was moved, the batch is pushed to the undo log
        once all operations have been attempted. That includes files whose
        timestamps or permissions could not be restored after the move.

        Args:
            operations: Renames to perform, in order.
            on_progress: Optional callback for progress updates.
            cancel_event: Optional threading.Event for cooperative
                cancellation. Checked between files; remaining operations
                get CANCELLED results.

        Returns:
            One OperationResult per operation, in the same order.
        """
        results: List[OperationResult] = []
        inverses: List[RenameOperation] = []
        total = len(operations)
        cancelled = False

        for i, operation in enumerate(operations):
            if not cancelled and cancel_event and cancel_event.is_set():
                cancelled = True
                logger.info(f"Rename batch cancelled after {i} of {total} files")

            if cancelled:
                results.append(OperationResult.failed(
                    operation.source_path, operation.target_path,
                    MSG_CANCELLED, ErrorKind.CANCELLED
                ))
                continue

            result = self.rename_one(operation.source_path, operation.target_path)
            results.append(result)

            # A file that moved but lost its timestamps still has to be undoable
            if result.success or result.moved:
                inverses.append(operation.inverse())

            if on_progress:
                on_progress(i + 1, total, f"Renaming: {os.path.basename(operation.source_path)}")

        success_count = sum(1 for r in results if r.success)
        failure_count = len(results) - success_count

        if inverses:
            self.undo_log.push(OperationRecord(
                timestamp=datetime.now(),
                operations=inverses,
                success_count=success_count,
                failure_count=failure_count
            ))

        if self.logger:
            self.logger.log(f"Batch complete: {success_count} renamed, {failure_count} failed")

        return results

    def can_undo(self) -> bool:
        return self.undo_log.can_undo()

    def undo_last(self, on_progress: Optional[ProgressCallback] = None) -> bool:
        """Revert the most recent batch.

        The record is removed from the log even if some inverse renames
        fail; the per-file outcomes are kept in last_undo_results.

        Args:
            on_progress: Optional callback for progress updates.

        Returns:
            True if every file was renamed back, False if nothing could be
            undone or any inverse rename failed.
        """
        self.last_undo_results = []

        record = self.undo_log.pop()
        if record is None:
            logger.info(f"Nothing to undo ({ErrorKind.NOTHING_TO_UNDO.value})")
            return False

        total = len(record.operations)
        for i, operation in enumerate(record.operations):
            result = self.rename_one(operation.source_path, operation.target_path)
            self.last_undo_results.append(result)

            if on_progress:
                on_progress(i + 1, total, f"Undoing: {os.path.basename(operation.source_path)}")

        all_success = all(r.success for r in self.last_undo_results)

        if self.logger:
            undone = sum(1 for r in self.last_undo_results if r.success)
            self.logger.log(f"Undo complete: {undone} of {total} files restored")
        if not all_success:
            logger.warning("Undo partially failed; some files were not restored")

        return all_success
