"""Undo history for rename batches.

The history is a stack of OperationRecords. It can optionally be mirrored
to a JSON journal so a later run can still undo the last batch.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from typing import Any, Dict, List, Optional

# Use orjson for faster JSON parsing if available
try:
    import orjson
    _USE_ORJSON = True
except ImportError:
    _USE_ORJSON = False

from photorenamer.core.models import OperationRecord, RenameOperation

logger = logging.getLogger(__name__)

JOURNAL_VERSION = 1


def _record_to_dict(record: OperationRecord) -> Dict[str, Any]:
    return {
        "timestamp": record.timestamp.isoformat(),
        "success_count": record.success_count,
        "failure_count": record.failure_count,
        "operations": [
            {"source": op.source_path, "target": op.target_path}
            for op in record.operations
        ],
    }


def _record_from_dict(data: Dict[str, Any]) -> OperationRecord:
    return OperationRecord(
        timestamp=datetime.fromisoformat(data["timestamp"]),
        success_count=data.get("success_count", 0),
        failure_count=data.get("failure_count", 0),
        operations=[
            RenameOperation(source_path=op["source"], target_path=op["target"])
            for op in data.get("operations", [])
        ],
    )


class UndoLog:
    """Stack of completed rename batches.

    Only one caller may mutate the log at a time; it has no locking of its
    own.

    Usage:
        log = UndoLog()                        # in-memory only
        log = UndoLog("/path/undo.json")       # persisted across runs

        renamer = FileRenamer(undo_log=log)
        renamer.rename_batch(operations)
        if log.can_undo():
            renamer.undo_last()
    """

    def __init__(self, journal_path: Optional[str] = None):
        """Initialize undo log.

        Args:
            journal_path: Optional JSON file to persist the stack to. If it
                exists, previously saved records are loaded.
        """
        self.journal_path = journal_path
        self._records: List[OperationRecord] = []

        if journal_path:
            self._load()

    def push(self, record: OperationRecord) -> None:
        """Add a completed batch to the top of the stack."""
        self._records.append(record)
        self._save()

    def pop(self) -> Optional[OperationRecord]:
        """Remove and return the most recent batch, or None if empty."""
        if not self._records:
            return None
        record = self._records.pop()
        self._save()
        return record

    def peek(self) -> Optional[OperationRecord]:
        """Return the most recent batch without removing it."""
        return self._records[-1] if self._records else None

    def can_undo(self) -> bool:
        return bool(self._records)

    def clear(self) -> None:
        self._records = []
        self._save()

    @property
    def records(self) -> List[OperationRecord]:
        """Copy of the stack, oldest first."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def _save(self) -> None:
        """Write the journal atomically.

        Writes to a temporary file in the same directory, then replaces
        the journal via os.replace() so a crash never leaves it half-written.
        """
        if not self.journal_path:
            return

        state = {
            "version": JOURNAL_VERSION,
            "last_updated": datetime.now().isoformat(),
            "records": [_record_to_dict(r) for r in self._records],
        }

        journal_dir = os.path.dirname(os.path.abspath(self.journal_path))
        try:
            os.makedirs(journal_dir, exist_ok=True)

            fd, tmp_path = tempfile.mkstemp(
                dir=journal_dir, suffix=".tmp", prefix=".undo_"
            )
            try:
                if _USE_ORJSON:
                    with open(fd, "wb") as f:
                        f.write(orjson.dumps(state, option=orjson.OPT_INDENT_2))
                else:
                    with open(fd, "w", encoding="utf-8") as f:
                        json.dump(state, f, indent=2)

                os.replace(tmp_path, self.journal_path)
            except BaseException:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
                raise

        except Exception as e:
            logger.warning(f"Failed to save undo journal to {self.journal_path}: {e}")

    def _load(self) -> None:
        """Load records from the journal, ignoring a missing or corrupt file."""
        if not os.path.exists(self.journal_path):
            return

        try:
            if _USE_ORJSON:
                with open(self.journal_path, "rb") as f:
                    state = orjson.loads(f.read())
            else:
                with open(self.journal_path, "r", encoding="utf-8") as f:
                    state = json.load(f)

            self._records = [_record_from_dict(r) for r in state.get("records", [])]
        except Exception as e:
            logger.warning(f"Failed to read undo journal {self.journal_path}: {e}")
            self._records = []
