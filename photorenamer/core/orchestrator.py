"""High-level orchestrator for Photo Renamer.

Coordinates scanning, metadata extraction, suggestion generation,
conflict resolution, renaming and undo. Used by the CLI.
"""

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from photorenamer.core.logger import create_logger, write_batch_summary
from photorenamer.core.metadata import MetadataReader
from photorenamer.core.models import (
    ApplyResult, FilenameSuggestion, PhotoFile, PhotoMetadata, PlanResult,
    ProgressCallback, RenameOperation
)
from photorenamer.core.patterns import DEFAULT_PATTERN_ID, get_pattern
from photorenamer.core.renamer import FileRenamer
from photorenamer.core.scanner import PhotoScanner
from photorenamer.core.suggestions import LocationLookup, SuggestionEngine
from photorenamer.core.undo import UndoLog
from photorenamer.core.utils import NameRegistry, exists, list_names, resolve_conflict

logger = logging.getLogger(__name__)

UNDO_JOURNAL_NAME = "undo_journal.json"


def _adaptive_interval(total: int) -> int:
    """Calculate adaptive progress update interval based on total count.

    More frequent updates for smaller collections, less frequent for larger ones.
    """
    if total < 50:
        return 1
    elif total < 200:
        return 10
    elif total < 1000:
        return 25
    else:
        return 50


class RenameOrchestrator:
    """Coordinates a complete rename run for one folder.

    Usage:
        orchestrator = RenameOrchestrator("/path/to/photos", pattern_id="date_location")

        # Preview the new names
        plan = orchestrator.plan(on_progress=my_callback)
        for photo in plan.photos:
            print(photo.filename, "->", photo.selected_suggestion)

        # Rename, then change our mind
        result = orchestrator.apply()
        print(f"Renamed {result.success_count} files")
        orchestrator.undo()

    Calls to apply() and undo() must not overlap.
    """

    # Photos whose metadata is read per ExifTool call
    CHUNK_SIZE = 50
    DEFAULT_WORKERS = 4

    def __init__(
        self,
        folder: str,
        pattern_id: str = DEFAULT_PATTERN_ID,
        custom_tag: Optional[str] = None,
        recursive: bool = False,
        geocoder: Optional[LocationLookup] = None,
        metadata_reader: Optional[MetadataReader] = None,
        undo_log: Optional[UndoLog] = None,
        log_dir: Optional[str] = None,
        verbose: bool = False,
        workers: int = DEFAULT_WORKERS
    ):
        """Initialize orchestrator.

        Args:
            folder: Folder containing the photos.
            pattern_id: Naming pattern to apply.
            custom_tag: Text for the {custom} token.
            recursive: Whether to include subfolders.
            geocoder: Reverse geocoder for {location}; None disables lookups.
            metadata_reader: Reader to use. If None, an ExifTool-backed
                reader is started for each plan() call.
            undo_log: Undo history. If None, a journal in log_dir is used
                when log_dir is given, otherwise an in-memory log.
            log_dir: Directory for logs, summaries and the undo journal.
            verbose: If True, log every rename.
            workers: Threads used for suggestion generation.

        Raises:
            ValueError: If pattern_id is not a known pattern.
        """
        pattern = get_pattern(pattern_id)
        if pattern is None:
            raise ValueError(f"Unknown naming pattern: {pattern_id}")

        self.folder = folder
        self.pattern = pattern
        self.custom_tag = custom_tag
        self.recursive = recursive
        self.log_dir = log_dir
        self.verbose = verbose
        self.workers = max(1, workers)
        self.engine = SuggestionEngine(geocoder)
        self._metadata_reader = metadata_reader

        if undo_log is None:
            journal = os.path.join(log_dir, UNDO_JOURNAL_NAME) if log_dir else None
            undo_log = UndoLog(journal)
        self.undo_log = undo_log
        self.renamer = FileRenamer(undo_log=undo_log, verbose=verbose)

        self._last_plan: Optional[PlanResult] = None

    @property
    def last_plan(self) -> Optional[PlanResult]:
        return self._last_plan

    def _suggest(self, metadata: PhotoMetadata) -> Tuple[List[FilenameSuggestion], str]:
        """Generate suggestions for one photo (runs in a worker thread).

        Returns:
            Tuple of (all applicable suggestions, base name from the
            selected pattern).
        """
        all_suggestions = self.engine.generate_all_applicable(metadata)
        selected = self.engine.generate_for_pattern(metadata, self.pattern, self.custom_tag)
        return all_suggestions, selected[0].suggested_name

    def plan(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> PlanResult:
        """Work out a new, unique name for every photo in the folder.

        Nothing is renamed. Suggestions for different photos are generated
        in parallel; names are then resolved one photo at a time in scan
        order so that no two photos get the same name.

        Args:
            on_progress: Optional callback for progress updates.
            cancel_event: Optional threading.Event for cooperative
                cancellation. Checked between photos; photos resolved so
                far stay in the result.

        Returns:
            PlanResult with one PhotoFile per resolved photo.
        """
        result = PlanResult(folder=self.folder, pattern_id=self.pattern.id)
        self._last_plan = result

        if not exists(self.folder) or not os.path.isdir(self.folder):
            result.errors.append(f"Folder does not exist: {self.folder}")
            return result

        if on_progress:
            on_progress(0, 0, "[1/2] Scanning photos...")

        scanner = PhotoScanner(self.folder, self.recursive)
        photos = scanner.scan()
        total = len(photos)

        if total == 0:
            if on_progress:
                on_progress(0, 0, "No photos found")
            return result

        reader = self._metadata_reader or MetadataReader()
        owns_reader = self._metadata_reader is None
        if owns_reader and not reader.start():
            result.errors.append(f"ExifTool unavailable ({reader.error}); using file dates")

        registry = NameRegistry()
        disk_cache: Dict[str, NameRegistry] = {}
        interval = _adaptive_interval(total)
        done = 0

        try:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                for chunk_start in range(0, total, self.CHUNK_SIZE):
                    if cancel_event and cancel_event.is_set():
                        result.cancelled = True
                        break

                    chunk = photos[chunk_start:chunk_start + self.CHUNK_SIZE]
                    metadata_list = reader.extract_batch([p.filepath for p in chunk])

                    futures: List[Future] = [
                        executor.submit(self._suggest, metadata)
                        for metadata in metadata_list
                    ]

                    for photo, metadata, future in zip(chunk, metadata_list, futures):
                        if cancel_event and cancel_event.is_set():
                            result.cancelled = True
                            break

                        suggestions, base_name = future.result()
                        photo.metadata = metadata
                        photo.suggestions = suggestions
                        self._resolve(photo, base_name, registry, disk_cache)

                        result.photos.append(photo)
                        if metadata.extraction_error:
                            result.extraction_errors += 1
                        if photo.needs_rename():
                            result.rename_count += 1
                        else:
                            result.unchanged_count += 1

                        done += 1
                        if on_progress and done % interval == 0:
                            on_progress(done, total, f"[2/2] Naming: {photo.filename}")

                    if result.cancelled:
                        for future in futures:
                            future.cancel()
                        break
        finally:
            if owns_reader:
                reader.stop()

        if on_progress:
            message = "Planning cancelled" if result.cancelled else "Planning complete"
            on_progress(done, total, message)

        return result

    def _resolve(
        self,
        photo: PhotoFile,
        base_name: str,
        registry: NameRegistry,
        disk_cache: Dict[str, NameRegistry]
    ) -> None:
        """Give a photo a unique name and claim it in the registry.

        The photo's own file never counts as a conflict, so photos named by
        an earlier run keep their names.
        """
        if photo.directory not in disk_cache:
            disk_cache[photo.directory] = list_names(photo.directory)

        resolved = resolve_conflict(
            base_name, photo.directory, photo.extension, registry,
            own_name=photo.filename, disk_names=disk_cache[photo.directory]
        )

        if resolved != base_name:
            for suggestion in photo.suggestions:
                if suggestion.pattern == self.pattern.id and suggestion.suggested_name == base_name:
                    suggestion.has_conflict = True
                    suggestion.conflict_reason = f"Name already taken; using {resolved}"

        photo.selected_suggestion = f"{resolved}{photo.extension}"
        registry.add(photo.selected_suggestion)

    @staticmethod
    def build_operations(photos: List[PhotoFile]) -> List[RenameOperation]:
        """Turn planned photos into rename operations.

        Photos that are deselected, unnamed, or already correctly named
        are left out.
        """
        return [
            RenameOperation(
                source_path=photo.filepath,
                target_path=photo.target_path,
                metadata=photo.metadata
            )
            for photo in photos
            if photo.needs_rename()
        ]

    def apply(
        self,
        photos: Optional[List[PhotoFile]] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> ApplyResult:
        """Rename photos to their planned names.

        Args:
            photos: Planned photos. Defaults to the last plan() result
                (running plan() first if needed).
            on_progress: Optional callback for progress updates.
            cancel_event: Optional threading.Event, checked between files.

        Returns:
            ApplyResult with one OperationResult per rename attempted.
        """
        if photos is None:
            if self._last_plan is None:
                self.plan(cancel_event=cancel_event)
            photos = self._last_plan.photos

        operations = self.build_operations(photos)
        start_time = time.time()
        start_date = time.strftime("%Y-%m-%d %H:%M:%S")

        with create_logger(self.log_dir) as file_logger:
            self.renamer.logger = file_logger
            file_logger.log(f"Renaming {len(operations)} photos in {self.folder} ({self.pattern.id})")
            try:
                results = self.renamer.rename_batch(
                    operations, on_progress=on_progress, cancel_event=cancel_event
                )
            finally:
                self.renamer.logger = None

        by_source = {photo.filepath: photo for photo in photos}
        for op_result in results:
            photo = by_source.get(op_result.source_path)
            if photo and (op_result.success or op_result.moved):
                photo.filepath = op_result.target_path
                photo.filename = os.path.basename(op_result.target_path)

        result = ApplyResult(
            results=results,
            elapsed_time=round(time.time() - start_time, 3),
            cancelled=bool(cancel_event and cancel_event.is_set()),
        )

        if self.log_dir and results:
            result.summary_file = write_batch_summary(
                self.log_dir,
                self.folder,
                results,
                elapsed_time=result.elapsed_time,
                start_time=start_date,
                end_time=time.strftime("%Y-%m-%d %H:%M:%S"),
                pattern_id=self.pattern.id,
            )

        logger.info(f"Renamed {result.success_count} photos, {result.failure_count} failed")
        return result

    def can_undo(self) -> bool:
        return self.renamer.can_undo()

    def undo(self, on_progress: Optional[ProgressCallback] = None) -> bool:
        """Revert the most recent rename batch.

        Returns:
            True if every file was restored.
        """
        with create_logger(self.log_dir) as file_logger:
            self.renamer.logger = file_logger
            try:
                return self.renamer.undo_last(on_progress=on_progress)
            finally:
                self.renamer.logger = None
