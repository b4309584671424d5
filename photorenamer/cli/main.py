"""Command-line interface for Photo Renamer."""

import argparse
import os
import shutil
import sys
import threading
from typing import List, Optional

from tqdm import tqdm

from photorenamer import __version__
from photorenamer.core.exiftool import get_install_instructions, is_exiftool_available
from photorenamer.core.geocoding import NominatimGeocoder
from photorenamer.core.logger import summarize_results
from photorenamer.core.models import ApplyResult, PlanResult
from photorenamer.core.orchestrator import UNDO_JOURNAL_NAME, RenameOrchestrator
from photorenamer.core.patterns import get_available_patterns, get_pattern
from photorenamer.core.renamer import FileRenamer
from photorenamer.core.settings import Settings, get_config_dir
from photorenamer.core.undo import UndoLog
from photorenamer.core.utils import exists, normalize_path
from photorenamer.cli.wizard import confirm, run_wizard


# Program description
DESCRIPTION = """Photo Renamer

Renames photos in a folder using their capture date, GPS location and
camera model, e.g. IMG_4021.jpg -> 2023-06-15_14-30.jpg.

Names that would collide get a _0001, _0002, ... suffix. Every batch of
renames is recorded and can be reverted with --undo.
"""

# Number of planned renames listed before asking for confirmation
PREVIEW_LIMIT = 20


def get_log_dir() -> str:
    """Directory for rename logs, summaries and the undo journal."""
    return os.path.join(get_config_dir(), "logs")


def create_progress_callback(desc: str = "Processing"):
    """Create a tqdm-based progress callback.

    Args:
        desc: Description for progress bar.

    Returns:
        Tuple of (callback function, tqdm instance).
    """
    pbar = tqdm(total=100, desc=desc)

    terminal_width = shutil.get_terminal_size().columns
    max_desc_width = max(20, min(80, terminal_width - 40))

    def callback(current: int, total: int, message: str):
        pbar.total = total
        pbar.n = current
        if len(message) > max_desc_width:
            message = message[:max_desc_width - 3] + "..."
        pbar.set_description(message)
        pbar.refresh()

    return callback, pbar


def print_patterns() -> None:
    """Print the available naming patterns."""
    print("\nAvailable naming patterns:\n")
    for pattern in get_available_patterns():
        needs = []
        if pattern.requires_location:
            needs.append("GPS")
        if pattern.requires_camera:
            needs.append("camera")
        extra = f"  (needs {', '.join(needs)})" if needs else ""
        print(f"  {pattern.id:<22} {pattern.name:<26} {pattern.description}{extra}")


def print_plan(plan: PlanResult, limit: int = PREVIEW_LIMIT) -> None:
    """Print the planned renames."""
    print(f"\nFound {plan.photo_count} photos")
    print(f"  {plan.rename_count} would be renamed")
    print(f"  {plan.unchanged_count} already have the right name")
    if plan.extraction_errors:
        print(f"  {plan.extraction_errors} without readable metadata (named from file dates)")

    shown = 0
    for photo in plan.photos:
        if not photo.needs_rename():
            continue
        if shown == limit:
            print(f"  ... and {plan.rename_count - limit} more")
            break
        print(f"  {photo.filename} -> {photo.selected_suggestion}")
        shown += 1


def print_apply_result(result: ApplyResult) -> None:
    """Print a summary derived from the rename results."""
    successes, failures, messages = summarize_results(result.results)

    print("\nFinished!")
    print(f"Renamed: {successes} files")
    if failures:
        print(f"Failed: {failures} files")
        for message in messages[:10]:
            print(f"  {message}")
        if len(messages) > 10:
            print(f"  ... and {len(messages) - 10} more")
    if result.summary_file:
        print(f"\nSummary written to:\n  {result.summary_file}")


def run_undo(log_dir: Optional[str] = None) -> int:
    """Revert the most recent rename batch.

    Returns:
        Exit code (0 on success, 1 if nothing to undo, 2 if partial).
    """
    log_dir = log_dir or get_log_dir()
    undo_log = UndoLog(os.path.join(log_dir, UNDO_JOURNAL_NAME))

    record = undo_log.peek()
    if record is None:
        print("Nothing to undo.")
        return 1

    print(f"\nUndoing {len(record.operations)} renames from "
          f"{record.timestamp.strftime('%Y-%m-%d %H:%M:%S')}...")

    renamer = FileRenamer(undo_log=undo_log)
    callback, pbar = create_progress_callback("Undoing")
    try:
        success = renamer.undo_last(on_progress=callback)
    finally:
        pbar.close()

    if success:
        print("Undo successful.")
        return 0

    _, failures, messages = summarize_results(renamer.last_undo_results)
    print(f"Undo partially failed: {failures} files could not be restored.")
    for message in messages[:10]:
        print(f"  {message}")
    return 2


def run_rename(
    path: str,
    pattern_id: str,
    custom_tag: Optional[str] = None,
    recursive: bool = False,
    dry_run: bool = False,
    assume_yes: bool = False,
    geocode: bool = True,
    verbose: bool = False,
    log_dir: Optional[str] = None
) -> int:
    """Plan and (unless dry_run) apply renames for a folder.

    Returns:
        Exit code (0 success, 1 error or aborted, 2 some renames failed,
        130 interrupted).
    """
    if not exists(path) or not os.path.isdir(path):
        print(f"Error: Folder does not exist: {path}")
        return 1

    pattern = get_pattern(pattern_id)
    geocoder = None
    if geocode and "{location}" in pattern.template:
        geocoder = NominatimGeocoder()

    orchestrator = RenameOrchestrator(
        folder=path,
        pattern_id=pattern_id,
        custom_tag=custom_tag,
        recursive=recursive,
        geocoder=geocoder,
        log_dir=log_dir or get_log_dir(),
        verbose=verbose
    )

    if dry_run:
        print("\n=== DRY RUN MODE ===")
        print("No files will be renamed.\n")

    print(f"Folder:  {path}")
    print(f"Pattern: {pattern.name} ({pattern.description})")

    if not is_exiftool_available():
        print()
        print(get_install_instructions())

    callback, pbar = create_progress_callback("Planning")
    try:
        plan = orchestrator.plan(on_progress=callback)
    except KeyboardInterrupt:
        print("\n\nInterrupted! No files were renamed.")
        return 130
    finally:
        pbar.close()

    if plan.errors:
        print("\nWarnings/Errors:")
        for error in plan.errors:
            print(f"  {error}")

    print_plan(plan)

    if dry_run:
        print("\n=== END DRY RUN ===")
        return 0

    if plan.rename_count == 0:
        print("\nNothing to rename.")
        return 0

    if not assume_yes and not confirm(f"\nRename {plan.rename_count} photos?"):
        print("Aborted. No files were renamed.")
        return 1

    return _apply_with_interrupt(orchestrator, plan)


def _apply_with_interrupt(orchestrator: RenameOrchestrator, plan: PlanResult) -> int:
    """Apply a plan in a worker thread so Ctrl+C stops between files."""
    cancel_event = threading.Event()
    outcome = {}
    callback, pbar = create_progress_callback("Renaming")

    def worker():
        outcome["result"] = orchestrator.apply(
            plan.photos, on_progress=callback, cancel_event=cancel_event
        )

    thread = threading.Thread(target=worker, daemon=True)
    thread.start()

    interrupted = False
    try:
        while thread.is_alive():
            thread.join(0.2)
    except KeyboardInterrupt:
        interrupted = True
        cancel_event.set()
        thread.join()
    finally:
        pbar.close()

    result = outcome.get("result")
    if result is None:
        print("\nRenaming failed unexpectedly; see the log for details.")
        return 1

    print_apply_result(result)

    if interrupted:
        print("\nInterrupted! Files renamed so far can be reverted with --undo.")
        return 130

    if result.failure_count:
        return 2

    print("\nRun again with --undo to revert this batch.")
    return 0


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (default: sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description=DESCRIPTION,
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "-p", "--path",
        help="The folder containing the photos to rename",
        type=str,
        default=None
    )

    parser.add_argument(
        "--pattern",
        help="Naming pattern id (see --list-patterns; default: last used)",
        choices=[p.id for p in get_available_patterns()],
        default=None
    )

    parser.add_argument(
        "-c", "--custom",
        help="Text for patterns with a custom part",
        type=str,
        default=None
    )

    parser.add_argument(
        "-r", "--recursive",
        help="Include photos in subfolders",
        action="store_true",
        default=None
    )

    parser.add_argument(
        "--dry-run",
        help="Show the new names without renaming anything",
        action="store_true"
    )

    parser.add_argument(
        "--undo",
        help="Revert the most recent batch of renames",
        action="store_true"
    )

    parser.add_argument(
        "--list-patterns",
        help="List the available naming patterns and exit",
        action="store_true"
    )

    parser.add_argument(
        "-y", "--yes",
        help="Rename without asking for confirmation",
        action="store_true"
    )

    parser.add_argument(
        "--no-geocode",
        help="Do not look up place names online (location becomes 'Unknown')",
        action="store_true"
    )

    parser.add_argument(
        "-v", "--verbose",
        help="Log every rename (default: only log errors)",
        action="store_true"
    )

    return parser.parse_args(args)


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parsed = parse_args(args)

    if parsed.list_patterns:
        print_patterns()
        return 0

    if parsed.undo:
        return run_undo()

    settings = Settings()

    path = parsed.path
    if not path:
        path = run_wizard(settings.last_folder)
        if not path:
            return 1

    path = normalize_path(path)
    pattern_id = parsed.pattern or settings.last_pattern_id
    if get_pattern(pattern_id) is None:
        pattern_id = Settings.DEFAULT_SETTINGS["last_pattern_id"]
    recursive = settings.recursive_scan if parsed.recursive is None else parsed.recursive

    settings.set("last_folder", path)
    settings.set("last_pattern_id", pattern_id)
    settings.set("recursive_scan", recursive)
    settings.save()

    return run_rename(
        path,
        pattern_id,
        custom_tag=parsed.custom,
        recursive=recursive,
        dry_run=parsed.dry_run,
        assume_yes=parsed.yes,
        geocode=not parsed.no_geocode,
        verbose=parsed.verbose
    )


if __name__ == "__main__":
    sys.exit(main())
