"""Photo discovery for Photo Renamer."""

import logging
import os
from datetime import datetime
from typing import Iterator, List, Optional, Tuple

from photorenamer.core.models import PhotoFile, ProgressCallback
from photorenamer.core.utils import is_supported_image

logger = logging.getLogger(__name__)


def _fast_walk(path: str, recursive: bool = True) -> Iterator[Tuple[str, List[str]]]:
    """Walk a directory tree using os.scandir.

    Args:
        path: Root directory to walk.
        recursive: If False, only the root directory is listed.

    Yields:
        Tuples of (dirpath, filenames).
    """
    try:
        with os.scandir(path) as entries:
            dirs = []
            files = []
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        dirs.append(entry.name)
                    elif entry.is_file():
                        files.append(entry.name)
                except OSError as e:
                    logger.debug(f"Cannot access entry {entry.path}: {e}")
                    continue
            yield path, files
            if recursive:
                for d in sorted(dirs):
                    yield from _fast_walk(os.path.join(path, d), recursive)
    except OSError as e:
        logger.debug(f"Cannot access directory {path}: {e}")


def _stat_photo(filepath: str) -> Optional[PhotoFile]:
    """Build a PhotoFile for a path, or None if it can't be read."""
    try:
        st = os.stat(filepath)
    except OSError as e:
        logger.debug(f"Skipping unreadable file {filepath}: {e}")
        return None

    filename = os.path.basename(filepath)
    return PhotoFile(
        filepath=filepath,
        filename=filename,
        extension=os.path.splitext(filename)[1],
        size=st.st_size,
        created=datetime.fromtimestamp(st.st_ctime),
        modified=datetime.fromtimestamp(st.st_mtime),
    )


class PhotoScanner:
    """Finds supported image files in a folder.

    Results are sorted by path, so repeated scans of an unchanged folder
    return photos in the same order.

    Usage:
        scanner = PhotoScanner("/path/to/photos", recursive=True)
        scanner.scan(on_progress=lambda cur, tot, msg: print(msg))

        for photo in scanner.files:
            print(photo.filepath)
    """

    def __init__(self, path: str, recursive: bool = False):
        """Initialize scanner.

        Args:
            path: Folder to scan.
            recursive: Whether to include subfolders.
        """
        self.path = path
        self.recursive = recursive
        self.files: List[PhotoFile] = []
        self.skipped_count = 0

    def scan(self, on_progress: Optional[ProgressCallback] = None) -> List[PhotoFile]:
        """Scan for supported image files.

        A missing folder yields no files rather than an error.

        Args:
            on_progress: Optional callback for progress updates.
                        Called with (found_count, found_count, message).

        Returns:
            The PhotoFile list (also kept in self.files).
        """
        self.files = []
        self.skipped_count = 0
        progress_interval = 100

        if not os.path.isdir(self.path):
            logger.warning(f"Folder does not exist: {self.path}")
            return self.files

        paths = []
        for dirpath, filenames in _fast_walk(self.path, self.recursive):
            for filename in filenames:
                if is_supported_image(filename):
                    paths.append(os.path.join(dirpath, filename))
                else:
                    self.skipped_count += 1

        paths.sort()

        for i, filepath in enumerate(paths):
            photo = _stat_photo(filepath)
            if photo:
                self.files.append(photo)

            if on_progress and (i + 1) % progress_interval == 0:
                on_progress(i + 1, len(paths), f"Found {i + 1} photos...")

        if on_progress:
            on_progress(self.file_count, self.file_count, "Scan complete")

        return self.files

    @property
    def file_count(self) -> int:
        """Number of photos found."""
        return len(self.files)


def scan_photos(
    path: str,
    recursive: bool = False,
    on_progress: Optional[ProgressCallback] = None
) -> List[PhotoFile]:
    """Convenience function to scan a folder for photos."""
    scanner = PhotoScanner(path, recursive)
    return scanner.scan(on_progress)
