"""ExifTool management for Photo Renamer.

Locates ExifTool and keeps a single process running for batch reads.
"""

import logging
import os
import shutil
import sys
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# Local install location, relative to the project root
EXIFTOOL_DIR = os.path.join("tools", "exiftool")
EXIFTOOL_EXE = "exiftool.exe" if sys.platform == "win32" else "exiftool"

# Group-prefixed tag names ("EXIF:Model") with numeric values
COMMON_ARGS = ["-G", "-n"]


def _project_root() -> str:
    # photorenamer/core/ -> project root
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def get_exiftool_path(base_dir: Optional[str] = None) -> Optional[str]:
    """Find ExifTool executable.

    Checks the system PATH first, then the local tools folder.

    Args:
        base_dir: Base directory for local tools folder.
                 Defaults to the project root.

    Returns:
        Path to exiftool executable, or None if not found.
    """
    if shutil.which("exiftool"):
        return "exiftool"

    local_path = os.path.join(base_dir or _project_root(), EXIFTOOL_DIR, EXIFTOOL_EXE)
    if os.path.exists(local_path):
        return local_path

    logger.warning("ExifTool not found. Install from https://exiftool.org/")
    return None


def is_exiftool_available(base_dir: Optional[str] = None) -> bool:
    """Check if ExifTool can be found without logging a warning."""
    if shutil.which("exiftool"):
        return True
    local_path = os.path.join(base_dir or _project_root(), EXIFTOOL_DIR, EXIFTOOL_EXE)
    return os.path.exists(local_path)


def get_install_instructions() -> str:
    """Get manual ExifTool installation instructions."""
    return (
        "ExifTool not found. Photos will be named from file dates only.\n"
        "To read capture dates, GPS and camera data:\n"
        "  1. Download from https://exiftool.org/\n"
        "  2. On Windows, rename exiftool(-k).exe to exiftool.exe\n"
        "  3. Place in PATH or in ./tools/exiftool/"
    )


class ExifToolManager:
    """Manages the ExifTool process for metadata reads.

    Usage:
        with ExifToolManager() as et:
            tags = et.read_tags("/path/to/photo.jpg")

    Or for reading many files:
        manager = ExifToolManager()
        manager.start()
        results = manager.read_tags_batch(paths)
        manager.stop()
    """

    def __init__(self, base_dir: Optional[str] = None):
        """Initialize manager.

        Args:
            base_dir: Base directory for local tools folder.
        """
        self._helper = None
        self._exiftool_path: Optional[str] = None
        self._base_dir = base_dir
        self.error: Optional[str] = None

    def start(self) -> bool:
        """Start ExifTool process.

        Returns:
            True if started successfully, False otherwise. On failure the
            reason is kept in self.error.
        """
        try:
            import exiftool
        except ImportError:
            self.error = "pyexiftool not installed. Run: pip install pyexiftool"
            logger.warning(self.error)
            return False

        self._exiftool_path = get_exiftool_path(self._base_dir)
        if not self._exiftool_path:
            self.error = "ExifTool executable not found"
            return False

        try:
            self._helper = exiftool.ExifToolHelper(
                executable=self._exiftool_path, common_args=COMMON_ARGS
            )
            self._helper.run()
            return True
        except Exception as e:
            self.error = f"Failed to start ExifTool: {e}"
            logger.error(self.error)
            self._helper = None
            return False

    def stop(self) -> None:
        """Stop ExifTool process."""
        if self._helper:
            try:
                self._helper.terminate()
            except Exception as e:
                logger.debug(f"Error stopping ExifTool: {e}")
            self._helper = None

    def read_tags(self, filepath: str, tags: Optional[List[str]] = None) -> Dict:
        """Read tags from a file.

        Args:
            filepath: Path to file.
            tags: Optional list of specific tags to read.

        Returns:
            Dict of tag values.

        Raises:
            RuntimeError: If ExifTool is not running.
            Exception: Whatever pyexiftool raises for an unreadable file.
        """
        if not self._helper:
            raise RuntimeError("ExifTool is not running")

        if tags:
            result = self._helper.get_tags(filepath, tags)
        else:
            result = self._helper.get_metadata(filepath)
        return result[0] if result else {}

    def read_tags_batch(
        self,
        filepaths: List[str],
        tags: Optional[List[str]] = None
    ) -> List[Dict]:
        """Read tags from multiple files in one ExifTool call.

        Falls back to per-file reads if the batch call fails, so one bad
        file does not lose the others.

        Returns:
            List of tag dicts, one per file in same order.
            Empty dict for files that failed to read.
        """
        if not self._helper or not filepaths:
            return [{} for _ in filepaths]

        try:
            if tags:
                results = self._helper.get_tags(filepaths, tags)
            else:
                results = self._helper.get_metadata(filepaths)
            if results and len(results) == len(filepaths):
                return results
        except Exception as e:
            logger.debug(f"Batch read failed, retrying per file: {e}")

        results = []
        for filepath in filepaths:
            try:
                results.append(self.read_tags(filepath, tags))
            except Exception as e:
                logger.debug(f"Failed to read tags from {filepath}: {e}")
                results.append({})
        return results

    @property
    def is_running(self) -> bool:
        """Check if ExifTool is running."""
        return self._helper is not None

    @property
    def exiftool_path(self) -> Optional[str]:
        """Get the path to ExifTool executable."""
        return self._exiftool_path

    def __enter__(self) -> "ExifToolManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
