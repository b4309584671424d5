"""Utility functions for filename and path operations."""

import os
import re
import unicodedata
import uuid
from typing import Iterable, Iterator, Optional, Set

# Characters that are invalid in a filename on Windows (the strictest common
# target): ASCII control characters plus <>:"/\|?*
INVALID_FILENAME_CHARS = frozenset('<>:"/\\|?*' + "".join(chr(i) for i in range(32)))

MAX_FILENAME_LENGTH = 200  # Leaves room for the directory and extension
FALLBACK_FILENAME = "unnamed"

# Suffixes _0001 .. _9999 are tried before giving up on sequence numbers
MAX_SEQUENCE = 9999

SUPPORTED_EXTENSIONS = frozenset({
    ".jpg", ".jpeg", ".png", ".tiff", ".tif", ".gif", ".bmp",
    ".webp", ".heic", ".heif",
    # RAW formats
    ".raw", ".cr2", ".cr3", ".nef", ".arw", ".dng", ".orf", ".rw2", ".pef", ".srw",
})

_SEPARATOR_RUN = re.compile(r"[_\s]+")


def sanitize_filename(filename: Optional[str]) -> str:
    """Make a string safe to use as a filename (without extension).

    Steps:
    1. Replace reserved characters with "_"
    2. Collapse runs of "_" and whitespace into a single "_"
    3. Strip leading/trailing "_", "." and spaces
    4. Truncate to MAX_FILENAME_LENGTH characters

    Args:
        filename: Raw filename, may be empty or None.

    Returns:
        Non-empty sanitized filename; "unnamed" if nothing usable remains.

    Examples:
        >>> sanitize_filename("2023-06-15 14:30 / Paris")
        '2023-06-15_14_30_Paris'
        >>> sanitize_filename("???")
        'unnamed'
    """
    if not filename:
        return FALLBACK_FILENAME

    cleaned = "".join("_" if c in INVALID_FILENAME_CHARS else c for c in filename)
    cleaned = _SEPARATOR_RUN.sub("_", cleaned)
    cleaned = cleaned.strip("_. ")

    if len(cleaned) > MAX_FILENAME_LENGTH:
        cleaned = cleaned[:MAX_FILENAME_LENGTH]

    return cleaned or FALLBACK_FILENAME


class NameRegistry:
    """Case-insensitive set of filenames already claimed by a batch.

    Usage:
        names = NameRegistry()
        for photo in photos:
            base = resolve_conflict(suggested, photo.directory, photo.extension, names)
            names.add(base + photo.extension)
    """

    def __init__(self, names: Optional[Iterable[str]] = None):
        self._names: Set[str] = set()
        if names:
            for name in names:
                self.add(name)

    @staticmethod
    def _key(name: str) -> str:
        return unicodedata.normalize("NFC", name).casefold()

    def add(self, name: str) -> None:
        self._names.add(self._key(name))

    def discard(self, name: str) -> None:
        self._names.discard(self._key(name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)


def list_names(directory: str) -> NameRegistry:
    """Return the names of the entries in a directory as a NameRegistry.

    An unreadable or missing directory counts as empty.
    """
    try:
        return NameRegistry(os.listdir(directory))
    except OSError:
        return NameRegistry()


def resolve_conflict(
    base_name: str,
    directory: str,
    extension: str,
    existing_names: Iterable[str],
    own_name: Optional[str] = None,
    disk_names: Optional[NameRegistry] = None
) -> str:
    """Find a collision-free base name for a file in a directory.

    A name is free if base_name + extension is not in existing_names and
    no entry of that name exists in directory. Both checks are
    case-insensitive. Taken names get a _0001.._9999 suffix; past that a
    random hex suffix is used so this never loops or fails.

    Nothing is reserved: the caller must add the chosen full name to
    existing_names before resolving the next file of the same batch. The
    disk check only reflects the directory at the time of the call.

    Args:
        base_name: Desired name, without extension.
        directory: Directory the file will live in.
        extension: Extension including the dot (e.g. ".jpg").
        existing_names: Full names (with extension) already claimed.
        own_name: Current name of the file being renamed. Its entry on disk
            does not count as taken, so a file can keep its name.
        disk_names: Names already in directory, from list_names(). Listed
            here when not given.

    Returns:
        base_name unchanged if free, otherwise a suffixed variant.

    Examples:
        >>> resolve_conflict("2023-06-15_14-30", "/photos", ".jpg", set())
        '2023-06-15_14-30'
        >>> resolve_conflict("2023-06-15_14-30", "/photos", ".jpg", {"2023-06-15_14-30.jpg"})
        '2023-06-15_14-30_0001'
    """
    if not isinstance(existing_names, NameRegistry):
        existing_names = NameRegistry(existing_names)
    if disk_names is None:
        disk_names = list_names(directory)
    own = NameRegistry([own_name] if own_name else None)

    def is_free(name: str) -> bool:
        if name in existing_names:
            return False
        return name in own or name not in disk_names

    if is_free(f"{base_name}{extension}"):
        return base_name

    for n in range(1, MAX_SEQUENCE + 1):
        candidate = f"{base_name}_{n:04d}"
        if is_free(f"{candidate}{extension}"):
            return candidate

    return f"{base_name}_{uuid.uuid4().hex}"


def is_supported_image(path: str) -> bool:
    """Check if a path has a supported image extension (case-insensitive)."""
    return os.path.splitext(path)[1].lower() in SUPPORTED_EXTENSIONS


def exists(path: Optional[str]) -> bool:
    """Check if a path exists.

    Args:
        path: Path to check, or None.

    Returns:
        True if path exists, False if path is None or doesn't exist.
    """
    if path:
        return os.path.exists(path)
    return False


def normalize_path(path: str) -> str:
    """Normalize a path for consistent handling.

    Handles:
    - Trailing slashes
    - Mixed forward/backward slashes
    - User home directory (~)
    - Leading/trailing whitespace

    Args:
        path: Path to normalize.

    Returns:
        Normalized path.
    """
    return os.path.normpath(os.path.expanduser(path.strip()))
