"""Data models for Photo Renamer."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Callable, Any


@dataclass(frozen=True, slots=True)
class GpsCoordinates:
    """GPS coordinates from photo EXIF data."""
    latitude: float
    longitude: float
    altitude: Optional[float] = None

    def is_valid(self) -> bool:
        """Check if coordinates are within valid GPS ranges.

        Note: (0,0) is a valid location (Gulf of Guinea).
        """
        return -90 <= self.latitude <= 90 and -180 <= self.longitude <= 180

    def __str__(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"


@dataclass(frozen=True, slots=True)
class CameraInfo:
    """Camera information from photo EXIF data."""
    make: str = ""
    model: str = ""
    lens_model: Optional[str] = None
    settings: Optional[str] = None  # e.g. "ISO 100, f/2.8, 1/250s, 35mm"

    @property
    def display_name(self) -> str:
        """Get 'Make Model', or just the model if make is unknown."""
        if not self.make:
            return self.model
        return f"{self.make} {self.model}".strip()


@dataclass(frozen=True, slots=True)
class LocationInfo:
    """Location information returned by reverse geocoding."""
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    formatted_address: Optional[str] = None

    @property
    def short_name(self) -> str:
        """Most specific available place name, or 'Unknown'."""
        return self.city or self.state or self.country or "Unknown"


@dataclass(frozen=True)
class PhotoMetadata:
    """Metadata extracted from a photo file.

    Every field except original_filename is optional. Missing data is not
    an error; consumers substitute their own fallback values.

    additional_properties holds auxiliary notes such as "ExtractionError".
    """
    original_filename: str = ""
    date_taken: Optional[datetime] = None
    location: Optional[GpsCoordinates] = None
    camera: Optional[CameraInfo] = None
    additional_properties: Dict[str, Any] = field(default_factory=dict)

    def has_location(self) -> bool:
        """Check if this metadata includes GPS coordinates."""
        return self.location is not None

    def has_camera(self) -> bool:
        """Check if this metadata includes camera information."""
        return self.camera is not None

    @property
    def extraction_error(self) -> Optional[str]:
        """Diagnostic note left by a failed extraction, if any."""
        return self.additional_properties.get("ExtractionError")


@dataclass(frozen=True, slots=True)
class NamingPattern:
    """A filename template.

    Templates are built from the tokens {date}, {time}, {location},
    {camera} and {custom}.
    """
    id: str
    name: str
    template: str
    description: str
    requires_location: bool = False
    requires_camera: bool = False


@dataclass
class FilenameSuggestion:
    """A suggested filename (without extension) for a photo.

    has_conflict and conflict_reason are filled in by the caller after
    conflict resolution; the suggestion engine never sets them.
    """
    suggested_name: str
    pattern: str
    pattern_description: str = ""
    has_conflict: bool = False
    conflict_reason: Optional[str] = None


@dataclass
class PhotoFile:
    """A photo found during scanning, with its metadata and suggestions."""
    filepath: str
    filename: str
    extension: str
    size: int = 0
    created: Optional[datetime] = None
    modified: Optional[datetime] = None

    # Populated during planning
    metadata: Optional[PhotoMetadata] = None
    suggestions: List[FilenameSuggestion] = field(default_factory=list)
    selected_suggestion: Optional[str] = None  # full name, with extension
    is_selected: bool = True

    @property
    def directory(self) -> str:
        """Directory containing the photo."""
        return os.path.dirname(self.filepath)

    @property
    def stem(self) -> str:
        """Filename without extension."""
        return os.path.splitext(self.filename)[0]

    @property
    def target_path(self) -> Optional[str]:
        """Full path the photo would be renamed to, if a name was chosen."""
        if not self.selected_suggestion:
            return None
        return os.path.join(self.directory, self.selected_suggestion)

    def needs_rename(self) -> bool:
        """Check if the photo is selected and its chosen name differs."""
        return (
            self.is_selected
            and bool(self.selected_suggestion)
            and self.selected_suggestion != self.filename
        )


class ErrorKind(Enum):
    """Classification of rename, undo, and lookup failures."""
    SOURCE_MISSING = "source_missing"
    TARGET_EXISTS = "target_exists"
    ACCESS_DENIED = "access_denied"
    IO_FAILURE = "io_failure"
    UNKNOWN = "unknown"
    NOTHING_TO_UNDO = "nothing_to_undo"
    LOOKUP_UNAVAILABLE = "lookup_unavailable"
    EXTRACTION_FAILED = "extraction_failed"
    CANCELLED = "cancelled"


@dataclass
class RenameOperation:
    """A planned rename.

    metadata is kept for audit and is not needed to execute the rename.
    """
    source_path: str
    target_path: str
    metadata: Optional[PhotoMetadata] = None

    def inverse(self) -> "RenameOperation":
        """Get the operation that reverts this one."""
        return RenameOperation(source_path=self.target_path, target_path=self.source_path)


@dataclass
class OperationResult:
    """Outcome of one attempted rename."""
    success: bool
    source_path: str
    target_path: str
    error_message: Optional[str] = None
    error: Optional[BaseException] = None
    error_kind: Optional[ErrorKind] = None
    moved: bool = False  # set when a failure happened after the file moved

    @classmethod
    def succeeded(cls, source_path: str, target_path: str) -> "OperationResult":
        return cls(success=True, source_path=source_path, target_path=target_path)

    @classmethod
    def failed(
        cls,
        source_path: str,
        target_path: str,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        error: Optional[BaseException] = None,
        moved: bool = False
    ) -> "OperationResult":
        return cls(
            success=False,
            source_path=source_path,
            target_path=target_path,
            error_message=message,
            error=error,
            error_kind=kind,
            moved=moved
        )


@dataclass
class OperationRecord:
    """A completed batch, kept for undo.

    operations holds the inverse of every rename that succeeded, in the
    order the original renames were applied.
    """
    timestamp: datetime
    operations: List[RenameOperation] = field(default_factory=list)
    success_count: int = 0
    failure_count: int = 0


@dataclass
class PlanResult:
    """Results from planning renames for a folder."""
    folder: str
    pattern_id: str
    photos: List[PhotoFile] = field(default_factory=list)
    rename_count: int = 0
    unchanged_count: int = 0
    extraction_errors: int = 0
    errors: List[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def photo_count(self) -> int:
        return len(self.photos)


@dataclass
class ApplyResult:
    """Results from applying a rename plan."""
    results: List[OperationResult] = field(default_factory=list)
    summary_file: Optional[str] = None
    elapsed_time: float = 0.0
    cancelled: bool = False

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def failures(self) -> List[OperationResult]:
        return [r for r in self.results if not r.success]


# Type aliases for callbacks
# (current_item, total_items, message) -> None
ProgressCallback = Callable[[int, int, str], None]
