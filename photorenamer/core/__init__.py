"""Core renaming logic for Photo Renamer."""

from photorenamer.core.models import (
    GpsCoordinates,
    CameraInfo,
    LocationInfo,
    PhotoMetadata,
    NamingPattern,
    FilenameSuggestion,
    PhotoFile,
    ErrorKind,
    RenameOperation,
    OperationResult,
    OperationRecord,
    PlanResult,
    ApplyResult,
    ProgressCallback,
)

from photorenamer.core.utils import (
    sanitize_filename,
    resolve_conflict,
    NameRegistry,
    is_supported_image,
    exists,
    normalize_path,
    SUPPORTED_EXTENSIONS,
)

from photorenamer.core.patterns import (
    PATTERNS,
    DEFAULT_PATTERN_ID,
    get_pattern,
    get_available_patterns,
    validate_catalog,
)

from photorenamer.core.suggestions import (
    SuggestionEngine,
    simplify_camera_name,
)

from photorenamer.core.undo import UndoLog

from photorenamer.core.renamer import FileRenamer

from photorenamer.core.logger import (
    BufferedLogger,
    NullLogger,
    create_logger,
    summarize_results,
    write_batch_summary,
)

from photorenamer.core.scanner import (
    PhotoScanner,
    scan_photos,
)

from photorenamer.core.exiftool import (
    get_exiftool_path,
    is_exiftool_available,
    ExifToolManager,
)

from photorenamer.core.metadata import (
    MetadataReader,
    metadata_from_tags,
)

from photorenamer.core.geocoding import NominatimGeocoder

from photorenamer.core.settings import Settings

from photorenamer.core.orchestrator import RenameOrchestrator

__all__ = [
    # Models
    "GpsCoordinates",
    "CameraInfo",
    "LocationInfo",
    "PhotoMetadata",
    "NamingPattern",
    "FilenameSuggestion",
    "PhotoFile",
    "ErrorKind",
    "RenameOperation",
    "OperationResult",
    "OperationRecord",
    "PlanResult",
    "ApplyResult",
    "ProgressCallback",
    # Utils
    "sanitize_filename",
    "resolve_conflict",
    "NameRegistry",
    "is_supported_image",
    "exists",
    "normalize_path",
    "SUPPORTED_EXTENSIONS",
    # Patterns
    "PATTERNS",
    "DEFAULT_PATTERN_ID",
    "get_pattern",
    "get_available_patterns",
    "validate_catalog",
    # Suggestions
    "SuggestionEngine",
    "simplify_camera_name",
    # Renaming and undo
    "UndoLog",
    "FileRenamer",
    # Logger
    "BufferedLogger",
    "NullLogger",
    "create_logger",
    "summarize_results",
    "write_batch_summary",
    # Scanner
    "PhotoScanner",
    "scan_photos",
    # ExifTool
    "get_exiftool_path",
    "is_exiftool_available",
    "ExifToolManager",
    # Metadata
    "MetadataReader",
    "metadata_from_tags",
    # Geocoding
    "NominatimGeocoder",
    # Settings
    "Settings",
    # Orchestrator
    "RenameOrchestrator",
]
