"""Photo Renamer - Rename photos from their capture date, location and camera.

High-level API:
    from photorenamer import RenameOrchestrator

    orchestrator = RenameOrchestrator("/path/to/photos", pattern_id="date_time")

    # Preview the new names
    plan = orchestrator.plan()
    print(f"{plan.rename_count} photos would be renamed")

    # Rename, and revert if needed
    result = orchestrator.apply()
    print(f"Renamed {result.success_count} photos")
    orchestrator.undo()
"""

__version__ = "1.0.0"

# Public API exports
from photorenamer.core.orchestrator import RenameOrchestrator
from photorenamer.core.models import (
    PhotoMetadata,
    GpsCoordinates,
    CameraInfo,
    LocationInfo,
    NamingPattern,
    FilenameSuggestion,
    RenameOperation,
    OperationResult,
    OperationRecord,
    ErrorKind,
    PlanResult,
    ApplyResult,
)

__all__ = [
    "RenameOrchestrator",
    "PhotoMetadata",
    "GpsCoordinates",
    "CameraInfo",
    "LocationInfo",
    "NamingPattern",
    "FilenameSuggestion",
    "RenameOperation",
    "OperationResult",
    "OperationRecord",
    "ErrorKind",
    "PlanResult",
    "ApplyResult",
    "__version__",
]
