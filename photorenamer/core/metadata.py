"""Photo metadata extraction for Photo Renamer.

Converts ExifTool tag dictionaries into PhotoMetadata. Extraction never
raises for a readable file: when EXIF data is missing or unreadable the
capture date falls back to the file's own timestamps.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from photorenamer.core.exiftool import ExifToolManager
from photorenamer.core.models import CameraInfo, GpsCoordinates, PhotoMetadata
from photorenamer.core.utils import is_supported_image

logger = logging.getLogger(__name__)

EXTRACTION_ERROR_KEY = "ExtractionError"

# Tried in order; the first parseable value wins
DATE_TAGS = ("EXIF:DateTimeOriginal", "EXIF:CreateDate", "EXIF:ModifyDate")

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


def parse_exif_date(value: Any) -> Optional[datetime]:
    """Parse an EXIF date string ("2023:06:15 14:30:00").

    Sub-seconds and timezone suffixes are ignored. Placeholder dates such
    as "0000:00:00 00:00:00" return None.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip()[:19], EXIF_DATE_FORMAT)
    except ValueError:
        return None


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def extract_date(tags: Dict[str, Any]) -> Optional[datetime]:
    for tag in DATE_TAGS:
        date = parse_exif_date(tags.get(tag))
        if date:
            return date
    return None


def extract_gps(tags: Dict[str, Any]) -> Optional[GpsCoordinates]:
    """Build GPS coordinates from tags read with numeric (-n) output.

    Prefers the signed Composite values; falls back to the unsigned EXIF
    values with their N/S and E/W reference tags.
    """
    latitude = _as_float(tags.get("Composite:GPSLatitude"))
    longitude = _as_float(tags.get("Composite:GPSLongitude"))

    if latitude is None or longitude is None:
        latitude = _as_float(tags.get("EXIF:GPSLatitude"))
        longitude = _as_float(tags.get("EXIF:GPSLongitude"))
        if latitude is None or longitude is None:
            return None
        if _as_text(tags.get("EXIF:GPSLatitudeRef")).upper().startswith("S"):
            latitude = -abs(latitude)
        if _as_text(tags.get("EXIF:GPSLongitudeRef")).upper().startswith("W"):
            longitude = -abs(longitude)

    altitude = _as_float(tags.get("EXIF:GPSAltitude"))
    if altitude is not None and str(tags.get("EXIF:GPSAltitudeRef")) == "1":
        altitude = -altitude  # below sea level

    coordinates = GpsCoordinates(latitude=latitude, longitude=longitude, altitude=altitude)
    if not coordinates.is_valid():
        logger.debug(f"Ignoring out-of-range GPS coordinates: {coordinates}")
        return None
    return coordinates


def format_exposure(seconds: float) -> str:
    """Format an exposure time ("1/250s" or "2.0s")."""
    if seconds >= 1:
        return f"{seconds:.1f}s"
    return f"1/{int(round(1 / seconds))}s"


def extract_camera(tags: Dict[str, Any]) -> Optional[CameraInfo]:
    make = _as_text(tags.get("EXIF:Make"))
    model = _as_text(tags.get("EXIF:Model"))
    if not make and not model:
        return None

    settings = []
    iso = _as_float(tags.get("EXIF:ISO"))
    if iso is not None:
        settings.append(f"ISO {int(iso)}")

    f_number = _as_float(tags.get("EXIF:FNumber"))
    if f_number:
        settings.append(f"f/{f_number:.1f}")

    exposure = _as_float(tags.get("EXIF:ExposureTime"))
    if exposure:
        settings.append(format_exposure(exposure))

    focal = _as_float(tags.get("EXIF:FocalLength"))
    if focal:
        settings.append(f"{focal:.0f}mm")

    return CameraInfo(
        make=make,
        model=model,
        lens_model=_as_text(tags.get("EXIF:LensModel")) or None,
        settings=", ".join(settings) if settings else None,
    )


def file_date(filepath: str) -> Optional[datetime]:
    """Earlier of a file's creation and modification times."""
    try:
        st = os.stat(filepath)
    except OSError as e:
        logger.debug(f"Cannot stat {filepath}: {e}")
        return None
    return datetime.fromtimestamp(min(st.st_ctime, st.st_mtime))


def metadata_from_tags(filepath: str, tags: Dict[str, Any]) -> PhotoMetadata:
    """Build PhotoMetadata from an ExifTool tag dict.

    Args:
        filepath: Path of the photo (used for name and date fallback).
        tags: Tags as returned by ExifToolManager.read_tags().

    Returns:
        PhotoMetadata; date_taken falls back to the file date.
    """
    return PhotoMetadata(
        original_filename=os.path.basename(filepath),
        date_taken=extract_date(tags) or file_date(filepath),
        location=extract_gps(tags),
        camera=extract_camera(tags),
    )


def fallback_metadata(filepath: str, error: str) -> PhotoMetadata:
    """Metadata for a photo whose tags could not be read."""
    return PhotoMetadata(
        original_filename=os.path.basename(filepath),
        date_taken=file_date(filepath),
        additional_properties={EXTRACTION_ERROR_KEY: error},
    )


class MetadataReader:
    """Reads PhotoMetadata from image files.

    Usage:
        with MetadataReader() as reader:
            metadata = reader.extract("/photos/IMG_0001.jpg")

    Without a running ExifTool every photo gets fallback metadata (file
    date only) with an ExtractionError note.
    """

    def __init__(self, exiftool: Optional[ExifToolManager] = None):
        """Initialize reader.

        Args:
            exiftool: ExifTool manager to use. If None, one is created and
                owned by this reader (started by start()).
        """
        self._owns_exiftool = exiftool is None
        self._exiftool = exiftool

    def start(self) -> bool:
        """Start the owned ExifTool process if needed.

        Returns:
            True if ExifTool is available for reads.
        """
        if self._exiftool is None:
            self._exiftool = ExifToolManager()
        if not self._exiftool.is_running:
            self._exiftool.start()
        return self._exiftool.is_running

    def stop(self) -> None:
        """Stop ExifTool if this reader started it."""
        if self._owns_exiftool and self._exiftool:
            self._exiftool.stop()

    def __enter__(self) -> "MetadataReader":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    @property
    def available(self) -> bool:
        return self._exiftool is not None and self._exiftool.is_running

    @property
    def error(self) -> Optional[str]:
        """Why ExifTool is unavailable, if known."""
        return self._exiftool.error if self._exiftool else None

    def is_supported(self, filepath: str) -> bool:
        return is_supported_image(filepath)

    def extract(self, filepath: str) -> PhotoMetadata:
        """Read metadata for one photo.

        Args:
            filepath: Path to the photo.

        Returns:
            PhotoMetadata; never raises.
        """
        if not self.available:
            return fallback_metadata(filepath, self.error or "ExifTool unavailable")

        try:
            tags = self._exiftool.read_tags(filepath)
        except Exception as e:
            logger.debug(f"Metadata extraction failed for {filepath}: {e}")
            return fallback_metadata(filepath, str(e))

        try:
            return metadata_from_tags(filepath, tags)
        except Exception as e:
            logger.warning(f"Unexpected tag data in {filepath}: {e}")
            return fallback_metadata(filepath, str(e))

    def extract_batch(self, filepaths: List[str]) -> List[PhotoMetadata]:
        """Read metadata for many photos with a single ExifTool call.

        Returns:
            PhotoMetadata per path, in the same order.
        """
        if not self.available:
            return [self.extract(p) for p in filepaths]

        results = []
        for filepath, tags in zip(filepaths, self._exiftool.read_tags_batch(filepaths)):
            try:
                results.append(metadata_from_tags(filepath, tags))
            except Exception as e:
                logger.warning(f"Unexpected tag data in {filepath}: {e}")
                results.append(fallback_metadata(filepath, str(e)))
        return results
