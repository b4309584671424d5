"""Filename suggestion engine for Photo Renamer.

Builds filenames from naming patterns and photo metadata. Missing metadata
never causes an error: every token has a fallback value.
"""

import logging
import re
from typing import List, Optional, Protocol

from photorenamer.core.models import (
    FilenameSuggestion, LocationInfo, NamingPattern, PhotoMetadata
)
from photorenamer.core.patterns import PATTERNS, get_available_patterns
from photorenamer.core.utils import sanitize_filename

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
DEFAULT_TIME = "00-00"
DEFAULT_CAMERA = "Camera"
DEFAULT_CUSTOM = "Custom"

MAX_CAMERA_LENGTH = 20

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


class LocationLookup(Protocol):
    """Anything that can turn coordinates into a place name."""

    def reverse_lookup(self, latitude: float, longitude: float) -> Optional[LocationInfo]:
        ...


def simplify_camera_name(model: Optional[str]) -> str:
    """Shorten a camera model for use in a filename.

    Examples:
        >>> simplify_camera_name("Canon EOS 5D Mark IV")
        'CanonEOS5DMarkIV'
        >>> simplify_camera_name("COOLPIX P900 DIGITAL CAMERA")
        'COOLPIXP900'
    """
    if not model:
        return DEFAULT_CAMERA

    simplified = model.replace("Digital Camera", "").replace("DIGITAL CAMERA", "").strip()
    simplified = _NON_ALNUM.sub("", simplified)[:MAX_CAMERA_LENGTH]

    return simplified or DEFAULT_CAMERA


class SuggestionEngine:
    """Generates filename suggestions from photo metadata.

    Stateless apart from the optional geocoder, so one engine can serve
    several threads as long as the geocoder is thread-safe.

    Usage:
        engine = SuggestionEngine(geocoder=NominatimGeocoder())

        for suggestion in engine.generate_all_applicable(metadata):
            print(suggestion.pattern, suggestion.suggested_name)

        pattern = get_pattern("date_custom")
        engine.generate_for_pattern(metadata, pattern, custom_tag="Holiday")
    """

    def __init__(self, geocoder: Optional[LocationLookup] = None):
        """Initialize engine.

        Args:
            geocoder: Reverse geocoder used for {location}. Without one,
                {location} always resolves to "Unknown".
        """
        self.geocoder = geocoder

    def get_available_patterns(self) -> List[NamingPattern]:
        return get_available_patterns()

    def generate_all_applicable(self, metadata: PhotoMetadata) -> List[FilenameSuggestion]:
        """Generate one suggestion per pattern the metadata can support.

        Patterns that need location or camera data are skipped when the
        metadata lacks it.

        Args:
            metadata: Photo metadata.

        Returns:
            Suggestions in catalog order.
        """
        suggestions = []
        for pattern in PATTERNS:
            if pattern.requires_location and metadata.location is None:
                continue
            if pattern.requires_camera and metadata.camera is None:
                continue
            suggestions.extend(self.generate_for_pattern(metadata, pattern))
        return suggestions

    def generate_for_pattern(
        self,
        metadata: PhotoMetadata,
        pattern: NamingPattern,
        custom_tag: Optional[str] = None
    ) -> List[FilenameSuggestion]:
        """Generate the suggestion for a single pattern.

        Requirement flags are not checked here; a pattern that needs
        location data still produces a name, with "Unknown" in its place.

        Args:
            metadata: Photo metadata.
            pattern: Pattern to apply.
            custom_tag: Text for the {custom} token.

        Returns:
            List with one suggestion.
        """
        return [FilenameSuggestion(
            suggested_name=sanitize_filename(self.build_filename(metadata, pattern, custom_tag)),
            pattern=pattern.id,
            pattern_description=pattern.description
        )]

    def build_filename(
        self,
        metadata: PhotoMetadata,
        pattern: NamingPattern,
        custom_tag: Optional[str] = None
    ) -> str:
        """Substitute metadata into a pattern's template (unsanitized)."""
        result = pattern.template
        date_taken = metadata.date_taken

        if "{date}" in result:
            date_str = date_taken.strftime("%Y-%m-%d") if date_taken else UNKNOWN
            result = result.replace("{date}", date_str)

        if "{time}" in result:
            time_str = date_taken.strftime("%H-%M") if date_taken else DEFAULT_TIME
            result = result.replace("{time}", time_str)

        if "{location}" in result:
            result = result.replace("{location}", self._location_name(metadata))

        if "{camera}" in result:
            model = metadata.camera.model if metadata.camera else None
            result = result.replace("{camera}", simplify_camera_name(model))

        if "{custom}" in result:
            custom = custom_tag.strip() if custom_tag and custom_tag.strip() else DEFAULT_CUSTOM
            result = result.replace("{custom}", custom)

        return result

    def _location_name(self, metadata: PhotoMetadata) -> str:
        """Resolve {location}; lookup failures degrade to "Unknown"."""
        if metadata.location is None or self.geocoder is None:
            return UNKNOWN

        try:
            info = self.geocoder.reverse_lookup(
                metadata.location.latitude, metadata.location.longitude
            )
        except Exception as e:
            logger.debug(f"Location lookup failed for {metadata.location}: {e}")
            return UNKNOWN

        if info is None:
            return UNKNOWN
        return info.short_name or UNKNOWN
