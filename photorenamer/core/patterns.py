"""Built-in naming patterns for Photo Renamer.

The catalog is a fixed tuple; its order is the order suggestions are
generated and displayed in.
"""

import re
from typing import Iterable, List, Optional, Tuple

from photorenamer.core.models import NamingPattern

TOKENS = frozenset({"date", "time", "location", "camera", "custom"})

_TOKEN_RE = re.compile(r"\{([^{}]*)\}")

DEFAULT_PATTERN_ID = "date_time"

PATTERNS: Tuple[NamingPattern, ...] = (
    NamingPattern(
        id="date_time",
        name="Date & Time",
        template="{date}_{time}",
        description="YYYY-MM-DD_HH-mm",
    ),
    NamingPattern(
        id="date_only",
        name="Date Only",
        template="{date}",
        description="YYYY-MM-DD",
    ),
    NamingPattern(
        id="date_location",
        name="Date & Location",
        template="{date}_{location}",
        description="YYYY-MM-DD_CityName",
        requires_location=True,
    ),
    NamingPattern(
        id="date_location_time",
        name="Date, Location & Time",
        template="{date}_{location}_{time}",
        description="YYYY-MM-DD_Suburb_HH-mm",
        requires_location=True,
    ),
    NamingPattern(
        id="date_camera",
        name="Date & Camera",
        template="{date}_{camera}",
        description="YYYY-MM-DD_CameraModel",
        requires_camera=True,
    ),
    NamingPattern(
        id="date_custom",
        name="Date & Custom",
        template="{date}_{custom}",
        description="YYYY-MM-DD_YourText",
    ),
    NamingPattern(
        id="date_location_custom",
        name="Date, Location & Custom",
        template="{date}_{location}_{custom}",
        description="YYYY-MM-DD_Suburb_YourText",
        requires_location=True,
    ),
    NamingPattern(
        id="full",
        name="Full Details",
        template="{date}_{time}_{location}_{camera}",
        description="YYYY-MM-DD_HH-mm_Suburb_Camera",
        requires_location=True,
        requires_camera=True,
    ),
)


def template_tokens(template: str) -> List[str]:
    """List the token names referenced by a template, in order."""
    return _TOKEN_RE.findall(template)


def validate_catalog(patterns: Iterable[NamingPattern]) -> None:
    """Check a pattern catalog for programming errors.

    Raises:
        ValueError: If an id is duplicated, a template is empty, or a
            template references an unknown token.
    """
    seen = set()
    for pattern in patterns:
        if pattern.id in seen:
            raise ValueError(f"Duplicate naming pattern id: {pattern.id}")
        seen.add(pattern.id)

        if not pattern.template:
            raise ValueError(f"Naming pattern {pattern.id} has an empty template")

        unknown = [t for t in template_tokens(pattern.template) if t not in TOKENS]
        if unknown:
            raise ValueError(
                f"Naming pattern {pattern.id} uses unknown token(s): "
                + ", ".join("{" + t + "}" for t in unknown)
            )


def get_available_patterns() -> List[NamingPattern]:
    """Get all naming patterns in display order."""
    return list(PATTERNS)


def get_pattern(pattern_id: str) -> Optional[NamingPattern]:
    """Look up a naming pattern by id.

    Returns:
        The pattern, or None if no pattern has that id.
    """
    for pattern in PATTERNS:
        if pattern.id == pattern_id:
            return pattern
    return None


validate_catalog(PATTERNS)
