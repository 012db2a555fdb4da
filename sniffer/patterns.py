"""User agent token extraction and version bounding."""

import math
import re

# Sentinel for a version that could not be determined. Real versions are >= 0.
UNKNOWN = -1

Number = int | float


def looks_like(pattern: str, text: str, flags: int = re.IGNORECASE) -> bool:
    """Return whether `pattern` matches anywhere in `text`."""
    return re.search(pattern, text, flags) is not None


def extract(text: str, pattern: str, flags: int = re.IGNORECASE) -> str | None:
    """Return the first capture group of `pattern` in `text`, if any."""
    match = re.search(pattern, text, flags)
    return match.group(1) if match else None


def extract_int(text: str, pattern: str, radix: int = 10, flags: int = re.IGNORECASE) -> int:
    """Parse the first capture group of `pattern` as an integer, or `UNKNOWN`."""
    token = extract(text, pattern, flags)
    if token is None:
        return UNKNOWN
    try:
        return int(token, radix)
    except ValueError:
        return UNKNOWN


def extract_float(text: str, pattern: str, flags: int = re.IGNORECASE) -> float:
    """Parse the first capture group of `pattern` as a float, or `UNKNOWN`."""
    token = extract(text, pattern, flags)
    if token is None:
        return UNKNOWN
    try:
        return float(token)
    except ValueError:
        return UNKNOWN


def bound(reported: Number, floor: Number, ceiling: Number = math.inf) -> Number:
    """Clamp a user agent version into the range known valid for a capability.

    `floor` is the release that introduced the capability and `ceiling` the
    newest release sharing it. A reported version below the floor cannot be
    right, so the floor wins; one above the ceiling is clamped to it.
    """
    if reported < floor:
        return floor
    return min(reported, ceiling)


def version_label(version: Number) -> str:
    """Render a numeric version the way OS versions are reported, "-1" if unknown."""
    return str(UNKNOWN) if version == UNKNOWN else str(version)
