"""Conversion between a deadline's base unit and its display form.

Pages are stored and shown as-is. Audio is stored in minutes and shown as
hours plus minutes.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional

from ..db.schemas import DeadlineFormat
from ..errors import ValidationError

MINUTES_PER_HOUR = 60

_COLON_RE = re.compile(r"^(\d+):(\d+)(?::(\d+))?$")
_DECIMAL_HOURS_RE = re.compile(r"^(\d+)[.,](\d+)\s*h(?:ours?)?$", re.IGNORECASE)
_HOURS_MINUTES_RE = re.compile(
    r"^(\d+)\s*(?:h|hours?|hrs?)\s*(?:(\d+)\s*(?:m|minutes?|mins?))?$", re.IGNORECASE
)
_MINUTES_RE = re.compile(r"^(\d+)\s*(?:m|minutes?|mins?)$", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^(\d+)$")


@dataclass(frozen=True)
class DisplayQuantity:
    """A quantity split for display.

    For audio, ``primary`` is hours and ``secondary`` minutes. For pages,
    ``primary`` is the page count and ``secondary`` is always 0.
    """

    primary: int
    secondary: int = 0


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ValidationError(f"{name} cannot be negative: {value}")


def to_display(format: DeadlineFormat, total_units: int) -> DisplayQuantity:
    """Split a base-unit quantity for display.

    Args:
        format: Deadline format
        total_units: Quantity in pages or minutes

    Returns:
        DisplayQuantity for the format

    Raises:
        ValidationError: If total_units is negative
    """
    _check_non_negative("Quantity", total_units)

    if format.is_audio:
        hours, minutes = divmod(total_units, MINUTES_PER_HOUR)
        return DisplayQuantity(primary=int(hours), secondary=int(minutes))
    return DisplayQuantity(primary=total_units)


def to_base_unit(format: DeadlineFormat, primary: int, secondary: int = 0) -> int:
    """Join a display quantity back into the base unit.

    Args:
        format: Deadline format
        primary: Hours for audio, pages otherwise
        secondary: Extra minutes for audio; must be 0 for pages

    Returns:
        Quantity in minutes for audio, pages otherwise

    Raises:
        ValidationError: On negative parts, or minutes given for a page format
    """
    _check_non_negative("Primary quantity", primary)
    _check_non_negative("Secondary quantity", secondary)

    if format.is_audio:
        return primary * MINUTES_PER_HOUR + secondary
    if secondary:
        raise ValidationError(f"{format.value} has no secondary unit, got {secondary}")
    return primary


def unit_label(format: DeadlineFormat) -> str:
    """Get the plural unit name for a format."""
    return "minutes" if format.is_audio else "pages"


def format_quantity(format: DeadlineFormat, units: int) -> str:
    """Format a quantity for display, e.g. '2h 5m' or '120'."""
    if format.is_audio:
        display = to_display(format, units)
        if display.primary > 0:
            return f"{display.primary}h {display.secondary}m"
        return f"{display.secondary}m"
    return f"{units}"


def format_pace(format: DeadlineFormat, units_per_day: float) -> str:
    """Format a daily pace, e.g. '1h 10m/day' or '25 pages/day'."""
    rounded = max(0, round(units_per_day))
    if format.is_audio:
        hours, minutes = divmod(rounded, MINUTES_PER_HOUR)
        if hours > 0:
            return f"{hours}h {minutes}m/day"
        return f"{minutes}m/day"
    return f"{rounded} pages/day"


def parse_audio_time(text: str) -> Optional[int]:
    """Parse a free-form audiobook length into minutes.

    Accepts '1:30', '1:30:15' (seconds dropped), '2.5h', '2h 30m',
    '45 min' and plain minutes like '90'.

    Args:
        text: User input

    Returns:
        Minutes, 0 for blank input, or None if the text is not understood
    """
    normalized = " ".join(str(text).split())
    if not normalized:
        return 0

    match = _COLON_RE.match(normalized)
    if match:
        return int(match.group(1)) * MINUTES_PER_HOUR + int(match.group(2))

    match = _DECIMAL_HOURS_RE.match(normalized)
    if match:
        hours = int(match.group(1))
        fraction = int(match.group(2)) / (10 ** len(match.group(2)))
        return math.floor(hours * MINUTES_PER_HOUR + fraction * MINUTES_PER_HOUR)

    match = _HOURS_MINUTES_RE.match(normalized)
    if match:
        return int(match.group(1)) * MINUTES_PER_HOUR + int(match.group(2) or 0)

    match = _MINUTES_RE.match(normalized)
    if match:
        return int(match.group(1))

    match = _NUMBER_RE.match(normalized)
    if match:
        return int(match.group(1))

    return None
