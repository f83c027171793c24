"""Unit conversion and display formatting."""

from .converter import (
    DisplayQuantity,
    format_pace,
    format_quantity,
    parse_audio_time,
    to_base_unit,
    to_display,
    unit_label,
)

__all__ = [
    "DisplayQuantity",
    "format_pace",
    "format_quantity",
    "parse_audio_time",
    "to_base_unit",
    "to_display",
    "unit_label",
]
