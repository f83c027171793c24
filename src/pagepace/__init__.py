"""pagepace - reading deadline tracking with pace and daily targets."""

__version__ = "0.1.0"
