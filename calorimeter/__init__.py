"""Control and data-acquisition core for a drop calorimeter furnace."""

__version__ = "0.1.0"

__all__ = [
    "adc",
    "arduino",
    "channel",
    "conversion",
    "devices",
    "diagnostic",
    "furnace",
    "logview",
    "recorder",
    "shared",
]