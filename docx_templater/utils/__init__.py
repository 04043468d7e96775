"""Helper utilities: logging setup and unit conversion."""

from .logger import setup_logging, set_log_level
from .units import EMU_PER_INCH, EMU_PER_PIXEL, inches_to_emu, pixels_to_emu

__all__ = [
    "setup_logging",
    "set_log_level",
    "EMU_PER_INCH",
    "EMU_PER_PIXEL",
    "inches_to_emu",
    "pixels_to_emu",
]
