"""
Units for DOCX drawings.

DrawingML measures extents in EMU (English Metric Units).
"""

EMU_PER_INCH = 914400
EMU_PER_PIXEL = 9525  # 914400 / 96 DPI


def inches_to_emu(inches: float) -> float:
    """Convert inches to EMU (not rounded)."""
    if not isinstance(inches, (int, float)):
        raise ValueError("Inch value must be a number")
    return inches * EMU_PER_INCH


def pixels_to_emu(pixels: float) -> float:
    """Convert pixels at 96 DPI to EMU (not rounded)."""
    if not isinstance(pixels, (int, float)):
        raise ValueError("Pixel value must be a number")
    return pixels * EMU_PER_PIXEL
