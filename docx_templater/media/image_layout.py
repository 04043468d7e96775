"""
Image layout for embedded pictures.

Computes the final drawing extent in EMU and builds the inline DrawingML run
that displays an image relationship.
"""

import logging
import math
from typing import Optional, Tuple
from xml.sax.saxutils import quoteattr

from ..utils.units import EMU_PER_INCH, inches_to_emu, pixels_to_emu

logger = logging.getLogger(__name__)

NS_WP = "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
NS_A = "http://schemas.openxmlformats.org/drawingml/2006/main"
NS_PIC = "http://schemas.openxmlformats.org/drawingml/2006/picture"
NS_R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

DEFAULT_MAX_INCHES = 6.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_extent(
    pixel_size: Tuple[int, int],
    width_inches: Optional[float] = None,
    height_inches: Optional[float] = None,
    max_width_inches: float = DEFAULT_MAX_INCHES,
    max_height_inches: float = DEFAULT_MAX_INCHES,
) -> Tuple[int, int]:
    """
    Compute the displayed size of an image in EMU.

    Explicit inches win: both given are used as-is (the image may be
    stretched), one given keeps the pixel aspect ratio. Without explicit
    inches the pixel size is used, scaled down uniformly so that neither side
    exceeds its maximum.

    Args:
        pixel_size: Sniffed (width, height) in pixels
        width_inches: Requested width
        height_inches: Requested height
        max_width_inches: Width cap for the automatic size
        max_height_inches: Height cap for the automatic size

    Returns:
        (cx, cy) rounded to whole EMU
    """
    px_width, px_height = pixel_size

    if width_inches and height_inches:
        cx = inches_to_emu(width_inches)
        cy = inches_to_emu(height_inches)
    elif width_inches:
        cx = inches_to_emu(width_inches)
        cy = cx * (px_height / px_width)
    elif height_inches:
        cy = inches_to_emu(height_inches)
        cx = cy * (px_width / px_height)
    else:
        cx = pixels_to_emu(px_width)
        cy = pixels_to_emu(px_height)
        max_cx = max_width_inches * EMU_PER_INCH
        max_cy = max_height_inches * EMU_PER_INCH
        if cx > max_cx:
            ratio = max_cx / cx
            cx = max_cx
            cy = cy * ratio
        if cy > max_cy:
            ratio = max_cy / cy
            cy = max_cy
            cx = cx * ratio

    extent = _round_half_up(cx), _round_half_up(cy)
    logger.debug(f"Image extent for {px_width}x{px_height}px: {extent[0]}x{extent[1]} EMU")
    return extent


def build_drawing_xml(rel_id: str, extent: Tuple[int, int], drawing_id: int = 1,
                      name: str = "Picture") -> str:
    """
    Build an inline picture run.

    Namespaces other than ``w`` are declared on the elements that use them,
    so the markup is valid in any part that declares the main namespace.

    Args:
        rel_id: Relationship id of the image part
        extent: (cx, cy) in EMU
        drawing_id: Unique ``docPr`` id within the part
        name: Picture name shown in the host application

    Returns:
        ``<w:r>`` element as a string
    """
    cx, cy = extent
    name_attr = quoteattr(name)
    return (
        "<w:r><w:drawing>"
        f'<wp:inline xmlns:wp="{NS_WP}" distT="0" distB="0" distL="0" distR="0">'
        f'<wp:extent cx="{cx}" cy="{cy}"/>'
        '<wp:effectExtent l="0" t="0" r="0" b="0"/>'
        f"<wp:docPr id=\"{drawing_id}\" name={name_attr}/>"
        "<wp:cNvGraphicFramePr>"
        f'<a:graphicFrameLocks xmlns:a="{NS_A}" noChangeAspect="1"/>'
        "</wp:cNvGraphicFramePr>"
        f'<a:graphic xmlns:a="{NS_A}">'
        f'<a:graphicData uri="{NS_PIC}">'
        f'<pic:pic xmlns:pic="{NS_PIC}">'
        "<pic:nvPicPr>"
        f"<pic:cNvPr id=\"{drawing_id}\" name={name_attr}/>"
        "<pic:cNvPicPr/>"
        "</pic:nvPicPr>"
        "<pic:blipFill>"
        f'<a:blip xmlns:r="{NS_R}" r:embed="{rel_id}"/>'
        "<a:stretch><a:fillRect/></a:stretch>"
        "</pic:blipFill>"
        "<pic:spPr>"
        f'<a:xfrm><a:off x="0" y="0"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
        '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>'
        "</pic:spPr>"
        "</pic:pic>"
        "</a:graphicData>"
        "</a:graphic>"
        "</wp:inline>"
        "</w:drawing></w:r>"
    )
