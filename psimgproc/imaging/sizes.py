from __future__ import annotations
from typing import Tuple

POINTS_PER_INCH = 72

def binding_dimension(src_w: float, src_h: float, box_w: float, box_h: float) -> str:
    """Return the axis that limits a fit-inside-box resize: "width" or "height"."""
    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"Source size must be positive, got {src_w}x{src_h}")
    if src_w / src_h <= box_w / box_h:
        return "height"
    return "width"

def fit_within(src_w: float, src_h: float, box_w: float, box_h: float) -> Tuple[float, float]:
    if binding_dimension(src_w, src_h, box_w, box_h) == "height":
        return (src_w * box_h / src_h, box_h)
    return (box_w, src_h * box_w / src_w)

def pixel_unit(px: float, resolution: float) -> float:
    """Pixels at ``resolution`` expressed in points, the unit vector opens expect."""
    return px * POINTS_PER_INCH / resolution
