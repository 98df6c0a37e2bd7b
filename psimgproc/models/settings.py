from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from .enums import ImageFormat
from .errors import ConstraintViolation
from psimgproc.imaging.sizes import binding_dimension, fit_within

@dataclass(frozen=True)
class OpenConstraint:
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ConstraintViolation(
                f"Target box must be positive, got {self.width}x{self.height}"
            )

    def binding(self, source_width: float, source_height: float) -> str:
        return binding_dimension(source_width, source_height, self.width, self.height)

    def fit(self, source_width: float, source_height: float) -> Tuple[float, float]:
        return fit_within(source_width, source_height, self.width, self.height)

@dataclass(frozen=True)
class RunSettings:
    width: float
    height: float
    output_dir: Path
    output_format: Optional[ImageFormat] = None   # None: same as source
    extend_canvas: bool = False
    transparent_background: bool = False
    stop_on_first_error: bool = False

    @property
    def constraint(self) -> OpenConstraint:
        return OpenConstraint(self.width, self.height)
