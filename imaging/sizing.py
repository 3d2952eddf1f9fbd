"""
Image sizing policy: pure geometry, no pixels.

Given the natural dimensions of a source image, work out what the raster
engine should produce for:

- the full image: aspect-preserving, never upscaled, capped at max_width
- the thumbnail: a fixed thumb_w x thumb_h box, filled by cropping the
  largest rectangle with the thumbnail's aspect ratio and then resizing it

Example (thumbnail 200x200 from a 1920x1080 landscape frame):
    ratio = min(1920/200, 1080/200) = 5.4
    crop  = 1080x1080 at x=(1920-1080)//2=420, y=(1080-1080)//3=0
    then resize 1080x1080 → 200x200

Landscape sources are cropped from the horizontal middle, a third of the way
down. Portrait and square sources are cropped from the top-left corner since
they are usually documents with the pertinent information at the top.
"""

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CropRect:
    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        """(left, upper, right, lower) as Pillow expects it."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass(frozen=True)
class SizingResult:
    target_width: float
    target_height: float
    source_width: int
    source_height: int
    crop: Optional[CropRect] = None
    format: Optional[str] = None      # output format for stills; None means PNG

    @property
    def pixel_size(self) -> tuple[int, int]:
        """Target dimensions rounded to whole pixels (never below 1)."""
        return (max(1, round(self.target_width)), max(1, round(self.target_height)))

    @property
    def is_resize(self) -> bool:
        return self.crop is not None or self.pixel_size != (self.source_width, self.source_height)


def _check_dimensions(**dims: float) -> None:
    for name, value in dims.items():
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")


def plan_full_image(
    source_width: int, source_height: int, max_width: int, output_format: Optional[str] = None
) -> SizingResult:
    """Fit the source to max_width, keeping its aspect ratio. Never upscales."""
    _check_dimensions(source_width=source_width, source_height=source_height, max_width=max_width)

    if source_width <= max_width:
        return SizingResult(source_width, source_height, source_width, source_height, format=output_format)

    target_height = max_width * source_height / source_width
    return SizingResult(max_width, target_height, source_width, source_height, format=output_format)


def plan_thumbnail(
    source_width: int,
    source_height: int,
    thumb_width: int,
    thumb_height: int,
    output_format: Optional[str] = None,
) -> SizingResult:
    """Crop the largest thumb-shaped rectangle out of the source, then resize it."""
    _check_dimensions(
        source_width=source_width,
        source_height=source_height,
        thumb_width=thumb_width,
        thumb_height=thumb_height,
    )

    width_ratio = source_width / thumb_width
    height_ratio = source_height / thumb_height
    ratio = min(width_ratio, height_ratio)

    crop_width = max(1, math.floor(thumb_width * ratio))
    crop_height = max(1, math.floor(thumb_height * ratio))

    x, y = 0, 0
    if source_width > source_height:
        x = math.floor((source_width - crop_width) / 2)
        y = math.floor((source_height - crop_height) / 3)

    return SizingResult(
        target_width=thumb_width,
        target_height=thumb_height,
        source_width=source_width,
        source_height=source_height,
        crop=CropRect(x, y, crop_width, crop_height),
        format=output_format,
    )
