"""Conversion between engine-normalized regions and pixel bounding boxes.

The recognition engine reports regions in the unit square with the origin at
the bottom-left and Y growing upward. Output boxes are absolute pixels with
the origin at the top-left and Y growing downward.
"""

from dataclasses import dataclass

from .results import BoundingBox
from .rounding import round3


@dataclass(frozen=True)
class NormalizedRect:
    """Region in unit-square coordinates, origin bottom-left."""

    x: float
    y: float
    width: float
    height: float


def to_pixel_bbox(
    region: NormalizedRect, image_width: int, image_height: int
) -> BoundingBox:
    """Map a normalized region onto a top-left origin pixel box.

    Args:
        region: Engine-reported region in unit-square coordinates.
        image_width: Width of the source image in pixels.
        image_height: Height of the source image in pixels.

    Returns:
        Bounding box rounded to three decimals.
    """
    abs_x = region.x * image_width
    abs_y = region.y * image_height
    abs_width = region.width * image_width
    abs_height = region.height * image_height

    flipped_y = image_height - abs_y - abs_height

    return BoundingBox(
        x=round3(abs_x),
        y=round3(flipped_y),
        width=round3(abs_width),
        height=round3(abs_height),
    )


def from_pixel_box(
    left: float,
    top: float,
    width: float,
    height: float,
    image_width: int,
    image_height: int,
) -> NormalizedRect:
    """Express a top-left origin pixel box in engine-normalized coordinates.

    Inverse of :func:`to_pixel_bbox` before rounding. Engines that report
    pixel boxes (Tesseract) go through this so every region enters the
    builder in the same convention.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(
            f"Image dimensions must be positive, got {image_width}x{image_height}"
        )
    return NormalizedRect(
        x=left / image_width,
        y=(image_height - top - height) / image_height,
        width=width / image_width,
        height=height / image_height,
    )
