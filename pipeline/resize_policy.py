"""Target sizes for the two renditions.

Full images are capped along their long side (width for landscape, height for
portrait and square) so they keep natural framing in the viewer. Thumbnails
are always capped by width so they line up in a fixed-column grid. Neither
rendition is ever enlarged.
"""
import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Profile = Literal["full", "thumb"]


class ResizeTarget(BaseModel):
    """Constraint handed to the encoder. The unset axis follows the aspect ratio."""

    model_config = ConfigDict(frozen=True)

    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)


def resize_target(
    native_width: int,
    native_height: int,
    profile: Profile,
    max_dimension: int,
    thumb_max_width: int,
) -> ResizeTarget:
    if profile == "thumb":
        return ResizeTarget(width=min(thumb_max_width, native_width))
    if native_width > native_height:
        return ResizeTarget(width=min(max_dimension, native_width))
    return ResizeTarget(height=min(max_dimension, native_height))


def fit_dimensions(native_width: int, native_height: int, target: ResizeTarget) -> tuple[int, int]:
    """Actual output size for `target`, preserving aspect ratio without enlargement."""
    if target.width is not None:
        width = min(target.width, native_width)
        height = _scale(native_height, width / native_width)
        return width, height
    if target.height is not None:
        height = min(target.height, native_height)
        width = _scale(native_width, height / native_height)
        return width, height
    return native_width, native_height


def _scale(length: int, ratio: float) -> int:
    # Round half up, never below one pixel.
    return max(1, math.floor(length * ratio + 0.5))
