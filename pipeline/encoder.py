"""WebP encoding of a decoded image for one rendition."""
import logging
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps
from PIL.Image import Resampling
from pydantic import BaseModel

from pipeline.decoder import DecodedImage
from pipeline.errors import EncodeError
from pipeline.resize_policy import ResizeTarget, fit_dimensions

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "WEBP"
OUTPUT_EXTENSION = ".webp"


class EncodedImage(BaseModel):
    path: Path
    width: int
    height: int
    size_bytes: int


def encode(decoded: DecodedImage, target: ResizeTarget, output_path: Path, quality: int) -> EncodedImage:
    """Resize `decoded` to `target` and write it to `output_path` as WebP.

    Each call opens its own image from `decoded.data`, so the full and
    thumbnail renditions never share mutable state. The returned dimensions are
    those of the written file. On failure nothing is left at `output_path`.
    """
    try:
        with Image.open(BytesIO(decoded.data)) as source:
            upright = ImageOps.exif_transpose(source)
            prepared = _prepare_mode(upright)
            size = fit_dimensions(prepared.width, prepared.height, target)
            if size != prepared.size:
                prepared = prepared.resize(size, resample=Resampling.LANCZOS)
            prepared.save(
                output_path,
                format=OUTPUT_FORMAT,
                quality=quality,
                icc_profile=_carried_profile(source, prepared),
            )
            width, height = prepared.size
        size_bytes = output_path.stat().st_size
    except (OSError, ValueError) as exc:
        output_path.unlink(missing_ok=True)
        raise EncodeError(decoded.source, f"could not write {output_path.name}: {exc}") from exc

    logger.debug("Wrote %s (%dx%d, %d bytes)", output_path, width, height, size_bytes)
    return EncodedImage(path=output_path, width=width, height=height, size_bytes=size_bytes)


def _prepare_mode(image: Image.Image) -> Image.Image:
    """WebP only stores RGB(A); convert palette, CMYK, greyscale and 16-bit images."""
    if image.mode in ("RGB", "RGBA"):
        return image
    if image.has_transparency_data:
        return image.convert("RGBA")
    return image.convert("RGB")


def _carried_profile(source: Image.Image, prepared: Image.Image) -> bytes | None:
    # A CMYK or greyscale profile does not describe converted RGB pixels.
    if source.mode == prepared.mode or {source.mode, prepared.mode} <= {"RGB", "RGBA"}:
        return source.info.get("icc_profile")
    return None
