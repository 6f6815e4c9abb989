"""Format decoding: turn an inbox file into bytes Pillow can open.

Plain raster formats pass through untouched. Camera-native formats (HEIC/HEIF
from phones, RAW from cameras) are converted once to an intermediate JPEG so
the encoder never has to touch the original codec again.
"""
import logging
from io import BytesIO
from pathlib import Path

import pillow_heif
import rawpy
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict, Field

from pipeline.errors import DecodeError

logger = logging.getLogger(__name__)

_RASTER_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif", ".tif", ".tiff", ".bmp"})
_HEIF_EXTENSIONS = frozenset({".heic", ".heif"})
_RAW_EXTENSIONS = frozenset({".dng", ".cr2", ".nef", ".arw"})

SUPPORTED_EXTENSIONS = _RASTER_EXTENSIONS | _HEIF_EXTENSIONS | _RAW_EXTENSIONS

_EXIF_ORIENTATION_TAG = 274
# EXIF orientation values that swap width/height for display
_TRANSPOSING_ORIENTATIONS = frozenset({5, 6, 7, 8})


class DecodedImage(BaseModel):
    """An input file decoded once and shared by both renditions.

    `data` is always something `PIL.Image.open` understands. `width` and
    `height` are the dimensions as displayed, i.e. after EXIF rotation.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    data: bytes
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    source_bytes: int = Field(ge=0)
    converted: bool = False


def is_supported(filename: str) -> bool:
    return Path(filename).suffix.lower() in SUPPORTED_EXTENSIONS


def decode(path: Path, filename: str | None = None, conversion_quality: int = 95) -> DecodedImage:
    """Read `path` and return a `DecodedImage`.

    `filename` is the name used for extension sniffing and error messages;
    it defaults to the file's own name. Raises `DecodeError` on any failure.
    """
    name = filename or path.name
    ext = Path(name).suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise DecodeError(name, f"unsupported file type {ext or '(none)'!r}")

    try:
        raw_bytes = path.read_bytes()
    except OSError as exc:
        raise DecodeError(name, f"could not read file: {exc}") from exc

    data = raw_bytes
    converted = False
    if ext in _HEIF_EXTENSIONS:
        logger.debug("Converting HEIF: %s", name)
        data = _run_conversion(name, _convert_heif, raw_bytes, conversion_quality)
        converted = True
    elif ext in _RAW_EXTENSIONS:
        logger.debug("Converting RAW: %s", name)
        data = _run_conversion(name, _convert_raw, raw_bytes, conversion_quality)
        converted = True

    width, height = _read_dimensions(name, data)
    return DecodedImage(
        source=name,
        data=data,
        width=width,
        height=height,
        source_bytes=len(raw_bytes),
        converted=converted,
    )


# ---------------------------------------------------------------------------
# Camera-native conversion
# ---------------------------------------------------------------------------

def _run_conversion(name: str, converter, data: bytes, quality: int) -> bytes:
    try:
        return converter(data, quality)
    except Exception as exc:
        raise DecodeError(name, f"format conversion failed: {exc}") from exc


def _convert_heif(data: bytes, quality: int) -> bytes:
    heif_file = pillow_heif.open_heif(BytesIO(data))
    return _to_jpeg_bytes(heif_file.to_pillow(), quality)


def _convert_raw(data: bytes, quality: int) -> bytes:
    with rawpy.imread(BytesIO(data)) as raw:
        rgb = raw.postprocess(use_camera_wb=True)
    return _to_jpeg_bytes(Image.fromarray(rgb), quality)


def _to_jpeg_bytes(image: Image.Image, quality: int) -> bytes:
    icc_profile = image.info.get("icc_profile")
    if image.mode not in ("RGB", "L"):
        if image.mode not in ("RGBA", "RGBX"):
            icc_profile = None
        image = image.convert("RGB")
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=quality, icc_profile=icc_profile)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

def _read_dimensions(name: str, data: bytes) -> tuple[int, int]:
    try:
        with Image.open(BytesIO(data)) as img:
            # Force a full decode so truncated files fail here, not in the encoder.
            img.load()
            width, height = img.size
            orientation = img.getexif().get(_EXIF_ORIENTATION_TAG, 1)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(name, f"not a readable image: {exc}") from exc

    if orientation in _TRANSPOSING_ORIENTATIONS:
        width, height = height, width
    return width, height
