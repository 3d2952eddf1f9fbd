"""
Raster engine: executes a SizingResult with Pillow.

The sizing policy decides WHAT to produce; this module does the pixel work:
- applies EXIF orientation before measuring, cropping or resizing
- crops from the first frame and flattens onto a white background (thumbnails)
- writes resized stills as PNG, or in the format the plan asks for
- keeps animations animated: small ones are passed through untouched,
  larger ones are resized frame by frame in their original format

All functions here are blocking; async callers wrap them in asyncio.to_thread().
"""

import logging
import os
import uuid
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageOps, ImageSequence

from imaging.sizing import SizingResult
from models.errors import ToolError

logger = logging.getLogger(__name__)

ORIENTATION_TAG = 0x0112
# Orientations 5-8 rotate the image by 90 degrees, swapping width and height
TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}
ANIMATED_FORMATS = {"GIF", "PNG", "WEBP"}


@dataclass(frozen=True)
class ImageInfo:
    width: int
    height: int
    format: Optional[str]
    is_animated: bool


@dataclass(frozen=True)
class TransformedImage:
    path: str
    width: int
    height: int


def identify(path: str) -> ImageInfo:
    """Report the oriented dimensions of the first frame, the format and whether it animates."""
    try:
        with Image.open(path) as img:
            width, height = img.size
            if img.getexif().get(ORIENTATION_TAG) in TRANSPOSED_ORIENTATIONS:
                width, height = height, width
            is_animated = bool(getattr(img, "is_animated", False)) and img.format in ANIMATED_FORMATS
            return ImageInfo(width, height, img.format, is_animated)
    except (OSError, Image.DecompressionBombError) as e:
        raise ToolError(f"Unable to identify image {os.path.basename(path)}: {e}") from e


def transform(
    path: str,
    plan: SizingResult,
    directory: str,
    passthrough_width: Optional[int] = None,
) -> TransformedImage:
    """
    Produce the image described by plan inside directory.

    Args:
        path: source image
        plan: output of plan_full_image() or plan_thumbnail()
        directory: the job's scratch directory
        passthrough_width: animated sources no wider than this are returned
                           as-is instead of being re-encoded

    Returns:
        TransformedImage with the output path and its pixel dimensions.
    """
    info = identify(path)

    try:
        if plan.crop is None and info.is_animated:
            if passthrough_width is not None and info.width <= passthrough_width:
                logger.debug(f"Passing animated {info.format} through unresized: {path}")
                return TransformedImage(path, info.width, info.height)
            return _resize_animation(path, plan, directory)
        return _render_still(path, plan, directory)
    except (OSError, ValueError) as e:
        raise ToolError(f"Unable to transform image {os.path.basename(path)}: {e}") from e


def _output_path(directory: str, prefix: str, size: tuple[int, int], extension: str) -> str:
    filename = f"{prefix}_{size[0]}x{size[1]}_{uuid.uuid4().hex[:8]}.{extension}"
    return os.path.join(directory, filename)


def _flatten(image: Image.Image) -> Image.Image:
    """Composite onto white so transparent areas don't turn black."""
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def _normalize_mode(image: Image.Image) -> Image.Image:
    if image.mode in ("RGB", "RGBA", "L", "LA"):
        return image
    if image.mode in ("P", "PA") or "transparency" in image.info:
        return image.convert("RGBA")
    return image.convert("RGB")


def _render_still(path: str, plan: SizingResult, directory: str) -> TransformedImage:
    size = plan.pixel_size

    with Image.open(path) as img:
        img.seek(0)
        frame = ImageOps.exif_transpose(img)

        if plan.crop is not None:
            frame = _flatten(frame).crop(plan.crop.box)
            prefix = "thumbnail"
        else:
            frame = _normalize_mode(frame)
            prefix = "resized"

        frame = frame.resize(size, Image.Resampling.LANCZOS)

    image_format = (plan.format or "PNG").upper()
    if image_format == "JPEG" and frame.mode != "RGB":
        frame = _flatten(frame)
    output_path = _output_path(directory, prefix, size, image_format.lower())
    frame.save(output_path, image_format)
    return TransformedImage(output_path, size[0], size[1])


def _resize_animation(path: str, plan: SizingResult, directory: str) -> TransformedImage:
    size = plan.pixel_size

    with Image.open(path) as img:
        image_format = img.format
        loop = img.info.get("loop", 0)
        frames = []
        durations = []
        for frame in ImageSequence.Iterator(img):
            durations.append(frame.info.get("duration", 100))
            frames.append(frame.convert("RGBA").resize(size, Image.Resampling.LANCZOS))

    output_path = _output_path(directory, "resized", size, image_format.lower())
    frames[0].save(
        output_path,
        format=image_format,
        save_all=True,
        append_images=frames[1:],
        duration=durations,
        loop=loop,
        disposal=2,
    )
    return TransformedImage(output_path, size[0], size[1])
