"""
Image previews, plus the thumbnail/full-image routine every other processor reuses.

render_previews() runs the sizing policy against the source's own reported
dimensions and hands each plan to the raster engine:

    identify(source)          → 1920x1080
    plan_full_image(…, 1280)  → resize to 1280x720        → resized_1280x720_….png
    plan_thumbnail(…, 400x300)→ crop 1440x1080 at (240,0) → thumbnail_400x300_….png

SVGs are rasterized to PNG first.
"""

import asyncio
import logging
from dataclasses import dataclass

from config.settings import settings
from imaging import engine
from imaging.sizing import plan_full_image, plan_thumbnail
from integrations.svg import svg_to_png
from models.enums import JobKind
from models.job import PreviewJob
from models.result import Result
from previews.base import AbstractPreviewProcessor

logger = logging.getLogger(__name__)

SVG_MIME_TYPE = "image/svg+xml"


@dataclass(frozen=True)
class RenderedPreviews:
    thumbnail: str
    image: str
    metadata: dict


async def render_previews(job: PreviewJob, path: str) -> RenderedPreviews:
    """Generate the full image and the thumbnail for a local raster file."""
    info = await asyncio.to_thread(engine.identify, path)

    full_plan = plan_full_image(info.width, info.height, settings.IMAGE_WIDTH)
    image = await asyncio.to_thread(
        engine.transform, path, full_plan, job.directory, settings.IMAGE_WIDTH
    )

    thumbnail_plan = plan_thumbnail(
        info.width, info.height, settings.THUMBNAIL_WIDTH, settings.THUMBNAIL_HEIGHT
    )
    thumbnail = await asyncio.to_thread(engine.transform, path, thumbnail_plan, job.directory)

    logger.debug(
        f"Rendered {info.width}x{info.height} {info.format} into "
        f"{image.width}x{image.height} image and {thumbnail.width}x{thumbnail.height} thumbnail"
    )
    return RenderedPreviews(
        thumbnail=thumbnail.path,
        image=image.path,
        metadata={"image_width": image.width, "image_height": image.height},
    )


class ImagePreview(AbstractPreviewProcessor):

    async def run(self, job: PreviewJob) -> Result:
        path = job.source
        if job.mime_type == SVG_MIME_TYPE:
            path = await svg_to_png(path, job.directory)

        rendered = await render_previews(job, path)
        return Result.done(rendered.thumbnail, rendered.image, rendered.metadata)

    @property
    def kind(self) -> JobKind:
        return JobKind.IMAGE
