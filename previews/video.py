"""
Video previews.

1. grab one frame (a little way in, to skip black lead-in frames)
2. run the frame through the image routine
3. if the video isn't H.264 already, transcode it so it plays in an HTML5
   <video> element; the converted file is reported as metadata["converted_video"]
"""

import logging
from typing import Optional

from config.settings import settings
from integrations.video import VideoEngine
from models.enums import JobKind
from models.job import PreviewJob
from models.result import Result
from previews.base import AbstractPreviewProcessor
from previews.image import render_previews

logger = logging.getLogger(__name__)

PLAYABLE_CODEC = "h264"


class VideoPreview(AbstractPreviewProcessor):

    def __init__(self, engine: Optional[VideoEngine] = None):
        self._engine = engine or VideoEngine()

    async def run(self, job: PreviewJob) -> Result:
        duration = await self._engine.probe_duration(job.source)
        offset = min(settings.VIDEO_FRAME_OFFSET, duration / 2) if duration else 0.0

        frame_path = await self._engine.extract_frame(job.source, job.directory, offset)
        rendered = await render_previews(job, frame_path)

        conversion = {}
        converted_path = await self._convert_if_necessary(job)
        if converted_path:
            conversion["converted_video"] = converted_path

        return Result.done(rendered.thumbnail, rendered.image, rendered.metadata, conversion)

    async def _convert_if_necessary(self, job: PreviewJob) -> Optional[str]:
        codec = await self._engine.probe_codec(job.source)
        if codec.startswith(PLAYABLE_CODEC):
            return None

        logger.info(f"Transcoding {codec or 'unknown'} video to H.264: {job.source}")
        return await self._engine.transcode(job.source, job.directory)

    @property
    def kind(self) -> JobKind:
        return JobKind.VIDEO
