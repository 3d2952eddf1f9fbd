"""
Video engine: ffprobe / ffmpeg invocations.

    probe_duration   ffprobe → seconds (None when it cannot be determined)
    probe_codec      ffprobe → codec name of the first video stream
    extract_frame    ffmpeg  → one PNG frame at a given offset
    transcode        ffmpeg  → MP4 re-encoded with the given codec
"""

import logging
import os
from typing import Optional

from config.settings import settings
from integrations.commands import run_command
from models.errors import ToolError

logger = logging.getLogger(__name__)


class VideoEngine:

    async def probe_duration(self, path: str) -> Optional[float]:
        result = await run_command(
            [
                settings.FFPROBE_PATH,
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                path,
            ],
            timeout=settings.PROBE_TIMEOUT,
        )
        if not result.ok:
            logger.debug(f"Could not probe duration of {path}: {result.stderr.strip()}")
            return None
        try:
            return float(result.stdout.strip())
        except ValueError:
            return None

    async def probe_codec(self, path: str) -> str:
        result = await run_command(
            [
                settings.FFPROBE_PATH,
                "-v", "error",
                "-select_streams", "v:0",
                "-show_entries", "stream=codec_name",
                "-of", "default=noprint_wrappers=1:nokey=1",
                path,
            ],
            timeout=settings.PROBE_TIMEOUT,
        )
        if not result.ok:
            raise ToolError("Unable to determine video codec")
        return result.stdout.strip()

    async def extract_frame(self, path: str, directory: str, at_seconds: float = 0.0) -> str:
        frame_path = os.path.join(directory, "frame.png")
        result = await run_command(
            [
                settings.FFMPEG_PATH,
                "-y",
                "-ss", f"{at_seconds:.3f}",
                "-i", path,
                "-frames:v", "1",
                frame_path,
            ],
            timeout=settings.VIDEO_TIMEOUT,
        )
        if not result.ok:
            raise ToolError("Unable to generate image from video frame")
        if not os.path.exists(frame_path):
            raise ToolError("An image file could not be generated")
        return frame_path

    async def transcode(self, path: str, directory: str, codec: str = "libx264") -> str:
        output_path = os.path.join(directory, "converted.mp4")
        result = await run_command(
            [
                settings.FFMPEG_PATH,
                "-y",
                "-i", path,
                "-vcodec", codec,
                "-pix_fmt", "yuv420p",
                output_path,
            ],
            timeout=settings.VIDEO_TIMEOUT,
        )
        if not result.ok:
            raise ToolError("Unable to convert video")
        if not os.path.exists(output_path):
            raise ToolError("A converted video could not be generated")
        return output_path
