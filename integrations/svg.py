"""SVG rasterization with librsvg's rsvg-convert."""

import os
import uuid

from config.settings import settings
from integrations.commands import run_command
from models.errors import ToolError


async def svg_to_png(path: str, directory: str) -> str:
    output_path = os.path.join(directory, f"converted_svg_{uuid.uuid4().hex[:8]}.png")
    result = await run_command(
        [settings.RSVG_CONVERT_PATH, "--format", "png", "--output", output_path, path],
        timeout=settings.SVG_TIMEOUT,
    )
    if not result.ok or not os.path.exists(output_path):
        raise ToolError("Unable to convert SVG image to PNG")
    return output_path
