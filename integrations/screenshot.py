"""
Full-page screenshots of web links with headless Chromium.

Chromium's --virtual-time-budget lets the page run its scripts for the
render delay before the capture, without actually waiting that long when
the page settles sooner. Certificate errors are ignored, so sites with
broken TLS still get a picture.
"""

import logging
import os
from typing import Optional

from config.settings import settings
from integrations.commands import run_command
from models.errors import ToolError

logger = logging.getLogger(__name__)


async def capture(
    url: str,
    out_path: str,
    width: Optional[int] = None,
    height: Optional[int] = None,
    timeout: Optional[float] = None,
    render_delay: Optional[float] = None,
) -> str:
    width = width or settings.SCREENSHOT_WIDTH
    height = height or settings.SCREENSHOT_HEIGHT
    timeout = timeout or settings.SCREENSHOT_TIMEOUT
    render_delay = settings.SCREENSHOT_RENDER_DELAY if render_delay is None else render_delay

    result = await run_command(
        [
            settings.CHROMIUM_PATH,
            "--headless=new",
            "--disable-gpu",
            "--no-sandbox",
            "--hide-scrollbars",
            "--ignore-certificate-errors",
            f"--window-size={width},{height}",
            f"--virtual-time-budget={int(render_delay * 1000)}",
            f"--screenshot={out_path}",
            url,
        ],
        timeout=timeout + render_delay,
        cwd=os.path.dirname(out_path),
    )
    if not result.ok or not os.path.exists(out_path):
        logger.warning(f"Screenshot of {url} failed: {result.stderr.strip()[:500]}")
        raise ToolError(f"Unable to take a screenshot of {url}")
    return out_path
