"""Office-to-PDF conversion with a headless LibreOffice."""

import logging
import os

from config.settings import settings
from integrations.commands import run_command
from models.errors import ToolError

logger = logging.getLogger(__name__)


async def convert_to_pdf(path: str, out_dir: str) -> str:
    """Convert an office document to PDF inside out_dir and return the PDF path."""
    # LibreOffice needs a writable HOME to create its profile
    env = {**os.environ, "HOME": out_dir}
    result = await run_command(
        [
            settings.SOFFICE_PATH,
            "--headless",
            "--convert-to", "pdf",
            "--outdir", out_dir,
            path,
        ],
        timeout=settings.OFFICE_TIMEOUT,
        env=env,
    )
    if not result.ok:
        logger.debug(f"soffice failed: {result.stderr.strip()}")
        raise ToolError("Unable to generate PDF for office document")

    stem, _ = os.path.splitext(os.path.basename(path))
    pdf_path = os.path.join(out_dir, f"{stem}.pdf")
    if not os.path.exists(pdf_path):
        logger.debug(f"Expected PDF at {pdf_path} was not generated")
        raise ToolError("A PDF file could not be generated")
    return pdf_path
