"""First-page rasterization of PDFs with poppler's pdftoppm."""

import os

from config.settings import settings
from integrations.commands import run_command
from models.errors import ToolError


async def render_first_page(pdf_path: str, directory: str) -> str:
    output_prefix = os.path.join(directory, "page")
    result = await run_command(
        [
            settings.PDFTOPPM_PATH,
            "-png",
            "-singlefile",
            "-f", "1",
            "-l", "1",
            "-r", str(settings.PDF_RENDER_DPI),
            pdf_path,
            output_prefix,
        ],
        timeout=settings.PDF_TIMEOUT,
    )
    if not result.ok:
        raise ToolError("Unable to render the first page of the PDF")

    # -singlefile writes <prefix>.png without a page number suffix
    page_path = f"{output_prefix}.png"
    if not os.path.exists(page_path):
        raise ToolError("A page image could not be generated from the PDF")
    return page_path
