"""Office documents are converted to PDF, then previewed like any other PDF."""

import logging
from typing import Optional

from integrations.office import convert_to_pdf
from models.enums import JobKind
from models.job import PreviewJob
from models.result import Result
from previews.base import AbstractPreviewProcessor
from previews.pdf import PdfPreview

logger = logging.getLogger(__name__)


class OfficePreview(AbstractPreviewProcessor):

    def __init__(self, pdf_preview: Optional[PdfPreview] = None):
        self._pdf_preview = pdf_preview or PdfPreview()

    async def run(self, job: PreviewJob) -> Result:
        pdf_path = await convert_to_pdf(job.source, job.directory)
        logger.debug(f"Converted {job.source} to {pdf_path}")
        return await self._pdf_preview.process_pdf(job, pdf_path)

    @property
    def kind(self) -> JobKind:
        return JobKind.OFFICE
