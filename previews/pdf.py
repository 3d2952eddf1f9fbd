"""PDF previews: the first page is rasterized and the PDF itself is kept as Result.pdf."""

from integrations.pdf import render_first_page
from models.enums import JobKind
from models.job import PreviewJob
from models.result import Result
from previews.base import AbstractPreviewProcessor
from previews.image import render_previews


class PdfPreview(AbstractPreviewProcessor):

    async def run(self, job: PreviewJob) -> Result:
        return await self.process_pdf(job, job.source)

    async def process_pdf(self, job: PreviewJob, pdf_path: str) -> Result:
        page_path = await render_first_page(pdf_path, job.directory)
        rendered = await render_previews(job, page_path)
        return Result.done(rendered.thumbnail, rendered.image, rendered.metadata, pdf=pdf_path)

    @property
    def kind(self) -> JobKind:
        return JobKind.PDF
