"""
Type dispatcher: works out what a job is, then hands it to a processor.

The kind is computed once, at entry:

    link jobs   URL pattern  → youtube | vimeo | link
    file jobs   MIME type    → image | video | office | pdf | unsupported

File jobs with a remote source are downloaded into the scratch directory
first. When the declared MIME type is missing (or is the generic
application/octet-stream) the local file is sniffed.
"""

import asyncio
import dataclasses
import logging
import mimetypes
import os
from typing import Optional

from integrations.download import Downloader
from integrations.mime import DEFAULT_MIME_TYPE, detect_mime_type
from models.enums import JobKind
from models.job import PreviewJob
from models.result import Result
from previews import registry
from previews.link import is_vimeo_link, youtube_id

logger = logging.getLogger(__name__)

OFFICE_MIME_TYPES = frozenset({
    "application/msword",
    "application/vnd.ms-excel",
    "application/vnd.ms-powerpoint",
    "application/rtf",
    "text/rtf",
})
OFFICE_MIME_PREFIXES = (
    "application/vnd.openxmlformats-officedocument.",
    "application/vnd.oasis.opendocument.",
)


def classify_link(url: str) -> JobKind:
    if youtube_id(url):
        return JobKind.YOUTUBE
    if is_vimeo_link(url):
        return JobKind.VIMEO
    return JobKind.LINK


def kind_for_mime(mime_type: Optional[str]) -> JobKind:
    if not mime_type:
        return JobKind.UNSUPPORTED
    if mime_type == "application/pdf":
        return JobKind.PDF
    if mime_type.startswith("image/"):
        return JobKind.IMAGE
    if mime_type.startswith("video/"):
        return JobKind.VIDEO
    if mime_type in OFFICE_MIME_TYPES or mime_type.startswith(OFFICE_MIME_PREFIXES):
        return JobKind.OFFICE
    return JobKind.UNSUPPORTED


def classify(job: PreviewJob) -> JobKind:
    """Final JobKind of a job. File jobs must already be materialized."""
    match job.kind:
        case JobKind.LINK | JobKind.YOUTUBE | JobKind.VIMEO:
            return classify_link(job.source)
        case None | JobKind.UNSUPPORTED:
            return kind_for_mime(job.mime_type)
        case declared:
            # The MIME type wins; a declared file kind only fills in for an unknown one
            detected = kind_for_mime(job.mime_type)
            return declared if detected is JobKind.UNSUPPORTED else detected


class Dispatcher:

    def __init__(self, downloader: Optional[Downloader] = None):
        self._downloader = downloader or Downloader()

    async def materialize(self, job: PreviewJob) -> PreviewJob:
        """
        Return a job whose source is a local file with a trustworthy MIME type.

        The given job is never modified; a new one is built when anything changes.
        """
        source = job.source
        mime_type = job.mime_type

        if job.is_remote:
            extension = os.path.splitext(source.split("?")[0])[1]
            if not extension and mime_type:
                extension = mimetypes.guess_extension(mime_type) or ""
            source, reported = await self._downloader.download(
                source, job.directory, f"source{extension}"
            )
            mime_type = mime_type or reported

        if not mime_type or mime_type == DEFAULT_MIME_TYPE:
            mime_type = await asyncio.to_thread(detect_mime_type, source)
            logger.debug(f"Sniffed {mime_type} for {source}")

        if (source, mime_type) == (job.source, job.mime_type):
            return job
        return dataclasses.replace(job, source=source, mime_type=mime_type)

    async def dispatch(self, job: PreviewJob) -> Result:
        if not (job.kind and job.kind.is_link):
            job = await self.materialize(job)

        kind = classify(job)
        logger.info(f"Dispatching {job!r} as {kind.value}")

        if kind is JobKind.UNSUPPORTED:
            return Result.unsupported(job.mime_type)

        processor = registry.get_processor(kind)
        return await processor.run(job)


async def dispatch(job: PreviewJob) -> Result:
    return await Dispatcher().dispatch(job)
