"""
Link previews.

Three flavours, picked by the dispatcher from the URL:

    YouTube   youtube.com/watch?v=<id>, youtu.be/<id>
              → platform thumbnail (img.youtube.com/vi/<id>/hqdefault.jpg)
    Vimeo     vimeo.com/<numeric id>
              → JSON-LD on the video page gives the thumbnail and the embed URL
    anything  → headless-browser screenshot + embeddability check
"""

import logging
import os
import re
from typing import Awaitable, Callable, Optional
from urllib.parse import parse_qs, urlsplit

from integrations import screenshot
from integrations.download import Downloader
from links import structured_data
from links.embed import EmbedClassifier, EmbedDecision, ProtocolEmbed
from links.resolver import RedirectResolver
from models.enums import JobKind
from models.errors import PreviewError, UnexpectedContentTypeError
from models.job import PreviewJob
from models.result import Result
from previews.base import AbstractPreviewProcessor
from previews.image import render_previews

logger = logging.getLogger(__name__)

YOUTUBE_FULL_REGEX = re.compile(r"^https?://(www\.|m\.)?youtube\.com/watch")
YOUTUBE_SHORT_REGEX = re.compile(r"^https?://youtu\.be/(.+)")
VIMEO_REGEX = re.compile(r"^https?://(www\.)?vimeo\.com/(\d+)$")

YOUTUBE_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
YOUTUBE_THUMBNAIL_TYPES = ("image/jpeg",)
VIMEO_THUMBNAIL_TYPES = ("image/jpeg", "image/png")


def youtube_id(link: str) -> Optional[str]:
    """The video id of a YouTube watch or short link, or None for anything else."""
    if YOUTUBE_FULL_REGEX.match(link):
        values = parse_qs(urlsplit(link).query).get("v")
        return values[0] if values else None
    if YOUTUBE_SHORT_REGEX.match(link):
        return urlsplit(link).path[1:] or None
    return None


def is_vimeo_link(link: str) -> bool:
    return VIMEO_REGEX.match(link) is not None


class LinkPreview(AbstractPreviewProcessor):

    def __init__(
        self,
        classifier: Optional[EmbedClassifier] = None,
        capture: Optional[Callable[..., Awaitable[str]]] = None,
    ):
        self._classifier = classifier or EmbedClassifier()
        self._capture = capture or screenshot.capture

    async def run(self, job: PreviewJob) -> Result:
        link = job.source
        embed = await self._classifier.classify(link)
        logger.info(
            f"{link} embeddable: http={embed.http.embeddable} https={embed.https.embeddable}"
        )

        screenshot_path = os.path.join(job.directory, "screenshot.png")
        await self._capture(link, screenshot_path)

        rendered = await render_previews(job, screenshot_path)
        return Result.done(rendered.thumbnail, rendered.image, embed.to_metadata(), rendered.metadata)

    @property
    def kind(self) -> JobKind:
        return JobKind.LINK


class YouTubePreview(AbstractPreviewProcessor):

    def __init__(self, downloader: Optional[Downloader] = None):
        self._downloader = downloader or Downloader()

    async def run(self, job: PreviewJob) -> Result:
        video_id = youtube_id(job.source)
        if not video_id:
            raise PreviewError(f"No YouTube video id in {job.source}", code=400)

        preview_url = YOUTUBE_THUMBNAIL_URL.format(video_id=video_id)
        path, mime_type = await self._downloader.download(
            preview_url, job.directory, "youtube_preview.jpg"
        )
        if mime_type not in YOUTUBE_THUMBNAIL_TYPES:
            raise UnexpectedContentTypeError("a YouTube thumbnail image", YOUTUBE_THUMBNAIL_TYPES, mime_type)

        rendered = await render_previews(job, path)
        return Result.done(rendered.thumbnail, rendered.image, rendered.metadata, {"youtubeId": video_id})

    @property
    def kind(self) -> JobKind:
        return JobKind.YOUTUBE


class VimeoPreview(AbstractPreviewProcessor):
    """
    Vimeo pages carry a JSON-LD VideoObject:

        {"embedUrl": "https://player.vimeo.com/video/76979871",
         "thumbnail": {"url": "https://i.vimeocdn.com/video/452001751_1280.jpg"}}

    Vimeo embed URLs are only ever offered over HTTPS, so the http embed
    fields are always off.
    """

    def __init__(
        self,
        resolver: Optional[RedirectResolver] = None,
        downloader: Optional[Downloader] = None,
    ):
        self._resolver = resolver or RedirectResolver()
        self._downloader = downloader or Downloader()

    async def run(self, job: PreviewJob) -> Result:
        link = job.source
        reachable, chain = await self._resolver.resolve(link)
        if not reachable:
            raise PreviewError(f"Could not resolve URL {link}")

        # After redirects, the last response holds the video page
        body = chain.last.body if chain.last else ""
        if not body:
            raise PreviewError(f"No response body for URL {link}")

        embed_url, image_url = self._scrape(body)
        if not image_url:
            raise PreviewError(f"No preview image found for Vimeo URL {link}")

        path, mime_type = await self._downloader.download(image_url, job.directory, "vimeo_preview.jpg")
        if mime_type not in VIMEO_THUMBNAIL_TYPES:
            raise UnexpectedContentTypeError("a Vimeo preview image", VIMEO_THUMBNAIL_TYPES, mime_type)

        rendered = await render_previews(job, path)

        embed = EmbedDecision()
        if embed_url and embed_url.startswith("https:"):
            embed = EmbedDecision(https=ProtocolEmbed(embeddable=True, embed_url=embed_url))

        return Result.done(rendered.thumbnail, rendered.image, embed.to_metadata(), rendered.metadata)

    @staticmethod
    def _scrape(body: str) -> tuple[Optional[str], Optional[str]]:
        embed_url = None
        image_url = None
        for obj in structured_data.iter_json_ld_objects(structured_data.parse(body)):
            embed_url = embed_url or _string_at(obj, "embedUrl")
            image_url = image_url or _string_at(obj, "thumbnail.url")
        return embed_url, image_url

    @property
    def kind(self) -> JobKind:
        return JobKind.VIMEO


def _string_at(obj: dict, path: str) -> Optional[str]:
    """JSON-LD value at path when it is a string; other shapes count as missing."""
    value = structured_data.lookup(obj, path)
    if value is None or isinstance(value, str):
        return value
    logger.warning(f"Ignoring JSON-LD {path} of type {type(value).__name__}")
    return None
