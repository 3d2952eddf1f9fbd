"""Tests for the generic link, YouTube and Vimeo processors."""

import io

import pytest
from PIL import Image

from http_helpers import RouteTransport, html, image_response
from integrations.download import Downloader
from links.embed import EmbedDecision, ProtocolEmbed
from links.resolver import RedirectResolver
from models.enums import JobKind, ResultStatus
from models.errors import PreviewError, UnexpectedContentTypeError
from previews.link import LinkPreview, VimeoPreview, YouTubePreview, youtube_id


def _image_bytes(size, image_format="JPEG"):
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(0, 90, 180)).save(buffer, format=image_format)
    return buffer.getvalue()


VIMEO_PAGE = """
<html><head>
<script type="application/ld+json">
[{"@type": "VideoObject",
  "embedUrl": "https://player.vimeo.com/video/76979871",
  "thumbnail": {"url": "https://i.vimeocdn.com/video/452001751_1280.jpg", "width": 1280}}]
</script>
</head></html>
"""


@pytest.mark.parametrize(
    "link, expected",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtube.com/watch?feature=share&v=abc123", "abc123"),
        ("https://youtu.be/abc123", "abc123"),
        ("https://www.youtube.com/watch", None),
        ("https://example.com/watch?v=abc", None),
    ],
)
def test_youtube_id(link, expected):
    assert youtube_id(link) == expected


# ── generic link ────────────────────────────────────────────


class StubClassifier:
    def __init__(self, decision):
        self.decision = decision
        self.links = []

    async def classify(self, link):
        self.links.append(link)
        return self.decision


@pytest.mark.asyncio
async def test_link_preview_combines_screenshot_and_embed_flags(make_job):
    captured = []

    async def fake_capture(url, out_path):
        captured.append(url)
        Image.new("RGB", (1280, 1280), color="white").save(out_path)
        return out_path

    classifier = StubClassifier(EmbedDecision(https=ProtocolEmbed(True)))
    job = make_job("https://example.com/article", kind=JobKind.LINK)

    result = await LinkPreview(classifier=classifier, capture=fake_capture).run(job)

    assert captured == ["https://example.com/article"]
    assert classifier.links == ["https://example.com/article"]
    assert result.status is ResultStatus.DONE
    assert result.metadata == {
        "httpEmbeddable": False,
        "httpsEmbeddable": True,
        "httpEmbedUrl": None,
        "httpsEmbedUrl": None,
        "image_width": 1280,
        "image_height": 1280,
    }


@pytest.mark.asyncio
async def test_link_preview_classifies_before_taking_a_screenshot(make_job):
    steps = []

    class RecordingClassifier(StubClassifier):
        async def classify(self, link):
            steps.append("classify")
            return await super().classify(link)

    async def fake_capture(url, out_path):
        steps.append("capture")
        Image.new("RGB", (1280, 1280), color="white").save(out_path)
        return out_path

    classifier = RecordingClassifier(EmbedDecision())
    job = make_job("https://example.com/article", kind=JobKind.LINK)

    await LinkPreview(classifier=classifier, capture=fake_capture).run(job)

    assert steps == ["classify", "capture"]


# ── YouTube ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_youtube_preview_uses_platform_thumbnail(make_job):
    transport = RouteTransport({
        "https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg": image_response(_image_bytes((480, 360))),
    })
    processor = YouTubePreview(downloader=Downloader(transport=transport))

    result = await processor.run(make_job("https://youtu.be/dQw4w9WgXcQ", kind=JobKind.LINK))

    assert result.metadata == {"image_width": 480, "image_height": 360, "youtubeId": "dQw4w9WgXcQ"}


@pytest.mark.asyncio
async def test_youtube_thumbnail_must_be_jpeg(make_job):
    transport = RouteTransport({
        "https://img.youtube.com/vi/abc/hqdefault.jpg": html("<p>not an image</p>"),
    })
    processor = YouTubePreview(downloader=Downloader(transport=transport))

    with pytest.raises(UnexpectedContentTypeError, match="'text/html'.*expected image/jpeg"):
        await processor.run(make_job("https://youtu.be/abc", kind=JobKind.LINK))


# ── Vimeo ───────────────────────────────────────────────────


def _vimeo(routes):
    transport = RouteTransport(routes)
    return VimeoPreview(
        resolver=RedirectResolver(transport=transport),
        downloader=Downloader(transport=transport),
    )


@pytest.mark.asyncio
async def test_vimeo_preview_uses_json_ld(make_job):
    processor = _vimeo({
        "https://vimeo.com/76979871": html(VIMEO_PAGE),
        "https://i.vimeocdn.com/video/452001751_1280.jpg": image_response(_image_bytes((1280, 720))),
    })

    result = await processor.run(make_job("https://vimeo.com/76979871", kind=JobKind.LINK))

    assert result.metadata == {
        "httpEmbeddable": False,
        "httpsEmbeddable": True,
        "httpEmbedUrl": None,
        "httpsEmbedUrl": "https://player.vimeo.com/video/76979871",
        "image_width": 1280,
        "image_height": 720,
    }


@pytest.mark.asyncio
async def test_vimeo_unreachable_page_is_fatal(make_job):
    processor = _vimeo({"https://vimeo.com/1": html("gone", status=404)})

    with pytest.raises(PreviewError, match="Could not resolve URL"):
        await processor.run(make_job("https://vimeo.com/1", kind=JobKind.LINK))


@pytest.mark.asyncio
async def test_vimeo_page_without_thumbnail_is_fatal(make_job):
    processor = _vimeo({"https://vimeo.com/2": html("<html>no structured data</html>")})

    with pytest.raises(PreviewError, match="No preview image"):
        await processor.run(make_job("https://vimeo.com/2", kind=JobKind.LINK))


@pytest.mark.asyncio
async def test_vimeo_thumbnail_of_wrong_type_is_fatal(make_job):
    processor = _vimeo({
        "https://vimeo.com/76979871": html(VIMEO_PAGE),
        "https://i.vimeocdn.com/video/452001751_1280.jpg": image_response(b"GIF89a", "image/gif"),
    })

    with pytest.raises(UnexpectedContentTypeError) as excinfo:
        await processor.run(make_job("https://vimeo.com/76979871", kind=JobKind.LINK))

    assert excinfo.value.actual == "image/gif"
    assert excinfo.value.expected == ("image/jpeg", "image/png")


@pytest.mark.asyncio
async def test_vimeo_embed_url_that_is_not_a_string_is_ignored(make_job, caplog):
    page = """
    <script type="application/ld+json">
    {"embedUrl": {"@id": "https://player.vimeo.com/video/1"},
     "thumbnail": {"url": "https://i.vimeocdn.com/video/1_640.jpg"}}
    </script>
    """
    processor = _vimeo({
        "https://vimeo.com/1": html(page),
        "https://i.vimeocdn.com/video/1_640.jpg": image_response(_image_bytes((640, 360))),
    })

    result = await processor.run(make_job("https://vimeo.com/1", kind=JobKind.LINK))

    assert result.status is ResultStatus.DONE
    assert result.metadata["httpsEmbeddable"] is False
    assert result.metadata["httpsEmbedUrl"] is None
    assert "Ignoring JSON-LD embedUrl of type dict" in caplog.text


@pytest.mark.asyncio
async def test_vimeo_thumbnail_url_that_is_not_a_string_is_missing(make_job):
    page = '<script type="application/ld+json">{"thumbnail": {"url": ["https://i.vimeocdn.com/x.jpg"]}}</script>'
    processor = _vimeo({"https://vimeo.com/3": html(page)})

    with pytest.raises(PreviewError, match="No preview image"):
        await processor.run(make_job("https://vimeo.com/3", kind=JobKind.LINK))
