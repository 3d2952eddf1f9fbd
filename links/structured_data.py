"""
Structured data scraping: <meta> tags and JSON-LD blocks.

Pages that refuse to be framed sometimes publish a dedicated embed URL:

    <meta itemprop="embedURL" content="https://docs.google.com/.../preview">

    <script type="application/ld+json">
      [{"@type": "VideoObject", "embedUrl": "https://player.vimeo.com/video/1",
        "thumbnail": {"url": "https://i.vimeocdn.com/video/1.jpg", "width": 1280}}]
    </script>

Malformed JSON-LD is common in the wild; a block that fails to parse is
logged and skipped, never raised.
"""

import json
import logging
from html.parser import HTMLParser
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)

JSON_LD_TYPE = "application/ld+json"


class StructuredDataParser(HTMLParser):
    """Collects the attributes of every <meta> tag and the text of every JSON-LD script."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.meta_tags: list[dict[str, str]] = []
        self.json_ld_blocks: list[str] = []
        self._json_ld_parts: Optional[list[str]] = None

    def handle_starttag(self, tag, attrs):
        attributes = {name: value or "" for name, value in attrs}
        if tag == "meta":
            self.meta_tags.append(attributes)
        elif tag == "script" and attributes.get("type", "").lower() == JSON_LD_TYPE:
            self._json_ld_parts = []

    def handle_data(self, data):
        if self._json_ld_parts is not None:
            self._json_ld_parts.append(data)

    def handle_endtag(self, tag):
        if tag == "script" and self._json_ld_parts is not None:
            self.json_ld_blocks.append("".join(self._json_ld_parts))
            self._json_ld_parts = None


def parse(body: str) -> StructuredDataParser:
    parser = StructuredDataParser()
    parser.feed(body)
    parser.close()
    return parser


def iter_json_ld_objects(parser: StructuredDataParser) -> Iterator[Any]:
    """
    Yield every top-level JSON-LD object on the page.

    A block may hold a single object, a list of objects, or an object with
    an "@graph" list; all three are flattened into one stream.
    """
    for block in parser.json_ld_blocks:
        try:
            data = json.loads(block)
        except ValueError as e:
            logger.warning(f"Skipping malformed JSON-LD block: {e}")
            continue

        if isinstance(data, list):
            yield from data
        elif isinstance(data, dict) and isinstance(data.get("@graph"), list):
            yield from data["@graph"]
        else:
            yield data


def lookup(obj: Any, path: str) -> Any:
    """Dotted-path lookup that tolerates missing keys and non-dict values."""
    for key in path.split("."):
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def find_embed_url(body: str, prefix: str) -> Optional[str]:
    """
    Find an alternate embed URL starting with prefix (e.g. "https:").

    Checked in order:
    1. <meta itemprop="embedURL" content="...">, the last matching tag wins
    2. the first JSON-LD object exposing "embedUrl"
    """
    parser = parse(body)

    meta_url = None
    for attributes in parser.meta_tags:
        content = attributes.get("content", "")
        if attributes.get("itemprop") == "embedURL" and content.startswith(prefix):
            meta_url = content
    if meta_url:
        return meta_url

    for obj in iter_json_ld_objects(parser):
        embed_url = lookup(obj, "embedUrl")
        if embed_url:
            if isinstance(embed_url, str) and embed_url.startswith(prefix):
                return embed_url
            return None

    return None
