"""
Embed classifier: can this link be shown in an iframe, and on which protocol?

Evaluated separately for http and https by rewriting the link's scheme and
resolving it:

    disallow-listed link            → not embeddable anywhere, no network calls
    not reachable                   → not embeddable
    redirected to another protocol  → not embeddable
    x-frame-options present         → embeddable only if the page publishes an
                                      alternate embed URL on this protocol
                                      (only looked for on allow-listed hosts)
    redirected, no framing header   → embeddable, final URL is the embed URL
    otherwise                       → embeddable as-is

Classification never raises. Embeddability is advisory; a failure here must
not cost the user an otherwise good preview.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import urlsplit, urlunsplit

import httpx

from config.settings import settings
from links import structured_data
from links.resolver import RedirectResolver
from models.enums import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProtocolEmbed:
    embeddable: bool = False
    embed_url: Optional[str] = None


NOT_EMBEDDABLE = ProtocolEmbed()


@dataclass(frozen=True)
class EmbedDecision:
    http: ProtocolEmbed = NOT_EMBEDDABLE
    https: ProtocolEmbed = NOT_EMBEDDABLE

    def to_metadata(self) -> dict:
        return {
            "httpEmbeddable": self.http.embeddable,
            "httpsEmbeddable": self.https.embeddable,
            "httpEmbedUrl": self.http.embed_url,
            "httpsEmbedUrl": self.https.embed_url,
        }


def with_scheme(link: str, protocol: Protocol) -> str:
    return urlunsplit(urlsplit(link)._replace(scheme=protocol.value))


class EmbedClassifier:

    def __init__(
        self,
        resolver: Optional[RedirectResolver] = None,
        check_patterns: Optional[Iterable[str]] = None,
        disallow_patterns: Optional[Iterable[str]] = None,
    ):
        self._resolver = resolver or RedirectResolver()
        if check_patterns is None:
            check_patterns = settings.EMBED_URL_CHECK_PATTERNS
        if disallow_patterns is None:
            disallow_patterns = settings.EMBED_DISALLOW_PATTERNS
        self._check_patterns = [re.compile(p) for p in check_patterns]
        self._disallow_patterns = [re.compile(p) for p in disallow_patterns]

    def is_disallowed(self, link: str) -> bool:
        return any(pattern.search(link) for pattern in self._disallow_patterns)

    def publishes_embed_url(self, url: str) -> bool:
        return any(pattern.search(url) for pattern in self._check_patterns)

    async def classify(self, link: str) -> EmbedDecision:
        if self.is_disallowed(link):
            logger.info(f"Embedding disallowed for {link}")
            return EmbedDecision()

        http = await self._classify_protocol(link, Protocol.HTTP)
        https = await self._classify_protocol(link, Protocol.HTTPS)
        return EmbedDecision(http=http, https=https)

    async def _classify_protocol(self, link: str, protocol: Protocol) -> ProtocolEmbed:
        try:
            return await self._check_protocol(link, protocol)
        except Exception as e:
            logger.warning(f"Embed check of {link} over {protocol.value} failed: {e!r}")
            return NOT_EMBEDDABLE

    async def _check_protocol(self, link: str, protocol: Protocol) -> ProtocolEmbed:
        link = with_scheme(link, protocol)

        reachable, chain = await self._resolver.resolve(link)
        response = chain.last
        if not reachable or response is None:
            return NOT_EMBEDDABLE

        if response.scheme != protocol.value:
            logger.debug(f"{link} redirected away from {protocol.value} to {response.href}")
            return NOT_EMBEDDABLE

        if "x-frame-options" in response.headers:
            embed_url = self._alternate_embed_url(response.href, response.body, protocol)
            return ProtocolEmbed(embeddable=embed_url is not None, embed_url=embed_url)

        if httpx.URL(link) != response.url:
            return ProtocolEmbed(embeddable=True, embed_url=response.href)

        return ProtocolEmbed(embeddable=True)

    def _alternate_embed_url(self, url: str, body: str, protocol: Protocol) -> Optional[str]:
        # Only allow-listed hosts get their HTML parsed
        if not self.publishes_embed_url(url):
            return None
        return structured_data.find_embed_url(body, f"{protocol.value}:")
