"""
Redirect resolver: follows a link hop by hop and reports whether it is reachable.

Each hop is a GET with redirect-following disabled, so every intermediate
response (and its headers) lands in the chain:

    GET http://example.com/a  → 301 Location: https://example.com/a
    GET https://example.com/a → 302 Location: /b
    GET https://example.com/b → 200                 → reachable

The crawl stops as not reachable when:
- the request fails in any way (DNS, TLS, timeout, refused connection...)
- a hop takes longer than the per-hop timeout as a whole, however steadily
  the server trickles bytes
- a response has status >= 400
- the next hop was already visited (redirect loop)
- the chain already holds the maximum number of responses

Network errors are deliberately NOT raised. Plenty of sites are simply not
served over one of the protocols, and that has to come out as "not
embeddable" rather than as a failed job.

One AsyncClient (one cookie jar) is created per resolve() call and shared by
every hop of that call, so session cookies set by a redirect are sent on the
next one.

Only the first max_body_bytes of each body are kept; the rest is never read.
"""

import asyncio
import logging
from typing import NamedTuple, Optional

import httpx

from config.settings import settings
from links.chain import RedirectChain, ResolvedResponse

logger = logging.getLogger(__name__)


class Resolution(NamedTuple):
    reachable: bool
    chain: RedirectChain


class RedirectResolver:

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_redirects: Optional[int] = None,
        user_agent: Optional[str] = None,
        max_body_bytes: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout = timeout or settings.RESOLVE_TIMEOUT
        self._max_redirects = max_redirects or settings.RESOLVE_MAX_REDIRECTS
        self._user_agent = user_agent or settings.RESOLVE_USER_AGENT
        self._max_body_bytes = max_body_bytes or settings.RESOLVE_MAX_BODY_BYTES
        self._transport = transport  # tests inject httpx.MockTransport here

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=False,
            timeout=self._timeout,
            verify=True,
            headers={"User-Agent": self._user_agent},
            transport=self._transport,
        )

    async def resolve(self, link: str) -> Resolution:
        """Follow link until it settles, fails, loops or runs out of hops."""
        chain = RedirectChain(limit=self._max_redirects)

        try:
            url = httpx.URL(link)
        except httpx.InvalidURL as e:
            logger.debug(f"Not resolving invalid URL {link!r}: {e}")
            return Resolution(False, chain)

        async with self._client() as client:
            while True:
                if url in chain:
                    logger.debug(f"Redirect loop detected at {url}")
                    return Resolution(False, chain)
                if chain.is_full:
                    logger.debug(f"Gave up on {link} after {len(chain)} redirects")
                    return Resolution(False, chain)

                try:
                    resolved = await asyncio.wait_for(self._fetch(client, url), timeout=self._timeout)
                except asyncio.TimeoutError:
                    logger.debug(f"GET {url} took longer than {self._timeout}s")
                    return Resolution(False, chain)
                except (httpx.HTTPError, httpx.InvalidURL) as e:
                    logger.debug(f"GET {url} failed: {e!r}")
                    return Resolution(False, chain)

                chain.append(resolved)

                if resolved.status_code >= 400:
                    return Resolution(False, chain)

                if not resolved.location:
                    return Resolution(True, chain)

                try:
                    url = resolved.url.join(resolved.location)
                except httpx.InvalidURL as e:
                    logger.debug(f"Unusable Location header {resolved.location!r}: {e}")
                    return Resolution(False, chain)

    async def _fetch(self, client: httpx.AsyncClient, url: httpx.URL) -> ResolvedResponse:
        content = bytearray()
        async with client.stream("GET", url) as response:
            async for chunk in response.aiter_bytes():
                content.extend(chunk)
                if len(content) >= self._max_body_bytes:
                    del content[self._max_body_bytes:]
                    break
        return ResolvedResponse.from_response(response, bytes(content))
