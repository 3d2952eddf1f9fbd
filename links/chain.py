"""
Redirect chain: the ordered responses seen while following a link.

The chain is where the two safety invariants of the crawl live:
- at most `limit` responses (10 by default)
- no two responses for the same final URL (a repeat means a redirect loop)

The resolver checks both before each hop; append() refuses anything that
would break an invariant, so a bug in the caller fails loudly instead of
crawling forever.
"""

from dataclasses import dataclass, field
from typing import Optional

import httpx


@dataclass(frozen=True)
class ResolvedResponse:
    url: httpx.URL                   # final request URL of this hop, scheme included
    status_code: int
    headers: httpx.Headers
    body: str
    location: Optional[str] = None   # raw Location header, when it triggered another hop

    @classmethod
    def from_response(cls, response: httpx.Response, content: Optional[bytes] = None) -> "ResolvedResponse":
        """Build from a response; content overrides the body for streamed responses."""
        body = response.text if content is None else content.decode(response.encoding or "utf-8", errors="replace")
        return cls(
            url=response.url,
            status_code=response.status_code,
            headers=response.headers,
            body=body,
            location=response.headers.get("location"),
        )

    @property
    def scheme(self) -> str:
        return self.url.scheme

    @property
    def href(self) -> str:
        return str(self.url)


@dataclass
class RedirectChain:
    limit: int = 10
    responses: list[ResolvedResponse] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.responses)

    def __iter__(self):
        return iter(self.responses)

    def __contains__(self, url: httpx.URL) -> bool:
        return any(response.url == url for response in self.responses)

    @property
    def is_full(self) -> bool:
        return len(self.responses) >= self.limit

    @property
    def last(self) -> Optional[ResolvedResponse]:
        return self.responses[-1] if self.responses else None

    def append(self, response: ResolvedResponse) -> None:
        if response.url in self:
            raise ValueError(f"Redirect loop: {response.href} is already in the chain")
        if self.is_full:
            raise ValueError(f"Redirect chain is full ({self.limit} responses)")
        self.responses.append(response)
