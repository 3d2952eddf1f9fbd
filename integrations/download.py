"""
Download a source file (or a platform thumbnail) into a job's scratch directory.

Works the same for plain http(s) URLs and for s3://bucket/key storage URIs.
The MIME type reported alongside the file is what the server or storage
claims (Content-Type without parameters); callers that don't trust it sniff
the file themselves.
"""

import asyncio
import logging
import os
from typing import Optional

import httpx

from config.settings import settings
from integrations.storage import S3Storage, is_storage_uri
from models.errors import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _clean_content_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    return content_type.split(";")[0].strip().lower() or None


def _write_stream(body, path: str) -> None:
    with open(path, "wb") as f:
        for chunk in body.iter_chunks(CHUNK_SIZE):
            f.write(chunk)


class Downloader:

    def __init__(
        self,
        storage: Optional[S3Storage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._storage = storage
        self._transport = transport  # tests inject httpx.MockTransport here

    @property
    def storage(self) -> S3Storage:
        if self._storage is None:
            self._storage = S3Storage()
        return self._storage

    async def download(self, uri: str, directory: str, filename: str) -> tuple[str, Optional[str]]:
        """
        Fetch uri into directory/filename.

        Returns:
            (local path, MIME type or None)

        Raises:
            DownloadError if the file could not be fetched.
        """
        path = os.path.join(directory, filename)
        if is_storage_uri(uri):
            mime_type = await self._download_from_storage(uri, path)
        else:
            mime_type = await self._download_http(uri, path)

        logger.debug(f"Downloaded {uri} to {path} ({mime_type})")
        return path, mime_type

    async def _download_from_storage(self, uri: str, path: str) -> Optional[str]:
        metadata = await self.storage.head_metadata(uri)
        body = await self.storage.get(uri)
        try:
            await asyncio.to_thread(_write_stream, body, path)
        except OSError as e:
            raise DownloadError(f"Unable to download {uri}: {e}") from e
        return _clean_content_type(metadata.get("content_type"))

    async def _download_http(self, uri: str, path: str) -> Optional[str]:
        client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=settings.DOWNLOAD_TIMEOUT,
            verify=settings.DOWNLOAD_VERIFY_TLS,
            transport=self._transport,
        )
        try:
            async with client, client.stream("GET", uri) as response:
                if response.status_code >= 400:
                    raise DownloadError(f"Unable to download {uri}: HTTP {response.status_code}")
                with open(path, "wb") as f:
                    async for chunk in response.aiter_bytes(CHUNK_SIZE):
                        f.write(chunk)
                return _clean_content_type(response.headers.get("content-type"))
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            logger.error(f"Unable to download {uri}: {e!r}")
            raise DownloadError(f"Unable to download a file from {uri}") from e
