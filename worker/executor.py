"""
Preview executor: runs a single job and turns the outcome into a plain dict.

This is the boundary where errors stop propagating. The dispatcher and the
processors raise the first fatal PreviewError they hit; execute() catches it
and reports it as {code, message}:

    1. Dispatch the job under a deadline (settings.JOB_DEADLINE)
    2. On success: log the elapsed time, optionally upload the produced files
    3. On PreviewError: {"status": "failed", "error": {code, message}}
    4. On deadline: code 504
    5. Anything else is a bug: logged with traceback, reported as code 500

Jobs share nothing, so one executor can run any number of jobs concurrently.
"""

import asyncio
import logging
import time
from typing import Optional

from config.settings import settings
from integrations.storage import S3Storage
from models.errors import PreviewError
from models.job import PreviewJob
from models.result import Result
from previews.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

UPLOADED_METADATA_KEYS = ("converted_video",)


class PreviewExecutor:

    def __init__(
        self,
        dispatcher: Optional[Dispatcher] = None,
        storage: Optional[S3Storage] = None,
        upload: bool = False,
        deadline: Optional[float] = None,
    ):
        self._dispatcher = dispatcher or Dispatcher()
        self._storage = storage
        self._upload = upload
        self._deadline = deadline if deadline is not None else settings.JOB_DEADLINE

    @property
    def storage(self) -> S3Storage:
        if self._storage is None:
            self._storage = S3Storage()
        return self._storage

    async def execute(self, job: PreviewJob) -> dict:
        """
        Execute one job. Never raises, except when the calling task is cancelled.

        Returns:
            {"status": "done" | "unsupported", "result": {...}} or
            {"status": "failed", "error": {"code": ..., "message": ...}}
        """
        start_time = time.monotonic()
        try:
            result = await asyncio.wait_for(self._run(job), timeout=self._deadline)
        except asyncio.TimeoutError:
            error = PreviewError(f"Job did not finish within {self._deadline}s", code=504)
            logger.error(f"{job!r} timed out after {self._deadline}s")
            return {"status": "failed", "error": error.to_dict()}
        except PreviewError as e:
            logger.error(f"{job!r} failed: {e.message}")
            return {"status": "failed", "error": e.to_dict()}
        except Exception as e:
            logger.error(f"{job!r} failed unexpectedly: {e}", exc_info=True)
            return {"status": "failed", "error": PreviewError(str(e)).to_dict()}

        elapsed = time.monotonic() - start_time
        logger.info(f"{job!r} {result['status']} in {elapsed:.3f}s")
        return {**result, "execution_time_sec": round(elapsed, 3)}

    async def _run(self, job: PreviewJob) -> dict:
        result = await self._dispatcher.dispatch(job)
        output = result.to_dict()
        if self._upload:
            output = await self._upload_outputs(result, output)
        return {"status": result.status.value, "result": output}

    async def _upload_outputs(self, result: Result, output: dict) -> dict:
        """Replace local paths in the result dict with storage URLs."""
        uploaded = dict(output, metadata=dict(output["metadata"]))
        for field_name in ("thumbnail", "image", "pdf"):
            path = getattr(result, field_name)
            if path:
                uploaded[field_name] = await self.storage.put(path)
        for key in UPLOADED_METADATA_KEYS:
            path = result.metadata.get(key)
            if path:
                uploaded["metadata"][key] = await self.storage.put(path)
        return uploaded
