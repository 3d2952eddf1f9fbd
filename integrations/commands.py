"""
Subprocess runner shared by every external tool (ffmpeg, soffice, pdftoppm,
rsvg-convert, chromium).

Every invocation is bounded by a timeout. On timeout, or when the job's task
is cancelled, the child process is killed and reaped before the error or the
cancellation propagates, so a hung tool can never outlive its job.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from models.errors import ToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        process.kill()
        await process.wait()


async def run_command(
    args: Sequence[str],
    timeout: float,
    cwd: Optional[str] = None,
    env: Optional[dict] = None,
) -> CommandResult:
    """
    Run a command and capture its output.

    Raises:
        ToolError if the executable is missing or the command times out.
        A non-zero exit status is NOT raised; callers decide what it means.
    """
    logger.debug(f"Executing command: {' '.join(args)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=env,
        )
    except OSError as e:
        raise ToolError(f"Unable to start {args[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill(process)
        raise ToolError(f"{args[0]} timed out after {timeout}s")
    except asyncio.CancelledError:
        await _kill(process)
        raise

    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    if not result.ok:
        logger.debug(f"{args[0]} exited with {result.returncode}: {result.stderr.strip()}")
    return result
