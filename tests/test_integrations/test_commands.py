"""Tests for the subprocess runner, using the running interpreter as the tool."""

import asyncio
import os
import sys

import pytest

from integrations.commands import run_command
from models.errors import ToolError


@pytest.mark.asyncio
async def test_captures_output_and_exit_status():
    result = await run_command([sys.executable, "-c", "print('hello')"], timeout=30)

    assert result.ok
    assert result.stdout.strip() == "hello"


@pytest.mark.asyncio
async def test_nonzero_exit_is_returned_not_raised():
    result = await run_command(
        [sys.executable, "-c", "import sys; sys.stderr.write('bad input'); sys.exit(3)"],
        timeout=30,
    )

    assert not result.ok
    assert result.returncode == 3
    assert "bad input" in result.stderr


@pytest.mark.asyncio
async def test_missing_executable_raises_tool_error():
    with pytest.raises(ToolError, match="Unable to start"):
        await run_command(["/nonexistent/definitely-not-a-tool"], timeout=5)


@pytest.mark.asyncio
async def test_timeout_kills_the_process():
    with pytest.raises(ToolError, match="timed out"):
        await run_command([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)


@pytest.mark.asyncio
async def test_cancellation_propagates():
    task = asyncio.create_task(
        run_command([sys.executable, "-c", "import time; time.sleep(30)"], timeout=60)
    )
    await asyncio.sleep(0.5)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_runs_in_working_directory(tmp_path):
    result = await run_command([sys.executable, "-c", "import os; print(os.getcwd())"], timeout=30, cwd=str(tmp_path))

    assert os.path.realpath(result.stdout.strip()) == os.path.realpath(tmp_path)
