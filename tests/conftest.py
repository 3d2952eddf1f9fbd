"""
Shared test fixtures.

These replace real infrastructure with lightweight local alternatives:
- HTTP servers → httpx.MockTransport (see http_helpers.RouteTransport)
- Source images → generated with Pillow in tmp_path
- ffmpeg, soffice, chromium → small stub classes in the individual tests

This means tests:
- Run without network access or any external tools installed
- Run in milliseconds
- Are fully isolated (each test gets a fresh scratch directory)
"""

import pytest
from PIL import Image

from models.job import PreviewJob


@pytest.fixture
def scratch_dir(tmp_path):
    """The job's scratch directory."""
    directory = tmp_path / "scratch"
    directory.mkdir()
    return str(directory)


@pytest.fixture
def make_image(tmp_path):
    """Factory: write a solid-colour image of the given size and return its path."""

    def _make(width, height, name="source.png", mode="RGB", color=(200, 30, 30), **save_kwargs):
        img = Image.new(mode, (width, height), color=color)
        path = tmp_path / name
        img.save(path, **save_kwargs)
        return str(path)

    return _make


@pytest.fixture
def make_job(scratch_dir):
    def _make(source, mime_type=None, kind=None):
        return PreviewJob(source=source, directory=scratch_dir, mime_type=mime_type, kind=kind)

    return _make

