"""
Centralized configuration using pydantic-settings.

How it works:
- Reads environment variables automatically (e.g., IMAGE_WIDTH env var → Settings.IMAGE_WIDTH)
- Falls back to defaults defined here if env vars are not set
- Can also read from a .env file in the project root

List settings (the embed URL patterns) are read from the environment as JSON,
e.g. EMBED_DISALLOW_PATTERNS='["^https?://(www\\\\.)?example\\\\.com/"]'.

Every module imports `settings` from here instead of hardcoding values.
"""

import re

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Imaging ─────────────────────────────────────────────────
    IMAGE_WIDTH: int = 1280            # full-size preview width (never upscaled)
    THUMBNAIL_WIDTH: int = 400
    THUMBNAIL_HEIGHT: int = 300

    # ── Link resolution ─────────────────────────────────────────
    RESOLVE_TIMEOUT: float = 5.0       # seconds per hop
    RESOLVE_MAX_REDIRECTS: int = 10
    RESOLVE_MAX_BODY_BYTES: int = 2 * 1024 * 1024  # page bytes kept for metadata scraping
    # Certain webservers will not send an `x-frame-options` header
    # when no browser user agent is specified
    RESOLVE_USER_AGENT: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_11_6) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/54.0.2840.71 Safari/537.36"
    )

    # ── Embedding ───────────────────────────────────────────────
    # Final URLs matching these are scanned for an alternate embed URL
    EMBED_URL_CHECK_PATTERNS: list[str] = [
        r"^https?://(drive|docs)\.google\.com/",
    ]
    # Links matching these are never embeddable, on any protocol
    EMBED_DISALLOW_PATTERNS: list[str] = [
        r"^https?://(www\.)?portfolium\.com/entry",
    ]

    # ── Downloads ───────────────────────────────────────────────
    DOWNLOAD_TIMEOUT: float = 60.0
    DOWNLOAD_VERIFY_TLS: bool = True

    # ── External tools ──────────────────────────────────────────
    FFMPEG_PATH: str = "ffmpeg"
    FFPROBE_PATH: str = "ffprobe"
    SOFFICE_PATH: str = "soffice"
    PDFTOPPM_PATH: str = "pdftoppm"
    RSVG_CONVERT_PATH: str = "rsvg-convert"
    CHROMIUM_PATH: str = "chromium"

    VIDEO_TIMEOUT: float = 200.0       # frame extraction and transcoding
    PROBE_TIMEOUT: float = 30.0
    VIDEO_FRAME_OFFSET: float = 1.0    # seconds into the video to grab a frame
    OFFICE_TIMEOUT: float = 200.0
    PDF_TIMEOUT: float = 60.0
    PDF_RENDER_DPI: int = 150
    SVG_TIMEOUT: float = 60.0

    SCREENSHOT_WIDTH: int = 1280
    SCREENSHOT_HEIGHT: int = 1280
    SCREENSHOT_TIMEOUT: float = 30.0
    SCREENSHOT_RENDER_DELAY: float = 7.5

    # ── Storage (S3) ────────────────────────────────────────────
    AWS_REGION: str = "us-west-2"
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_BUCKET: str = "previews"
    STORAGE_CACHE_MAX_AGE: int = 232000000
    STORAGE_EXPIRES_DAYS: int = 3650
    STORAGE_SIGNED_URL_EXPIRES: int = 7 * 24 * 60 * 60  # SigV4 maximum

    # ── Worker ──────────────────────────────────────────────────
    WORKER_POOL_SIZE: int = 4          # jobs processed concurrently
    JOB_DEADLINE: float = 600.0        # seconds before a job is cancelled

    # ── App ─────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    @field_validator("EMBED_URL_CHECK_PATTERNS", "EMBED_DISALLOW_PATTERNS")
    @classmethod
    def _patterns_compile(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid URL pattern {pattern!r}: {e}") from e
        return patterns

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton, import this everywhere
settings = Settings()
