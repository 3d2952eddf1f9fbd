"""
MIME type sniffing for files whose declared type is missing or useless.

Detection order:
1. Pillow: anything it can open is an image and reports its own MIME type
2. magic-byte signatures for the non-image formats we preview
3. the file extension (mimetypes), which is the only way to tell the
   zip-based and OLE-based office formats apart
"""

import logging
import mimetypes
import os
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

# (offset, signature, mime type)
SIGNATURES: list[tuple[int, bytes, str]] = [
    (0, b"%PDF", "application/pdf"),
    (4, b"ftypqt", "video/quicktime"),
    (4, b"ftyp", "video/mp4"),
    (0, b"\x1a\x45\xdf\xa3", "video/webm"),
    (0, b"OggS", "video/ogg"),
    (0, b"FLV", "video/x-flv"),
    (0, b"PK\x03\x04", "application/zip"),
    (0, b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "application/x-ole-storage"),
    (0, b"{\\rtf", "application/rtf"),
]
CONTAINER_TYPES = {"application/zip", "application/x-ole-storage"}

# Not every platform's mime.types knows these
OFFICE_EXTENSIONS = {
    ".doc": "application/msword",
    ".xls": "application/vnd.ms-excel",
    ".ppt": "application/vnd.ms-powerpoint",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".odt": "application/vnd.oasis.opendocument.text",
    ".ods": "application/vnd.oasis.opendocument.spreadsheet",
    ".odp": "application/vnd.oasis.opendocument.presentation",
}


def _pillow_mime_type(path: str) -> Optional[str]:
    try:
        with Image.open(path) as img:
            return Image.MIME.get(img.format)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        return None


def _signature_mime_type(head: bytes) -> Optional[str]:
    if head[8:12] == b"AVI " and head.startswith(b"RIFF"):
        return "video/x-msvideo"
    for offset, signature, mime_type in SIGNATURES:
        if head[offset:offset + len(signature)] == signature:
            return mime_type
    return None


def _looks_like_svg(head: bytes) -> bool:
    text = head.lstrip().lower()
    return text.startswith(b"<svg") or (text.startswith(b"<?xml") and b"<svg" in text)


def detect_mime_type(path: str) -> str:
    mime_type = _pillow_mime_type(path)
    if mime_type:
        return mime_type

    with open(path, "rb") as f:
        head = f.read(1024)

    if _looks_like_svg(head):
        return "image/svg+xml"

    mime_type = _signature_mime_type(head)
    if mime_type and mime_type not in CONTAINER_TYPES:
        return mime_type

    extension = os.path.splitext(path)[1].lower()
    if extension in OFFICE_EXTENSIONS:
        return OFFICE_EXTENSIONS[extension]

    guessed, _ = mimetypes.guess_type(path)
    if guessed:
        return guessed

    logger.debug(f"Could not sniff a MIME type for {path}")
    return mime_type or DEFAULT_MIME_TYPE
