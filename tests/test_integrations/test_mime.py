"""Tests for MIME type sniffing."""

import pytest

from integrations.mime import DEFAULT_MIME_TYPE, detect_mime_type


@pytest.mark.parametrize(
    "name, save_format, expected",
    [("a.png", "PNG", "image/png"), ("b.jpg", "JPEG", "image/jpeg"), ("c.gif", "GIF", "image/gif")],
)
def test_images_are_identified_by_pillow(make_image, name, save_format, expected):
    path = make_image(20, 10, name=name, format=save_format)
    assert detect_mime_type(path) == expected


def test_image_with_misleading_extension(make_image):
    path = make_image(20, 10, name="actually-a-png.pdf", format="PNG")
    assert detect_mime_type(path) == "image/png"


def test_pdf_signature(tmp_path):
    path = tmp_path / "upload"
    path.write_bytes(b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n1 0 obj\n")
    assert detect_mime_type(str(path)) == "application/pdf"


def test_mp4_signature(tmp_path):
    path = tmp_path / "upload"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom")
    assert detect_mime_type(str(path)) == "video/mp4"


def test_quicktime_signature(tmp_path):
    path = tmp_path / "upload"
    path.write_bytes(b"\x00\x00\x00\x14ftypqt  \x00\x00\x00\x00qt  ")
    assert detect_mime_type(str(path)) == "video/quicktime"


def test_svg_text(tmp_path):
    path = tmp_path / "drawing"
    path.write_text('<?xml version="1.0"?>\n<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"/>')
    assert detect_mime_type(str(path)) == "image/svg+xml"


def test_zip_based_office_document_uses_extension(tmp_path):
    path = tmp_path / "slides.pptx"
    path.write_bytes(b"PK\x03\x04" + b"\x00" * 64)
    assert detect_mime_type(str(path)) == (
        "application/vnd.openxmlformats-officedocument.presentationml.presentation"
    )


def test_zip_without_extension_stays_zip(tmp_path):
    path = tmp_path / "archive"
    path.write_bytes(b"PK\x03\x04" + b"\x00" * 64)
    assert detect_mime_type(str(path)) == "application/zip"


def test_unknown_bytes_fall_back_to_octet_stream(tmp_path):
    path = tmp_path / "mystery"
    path.write_bytes(b"\x01\x02\x03\x04 nothing recognisable")
    assert detect_mime_type(str(path)) == DEFAULT_MIME_TYPE
