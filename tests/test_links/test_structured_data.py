"""Tests for <meta> and JSON-LD scraping."""

import logging

from links import structured_data

VIMEO_PAGE = """
<html><head>
<meta property="og:title" content="A &amp; B">
<script type="application/ld+json">
[{"@type": "VideoObject",
  "embedUrl": "https://player.vimeo.com/video/76979871",
  "thumbnail": {"url": "https://i.vimeocdn.com/video/452001751_1280.jpg", "width": 1280}}]
</script>
<script>var notJsonLd = {};</script>
</head></html>
"""


def test_parser_collects_meta_tags_with_decoded_values():
    parser = structured_data.parse(VIMEO_PAGE)

    assert {"property": "og:title", "content": "A & B"} in parser.meta_tags


def test_parser_only_collects_json_ld_scripts():
    parser = structured_data.parse(VIMEO_PAGE)

    assert len(parser.json_ld_blocks) == 1
    assert "VideoObject" in parser.json_ld_blocks[0]


def test_iter_json_ld_flattens_lists_and_graphs():
    page = (
        '<script type="application/ld+json">{"@graph": [{"name": "a"}, {"name": "b"}]}</script>'
        '<script type="application/ld+json">{"name": "c"}</script>'
        '<script type="application/ld+json">[{"name": "d"}]</script>'
    )

    objects = list(structured_data.iter_json_ld_objects(structured_data.parse(page)))

    assert [obj["name"] for obj in objects] == ["a", "b", "c", "d"]


def test_malformed_json_ld_is_skipped_with_a_warning(caplog):
    page = (
        '<script type="application/ld+json">{"embedUrl": </script>'
        '<script type="application/ld+json">{"name": "ok"}</script>'
    )

    with caplog.at_level(logging.WARNING, logger="links.structured_data"):
        objects = list(structured_data.iter_json_ld_objects(structured_data.parse(page)))

    assert objects == [{"name": "ok"}]
    assert "malformed JSON-LD" in caplog.text


def test_lookup_follows_dotted_paths():
    obj = {"thumbnail": {"url": "https://i.vimeocdn.com/x.jpg"}}

    assert structured_data.lookup(obj, "thumbnail.url") == "https://i.vimeocdn.com/x.jpg"
    assert structured_data.lookup(obj, "thumbnail.width") is None
    assert structured_data.lookup(obj, "embedUrl.anything") is None
    assert structured_data.lookup("not a dict", "thumbnail") is None


def test_find_embed_url_prefers_meta_tag():
    page = (
        '<meta itemprop="embedURL" content="https://docs.google.com/preview">'
        '<script type="application/ld+json">{"embedUrl": "https://other.example/embed"}</script>'
    )

    assert structured_data.find_embed_url(page, "https:") == "https://docs.google.com/preview"


def test_find_embed_url_takes_last_matching_meta_tag():
    page = (
        '<meta itemprop="embedURL" content="https://docs.google.com/first">'
        '<meta itemprop="embedURL" content="http://docs.google.com/plain">'
        '<meta itemprop="embedURL" content="https://docs.google.com/last">'
    )

    assert structured_data.find_embed_url(page, "https:") == "https://docs.google.com/last"
    assert structured_data.find_embed_url(page, "http:") == "http://docs.google.com/plain"


def test_find_embed_url_falls_back_to_json_ld():
    assert structured_data.find_embed_url(VIMEO_PAGE, "https:") == "https://player.vimeo.com/video/76979871"


def test_find_embed_url_respects_protocol_prefix():
    assert structured_data.find_embed_url(VIMEO_PAGE, "http:") is None


def test_find_embed_url_without_structured_data():
    assert structured_data.find_embed_url("<html><body>plain</body></html>", "https:") is None
