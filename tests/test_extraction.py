"""
Unit tests for text and image extraction from post pages.
"""

import json
import logging

from embedder.extraction import (
    MAX_IMAGES,
    extract_images,
    extract_text,
    first_image_source,
    meta_content,
    parse_document,
)


def page(head="", body=""):
    return parse_document(f"<html><head>{head}</head><body>{body}</body></html>")


def ld_json(data):
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


class TestExtractText:
    def test_first_matching_selector_wins(self):
        doc = page(body='<div class="b">second</div><div class="a">  first  </div>')
        assert extract_text(doc, [".a", ".b"]) == "first"

    def test_empty_element_falls_through(self):
        doc = page(body='<div class="a">   </div><div class="b">fallback</div>')
        assert extract_text(doc, [".a", ".b"]) == "fallback"

    def test_nothing_matches(self):
        assert extract_text(page(body="<p>x</p>"), [".missing"]) == ""

    def test_invalid_selector_is_skipped(self):
        doc = page(body='<div class="ok">text</div>')
        assert extract_text(doc, ["div[[", ".ok"]) == "text"


class TestMetaHelpers:
    def test_meta_by_property_and_name(self):
        doc = page(head='<meta property="og:description" content=" desc "><meta name="twitter:image" content="x.png">')
        assert meta_content(doc, prop="og:description") == "desc"
        assert meta_content(doc, name="twitter:image") == "x.png"
        assert meta_content(doc, prop="og:title") == ""

    def test_first_image_source(self):
        doc = page(body='<div class="avatar"><img src="a.jpg"><img src="b.jpg"></div>')
        assert first_image_source(doc, ".avatar img") == "a.jpg"
        assert first_image_source(doc, ".nope img") is None

    def test_first_image_source_logs_invalid_selector(self, caplog):
        caplog.set_level(logging.DEBUG, logger="embedder.extraction")
        doc = page(body='<img src="a.jpg">')

        assert first_image_source(doc, "img[[") is None
        assert any(
            "img[[" in record.getMessage() and getattr(record, "subsys", None) == "extract"
            for record in caplog.records
        )


class TestExtractImages:
    def test_metadata_images_first_and_deduplicated(self):
        doc = page(
            head=(
                '<meta property="og:image" content="https://cdn.example.com/a.jpg">'
                '<meta name="twitter:image" content="https://cdn.example.com/a.jpg">'
            ),
            body='<div class="post-media"><img src="https://cdn.example.com/b.png"></div>',
        )
        assert extract_images(doc) == ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.png"]

    def test_non_image_metadata_url_is_dropped(self):
        doc = page(head='<meta property="og:image" content="https://example.com/share/preview">')
        assert extract_images(doc) == []

    def test_media_path_without_extension_is_kept(self):
        doc = page(head='<meta property="og:image" content="https://example.com/media/12345">')
        assert extract_images(doc) == ["https://example.com/media/12345"]

    def test_jsonld_string_list_and_object_forms(self):
        doc = page(
            head=(
                ld_json({"image": "https://x.com/one.jpg"})
                + ld_json({"image": {"url": "https://x.com/two.jpg"}})
                + ld_json({"image": [f"https://x.com/list{i}.jpg" for i in range(6)]})
                + ld_json({"image": [{"url": "https://x.com/obj.webp"}, 42]})
            )
        )
        images = extract_images(doc)
        assert images[:2] == ["https://x.com/one.jpg", "https://x.com/two.jpg"]
        assert "https://x.com/list4.jpg" in images
        assert "https://x.com/list5.jpg" not in images
        assert "https://x.com/obj.webp" in images

    def test_malformed_jsonld_is_skipped(self):
        doc = page(
            head='<script type="application/ld+json">{not json</script>' + ld_json({"image": "https://x.com/ok.png"})
        )
        assert extract_images(doc) == ["https://x.com/ok.png"]

    def test_avatar_profile_icon_sources_rejected(self):
        doc = page(
            body=(
                '<div class="post-media">'
                '<img src="https://x.com/avatar/me.jpg">'
                '<img src="https://x.com/profile_pic.jpg">'
                '<img src="https://x.com/icons/star.png">'
                '<img src="https://x.com/photo.jpg">'
                "</div>"
            )
        )
        assert extract_images(doc) == ["https://x.com/photo.jpg"]

    def test_lazy_source_attribute(self):
        doc = page(body='<div class="truth-media"><img src="data:," data-src="https://x.com/lazy.gif"></div>')
        assert extract_images(doc) == ["https://x.com/lazy.gif"]

    def test_article_images_with_avatar_class_are_skipped(self):
        doc = page(
            body=(
                "<article>"
                '<img class="account-avatar" src="https://x.com/u/1.jpg">'
                '<img class="inline" src="https://x.com/content.jpg">'
                "</article>"
            )
        )
        assert extract_images(doc) == ["https://x.com/content.jpg"]

    def test_never_more_than_ten_and_no_duplicates(self):
        imgs = "".join(f'<img src="https://x.com/p{i}.jpg">' for i in range(15))
        doc = page(
            head='<meta property="og:image" content="https://x.com/p0.jpg">'
            + ld_json({"image": [f"https://x.com/ld{i}.png" for i in range(5)]}),
            body=f'<div class="post-media">{imgs}</div><div style="background-image: url(https://x.com/bg.jpg)"></div>',
        )
        images = extract_images(doc)
        assert len(images) <= MAX_IMAGES
        assert len(images) == len(set(images))
        assert images[0] == "https://x.com/p0.jpg"

    def test_background_images_used_when_content_is_sparse(self):
        doc = page(
            body=(
                '<div class="post-media"><img src="https://x.com/one.jpg"></div>'
                "<div style=\"background-image: url('https://x.com/bg.png')\"></div>"
            )
        )
        assert extract_images(doc) == ["https://x.com/one.jpg", "https://x.com/bg.png"]

    def test_background_images_ignored_when_content_is_rich(self):
        imgs = "".join(f'<img src="https://x.com/p{i}.jpg">' for i in range(5))
        doc = page(
            body=f'<div class="post-media">{imgs}</div>'
            '<div style="background-image: url(https://x.com/bg.png)"></div>'
        )
        images = extract_images(doc)
        assert "https://x.com/bg.png" not in images
        assert len(images) == 5

    def test_relative_urls_resolved_against_base(self):
        doc = page(body='<div class="post-media"><img src="/media/abc.jpg"></div>')
        assert extract_images(doc, base_url="https://truthsocial.com/@a/posts/1") == [
            "https://truthsocial.com/media/abc.jpg"
        ]

    def test_empty_document(self):
        assert extract_images(parse_document("")) == []
