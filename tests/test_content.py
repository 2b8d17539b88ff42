"""Tests for the normalized content model and its recovery parser."""

import pytest

from ezarg.content import (
    Base64Source,
    Image,
    Mixed,
    Text,
    UrlSource,
    format_text,
    parse_content,
    parse_text,
    plain_text,
    simplify,
)


def test_plain_text_without_images_is_single_text():
    assert parse_content("just an answer") == Text("just an answer")


def test_inline_image_splits_text_around_it():
    content = parse_content("see ![cat](http://x/y.png) now")

    assert content == Mixed((
        Text("see "),
        Image(UrlSource("http://x/y.png"), "cat"),
        Text(" now"),
    ))


def test_multiple_inline_images_keep_source_order():
    content = parse_text("![a](http://a.png)middle![b](http://b.png)")

    assert content == Mixed((
        Image(UrlSource("http://a.png"), "a"),
        Text("middle"),
        Image(UrlSource("http://b.png"), "b"),
    ))


def test_adjacent_images_produce_no_empty_text_segments():
    content = parse_text("![a](http://a.png)![b](http://b.png)")

    assert all(not isinstance(s, Text) for s in content.segments)
    assert len(content.segments) == 2


def test_claude_style_base64_image_descriptor():
    raw = {
        "type": "image",
        "source": {"type": "base64", "media_type": "image/jpeg", "data": "AAAA"},
    }

    content = parse_content(raw)

    assert content == Image(Base64Source("image/jpeg", "AAAA"))
    assert content.source.uri == "data:image/jpeg;base64,AAAA"


def test_openai_style_image_url_descriptor():
    content = parse_content({"type": "image_url", "image_url": {"url": "https://img/1.png"}})

    assert content == Image(UrlSource("https://img/1.png"))


def test_image_descriptor_without_source_is_rejected():
    with pytest.raises(ValueError):
        parse_content({"type": "image"})


def test_block_sequence_maps_to_mixed_and_drops_unknown_kinds():
    blocks = [
        {"type": "text", "text": "first"},
        {"type": "tool_use", "name": "search"},
        {"type": "image", "url": "https://img/2.png"},
        {"type": "text", "text": ""},
        {"type": "text", "text": "last"},
    ]

    content = parse_content(blocks)

    assert content == Mixed((
        Text("first"),
        Image(UrlSource("https://img/2.png")),
        Text("last"),
    ))


def test_unsupported_shape_is_rejected():
    with pytest.raises(ValueError, match="unsupported answer shape"):
        parse_content(42)


def test_simplify_collapses_single_text_and_recovers_images():
    assert simplify(Mixed((Text("hi"),))) == Text("hi")
    assert simplify(Mixed((Text("x ![i](http://i.png)"),))) == Mixed((
        Text("x "),
        Image(UrlSource("http://i.png"), "i"),
    ))


def test_simplify_recovers_images_in_every_text_segment():
    content = Mixed((
        Text("a ![x](http://x.png)"),
        Image(UrlSource("http://y.png")),
        Text("b"),
    ))

    assert simplify(content) == Mixed((
        Text("a "),
        Image(UrlSource("http://x.png"), "x"),
        Image(UrlSource("http://y.png")),
        Text("b"),
    ))


def test_simplify_empty_sequence_is_empty_text():
    assert simplify(Mixed(())) == Text("")


def test_simplify_leaves_multi_segment_content_alone():
    mixed = Mixed((Text("a"), Image(UrlSource("http://i.png"))))
    assert simplify(mixed) == mixed


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("* first\n- second", "• first\n• second"),
        ("   * indented", "• indented"),
        ("a **bold** word", "a bold word"),
        ("* **bold** item", "• bold item"),
        ("para one\n\npara two", "para one\n\npara two"),
        ("-5 degrees\n---", "-5 degrees\n---"),
    ],
)
def test_format_text(raw, expected):
    assert format_text(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "* a\n\n- b\n  * c",
        "**- nested** marker",
        "***a***",
        "text with **one** and **two**\n\n* bullet",
    ],
)
def test_format_text_is_idempotent(raw):
    once = format_text(raw)
    assert format_text(once) == once


def test_format_text_keeps_blank_line_before_bullet():
    assert format_text("intro\n\n* item") == "intro\n\n• item"


def test_plain_text_flattens_mixed_content():
    content = parse_content("see ![cat](http://x/y.png) now")
    assert plain_text(content) == "see ![cat](http://x/y.png) now"
