import pytest

from makeepub.content import render_chapter, render_markdown
from makeepub.errors import ContentError
from makeepub.manifest import Heading


def test_headings_in_document_order_with_levels():
    html, headings = render_markdown(
        "# Part One\n\nIntro.\n\n## Arrival\n\nText.\n\n### Night\n\n## Departure\n"
    )

    assert headings == [
        Heading("Part One", 1, "part-one"),
        Heading("Arrival", 2, "arrival"),
        Heading("Night", 3, "night"),
        Heading("Departure", 2, "departure"),
    ]
    assert '<h1 id="part-one">Part One</h1>' in html


def test_xhtml_output():
    html, headings = render_markdown("Line one  \nline two\n\n---\n")

    assert "<br />" in html
    assert "<hr />" in html
    assert headings == []


def test_render_chapter_reads_file(tmp_path):
    path = tmp_path / "ch1.md"
    path.write_text("# Hello\n\n*World*\n", encoding="utf-8")

    html, headings = render_chapter(str(path))

    assert "<em>World</em>" in html
    assert [h.text for h in headings] == ["Hello"]


def test_missing_chapter(tmp_path):
    with pytest.raises(ContentError, match="ch9.md"):
        render_chapter(str(tmp_path / "ch9.md"))


def test_undecodable_chapter(tmp_path):
    path = tmp_path / "bad.md"
    path.write_bytes(b"\xff\xfe\x00bad")

    with pytest.raises(ContentError, match="bad.md"):
        render_chapter(str(path))


def test_heading_text_is_plain():
    html, headings = render_markdown('# Tom & Jerry\n\n## Fish "and" Chips\n')

    assert headings[0].text == "Tom & Jerry"
    assert headings[1].text == 'Fish "and" Chips'
    assert "Tom &amp; Jerry" in html
