import pytest

from makeepub.errors import ManifestError
from makeepub.manifest import Heading, ManifestBuilder, mime_type, uid_for


@pytest.mark.parametrize("path, mime", [
    ("ch1.xhtml", "application/xhtml+xml"),
    ("style.css", "text/css"),
    ("images/Cover.JPG", "image/jpeg"),
    ("images/map.png", "image/png"),
    ("fonts/serif.otf", "font/otf"),
    ("toc.ncx", "application/x-dtbncx+xml"),
])
def test_mime_type(path, mime):
    assert mime_type(path) == mime


@pytest.mark.parametrize("path", ["notes.docx", "README"])
def test_unknown_extension(path):
    with pytest.raises(ManifestError, match=path):
        mime_type(path)


def test_uid_is_pure_function_of_path():
    assert uid_for("images/a.png") == uid_for("images/a.png")
    assert uid_for("images/a.png") != uid_for("images/b.png")
    assert uid_for("ch1.xhtml").startswith("item-")


def test_add_item_keeps_order_and_dedups():
    messages = []
    builder = ManifestBuilder(log=messages.append)

    a = builder.add_item("images/a.png")
    builder.add_item("style.css")
    again = builder.add_item("images/a.png")

    assert again is a
    assert [item.path for item in builder.items] == ["images/a.png", "style.css"]
    assert "images/a.png" in builder
    assert any("duplicate" in m for m in messages)


def test_add_chapter_records_toc_in_call_order():
    builder = ManifestBuilder()
    builder.add_chapter("ch2.xhtml", [Heading("Two", 1, "two")])
    builder.add_chapter("ch1.xhtml", [Heading("One", 1, "one")])

    assert [entry.file for entry in builder.toc] == ["ch2.xhtml", "ch1.xhtml"]
    assert builder.toc[0].uid == uid_for("ch2.xhtml")


def test_nav_points_nest_by_level():
    builder = ManifestBuilder()
    builder.add_chapter("ch1.xhtml", [
        Heading("Part", 1, "part"),
        Heading("Section A", 2, "a"),
        Heading("Detail", 3, "detail"),
        Heading("Section B", 2, "b"),
    ])
    builder.add_chapter("ch2.xhtml", [Heading("Next", 1, "next")])

    roots = builder.nav_points()

    assert [p.label for p in roots] == ["Part", "Next"]
    part = roots[0]
    assert [c.label for c in part.children] == ["Section A", "Section B"]
    assert [c.label for c in part.children[0].children] == ["Detail"]
    assert part.src == "ch1.xhtml#part"
    assert [part.play_order, part.children[0].play_order, roots[1].play_order] == [1, 2, 5]
    assert roots[1].id == "nav-5"
    assert builder.depth() == 3


def test_headings_do_not_nest_across_chapters():
    builder = ManifestBuilder()
    builder.add_chapter("ch1.xhtml", [Heading("One", 1, "one")])
    builder.add_chapter("ch2.xhtml", [Heading("Sub", 2, "sub")])

    assert [p.label for p in builder.nav_points()] == ["One", "Sub"]


def test_chapter_without_headings_gets_stem_label():
    builder = ManifestBuilder()
    builder.add_chapter("part/intro.xhtml", [])

    (point,) = builder.nav_points()
    assert point.label == "intro"
    assert point.src == "part/intro.xhtml"
    assert builder.depth() == 1
