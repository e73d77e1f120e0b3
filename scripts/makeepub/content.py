"""
Chapter rendering: markdown source to an XHTML fragment plus headings.

Markdown conversion is delegated to Python-Markdown; the toc extension
assigns each heading an id and reports the heading tree, which feeds the
book's table of contents.
"""

from html import unescape

import markdown

from makeepub.errors import ContentError
from makeepub.manifest import Heading


MARKDOWN_EXTENSIONS = ["extra", "toc", "sane_lists"]


def _flatten(tokens):
    """Walk the toc extension's nested token list in document order.

    Token names keep their HTML entities; headings carry plain text.
    """
    for token in tokens:
        yield Heading(unescape(token["name"]), token["level"], token["id"])
        yield from _flatten(token.get("children", []))


def render_markdown(text):
    """Convert markdown text; returns (fragment, headings)."""
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS, output_format="xhtml")
    html = md.convert(text)
    return html, list(_flatten(md.toc_tokens))


def render_chapter(path):
    """
    Read a chapter file and render it.

    Returns (xhtml_fragment, headings). Raises ContentError when the file
    cannot be read or is not valid UTF-8.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ContentError(f"Cannot read chapter {path}: {e}") from e

    return render_markdown(text)
