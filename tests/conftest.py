import textwrap
from pathlib import Path

import pytest

from makeepub.builders import EpubBuilder


METADATA_YAML = """
metadata:
  title: Test Book
  author: Jane Writer
  publisher: Small Press
  language: en
  book_id: 11111111-2222-3333-4444-555555555555
  resource_id: 66666666-7777-8888-9999-000000000000
catalog:
  - ch1.md
  - ch2.md
"""

CHAPTER_TEMPLATE = """\
<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head>
  <link href="{{ metadata.stylesheet }}" rel="stylesheet" type="text/css" />
  <title>{{ title }}</title>
</head>
<body>
{{ content|raw }}
</body>
</html>
"""

PAGE_TEMPLATE = """\
<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>{{ metadata.title }}</title></head>
<body><p>{{ metadata.author }}</p></body>
</html>
"""


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


@pytest.fixture
def book_dir(tmp_path: Path) -> Path:
    """A two-chapter book with fixed identifiers."""
    src = tmp_path / "book"
    write(src / "metadata.yaml", METADATA_YAML)
    write(src / "ch1.md", "# Chapter One\n\nFirst chapter.\n")
    write(src / "ch2.md", "# Chapter Two\n\nSecond chapter.\n")
    return src


@pytest.fixture
def theme_dir(tmp_path: Path) -> Path:
    """A theme with minimal templates and a plain CSS stylesheet."""
    theme = tmp_path / "theme"
    write(theme / "style.css", "p { color: black; }\n")
    write(theme / "chapter.xhtml", CHAPTER_TEMPLATE)
    for name in ("cover.xhtml", "preface.xhtml", "copyright.xhtml"):
        write(theme / name, PAGE_TEMPLATE)
    return theme


@pytest.fixture
def make_builder(book_dir, theme_dir, tmp_path):
    def _make(**kwargs):
        kwargs.setdefault("source_dir", str(book_dir))
        kwargs.setdefault("theme_dir", str(theme_dir))
        kwargs.setdefault("build_dir", str(tmp_path / "build"))
        return EpubBuilder(**kwargs)

    return _make
