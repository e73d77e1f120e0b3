"""
makeepub — markdown-to-EPUB build toolchain.

Public API:
    from makeepub.config import BookConfig
    from makeepub.builders import EpubBuilder
    from makeepub.resolve import resolve_theme
    from makeepub.content import render_chapter
    from makeepub.style import merge_styles
    from makeepub.template import render, pretty_xml
    from makeepub.package import EpubArchive
    from makeepub.errors import MakeEpubError
"""

__version__ = "0.3.0"
