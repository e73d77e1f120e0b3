"""
EPUB builder.

Pipeline: resources → cover → stylesheet → chapters → content.opf / toc.ncx
→ front matter pages (build), then container zip (pack).
"""

import os

from makeepub.builders.base import BaseBuilder, BUILT, LOADED, PACKED
from makeepub.content import render_chapter
from makeepub.errors import StyleError
from makeepub.package import EpubArchive
from makeepub.resolve import change_ext, relative_href, theme_stylesheet
from makeepub.style import merge_styles
from makeepub.template import pretty_xml, render


# Theme templates for the front matter pages, in archive order
FRONT_MATTER = ["cover.xhtml", "preface.xhtml", "copyright.xhtml"]

# Control documents rendered from the built-in bundle
CONTROL_DOCUMENTS = ["content.opf", "toc.ncx"]

CONTAINER_XML = "META-INF/container.xml"

CHAPTER_TEMPLATE = "chapter.xhtml"


class EpubBuilder(BaseBuilder):
    format_name = "EPUB"
    extension = ".epub"

    # ── Build ──────────────────────────────────────────────

    def build(self):
        self._ensure_loaded()
        self._require(LOADED, step="build")
        self.header("Building EPUB")

        config = self.config
        os.makedirs(self.build_dir, exist_ok=True)

        # ── Resources ──────────────────────────────────────
        print("  [resources]")
        for rfile in config.resource_files:
            if rfile in config.manifest:
                print(f"  Warning: duplicate resource '{rfile}' skipped")
                continue
            config.manifest.add_item(rfile)
            self.copy_source(rfile)

        if config.cover and config.cover not in config.manifest:
            config.manifest.add_item(config.cover)
            self.copy_source(config.cover)

        # ── Stylesheet ─────────────────────────────────────
        print("  [stylesheet]")
        self.build_stylesheet()

        # ── Chapters ───────────────────────────────────────
        print("  [chapters]")
        for chapter in config.catalog:
            self.build_chapter(chapter)

        # ── Control documents and front matter ─────────────
        print("  [book]")
        context = config.context()
        for name in CONTROL_DOCUMENTS:
            text = render(self.default_template(name), context)
            self.write_text(name, pretty_xml(text))

        for name in FRONT_MATTER:
            self.write_text(name, render(self.theme_path(name), context))

        self.state = BUILT
        print(f"  ✓ Built {len(config.manifest)} manifest items into {self.build_dir}")
        return True

    def build_stylesheet(self):
        """Merge theme and book stylesheets into the compiled .css."""
        config = self.config
        theme_css = theme_stylesheet(self.theme_dir)
        if theme_css is None:
            raise StyleError(f"No stylesheet (style.less/.scss/.css) in theme {self.theme_dir}")

        book_css = None
        if config.book_stylesheet:
            book_css = config.source_path(config.book_stylesheet)

        css = merge_styles(theme_css, book_css)
        config.manifest.add_item(config.stylesheet)
        self.write_text(config.stylesheet, css)

    def build_chapter(self, chapter):
        """Render one catalog entry to XHTML and record it."""
        config = self.config
        fragment, headings = render_chapter(config.source_path(chapter))
        xhtml_file = change_ext(chapter, "xhtml")

        config.manifest.add_chapter(xhtml_file, headings)

        metadata = dict(config.metadata)
        metadata["stylesheet"] = relative_href(config.stylesheet, xhtml_file)
        text = render(self.theme_path(CHAPTER_TEMPLATE), {
            "metadata": metadata,
            "title": headings[0].text if headings else "",
            "headings": headings,
            "content": fragment,
        })
        self.write_text(xhtml_file, text)

    # ── Pack ───────────────────────────────────────────────

    def pack(self):
        self._ensure_loaded()
        self._require(LOADED, BUILT, step="pack")
        self.header("Packing EPUB")

        config = self.config
        archive = EpubArchive(self.output_file)

        archive.add_file(CONTAINER_XML, self.default_template(CONTAINER_XML))
        for name in CONTROL_DOCUMENTS + FRONT_MATTER:
            archive.add_file(name, self.build_path(name))

        if config.cover:
            archive.add_file(config.cover, self.build_path(config.cover))
        archive.add_file(config.stylesheet, self.build_path(config.stylesheet))

        for rfile in config.resource_files:
            archive.add_file(rfile, self.build_path(rfile))

        for xhtml_file in config.chapter_files():
            archive.add_file(xhtml_file, self.build_path(xhtml_file))

        self.log(f"  Entries: {len(archive.names)}")
        path = archive.write()

        self.state = PACKED
        print(f"  ✓ {path}")
        return path
