"""
Manifest and table-of-contents accumulation.

The manifest lists every file bundled in the archive with a stable id and
media type; the toc records each chapter's headings in catalog order.
Both only ever grow.
"""

import hashlib
import posixpath
from collections import namedtuple

from makeepub.errors import ManifestError
from makeepub.resolve import to_posix


MIME_TYPES = {
    ".xhtml": "application/xhtml+xml",
    ".html": "application/xhtml+xml",
    ".htm": "application/xhtml+xml",
    ".css": "text/css",
    ".js": "text/javascript",
    ".ncx": "application/x-dtbncx+xml",
    ".opf": "application/oebps-package+xml",
    ".xml": "application/xml",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".txt": "text/plain",
}


ManifestItem = namedtuple("ManifestItem", ["uid", "path", "mime"])

Heading = namedtuple("Heading", ["text", "level", "anchor"])

TocEntry = namedtuple("TocEntry", ["file", "uid", "headers"])


def mime_type(path):
    """Media type for path, by extension."""
    ext = posixpath.splitext(path)[1].lower()
    try:
        return MIME_TYPES[ext]
    except KeyError:
        raise ManifestError(f"Unknown media type for '{path}' (extension '{ext or '<none>'}')")


def uid_for(path):
    """Stable XML id for an archive path."""
    digest = hashlib.sha1(to_posix(path).encode("utf-8")).hexdigest()
    return f"item-{digest[:16]}"


class NavPoint:
    """One node of the NCX navigation tree."""

    def __init__(self, label, src, level):
        self.label = label
        self.src = src
        self.level = level
        self.play_order = 0
        self.children = []

    @property
    def id(self):
        return f"nav-{self.play_order}"

    def __repr__(self):
        return f"NavPoint({self.label!r}, {self.src!r}, children={len(self.children)})"


class ManifestBuilder:
    """
    Accumulates manifest items and toc entries for one book.

    Usage:
        builder = ManifestBuilder()
        builder.add_item("images/cover.jpg")
        entry = builder.add_chapter("ch1.xhtml", headings)
        builder.nav_points()
    """

    def __init__(self, log=None):
        self.items = []
        self.toc = []
        self._by_path = {}
        self._log = log or print

    def add_item(self, path):
        """Append path to the manifest and return its item.

        A path that is already present is not added again; the existing
        item is returned.
        """
        path = to_posix(path)
        existing = self._by_path.get(path)
        if existing is not None:
            self._log(f"  Warning: duplicate file '{path}' skipped")
            return existing

        item = ManifestItem(uid_for(path), path, mime_type(path))
        self.items.append(item)
        self._by_path[path] = item
        return item

    def add_chapter(self, file, headings):
        """Record a rendered chapter; call order is the reading order."""
        item = self.add_item(file)
        entry = TocEntry(item.path, item.uid, list(headings))
        self.toc.append(entry)
        return entry

    def __contains__(self, path):
        return to_posix(path) in self._by_path

    def __len__(self):
        return len(self.items)

    # ── Navigation tree ────────────────────────────────────

    def nav_points(self):
        """
        Nest headings by level into NavPoints.

        A heading becomes a child of the nearest preceding heading with a
        smaller level. Chapters without headings get one point labelled
        with the file stem. play_order numbers the points in document order.
        """
        roots = []
        order = 0

        for entry in self.toc:
            stack = []
            headers = entry.headers or [
                Heading(posixpath.splitext(posixpath.basename(entry.file))[0], 1, None)
            ]
            for heading in headers:
                src = entry.file
                if heading.anchor:
                    src = f"{entry.file}#{heading.anchor}"
                point = NavPoint(heading.text, src, heading.level)
                order += 1
                point.play_order = order

                while stack and stack[-1].level >= point.level:
                    stack.pop()
                if stack:
                    stack[-1].children.append(point)
                else:
                    roots.append(point)
                stack.append(point)

        return roots

    def depth(self):
        """Deepest nesting of the navigation tree (at least 1)."""

        def _depth(points):
            if not points:
                return 0
            return 1 + max(_depth(p.children) for p in points)

        return max(_depth(self.nav_points()), 1)
