"""
Path resolution for sources, themes, and build outputs.

Everything that needs to locate a theme, the built-in control templates,
or a resource directory imports from here. Paths recorded in the manifest
and written into the archive are always POSIX-style and relative to the
archive root.
"""

import os
import posixpath


PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

# Built-in control documents: content.opf, toc.ncx, META-INF/container.xml
DEFAULT_TEMPLATE_DIR = os.path.join(PACKAGE_DIR, "templates")

# Named themes shipped with the package
THEMES_DIR = os.path.join(PACKAGE_DIR, "themes")

DEFAULT_THEME = "default"

# Theme stylesheet candidates, first match wins
THEME_STYLESHEETS = ["style.less", "style.scss", "style.css"]


def available_themes():
    """Names of the themes bundled with the package."""
    if not os.path.isdir(THEMES_DIR):
        return []
    return sorted(
        entry for entry in os.listdir(THEMES_DIR)
        if os.path.isdir(os.path.join(THEMES_DIR, entry))
    )


def resolve_theme(theme, cwd=None):
    """
    Resolve a theme name or path to a directory.

    A bare name matching a bundled theme wins; anything else is treated as
    a path (relative to cwd). Returns an absolute path, or None.
    """
    theme = theme or DEFAULT_THEME

    if theme in available_themes():
        return os.path.join(THEMES_DIR, theme)

    path = theme if os.path.isabs(theme) else os.path.join(cwd or os.getcwd(), theme)
    if os.path.isdir(path):
        return os.path.abspath(path)

    return None


def theme_stylesheet(theme_dir):
    """Return the theme's default stylesheet path, or None."""
    for name in THEME_STYLESHEETS:
        path = os.path.join(theme_dir, name)
        if os.path.exists(path):
            return path
    return None


def resolve_dir(path, base):
    """Make path absolute against base unless it already is."""
    return path if os.path.isabs(path) else os.path.abspath(os.path.join(base, path))


def change_ext(path, ext):
    """Swap the extension of path: change_ext("a/ch1.md", "xhtml") == "a/ch1.xhtml"."""
    root, _ = posixpath.splitext(to_posix(path))
    return f"{root}.{ext.lstrip('.')}"


def to_posix(path):
    """Normalize an archive-relative path to forward slashes."""
    return posixpath.normpath(path.replace(os.sep, "/"))


def relative_href(target, from_file):
    """Href to target as seen from a document at from_file (both archive-relative)."""
    start = posixpath.dirname(to_posix(from_file)) or "."
    return posixpath.relpath(to_posix(target), start)


def list_resource_files(source_dir, resource_dirs, log=None):
    """
    Gather the immediate files of each declared resource directory.

    Returns archive-relative paths ("images/a.png") in declaration order,
    names sorted within a directory. Directories that do not exist are
    skipped.
    """
    files = []
    for rdir in resource_dirs:
        abs_dir = resolve_dir(rdir, source_dir)
        if not os.path.isdir(abs_dir):
            if log:
                log(f"  Skipping missing resource dir: {rdir}")
            continue
        for name in sorted(os.listdir(abs_dir)):
            if os.path.isfile(os.path.join(abs_dir, name)):
                files.append(to_posix(posixpath.join(rdir, name)))
    return files
