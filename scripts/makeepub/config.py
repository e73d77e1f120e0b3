"""
Book description: load, validate, and provide defaults for metadata.yaml.
"""

import os
import uuid

import yaml

from makeepub.errors import ConfigError
from makeepub.manifest import ManifestBuilder
from makeepub.resolve import change_ext, list_resource_files, to_posix


METADATA_FILE = "metadata.yaml"

# Fields required in the metadata section
REQUIRED_FIELDS = ["title"]

# Defaults applied to the metadata section if missing
METADATA_DEFAULTS = {
    "author": "",
    "publisher": "",
    "language": "en",
    "rights": "",
    "description": "",
    "cover": None,
    "stylesheet": None,
}

# Compiled stylesheet name when the book declares none
DEFAULT_STYLESHEET = "style.css"


class BookConfig:
    """
    Loaded, validated book description plus the session state built from it.

    Usage:
        config = BookConfig.load(source_dir)
        config.title                 # "My Book"
        config.metadata["book_id"]   # generated if not declared
        config.catalog               # ["ch1.md", "ch2.md"]
        config.manifest.add_item("images/a.png")
    """

    def __init__(self, data, source_dir, log=None):
        self._data = data
        self.source_dir = source_dir
        self.metadata = data["metadata"]
        self.book_stylesheet = self.metadata["stylesheet"]
        self.metadata["stylesheet"] = change_ext(
            self.book_stylesheet or DEFAULT_STYLESHEET, "css"
        )
        self.manifest = ManifestBuilder(log=log)
        self.resource_files = list_resource_files(source_dir, self.resource, log=log)

    @classmethod
    def load(cls, source_dir, metadata_path=None, log=None):
        """Load and validate metadata.yaml from a source directory."""
        yaml_path = metadata_path or os.path.join(source_dir, METADATA_FILE)
        if not os.path.exists(yaml_path):
            raise ConfigError(f"No {os.path.basename(yaml_path)} found: {yaml_path}")

        try:
            with open(yaml_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"{yaml_path} is not valid YAML: {e}") from e

        if not data:
            raise ConfigError(f"{yaml_path} is empty")
        if not isinstance(data, dict):
            raise ConfigError(f"{yaml_path} must be a YAML mapping, got {type(data).__name__}")

        # "info" is the older name for the metadata section
        metadata = data.get("metadata") or data.get("info")
        if not isinstance(metadata, dict):
            raise ConfigError(f"{yaml_path} has no 'metadata' section")

        missing = [key for key in REQUIRED_FIELDS if not metadata.get(key)]
        if missing:
            raise ConfigError(f"{yaml_path} missing required fields: {', '.join(missing)}")

        for key, default in METADATA_DEFAULTS.items():
            if metadata.get(key) is None:
                metadata[key] = default

        metadata["book_id"] = metadata.get("book_id") or str(uuid.uuid4())
        metadata["resource_id"] = metadata.get("resource_id") or str(uuid.uuid4())
        for key in ("cover", "stylesheet"):
            if metadata[key]:
                metadata[key] = _relative_path(metadata[key], key, yaml_path)

        data["metadata"] = metadata
        data.pop("info", None)

        for key in ("catalog", "resource"):
            value = data.get(key) or []
            if not isinstance(value, list):
                raise ConfigError(f"'{key}' in {yaml_path} must be a list")
            data[key] = [_relative_path(v, key, yaml_path) for v in value]

        # each chapter is one spine entry, keyed by its output name
        seen = set()
        for chapter in data["catalog"]:
            xhtml_file = change_ext(chapter, "xhtml")
            if xhtml_file in seen:
                raise ConfigError(f"Chapter '{chapter}' duplicates {xhtml_file} in catalog of {yaml_path}")
            seen.add(xhtml_file)

        return cls(data, source_dir, log=log)

    # ── Attribute access ───────────────────────────────────

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"BookConfig has no field '{name}'")

    def __contains__(self, key):
        return key in self._data

    # ── Convenience ────────────────────────────────────────

    @property
    def title(self):
        return self.metadata["title"]

    @property
    def stylesheet(self):
        """Archive path of the compiled stylesheet."""
        return self.metadata["stylesheet"]

    @property
    def cover(self):
        return self.metadata["cover"]

    def chapter_files(self):
        """Archive paths of the rendered chapters, in catalog order."""
        return [change_ext(chapter, "xhtml") for chapter in self.catalog]

    def cover_item(self):
        """Manifest item of the cover image, or None."""
        for item in self.manifest.items:
            if item.path == self.cover:
                return item
        return None

    def source_path(self, rel_path):
        return os.path.join(self.source_dir, rel_path)

    def context(self):
        """Template context shared by every rendered document."""
        return {
            "metadata": self.metadata,
            "manifest": self.manifest.items,
            "toc": self.manifest.toc,
            "spine": self.manifest.toc,
            "nav_points": self.manifest.nav_points(),
            "depth": self.manifest.depth(),
            "catalog": self.catalog,
            "cover_item": self.cover_item(),
        }

    def summary(self):
        """Print a short config summary."""
        print(f"\n  Book:   {self.title}")
        if self.metadata.get("author"):
            print(f"  Author: {self.metadata['author']}")
        print(f"  Source: {self.source_dir}")
        print(f"  Chapters: {len(self.catalog)}")


def _relative_path(value, key, yaml_path):
    """Normalize a declared path; it must stay inside the source directory."""
    path = to_posix(str(value))
    if os.path.isabs(str(value)) or path.startswith("/") or path == ".." or path.startswith("../"):
        raise ConfigError(f"'{key}' entry '{value}' in {yaml_path} must be a path inside the book directory")
    return path
