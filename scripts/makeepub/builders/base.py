"""
Base builder: shared paths, file helpers, logging, and step ordering.

Subclasses implement `build()` and `pack()`; the state machine here keeps
them in order (uninitialized → loaded → built → packed, or loaded → packed
against an earlier build directory).
"""

import os
import shutil
from abc import ABC, abstractmethod

from makeepub.config import BookConfig
from makeepub.errors import BuildStateError
from makeepub.resolve import DEFAULT_TEMPLATE_DIR


UNINITIALIZED = "uninitialized"
LOADED = "loaded"
BUILT = "built"
PACKED = "packed"


class BaseBuilder(ABC):
    """
    Abstract base for book builders.

    Subclasses must define:
        format_name:  str    — human-readable name ("EPUB")
        extension:    str    — output file extension (".epub")
        build():      method — render everything into build_dir
        pack():       method — bundle build_dir into the output file
    """

    format_name = None  # Override in subclass
    extension = None    # Override in subclass

    def __init__(self, source_dir, theme_dir, build_dir, metadata_path=None,
                 output_file=None, template_dir=None, verbose=False):
        self.source_dir = source_dir
        self.theme_dir = theme_dir
        self.build_dir = build_dir
        self.metadata_path = metadata_path
        self.template_dir = template_dir or DEFAULT_TEMPLATE_DIR
        self.verbose = verbose
        self._output_file = output_file
        self.config = None
        self.state = UNINITIALIZED

    # ── Output path ────────────────────────────────────────

    @property
    def output_file(self):
        return self._output_file or os.path.join(self.build_dir, f"output{self.extension}")

    # ── Logging ────────────────────────────────────────────

    def log(self, msg):
        if self.verbose:
            print(msg)

    def header(self, title):
        print(f"\n{'─' * 60}")
        print(f"  {title}: {self.config.title if self.config else self.source_dir}")
        print(f"{'─' * 60}")

    # ── Paths ──────────────────────────────────────────────

    def build_path(self, rel_path):
        return os.path.join(self.build_dir, rel_path)

    def theme_path(self, name):
        return os.path.join(self.theme_dir, name)

    def default_template(self, name):
        return os.path.join(self.template_dir, name)

    # ── File helpers ───────────────────────────────────────

    def write_text(self, rel_path, text):
        path = self.build_path(rel_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        self.log(f"  → {rel_path}")
        return path

    def copy_source(self, rel_path):
        """Copy a file from the source dir to the same place in build_dir."""
        src = self.config.source_path(rel_path)
        dst = self.build_path(rel_path)
        os.makedirs(os.path.dirname(dst), exist_ok=True)
        shutil.copyfile(src, dst)
        self.log(f"  → {rel_path}")
        return dst

    # ── Step ordering ──────────────────────────────────────

    def load(self):
        """Read metadata.yaml and start a fresh session."""
        self._require(UNINITIALIZED, step="load")
        self.config = BookConfig.load(self.source_dir, self.metadata_path, log=self.log)
        self.state = LOADED
        return self.config

    def _require(self, *states, step):
        if self.state not in states:
            raise BuildStateError(f"Cannot {step} in state '{self.state}'")

    def _ensure_loaded(self):
        if self.state == UNINITIALIZED:
            self.load()

    def run(self, build=True, pack=True):
        """Run the requested steps in order. Returns the archive path if packed."""
        if build:
            self.build()
        if pack:
            return self.pack()
        return None

    # ── Abstract interface ─────────────────────────────────

    @abstractmethod
    def build(self):
        """Render every artifact into build_dir."""
        ...

    @abstractmethod
    def pack(self):
        """Bundle build_dir into output_file and return its path."""
        ...
