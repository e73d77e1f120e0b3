"""
EPUB zip container writing.

Entries are collected first and written in one go. The mimetype entry is
always first and stored uncompressed; everything else is deflated. The
archive goes to a temporary file next to the destination and is moved
into place only once complete.
"""

import os
import tempfile
import zipfile

from makeepub.errors import PackError
from makeepub.resolve import to_posix


MIMETYPE = "application/epub+zip"

# Fixed entry timestamp so identical inputs give identical archives
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class EpubArchive:
    """
    An EPUB container under construction.

    Usage:
        archive = EpubArchive("_build/output.epub")
        archive.add_file("content.opf", "_build/content.opf")
        archive.write()
    """

    def __init__(self, path):
        self.path = path
        self._entries = []  # (archive name, source path or None, data or None)
        self._names = set()

    @property
    def names(self):
        """Archive names in write order, mimetype included."""
        return ["mimetype"] + [name for name, _, _ in self._entries]

    def add_file(self, name, source_path):
        """Queue a file on disk under archive name. Returns False for duplicates."""
        return self._add(name, source_path, None)

    def add_bytes(self, name, data):
        """Queue in-memory content under archive name."""
        return self._add(name, None, data)

    def _add(self, name, source_path, data):
        name = to_posix(name)
        if name == "mimetype":
            raise PackError("The mimetype entry is written automatically")
        if name in self._names:
            return False
        self._names.add(name)
        self._entries.append((name, source_path, data))
        return True

    def missing(self):
        """Queued source files that do not exist."""
        return [src for _, src, _ in self._entries if src is not None and not os.path.isfile(src)]

    def write(self):
        """Write the archive. Raises PackError if any source file is missing."""
        missing = self.missing()
        if missing:
            raise PackError(f"Missing build artifact: {missing[0]} (run the build step first)")

        out_dir = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(out_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".epub_", suffix=".tmp", dir=out_dir)
        os.close(fd)

        try:
            with zipfile.ZipFile(tmp_path, "w") as zout:
                zout.writestr(_zip_info("mimetype", zipfile.ZIP_STORED), MIMETYPE)
                for name, source_path, data in self._entries:
                    if data is None:
                        try:
                            with open(source_path, "rb") as f:
                                data = f.read()
                        except FileNotFoundError as e:
                            raise PackError(f"Missing build artifact: {source_path}") from e
                    zout.writestr(_zip_info(name, zipfile.ZIP_DEFLATED), data)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        return self.path


def _zip_info(name, compress_type):
    info = zipfile.ZipInfo(name, date_time=ZIP_DATE_TIME)
    info.compress_type = compress_type
    info.external_attr = 0o644 << 16
    return info
