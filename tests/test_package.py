import zipfile
from pathlib import Path

import pytest

from makeepub.errors import PackError
from makeepub.package import EpubArchive, MIMETYPE


def test_mimetype_first_and_stored(tmp_path: Path):
    src = tmp_path / "content.opf"
    src.write_text("<package/>", encoding="utf-8")
    out = tmp_path / "out.epub"

    archive = EpubArchive(str(out))
    archive.add_bytes("META-INF/container.xml", b"<container/>")
    archive.add_file("content.opf", str(src))
    archive.write()

    with zipfile.ZipFile(out) as zf:
        infos = zf.infolist()
        assert [i.filename for i in infos] == ["mimetype", "META-INF/container.xml", "content.opf"]
        assert infos[0].compress_type == zipfile.ZIP_STORED
        assert infos[1].compress_type == zipfile.ZIP_DEFLATED
        assert zf.read("mimetype") == MIMETYPE.encode("ascii")
        assert zf.read("content.opf") == b"<package/>"


def test_duplicate_names_skipped(tmp_path: Path):
    archive = EpubArchive(str(tmp_path / "out.epub"))

    assert archive.add_bytes("a.css", b"1") is True
    assert archive.add_bytes("a.css", b"2") is False
    assert archive.names == ["mimetype", "a.css"]


def test_mimetype_cannot_be_added(tmp_path: Path):
    with pytest.raises(PackError):
        EpubArchive(str(tmp_path / "out.epub")).add_bytes("mimetype", b"x")


def test_missing_artifact_leaves_no_archive(tmp_path: Path):
    out = tmp_path / "out.epub"
    archive = EpubArchive(str(out))
    archive.add_file("ch1.xhtml", str(tmp_path / "build" / "ch1.xhtml"))

    with pytest.raises(PackError, match="ch1.xhtml"):
        archive.write()

    assert not out.exists()
    assert list(tmp_path.iterdir()) == []


def test_identical_inputs_identical_bytes(tmp_path: Path):
    paths = []
    for name in ("one.epub", "two.epub"):
        archive = EpubArchive(str(tmp_path / name))
        archive.add_bytes("ch1.xhtml", b"<html/>")
        paths.append(Path(archive.write()))

    assert paths[0].read_bytes() == paths[1].read_bytes()
