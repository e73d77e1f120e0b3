import zipfile

import pytest

import build


def parse(*argv):
    return build.build_parser().parse_args(list(argv))


@pytest.mark.parametrize("argv, steps", [
    ((), (True, True)),
    (("-c",), (True, False)),
    (("-p",), (False, True)),
    (("-c", "-p"), (True, True)),
])
def test_select_steps(argv, steps):
    assert build.select_steps(parse("book", *argv)) == steps


def test_resolve_inputs_defaults(book_dir):
    inputs = build.resolve_inputs(parse(str(book_dir)))

    assert inputs["source_dir"] == str(book_dir)
    assert inputs["build_dir"] == str(book_dir / "_build")
    assert inputs["theme_dir"].endswith("default")
    assert inputs["metadata_path"] is None
    assert inputs["output_file"] is None


def test_unknown_theme_exits(book_dir, capsys):
    with pytest.raises(SystemExit):
        build.resolve_inputs(parse(str(book_dir), "-t", "no-such-theme"))
    assert "no-such-theme" in capsys.readouterr().out


def test_build_only_then_pack(book_dir, theme_dir, tmp_path):
    out = tmp_path / "book.epub"
    common = [str(book_dir), str(out), "-t", str(theme_dir), "-b", str(tmp_path / "b")]

    build.main(common + ["-c"])
    assert (tmp_path / "b" / "content.opf").exists()
    assert not out.exists()

    build.main(common + ["-p"])
    with zipfile.ZipFile(out) as zf:
        assert zf.namelist()[0] == "mimetype"


def test_errors_exit_nonzero(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        build.main([str(tmp_path)])

    assert exc.value.code == 1
    assert "metadata.yaml" in capsys.readouterr().out
