import os
from pathlib import Path

import pytest

from folio.errors import WriteError
from folio.writer import OutputWriter, collect_assets


def tree(root: Path) -> dict:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def test_write_files_and_assets(tmp_path):
    static = tmp_path / "static"
    (static / "css").mkdir(parents=True)
    (static / "css" / "site.css").write_text("body{}", encoding="utf-8")
    (static / ".DS_Store").write_text("junk", encoding="utf-8")
    output = tmp_path / "out"

    summary = OutputWriter(output, workers=4).write(
        {"index.html": b"home", "hello/index.html": b"hello"},
        collect_assets(static),
    )
    assert tree(output) == {
        "css/site.css": b"body{}",
        "hello/index.html": b"hello",
        "index.html": b"home",
    }
    assert summary.files == 2
    assert summary.assets == 1
    assert summary.unchanged == ()
    leftovers = [p.name for p in tmp_path.iterdir() if p.name.startswith(".")]
    assert leftovers == []


def test_clean_write_replaces_previous_output(tmp_path):
    output = tmp_path / "out"
    OutputWriter(output).write({"old/index.html": b"old", "index.html": b"home"})
    summary = OutputWriter(output).write({"index.html": b"home"})
    assert tree(output) == {"index.html": b"home"}
    assert summary.unchanged == ("index.html",)


def test_merge_write_keeps_previous_output(tmp_path):
    output = tmp_path / "out"
    OutputWriter(output).write({"old/index.html": b"old", "index.html": b"v1"})
    OutputWriter(output, clean=False).write({"index.html": b"v2"})
    assert tree(output) == {"index.html": b"v2", "old/index.html": b"old"}


def test_failed_write_leaves_previous_output(tmp_path, monkeypatch):
    output = tmp_path / "out"
    OutputWriter(output).write({"index.html": b"v1"})

    def broken_write(self, staging, rel, source):
        raise OSError(28, "No space left on device", str(staging / rel))

    monkeypatch.setattr(OutputWriter, "_write_one", broken_write)
    with pytest.raises(WriteError) as excinfo:
        OutputWriter(output, workers=1).write({"index.html": b"v2", "a/index.html": b"a"})
    assert excinfo.value.fatal
    assert "No space left" in excinfo.value.message
    assert tree(output) == {"index.html": b"v1"}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["out"]


def test_failed_swap_restores_previous_output(tmp_path, monkeypatch):
    output = tmp_path / "out"
    OutputWriter(output).write({"index.html": b"v1"})
    real_replace = os.replace
    calls = []

    def flaky_replace(src, dst):
        calls.append((src, dst))
        if len(calls) == 2:
            raise OSError(13, "Permission denied")
        return real_replace(src, dst)

    monkeypatch.setattr(os, "replace", flaky_replace)
    with pytest.raises(WriteError):
        OutputWriter(output).write({"index.html": b"v2"})
    assert tree(output) == {"index.html": b"v1"}


def test_asset_conflicting_with_generated_file(tmp_path):
    static = tmp_path / "static"
    static.mkdir()
    (static / "index.html").write_text("static", encoding="utf-8")
    with pytest.raises(WriteError):
        OutputWriter(tmp_path / "out").write({"index.html": b"home"}, collect_assets(static))


def test_refuses_to_replace_protected_directories(tmp_path):
    source = tmp_path / "site" / "content"
    source.mkdir(parents=True)
    with pytest.raises(WriteError):
        OutputWriter(tmp_path / "site", protected=[source]).write({"index.html": b"x"})
    with pytest.raises(WriteError):
        OutputWriter(source, protected=[source]).write({"index.html": b"x"})
    assert not (source / "index.html").exists()


@pytest.mark.parametrize("rel", ["../escape.html", "/abs.html", ""])
def test_rejects_paths_outside_output(tmp_path, rel):
    with pytest.raises(WriteError):
        OutputWriter(tmp_path / "out").write({rel: b"x"})


def test_refuses_output_nested_inside_protected_directory(tmp_path):
    source = tmp_path / "content"
    source.mkdir()
    with pytest.raises(WriteError) as excinfo:
        OutputWriter(source / "public", protected=[source]).write({"index.html": b"x"})
    assert "inside" in excinfo.value.message
    assert not (source / "public").exists()
