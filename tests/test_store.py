import dataclasses
import logging
from pathlib import Path

import pytest

from inkwell.errors import NotFoundError
from inkwell.protocols import ContentSource
from inkwell.store import ContentNode, ContentStore


def create_root(tmp_path: Path) -> Path:
    root = tmp_path / "blog"
    (root / "sub").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "folder.md").mkdir()
    (root / "a.md").write_text("# A", encoding="utf-8")
    (root / "b.MDX").write_text("# B", encoding="utf-8")
    (root / "notes.txt").write_text("ignore", encoding="utf-8")
    (root / ".hidden.md").write_text("# Hidden", encoding="utf-8")
    (root / ".git" / "x.md").write_text("# Git", encoding="utf-8")
    (root / "sub" / "d.markdown").write_text("# D", encoding="utf-8")
    return root


def test_missing_root_raises_not_found(tmp_path):
    store = ContentStore(tmp_path / "nope")
    with pytest.raises(NotFoundError) as excinfo:
        store.scan()
    assert excinfo.value.path == tmp_path / "nope"
    assert "nope" in str(excinfo.value)
    # Still a FileNotFoundError for callers that only know the builtin
    assert isinstance(excinfo.value, FileNotFoundError)


def test_root_that_is_a_file_raises_not_found(tmp_path):
    target = tmp_path / "file.md"
    target.write_text("x", encoding="utf-8")
    with pytest.raises(NotFoundError):
        ContentStore(target).scan()


def test_scan_filters_by_extension_and_hidden_paths(tmp_path):
    root = create_root(tmp_path)
    scan = ContentStore(root).scan()
    assert scan.paths == ["a.md", "b.MDX", "sub/d.markdown"]
    assert len(scan) == 3


def test_custom_extension_allow_list(tmp_path):
    root = create_root(tmp_path)
    scan = ContentStore(root, extensions=(".txt",)).scan()
    assert scan.paths == ["notes.txt"]


def test_nodes_carry_text_mtime_and_source(tmp_path):
    root = create_root(tmp_path)
    nodes = list(ContentStore(root, source="blog").scan())
    first = nodes[0]
    assert first.path == "a.md"
    assert first.raw_text == "# A"
    assert first.source == "blog"
    assert first.last_modified.timestamp() == pytest.approx(
        (root / "a.md").stat().st_mtime, abs=1e-3
    )


def test_nodes_are_immutable(tmp_path):
    root = create_root(tmp_path)
    node = next(iter(ContentStore(root).scan()))
    with pytest.raises(dataclasses.FrozenInstanceError):
        node.raw_text = "changed"


def test_scan_is_restartable(tmp_path):
    root = create_root(tmp_path)
    scan = ContentStore(root).scan()
    assert list(scan) == list(scan)


def test_scan_uses_snapshot_taken_at_start(tmp_path):
    root = create_root(tmp_path)
    scan = ContentStore(root).scan()
    (root / "late.md").write_text("# Late", encoding="utf-8")
    assert [n.path for n in scan] == ["a.md", "b.MDX", "sub/d.markdown"]


def test_vanished_file_is_skipped_with_warning(tmp_path, caplog):
    caplog.set_level(logging.WARNING)
    root = create_root(tmp_path)
    scan = ContentStore(root).scan()
    (root / "a.md").unlink()

    nodes = list(scan)

    assert [n.path for n in nodes] == ["b.MDX", "sub/d.markdown"]
    assert scan.skipped == ["a.md"]
    assert any("a.md" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)


def test_undecodable_file_is_skipped(tmp_path):
    root = tmp_path / "blog"
    root.mkdir()
    (root / "bad.md").write_bytes(b"\xff\xfe\xfa")
    (root / "good.md").write_text("ok", encoding="utf-8")
    scan = ContentStore(root).scan()
    assert [n.path for n in scan] == ["good.md"]
    assert scan.skipped == ["bad.md"]


def test_content_store_satisfies_protocol(tmp_path):
    assert isinstance(ContentStore(tmp_path), ContentSource)


def test_content_node_equality():
    from datetime import datetime

    stamp = datetime(2024, 1, 1)
    assert ContentNode("a.md", "x", stamp) == ContentNode("a.md", "x", stamp)
