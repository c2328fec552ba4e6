import os

import pytest

from iconforge.errors import WriteError
from iconforge.fileops import OutputTree


def test_commit_moves_staging_into_place(tmp_path):
    target = tmp_path / "out" / "icons"
    tree = OutputTree(str(target))
    staging = tree.open()
    assert os.path.isdir(staging)
    path = tree.write_bytes("mipmap-mdpi/a.png", b"data")
    assert path == str(target / "mipmap-mdpi" / "a.png")
    assert not target.exists()
    tree.write_json("Contents.json", {"a": 1})
    assert tree.commit() == str(target)
    assert (target / "mipmap-mdpi" / "a.png").read_bytes() == b"data"
    assert (target / "Contents.json").read_text(encoding="utf-8") == '{\n  "a": 1\n}\n'
    assert not os.path.exists(staging)


def test_existing_target_needs_force(tmp_path):
    target = tmp_path / "icons"
    target.mkdir()
    (target / "old.png").write_bytes(b"old")
    with pytest.raises(WriteError, match="already exists"):
        OutputTree(str(target)).open()

    tree = OutputTree(str(target), force=True)
    tree.open()
    tree.write_text("new.txt", "new")
    tree.commit()
    assert sorted(os.listdir(target)) == ["new.txt"]


def test_discard_leaves_nothing_behind(tmp_path):
    target = tmp_path / "icons"
    tree = OutputTree(str(target))
    tree.open()
    tree.write_bytes("a.png", b"x")
    tree.discard()
    assert not target.exists()
    assert os.listdir(tmp_path) == []


def test_write_before_open(tmp_path):
    with pytest.raises(WriteError):
        OutputTree(str(tmp_path / "icons")).write_bytes("a.png", b"x")
