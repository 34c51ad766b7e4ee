"""Unit tests for directory listing."""

import os
import sys

import pytest

from texpane.contexts.workspace.exceptions import IOFailure
from texpane.contexts.workspace.file_tree import FileNode, list_directory, visible_nodes


@pytest.mark.unit
def test_list_directory_returns_every_child(tmp_path):
    """Test that a directory with two files lists exactly those two paths."""
    (tmp_path / "a").write_text("a")
    (tmp_path / "b").write_text("b")

    nodes = list_directory(tmp_path)

    assert sorted(node.path for node in nodes) == [str(tmp_path / "a"), str(tmp_path / "b")]
    assert all(not node.is_dir for node in nodes)


@pytest.mark.unit
def test_list_directory_classifies_directories(tmp_path):
    """Test that subdirectories are reported with is_dir=True."""
    (tmp_path / "chapters").mkdir()
    (tmp_path / "main.tex").write_text("")

    nodes = {node.name: node for node in list_directory(str(tmp_path))}

    assert nodes["chapters"].is_dir is True
    assert nodes["main.tex"].is_dir is False


@pytest.mark.unit
def test_list_directory_is_not_recursive(tmp_path):
    """Test that only immediate children are listed."""
    nested = tmp_path / "chapters"
    nested.mkdir()
    (nested / "intro.tex").write_text("")

    nodes = list_directory(tmp_path)

    assert [node.name for node in nodes] == ["chapters"]


@pytest.mark.unit
@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
def test_list_directory_follows_symlinks(tmp_path):
    """Test that a symlink to a directory counts as a directory."""
    target = tmp_path / "figures"
    target.mkdir()
    listed = tmp_path / "listed"
    listed.mkdir()
    os.symlink(target, listed / "figs")

    nodes = list_directory(listed)

    assert nodes == [FileNode(name="figs", path=str(listed / "figs"), is_dir=True)]


@pytest.mark.unit
def test_list_directory_empty(tmp_path):
    """Test that an empty directory gives an empty listing."""
    assert list_directory(tmp_path) == []


@pytest.mark.unit
def test_list_directory_missing_path_raises(tmp_path):
    """Test that a nonexistent path is an error, never an empty listing."""
    missing = tmp_path / "does-not-exist"

    with pytest.raises(IOFailure) as exc_info:
        list_directory(missing)

    assert str(exc_info.value)
    assert exc_info.value.path == missing
    assert isinstance(exc_info.value.original_error, FileNotFoundError)


@pytest.mark.unit
def test_list_directory_on_file_raises(tmp_path):
    """Test that listing a regular file fails with the OS error preserved."""
    file_path = tmp_path / "main.tex"
    file_path.write_text("")

    with pytest.raises(IOFailure) as exc_info:
        list_directory(file_path)

    assert str(exc_info.value.original_error) in str(exc_info.value)


@pytest.mark.unit
def test_file_node_to_dict():
    """Test the wire representation of a node."""
    node = FileNode(name="main.tex", path="/work/main.tex", is_dir=False)
    assert node.to_dict() == {"name": "main.tex", "path": "/work/main.tex", "is_dir": False}


@pytest.mark.unit
def test_visible_nodes_hides_artifacts_and_sorts():
    """Test that build artifacts are hidden and directories come first."""
    nodes = [
        FileNode("main.tex", "/w/main.tex", False),
        FileNode("preview.pdf", "/w/preview.pdf", False),
        FileNode("main.synctex.gz", "/w/main.synctex.gz", False),
        FileNode("Figures", "/w/Figures", True),
        FileNode("appendix.tex", "/w/appendix.tex", False),
        FileNode("build.aux", "/w/build.aux", True),  # directories are never hidden
        FileNode("MAIN.AUX", "/w/MAIN.AUX", False),
    ]

    shown = visible_nodes(nodes)

    assert [node.name for node in shown] == ["build.aux", "Figures", "appendix.tex", "main.tex"]
    assert len(nodes) == 7
