"""Unit tests for file operations."""

import pytest

from texpane.contexts.workspace import file_ops
from texpane.contexts.workspace.exceptions import IOFailure
from texpane.contexts.workspace.file_tree import list_directory


@pytest.mark.unit
@pytest.mark.parametrize("content", ["X", "", "\\section{Ünïcode}\r\nline two\n"])
def test_write_then_read_round_trip(tmp_path, content):
    """Test that written content is read back unchanged."""
    path = tmp_path / "main.tex"

    file_ops.write_file(path, content)

    assert file_ops.read_file(path) == content


@pytest.mark.unit
def test_read_missing_file_raises(tmp_path):
    """Test that reading a missing file raises IOFailure."""
    with pytest.raises(IOFailure):
        file_ops.read_file(tmp_path / "missing.tex")


@pytest.mark.unit
def test_write_into_missing_directory_raises(tmp_path):
    """Test that writing below a nonexistent directory raises IOFailure."""
    with pytest.raises(IOFailure):
        file_ops.write_file(tmp_path / "nope" / "main.tex", "X")


@pytest.mark.unit
def test_create_file_creates_empty_file(tmp_path):
    """Test that create_file produces an empty file."""
    path = tmp_path / "new.tex"

    file_ops.create_file(path)

    assert path.is_file()
    assert path.read_text() == ""


@pytest.mark.unit
def test_create_directory_is_recursive_and_idempotent(tmp_path):
    """Test nested creation and that an existing directory is not an error."""
    path = tmp_path / "a" / "b" / "c"

    file_ops.create_directory(path)
    file_ops.create_directory(path)

    assert path.is_dir()


@pytest.mark.unit
def test_create_directory_over_file_raises(tmp_path):
    """Test that a file in the way is reported."""
    blocker = tmp_path / "taken"
    blocker.write_text("")

    with pytest.raises(IOFailure):
        file_ops.create_directory(blocker)


@pytest.mark.unit
def test_move_then_list(tmp_path):
    """Test that a moved node appears at the destination and not at the source."""
    source = tmp_path / "draft.tex"
    source.write_text("draft")
    destination_dir = tmp_path / "chapters"
    destination_dir.mkdir()
    destination = destination_dir / "intro.tex"

    file_ops.move(source, destination)

    dest_paths = [node.path for node in list_directory(destination_dir)]
    root_paths = [node.path for node in list_directory(tmp_path)]
    assert str(destination) in dest_paths
    assert str(source) not in root_paths
    assert destination.read_text() == "draft"


@pytest.mark.unit
def test_move_missing_source_raises(tmp_path):
    """Test that moving a nonexistent node raises IOFailure."""
    with pytest.raises(IOFailure):
        file_ops.move(tmp_path / "ghost.tex", tmp_path / "other.tex")


@pytest.mark.unit
def test_delete_file(tmp_path):
    """Test deleting a single file."""
    path = tmp_path / "main.tex"
    path.write_text("")

    file_ops.delete(path)

    assert not path.exists()


@pytest.mark.unit
def test_delete_directory_removes_descendants(tmp_path):
    """Test that deleting a directory makes every descendant unlistable."""
    root = tmp_path / "project"
    nested = root / "chapters" / "figures"
    nested.mkdir(parents=True)
    (nested / "plot.png").write_bytes(b"png")
    (root / "main.tex").write_text("")

    file_ops.delete(root)

    assert not root.exists()
    for descendant in (root, root / "chapters", nested):
        with pytest.raises(IOFailure):
            list_directory(descendant)


@pytest.mark.unit
def test_delete_missing_raises(tmp_path):
    """Test that deleting a nonexistent node raises IOFailure."""
    with pytest.raises(IOFailure):
        file_ops.delete(tmp_path / "ghost")


@pytest.mark.unit
def test_write_unencodable_text_keeps_existing_content(tmp_path):
    """Test that a lone surrogate raises IOFailure before the file is touched."""
    path = tmp_path / "main.tex"
    path.write_text("original")

    with pytest.raises(IOFailure) as exc_info:
        file_ops.write_file(path, "bad \ud800 text")

    assert isinstance(exc_info.value.original_error, UnicodeEncodeError)
    assert path.read_text() == "original"


@pytest.mark.unit
@pytest.mark.parametrize(
    "operation",
    [file_ops.read_file, file_ops.create_file, file_ops.create_directory, file_ops.delete],
)
def test_nul_in_path_raises_io_failure(tmp_path, operation):
    with pytest.raises(IOFailure) as exc_info:
        operation(tmp_path / "bad\0name")

    assert isinstance(exc_info.value.original_error, ValueError)
