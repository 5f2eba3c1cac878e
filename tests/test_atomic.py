"""
Tests for the atomic file writer.
"""

import errno
from pathlib import Path

import pytest

from hod.core.fs import (
    FailureKind,
    FileWriteError,
    LocalFileSystem,
    atomic_write,
    classify_os_error,
    ensure_directory,
    temp_path_for,
)

TARGET = Path("/data/file.json")


class TestAtomicWriteInMemory:
    """Test the write-then-rename algorithm with injected failures."""

    def test_writes_through_temp_file(self, memory_fs) -> None:
        memory_fs.mkdir(TARGET.parent)

        atomic_write(TARGET, "{}", memory_fs)

        assert memory_fs.get(TARGET) == "{}"
        assert memory_fs.get(temp_path_for(TARGET)) is None
        operations = [op for op, _ in memory_fs.calls]
        assert operations.index("write_text") < operations.index("rename")

    def test_removes_stale_temp_file_first(self, memory_fs) -> None:
        memory_fs.put(temp_path_for(TARGET), "stale")

        atomic_write(TARGET, "fresh", memory_fs)

        assert memory_fs.get(TARGET) == "fresh"
        assert memory_fs.get(temp_path_for(TARGET)) is None

    def test_rename_failure_keeps_old_content(self, memory_fs) -> None:
        memory_fs.put(TARGET, "old")
        memory_fs.fail("rename", errno.EIO)

        with pytest.raises(FileWriteError) as exc_info:
            atomic_write(TARGET, "new", memory_fs)

        assert exc_info.value.kind == FailureKind.OTHER
        assert exc_info.value.path == TARGET
        assert memory_fs.get(TARGET) == "old"
        assert memory_fs.get(temp_path_for(TARGET)) is None

    @pytest.mark.parametrize(
        "error_number,kind",
        [
            (errno.EACCES, FailureKind.PERMISSION_DENIED),
            (errno.EPERM, FailureKind.PERMISSION_DENIED),
            (errno.EROFS, FailureKind.READ_ONLY),
            (errno.ENOSPC, FailureKind.NO_SPACE),
            (errno.EIO, FailureKind.OTHER),
        ],
    )
    def test_write_failure_is_classified(self, memory_fs, error_number, kind) -> None:
        memory_fs.put(TARGET, "old")
        memory_fs.fail("write_text", error_number)

        with pytest.raises(FileWriteError) as exc_info:
            atomic_write(TARGET, "new", memory_fs)

        assert exc_info.value.kind == kind
        assert memory_fs.get(TARGET) == "old"

    def test_failed_cleanup_is_swallowed(self, memory_fs) -> None:
        """The original write error surfaces even if the temp file cannot be removed."""
        memory_fs.put(TARGET, "old")
        memory_fs.fail("rename", errno.ENOSPC)
        memory_fs.fail("unlink", errno.EACCES)

        with pytest.raises(FileWriteError) as exc_info:
            atomic_write(TARGET, "new", memory_fs)

        assert exc_info.value.kind == FailureKind.NO_SPACE


class TestEnsureDirectory:
    """Test mkdir -p semantics."""

    def test_creates_parents(self, memory_fs) -> None:
        ensure_directory(Path("/a/b/c"), memory_fs)

        assert memory_fs.exists(Path("/a/b"))
        assert memory_fs.exists(Path("/a/b/c"))

    def test_permission_error(self, memory_fs) -> None:
        memory_fs.fail("mkdir", errno.EACCES)

        with pytest.raises(FileWriteError) as exc_info:
            ensure_directory(Path("/a"), memory_fs)

        assert exc_info.value.kind == FailureKind.PERMISSION_DENIED


class TestLocalFileSystem:
    """Test the writer against the real disk."""

    def test_atomic_write_on_disk(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "index.json"
        ensure_directory(target.parent)

        atomic_write(target, '{"a": 1}\n')
        atomic_write(target, '{"a": 2}\n')

        assert target.read_text() == '{"a": 2}\n'
        assert not temp_path_for(target).exists()

    def test_existing_directory_is_fine(self, tmp_path: Path) -> None:
        ensure_directory(tmp_path)
        ensure_directory(tmp_path, LocalFileSystem())


def test_classify_unknown_error() -> None:
    assert classify_os_error(ValueError("x")) == FailureKind.OTHER
    assert classify_os_error(OSError(errno.EROFS, "ro")) == FailureKind.READ_ONLY
