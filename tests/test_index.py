"""
Tests for the dependency index.

Covers load/update/remove/get_next_tasks, cycle detection, corruption
handling and atomic persistence.
"""

import errno
import json
from pathlib import Path

import pytest

from hod.core.fs import FailureKind
from hod.core.ids import IdValidationError
from hod.core.index import (
    CircularDependencyError,
    DependencyIndex,
    IndexCorruptionError,
    IndexEntry,
    IndexLoadError,
    IndexWriteError,
    find_cycle,
    ready_ids,
)


def entry(status: str = "pending", *deps: str) -> IndexEntry:
    return IndexEntry(status=status, dependencies=list(deps))


# ==============================================================================
# load()
# ==============================================================================


class TestLoad:
    """Test reading and validating the index file."""

    def test_missing_file_is_empty(self, index) -> None:
        assert index.load() == {}

    def test_legacy_array_is_empty(self, index, memory_fs, index_file) -> None:
        memory_fs.put(index_file, "[]")
        assert index.load() == {}

    def test_invalid_json_is_corruption(self, index, memory_fs, index_file) -> None:
        memory_fs.put(index_file, "{not json")

        with pytest.raises(IndexCorruptionError):
            index.load()

    @pytest.mark.parametrize("payload", ['"text"', "42", "null"])
    def test_non_object_is_corruption(self, index, memory_fs, index_file, payload) -> None:
        memory_fs.put(index_file, payload)

        with pytest.raises(IndexCorruptionError, match="expected an object"):
            index.load()

    @pytest.mark.parametrize(
        "bad_entry",
        [
            {"status": 1, "dependencies": []},
            {"status": "pending"},
            {"status": "pending", "dependencies": "1"},
            {"status": "pending", "dependencies": [1]},
            "pending",
        ],
    )
    def test_malformed_entry_is_corruption(
        self, index, memory_fs, index_file, bad_entry
    ) -> None:
        memory_fs.put(index_file, json.dumps({"1": bad_entry}))

        with pytest.raises(IndexCorruptionError, match="task '1'"):
            index.load()

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"abc": {"status": "pending", "dependencies": []}}, "task ID 'abc'"),
            ({"1.": {"status": "pending", "dependencies": []}}, "task ID '1.'"),
            ({"": {"status": "pending", "dependencies": []}}, "task ID ''"),
            ({"1": {"status": "pending", "dependencies": ["x"]}}, "dependency ID 'x'"),
            ({"1": {"status": "pending", "dependencies": ["1..2"]}}, "dependency ID '1..2'"),
        ],
    )
    def test_malformed_id_is_corruption(
        self, index, memory_fs, index_file, payload, message
    ) -> None:
        memory_fs.put(index_file, json.dumps(payload))

        with pytest.raises(IndexCorruptionError, match=message):
            index.load()

    def test_malformed_key_is_not_rewritten(self, index, memory_fs, index_file) -> None:
        """A bad key blocks writes instead of being carried into the next save."""
        original = json.dumps({"abc": {"status": "pending", "dependencies": []}})
        memory_fs.put(index_file, original)

        with pytest.raises(IndexCorruptionError):
            index.update("1", entry())
        with pytest.raises(IndexCorruptionError):
            index.remove("abc")

        assert memory_fs.get(index_file) == original

    def test_read_permission_error(self, index, memory_fs, index_file) -> None:
        memory_fs.put(index_file, "{}")
        memory_fs.fail("read_text", errno.EACCES)

        with pytest.raises(IndexLoadError) as exc_info:
            index.load()

        assert exc_info.value.kind == FailureKind.PERMISSION_DENIED

    def test_every_operation_reloads(self, index, memory_fs, index_file) -> None:
        """Edits made behind the index's back are visible on the next call."""
        index.update("1", entry())
        memory_fs.put(index_file, json.dumps({"9": {"status": "x", "dependencies": []}}))

        assert list(index.load()) == ["9"]


# ==============================================================================
# update()
# ==============================================================================


class TestUpdate:
    """Test creating and replacing entries."""

    def test_round_trip(self, index) -> None:
        index.update("1", entry("pending"))
        index.update("2", entry("in-progress", "1"))
        index.update("3", entry("completed", "1", "2"))

        assert index.load() == {
            "1": entry("pending"),
            "2": entry("in-progress", "1"),
            "3": entry("completed", "1", "2"),
        }

    def test_normalizes_dependencies_and_status(self, index) -> None:
        persisted = index.update("2", IndexEntry(status="", dependencies=[" 1", "3", "1 "]))

        assert persisted == entry("pending", "1", "3")
        assert index.load()["2"] == persisted

    def test_creates_hod_directory(self, index, memory_fs, tasks_dir) -> None:
        index.update("1", entry())

        assert memory_fs.exists(tasks_dir / ".hod")

    def test_file_format(self, index, memory_fs, index_file) -> None:
        index.update("1", entry("pending", "2"))

        text = memory_fs.get(index_file)
        assert text.endswith("\n")
        assert text == json.dumps(
            {"1": {"status": "pending", "dependencies": ["2"]}}, indent=2
        ) + "\n"

    def test_forward_reference_allowed(self, index) -> None:
        index.update("1", entry("pending", "99"))
        assert index.load()["1"].dependencies == ["99"]

    def test_invalid_task_id(self, index, memory_fs, index_file) -> None:
        with pytest.raises(IdValidationError):
            index.update("1.", entry())
        assert memory_fs.get(index_file) is None

    def test_invalid_dependency_id(self, index) -> None:
        with pytest.raises(IdValidationError):
            index.update("1", entry("pending", "abc"))

    def test_write_failure_leaves_file_intact(self, index, memory_fs, index_file) -> None:
        index.update("1", entry())
        before = memory_fs.get(index_file)
        memory_fs.fail("rename", errno.ENOSPC)

        with pytest.raises(IndexWriteError) as exc_info:
            index.update("2", entry())

        assert exc_info.value.kind == FailureKind.NO_SPACE
        assert memory_fs.get(index_file) == before


class TestCycleDetection:
    """Test that no update can introduce a cycle."""

    def test_self_dependency(self, index, memory_fs, index_file) -> None:
        index.update("2", entry())
        before = memory_fs.get(index_file)

        with pytest.raises(CircularDependencyError) as exc_info:
            index.update("1", entry("pending", "1"))

        assert exc_info.value.cycle == ["1", "1"]
        assert memory_fs.get(index_file) == before

    def test_self_dependency_on_empty_index(self, index, memory_fs, index_file) -> None:
        with pytest.raises(CircularDependencyError) as exc_info:
            index.update("1", entry("pending", "1"))

        assert exc_info.value.cycle == ["1", "1"]
        assert memory_fs.get(index_file) is None

    def test_closing_a_cycle(self, index, memory_fs, index_file) -> None:
        index.update("1", entry("pending", "2"))
        index.update("2", entry("pending", "3"))
        index.update("3", entry())
        before = memory_fs.get(index_file)

        with pytest.raises(CircularDependencyError) as exc_info:
            index.update("3", entry("pending", "1"))

        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle[:-1]) == {"1", "2", "3"}
        assert len(cycle) == 4
        assert "->" in str(exc_info.value)
        assert memory_fs.get(index_file) == before

    def test_cycle_through_forward_reference_is_not_a_cycle(self, index) -> None:
        index.update("1", entry("pending", "2"))
        index.update("3", entry("pending", "1"))

        assert set(index.load()) == {"1", "3"}

    def test_diamond_is_not_a_cycle(self, index) -> None:
        index.update("1", entry())
        index.update("2", entry("pending", "1"))
        index.update("3", entry("pending", "1"))
        index.update("4", entry("pending", "2", "3"))

        assert index.load()["4"].dependencies == ["2", "3"]


# ==============================================================================
# remove()
# ==============================================================================


class TestRemove:
    """Test removing entries."""

    def test_remove_keeps_references(self, index) -> None:
        index.update("1", entry())
        index.update("2", entry("pending", "1"))

        index.remove("1")

        data = index.load()
        assert "1" not in data
        assert data["2"].dependencies == ["1"]

    def test_remove_missing_is_noop(self, index, memory_fs, index_file) -> None:
        index.remove("5")
        assert memory_fs.get(index_file) is None

    def test_remove_write_failure(self, index, memory_fs) -> None:
        index.update("1", entry())
        memory_fs.fail("write_text", errno.EROFS)

        with pytest.raises(IndexWriteError) as exc_info:
            index.remove("1")

        assert exc_info.value.kind == FailureKind.READ_ONLY
        assert "1" in index.load()

    def test_empty_index_written_as_object(self, index, memory_fs, index_file) -> None:
        index.update("1", entry())
        index.remove("1")

        assert memory_fs.get(index_file) == "{}\n"


# ==============================================================================
# get_next_tasks()
# ==============================================================================


class TestGetNextTasks:
    """Test the readiness rule."""

    def test_dependency_chain(self, index) -> None:
        index.update("1", entry())
        index.update("2", entry("pending", "1"))

        assert index.get_next_tasks("completed") == ["1"]

        index.update("1", entry("completed"))
        assert index.get_next_tasks("completed") == ["2"]

    def test_idempotent(self, index) -> None:
        index.update("1", entry())
        index.update("2", entry())

        assert index.get_next_tasks("completed") == index.get_next_tasks("completed")

    def test_missing_dependency_blocks(self, index) -> None:
        index.update("1", entry("pending", "42"))
        assert index.get_next_tasks("completed") == []

    def test_removed_dependency_blocks(self, index) -> None:
        index.update("1", entry("completed"))
        index.update("2", entry("pending", "1"))
        index.remove("1")

        assert index.get_next_tasks("completed") == []

    def test_multiple_done_statuses(self, index) -> None:
        index.update("1", entry("cancelled"))
        index.update("2", entry("pending", "1"))

        assert index.get_next_tasks(["completed", "cancelled"]) == ["2"]
        assert index.get_next_tasks("completed") == []

    def test_sorted_numerically(self, index) -> None:
        for task_id in ["10", "2", "1.10", "1.2"]:
            index.update(task_id, entry())

        assert index.get_next_tasks("completed") == ["1.2", "1.10", "2", "10"]


# ==============================================================================
# Pure graph helpers
# ==============================================================================


class TestGraphHelpers:
    """Test find_cycle and ready_ids without I/O."""

    def test_find_cycle_none(self) -> None:
        assert find_cycle({"1": [], "2": ["1"], "3": ["2", "1"]}) is None

    def test_find_cycle_reports_from_start(self) -> None:
        cycle = find_cycle({"1": ["2"], "2": ["1"]}, start="2")
        assert cycle == ["2", "1", "2"]

    def test_long_chain_does_not_recurse(self) -> None:
        edges = {str(i): [str(i + 1)] for i in range(1, 5000)}
        edges["5000"] = ["1"]

        cycle = find_cycle(edges, start="1")

        assert cycle is not None
        assert len(cycle) == 5001

    def test_ready_ids_unsorted(self) -> None:
        data = {"2": entry(), "1": entry("completed"), "3": entry("pending", "1")}
        assert ready_ids(data, frozenset({"completed"})) == ["2", "3"]


def test_on_disk_index(tmp_path: Path) -> None:
    """The index works against the real file system."""
    index = DependencyIndex(tmp_path / "tasks")

    index.update("1", entry())

    assert (tmp_path / "tasks" / ".hod" / "index.json").exists()
    assert index.get_next_tasks("completed") == ["1"]
