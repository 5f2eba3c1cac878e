"""
Pytest configuration and shared fixtures.

Provides an in-memory FileSystem with per-operation failure injection,
stores and a TaskService wired to it, and on-disk project fixtures for
CLI tests.
"""

import errno
import json
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Any

import pytest
import yaml

from hod.core.config.loader import CONFIG_ENV_VAR, TASKS_DIR_ENV_VAR, create_default_config
from hod.core.config.models import HodConfig
from hod.core.index.service import DependencyIndex
from hod.core.services.tasks import TaskService
from hod.core.storage.store import TaskStore

TASKS_DIR = Path("/project/tasks")


# ==============================================================================
# In-memory file system
# ==============================================================================


class MemoryFileSystem:
    """
    FileSystem implementation backed by dicts.

    Failures are injected per operation with fail(); a matching call raises
    an OSError carrying the requested errno, like the os module would.
    """

    def __init__(self) -> None:
        self.files: dict[PurePosixPath, str] = {}
        self.dirs: set[PurePosixPath] = {PurePosixPath("/")}
        self.calls: list[tuple[str, str]] = []
        self._failures: list[dict[str, Any]] = []

    # -- failure injection -------------------------------------------------

    def fail(
        self,
        operation: str,
        error_number: int = errno.EACCES,
        match: str | None = None,
        times: int | None = None,
    ) -> None:
        """
        Make an operation fail.

        Args:
            operation: read_text, write_text, rename, unlink, mkdir or listdir
            error_number: errno of the raised OSError
            match: Only fail when str(path) ends with this suffix
            times: Fail only this many times (None = always)
        """
        self._failures.append(
            {"operation": operation, "errno": error_number, "match": match, "times": times}
        )

    def clear_failures(self) -> None:
        self._failures.clear()

    def _check(self, operation: str, path: PurePosixPath) -> None:
        self.calls.append((operation, str(path)))
        for rule in self._failures:
            if rule["operation"] != operation:
                continue
            if rule["match"] is not None and not str(path).endswith(rule["match"]):
                continue
            if rule["times"] is not None:
                if rule["times"] <= 0:
                    continue
                rule["times"] -= 1
            number = rule["errno"]
            raise OSError(number, os.strerror(number), str(path))

    @staticmethod
    def _key(path: Path) -> PurePosixPath:
        return PurePosixPath(str(path))

    @staticmethod
    def _missing(path: PurePosixPath) -> OSError:
        return OSError(errno.ENOENT, os.strerror(errno.ENOENT), str(path))

    # -- FileSystem protocol -----------------------------------------------

    def read_text(self, path: Path) -> str:
        key = self._key(path)
        self._check("read_text", key)
        if key not in self.files:
            raise self._missing(key)
        return self.files[key]

    def write_text(self, path: Path, text: str) -> None:
        key = self._key(path)
        self._check("write_text", key)
        if key.parent not in self.dirs:
            raise self._missing(key)
        self.files[key] = text

    def rename(self, src: Path, dst: Path) -> None:
        src_key, dst_key = self._key(src), self._key(dst)
        self._check("rename", dst_key)
        if src_key not in self.files:
            raise self._missing(src_key)
        self.files[dst_key] = self.files.pop(src_key)

    def unlink(self, path: Path) -> None:
        key = self._key(path)
        self._check("unlink", key)
        if key not in self.files:
            raise self._missing(key)
        del self.files[key]

    def mkdir(self, path: Path) -> None:
        key = self._key(path)
        self._check("mkdir", key)
        self.dirs.add(key)
        self.dirs.update(key.parents)

    def listdir(self, path: Path) -> list[str]:
        key = self._key(path)
        self._check("listdir", key)
        if key not in self.dirs:
            raise self._missing(key)
        names = [p.name for p in self.files if p.parent == key]
        names += [d.name for d in self.dirs if d.parent == key and d != key]
        return sorted(names)

    def exists(self, path: Path) -> bool:
        key = self._key(path)
        return key in self.files or key in self.dirs

    # -- test helpers ------------------------------------------------------

    def put(self, path: Path, text: str) -> None:
        """Write a file directly, creating parent directories."""
        key = self._key(path)
        self.dirs.add(key.parent)
        self.dirs.update(key.parent.parents)
        self.files[key] = text

    def get(self, path: Path) -> str | None:
        return self.files.get(self._key(path))

    def read_json(self, path: Path) -> Any:
        return json.loads(self.files[self._key(path)])


# ==============================================================================
# Store and service fixtures
# ==============================================================================


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """Provide an empty in-memory file system."""
    return MemoryFileSystem()


@pytest.fixture
def tasks_dir() -> Path:
    return TASKS_DIR


@pytest.fixture
def index_file(tasks_dir: Path) -> Path:
    return tasks_dir / ".hod" / "index.json"


@pytest.fixture
def index(memory_fs: MemoryFileSystem, tasks_dir: Path) -> DependencyIndex:
    """Provide a DependencyIndex on the in-memory file system."""
    return DependencyIndex(tasks_dir, memory_fs)


@pytest.fixture
def store(memory_fs: MemoryFileSystem, tasks_dir: Path) -> TaskStore:
    """Provide a TaskStore on the in-memory file system."""
    return TaskStore(tasks_dir, memory_fs)


@pytest.fixture
def config_dict() -> dict[str, Any]:
    """Provide a config dict matching hod.config.yml format."""
    return {
        "tasksDir": str(TASKS_DIR),
        "fields": {
            "Title": {"name": "title", "required": True},
            "Description": {"name": "description"},
            "Status": {"name": "status", "default": "pending"},
            "Priority": {"name": "priority"},
            "Test-Strategy": {"name": "test-strategy"},
        },
        "doneStatus": ["completed", "cancelled"],
    }


@pytest.fixture
def config(config_dict: dict[str, Any]) -> HodConfig:
    return HodConfig.model_validate(config_dict)


@pytest.fixture
def service(config: HodConfig, store: TaskStore, index: DependencyIndex) -> TaskService:
    """Provide a TaskService on the in-memory file system."""
    return TaskService(config, store, index)


# ==============================================================================
# On-disk project fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the root handlers the CLI installs with logging.basicConfig."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep HOD_* variables from the developer's shell out of tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv(TASKS_DIR_ENV_VAR, raising=False)


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Provide an initialized project and chdir into it.

    Creates:
    - hod.config.yml (default fields plus a Priority field)
    - tasks/
    """
    project = tmp_path / "project"
    project.mkdir()
    create_default_config("./tasks", project)

    config_path = project / "hod.config.yml"
    data = yaml.safe_load(config_path.read_text())
    data["fields"]["Priority"] = {"name": "priority"}
    config_path.write_text(yaml.safe_dump(data, sort_keys=False))

    monkeypatch.chdir(project)
    return project
