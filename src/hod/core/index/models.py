"""
Dependency index data models.

The index file maps each task ID to an IndexEntry holding its status and
the IDs it depends on. Entries are validated strictly when loaded so a
hand-edited file with the wrong shape is reported as corruption instead of
being coerced.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

DEFAULT_STATUS = "pending"


class IndexEntry(BaseModel):
    """
    Status and dependency set of one task.

    ``status`` is an arbitrary string; the index never decides on its own
    what counts as done. ``dependencies`` is an insertion-ordered set: order
    carries no meaning but is preserved for deterministic serialization.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    status: str
    dependencies: list[str]

    def normalized(self) -> IndexEntry:
        """
        Return a copy with defaults applied and dependencies cleaned.

        Empty status becomes DEFAULT_STATUS; dependencies are trimmed and
        deduplicated keeping the first occurrence.
        """
        return IndexEntry(
            status=self.status or DEFAULT_STATUS,
            dependencies=normalize_dependencies(self.dependencies),
        )


def normalize_dependencies(dependencies: list[str]) -> list[str]:
    """
    Trim and deduplicate dependency IDs, preserving first-seen order.

    Example:
        >>> normalize_dependencies([" 2", "1", "2 "])
        ['2', '1']
    """
    return list(dict.fromkeys(dep.strip() for dep in dependencies))


# Persisted aggregate: task ID -> entry
IndexData = dict[str, IndexEntry]
