"""
Hierarchical view of tasks derived from their dotted IDs.

``1.2`` is a child of ``1``. A subtask whose parent is not present is an
orphan: it is placed at the root of the tree and reported so the caller
can warn about it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from hod.core.ids.sorting import sort_ids
from hod.core.ids.validator import get_parent_id, is_valid_task_id

from .models import TaskView


@dataclass
class TreeNode:
    """One task in the tree with its direct subtasks."""

    id: str
    title: str
    status: str
    children: list[TreeNode] = field(default_factory=list)


@dataclass
class TreeBuildResult:
    """Root nodes plus warnings about tasks left out of the tree."""

    roots: list[TreeNode]
    warnings: list[str] = field(default_factory=list)


def build_tree(views: Iterable[TaskView]) -> TreeBuildResult:
    """
    Arrange task views into a tree ordered by ID.

    Tasks with malformed IDs are skipped with a warning. Orphaned subtasks
    (and everything below them) are attached at the root.

    Args:
        views: Tasks to arrange; order does not matter

    Returns:
        TreeBuildResult with root nodes and warnings
    """
    warnings: list[str] = []
    nodes: dict[str, TreeNode] = {}

    for view in views:
        if not is_valid_task_id(view.id):
            warnings.append(f"Task with invalid ID '{view.id}' skipped in tree")
            continue
        nodes[view.id] = TreeNode(id=view.id, title=view.title, status=view.status)

    roots: list[TreeNode] = []
    for task_id in sort_ids(nodes):
        node = nodes[task_id]
        parent_id = get_parent_id(task_id)
        if parent_id is not None and parent_id in nodes:
            nodes[parent_id].children.append(node)
        else:
            roots.append(node)

    return TreeBuildResult(roots=roots, warnings=warnings)


def detect_orphans(roots: list[TreeNode]) -> list[str]:
    """
    Return IDs of subtasks whose parent is not in the tree.

    Example:
        >>> detect_orphans([TreeNode("3.1", "Lost", "pending")])
        ['3.1']
    """
    existing: set[str] = set()

    def collect(nodes: list[TreeNode]) -> None:
        for node in nodes:
            existing.add(node.id)
            collect(node.children)

    collect(roots)

    orphans: list[str] = []

    def check(nodes: list[TreeNode]) -> None:
        for node in nodes:
            parent_id = get_parent_id(node.id)
            if parent_id is not None and parent_id not in existing:
                orphans.append(node.id)
            check(node.children)

    check(roots)
    return orphans


def tree_to_json(roots: list[TreeNode]) -> list[dict[str, Any]]:
    """Convert nodes to plain dicts (id, title, status, children)."""
    return [
        {
            "id": node.id,
            "title": node.title,
            "status": node.status,
            "children": tree_to_json(node.children),
        }
        for node in roots
    ]
