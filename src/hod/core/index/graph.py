"""
Graph algorithms over index data.

Pure functions with no I/O: cycle detection used on every index update and
the readiness rule used by next-task queries.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence

from .models import IndexEntry


def find_cycle(
    edges: Mapping[str, Sequence[str]],
    start: str | None = None,
) -> list[str] | None:
    """
    Find a dependency cycle using three-color DFS.

    Only nodes present as keys in *edges* are traversed; a dependency on an
    absent ID is a dangling reference, not an edge. The search is iterative
    (explicit stack) so long chains do not hit the recursion limit.

    Args:
        edges: Mapping of node -> nodes it depends on
        start: Node to explore first, so a cycle through it is reported
            starting from it

    Returns:
        Cycle path whose first and last elements are the same node, e.g.
        ``["1", "2", "3", "1"]``, or None if the graph is acyclic
    """
    visiting: set[str] = set()
    visited: set[str] = set()

    roots = list(edges)
    if start is not None and start in edges:
        roots.remove(start)
        roots.insert(0, start)

    for root in roots:
        if root in visited:
            continue

        path: list[str] = [root]
        visiting.add(root)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(edges[root]))]

        while stack:
            node, deps = stack[-1]
            for dep in deps:
                if dep not in edges or dep in visited:
                    continue
                if dep in visiting:
                    # back edge: cycle is the path suffix from dep's position
                    cycle_start = path.index(dep)
                    return path[cycle_start:] + [dep]
                visiting.add(dep)
                path.append(dep)
                stack.append((dep, iter(edges[dep])))
                break
            else:
                stack.pop()
                path.pop()
                visiting.discard(node)
                visited.add(node)

    return None


def ready_ids(data: Mapping[str, IndexEntry], done_statuses: frozenset[str]) -> list[str]:
    """
    Return IDs whose own status is not done and whose dependencies are all done.

    A task with no dependencies is ready. A dependency that is not a key in
    *data* is never satisfied, so it blocks the task.

    Args:
        data: Loaded index data
        done_statuses: Statuses counted as complete

    Returns:
        Unsorted list of ready IDs in index order
    """
    ready: list[str] = []
    for task_id, entry in data.items():
        if entry.status in done_statuses:
            continue
        if all(
            dep in data and data[dep].status in done_statuses for dep in entry.dependencies
        ):
            ready.append(task_id)
    return ready
