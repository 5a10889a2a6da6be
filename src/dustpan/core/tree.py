"""Directory tree aggregation over a flat candidate list.

The tree is derived data: it is rebuilt from the candidates whenever a new
scan lands and is never persisted.  Its shape depends only on candidate
paths, while every count is read from the live ``should_delete`` flags, so
a cached tree stays correct across selection changes.

Nodes are directories keyed by ``PurePath``; ancestry comes from
``PurePath.parents`` rather than splitting strings on a separator, so the
same code handles POSIX and Windows paths.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath

from dustpan.models.candidate import ScanCandidate

NodeRef = str | PurePath


class SelectionStatus(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    ALL = "all"


@dataclass(slots=True)
class TreeIndex:
    """Parent→children edges, directory→candidate indices and display roots."""

    children: dict[PurePath, list[PurePath]] = field(default_factory=dict)
    files: dict[PurePath, list[int]] = field(default_factory=dict)
    roots: list[PurePath] = field(default_factory=list)

    def __contains__(self, node: object) -> bool:
        if not isinstance(node, (str, PurePath)):
            return False
        key = PurePath(node)
        return key in self.files or key in self.children

    def child_dirs(self, node: NodeRef) -> list[PurePath]:
        return self.children.get(PurePath(node), [])

    def direct_files(self, node: NodeRef) -> list[int]:
        return self.files.get(PurePath(node), [])

    def subtree(self, node: NodeRef) -> Iterator[PurePath]:
        """Yield *node* and every directory below it."""
        stack = [PurePath(node)]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(self.children.get(current, ()))


def rebuild_tree(
    candidates: Sequence[ScanCandidate],
    roots: Iterable[str] | None = None,
) -> TreeIndex:
    """Build the tree index for *candidates*.

    Args:
        candidates: Flat scan result; indices into it are stored in the tree.
        roots: Directories that were scanned.  Each candidate is shown under
            the deepest of these containing it; anything outside them, or
            everything when omitted, is grouped under the longest common
            ancestor of the remaining directories.
    """
    files: dict[PurePath, list[int]] = {}
    for idx, candidate in enumerate(candidates):
        files.setdefault(PurePath(candidate.file_path).parent, []).append(idx)

    edges: dict[PurePath, set[PurePath]] = {}
    for directory in files:
        child = directory
        for ancestor in directory.parents:
            edges.setdefault(ancestor, set()).add(child)
            child = ancestor

    children = {node: sorted(kids, key=str) for node, kids in edges.items()}
    return TreeIndex(
        children=children,
        files=files,
        roots=_display_roots(list(files), roots),
    )


def _display_roots(directories: list[PurePath], roots: Iterable[str] | None) -> list[PurePath]:
    configured = [PurePath(r) for r in roots] if roots is not None else []
    found: set[PurePath] = set()
    orphans: dict[str, list[PurePath]] = {}

    for directory in directories:
        owner = _deepest_owner(directory, configured)
        if owner is not None:
            found.add(owner)
        else:
            orphans.setdefault(directory.anchor, []).append(directory)

    for group in orphans.values():
        found.add(_common_ancestor(group))

    # A root nested in another root would show its files twice.
    top_level = [r for r in found if not any(other in r.parents for other in found)]
    return sorted(top_level, key=str)


def _deepest_owner(directory: PurePath, configured: list[PurePath]) -> PurePath | None:
    best: PurePath | None = None
    for root in configured:
        if root == directory or root in directory.parents:
            if best is None or len(root.parts) > len(best.parts):
                best = root
    return best


def _common_ancestor(paths: list[PurePath]) -> PurePath:
    parts = paths[0].parts
    for path in paths[1:]:
        shared = 0
        for a, b in zip(parts, path.parts):
            if a != b:
                break
            shared += 1
        parts = parts[:shared]
    return PurePath(*parts)


def count_recursive(
    tree: TreeIndex,
    candidates: Sequence[ScanCandidate],
    node: NodeRef,
) -> tuple[int, int]:
    """Return ``(total, selected)`` for *node* and everything below it."""
    total = 0
    selected = 0
    for directory in tree.subtree(node):
        for idx in tree.files.get(directory, ()):
            total += 1
            if candidates[idx].should_delete:
                selected += 1
    return total, selected


def set_selection(
    tree: TreeIndex,
    candidates: Sequence[ScanCandidate],
    node: NodeRef,
    value: bool,
) -> int:
    """Set ``should_delete`` for every candidate at or below *node*.

    Unknown nodes are a no-op.  Returns the number of candidates touched.
    """
    touched = 0
    for directory in tree.subtree(node):
        for idx in tree.files.get(directory, ()):
            candidates[idx].should_delete = value
            touched += 1
    return touched


def selection_status(total: int, selected: int) -> SelectionStatus:
    if selected == 0:
        return SelectionStatus.NONE
    if selected == total:
        return SelectionStatus.ALL
    return SelectionStatus.PARTIAL


def walk(tree: TreeIndex, candidates: Sequence[ScanCandidate]) -> Iterator[tuple[PurePath, int]]:
    """Yield ``(node, depth)`` in display order, skipping empty directories."""
    for root in tree.roots:
        stack = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            total, _ = count_recursive(tree, candidates, node)
            if total == 0:
                continue
            yield node, depth
            stack.extend((child, depth + 1) for child in reversed(tree.children.get(node, [])))
