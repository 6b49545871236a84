"""Flat records to navigable trees, plus the read-side queries run over them.

Everything here is pure: nodes are rebuilt on every call and inputs are never
mutated, so callers can run these concurrently with writes.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from typing import Any

from directory_admin.domain.models import OrganizationLevel


class TreeSortKey(StrEnum):
    ORDER = "order"
    NAME = "name"
    STAFF = "staff"
    UPDATED = "updated"


@dataclass(frozen=True)
class ParentRef:
    id: str
    name: str


@dataclass
class TreeNode:
    id: str
    name: str
    order: int
    kind: str
    level: int = 0
    parent: ParentRef | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    staff_count: int = 0
    highlighted: bool = False
    children: list[TreeNode] = field(default_factory=list)


def _sibling_key(node: TreeNode) -> tuple[int, str]:
    return node.order, node.name.casefold()


def _make_node(record: Any, kind: str, level: int, staff_counts: Mapping[str, int]) -> TreeNode:
    return TreeNode(
        id=record.id,
        name=record.name,
        order=record.order,
        kind=kind,
        level=level,
        created_at=getattr(record, "created_at", None),
        updated_at=getattr(record, "updated_at", None),
        staff_count=staff_counts.get(record.id, 0),
    )


def build_tree(
    records: Sequence[Any],
    *,
    kind: str = "designation",
    parent_key: str = "parent_id",
    staff_counts: Mapping[str, int] | None = None,
) -> list[TreeNode]:
    """Group a flat, self-referencing record list into root nodes.

    Records pointing at a parent outside the set are kept as roots so that no
    record disappears from the view.
    """
    counts = staff_counts or {}
    nodes: dict[str, TreeNode] = {
        record.id: _make_node(record, kind, getattr(record, "level", 0), counts)
        for record in records
    }
    roots: list[TreeNode] = []
    for record in records:
        node = nodes[record.id]
        parent_id = getattr(record, parent_key)
        parent = nodes.get(parent_id) if parent_id else None
        if parent is None or parent is node:
            roots.append(node)
            continue
        node.parent = ParentRef(parent.id, parent.name)
        parent.children.append(node)

    for node in nodes.values():
        node.children.sort(key=_sibling_key)
    roots.sort(key=_sibling_key)
    return roots


def build_organization_tree(
    departments: Iterable[Any],
    institutes: Iterable[Any],
    subdivisions: Iterable[Any],
    units: Iterable[Any],
) -> list[TreeNode]:
    levels: list[tuple[OrganizationLevel, Iterable[Any], str | None]] = [
        (OrganizationLevel.DEPARTMENT, departments, None),
        (OrganizationLevel.INSTITUTE, institutes, "department_id"),
        (OrganizationLevel.SUBDIVISION, subdivisions, "institute_id"),
        (OrganizationLevel.UNIT, units, "subdivision_id"),
    ]
    roots: list[TreeNode] = []
    previous: dict[str, TreeNode] = {}
    for depth, (kind, records, parent_key) in enumerate(levels):
        current: dict[str, TreeNode] = {}
        for record in records:
            node = _make_node(record, kind.value, depth, {})
            if parent_key is None:
                roots.append(node)
            else:
                parent = previous.get(getattr(record, parent_key))
                if parent is None:
                    continue
                node.parent = ParentRef(parent.id, parent.name)
                parent.children.append(node)
            current[node.id] = node
        for node in previous.values():
            node.children.sort(key=_sibling_key)
        previous = current
    roots.sort(key=_sibling_key)
    return roots


def _matches(node: TreeNode, needle: str) -> bool:
    return needle in node.name.casefold()


def _filter(nodes: Sequence[TreeNode], needle: str) -> list[TreeNode]:
    kept: list[TreeNode] = []
    for node in nodes:
        children = _filter(node.children, needle)
        matched = _matches(node, needle)
        if matched or children:
            kept.append(replace(node, children=children, highlighted=matched))
    return kept


def copy_tree(nodes: Sequence[TreeNode]) -> list[TreeNode]:
    return [replace(node, highlighted=False, children=copy_tree(node.children)) for node in nodes]


def search_tree(roots: Sequence[TreeNode], term: str | None) -> list[TreeNode]:
    """Keep nodes whose name contains ``term`` and every ancestor of such nodes.

    Direct matches are highlighted; ancestors kept only for navigation are not.
    A blank term returns a copy of the whole tree.
    """
    needle = (term or "").strip().casefold()
    if not needle:
        return copy_tree(roots)
    return _filter(roots, needle)


def sort_tree(
    roots: Sequence[TreeNode],
    key: TreeSortKey = TreeSortKey.ORDER,
    *,
    descending: bool = False,
) -> list[TreeNode]:
    def sort_key(node: TreeNode) -> tuple[Any, ...]:
        if key == TreeSortKey.NAME:
            return node.name.casefold(), node.order
        if key == TreeSortKey.STAFF:
            return node.staff_count, node.order
        if key == TreeSortKey.UPDATED:
            stamp = node.updated_at.timestamp() if node.updated_at is not None else 0.0
            return stamp, node.order
        return node.order, node.name.casefold()

    ordered = sorted(roots, key=sort_key, reverse=descending)
    return [
        replace(node, children=sort_tree(node.children, key, descending=descending))
        for node in ordered
    ]


def iter_nodes(roots: Iterable[TreeNode]) -> Iterator[TreeNode]:
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def count_nodes(roots: Iterable[TreeNode]) -> int:
    return sum(1 for _ in iter_nodes(roots))


def expand_all(roots: Iterable[TreeNode]) -> set[str]:
    return {node.id for node in iter_nodes(roots)}


def collapse_all() -> set[str]:
    return set()
