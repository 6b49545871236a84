from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from directory_admin.domain.tree import (
    TreeSortKey,
    build_organization_tree,
    build_tree,
    collapse_all,
    count_nodes,
    expand_all,
    iter_nodes,
    search_tree,
    sort_tree,
)

BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)


@dataclass
class Row:
    id: str
    name: str
    order: int
    parent_id: str | None = None
    level: int = 0
    updated_at: datetime = BASE_TIME


@dataclass
class OrgRow:
    id: str
    name: str
    order: int
    department_id: str | None = None
    institute_id: str | None = None
    subdivision_id: str | None = None


def _designations() -> list[Row]:
    return [
        Row("dg", "Director General", 1),
        Row("dd", "Deputy Director", 2, "dg", 1),
        Row("ad", "Assistant Director", 1, "dg", 1),
        Row("clerk", "Clerk", 1, "ad", 2),
        Row("advisor", "Advisor", 2),
    ]


def _random_rows(rng: random.Random, size: int) -> list[Row]:
    rows: list[Row] = []
    for index in range(size):
        parent = rng.choice(rows) if rows and rng.random() < 0.7 else None
        rows.append(
            Row(
                id=f"r{index}",
                name=f"Role {rng.randint(0, 999)}",
                order=rng.randint(1, 6),
                parent_id=parent.id if parent else None,
            )
        )
    return rows


def test_build_tree_nests_and_orders_children() -> None:
    roots = build_tree(_designations(), staff_counts={"clerk": 4})
    assert [node.id for node in roots] == ["dg", "advisor"]
    director = roots[0]
    assert [child.id for child in director.children] == ["ad", "dd"]
    clerk = director.children[0].children[0]
    assert clerk.parent is not None
    assert clerk.parent.name == "Assistant Director"
    assert clerk.staff_count == 4
    assert clerk.kind == "designation"


def test_build_tree_keeps_every_record_once_randomized() -> None:
    rng = random.Random(3)
    for _ in range(30):
        rows = _random_rows(rng, rng.randint(0, 40))
        roots = build_tree(rows)
        ids = [node.id for node in iter_nodes(roots)]
        assert sorted(ids) == sorted(row.id for row in rows)
        for node in iter_nodes(roots):
            keys = [(child.order, child.name.casefold()) for child in node.children]
            assert keys == sorted(keys)


def test_orphan_records_become_roots() -> None:
    roots = build_tree([Row("a", "Lost", 1, "gone")])
    assert [node.id for node in roots] == ["a"]
    assert roots[0].parent is None


def test_search_keeps_ancestors_and_highlights_matches() -> None:
    roots = build_tree(_designations())
    result = search_tree(roots, "CLERK")
    assert [node.id for node in result] == ["dg"]
    assert result[0].highlighted is False
    assistant = result[0].children[0]
    assert assistant.id == "ad"
    assert assistant.highlighted is False
    assert [child.id for child in assistant.children] == ["clerk"]
    assert assistant.children[0].highlighted is True
    assert count_nodes(roots) == 5


def test_search_retains_exactly_matches_and_their_ancestors_randomized() -> None:
    rng = random.Random(11)
    for _ in range(30):
        rows = _random_rows(rng, rng.randint(1, 30))
        parent_of = {row.id: row.parent_id for row in rows}
        term = str(rng.randint(0, 9))
        expected: set[str] = set()
        for row in rows:
            if term in row.name:
                current: str | None = row.id
                while current is not None:
                    expected.add(current)
                    current = parent_of.get(current)
        result = search_tree(build_tree(rows), term)
        retained = {node.id: node for node in iter_nodes(result)}
        assert set(retained) == expected
        for node in retained.values():
            assert node.highlighted == (term in node.name)


def test_blank_search_returns_whole_tree() -> None:
    roots = build_tree(_designations())
    for term in (None, "", "   "):
        result = search_tree(roots, term)
        assert [node.id for node in iter_nodes(result)] == [node.id for node in iter_nodes(roots)]
        assert not any(node.highlighted for node in iter_nodes(result))
        assert result[0] is not roots[0]


def test_expand_and_collapse() -> None:
    roots = build_tree(_designations())
    expanded = expand_all(roots)
    assert expanded == {"dg", "dd", "ad", "clerk", "advisor"}
    assert collapse_all() == set()


def test_sort_tree_by_name_and_staff() -> None:
    roots = build_tree(_designations(), staff_counts={"dd": 5, "ad": 1, "advisor": 9})
    by_name = sort_tree(roots, TreeSortKey.NAME)
    assert [node.id for node in by_name] == ["advisor", "dg"]
    assert [child.id for child in by_name[1].children] == ["ad", "dd"]

    by_staff = sort_tree(roots, TreeSortKey.STAFF, descending=True)
    assert [node.id for node in by_staff] == ["advisor", "dg"]
    assert [child.id for child in by_staff[1].children] == ["dd", "ad"]


def test_sort_tree_by_updated() -> None:
    rows = [
        Row("old", "Old", 1, updated_at=BASE_TIME),
        Row("new", "New", 2, updated_at=BASE_TIME + timedelta(days=3)),
    ]
    roots = build_tree(rows)
    assert [node.id for node in sort_tree(roots, TreeSortKey.UPDATED)] == ["old", "new"]
    assert [
        node.id for node in sort_tree(roots, TreeSortKey.UPDATED, descending=True)
    ] == ["new", "old"]


def test_build_organization_tree_levels() -> None:
    roots = build_organization_tree(
        [OrgRow("agri", "Agriculture", 2), OrgRow("health", "Health", 1)],
        [OrgRow("crops", "Crops", 2, department_id="agri"), OrgRow("stock", "Livestock", 1, department_id="agri")],
        [OrgRow("seeds", "Seeds", 1, institute_id="crops")],
        [
            OrgRow("lab", "Lab", 1, subdivision_id="seeds"),
            OrgRow("stray", "Stray", 1, subdivision_id="missing"),
        ],
    )
    assert [node.id for node in roots] == ["health", "agri"]
    agri = roots[1]
    assert [child.id for child in agri.children] == ["stock", "crops"]
    crops = agri.children[1]
    unit = crops.children[0].children[0]
    assert (unit.id, unit.kind, unit.level) == ("lab", "unit", 3)
    assert crops.kind == "institute"
    assert count_nodes(roots) == 6
