from __future__ import annotations

import random

import pytest

from directory_admin.domain.errors import (
    CircularReferenceError,
    InconsistentHierarchyError,
    ValidationError,
)
from directory_admin.domain.hierarchy import (
    available_parents,
    descendant_ids,
    level_for_parent,
    validate_name,
    validate_organization_chain,
    validate_parent_assignment,
)
from directory_admin.domain.models import OrganizationLevel


def _random_forest(rng: random.Random, size: int) -> dict[str, str | None]:
    parent_of: dict[str, str | None] = {}
    for index in range(size):
        node_id = f"n{index}"
        existing = list(parent_of)
        parent_of[node_id] = rng.choice(existing) if existing and rng.random() < 0.8 else None
    return parent_of


def test_validate_name_strips_and_rejects_blank() -> None:
    assert validate_name("  Director ") == "Director"
    with pytest.raises(ValidationError):
        validate_name("   ")
    with pytest.raises(ValidationError):
        validate_name(None)


def test_self_parent_is_circular() -> None:
    with pytest.raises(CircularReferenceError):
        validate_parent_assignment("a", "a", {"a": None})


def test_descendant_parent_is_circular() -> None:
    parent_of = {"a": None, "b": "a", "c": "b"}
    with pytest.raises(CircularReferenceError):
        validate_parent_assignment("a", "c", parent_of)


def test_unknown_parent_is_inconsistent() -> None:
    with pytest.raises(InconsistentHierarchyError):
        validate_parent_assignment("a", "missing", {"a": None})


def test_existing_cycle_is_reported() -> None:
    parent_of = {"x": "y", "y": "x", "a": None}
    with pytest.raises(CircularReferenceError):
        validate_parent_assignment("a", "x", parent_of)


def test_new_record_accepts_any_known_parent() -> None:
    validate_parent_assignment(None, "b", {"a": None, "b": "a"})
    validate_parent_assignment(None, None, {})


def test_parent_assignment_matches_descendant_set_randomized() -> None:
    rng = random.Random(42)
    for _ in range(50):
        parent_of = _random_forest(rng, rng.randint(1, 25))
        node_id = rng.choice(list(parent_of))
        forbidden = descendant_ids(node_id, parent_of) | {node_id}
        for candidate in parent_of:
            if candidate in forbidden:
                with pytest.raises(CircularReferenceError):
                    validate_parent_assignment(node_id, candidate, parent_of)
            else:
                validate_parent_assignment(node_id, candidate, parent_of)


def test_available_parents_excludes_self_and_descendants() -> None:
    parent_of = {"root": None, "a": "root", "b": "a", "c": "root"}
    assert sorted(available_parents("a", parent_of)) == ["c", "root"]
    assert sorted(available_parents(None, parent_of)) == ["a", "b", "c", "root"]


def test_level_for_parent() -> None:
    assert level_for_parent(None) == 0
    assert level_for_parent(0) == 1
    assert level_for_parent(3) == 4


PARENTS = {
    OrganizationLevel.DEPARTMENT: {"agri": None, "health": None},
    OrganizationLevel.INSTITUTE: {"crops": "agri", "clinic": "health"},
    OrganizationLevel.SUBDIVISION: {"seeds": "crops", "wards": "clinic"},
}


def test_department_chain_needs_nothing() -> None:
    validate_organization_chain(
        OrganizationLevel.DEPARTMENT,
        department_id=None,
        institute_id=None,
        subdivision_id=None,
        parents=PARENTS,
    )


def test_institute_requires_existing_department() -> None:
    with pytest.raises(ValidationError):
        validate_organization_chain(
            OrganizationLevel.INSTITUTE,
            department_id=None,
            institute_id=None,
            subdivision_id=None,
            parents=PARENTS,
        )
    with pytest.raises(InconsistentHierarchyError):
        validate_organization_chain(
            OrganizationLevel.INSTITUTE,
            department_id="missing",
            institute_id=None,
            subdivision_id=None,
            parents=PARENTS,
        )


def test_subdivision_institute_must_belong_to_department() -> None:
    validate_organization_chain(
        OrganizationLevel.SUBDIVISION,
        department_id="agri",
        institute_id="crops",
        subdivision_id=None,
        parents=PARENTS,
    )
    with pytest.raises(InconsistentHierarchyError, match="institute does not belong"):
        validate_organization_chain(
            OrganizationLevel.SUBDIVISION,
            department_id="health",
            institute_id="crops",
            subdivision_id=None,
            parents=PARENTS,
        )


def test_unit_chain_mismatches() -> None:
    validate_organization_chain(
        OrganizationLevel.UNIT,
        department_id="agri",
        institute_id="crops",
        subdivision_id="seeds",
        parents=PARENTS,
    )
    with pytest.raises(InconsistentHierarchyError, match="subdivision does not belong"):
        validate_organization_chain(
            OrganizationLevel.UNIT,
            department_id="agri",
            institute_id="crops",
            subdivision_id="wards",
            parents=PARENTS,
        )
    with pytest.raises(InconsistentHierarchyError, match="institute does not belong"):
        validate_organization_chain(
            OrganizationLevel.UNIT,
            department_id="agri",
            institute_id=None,
            subdivision_id="wards",
            parents=PARENTS,
        )
    with pytest.raises(ValidationError):
        validate_organization_chain(
            OrganizationLevel.UNIT,
            department_id="agri",
            institute_id="crops",
            subdivision_id=None,
            parents=PARENTS,
        )
