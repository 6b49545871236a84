from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping

from directory_admin.domain.errors import (
    CircularReferenceError,
    InconsistentHierarchyError,
    ValidationError,
)
from directory_admin.domain.models import OrganizationLevel

ParentMap = Mapping[str, str | None]


def validate_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("name is required")
    return cleaned


def validate_parent_assignment(
    node_id: str | None,
    candidate_parent_id: str | None,
    parent_of: ParentMap,
) -> None:
    """Reject a parent that would make ``node_id`` its own ancestor.

    ``parent_of`` maps every known id to its parent id. ``node_id`` is None for a
    record that does not exist yet.
    """
    if candidate_parent_id is None:
        return
    if node_id is not None and candidate_parent_id == node_id:
        raise CircularReferenceError("a node cannot be its own parent")

    visited: set[str] = set()
    current: str | None = candidate_parent_id
    while current is not None:
        if current not in parent_of:
            raise InconsistentHierarchyError(f"parent {current} not found")
        if current in visited:
            raise CircularReferenceError("existing hierarchy contains a cycle")
        if node_id is not None and current == node_id:
            raise CircularReferenceError("cannot set a descendant as parent")
        visited.add(current)
        current = parent_of[current]


def children_index(parent_of: ParentMap) -> dict[str | None, list[str]]:
    index: dict[str | None, list[str]] = defaultdict(list)
    for node_id, parent_id in parent_of.items():
        index[parent_id].append(node_id)
    return index


def descendant_ids(node_id: str, parent_of: ParentMap) -> set[str]:
    index = children_index(parent_of)
    found: set[str] = set()
    stack = list(index.get(node_id, []))
    while stack:
        current = stack.pop()
        if current in found or current == node_id:
            continue
        found.add(current)
        stack.extend(index.get(current, []))
    return found


def available_parents(node_id: str | None, parent_of: ParentMap) -> list[str]:
    if node_id is None:
        return list(parent_of)
    excluded = descendant_ids(node_id, parent_of) | {node_id}
    return [item for item in parent_of if item not in excluded]


def level_for_parent(parent_level: int | None) -> int:
    return 0 if parent_level is None else parent_level + 1


def validate_organization_chain(
    level: OrganizationLevel,
    *,
    department_id: str | None,
    institute_id: str | None,
    subdivision_id: str | None,
    parents: Mapping[OrganizationLevel, ParentMap],
) -> None:
    """Check that the higher-level selections of one edit agree with each other.

    ``parents[level]`` maps the ids of every existing node of that level to the id
    of its parent (None for departments).
    """
    if level == OrganizationLevel.DEPARTMENT:
        return

    departments = parents.get(OrganizationLevel.DEPARTMENT, {})
    institutes = parents.get(OrganizationLevel.INSTITUTE, {})
    subdivisions = parents.get(OrganizationLevel.SUBDIVISION, {})

    if level == OrganizationLevel.INSTITUTE:
        if not department_id:
            raise ValidationError("department is required")
        if department_id not in departments:
            raise InconsistentHierarchyError("selected department not found")
        return

    if level == OrganizationLevel.SUBDIVISION:
        if not institute_id:
            raise ValidationError("institute is required")
        if institute_id not in institutes:
            raise InconsistentHierarchyError("selected institute not found")
        if department_id and institutes[institute_id] != department_id:
            raise InconsistentHierarchyError(
                "selected institute does not belong to the selected department"
            )
        return

    if not subdivision_id:
        raise ValidationError("subdivision is required")
    if subdivision_id not in subdivisions:
        raise InconsistentHierarchyError("selected subdivision not found")
    owning_institute = subdivisions[subdivision_id]
    if institute_id and owning_institute != institute_id:
        raise InconsistentHierarchyError(
            "selected subdivision does not belong to the selected institute"
        )
    if department_id and institutes.get(owning_institute or "") != department_id:
        raise InconsistentHierarchyError(
            "selected institute does not belong to the selected department"
        )
