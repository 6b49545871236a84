from __future__ import annotations

import logging

from directory_admin.domain.errors import (
    HasChildrenError,
    NotFoundError,
    ReferencedBySubjectError,
    StoreError,
)
from directory_admin.domain.hierarchy import (
    available_parents,
    descendant_ids,
    level_for_parent,
    validate_name,
    validate_parent_assignment,
)
from directory_admin.domain.models import (
    Designation,
    DesignationCreate,
    DesignationUpdate,
    PersonDetails,
)
from directory_admin.domain.ordering import next_order, resolve_order
from directory_admin.domain.tree import (
    TreeNode,
    TreeSortKey,
    build_tree,
    collapse_all,
    expand_all,
    search_tree,
    sort_tree,
)
from directory_admin.infra import redis_state
from directory_admin.services.store import RecordStore

logger = logging.getLogger(__name__)


class DesignationService:
    def __init__(self, store: RecordStore | None = None) -> None:
        self._store = store or RecordStore()

    def list_designations(self) -> list[Designation]:
        return self._store.query(Designation, order_by=("level", "order", "name"))

    def get_designation(self, designation_id: str) -> Designation:
        designation = self._store.get(Designation, designation_id)
        if designation is None:
            raise NotFoundError("designation not found")
        return designation

    def get_parent(self, designation: Designation) -> Designation | None:
        if designation.parent_id is None:
            return None
        return self._store.get(Designation, designation.parent_id)

    def next_order(self, parent_id: str | None) -> int:
        siblings = self._store.query(Designation, {"parent_id": parent_id})
        return next_order(item.order for item in siblings)

    def available_parents(self, designation_id: str) -> list[Designation]:
        designations = self.list_designations()
        if not any(item.id == designation_id for item in designations):
            raise NotFoundError("designation not found")
        parent_of = {item.id: item.parent_id for item in designations}
        allowed = set(available_parents(designation_id, parent_of))
        return [item for item in designations if item.id in allowed]

    def create_designation(self, payload: DesignationCreate) -> Designation:
        name = validate_name(payload.name)
        designations = self._store.query(Designation)
        by_id = {item.id: item for item in designations}
        validate_parent_assignment(
            None,
            payload.parent_id,
            {item.id: item.parent_id for item in designations},
        )
        parent = by_id.get(payload.parent_id) if payload.parent_id else None
        siblings = [item for item in designations if item.parent_id == payload.parent_id]
        order, shifts = resolve_order(
            siblings,
            payload.order,
            confirm=payload.confirm_order_shift,
        )

        designation = Designation(
            name=name,
            parent_id=payload.parent_id,
            level=level_for_parent(parent.level if parent is not None else None),
            order=order,
        )
        self._store.batch_update(
            Designation,
            [(sibling_id, {"order": value}) for sibling_id, value in shifts],
            insert=designation,
        )
        logger.info(
            "designation created id=%s parent=%s order=%s shifted=%d",
            designation.id,
            designation.parent_id,
            designation.order,
            len(shifts),
        )
        return designation

    def update_designation(self, designation_id: str, payload: DesignationUpdate) -> Designation:
        designations = self._store.query(Designation)
        by_id = {item.id: item for item in designations}
        designation = by_id.get(designation_id)
        if designation is None:
            raise NotFoundError("designation not found")
        parent_of = {item.id: item.parent_id for item in designations}

        fields = payload.model_fields_set
        name = designation.name
        if "name" in fields:
            name = validate_name(payload.name)
        parent_id = payload.parent_id if "parent_id" in fields else designation.parent_id
        parent_changed = parent_id != designation.parent_id
        if parent_changed:
            validate_parent_assignment(designation.id, parent_id, parent_of)

        siblings = [
            item for item in designations if item.parent_id == parent_id and item.id != designation.id
        ]
        requested = payload.order if "order" in fields else None
        order, shifts = resolve_order(
            siblings,
            requested,
            confirm=payload.confirm_order_shift,
            record_id=designation.id,
            current_order=None if parent_changed else designation.order,
        )

        parent = by_id.get(parent_id) if parent_id else None
        level = level_for_parent(parent.level if parent is not None else None)
        updates = [(sibling_id, {"order": value}) for sibling_id, value in shifts]
        depth_delta = level - designation.level
        if depth_delta:
            for child_id in descendant_ids(designation.id, parent_of):
                updates.append((child_id, {"level": by_id[child_id].level + depth_delta}))
        updates.append(
            (
                designation.id,
                {"name": name, "parent_id": parent_id, "order": order, "level": level},
            )
        )
        self._store.batch_update(Designation, updates)
        logger.info(
            "designation updated id=%s parent=%s order=%s shifted=%d",
            designation.id,
            parent_id,
            order,
            len(shifts),
        )
        return self.get_designation(designation.id)

    def delete_designation(self, designation_id: str) -> None:
        self.get_designation(designation_id)
        if self._store.count(Designation, {"parent_id": designation_id}) > 0:
            raise HasChildrenError("cannot delete designation with child designations")
        if self._store.count(PersonDetails, {"designation_id": designation_id}) > 0:
            raise ReferencedBySubjectError(
                "cannot delete designation that is assigned to staff members"
            )
        self._store.delete(Designation, designation_id)
        logger.info("designation deleted id=%s", designation_id)

    def staff_counts(self) -> dict[str, int]:
        """Number of people holding each designation. Degrades to empty on failure."""
        cached = redis_state.load_staff_counts()
        if cached is not None:
            return cached
        try:
            counts = self._store.count_by(PersonDetails, "designation_id")
        except StoreError:
            logger.warning("staff counts unavailable, showing zero counts")
            return {}
        redis_state.store_staff_counts(counts)
        return counts

    def get_designation_tree(
        self,
        search: str | None = None,
        sort: TreeSortKey = TreeSortKey.ORDER,
        *,
        descending: bool = False,
    ) -> tuple[list[TreeNode], set[str]]:
        roots = build_tree(self.list_designations(), staff_counts=self.staff_counts())
        if sort != TreeSortKey.ORDER or descending:
            roots = sort_tree(roots, sort, descending=descending)
        filtered = search_tree(roots, search)
        expanded = expand_all(filtered) if search and search.strip() else collapse_all()
        return filtered, expanded
