from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlmodel import SQLModel

from directory_admin.domain.errors import (
    HasChildrenError,
    NotFoundError,
    ReferencedBySubjectError,
    ValidationError,
)
from directory_admin.domain.hierarchy import ParentMap, validate_name, validate_organization_chain
from directory_admin.domain.models import (
    Contact,
    Department,
    Institute,
    OrganizationLevel,
    OrganizationNode,
    OrganizationNodeCreate,
    OrganizationNodeUpdate,
    Subdivision,
    Unit,
)
from directory_admin.domain.ordering import next_order, resolve_order
from directory_admin.domain.tree import (
    TreeNode,
    build_organization_tree,
    collapse_all,
    expand_all,
    search_tree,
)
from directory_admin.services.store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelInfo:
    level: OrganizationLevel
    model: type[SQLModel]
    parent_key: str | None
    parent_level: OrganizationLevel | None
    child_level: OrganizationLevel | None
    contact_key: str


LEVELS: dict[OrganizationLevel, LevelInfo] = {
    OrganizationLevel.DEPARTMENT: LevelInfo(
        OrganizationLevel.DEPARTMENT,
        Department,
        None,
        None,
        OrganizationLevel.INSTITUTE,
        "department_id",
    ),
    OrganizationLevel.INSTITUTE: LevelInfo(
        OrganizationLevel.INSTITUTE,
        Institute,
        "department_id",
        OrganizationLevel.DEPARTMENT,
        OrganizationLevel.SUBDIVISION,
        "institute_id",
    ),
    OrganizationLevel.SUBDIVISION: LevelInfo(
        OrganizationLevel.SUBDIVISION,
        Subdivision,
        "institute_id",
        OrganizationLevel.INSTITUTE,
        OrganizationLevel.UNIT,
        "subdivision_id",
    ),
    OrganizationLevel.UNIT: LevelInfo(
        OrganizationLevel.UNIT,
        Unit,
        "subdivision_id",
        OrganizationLevel.SUBDIVISION,
        None,
        "unit_id",
    ),
}

CHAIN_KEYS = ("department_id", "institute_id", "subdivision_id")


def parent_id_of(level: OrganizationLevel, node: Any) -> str | None:
    parent_key = LEVELS[level].parent_key
    return getattr(node, parent_key) if parent_key else None


class OrganizationService:
    def __init__(self, store: RecordStore | None = None) -> None:
        self._store = store or RecordStore()

    def _info(self, level: OrganizationLevel) -> LevelInfo:
        return LEVELS[OrganizationLevel(level)]

    def _siblings(self, info: LevelInfo, parent_id: str | None) -> list[Any]:
        filters = {info.parent_key: parent_id} if info.parent_key else None
        return self._store.query(info.model, filters)

    def _parent_maps(self, level: OrganizationLevel) -> dict[OrganizationLevel, ParentMap]:
        maps: dict[OrganizationLevel, ParentMap] = {}
        for candidate in OrganizationLevel:
            if candidate == level:
                break
            info = self._info(candidate)
            maps[candidate] = {
                row.id: parent_id_of(candidate, row) for row in self._store.query(info.model)
            }
        return maps

    def list_nodes(
        self,
        level: OrganizationLevel,
        parent_id: str | None = None,
    ) -> list[OrganizationNode]:
        info = self._info(level)
        filters = None
        if parent_id is not None:
            if info.parent_key is None:
                raise ValidationError("departments have no parent")
            filters = {info.parent_key: parent_id}
        return self._store.query(info.model, filters, order_by=("order", "name"))

    def get_node(self, level: OrganizationLevel, node_id: str) -> OrganizationNode:
        node = self._store.get(self._info(level).model, node_id)
        if node is None:
            raise NotFoundError(f"{level} not found")
        return node

    def get_parent(self, level: OrganizationLevel, node: Any) -> OrganizationNode | None:
        info = self._info(level)
        parent_id = parent_id_of(level, node)
        if parent_id is None or info.parent_level is None:
            return None
        return self._store.get(self._info(info.parent_level).model, parent_id)

    def next_order(self, level: OrganizationLevel, parent_id: str | None = None) -> int:
        info = self._info(level)
        if info.parent_key is not None and parent_id is None:
            raise ValidationError(f"{info.parent_key} is required")
        return next_order(item.order for item in self._siblings(info, parent_id))

    def create_node(self, level: OrganizationLevel, payload: OrganizationNodeCreate) -> OrganizationNode:
        info = self._info(level)
        name = validate_name(payload.name)
        validate_organization_chain(
            info.level,
            department_id=payload.department_id,
            institute_id=payload.institute_id,
            subdivision_id=payload.subdivision_id,
            parents=self._parent_maps(info.level),
        )
        scope_id = getattr(payload, info.parent_key) if info.parent_key else None
        order, shifts = resolve_order(
            self._siblings(info, scope_id),
            payload.order,
            confirm=payload.confirm_order_shift,
        )

        values: dict[str, Any] = {"name": name, "order": order}
        if info.parent_key:
            values[info.parent_key] = scope_id
        node = info.model(**values)
        self._store.batch_update(
            info.model,
            [(sibling_id, {"order": value}) for sibling_id, value in shifts],
            insert=node,
        )
        logger.info(
            "%s created id=%s scope=%s order=%s shifted=%d",
            info.level,
            node.id,
            scope_id,
            order,
            len(shifts),
        )
        return node  # type: ignore[return-value]

    def update_node(
        self,
        level: OrganizationLevel,
        node_id: str,
        payload: OrganizationNodeUpdate,
    ) -> OrganizationNode:
        info = self._info(level)
        node = self.get_node(level, node_id)
        fields = payload.model_fields_set

        name = node.name
        if "name" in fields:
            name = validate_name(payload.name)

        scope_id = parent_id_of(info.level, node)
        if info.parent_key and any(key in fields for key in CHAIN_KEYS):
            selected = {key: getattr(payload, key) if key in fields else None for key in CHAIN_KEYS}
            if info.parent_key not in fields:
                selected[info.parent_key] = scope_id
            validate_organization_chain(
                info.level,
                department_id=selected["department_id"],
                institute_id=selected["institute_id"],
                subdivision_id=selected["subdivision_id"],
                parents=self._parent_maps(info.level),
            )
            scope_id = selected[info.parent_key]
        scope_changed = scope_id != parent_id_of(info.level, node)

        requested = payload.order if "order" in fields else None
        order, shifts = resolve_order(
            self._siblings(info, scope_id),
            requested,
            confirm=payload.confirm_order_shift,
            record_id=node.id,
            current_order=None if scope_changed else node.order,
        )

        patch: dict[str, Any] = {"name": name, "order": order}
        if info.parent_key:
            patch[info.parent_key] = scope_id
        updates = [(sibling_id, {"order": value}) for sibling_id, value in shifts]
        updates.append((node.id, patch))
        self._store.batch_update(info.model, updates)
        logger.info(
            "%s updated id=%s scope=%s order=%s shifted=%d",
            info.level,
            node.id,
            scope_id,
            order,
            len(shifts),
        )
        return self.get_node(level, node.id)

    def delete_node(self, level: OrganizationLevel, node_id: str) -> None:
        info = self._info(level)
        self.get_node(level, node_id)
        if info.child_level is not None:
            child = self._info(info.child_level)
            if self._store.count(child.model, {child.parent_key: node_id}) > 0:
                raise HasChildrenError(
                    f"cannot delete {info.level} that still has {child.level} records"
                )
        if self._store.count(Contact, {info.contact_key: node_id}) > 0:
            raise ReferencedBySubjectError(f"cannot delete {info.level} that is assigned to contacts")
        self._store.delete(info.model, node_id)
        logger.info("%s deleted id=%s", info.level, node_id)

    def level_counts(self) -> dict[str, int]:
        return {
            f"{level}s": self._store.count(LEVELS[level].model) for level in OrganizationLevel
        }

    def get_organization_tree(self, search: str | None = None) -> tuple[list[TreeNode], set[str]]:
        roots = build_organization_tree(
            *(self._store.query(LEVELS[level].model) for level in OrganizationLevel)
        )
        filtered = search_tree(roots, search)
        expanded = expand_all(filtered) if search and search.strip() else collapse_all()
        return filtered, expanded
