from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response, status

from directory_admin.api.deps import require_perm
from directory_admin.api.errors import handle_directory_error
from directory_admin.api.presenters import named_ref, tree_read
from directory_admin.domain.errors import DirectoryError
from directory_admin.domain.models import (
    NextOrderRead,
    OrganizationLevel,
    OrganizationNodeCreate,
    OrganizationNodeRead,
    OrganizationNodeUpdate,
    OrganizationStatsRead,
    TreeRead,
)
from directory_admin.domain.permissions import PERM_DIRECTORY_READ, PERM_DIRECTORY_WRITE
from directory_admin.services.organization_service import (
    LEVELS,
    OrganizationService,
    parent_id_of,
)

router = APIRouter()


class LevelPath(StrEnum):
    DEPARTMENTS = "departments"
    INSTITUTES = "institutes"
    SUBDIVISIONS = "subdivisions"
    UNITS = "units"


LEVEL_BY_PATH: dict[LevelPath, OrganizationLevel] = {
    LevelPath.DEPARTMENTS: OrganizationLevel.DEPARTMENT,
    LevelPath.INSTITUTES: OrganizationLevel.INSTITUTE,
    LevelPath.SUBDIVISIONS: OrganizationLevel.SUBDIVISION,
    LevelPath.UNITS: OrganizationLevel.UNIT,
}


def get_organization_service() -> OrganizationService:
    return OrganizationService()


Service = Annotated[OrganizationService, Depends(get_organization_service)]


def _node_read(level: OrganizationLevel, node: Any, parent: Any | None) -> OrganizationNodeRead:
    return OrganizationNodeRead(
        id=node.id,
        name=node.name,
        level=level,
        order=node.order,
        parent_id=parent_id_of(level, node),
        parent=named_ref(parent),
        created_at=node.created_at,
        updated_at=node.updated_at,
    )


@router.get(
    "/tree",
    response_model=TreeRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_organization_tree(service: Service, search: str | None = None) -> TreeRead:
    try:
        roots, expanded = service.get_organization_tree(search)
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise
    return tree_read(roots, expanded)


@router.get(
    "/stats",
    response_model=OrganizationStatsRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_organization_stats(service: Service) -> OrganizationStatsRead:
    try:
        return OrganizationStatsRead(**service.level_counts())
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.get(
    "/{level}",
    response_model=list[OrganizationNodeRead],
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def list_nodes(
    level: LevelPath,
    service: Service,
    parent_id: str | None = Query(default=None),
) -> list[OrganizationNodeRead]:
    org_level = LEVEL_BY_PATH[level]
    try:
        nodes = service.list_nodes(org_level, parent_id)
        parent_level = LEVELS[org_level].parent_level
        parents = (
            {item.id: item for item in service.list_nodes(parent_level)}
            if parent_level is not None
            else {}
        )
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise
    return [
        _node_read(org_level, node, parents.get(parent_id_of(org_level, node) or ""))
        for node in nodes
    ]


@router.get(
    "/{level}/next-order",
    response_model=NextOrderRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_next_order(
    level: LevelPath,
    service: Service,
    parent_id: str | None = Query(default=None),
) -> NextOrderRead:
    try:
        value = service.next_order(LEVEL_BY_PATH[level], parent_id)
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise
    return NextOrderRead(parent_id=parent_id, next_order=value)


@router.post(
    "/{level}",
    response_model=OrganizationNodeRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def create_node(level: LevelPath, payload: OrganizationNodeCreate, service: Service) -> OrganizationNodeRead:
    org_level = LEVEL_BY_PATH[level]
    try:
        node = service.create_node(org_level, payload)
        return _node_read(org_level, node, service.get_parent(org_level, node))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.get(
    "/{level}/{node_id}",
    response_model=OrganizationNodeRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_node(level: LevelPath, node_id: str, service: Service) -> OrganizationNodeRead:
    org_level = LEVEL_BY_PATH[level]
    try:
        node = service.get_node(org_level, node_id)
        return _node_read(org_level, node, service.get_parent(org_level, node))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.patch(
    "/{level}/{node_id}",
    response_model=OrganizationNodeRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def update_node(
    level: LevelPath,
    node_id: str,
    payload: OrganizationNodeUpdate,
    service: Service,
) -> OrganizationNodeRead:
    org_level = LEVEL_BY_PATH[level]
    try:
        node = service.update_node(org_level, node_id, payload)
        return _node_read(org_level, node, service.get_parent(org_level, node))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.delete(
    "/{level}/{node_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def delete_node(level: LevelPath, node_id: str, service: Service) -> Response:
    try:
        service.delete_node(LEVEL_BY_PATH[level], node_id)
    except DirectoryError as exc:
        handle_directory_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
