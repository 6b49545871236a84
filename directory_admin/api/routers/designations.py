from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response, status

from directory_admin.api.deps import require_perm
from directory_admin.api.errors import handle_directory_error
from directory_admin.api.presenters import named_ref, tree_read
from directory_admin.domain.errors import DirectoryError
from directory_admin.domain.models import (
    Designation,
    DesignationCreate,
    DesignationRead,
    DesignationUpdate,
    NextOrderRead,
    TreeRead,
)
from directory_admin.domain.permissions import PERM_DIRECTORY_READ, PERM_DIRECTORY_WRITE
from directory_admin.domain.tree import TreeSortKey
from directory_admin.services.designation_service import DesignationService

router = APIRouter()


def get_designation_service() -> DesignationService:
    return DesignationService()


Service = Annotated[DesignationService, Depends(get_designation_service)]


def _designation_read(designation: Designation, parent: Designation | None) -> DesignationRead:
    read = DesignationRead.model_validate(designation)
    read.parent = named_ref(parent)
    return read


@router.get(
    "",
    response_model=list[DesignationRead],
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def list_designations(service: Service) -> list[DesignationRead]:
    try:
        designations = service.list_designations()
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise
    by_id = {item.id: item for item in designations}
    return [
        _designation_read(item, by_id.get(item.parent_id) if item.parent_id else None)
        for item in designations
    ]


@router.get(
    "/tree",
    response_model=TreeRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_designation_tree(
    service: Service,
    search: str | None = None,
    sort: TreeSortKey = TreeSortKey.ORDER,
    direction: Literal["asc", "desc"] = "asc",
) -> TreeRead:
    try:
        roots, expanded = service.get_designation_tree(
            search,
            sort,
            descending=direction == "desc",
        )
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise
    return tree_read(roots, expanded)


@router.get(
    "/next-order",
    response_model=NextOrderRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_next_order(service: Service, parent_id: str | None = Query(default=None)) -> NextOrderRead:
    try:
        value = service.next_order(parent_id)
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise
    return NextOrderRead(parent_id=parent_id, next_order=value)


@router.get(
    "/staff-counts",
    response_model=dict[str, int],
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_staff_counts(service: Service) -> dict[str, int]:
    return service.staff_counts()


@router.post(
    "",
    response_model=DesignationRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def create_designation(payload: DesignationCreate, service: Service) -> DesignationRead:
    try:
        designation = service.create_designation(payload)
        return _designation_read(designation, service.get_parent(designation))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.get(
    "/{designation_id}",
    response_model=DesignationRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_designation(designation_id: str, service: Service) -> DesignationRead:
    try:
        designation = service.get_designation(designation_id)
        return _designation_read(designation, service.get_parent(designation))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.get(
    "/{designation_id}/available-parents",
    response_model=list[DesignationRead],
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def list_available_parents(designation_id: str, service: Service) -> list[DesignationRead]:
    try:
        candidates = service.available_parents(designation_id)
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise
    return [DesignationRead.model_validate(item) for item in candidates]


@router.patch(
    "/{designation_id}",
    response_model=DesignationRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def update_designation(
    designation_id: str,
    payload: DesignationUpdate,
    service: Service,
) -> DesignationRead:
    try:
        designation = service.update_designation(designation_id, payload)
        return _designation_read(designation, service.get_parent(designation))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.delete(
    "/{designation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def delete_designation(designation_id: str, service: Service) -> Response:
    try:
        service.delete_designation(designation_id)
    except DirectoryError as exc:
        handle_directory_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
