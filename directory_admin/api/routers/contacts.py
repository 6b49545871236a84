from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Body, Depends, Query, Response, status

from directory_admin.api.deps import require_perm
from directory_admin.api.errors import handle_directory_error
from directory_admin.api.presenters import contact_read
from directory_admin.domain.errors import DirectoryError
from directory_admin.domain.models import (
    BuildingContactCreate,
    ContactRead,
    ContactStatsRead,
    ContactType,
    ContactUpdate,
    PersonContactCreate,
)
from directory_admin.domain.permissions import PERM_DIRECTORY_READ, PERM_DIRECTORY_WRITE
from directory_admin.services.contact_service import ContactFilters, ContactService, ContactSortField

router = APIRouter()


def get_contact_service() -> ContactService:
    return ContactService()


Service = Annotated[ContactService, Depends(get_contact_service)]
ContactPayload = Annotated[
    PersonContactCreate | BuildingContactCreate,
    Body(discriminator="type"),
]


@router.get(
    "",
    response_model=list[ContactRead],
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def list_contacts(
    service: Service,
    contact_type: Annotated[ContactType | None, Query(alias="type")] = None,
    department_id: str | None = None,
    institute_id: str | None = None,
    designation_id: str | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    search: str | None = None,
    sort: ContactSortField = ContactSortField.NAME,
    direction: Literal["asc", "desc"] = "asc",
) -> list[ContactRead]:
    filters = ContactFilters(
        type=contact_type,
        department_id=department_id,
        institute_id=institute_id,
        designation_id=designation_id,
        status=status_filter,
        search=search,
        sort=sort,
        descending=direction == "desc",
    )
    try:
        views = service.list_contacts(filters)
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise
    return [contact_read(view) for view in views]


@router.get(
    "/stats",
    response_model=ContactStatsRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_contact_stats(service: Service) -> ContactStatsRead:
    try:
        return ContactStatsRead(**service.contact_stats())
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.post(
    "",
    response_model=ContactRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def create_contact(payload: ContactPayload, service: Service) -> ContactRead:
    try:
        return contact_read(service.create_contact(payload))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.get(
    "/{contact_id}",
    response_model=ContactRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_READ))],
)
def get_contact(contact_id: str, service: Service) -> ContactRead:
    try:
        return contact_read(service.get_contact(contact_id))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.patch(
    "/{contact_id}",
    response_model=ContactRead,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def update_contact(contact_id: str, payload: ContactUpdate, service: Service) -> ContactRead:
    try:
        return contact_read(service.update_contact(contact_id, payload))
    except DirectoryError as exc:
        handle_directory_error(exc)
        raise


@router.delete(
    "/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_perm(PERM_DIRECTORY_WRITE))],
)
def delete_contact(contact_id: str, service: Service) -> Response:
    try:
        service.delete_contact(contact_id)
    except DirectoryError as exc:
        handle_directory_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
