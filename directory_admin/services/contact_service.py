from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from directory_admin.domain.errors import InconsistentHierarchyError, NotFoundError, ValidationError
from directory_admin.domain.hierarchy import validate_name
from directory_admin.domain.models import (
    BuildingContactCreate,
    BuildingDetails,
    BuildingStatus,
    Contact,
    ContactType,
    ContactUpdate,
    Department,
    Designation,
    Institute,
    PersonContactCreate,
    PersonDetails,
    PersonStatus,
    Subdivision,
    Unit,
    now_utc,
)
from directory_admin.infra import redis_state
from directory_admin.services.store import RecordStore

logger = logging.getLogger(__name__)

CONTACT_FIELDS = (
    "full_name",
    "department_id",
    "institute_id",
    "subdivision_id",
    "unit_id",
    "office_no_1",
    "office_no_2",
    "whatsapp_no",
    "fax_no_1",
    "fax_no_2",
    "official_email",
    "office_address",
    "description",
    "profile_picture_url",
)

REFERENCE_MODELS: tuple[tuple[str, type[Any], str], ...] = (
    ("department_id", Department, "department"),
    ("institute_id", Institute, "institute"),
    ("subdivision_id", Subdivision, "subdivision"),
    ("unit_id", Unit, "unit"),
)


class ContactSortField(StrEnum):
    NAME = "name"
    DEPARTMENT = "department"
    UPDATED = "updated"


@dataclass
class ContactView:
    contact: Contact
    person: PersonDetails | None = None
    building: BuildingDetails | None = None
    department: Department | None = None
    institute: Institute | None = None
    subdivision: Subdivision | None = None
    unit: Unit | None = None
    designation: Designation | None = None

    @property
    def status(self) -> str | None:
        if self.person is not None:
            return self.person.status
        if self.building is not None:
            return self.building.status
        return None


@dataclass(frozen=True)
class ContactFilters:
    type: ContactType | None = None
    department_id: str | None = None
    institute_id: str | None = None
    designation_id: str | None = None
    status: str | None = None
    search: str | None = None
    sort: ContactSortField = ContactSortField.NAME
    descending: bool = False


def _contains(value: str | None, needle: str) -> bool:
    return value is not None and needle in value.casefold()


def matches_filters(view: ContactView, filters: ContactFilters) -> bool:
    contact = view.contact
    if filters.type is not None and contact.type != filters.type:
        return False
    if filters.department_id and contact.department_id != filters.department_id:
        return False
    if filters.institute_id and contact.institute_id != filters.institute_id:
        return False
    if filters.designation_id and (
        view.person is None or view.person.designation_id != filters.designation_id
    ):
        return False
    if filters.status and view.status != filters.status:
        return False

    needle = (filters.search or "").strip().casefold()
    if not needle:
        return True
    return (
        _contains(contact.full_name, needle)
        or _contains(contact.official_email, needle)
        or _contains(contact.office_no_1, needle)
        or _contains(view.department.name if view.department else None, needle)
        or _contains(view.institute.name if view.institute else None, needle)
    )


def sort_views(views: list[ContactView], field: ContactSortField, *, descending: bool) -> list[ContactView]:
    if field == ContactSortField.UPDATED:
        return sorted(views, key=lambda item: item.contact.updated_at, reverse=not descending)
    if field == ContactSortField.DEPARTMENT:
        return sorted(
            views,
            key=lambda item: (item.department.name if item.department else "").casefold(),
            reverse=descending,
        )
    return sorted(views, key=lambda item: item.contact.full_name.casefold(), reverse=descending)


class ContactService:
    def __init__(self, store: RecordStore | None = None) -> None:
        self._store = store or RecordStore()

    def _check_references(self, values: dict[str, Any], designation_id: str | None) -> None:
        for key, model, label in REFERENCE_MODELS:
            ref_id = values.get(key)
            if ref_id and self._store.get(model, ref_id) is None:
                raise InconsistentHierarchyError(f"selected {label} not found")
        if designation_id and self._store.get(Designation, designation_id) is None:
            raise InconsistentHierarchyError("selected designation not found")

    def _views(self, contacts: list[Contact]) -> list[ContactView]:
        if not contacts:
            return []
        contact_ids = [item.id for item in contacts]
        people = {
            row.contact_id: row
            for row in self._store.query(PersonDetails, {"contact_id": contact_ids})
        }
        buildings = {
            row.contact_id: row
            for row in self._store.query(BuildingDetails, {"contact_id": contact_ids})
        }
        lookups: dict[str, dict[str, Any]] = {}
        for key, model, _label in REFERENCE_MODELS:
            ids = {getattr(item, key) for item in contacts if getattr(item, key)}
            lookups[key] = {row.id: row for row in self._store.query(model, {"id": ids})} if ids else {}
        designation_ids = {row.designation_id for row in people.values() if row.designation_id}
        designations = (
            {row.id: row for row in self._store.query(Designation, {"id": designation_ids})}
            if designation_ids
            else {}
        )

        views: list[ContactView] = []
        for contact in contacts:
            person = people.get(contact.id)
            views.append(
                ContactView(
                    contact=contact,
                    person=person,
                    building=buildings.get(contact.id),
                    department=lookups["department_id"].get(contact.department_id or ""),
                    institute=lookups["institute_id"].get(contact.institute_id or ""),
                    subdivision=lookups["subdivision_id"].get(contact.subdivision_id or ""),
                    unit=lookups["unit_id"].get(contact.unit_id or ""),
                    designation=designations.get(person.designation_id or "") if person else None,
                )
            )
        return views

    def create_contact(self, payload: PersonContactCreate | BuildingContactCreate) -> ContactView:
        values = payload.model_dump(include=set(CONTACT_FIELDS))
        values["full_name"] = validate_name(payload.full_name)
        details: PersonDetails | BuildingDetails
        if isinstance(payload, PersonContactCreate):
            self._check_references(values, payload.person.designation_id)
            contact = Contact(type=ContactType.PERSON, **values)
            details = PersonDetails(contact_id=contact.id, **payload.person.model_dump())
        else:
            self._check_references(values, None)
            contact = Contact(type=ContactType.BUILDING, **values)
            details = BuildingDetails(contact_id=contact.id, status=payload.building.status)

        self._store.save_all([contact, details])
        if contact.type == ContactType.PERSON:
            redis_state.invalidate_staff_counts()
        logger.info("contact created id=%s type=%s", contact.id, contact.type)
        return self.get_contact(contact.id)

    def get_contact(self, contact_id: str) -> ContactView:
        contact = self._store.get(Contact, contact_id)
        if contact is None:
            raise NotFoundError("contact not found")
        return self._views([contact])[0]

    def list_contacts(self, filters: ContactFilters | None = None) -> list[ContactView]:
        active = filters or ContactFilters()
        views = self._views(self._store.query(Contact, order_by=("-created_at",)))
        selected = [view for view in views if matches_filters(view, active)]
        return sort_views(selected, active.sort, descending=active.descending)

    def update_contact(self, contact_id: str, payload: ContactUpdate) -> ContactView:
        view = self.get_contact(contact_id)
        contact = view.contact
        fields = payload.model_fields_set

        changes = {key: getattr(payload, key) for key in CONTACT_FIELDS if key in fields}
        if "full_name" in changes:
            changes["full_name"] = validate_name(changes["full_name"])
        if payload.person is not None and contact.type != ContactType.PERSON:
            raise ValidationError("person details given for a building contact")
        if payload.building is not None and contact.type != ContactType.BUILDING:
            raise ValidationError("building details given for a person contact")

        person_changes = (
            payload.person.model_dump(exclude_unset=True) if payload.person is not None else {}
        )
        self._check_references(changes, person_changes.get("designation_id"))

        for key, value in changes.items():
            setattr(contact, key, value)
        contact.updated_at = now_utc()
        records: list[Any] = [contact]

        if person_changes and view.person is not None:
            for key, value in person_changes.items():
                setattr(view.person, key, value)
            view.person.updated_at = now_utc()
            records.append(view.person)
        if payload.building is not None and view.building is not None:
            for key, value in payload.building.model_dump(exclude_unset=True).items():
                setattr(view.building, key, value)
            view.building.updated_at = now_utc()
            records.append(view.building)

        self._store.save_all(records)
        if "designation_id" in person_changes:
            redis_state.invalidate_staff_counts()
        logger.info("contact updated id=%s", contact.id)
        return self.get_contact(contact.id)

    def delete_contact(self, contact_id: str) -> None:
        view = self.get_contact(contact_id)
        doomed: list[tuple[type[Any], str]] = []
        if view.person is not None:
            doomed.append((PersonDetails, view.person.id))
        if view.building is not None:
            doomed.append((BuildingDetails, view.building.id))
        doomed.append((Contact, contact_id))
        self._store.delete_many(doomed)
        if view.person is not None:
            redis_state.invalidate_staff_counts()
        logger.info("contact deleted id=%s", contact_id)

    def contact_stats(self) -> dict[str, int]:
        views = self._views(self._store.query(Contact))
        statuses = [view.status for view in views]
        return {
            "total": len(views),
            "people": sum(1 for view in views if view.contact.type == ContactType.PERSON),
            "buildings": sum(1 for view in views if view.contact.type == ContactType.BUILDING),
            "departments": len(
                {view.contact.department_id for view in views if view.contact.department_id}
            ),
            "on_duty": statuses.count(PersonStatus.ON_DUTY),
            "off_duty": statuses.count(PersonStatus.OFF_DUTY),
            "retired": statuses.count(PersonStatus.RETIRED),
            "operational": statuses.count(BuildingStatus.OPERATIONAL),
            "non_operational": statuses.count(BuildingStatus.NON_OPERATIONAL),
        }
