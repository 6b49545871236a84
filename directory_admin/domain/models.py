from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlalchemy import ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    return datetime.now(UTC)


class OrganizationLevel(StrEnum):
    DEPARTMENT = "department"
    INSTITUTE = "institute"
    SUBDIVISION = "subdivision"
    UNIT = "unit"


class ContactType(StrEnum):
    PERSON = "person"
    BUILDING = "building"


class PersonTitle(StrEnum):
    MR = "Mr"
    MRS = "Mrs"
    MISS = "Miss"
    MS = "Ms"
    DR = "Dr"
    PROF = "Prof"
    ENG = "Eng"


class PersonStatus(StrEnum):
    ON_DUTY = "on_duty"
    OFF_DUTY = "off_duty"
    RETIRED = "retired"


class BuildingStatus(StrEnum):
    OPERATIONAL = "operational"
    NON_OPERATIONAL = "non_operational"


class Designation(SQLModel, table=True):
    __tablename__ = "designations"
    __table_args__ = (
        ForeignKeyConstraint(["parent_id"], ["designations.id"], ondelete="RESTRICT"),
        Index("ix_designations_parent_order", "parent_id", "order"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(index=True)
    parent_id: str | None = Field(default=None, index=True)
    level: int = Field(default=0, index=True)
    order: int = Field(default=1)
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class Department(SQLModel, table=True):
    __tablename__ = "departments"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(index=True)
    order: int = Field(default=1, index=True)
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class Institute(SQLModel, table=True):
    __tablename__ = "institutes"
    __table_args__ = (
        ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="RESTRICT"),
        Index("ix_institutes_department_order", "department_id", "order"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(index=True)
    department_id: str = Field(index=True)
    order: int = Field(default=1)
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class Subdivision(SQLModel, table=True):
    __tablename__ = "subdivisions"
    __table_args__ = (
        ForeignKeyConstraint(["institute_id"], ["institutes.id"], ondelete="RESTRICT"),
        Index("ix_subdivisions_institute_order", "institute_id", "order"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(index=True)
    institute_id: str = Field(index=True)
    order: int = Field(default=1)
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class Unit(SQLModel, table=True):
    __tablename__ = "units"
    __table_args__ = (
        ForeignKeyConstraint(["subdivision_id"], ["subdivisions.id"], ondelete="RESTRICT"),
        Index("ix_units_subdivision_order", "subdivision_id", "order"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(index=True)
    subdivision_id: str = Field(index=True)
    order: int = Field(default=1)
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


OrganizationNode = Department | Institute | Subdivision | Unit


class Contact(SQLModel, table=True):
    __tablename__ = "contacts"
    __table_args__ = (
        ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="RESTRICT"),
        ForeignKeyConstraint(["institute_id"], ["institutes.id"], ondelete="RESTRICT"),
        ForeignKeyConstraint(["subdivision_id"], ["subdivisions.id"], ondelete="RESTRICT"),
        ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="RESTRICT"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    type: ContactType = Field(index=True)
    full_name: str = Field(index=True)
    department_id: str | None = Field(default=None, index=True)
    institute_id: str | None = Field(default=None, index=True)
    subdivision_id: str | None = Field(default=None, index=True)
    unit_id: str | None = Field(default=None, index=True)
    office_no_1: str | None = None
    office_no_2: str | None = None
    whatsapp_no: str | None = None
    fax_no_1: str | None = None
    fax_no_2: str | None = None
    official_email: str | None = None
    office_address: str | None = None
    description: str | None = None
    profile_picture_url: str | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class PersonDetails(SQLModel, table=True):
    __tablename__ = "person_details"
    __table_args__ = (
        ForeignKeyConstraint(["contact_id"], ["contacts.id"], ondelete="CASCADE"),
        ForeignKeyConstraint(["designation_id"], ["designations.id"], ondelete="RESTRICT"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    contact_id: str = Field(index=True, unique=True)
    title: PersonTitle = Field(default=PersonTitle.MR)
    designation_id: str | None = Field(default=None, index=True)
    mobile_no_1: str | None = None
    mobile_no_2: str | None = None
    personal_email: str | None = None
    status: PersonStatus = Field(default=PersonStatus.ON_DUTY, index=True)
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class BuildingDetails(SQLModel, table=True):
    __tablename__ = "building_details"
    __table_args__ = (
        ForeignKeyConstraint(["contact_id"], ["contacts.id"], ondelete="CASCADE"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    contact_id: str = Field(index=True, unique=True)
    status: BuildingStatus = Field(default=BuildingStatus.OPERATIONAL, index=True)
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class ORMReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class NamedRef(ORMReadModel):
    id: str
    name: str


class DesignationCreate(BaseModel):
    name: str
    parent_id: str | None = None
    order: int | None = None
    confirm_order_shift: bool = False


class DesignationUpdate(BaseModel):
    name: str | None = None
    parent_id: str | None = None
    order: int | None = None
    confirm_order_shift: bool = False


class DesignationRead(ORMReadModel):
    id: str
    name: str
    parent_id: str | None
    level: int
    order: int
    created_at: datetime
    updated_at: datetime
    parent: NamedRef | None = None


class OrganizationNodeCreate(BaseModel):
    name: str
    department_id: str | None = None
    institute_id: str | None = None
    subdivision_id: str | None = None
    order: int | None = None
    confirm_order_shift: bool = False


class OrganizationNodeUpdate(BaseModel):
    name: str | None = None
    department_id: str | None = None
    institute_id: str | None = None
    subdivision_id: str | None = None
    order: int | None = None
    confirm_order_shift: bool = False


class OrganizationNodeRead(BaseModel):
    id: str
    name: str
    level: OrganizationLevel
    order: int
    parent_id: str | None
    parent: NamedRef | None = None
    created_at: datetime
    updated_at: datetime


class NextOrderRead(BaseModel):
    parent_id: str | None
    next_order: int


class TreeNodeRead(BaseModel):
    id: str
    name: str
    kind: str
    order: int
    level: int
    parent: NamedRef | None = None
    staff_count: int = 0
    highlighted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    children: list[TreeNodeRead] = PydanticField(default_factory=list)


class TreeRead(BaseModel):
    roots: list[TreeNodeRead]
    total_nodes: int
    expanded_ids: list[str]


class OrganizationStatsRead(BaseModel):
    departments: int
    institutes: int
    subdivisions: int
    units: int


class ContactFields(BaseModel):
    full_name: str
    department_id: str | None = None
    institute_id: str | None = None
    subdivision_id: str | None = None
    unit_id: str | None = None
    office_no_1: str | None = None
    office_no_2: str | None = None
    whatsapp_no: str | None = None
    fax_no_1: str | None = None
    fax_no_2: str | None = None
    official_email: str | None = None
    office_address: str | None = None
    description: str | None = None
    profile_picture_url: str | None = None


class PersonDetailsInput(BaseModel):
    title: PersonTitle = PersonTitle.MR
    designation_id: str | None = None
    mobile_no_1: str | None = None
    mobile_no_2: str | None = None
    personal_email: str | None = None
    status: PersonStatus = PersonStatus.ON_DUTY


class BuildingDetailsInput(BaseModel):
    status: BuildingStatus = BuildingStatus.OPERATIONAL


class PersonContactCreate(ContactFields):
    type: Literal["person"] = "person"
    person: PersonDetailsInput = PydanticField(default_factory=PersonDetailsInput)


class BuildingContactCreate(ContactFields):
    type: Literal["building"] = "building"
    building: BuildingDetailsInput = PydanticField(default_factory=BuildingDetailsInput)



class PersonDetailsUpdate(BaseModel):
    title: PersonTitle | None = None
    designation_id: str | None = None
    mobile_no_1: str | None = None
    mobile_no_2: str | None = None
    personal_email: str | None = None
    status: PersonStatus | None = None


class BuildingDetailsUpdate(BaseModel):
    status: BuildingStatus | None = None


class ContactUpdate(BaseModel):
    full_name: str | None = None
    department_id: str | None = None
    institute_id: str | None = None
    subdivision_id: str | None = None
    unit_id: str | None = None
    office_no_1: str | None = None
    office_no_2: str | None = None
    whatsapp_no: str | None = None
    fax_no_1: str | None = None
    fax_no_2: str | None = None
    official_email: str | None = None
    office_address: str | None = None
    description: str | None = None
    profile_picture_url: str | None = None
    person: PersonDetailsUpdate | None = None
    building: BuildingDetailsUpdate | None = None


class PersonDetailsRead(ORMReadModel):
    title: PersonTitle
    designation: NamedRef | None = None
    mobile_no_1: str | None
    mobile_no_2: str | None
    personal_email: str | None
    status: PersonStatus


class BuildingDetailsRead(ORMReadModel):
    status: BuildingStatus


class ContactRead(ContactFields):
    id: str
    type: ContactType
    department: NamedRef | None = None
    institute: NamedRef | None = None
    subdivision: NamedRef | None = None
    unit: NamedRef | None = None
    person: PersonDetailsRead | None = None
    building: BuildingDetailsRead | None = None
    created_at: datetime
    updated_at: datetime


class ContactStatsRead(BaseModel):
    total: int
    people: int
    buildings: int
    departments: int
    on_duty: int
    off_duty: int
    retired: int
    operational: int
    non_operational: int
