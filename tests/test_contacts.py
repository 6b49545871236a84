from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine, select

from directory_admin import main as app_main
from directory_admin.domain.models import PersonDetails
from directory_admin.infra import db
from directory_admin.infra.auth import create_access_token


@pytest.fixture()
def contact_client(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> Generator[TestClient, None, None]:
    db_path = tmp_path / "contact_test.db"
    test_engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: object, _connection_record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    SQLModel.metadata.create_all(test_engine)
    monkeypatch.setattr(db, "engine", test_engine)

    client = TestClient(app_main.app)
    yield client
    client.close()
    app_main.app.dependency_overrides.clear()


def _auth_header() -> dict[str, str]:
    token = create_access_token(user_id="contact-admin", role="admin")
    return {"Authorization": f"Bearer {token}"}


def _post(client: TestClient, path: str, payload: dict[str, object]) -> dict[str, object]:
    response = client.post(path, json=payload, headers=_auth_header())
    assert response.status_code == 201, response.text
    return response.json()


def _seed_org(client: TestClient) -> dict[str, str]:
    agri = _post(client, "/api/organization/departments", {"name": "Agriculture"})
    health = _post(client, "/api/organization/departments", {"name": "Health"})
    crops = _post(
        client,
        "/api/organization/institutes",
        {"name": "Crops", "department_id": agri["id"]},
    )
    officer = _post(client, "/api/designations", {"name": "Officer"})
    return {
        "agri": str(agri["id"]),
        "health": str(health["id"]),
        "crops": str(crops["id"]),
        "officer": str(officer["id"]),
    }


def test_create_person_and_building_contacts(contact_client: TestClient) -> None:
    ids = _seed_org(contact_client)
    person = _post(
        contact_client,
        "/api/contacts",
        {
            "type": "person",
            "full_name": "  Amal Perera ",
            "department_id": ids["agri"],
            "institute_id": ids["crops"],
            "official_email": "amal@agri.example",
            "person": {"title": "Dr", "designation_id": ids["officer"], "status": "on_duty"},
        },
    )
    assert person["type"] == "person"
    assert person["full_name"] == "Amal Perera"
    assert person["department"] == {"id": ids["agri"], "name": "Agriculture"}
    assert person["institute"]["name"] == "Crops"
    assert person["person"]["designation"] == {"id": ids["officer"], "name": "Officer"}
    assert person["person"]["title"] == "Dr"
    assert person["building"] is None

    building = _post(
        contact_client,
        "/api/contacts",
        {"type": "building", "full_name": "Head Office", "building": {"status": "non_operational"}},
    )
    assert building["building"] == {"status": "non_operational"}
    assert building["person"] is None

    fetched = contact_client.get(f"/api/contacts/{person['id']}", headers=_auth_header())
    assert fetched.status_code == 200
    assert fetched.json()["official_email"] == "amal@agri.example"


def test_create_rejects_unknown_type_and_references(contact_client: TestClient) -> None:
    bad_type = contact_client.post(
        "/api/contacts",
        json={"type": "vehicle", "full_name": "Truck"},
        headers=_auth_header(),
    )
    assert bad_type.status_code == 422

    bad_ref = contact_client.post(
        "/api/contacts",
        json={"type": "person", "full_name": "Ghost", "department_id": "missing"},
        headers=_auth_header(),
    )
    assert bad_ref.status_code == 422

    bad_designation = contact_client.post(
        "/api/contacts",
        json={"type": "person", "full_name": "Ghost", "person": {"designation_id": "missing"}},
        headers=_auth_header(),
    )
    assert bad_designation.status_code == 422


def test_update_contact_and_details(contact_client: TestClient) -> None:
    ids = _seed_org(contact_client)
    person = _post(contact_client, "/api/contacts", {"type": "person", "full_name": "Nimal"})

    response = contact_client.patch(
        f"/api/contacts/{person['id']}",
        json={
            "department_id": ids["health"],
            "person": {"status": "retired", "designation_id": ids["officer"]},
        },
        headers=_auth_header(),
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["department"]["name"] == "Health"
    assert body["person"]["status"] == "retired"
    assert body["person"]["designation"]["name"] == "Officer"
    assert body["full_name"] == "Nimal"

    wrong_block = contact_client.patch(
        f"/api/contacts/{person['id']}",
        json={"building": {"status": "operational"}},
        headers=_auth_header(),
    )
    assert wrong_block.status_code == 422

    missing = contact_client.patch(
        "/api/contacts/missing",
        json={"full_name": "Nobody"},
        headers=_auth_header(),
    )
    assert missing.status_code == 404


def test_delete_contact_removes_details(contact_client: TestClient) -> None:
    ids = _seed_org(contact_client)
    person = _post(
        contact_client,
        "/api/contacts",
        {"type": "person", "full_name": "Kamal", "person": {"designation_id": ids["officer"]}},
    )

    response = contact_client.delete(f"/api/contacts/{person['id']}", headers=_auth_header())
    assert response.status_code == 204
    assert contact_client.get(f"/api/contacts/{person['id']}", headers=_auth_header()).status_code == 404
    with Session(db.engine) as session:
        remaining = session.exec(select(PersonDetails)).all()
    assert remaining == []

    freed = contact_client.delete(f"/api/designations/{ids['officer']}", headers=_auth_header())
    assert freed.status_code == 204


def test_list_filters_sort_and_stats(contact_client: TestClient) -> None:
    ids = _seed_org(contact_client)
    _post(
        contact_client,
        "/api/contacts",
        {
            "type": "person",
            "full_name": "Zara",
            "department_id": ids["agri"],
            "person": {"designation_id": ids["officer"], "status": "off_duty"},
        },
    )
    _post(
        contact_client,
        "/api/contacts",
        {"type": "person", "full_name": "Anil", "department_id": ids["health"]},
    )
    _post(
        contact_client,
        "/api/contacts",
        {"type": "building", "full_name": "Main Store", "department_id": ids["agri"]},
    )

    everyone = contact_client.get("/api/contacts", headers=_auth_header()).json()
    assert [item["full_name"] for item in everyone] == ["Anil", "Main Store", "Zara"]

    people = contact_client.get("/api/contacts?type=person&direction=desc", headers=_auth_header())
    assert [item["full_name"] for item in people.json()] == ["Zara", "Anil"]

    agri = contact_client.get(
        f"/api/contacts?department_id={ids['agri']}",
        headers=_auth_header(),
    ).json()
    assert {item["full_name"] for item in agri} == {"Zara", "Main Store"}

    by_designation = contact_client.get(
        f"/api/contacts?designation_id={ids['officer']}",
        headers=_auth_header(),
    ).json()
    assert [item["full_name"] for item in by_designation] == ["Zara"]

    by_status = contact_client.get("/api/contacts?status=on_duty", headers=_auth_header()).json()
    assert [item["full_name"] for item in by_status] == ["Anil"]

    searched = contact_client.get("/api/contacts?search=health", headers=_auth_header()).json()
    assert [item["full_name"] for item in searched] == ["Anil"]

    by_department = contact_client.get(
        "/api/contacts?sort=department",
        headers=_auth_header(),
    ).json()
    assert by_department[-1]["full_name"] == "Anil"

    stats = contact_client.get("/api/contacts/stats", headers=_auth_header())
    assert stats.status_code == 200
    assert stats.json() == {
        "total": 3,
        "people": 2,
        "buildings": 1,
        "departments": 2,
        "on_duty": 1,
        "off_duty": 1,
        "retired": 0,
        "operational": 1,
        "non_operational": 0,
    }


def test_updated_sort_lists_recent_edits_first(contact_client: TestClient) -> None:
    first = _post(contact_client, "/api/contacts", {"type": "person", "full_name": "Ann"})
    _post(contact_client, "/api/contacts", {"type": "person", "full_name": "Ben"})
    edited = contact_client.patch(
        f"/api/contacts/{first['id']}",
        json={"full_name": "Ann Silva"},
        headers=_auth_header(),
    )
    assert edited.status_code == 200

    recent = contact_client.get("/api/contacts?sort=updated", headers=_auth_header()).json()
    assert [item["full_name"] for item in recent] == ["Ann Silva", "Ben"]
    oldest = contact_client.get(
        "/api/contacts?sort=updated&direction=desc",
        headers=_auth_header(),
    ).json()
    assert [item["full_name"] for item in oldest] == ["Ben", "Ann Silva"]
