from __future__ import annotations

import asyncio
import os
from uuid import uuid4

import httpx
from demo_common import (
    admin_token,
    assert_status,
    auth_headers,
    create_designation,
    create_org_node,
    wait_ok,
)


async def _run() -> None:
    base_url = os.getenv("APP_BASE_URL", "http://app:8000").rstrip("/")
    timeout = httpx.Timeout(20.0)
    run_id = uuid4().hex[:6]
    async with httpx.AsyncClient(base_url=base_url, timeout=timeout) as client:
        await wait_ok(client, "/healthz")
        await wait_ok(client, "/readyz")
        token = admin_token("demo")

        director = await create_designation(client, token, f"Director {run_id}")
        officer = await create_designation(client, token, f"Field Officer {run_id}", director)

        department = await create_org_node(client, token, "departments", f"Agriculture {run_id}")
        crops = await create_org_node(
            client, token, "institutes", "Crops", department_id=department
        )
        await create_org_node(client, token, "institutes", "Livestock", department_id=department)
        seeds = await create_org_node(
            client,
            token,
            "subdivisions",
            "Seeds",
            department_id=department,
            institute_id=crops,
        )
        unit = await create_org_node(
            client,
            token,
            "units",
            "Seed Lab",
            department_id=department,
            institute_id=crops,
            subdivision_id=seeds,
        )

        contact_resp = await client.post(
            "/api/contacts",
            json={
                "type": "person",
                "full_name": f"Demo Officer {run_id}",
                "department_id": department,
                "institute_id": crops,
                "subdivision_id": seeds,
                "unit_id": unit,
                "person": {"designation_id": officer},
            },
            headers=auth_headers(token),
        )
        assert_status(contact_resp, 201)

        conflict_resp = await client.post(
            "/api/designations",
            json={"name": f"Chief {run_id}", "parent_id": director, "order": 1},
            headers=auth_headers(token),
        )
        assert_status(conflict_resp, 409)

        tree_resp = await client.get(
            "/api/organization/tree",
            params={"search": run_id},
            headers=auth_headers(token),
        )
        assert_status(tree_resp, 200)
        if tree_resp.json()["total_nodes"] < 1:
            raise RuntimeError("demo_directory organization tree search found nothing")

        counts_resp = await client.get("/api/designations/staff-counts", headers=auth_headers(token))
        assert_status(counts_resp, 200)
        if counts_resp.json().get(officer) != 1:
            raise RuntimeError("demo_directory staff count for officer is not 1")

    print("demo_directory: ok")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
