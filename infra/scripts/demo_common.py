from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from directory_admin.infra.auth import create_access_token


def assert_status(response: httpx.Response, expected: int | tuple[int, ...]) -> None:
    expected_codes = (expected,) if isinstance(expected, int) else expected
    if response.status_code not in expected_codes:
        raise RuntimeError(
            f"{response.request.method} {response.request.url} expected {expected_codes}, "
            f"got {response.status_code}: {response.text}"
        )


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def admin_token(prefix: str) -> str:
    return create_access_token(user_id=f"{prefix}-admin", role="admin")


async def wait_ok(client: httpx.AsyncClient, path: str, timeout_seconds: float = 60.0) -> None:
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        try:
            response = await client.get(path)
            if response.status_code == 200:
                return
        except httpx.HTTPError:
            pass
        await asyncio.sleep(1.0)
    raise RuntimeError(f"timeout waiting for {path}")


async def create_designation(
    client: httpx.AsyncClient,
    token: str,
    name: str,
    parent_id: str | None = None,
) -> str:
    response = await client.post(
        "/api/designations",
        json={"name": name, "parent_id": parent_id},
        headers=auth_headers(token),
    )
    assert_status(response, 201)
    return response.json()["id"]


async def create_org_node(
    client: httpx.AsyncClient,
    token: str,
    level: str,
    name: str,
    **parents: Any,
) -> str:
    response = await client.post(
        f"/api/organization/{level}",
        json={"name": name, **parents},
        headers=auth_headers(token),
    )
    assert_status(response, 201)
    return response.json()["id"]
