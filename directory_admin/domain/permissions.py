from __future__ import annotations

from typing import Any

PERM_WILDCARD = "*"
PERM_DIRECTORY_READ = "directory.read"
PERM_DIRECTORY_WRITE = "directory.write"

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"

ROLE_PERMISSIONS: dict[str, list[str]] = {
    ROLE_ADMIN: [PERM_WILDCARD],
    ROLE_STAFF: [PERM_DIRECTORY_READ],
}


def permissions_for_role(role: str | None) -> list[str]:
    if role is None:
        return []
    return list(ROLE_PERMISSIONS.get(role, []))


def has_permission(claims: dict[str, Any], permission: str) -> bool:
    permissions = claims.get("permissions")
    if not isinstance(permissions, list):
        role = claims.get("role")
        permissions = permissions_for_role(role if isinstance(role, str) else None)
    return permission in permissions or PERM_WILDCARD in permissions
