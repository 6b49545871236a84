from __future__ import annotations

from fastapi import FastAPI, HTTPException

from directory_admin.api.routers import contacts, designations, organization
from directory_admin.infra.db import check_db_ready
from directory_admin.infra.logging_config import configure_logging
from directory_admin.infra.redis_state import check_redis_ready

configure_logging()

app = FastAPI(
    title="directory-admin",
    description="Ordered designation and organization hierarchies for the staff directory.",
    version="0.1.0",
)

app.include_router(designations.router, prefix="/api/designations", tags=["designations"])
app.include_router(organization.router, prefix="/api/organization", tags=["organization"])
app.include_router(contacts.router, prefix="/api/contacts", tags=["contacts"])


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/readyz")
def readyz() -> dict[str, object]:
    db_ok = check_db_ready()
    redis_ok = check_redis_ready()
    checks = {
        "db": "ok" if db_ok else "fail",
        "redis": "disabled" if redis_ok is None else ("ok" if redis_ok else "fail"),
    }
    if not db_ok or redis_ok is False:
        raise HTTPException(
            status_code=503,
            detail={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
