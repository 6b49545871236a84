from __future__ import annotations

from fastapi import HTTPException, status

from directory_admin.domain.errors import (
    CircularReferenceError,
    DirectoryError,
    HasChildrenError,
    InconsistentHierarchyError,
    NotFoundError,
    OrderConflictError,
    ReferencedBySubjectError,
    StoreError,
    ValidationError,
)


def handle_directory_error(exc: DirectoryError) -> None:
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, OrderConflictError):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(exc),
                "conflicting_id": exc.conflicting_id,
                "conflicting_name": exc.conflicting_name,
                "order": exc.order,
            },
        ) from exc
    if isinstance(exc, (HasChildrenError, ReferencedBySubjectError)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, (ValidationError, CircularReferenceError, InconsistentHierarchyError)):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    if isinstance(exc, StoreError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    raise exc
