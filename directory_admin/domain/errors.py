from __future__ import annotations


class DirectoryError(Exception):
    pass


class ValidationError(DirectoryError):
    pass


class NotFoundError(DirectoryError):
    pass


class CircularReferenceError(DirectoryError):
    pass


class InconsistentHierarchyError(DirectoryError):
    pass


class OrderConflictError(DirectoryError):
    """A sibling already holds the requested order; the caller must confirm the shift."""

    def __init__(self, conflicting_id: str, conflicting_name: str, order: int) -> None:
        super().__init__(f"order {order} is already used by '{conflicting_name}' at this level")
        self.conflicting_id = conflicting_id
        self.conflicting_name = conflicting_name
        self.order = order


class HasChildrenError(DirectoryError):
    pass


class ReferencedBySubjectError(DirectoryError):
    pass


class StoreError(DirectoryError):
    pass
