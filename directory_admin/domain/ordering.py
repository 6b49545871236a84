"""Order numbers among siblings that share a parent scope."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from directory_admin.domain.errors import OrderConflictError, ValidationError


class Ordered(Protocol):
    id: str
    name: str
    order: int


def next_order(orders: Iterable[int]) -> int:
    """Smallest positive order not yet used in the scope."""
    used = {value for value in orders if value > 0}
    candidate = 1
    while candidate in used:
        candidate += 1
    return candidate


def find_conflict(
    siblings: Iterable[Ordered],
    order: int,
    exclude_id: str | None = None,
) -> Ordered | None:
    for sibling in siblings:
        if sibling.id == exclude_id:
            continue
        if sibling.order == order:
            return sibling
    return None


def plan_move(
    siblings: Sequence[Ordered],
    record_id: str,
    old_order: int,
    new_order: int,
) -> list[tuple[str, int]]:
    """Sibling renumbering for moving one record from ``old_order`` to ``new_order``.

    Returns ``(sibling_id, order)`` pairs for the siblings that change. The moved
    record is not part of the result.
    """
    shifts: list[tuple[str, int]] = []
    if new_order == old_order:
        return shifts
    for sibling in siblings:
        if sibling.id == record_id:
            continue
        if new_order > old_order and old_order < sibling.order <= new_order:
            shifts.append((sibling.id, sibling.order - 1))
        elif new_order < old_order and new_order <= sibling.order < old_order:
            shifts.append((sibling.id, sibling.order + 1))
    return shifts


def plan_insert(
    siblings: Sequence[Ordered],
    new_order: int,
    exclude_id: str | None = None,
) -> list[tuple[str, int]]:
    """Sibling renumbering for a record entering the scope at ``new_order``."""
    return [
        (sibling.id, sibling.order + 1)
        for sibling in siblings
        if sibling.id != exclude_id and sibling.order >= new_order
    ]


def validate_order(order: int) -> None:
    if order <= 0:
        raise ValidationError("order must be a positive number")


def resolve_order(
    siblings: Sequence[Ordered],
    requested_order: int | None,
    *,
    confirm: bool,
    record_id: str | None = None,
    current_order: int | None = None,
) -> tuple[int, list[tuple[str, int]]]:
    """Pick the order a record will be saved with and the sibling shifts it needs.

    ``current_order`` is set only when the record stays in the same scope; a new
    record, or one arriving from another scope, enters the scope instead.
    Raises OrderConflictError when the order is taken and ``confirm`` is False.
    """
    others = [sibling for sibling in siblings if sibling.id != record_id]
    if requested_order is None:
        if current_order is not None:
            return current_order, []
        return next_order(sibling.order for sibling in others), []

    validate_order(requested_order)
    if requested_order == current_order:
        return requested_order, []
    conflict = find_conflict(others, requested_order)
    if conflict is None:
        return requested_order, []
    if not confirm:
        raise OrderConflictError(conflict.id, conflict.name, requested_order)
    if current_order is not None:
        return requested_order, plan_move(others, record_id or "", current_order, requested_order)
    return requested_order, plan_insert(others, requested_order)
