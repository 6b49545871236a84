"""Response shaping shared by the directory routers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from directory_admin.domain.models import (
    BuildingDetailsRead,
    ContactRead,
    NamedRef,
    PersonDetailsRead,
    TreeNodeRead,
    TreeRead,
)
from directory_admin.domain.tree import TreeNode, count_nodes
from directory_admin.services.contact_service import ContactView


def named_ref(record: object | None) -> NamedRef | None:
    if record is None:
        return None
    return NamedRef.model_validate(record)


def tree_node_read(node: TreeNode) -> TreeNodeRead:
    return TreeNodeRead(
        id=node.id,
        name=node.name,
        kind=node.kind,
        order=node.order,
        level=node.level,
        parent=NamedRef(id=node.parent.id, name=node.parent.name) if node.parent else None,
        staff_count=node.staff_count,
        highlighted=node.highlighted,
        created_at=node.created_at,
        updated_at=node.updated_at,
        children=[tree_node_read(child) for child in node.children],
    )


def tree_read(roots: Sequence[TreeNode], expanded_ids: Iterable[str]) -> TreeRead:
    return TreeRead(
        roots=[tree_node_read(node) for node in roots],
        total_nodes=count_nodes(roots),
        expanded_ids=sorted(expanded_ids),
    )


def contact_read(view: ContactView) -> ContactRead:
    person = None
    if view.person is not None:
        person = PersonDetailsRead(
            title=view.person.title,
            designation=named_ref(view.designation),
            mobile_no_1=view.person.mobile_no_1,
            mobile_no_2=view.person.mobile_no_2,
            personal_email=view.person.personal_email,
            status=view.person.status,
        )
    building = None
    if view.building is not None:
        building = BuildingDetailsRead.model_validate(view.building)
    return ContactRead(
        **view.contact.model_dump(),
        department=named_ref(view.department),
        institute=named_ref(view.institute),
        subdivision=named_ref(view.subdivision),
        unit=named_ref(view.unit),
        person=person,
        building=building,
    )
