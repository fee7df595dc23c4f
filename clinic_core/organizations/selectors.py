# clinic_core/organizations/selectors.py
from __future__ import annotations

from typing import Any, Iterable, Optional
from uuid import UUID

from django.db.models import QuerySet

from clinic_core.organizations.models import Organization


def organization_qs() -> QuerySet[Organization]:
    return Organization.objects.all()


def get_organization_or_none(*, organization_id: UUID | None) -> Optional[Organization]:
    if not organization_id:
        return None
    return Organization.objects.filter(id=organization_id).first()


def organizations_visible_to(actor) -> QuerySet[Organization]:
    """
    super_admin sees every organization; everybody else only their own.
    """
    from clinic_core.iam.roles import SystemRole

    if actor.system_role == SystemRole.SUPER_ADMIN:
        return Organization.objects.all().order_by("name")
    if actor.organization_id:
        return Organization.objects.filter(id=actor.organization_id)
    return Organization.objects.none()


def build_hierarchy(items: Iterable[Any], *, serialize) -> list[dict]:
    """
    Nest a flat organization list into parent -> children trees.

    Roots are organizations whose parent is absent from the list, so an admin
    who only sees a child organization still gets it back as a root.
    """
    items = list(items)
    ids = {str(o.id) for o in items}
    by_parent: dict[str | None, list] = {}
    for o in items:
        parent_id = str(o.parent_id) if o.parent_id else None
        if parent_id not in ids:
            parent_id = None
        by_parent.setdefault(parent_id, []).append(o)

    def _nest(parent_id: str | None) -> list[dict]:
        out = []
        for o in by_parent.get(parent_id, []):
            node = dict(serialize(o))
            node["children"] = _nest(str(o.id))
            out.append(node)
        return out

    return _nest(None)
