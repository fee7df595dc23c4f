# clinic_core/organizations/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.audit.services import AuditService
from clinic_core.organizations.models import Organization

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganizationUpdate:
    name: Optional[str] = None
    slug: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    cnpj: Optional[str] = None
    logo: Optional[str] = None
    address: Optional[dict] = None
    parent_id: Optional[UUID] = None
    clear_parent: bool = False


def _get_for_update(organization_id: UUID) -> Organization:
    org = Organization.objects.select_for_update().filter(id=organization_id).first()
    if org is None:
        raise NotFound("Organization not found")
    return org


class OrganizationService:
    """
    All Organization mutations live here (write-model boundary).
    Callers are responsible for the permission checks.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor_user_id: int | None,
        name: str,
        email: str = "",
        phone: str = "",
        cnpj: str = "",
        address: Optional[dict] = None,
        slug: Optional[str] = None,
        logo: str = "",
        parent_id: Optional[UUID] = None,
    ) -> Organization:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "This field is required."})

        parent = None
        if parent_id:
            parent = Organization.objects.filter(id=parent_id).first()
            if parent is None:
                raise ValidationError({"parent_id": "Parent organization not found."})

        try:
            with transaction.atomic():
                org = Organization.objects.create(
                    name=name,
                    slug=(slug or None),
                    email=email or "",
                    phone=phone or "",
                    cnpj=cnpj or "",
                    logo=logo or "",
                    address=address or {},
                    parent=parent,
                )
        except IntegrityError:
            raise ValidationError({"slug": "An organization with this slug already exists."})

        AuditService.log(
            event_code="organization.created",
            entity_type="Organization",
            entity_id=org.id,
            organization_id=org.id,
            actor_user_id=actor_user_id,
            metadata={"parent_id": str(parent.id) if parent else None},
        )
        logger.info("Organization %s created by user %s", org.id, actor_user_id)
        return org

    @staticmethod
    @transaction.atomic
    def update(*, actor_user_id: int | None, organization_id: UUID, patch: OrganizationUpdate) -> Organization:
        org = _get_for_update(organization_id)

        if patch.clear_parent:
            org.parent = None
        elif patch.parent_id is not None:
            if patch.parent_id == org.id:
                raise ValidationError({"parent_id": "Organization cannot be its own parent."})
            parent = Organization.objects.filter(id=patch.parent_id).first()
            if parent is None:
                raise ValidationError({"parent_id": "Parent organization not found."})
            # walk up from the new parent; reaching org means a cycle
            node = parent
            while node is not None:
                if node.id == org.id:
                    raise ValidationError({"parent_id": "Organization hierarchy cannot contain cycles."})
                node = node.parent
            org.parent = parent

        mapping = {
            "name": patch.name,
            "slug": patch.slug,
            "email": patch.email,
            "phone": patch.phone,
            "cnpj": patch.cnpj,
            "logo": patch.logo,
            "address": patch.address,
        }
        changed = []
        for field, value in mapping.items():
            if value is not None:
                setattr(org, field, value)
                changed.append(field)

        try:
            with transaction.atomic():
                org.save()
        except IntegrityError:
            raise ValidationError({"slug": "An organization with this slug already exists."})

        AuditService.log(
            event_code="organization.updated",
            entity_type="Organization",
            entity_id=org.id,
            organization_id=org.id,
            actor_user_id=actor_user_id,
            metadata={"updated_fields": sorted(changed)},
        )
        return org

    @staticmethod
    @transaction.atomic
    def delete(*, actor_user_id: int | None, organization_id: UUID) -> None:
        org = _get_for_update(organization_id)

        # Accounts reference organizations with PROTECT; surface that as a 400.
        if org.accounts.exists():
            raise ValidationError({"detail": "Organization still has user accounts. Remove or move them first."})

        AuditService.log(
            event_code="organization.deleted",
            entity_type="Organization",
            entity_id=org.id,
            organization_id=org.id,
            actor_user_id=actor_user_id,
            metadata={"name": org.name},
        )
        org.delete()
        logger.info("Organization %s deleted by user %s", organization_id, actor_user_id)
