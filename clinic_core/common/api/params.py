# clinic_core/common/api/params.py
from __future__ import annotations

from uuid import UUID

from rest_framework.exceptions import NotFound, ValidationError


def parse_uuid(value, field_name: str) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError({field_name: "Invalid UUID"})


def parse_optional_uuid(value, field_name: str) -> UUID | None:
    if value in (None, ""):
        return None
    return parse_uuid(value, field_name)


def parse_pk(pk, not_found_message: str) -> UUID:
    """
    Path ids that are not UUIDs cannot exist, so they are a 404, not a 400.
    """
    try:
        return UUID(str(pk))
    except (TypeError, ValueError):
        raise NotFound(not_found_message)
