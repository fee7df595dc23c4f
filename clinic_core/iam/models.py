# clinic_core/iam/models.py
import uuid

from django.conf import settings
from django.db import models

from clinic_core.iam.roles import SystemRole
from clinic_core.organizations.models import Organization
from clinic_core.units.models import Unit


class Profile(models.Model):
    """
    Admin-curated permission bundle for `user` accounts of one organization.

    permissions: ordered JSON list of {"resource", "actions": [...], "scope"?}.
    Order matters: the evaluator stops at the first satisfying entry.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=128)
    description = models.TextField(blank=True, default="")

    # profiles only ever describe the `user` tier
    system_role = models.CharField(max_length=32, choices=SystemRole.choices, default=SystemRole.USER)

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="profiles")
    unit = models.ForeignKey(Unit, on_delete=models.SET_NULL, related_name="profiles", null=True, blank=True)

    permissions = models.JSONField(default=list)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_profile"
        indexes = [
            models.Index(fields=["organization", "name"]),
        ]

    def __str__(self) -> str:
        return self.name


class Account(models.Model):
    """
    Clinic identity anchored to Django's AUTH_USER_MODEL.
    Carries everything the permission evaluator needs about a person.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="account")
    full_name = models.CharField(max_length=255, blank=True, default="")

    system_role = models.CharField(max_length=32, choices=SystemRole.choices, default=SystemRole.USER, db_index=True)

    # null only for super_admin accounts
    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="accounts",
        null=True,
        blank=True,
    )
    unit = models.ForeignKey(Unit, on_delete=models.SET_NULL, related_name="accounts", null=True, blank=True)
    profile = models.ForeignKey(Profile, on_delete=models.SET_NULL, related_name="accounts", null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_account"
        indexes = [
            models.Index(fields=["organization", "is_active"]),
            models.Index(fields=["organization", "unit"]),
        ]

    def __str__(self) -> str:
        return f"{self.user.get_username()} ({self.system_role})"

    @property
    def email(self) -> str:
        return self.user.email or self.user.get_username()
