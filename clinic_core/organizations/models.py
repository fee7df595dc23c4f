# clinic_core/organizations/models.py
import uuid

from django.db import models


class Organization(models.Model):
    """
    Top-level tenant (a clinic or a clinic group).
    Root of all data isolation in the system.

    Organizations may hang under a parent organization. The tree is used for
    display only; access checks treat membership as flat equality.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=64, unique=True, null=True, blank=True)

    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    cnpj = models.CharField(max_length=32, blank=True, default="")
    logo = models.URLField(blank=True, default="")

    # {street, number, complement, neighborhood, city, state, zip_code}
    address = models.JSONField(default=dict)

    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        related_name="children",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "organizations_organization"
        indexes = [
            models.Index(fields=["parent"], name="organization_parent_id_idx"),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self) -> str:
        return self.name
