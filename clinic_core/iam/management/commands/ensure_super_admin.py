# clinic_core/iam/management/commands/ensure_super_admin.py

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from clinic_core.iam.models import Account
from clinic_core.iam.roles import SystemRole


class Command(BaseCommand):
    help = "Ensure a super_admin account exists for the given email (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("--password", default=None)
        parser.add_argument("--name", default="")

    @transaction.atomic
    def handle(self, *args, **options):
        email = options["email"].strip().lower()
        User = get_user_model()

        user = User.objects.filter(username=email).first()
        if user is None:
            if not options["password"]:
                raise CommandError("--password is required when the user does not exist yet.")
            user = User.objects.create_user(username=email, email=email, password=options["password"])

        account, created = Account.objects.get_or_create(
            user=user,
            defaults={"full_name": options["name"] or email, "system_role": SystemRole.SUPER_ADMIN},
        )
        if not created and account.system_role != SystemRole.SUPER_ADMIN:
            account.system_role = SystemRole.SUPER_ADMIN
            account.save(update_fields=["system_role", "updated_at"])

        self.stdout.write(self.style.SUCCESS(f"super_admin ensured: {email} (created={created})"))
