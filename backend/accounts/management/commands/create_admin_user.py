import os

from django.core.management.base import BaseCommand
from rest_framework.authtoken.models import Token

from accounts.models import CustomUser


class Command(BaseCommand):
    help = "Idempotently ensure a back-office admin account exists and print its API token."

    def add_arguments(self, parser):
        parser.add_argument("--username", default=os.getenv("ADMIN_USERNAME", "admin"))
        parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL", "admin@example.com"))
        parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))

    def handle(self, *args, **opts):
        username = opts["username"]
        password = opts["password"] or "ChangeMe123!"

        user, created = CustomUser.objects.get_or_create(
            username=username,
            defaults={"email": opts["email"], "role": "admin", "is_staff": True},
        )
        if created:
            user.set_password(password)
            user.save()
            self.stdout.write(self.style.SUCCESS(f"Created admin user '{username}'"))
        else:
            if user.role != "admin":
                user.role = "admin"
                user.save(update_fields=["role"])
                self.stdout.write(self.style.WARNING(f"Promoted '{username}' to admin"))
            else:
                self.stdout.write(f"Admin user '{username}' already exists")

        token, _ = Token.objects.get_or_create(user=user)
        self.stdout.write(self.style.SUCCESS(f"TOKEN: {token.key}"))
