from django.core.management.base import BaseCommand, CommandError

from audit.services.audit_service import purge_old_logs


class Command(BaseCommand):
    help = "Delete audit log entries older than the given number of days."

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=90)

    def handle(self, *args, **opts):
        days = opts["days"]
        if days < 1:
            raise CommandError("--days must be at least 1")

        deleted = purge_old_logs(days)
        self.stdout.write(self.style.SUCCESS(f"Purged {deleted} audit log(s) older than {days} days"))
