from django.core.management.base import BaseCommand

from companies.models import CompanyOTP
from internships.reminders import auto_cancel_overdue, send_pending_reminders


class Command(BaseCommand):
    help = "Cancel applications too close to their start date and remind parties of pending approvals"

    def add_arguments(self, parser):
        parser.add_argument("--skip-cancel", action="store_true", help="Only send reminders")

    def handle(self, *args, **options):
        cancelled = [] if options["skip_cancel"] else auto_cancel_overdue()
        sent = send_pending_reminders()
        CompanyOTP.clean_expired_otps()
        self.stdout.write(self.style.SUCCESS(
            f"{len(cancelled)} application(s) cancelled, {sent} reminder(s) sent"
        ))
