"""Daily housekeeping: reminders for stalled approvals and automatic cancellation."""
import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from admin_panel.utils import log_admin_activity
from . import workflow
from .models import InternshipApplication
from .utils import notify_pending_reminder

logger = logging.getLogger(__name__)

AUTO_CANCEL_REASON = (
    "Süreçler staj başlangıcının 5 gün öncesine kadar tamamlanmalıdır. "
    "Sistem tarafından otomatik iptal edilmiştir."
)


def pending_party_email(application):
    """The address of whoever the application is waiting on"""
    return {
        workflow.ADVISOR_PENDING: application.advisor_email,
        workflow.CAREER_CENTER_PENDING: settings.CAREER_CENTER_EMAIL,
        workflow.COMPANY_PENDING: application.contact_email,
    }.get(application.status)


def auto_cancel_overdue(today=None):
    from .services import auto_cancel

    today = today or timezone.localdate()
    cutoff = today + timedelta(days=settings.AUTO_CANCEL_BEFORE_START_DAYS)
    overdue = InternshipApplication.objects.filter(
        status__in=workflow.PENDING_STATUSES,
        start_date__lte=cutoff,
    ).select_related('student')

    cancelled = []
    for application in overdue:
        try:
            cancelled.append(auto_cancel(application, AUTO_CANCEL_REASON))
        except workflow.InvalidTransition:
            # decided by someone else in the meantime
            continue
    if cancelled:
        logger.info(f"Auto-cancelled {len(cancelled)} applications")
    return cancelled


def send_pending_reminders(now=None):
    now = now or timezone.now()
    threshold = now - timedelta(days=settings.REMINDER_AFTER_DAYS)
    stalled = InternshipApplication.objects.filter(
        status__in=workflow.PENDING_STATUSES,
        updated_at__lte=threshold,
    ).select_related('student')

    sent = 0
    for application in stalled:
        recipient = pending_party_email(application)
        if not recipient:
            logger.warning(f"No reminder recipient for application {application.id}")
            continue
        days_waiting = (now - application.updated_at).days
        if notify_pending_reminder(application, recipient, days_waiting):
            sent += 1
            log_admin_activity(
                actor_label='system',
                action='REMIND',
                model_name='InternshipApplication',
                object_id=application.id,
                description=f"Reminder sent to {recipient} ({application.status}, {days_waiting} days)",
            )
    return sent
