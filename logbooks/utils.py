from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from admin_panel.notifications import send_html_email, wrap_html
from .models import Logbook

STATUS_NOT_STARTED = 'STAJ_BASLAMADI'
STATUS_IN_PROGRESS = 'STAJ_DEVAM_EDIYOR'


def display_status(logbook, today=None):
    """Status shown to users; a BEKLEMEDE logbook is described by the internship dates"""
    if logbook.status != Logbook.STATUS_PENDING:
        return logbook.status
    today = today or timezone.localdate()
    application = logbook.application
    if today < application.start_date:
        return STATUS_NOT_STARTED
    if application.start_date <= today <= application.end_date:
        return STATUS_IN_PROGRESS
    return Logbook.STATUS_PENDING


def upload_deadline(application):
    return application.end_date + timedelta(days=settings.LOGBOOK_UPLOAD_GRACE_DAYS)


def notify_logbook_status(logbook, reason=None):
    application = logbook.application
    student = application.student
    label = logbook.get_status_display()
    intro = f"{application.institution_name} stajınıza ait defterin durumu güncellendi: {label}."
    if reason:
        intro += f" Açıklama: {reason}"
    return send_html_email(
        f"Staj Defteri: {label}",
        f"{intro}\n\n{settings.FRONTEND_URL}",
        wrap_html("Staj Defteri", f"<p>{intro}</p>"),
        [student.email],
    )


def notify_advisor_logbook_waiting(logbook):
    application = logbook.application
    student = application.student
    intro = (
        f"{student.name or student.username} öğrencisinin staj defteri kurum tarafından onaylandı "
        "ve onayınızı bekliyor."
    )
    return send_html_email(
        f"Onay Bekleyen Staj Defteri - {student.name or student.username}",
        intro,
        wrap_html("Staj Defteri", f"<p>{intro}</p>"),
        [application.advisor_email],
    )
