import logging
import os

from django.db import transaction
from django.utils import timezone

from admin_panel.utils import log_admin_activity, get_client_ip
from internship_tracking_system.exceptions import BadRequestError, ForbiddenError, NotFoundError
from internships import workflow
from internships.models import InternshipApplication
from internships.validators import is_pdf
from .models import Logbook
from .utils import upload_deadline, notify_logbook_status, notify_advisor_logbook_waiting

logger = logging.getLogger(__name__)

MAX_LOGBOOK_SIZE = 50 * 1024 * 1024
NOT_FOUND_MESSAGE = "Defter bulunamadı veya bu deftere erişim yetkiniz yok."


def get_student_logbook(student, pk):
    try:
        return Logbook.objects.select_related('application__student').get(pk=pk, application__student=student)
    except (Logbook.DoesNotExist, ValueError):
        raise NotFoundError(NOT_FOUND_MESSAGE)


def _check_pdf(upload):
    if not upload:
        raise BadRequestError("PDF dosyası gereklidir.")
    if os.path.splitext(upload.name)[1].lower() != '.pdf' or not is_pdf(upload):
        raise BadRequestError("Sadece PDF dosyaları yüklenebilir.")
    if upload.size > MAX_LOGBOOK_SIZE:
        raise BadRequestError("Dosya boyutu 50MB'dan büyük olamaz.")


def upload_logbook(student, application_id, upload, request=None, today=None):
    """
    Store the student's logbook PDF and hand it to the company for approval.
    A first upload is accepted from the start date until the grace period
    after the end date; a replacement only after a rejection.
    """
    _check_pdf(upload)
    today = today or timezone.localdate()

    with transaction.atomic():
        try:
            application = InternshipApplication.objects.select_for_update().get(
                pk=application_id, student=student, status=workflow.APPROVED
            )
        except (InternshipApplication.DoesNotExist, ValueError):
            raise NotFoundError("Başvuru bulunamadı, onaylanmamış veya bu başvuruya erişim yetkiniz yok.")

        logbook, _ = Logbook.objects.get_or_create(application=application)
        is_reupload = logbook.has_file

        if is_reupload and logbook.status not in Logbook.REUPLOAD_STATUSES:
            raise BadRequestError("Bu defter zaten yüklenmiş ve onay sürecinde. Yeniden yükleme yapılamaz.")

        if not is_reupload:
            if today < application.start_date:
                raise BadRequestError(
                    f"Staj defteri staj başlangıç tarihinden önce yüklenemez. "
                    f"Başlangıç tarihi: {application.start_date:%d.%m.%Y}"
                )
            deadline = upload_deadline(application)
            if today > deadline:
                raise BadRequestError(f"Staj defteri yükleme süresi dolmuştur. Son yükleme tarihi: {deadline:%d.%m.%Y}")

        logbook.clear_file()
        logbook.file = upload
        logbook.original_file_name = upload.name
        logbook.file_size = upload.size
        logbook.upload_date = timezone.now()
        logbook.status = Logbook.STATUS_COMPANY_PENDING
        logbook.company_decision = 0
        logbook.advisor_decision = 0
        logbook.reject_reason = None
        logbook.company_approved_at = None
        logbook.advisor_approved_at = None
        logbook.save()

        log_admin_activity(
            user=student,
            action='UPLOAD',
            model_name='Logbook',
            object_id=logbook.id,
            description=f"{'Re-uploaded' if is_reupload else 'Uploaded'} logbook {upload.name} ({upload.size} bytes)",
            ip_address=get_client_ip(request),
        )

    from companies.utils import issue_logbook_otp
    try:
        issue_logbook_otp(logbook)
    except Exception as e:
        logger.error(f"Company OTP for logbook {logbook.id} failed: {str(e)}")
    return logbook


def delete_logbook_file(logbook, request=None):
    if logbook.status in Logbook.LOCKED_STATUSES:
        raise BadRequestError("Onaylanan veya reddedilen defterler silinemez.")
    with transaction.atomic():
        logbook.clear_file()
        logbook.status = Logbook.STATUS_PENDING
        logbook.save()
        log_admin_activity(
            user=logbook.application.student,
            action='DELETE',
            model_name='Logbook',
            object_id=logbook.id,
            description="Logbook file deleted by student",
            ip_address=get_client_ip(request),
        )
    return logbook


def company_decide(logbook, decision, reason=None, actor_label="", request=None):
    """Company step: approval hands the logbook to the advisor"""
    if decision == workflow.REJECT and not (reason or "").strip():
        raise BadRequestError("Red sebebi zorunludur.")

    with transaction.atomic():
        logbook = Logbook.objects.select_for_update().select_related('application__student').get(pk=logbook.pk)
        if logbook.status != Logbook.STATUS_COMPANY_PENDING:
            raise ForbiddenError("Bu defter şirket onayı beklemiyor.")
        if decision == workflow.APPROVE:
            logbook.status = Logbook.STATUS_ADVISOR_PENDING
            logbook.company_decision = workflow.DECISION_APPROVED
            logbook.company_approved_at = timezone.now()
            logbook.reject_reason = None
        else:
            logbook.status = Logbook.STATUS_COMPANY_REJECTED
            logbook.company_decision = workflow.DECISION_REJECTED
            logbook.reject_reason = reason
        logbook.save()
        log_admin_activity(
            actor_label=actor_label,
            action='APPROVE' if decision == workflow.APPROVE else 'REJECT',
            model_name='Logbook',
            object_id=logbook.id,
            description=f"Company {decision}: {logbook.status}" + (f" ({reason})" if reason else ""),
            ip_address=get_client_ip(request),
        )

    notify_logbook_status(logbook, reason=reason)
    if decision == workflow.APPROVE:
        notify_advisor_logbook_waiting(logbook)
    return logbook


def advisor_decide(logbook, decision, reason=None, user=None, request=None):
    if decision == workflow.REJECT and not (reason or "").strip():
        raise BadRequestError("Red sebebi zorunludur.")

    with transaction.atomic():
        logbook = Logbook.objects.select_for_update().select_related('application__student').get(pk=logbook.pk)
        if logbook.status != Logbook.STATUS_ADVISOR_PENDING:
            raise ForbiddenError("Bu defter danışman onayı beklemiyor.")
        if decision == workflow.APPROVE:
            logbook.status = Logbook.STATUS_APPROVED
            logbook.advisor_decision = workflow.DECISION_APPROVED
            logbook.advisor_approved_at = timezone.now()
        else:
            logbook.status = Logbook.STATUS_ADVISOR_REJECTED
            logbook.advisor_decision = workflow.DECISION_REJECTED
            logbook.reject_reason = reason
        logbook.save()
        log_admin_activity(
            user=user,
            action='APPROVE' if decision == workflow.APPROVE else 'REJECT',
            model_name='Logbook',
            object_id=logbook.id,
            description=f"Advisor {decision}: {logbook.status}" + (f" ({reason})" if reason else ""),
            ip_address=get_client_ip(request),
        )

    notify_logbook_status(logbook, reason=reason)
    return logbook
