import logging

from django.conf import settings
from django.core.files.base import ContentFile
from django.db import transaction
from django.utils import timezone

from admin_panel.utils import log_admin_activity, get_client_ip
from internship_tracking_system.exceptions import BadRequestError, ForbiddenError, NotFoundError
from . import workflow
from .advisors import resolve_advisor
from .models import InternshipApplication, ExemptionApplication
from .validators import total_days_errors, date_range_errors
from .utils import (
    notify_advisor_new_application, notify_advisor_cancelled, notify_student,
    notify_career_center, notify_status_change, generate_approval_letter_pdf, approval_letter_name,
    notify_advisor_new_exemption, notify_exemption_decision,
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Başvuru bulunamadı veya bu başvuruya erişim yetkiniz yok."

DECISION_ACTIONS = {
    workflow.APPROVE: 'APPROVE',
    workflow.REJECT: 'REJECT',
    workflow.CANCEL: 'CANCEL',
}


def get_student_application(student, pk):
    try:
        return InternshipApplication.objects.select_related('student').get(pk=pk, student=student)
    except (InternshipApplication.DoesNotExist, ValueError):
        raise NotFoundError(NOT_FOUND_MESSAGE)


def _locked(application):
    return InternshipApplication.objects.select_for_update().select_related('student').get(pk=application.pk)


# -------------------------------
# STUDENT OPERATIONS
# -------------------------------
def create_application(student, data, cap_id=None, request=None):
    """
    Create an application routed to the resolved advisor. The row and its
    audit entry are written together; the advisor mail is best-effort.
    """
    resolution = resolve_advisor(student, cap_id)

    cap_record = resolution.cap_record
    if cap_record is not None:
        data.update(
            is_cap_application=True,
            cap_record=cap_record,
            cap_faculty=cap_record.cap_faculty,
            cap_department=cap_record.cap_department,
            cap_program=cap_record.cap_program,
        )

    with transaction.atomic():
        application = InternshipApplication.objects.create(
            student=student,
            advisor_email=resolution.email,
            status=workflow.ADVISOR_PENDING,
            **data,
        )
        log_admin_activity(
            user=student,
            action='CREATE',
            model_name='InternshipApplication',
            object_id=application.id,
            description=(
                f"{student.username} created application to {application.institution_name} "
                f"({application.internship_type}, {application.total_days} days), advisor {resolution.email}"
            ),
            ip_address=get_client_ip(request),
        )

    if not notify_advisor_new_application(application):
        logger.warning(f"Advisor mail for application {application.id} could not be sent")
    return application


def cancel_application(application, reason, request=None):
    with transaction.atomic():
        application = _locked(application)
        try:
            application.apply_decision(workflow.STUDENT, workflow.CANCEL, note=reason)
        except workflow.InvalidTransition as e:
            raise ForbiddenError(e.message)
        application.save()
        log_admin_activity(
            user=application.student,
            action='CANCEL',
            model_name='InternshipApplication',
            object_id=application.id,
            description=f"Application cancelled by student: {reason}",
            ip_address=get_client_ip(request),
        )

    notify_advisor_cancelled(application)
    return application


def amend_dates(application, start_date, end_date, total_days, request=None, now=None):
    """Post-approval date change, allowed inside the amendment window only"""
    with transaction.atomic():
        application = _locked(application)

        if application.status != workflow.APPROVED:
            raise ForbiddenError("Sadece onaylanmış başvuruların tarihleri değiştirilebilir.")

        elapsed = application.days_since_approval(now=now)
        if elapsed is None or elapsed > settings.AMENDMENT_WINDOW_DAYS:
            raise ForbiddenError(
                f"Tarih değişikliği sadece onay tarihinden itibaren {settings.AMENDMENT_WINDOW_DAYS} gün içinde yapılabilir."
            )

        days_error = total_days_errors(application.internship_type, total_days)
        if days_error:
            raise BadRequestError(days_error)
        errors = date_range_errors(start_date, end_date, check_lead_time=False)
        if errors:
            raise BadRequestError(next(iter(errors.values())))

        old = (application.start_date, application.end_date, application.total_days)
        application.start_date = start_date
        application.end_date = end_date
        application.total_days = total_days
        application.save(update_fields=['start_date', 'end_date', 'total_days', 'updated_at'])

        log_admin_activity(
            user=application.student,
            action='UPDATE',
            model_name='InternshipApplication',
            object_id=application.id,
            description=(
                f"Dates changed: {old[0]:%d.%m.%Y} → {start_date:%d.%m.%Y}, "
                f"{old[1]:%d.%m.%Y} → {end_date:%d.%m.%Y}, days {old[2]} → {total_days}"
            ),
            ip_address=get_client_ip(request),
        )
    return application


# -------------------------------
# APPROVAL STAGES
# -------------------------------
def decide(application, actor, decision, note=None, user=None, actor_label="", request=None):
    """
    Apply one approval-stage decision. Raises ForbiddenError when the
    application is not waiting on this actor. Side effects run after commit
    and never fail the decision.
    """
    if decision == workflow.REJECT and not (note or "").strip():
        raise BadRequestError("Red sebebi zorunludur.")

    with transaction.atomic():
        application = _locked(application)
        try:
            application.apply_decision(actor, decision, note=note)
        except workflow.InvalidTransition as e:
            raise ForbiddenError(e.message)
        application.save()

        if actor == workflow.ADVISOR and decision == workflow.APPROVE:
            from logbooks.models import Logbook
            Logbook.objects.get_or_create(application=application)

        log_admin_activity(
            user=user,
            actor_label=actor_label,
            action=DECISION_ACTIONS[decision],
            model_name='InternshipApplication',
            object_id=application.id,
            description=f"{actor} {decision}: {application.status}" + (f" ({note})" if note else ""),
            ip_address=get_client_ip(request),
        )

    _after_decision(application, actor, decision, note)
    return application


def _after_decision(application, actor, decision, note):
    if decision == workflow.REJECT:
        notify_status_change(application, reason=note)
        return

    if actor == workflow.ADVISOR:
        notify_status_change(application)
        notify_career_center(
            application,
            f"Kariyer Merkezi Onayı Bekleyen Başvuru - {application.student}",
            "Danışman tarafından onaylanan bir staj başvurusu onayınızı bekliyor.",
        )
    elif actor == workflow.CAREER_CENTER:
        notify_status_change(application)
        from companies.utils import issue_company_otp
        try:
            issue_company_otp(application)
        except Exception as e:
            logger.error(f"Company OTP for application {application.id} failed: {str(e)}")
    elif actor == workflow.COMPANY:
        finalize_approval(application)
        notify_career_center(
            application,
            f"Şirket Onayı Tamamlandı - {application.student}",
            "Staj başvurusu kurum tarafından onaylandı.",
        )


def finalize_approval(application):
    """Store the approval letter and mail it to the student"""
    try:
        pdf_bytes = generate_approval_letter_pdf(application)
    except Exception as e:
        logger.error(f"Approval letter for application {application.id} failed: {str(e)}")
        notify_status_change(application)
        return None

    name = approval_letter_name(application)
    application.approval_letter.save(name, ContentFile(pdf_bytes), save=False)
    InternshipApplication.objects.filter(pk=application.pk).update(approval_letter=application.approval_letter.name)

    notify_student(
        application,
        "Staj Başvurunuz Onaylandı",
        "Staj başvurunuz tüm birimler tarafından onaylandı. Onay belgeniz ektedir.",
        attachments=[(name, pdf_bytes, "application/pdf")],
    )
    return application.approval_letter


def auto_cancel(application, reason):
    """System cancellation of a still-pending application"""
    with transaction.atomic():
        application = _locked(application)
        application.apply_decision(workflow.SYSTEM, workflow.CANCEL, note=reason)
        application.save()
        log_admin_activity(
            actor_label='system',
            action='CANCEL',
            model_name='InternshipApplication',
            object_id=application.id,
            description=reason,
        )
    notify_status_change(application, reason=reason)
    return application


# -------------------------------
# EXEMPTION
# -------------------------------
def create_exemption(student, sgk4a_file, cap_id=None, request=None):
    resolution = resolve_advisor(student, cap_id)
    with transaction.atomic():
        exemption = ExemptionApplication.objects.create(
            student=student,
            sgk4a_file=sgk4a_file,
            advisor_email=resolution.email,
            is_cap_application=resolution.cap_record is not None,
            cap_record=resolution.cap_record,
            cap_department=resolution.cap_record.cap_department if resolution.cap_record else None,
        )
        log_admin_activity(
            user=student,
            action='CREATE',
            model_name='ExemptionApplication',
            object_id=exemption.id,
            description=f"{student.username} submitted exemption, advisor {resolution.email}",
            ip_address=get_client_ip(request),
        )

    if not notify_advisor_new_exemption(exemption):
        logger.warning(f"Advisor mail for exemption {exemption.id} could not be sent")
    return exemption


def decide_exemption(exemption, decision, note=None, user=None, request=None):
    if decision == workflow.REJECT and not (note or "").strip():
        raise BadRequestError("Red sebebi zorunludur.")

    with transaction.atomic():
        exemption = ExemptionApplication.objects.select_for_update().get(pk=exemption.pk)
        if exemption.is_evaluated:
            raise BadRequestError("Bu muafiyet başvurusu zaten değerlendirilmiş.")

        if decision == workflow.APPROVE:
            exemption.advisor_decision = workflow.DECISION_APPROVED
            exemption.status = workflow.APPROVED
            exemption.advisor_note = note or "Danışman tarafından onaylandı"
        else:
            exemption.advisor_decision = workflow.DECISION_REJECTED
            exemption.status = workflow.REJECTED
            exemption.advisor_note = note
        exemption.save()

        log_admin_activity(
            user=user,
            action=DECISION_ACTIONS[decision],
            model_name='ExemptionApplication',
            object_id=exemption.id,
            description=f"Exemption {exemption.status}" + (f" ({note})" if note else ""),
            ip_address=get_client_ip(request),
        )

    if not notify_exemption_decision(exemption):
        logger.warning(f"Student mail for exemption {exemption.id} could not be sent")
    return exemption


def student_statistics(student):
    applications = InternshipApplication.objects.filter(student=student)
    return {
        'beklemede': applications.filter(status__in=workflow.PENDING_STATUSES).count(),
        'onaylandi': applications.filter(status=workflow.APPROVED).count(),
        'reddedildi': applications.filter(status=workflow.REJECTED).count(),
        'iptalEdildi': applications.filter(status=workflow.CANCELLED).count(),
        'toplam': applications.count(),
    }


def admin_update(application, validated_data, user=None, request=None):
    """Administrative correction; a status change may only move forward"""
    with transaction.atomic():
        application = _locked(application)
        old_status = application.status
        new_status = validated_data.get('status', old_status)

        if new_status != old_status:
            if not workflow.is_forward(old_status, new_status):
                raise BadRequestError(f"Başvuru durumu {old_status} → {new_status} olarak değiştirilemez.")
            if new_status != workflow.CANCELLED:
                advisor, career_center, company = workflow.decisions_for(
                    new_status, rejected_by=workflow.STAGE_OWNER.get(old_status)
                )
                application.advisor_decision = advisor
                application.career_center_decision = career_center
                application.company_decision = company
            if new_status == workflow.APPROVED:
                application.approved_at = timezone.now()

        for field, value in validated_data.items():
            setattr(application, field, value)
        application.save()

        log_admin_activity(
            user=user,
            action='UPDATE',
            model_name='InternshipApplication',
            object_id=application.id,
            description=f"Admin updated {', '.join(sorted(validated_data))}"
                        + (f"; status {old_status} → {new_status}" if new_status != old_status else ""),
            ip_address=get_client_ip(request),
        )

    if new_status != old_status:
        if new_status == workflow.APPROVED:
            finalize_approval(application)
        else:
            notify_status_change(application)
    return application
