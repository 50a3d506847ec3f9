"""Email + OTP checks for company contacts."""
import logging

from django.utils import timezone

from internship_tracking_system.exceptions import UnauthorizedError
from internships import workflow
from logbooks.models import Logbook
from .models import CompanyOTP

logger = logging.getLogger(__name__)

INVALID_OTP_MESSAGE = "Geçersiz email veya OTP, ya da OTP süresi dolmuş"


def _active_codes(email, **filters):
    return CompanyOTP.objects.filter(
        email=CompanyOTP.normalize_email(email),
        is_used=False,
        expires_at__gte=timezone.now(),
        **filters
    ).select_related('application__student', 'logbook')


def _fail(email, **filters):
    """Count the failed attempt against every live code for this contact, then refuse"""
    for otp in _active_codes(email, **filters):
        otp.increment_attempt()
    logger.warning(f"Rejected company OTP for {CompanyOTP.normalize_email(email)}")
    raise UnauthorizedError(INVALID_OTP_MESSAGE)


def login(email, code):
    """Return (purpose, record) for the one pending record this code opens"""
    code = (code or '').strip()

    otp = _active_codes(
        email,
        code=code,
        purpose=CompanyOTP.PURPOSE_APPLICATION,
        application__status=workflow.COMPANY_PENDING,
    ).first()
    if otp:
        return CompanyOTP.PURPOSE_APPLICATION, otp.application

    otp = _active_codes(
        email,
        code=code,
        purpose=CompanyOTP.PURPOSE_LOGBOOK,
        logbook__status=Logbook.STATUS_COMPANY_PENDING,
    ).first()
    if otp:
        return CompanyOTP.PURPOSE_LOGBOOK, otp.logbook

    _fail(email)


def verify_for_application(email, code, application_id, purpose=None):
    filters = {'application_id': application_id}
    if purpose:
        filters['purpose'] = purpose
    otp = _active_codes(email, code=(code or '').strip(), **filters).first()
    if otp is None:
        _fail(email, **filters)
    return otp


def verify_for_logbook(email, code, logbook_id):
    filters = {'logbook_id': logbook_id, 'purpose': CompanyOTP.PURPOSE_LOGBOOK}
    otp = _active_codes(email, code=(code or '').strip(), **filters).first()
    if otp is None:
        _fail(email, **filters)
    return otp
