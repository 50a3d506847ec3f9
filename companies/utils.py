from django.conf import settings
from admin_panel.notifications import send_html_email, wrap_html
from .models import CompanyOTP
import logging

logger = logging.getLogger(__name__)


def send_company_otp_email(otp, student_name, institution_name):
    """Mail the code to the company contact"""
    if otp.purpose == CompanyOTP.PURPOSE_LOGBOOK:
        subject = f"Staj Defteri Onayı - {student_name}"
        intro = f"{institution_name} kurumunda staj yapan {student_name} öğrencisinin staj defteri onayınızı bekliyor."
    else:
        subject = f"Staj Başvurusu Onayı - {student_name}"
        intro = f"{student_name} öğrencisinin {institution_name} kurumundaki staj başvurusu onayınızı bekliyor."

    valid_days = settings.COMPANY_OTP_VALID_DAYS
    text_content = (
        f"{intro}\n\nDoğrulama kodunuz: {otp.code}\n"
        f"Kod {valid_days} gün geçerlidir.\n\n{settings.FRONTEND_URL}/sirket"
    )
    html_content = wrap_html(
        "Kurum Onayı",
        f"""
        <p>{intro}</p>
        <p>Aşağıdaki kod ile sisteme giriş yapabilirsiniz:</p>
        <div style="text-align: center; margin: 30px 0;">
          <span style="display: inline-block; background-color: #2563eb; color: #ffffff; padding: 15px 30px;
                       font-size: 24px; font-weight: bold; letter-spacing: 6px; border-radius: 8px;">
            {otp.code}
          </span>
        </div>
        <p>Bu kod {valid_days} gün boyunca geçerlidir.</p>
        <p><a href="{settings.FRONTEND_URL}/sirket">{settings.FRONTEND_URL}/sirket</a></p>
        """,
    )
    return send_html_email(subject, text_content, html_content, [otp.email])


def _student_name(application):
    return application.student.name or application.student.username


def issue_company_otp(application):
    otp = CompanyOTP.generate_for(application, CompanyOTP.PURPOSE_APPLICATION)
    if not send_company_otp_email(otp, _student_name(application), application.institution_name):
        logger.error(f"Company OTP mail for application {application.id} was not delivered")
    return otp


def issue_logbook_otp(logbook):
    application = logbook.application
    otp = CompanyOTP.generate_for(application, CompanyOTP.PURPOSE_LOGBOOK, logbook=logbook)
    if not send_company_otp_email(otp, _student_name(application), application.institution_name):
        logger.error(f"Company OTP mail for logbook {logbook.id} was not delivered")
    return otp
