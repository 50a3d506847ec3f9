from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib import colors
from django.conf import settings
from django.utils import timezone
from admin_panel.notifications import send_html_email, wrap_html
import io
import logging

logger = logging.getLogger(__name__)

# Helvetica has no glyphs for these
PDF_TRANSLATION = str.maketrans("çğıöşüÇĞİÖŞÜ", "cgiosuCGIOSU")


def _pdf_text(value):
    return str(value or "").translate(PDF_TRANSLATION)


def _student_name(application):
    student = application.student
    return student.name or student.username


def _detail_rows(application):
    return [
        ("Öğrenci", _student_name(application)),
        ("Öğrenci No", application.student.student_number or "-"),
        ("Kurum", application.institution_name),
        ("Staj Tipi", application.get_internship_type_display()),
        ("Başlangıç", application.start_date.strftime("%d.%m.%Y")),
        ("Bitiş", application.end_date.strftime("%d.%m.%Y")),
        ("Toplam Gün", application.total_days),
    ]


def _detail_html(application):
    items = "".join(
        f"<li><strong>{label}:</strong> {value}</li>" for label, value in _detail_rows(application)
    )
    return (
        '<div style="background-color: #f3f4f6; padding: 15px; margin: 20px 0; border-radius: 8px;">'
        f'<ul style="list-style: none; padding-left: 0;">{items}</ul></div>'
    )


def _detail_text(application):
    return "\n".join(f"{label}: {value}" for label, value in _detail_rows(application))


def _send(application, subject, intro, recipients, attachments=None):
    text_content = f"{intro}\n\n{_detail_text(application)}\n\n{settings.FRONTEND_URL}"
    html_content = wrap_html(subject, f"<p>{intro}</p>{_detail_html(application)}")
    return send_html_email(subject, text_content, html_content, recipients, attachments=attachments)


# -------------------------------
# WORKFLOW NOTIFICATIONS
# -------------------------------
def notify_advisor_new_application(application):
    return _send(
        application,
        f"Yeni Staj Başvurusu - {_student_name(application)}",
        f"{_student_name(application)} öğrencisi yeni bir staj başvurusu yaptı. "
        "Lütfen sisteme giriş yaparak başvuruyu inceleyin.",
        [application.advisor_email],
    )


def notify_advisor_cancelled(application):
    return _send(
        application,
        f"Staj Başvurusu İptal Edildi - {_student_name(application)}",
        f"{_student_name(application)} öğrencisi staj başvurusunu iptal etti. Sebep: {application.cancel_reason}",
        [application.advisor_email],
    )


def notify_student(application, subject, intro, attachments=None):
    return _send(application, subject, intro, [application.student.email], attachments=attachments)


def notify_career_center(application, subject, intro):
    return _send(application, subject, intro, [settings.CAREER_CENTER_EMAIL])


def notify_status_change(application, reason=None):
    """Tell the student (and career center where relevant) about a status change"""
    status_label = application.get_status_display()
    intro = f"Staj başvurunuzun durumu güncellendi: {status_label}."
    if reason:
        intro += f" Açıklama: {reason}"
    return notify_student(application, f"Staj Başvurunuz: {status_label}", intro)


def _exemption_student_name(exemption):
    return exemption.student.name or exemption.student.username


def notify_advisor_new_exemption(exemption):
    name = _exemption_student_name(exemption)
    subject = f"[MUAFIYET] Yeni Muafiyet Başvurusu - {name}"
    intro = (
        f"{name} ({exemption.student.student_number or exemption.student.username}) öğrencisi "
        "SGK 4A belgesi ile staj muafiyeti başvurusu yaptı. Lütfen sisteme giriş yaparak inceleyin."
    )
    html_content = wrap_html(subject, f"<p>{intro}</p>")
    return send_html_email(subject, f"{intro}\n\n{settings.FRONTEND_URL}", html_content, [exemption.advisor_email])


def notify_exemption_decision(exemption):
    status_label = exemption.get_status_display()
    subject = f"Muafiyet Başvurunuz: {status_label}"
    intro = f"Staj muafiyeti başvurunuz danışmanınız tarafından değerlendirildi: {status_label}."
    if exemption.advisor_note:
        intro += f" Açıklama: {exemption.advisor_note}"
    html_content = wrap_html(subject, f"<p>{intro}</p>")
    return send_html_email(subject, f"{intro}\n\n{settings.FRONTEND_URL}", html_content, [exemption.student.email])


# -------------------------------
# APPROVAL LETTER
# -------------------------------
def generate_approval_letter_pdf(application):
    buffer = io.BytesIO()
    p = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    # Top banner
    BANNER_HEIGHT = 1.4 * inch
    p.setFillColor(colors.HexColor("#1E3A8A"))
    p.rect(0, height - BANNER_HEIGHT, width, BANNER_HEIGHT, fill=True, stroke=False)
    p.setFillColor(colors.white)
    p.setFont("Helvetica-Bold", 18)
    p.drawString(1 * inch, height - 0.8 * inch, _pdf_text(settings.EMAIL_SENDER_NAME))
    p.setFont("Helvetica", 11)
    p.drawString(1 * inch, height - 1.1 * inch, "Kariyer Merkezi")

    # Title
    p.setFillColor(colors.black)
    p.setFont("Helvetica-Bold", 16)
    title_y = height - BANNER_HEIGHT - 0.6 * inch
    p.drawString(1 * inch, title_y, _pdf_text("Staj Onay Belgesi"))
    p.setStrokeColor(colors.lightgrey)
    p.setLineWidth(1)
    p.line(1 * inch, title_y - 0.08 * inch, width - 1 * inch, title_y - 0.08 * inch)

    approved_at = timezone.localtime(application.approved_at or timezone.now())
    p.setFont("Helvetica", 11)
    p.drawString(1 * inch, title_y - 0.45 * inch, _pdf_text(f"Belge No: STJ-{application.id:06d}"))
    p.drawString(1 * inch, title_y - 0.7 * inch, _pdf_text(f"Onay Tarihi: {approved_at.strftime('%d.%m.%Y')}"))

    y = title_y - 1.3 * inch
    p.setFont("Helvetica", 12)
    for label, value in _detail_rows(application):
        p.setFont("Helvetica-Bold", 12)
        p.drawString(1 * inch, y, _pdf_text(f"{label}:"))
        p.setFont("Helvetica", 12)
        p.drawString(2.6 * inch, y, _pdf_text(value))
        y -= 20

    y -= 20
    closing = [
        "Yukarida bilgileri verilen staj basvurusu danisman, kariyer merkezi ve",
        "kurum tarafindan onaylanmistir.",
    ]
    for line in closing:
        p.drawString(1 * inch, y, line)
        y -= 16

    p.showPage()
    p.save()

    buffer.seek(0)
    return buffer.getvalue()


def approval_letter_name(application):
    return f"staj_onay_{application.id}.pdf"


# -------------------------------
# FILE DOWNLOADS
# -------------------------------
APPLICATION_FILE_FIELDS = {
    'transkript': 'transcript_file',
    'hizmet-dokumu': 'service_record_file',
    'sigorta': 'insurance_file',
}


def file_download_response(field_file, download_name=None):
    """Stream a stored FileField; raises NotFoundError if nothing is stored"""
    from django.http import FileResponse
    from internship_tracking_system.exceptions import NotFoundError
    import os

    if not field_file or not field_file.name:
        raise NotFoundError("Dosya bulunamadı.")
    try:
        handle = field_file.open('rb')
    except (FileNotFoundError, OSError):
        logger.error(f"Stored file missing on disk: {field_file.name}")
        raise NotFoundError("Dosya bulunamadı veya okunamadı.")
    return FileResponse(handle, as_attachment=True, filename=download_name or os.path.basename(field_file.name))


def notify_pending_reminder(application, recipient, days_waiting):
    return _send(
        application,
        f"Hatırlatma: Onay Bekleyen Staj Başvurusu - {_student_name(application)}",
        f"Aşağıdaki staj başvurusu {days_waiting} gündür onayınızı bekliyor. "
        "Süreçler staj başlangıcının 5 gün öncesine kadar tamamlanmalıdır.",
        [recipient],
    )
