import os
import re
from datetime import timedelta

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

PHONE_RE = re.compile(r'^[\d\s\-\+\(\)]{10,15}$')
SAFE_TEXT_RE = re.compile(r'^[^<>"\\\'&]*$')

DOCUMENT_EXTENSIONS = ('.pdf', '.jpg', '.jpeg', '.png')
MAX_DOCUMENT_SIZE = 10 * 1024 * 1024

IMU_404_REQUIRED_DAYS = 70
MAX_TOTAL_DAYS = 365

INVALID_TYPE_MESSAGE = "Geçersiz staj tipi."
MIN_DAYS_MESSAGE = "Toplam gün sayısı en az 1 olmalıdır."
IMU_404_MESSAGE = "IMU 404 stajı için toplam gün sayısı tam olarak 70 iş günü olmalıdır."
DATE_ORDER_MESSAGE = "Bitiş tarihi başlangıç tarihinden sonra olmalıdır."


def validate_phone(value):
    if not PHONE_RE.match(value or ''):
        raise serializers.ValidationError("Geçerli bir telefon numarası giriniz.")
    return value


def validate_safe_text(value):
    if not SAFE_TEXT_RE.match(value or ''):
        raise serializers.ValidationError("Özel karakterler kullanılamaz.")
    return value.strip()


def validate_document(upload, extensions=DOCUMENT_EXTENSIONS, max_size=MAX_DOCUMENT_SIZE):
    if upload is None:
        return upload
    ext = os.path.splitext(upload.name)[1].lower()
    if ext not in extensions:
        allowed = ", ".join(extensions)
        raise serializers.ValidationError(f"Desteklenmeyen dosya türü. İzin verilenler: {allowed}")
    if upload.size > max_size:
        raise serializers.ValidationError(f"Dosya boyutu {max_size // (1024 * 1024)}MB sınırını aşıyor.")
    return upload


def is_pdf(upload):
    """Check the %PDF magic bytes without consuming the stream"""
    head = upload.read(5)
    upload.seek(0)
    return head.startswith(b'%PDF')


def total_days_errors(internship_type, total_days):
    """
    Day-limit policy: at least one day for every type, exactly 70 for IMU 404.
    Other types are not capped beyond MAX_TOTAL_DAYS.
    """
    if total_days is None or total_days < 1:
        return MIN_DAYS_MESSAGE
    if total_days > MAX_TOTAL_DAYS:
        return f"Toplam gün en fazla {MAX_TOTAL_DAYS} olabilir."
    if internship_type == 'IMU_404' and total_days != IMU_404_REQUIRED_DAYS:
        return IMU_404_MESSAGE
    return None


def date_range_errors(start_date, end_date, today=None, check_lead_time=True):
    """
    Return a field -> message map for the start/end pair. The lead-time rule
    applies to new submissions only; date amendments pass check_lead_time=False.
    """
    errors = {}
    today = today or timezone.localdate()
    earliest = today + timedelta(days=settings.APPLICATION_MIN_LEAD_DAYS)
    if check_lead_time and start_date and start_date < earliest:
        errors['start_date'] = (
            f"Staj başlangıç tarihi başvuru tarihinden en az {settings.APPLICATION_MIN_LEAD_DAYS} gün sonra olmalıdır."
        )
    if start_date and end_date and end_date <= start_date:
        errors['end_date'] = DATE_ORDER_MESSAGE
    return errors
