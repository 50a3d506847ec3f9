from datetime import timedelta
import random

from django.conf import settings
from django.db import models
from django.utils import timezone


class CompanyOTP(models.Model):
    """One-time code a company contact uses instead of an account"""
    PURPOSE_APPLICATION = 'basvuru'
    PURPOSE_LOGBOOK = 'defter'
    PURPOSE_CHOICES = [
        (PURPOSE_APPLICATION, 'Başvuru Onayı'),
        (PURPOSE_LOGBOOK, 'Defter Onayı'),
    ]

    application = models.ForeignKey('internships.InternshipApplication', on_delete=models.CASCADE,
                                    related_name='company_otps')
    logbook = models.ForeignKey('logbooks.Logbook', on_delete=models.CASCADE, blank=True, null=True,
                                related_name='company_otps')
    purpose = models.CharField(max_length=10, choices=PURPOSE_CHOICES)
    email = models.EmailField()
    code = models.CharField(max_length=8)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()
    is_used = models.BooleanField(default=False)
    attempts = models.PositiveIntegerField(default=0)
    max_attempts = 5

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.email} - {self.purpose} #{self.application_id}"

    @staticmethod
    def normalize_email(email):
        return (email or '').strip().lower()

    @classmethod
    def generate_for(cls, application, purpose, logbook=None):
        """Issue a fresh 8-digit code; earlier unused codes for the same record stop working"""
        stale = cls.objects.filter(application=application, purpose=purpose, is_used=False)
        if logbook is not None:
            stale = stale.filter(logbook=logbook)
        stale.update(is_used=True)

        code = f"{random.randint(10000000, 99999999)}"
        expires_at = timezone.now() + timedelta(days=settings.COMPANY_OTP_VALID_DAYS)
        return cls.objects.create(
            application=application,
            logbook=logbook,
            purpose=purpose,
            email=cls.normalize_email(application.contact_email),
            code=code,
            expires_at=expires_at,
        )

    def is_expired(self):
        return timezone.now() > self.expires_at

    def mark_as_used(self):
        self.is_used = True
        self.save(update_fields=['is_used'])

    def increment_attempt(self):
        self.attempts += 1
        if self.attempts >= self.max_attempts:
            self.is_used = True
        self.save(update_fields=['attempts', 'is_used'])

    @classmethod
    def clean_expired_otps(cls):
        cls.objects.filter(expires_at__lt=timezone.now(), is_used=False).delete()
