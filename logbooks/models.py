from django.db import models
from django.utils import timezone


def logbook_upload_to(instance, filename):
    stamp = timezone.now().strftime("%Y%m%d%H%M%S%f")
    return f"defterler/defter_{instance.application_id}_{stamp}.pdf"


class Logbook(models.Model):
    """Internship diary of an approved application, one per application"""
    STATUS_PENDING = 'BEKLEMEDE'
    STATUS_COMPANY_PENDING = 'SIRKET_ONAYI_BEKLIYOR'
    STATUS_COMPANY_REJECTED = 'SIRKET_REDDETTI'
    STATUS_ADVISOR_PENDING = 'DANISMAN_ONAYI_BEKLIYOR'
    STATUS_ADVISOR_REJECTED = 'DANISMAN_REDDETTI'
    STATUS_APPROVED = 'ONAYLANDI'
    STATUS_REJECTED = 'REDDEDILDI'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Beklemede'),
        (STATUS_COMPANY_PENDING, 'Şirket Onayı Bekliyor'),
        (STATUS_COMPANY_REJECTED, 'Şirket Reddetti'),
        (STATUS_ADVISOR_PENDING, 'Danışman Onayı Bekliyor'),
        (STATUS_ADVISOR_REJECTED, 'Danışman Reddetti'),
        (STATUS_APPROVED, 'Onaylandı'),
        (STATUS_REJECTED, 'Reddedildi'),
    ]

    REUPLOAD_STATUSES = (STATUS_COMPANY_REJECTED, STATUS_ADVISOR_REJECTED, STATUS_REJECTED)
    LOCKED_STATUSES = (STATUS_APPROVED, STATUS_COMPANY_REJECTED, STATUS_ADVISOR_REJECTED)

    application = models.OneToOneField(
        'internships.InternshipApplication', on_delete=models.CASCADE, related_name='logbook'
    )
    file = models.FileField(upload_to=logbook_upload_to, blank=True, null=True)
    original_file_name = models.CharField(max_length=255, blank=True, null=True)
    file_size = models.PositiveIntegerField(blank=True, null=True)
    upload_date = models.DateTimeField(blank=True, null=True)

    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    company_decision = models.SmallIntegerField(default=0)
    advisor_decision = models.SmallIntegerField(default=0)
    reject_reason = models.TextField(blank=True, null=True)
    company_approved_at = models.DateTimeField(blank=True, null=True)
    advisor_approved_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Defter #{self.id} - {self.application.institution_name} - {self.status}"

    @property
    def has_file(self):
        return bool(self.file and self.file.name)

    def clear_file(self):
        if self.has_file:
            self.file.delete(save=False)
        self.file = None
        self.original_file_name = None
        self.file_size = None
        self.upload_date = None
