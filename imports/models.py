from django.conf import settings
from django.db import models


class UploadJob(models.Model):
    """One bulk roster import and its running counters"""
    TYPE_ADVISOR = 'hoca'
    TYPE_STUDENT = 'ogrenci'
    TYPE_CAP_STUDENT = 'cap-ogrenci'
    TYPE_CHOICES = [
        (TYPE_ADVISOR, 'Danışman Listesi'),
        (TYPE_STUDENT, 'Öğrenci Listesi'),
        (TYPE_CAP_STUDENT, 'CAP Öğrenci Listesi'),
    ]

    STATUS_QUEUED = 'KUYRUKTA'
    STATUS_PROCESSING = 'ISLENIYOR'
    STATUS_COMPLETED = 'TAMAMLANDI'
    STATUS_FAILED = 'HATA'
    STATUS_CANCELLED = 'IPTAL'
    STATUS_CHOICES = [
        (STATUS_QUEUED, 'Kuyrukta'),
        (STATUS_PROCESSING, 'İşleniyor'),
        (STATUS_COMPLETED, 'Tamamlandı'),
        (STATUS_FAILED, 'Hata'),
        (STATUS_CANCELLED, 'İptal'),
    ]
    ACTIVE_STATUSES = (STATUS_QUEUED, STATUS_PROCESSING)

    file_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    file = models.FileField(upload_to="excel/")
    original_name = models.CharField(max_length=255)
    file_size = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_QUEUED, db_index=True)

    total_rows = models.PositiveIntegerField(default=0)
    processed_rows = models.PositiveIntegerField(default=0)
    successful_rows = models.PositiveIntegerField(default=0)
    error_rows = models.PositiveIntegerField(default=0)
    skipped_rows = models.PositiveIntegerField(default=0)
    errors = models.JSONField(default=list, blank=True)
    error_message = models.TextField(blank=True, null=True)

    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='upload_jobs')
    created_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(blank=True, null=True)
    finished_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.original_name} ({self.file_type}) - {self.status}"

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES

    @property
    def percentage(self):
        if not self.total_rows:
            return 0
        return round(self.processed_rows * 100 / self.total_rows)

    def summary(self):
        return {
            'totalRows': self.total_rows,
            'processedRows': self.processed_rows,
            'successfulRows': self.successful_rows,
            'errorRows': self.error_rows,
            'errors': list(self.errors or [])[:20],
        }


class ProgressMessage(models.Model):
    """Persisted push message, so clients can poll what they missed"""
    TYPE_PROGRESS = 'progress_update'
    TYPE_COMPLETE = 'excel_upload_complete'
    TYPE_FAILED = 'excel_upload_failed'
    TYPE_CANCELLED = 'upload_cancelled'
    TYPE_CHOICES = [
        (TYPE_PROGRESS, 'Progress'),
        (TYPE_COMPLETE, 'Complete'),
        (TYPE_FAILED, 'Failed'),
        (TYPE_CANCELLED, 'Cancelled'),
    ]

    job = models.ForeignKey(UploadJob, on_delete=models.CASCADE, related_name='messages')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    message = models.CharField(max_length=500)
    data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def as_payload(self):
        return {
            'id': self.id,
            'type': self.type,
            'dosyaId': self.job_id,
            'message': self.message,
            'data': self.data,
            'timestamp': self.created_at.isoformat(),
        }
