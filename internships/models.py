from django.db import models
from django.conf import settings
from django.utils import timezone

from . import workflow


def application_upload_to(instance, filename):
    return f"basvurular/{instance.student_id}/{filename}"


def exemption_upload_to(instance, filename):
    return f"muafiyet/{instance.student_id}/{filename}"


class InternshipApplication(models.Model):
    TYPE_IMU_402 = 'IMU_402'
    TYPE_IMU_404 = 'IMU_404'

    TYPE_CHOICES = [
        (TYPE_IMU_402, 'IMU 402'),
        (TYPE_IMU_404, 'IMU 404'),
        ('MESLEKI_EGITIM_UYGULAMALI_DERS', 'Mesleki Eğitim Uygulamalı Ders'),
        ('ISTEGE_BAGLI_STAJ', 'İsteğe Bağlı Staj'),
        ('ZORUNLU_STAJ', 'Zorunlu Staj'),
    ]

    STATUS_CHOICES = [
        (workflow.ADVISOR_PENDING, 'Danışman Onayı Bekliyor'),
        (workflow.CAREER_CENTER_PENDING, 'Kariyer Merkezi Onayı Bekliyor'),
        (workflow.COMPANY_PENDING, 'Şirket Onayı Bekliyor'),
        (workflow.APPROVED, 'Onaylandı'),
        (workflow.REJECTED, 'Reddedildi'),
        (workflow.CANCELLED, 'İptal Edildi'),
    ]

    INSURANCE_CHOICES = [
        ('ALIYORUM', 'Alıyorum'),
        ('ALMIYORUM', 'Almıyorum'),
    ]
    ABROAD_CHOICES = [
        ('yurtiçi', 'Yurt içi'),
        ('yurtdışı', 'Yurt dışı'),
    ]
    TURKISH_COMPANY_CHOICES = [
        ('evet', 'Evet'),
        ('hayır', 'Hayır'),
    ]
    DECISION_CHOICES = [
        (workflow.DECISION_REJECTED, 'Reddedildi'),
        (workflow.DECISION_PENDING, 'Bekliyor'),
        (workflow.DECISION_APPROVED, 'Onaylandı'),
    ]

    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='applications')

    # institution
    institution_name = models.CharField(max_length=100)
    institution_address = models.CharField(max_length=300)
    contact_phone = models.CharField(max_length=20)
    contact_email = models.EmailField()
    authority_name = models.CharField(max_length=100)
    authority_title = models.CharField(max_length=100)

    # internship terms
    internship_type = models.CharField(max_length=40, choices=TYPE_CHOICES)
    start_date = models.DateField()
    end_date = models.DateField()
    selected_days = models.CharField(max_length=50)
    total_days = models.PositiveIntegerField()
    health_insurance = models.CharField(max_length=10, choices=INSURANCE_CHOICES)
    abroad = models.CharField(max_length=10, choices=ABROAD_CHOICES, blank=True, null=True)
    turkish_company = models.CharField(max_length=10, choices=TURKISH_COMPANY_CHOICES, blank=True, null=True)

    # documents
    transcript_file = models.FileField(upload_to=application_upload_to, blank=True, null=True)
    service_record_file = models.FileField(upload_to=application_upload_to, blank=True, null=True)
    insurance_file = models.FileField(upload_to=application_upload_to, blank=True, null=True)
    approval_letter = models.FileField(upload_to="onay_belgeleri/", blank=True, null=True)

    # workflow
    advisor_email = models.EmailField()
    status = models.CharField(max_length=40, choices=STATUS_CHOICES, default=workflow.ADVISOR_PENDING, db_index=True)
    advisor_decision = models.SmallIntegerField(choices=DECISION_CHOICES, default=workflow.DECISION_PENDING)
    career_center_decision = models.SmallIntegerField(choices=DECISION_CHOICES, default=workflow.DECISION_PENDING)
    company_decision = models.SmallIntegerField(choices=DECISION_CHOICES, default=workflow.DECISION_PENDING)
    advisor_note = models.TextField(blank=True, null=True)
    career_center_note = models.TextField(blank=True, null=True)
    company_note = models.TextField(blank=True, null=True)
    cancel_reason = models.TextField(blank=True, null=True)
    approved_at = models.DateTimeField(blank=True, null=True)

    # dual major (CAP)
    is_cap_application = models.BooleanField(default=False)
    cap_record = models.ForeignKey('users.CapUser', on_delete=models.SET_NULL, blank=True, null=True,
                                   related_name='applications')
    cap_faculty = models.CharField(max_length=255, blank=True, null=True)
    cap_department = models.CharField(max_length=255, blank=True, null=True)
    cap_program = models.CharField(max_length=255, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.student} - {self.institution_name} - {self.get_status_display()}"

    @property
    def is_cancelled(self):
        return self.status == workflow.CANCELLED

    @property
    def department(self):
        return self.cap_department or getattr(self.student, 'department', None)

    def derived_status(self):
        return workflow.status_from_decisions(
            self.advisor_decision,
            self.career_center_decision,
            self.company_decision,
            cancelled=self.is_cancelled,
        )

    def apply_decision(self, actor, decision, note=None):
        """
        Move the application through the workflow and update the matching
        decision field. Raises workflow.InvalidTransition. Does not save.
        """
        new_status = workflow.next_status(self.status, actor, decision)

        if decision == workflow.CANCEL:
            self.cancel_reason = note
        else:
            value = workflow.DECISION_APPROVED if decision == workflow.APPROVE else workflow.DECISION_REJECTED
            setattr(self, workflow.DECISION_FIELD[actor], value)
            note_field = {
                workflow.ADVISOR: 'advisor_note',
                workflow.CAREER_CENTER: 'career_center_note',
                workflow.COMPANY: 'company_note',
            }[actor]
            if note:
                setattr(self, note_field, note)
            if decision == workflow.REJECT:
                self.cancel_reason = note

        self.status = new_status
        if new_status == workflow.APPROVED:
            self.approved_at = timezone.now()
        return new_status

    def days_since_approval(self, now=None):
        if not self.approved_at:
            return None
        now = now or timezone.now()
        return (now - self.approved_at).total_seconds() / 86400


class ExemptionApplication(models.Model):
    STATUS_CHOICES = [
        (workflow.ADVISOR_PENDING, 'Danışman Onayı Bekliyor'),
        (workflow.APPROVED, 'Onaylandı'),
        (workflow.REJECTED, 'Reddedildi'),
    ]

    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                related_name='exemption_applications')
    sgk4a_file = models.FileField(upload_to=exemption_upload_to)
    advisor_email = models.EmailField()
    status = models.CharField(max_length=40, choices=STATUS_CHOICES, default=workflow.ADVISOR_PENDING)
    advisor_decision = models.SmallIntegerField(choices=InternshipApplication.DECISION_CHOICES,
                                                default=workflow.DECISION_PENDING)
    advisor_note = models.TextField(blank=True, null=True)

    is_cap_application = models.BooleanField(default=False)
    cap_record = models.ForeignKey('users.CapUser', on_delete=models.SET_NULL, blank=True, null=True,
                                   related_name='exemption_applications')
    cap_department = models.CharField(max_length=255, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Muafiyet - {self.student} - {self.get_status_display()}"

    @property
    def is_evaluated(self):
        return self.advisor_decision != workflow.DECISION_PENDING
