import shutil
import tempfile
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from admin_panel.models import AdminActivity
from companies.models import CompanyOTP
from internship_tracking_system.exceptions import BadRequestError, ForbiddenError, NotFoundError
from internships import workflow
from internships.models import InternshipApplication
from . import services
from .models import Logbook
from .utils import display_status, upload_deadline, STATUS_NOT_STARTED, STATUS_IN_PROGRESS

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()


def pdf(name='defter.pdf', content=b'%PDF-1.4\n%test logbook\n'):
    return SimpleUploadedFile(name, content, content_type='application/pdf')


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class LogbookTestCase(TestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.today = timezone.localdate()
        self.advisor = User.objects.create_user(
            username='ahmet.hoca', email='ahmet.hoca@uni.edu.tr', role=User.ROLE_ADVISOR,
        )
        self.student = User.objects.create_user(
            username='20201234', email='20201234@std.uni.edu.tr', name='Ayşe Yılmaz', advisor=self.advisor,
        )
        self.application = InternshipApplication.objects.create(
            student=self.student,
            institution_name='Örnek Yazılım A.Ş.',
            institution_address='Teknopark Cad. No:1 İstanbul',
            contact_phone='0212 555 1234',
            contact_email='ik@ornek.com.tr',
            authority_name='Mehmet Demir',
            authority_title='İK Müdürü',
            internship_type='ZORUNLU_STAJ',
            start_date=self.today - timedelta(days=20),
            end_date=self.today + timedelta(days=10),
            selected_days='Pzt,Sal,Çar,Per,Cum',
            total_days=25,
            health_insurance='ALMIYORUM',
            advisor_email='ahmet.hoca@uni.edu.tr',
            status=workflow.APPROVED,
            approved_at=timezone.now() - timedelta(days=30),
        )
        self.client = APIClient()

    def _upload_url(self, application_id=None):
        return f'/api/ogrenci/defter/{application_id or self.application.id}/upload-pdf/'

    def test_student_uploads_logbook(self):
        """First upload goes to the company with a fresh code"""
        self.client.force_authenticate(user=self.student)
        response = self.client.post(self._upload_url(), {'file': pdf()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['defter']['status'], Logbook.STATUS_COMPANY_PENDING)

        logbook = Logbook.objects.get(application=self.application)
        self.assertTrue(logbook.has_file)
        self.assertEqual(logbook.original_file_name, 'defter.pdf')

        otp = CompanyOTP.objects.get(logbook=logbook, purpose=CompanyOTP.PURPOSE_LOGBOOK)
        self.assertEqual(mail.outbox[-1].to, [otp.email])
        self.assertTrue(AdminActivity.objects.filter(action='UPLOAD', object_id=logbook.id).exists())

    def test_upload_rejects_non_pdf(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(
            self._upload_url(), {'file': pdf(name='defter.docx', content=b'PK\x03\x04')}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            self._upload_url(), {'file': pdf(content=b'not really a pdf')}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_requires_approved_application(self):
        self.application.status = workflow.COMPANY_PENDING
        self.application.save()
        with self.assertRaises(NotFoundError):
            services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)

    def test_upload_window(self):
        """Accepted from the start date until five days after the end date"""
        start, end = self.application.start_date, self.application.end_date
        with self.assertRaises(BadRequestError):
            services.upload_logbook(self.student, self.application.id, pdf(), today=start - timedelta(days=1))
        with self.assertRaises(BadRequestError):
            services.upload_logbook(self.student, self.application.id, pdf(), today=end + timedelta(days=6))

        logbook = services.upload_logbook(self.student, self.application.id, pdf(), today=end + timedelta(days=5))
        self.assertEqual(logbook.status, Logbook.STATUS_COMPANY_PENDING)
        self.assertEqual(upload_deadline(self.application), end + timedelta(days=5))

    def test_reupload_only_after_rejection(self):
        logbook = services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)
        with self.assertRaises(BadRequestError):
            services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)

        services.company_decide(logbook, workflow.REJECT, reason='Eksik sayfalar var')
        logbook.refresh_from_db()
        self.assertEqual(logbook.status, Logbook.STATUS_COMPANY_REJECTED)

        # outside the first-upload window, still allowed as a replacement
        later = self.application.end_date + timedelta(days=30)
        logbook = services.upload_logbook(
            self.student, self.application.id, pdf(name='defter-v2.pdf'), today=later
        )
        self.assertEqual(logbook.status, Logbook.STATUS_COMPANY_PENDING)
        self.assertEqual(logbook.original_file_name, 'defter-v2.pdf')
        self.assertIsNone(logbook.reject_reason)
        self.assertEqual(
            CompanyOTP.objects.filter(logbook=logbook, is_used=False).count(), 1
        )

    def test_full_logbook_approval(self):
        logbook = services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)
        logbook = services.company_decide(logbook, workflow.APPROVE, actor_label='ik@ornek.com.tr')
        self.assertEqual(logbook.status, Logbook.STATUS_ADVISOR_PENDING)
        self.assertIsNotNone(logbook.company_approved_at)
        self.assertIn('ahmet.hoca@uni.edu.tr', [r for m in mail.outbox for r in m.to])

        self.client.force_authenticate(user=self.advisor)
        response = self.client.post(f'/api/danisman/defterler/{logbook.id}/onayla/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Logbook.STATUS_APPROVED)

        response = self.client.post(f'/api/danisman/defterler/{logbook.id}/onayla/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_advisor_cannot_act_before_company(self):
        logbook = services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)
        with self.assertRaises(ForbiddenError):
            services.advisor_decide(logbook, workflow.APPROVE, user=self.advisor)

    def test_advisor_reject_needs_reason(self):
        logbook = services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)
        services.company_decide(logbook, workflow.APPROVE)

        self.client.force_authenticate(user=self.advisor)
        response = self.client.post(f'/api/danisman/defterler/{logbook.id}/reddet/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            f'/api/danisman/defterler/{logbook.id}/reddet/', {'reason': 'İmzalar eksik'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Logbook.STATUS_ADVISOR_REJECTED)
        self.assertEqual(response.data['reject_reason'], 'İmzalar eksik')

    def test_student_deletes_pending_file(self):
        logbook = services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)

        self.client.force_authenticate(user=self.student)
        response = self.client.delete(f'/api/ogrenci/defter/{logbook.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        logbook.refresh_from_db()
        self.assertFalse(logbook.has_file)
        self.assertEqual(logbook.status, Logbook.STATUS_PENDING)

    def test_delete_locked_logbook(self):
        logbook = services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)
        services.company_decide(logbook, workflow.REJECT, reason='Eksik sayfalar var')

        self.client.force_authenticate(user=self.student)
        response = self.client.delete(f'/api/ogrenci/defter/{logbook.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Onaylanan veya reddedilen defterler silinemez.")

    def test_student_downloads_own_logbook(self):
        logbook = services.upload_logbook(self.student, self.application.id, pdf(), today=self.today)
        self.client.force_authenticate(user=self.student)
        response = self.client.get(f'/api/ogrenci/defter/{logbook.id}/download/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(b"".join(response.streaming_content).startswith(b"%PDF"))

        other = User.objects.create_user(username='20209999')
        self.client.force_authenticate(user=other)
        response = self.client.get(f'/api/ogrenci/defter/{logbook.id}/download/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_display_status(self):
        logbook = Logbook.objects.create(application=self.application)
        start, end = self.application.start_date, self.application.end_date

        self.assertEqual(display_status(logbook, today=start - timedelta(days=1)), STATUS_NOT_STARTED)
        self.assertEqual(display_status(logbook, today=start), STATUS_IN_PROGRESS)
        self.assertEqual(display_status(logbook, today=end + timedelta(days=1)), Logbook.STATUS_PENDING)

        logbook.status = Logbook.STATUS_COMPANY_PENDING
        self.assertEqual(display_status(logbook, today=start - timedelta(days=1)), Logbook.STATUS_COMPANY_PENDING)

    def test_student_list_shows_logbook_of_approved_application(self):
        Logbook.objects.create(application=self.application)
        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/ogrenci/defter/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['display_status'], STATUS_IN_PROGRESS)
        self.assertFalse(response.data[0]['has_file'])
