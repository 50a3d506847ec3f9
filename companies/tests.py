import shutil
import tempfile
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from admin_panel.models import AdminActivity
from internships import workflow
from internships.models import InternshipApplication
from logbooks import services as logbook_services
from logbooks.models import Logbook
from .models import CompanyOTP
from .services import INVALID_OTP_MESSAGE

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()


class CompanyOTPModelTestCase(TestCase):
    def setUp(self):
        student = User.objects.create_user(username='20201234', email='20201234@std.uni.edu.tr')
        self.application = InternshipApplication.objects.create(
            student=student,
            institution_name='Örnek Yazılım A.Ş.',
            institution_address='Teknopark Cad. No:1 İstanbul',
            contact_phone='0212 555 1234',
            contact_email='IK@Ornek.com.tr',
            authority_name='Mehmet Demir',
            authority_title='İK Müdürü',
            internship_type='ZORUNLU_STAJ',
            start_date=timezone.localdate() + timedelta(days=30),
            end_date=timezone.localdate() + timedelta(days=70),
            selected_days='Pzt,Sal,Çar,Per,Cum',
            total_days=30,
            health_insurance='ALMIYORUM',
            advisor_email='ahmet.hoca@uni.edu.tr',
            status=workflow.COMPANY_PENDING,
        )

    def test_generate_code(self):
        otp = CompanyOTP.generate_for(self.application, CompanyOTP.PURPOSE_APPLICATION)
        self.assertEqual(len(otp.code), 8)
        self.assertTrue(otp.code.isdigit())
        self.assertEqual(otp.email, 'ik@ornek.com.tr')
        self.assertFalse(otp.is_expired())

    def test_new_code_replaces_old(self):
        first = CompanyOTP.generate_for(self.application, CompanyOTP.PURPOSE_APPLICATION)
        CompanyOTP.generate_for(self.application, CompanyOTP.PURPOSE_APPLICATION)
        first.refresh_from_db()
        self.assertTrue(first.is_used)

    def test_attempt_limit(self):
        otp = CompanyOTP.generate_for(self.application, CompanyOTP.PURPOSE_APPLICATION)
        for _ in range(otp.max_attempts):
            otp.increment_attempt()
        self.assertTrue(otp.is_used)

    def test_clean_expired(self):
        otp = CompanyOTP.generate_for(self.application, CompanyOTP.PURPOSE_APPLICATION)
        CompanyOTP.objects.filter(pk=otp.pk).update(expires_at=timezone.now() - timedelta(minutes=1))
        CompanyOTP.clean_expired_otps()
        self.assertFalse(CompanyOTP.objects.filter(pk=otp.pk).exists())


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class CompanyApiTestCase(TestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.student = User.objects.create_user(
            username='20201234', email='20201234@std.uni.edu.tr', name='Ayşe Yılmaz',
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
            start_date=timezone.localdate() + timedelta(days=30),
            end_date=timezone.localdate() + timedelta(days=70),
            selected_days='Pzt,Sal,Çar,Per,Cum',
            total_days=30,
            health_insurance='ALMIYORUM',
            advisor_email='ahmet.hoca@uni.edu.tr',
            status=workflow.COMPANY_PENDING,
            advisor_decision=workflow.DECISION_APPROVED,
            career_center_decision=workflow.DECISION_APPROVED,
            transcript_file=SimpleUploadedFile('transkript.pdf', b'%PDF-1.4 transcript'),
        )
        self.otp = CompanyOTP.generate_for(self.application, CompanyOTP.PURPOSE_APPLICATION)
        self.client = APIClient()

    def _decide(self, **overrides):
        data = {
            'email': 'ik@ornek.com.tr',
            'otp': self.otp.code,
            'basvuru_id': self.application.id,
            'onay_durumu': workflow.APPROVED,
        }
        data.update(overrides)
        return self.client.post('/api/sirket/onay/', data, format='json')

    def test_login_returns_pending_application(self):
        response = self.client.post('/api/sirket/giris/', {
            'email': 'IK@ornek.com.tr',
            'otp': self.otp.code,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['type'], CompanyOTP.PURPOSE_APPLICATION)
        self.assertEqual(response.data['data']['id'], self.application.id)

    def test_login_wrong_code_counts_attempt(self):
        response = self.client.post('/api/sirket/giris/', {
            'email': 'ik@ornek.com.tr',
            'otp': '00000000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], INVALID_OTP_MESSAGE)

        self.otp.refresh_from_db()
        self.assertEqual(self.otp.attempts, 1)

    def test_code_locked_after_max_attempts(self):
        for _ in range(CompanyOTP.max_attempts):
            self.client.post('/api/sirket/giris/', {'email': 'ik@ornek.com.tr', 'otp': '00000000'}, format='json')

        response = self.client.post('/api/sirket/giris/', {
            'email': 'ik@ornek.com.tr',
            'otp': self.otp.code,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_expired_code(self):
        CompanyOTP.objects.filter(pk=self.otp.pk).update(expires_at=timezone.now() - timedelta(minutes=1))
        response = self.client.post('/api/sirket/giris/', {
            'email': 'ik@ornek.com.tr',
            'otp': self.otp.code,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_company_approval_completes_application(self):
        """Company approval finishes the chain and the code is spent"""
        response = self._decide()
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.application.refresh_from_db()
        self.assertEqual(self.application.status, workflow.APPROVED)
        self.assertEqual(self.application.company_decision, workflow.DECISION_APPROVED)
        self.assertTrue(self.application.approval_letter.name)
        self.assertTrue(AdminActivity.objects.filter(
            action='APPROVE', actor_label='ik@ornek.com.tr', object_id=self.application.id
        ).exists())

        self.otp.refresh_from_db()
        self.assertTrue(self.otp.is_used)

        response = self._decide()
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_company_rejection_needs_reason(self):
        response = self._decide(onay_durumu=workflow.REJECTED)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('red_sebebi', response.data['errors'])

        response = self._decide(onay_durumu=workflow.REJECTED, red_sebebi='Kontenjan doldu')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.application.refresh_from_db()
        self.assertEqual(self.application.status, workflow.REJECTED)
        self.assertEqual(self.application.company_note, 'Kontenjan doldu')

    def test_code_bound_to_application(self):
        other = InternshipApplication.objects.create(
            student=self.student,
            institution_name='Başka Kurum',
            institution_address='Başka Cad. No:2 Ankara',
            contact_phone='0312 555 1234',
            contact_email='ik@ornek.com.tr',
            authority_name='Ali Veli',
            authority_title='Müdür',
            internship_type='ZORUNLU_STAJ',
            start_date=timezone.localdate() + timedelta(days=30),
            end_date=timezone.localdate() + timedelta(days=70),
            selected_days='Pzt,Sal',
            total_days=20,
            health_insurance='ALMIYORUM',
            advisor_email='ahmet.hoca@uni.edu.tr',
            status=workflow.COMPANY_PENDING,
        )
        response = self._decide(basvuru_id=other.id)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        other.refresh_from_db()
        self.assertEqual(other.status, workflow.COMPANY_PENDING)

    def test_download_application_document(self):
        response = self.client.get(
            f'/api/sirket/download/{self.application.id}/transkript/',
            {'email': 'ik@ornek.com.tr', 'otp': self.otp.code},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(b"".join(response.streaming_content), b'%PDF-1.4 transcript')
        self.assertTrue(AdminActivity.objects.filter(action='DOWNLOAD', actor_label='ik@ornek.com.tr').exists())

    def test_download_missing_document(self):
        response = self.client.get(
            f'/api/sirket/download/{self.application.id}/sigorta/',
            {'email': 'ik@ornek.com.tr', 'otp': self.otp.code},
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_download_without_code(self):
        response = self.client.get(f'/api/sirket/download/{self.application.id}/transkript/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class CompanyLogbookTestCase(TestCase):
    def setUp(self):
        today = timezone.localdate()
        student = User.objects.create_user(username='20201234', email='20201234@std.uni.edu.tr')
        self.application = InternshipApplication.objects.create(
            student=student,
            institution_name='Örnek Yazılım A.Ş.',
            institution_address='Teknopark Cad. No:1 İstanbul',
            contact_phone='0212 555 1234',
            contact_email='ik@ornek.com.tr',
            authority_name='Mehmet Demir',
            authority_title='İK Müdürü',
            internship_type='ZORUNLU_STAJ',
            start_date=today - timedelta(days=20),
            end_date=today + timedelta(days=10),
            selected_days='Pzt,Sal,Çar,Per,Cum',
            total_days=25,
            health_insurance='ALMIYORUM',
            advisor_email='ahmet.hoca@uni.edu.tr',
            status=workflow.APPROVED,
            approved_at=timezone.now() - timedelta(days=30),
        )
        upload = SimpleUploadedFile('defter.pdf', b'%PDF-1.4 logbook', content_type='application/pdf')
        self.logbook = logbook_services.upload_logbook(student, self.application.id, upload, today=today)
        self.otp = CompanyOTP.objects.get(logbook=self.logbook, is_used=False)
        self.client = APIClient()

    def test_login_returns_logbook(self):
        response = self.client.post('/api/sirket/giris/', {
            'email': 'ik@ornek.com.tr',
            'otp': self.otp.code,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['type'], CompanyOTP.PURPOSE_LOGBOOK)
        self.assertEqual(response.data['data']['id'], self.logbook.id)

    def test_company_approves_logbook(self):
        response = self.client.post('/api/sirket/defter-onay/', {
            'email': 'ik@ornek.com.tr',
            'otp': self.otp.code,
            'defter_id': self.logbook.id,
            'onay_durumu': workflow.APPROVED,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.logbook.refresh_from_db()
        self.assertEqual(self.logbook.status, Logbook.STATUS_ADVISOR_PENDING)

    def test_company_downloads_logbook(self):
        response = self.client.get(
            f'/api/sirket/download/{self.application.id}/defter/',
            {'email': 'ik@ornek.com.tr', 'otp': self.otp.code},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(b"".join(response.streaming_content), b'%PDF-1.4 logbook')
