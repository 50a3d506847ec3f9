import shutil
import tempfile
from datetime import timedelta
from io import StringIO

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from admin_panel.models import AdminActivity, Notification
from companies.models import CompanyOTP
from internship_tracking_system.exceptions import BadRequestError
from logbooks.models import Logbook
from users.models import CapUser
from . import services, workflow
from .advisors import resolve_advisor
from .models import InternshipApplication, ExemptionApplication
from .reminders import auto_cancel_overdue, send_pending_reminders
from .validators import total_days_errors, date_range_errors, IMU_404_MESSAGE, MIN_DAYS_MESSAGE

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()


def create_people():
    advisor = User.objects.create_user(
        username='ahmet.hoca',
        email='Ahmet.Hoca@uni.edu.tr',
        password='x',
        name='Ahmet Hoca',
        role=User.ROLE_ADVISOR,
    )
    student = User.objects.create_user(
        username='20201234',
        email='20201234@std.uni.edu.tr',
        password='x',
        name='Ayşe Yılmaz',
        student_number='20201234',
        department='Bilgisayar Mühendisliği',
        advisor=advisor,
    )
    career = User.objects.create_user(
        username='kariyer',
        email='kariyer@uni.edu.tr',
        password='x',
        role=User.ROLE_CAREER_CENTER,
    )
    return advisor, student, career


def create_application(student, advisor_email='ahmet.hoca@uni.edu.tr', **overrides):
    start = timezone.localdate() + timedelta(days=30)
    fields = dict(
        student=student,
        institution_name='Örnek Yazılım A.Ş.',
        institution_address='Teknopark Cad. No:1 İstanbul',
        contact_phone='0212 555 1234',
        contact_email='ik@ornek.com.tr',
        authority_name='Mehmet Demir',
        authority_title='İK Müdürü',
        internship_type='ZORUNLU_STAJ',
        start_date=start,
        end_date=start + timedelta(days=40),
        selected_days='Pzt,Sal,Çar,Per,Cum',
        total_days=30,
        health_insurance='ALMIYORUM',
        advisor_email=advisor_email,
    )
    fields.update(overrides)
    return InternshipApplication.objects.create(**fields)


def submission(**overrides):
    start = timezone.localdate() + timedelta(days=30)
    data = {
        'institution_name': 'Örnek Yazılım A.Ş.',
        'institution_address': 'Teknopark Cad. No:1 İstanbul',
        'contact_phone': '0212 555 1234',
        'contact_email': 'IK@Ornek.com.tr',
        'authority_name': 'Mehmet Demir',
        'authority_title': 'İK Müdürü',
        'internship_type': 'ZORUNLU_STAJ',
        'start_date': start.isoformat(),
        'end_date': (start + timedelta(days=40)).isoformat(),
        'selected_days': 'Pzt,Sal,Çar,Per,Cum',
        'total_days': 30,
        'health_insurance': 'ALMIYORUM',
    }
    data.update(overrides)
    return data


class WorkflowTestCase(SimpleTestCase):
    def test_approval_chain(self):
        """Each stage owner moves the application one step forward"""
        self.assertEqual(
            workflow.next_status(workflow.ADVISOR_PENDING, workflow.ADVISOR, workflow.APPROVE),
            workflow.CAREER_CENTER_PENDING,
        )
        self.assertEqual(
            workflow.next_status(workflow.CAREER_CENTER_PENDING, workflow.CAREER_CENTER, workflow.APPROVE),
            workflow.COMPANY_PENDING,
        )
        self.assertEqual(
            workflow.next_status(workflow.COMPANY_PENDING, workflow.COMPANY, workflow.APPROVE),
            workflow.APPROVED,
        )

    def test_reject_from_any_stage(self):
        for current, actor in workflow.STAGE_OWNER.items():
            self.assertEqual(workflow.next_status(current, actor, workflow.REJECT), workflow.REJECTED)

    def test_wrong_actor(self):
        """Career center cannot act on an application still waiting on the advisor"""
        with self.assertRaises(workflow.InvalidTransition) as ctx:
            workflow.next_status(workflow.ADVISOR_PENDING, workflow.CAREER_CENTER, workflow.APPROVE)
        self.assertEqual(ctx.exception.message, workflow.NOT_PENDING_MESSAGES[workflow.CAREER_CENTER])

    def test_terminal_statuses_are_final(self):
        for current in workflow.TERMINAL_STATUSES:
            for actor in (workflow.ADVISOR, workflow.CAREER_CENTER, workflow.COMPANY):
                with self.assertRaises(workflow.InvalidTransition):
                    workflow.next_status(current, actor, workflow.APPROVE)

    def test_student_cancel_only_while_advisor_pending(self):
        self.assertEqual(
            workflow.next_status(workflow.ADVISOR_PENDING, workflow.STUDENT, workflow.CANCEL),
            workflow.CANCELLED,
        )
        for current in (workflow.CAREER_CENTER_PENDING, workflow.APPROVED, workflow.REJECTED):
            with self.assertRaises(workflow.InvalidTransition):
                workflow.next_status(current, workflow.STUDENT, workflow.CANCEL)

    def test_system_cancel_any_pending(self):
        for current in workflow.PENDING_STATUSES:
            self.assertEqual(
                workflow.next_status(current, workflow.SYSTEM, workflow.CANCEL), workflow.CANCELLED
            )
        with self.assertRaises(workflow.InvalidTransition):
            workflow.next_status(workflow.APPROVED, workflow.SYSTEM, workflow.CANCEL)

    def test_status_from_decisions(self):
        P, A, R = workflow.DECISION_PENDING, workflow.DECISION_APPROVED, workflow.DECISION_REJECTED
        self.assertEqual(workflow.status_from_decisions(P, P, P), workflow.ADVISOR_PENDING)
        self.assertEqual(workflow.status_from_decisions(A, P, P), workflow.CAREER_CENTER_PENDING)
        self.assertEqual(workflow.status_from_decisions(A, A, P), workflow.COMPANY_PENDING)
        self.assertEqual(workflow.status_from_decisions(A, A, A), workflow.APPROVED)
        self.assertEqual(workflow.status_from_decisions(A, R, P), workflow.REJECTED)
        self.assertEqual(workflow.status_from_decisions(A, A, A, cancelled=True), workflow.CANCELLED)

    def test_is_forward(self):
        self.assertTrue(workflow.is_forward(workflow.ADVISOR_PENDING, workflow.COMPANY_PENDING))
        self.assertTrue(workflow.is_forward(workflow.CAREER_CENTER_PENDING, workflow.REJECTED))
        self.assertFalse(workflow.is_forward(workflow.COMPANY_PENDING, workflow.ADVISOR_PENDING))
        self.assertFalse(workflow.is_forward(workflow.APPROVED, workflow.CANCELLED))

    def test_decisions_for_agree_with_status(self):
        for status_value in (workflow.ADVISOR_PENDING, workflow.CAREER_CENTER_PENDING,
                             workflow.COMPANY_PENDING, workflow.APPROVED):
            self.assertEqual(workflow.status_from_decisions(*workflow.decisions_for(status_value)), status_value)
        self.assertEqual(
            workflow.decisions_for(workflow.REJECTED, rejected_by=workflow.CAREER_CENTER),
            (workflow.DECISION_APPROVED, workflow.DECISION_REJECTED, workflow.DECISION_PENDING),
        )


class ValidatorTestCase(SimpleTestCase):
    def test_imu_404_needs_exactly_70_days(self):
        self.assertIsNone(total_days_errors('IMU_404', 70))
        self.assertEqual(total_days_errors('IMU_404', 69), IMU_404_MESSAGE)
        self.assertEqual(total_days_errors('IMU_404', 71), IMU_404_MESSAGE)

    def test_day_bounds(self):
        self.assertEqual(total_days_errors('IMU_402', 0), MIN_DAYS_MESSAGE)
        self.assertIsNone(total_days_errors('IMU_402', 20))
        self.assertIsNotNone(total_days_errors('ZORUNLU_STAJ', 366))

    def test_date_range(self):
        today = timezone.localdate()
        self.assertIn('start_date', date_range_errors(today + timedelta(days=3), today + timedelta(days=30), today))
        self.assertIn('end_date', date_range_errors(today + timedelta(days=20), today + timedelta(days=20), today))
        self.assertEqual(date_range_errors(today + timedelta(days=10), today + timedelta(days=40), today), {})
        self.assertEqual(
            date_range_errors(today + timedelta(days=3), today + timedelta(days=30), today, check_lead_time=False), {}
        )


class AdvisorResolutionTestCase(TestCase):
    def setUp(self):
        self.advisor, self.student, _ = create_people()
        self.cap_advisor = User.objects.create_user(
            username='cap.hoca', email='cap.hoca@uni.edu.tr', role=User.ROLE_ADVISOR,
        )

    def test_primary_advisor(self):
        resolution = resolve_advisor(self.student)
        self.assertEqual(resolution.email, 'ahmet.hoca@uni.edu.tr')
        self.assertEqual(resolution.source, 'primary')
        self.assertIsNone(resolution.cap_record)

    def test_zero_cap_id_means_primary(self):
        for cap_id in (0, '0', '', None):
            self.assertEqual(resolve_advisor(self.student, cap_id).source, 'primary')

    def test_cap_advisor_wins(self):
        record = CapUser.objects.create(student=self.student, cap_program='Fizik ÇAP', cap_advisor=self.cap_advisor)
        resolution = resolve_advisor(self.student, record.id)
        self.assertEqual(resolution.email, 'cap.hoca@uni.edu.tr')
        self.assertEqual(resolution.cap_record, record)

    def test_cap_without_advisor_falls_back(self):
        record = CapUser.objects.create(student=self.student, cap_program='Fizik ÇAP')
        resolution = resolve_advisor(self.student, record.id)
        self.assertEqual(resolution.email, 'ahmet.hoca@uni.edu.tr')
        self.assertEqual(resolution.cap_record, record)

    def test_foreign_cap_record(self):
        other = User.objects.create_user(username='20209999')
        record = CapUser.objects.create(student=other, cap_program='Fizik ÇAP', cap_advisor=self.cap_advisor)
        with self.assertRaises(BadRequestError):
            resolve_advisor(self.student, record.id)

    def test_no_advisor(self):
        self.student.advisor = None
        self.student.save()
        with self.assertRaises(BadRequestError):
            resolve_advisor(self.student)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ApplicationApiTestCase(TestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.advisor, self.student, self.career = create_people()
        self.client = APIClient()

    def test_student_submits_application(self):
        """Submission is routed to the advisor, logged and mailed"""
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/ogrenci/basvuru/', submission(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        application = InternshipApplication.objects.get(pk=response.data['basvuru']['id'])
        self.assertEqual(application.status, workflow.ADVISOR_PENDING)
        self.assertEqual(application.advisor_email, 'ahmet.hoca@uni.edu.tr')
        self.assertEqual(application.contact_email, 'ik@ornek.com.tr')
        self.assertTrue(AdminActivity.objects.filter(action='CREATE', object_id=application.id).exists())
        self.assertTrue(Notification.objects.filter(title="Yeni Staj Başvurusu").exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['ahmet.hoca@uni.edu.tr'])

    def test_imu_404_day_count(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(
            '/api/ogrenci/basvuru/', submission(internship_type='IMU_404', total_days=69), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors']['total_days'], IMU_404_MESSAGE)

        response = self.client.post(
            '/api/ogrenci/basvuru/', submission(internship_type='IMU_404', total_days=70), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_start_date_too_soon(self):
        self.client.force_authenticate(user=self.student)
        start = timezone.localdate() + timedelta(days=2)
        response = self.client.post('/api/ogrenci/basvuru/', submission(
            start_date=start.isoformat(), end_date=(start + timedelta(days=30)).isoformat(),
        ), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('start_date', response.data['errors'])

    def test_invalid_document_type(self):
        self.client.force_authenticate(user=self.student)
        data = submission()
        data['transcript_file'] = SimpleUploadedFile('transkript.exe', b'MZ', content_type='application/octet-stream')
        response = self.client.post('/api/ogrenci/basvuru/', data, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('transcript_file', response.data['errors'])

    def test_student_without_advisor(self):
        self.student.advisor = None
        self.student.save()
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/ogrenci/basvuru/', submission(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(InternshipApplication.objects.exists())

    def test_other_roles_cannot_submit(self):
        self.client.force_authenticate(user=self.advisor)
        response = self.client.post('/api/ogrenci/basvuru/', submission(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_sees_only_own_applications(self):
        other = User.objects.create_user(username='20207777', advisor=self.advisor)
        own = create_application(self.student)
        foreign = create_application(other)

        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/ogrenci/basvuru/')
        self.assertEqual([item['id'] for item in response.data], [own.id])

        response = self.client.get(f'/api/ogrenci/basvuru/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_full_approval_chain(self):
        """Advisor, career center and company approve; the letter is stored and mailed"""
        application = create_application(self.student)

        self.client.force_authenticate(user=self.advisor)
        response = self.client.post(f'/api/danisman/basvurular/{application.id}/onayla/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], workflow.CAREER_CENTER_PENDING)
        self.assertTrue(Logbook.objects.filter(application=application).exists())

        self.client.force_authenticate(user=self.career)
        response = self.client.post(f'/api/kariyer-merkezi/basvurular/{application.id}/onayla/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], workflow.COMPANY_PENDING)

        otp = CompanyOTP.objects.get(application=application, purpose=CompanyOTP.PURPOSE_APPLICATION)
        self.assertEqual(otp.email, 'ik@ornek.com.tr')
        self.assertTrue(any(otp.code in message.body for message in mail.outbox))

        mail.outbox = []
        application = services.decide(application, workflow.COMPANY, workflow.APPROVE, actor_label=otp.email)
        application.refresh_from_db()
        self.assertEqual(application.status, workflow.APPROVED)
        self.assertEqual(
            (application.advisor_decision, application.career_center_decision, application.company_decision),
            (1, 1, 1),
        )
        self.assertIsNotNone(application.approved_at)
        self.assertTrue(application.approval_letter.name)

        student_mail = [m for m in mail.outbox if m.to == [self.student.email]]
        self.assertEqual(len(student_mail), 1)
        self.assertEqual(student_mail[0].attachments[0][0], f"staj_onay_{application.id}.pdf")

        self.client.force_authenticate(user=self.student)
        response = self.client.get(f'/api/ogrenci/basvuru/{application.id}/onay-belgesi/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(b"".join(response.streaming_content)[:4], b"%PDF")

    def test_career_center_rejects(self):
        application = create_application(self.student)
        services.decide(application, workflow.ADVISOR, workflow.APPROVE, user=self.advisor)

        self.client.force_authenticate(user=self.career)
        response = self.client.post(
            f'/api/kariyer-merkezi/basvurular/{application.id}/reddet/',
            {'reason': 'Sigorta belgesi eksik'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        application.refresh_from_db()
        self.assertEqual(application.status, workflow.REJECTED)
        self.assertEqual(application.career_center_note, 'Sigorta belgesi eksik')
        self.assertEqual(
            (application.advisor_decision, application.career_center_decision, application.company_decision),
            (1, -1, 0),
        )
        self.assertEqual(application.derived_status(), application.status)

    def test_reject_requires_reason(self):
        application = create_application(self.student)
        self.client.force_authenticate(user=self.advisor)
        response = self.client.post(f'/api/danisman/basvurular/{application.id}/reddet/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_advisor_cannot_decide_twice(self):
        application = create_application(self.student)
        self.client.force_authenticate(user=self.advisor)
        self.client.post(f'/api/danisman/basvurular/{application.id}/onayla/', {}, format='json')
        response = self.client.post(f'/api/danisman/basvurular/{application.id}/onayla/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], workflow.NOT_PENDING_MESSAGES[workflow.ADVISOR])

    def test_advisor_only_sees_routed_applications(self):
        other_advisor = User.objects.create_user(
            username='diger.hoca', email='diger@uni.edu.tr', role=User.ROLE_ADVISOR,
        )
        application = create_application(self.student)

        self.client.force_authenticate(user=other_advisor)
        response = self.client.post(f'/api/danisman/basvurular/{application.id}/onayla/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_career_center_cannot_skip_advisor(self):
        application = create_application(self.student)
        self.client.force_authenticate(user=self.career)
        response = self.client.post(f'/api/kariyer-merkezi/basvurular/{application.id}/onayla/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_cancels_pending_application(self):
        application = create_application(self.student)
        self.client.force_authenticate(user=self.student)
        response = self.client.post(
            f'/api/ogrenci/basvuru/{application.id}/iptal/',
            {'cancel_reason': 'Başka bir kurumda staj buldum'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        application.refresh_from_db()
        self.assertEqual(application.status, workflow.CANCELLED)
        self.assertEqual(application.cancel_reason, 'Başka bir kurumda staj buldum')

    def test_cancel_approved_application_forbidden(self):
        application = create_application(self.student, status=workflow.APPROVED, approved_at=timezone.now())
        self.client.force_authenticate(user=self.student)
        response = self.client.post(
            f'/api/ogrenci/basvuru/{application.id}/iptal/',
            {'cancel_reason': 'Başka bir kurumda staj buldum'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], workflow.STUDENT_CANCEL_MESSAGE)

    def test_amend_dates_within_window(self):
        application = create_application(
            self.student, status=workflow.APPROVED, approved_at=timezone.now() - timedelta(days=2),
        )
        start = timezone.localdate() + timedelta(days=45)
        self.client.force_authenticate(user=self.student)
        response = self.client.put(f'/api/ogrenci/basvuru/{application.id}/tarih/', {
            'start_date': start.isoformat(),
            'end_date': (start + timedelta(days=35)).isoformat(),
            'total_days': 25,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        application.refresh_from_db()
        self.assertEqual(application.start_date, start)
        self.assertEqual(application.total_days, 25)

    def test_amend_end_date_when_start_is_near(self):
        start = timezone.localdate() + timedelta(days=7)
        application = create_application(
            self.student, status=workflow.APPROVED, approved_at=timezone.now() - timedelta(days=1),
            start_date=start, end_date=start + timedelta(days=40),
        )
        self.client.force_authenticate(user=self.student)
        response = self.client.put(f'/api/ogrenci/basvuru/{application.id}/tarih/', {
            'start_date': start.isoformat(),
            'end_date': (start + timedelta(days=50)).isoformat(),
            'total_days': 36,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        application.refresh_from_db()
        self.assertEqual(application.end_date, start + timedelta(days=50))
        self.assertEqual(application.total_days, 36)

    def test_amend_dates_rejects_end_before_start(self):
        application = create_application(
            self.student, status=workflow.APPROVED, approved_at=timezone.now() - timedelta(days=1),
        )
        self.client.force_authenticate(user=self.student)
        response = self.client.put(f'/api/ogrenci/basvuru/{application.id}/tarih/', {
            'start_date': application.start_date.isoformat(),
            'end_date': application.start_date.isoformat(),
            'total_days': 30,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        application.refresh_from_db()
        self.assertEqual(application.end_date, application.start_date + timedelta(days=40))

    def test_amend_dates_after_window(self):
        application = create_application(
            self.student, status=workflow.APPROVED, approved_at=timezone.now() - timedelta(days=6),
        )
        start = timezone.localdate() + timedelta(days=45)
        self.client.force_authenticate(user=self.student)
        response = self.client.put(f'/api/ogrenci/basvuru/{application.id}/tarih/', {
            'start_date': start.isoformat(),
            'end_date': (start + timedelta(days=35)).isoformat(),
            'total_days': 25,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_amend_dates_only_when_approved(self):
        application = create_application(self.student)
        start = timezone.localdate() + timedelta(days=45)
        self.client.force_authenticate(user=self.student)
        response = self.client.put(f'/api/ogrenci/basvuru/{application.id}/tarih/', {
            'start_date': start.isoformat(),
            'end_date': (start + timedelta(days=35)).isoformat(),
            'total_days': 25,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_approval_letter_missing_before_approval(self):
        application = create_application(self.student)
        self.client.force_authenticate(user=self.student)
        response = self.client.get(f'/api/ogrenci/basvuru/{application.id}/onay-belgesi/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_statistics(self):
        create_application(self.student)
        create_application(self.student, status=workflow.APPROVED)
        create_application(self.student, status=workflow.CANCELLED)

        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/ogrenci/istatistik/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['toplam'], 3)
        self.assertEqual(response.data['beklemede'], 1)
        self.assertEqual(response.data['onaylandi'], 1)
        self.assertEqual(response.data['iptalEdildi'], 1)

    def test_advisor_student_list_includes_cap_students(self):
        cap_student = User.objects.create_user(username='20208888', name='Cap Öğrenci')
        CapUser.objects.create(student=cap_student, cap_program='Fizik ÇAP', cap_advisor=self.advisor)

        self.client.force_authenticate(user=self.advisor)
        response = self.client.get('/api/danisman/ogrenciler/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({item['username'] for item in response.data}, {'20201234', '20208888'})

    def test_career_center_directory(self):
        self.client.force_authenticate(user=self.career)
        response = self.client.get('/api/kariyer-merkezi/danismanlar/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['username'] for item in response.data], ['ahmet.hoca'])

    def test_resend_company_otp(self):
        application = create_application(self.student, status=workflow.COMPANY_PENDING)
        first = CompanyOTP.generate_for(application, CompanyOTP.PURPOSE_APPLICATION)

        self.client.force_authenticate(user=self.career)
        response = self.client.post(f'/api/kariyer-merkezi/basvurular/{application.id}/otp-yenile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        first.refresh_from_db()
        self.assertTrue(first.is_used)
        self.assertEqual(CompanyOTP.objects.filter(application=application, is_used=False).count(), 1)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ExemptionTestCase(TestCase):
    def setUp(self):
        self.advisor, self.student, _ = create_people()
        self.client = APIClient()

    def _submit(self):
        self.client.force_authenticate(user=self.student)
        upload = SimpleUploadedFile('sgk4a.pdf', b'%PDF-1.4 test', content_type='application/pdf')
        return self.client.post('/api/ogrenci/muafiyet-basvuru/', {'sgk4a_file': upload}, format='multipart')

    def test_submit_exemption(self):
        response = self._submit()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        exemption = ExemptionApplication.objects.get()
        self.assertEqual(exemption.advisor_email, 'ahmet.hoca@uni.edu.tr')
        self.assertEqual(exemption.status, workflow.ADVISOR_PENDING)

        advisor_mails = [m for m in mail.outbox if m.subject.startswith('[MUAFIYET]')]
        self.assertEqual(len(advisor_mails), 1)
        self.assertEqual(advisor_mails[0].to, ['ahmet.hoca@uni.edu.tr'])

    def test_student_mailed_on_rejection(self):
        self._submit()
        exemption = ExemptionApplication.objects.get()
        mail.outbox = []

        self.client.force_authenticate(user=self.advisor)
        response = self.client.post(
            f'/api/danisman/muafiyet-basvuru/{exemption.id}/reddet/', {'reason': 'SGK belgesi okunmuyor'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['20201234@std.uni.edu.tr'])
        self.assertIn('SGK belgesi okunmuyor', mail.outbox[0].body)

    def test_exemption_decided_once(self):
        self._submit()
        exemption = ExemptionApplication.objects.get()

        self.client.force_authenticate(user=self.advisor)
        response = self.client.post(f'/api/danisman/muafiyet-basvuru/{exemption.id}/onayla/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], workflow.APPROVED)
        self.assertTrue(any(m.to == ['20201234@std.uni.edu.tr'] for m in mail.outbox))

        response = self.client.post(
            f'/api/danisman/muafiyet-basvuru/{exemption.id}/reddet/', {'reason': 'Hatalı belge'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ReminderTestCase(TestCase):
    def setUp(self):
        self.advisor, self.student, _ = create_people()

    def test_auto_cancel_close_to_start(self):
        today = timezone.localdate()
        soon = create_application(self.student, start_date=today + timedelta(days=3),
                                  end_date=today + timedelta(days=40))
        later = create_application(self.student)
        approved = create_application(self.student, status=workflow.APPROVED,
                                      start_date=today + timedelta(days=3), end_date=today + timedelta(days=40))

        cancelled = auto_cancel_overdue(today=today)
        self.assertEqual([a.id for a in cancelled], [soon.id])

        soon.refresh_from_db()
        later.refresh_from_db()
        approved.refresh_from_db()
        self.assertEqual(soon.status, workflow.CANCELLED)
        self.assertEqual(later.status, workflow.ADVISOR_PENDING)
        self.assertEqual(approved.status, workflow.APPROVED)
        self.assertTrue(AdminActivity.objects.filter(action='CANCEL', actor_label='system').exists())

    def test_reminder_goes_to_pending_party(self):
        stalled = create_application(self.student, status=workflow.COMPANY_PENDING)
        fresh = create_application(self.student)
        InternshipApplication.objects.filter(pk=stalled.pk).update(updated_at=timezone.now() - timedelta(days=4))

        sent = send_pending_reminders()
        self.assertEqual(sent, 1)
        self.assertEqual(mail.outbox[-1].to, ['ik@ornek.com.tr'])
        self.assertTrue(AdminActivity.objects.filter(action='REMIND', object_id=stalled.id).exists())
        self.assertFalse(AdminActivity.objects.filter(action='REMIND', object_id=fresh.id).exists())

    def test_management_command(self):
        today = timezone.localdate()
        create_application(self.student, start_date=today + timedelta(days=2), end_date=today + timedelta(days=30))
        out = StringIO()
        call_command('send_reminders', stdout=out)
        self.assertIn("1 application(s) cancelled", out.getvalue())
