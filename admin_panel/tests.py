import shutil
import tempfile
from datetime import timedelta

from django.test import TestCase, override_settings
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework import status
from internships import workflow
from internships.models import InternshipApplication
from .models import AdminActivity, Notification
from .notifications import create_notification
from .utils import log_admin_activity, generate_report

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class AdminPanelTestCase(TestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        # Create admin user
        self.admin_user = User.objects.create_superuser(
            username='admin',
            email='admin@uni.edu.tr',
            password='admin123'
        )

        self.advisor = User.objects.create_user(
            username='ahmet.hoca',
            email='ahmet.hoca@uni.edu.tr',
            name='Ahmet Hoca',
            role=User.ROLE_ADVISOR,
        )

        # Create regular user
        self.student_user = User.objects.create_user(
            username='20201234',
            email='20201234@std.uni.edu.tr',
            password='student123',
            name='Ayşe Yılmaz',
            advisor=self.advisor,
        )

        self.application = InternshipApplication.objects.create(
            student=self.student_user,
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
        )

        self.client = APIClient()

    def test_dashboard_stats_authenticated(self):
        """Test dashboard stats endpoint with authentication"""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get('/api/admin/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pending_approvals'], 1)
        self.assertEqual(response.data['applications']['by_status'][workflow.ADVISOR_PENDING], 1)
        self.assertEqual(response.data['users']['by_role'][User.ROLE_STUDENT], 1)

    def test_dashboard_stats_unauthenticated(self):
        """Test dashboard stats endpoint without authentication"""
        response = self.client.get('/api/admin/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_dashboard_stats_forbidden_for_students(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get('/api/admin/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_report_type(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get('/api/admin/dashboard/report/', {'type': 'exemptions'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 0)

        response = self.client.get('/api/admin/dashboard/report/', {'type': 'bilinmeyen'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_notification(self):
        """Test notification creation"""
        notification = create_notification(
            title="Test Notification",
            message="This is a test",
            priority="HIGH"
        )
        self.assertEqual(notification.title, "Test Notification")
        self.assertFalse(notification.is_read)

    def test_new_application_creates_notification(self):
        self.assertTrue(Notification.objects.filter(title="Yeni Staj Başvurusu").exists())

    def test_notifications_for_staff(self):
        self.client.force_authenticate(user=self.advisor)
        response = self.client.get('/api/admin/notifications/unread_count/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        self.client.post('/api/admin/notifications/mark_all_read/')
        response = self.client.get('/api/admin/notifications/unread_count/')
        self.assertEqual(response.data['count'], 0)

    def test_admin_activity_logging(self):
        """Test admin activity logging"""
        activity = log_admin_activity(
            user=self.admin_user,
            action='CREATE',
            model_name='User',
            description="Created new student"
        )
        self.assertEqual(activity.action, 'CREATE')
        self.assertEqual(activity.user, self.admin_user)

        company = log_admin_activity(action='APPROVE', model_name='InternshipApplication',
                                     actor_label='ik@ornek.com.tr')
        self.assertEqual(str(company), "ik@ornek.com.tr - APPROVE - InternshipApplication")

    def test_activity_list_filter(self):
        log_admin_activity(action='IMPORT', model_name='UploadJob', actor_label='system')
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get('/api/admin/activities/', {'action': 'IMPORT'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['actor'], 'system')

    def test_generate_report(self):
        report = generate_report('applications')
        self.assertEqual(report['total'], 1)
        self.assertEqual(report['by_type']['ZORUNLU_STAJ'], 1)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class UserManagementTestCase(TestCase):
    def setUp(self):
        self.admin_user = User.objects.create_superuser(username='admin', password='admin123')
        self.advisor = User.objects.create_user(
            username='ahmet.hoca', email='ahmet.hoca@uni.edu.tr', name='Ahmet Hoca', role=User.ROLE_ADVISOR,
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin_user)

    def test_create_user(self):
        response = self.client.post('/api/admin/users/', {
            'username': '20205555',
            'name': 'Yeni Öğrenci',
            'email': '20205555@std.uni.edu.tr',
            'tc_kimlik': '12345678901',
            'role': User.ROLE_STUDENT,
            'advisor': self.advisor.id,
            'password': 'gizli-sifre',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)
        self.assertEqual(response.data['advisor_name'], 'Ahmet Hoca')

        user = User.objects.get(username='20205555')
        self.assertTrue(user.check_password('gizli-sifre'))
        self.assertTrue(AdminActivity.objects.filter(action='CREATE', object_id=user.id).exists())

    def test_create_user_requires_password(self):
        response = self.client.post('/api/admin/users/', {'username': '20205555'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data['errors'])

    def test_invalid_tc(self):
        response = self.client.post('/api/admin/users/', {
            'username': '20205555', 'tc_kimlik': '123', 'password': 'gizli-sifre',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_email(self):
        response = self.client.post('/api/admin/users/', {
            'username': 'baska', 'email': 'AHMET.HOCA@uni.edu.tr', 'password': 'gizli-sifre',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['errors'])

    def test_filter_by_role(self):
        response = self.client.get('/api/admin/users/', {'role': User.ROLE_ADVISOR})
        self.assertEqual([item['username'] for item in response.data], ['ahmet.hoca'])

    def test_toggle_active(self):
        response = self.client.post(f'/api/admin/users/{self.advisor.id}/toggle_active/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/admin/users/{self.admin_user.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/admin/users/{self.advisor.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.advisor.pk).exists())


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ApplicationManagementTestCase(TestCase):
    def setUp(self):
        self.admin_user = User.objects.create_superuser(username='admin', password='admin123')
        student = User.objects.create_user(username='20201234', email='20201234@std.uni.edu.tr', name='Ayşe')
        self.application = InternshipApplication.objects.create(
            student=student,
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
        )
        self.url = f'/api/admin/basvurular/{self.application.id}/'
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin_user)

    def test_status_moves_forward(self):
        """Decision fields follow a status set by an administrator"""
        response = self.client.patch(self.url, {'status': workflow.COMPANY_PENDING}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], workflow.COMPANY_PENDING)

        self.application.refresh_from_db()
        self.assertEqual(
            (self.application.advisor_decision, self.application.career_center_decision,
             self.application.company_decision),
            (1, 1, 0),
        )
        self.assertTrue(AdminActivity.objects.filter(
            action='UPDATE', model_name='InternshipApplication', object_id=self.application.id
        ).exists())

    def test_decision_fields_are_not_writable(self):
        response = self.client.patch(self.url, {'advisor_decision': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.application.refresh_from_db()
        self.assertEqual(self.application.advisor_decision, 0)
        self.assertEqual(self.application.status, workflow.ADVISOR_PENDING)
        self.assertEqual(self.application.derived_status(), self.application.status)

    def test_decisions_stay_in_step_with_approved_status(self):
        self.client.patch(self.url, {'status': workflow.APPROVED}, format='json')
        response = self.client.patch(
            self.url, {'company_decision': 0, 'career_center_decision': 0}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.application.refresh_from_db()
        self.assertEqual(self.application.status, workflow.APPROVED)
        self.assertEqual(self.application.derived_status(), workflow.APPROVED)

    def test_status_cannot_move_back(self):
        self.client.patch(self.url, {'status': workflow.COMPANY_PENDING}, format='json')
        response = self.client.patch(self.url, {'status': workflow.ADVISOR_PENDING}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_approval_issues_letter(self):
        response = self.client.patch(self.url, {'status': workflow.APPROVED}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.application.refresh_from_db()
        self.assertIsNotNone(self.application.approved_at)
        self.assertTrue(self.application.approval_letter.name)

    def test_admin_edit_validates_days(self):
        response = self.client.patch(self.url, {'internship_type': 'IMU_404'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('total_days', response.data['errors'])

    def test_delete_application(self):
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(AdminActivity.objects.filter(action='DELETE', model_name='InternshipApplication').exists())

    def test_export_applications_csv(self):
        response = self.client.post('/api/admin/export/', {'type': 'applications'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv; charset=utf-8')

        content = response.content.decode('utf-8')
        self.assertTrue(content.startswith('\ufeff'))
        self.assertIn('Örnek Yazılım A.Ş.', content)

    def test_export_unknown_type(self):
        response = self.client.post('/api/admin/export/', {'type': 'kurslar'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
