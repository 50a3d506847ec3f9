from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework.authtoken.models import Token
from rest_framework import status
from admin_panel.models import AdminActivity
from .models import CapUser

User = get_user_model()


class AuthenticationTestCase(TestCase):
    def setUp(self):
        self.advisor = User.objects.create_user(
            username='ahmet.hoca@uni.edu.tr',
            email='ahmet.hoca@uni.edu.tr',
            password='htc12345678901',
            name='Ahmet Hoca',
            role=User.ROLE_ADVISOR,
        )
        self.student = User.objects.create_user(
            username='20201234',
            email='20201234@std.uni.edu.tr',
            password='12345678901',
            name='Ayşe Öğrenci',
            tc_kimlik='12345678901',
            student_number='20201234',
            advisor=self.advisor,
        )
        self.client = APIClient()

    def test_token_created_for_new_user(self):
        """Every new user gets an API token"""
        self.assertTrue(Token.objects.filter(user=self.student).exists())

    def test_login_with_username(self):
        """Login with the student number returns a token and marks first login"""
        response = self.client.post('/api/auth/login/', {
            'kullanici_adi': '20201234',
            'password': '12345678901',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['token'], Token.objects.get(user=self.student).key)
        self.assertTrue(response.data['first_login'])
        self.assertEqual(response.data['user']['role'], User.ROLE_STUDENT)
        self.assertEqual(response.data['user']['advisor']['email'], 'ahmet.hoca@uni.edu.tr')

        self.student.refresh_from_db()
        self.assertTrue(self.student.has_logged_in)

        second = self.client.post('/api/auth/login/', {
            'kullanici_adi': '20201234',
            'password': '12345678901',
        }, format='json')
        self.assertFalse(second.data['first_login'])

    def test_login_with_email_case_insensitive(self):
        """E-mail address works as the login name"""
        response = self.client.post('/api/auth/login/', {
            'kullanici_adi': 'AHMET.HOCA@uni.edu.tr',
            'password': 'htc12345678901',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], self.advisor.id)

    def test_login_wrong_password(self):
        response = self.client.post('/api/auth/login/', {
            'kullanici_adi': '20201234',
            'password': 'yanlis',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_login_inactive_user(self):
        self.student.is_active = False
        self.student.save()
        response = self.client.post('/api/auth/login/', {
            'kullanici_adi': '20201234',
            'password': '12345678901',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_records_activity(self):
        """A successful login is written to the audit log"""
        self.client.post('/api/auth/login/', {
            'kullanici_adi': '20201234',
            'password': '12345678901',
        }, format='json')
        self.assertTrue(AdminActivity.objects.filter(user=self.student, action='LOGIN').exists())

    def test_bearer_token_authentication(self):
        """The API reads `Authorization: Bearer <key>`"""
        token = Token.objects.get(user=self.student)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token.key}')
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], '20201234')

    def test_me_unauthenticated(self):
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_deletes_token(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/auth/logout/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Token.objects.filter(user=self.student).exists())


class ChangePasswordTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username='20209999',
            password='eski-sifre-123',
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_change_password(self):
        """Password change rotates the token"""
        old_key = Token.objects.get(user=self.user).key
        response = self.client.post('/api/auth/change-password/', {
            'current_password': 'eski-sifre-123',
            'new_password': 'Yeni-Sifre-2024!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotEqual(response.data['token'], old_key)

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Yeni-Sifre-2024!'))

    def test_change_password_wrong_current(self):
        response = self.client.post('/api/auth/change-password/', {
            'current_password': 'yanlis',
            'new_password': 'Yeni-Sifre-2024!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_password', response.data['errors'])

    def test_change_password_same_as_current(self):
        response = self.client.post('/api/auth/change-password/', {
            'current_password': 'eski-sifre-123',
            'new_password': 'eski-sifre-123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class CapRecordsTestCase(TestCase):
    def test_lists_own_cap_records(self):
        advisor = User.objects.create_user(username='cap.hoca', name='Cap Hoca', role=User.ROLE_ADVISOR)
        student = User.objects.create_user(username='20205555', password='x')
        CapUser.objects.create(
            student=student,
            cap_department='Matematik',
            cap_program='Matematik ÇAP',
            cap_advisor=advisor,
        )

        client = APIClient()
        client.force_authenticate(user=student)
        response = client.get('/api/auth/cap-kayitlari/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['cap_advisor']['name'], 'Cap Hoca')
