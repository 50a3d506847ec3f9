import io
import shutil
import tempfile
from unittest import mock

import pandas as pd
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from admin_panel.models import AdminActivity, Notification
from users.models import CapUser
from . import push, worker
from .importers import sanitize_cell, column, StudentImporter, CapStudentImporter, AdvisorImporter, RowError
from .models import UploadJob, ProgressMessage

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()
XLSX = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def excel_file(rows, name='liste.xlsx'):
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False, header=False, engine='openpyxl')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type=XLSX)


def student_row(tc, number, first, last, advisor=''):
    row = ['x'] * 18
    row[0], row[1], row[2], row[3], row[4] = tc, number, first, last, advisor
    row[13], row[14], row[17] = 'Mühendislik Fakültesi', 'Bilgisayar Mühendisliği', '3'
    return row


STUDENT_HEADER = ['TC', 'Öğrenci No', 'Ad', 'Soyad', 'Danışman'] + ['-'] * 13


class SanitizeCellTestCase(SimpleTestCase):
    def test_empty_values(self):
        self.assertEqual(sanitize_cell(None), '')
        self.assertEqual(sanitize_cell(float('nan')), '')
        self.assertEqual(sanitize_cell('   '), '')

    def test_numbers(self):
        """Numeric IDs keep every digit"""
        self.assertEqual(sanitize_cell(12345678901), '12345678901')
        self.assertEqual(sanitize_cell(12345678901.0), '12345678901')
        self.assertEqual(sanitize_cell('1.2345678901E+10'), '12345678901')

    def test_strips_markup_and_control_chars(self):
        self.assertEqual(sanitize_cell('  Ayşe\t<b>Yılmaz</b>\n'), 'Ayşe bYılmaz/b')
        self.assertEqual(sanitize_cell('a' * 300), 'a' * 255)

    def test_column_letters(self):
        self.assertEqual(column('A'), 0)
        self.assertEqual(column('u'), 20)


class ImporterTestCase(TestCase):
    def setUp(self):
        self.job = UploadJob(file_type=UploadJob.TYPE_STUDENT, original_name='x.xlsx')
        self.advisor = User.objects.create_user(
            username='ahmet.hoca@uni.edu.tr', email='ahmet.hoca@uni.edu.tr', name='Ahmet Hoca',
            role=User.ROLE_ADVISOR,
        )

    def test_student_import_creates_and_updates(self):
        importer = StudentImporter(self.job)
        self.assertEqual(importer.process_row(student_row('12345678901', '20201234', 'Ayşe', 'Yılmaz',
                                                          'Ahmet Hoca')), 'created')
        student = User.objects.get(username='20201234')
        self.assertEqual(student.email, '20201234@std.uni.edu.tr')
        self.assertEqual(student.advisor, self.advisor)
        self.assertTrue(student.check_password('12345678901'))

        importer = StudentImporter(self.job)
        self.assertEqual(importer.process_row(student_row('12345678901', '20201234', 'Ayşe', 'Kaya')), 'updated')
        student.refresh_from_db()
        self.assertEqual(student.name, 'Ayşe Kaya')
        self.assertIsNone(student.advisor)

    def test_duplicate_tc_in_same_file(self):
        importer = StudentImporter(self.job)
        importer.process_row(student_row('12345678901', '20201234', 'Ayşe', 'Yılmaz'))
        with self.assertRaises(RowError):
            importer.process_row(student_row('12345678901', '20205678', 'Ali', 'Veli'))

    def test_empty_and_header_rows(self):
        importer = StudentImporter(self.job)
        self.assertTrue(importer.is_empty([None, float('nan'), 'Ayşe']))
        self.assertTrue(importer.is_header(STUDENT_HEADER))
        self.assertFalse(importer.is_header(student_row('12345678901', '20201234', 'Ayşe', 'Yılmaz')))

    def test_advisor_import(self):
        importer = AdvisorImporter(self.job)
        row = ['', '', '', 'Zeynep', 'Öztürk', '98765432109', 'Zeynep.Ozturk@uni.edu.tr', 'Fen', 'Fizik']
        self.assertEqual(importer.process_row(row), 'created')
        advisor = User.objects.get(username='zeynep.ozturk@uni.edu.tr')
        self.assertEqual(advisor.role, User.ROLE_ADVISOR)
        self.assertTrue(advisor.check_password('htc98765432109'))

        with self.assertRaises(RowError):
            AdvisorImporter(self.job).process_row(['', '', '', 'A', 'B', '11111111111', 'adres-yok'])

    def test_advisor_header_detected_by_label(self):
        importer = AdvisorImporter(self.job)
        header = ['', '', '', 'Ad', 'Soyad', 'TC Kimlik No', 'E-posta', 'Fakülte', 'Bölüm']
        malformed = ['', '', '', 'Zeynep', 'Öztürk', '98765432109', 'zeynep.uni.edu.tr', 'Fen', 'Fizik']
        self.assertTrue(importer.is_header(header))
        self.assertFalse(importer.is_header(malformed))
        self.assertEqual(importer.first_data_index([malformed]), 0)

    def test_cap_student_import(self):
        importer = CapStudentImporter(self.job)
        row = ['Fen Fakültesi', 'Matematik', 'Matematik ÇAP', '202012345678', '12345678901',
               'Ayşe', 'Yılmaz', '3'] + [''] * 12 + ['Ahmet Hoca']
        self.assertEqual(importer.process_row(row), 'created')

        record = CapUser.objects.get(student__username='202012345678')
        self.assertEqual(record.cap_department, 'Matematik')
        self.assertEqual(record.cap_advisor, self.advisor)

        bad = list(row)
        bad[4] = '123'
        with self.assertRaises(RowError):
            CapStudentImporter(self.job).process_row(bad)


@override_settings(MEDIA_ROOT=MEDIA_ROOT, IMPORT_RUN_SYNC=True)
class ExcelUploadApiTestCase(TestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.admin = User.objects.create_superuser(username='admin', password='admin123')
        User.objects.create_user(username='hoca', name='Ahmet Hoca', role=User.ROLE_ADVISOR)
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def test_student_upload(self):
        """Header skipped, duplicate reported, blank key columns skipped"""
        rows = [
            STUDENT_HEADER,
            student_row('12345678901', '20201234', 'Ayşe', 'Yılmaz', 'Ahmet Hoca'),
            student_row('12345678902', '20201235', 'Ali', 'Veli', 'Bilinmeyen Hoca'),
            student_row('12345678901', '20201236', 'Can', 'Ak'),
            student_row('', '', 'Boş', 'Satır'),
        ]
        response = self.client.post('/api/admin/excel/upload/ogrenci/', {'file': excel_file(rows)},
                                    format='multipart')
        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)

        job = UploadJob.objects.get(pk=response.data['dosyaId'])
        self.assertEqual(job.status, UploadJob.STATUS_COMPLETED)
        self.assertEqual(job.total_rows, 4)
        self.assertEqual(job.successful_rows, 2)
        self.assertEqual(job.error_rows, 1)
        self.assertEqual(job.skipped_rows, 1)
        self.assertTrue(job.errors[0].startswith('Satır 4:'))

        self.assertIsNone(User.objects.get(username='20201235').advisor)
        self.assertEqual(
            ProgressMessage.objects.filter(job=job).last().type, ProgressMessage.TYPE_COMPLETE
        )
        self.assertTrue(AdminActivity.objects.filter(action='IMPORT', object_id=job.id).exists())

    def test_mostly_invalid_file_fails(self):
        rows = [
            student_row('12345678901', '20201234', 'Ayşe', 'Yılmaz'),
            student_row('12345678901', '20201235', 'Ali', 'Veli'),
            student_row('12345678901', '20201236', 'Can', 'Ak'),
        ]
        response = self.client.post('/api/admin/excel/upload/ogrenci/', {'file': excel_file(rows)},
                                    format='multipart')
        job = UploadJob.objects.get(pk=response.data['dosyaId'])
        self.assertEqual(job.status, UploadJob.STATUS_FAILED)
        self.assertTrue(Notification.objects.filter(title="Excel İçe Aktarma Başarısız").exists())

    def test_rejects_non_excel(self):
        upload = SimpleUploadedFile('liste.csv', b'a,b,c', content_type='text/csv')
        response = self.client.post('/api/admin/excel/upload/ogrenci/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors']['file'], "Sadece Excel dosyaları (.xlsx, .xls) kabul edilir")

    def test_concurrent_upload_of_same_type(self):
        UploadJob.objects.create(
            file_type=UploadJob.TYPE_STUDENT, file='excel/eski.xlsx', original_name='eski.xlsx',
            status=UploadJob.STATUS_PROCESSING,
        )
        response = self.client.post('/api/admin/excel/upload/ogrenci/',
                                    {'file': excel_file([student_row('12345678901', '20201234', 'A', 'B')])},
                                    format='multipart')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.post('/api/admin/excel/upload/hoca/',
                                    {'file': excel_file([['', '', '', 'Z', 'Ö', '98765432109', 'z@uni.edu.tr']])},
                                    format='multipart')
        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)

    def test_upload_requires_admin(self):
        student = User.objects.create_user(username='20209999')
        self.client.force_authenticate(user=student)
        response = self.client.get('/api/admin/excel/upload/history/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_status_and_history(self):
        job = UploadJob.objects.create(
            file_type=UploadJob.TYPE_ADVISOR, file='excel/h.xlsx', original_name='h.xlsx',
            status=UploadJob.STATUS_COMPLETED, total_rows=10, processed_rows=10, successful_rows=10,
        )
        response = self.client.get(f'/api/admin/excel/upload/status/{job.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['percentage'], 100)

        response = self.client.get('/api/admin/excel/upload/history/', {'file_type': UploadJob.TYPE_STUDENT})
        self.assertEqual(response.data, [])


class CancelAndMessagesTestCase(TestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(username='admin', password='admin123')
        self.job = UploadJob.objects.create(
            file_type=UploadJob.TYPE_STUDENT, file='excel/liste.xlsx', original_name='liste.xlsx',
            uploaded_by=self.admin,
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def test_cancel_queued_job(self):
        response = self.client.post(f'/api/admin/excel/upload/cancel/{self.job.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.job.refresh_from_db()
        self.assertEqual(self.job.status, UploadJob.STATUS_CANCELLED)
        self.assertEqual(ProgressMessage.objects.get(job=self.job).type, ProgressMessage.TYPE_CANCELLED)

        # a cancelled job is never picked up
        self.assertEqual(worker.run_import(self.job.id).status, UploadJob.STATUS_CANCELLED)

        response = self.client.post(f'/api/admin/excel/upload/cancel/{self.job.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_messages_since(self):
        first = push.broadcast(self.job, ProgressMessage.TYPE_PROGRESS, "İşlem başladı", {'percentage': 0})
        push.broadcast(self.job, ProgressMessage.TYPE_PROGRESS, "10/20 satır işlendi", {'percentage': 50})

        response = self.client.get('/api/admin/excel/upload/messages/', {'since': first['id']})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['data']['percentage'], 50)
        self.assertEqual(response.data[0]['dosyaId'], self.job.id)

        response = self.client.get('/api/admin/excel/upload/messages/', {'since': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_subscribers_receive_broadcast(self):
        subscriber = push.subscribe()
        try:
            payload = push.broadcast(self.job, ProgressMessage.TYPE_PROGRESS, "İşlem başladı")
            self.assertEqual(subscriber.get_nowait(), payload)
        finally:
            push.unsubscribe(subscriber)
        self.assertNotIn(subscriber, push.SUBSCRIBERS)


class CancelAfterSecondRow(StudentImporter):
    def process_row(self, values):
        result = super().process_row(values)
        if len(self.seen_tc) == 2:
            UploadJob.objects.filter(pk=self.job.pk).update(status=UploadJob.STATUS_CANCELLED)
        return result


@override_settings(MEDIA_ROOT=MEDIA_ROOT, IMPORT_PROGRESS_INTERVAL=1)
class RunningJobCancelTestCase(TestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def test_cancel_during_processing_keeps_committed_rows(self):
        admin = User.objects.create_superuser(username='admin', password='admin123')
        job = UploadJob.objects.create(
            file_type=UploadJob.TYPE_STUDENT,
            file=excel_file([
                student_row('11111111111', '20200001', 'Ayşe', 'Yılmaz'),
                student_row('22222222222', '20200002', 'Ali', 'Kaya'),
                student_row('33333333333', '20200003', 'Can', 'Demir'),
                student_row('44444444444', '20200004', 'Elif', 'Şahin'),
            ]),
            original_name='liste.xlsx',
            uploaded_by=admin,
        )

        with mock.patch.dict(worker.IMPORTERS, {UploadJob.TYPE_STUDENT: CancelAfterSecondRow}):
            worker.run_import(job.id)

        job.refresh_from_db()
        self.assertEqual(job.status, UploadJob.STATUS_CANCELLED)
        self.assertEqual(job.successful_rows, 2)
        self.assertEqual(job.processed_rows, 2)
        self.assertEqual(User.objects.filter(username__in=['20200001', '20200002']).count(), 2)
        self.assertFalse(User.objects.filter(username__in=['20200003', '20200004']).exists())
        self.assertFalse(ProgressMessage.objects.filter(job=job, type=ProgressMessage.TYPE_COMPLETE).exists())
