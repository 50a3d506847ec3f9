"""Row-level logic for the three roster spreadsheets."""
import re
from decimal import Decimal, InvalidOperation

import pandas as pd
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q

from users.models import CapUser
from .models import UploadJob

User = get_user_model()

CONTROL_CHARS_RE = re.compile(r'[\x00-\x1f\x7f]')
SCIENTIFIC_RE = re.compile(r'^\d+(\.\d+)?[eE]\+?\d+$')
TC_RE = re.compile(r'^\d{11}$')
CAP_STUDENT_NO_RE = re.compile(r'^\d{11,12}$')


class RowError(ValueError):
    """A row that cannot be imported; the message ends up in the job report"""


def column(letter):
    return ord(letter.upper()) - ord('A')


def sanitize_cell(value, max_length=255):
    """Normalise one spreadsheet cell into a clean string ('' when empty)"""
    if value is None:
        return ''
    try:
        if pd.isna(value):
            return ''
    except (TypeError, ValueError):
        pass

    if isinstance(value, bool):
        text = str(value)
    elif isinstance(value, float):
        text = str(int(value)) if value.is_integer() else repr(value)
    elif isinstance(value, int):
        text = str(value)
    else:
        text = str(value).strip()
        if SCIENTIFIC_RE.match(text):
            try:
                text = format(Decimal(text).quantize(Decimal(1)), 'f')
            except InvalidOperation:
                pass

    text = CONTROL_CHARS_RE.sub(' ', text).replace('<', '').replace('>', '')
    text = ' '.join(text.split())
    return text[:max_length]


def read_rows(path):
    df = pd.read_excel(path, sheet_name=0, header=None, dtype=object)
    return [list(row) for row in df.itertuples(index=False, name=None)]


class BaseImporter:
    file_type = None
    # a row with all of these empty is skipped, not reported
    key_columns = ()

    def __init__(self, job):
        self.job = job
        self.seen_tc = set()
        self._advisor_cache = {}

    def cell(self, values, letter, max_length=255):
        index = column(letter)
        if index >= len(values):
            return ''
        return sanitize_cell(values[index], max_length)

    def is_header(self, values):
        return False

    def first_data_index(self, rows):
        return 1 if rows and self.is_header(rows[0]) else 0

    def is_empty(self, values):
        return all(not self.cell(values, letter) for letter in self.key_columns)

    def claim_tc(self, tc):
        if tc in self.seen_tc:
            raise RowError(f"T.C. kimlik numarası dosyada tekrar ediyor: {tc}")
        self.seen_tc.add(tc)

    def find_advisor(self, name):
        if not name:
            return None
        key = name.casefold()
        if key not in self._advisor_cache:
            self._advisor_cache[key] = User.objects.filter(
                role=User.ROLE_ADVISOR, name__iexact=name
            ).first()
        return self._advisor_cache[key]

    def process_row(self, values):
        raise NotImplementedError


class AdvisorImporter(BaseImporter):
    """D+E name, F national ID, G email, H faculty, I department"""
    file_type = UploadJob.TYPE_ADVISOR
    key_columns = ('F', 'G')
    HEADER_HINTS = ('mail', 'posta', 'adres')

    def is_header(self, values):
        label = self.cell(values, 'G').lower()
        return bool(label) and '@' not in label and any(hint in label for hint in self.HEADER_HINTS)

    def process_row(self, values):
        name = f"{self.cell(values, 'D')} {self.cell(values, 'E')}".strip()
        tc = self.cell(values, 'F', 11)
        email = self.cell(values, 'G', 254).lower()

        if not tc:
            raise RowError("T.C. kimlik numarası eksik")
        if '@' not in email:
            raise RowError(f"Geçersiz e-posta adresi: {email or '-'}")
        self.claim_tc(tc)

        user = User.objects.filter(
            Q(email__iexact=email) | Q(tc_kimlik=tc) | Q(username__iexact=email)
        ).first()
        fields = {
            'name': name,
            'email': email,
            'username': email,
            'tc_kimlik': tc,
            'role': User.ROLE_ADVISOR,
            'faculty': self.cell(values, 'H'),
            'department': self.cell(values, 'I'),
        }
        if user is None:
            User.objects.create_user(password=f"htc{tc}", **fields)
            return 'created'
        for key, value in fields.items():
            setattr(user, key, value)
        user.save()
        return 'updated'


class StudentImporter(BaseImporter):
    """A national ID, B student number, C+D name, E advisor, N faculty, O department, R class"""
    file_type = UploadJob.TYPE_STUDENT
    key_columns = ('A', 'B')

    def is_header(self, values):
        return not self.cell(values, 'A').isdigit()

    def process_row(self, values):
        tc = self.cell(values, 'A', 11)
        student_number = self.cell(values, 'B', 20)
        if not tc or not student_number:
            raise RowError("T.C. kimlik numarası veya öğrenci numarası eksik")
        self.claim_tc(tc)

        fields = {
            'name': f"{self.cell(values, 'C')} {self.cell(values, 'D')}".strip(),
            'username': student_number,
            'student_number': student_number,
            'email': f"{student_number}@{settings.STUDENT_EMAIL_DOMAIN}",
            'tc_kimlik': tc,
            'role': User.ROLE_STUDENT,
            'faculty': self.cell(values, 'N'),
            'department': self.cell(values, 'O'),
            'student_class': self.cell(values, 'R', 20),
            # unknown advisor names leave the student unassigned
            'advisor': self.find_advisor(self.cell(values, 'E')),
        }

        user = User.objects.filter(Q(tc_kimlik=tc) | Q(username__iexact=student_number)).first()
        if user is None:
            User.objects.create_user(password=tc, **fields)
            return 'created'
        for key, value in fields.items():
            setattr(user, key, value)
        user.save()
        return 'updated'


class CapStudentImporter(BaseImporter):
    """
    A faculty, B department, C program, D CAP student number, E national ID,
    F first name, G last name, H class, U advisor name
    """
    file_type = UploadJob.TYPE_CAP_STUDENT
    key_columns = ('D', 'E')
    HEADER_HINTS = ('ogrenci', 'öğrenci', 'student', 'numara', 'no')

    def is_header(self, values):
        label = self.cell(values, 'D').lower()
        return bool(label) and not label.isdigit() and any(hint in label for hint in self.HEADER_HINTS)

    def process_row(self, values):
        cap_number = self.cell(values, 'D', 20)
        tc = self.cell(values, 'E', 20)
        first_name = self.cell(values, 'F')

        missing = [label for label, value in (('D', cap_number), ('E', tc), ('F', first_name)) if not value]
        if missing:
            raise RowError(f"Eksik zorunlu alan(lar): {', '.join(missing)}")
        if not CAP_STUDENT_NO_RE.match(cap_number):
            raise RowError(f"Geçersiz öğrenci numarası (11-12 hane olmalı): {cap_number}")
        if not TC_RE.match(tc):
            raise RowError(f"Geçersiz T.C. kimlik numarası (11 hane olmalı): {tc}")
        self.claim_tc(tc)

        name = f"{first_name} {self.cell(values, 'G')}".strip()
        student = User.objects.filter(Q(tc_kimlik=tc) | Q(username__iexact=cap_number)).first()
        created = student is None
        if created:
            student = User.objects.create_user(
                username=cap_number,
                password=tc,
                name=name,
                tc_kimlik=tc,
                role=User.ROLE_STUDENT,
                student_number=cap_number,
                email=f"{cap_number}@{settings.STUDENT_EMAIL_DOMAIN}",
            )

        CapUser.objects.update_or_create(
            student=student,
            cap_program=self.cell(values, 'C'),
            defaults={
                'cap_faculty': self.cell(values, 'A'),
                'cap_department': self.cell(values, 'B'),
                'cap_student_number': cap_number,
                'cap_class': self.cell(values, 'H', 20),
                'cap_advisor': self.find_advisor(self.cell(values, 'U')),
            },
        )
        return 'created' if created else 'updated'


IMPORTERS = {
    importer.file_type: importer
    for importer in (AdvisorImporter, StudentImporter, CapStudentImporter)
}
