# users/models.py
from django.db.models.signals import post_save
from django.dispatch import receiver
from rest_framework.authtoken.models import Token
from django.conf import settings
from django.db import models
from django.contrib.auth.models import (
    AbstractBaseUser, PermissionsMixin, BaseUserManager
)


class CustomUserManager(BaseUserManager):
    """Manager where username (student number, e-mail or staff handle) identifies the user"""
    use_in_migrations = True

    def create_user(self, username, password=None, **extra_fields):
        if not username:
            raise ValueError("The Username field is required")
        email = extra_fields.pop("email", None)
        if email:
            email = self.normalize_email(email)
        user = self.model(username=username, email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("role", CustomUser.ROLE_ADMIN)
        return self.create_user(username, password, **extra_fields)


class CustomUser(AbstractBaseUser, PermissionsMixin):
    ROLE_STUDENT = 'OGRENCI'
    ROLE_ADVISOR = 'DANISMAN'
    ROLE_CAREER_CENTER = 'KARIYER_MERKEZI'
    ROLE_ADMIN = 'YONETICI'

    ROLE_CHOICES = [
        (ROLE_STUDENT, 'Öğrenci'),
        (ROLE_ADVISOR, 'Danışman'),
        (ROLE_CAREER_CENTER, 'Kariyer Merkezi'),
        (ROLE_ADMIN, 'Yönetici'),
    ]

    tc_kimlik = models.CharField(max_length=11, unique=True, blank=True, null=True)
    username = models.CharField(max_length=150, unique=True)
    name = models.CharField(max_length=255, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STUDENT)

    # student fields
    student_number = models.CharField(max_length=20, blank=True, null=True)
    faculty = models.CharField(max_length=255, blank=True, null=True)
    department = models.CharField(max_length=255, blank=True, null=True)
    student_class = models.CharField(max_length=20, blank=True, null=True)
    advisor = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='advisees',
        limit_choices_to={'role': ROLE_ADVISOR},
    )

    has_logged_in = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(auto_now_add=True)

    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        ordering = ['name', 'username']

    @property
    def is_student(self):
        return self.role == self.ROLE_STUDENT

    @property
    def is_advisor(self):
        return self.role == self.ROLE_ADVISOR

    @property
    def is_career_center(self):
        return self.role == self.ROLE_CAREER_CENTER

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN or self.is_superuser

    def __str__(self):
        return self.name or self.username


# -------------------------------
# DUAL-MAJOR (CAP) RECORD
# -------------------------------
class CapUser(models.Model):
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='cap_records')
    cap_faculty = models.CharField(max_length=255, blank=True, null=True)
    cap_department = models.CharField(max_length=255, blank=True, null=True)
    cap_program = models.CharField(max_length=255, blank=True, default='')
    cap_student_number = models.CharField(max_length=20, blank=True, null=True)
    cap_class = models.CharField(max_length=20, blank=True, null=True)
    cap_advisor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cap_advisees',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('student', 'cap_program')
        verbose_name = "CAP record"

    def __str__(self):
        return f"{self.student} - {self.cap_department or self.cap_program}"


# -------------------------------
# DRF TOKEN SIGNAL
# -------------------------------
@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_auth_token(sender, instance=None, created=False, **kwargs):
    if created:
        Token.objects.create(user=instance)
