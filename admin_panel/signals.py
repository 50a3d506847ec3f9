from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth.signals import user_logged_in, user_logged_out
from internships.models import InternshipApplication, ExemptionApplication
from .models import AdminActivity
from .notifications import create_notification
from .utils import get_client_ip
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender=InternshipApplication)
def notify_new_application(sender, instance, created, **kwargs):
    """Create notification when a student submits an application"""
    if created:
        create_notification(
            title="Yeni Staj Başvurusu",
            message=f"{instance.student} - {instance.institution_name} ({instance.get_internship_type_display()})",
            priority="MEDIUM",
        )


@receiver(post_save, sender=ExemptionApplication)
def notify_new_exemption(sender, instance, created, **kwargs):
    if created:
        create_notification(
            title="Yeni Muafiyet Başvurusu",
            message=f"{instance.student} muafiyet başvurusu yaptı",
            priority="LOW",
        )


@receiver(user_logged_in)
def log_user_login(sender, request, user, **kwargs):
    """Log login"""
    try:
        AdminActivity.objects.create(
            user=user,
            action='LOGIN',
            model_name='User',
            object_id=user.id,
            description=f"{user.username} logged in",
            ip_address=get_client_ip(request)
        )
    except Exception as e:
        logger.error(f"Failed to log login: {str(e)}")


@receiver(user_logged_out)
def log_user_logout(sender, request, user, **kwargs):
    """Log logout"""
    if user is None or not user.is_authenticated:
        return
    try:
        AdminActivity.objects.create(
            user=user,
            action='LOGOUT',
            model_name='User',
            object_id=user.id,
            description=f"{user.username} logged out",
            ip_address=get_client_ip(request)
        )
    except Exception as e:
        logger.error(f"Failed to log logout: {str(e)}")
