from .models import AdminActivity
import logging

logger = logging.getLogger(__name__)


def log_admin_activity(action, model_name, object_id=None, description="", user=None,
                       actor_label="", ip_address=None):
    """Helper function to log activities. Never raises."""
    try:
        return AdminActivity.objects.create(
            user=user,
            actor_label=actor_label,
            action=action,
            model_name=model_name,
            object_id=object_id,
            description=description,
            ip_address=ip_address
        )
    except Exception as e:
        logger.error(f"Failed to log activity: {str(e)}")
        return None


def get_client_ip(request):
    """Get client IP address"""
    if request is None:
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


def generate_report(report_type, start_date=None, end_date=None):
    """Aggregate counts for the admin statistics endpoint"""
    from django.db.models import Count
    from users.models import CustomUser
    from internships.models import InternshipApplication, ExemptionApplication
    from logbooks.models import Logbook

    report_data = {}

    try:
        if report_type == 'applications':
            applications = InternshipApplication.objects.all()
            if start_date:
                applications = applications.filter(created_at__date__gte=start_date)
            if end_date:
                applications = applications.filter(created_at__date__lte=end_date)

            by_status = dict(applications.values_list('status').annotate(total=Count('id')))
            by_type = dict(applications.values_list('internship_type').annotate(total=Count('id')))
            report_data = {
                'total': applications.count(),
                'by_status': {code: by_status.get(code, 0) for code, _ in InternshipApplication.STATUS_CHOICES},
                'by_type': {code: by_type.get(code, 0) for code, _ in InternshipApplication.TYPE_CHOICES},
            }

        elif report_type == 'logbooks':
            by_status = dict(Logbook.objects.values_list('status').annotate(total=Count('id')))
            report_data = {
                'total': Logbook.objects.count(),
                'by_status': {code: by_status.get(code, 0) for code, _ in Logbook.STATUS_CHOICES},
            }

        elif report_type == 'exemptions':
            by_status = dict(ExemptionApplication.objects.values_list('status').annotate(total=Count('id')))
            report_data = {
                'total': ExemptionApplication.objects.count(),
                'by_status': {code: by_status.get(code, 0) for code, _ in ExemptionApplication.STATUS_CHOICES},
            }

        elif report_type == 'users':
            by_role = dict(CustomUser.objects.values_list('role').annotate(total=Count('id')))
            report_data = {
                'total': CustomUser.objects.count(),
                'active': CustomUser.objects.filter(is_active=True).count(),
                'by_role': {code: by_role.get(code, 0) for code, _ in CustomUser.ROLE_CHOICES},
            }

        return report_data

    except Exception as e:
        logger.error(f"Failed to generate report: {str(e)}")
        return {}
