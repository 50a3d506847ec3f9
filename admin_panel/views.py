import csv

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from internship_tracking_system.exceptions import BadRequestError
from internships import services as application_services, workflow
from internships.filters import InternshipApplicationFilter
from internships.models import InternshipApplication
from internships.serializers import AdminApplicationSerializer
from logbooks.filters import LogbookFilter
from logbooks.models import Logbook
from logbooks.serializers import AdminLogbookSerializer
from users.serializers import AdminUserSerializer
from .filters import UserFilter, AdminActivityFilter
from .models import AdminActivity, Notification
from .permissions import IsSystemAdmin, IsStaffMember
from .serializers import AdminActivitySerializer, NotificationSerializer, DashboardStatsSerializer
from .utils import log_admin_activity, get_client_ip, generate_report
import logging

logger = logging.getLogger(__name__)

User = get_user_model()


class DashboardViewSet(viewsets.ViewSet):
    """Dashboard statistics"""
    permission_classes = [IsAuthenticated, IsSystemAdmin]

    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Get overall dashboard statistics"""
        current_month = timezone.now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        stats_data = {
            'applications': generate_report('applications'),
            'logbooks': generate_report('logbooks'),
            'exemptions': generate_report('exemptions'),
            'users': generate_report('users'),
            'pending_approvals': InternshipApplication.objects.filter(
                status__in=workflow.PENDING_STATUSES
            ).count(),
            'applications_this_month': InternshipApplication.objects.filter(
                created_at__gte=current_month
            ).count(),
        }
        return Response(DashboardStatsSerializer(stats_data).data)

    @action(detail=False, methods=['get'])
    def report(self, request):
        """Single report with an optional created-at range"""
        report_type = request.query_params.get('type', 'applications')
        if report_type not in ('applications', 'logbooks', 'exemptions', 'users'):
            raise BadRequestError("Geçersiz rapor türü.")
        return Response(generate_report(
            report_type,
            start_date=request.query_params.get('start_date'),
            end_date=request.query_params.get('end_date'),
        ))


class AdminActivityViewSet(viewsets.ReadOnlyModelViewSet):
    """View the audit log"""
    queryset = AdminActivity.objects.select_related('user')
    serializer_class = AdminActivitySerializer
    permission_classes = [IsAuthenticated, IsSystemAdmin]
    filterset_class = AdminActivityFilter
    search_fields = ['description', 'actor_label', 'user__username']


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin,
                          mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """Manage notifications"""
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated, IsStaffMember]

    def get_queryset(self):
        return Notification.objects.filter(
            Q(created_for=self.request.user) | Q(created_for__isnull=True)
        )

    @action(detail=True, methods=['post'])
    def mark_read(self, request, pk=None):
        """Mark notification as read"""
        notification = self.get_object()
        notification.is_read = True
        notification.save(update_fields=['is_read'])
        return Response({'message': 'Bildirim okundu olarak işaretlendi.'})

    @action(detail=False, methods=['post'])
    def mark_all_read(self, request):
        """Mark all notifications as read"""
        self.get_queryset().update(is_read=True)
        return Response({'message': 'Tüm bildirimler okundu olarak işaretlendi.'})

    @action(detail=False, methods=['get'])
    def unread_count(self, request):
        """Get count of unread notifications"""
        count = self.get_queryset().filter(is_read=False).count()
        return Response({'count': count})


class UserManagementViewSet(viewsets.ModelViewSet):
    """User CRUD for administrators"""
    queryset = User.objects.select_related('advisor').order_by('role', 'name')
    serializer_class = AdminUserSerializer
    permission_classes = [IsAuthenticated, IsSystemAdmin]
    filterset_class = UserFilter
    search_fields = ['name', 'username', 'email', 'student_number', 'tc_kimlik']

    def perform_create(self, serializer):
        user = serializer.save()
        log_admin_activity(
            user=self.request.user,
            action='CREATE',
            model_name='User',
            object_id=user.id,
            description=f"Created {user.role} {user.username}",
            ip_address=get_client_ip(self.request)
        )

    def perform_update(self, serializer):
        user = serializer.save()
        log_admin_activity(
            user=self.request.user,
            action='UPDATE',
            model_name='User',
            object_id=user.id,
            description=f"Updated {user.username}: {', '.join(sorted(serializer.validated_data))}",
            ip_address=get_client_ip(self.request)
        )

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise BadRequestError("Kendi hesabınızı silemezsiniz.")
        log_admin_activity(
            user=self.request.user,
            action='DELETE',
            model_name='User',
            object_id=instance.id,
            description=f"Deleted {instance.role} {instance.username}",
            ip_address=get_client_ip(self.request)
        )
        instance.delete()

    @action(detail=True, methods=['post'])
    def toggle_active(self, request, pk=None):
        """Toggle user active status"""
        user = self.get_object()
        user.is_active = not user.is_active
        user.save(update_fields=['is_active'])

        log_admin_activity(
            user=request.user,
            action='UPDATE',
            model_name='User',
            object_id=user.id,
            description=f"{'Activated' if user.is_active else 'Deactivated'} user {user.username}",
            ip_address=get_client_ip(request)
        )
        return Response({
            'message': f"Kullanıcı {'aktif' if user.is_active else 'pasif'} duruma getirildi.",
            'is_active': user.is_active
        })


class ApplicationManagementViewSet(mixins.UpdateModelMixin, mixins.DestroyModelMixin,
                                   viewsets.ReadOnlyModelViewSet):
    queryset = InternshipApplication.objects.select_related('student')
    serializer_class = AdminApplicationSerializer
    permission_classes = [IsAuthenticated, IsSystemAdmin]
    filterset_class = InternshipApplicationFilter
    search_fields = ['institution_name', 'student__name', 'student__username', 'advisor_email']
    ordering_fields = ['created_at', 'start_date', 'status']

    def perform_update(self, serializer):
        serializer.instance = application_services.admin_update(
            serializer.instance, serializer.validated_data, user=self.request.user, request=self.request
        )

    def perform_destroy(self, instance):
        log_admin_activity(
            user=self.request.user,
            action='DELETE',
            model_name='InternshipApplication',
            object_id=instance.id,
            description=f"Deleted application of {instance.student} to {instance.institution_name}",
            ip_address=get_client_ip(self.request)
        )
        instance.delete()


class LogbookManagementViewSet(mixins.UpdateModelMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Logbook.objects.select_related('application__student')
    serializer_class = AdminLogbookSerializer
    permission_classes = [IsAuthenticated, IsSystemAdmin]
    filterset_class = LogbookFilter
    search_fields = ['application__institution_name', 'application__student__name']

    def perform_update(self, serializer):
        logbook = serializer.save()
        log_admin_activity(
            user=self.request.user,
            action='UPDATE',
            model_name='Logbook',
            object_id=logbook.id,
            description=f"Admin updated logbook: {', '.join(sorted(serializer.validated_data))}",
            ip_address=get_client_ip(self.request)
        )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSystemAdmin])
def export_data(request):
    """Export data to CSV"""
    export_type = request.data.get('type', 'applications')
    if export_type not in ('applications', 'users', 'logbooks'):
        raise BadRequestError("Geçersiz dışa aktarma türü.")

    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{export_type}_{timezone.now().strftime("%Y%m%d")}.csv"'
    # Excel needs the BOM to detect UTF-8
    response.write('\ufeff')
    writer = csv.writer(response)

    if export_type == 'applications':
        writer.writerow([
            'ID', 'Öğrenci', 'Öğrenci No', 'Kurum', 'Staj Tipi', 'Başlangıç', 'Bitiş',
            'Toplam Gün', 'Durum', 'Danışman', 'CAP', 'Oluşturulma'
        ])
        for app in InternshipApplication.objects.select_related('student'):
            writer.writerow([
                app.id,
                app.student.name or app.student.username,
                app.student.student_number or '',
                app.institution_name,
                app.get_internship_type_display(),
                app.start_date.strftime('%Y-%m-%d'),
                app.end_date.strftime('%Y-%m-%d'),
                app.total_days,
                app.get_status_display(),
                app.advisor_email,
                'Evet' if app.is_cap_application else 'Hayır',
                app.created_at.strftime('%Y-%m-%d'),
            ])

    elif export_type == 'users':
        writer.writerow(['ID', 'Kullanıcı Adı', 'Ad Soyad', 'E-posta', 'Rol', 'Fakülte', 'Bölüm', 'Danışman', 'Aktif'])
        for user in User.objects.select_related('advisor').order_by('role', 'name'):
            writer.writerow([
                user.id,
                user.username,
                user.name or '',
                user.email or '',
                user.get_role_display(),
                user.faculty or '',
                user.department or '',
                user.advisor.name if user.advisor else '',
                'Evet' if user.is_active else 'Hayır',
            ])

    else:
        writer.writerow(['ID', 'Başvuru', 'Öğrenci', 'Kurum', 'Durum', 'Dosya', 'Yüklenme'])
        for logbook in Logbook.objects.select_related('application__student'):
            writer.writerow([
                logbook.id,
                logbook.application_id,
                logbook.application.student.name or logbook.application.student.username,
                logbook.application.institution_name,
                logbook.get_status_display(),
                logbook.original_file_name or '',
                logbook.upload_date.strftime('%Y-%m-%d') if logbook.upload_date else '',
            ])

    log_admin_activity(
        user=request.user,
        action='DOWNLOAD',
        model_name='Export',
        description=f"Exported {export_type} data",
        ip_address=get_client_ip(request)
    )
    return response
