from django.contrib.auth import get_user_model
from django.db.models import Q
from rest_framework import viewsets, status, generics, mixins
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from admin_panel.permissions import IsStudent, IsAdvisor, IsCareerCenter
from admin_panel.utils import log_admin_activity, get_client_ip
from internship_tracking_system.exceptions import NotFoundError, ForbiddenError
from users.serializers import UserProfileSerializer
from . import services, workflow
from .filters import InternshipApplicationFilter, ExemptionApplicationFilter
from .models import InternshipApplication, ExemptionApplication
from .serializers import (
    InternshipApplicationSerializer, ApplicationCreateSerializer, CancelSerializer,
    AmendDatesSerializer, DecisionSerializer, RejectSerializer,
    ExemptionApplicationSerializer, ExemptionCreateSerializer,
)
from .utils import APPLICATION_FILE_FIELDS, file_download_response, approval_letter_name

User = get_user_model()

SEARCH_FIELDS = ['institution_name', 'student__name', 'student__username', 'student__student_number']


def _download_application_file(request, application, file_type):
    field_name = APPLICATION_FILE_FIELDS.get(file_type)
    if field_name is None:
        raise NotFoundError("Geçersiz dosya türü.")
    response = file_download_response(getattr(application, field_name))
    log_admin_activity(
        user=request.user if request.user.is_authenticated else None,
        action='DOWNLOAD',
        model_name='InternshipApplication',
        object_id=application.id,
        description=f"Downloaded {file_type}",
        ip_address=get_client_ip(request),
    )
    return response


# -------------------------------
# STUDENT
# -------------------------------
class StudentApplicationViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Handles:
    - Submitting an application (create)
    - Listing and viewing own applications
    - Cancellation, post-approval date change, document downloads
    """
    serializer_class = InternshipApplicationSerializer
    permission_classes = [IsAuthenticated, IsStudent]
    filterset_class = InternshipApplicationFilter

    def get_queryset(self):
        return InternshipApplication.objects.filter(student=self.request.user).select_related('student')

    def get_object(self):
        return services.get_student_application(self.request.user, self.kwargs['pk'])

    def create(self, request, *args, **kwargs):
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        cap_id = data.pop('cap_id', None)

        application = services.create_application(request.user, data, cap_id=cap_id, request=request)
        return Response(
            {
                "message": "Staj başvurunuz alındı.",
                "basvuru": InternshipApplicationSerializer(application).data,
            },
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['post'], url_path='iptal')
    def cancel(self, request, pk=None):
        application = self.get_object()
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.cancel_application(
            application, serializer.validated_data['cancel_reason'], request=request
        )
        return Response({
            "message": "Başvuru iptal edildi.",
            "basvuru": InternshipApplicationSerializer(application).data,
        })

    @action(detail=True, methods=['put'], url_path='tarih')
    def amend_dates(self, request, pk=None):
        application = self.get_object()
        serializer = AmendDatesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.amend_dates(application, request=request, **serializer.validated_data)
        return Response({
            "message": "Staj tarihleri güncellendi.",
            "basvuru": InternshipApplicationSerializer(application).data,
        })

    @action(detail=True, methods=['get'], url_path='onay-belgesi')
    def approval_letter(self, request, pk=None):
        application = self.get_object()
        if application.status != workflow.APPROVED:
            raise NotFoundError("Onay belgesi yalnızca onaylanmış başvurular için oluşturulur.")
        return file_download_response(application.approval_letter, approval_letter_name(application))

    @action(detail=True, methods=['get'], url_path=r'dosya/(?P<file_type>[\w-]+)')
    def download(self, request, pk=None, file_type=None):
        return _download_application_file(request, self.get_object(), file_type)

    @action(detail=False, methods=['get'], url_path='istatistik')
    def statistics(self, request):
        return Response(services.student_statistics(request.user))


class StudentExemptionViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = ExemptionApplicationSerializer
    permission_classes = [IsAuthenticated, IsStudent]

    def get_queryset(self):
        return ExemptionApplication.objects.filter(student=self.request.user).select_related('student')

    def create(self, request, *args, **kwargs):
        serializer = ExemptionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exemption = services.create_exemption(
            request.user,
            serializer.validated_data['sgk4a_file'],
            cap_id=serializer.validated_data.get('cap_id'),
            request=request,
        )
        return Response(ExemptionApplicationSerializer(exemption).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='download-pdf')
    def download(self, request, pk=None):
        return file_download_response(self.get_object().sgk4a_file)


# -------------------------------
# ADVISOR
# -------------------------------
class AdvisorApplicationViewSet(viewsets.ReadOnlyModelViewSet):
    """Applications routed to the logged-in advisor"""
    serializer_class = InternshipApplicationSerializer
    permission_classes = [IsAuthenticated, IsAdvisor]
    filterset_class = InternshipApplicationFilter
    search_fields = SEARCH_FIELDS
    ordering_fields = ['created_at', 'start_date', 'status']

    def get_queryset(self):
        return InternshipApplication.objects.filter(
            advisor_email__iexact=self.request.user.email or ''
        ).select_related('student')

    @action(detail=True, methods=['post'], url_path='onayla')
    def approve(self, request, pk=None):
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.decide(
            self.get_object(), workflow.ADVISOR, workflow.APPROVE,
            note=serializer.validated_data.get('note'), user=request.user, request=request,
        )
        return Response(InternshipApplicationSerializer(application).data)

    @action(detail=True, methods=['post'], url_path='reddet')
    def reject(self, request, pk=None):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.decide(
            self.get_object(), workflow.ADVISOR, workflow.REJECT,
            note=serializer.validated_data['reason'], user=request.user, request=request,
        )
        return Response(InternshipApplicationSerializer(application).data)

    @action(detail=True, methods=['get'], url_path=r'dosya/(?P<file_type>[\w-]+)')
    def download(self, request, pk=None, file_type=None):
        return _download_application_file(request, self.get_object(), file_type)


class AdvisorExemptionViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ExemptionApplicationSerializer
    permission_classes = [IsAuthenticated, IsAdvisor]
    filterset_class = ExemptionApplicationFilter

    def get_queryset(self):
        return ExemptionApplication.objects.filter(
            advisor_email__iexact=self.request.user.email or ''
        ).select_related('student')

    @action(detail=True, methods=['post'], url_path='onayla')
    def approve(self, request, pk=None):
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exemption = services.decide_exemption(
            self.get_object(), workflow.APPROVE,
            note=serializer.validated_data.get('note'), user=request.user, request=request,
        )
        return Response(ExemptionApplicationSerializer(exemption).data)

    @action(detail=True, methods=['post'], url_path='reddet')
    def reject(self, request, pk=None):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exemption = services.decide_exemption(
            self.get_object(), workflow.REJECT,
            note=serializer.validated_data['reason'], user=request.user, request=request,
        )
        return Response(ExemptionApplicationSerializer(exemption).data)

    @action(detail=True, methods=['get'], url_path='download-sgk4a')
    def download(self, request, pk=None):
        return file_download_response(self.get_object().sgk4a_file)


class AdvisorStudentListView(generics.ListAPIView):
    """Students assigned to the advisor, directly or through a CAP record"""
    serializer_class = UserProfileSerializer
    permission_classes = [IsAuthenticated, IsAdvisor]
    search_fields = ['name', 'username', 'student_number']

    def get_queryset(self):
        advisor = self.request.user
        return User.objects.filter(
            Q(advisor=advisor) | Q(cap_records__cap_advisor=advisor),
            role=User.ROLE_STUDENT,
        ).distinct()


# -------------------------------
# CAREER CENTER
# -------------------------------
class CareerCenterApplicationViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = InternshipApplication.objects.select_related('student').all()
    serializer_class = InternshipApplicationSerializer
    permission_classes = [IsAuthenticated, IsCareerCenter]
    filterset_class = InternshipApplicationFilter
    search_fields = SEARCH_FIELDS
    ordering_fields = ['created_at', 'start_date', 'status']

    @action(detail=True, methods=['post'], url_path='onayla')
    def approve(self, request, pk=None):
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.decide(
            self.get_object(), workflow.CAREER_CENTER, workflow.APPROVE,
            note=serializer.validated_data.get('note'), user=request.user, request=request,
        )
        return Response(InternshipApplicationSerializer(application).data)

    @action(detail=True, methods=['post'], url_path='reddet')
    def reject(self, request, pk=None):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.decide(
            self.get_object(), workflow.CAREER_CENTER, workflow.REJECT,
            note=serializer.validated_data['reason'], user=request.user, request=request,
        )
        return Response(InternshipApplicationSerializer(application).data)

    @action(detail=True, methods=['post'], url_path='otp-yenile')
    def resend_otp(self, request, pk=None):
        """Issue a fresh company code while the application waits on the company"""
        from companies.utils import issue_company_otp

        application = self.get_object()
        if application.status != workflow.COMPANY_PENDING:
            raise ForbiddenError("Bu başvuru şirket onayı beklemiyor.")
        issue_company_otp(application)
        log_admin_activity(
            user=request.user,
            action='UPDATE',
            model_name='InternshipApplication',
            object_id=application.id,
            description=f"Company OTP re-issued to {application.contact_email}",
            ip_address=get_client_ip(request),
        )
        return Response({"message": f"Doğrulama kodu {application.contact_email} adresine gönderildi."})

    @action(detail=True, methods=['get'], url_path=r'dosya/(?P<file_type>[\w-]+)')
    def download(self, request, pk=None, file_type=None):
        return _download_application_file(request, self.get_object(), file_type)


class DirectoryView(generics.ListAPIView):
    """Student / advisor lists for the career center"""
    serializer_class = UserProfileSerializer
    permission_classes = [IsAuthenticated, IsCareerCenter]
    search_fields = ['name', 'username', 'email', 'student_number', 'department']
    role = None

    def get_queryset(self):
        return User.objects.filter(role=self.role, is_active=True).select_related('advisor')
