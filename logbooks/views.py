from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from admin_panel.permissions import IsStudent, IsAdvisor
from admin_panel.utils import log_admin_activity, get_client_ip
from internships import workflow
from internships.serializers import RejectSerializer
from internships.utils import file_download_response
from . import services
from .filters import LogbookFilter
from .models import Logbook
from .serializers import LogbookSerializer, LogbookUploadSerializer


def _download(request, logbook):
    response = file_download_response(logbook.file, logbook.original_file_name or 'staj-defteri.pdf')
    log_admin_activity(
        user=request.user,
        action='DOWNLOAD',
        model_name='Logbook',
        object_id=logbook.id,
        description="Downloaded logbook PDF",
        ip_address=get_client_ip(request),
    )
    return response


class StudentLogbookViewSet(mixins.DestroyModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Student logbooks of approved applications.
    DELETE removes the uploaded PDF and resets the logbook, the row stays.
    """
    serializer_class = LogbookSerializer
    permission_classes = [IsAuthenticated, IsStudent]

    def get_queryset(self):
        return Logbook.objects.filter(
            application__student=self.request.user,
            application__status=workflow.APPROVED,
        ).select_related('application__student')

    def get_object(self):
        return services.get_student_logbook(self.request.user, self.kwargs['pk'])

    def destroy(self, request, *args, **kwargs):
        services.delete_logbook_file(self.get_object(), request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['post'], url_path=r'(?P<application_id>\d+)/upload-pdf')
    def upload(self, request, application_id=None):
        serializer = LogbookUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        logbook = services.upload_logbook(
            request.user, application_id, serializer.validated_data['file'], request=request
        )
        return Response(
            {"message": "Staj defteri yüklendi.", "defter": LogbookSerializer(logbook).data},
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['get'], url_path='download')
    def download(self, request, pk=None):
        return _download(request, self.get_object())


class AdvisorLogbookViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = LogbookSerializer
    permission_classes = [IsAuthenticated, IsAdvisor]
    filterset_class = LogbookFilter
    search_fields = ['application__institution_name', 'application__student__name',
                     'application__student__student_number']

    def get_queryset(self):
        return Logbook.objects.filter(
            application__advisor_email__iexact=self.request.user.email or ''
        ).select_related('application__student')

    @action(detail=True, methods=['post'], url_path='onayla')
    def approve(self, request, pk=None):
        logbook = services.advisor_decide(self.get_object(), workflow.APPROVE, user=request.user, request=request)
        return Response(LogbookSerializer(logbook).data)

    @action(detail=True, methods=['post'], url_path='reddet')
    def reject(self, request, pk=None):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        logbook = services.advisor_decide(
            self.get_object(), workflow.REJECT,
            reason=serializer.validated_data['reason'], user=request.user, request=request,
        )
        return Response(LogbookSerializer(logbook).data)

    @action(detail=True, methods=['get'], url_path='download')
    def download(self, request, pk=None):
        return _download(request, self.get_object())
