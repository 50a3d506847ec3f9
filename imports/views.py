import json
import logging
import queue

from django.http import StreamingHttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.renderers import BaseRenderer, JSONRenderer
from rest_framework.response import Response
from rest_framework.views import APIView
from admin_panel.permissions import IsSystemAdmin
from admin_panel.utils import log_admin_activity, get_client_ip
from internship_tracking_system.exceptions import ConflictError, BadRequestError
from . import push, worker
from .models import UploadJob, ProgressMessage
from .serializers import UploadJobSerializer, ExcelUploadSerializer, ProgressMessageSerializer

logger = logging.getLogger(__name__)

STREAM_KEEPALIVE_SECONDS = 15


class ExcelUploadView(APIView):
    """POST upload/<hoca|ogrenci|cap-ogrenci>/ with a multipart `file`"""
    permission_classes = [IsAuthenticated, IsSystemAdmin]
    file_type = None

    def post(self, request):
        serializer = ExcelUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data['file']

        if UploadJob.objects.filter(file_type=self.file_type, status__in=UploadJob.ACTIVE_STATUSES).exists():
            raise ConflictError("Bu türde devam eden bir yükleme zaten var. Lütfen tamamlanmasını bekleyin.")

        job = UploadJob.objects.create(
            file_type=self.file_type,
            file=upload,
            original_name=upload.name,
            file_size=upload.size,
            uploaded_by=request.user,
        )
        log_admin_activity(
            user=request.user,
            action='UPLOAD',
            model_name='UploadJob',
            object_id=job.id,
            description=f"Uploaded {self.file_type} roster {upload.name}",
            ip_address=get_client_ip(request),
        )
        worker.start_import(job)
        job.refresh_from_db()

        return Response(
            {
                "success": True,
                "message": "Dosya yüklendi, işleme alındı.",
                "dosyaId": job.id,
                "data": UploadJobSerializer(job).data,
            },
            status=status.HTTP_202_ACCEPTED
        )


class UploadStatusView(generics.RetrieveAPIView):
    queryset = UploadJob.objects.select_related('uploaded_by')
    serializer_class = UploadJobSerializer
    permission_classes = [IsAuthenticated, IsSystemAdmin]


class UploadHistoryView(generics.ListAPIView):
    queryset = UploadJob.objects.select_related('uploaded_by')
    serializer_class = UploadJobSerializer
    permission_classes = [IsAuthenticated, IsSystemAdmin]
    filterset_fields = ['file_type', 'status']


class CancelUploadView(APIView):
    permission_classes = [IsAuthenticated, IsSystemAdmin]

    def post(self, request, pk):
        job = worker.cancel(get_object_or_404(UploadJob, pk=pk), user=request.user)
        return Response({"success": True, "message": "Dosya yükleme iptal edildi", "data": UploadJobSerializer(job).data})


class MessageListView(generics.ListAPIView):
    """Polling fallback: GET messages/?since=<id>[&job=<id>]"""
    serializer_class = ProgressMessageSerializer
    permission_classes = [IsAuthenticated, IsSystemAdmin]
    pagination_class = None

    def get_queryset(self):
        queryset = ProgressMessage.objects.all()
        since = self.request.query_params.get('since')
        if since:
            if not since.isdigit():
                raise BadRequestError("since bir sayı olmalıdır.")
            queryset = queryset.filter(id__gt=int(since))
        job_id = self.request.query_params.get('job')
        if job_id:
            queryset = queryset.filter(job_id=job_id)
        return queryset[:500]


def _event_stream(subscriber):
    try:
        yield "retry: 3000\n\n"
        while True:
            try:
                payload = subscriber.get(timeout=STREAM_KEEPALIVE_SECONDS)
            except queue.Empty:
                yield ": keepalive\n\n"
                continue
            yield f"id: {payload['id']}\nevent: {payload['type']}\ndata: {json.dumps(payload)}\n\n"
    finally:
        push.unsubscribe(subscriber)


class EventStreamRenderer(BaseRenderer):
    """Accepts EventSource clients in content negotiation; error bodies go out as JSON text"""
    media_type = "text/event-stream"
    format = "sse"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        return json.dumps(data)


class MessageStreamView(APIView):
    """Server-sent events carrying live import messages"""
    permission_classes = [IsAuthenticated, IsSystemAdmin]
    renderer_classes = [JSONRenderer, EventStreamRenderer]

    def get(self, request):
        subscriber = push.subscribe()
        logger.info(f"Import stream opened by {request.user.username}, {push.subscriber_count()} listening")
        response = StreamingHttpResponse(_event_stream(subscriber), content_type="text/event-stream")
        response["Cache-Control"] = "no-cache"
        response["X-Accel-Buffering"] = "no"
        return response
