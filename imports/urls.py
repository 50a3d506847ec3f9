from django.urls import path
from .models import UploadJob
from .views import (
    ExcelUploadView, UploadStatusView, UploadHistoryView, CancelUploadView, MessageListView, MessageStreamView,
)

urlpatterns = [
    path("upload/hoca/", ExcelUploadView.as_view(file_type=UploadJob.TYPE_ADVISOR), name="upload-advisors"),
    path("upload/ogrenci/", ExcelUploadView.as_view(file_type=UploadJob.TYPE_STUDENT), name="upload-students"),
    path("upload/cap-ogrenci/", ExcelUploadView.as_view(file_type=UploadJob.TYPE_CAP_STUDENT),
         name="upload-cap-students"),
    path("upload/status/<int:pk>/", UploadStatusView.as_view(), name="upload-status"),
    path("upload/history/", UploadHistoryView.as_view(), name="upload-history"),
    path("upload/cancel/<int:pk>/", CancelUploadView.as_view(), name="upload-cancel"),
    path("upload/messages/", MessageListView.as_view(), name="upload-messages"),
    path("upload/stream/", MessageStreamView.as_view(), name="upload-stream"),
]
