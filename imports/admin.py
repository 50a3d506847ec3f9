from django.contrib import admin
from .models import UploadJob, ProgressMessage


@admin.register(UploadJob)
class UploadJobAdmin(admin.ModelAdmin):
    list_display = ("original_name", "file_type", "status", "total_rows", "successful_rows", "error_rows", "created_at")
    list_filter = ("file_type", "status")
    readonly_fields = ("created_at", "started_at", "finished_at")


@admin.register(ProgressMessage)
class ProgressMessageAdmin(admin.ModelAdmin):
    list_display = ("job", "type", "message", "created_at")
    list_filter = ("type",)
