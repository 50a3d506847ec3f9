from django.contrib import admin
from .models import Logbook


@admin.register(Logbook)
class LogbookAdmin(admin.ModelAdmin):
    list_display = ("application", "status", "original_file_name", "upload_date", "updated_at")
    list_filter = ("status",)
    search_fields = ("application__student__name", "application__institution_name")
    readonly_fields = ("created_at", "updated_at", "upload_date")
