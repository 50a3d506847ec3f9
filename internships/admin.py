from django.contrib import admin
from .models import InternshipApplication, ExemptionApplication


@admin.register(InternshipApplication)
class InternshipApplicationAdmin(admin.ModelAdmin):
    list_display = ("student", "institution_name", "internship_type", "start_date", "end_date", "status", "created_at")
    list_filter = ("status", "internship_type", "is_cap_application", "created_at")
    search_fields = ("student__name", "student__username", "institution_name", "advisor_email")
    readonly_fields = ("created_at", "updated_at", "approved_at")


@admin.register(ExemptionApplication)
class ExemptionApplicationAdmin(admin.ModelAdmin):
    list_display = ("student", "advisor_email", "status", "created_at")
    list_filter = ("status", "is_cap_application")
    search_fields = ("student__name", "student__username", "advisor_email")
