from django.contrib import admin
from .models import CompanyOTP


@admin.register(CompanyOTP)
class CompanyOTPAdmin(admin.ModelAdmin):
    list_display = ("email", "purpose", "application", "logbook", "created_at", "expires_at", "is_used", "attempts")
    list_filter = ("purpose", "is_used", "created_at")
    search_fields = ("email", "code")
    readonly_fields = ("created_at",)
