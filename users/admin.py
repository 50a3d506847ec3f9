from django.contrib import admin
from .models import CustomUser, CapUser

# -------------------------------
# CustomUser Admin
# -------------------------------
@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = (
        'username',
        'name',
        'email',
        'role',
        'student_number',
        'department',
        'advisor',
        'is_active',
        'date_joined',
    )
    search_fields = ('username', 'email', 'name', 'tc_kimlik', 'student_number')
    list_filter = ('role', 'is_active', 'faculty')
    readonly_fields = ('date_joined', 'last_login')
    raw_id_fields = ('advisor',)

# -------------------------------
# CapUser Admin
# -------------------------------
@admin.register(CapUser)
class CapUserAdmin(admin.ModelAdmin):
    list_display = ('student', 'cap_faculty', 'cap_department', 'cap_program', 'cap_advisor', 'created_at')
    search_fields = ('student__username', 'student__name', 'cap_department', 'cap_program')
    list_filter = ('cap_faculty',)
    raw_id_fields = ('student', 'cap_advisor')
