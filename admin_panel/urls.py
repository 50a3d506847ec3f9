from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    DashboardViewSet,
    AdminActivityViewSet,
    NotificationViewSet,
    UserManagementViewSet,
    ApplicationManagementViewSet,
    LogbookManagementViewSet,
    export_data,
)

router = DefaultRouter()
router.register(r'dashboard', DashboardViewSet, basename='dashboard')
router.register(r'activities', AdminActivityViewSet, basename='activities')
router.register(r'notifications', NotificationViewSet, basename='notifications')
router.register(r'users', UserManagementViewSet, basename='admin-users')
router.register(r'basvurular', ApplicationManagementViewSet, basename='admin-applications')
router.register(r'defterler', LogbookManagementViewSet, basename='admin-logbooks')

urlpatterns = [
    path('', include(router.urls)),
    path('export/', export_data, name='export-data'),
]
