from django.urls import path
from rest_framework.routers import DefaultRouter
from users.models import CustomUser
from .views import (
    StudentApplicationViewSet, StudentExemptionViewSet,
    AdvisorApplicationViewSet, AdvisorExemptionViewSet, AdvisorStudentListView,
    CareerCenterApplicationViewSet, DirectoryView,
)

router = DefaultRouter()
router.register(r"ogrenci/basvuru", StudentApplicationViewSet, basename="student-application")
router.register(r"ogrenci/muafiyet-basvuru", StudentExemptionViewSet, basename="student-exemption")
router.register(r"danisman/basvurular", AdvisorApplicationViewSet, basename="advisor-application")
router.register(r"danisman/muafiyet-basvuru", AdvisorExemptionViewSet, basename="advisor-exemption")
router.register(r"kariyer-merkezi/basvurular", CareerCenterApplicationViewSet, basename="career-application")

urlpatterns = [
    path("ogrenci/istatistik/", StudentApplicationViewSet.as_view({"get": "statistics"}), name="student-statistics"),
    path("danisman/ogrenciler/", AdvisorStudentListView.as_view(), name="advisor-students"),
    path("kariyer-merkezi/ogrenciler/", DirectoryView.as_view(role=CustomUser.ROLE_STUDENT), name="career-students"),
    path("kariyer-merkezi/danismanlar/", DirectoryView.as_view(role=CustomUser.ROLE_ADVISOR), name="career-advisors"),
] + router.urls
