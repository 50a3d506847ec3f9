from rest_framework.routers import DefaultRouter
from .views import StudentLogbookViewSet, AdvisorLogbookViewSet

router = DefaultRouter()
router.register(r"ogrenci/defter", StudentLogbookViewSet, basename="student-logbook")
router.register(r"danisman/defterler", AdvisorLogbookViewSet, basename="advisor-logbook")

urlpatterns = router.urls
