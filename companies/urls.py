from django.urls import path
from .views import CompanyLoginView, CompanyApplicationDecisionView, CompanyLogbookDecisionView, CompanyDownloadView

urlpatterns = [
    path("giris/", CompanyLoginView.as_view(), name="company-login"),
    path("onay/", CompanyApplicationDecisionView.as_view(), name="company-decision"),
    path("defter-onay/", CompanyLogbookDecisionView.as_view(), name="company-logbook-decision"),
    path("download/<int:basvuru_id>/<str:file_type>/", CompanyDownloadView.as_view(), name="company-download"),
]
