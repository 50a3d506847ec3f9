from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from django.http import JsonResponse

def home(request):
    return JsonResponse({"message": "Staj Takip Sistemi API is running."})

urlpatterns = [
    path('', home),
    path('django-admin/', admin.site.urls),

    path('api/auth/', include(('users.urls', 'users'), namespace='users')),
    path("api/", include("internships.urls")),
    path("api/", include("logbooks.urls")),
    path('api/sirket/', include(('companies.urls', 'companies'), namespace='companies')),
    path('api/admin/excel/', include(('imports.urls', 'imports'), namespace='imports')),
    path('api/admin/', include('admin_panel.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
