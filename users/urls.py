from django.urls import path
from .views import (
    CustomAuthToken, LogoutView, UserProfileView, ChangePasswordView, MyCapRecordsView
)


urlpatterns = [
    # Authentication
    path('login/', CustomAuthToken.as_view(), name='login'),
    path('logout/', LogoutView.as_view(), name='logout'),

    # User profile
    path('me/', UserProfileView.as_view(), name='user-profile'),
    path('change-password/', ChangePasswordView.as_view(), name='change-password'),
    path('cap-kayitlari/', MyCapRecordsView.as_view(), name='cap-records'),
]
