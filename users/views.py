from django.contrib.auth import get_user_model, logout
from django.contrib.auth.signals import user_logged_in
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.authtoken.views import ObtainAuthToken
from rest_framework.authtoken.models import Token
from rest_framework.permissions import AllowAny, IsAuthenticated
from .models import CapUser
from .serializers import (
    LoginSerializer, ChangePasswordSerializer, UserProfileSerializer, CapUserSerializer
)
from admin_panel.utils import log_admin_activity, get_client_ip

User = get_user_model()


class CustomAuthToken(ObtainAuthToken):
    serializer_class = LoginSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = self.serializer_class(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']

        token, _ = Token.objects.get_or_create(user=user)
        first_login = not user.has_logged_in
        if first_login:
            user.has_logged_in = True
            user.save(update_fields=['has_logged_in'])

        user_logged_in.send(sender=user.__class__, request=request, user=user)

        return Response({
            'token': token.key,
            'first_login': first_login,
            'user': UserProfileSerializer(user).data,
        })


class UserProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = UserProfileSerializer(request.user)
        return Response(serializer.data)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        Token.objects.filter(user=request.user).delete()
        logout(request)
        return Response({"message": "Çıkış yapıldı."})


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        user = request.user
        user.set_password(serializer.validated_data['new_password'])
        user.save()

        # old tokens die with the old password
        Token.objects.filter(user=user).delete()
        token = Token.objects.create(user=user)

        log_admin_activity(
            user=user,
            action='UPDATE',
            model_name='User',
            object_id=user.id,
            description=f"{user.username} changed password",
            ip_address=get_client_ip(request),
        )
        return Response({"message": "Şifre başarıyla değiştirildi.", "token": token.key})


class MyCapRecordsView(APIView):
    """Dual-major records of the logged-in student, used to pick an advisor override"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        records = CapUser.objects.filter(student=request.user).select_related('cap_advisor')
        return Response(CapUserSerializer(records, many=True).data)
