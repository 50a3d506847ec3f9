from rest_framework import serializers
from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from .models import CustomUser, CapUser

User = get_user_model()


# -------------------------------
# AUTH SERIALIZERS
# -------------------------------
class LoginSerializer(serializers.Serializer):
    kullanici_adi = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get('request'),
            username=attrs.get('kullanici_adi'),
            password=attrs.get('password'),
        )
        if user is None:
            raise serializers.ValidationError("Kullanıcı adı veya şifre hatalı.")
        attrs['user'] = user
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=6)

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError("Mevcut şifre hatalı.")
        return value

    def validate(self, attrs):
        if attrs['current_password'] == attrs['new_password']:
            raise serializers.ValidationError({"new_password": "Yeni şifre mevcut şifreyle aynı olamaz."})
        validate_password(attrs['new_password'], self.context['request'].user)
        return attrs


# -------------------------------
# USER SERIALIZERS
# -------------------------------
class AdvisorSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = ['id', 'name', 'email', 'faculty', 'department']


class CapUserSerializer(serializers.ModelSerializer):
    cap_advisor = AdvisorSummarySerializer(read_only=True)

    class Meta:
        model = CapUser
        fields = [
            'id', 'cap_faculty', 'cap_department', 'cap_program',
            'cap_student_number', 'cap_class', 'cap_advisor',
        ]


class UserProfileSerializer(serializers.ModelSerializer):
    """Read-only profile returned by login and /me"""
    advisor = AdvisorSummarySerializer(read_only=True)
    cap_records = CapUserSerializer(many=True, read_only=True)

    class Meta:
        model = CustomUser
        fields = [
            'id',
            'tc_kimlik',
            'username',
            'name',
            'email',
            'role',
            'student_number',
            'faculty',
            'department',
            'student_class',
            'advisor',
            'cap_records',
            'has_logged_in',
            'is_active',
            'date_joined',
        ]
        read_only_fields = fields


class AdminUserSerializer(serializers.ModelSerializer):
    """Full user CRUD for administrators"""
    password = serializers.CharField(write_only=True, required=False, min_length=6)
    advisor = serializers.PrimaryKeyRelatedField(
        queryset=CustomUser.objects.filter(role=CustomUser.ROLE_ADVISOR),
        required=False,
        allow_null=True,
    )
    advisor_name = serializers.CharField(source='advisor.name', read_only=True)

    class Meta:
        model = CustomUser
        fields = [
            'id', 'tc_kimlik', 'username', 'name', 'email', 'role',
            'student_number', 'faculty', 'department', 'student_class',
            'advisor', 'advisor_name', 'has_logged_in', 'is_active',
            'date_joined', 'password',
        ]
        read_only_fields = ['id', 'date_joined', 'has_logged_in']

    def validate_tc_kimlik(self, value):
        if value in (None, ''):
            return None
        if not value.isdigit() or len(value) != 11:
            raise serializers.ValidationError("T.C. kimlik numarası 11 haneli olmalıdır.")
        return value

    def validate_email(self, value):
        if not value:
            return value
        qs = CustomUser.objects.filter(email__iexact=value)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Bu e-posta adresi başka bir kullanıcıya ait.")
        return value.lower()

    def validate(self, attrs):
        if not self.instance and not attrs.get('password'):
            raise serializers.ValidationError({"password": "Yeni kullanıcı için şifre zorunludur."})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        username = validated_data.pop('username')
        return CustomUser.objects.create_user(username, password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
