from rest_framework import serializers
from .models import InternshipApplication, ExemptionApplication
from .validators import (
    validate_phone, validate_safe_text, validate_document, total_days_errors, date_range_errors,
)


class StudentSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    username = serializers.CharField()
    email = serializers.EmailField()
    student_number = serializers.CharField()
    faculty = serializers.CharField()
    department = serializers.CharField()
    student_class = serializers.CharField()


class InternshipApplicationSerializer(serializers.ModelSerializer):
    student = StudentSummarySerializer(read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    internship_type_display = serializers.CharField(source='get_internship_type_display', read_only=True)
    department = serializers.CharField(read_only=True)
    has_logbook = serializers.SerializerMethodField()

    class Meta:
        model = InternshipApplication
        exclude = ['cap_record']
        read_only_fields = [f.name for f in InternshipApplication._meta.fields]

    def get_has_logbook(self, obj):
        return hasattr(obj, 'logbook')


class ApplicationCreateSerializer(serializers.ModelSerializer):
    """Student submission. All rule violations are reported together."""
    cap_id = serializers.IntegerField(required=False, allow_null=True, write_only=True)
    institution_name = serializers.CharField(min_length=3, max_length=100, validators=[validate_safe_text])
    institution_address = serializers.CharField(min_length=10, max_length=300, validators=[validate_safe_text])
    contact_phone = serializers.CharField(validators=[validate_phone])
    authority_name = serializers.CharField(max_length=100, validators=[validate_safe_text])
    authority_title = serializers.CharField(max_length=100, validators=[validate_safe_text])
    selected_days = serializers.CharField(max_length=50, validators=[validate_safe_text])
    internship_type = serializers.ChoiceField(
        choices=InternshipApplication.TYPE_CHOICES,
        error_messages={'invalid_choice': "Geçersiz staj tipi."},
    )
    total_days = serializers.IntegerField()

    class Meta:
        model = InternshipApplication
        fields = [
            'institution_name', 'institution_address', 'contact_phone', 'contact_email',
            'authority_name', 'authority_title', 'internship_type', 'start_date', 'end_date',
            'selected_days', 'total_days', 'health_insurance', 'abroad', 'turkish_company',
            'transcript_file', 'service_record_file', 'insurance_file', 'cap_id',
        ]

    def validate_contact_email(self, value):
        return value.strip().lower()

    def validate_transcript_file(self, value):
        return validate_document(value)

    def validate_service_record_file(self, value):
        return validate_document(value)

    def validate_insurance_file(self, value):
        return validate_document(value)

    def validate(self, attrs):
        errors = date_range_errors(attrs.get('start_date'), attrs.get('end_date'))
        days_error = total_days_errors(attrs.get('internship_type'), attrs.get('total_days'))
        if days_error:
            errors['total_days'] = days_error
        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class CancelSerializer(serializers.Serializer):
    cancel_reason = serializers.CharField(min_length=10, max_length=500, validators=[validate_safe_text])


class AmendDatesSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    total_days = serializers.IntegerField()


class DecisionSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000)


class AdminApplicationSerializer(serializers.ModelSerializer):
    """
    Administrators may correct any field except the owning student. The
    decision fields follow the status and are never written directly.
    """
    student = StudentSummarySerializer(read_only=True)

    class Meta:
        model = InternshipApplication
        exclude = ['cap_record']
        read_only_fields = [
            'id', 'student', 'created_at', 'updated_at', 'approval_letter', 'approved_at',
            'advisor_decision', 'career_center_decision', 'company_decision',
        ]

    def validate(self, attrs):
        internship_type = attrs.get('internship_type', getattr(self.instance, 'internship_type', None))
        total_days = attrs.get('total_days', getattr(self.instance, 'total_days', None))
        days_error = total_days_errors(internship_type, total_days)
        if days_error:
            raise serializers.ValidationError({'total_days': days_error})
        return attrs


# -------------------------------
# EXEMPTION
# -------------------------------
class ExemptionApplicationSerializer(serializers.ModelSerializer):
    student = StudentSummarySerializer(read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = ExemptionApplication
        exclude = ['cap_record']
        read_only_fields = [f.name for f in ExemptionApplication._meta.fields]


class ExemptionCreateSerializer(serializers.Serializer):
    sgk4a_file = serializers.FileField()
    cap_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_sgk4a_file(self, value):
        return validate_document(value)
