from rest_framework import serializers
from .models import Logbook
from .utils import display_status, upload_deadline


class LogbookApplicationSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    institution_name = serializers.CharField()
    internship_type = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    status = serializers.CharField()
    student_name = serializers.CharField(source='student.name')
    student_number = serializers.CharField(source='student.student_number')


class LogbookSerializer(serializers.ModelSerializer):
    application = LogbookApplicationSerializer(read_only=True)
    display_status = serializers.SerializerMethodField()
    upload_deadline = serializers.SerializerMethodField()
    has_file = serializers.BooleanField(read_only=True)

    class Meta:
        model = Logbook
        exclude = ['file']
        read_only_fields = [f.name for f in Logbook._meta.fields]

    def get_display_status(self, obj):
        return display_status(obj)

    def get_upload_deadline(self, obj):
        return upload_deadline(obj.application)


class LogbookUploadSerializer(serializers.Serializer):
    file = serializers.FileField()


class AdminLogbookSerializer(serializers.ModelSerializer):
    application = LogbookApplicationSerializer(read_only=True)

    class Meta:
        model = Logbook
        fields = ['id', 'application', 'status', 'company_decision', 'advisor_decision', 'reject_reason',
                  'original_file_name', 'file_size', 'upload_date', 'created_at', 'updated_at']
        read_only_fields = ['id', 'application', 'original_file_name', 'file_size', 'upload_date',
                            'created_at', 'updated_at']
