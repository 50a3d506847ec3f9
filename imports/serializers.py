import os

from rest_framework import serializers
from .models import UploadJob, ProgressMessage

EXCEL_EXTENSIONS = ('.xlsx', '.xls')
MAX_EXCEL_SIZE = 50 * 1024 * 1024


class UploadJobSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    percentage = serializers.IntegerField(read_only=True)
    uploaded_by = serializers.StringRelatedField()

    class Meta:
        model = UploadJob
        exclude = ['file']


class ExcelUploadSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, value):
        if os.path.splitext(value.name)[1].lower() not in EXCEL_EXTENSIONS:
            raise serializers.ValidationError("Sadece Excel dosyaları (.xlsx, .xls) kabul edilir")
        if value.size > MAX_EXCEL_SIZE:
            raise serializers.ValidationError("Dosya boyutu 50MB'dan büyük olamaz.")
        return value


class ProgressMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProgressMessage
        fields = ['id', 'type', 'job', 'message', 'data', 'created_at']

    def to_representation(self, instance):
        return instance.as_payload()
