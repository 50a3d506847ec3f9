from rest_framework import serializers
from .models import AdminActivity, Notification


class AdminActivitySerializer(serializers.ModelSerializer):
    actor = serializers.SerializerMethodField()

    class Meta:
        model = AdminActivity
        fields = ['id', 'user', 'actor', 'action', 'model_name',
                  'object_id', 'description', 'ip_address', 'timestamp']

    def get_actor(self, obj):
        if obj.user:
            return obj.user.username
        return obj.actor_label or 'system'


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'title', 'message', 'priority', 'is_read',
                  'created_at', 'created_for']


class DashboardStatsSerializer(serializers.Serializer):
    """Dashboard statistics"""
    applications = serializers.DictField()
    logbooks = serializers.DictField()
    exemptions = serializers.DictField()
    users = serializers.DictField()
    pending_approvals = serializers.IntegerField()
    applications_this_month = serializers.IntegerField()
