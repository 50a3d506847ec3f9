from django_filters import rest_framework as filters
from users.models import CustomUser
from .models import AdminActivity


class UserFilter(filters.FilterSet):
    """Filter for user management queries"""
    role = filters.ChoiceFilter(choices=CustomUser.ROLE_CHOICES)
    is_active = filters.BooleanFilter()
    advisor = filters.NumberFilter(field_name='advisor__id')
    department = filters.CharFilter(lookup_expr='icontains')
    has_advisor = filters.BooleanFilter(field_name='advisor', lookup_expr='isnull', exclude=True)

    class Meta:
        model = CustomUser
        fields = ['role', 'is_active', 'advisor', 'has_logged_in']


class AdminActivityFilter(filters.FilterSet):
    """Filter for activity logs"""
    action = filters.ChoiceFilter(choices=AdminActivity.ACTION_CHOICES)
    user = filters.NumberFilter(field_name='user__id')
    model_name = filters.CharFilter(lookup_expr='icontains')
    timestamp_from = filters.DateTimeFilter(field_name='timestamp', lookup_expr='gte')
    timestamp_to = filters.DateTimeFilter(field_name='timestamp', lookup_expr='lte')

    class Meta:
        model = AdminActivity
        fields = ['action', 'user', 'model_name', 'object_id']
