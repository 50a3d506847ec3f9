from django_filters import rest_framework as filters
from .models import InternshipApplication, ExemptionApplication


class InternshipApplicationFilter(filters.FilterSet):
    """Filter for application lists of advisors, career center and admins"""
    status = filters.MultipleChoiceFilter(choices=InternshipApplication.STATUS_CHOICES)
    internship_type = filters.ChoiceFilter(choices=InternshipApplication.TYPE_CHOICES)
    student = filters.NumberFilter(field_name='student__id')
    department = filters.CharFilter(field_name='student__department', lookup_expr='icontains')
    start_date_from = filters.DateFilter(field_name='start_date', lookup_expr='gte')
    start_date_to = filters.DateFilter(field_name='start_date', lookup_expr='lte')
    created_from = filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    created_to = filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = InternshipApplication
        fields = ['status', 'internship_type', 'student', 'is_cap_application']


class ExemptionApplicationFilter(filters.FilterSet):
    status = filters.ChoiceFilter(choices=ExemptionApplication.STATUS_CHOICES)

    class Meta:
        model = ExemptionApplication
        fields = ['status', 'is_cap_application']
