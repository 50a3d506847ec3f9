from django_filters import rest_framework as filters
from .models import Logbook


class LogbookFilter(filters.FilterSet):
    status = filters.MultipleChoiceFilter(choices=Logbook.STATUS_CHOICES)
    application = filters.NumberFilter(field_name='application__id')
    student = filters.NumberFilter(field_name='application__student__id')

    class Meta:
        model = Logbook
        fields = ['status', 'application', 'student']
