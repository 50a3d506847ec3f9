"""Resolve which advisor an application or exemption is routed to."""
from collections import namedtuple

from internship_tracking_system.exceptions import BadRequestError
from users.models import CapUser

# a cap_id of 0 / None / "" means the student picked their primary program
NO_CAP_SELECTED = (None, '', 0, '0')

NO_ADVISOR_MESSAGE = "Bu öğrencinin danışmanı sistemde tanımlı değil."
CAP_NOT_FOUND_MESSAGE = "CAP kaydı bulunamadı veya bu CAP kaydına erişim yetkiniz yok."

AdvisorResolution = namedtuple('AdvisorResolution', ['email', 'source', 'cap_record'])


def _from_cap_record(student, cap_id):
    if cap_id in NO_CAP_SELECTED:
        return None
    try:
        cap_record = CapUser.objects.select_related('cap_advisor').get(pk=int(cap_id), student=student)
    except (CapUser.DoesNotExist, TypeError, ValueError):
        raise BadRequestError(CAP_NOT_FOUND_MESSAGE)
    advisor = cap_record.cap_advisor
    if advisor and advisor.email:
        return AdvisorResolution(advisor.email.lower(), 'cap', cap_record)
    # CAP record without its own advisor still counts as the CAP context
    return AdvisorResolution(None, 'cap', cap_record)


def _from_primary_advisor(student, cap_id):
    advisor = student.advisor
    if advisor and advisor.email:
        return AdvisorResolution(advisor.email.lower(), 'primary', None)
    return None


LOOKUP_CHAIN = (_from_cap_record, _from_primary_advisor)


def resolve_advisor(student, cap_id=None):
    """
    Walk LOOKUP_CHAIN in order and return the first AdvisorResolution that has
    an email. A CAP record without an advisor falls back to the primary advisor
    but stays attached to the result.
    """
    cap_record = None
    for lookup in LOOKUP_CHAIN:
        result = lookup(student, cap_id)
        if result is None:
            continue
        if result.cap_record is not None:
            cap_record = result.cap_record
        if result.email:
            return AdvisorResolution(result.email, result.source, cap_record)
    raise BadRequestError(NO_ADVISOR_MESSAGE)
