"""
Approval state machine for internship applications.

Everything here is pure: no database, no request. The model and the views feed
the current status, the acting party and the decision in, and persist what
comes out.

    HOCA_ONAYI_BEKLIYOR -> KARIYER_MERKEZI_ONAYI_BEKLIYOR -> SIRKET_ONAYI_BEKLIYOR -> ONAYLANDI
            \\                        \\                               \\
             +------------------------+-------------------------------+--> REDDEDILDI / IPTAL_EDILDI
"""

ADVISOR_PENDING = 'HOCA_ONAYI_BEKLIYOR'
CAREER_CENTER_PENDING = 'KARIYER_MERKEZI_ONAYI_BEKLIYOR'
COMPANY_PENDING = 'SIRKET_ONAYI_BEKLIYOR'
APPROVED = 'ONAYLANDI'
REJECTED = 'REDDEDILDI'
CANCELLED = 'IPTAL_EDILDI'

STATUSES = (ADVISOR_PENDING, CAREER_CENTER_PENDING, COMPANY_PENDING, APPROVED, REJECTED, CANCELLED)
PENDING_STATUSES = (ADVISOR_PENDING, CAREER_CENTER_PENDING, COMPANY_PENDING)
TERMINAL_STATUSES = (APPROVED, REJECTED, CANCELLED)

STUDENT = 'OGRENCI'
ADVISOR = 'DANISMAN'
CAREER_CENTER = 'KARIYER_MERKEZI'
COMPANY = 'SIRKET'
SYSTEM = 'SISTEM'

APPROVE = 'approve'
REJECT = 'reject'
CANCEL = 'cancel'

DECISION_PENDING = 0
DECISION_APPROVED = 1
DECISION_REJECTED = -1

# which party an application is waiting on, and where its approval leads
STAGE_OWNER = {
    ADVISOR_PENDING: ADVISOR,
    CAREER_CENTER_PENDING: CAREER_CENTER,
    COMPANY_PENDING: COMPANY,
}
NEXT_ON_APPROVE = {
    ADVISOR_PENDING: CAREER_CENTER_PENDING,
    CAREER_CENTER_PENDING: COMPANY_PENDING,
    COMPANY_PENDING: APPROVED,
}
DECISION_FIELD = {
    ADVISOR: 'advisor_decision',
    CAREER_CENTER: 'career_center_decision',
    COMPANY: 'company_decision',
}

NOT_PENDING_MESSAGES = {
    ADVISOR: "Bu başvuru danışman onayı beklemiyor.",
    CAREER_CENTER: "Bu başvuru kariyer merkezi onayı beklemiyor.",
    COMPANY: "Bu başvuru şirket onayı beklemiyor.",
}
STUDENT_CANCEL_MESSAGE = "Sadece 'Danışman Onayı Bekliyor' durumundaki başvurular iptal edilebilir."


class InvalidTransition(Exception):
    def __init__(self, message, current=None, actor=None, decision=None):
        super().__init__(message)
        self.message = message
        self.current = current
        self.actor = actor
        self.decision = decision


def next_status(current, actor, decision):
    """Return the status an application moves to, or raise InvalidTransition."""
    if current not in STATUSES:
        raise InvalidTransition(f"Bilinmeyen başvuru durumu: {current}", current, actor, decision)

    if decision == CANCEL:
        if actor == STUDENT:
            if current != ADVISOR_PENDING:
                raise InvalidTransition(STUDENT_CANCEL_MESSAGE, current, actor, decision)
            return CANCELLED
        if actor == SYSTEM and current in PENDING_STATUSES:
            return CANCELLED
        raise InvalidTransition("Bu başvuru iptal edilemez.", current, actor, decision)

    if decision not in (APPROVE, REJECT):
        raise InvalidTransition(f"Geçersiz karar: {decision}", current, actor, decision)

    if actor not in DECISION_FIELD:
        raise InvalidTransition("Bu işlem için yetkiniz yok.", current, actor, decision)

    if STAGE_OWNER.get(current) != actor:
        raise InvalidTransition(NOT_PENDING_MESSAGES[actor], current, actor, decision)

    if decision == APPROVE:
        return NEXT_ON_APPROVE[current]
    return REJECTED


def status_from_decisions(advisor, career_center, company, cancelled=False):
    """The aggregate status implied by the three decision fields."""
    if cancelled:
        return CANCELLED
    if DECISION_REJECTED in (advisor, career_center, company):
        return REJECTED
    if advisor == DECISION_PENDING:
        return ADVISOR_PENDING
    if career_center == DECISION_PENDING:
        return CAREER_CENTER_PENDING
    if company == DECISION_PENDING:
        return COMPANY_PENDING
    return APPROVED


def is_forward(old, new):
    """True when new is reachable from old without going back."""
    if old == new:
        return True
    if old in TERMINAL_STATUSES:
        return False
    if new in (REJECTED, CANCELLED):
        return True
    order = list(PENDING_STATUSES) + [APPROVED]
    return order.index(new) > order.index(old)


def decisions_for(status, rejected_by=None):
    """
    Decision triple (advisor, career_center, company) that agrees with a status
    set directly by an administrator. rejected_by names the stage that refused.
    """
    if status == REJECTED:
        order = [ADVISOR, CAREER_CENTER, COMPANY]
        stage = order.index(rejected_by) if rejected_by in order else 0
        return tuple(
            DECISION_APPROVED if i < stage else DECISION_REJECTED if i == stage else DECISION_PENDING
            for i in range(3)
        )
    approved_stages = {
        ADVISOR_PENDING: 0,
        CAREER_CENTER_PENDING: 1,
        COMPANY_PENDING: 2,
        APPROVED: 3,
    }[status]
    return tuple(DECISION_APPROVED if i < approved_stages else DECISION_PENDING for i in range(3))
