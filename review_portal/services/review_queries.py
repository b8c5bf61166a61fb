"""Role and department scoped views over assignments.

Each dashboard tab is one predicate.  Listing and counting both go through
``tab_query`` so a tab's badge count always equals the length of its list.
"""

from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

from sqlalchemy import and_, or_
from sqlmodel import Session

from review_portal.errors import Forbidden, ValidationError
from review_portal.identity import Principal
from review_portal.models import Assignment, AssignmentStatus, Role
from review_portal.services import assignments as store


class ProfessorTab(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class HodTab(str, Enum):
    APPROVED = "approved"
    RECHECKING = "rechecking"


def _own_rechecking(principal: Principal):
    return and_(
        Assignment.status == AssignmentStatus.RECHECKING,
        Assignment.reviewer_id == principal.id,
    )


def _require_department(principal: Principal) -> str:
    if not principal.department:
        raise Forbidden("No department assigned to this account")
    return principal.department


def parse_tab(tab_enum, value: str):
    try:
        return tab_enum(value)
    except ValueError:
        allowed = ", ".join(t.value for t in tab_enum)
        raise ValidationError(f"Unknown tab '{value}', expected one of: {allowed}")


def tab_query(principal: Principal, tab: ProfessorTab | HodTab) -> Tuple[Any, Sequence[Any]]:
    """Return the (status filter, extra criteria) pair defining a tab for this requester."""
    if principal.role == Role.PROFESSOR and isinstance(tab, ProfessorTab):
        if tab == ProfessorTab.PENDING:
            # New work for everyone, plus items the HOD bounced back to this reviewer
            return None, (
                or_(Assignment.status == AssignmentStatus.PENDING, _own_rechecking(principal)),
            )
        return AssignmentStatus(tab.value), ()
    if principal.role == Role.HOD and isinstance(tab, HodTab):
        return AssignmentStatus(tab.value), ()
    raise Forbidden("Forbidden")


def list_tab(session: Session, principal: Principal, tab: ProfessorTab | HodTab) -> List[Assignment]:
    department = _require_department(principal)
    status, criteria = tab_query(principal, tab)
    return store.find_by_department_and_status(session, department, status, criteria)


def count_tab(session: Session, principal: Principal, tab: ProfessorTab | HodTab) -> int:
    department = _require_department(principal)
    status, criteria = tab_query(principal, tab)
    return store.count_by_department_and_status(session, department, status, criteria)


def professor_counts(session: Session, principal: Principal) -> Dict[str, int]:
    department = _require_department(principal)
    approved = count_tab(session, principal, ProfessorTab.APPROVED)
    rejected = count_tab(session, principal, ProfessorTab.REJECTED)
    return {
        "pending": count_tab(session, principal, ProfessorTab.PENDING),
        "rechecking": store.count_by_department_and_status(
            session, department, criteria=(_own_rechecking(principal),)
        ),
        "approved": approved,
        "rejected": rejected,
        "reviewed": approved + rejected,
    }


def hod_counts(session: Session, principal: Principal) -> Dict[str, int]:
    return {tab.value: count_tab(session, principal, tab) for tab in HodTab}


def student_history(session: Session, principal: Principal, email: str) -> List[Assignment]:
    """All of a student's own submissions, any status."""
    if principal.role != Role.STUDENT or email.strip().lower() != principal.email.lower():
        raise Forbidden("You can only view your own submissions")
    return store.find_by_student_email(session, principal.email)
