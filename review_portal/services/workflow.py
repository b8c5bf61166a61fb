"""Review workflow: the status transitions an assignment may go through.

    pending    --approve/reject (professor)-->     approved | rejected
    approved   --submit (HOD)-->                   submitted
    approved   --recheck (HOD)-->                  rechecking
    rechecking --approve/reject (same reviewer)--> approved | rejected

Once a professor has reviewed an assignment, further professor actions on it are
reserved to that reviewer.  Every transition is a single conditional UPDATE that
re-checks department, status and reviewer at write time.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from sqlalchemy import and_, case, or_
from sqlmodel import Session

from review_portal.errors import Conflict, Forbidden, NotFound, ValidationError
from review_portal.identity import Principal
from review_portal.models import Assignment, AssignmentStatus, Role
from review_portal.services import assignments as store
from review_portal.utils import utc_now

logger = logging.getLogger(__name__)

RECHECK_NOTE = "HOD has sent this assignment back for rechecking."


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    SUBMIT = "submit"
    RECHECK = "recheck"


@dataclass(frozen=True)
class Transition:
    actor: Role
    target: AssignmentStatus
    # States any actor of the department may act on
    open_sources: frozenset
    # States only the recorded reviewer may act on
    locked_sources: frozenset = frozenset()

    @property
    def sources(self) -> frozenset:
        return self.open_sources | self.locked_sources


_REVIEWED = frozenset(
    {AssignmentStatus.APPROVED, AssignmentStatus.REJECTED, AssignmentStatus.RECHECKING}
)

TRANSITIONS: Dict[ReviewAction, Transition] = {
    ReviewAction.APPROVE: Transition(
        actor=Role.PROFESSOR,
        target=AssignmentStatus.APPROVED,
        open_sources=frozenset({AssignmentStatus.PENDING}),
        locked_sources=_REVIEWED,
    ),
    ReviewAction.REJECT: Transition(
        actor=Role.PROFESSOR,
        target=AssignmentStatus.REJECTED,
        open_sources=frozenset({AssignmentStatus.PENDING}),
        locked_sources=_REVIEWED,
    ),
    ReviewAction.SUBMIT: Transition(
        actor=Role.HOD,
        target=AssignmentStatus.SUBMITTED,
        open_sources=frozenset({AssignmentStatus.APPROVED}),
    ),
    ReviewAction.RECHECK: Transition(
        actor=Role.HOD,
        target=AssignmentStatus.RECHECKING,
        open_sources=frozenset({AssignmentStatus.APPROVED}),
    ),
}


def parse_action(value: str, actor: Role) -> ReviewAction:
    try:
        action = ReviewAction(value)
    except ValueError:
        raise ValidationError(f"Unknown action '{value}'")
    if TRANSITIONS[action].actor != actor:
        raise ValidationError(f"Action '{value}' is not available to {actor.value}")
    return action


def _precondition(transition: Transition, principal: Principal):
    allowed = [Assignment.status.in_(list(transition.open_sources))]
    if transition.locked_sources:
        allowed.append(
            and_(
                Assignment.status.in_(list(transition.locked_sources)),
                Assignment.reviewer_id == principal.id,
            )
        )
    return and_(Assignment.department == principal.department, or_(*allowed))


def _patch(action: ReviewAction, transition: Transition, principal: Principal) -> Dict[str, Any]:
    now = utc_now()
    if transition.actor == Role.PROFESSOR:
        # Repeating the current decision keeps its original review time
        unchanged = and_(Assignment.status == transition.target, Assignment.reviewer_id == principal.id)
        return {
            "status": transition.target,
            "reviewer_id": principal.id,
            "reviewer_name": principal.name,
            "reviewed_at": case((unchanged, Assignment.reviewed_at), else_=now),
        }
    if action == ReviewAction.SUBMIT:
        return {
            "status": transition.target,
            "hod_id": principal.id,
            "hod_name": principal.name,
            "hod_reviewed_at": now,
        }
    return {"status": transition.target, "recheck_note": RECHECK_NOTE}


def _explain_refusal(session: Session, assignment_id: int, action: ReviewAction,
                     transition: Transition, principal: Principal) -> Exception:
    """Work out why the conditional update matched nothing."""
    current = store.get(session, assignment_id)
    if current is None:
        return NotFound("Assignment not found")
    if current.department != principal.department:
        return Forbidden("This assignment belongs to another department")
    if current.status not in transition.sources:
        return Conflict(f"Cannot {action.value} an assignment that is {current.status.value}")
    return Forbidden("Only the original reviewer can change this review")


def apply_action(session: Session, assignment_id: int, action: ReviewAction, principal: Principal) -> Assignment:
    """Run one workflow transition on behalf of ``principal``."""
    transition = TRANSITIONS[action]
    if principal.role != transition.actor:
        raise Forbidden("Forbidden")
    if not principal.department:
        raise Forbidden("No department assigned to this account")

    updated = store.update_review_state_if(
        session,
        assignment_id,
        _patch(action, transition, principal),
        _precondition(transition, principal),
    )
    if updated is None:
        error = _explain_refusal(session, assignment_id, action, transition, principal)
        logger.warning(
            "Refused %s on assignment %s by %s %s: %s",
            action.value, assignment_id, principal.role.value, principal.id, error,
        )
        raise error

    logger.info(
        "Assignment %s %s by %s %s -> %s",
        assignment_id, action.value, principal.role.value, principal.id, updated.status.value,
    )
    return updated
