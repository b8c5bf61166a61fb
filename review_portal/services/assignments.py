"""Persistence and queries for Assignment records."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func, update
from sqlmodel import Session, select

from review_portal.errors import NotFound, ValidationError
from review_portal.models import Assignment, AssignmentStatus
from review_portal.utils import sanitize_text, utc_now

logger = logging.getLogger(__name__)

# Fields reviewers may change. Submission facts are never part of an update.
REVIEW_STATE_FIELDS = frozenset(
    {
        "status",
        "reviewer_id",
        "reviewer_name",
        "reviewed_at",
        "hod_id",
        "hod_name",
        "hod_reviewed_at",
        "recheck_note",
    }
)

StatusFilter = Optional[AssignmentStatus | Iterable[AssignmentStatus]]


def create(
    session: Session,
    student_id: int,
    student_name: str,
    student_email: str,
    department: str,
    title: str,
    content_ref: str,
) -> Assignment:
    """Record a new submission in the pending state."""
    clean_title = sanitize_text(title)
    if not clean_title:
        raise ValidationError("Title is required")
    if not content_ref:
        raise ValidationError("File is required")

    now = utc_now()
    assignment = Assignment(
        student_id=student_id,
        student_name=student_name,
        student_email=student_email,
        department=department,
        title=clean_title,
        content_ref=content_ref,
        status=AssignmentStatus.PENDING,
        submitted_at=now,
        created_at=now,
        updated_at=now,
    )
    session.add(assignment)
    session.commit()
    session.refresh(assignment)
    logger.info("Assignment %s created by student %s in %s", assignment.id, student_id, department)
    return assignment


def get(session: Session, assignment_id: int) -> Optional[Assignment]:
    return session.get(Assignment, assignment_id, populate_existing=True)


def find_by_student_email(session: Session, email: str) -> List[Assignment]:
    return list(session.exec(select(Assignment).where(Assignment.student_email == email)).all())


def find_by_student_id(session: Session, student_id: int, status: StatusFilter = None) -> List[Assignment]:
    stmt = select(Assignment).where(Assignment.student_id == student_id)
    if status is not None:
        stmt = stmt.where(_status_clause(status))
    return list(session.exec(stmt.order_by(Assignment.created_at.desc())).all())


def find_by_content_ref(session: Session, content_ref: str) -> Optional[Assignment]:
    return session.exec(select(Assignment).where(Assignment.content_ref == content_ref)).first()


def count_for_student(session: Session, student_id: int) -> int:
    stmt = select(func.count()).select_from(Assignment).where(Assignment.student_id == student_id)
    return session.exec(stmt).one()


def _status_clause(status: AssignmentStatus | Iterable[AssignmentStatus]):
    if isinstance(status, AssignmentStatus):
        return Assignment.status == status
    return Assignment.status.in_(list(status))


def _department_criteria(department: str, status: StatusFilter, criteria: Sequence[Any]) -> list:
    clauses = [Assignment.department == department]
    if status is not None:
        clauses.append(_status_clause(status))
    clauses.extend(criteria)
    return clauses


def find_by_department_and_status(
    session: Session,
    department: str,
    status: StatusFilter = None,
    criteria: Sequence[Any] = (),
) -> List[Assignment]:
    """Department-scoped listing, newest first. ``criteria`` are extra SQL clauses."""
    stmt = (
        select(Assignment)
        .where(*_department_criteria(department, status, criteria))
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
    )
    return list(session.exec(stmt).all())


def count_by_department_and_status(
    session: Session,
    department: str,
    status: StatusFilter = None,
    criteria: Sequence[Any] = (),
) -> int:
    """Count with exactly the same predicate as find_by_department_and_status."""
    stmt = select(func.count()).select_from(Assignment).where(*_department_criteria(department, status, criteria))
    return session.exec(stmt).one()


def _check_patch(patch: Dict[str, Any]) -> None:
    unknown = set(patch) - REVIEW_STATE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    if "status" in patch and not isinstance(patch["status"], AssignmentStatus):
        try:
            patch["status"] = AssignmentStatus(patch["status"])
        except ValueError:
            raise ValidationError(f"Unknown status: {patch['status']}")


def update_review_state_if(
    session: Session,
    assignment_id: int,
    patch: Dict[str, Any],
    *conditions: Any,
) -> Optional[Assignment]:
    """
    Apply ``patch`` in a single conditional UPDATE.

    The row is only changed if it still matches ``conditions`` at write time, so of
    two concurrent writers racing on the same precondition only the first succeeds.

    Returns:
        The updated assignment, or None if no row matched
    """
    patch = dict(patch)
    _check_patch(patch)
    stmt = (
        update(Assignment)
        .where(Assignment.id == assignment_id, *conditions)
        .values(**patch, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    result = session.exec(stmt)
    session.commit()
    if result.rowcount == 0:
        return None
    return get(session, assignment_id)


def update_review_state(session: Session, assignment_id: int, patch: Dict[str, Any]) -> Assignment:
    updated = update_review_state_if(session, assignment_id, patch)
    if updated is None:
        raise NotFound("Assignment not found")
    return updated


def delete_all_for_student(session: Session, student_id: int) -> int:
    """Remove every submission of a student. Returns the number of rows deleted."""
    result = session.exec(delete(Assignment).where(Assignment.student_id == student_id))
    session.commit()
    logger.info("Deleted %d assignments of student %s", result.rowcount, student_id)
    return result.rowcount
