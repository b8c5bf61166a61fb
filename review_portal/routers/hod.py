"""Head-of-department routes: final sign-off and send-back for rechecking."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from review_portal.database import get_session
from review_portal.deps import get_content_store, require_role
from review_portal.errors import Forbidden
from review_portal.identity import Principal
from review_portal.models import AssignmentStatus, Role
from review_portal.responses import inline_file_response
from review_portal.schemas import assignment_out
from review_portal.services import accounts, assignments, files, review_queries, workflow
from review_portal.services.content_store import ContentStore
from review_portal.services.review_queries import HodTab
from review_portal.services.workflow import ReviewAction

router = APIRouter()

require_hod = require_role([Role.HOD])


@router.get("/counts")
def counts(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_hod),
):
    return review_queries.hod_counts(session, principal)


@router.get("/assignments/{tab}")
def list_assignments(
    tab: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_hod),
):
    selected = review_queries.parse_tab(HodTab, tab)
    return [assignment_out(a) for a in review_queries.list_tab(session, principal, selected)]


@router.patch("/assignments/{assignment_id}/submit")
def submit_assignment(
    assignment_id: int,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_hod),
):
    updated = workflow.apply_action(session, assignment_id, ReviewAction.SUBMIT, principal)
    return assignment_out(updated)


@router.patch("/assignments/{assignment_id}/recheck")
def recheck_assignment(
    assignment_id: int,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_hod),
):
    updated = workflow.apply_action(session, assignment_id, ReviewAction.RECHECK, principal)
    return assignment_out(updated)


@router.get("/students")
def list_students(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_hod),
):
    if not principal.department:
        raise Forbidden("No department assigned to this account")
    return accounts.list_department_students(session, principal.department)


@router.get("/student/{student_id}/assignments")
def student_assignments(
    student_id: int,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_hod),
):
    """Approved and signed-off work of one student of the HOD's department."""
    student = accounts.get_user(session, student_id)
    if student.department != principal.department:
        raise Forbidden("This student belongs to another department")
    found = assignments.find_by_student_id(
        session, student_id, [AssignmentStatus.APPROVED, AssignmentStatus.SUBMITTED]
    )
    return [assignment_out(a) for a in found if a.department == principal.department]


@router.get("/assignment/file/{file_id}")
def download_file(
    file_id: str,
    session: Session = Depends(get_session),
    content_store: ContentStore = Depends(get_content_store),
    principal: Principal = Depends(require_hod),
):
    descriptor, data = files.open_file(session, content_store, principal, file_id)
    return inline_file_response(descriptor, data)
