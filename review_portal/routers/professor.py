"""Professor routes: department review queue and approve/reject decisions."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from review_portal.database import get_session
from review_portal.deps import get_content_store, require_role
from review_portal.identity import Principal
from review_portal.models import Role
from review_portal.responses import inline_file_response
from review_portal.schemas import assignment_out
from review_portal.services import files, review_queries, workflow
from review_portal.services.content_store import ContentStore
from review_portal.services.review_queries import ProfessorTab

router = APIRouter()

require_professor = require_role([Role.PROFESSOR])


@router.get("/assignments-counts")
def assignment_counts(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_professor),
):
    return review_queries.professor_counts(session, principal)


@router.get("/assignments/{tab}")
def list_assignments(
    tab: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_professor),
):
    selected = review_queries.parse_tab(ProfessorTab, tab)
    return [assignment_out(a) for a in review_queries.list_tab(session, principal, selected)]


@router.patch("/assignments/{assignment_id}/{action}")
def review_assignment(
    assignment_id: int,
    action: str,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_professor),
):
    review_action = workflow.parse_action(action, Role.PROFESSOR)
    updated = workflow.apply_action(session, assignment_id, review_action, principal)
    return assignment_out(updated)


@router.get("/assignment/file/{file_id}")
def download_file(
    file_id: str,
    session: Session = Depends(get_session),
    content_store: ContentStore = Depends(get_content_store),
    principal: Principal = Depends(require_professor),
):
    descriptor, data = files.open_file(session, content_store, principal, file_id)
    return inline_file_response(descriptor, data)
