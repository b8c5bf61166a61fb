"""Student routes: upload a PDF, view own history, download own files."""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlmodel import Session

from review_portal.database import get_session
from review_portal.deps import get_content_store, require_role
from review_portal.identity import Principal
from review_portal.models import Role
from review_portal.responses import inline_file_response
from review_portal.schemas import assignment_out
from review_portal.services import files
from review_portal.services.content_store import ContentStore

router = APIRouter()


@router.post("/upload")
def upload_assignment(
    title: str = Form(""),
    assignment: UploadFile = File(...),
    session: Session = Depends(get_session),
    content_store: ContentStore = Depends(get_content_store),
    principal: Principal = Depends(require_role([Role.STUDENT])),
):
    created = files.submit_assignment(
        session,
        content_store,
        principal,
        title=title,
        filename=assignment.filename,
        content_type=assignment.content_type,
        stream=assignment.file,
    )
    return assignment_out(created)


@router.get("/all/{email}")
def list_my_assignments(
    email: str,
    session: Session = Depends(get_session),
    content_store: ContentStore = Depends(get_content_store),
    principal: Principal = Depends(require_role([Role.STUDENT])),
):
    return files.history_for(session, content_store, principal, email)


@router.get("/file/{file_id}")
def download_file(
    file_id: str,
    session: Session = Depends(get_session),
    content_store: ContentStore = Depends(get_content_store),
    principal: Principal = Depends(require_role([Role.STUDENT])),
):
    descriptor, data = files.open_file(session, content_store, principal, file_id)
    return inline_file_response(descriptor, data)
