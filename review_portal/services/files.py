"""Binding between assignments and their stored PDF content."""

import logging
import time
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

from sqlmodel import Session

from review_portal.errors import Forbidden, NotFound, ValidationError
from review_portal.identity import Principal
from review_portal.models import Assignment, Role, User
from review_portal.schemas import history_entry_out
from review_portal.services import assignments
from review_portal.services.content_store import ContentStore, FileDescriptor
from review_portal.services.review_queries import student_history
from review_portal.utils import as_utc, sanitize_text

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def _is_pdf(filename: str, content_type: Optional[str]) -> bool:
    return (content_type or "").lower() == PDF_CONTENT_TYPE or filename.lower().endswith(".pdf")


def submit_assignment(
    session: Session,
    content_store: ContentStore,
    principal: Principal,
    title: str,
    filename: Optional[str],
    content_type: Optional[str],
    stream: BinaryIO,
) -> Assignment:
    """Store the uploaded PDF and create a pending assignment pointing at it."""
    if principal.role != Role.STUDENT:
        raise Forbidden("Only students can upload assignments")

    clean_title = sanitize_text(title)
    if not clean_title:
        raise ValidationError("Title is required")
    if not filename:
        raise ValidationError("File is required")
    if not _is_pdf(filename, content_type):
        raise ValidationError("Only PDF files are accepted")

    student = session.get(User, principal.id)
    if not student:
        raise NotFound("Student account not found")
    if not student.department:
        raise ValidationError("Your account has no department")

    stored_name = f"{int(time.time() * 1000)}-{filename}"
    content_ref = content_store.put(
        stored_name,
        stream,
        {"email": student.email.lower(), "title": clean_title},
        content_type=PDF_CONTENT_TYPE,
    )

    return assignments.create(
        session,
        student_id=student.id,
        student_name=student.name,
        student_email=student.email,
        department=student.department,
        title=clean_title,
        content_ref=content_ref,
    )


def history_for(session: Session, content_store: ContentStore, principal: Principal, email: str) -> List[Dict[str, Any]]:
    """A student's submissions with file details, most recent upload first."""
    entries = [
        history_entry_out(a, content_store.describe(a.content_ref))
        for a in student_history(session, principal, email)
    ]
    entries.sort(key=lambda e: as_utc(e["upload_date"] or e["submitted_at"]), reverse=True)
    return entries


def _can_read(session: Session, principal: Principal, descriptor: FileDescriptor) -> bool:
    if principal.role == Role.ADMIN:
        return True
    if principal.role == Role.STUDENT:
        return (descriptor.metadata.get("email") or "").lower() == principal.email.lower()
    if principal.role in (Role.PROFESSOR, Role.HOD):
        owner = assignments.find_by_content_ref(session, descriptor.id)
        return owner is not None and owner.department == principal.department
    return False


def open_file(
    session: Session, content_store: ContentStore, principal: Principal, content_id: str
) -> Tuple[FileDescriptor, bytes]:
    descriptor, data = content_store.get(content_id)
    if not _can_read(session, principal, descriptor):
        raise Forbidden("You do not have access to this file")
    return descriptor, data
