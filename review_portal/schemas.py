"""JSON shapes returned by the API. Password hashes and codes never leave the server."""

from typing import Any, Dict, Optional

from review_portal.models import Assignment, Department, PendingUser, User
from review_portal.services.content_store import FileDescriptor
from review_portal.utils import format_date


def department_out(department: Department) -> Dict[str, Any]:
    return {"id": department.id, "name": department.name, "slug": department.slug}


def user_out(user: User, department_name: Optional[str] = None) -> Dict[str, Any]:
    data = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": (user.role or "").strip().lower(),
        "department": user.department,
        "created_at": user.created_at,
    }
    if department_name is not None:
        data["department_name"] = department_name
    return data


def pending_user_out(pending: PendingUser) -> Dict[str, Any]:
    return {
        "id": pending.id,
        "name": pending.name,
        "email": pending.email,
        "role": pending.role,
        "department": pending.department,
        "is_email_verified": pending.is_email_verified,
        "is_approved": pending.is_approved,
        "created_at": pending.created_at,
    }


def assignment_out(assignment: Assignment) -> Dict[str, Any]:
    return {
        "id": assignment.id,
        "student_id": assignment.student_id,
        "student_name": assignment.student_name,
        "student_email": assignment.student_email,
        "department": assignment.department,
        "title": assignment.title,
        "file_id": assignment.content_ref,
        "submitted_at": assignment.submitted_at,
        "status": assignment.status.value,
        "reviewer_id": assignment.reviewer_id,
        "reviewer_name": assignment.reviewer_name,
        "reviewed_at": assignment.reviewed_at,
        "hod_id": assignment.hod_id,
        "hod_name": assignment.hod_name,
        "hod_reviewed_at": assignment.hod_reviewed_at,
        "recheck_note": assignment.recheck_note,
        "created_at": assignment.created_at,
        "updated_at": assignment.updated_at,
    }


def history_entry_out(assignment: Assignment, descriptor: Optional[FileDescriptor]) -> Dict[str, Any]:
    """Row of a student's own submission history."""
    return {
        "id": assignment.id,
        "file_id": assignment.content_ref,
        "filename": descriptor.filename if descriptor else "File Not Found",
        "upload_date": descriptor.upload_date if descriptor else None,
        "title": assignment.title,
        "status": assignment.status.value,
        "reviewer_name": assignment.reviewer_name or "N/A",
        "recheck_note": assignment.recheck_note,
        "submitted_at": assignment.submitted_at,
        "submitted_at_formatted": format_date(assignment.submitted_at),
    }
