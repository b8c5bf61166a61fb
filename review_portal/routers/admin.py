"""Admin routes for signup approval and account management."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from review_portal.database import get_session
from review_portal.deps import get_content_store, get_notifier, require_role
from review_portal.email_utils import Notifier
from review_portal.identity import Principal
from review_portal.models import Role
from review_portal.schemas import pending_user_out, user_out
from review_portal.services import accounts, departments
from review_portal.services.content_store import ContentStore

router = APIRouter()

require_admin = require_role([Role.ADMIN])


@router.get("/users")
def list_users(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    """Active users grouped by role, with per-role counts."""
    grouped = accounts.list_users_by_role(session)
    counts = grouped.pop("counts")
    result = {
        role: [user_out(u, departments.display_name(session, u.department)) for u in members]
        for role, members in grouped.items()
    }
    result["counts"] = counts
    return result


@router.get("/pending")
def list_pending(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_admin),
):
    return [pending_user_out(p) for p in accounts.list_pending(session)]


@router.post("/approve/{pending_id}")
def approve(
    pending_id: int,
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    principal: Principal = Depends(require_admin),
):
    user = accounts.approve_pending(session, notifier, pending_id)
    return {"message": "User approved successfully!", "user": user_out(user)}


@router.delete("/reject/{pending_id}")
def reject(
    pending_id: int,
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    principal: Principal = Depends(require_admin),
):
    accounts.reject_pending(session, notifier, pending_id)
    return {"message": "User rejected"}


@router.delete("/delete/{user_id}")
def delete_user(
    user_id: int,
    session: Session = Depends(get_session),
    content_store: ContentStore = Depends(get_content_store),
    principal: Principal = Depends(require_admin),
):
    accounts.delete_user(session, content_store, user_id)
    return {"message": "User and all associated data deleted successfully!"}
