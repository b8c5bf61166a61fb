"""Account lifecycle: signup, email verification, admin decision, login, deletion."""

import logging
from datetime import timedelta
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from review_portal.auth_utils import create_access_token, generate_otp, hash_password, verify_password
from review_portal.config import settings
from review_portal.email_utils import Notifier, notify_best_effort, send_otp_email
from review_portal.email_validator import normalize_email, validate_email_format
from review_portal.errors import (
    Conflict,
    DependencyFailure,
    Forbidden,
    NotFound,
    Unauthorized,
    ValidationError,
)
from review_portal.identity import Principal
from review_portal.models import PendingUser, Role, User
from review_portal.services import assignments
from review_portal.services.content_store import ContentStore
from review_portal.utils import as_utc, sanitize_text, utc_now

logger = logging.getLogger(__name__)

SIGNUP_ROLES = (Role.STUDENT, Role.PROFESSOR, Role.HOD)


def _find_user(session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == email)).first()


def _find_pending(session: Session, email: str) -> PendingUser | None:
    return session.exec(select(PendingUser).where(PendingUser.email == email)).first()


def signup(
    session: Session,
    notifier: Notifier,
    name: str,
    email: str,
    password: str,
    role: str,
    department: str | None,
) -> PendingUser:
    """Create (or refresh) a pending signup and email it a one-time code."""
    email_clean = normalize_email(email)
    if not email_clean or not password or not role:
        raise ValidationError("All fields are required.")

    email_error = validate_email_format(email_clean)
    if email_error:
        raise ValidationError(email_error)

    try:
        role_value = Role(role.strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown role '{role}'")
    if role_value not in SIGNUP_ROLES:
        raise ValidationError("This role cannot be requested at signup.")

    if _find_user(session, email_clean):
        raise Conflict("Account already exists!")

    pending = _find_pending(session, email_clean)
    if pending and pending.is_email_verified:
        raise Conflict("Signup already pending admin approval.")

    otp_code = generate_otp()
    if not send_otp_email(notifier, email_clean, otp_code):
        raise DependencyFailure("Failed to send verification email.")

    if pending is None:
        pending = PendingUser(email=email_clean, password_hash="", role=role_value.value)

    pending.name = sanitize_text(name)
    pending.password_hash = hash_password(password)
    pending.role = role_value.value
    pending.department = sanitize_text(department) or None
    pending.otp_code = otp_code
    pending.otp_expires_at = utc_now() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
    pending.is_email_verified = False
    pending.is_approved = False

    session.add(pending)
    session.commit()
    session.refresh(pending)
    logger.info("Signup pending for %s as %s", email_clean, role_value.value)
    return pending


def verify_otp(session: Session, email: str, otp_code: str) -> PendingUser:
    pending = _find_pending(session, normalize_email(email))
    if not pending:
        raise ValidationError("No pending signup request.")
    if pending.is_email_verified:
        raise ValidationError("Already verified.")
    if not otp_code or pending.otp_code != otp_code.strip():
        raise Unauthorized("Invalid OTP.")
    if pending.otp_expires_at is None or as_utc(pending.otp_expires_at) < utc_now():
        raise Unauthorized("OTP expired.")

    pending.is_email_verified = True
    pending.otp_code = None
    pending.otp_expires_at = None
    session.add(pending)
    session.commit()
    session.refresh(pending)
    logger.info("Email verified for %s", pending.email)
    return pending


def login(session: Session, email: str, password: str, role: str) -> Dict[str, Any]:
    """Check credentials and the requested role, returning a token and the user."""
    email_clean = normalize_email(email)
    password = password or ""
    requested_role = (role or "").strip().lower()

    user = _find_user(session, email_clean)
    if not user:
        pending = _find_pending(session, email_clean)
        if pending:
            if not pending.is_email_verified:
                raise Unauthorized("Email not verified.")
            raise Unauthorized("Account pending admin approval.")
        raise NotFound("User not found.")

    if not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s: bad password", email_clean)
        raise Unauthorized("Invalid password.")

    if user.role != requested_role:
        raise Forbidden(f"Please login as {user.role}")

    principal = Principal.from_user(user)
    logger.info("User %s logged in as %s", user.id, user.role)
    return {"token": create_access_token(principal.claims()), "user": principal.claims()}


def list_pending(session: Session) -> List[PendingUser]:
    return list(session.exec(select(PendingUser).order_by(PendingUser.created_at)).all())


def approve_pending(session: Session, notifier: Notifier, pending_id: int) -> User:
    """Promote a verified signup to an active account."""
    pending = session.get(PendingUser, pending_id)
    if not pending:
        raise NotFound("User not found")
    if not pending.is_email_verified:
        raise ValidationError("Email has not been verified yet.")
    if _find_user(session, pending.email):
        raise Conflict("Account already exists!")

    user = User(
        name=pending.name,
        email=pending.email,
        password_hash=pending.password_hash,
        role=pending.role,
        department=pending.department,
    )
    session.add(user)
    session.delete(pending)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Account already exists!")
    session.refresh(user)
    logger.info("Approved signup of %s as %s", user.email, user.role)

    notify_best_effort(
        notifier,
        user.email,
        "Your account has been approved",
        f"Hello {user.name},\n\nYour account is approved. You may now log in.\n\n- Admin",
    )
    return user


def reject_pending(session: Session, notifier: Notifier, pending_id: int) -> None:
    pending = session.get(PendingUser, pending_id)
    if not pending:
        raise NotFound("User not found")

    email, name = pending.email, pending.name
    session.delete(pending)
    session.commit()
    logger.info("Rejected signup of %s", email)

    notify_best_effort(
        notifier,
        email,
        "Signup Request Rejected",
        f"Hello {name},\n\nYour signup request was rejected.\n\n- Admin",
    )


def list_users_by_role(session: Session) -> Dict[str, Any]:
    users = session.exec(select(User).order_by(User.name)).all()
    grouped: Dict[str, List[User]] = {r.value: [] for r in Role}
    for user in users:
        role = (user.role or "").strip().lower()
        grouped.setdefault(role, []).append(user)
    return {**grouped, "counts": {role: len(members) for role, members in grouped.items()}}


def list_department_students(session: Session, department: str) -> List[Dict[str, Any]]:
    students = session.exec(
        select(User).where(User.department == department, User.role == Role.STUDENT.value).order_by(User.name)
    ).all()
    return [
        {
            "id": s.id,
            "name": s.name,
            "email": s.email,
            "department": s.department,
            "total": assignments.count_for_student(session, s.id),
        }
        for s in students
    ]


def get_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def delete_user(session: Session, content_store: ContentStore, user_id: int) -> None:
    """Delete an account with its submissions and stored files."""
    user = get_user(session, user_id)
    email = (user.email or "").lower()

    assignments.delete_all_for_student(session, user.id)

    owned = content_store.find_by_metadata(
        lambda meta: (meta.get("email") or "").lower() == email
        or (meta.get("username") or "").lower() == email
    )
    for descriptor in owned:
        content_store.delete(descriptor.id)

    session.delete(user)
    session.commit()
    logger.info("Deleted user %s with %d stored files", user_id, len(owned))


def ensure_default_admin(session: Session, email: str, password: str) -> User | None:
    """Seed an admin account when none exists yet."""
    if session.exec(select(User).where(User.role == Role.ADMIN.value)).first():
        return None
    admin = User(
        name="System Admin",
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=Role.ADMIN.value,
    )
    session.add(admin)
    session.commit()
    session.refresh(admin)
    logger.info("Seeded default admin user: %s", admin.email)
    return admin
