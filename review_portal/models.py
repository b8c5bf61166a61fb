"""SQLModel models for the assignment review portal."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, LargeBinary, UniqueConstraint
from sqlmodel import Field, SQLModel

from review_portal.utils import utc_now


class Role(str, Enum):
    STUDENT = "student"
    PROFESSOR = "professor"
    HOD = "hod"
    ADMIN = "admin"


class AssignmentStatus(str, Enum):
    """Review lifecycle of a submission. The column only accepts these values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    RECHECKING = "rechecking"
    SUBMITTED = "submitted"


class Department(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("name", name="uq_department_name"),
        UniqueConstraint("slug", name="uq_department_slug"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    slug: str


class PendingUser(SQLModel, table=True):
    """Signup request waiting for email verification and admin approval."""

    __table_args__ = (UniqueConstraint("email", name="uq_pendinguser_email"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = ""
    email: str
    password_hash: str
    role: str
    department: Optional[str] = None
    otp_code: Optional[str] = None
    otp_expires_at: Optional[datetime] = None
    is_email_verified: bool = Field(default=False)
    is_approved: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)


class User(SQLModel, table=True):
    """Active account that can log in with one of the four roles."""

    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str
    password_hash: str
    role: str = Field(default=Role.STUDENT.value, index=True)
    # Department name or slug; may dangle after the department is deleted
    department: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utc_now)


class Assignment(SQLModel, table=True):
    """One student submission together with its review state."""

    id: Optional[int] = Field(default=None, primary_key=True)

    # Submission facts, written once at creation
    student_id: int = Field(index=True)
    student_name: str
    student_email: str = Field(index=True)
    department: str = Field(index=True)
    title: str
    content_ref: str
    submitted_at: datetime = Field(default_factory=utc_now)

    # Review state
    status: AssignmentStatus = Field(default=AssignmentStatus.PENDING, index=True)
    reviewer_id: Optional[int] = None
    reviewer_name: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    hod_id: Optional[int] = None
    hod_name: Optional[str] = None
    hod_reviewed_at: Optional[datetime] = None
    recheck_note: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class StoredFile(SQLModel, table=True):
    """Binary content of an uploaded file, referenced by Assignment.content_ref."""

    id: Optional[int] = Field(default=None, primary_key=True)
    filename: str
    content_type: str = "application/pdf"
    length: int = 0
    upload_date: datetime = Field(default_factory=utc_now, index=True)
    file_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    data: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
