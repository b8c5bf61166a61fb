"""Department directory."""

import logging
from typing import List

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from review_portal.errors import Conflict, NotFound, ValidationError
from review_portal.models import Department
from review_portal.utils import sanitize_text, slugify

logger = logging.getLogger(__name__)


def list_departments(session: Session) -> List[Department]:
    return list(session.exec(select(Department).order_by(Department.name)).all())


def create_department(session: Session, name: str) -> Department:
    clean_name = sanitize_text(name)
    if not clean_name:
        raise ValidationError("Department name is required")

    slug = slugify(clean_name)
    if not slug:
        raise ValidationError("Department name must contain letters or digits")

    existing = session.exec(
        select(Department).where(or_(Department.name == clean_name, Department.slug == slug))
    ).first()
    if existing:
        raise Conflict("Department already exists")

    department = Department(name=clean_name, slug=slug)
    session.add(department)
    try:
        session.commit()
    except IntegrityError:
        # Lost a race with a concurrent create
        session.rollback()
        raise Conflict("Department already exists")
    session.refresh(department)
    logger.info("Department %r created (slug=%s)", clean_name, slug)
    return department


def delete_department(session: Session, department_id: int) -> None:
    """Delete unconditionally; users and assignments keep their department tag."""
    department = session.get(Department, department_id)
    if not department:
        raise NotFound("Department not found")
    name = department.name
    session.delete(department)
    session.commit()
    logger.info("Department %r deleted", name)


def display_name(session: Session, tag: str | None) -> str:
    """Resolve a department tag (name or slug) for display, 'N/A' when it dangles."""
    if not tag:
        return "N/A"
    department = session.exec(
        select(Department).where(or_(Department.slug == tag, Department.name == tag))
    ).first()
    return department.name if department else "N/A"
