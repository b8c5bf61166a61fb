"""Department directory routes. Reading is public, changes are admin only."""

from fastapi import APIRouter, Body, Depends, status
from pydantic import BaseModel
from sqlmodel import Session

from review_portal.database import get_session
from review_portal.deps import require_role
from review_portal.identity import Principal
from review_portal.models import Role
from review_portal.schemas import department_out
from review_portal.services import departments

router = APIRouter()


class DepartmentIn(BaseModel):
    name: str = ""


@router.get("")
def list_departments(session: Session = Depends(get_session)):
    return [department_out(d) for d in departments.list_departments(session)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentIn = Body(...),
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_role([Role.ADMIN])),
):
    department = departments.create_department(session, payload.name)
    return {"message": "Department added successfully", "department": department_out(department)}


@router.delete("/{department_id}")
def delete_department(
    department_id: int,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_role([Role.ADMIN])),
):
    departments.delete_department(session, department_id)
    return {"message": "Department deleted successfully"}
