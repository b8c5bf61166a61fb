"""Signup, email verification and login routes."""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel
from sqlmodel import Session

from review_portal.database import get_session
from review_portal.deps import get_notifier
from review_portal.email_utils import Notifier
from review_portal.schemas import department_out
from review_portal.services import accounts, departments

router = APIRouter()


class SignupIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None


class VerifyOtpIn(BaseModel):
    email: str
    otp: str


class LoginIn(BaseModel):
    email: str = ""
    password: str = ""
    role: str = ""


@router.post("/signup")
def signup(
    payload: SignupIn = Body(...),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    accounts.signup(
        session,
        notifier,
        name=payload.name or "",
        email=payload.email or "",
        password=payload.password or "",
        role=payload.role or "",
        department=payload.department,
    )
    return {"message": "Verification code sent to your email."}


@router.post("/verify-otp")
def verify_otp(payload: VerifyOtpIn = Body(...), session: Session = Depends(get_session)):
    accounts.verify_otp(session, payload.email, payload.otp)
    return {"message": "Verification successful. Pending admin approval."}


@router.post("/login")
def login(payload: LoginIn = Body(...), session: Session = Depends(get_session)):
    result = accounts.login(session, payload.email, payload.password, payload.role)
    user = result["user"]
    return {
        "message": "Login successful",
        "redirect": f"/{user['role']}",
        "token": result["token"],
        "departments": [department_out(d) for d in departments.list_departments(session)],
        "user": user,
    }
