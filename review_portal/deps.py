"""Shared FastAPI dependencies for database access and authentication."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from review_portal.auth_utils import decode_access_token
from review_portal.database import get_session
from review_portal.email_utils import Notifier, SmtpNotifier
from review_portal.errors import Forbidden, Unauthorized
from review_portal.identity import Principal
from review_portal.models import Role
from review_portal.services.content_store import ContentStore, DatabaseContentStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """Resolve the bearer token of the request into a Principal."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("No token provided")
    return Principal.from_claims(decode_access_token(credentials.credentials))


def require_role(required_roles: list[Role]):
    """Dependency factory that enforces one of the given roles."""

    def wrapper(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in required_roles:
            raise Forbidden("Forbidden")
        return principal

    return wrapper


def get_content_store(session: Session = Depends(get_session)) -> ContentStore:
    return DatabaseContentStore(session)


def get_notifier() -> Notifier:
    return SmtpNotifier()
