"""The authenticated caller as seen by services."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from review_portal.errors import Unauthorized
from review_portal.models import Role, User


@dataclass(frozen=True)
class Principal:
    """Identity decoded from a bearer token, passed explicitly to services."""

    id: int
    name: str
    email: str
    role: Role
    department: Optional[str]

    def claims(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
        }

    @classmethod
    def from_claims(cls, payload: Dict[str, Any]) -> "Principal":
        try:
            return cls(
                id=int(payload["id"]),
                name=payload.get("name") or "",
                email=payload["email"],
                role=Role(payload["role"]),
                department=payload.get("department"),
            )
        except (KeyError, TypeError, ValueError):
            raise Unauthorized("Invalid token")

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=Role(user.role),
            department=user.department,
        )
