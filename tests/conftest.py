import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-for-testing")

import io

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from review_portal.auth_utils import create_access_token, hash_password
from review_portal.database import get_session
from review_portal.deps import get_notifier
from review_portal.identity import Principal
from review_portal.main import app
from review_portal.models import Role, User
from review_portal.services import assignments
from review_portal.services.content_store import DatabaseContentStore

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n"


class FakeNotifier:
    """Records outgoing mail instead of talking to an SMTP server."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, body):
        if self.fail:
            return False
        self.sent.append({"to": to, "subject": subject, "body": body})
        return True


# ============================================================================
# IN-MEMORY DATABASE FOR TESTING
# ============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory database per test; StaticPool shares it across sessions."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def content_store(session):
    return DatabaseContentStore(session)


# ============================================================================
# FASTAPI APP & TEST CLIENT
# ============================================================================


@pytest.fixture
def client(engine, notifier):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# ENTITY FIXTURES
# ============================================================================


@pytest.fixture
def make_user(session):
    """Factory creating active accounts."""

    def _make_user(name, role, department="cs", email=None, password="secret123"):
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@u.edu",
            password_hash=hash_password(password),
            role=role.value if isinstance(role, Role) else role,
            department=department,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


def principal_of(user):
    return Principal.from_user(user)


def auth_headers(user):
    token = create_access_token(Principal.from_user(user).claims())
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student(make_user):
    return make_user("Sam Student", Role.STUDENT)


@pytest.fixture
def prof_a(make_user):
    return make_user("Prof A", Role.PROFESSOR)


@pytest.fixture
def prof_b(make_user):
    return make_user("Prof B", Role.PROFESSOR)


@pytest.fixture
def hod(make_user):
    return make_user("Head Cs", Role.HOD)


@pytest.fixture
def admin(make_user):
    return make_user("Admin", Role.ADMIN, department=None)


@pytest.fixture
def make_assignment(session):
    """Factory creating pending assignments directly through the store."""

    def _make_assignment(student, title="Essay", department=None, content_ref="1"):
        return assignments.create(
            session,
            student_id=student.id,
            student_name=student.name,
            student_email=student.email,
            department=department or student.department,
            title=title,
            content_ref=content_ref,
        )

    return _make_assignment


def pdf_upload(name="essay.pdf", data=PDF_BYTES):
    return {"assignment": (name, io.BytesIO(data), "application/pdf")}
