"""Account lifecycle: signup, OTP verification, admin decision, login, deletion."""

import io
from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from review_portal.auth_utils import decode_access_token, verify_password
from review_portal.errors import (
    Conflict,
    DependencyFailure,
    Forbidden,
    NotFound,
    Unauthorized,
    ValidationError,
)
from review_portal.models import Assignment, PendingUser, Role, StoredFile, User
from review_portal.services import accounts
from review_portal.utils import as_utc, utc_now


def _signup(session, notifier, email="a@u.edu", role="student", password="pw123456"):
    return accounts.signup(session, notifier, "Ann", email, password, role, "cs")


def _verified(session, notifier, email="a@u.edu", role="student"):
    pending = _signup(session, notifier, email=email, role=role)
    return accounts.verify_otp(session, email, pending.otp_code)


class TestSignup:
    def test_signup_emails_six_digit_code(self, session, notifier):
        pending = _signup(session, notifier)

        assert len(pending.otp_code) == 6 and pending.otp_code.isdigit()
        expires_in = as_utc(pending.otp_expires_at) - utc_now()
        assert timedelta(minutes=9) < expires_in <= timedelta(minutes=10)
        assert notifier.sent[-1]["to"] == "a@u.edu"
        assert pending.otp_code in notifier.sent[-1]["body"]
        assert pending.password_hash != "pw123456"
        assert not pending.is_email_verified

    def test_signup_normalises_email(self, session, notifier):
        pending = _signup(session, notifier, email="  A@U.EDU ")
        assert pending.email == "a@u.edu"

    def test_signup_requires_fields(self, session, notifier):
        with pytest.raises(ValidationError):
            accounts.signup(session, notifier, "Ann", "", "pw", "student", "cs")
        with pytest.raises(ValidationError):
            accounts.signup(session, notifier, "Ann", "a@u.edu", "", "student", "cs")

    def test_signup_rejects_unknown_or_admin_role(self, session, notifier):
        with pytest.raises(ValidationError):
            _signup(session, notifier, role="janitor")
        with pytest.raises(ValidationError):
            _signup(session, notifier, role="admin")

    def test_signup_rejects_invalid_email(self, session, notifier):
        with pytest.raises(ValidationError):
            _signup(session, notifier, email="not-an-email")

    def test_signup_fails_when_code_cannot_be_sent(self, session, notifier):
        notifier.fail = True
        with pytest.raises(DependencyFailure):
            _signup(session, notifier)
        assert session.exec(select(PendingUser)).first() is None

    def test_existing_account_conflicts(self, session, notifier, make_user):
        make_user("Ann", Role.STUDENT, email="a@u.edu")
        with pytest.raises(Conflict):
            _signup(session, notifier)

    def test_verified_pending_signup_conflicts(self, session, notifier):
        _verified(session, notifier)
        with pytest.raises(Conflict):
            _signup(session, notifier)

    def test_unverified_signup_can_be_repeated(self, session, notifier):
        first = _signup(session, notifier)
        first_id = first.id
        second = _signup(session, notifier, role="professor")

        assert second.id == first_id
        assert second.role == "professor"
        assert len(session.exec(select(PendingUser)).all()) == 1


class TestVerifyOtp:
    def test_correct_code_verifies_once(self, session, notifier):
        pending = _signup(session, notifier)
        code = pending.otp_code

        verified = accounts.verify_otp(session, "a@u.edu", code)
        assert verified.is_email_verified
        assert verified.otp_code is None and verified.otp_expires_at is None

        with pytest.raises(ValidationError, match="Already verified"):
            accounts.verify_otp(session, "a@u.edu", code)

    def test_wrong_code(self, session, notifier):
        pending = _signup(session, notifier)
        wrong = "000000" if pending.otp_code != "000000" else "111111"
        with pytest.raises(Unauthorized, match="Invalid OTP"):
            accounts.verify_otp(session, "a@u.edu", wrong)

    def test_expired_code(self, session, notifier):
        pending = _signup(session, notifier)
        pending.otp_expires_at = utc_now() - timedelta(seconds=1)
        session.add(pending)
        session.commit()

        with pytest.raises(Unauthorized, match="OTP expired"):
            accounts.verify_otp(session, "a@u.edu", pending.otp_code)

    def test_no_pending_signup(self, session):
        with pytest.raises(ValidationError, match="No pending signup"):
            accounts.verify_otp(session, "nobody@u.edu", "123456")


class TestAdminDecision:
    def test_approve_copies_account_and_notifies(self, session, notifier):
        pending = _verified(session, notifier)
        password_hash = pending.password_hash
        pending_id = pending.id

        user = accounts.approve_pending(session, notifier, pending_id)

        assert user.email == "a@u.edu"
        assert user.role == "student"
        assert user.department == "cs"
        assert user.password_hash == password_hash
        assert session.get(PendingUser, pending_id) is None
        assert notifier.sent[-1]["subject"] == "Your account has been approved"

    def test_approve_requires_verified_email(self, session, notifier):
        pending = _signup(session, notifier)
        with pytest.raises(ValidationError):
            accounts.approve_pending(session, notifier, pending.id)
        assert session.exec(select(User)).first() is None

    def test_approve_survives_notification_failure(self, session, notifier):
        pending = _verified(session, notifier)
        notifier.fail = True
        user = accounts.approve_pending(session, notifier, pending.id)
        assert user.id is not None

    def test_reject_deletes_pending_regardless_of_verification(self, session, notifier):
        pending = _signup(session, notifier)
        accounts.reject_pending(session, notifier, pending.id)

        assert session.exec(select(PendingUser)).first() is None
        assert session.exec(select(User)).first() is None
        assert notifier.sent[-1]["subject"] == "Signup Request Rejected"

    def test_unknown_pending_id(self, session, notifier):
        with pytest.raises(NotFound):
            accounts.approve_pending(session, notifier, 42)
        with pytest.raises(NotFound):
            accounts.reject_pending(session, notifier, 42)


class TestLogin:
    def test_login_returns_token_with_identity(self, session, make_user):
        user = make_user("Prof A", Role.PROFESSOR, password="secret123")
        result = accounts.login(session, user.email, "secret123", "professor")

        claims = decode_access_token(result["token"])
        assert claims["id"] == user.id
        assert claims["role"] == "professor"
        assert claims["department"] == "cs"
        expires = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        assert timedelta(days=6, hours=23) < expires - utc_now() <= timedelta(days=7)

    def test_login_messages_for_unknown_and_pending(self, session, notifier):
        with pytest.raises(NotFound, match="User not found"):
            accounts.login(session, "a@u.edu", "pw123456", "student")

        pending = _signup(session, notifier)
        with pytest.raises(Unauthorized, match="Email not verified"):
            accounts.login(session, "a@u.edu", "pw123456", "student")

        accounts.verify_otp(session, "a@u.edu", pending.otp_code)
        with pytest.raises(Unauthorized, match="pending admin approval"):
            accounts.login(session, "a@u.edu", "pw123456", "student")

    def test_login_wrong_password(self, session, make_user):
        user = make_user("Ann", Role.STUDENT, password="secret123")
        with pytest.raises(Unauthorized, match="Invalid password"):
            accounts.login(session, user.email, "nope", "student")

    def test_login_wrong_role(self, session, make_user):
        user = make_user("Ann", Role.STUDENT, password="secret123")
        with pytest.raises(Forbidden, match="Please login as student"):
            accounts.login(session, user.email, "secret123", "professor")

    def test_full_lifecycle(self, session, notifier):
        pending = _verified(session, notifier)
        accounts.approve_pending(session, notifier, pending.id)
        result = accounts.login(session, "a@u.edu", "pw123456", "student")
        assert result["user"]["email"] == "a@u.edu"
        assert verify_password("pw123456", session.exec(select(User)).one().password_hash)

    def test_password_whitespace_is_kept(self, session, notifier):
        pending = accounts.signup(session, notifier, "Ann", "a@u.edu", " pw with spaces ", "student", "cs")
        accounts.verify_otp(session, "a@u.edu", pending.otp_code)
        accounts.approve_pending(session, notifier, pending.id)

        result = accounts.login(session, "a@u.edu", " pw with spaces ", "student")
        assert result["user"]["email"] == "a@u.edu"
        with pytest.raises(Unauthorized, match="Invalid password"):
            accounts.login(session, "a@u.edu", "pw with spaces", "student")


class TestUsers:
    def test_users_grouped_by_role(self, session, make_user):
        make_user("S1", Role.STUDENT)
        make_user("S2", "Student ")
        make_user("P1", Role.PROFESSOR)

        grouped = accounts.list_users_by_role(session)
        assert grouped["counts"]["student"] == 2
        assert grouped["counts"]["professor"] == 1
        assert grouped["counts"]["hod"] == 0

    def test_department_students_with_totals(self, session, make_user, make_assignment):
        s1 = make_user("S1", Role.STUDENT)
        make_user("S2", Role.STUDENT, department="ee")
        make_user("P1", Role.PROFESSOR)
        make_assignment(s1)
        make_assignment(s1)

        students = accounts.list_department_students(session, "cs")
        assert [(s["name"], s["total"]) for s in students] == [("S1", 2)]

    def test_delete_user_cascades(self, session, content_store, make_user, make_assignment):
        doomed = make_user("Doomed", Role.STUDENT)
        keeper = make_user("Keeper", Role.STUDENT)
        for title in ("one", "two"):
            ref = content_store.put(f"{title}.pdf", io.BytesIO(b"%PDF-1.4"), {"email": doomed.email, "title": title})
            make_assignment(doomed, title=title, content_ref=ref)
        keep_ref = content_store.put("keep.pdf", io.BytesIO(b"%PDF-1.4"), {"email": keeper.email})
        make_assignment(keeper, content_ref=keep_ref)
        doomed_id = doomed.id

        accounts.delete_user(session, content_store, doomed_id)

        assert session.get(User, doomed_id) is None
        assert session.exec(select(Assignment).where(Assignment.student_id == doomed_id)).all() == []
        remaining = session.exec(select(StoredFile)).all()
        assert [f.id for f in remaining] == [int(keep_ref)]

    def test_delete_unknown_user(self, session, content_store):
        with pytest.raises(NotFound):
            accounts.delete_user(session, content_store, 999)

    def test_ensure_default_admin_only_once(self, session):
        assert accounts.ensure_default_admin(session, "root@u.edu", "pw") is not None
        assert accounts.ensure_default_admin(session, "other@u.edu", "pw") is None
