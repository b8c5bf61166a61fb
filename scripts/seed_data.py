"""
Sample data seeder for local development.

Creates a few departments and one active account per role (password "password123").

Usage:
    python scripts/seed_data.py
"""

from sqlmodel import Session, select

from review_portal.auth_utils import hash_password
from review_portal.config import settings
from review_portal.database import create_db_and_tables, engine
from review_portal.models import Department, Role, User
from review_portal.services.accounts import ensure_default_admin
from review_portal.services.departments import create_department

DEPARTMENTS = ["Computer Science", "Electrical Engineering", "Mathematics"]

ACCOUNTS = [
    ("Alice Student", "alice@example.edu", Role.STUDENT, "computer_science"),
    ("Bob Student", "bob@example.edu", Role.STUDENT, "computer_science"),
    ("Dr. Carol Professor", "carol@example.edu", Role.PROFESSOR, "computer_science"),
    ("Dr. Dave Professor", "dave@example.edu", Role.PROFESSOR, "computer_science"),
    ("Prof. Erin Head", "erin@example.edu", Role.HOD, "computer_science"),
]


def seed_database():
    """Create sample data for testing"""
    print("Creating database tables...")
    create_db_and_tables()

    with Session(engine) as session:
        ensure_default_admin(session, settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)

        if session.exec(select(Department)).first():
            print("Database already contains departments. Skipping seed.")
            return

        for name in DEPARTMENTS:
            create_department(session, name)
        print(f"Created {len(DEPARTMENTS)} departments")

        for name, email, role, department in ACCOUNTS:
            session.add(
                User(
                    name=name,
                    email=email,
                    password_hash=hash_password("password123"),
                    role=role.value,
                    department=department,
                )
            )
        session.commit()
        print(f"Created {len(ACCOUNTS)} accounts")


if __name__ == "__main__":
    seed_database()
