"""Department directory and slug rules."""

import pytest

from review_portal.errors import Conflict, NotFound, ValidationError
from review_portal.services import departments
from review_portal.utils import slugify


@pytest.mark.parametrize(
    "name,slug",
    [
        ("Computer Science", "computer_science"),
        ("  Electrical   Engineering ", "electrical_engineering"),
        ("R&D (Labs)", "rd_labs"),
        ("Bio-Tech", "bio-tech"),
    ],
)
def test_slugify(name, slug):
    assert slugify(name) == slug


def test_create_and_list_sorted(session):
    departments.create_department(session, "Mathematics")
    departments.create_department(session, "Computer Science")

    listed = departments.list_departments(session)
    assert [(d.name, d.slug) for d in listed] == [
        ("Computer Science", "computer_science"),
        ("Mathematics", "mathematics"),
    ]


def test_duplicate_name_conflicts(session):
    departments.create_department(session, "Physics")
    with pytest.raises(Conflict):
        departments.create_department(session, "Physics")


def test_duplicate_slug_conflicts(session):
    departments.create_department(session, "Computer Science")
    with pytest.raises(Conflict):
        departments.create_department(session, "computer   science")


def test_name_required(session):
    with pytest.raises(ValidationError):
        departments.create_department(session, "   ")
    with pytest.raises(ValidationError):
        departments.create_department(session, "!!!")


def test_delete_is_unconditional_and_leaves_dangling_tags(session, make_user):
    dept = departments.create_department(session, "Chemistry")
    make_user("Chem Student", "student", department="chemistry")
    assert departments.display_name(session, "chemistry") == "Chemistry"

    departments.delete_department(session, dept.id)

    assert departments.list_departments(session) == []
    assert departments.display_name(session, "chemistry") == "N/A"
    assert departments.display_name(session, None) == "N/A"


def test_delete_missing(session):
    with pytest.raises(NotFound):
        departments.delete_department(session, 77)
