# seed.py: demo accounts and sample repository files
from flask import current_app

from extensions import db
from models.user import User
from services import store

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    ("demo-student", "Demo Student", "student@demo.com", "student", None),
    ("demo-faculty", "Dr. Jane Faculty", "faculty@demo.com", "staff", "faculty"),
    ("demo-hod", "Prof. Mark HOD", "hod@demo.com", "staff", "hod"),
    ("demo-dean", "Dr. Dean Anderson", "dean@demo.com", "staff", "dean"),
    ("demo-principal", "Dr. Principal Smith", "principal@demo.com", "staff", "principal"),
]


def seed_demo_users():
    """Create the demo accounts when the user table is empty. Returns how many were added."""
    if db.session.query(User.id).first() is not None:
        return 0
    for user_id, username, email, role, designation in DEMO_USERS:
        store.create_user(username, email, DEMO_PASSWORD, role, designation, user_id=user_id)
    current_app.logger.info("Demo users seeded")
    return len(DEMO_USERS)


def seed_demo_files():
    student = store.get_user("demo-student")
    faculty = store.get_user("demo-faculty")
    if student is None or faculty is None:
        return 0
    store.create_file(
        student, "Extracted: Certificate of Achievement", "certificate",
        '{"fields": {"course_title": "Certificate of Achievement"}, "image": null}',
        category="Verification",
    )
    store.create_file(
        faculty, "Report: Student Progress", "report",
        "<p>This is a test report about student progress.</p>",
        category="Academic",
    )
    return 2
