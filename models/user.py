# models/user.py
import uuid

from werkzeug.security import generate_password_hash, check_password_hash

from extensions import db
from models import utcnow, isoformat

ROLES = ("student", "staff")
DESIGNATIONS = ("faculty", "hod", "dean", "principal")


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    username = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="student")  # 'student' or 'staff'
    designation = db.Column(db.String(20), nullable=True)  # staff only
    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.CheckConstraint("role IN ('student', 'staff')", name="ck_users_role"),
        db.CheckConstraint(
            "designation IS NULL OR designation IN ('faculty', 'hod', 'dean', 'principal')",
            name="ck_users_designation",
        ),
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password or "")

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "designation": self.designation,
            "createdAt": isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
