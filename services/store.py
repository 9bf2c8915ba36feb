# services/store.py: users, files and per-user stats
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import (
    AuthenticationError, ConflictError, NotFoundError, PermissionDenied, ValidationError,
)
from extensions import db
from models import utcnow
from models.file import FILE_TYPES, StoredFile
from models.stats import UserStats
from models.user import DESIGNATIONS, ROLES, User
from services.access import visible_files_query


def _clean(s, name="value"):
    if s is not None and not isinstance(s, str):
        raise ValidationError(f"{name} must be a string.")
    return (s or "").strip()


def _email_lower(s):
    return _clean(s, "email").lower()


# -----------------------
# Users
# -----------------------
def get_user(user_id):
    return db.session.get(User, user_id) if user_id else None


def get_user_or_404(user_id):
    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_email(email):
    email = _email_lower(email)
    if not email:
        return None
    return User.query.filter(func.lower(User.email) == email).first()


def create_user(username, email, password, role="student", designation=None, user_id=None):
    username = _clean(username, "username")
    email = _email_lower(email)
    role = _clean(role, "role").lower() or "student"
    designation = _clean(designation, "designation").lower() or None
    if password is not None and not isinstance(password, str):
        raise ValidationError("password must be a string.")

    if not username or not email or not password:
        raise ValidationError("Username, email and password are required.")
    if role not in ROLES:
        raise ValidationError("Role must be student or staff.")
    if role == "staff":
        if designation not in DESIGNATIONS:
            raise ValidationError("Staff accounts need a designation: faculty, hod, dean or principal.")
    else:
        designation = None

    if get_user_by_email(email) is not None:
        raise ConflictError("User already exists with this email.")

    user = User(username=username, email=email, role=role, designation=designation)
    if user_id:
        user.id = str(user_id)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("User already exists with this email.")

    current_app.logger.info("Created user %s (%s/%s)", user.id, role, designation)
    return user


def authenticate(email, password):
    user = get_user_by_email(email)
    current_app.logger.debug("Login attempt for: %s -> found: %s", email, bool(user))
    if not user or not user.check_password(password):
        raise AuthenticationError("Invalid email or password.")
    return user


def set_password(user, new_password):
    if not new_password:
        raise ValidationError("Enter a new password.")
    user.set_password(new_password)
    db.session.commit()


# -----------------------
# Stats
# -----------------------
def _stats_for_update(user_id):
    stats = db.session.get(UserStats, user_id)
    if stats is None:
        stats = UserStats(user_id=user_id, generated=0, downloaded=0)
        db.session.add(stats)
    return stats


def get_stats(user_id):
    stats = db.session.get(UserStats, user_id)
    if stats is None:
        return {"userId": user_id, "generated": 0, "downloaded": 0, "lastActivity": None}
    return stats.to_dict()


# -----------------------
# Files
# -----------------------
def create_file(owner, title, file_type, content, category=None, signature=None,
                report_date=None, images=None):
    title = _clean(title, "title")
    if not title:
        raise ValidationError("Title is required.")
    if file_type not in FILE_TYPES:
        raise ValidationError("Type must be report or certificate.")
    if not isinstance(content, str):
        raise ValidationError("Content is required and must be a string.")
    category = _clean(category, "category") or None
    report_date = _clean(report_date, "reportDate") or None
    if signature is not None and not isinstance(signature, dict):
        raise ValidationError("signature must be an object with name and title.")
    if images is not None and not isinstance(images, list):
        raise ValidationError("images must be a list.")

    now = utcnow()
    stored = StoredFile(
        user_id=owner.id,
        username=owner.username,
        user_role=owner.role,
        user_designation=owner.designation,
        title=title,
        type=file_type,
        category=category,
        signature=signature or None,
        content=content,
        report_date=report_date,
        images=images or None,
        created_at=now,
        downloads_count=0,
    )
    try:
        db.session.add(stored)
        stats = _stats_for_update(owner.id)
        stats.generated += 1
        stats.last_activity = now
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    current_app.logger.info("Stored %s %s for user %s", file_type, stored.id, owner.id)
    return stored


def get_file(file_id):
    stored = db.session.get(StoredFile, file_id)
    if stored is None:
        raise NotFoundError("File not found")
    return stored


def list_files_for_user(user_id):
    """Files visible to ``user_id``, newest first. Unknown users raise NotFoundError."""
    user = get_user_or_404(user_id)
    return visible_files_query(user).all()


def record_download(file_id):
    stored = get_file(file_id)
    stored.downloads_count = StoredFile.downloads_count + 1

    stats = _stats_for_update(stored.user_id)
    stats.downloaded += 1
    stats.last_activity = utcnow()

    db.session.commit()
    return stored


def delete_file(file_id, requester=None):
    stored = get_file(file_id)
    if requester is not None and stored.user_id != requester.id:
        raise PermissionDenied("Only the owner can delete this file.")
    db.session.delete(stored)
    db.session.commit()
    current_app.logger.info("Deleted file %s", file_id)


def delete_all_files_for_user(user_id):
    removed = StoredFile.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    UserStats.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    db.session.commit()
    current_app.logger.info("Deleted %d files for user %s", removed, user_id)
    return removed
