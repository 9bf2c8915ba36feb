# services/access.py: which files a user may see in the repository
from sqlalchemy import or_

from models.file import StoredFile

# Extra owners each staff designation can read besides its own files.
# Not a seniority chain: a dean reads hod files but not faculty files.
VISIBILITY = {
    "faculty": {"roles": ("student",), "designations": ()},
    "hod": {"roles": ("student",), "designations": ("faculty",)},
    "dean": {"roles": ("student",), "designations": ("hod",)},
}

SEES_EVERYTHING = "principal"


def visibility_filter(user_id, role, designation):
    """Return a SQLAlchemy clause selecting the files visible to the caller.

    ``None`` means no restriction (principal).
    """
    own = StoredFile.user_id == user_id
    if role != "staff":
        return own
    if designation == SEES_EVERYTHING:
        return None

    scope = VISIBILITY.get(designation)
    if scope is None:
        # unknown designation falls back to own files only
        return own

    clauses = [own]
    if scope["roles"]:
        clauses.append(StoredFile.user_role.in_(scope["roles"]))
    if scope["designations"]:
        clauses.append(StoredFile.user_designation.in_(scope["designations"]))
    return or_(*clauses)


def visible_files_query(user):
    query = StoredFile.query
    clause = visibility_filter(user.id, user.role, user.designation)
    if clause is not None:
        query = query.filter(clause)
    return query.order_by(StoredFile.created_at.desc())


def can_view(user, stored_file):
    """Same rule as visibility_filter, evaluated on a loaded file."""
    if stored_file.user_id == user.id:
        return True
    if user.role != "staff":
        return False
    if user.designation == SEES_EVERYTHING:
        return True
    scope = VISIBILITY.get(user.designation)
    if scope is None:
        return False
    return (stored_file.user_role in scope["roles"]
            or stored_file.user_designation in scope["designations"])
