# routes/auth.py
from functools import wraps

from flask import Blueprint, jsonify, request, session

from errors import AuthenticationError
from services import store

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

SESSION_KEY = 'user_id'


def start_session(user):
    session.clear()
    session.permanent = False  # gone when the browser closes
    session[SESSION_KEY] = user.id


def login_required_api(f):
    """Resolve the session into a User and pass it to the view as ``current_user``."""
    @wraps(f)
    def decorated(*args, **kwargs):
        user = store.get_user(session.get(SESSION_KEY))
        if user is None:
            session.pop(SESSION_KEY, None)
            raise AuthenticationError("authentication required")
        kwargs['current_user'] = user
        return f(*args, **kwargs)
    return decorated


@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    user = store.create_user(
        username=data.get("username"),
        email=data.get("email"),
        password=data.get("password"),
        role=data.get("role", "student"),
        designation=data.get("designation"),
    )
    start_session(user)
    return jsonify(user.to_dict()), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""
    if not email or not password:
        raise AuthenticationError("Please enter email and password.")
    user = store.authenticate(email, password)
    start_session(user)
    return jsonify(user.to_dict())


@auth_bp.route("/logout", methods=["POST"])
def logout():
    session.clear()
    return jsonify({"success": True})


@auth_bp.route("/me", methods=["GET"])
@login_required_api
def me(current_user):
    return jsonify(current_user.to_dict())
