# routes/users.py
from flask import Blueprint, jsonify, request

from services import store

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


@users_bp.route('/email/<path:email>', methods=['GET'])
def get_by_email(email):
    user = store.get_user_by_email(email)
    return jsonify(user.to_dict() if user else None)


@users_bp.route('', methods=['POST'])
def create():
    data = request.get_json(silent=True) or {}
    user = store.create_user(
        username=data.get('username'),
        email=data.get('email'),
        password=data.get('password'),
        role=data.get('role', 'student'),
        designation=data.get('designation'),
        user_id=data.get('id'),
    )
    return jsonify(user.to_dict())
