# routes/files.py: the shared repository
import json

from flask import Blueprint, jsonify, request

from errors import NotFoundError, PermissionDenied, ValidationError
from routes.auth import login_required_api
from services import store
from services.access import can_view
from services.certificates import CertificateContent

files_bp = Blueprint('files', __name__, url_prefix='/api')


def _certificate_content(raw):
    if not isinstance(raw, (str, dict)):
        raise ValidationError("Certificate content must be a JSON object.")
    try:
        if isinstance(raw, dict):
            raw = json.dumps(raw)
        return CertificateContent.from_json(raw).to_json()
    except (ValueError, AttributeError, TypeError):
        raise ValidationError("Certificate content must be {\"fields\": {...}, \"image\": ...}.")


def _require_self(user_id, current_user):
    """Per-user listings and stats are only served to that user; unknown ids stay 404."""
    store.get_user_or_404(user_id)
    if current_user.id != user_id:
        raise PermissionDenied("You can only view your own repository.")


@files_bp.route('/files', methods=['POST'])
@login_required_api
def create_file(current_user):
    data = request.get_json(silent=True) or {}
    file_type = data.get('type')
    content = data.get('content')
    if file_type == 'certificate':
        content = _certificate_content(content)

    stored = store.create_file(
        current_user,
        title=data.get('title'),
        file_type=file_type,
        content=content,
        category=data.get('category'),
        signature=data.get('signature'),
        report_date=data.get('reportDate'),
        images=data.get('images'),
    )
    return jsonify({"id": stored.id, "createdAt": stored.to_dict()["createdAt"], "downloadsCount": 0}), 201


@files_bp.route('/files/user/<user_id>', methods=['GET'])
@login_required_api
def list_for_user(user_id, current_user):
    _require_self(user_id, current_user)
    return jsonify([f.to_dict() for f in store.list_files_for_user(user_id)])


@files_bp.route('/files/<file_id>', methods=['GET'])
@login_required_api
def get_file(file_id, current_user):
    stored = store.get_file(file_id)
    if not can_view(current_user, stored):
        raise NotFoundError("File not found")
    return jsonify(stored.to_dict())


@files_bp.route('/stats/<user_id>', methods=['GET'])
@login_required_api
def stats(user_id, current_user):
    _require_self(user_id, current_user)
    return jsonify(store.get_stats(user_id))


@files_bp.route('/files/<file_id>/download', methods=['POST'])
def download(file_id):
    stored = store.record_download(file_id)
    return jsonify({"success": True, "downloadsCount": stored.downloads_count})


@files_bp.route('/files/<file_id>', methods=['DELETE'])
@login_required_api
def delete_file(file_id, current_user):
    store.delete_file(file_id, requester=current_user)
    return jsonify({"success": True})


@files_bp.route('/files/user/<user_id>/all', methods=['DELETE'])
@login_required_api
def delete_all(user_id, current_user):
    if current_user.id != user_id:
        raise PermissionDenied("You can only clear your own files.")
    removed = store.delete_all_files_for_user(user_id)
    return jsonify({"success": True, "deleted": removed})
