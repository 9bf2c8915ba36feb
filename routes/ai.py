# routes/ai.py: Gemini-backed certificate and report endpoints
from functools import wraps

from flask import Blueprint, Response, current_app, jsonify, request

from errors import PermissionDenied, ValidationError
from extensions import limiter
from routes.auth import login_required_api
from services import ai
from services.certificates import ImageUpload, extract_batch, render_verification_sheet, verify_batch

ai_bp = Blueprint('ai', __name__, url_prefix='/api')

ALLOWED_EXT = {"png", "jpg", "jpeg", "webp", "gif"}
DEFAULT_FIELDS = ["Recipient Name", "Certificate ID", "Course Title", "Issuing Authority", "Issue Date"]


def staff_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        if kwargs['current_user'].role != 'staff':
            raise PermissionDenied("Access denied. Staff access required.")
        return f(*args, **kwargs)
    return decorated


def allowed_file(filename):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXT


def _uploads():
    files = [f for f in request.files.getlist("files") if f and f.filename]
    if not files:
        raise ValidationError("Please select one or more files.")
    bad = [f.filename for f in files if not allowed_file(f.filename)]
    if bad:
        raise ValidationError(f"Unsupported file type: {', '.join(bad)}")
    return [ImageUpload.from_storage(f) for f in files]


def _fields():
    fields = [f.strip() for f in request.form.getlist("fields") if f.strip()]
    # also accept a single comma separated value
    if len(fields) == 1 and "," in fields[0]:
        fields = [f.strip() for f in fields[0].split(",") if f.strip()]
    return fields or DEFAULT_FIELDS


def _flag(name, default=True):
    value = request.form.get(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


@ai_bp.route('/certificates/extract', methods=['POST'])
@limiter.limit("20 per minute")
@login_required_api
def extract(current_user):
    uploads = _uploads()
    current_app.logger.info(">> extract %d file(s) for user=%s", len(uploads), current_user.id)
    results = extract_batch(uploads, _fields(), owner=current_user, save=_flag("save"), upload=_flag("upload"))
    return jsonify({"results": results})


@ai_bp.route('/certificates/verify', methods=['POST'])
@limiter.limit("20 per minute")
@login_required_api
@staff_required
def verify(current_user):
    uploads = _uploads()
    current_app.logger.info(">> verify %d file(s) for user=%s", len(uploads), current_user.id)
    return jsonify({"results": verify_batch(uploads, upload=_flag("upload"))})


@ai_bp.route('/certificates/verify/export', methods=['POST'])
@login_required_api
@staff_required
def verify_export(current_user):
    data = request.get_json(silent=True)
    results = data.get("results") if isinstance(data, dict) else data
    if not isinstance(results, list) or not results:
        raise ValidationError("Nothing to export.")
    sheet = render_verification_sheet(results, generated_by=current_user.username)
    return Response(
        sheet,
        mimetype="application/vnd.ms-excel",
        headers={"Content-Disposition": "attachment; filename=Verification_Results.xls"},
    )


@ai_bp.route('/reports/generate', methods=['POST'])
@limiter.limit("20 per minute")
@login_required_api
def generate_report(current_user):
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    topic = (data.get("topic") or "").strip()
    if not topic:
        raise ValidationError("Please send a topic.")
    content = ai.generate_report_section(topic, (data.get("structure") or "").strip() or None)
    return jsonify({"content": content, "user": current_user.id})
