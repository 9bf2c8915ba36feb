# services/certificates.py: batch certificate extraction and the bulk verification sheet
import json
import time
from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app, render_template

from errors import AIUnavailableError, RepoCertiError
from extensions import db
from models import isoformat, utcnow
from services import ai, cloud_storage, store

VERIFY_FIELDS = ["Recipient Name", "Certificate ID", "Course Title", "Issuing Authority", "Issue Date"]

# extracted key -> camelCase key used by the bulk verifier
VERIFY_KEYS = {
    "recipient_name": "recipientName",
    "certificate_id": "certificateId",
    "course_title": "courseTitle",
    "issuing_authority": "issuingAuthority",
    "issue_date": "issueDate",
}


@dataclass
class ImageUpload:
    file_name: str
    data: bytes
    mime_type: str = "image/png"

    @classmethod
    def from_storage(cls, storage):
        """Build from a werkzeug FileStorage."""
        return cls(storage.filename or "upload", storage.read(), storage.mimetype or "image/png")


@dataclass
class EmbeddedImage:
    data: str  # data URL
    mime_type: str
    file_name: str = ""
    cloud_url: str = ""

    def to_dict(self):
        return {"data": self.data, "mimeType": self.mime_type,
                "fileName": self.file_name, "cloudUrl": self.cloud_url}

    @classmethod
    def from_dict(cls, d):
        return cls(d.get("data", ""), d.get("mimeType", ""), d.get("fileName", ""), d.get("cloudUrl", ""))


@dataclass
class CertificateContent:
    """What a certificate file stores: extracted fields plus the source image."""
    fields: dict = field(default_factory=dict)
    image: EmbeddedImage = None

    def to_json(self):
        return json.dumps(
            {"fields": self.fields, "image": self.image.to_dict() if self.image else None},
            indent=2,
        )

    @classmethod
    def from_json(cls, raw):
        doc = json.loads(raw)
        image = doc.get("image")
        return cls(
            fields={str(k): "" if v is None else str(v) for k, v in (doc.get("fields") or {}).items()},
            image=EmbeddedImage.from_dict(image) if image else None,
        )


def _result(upload, status, data=None, error=None, cloud_url="", file_id=None):
    return {
        "fileName": upload.file_name,
        "status": status,
        "data": data,
        "error": error,
        "cloudUrl": cloud_url,
        "fileId": file_id,
    }


def _try_upload(image_url, prefix):
    try:
        return cloud_storage.upload_image(image_url, f"{prefix}_{int(time.time() * 1000)}.png")
    except RepoCertiError as e:
        current_app.logger.warning("Cloud sync skipped: %s", e)
        return ""


def extract_batch(uploads, fields, owner=None, save=True, upload=True):
    """Extract ``fields`` from each upload in turn.

    Every upload gets its own result; a failing file does not stop the batch.
    Once the AI turns out to be unconfigured the remaining files fail fast.
    """
    results = []
    unavailable = None
    for item in uploads:
        if unavailable is not None:
            results.append(_result(item, "Failed", error=unavailable.message))
            continue
        try:
            data = ai.extract_certificate_info(item.data, item.mime_type, fields)
            image_url = cloud_storage.to_data_url(item.data, item.mime_type)
            cloud_url = _try_upload(image_url, "cert") if upload else ""

            file_id = None
            if save and owner is not None:
                content = CertificateContent(
                    fields=data,
                    image=EmbeddedImage(image_url, item.mime_type, item.file_name, cloud_url),
                )
                title = f"Extracted: {data.get('course_title') or item.file_name}"
                stored = store.create_file(
                    owner, title, "certificate", content.to_json(),
                    category="Verification",
                    report_date=data.get("issue_date") or isoformat(utcnow()),
                )
                file_id = stored.id
            results.append(_result(item, "Verified", data=data, cloud_url=cloud_url, file_id=file_id))
        except AIUnavailableError as e:
            unavailable = e
            results.append(_result(item, "Failed", error=e.message))
        except RepoCertiError as e:
            db.session.rollback()
            current_app.logger.warning("Extraction failed for %s: %s", item.file_name, e)
            results.append(_result(item, "Failed", error=e.message))
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception("Extraction failed for %s", item.file_name)
            results.append(_result(item, "Failed", error=str(e) or "Processing failed"))
    return results


def verify_batch(uploads, upload=True):
    """Bulk verifier: fixed fields, camelCase data, nothing saved."""
    results = extract_batch(uploads, VERIFY_FIELDS, save=False, upload=upload)
    for res in results:
        if res["data"] is not None:
            res["data"] = {camel: res["data"].get(key, "") for key, camel in VERIFY_KEYS.items()}
    return results


def render_verification_sheet(results, generated_by=None):
    """Excel-readable HTML table of bulk verification results."""
    rows = []
    for res in results:
        data = res.get("data") or {}
        verified = res.get("status") == "Verified"
        rows.append({
            "file_name": res.get("fileName", ""),
            "status": res.get("status", "Failed"),
            "verified": verified,
            "data": [data.get(key, "") for key in VERIFY_KEYS.values()],
            "cloud_url": res.get("cloudUrl") or "",
            "fallback": "Sync Failed" if verified else "N/A",
        })
    return render_template(
        "verification_sheet.html",
        headers=["File Name", "Status"] + VERIFY_FIELDS + ["View Link"],
        rows=rows,
        generated_by=generated_by or "Staff",
        generated_at=datetime.now().strftime("%Y-%m-%d %H:%M"),
    )
