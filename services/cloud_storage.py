# services/cloud_storage.py: anonymous image hosting for shareable links
import base64
import binascii

import requests
from flask import current_app

from errors import CloudUploadError

DEFAULT_UPLOAD_URL = "https://tmpfiles.org/api/v1/upload"


def decode_data_url(data):
    """Return (bytes, mime type) for a data URL or plain base64 string."""
    mime_type = "application/octet-stream"
    if data.startswith("data:"):
        header, _, data = data.partition(",")
        mime_type = header[5:].split(";")[0] or mime_type
    try:
        return base64.b64decode(data, validate=True), mime_type
    except (binascii.Error, ValueError):
        raise CloudUploadError("Image data is not valid base64.")


def to_data_url(image_bytes, mime_type):
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def direct_link(url):
    # https://tmpfiles.org/123/name.png -> https://tmpfiles.org/dl/123/name.png
    if "tmpfiles.org/dl/" in url:
        return url
    return url.replace("tmpfiles.org/", "tmpfiles.org/dl/", 1)


def upload_image(data, file_name, mime_type="image/png"):
    if isinstance(data, str):
        data, mime_type = decode_data_url(data)

    url = current_app.config.get("CLOUD_UPLOAD_URL") or DEFAULT_UPLOAD_URL
    timeout = current_app.config.get("CLOUD_UPLOAD_TIMEOUT", 30)
    current_app.logger.info("Uploading image to cloud: %s", file_name)
    try:
        resp = requests.post(url, files={"file": (file_name, data, mime_type)}, timeout=timeout)
    except requests.exceptions.Timeout:
        raise CloudUploadError("Cloud upload timed out.")
    except requests.exceptions.RequestException as e:
        raise CloudUploadError(f"Cloud upload failed: {e}")

    if not resp.ok:
        current_app.logger.error("Cloud upload failed with status: %s", resp.status_code)
        raise CloudUploadError(f"Cloud upload failed: {resp.status_code}")

    try:
        raw_url = resp.json()["data"]["url"]
    except (ValueError, KeyError, TypeError):
        raise CloudUploadError("Cloud upload returned an unexpected response.")

    link = direct_link(raw_url)
    current_app.logger.info("Image uploaded successfully: %s", link)
    return link
