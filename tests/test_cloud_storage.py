import base64

import pytest
import requests

from errors import CloudUploadError
from services import cloud_storage


class FakeHTTPResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def posted(monkeypatch):
    calls = []

    def install(response=None, error=None):
        def fake_post(url, files=None, timeout=None):
            calls.append({"url": url, "files": files, "timeout": timeout})
            if error:
                raise error
            return response
        monkeypatch.setattr(cloud_storage.requests, "post", fake_post)
        return calls
    return install


def test_upload_returns_direct_link(ctx, posted):
    calls = posted(FakeHTTPResponse(200, {"status": "success", "data": {"url": "https://tmpfiles.org/123/cert.png"}}))
    data_url = "data:image/jpeg;base64," + base64.b64encode(b"jpeg-bytes").decode()
    assert cloud_storage.upload_image(data_url, "cert.png") == "https://tmpfiles.org/dl/123/cert.png"
    name, body, mime = calls[0]["files"]["file"]
    assert (name, body, mime) == ("cert.png", b"jpeg-bytes", "image/jpeg")
    assert calls[0]["url"] == "https://tmpfiles.org/api/v1/upload"


@pytest.mark.parametrize("response, error", [
    (FakeHTTPResponse(500), None),
    (FakeHTTPResponse(200, {"unexpected": True}), None),
    (None, requests.exceptions.ConnectionError("down")),
    (None, requests.exceptions.Timeout()),
])
def test_upload_failures_raise(ctx, posted, response, error):
    posted(response, error)
    with pytest.raises(CloudUploadError):
        cloud_storage.upload_image(b"raw", "x.png")


def test_decode_rejects_garbage():
    with pytest.raises(CloudUploadError):
        cloud_storage.decode_data_url("data:image/png;base64,@@@")


def test_direct_link_is_idempotent():
    assert cloud_storage.direct_link("https://tmpfiles.org/dl/9/a.png") == "https://tmpfiles.org/dl/9/a.png"
