import json

import pytest

from errors import AIResponseError, AIUnavailableError
from services import ai


def test_field_key_and_schema():
    assert ai.field_key("  Recipient   Name ") == "recipient_name"
    schema = ai.build_schema(["Course Title", "Issue Date"])
    assert schema["type"] == "OBJECT"
    assert schema["required"] == ["course_title", "issue_date"]
    assert schema["properties"]["issue_date"]["description"] == "The value for Issue Date found in the document"


def test_disabled_without_api_key(app, ctx):
    assert app.config["AI_ENABLED"] is False
    with pytest.raises(AIUnavailableError):
        ai.generate_report_section("Sports day")


def test_extract_requests_json_and_stringifies(ctx, fake_model):
    fake_model.queue(json.dumps({"recipient_name": "Asha", "score": 91, "grade": None}))
    data = ai.extract_certificate_info(b"\x89PNG", "image/png", ["Recipient Name", "Score", "Grade"])
    assert data == {"recipient_name": "Asha", "score": "91", "grade": ""}

    call = fake_model.calls[0]
    assert call["generation_config"]["response_mime_type"] == "application/json"
    assert set(call["generation_config"]["response_schema"]["properties"]) == {"recipient_name", "score", "grade"}
    assert call["contents"][1] == {"mime_type": "image/png", "data": b"\x89PNG"}


def test_extract_rejects_non_json(ctx, fake_model):
    fake_model.queue("sorry, I can't read that")
    with pytest.raises(AIResponseError):
        ai.extract_certificate_info(b"img", "image/png", ["Name"])


def test_report_prompt_and_empty_answer(ctx, fake_model):
    fake_model.queue("## Sports Day\n- fun", "")
    assert ai.generate_report_section("Sports Day", "Intro, Results").startswith("## Sports Day")
    prompt = fake_model.calls[0]["contents"]
    assert '"Sports Day"' in prompt
    assert "Structure the report with these sections: Intro, Results" in prompt
    assert fake_model.calls[0]["generation_config"] == {"temperature": 0.7, "top_p": 0.95}

    assert ai.generate_report_section("Nothing") == "Generated content was empty."


def test_report_endpoint(client, fake_model):
    client.post("/api/auth/register", json={"username": "S", "email": "s@demo.com", "password": "pw"})
    fake_model.queue("## Seminar")
    resp = client.post("/api/reports/generate", json={"topic": "Seminar"})
    assert resp.get_json()["content"] == "## Seminar"
    assert client.post("/api/reports/generate", json={"topic": "  "}).status_code == 400


def test_report_endpoint_without_ai(client):
    client.post("/api/auth/register", json={"username": "S", "email": "s@demo.com", "password": "pw"})
    resp = client.post("/api/reports/generate", json={"topic": "Seminar"})
    assert resp.status_code == 503
    assert "GOOGLE_API_KEY" in resp.get_json()["error"]


class BlockedResponse:
    @property
    def text(self):
        raise ValueError("The response.text quick accessor only works when the response contains a valid Part")


def test_blocked_reply_is_a_bad_gateway(client, fake_model, monkeypatch):
    client.post("/api/auth/register", json={"username": "S", "email": "s@demo.com", "password": "pw"})
    monkeypatch.setattr(fake_model, "generate_content", lambda *args, **kwargs: BlockedResponse())
    resp = client.post("/api/reports/generate", json={"topic": "Seminar"})
    assert resp.status_code == 502
    assert resp.get_json()["error"].startswith("AI returned no usable text")
