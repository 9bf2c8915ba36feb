# services/ai.py: Gemini certificate extraction and report drafting
import json
import re

from flask import current_app

from errors import AIResponseError, AIUnavailableError

DEFAULT_MODEL = "models/gemini-2.5-flash"


def init_ai(app):
    """Configure google.generativeai from GOOGLE_API_KEY and expose the model in app.config."""
    api_key = app.config.get("GOOGLE_API_KEY")
    app.config.setdefault("AI_ENABLED", False)
    app.config.setdefault("AI_MODEL", None)
    if not api_key:
        app.logger.info("No GOOGLE_API_KEY; AI disabled.")
        return

    try:
        import google.generativeai as genai
        genai.configure(api_key=api_key)
        app.config["AI_MODEL"] = genai.GenerativeModel(app.config.get("GEMINI_MODEL") or DEFAULT_MODEL)
        app.config["AI_ENABLED"] = True
        app.logger.info("AI model initialized.")
    except Exception as e:
        app.logger.warning("Could not initialize google.generativeai: %s", e)
        app.config["AI_ENABLED"] = False


def _model():
    model = current_app.config.get("AI_MODEL")
    if not current_app.config.get("AI_ENABLED") or model is None:
        raise AIUnavailableError()
    return model


def field_key(field):
    """'Recipient Name' -> 'recipient_name'"""
    return re.sub(r"\s+", "_", field.strip().lower())


def build_schema(fields):
    properties = {
        field_key(f): {"type": "STRING", "description": f"The value for {f} found in the document"}
        for f in fields
    }
    return {"type": "OBJECT", "properties": properties, "required": list(properties)}


def _response_text(response):
    try:
        text = getattr(response, "text", None) or (response if isinstance(response, str) else None)
    except ValueError as e:
        # blocked replies carry no text part
        raise AIResponseError(f"AI returned no usable text: {e}")
    if not text and isinstance(response, dict):
        text = response.get("text") or response.get("output")
    return (text or "").strip()


def extract_certificate_info(image_bytes, mime_type, fields):
    """Ask the model for ``fields`` in the image and return ``{field_key: str}``."""
    if not fields:
        raise AIResponseError("No fields requested.")
    model = _model()
    prompt = (
        "Extract the following details from this certificate/document image accurately: "
        f"{', '.join(fields)}. Return the result in JSON format."
    )
    current_app.logger.debug("Extracting %d fields from %s image (%d bytes)",
                             len(fields), mime_type, len(image_bytes))
    response = model.generate_content(
        [prompt, {"mime_type": mime_type, "data": image_bytes}],
        generation_config={
            "response_mime_type": "application/json",
            "response_schema": build_schema(fields),
        },
    )
    raw = _response_text(response) or "{}"
    try:
        data = json.loads(raw)
    except ValueError:
        raise AIResponseError("AI returned invalid JSON.")
    if not isinstance(data, dict):
        raise AIResponseError("AI returned invalid JSON.")

    return {key: "" if value is None else str(value) for key, value in data.items()}


def generate_report_section(topic, structure=None):
    model = _model()
    prompt = f'Write a professional, detailed institutional report about: "{topic}".'
    if structure:
        prompt += f"\nStructure the report with these sections: {structure}"
    prompt += "\nUse Markdown formatting. Use ## for headers, ### for sub-headers, and bullet points for lists."

    current_app.logger.debug("Calling model.generate_content() for report topic: %s", topic[:200])
    response = model.generate_content(
        prompt,
        generation_config={"temperature": 0.7, "top_p": 0.95},
    )
    answer = _response_text(response)
    current_app.logger.info("AI answered (len=%d)", len(answer))
    return answer or "Generated content was empty."
