"""Placeholder rendering for survey reminder emails."""

from __future__ import annotations

import re
from collections.abc import Mapping

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}|\{\s*([a-zA-Z0-9_]+)\s*\}")

REMINDER_TEXT_TEMPLATE = (
    "Hello {{firstname}},\n\n"
    "This is a friendly reminder that your survey for {{organization_name}} "
    "is still waiting for you.\n\n"
    "Survey code: {{survey_code}}\n"
    "Open it here: {{survey_link}}\n\n"
    "Thank you!"
)

REMINDER_HTML_TEMPLATE = (
    "<p>Hello {{firstname}},</p>"
    "<p>This is a friendly reminder that your survey for "
    "<strong>{{organization_name}}</strong> is still waiting for you.</p>"
    "<p>Survey code: <code>{{survey_code}}</code></p>"
    '<p><a href="{{survey_link}}">Open your survey</a></p>'
    "<p>Thank you!</p>"
)


def render_template_text(text: str | None, variables: Mapping[str, object] | None = None) -> str:
    """Render variable placeholders in text.

    Supports both ``{{variable}}`` and ``{variable}`` tokens.
    Unknown placeholders are left unchanged.
    """
    if not text:
        return ""
    values = {str(key): "" if value is None else str(value) for key, value in (variables or {}).items()}

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        if key in values:
            return values[key]
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_replace, text)


def default_preview_variables() -> dict[str, str]:
    """Sample values for reminder previews and tests."""
    return {
        "firstname": "Jane",
        "username": "jdoe",
        "organization_name": "Grace Community Church",
        "survey_code": "SRV-1024",
        "survey_link": "http://localhost:3000/survey/SRV-1024",
    }
