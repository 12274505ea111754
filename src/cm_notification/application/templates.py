"""Email templates rendered from template_data dicts."""

import html
from typing import Any

VERIFY_EMAIL_SUBJECT = "Welcome! Verify Your Email - Card Marketplace"


def verification_template_data(first_name: str, verification_url: str) -> dict[str, Any]:
    return {
        "template": "verify_email",
        "first_name": first_name,
        "verification_url": verification_url,
    }


def render_html(template_data: dict[str, Any]) -> str:
    if template_data.get("template") == "verify_email":
        return (
            "<div style=\"font-family: Arial, sans-serif; max-width: 600px;\">"
            "<h2>Welcome to Card Marketplace!</h2>"
            f"<p>Hello {html.escape(template_data['first_name'])},</p>"
            "<p>To enable trading on your account, please verify your email address:</p>"
            f"<p><a href=\"{html.escape(template_data['verification_url'])}\">Verify Email Address</a></p>"
            "<p>This link will expire in 24 hours.</p>"
            "</div>"
        )
    raise ValueError(f"Unknown email template: {template_data.get('template')}")
