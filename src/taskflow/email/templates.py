"""
Email templates for Taskflow.

All templates use inline CSS for email client compatibility.
Each template function returns (subject, html_body, text_body).
"""

from __future__ import annotations

from html import escape

# Color constants
BG_PAGE = "#F3F4F6"
BG_CARD = "#FFFFFF"
ACCENT = "#3B82F6"
TEXT_PRIMARY = "#111827"
TEXT_SECONDARY = "#6B7280"
BORDER = "#E5E7EB"

APP_NAME = "Taskflow"
SIGNATURE = f"-- The {APP_NAME} Team"


def _base_layout(content: str) -> str:
    """Wrap content in the base email layout."""
    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{APP_NAME}</title>
</head>
<body style="margin: 0; padding: 0; background-color: {BG_PAGE}; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="background-color: {BG_PAGE};">
        <tr>
            <td align="center" style="padding: 40px 20px;">
                <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="600" style="max-width: 600px; width: 100%;">
                    <tr>
                        <td align="center" style="padding-bottom: 24px; font-size: 22px; font-weight: 700; color: {ACCENT};">{APP_NAME}</td>
                    </tr>
                    <tr>
                        <td style="background-color: {BG_CARD}; border: 1px solid {BORDER}; border-radius: 12px; padding: 36px 32px;">
                            {content}
                        </td>
                    </tr>
                    <tr>
                        <td align="center" style="padding-top: 24px; color: {TEXT_SECONDARY}; font-size: 12px;">
                            If you didn't expect this email, you can safely ignore it.
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>"""


def _button(url: str, label: str) -> str:
    """Render a CTA button followed by the raw link for clients that strip buttons."""
    return f"""\
<p style="margin: 28px 0; text-align: center;">
    <a href="{url}" target="_blank" style="display: inline-block; padding: 12px 28px; background-color: {ACCENT}; color: #FFFFFF; font-weight: 600; text-decoration: none; border-radius: 8px;">{label}</a>
</p>
<p style="color: {TEXT_SECONDARY}; font-size: 12px; word-break: break-all;">{url}</p>"""


def _paragraph(text: str) -> str:
    return f'<p style="color: {TEXT_PRIMARY}; font-size: 15px; line-height: 1.6; margin: 0 0 12px 0;">{text}</p>'


def welcome_email(name: str | None, verify_url: str, expires_hours: int = 24) -> tuple[str, str, str]:
    """
    Welcome email sent after registration, carrying the verification link.

    Returns:
        (subject, html_body, text_body)
    """
    display = name or "there"
    subject = f"Welcome to {APP_NAME} - please verify your email"
    content = (
        _paragraph(f"Hi {escape(display)},")
        + _paragraph("Your account is ready. Confirm your email address to finish setting it up.")
        + _button(verify_url, "Verify Email Address")
        + _paragraph(f"This link expires in {expires_hours} hours.")
    )
    text_body = (
        f"Hi {display},\n\n"
        f"Welcome to {APP_NAME}! Verify your email address by visiting:\n\n{verify_url}\n\n"
        f"This link expires in {expires_hours} hours.\n\n"
        f"{SIGNATURE}"
    )
    return subject, _base_layout(content), text_body


def password_reset(reset_url: str, expires_minutes: int = 60) -> tuple[str, str, str]:
    """
    Password reset email.

    Returns:
        (subject, html_body, text_body)
    """
    subject = "Reset your password"
    window = "1 hour" if expires_minutes == 60 else f"{expires_minutes} minutes"
    content = (
        _paragraph(f"We received a request to reset your {APP_NAME} password.")
        + _button(reset_url, "Reset Password")
        + _paragraph(f"This link expires in {window}. If you didn't ask for this, your password stays unchanged.")
    )
    text_body = (
        f"Reset your password\n\n"
        f"Open this link to choose a new password:\n\n{reset_url}\n\n"
        f"This link expires in {window}. If you didn't ask for this, your password stays unchanged.\n\n"
        f"{SIGNATURE}"
    )
    return subject, _base_layout(content), text_body


def password_changed(name: str | None) -> tuple[str, str, str]:
    """Sent after a successful password reset."""
    display = name or "there"
    subject = "Your password has been changed"
    content = _paragraph(f"Hi {escape(display)},") + _paragraph(
        f"Your {APP_NAME} password was just changed. If this wasn't you, reset it again immediately."
    )
    text_body = (
        f"Hi {display},\n\n"
        f"Your {APP_NAME} password was just changed. If this wasn't you, reset it again immediately.\n\n"
        f"{SIGNATURE}"
    )
    return subject, _base_layout(content), text_body
