import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app
from markupsafe import escape

logger = logging.getLogger(__name__)

_BUTTON_TEMPLATE = """
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #0d9488;">{heading}</h2>
        {paragraphs}
        <div style="text-align: center; margin: 30px 0;">
            <a href="{url}" style="background-color: #0d9488; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; display: inline-block;">
                {button}
            </a>
        </div>
        <p>Or copy and paste this link in your browser:</p>
        <p style="word-break: break-all; color: #666; font-size: 14px;">{url}</p>
        {footer}
    </div>
"""


def send_email(to_email: str, subject: str, html_body: str) -> bool:
    """Send an HTML mail over SMTP. Returns False when email is disabled."""
    if not current_app.config.get("EMAIL_ENABLED"):
        logger.info("Email disabled, skipping '%s' to %s", subject, to_email)
        return False

    msg = MIMEMultipart("alternative")
    msg["From"] = current_app.config["SMTP_USER"]
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.attach(MIMEText(html_body, "html"))

    with smtplib.SMTP(current_app.config["SMTP_HOST"], current_app.config["SMTP_PORT"]) as server:
        server.starttls()
        server.login(current_app.config["SMTP_USER"], current_app.config["SMTP_PASS"])
        server.sendmail(current_app.config["SMTP_USER"], to_email, msg.as_string())
    return True


def send_verification_email(to_email: str, verify_url: str):
    body = _BUTTON_TEMPLATE.format(
        heading="Welcome to Botilyx!",
        paragraphs="<p>Thank you for creating an account. Please verify your email address to get started.</p>",
        url=verify_url,
        button="Verify My Email",
        footer="<p>If you didn't create this account, please ignore this email.</p>",
    )
    return send_email(to_email, "Verify your Botilyx account", body)


def send_password_reset_email(to_email: str, reset_url: str):
    body = _BUTTON_TEMPLATE.format(
        heading="Password Reset Request",
        paragraphs="<p>We received a request to reset your Botilyx password.</p>",
        url=reset_url,
        button="Reset My Password",
        footer=(
            "<p>If you didn't request this password reset, please ignore this email.</p>"
            "<p>This link will expire in 30 minutes for your security.</p>"
        ),
    )
    return send_email(to_email, "Reset your Botilyx password", body)


def send_reminder_email(to_email: str, title: str, text: str, url: str):
    body = _BUTTON_TEMPLATE.format(
        heading=escape(title),
        paragraphs=f"<p>{escape(text)}</p>",
        url=escape(url),
        button="Open my treatments",
        footer="<p>You receive this email because email reminders are enabled in your settings.</p>",
    )
    return send_email(to_email, title, body)
