import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import settings

logger = logging.getLogger(__name__)


def _smtp_config() -> dict:
    return {
        "host": settings.smtp_host,
        "port": settings.smtp_port,
        "username": settings.smtp_username,
        "password": settings.smtp_password,
        "use_tls": settings.smtp_use_tls,
        "from_email": settings.smtp_from_email,
        "from_name": settings.smtp_from_name,
        "timeout": settings.smtp_timeout,
    }


def _create_smtp_client(host: str, port: int, timeout: int):
    return smtplib.SMTP(host, port, timeout=timeout)


def send_email(
    to_email: str,
    subject: str,
    body_html: str,
    body_text: str | None = None,
    config: dict | None = None,
) -> bool:
    """
    Send an email via SMTP.

    Args:
        to_email: Recipient email address
        subject: Email subject
        body_html: HTML body content
        body_text: Plain text alternative (optional)
        config: SMTP settings override; defaults to the environment settings

    Returns:
        True if email was sent successfully, False otherwise
    """
    config = config or _smtp_config()

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{config['from_name']} <{config['from_email']}>"
    msg["To"] = to_email

    if body_text:
        msg.attach(MIMEText(body_text, "plain"))
    msg.attach(MIMEText(body_html, "html"))

    try:
        host = str(config.get("host") or "")
        if not host:
            logger.error("SMTP host is not configured; cannot send to %s", to_email)
            return False
        with _create_smtp_client(
            host,
            int(config.get("port") or 587),
            timeout=config.get("timeout") or settings.smtp_timeout,
        ) as server:
            if config.get("use_tls"):
                server.starttls()

            if config.get("username") and config.get("password"):
                server.login(config["username"], config["password"])

            server.sendmail(config["from_email"], to_email, msg.as_string())
        logger.info("Email sent successfully to %s", to_email)
        return True
    except smtplib.SMTPAuthenticationError as exc:
        logger.error("SMTP authentication failed for %s: %s", to_email, exc)
        return False
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email to %s: %s", to_email, exc)
        return False
