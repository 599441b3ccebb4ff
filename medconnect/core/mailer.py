"""
Transactional email delivery through FastAPI-Mail.
"""
import logging
from functools import lru_cache
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType

from ..config import settings

# Set up logging
logger = logging.getLogger(__name__)

@lru_cache()
def get_mailer() -> FastMail:
    """
    Build the FastMail client from application settings.

    Returns:
        FastMail: Configured mail client (cached)
    """
    email_conf = ConnectionConfig(
        MAIL_USERNAME=settings.mail_username,
        MAIL_PASSWORD=settings.mail_password,
        MAIL_FROM=settings.mail_from,
        MAIL_PORT=settings.mail_port,
        MAIL_SERVER=settings.mail_server,
        MAIL_STARTTLS=settings.mail_starttls,
        MAIL_SSL_TLS=settings.mail_ssl_tls,
        USE_CREDENTIALS=settings.use_credentials,
        VALIDATE_CERTS=settings.validate_certs,
        SUPPRESS_SEND=int(settings.mail_suppress_send),
    )
    logger.info(f"Email Configuration: SERVER={settings.mail_server}, PORT={settings.mail_port}, FROM={settings.mail_from}")
    return FastMail(email_conf)

async def send_email(email: str, subject: str, message: str) -> None:
    """
    Send a plain text email.

    Args:
        email: Recipient address
        subject: Email subject line
        message: Plain text body

    Raises:
        Exception: Whatever the mail transport raised; callers decide how to recover
    """
    mail = get_mailer()
    schema = MessageSchema(
        subject=subject,
        recipients=[email],
        body=message,
        subtype=MessageType.plain
    )
    await mail.send_message(schema)
    logger.info(f"Email '{subject}' sent to {email}")
