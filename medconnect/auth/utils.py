"""
Authentication utility functions for email verification and notifications.
"""
import logging
from datetime import datetime

from ..core.mailer import send_email

# Set up logging
logger = logging.getLogger(__name__)

async def send_verification_email(email: str, token: str) -> None:
    """
    Send the email verification code to a newly registered user.

    The code is entered in the app, so the message carries the bare token
    rather than a link.

    Args:
        email: User's email address
        token: Plaintext verification token

    Raises:
        Exception: If the email could not be sent
    """
    message = (
        "Thank you for registering. Please verify your email by entering the verification code below: "
        f"\n\n{token}\n\n"
        "If you did not request this, please ignore this email."
    )
    logger.info(f"Sending verification email to {email}")
    await send_email(email=email, subject="Email Verification", message=message)

async def send_password_reset_email(email: str, token: str, expires_in_minutes: int) -> None:
    """
    Send a password reset code.

    Args:
        email: User's email address
        token: Plaintext reset token
        expires_in_minutes: How long the code stays valid

    Raises:
        Exception: If the email could not be sent
    """
    message = (
        "We have received a password reset request. Please use the below code to reset your password"
        f"\n\n{token}\n\n"
        f"This verification code will be valid only for {expires_in_minutes} minutes"
    )
    logger.info(f"Sending password reset email to {email}")
    await send_email(email=email, subject="Password change request received", message=message)

async def send_password_changed_notification(email: str, first_name: str, changed_at: datetime) -> None:
    """
    Send notification when password has been changed.

    Runs as a background task after the response is sent, so failures are
    logged and never raised.

    Args:
        email: User's email address
        first_name: User's first name for personalization
        changed_at: When the password was changed
    """
    message = (
        f"Hello {first_name},\n\n"
        f"Your password was changed on {changed_at.strftime('%B %d, %Y at %I:%M %p')} UTC.\n\n"
        "If you did not make this change, please reset your password immediately and contact support."
    )
    try:
        await send_email(email=email, subject="Your password has been changed", message=message)
    except Exception as e:
        logger.error(f"Failed to send password changed notification to {email}: {str(e)}")
