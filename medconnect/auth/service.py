"""
Authentication service layer for business logic.
"""
import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import BackgroundTasks
from typing import Dict, Any, Optional

from ..core.security import (
    hash_password,
    verify_password,
    create_access_token,
    hash_token,
    issue_token,
    may_issue_session
)
from .models import User, Gender, CredentialKind, SessionGrant
from ..doctors.service import create_doctor_profile
from .schemas import (
    UserRegistration,
    UserPublic,
    GoogleUserPublic
)
from .google import verify_google_id_token
from .utils import (
    send_verification_email,
    send_password_reset_email,
    send_password_changed_notification
)
from .exceptions import (
    BadRequestException,
    InvalidCredentialsException,
    EmailAlreadyExistsException,
    EmailNotVerifiedException,
    VerificationTokenInvalidException,
    InvalidTokenException,
    UserNotFoundException,
    EmailDeliveryException
)
from ..config import settings

# Set up logging
logger = logging.getLogger(__name__)

def issue_session_token(user: User, grant: SessionGrant) -> str:
    """
    Issue a session token for a user if the session policy allows it.

    Args:
        user: Authenticated user
        grant: Flow requesting the session

    Returns:
        str: Signed JWT session token

    Raises:
        EmailNotVerifiedException: If the account state does not allow a session
    """
    if not may_issue_session(user.account_state, grant):
        logger.warning(f"Session refused for user {user.id} ({grant.value}): {user.account_state}")
        raise EmailNotVerifiedException()

    return create_access_token({
        "id": user.id,
        "email": user.email,
        "is_doctor": user.is_doctor
    })

async def register_user(db: Session, registration: UserRegistration) -> Dict[str, Any]:
    """
    Register a new user, and a linked doctor profile when requested.

    The user row, the doctor row and the verification email form one unit:
    nothing is committed unless the email was sent.

    Args:
        db: Database session
        registration: Validated registration payload

    Returns:
        Dict with the public user, a session token and a confirmation message

    Raises:
        EmailAlreadyExistsException: If email already exists
        EmailDeliveryException: If the verification email could not be sent
    """
    email = registration.email
    logger.info(f"Registration attempt for email: {email}")

    # Check if email already exists
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        logger.warning(f"Registration failed: Email {email} already registered")
        raise EmailAlreadyExistsException()

    verification = issue_token(settings.email_verification_expire_minutes)

    user_obj = User(
        email=email,
        first_name=registration.first_name,
        last_name=registration.last_name,
        gender=registration.gender,
        is_doctor=registration.is_doctor,
        profile_picture=registration.profile_picture,
        credential_kind=CredentialKind.PASSWORD,
        password_hash=hash_password(registration.password),
        email_verified=False,
        email_verification_token=verification.hashed,
        email_verification_expires=verification.expires_at
    )

    try:
        db.add(user_obj)
        db.flush()
        if registration.is_doctor:
            create_doctor_profile(db, user_obj)
    except IntegrityError:
        # Lost a race against a concurrent registration for the same email
        db.rollback()
        logger.warning(f"Registration failed: Email {email} registered concurrently")
        raise EmailAlreadyExistsException()

    try:
        await send_verification_email(email, verification.plaintext)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to send verification email to {email}: {str(e)}")
        raise EmailDeliveryException(
            "There was an error sending the verification email. Please try again later"
        )

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Registration failed: Email {email} registered concurrently")
        raise EmailAlreadyExistsException()

    db.refresh(user_obj)
    logger.info(f"User account created: {user_obj.id} (doctor={user_obj.is_doctor})")

    return {
        "user": UserPublic.from_user(user_obj),
        "token": issue_session_token(user_obj, SessionGrant.REGISTRATION),
        "message": "Verification email sent. Please check your inbox."
    }

async def login_user(db: Session, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
    """
    Authenticate a user and generate a session token.

    Args:
        db: Database session
        email: User's email address
        password: User's password

    Returns:
        Dict with the public user and a session token

    Raises:
        BadRequestException: If email or password is missing
        InvalidCredentialsException: If credentials are invalid
        EmailNotVerifiedException: If the email has not been verified
    """
    if not email or not password:
        raise BadRequestException("Please provide email and password")

    user = db.query(User).filter(User.email == email).first()

    if not user:
        logger.warning(f"Login failed: No account for {email}")
        raise InvalidCredentialsException("Invalid Credentials, please verify email again")

    if user.credential_kind == CredentialKind.EXTERNAL:
        logger.warning(f"Login failed: Password attempt on Google-only account {user.id}")
        raise InvalidCredentialsException("This account uses Google sign-in. Please log in with Google.")

    if not verify_password(password, user.password_hash):
        logger.warning(f"Login failed: Invalid password for {email}")
        raise InvalidCredentialsException("Invalid Credentials, please verify the password again")

    token = issue_session_token(user, SessionGrant.PASSWORD_LOGIN)
    logger.info(f"Login successful: User {user.id} ({email})")

    return {
        "user": UserPublic.from_user(user),
        "token": token
    }

async def google_login(db: Session, access_token: Optional[str], code: Optional[str]) -> Dict[str, Any]:
    """
    Sign in with a Google identity token, provisioning an account on first use.

    Args:
        db: Database session
        access_token: OAuth access token from the client
        code: Google identity token

    Returns:
        Dict with the public user (including ``mustUpdateGender``) and a session token

    Raises:
        BadRequestException: If either token is missing
        InvalidTokenException: If the identity token is rejected or issued for another client
    """
    if not access_token or not code:
        raise BadRequestException("Access token and code are required.")

    claims = await verify_google_id_token(code)

    if claims.aud != settings.google_client_id:
        logger.warning("Google login failed: identity token issued for a different client")
        raise InvalidTokenException("Invalid token.")

    if not claims.email_verified:
        logger.warning(f"Google login failed: unverified Google email {claims.email}")
        raise InvalidTokenException("Invalid token.")

    user = db.query(User).filter(User.email == claims.email).first()

    if not user:
        user = User(
            email=claims.email,
            first_name=claims.given_name or claims.email.split("@")[0],
            last_name=claims.family_name or "",
            gender=Gender.UNSPECIFIED,
            is_doctor=False,
            profile_picture=claims.picture,
            credential_kind=CredentialKind.EXTERNAL,
            password_hash=None,
            email_verified=True
        )
        db.add(user)
        try:
            db.commit()
            logger.info(f"Provisioned Google account {user.id} for {claims.email}")
        except IntegrityError:
            db.rollback()
            user = db.query(User).filter(User.email == claims.email).first()
            if not user:
                raise

    if not user.email_verified:
        # Google has vouched for the address
        user.mark_email_verified()
        db.commit()

    db.refresh(user)
    token = issue_session_token(user, SessionGrant.EXTERNAL_LOGIN)
    logger.info(f"Google login successful: User {user.id}")

    return {
        "user": GoogleUserPublic.from_user(user),
        "token": token
    }

async def verify_email(db: Session, token: str) -> Dict[str, Any]:
    """
    Verify user's email address with the emailed verification token.

    Args:
        db: Database session
        token: Plaintext verification token

    Returns:
        Dict with verification success message

    Raises:
        VerificationTokenInvalidException: If the token is unknown, already used or expired
    """
    now = datetime.now(timezone.utc)
    user = db.query(User).filter(
        User.email_verification_token == hash_token(token),
        User.email_verification_expires > now
    ).first()

    if not user:
        logger.warning("Email verification failed: token invalid or expired")
        raise VerificationTokenInvalidException()

    user.mark_email_verified()
    db.commit()
    logger.info(f"Email verified for user {user.id}")

    return {"message": "Email verified successfully"}

async def resend_verification(db: Session, email: str) -> Dict[str, Any]:
    """
    Replace a user's verification token and email the new one.

    Args:
        db: Database session
        email: User's email address

    Returns:
        Dict with status and message

    Raises:
        UserNotFoundException: If email not found
        BadRequestException: If the email is already verified
        EmailDeliveryException: If the email could not be sent
    """
    user = db.query(User).filter(User.email == email).first()

    if not user:
        logger.warning(f"Resend verification failed: Email {email} not found")
        raise UserNotFoundException()

    if user.email_verified:
        raise BadRequestException("Email is already verified")

    previous_token = user.email_verification_token
    previous_expires = user.email_verification_expires

    verification = issue_token(settings.email_verification_expire_minutes)
    user.email_verification_token = verification.hashed
    user.email_verification_expires = verification.expires_at
    db.commit()

    try:
        await send_verification_email(email, verification.plaintext)
    except Exception as e:
        logger.error(f"Failed to resend verification email to {email}: {str(e)}")
        user.email_verification_token = previous_token
        user.email_verification_expires = previous_expires
        db.commit()
        raise EmailDeliveryException(
            "There was an error sending the verification email. Please try again later"
        )

    logger.info(f"Verification email resent to {email}")
    return {
        "status": "success",
        "message": "Verification email sent. Please check your inbox."
    }

async def forgot_password(db: Session, email: str) -> Dict[str, Any]:
    """
    Initiate password reset process.

    Args:
        db: Database session
        email: User's email address

    Returns:
        Dict with status and message

    Raises:
        UserNotFoundException: If email not found
        EmailDeliveryException: If the reset email could not be sent
    """
    user = db.query(User).filter(User.email == email).first()

    if not user:
        logger.warning(f"Password reset failed: Email {email} not found")
        raise UserNotFoundException()

    reset = issue_token(settings.password_reset_expire_minutes)
    user.password_reset_token = reset.hashed
    user.password_reset_expires = reset.expires_at
    db.commit()

    try:
        await send_password_reset_email(email, reset.plaintext, settings.password_reset_expire_minutes)
    except Exception as e:
        logger.error(f"Failed to send password reset email to {email}: {str(e)}")
        # The user never received the token, so it must not stay usable
        user.clear_password_reset()
        db.commit()
        raise EmailDeliveryException(
            "There was an error sending the password reset email. Please try again later"
        )

    logger.info(f"Password reset email sent to {email}")
    return {
        "status": "success",
        "message": "Verification code has been sent to user email"
    }

async def reset_password(
    db: Session,
    token: str,
    password: str,
    confirm_password: str,
    background_tasks: Optional[BackgroundTasks] = None
) -> Dict[str, Any]:
    """
    Reset user's password using reset token and sign the user in.

    Args:
        db: Database session
        token: Plaintext reset token
        password: New password
        confirm_password: Confirmation of the new password
        background_tasks: FastAPI BackgroundTasks for the notification email

    Returns:
        Dict with the public user and a session token

    Raises:
        BadRequestException: If the passwords do not match
        VerificationTokenInvalidException: If the token is unknown, already used or expired
    """
    if password != confirm_password:
        raise BadRequestException("Passwords do not match")

    now = datetime.now(timezone.utc)
    user = db.query(User).filter(
        User.password_reset_token == hash_token(token),
        User.password_reset_expires > now
    ).first()

    if not user:
        logger.warning("Password reset failed: token invalid or expired")
        raise VerificationTokenInvalidException()

    user.password_hash = hash_password(password)
    user.credential_kind = CredentialKind.PASSWORD
    user.password_changed_at = now
    user.clear_password_reset()
    # The reset token was delivered to this inbox
    user.mark_email_verified()

    db.commit()
    db.refresh(user)
    logger.info(f"Password reset successful for user {user.id}")

    if background_tasks is not None:
        background_tasks.add_task(send_password_changed_notification, user.email, user.first_name, now)

    return {
        "user": UserPublic.from_user(user),
        "token": issue_session_token(user, SessionGrant.PASSWORD_RESET)
    }
