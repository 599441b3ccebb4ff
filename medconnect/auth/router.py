"""
Authentication router for the user account endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, status
from sqlalchemy.orm import Session
import logging

from ..database import get_db
from .models import User
from .schemas import (
    UserRegistration,
    UserLogin,
    GoogleLogin,
    EmailRequest,
    PasswordResetConfirm,
    UserPublic,
    RegisterResponse,
    LoginResponse,
    GoogleLoginResponse,
    MessageResponse,
    StatusMessageResponse
)
from .dependencies import get_current_user
from .service import (
    register_user,
    login_user,
    google_login,
    verify_email,
    resend_verification,
    forgot_password,
    reset_password
)
from .exceptions import AuthException

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED, summary="Register User")
async def register_route(
    registration_data: UserRegistration,
    db: Session = Depends(get_db)
):
    """
    Register a new user account.

    A doctor profile is created alongside the user when ``isDoctor`` is true,
    and a verification email is sent to the new address.

    Args:
        registration_data: User registration information
        db: Database session

    Returns:
        Public user, session token and confirmation message

    Raises:
        HTTPException: If email already exists or the verification email fails
    """
    try:
        return await register_user(db=db, registration=registration_data)
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during registration"
        )

@router.post("/login", response_model=LoginResponse, summary="User Login")
async def login_route(
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """
    Authenticate with email and password.

    Args:
        login_data: User login credentials
        db: Database session

    Returns:
        Public user and session token

    Raises:
        HTTPException: If credentials are missing, invalid or the email is unverified
    """
    try:
        return await login_user(db=db, email=login_data.email, password=login_data.password)
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during login"
        )

@router.post("/googlelogin", response_model=GoogleLoginResponse, summary="Google Login")
async def google_login_route(
    google_data: GoogleLogin,
    db: Session = Depends(get_db)
):
    """
    Sign in with a Google identity token.

    Returns:
        Public user with ``mustUpdateGender`` and a session token
    """
    try:
        return await google_login(db=db, access_token=google_data.access_token, code=google_data.code)
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during Google login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during Google login"
        )

@router.api_route("/verifyemail/{token}", methods=["GET", "POST"], response_model=MessageResponse, summary="Verify Email")
async def verify_email_route(
    token: str,
    db: Session = Depends(get_db)
):
    """
    Email verification endpoint, reached from the link in the verification email.

    Args:
        token: Verification token
        db: Database session

    Returns:
        Dict with verification success message

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return await verify_email(db=db, token=token)
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during email verification: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during email verification"
        )

@router.post("/resendverification", response_model=StatusMessageResponse, summary="Resend Verification Email")
async def resend_verification_route(
    email_data: EmailRequest,
    db: Session = Depends(get_db)
):
    """
    Resend the verification email with a fresh token.

    Raises:
        HTTPException: If email not found, already verified or the email fails
    """
    try:
        return await resend_verification(db=db, email=email_data.email)
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during resend verification: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while resending verification"
        )

@router.post("/forgotpassword", response_model=StatusMessageResponse, summary="Request Password Reset")
async def forgot_password_route(
    email_data: EmailRequest,
    db: Session = Depends(get_db)
):
    """
    Forgot password endpoint to initiate password reset.

    Args:
        email_data: Email for password reset
        db: Database session

    Returns:
        Dict with status and message

    Raises:
        HTTPException: If email not found or the reset email fails
    """
    try:
        return await forgot_password(db=db, email=email_data.email)
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during forgot password: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while requesting a password reset"
        )

@router.api_route("/resetpassword/{token}", methods=["PATCH", "POST"], response_model=LoginResponse, summary="Reset Password with Token")
async def reset_password_route(
    token: str,
    password_data: PasswordResetConfirm,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    """
    Reset password endpoint.

    Args:
        token: Password reset token from the email
        password_data: New password and confirmation
        background_tasks: FastAPI BackgroundTasks for the notification email
        db: Database session

    Returns:
        Public user and a new session token

    Raises:
        HTTPException: If passwords differ or the token is invalid or expired
    """
    try:
        return await reset_password(
            db=db,
            token=token,
            password=password_data.password,
            confirm_password=password_data.confirm_password,
            background_tasks=background_tasks
        )
    except AuthException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during password reset: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during password reset"
        )

@router.get("/me", response_model=UserPublic, summary="Get Current User Profile")
async def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """
    Get current user profile endpoint.

    Returns:
        Public user information
    """
    return UserPublic.from_user(current_user)
