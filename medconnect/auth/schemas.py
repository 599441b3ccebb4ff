"""
User Schemas - Pydantic models for request validation and response serialization.

Field names on the wire are camelCase (``firstName``, ``isDoctor``, ...);
snake_case names are accepted on input as well.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.networks import validate_email
from .models import Gender, User
from ..core.security import validate_password_strength

def _check_password(value: str) -> str:
    errors = validate_password_strength(value)
    if errors:
        raise ValueError("; ".join(errors))
    return value

class UserRegistration(BaseModel):
    """
    User Registration Schema - Used when registering a new user

    Fields:
    - firstName / lastName: User's name
    - email: User's email address
    - password: User's plain text password (will be hashed before storage)
    - isDoctor: Whether to create a doctor profile for the user
    - gender: User's gender
    - profilePicture: URL to user's profile picture (optional)
    """
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    email: EmailStr
    password: str
    is_doctor: bool = Field(..., alias="isDoctor")
    gender: Gender
    profile_picture: Optional[str] = Field(None, alias="profilePicture")

    class Config:
        populate_by_name = True

    @field_validator("first_name", "last_name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password(value)

class UserLogin(BaseModel):
    """
    User Login Schema - Used for authentication

    Both fields are optional here so that a missing value is reported with
    the login-specific message rather than a generic validation error.
    """
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        # Same normalisation EmailStr applies at registration
        if not value:
            return value
        try:
            return validate_email(value)[1]
        except ValueError:
            # Not an address; the lookup simply finds no account
            return value

class GoogleLogin(BaseModel):
    """
    Google Login Schema

    Fields:
    - access_token: OAuth access token from the client's Google sign-in
    - code: Google identity token to verify
    """
    access_token: Optional[str] = None
    code: Optional[str] = None

class EmailRequest(BaseModel):
    """
    Email Request Schema - Used for password reset and resend verification requests
    """
    email: EmailStr

class PasswordResetConfirm(BaseModel):
    """
    Password Reset Schema - New password submitted with a reset token

    Fields:
    - password: New password
    - confirmPassword: Must equal password
    """
    password: str
    confirm_password: str = Field(..., alias="confirmPassword")

    class Config:
        populate_by_name = True

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password(value)

class UserPublic(BaseModel):
    """
    Public User Schema - The only user fields ever returned to clients

    Password hash and token fields are never included.
    """
    user_id: int = Field(..., alias="userId")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str
    gender: Gender
    is_doctor: bool = Field(..., alias="isDoctor")
    doctor_id: Optional[int] = Field(None, alias="doctorId")
    profile_picture: Optional[str] = Field(None, alias="profilePicture")

    class Config:
        populate_by_name = True

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            gender=user.gender,
            is_doctor=user.is_doctor,
            doctor_id=user.doctor_id,
            profile_picture=user.profile_picture,
        )

class GoogleUserPublic(UserPublic):
    """Public user fields plus a prompt flag for incomplete third-party profiles."""
    must_update_gender: bool = Field(..., alias="mustUpdateGender")

    @classmethod
    def from_user(cls, user: User) -> "GoogleUserPublic":
        base = UserPublic.from_user(user)
        return cls(**base.model_dump(), must_update_gender=user.gender == Gender.UNSPECIFIED)

class RegisterResponse(BaseModel):
    user: UserPublic
    token: str
    message: str

class LoginResponse(BaseModel):
    """
    Login Response Schema - Returned after successful authentication

    Fields:
    - user: Public user information
    - token: JWT session token
    """
    user: UserPublic
    token: str

class GoogleLoginResponse(BaseModel):
    user: GoogleUserPublic
    token: str

class MessageResponse(BaseModel):
    message: str

class StatusMessageResponse(BaseModel):
    status: str
    message: str
