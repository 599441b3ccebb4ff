"""
User Model - Stores identity and credential information for every account.

Account state is kept on two independent axes (email verification and
pending password reset) plus the kind of credential the account signs in
with. Session issuance is decided from that state by
``core.security.may_issue_session``.
"""
from dataclasses import dataclass
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from ..database import Base

class Gender(str, enum.Enum):
    """
    Enumeration for user gender.

    UNSPECIFIED is assigned to accounts provisioned from a third-party
    identity that did not supply one; clients prompt the user to fill it in.
    """
    MALE = "male"
    FEMALE = "female"
    UNSPECIFIED = "unspecified"

class CredentialKind(str, enum.Enum):
    """
    How an account proves its identity.

    Kinds:
    - PASSWORD: Email + password sign-in, a bcrypt hash is stored
    - EXTERNAL: Third-party (Google) sign-in only, no password hash exists
    """
    PASSWORD = "password"
    EXTERNAL = "external"

class VerificationStatus(str, enum.Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"

class ResetStatus(str, enum.Enum):
    NONE = "none"
    PENDING = "pending"

class SessionGrant(str, enum.Enum):
    """
    The flow asking for a session token.

    Grants:
    - REGISTRATION: Immediately after a new account is created
    - PASSWORD_LOGIN: Email + password login
    - EXTERNAL_LOGIN: Google sign-in
    - PASSWORD_RESET: After a successful password reset
    """
    REGISTRATION = "registration"
    PASSWORD_LOGIN = "password_login"
    EXTERNAL_LOGIN = "external_login"
    PASSWORD_RESET = "password_reset"

@dataclass(frozen=True)
class AccountState:
    """Snapshot of the orthogonal account state axes."""
    verification: VerificationStatus
    reset: ResetStatus
    credential: CredentialKind

class User(Base):
    """
    User Model - Stores all user information in the system

    Fields:
    - id: Primary key for user identification
    - email: Unique email address for login and communication
    - first_name / last_name: User's name
    - gender: User's gender
    - is_doctor: Whether the user registered as a doctor
    - profile_picture: URL to user's profile picture (optional)
    - doctor_id: ID of the linked Doctor profile (doctors only)
    - credential_kind: Password or external-identity credential
    - password_hash: Securely hashed password, NULL for external-only accounts
    - email_verified: Whether email has been verified
    - email_verification_token / email_verification_expires: Hashed verification token and its expiry
    - password_reset_token / password_reset_expires: Hashed reset token and its expiry
    - password_changed_at: When the password was last reset
    - created_at: Timestamp when user was created
    - updated_at: Timestamp when user was last updated
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    gender = Column(Enum(Gender), nullable=False, default=Gender.UNSPECIFIED)
    is_doctor = Column(Boolean, nullable=False, default=False)
    profile_picture = Column(String, nullable=True)
    doctor_id = Column(Integer, nullable=True)
    credential_kind = Column(Enum(CredentialKind), nullable=False, default=CredentialKind.PASSWORD)
    password_hash = Column(String, nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    email_verification_token = Column(String, nullable=True, index=True)
    email_verification_expires = Column(DateTime(timezone=True), nullable=True)
    password_reset_token = Column(String, nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)
    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    doctor_profile = relationship("Doctor", back_populates="user", uselist=False)

    def __repr__(self):
        """String representation of the User model"""
        return f"<User(id={self.id}, email='{self.email}', is_doctor={self.is_doctor})>"

    @property
    def verification_status(self) -> VerificationStatus:
        return VerificationStatus.VERIFIED if self.email_verified else VerificationStatus.UNVERIFIED

    @property
    def reset_status(self) -> ResetStatus:
        return ResetStatus.PENDING if self.password_reset_token else ResetStatus.NONE

    @property
    def account_state(self) -> AccountState:
        """Current state of the account across all axes."""
        return AccountState(
            verification=self.verification_status,
            reset=self.reset_status,
            credential=self.credential_kind or CredentialKind.PASSWORD,
        )

    def mark_email_verified(self) -> None:
        """Set the verified flag and consume any outstanding verification token."""
        self.email_verified = True
        self.email_verification_token = None
        self.email_verification_expires = None

    def clear_password_reset(self) -> None:
        """Drop any outstanding password reset token."""
        self.password_reset_token = None
        self.password_reset_expires = None
