"""
Core security utilities for authentication and password handling.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List, NamedTuple
from jose import jwt, JWTError
from passlib.context import CryptContext
import secrets
import hashlib
import re
import logging

from ..config import settings
from ..auth.models import AccountState, CredentialKind, SessionGrant, VerificationStatus

# Set up logging
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Rejected regardless of the other rules
COMMON_PASSWORDS = {"password", "12345678", "qwerty123", "admin123", "password1"}

def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against a hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to compare against, None for accounts without one

    Returns:
        bool: True if password matches hash
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

def validate_password_strength(password: str) -> List[str]:
    """
    Validate password meets security requirements.

    Requirements:
    - At least 8 characters long
    - Contains lowercase letter
    - Contains number
    - Is not a well-known weak password

    Args:
        password: The password to validate

    Returns:
        List of error messages, empty when the password is acceptable
    """
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    if not re.search(r'[a-z]', password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        errors.append("Password must contain at least one number")

    if password.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common, please choose a stronger password")

    return errors

class IssuedToken(NamedTuple):
    """A freshly generated one-time token. Only ``hashed`` and ``expires_at`` are stored."""
    plaintext: str
    hashed: str
    expires_at: datetime

def hash_token(token: str) -> str:
    """
    Hash a token for secure storage.

    The digest is deterministic so the stored value can be looked up directly.

    Args:
        token: Token to hash

    Returns:
        str: Hashed token
    """
    return hashlib.sha256(token.encode()).hexdigest()

def get_token_expiry_time(minutes: int) -> datetime:
    """
    Get token expiration time.

    Args:
        minutes: Minutes until expiration

    Returns:
        datetime: Expiration time (timezone-aware)
    """
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)

def issue_token(minutes: int) -> IssuedToken:
    """
    Generate a one-time token valid for the given number of minutes.

    Args:
        minutes: Lifetime of the token

    Returns:
        IssuedToken: plaintext to send to the user, its hash and expiry to persist
    """
    plaintext = secrets.token_urlsafe(32)
    return IssuedToken(plaintext, hash_token(plaintext), get_token_expiry_time(minutes))

def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes read back from the database as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def may_issue_session(state: AccountState, grant: SessionGrant) -> bool:
    """
    Decide whether a session token may be issued.

    Registration always returns a session. Every other grant requires a
    verified email, and password login additionally requires the account
    to hold a password credential.

    Args:
        state: Current account state
        grant: Flow requesting the session

    Returns:
        bool: True if a session token may be issued
    """
    if grant == SessionGrant.REGISTRATION:
        return True

    if state.verification != VerificationStatus.VERIFIED:
        return False

    if grant == SessionGrant.PASSWORD_LOGIN:
        return state.credential == CredentialKind.PASSWORD

    return True

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data to encode in the token
        expires_delta: Token expiration time

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({"exp": expire, "iat": now})

    encoded_jwt = jwt.encode(
        to_encode, settings.secret_key, algorithm=settings.algorithm
    )

    return encoded_jwt

def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Dict containing token payload if valid, None if invalid
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        return payload
    except JWTError as e:
        logger.debug(f"Rejected session token: {str(e)}")
        return None
