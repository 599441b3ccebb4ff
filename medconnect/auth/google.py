"""
Google identity token verification.

Identity tokens obtained by the client's Google sign-in flow are checked
against Google's tokeninfo endpoint, which validates the signature and
expiry and returns the token's claims.
"""
import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from ..config import settings
from .exceptions import IdentityProviderException, InvalidTokenException

# Set up logging
logger = logging.getLogger(__name__)

class GoogleClaims(BaseModel):
    """
    Verified claims of a Google identity token.

    Fields:
    - aud: OAuth client id the token was issued for
    - email: Google account email
    - email_verified: Whether Google has verified the email ("true"/"false" strings are accepted)
    - given_name / family_name: Profile names
    - picture: Profile picture URL
    """
    aud: str
    email: str
    email_verified: bool = True
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    picture: Optional[str] = None

async def verify_google_id_token(id_token: str) -> GoogleClaims:
    """
    Validate an identity token with Google and return its claims.

    Args:
        id_token: Identity token from the client's sign-in flow

    Returns:
        GoogleClaims: Claims of the validated token

    Raises:
        InvalidTokenException: If Google rejects the token
        IdentityProviderException: If Google could not be reached
    """
    try:
        async with httpx.AsyncClient(timeout=settings.google_timeout_seconds) as client:
            response = await client.get(settings.google_tokeninfo_url, params={"id_token": id_token})
    except httpx.HTTPError as e:
        logger.error(f"Google tokeninfo request failed: {str(e)}")
        raise IdentityProviderException()

    if response.status_code != 200:
        logger.warning(f"Google rejected identity token: HTTP {response.status_code}")
        raise InvalidTokenException("Invalid token.")

    try:
        return GoogleClaims.model_validate(response.json())
    except (ValueError, ValidationError):
        logger.warning("Google tokeninfo response is missing required claims")
        raise InvalidTokenException("Invalid token.")
