"""
Authentication-specific exceptions.
"""
from fastapi import HTTPException, status

class AuthException(HTTPException):
    """Base class for authentication exceptions."""
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

class BadRequestException(AuthException):
    """Exception raised when a request is missing required input."""
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class InvalidCredentialsException(AuthException):
    """Exception raised when credentials are invalid."""
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class EmailAlreadyExistsException(AuthException):
    """Exception raised when email already exists."""
    def __init__(self, detail: str = "Email already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class EmailNotVerifiedException(AuthException):
    """Exception raised when an unverified account tries to sign in."""
    def __init__(self, detail: str = "Please verify your email to log in."):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class VerificationTokenInvalidException(AuthException):
    """Exception raised when a verification or reset token is unknown or expired."""
    def __init__(self, detail: str = "Token is invalid or has expired"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class InvalidTokenException(AuthException):
    """Exception raised when a session or identity token is invalid."""
    def __init__(self, detail: str = "Invalid token"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class UserNotFoundException(AuthException):
    """Exception raised when no account exists for an email."""
    def __init__(self, detail: str = "No email found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class EmailDeliveryException(AuthException):
    """Exception raised when a transactional email could not be sent."""
    def __init__(self, detail: str = "There was an error sending the email. Please try again later"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

class IdentityProviderException(AuthException):
    """Exception raised when the third-party identity provider cannot be reached."""
    def __init__(self, detail: str = "Could not reach the identity provider. Please try again later"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
