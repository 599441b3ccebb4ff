"""
Application configuration settings loaded from environment variables.
Uses pydantic_settings for validation and type conversion.
"""
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    """
    Application settings class with environment variable validation.

    Attributes:
        database_url: SQLAlchemy connection string
        secret_key: Secret key for JWT token encoding
        algorithm: Algorithm used for JWT encoding (typically HS256)
        access_token_expire_minutes: Session token lifetime in minutes
        email_verification_expire_minutes: Lifetime of an email verification token
        password_reset_expire_minutes: Lifetime of a password reset token

        # Google sign-in
        google_client_id: OAuth client id that Google identity tokens must be issued for
        google_tokeninfo_url: Google endpoint used to validate identity tokens
        google_timeout_seconds: Timeout for requests to the Google endpoint

        # Email settings
        mail_username: SMTP server username
        mail_password: SMTP server password
        mail_from: Sender email address
        mail_port: SMTP server port
        mail_server: SMTP server hostname
        mail_starttls: Whether to use STARTTLS
        mail_ssl_tls: Whether to use SSL/TLS
        use_credentials: Whether to use credentials for SMTP
        validate_certs: Whether to validate certificates
        mail_suppress_send: Build messages without delivering them (local development)
    """
    # Database settings
    database_url: str

    # JWT settings
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # One-time token lifetimes
    email_verification_expire_minutes: int = 60 * 24
    password_reset_expire_minutes: int = 10

    # Google sign-in
    google_client_id: str
    google_tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo"
    google_timeout_seconds: float = 10.0

    # Email settings
    mail_username: str = ""
    mail_password: str = ""
    mail_from: str = "no-reply@medconnect.app"
    mail_port: int = 587
    mail_server: str = "localhost"
    mail_starttls: bool = True
    mail_ssl_tls: bool = False
    use_credentials: bool = True
    validate_certs: bool = True
    mail_suppress_send: bool = False

    # Comma-separated list of allowed frontend origins
    cors_origins: str = "http://localhost:3000"

    class Config:
        """Configuration for environment variables loading"""
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origin_list(self) -> List[str]:
        """Return CORS origins as a list, parsing the comma-separated env string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

# Create settings instance
settings = Settings()
