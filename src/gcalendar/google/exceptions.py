"""Google ClientLogin exceptions."""


class GoogleAuthError(Exception):
    """Base exception for Google authentication errors."""

    pass


class BadCredentialsError(GoogleAuthError):
    """Raised when ClientLogin rejects the email/password pair."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Google rejected the account credentials.")


class LoginError(GoogleAuthError):
    """Raised when the login endpoint answers with something unusable."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class LoginTransportError(GoogleAuthError):
    """Raised when the login endpoint cannot be reached."""

    pass
