"""
Application Exceptions

Error taxonomy shared by repositories, services and the HTTP layer.

    ValidationError     -> 400 (malformed request)
    InvalidResetCode    -> 400 with a generic message
    AuthenticationError -> 401 (bad credentials or token)
    StorageError        -> 500 (database read/write failure)
    AuthProviderError   -> 500 (identity store rejected the update)

Handlers in app.main translate these into JSON responses.
"""


class FundingOSError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    public_message: str = "Internal server error"


class ValidationError(FundingOSError):
    """Missing or malformed request fields."""

    status_code = 400

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message)
        self.public_message = message


class InvalidResetCode(FundingOSError):
    """
    Unknown account, wrong code, expired code or already consumed code.

    All of these produce the same response.
    """

    status_code = 400
    public_message = "Invalid code"


class StorageError(FundingOSError):
    """Persistence layer failure."""


class AuthProviderError(FundingOSError):
    """The identity store refused to update the credential."""


class AuthenticationError(FundingOSError):
    """Bad credentials, bad token, or an account that may not sign in."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)
        self.public_message = message
