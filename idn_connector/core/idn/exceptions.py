"""IdentityNow-specific exceptions for error handling."""


class IDNError(Exception):
    """Base exception for all IdentityNow operations."""
    pass


class IDNAPIError(IDNError):
    """HTTP error from the IdentityNow API.

    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class AccountNotFoundError(IDNError):
    """Account lookup failed - identity does not exist."""
    pass


class RoleNotFoundError(IDNError):
    """Role does not exist in the tenant."""
    pass


class WorkgroupNotFoundError(IDNError):
    """Workgroup does not exist in the tenant."""
    pass
