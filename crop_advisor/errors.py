"""
Error taxonomy shared by the services and the HTTP layer
"""
from typing import Any, Optional


class CropAdvisorError(Exception):
    """Base class; ``message`` is safe to show to API callers"""

    status_code = 500
    default_message = "An error occurred processing your request"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(CropAdvisorError):
    """Malformed or out-of-range input. Raised before any scoring happens."""

    status_code = 400
    default_message = "Invalid input parameters"


class UpstreamError(CropAdvisorError):
    """An external service (weather, vision model) was unreachable or answered garbage."""

    status_code = 502
    default_message = "Upstream service unavailable"


class PersistenceError(CropAdvisorError):
    """History store read/write failed."""

    status_code = 503
    default_message = "History storage unavailable"
