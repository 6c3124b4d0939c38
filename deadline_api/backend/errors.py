"""Service-layer error taxonomy.

Services raise these; ``main`` renders them into the response envelope
using ``status_code``, ``message`` and any ``extra`` payload keys.
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, *, error: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error = error
        self.extra = extra or {}


class ValidationError(ServiceError):
    status_code = 400


class StateError(ServiceError):
    status_code = 400


class ConflictError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403


class DeadlinePassedError(ForbiddenError):
    """Write attempted after the cutoff; ``extra`` carries ``deadlineInfo``."""


class UnexpectedError(ServiceError):
    status_code = 500
