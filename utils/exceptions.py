"""Error taxonomy shared by repositories, services and controllers.

Every error carries a short machine-readable ``code`` and the HTTP status the
API boundary answers with, so controllers never have to guess.
"""
from starlette import status


class CatalogError(Exception):
    """Base class for all catalog/review errors."""

    code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", details=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.details = details


class InvalidInputError(CatalogError):
    code = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthenticatedError(CatalogError):
    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(CatalogError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InstanceNotFoundError(CatalogError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(CatalogError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class StoreUnavailableError(CatalogError):
    code = "store_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class StoreTimeoutError(StoreUnavailableError):
    code = "store_timeout"
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
