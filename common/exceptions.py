from typing import List, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError

from common.responses import (
    ERROR_BUSINESS,
    ERROR_NOT_FOUND,
    ERROR_STORAGE,
    ERROR_VALIDATION,
    ServiceResult,
    error_response,
)


class PersistenceError(Exception):
    """
    Raised by repositories when the remote store fails.
    Carries a readable message and, when the driver offers one, an error code.
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class StorageError(Exception):
    """
    Raised by the document storage when an upload is rejected or fails.
    `rejected` distinguishes bad input (type/size) from bucket failures.
    """

    def __init__(self, message: str, rejected: bool = False):
        super().__init__(message)
        self.message = message
        self.rejected = rejected


def validation_messages(exc: ValidationError) -> List[str]:
    """
    Flatten pydantic errors into one "campo: mensaje" string per violation.
    """
    messages: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "__root__")
        msg = err.get("msg", "valor inválido")
        # pydantic prefixes messages raised from validators
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


_STATUS_BY_KIND = {
    ERROR_VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ERROR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ERROR_BUSINESS: status.HTTP_409_CONFLICT,
    ERROR_STORAGE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_from_result(result: ServiceResult) -> HTTPException:
    """
    Translate a failed ServiceResult into the HTTPException the routers raise.
    """
    code = _STATUS_BY_KIND.get(result.error_kind or ERROR_BUSINESS, status.HTTP_400_BAD_REQUEST)
    message = result.errors[0] if result.errors else "Operación no permitida"
    return HTTPException(status_code=code, detail=error_response(message, result.errors))


def http_not_found(detail: str) -> HTTPException:
    """
    404 Not Found response shortcut.
    """
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def http_bad_request(detail: str) -> HTTPException:
    """
    400 Bad Request response shortcut.
    """
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
