from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

# Failure categories carried by ServiceResult; the routers map them to HTTP codes
ERROR_VALIDATION = "validation"
ERROR_NOT_FOUND = "not_found"
ERROR_BUSINESS = "business"
ERROR_STORAGE = "storage"


@dataclass
class ServiceResult(Generic[T]):
    """
    Envelope returned by every business-rule operation.
    Services never raise to their caller; failures land in `errors`.
    """
    success: bool
    record: Optional[T] = None
    errors: List[str] = field(default_factory=list)
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, record: Optional[T] = None) -> "ServiceResult[T]":
        return cls(success=True, record=record)

    @classmethod
    def fail(cls, errors: List[str], kind: str = ERROR_BUSINESS) -> "ServiceResult[T]":
        return cls(success=False, errors=list(errors), error_kind=kind)


def success_response(data: Any, message: str = "Success") -> Dict[str, Any]:
    """
    Standard success response envelope.
    """
    return {"message": message, "data": data}


def paginated_response(
    items: List[Any],
    total: int,
    page: int,
    size: int,
    total_pages: int,
    message: str = "Success",
) -> Dict[str, Any]:
    """
    Standard paginated response envelope.
    """
    return {
        "message": message,
        "data": items,
        "meta": {"total": total, "page": page, "size": size, "total_pages": total_pages},
    }


def error_response(message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    """
    Standard error response envelope.
    """
    payload: Dict[str, Any] = {"message": message}
    if details is not None:
        payload["details"] = details
    return payload
