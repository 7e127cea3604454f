"""Service-level exceptions.

Every failure the order and catalog services surface is a subclass of
BookstoreError, so the API layer can render them uniformly through one
exception handler.
"""

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class BookstoreError(Exception):
    """Base class for all service errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, entity_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity_id = entity_id

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.entity_id is not None:
            body["id"] = self.entity_id
        return body


class NotFoundError(BookstoreError):
    """A referenced entity does not exist, or is archived."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity_id: str, entity: str = "Entity"):
        super().__init__(f"{entity} with id={entity_id} not found", entity_id)


class BadRequestError(BookstoreError):
    """The request is well-formed but violates a business rule."""

    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientStockError(BadRequestError):
    def __init__(self, book_id: str, requested: int, available: Optional[int] = None):
        if available is None:
            message = f"Insufficient stock for book {book_id} (requested {requested})"
        else:
            message = (
                f"Insufficient stock for book {book_id} "
                f"(requested {requested}, available {available})"
            )
        super().__init__(message, book_id)
        self.requested = requested
        self.available = available


class ConflictError(BookstoreError):
    """The store aborted the transaction because of concurrent contention.

    Safe to retry: nothing of the aborted transaction was committed.
    """

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Concurrent update conflict, please retry"):
        super().__init__(message)


class PersistenceError(BookstoreError):
    """Any other store failure. The raw driver text is logged, never returned."""

    def __init__(self, message: str = "Database error"):
        super().__init__(message)


class AuthenticationError(BookstoreError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid or missing token"):
        super().__init__(message)


class PermissionDeniedError(BookstoreError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Not enough permissions"):
        super().__init__(message)


async def bookstore_error_handler(request: Request, exc: BookstoreError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)
