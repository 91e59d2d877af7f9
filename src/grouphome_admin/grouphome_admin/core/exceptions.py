from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    `errors` maps a form field (camelCase, as the client knows it) to the
    message shown next to that field.
    """

    def __init__(self, message: str = "入力内容に誤りがあります", errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.errors: dict[str, str] = dict(errors or {})


class NotFoundError(DomainError):
    """Raised when the requested entity does not exist."""


class ConflictError(DomainError):
    """Raised when an operation is refused because of existing references."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
