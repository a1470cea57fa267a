"""Exceptions shared between the storage, upload and HTTP layers."""

from typing import Optional


class StoreFault(Exception):
    """Any failure raised while talking to the relational store."""

    def __init__(self, message: str = "Database error", statement: Optional[str] = None) -> None:
        super().__init__(message)
        self.statement = statement


class BadRequestError(ValueError):
    """Client input that cannot be processed. The message is safe to return to the client."""


class UploadValidationError(BadRequestError):
    """Rejected upload."""
