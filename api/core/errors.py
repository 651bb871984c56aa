"""
Application error taxonomy.

Every error carries the HTTP status it maps to. Messages are returned to the
client verbatim inside the response envelope (see `core/responses.py`).
"""

from __future__ import annotations


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


# Malformed or missing JSON body / path parameter.
class BindingError(AppError):
    status_code = 400


class NotConnectedError(AppError):
    def __init__(self, message: str = "database is not connected") -> None:
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404


class StoreError(AppError):
    pass


class DuplicateKeyError(StoreError):
    pass


class SQLExecutionError(StoreError):
    pass


# Named to avoid shadowing the builtin ConnectionError.
class DatabaseConnectionError(AppError):
    pass


class MigrationError(AppError):
    pass
