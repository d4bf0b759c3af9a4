from __future__ import annotations


class FirDeskError(Exception):
    """Base class for errors raised by firdesk."""


class ConfigError(FirDeskError):
    pass


class BackendInitError(FirDeskError):
    """The managed backend could not be initialised."""


class AuthError(FirDeskError):
    pass


class NotAuthenticatedError(AuthError):
    """A write was attempted before a user id was available."""


class IssueValidationError(FirDeskError):
    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = list(missing or [])


class DocumentNotFoundError(FirDeskError):
    pass


class StorageNotConfiguredError(FirDeskError):
    pass
