"""Exceptions raised by the Evernote repository."""


class RepositoryError(Exception):
    """Base class for every error the repository surfaces to the host.

    ``identifier`` names the language string that describes the error to the
    end user, when there is one.
    """

    identifier: str | None = None

    def __init__(self, message: str, *, identifier: str | None = None) -> None:
        super().__init__(message)
        if identifier is not None:
            self.identifier = identifier


class AuthError(RepositoryError):
    """Missing, invalid or expired credentials. The user must log in again."""

    identifier = "requesttokenerror"


class PermissionDeniedError(RepositoryError):
    """The service refused access to the notes matching a filter."""

    identifier = "nopermissiontoaccessnotes"


class DownloadError(RepositoryError):
    """A file could not be materialized. The cause is chained, not exposed."""

    identifier = "cannotdownload"


class ConfigError(RepositoryError):
    """Malformed reference, malformed source or incomplete admin settings."""


class RemoteServiceError(RepositoryError):
    """An EDAM user or system exception reported by the note service."""

    def __init__(self, error_code: int, parameter: str | None = None) -> None:
        msg = f"Evernote service error {error_code}"
        if parameter:
            msg += f" ({parameter})"
        super().__init__(msg)
        self.error_code = error_code
        self.parameter = parameter
