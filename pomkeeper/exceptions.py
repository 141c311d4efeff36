"""
Custom exception hierarchy for pomkeeper.

All exceptions inherit from :class:`PomKeeperError` and carry optional
structured metadata via the ``details`` attribute. Only run-aborting
conditions are raised; per-site skips are reported as diagnostics by
:mod:`pomkeeper.core.updater` instead.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class PomKeeperError(Exception):
    """Base exception for all pomkeeper errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ManifestParseError(PomKeeperError):
    """Raised when a POM file is not well-formed or lacks a ``project`` root.

    Args:
        message: Error description.
        file_path: Path to the POM being parsed.
        line_number: Line reported by the XML parser, if any.
    """

    __slots__ = ("file_path", "line_number")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)
        _add_if(details, "line", line_number)

        super().__init__(message, details)

        self.file_path = file_path
        self.line_number = line_number


class NetworkError(PomKeeperError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class RepositoryError(NetworkError):
    """Raised when a Maven repository answers with an error.

    A 404 is reported with this type so that callers can tell "artifact
    unknown to this repository" apart from transport failures.

    Args:
        message: Error description.
        repository: Base URL of the repository.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("repository",)

    def __init__(
        self,
        message: str,
        *,
        repository: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.repository = repository
        if repository is not None:
            self.details["repository"] = repository


class CatalogError(PomKeeperError):
    """Raised when the known versions of a coordinate cannot be retrieved.

    This aborts the whole run.

    Args:
        message: Error description.
        coordinate: ``groupId:artifactId`` being looked up.
    """

    __slots__ = ("coordinate",)

    def __init__(self, message: str, *, coordinate: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "coordinate", coordinate)
        super().__init__(message, details)
        self.coordinate = coordinate


class VersionRangeError(PomKeeperError):
    """Raised for a malformed version range specification.

    Args:
        message: Error description.
        spec: The offending specification.
    """

    __slots__ = ("spec",)

    def __init__(self, message: str, *, spec: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "spec", spec)
        super().__init__(message, details)
        self.spec = spec


class FileOperationError(PomKeeperError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/backup).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(PomKeeperError):
    """Raised when a configuration file is unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
