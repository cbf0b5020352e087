"""
Structured error types for sitepub.

Every failure in the publishing pipeline is raised as a ``SitepubError``
subclass that carries a category, a retry flag, structured context and the
chained underlying exception. Runners record these on their result models so
the CLI can print a one-line reason and exit non-zero, the same way a failed
``make`` target fails a CI job.

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                      SitepubError                          │
        │  (category, retryable, context, cause)                    │
        ├───────────────────────────────────────────────────────────┤
        │  ConfigError        ToolError          (pipeline steps)   │
        │  (CONFIG)           (TOOL)                                 │
        │       │                 │                  │               │
        │  MissingConfig      ToolNotFound       BuildError          │
        │  InvalidConfig      ToolExecution      LinkRewriteError    │
        │                                        PackageError        │
        │                                        PublishError        │
        └───────────────────────────────────────────────────────────┘

Examples:
    >>> error = MissingConfigError("DEV_EUW_ACCOUNT_KEY")
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> error.retryable
    False

    >>> error = PublishError("upload failed").with_context(target="dev-euw")
    >>> error.context.target
    'dev-euw'

Tags:
    error-handling, exception-hierarchy, error-context, sitepub
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories, one per pipeline concern."""

    CONFIG = "CONFIG"
    TOOL = "TOOL"
    BUILD = "BUILD"
    REWRITE = "REWRITE"
    PACKAGE = "PACKAGE"
    PUBLISH = "PUBLISH"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only the fields relevant to the failure need to be set; ``to_dict()``
    drops the rest so log lines stay short.

    Attributes:
        step: Pipeline step that failed (``mkdocs``, ``fixlinks``, ...)
        run_id: Identifier of the pipeline run
        path: File or directory involved
        command: Command line of the external tool (secrets never included)
        target: Publish target name
        metadata: Additional key-value pairs
    """

    step: str | None = None
    run_id: str | None = None
    path: str | None = None
    command: str | None = None
    target: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["step", "run_id", "path", "command", "target"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SitepubError(Exception):
    """
    Base exception for all sitepub errors.

    Subclasses set ``default_category`` and ``default_retryable`` so callers
    rarely need to pass them explicitly.

    Examples:
        >>> error = SitepubError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> try:
        ...     raise OSError("disk full")
        ... except OSError as e:
        ...     error = SitepubError("Write failed", cause=e)
        >>> error.cause
        OSError('disk full')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SitepubError:
        """
        Add context to this error (fluent API).

        Usage:
            raise BuildError("mkdocs failed").with_context(step="mkdocs", path="mkdocs.yml")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(SitepubError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# EXTERNAL TOOL ERRORS
# =============================================================================


class ToolError(SitepubError):
    """An external command-line tool could not be run or failed."""

    default_category = ErrorCategory.TOOL
    default_retryable = False


class ToolNotFoundError(ToolError):
    """The tool is not installed or not on PATH."""

    def __init__(self, tool: str, hint: str | None = None):
        self.tool = tool
        message = f"Required tool not found: {tool}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class ToolExecutionError(ToolError):
    """The tool exited with a non-zero status."""

    def __init__(
        self,
        command: list[str],
        returncode: int,
        stderr: str = "",
        **kwargs: Any,
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        tail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        message = f"{command[0]} exited with code {returncode}"
        if tail:
            message = f"{message}: {tail}"
        super().__init__(message, **kwargs)
        self.context.command = " ".join(self.command)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["returncode"] = self.returncode
        return result


# =============================================================================
# PIPELINE STEP ERRORS
# =============================================================================


class BuildError(SitepubError):
    """The static site could not be generated."""

    default_category = ErrorCategory.BUILD


class LinkRewriteError(SitepubError):
    """Generated HTML could not be read, rewritten or written back."""

    default_category = ErrorCategory.REWRITE


class PackageError(SitepubError):
    """Staging or archiving the site tree failed."""

    default_category = ErrorCategory.PACKAGE


class PublishError(SitepubError):
    """Uploading to blob storage failed. Usually worth another attempt."""

    default_category = ErrorCategory.PUBLISH
    default_retryable = True


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, SitepubError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, SitepubError):
        return error.category
    if isinstance(error, FileNotFoundError):
        return ErrorCategory.CONFIG
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.PUBLISH
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SitepubError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "ToolError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "BuildError",
    "LinkRewriteError",
    "PackageError",
    "PublishError",
    "is_retryable",
    "categorize_error",
]
