"""Tests for sitepub.core.errors — error hierarchy, context and helpers."""

from __future__ import annotations

import pytest

from sitepub.core.errors import (
    BuildError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    LinkRewriteError,
    MissingConfigError,
    PackageError,
    PublishError,
    SitepubError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    categorize_error,
    is_retryable,
)


class TestErrorContext:
    def test_to_dict_drops_unset_fields(self):
        ctx = ErrorContext(step="fixlinks", path="site/index.html")
        assert ctx.to_dict() == {"step": "fixlinks", "path": "site/index.html"}

    def test_metadata_is_merged(self):
        ctx = ErrorContext(target="dev-euw", metadata={"attempt": 2})
        assert ctx.to_dict() == {"target": "dev-euw", "attempt": 2}


class TestSitepubError:
    def test_defaults(self):
        error = SitepubError("boom")
        assert error.message == "boom"
        assert str(error) == "boom"
        assert error.category == ErrorCategory.INTERNAL
        assert error.retryable is False
        assert error.cause is None

    def test_cause_is_chained(self):
        cause = OSError("disk full")
        error = SitepubError("write failed", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_with_context_sets_known_fields_and_metadata(self):
        error = BuildError("mkdocs failed").with_context(step="mkdocs", pages=0)
        assert error.context.step == "mkdocs"
        assert error.context.metadata == {"pages": 0}

    def test_with_context_returns_same_instance(self):
        error = PackageError("nope")
        assert error.with_context(path="x") is error

    def test_to_dict(self):
        cause = ValueError("bad")
        error = PublishError("upload failed", cause=cause).with_context(target="prod-use")
        data = error.to_dict()
        assert data["error_type"] == "PublishError"
        assert data["message"] == "upload failed"
        assert data["category"] == "PUBLISH"
        assert data["retryable"] is True
        assert data["context"] == {"target": "prod-use"}
        assert data["cause"] == "bad"

    def test_explicit_overrides(self):
        error = PublishError("gone", retryable=False, category=ErrorCategory.CONFIG)
        assert error.retryable is False
        assert error.category == ErrorCategory.CONFIG

    def test_repr(self):
        assert repr(LinkRewriteError("x")) == "LinkRewriteError('x', category=REWRITE)"


class TestConfigErrors:
    def test_missing_config(self):
        error = MissingConfigError("DEV_EUW_ACCOUNT_KEY")
        assert isinstance(error, ConfigError)
        assert error.key == "DEV_EUW_ACCOUNT_KEY"
        assert "DEV_EUW_ACCOUNT_KEY" in error.message
        assert error.category == ErrorCategory.CONFIG
        assert error.retryable is False

    def test_invalid_config(self):
        error = InvalidConfigError("base_path", "blacksheep?")
        assert error.value == "blacksheep?"
        assert "'blacksheep?'" in error.message


class TestToolErrors:
    def test_not_found_with_hint(self):
        error = ToolNotFoundError("pyazblob", "Install it with: pip install sitepub[publish]")
        assert isinstance(error, ToolError)
        assert error.tool == "pyazblob"
        assert error.message == (
            "Required tool not found: pyazblob. Install it with: pip install sitepub[publish]"
        )
        assert error.category == ErrorCategory.TOOL

    def test_execution_error_uses_last_stderr_line(self):
        error = ToolExecutionError(
            ["python", "-m", "mkdocs", "build"],
            1,
            "INFO - Building\nERROR - Config value 'nav': not found\n",
        )
        assert error.returncode == 1
        assert error.message == "python exited with code 1: ERROR - Config value 'nav': not found"
        assert error.context.command == "python -m mkdocs build"
        assert error.to_dict()["returncode"] == 1

    def test_execution_error_without_stderr(self):
        error = ToolExecutionError(["pyazblob", "upload"], 2)
        assert error.message == "pyazblob exited with code 2"


class TestHelpers:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (PublishError("x"), True),
            (BuildError("x"), False),
            (ConnectionError(), True),
            (TimeoutError(), True),
            (ValueError(), False),
        ],
    )
    def test_is_retryable(self, error, expected):
        assert is_retryable(error) is expected

    @pytest.mark.parametrize(
        "error, expected",
        [
            (LinkRewriteError("x"), ErrorCategory.REWRITE),
            (FileNotFoundError(), ErrorCategory.CONFIG),
            (ConnectionError(), ErrorCategory.PUBLISH),
            (RuntimeError(), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categorize_error(self, error, expected):
        assert categorize_error(error) == expected
