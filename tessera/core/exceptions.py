"""Custom exceptions for the Tessera prompt engine.

This module defines the exception hierarchy raised by components,
compositions, patterns and strategies. All exceptions inherit from
TesseraError, enabling catch-all handling while still allowing callers to
react to a specific failure stage.

Exception Hierarchy:
    TesseraError (base)
    ├── ConfigurationError: Invalid ids, empty collections, duplicates, bounds
    ├── InputValidationError: Build input failed the composed schema
    ├── PatternError: Required keys/ids missing or out of order
    │   └── TokenLimitExceededError: Aggregate pattern budget exceeded
    ├── ContentValidationError: Rendered text violated a content rule
    └── CostConfigurationError: Cost update without a cost configuration

Every recoverable failure is raised once per stage with all violations of
that stage listed in the message. Exceptions raised by user supplied
templates or custom validators are never wrapped.
"""

from typing import Any, Optional


class TesseraError(Exception):
    """Base exception for all Tessera errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        context: Additional context information about the error
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "TESSERA_ERROR"
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def to_log_dict(self) -> dict[str, Any]:
        """Return structured dict for logging.

        Returns:
            Dictionary with error details suitable for structured logging
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(TesseraError):
    """Raised at construction time when a configuration object is invalid.

    Attributes:
        config_key: The identifier or field that caused the error
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {}) or {}
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, code="CONFIG_ERROR", context=context, **kwargs)
        self.config_key = config_key


class InputValidationError(TesseraError):
    """Raised when build input does not satisfy a schema.

    Attributes:
        issues: Every schema issue found, in validator order
    """

    def __init__(self, message: str, issues: Optional[list[Any]] = None, **kwargs: Any) -> None:
        context = kwargs.pop("context", {}) or {}
        self.issues = list(issues or [])
        context["issue_count"] = len(self.issues)
        super().__init__(message, code="INPUT_VALIDATION_ERROR", context=context, **kwargs)


class PatternError(TesseraError):
    """Raised when required keys or ids are missing or appear out of order.

    Attributes:
        pattern_id: The pattern that was violated
        expected: Required keys or ids in pattern order
        actual: Keys or ids found on the validated object
    """

    def __init__(
        self,
        message: str,
        pattern_id: Optional[str] = None,
        expected: Optional[list[str]] = None,
        actual: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {}) or {}
        code = kwargs.pop("code", "PATTERN_ERROR")
        if pattern_id:
            context["pattern_id"] = pattern_id
        if expected is not None:
            context["expected"] = expected
        if actual is not None:
            context["actual"] = actual
        super().__init__(message, code=code, context=context, **kwargs)
        self.pattern_id = pattern_id
        self.expected = expected
        self.actual = actual


class TokenLimitExceededError(PatternError):
    """Raised when a build exceeds the aggregate token budget of its pattern.

    Attributes:
        token_count: Total tokens of the rendered composition
        max_tokens: Budget declared by the pattern
    """

    def __init__(
        self,
        message: str,
        token_count: int,
        max_tokens: int,
        pattern_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {}) or {}
        context["token_count"] = token_count
        context["max_tokens"] = max_tokens
        super().__init__(
            message,
            pattern_id=pattern_id,
            code="TOKEN_LIMIT_EXCEEDED",
            context=context,
            **kwargs,
        )
        self.token_count = token_count
        self.max_tokens = max_tokens


class ContentValidationError(TesseraError):
    """Raised when rendered component text violates a content rule.

    Attributes:
        component_key: Key of the component whose text failed
        issues: All issues of the failing rule, errors and warnings
    """

    def __init__(
        self,
        message: str,
        component_key: Optional[str] = None,
        issues: Optional[list[Any]] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {}) or {}
        if component_key:
            context["component_key"] = component_key
        super().__init__(message, code="CONTENT_VALIDATION_ERROR", context=context, **kwargs)
        self.component_key = component_key
        self.issues = list(issues or [])


class CostConfigurationError(TesseraError):
    """Raised when cost data is requested from a composition without pricing."""

    def __init__(self, message: str, composition_id: Optional[str] = None, **kwargs: Any) -> None:
        context = kwargs.pop("context", {}) or {}
        if composition_id:
            context["composition_id"] = composition_id
        super().__init__(message, code="COST_CONFIG_ERROR", context=context, **kwargs)
        self.composition_id = composition_id


__all__ = [
    "TesseraError",
    "ConfigurationError",
    "InputValidationError",
    "PatternError",
    "TokenLimitExceededError",
    "ContentValidationError",
    "CostConfigurationError",
]
