"""Custom exception hierarchy for the PF2e character builder engine.

The engine follows a clamp-and-filter policy for player data, so most
mistakes in a character snapshot never surface as exceptions. The classes
below cover the remaining cases: broken configuration, invalid reference
data, and structurally malformed snapshots that the persistence layer
should never have produced.

All exceptions inherit from Pf2eBuilderError, enabling unified error
handling at the application boundary while preserving domain-specific context.

Example:
    >>> from pf2e_builder.core.exceptions import MalformedCharacterError
    >>> raise MalformedCharacterError("No ability scores", missing_field="ability_scores")
"""

from __future__ import annotations

from typing import Any


class Pf2eBuilderError(Exception):
    """Base exception for all character builder errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Engine Domain Exceptions
# =============================================================================


class EngineError(Pf2eBuilderError):
    """Base exception for derived-stat engine errors.

    Raised only for programmer or persistence-layer mistakes. Player-editable
    data problems are clamped or filtered instead.
    """


class MalformedCharacterError(EngineError):
    """Raised when a character snapshot is structurally unusable.

    A snapshot without its ability-score aggregate, or one that is not an
    object at all, cannot be recalculated and must be surfaced to the caller.
    """

    def __init__(
        self,
        message: str,
        *,
        missing_field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize malformed character error with field context.

        Args:
            message: Human-readable error description.
            missing_field: Name of the required aggregate that is absent.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if missing_field:
            combined_details["missing_field"] = missing_field
        super().__init__(message, details=combined_details)


class ReferenceDataError(Pf2eBuilderError):
    """Raised when read-only reference tables are inconsistent.

    For example, a table entry whose key does not match its own id.
    """

    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        entry_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize reference data error with table context.

        Args:
            message: Human-readable error description.
            table: Name of the reference table.
            entry_id: Identifier of the offending entry.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if table:
            combined_details["table"] = table
        if entry_id:
            combined_details["entry_id"] = entry_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(Pf2eBuilderError):
    """Raised when application configuration is invalid.

    This includes invalid values or incompatible configuration combinations.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(Pf2eBuilderError):
    """Raised when data validation fails outside of pydantic models."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


__all__ = [
    "Pf2eBuilderError",
    "EngineError",
    "MalformedCharacterError",
    "ReferenceDataError",
    "ConfigurationError",
    "ValidationError",
]
