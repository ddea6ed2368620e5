"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from pf2e_builder.core.exceptions import (
    ConfigurationError,
    EngineError,
    MalformedCharacterError,
    Pf2eBuilderError,
    ReferenceDataError,
    ValidationError,
)


class TestPf2eBuilderError:
    """Tests for the base Pf2eBuilderError exception."""

    def test_basic_message(self) -> None:
        """Test exception with basic message."""
        exc = Pf2eBuilderError("Test error message")
        assert exc.message == "Test error message"
        assert exc.details == {}
        assert str(exc) == "Test error message"

    def test_with_details(self) -> None:
        """Test exception with additional details."""
        exc = Pf2eBuilderError(
            "Test error",
            details={"key": "value", "count": 42},
        )
        assert exc.details == {"key": "value", "count": 42}
        assert "key='value'" in str(exc)
        assert "count=42" in str(exc)

    def test_repr(self) -> None:
        """Test exception repr output."""
        exc = Pf2eBuilderError("Test", details={"x": 1})
        repr_str = repr(exc)
        assert "Pf2eBuilderError" in repr_str
        assert "Test" in repr_str
        assert "x" in repr_str


class TestEngineErrors:
    """Tests for engine domain exceptions."""

    def test_malformed_character_error(self) -> None:
        """Test MalformedCharacterError carries the missing field."""
        exc = MalformedCharacterError("No ability scores", missing_field="ability_scores")
        assert exc.details["missing_field"] == "ability_scores"
        assert isinstance(exc, EngineError)
        assert isinstance(exc, Pf2eBuilderError)

    def test_malformed_character_error_without_field(self) -> None:
        """Test MalformedCharacterError without a field name."""
        exc = MalformedCharacterError("Not an object")
        assert exc.details == {}

    def test_reference_data_error(self) -> None:
        """Test ReferenceDataError carries table context."""
        exc = ReferenceDataError("Key mismatch", table="classes", entry_id="fighter")
        assert exc.details == {"table": "classes", "entry_id": "fighter"}
        assert not isinstance(exc, EngineError)


class TestValidationErrors:
    """Tests for configuration and validation exceptions."""

    def test_configuration_error(self) -> None:
        """Test ConfigurationError with config key."""
        exc = ConfigurationError("Invalid level", config_key="master_level")
        assert exc.details["config_key"] == "master_level"

    def test_validation_error(self) -> None:
        """Test ValidationError with field context."""
        exc = ValidationError(
            "Unknown rest action",
            field_name="action",
            invalid_value="nap",
        )
        assert exc.details["field_name"] == "action"
        assert exc.details["invalid_value"] == "nap"


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            EngineError,
            MalformedCharacterError,
            ReferenceDataError,
            ConfigurationError,
            ValidationError,
        ],
    )
    def test_all_inherit_from_base(self, exc_class: type[Pf2eBuilderError]) -> None:
        """Test all exceptions inherit from Pf2eBuilderError."""
        assert issubclass(exc_class, Pf2eBuilderError)

    def test_catch_all_with_base(self) -> None:
        """Test catching all errors with the base class."""
        with pytest.raises(Pf2eBuilderError):
            raise MalformedCharacterError("Test")
