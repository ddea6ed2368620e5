"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        Pf2eBuilderError: Base exception for all application errors.
        EngineError: Derived-stat engine errors.
        MalformedCharacterError: Structurally unusable character snapshot.
        ReferenceDataError: Inconsistent reference tables.
        ConfigurationError: Configuration-related errors.
        ValidationError: Data validation errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        configure_logging_from_settings: Set up logging from Settings.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from pf2e_builder.core.config import (
    EngineSettings,
    ProficiencySettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from pf2e_builder.core.exceptions import (
    ConfigurationError,
    EngineError,
    MalformedCharacterError,
    Pf2eBuilderError,
    ReferenceDataError,
    ValidationError,
)
from pf2e_builder.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)


__all__ = [
    # Exceptions
    "Pf2eBuilderError",
    "EngineError",
    "MalformedCharacterError",
    "ReferenceDataError",
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "Settings",
    "EngineSettings",
    "ProficiencySettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
