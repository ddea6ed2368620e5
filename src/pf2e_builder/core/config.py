"""Configuration management for the PF2e character builder engine.

This module provides centralized configuration management using pydantic-settings,
supporting environment variables, .env files, and runtime configuration overrides.
Rule knobs that campaigns customise (rest cooldowns, variant proficiency
table, persistent conditions) live here rather than in the engine code.

Example:
    >>> from pf2e_builder.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.engine.treat_wounds_cooldown_minutes
    50

Environment Variables:
    PF2E_BUILDER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    PF2E_BUILDER_JSON_LOGS: Render logs as JSON
    PF2E_BUILDER_ENGINE_TREAT_WOUNDS_COOLDOWN_MINUTES: Treat Wounds cooldown
    PF2E_BUILDER_ENGINE_MAX_FOCUS_POINTS: Focus pool cap
    PF2E_BUILDER_PROFICIENCY_WITHOUT_LEVEL_BONUSES: JSON map of rank -> bonus
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pf2e_builder.core.exceptions import ConfigurationError


class EngineSettings(BaseSettings):
    """Configuration for derived-stat and resource rules.

    Attributes:
        treat_wounds_cooldown_minutes: Minimum minutes between Treat Wounds.
        refocus_cooldown_minutes: Minimum minutes between Refocus (0 disables).
        unlimited_dex_cap: Sentinel Dex cap used when armor imposes none.
        max_focus_points: Hard cap on the focus pool size.
        magical_container_threshold: Bulk reduction at or above which a
            container counts as magical and reduces bulk even when not worn.
        negligible_bulk_threshold: Item bulk below this counts as 0.
        encumbered_speed_penalty: Feet of speed lost while encumbered.
        persistent_conditions: Condition ids that survive a long rest.
    """

    model_config = SettingsConfigDict(
        env_prefix="PF2E_BUILDER_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    treat_wounds_cooldown_minutes: int = Field(
        default=50,
        ge=1,
        le=24 * 60,
        description="Treat Wounds cooldown in minutes",
    )
    refocus_cooldown_minutes: int = Field(
        default=0,
        ge=0,
        le=24 * 60,
        description="Refocus cooldown in minutes",
    )
    unlimited_dex_cap: int = Field(
        default=99,
        ge=10,
        description="Dex cap sentinel for unarmored or uncapped armor",
    )
    max_focus_points: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum focus points",
    )
    magical_container_threshold: int = Field(
        default=10,
        ge=1,
        description="Bulk reduction marking a container as magical",
    )
    negligible_bulk_threshold: float = Field(
        default=0.1,
        ge=0,
        le=1,
        description="Bulk below this value is negligible",
    )
    encumbered_speed_penalty: int = Field(
        default=10,
        ge=0,
        description="Speed penalty while encumbered",
    )
    persistent_conditions: list[str] = Field(
        default_factory=lambda: ["cursed", "doomed", "drained", "dying"],
        description="Conditions kept through a long rest",
    )

    @field_validator("persistent_conditions", mode="after")
    @classmethod
    def normalize_condition_ids(cls, value: list[str]) -> list[str]:
        """Lower-case and de-duplicate the persistent condition ids.

        Args:
            value: Raw condition id list.

        Returns:
            Normalized condition id list preserving order.
        """
        seen: list[str] = []
        for condition_id in value:
            key = condition_id.strip().lower()
            if key and key not in seen:
                seen.append(key)
        return seen


class ProficiencySettings(BaseSettings):
    """Configuration for proficiency bonuses and rank ceilings.

    Attributes:
        without_level_bonuses: Bonus per rank under the proficiency without
            level variant rule.
        master_level: Level from which master rank becomes available.
        legendary_level: Level from which legendary rank becomes available.
    """

    model_config = SettingsConfigDict(
        env_prefix="PF2E_BUILDER_PROFICIENCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    without_level_bonuses: dict[str, int] = Field(
        default_factory=lambda: {"trained": 2, "expert": 4, "master": 6, "legendary": 8},
        description="Proficiency without level bonus table",
    )
    master_level: int = Field(default=7, ge=1, le=20, description="Master unlock level")
    legendary_level: int = Field(default=15, ge=1, le=20, description="Legendary unlock level")

    @model_validator(mode="after")
    def validate_rank_levels(self) -> "ProficiencySettings":
        """Ensure rank unlock levels and the variant table are coherent.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If master unlocks after legendary or the
                variant table names an unknown rank.
        """
        if self.master_level >= self.legendary_level:
            raise ConfigurationError(
                f"master_level ({self.master_level}) must be less than "
                f"legendary_level ({self.legendary_level})",
                config_key="master_level",
            )
        unknown = set(self.without_level_bonuses) - {"trained", "expert", "master", "legendary"}
        if unknown:
            raise ConfigurationError(
                f"Unknown proficiency ranks in without_level_bonuses: {sorted(unknown)}",
                config_key="without_level_bonuses",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        log_level: Application logging level.
        json_logs: Render logs as JSON.
        engine: Rule engine settings.
        proficiency: Proficiency settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="PF2E_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON",
    )

    engine: EngineSettings = Field(default_factory=EngineSettings)
    proficiency: ProficiencySettings = Field(default_factory=ProficiencySettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    This is primarily useful for testing or when environment variables
    have changed at runtime.
    """
    get_settings.cache_clear()


__all__ = [
    "EngineSettings",
    "ProficiencySettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
