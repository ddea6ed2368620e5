"""Active conditions and player-declared buffs.

Conditions are a closed tagged union: ``ValuedCondition`` carries a value
(frightened 2), ``StaticCondition`` does not (off-guard). Snapshots written
without a ``kind`` tag are routed by the presence of ``value``.

Example:
    >>> from pydantic import TypeAdapter
    >>> TypeAdapter(ActiveCondition).validate_python({"id": "frightened", "value": 2})
    ValuedCondition(kind='valued', id='frightened', value=2, duration=None)
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Discriminator, Field, Tag, field_validator, model_validator

from pf2e_builder.models.components import Component, NonNegativeInt
from pf2e_builder.models.enums import BonusType


def _normalize_id(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _clamp_duration(value: Any) -> Any:
    """Negative durations are treated as already expired (0)."""
    if isinstance(value, int) and not isinstance(value, bool) and value < 0:
        return 0
    return value


# =============================================================================
# Conditions
# =============================================================================


class ValuedCondition(Component):
    """A condition with a numeric value, such as frightened 2.

    Attributes:
        id: Condition id from the condition table.
        value: Severity; the condition is dropped when this reaches 0.
        duration: Remaining rounds, or None for indefinite.
    """

    kind: Literal["valued"] = "valued"
    id: str
    value: NonNegativeInt = 1
    duration: int | None = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _normalize_id(value)

    @field_validator("duration", mode="before")
    @classmethod
    def clamp_duration(cls, value: Any) -> Any:
        return _clamp_duration(value)

    @property
    def is_expired(self) -> bool:
        return self.value <= 0 or (self.duration is not None and self.duration <= 0)

    @property
    def severity(self) -> int:
        return self.value


class StaticCondition(Component):
    """A condition without a value, such as off-guard."""

    kind: Literal["static"] = "static"
    id: str
    duration: int | None = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _normalize_id(value)

    @field_validator("duration", mode="before")
    @classmethod
    def clamp_duration(cls, value: Any) -> Any:
        return _clamp_duration(value)

    @property
    def is_expired(self) -> bool:
        return self.duration is not None and self.duration <= 0

    @property
    def severity(self) -> int:
        return 1


def _condition_kind(value: Any) -> str:
    """Pick the union member for raw or already-built condition data."""
    if isinstance(value, dict):
        kind = value.get("kind")
        if kind in ("valued", "static"):
            return kind
        return "valued" if value.get("value") is not None else "static"
    return getattr(value, "kind", "static")


ActiveCondition = Annotated[
    Union[
        Annotated[ValuedCondition, Tag("valued")],
        Annotated[StaticCondition, Tag("static")],
    ],
    Discriminator(_condition_kind),
]


# =============================================================================
# Buffs
# =============================================================================


class BuffModifier(Component):
    """One bonus or penalty granted by a buff.

    Attributes:
        selector: Selector or explicit target (e.g. 'all', 'skill:dex').
        value: Signed amount.
        bonus_type: Typed bonus category, kept for display.
    """

    selector: str
    value: int
    bonus_type: BonusType = BonusType.UNTYPED

    @field_validator("selector", mode="before")
    @classmethod
    def normalize_selector(cls, value: Any) -> Any:
        return _normalize_id(value)

    @field_validator("bonus_type", mode="before")
    @classmethod
    def default_bonus_type(cls, value: Any) -> Any:
        """Unknown bonus types are treated as untyped."""
        try:
            return BonusType(value)
        except ValueError:
            return BonusType.UNTYPED


class Buff(Component):
    """A player-declared temporary effect.

    Distinct buffs coexist and their modifiers always sum. Flat input of the
    form ``{"bonus": 1, "selector": "attack", "type": "status"}`` is accepted
    and converted to a single modifier.
    """

    kind: Literal["buff"] = "buff"
    id: str
    name: str = ""
    duration: int | None = None
    modifiers: list[BuffModifier] = Field(default_factory=list)
    source: str = ""

    @field_validator("duration", mode="before")
    @classmethod
    def clamp_duration(cls, value: Any) -> Any:
        return _clamp_duration(value)

    @model_validator(mode="before")
    @classmethod
    def accept_flat_modifier(cls, data: Any) -> Any:
        """Fold a single flat bonus into the modifiers list."""
        if isinstance(data, dict) and "modifiers" not in data and "selector" in data:
            modifier = {
                "selector": data.get("selector"),
                "value": data.get("bonus", data.get("value", 0)),
                "bonus_type": data.get("type", data.get("bonus_type", BonusType.UNTYPED)),
            }
            return {**data, "modifiers": [modifier]}
        return data

    @property
    def is_expired(self) -> bool:
        return self.duration is not None and self.duration <= 0


__all__ = [
    "ValuedCondition",
    "StaticCondition",
    "ActiveCondition",
    "BuffModifier",
    "Buff",
]
