"""Short- and long-rest resource restoration.

The resolver has a single resting state, IDLE. Each action fires from IDLE
and returns to IDLE:

    * Treat Wounds: heals by DC and degree of success, gated by a cooldown.
    * Refocus: regains one focus point, with its own timestamp and cooldown.
    * Long rest: always available; recalculates, then refills everything.

A rejected action returns the snapshot unchanged.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pf2e_builder.core.config import Settings, get_settings
from pf2e_builder.core.constants import TREAT_WOUNDS_HEALING
from pf2e_builder.core.exceptions import ValidationError
from pf2e_builder.core.logging import get_logger
from pf2e_builder.engine.recalculator import recalculate
from pf2e_builder.engine.spellcasting import regain_focus_point, restore_spellcasting
from pf2e_builder.models.character import Character
from pf2e_builder.models.enums import DegreeOfSuccess, RestAction, RestState
from pf2e_builder.models.reference import ReferenceTables


logger = get_logger(__name__)


def _as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def _on_cooldown(last: datetime | None, now: datetime, minutes: int) -> bool:
    if last is None or minutes <= 0:
        return False
    return _as_utc(now) - _as_utc(last) < timedelta(minutes=minutes)


def treat_wounds_healing(dc: int, degree: DegreeOfSuccess | str) -> int | None:
    """Healing for a Treat Wounds result, or None for an invalid DC or degree.

    Example:
        >>> treat_wounds_healing(20, DegreeOfSuccess.FAILURE)
        10
        >>> treat_wounds_healing(30, "criticalSuccess")
        60
    """
    base = TREAT_WOUNDS_HEALING.get(dc)
    if base is None:
        return None
    try:
        outcome = DegreeOfSuccess(degree)
    except ValueError:
        return None
    if outcome == DegreeOfSuccess.CRITICAL_FAILURE:
        return 0
    if outcome == DegreeOfSuccess.FAILURE:
        return base // 2
    if outcome == DegreeOfSuccess.CRITICAL_SUCCESS:
        return base * 2
    return base


class RestResolver:
    """Apply rest actions to character snapshots.

    The resolver holds no character state between calls; ``state`` is
    always IDLE once an action returns.

    Attributes:
        refs: Reference tables used by the long-rest recalculation.
        settings: Application settings.
        state: Current resting state.
    """

    def __init__(self, refs: ReferenceTables, settings: Settings | None = None) -> None:
        """Initialize the resolver.

        Args:
            refs: Reference tables.
            settings: Application settings (defaults to the global settings).
        """
        self.refs = refs
        self.settings = settings if settings is not None else get_settings()
        self.state = RestState.IDLE

    def treat_wounds(
        self,
        character: Character,
        dc: int,
        degree: DegreeOfSuccess | str,
        *,
        now: datetime | None = None,
    ) -> Character:
        """Apply one Treat Wounds result.

        Rejected while the cooldown since the last successful application
        is running, or for a DC outside the healing table. Every accepted
        application records its timestamp, critical failures included.

        Args:
            character: Character snapshot.
            dc: Treat Wounds DC (15, 20, 30 or 40).
            degree: Degree of success of the Medicine check.
            now: Current time (defaults to the current UTC time).

        Returns:
            Updated character, or the input unchanged when rejected.
        """
        now = now if now is not None else datetime.now(UTC)
        healing = treat_wounds_healing(dc, degree)
        if healing is None:
            logger.debug("Rejected Treat Wounds with invalid DC or degree", dc=dc, degree=str(degree))
            return character

        cooldown = self.settings.engine.treat_wounds_cooldown_minutes
        if _on_cooldown(character.rest.last_treat_wounds_at, now, cooldown):
            logger.debug("Treat Wounds on cooldown", last=str(character.rest.last_treat_wounds_at))
            return character

        hit_points = character.hit_points.heal(healing)
        rest = character.rest.model_copy(update={"last_treat_wounds_at": now})
        logger.info("Treat Wounds applied", dc=dc, degree=str(degree), healing=healing)
        self.state = RestState.IDLE
        return character.model_copy(update={"hit_points": hit_points, "rest": rest})

    def refocus(self, character: Character, *, now: datetime | None = None) -> Character:
        """Regain one focus point.

        Rejected when the pool is full or missing, or while the refocus
        cooldown (disabled by default) is running.
        """
        now = now if now is not None else datetime.now(UTC)
        cooldown = self.settings.engine.refocus_cooldown_minutes
        if _on_cooldown(character.rest.last_refocus_at, now, cooldown):
            logger.debug("Refocus on cooldown", last=str(character.rest.last_refocus_at))
            return character

        refocused = regain_focus_point(character)
        if refocused is character:
            return character
        rest = character.rest.model_copy(update={"last_refocus_at": now})
        logger.info("Refocus applied")
        self.state = RestState.IDLE
        return refocused.model_copy(update={"rest": rest})

    def long_rest(self, character: Character) -> Character:
        """Rest for the night.

        Recalculates first so new maxima are used, then restores HP, clears
        temporary HP, refills every spell slot, the focus pool, innate uses
        and daily custom resources, and keeps only persistent conditions.
        Buffs with a round duration end; indefinite buffs are kept.
        """
        character = recalculate(character, self.refs, settings=self.settings)

        hit_points = character.hit_points.model_copy(
            update={"current": character.hit_points.max, "temporary": 0}
        )
        spellcasting = (
            restore_spellcasting(character.spellcasting) if character.spellcasting is not None else None
        )
        resources = [
            resource.model_copy(update={"current": resource.max}) if resource.is_daily else resource
            for resource in character.custom_resources
        ]
        persistent = set(self.settings.engine.persistent_conditions)
        conditions = [condition for condition in character.conditions if condition.id in persistent]
        buffs = [buff for buff in character.buffs if buff.duration is None]

        rested = character.model_copy(
            update={
                "hit_points": hit_points,
                "spellcasting": spellcasting,
                "custom_resources": resources,
                "conditions": conditions,
                "buffs": buffs,
            }
        )
        logger.info(
            "Long rest completed",
            character=character.name or character.id,
            cleared_conditions=len(character.conditions) - len(conditions),
            ended_buffs=len(character.buffs) - len(buffs),
        )
        self.state = RestState.IDLE
        return recalculate(rested, self.refs, settings=self.settings)

    def apply(self, action: RestAction | str, character: Character, **kwargs: object) -> Character:
        """Dispatch a named rest action.

        Raises:
            ValidationError: If the action name is unknown.
        """
        try:
            rest_action = RestAction(action)
        except ValueError as exc:
            raise ValidationError(
                f"Unknown rest action: {action!r}",
                field_name="action",
                invalid_value=action,
            ) from exc
        handlers = {
            RestAction.TREAT_WOUNDS: self.treat_wounds,
            RestAction.REFOCUS: self.refocus,
            RestAction.LONG_REST: self.long_rest,
        }
        return handlers[rest_action](character, **kwargs)


# =============================================================================
# Named Operations
# =============================================================================


def apply_treat_wounds(
    character: Character,
    dc: int,
    degree: DegreeOfSuccess | str,
    *,
    refs: ReferenceTables | None = None,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> Character:
    """Apply a Treat Wounds result. See :meth:`RestResolver.treat_wounds`."""
    resolver = RestResolver(refs if refs is not None else ReferenceTables(), settings)
    return resolver.treat_wounds(character, dc, degree, now=now)


def refocus(
    character: Character,
    *,
    refs: ReferenceTables | None = None,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> Character:
    """Refocus. See :meth:`RestResolver.refocus`."""
    resolver = RestResolver(refs if refs is not None else ReferenceTables(), settings)
    return resolver.refocus(character, now=now)


def long_rest(
    character: Character,
    refs: ReferenceTables,
    *,
    settings: Settings | None = None,
) -> Character:
    """Take a long rest. See :meth:`RestResolver.long_rest`."""
    return RestResolver(refs, settings).long_rest(character)


__all__ = [
    "treat_wounds_healing",
    "RestResolver",
    "apply_treat_wounds",
    "refocus",
    "long_rest",
]
