"""Tests for condition and buff aggregation and edits."""

from __future__ import annotations

import pytest

from pf2e_builder.engine.conditions import (
    add_buff,
    add_condition,
    advance_round,
    aggregate_modifiers,
    expand_selector,
    remove_buff,
    remove_condition,
    set_condition_value,
)
from pf2e_builder.models import (
    Buff,
    Character,
    ReferenceTables,
    StaticCondition,
    ValuedCondition,
)


@pytest.fixture
def catalog() -> ReferenceTables:
    """Reference tables holding only the default condition catalog."""
    return ReferenceTables()


class TestExpandSelector:
    """Tests for selector expansion."""

    def test_all_excludes_speed(self) -> None:
        """The 'all' selector covers every check and DC but not speed."""
        targets = expand_selector("all")
        assert "attack" in targets
        assert "ac" in targets
        assert "save:will" in targets
        assert "skill:cha" in targets
        assert "speed" not in targets

    def test_ability_selectors(self) -> None:
        """Ability-based selectors include their dependent statistics."""
        assert expand_selector("dex-based") == ("skill:dex", "ac", "save:reflex")
        assert expand_selector("wis-based") == ("skill:wis", "perception", "save:will")

    def test_explicit_targets_and_unknowns(self) -> None:
        """Explicit target keys pass through; unknown selectors expand to nothing."""
        assert expand_selector("skill:int") == ("skill:int",)
        assert expand_selector("luck") == ()


class TestAggregateModifiers:
    """Tests for stacking rules."""

    def test_valued_condition_scales(self, catalog: ReferenceTables) -> None:
        """Frightened 2 applies -2 to every check."""
        modifiers = aggregate_modifiers([ValuedCondition(id="frightened", value=2)], [], catalog)
        assert modifiers.get("attack") == -2
        assert modifiers.get("ac") == -2
        assert modifiers.get("speed") == 0

    def test_different_families_sum(self, catalog: ReferenceTables) -> None:
        """Frightened and sickened are different families and stack."""
        modifiers = aggregate_modifiers(
            [ValuedCondition(id="frightened", value=1), ValuedCondition(id="sickened", value=2)],
            [],
            catalog,
        )
        assert modifiers.get("attack") == -3

    def test_same_family_takes_largest(self) -> None:
        """Conditions sharing a family apply only the largest penalty per target."""
        refs = ReferenceTables(
            conditions=[
                {"id": "frightened", "valued": True, "family": "status", "rules": [{"selector": "all"}]},
                {"id": "sickened", "valued": True, "family": "status", "rules": [{"selector": "all"}]},
            ]
        )
        modifiers = aggregate_modifiers(
            [ValuedCondition(id="frightened", value=1), ValuedCondition(id="sickened", value=3)],
            [],
            refs,
        )
        assert modifiers.get("attack") == -3

    def test_overlapping_selectors_in_one_family(self, catalog: ReferenceTables) -> None:
        """Off-guard and unconscious both hit AC; each is its own family."""
        modifiers = aggregate_modifiers(
            [StaticCondition(id="off-guard"), StaticCondition(id="unconscious")],
            [],
            catalog,
        )
        assert modifiers.get("ac") == -6
        assert modifiers.get("save:reflex") == -4

    def test_unknown_conditions_ignored(self, catalog: ReferenceTables) -> None:
        """Unknown condition ids contribute nothing."""
        modifiers = aggregate_modifiers([StaticCondition(id="hexed")], [], catalog)
        assert modifiers.values == {}

    def test_buffs_always_sum(self, catalog: ReferenceTables) -> None:
        """Buff modifiers add to each other and to condition penalties."""
        buffs = [
            Buff(id="bless", modifiers=[{"selector": "attack", "value": 1}]),
            Buff(id="heroism", modifiers=[{"selector": "all", "value": 1}]),
            Buff(id="haste", modifiers=[{"selector": "speed", "value": 10}]),
        ]
        modifiers = aggregate_modifiers([ValuedCondition(id="frightened", value=1)], buffs, catalog)
        assert modifiers.get("attack") == 1
        assert modifiers.get("ac") == 0
        assert modifiers.get("speed") == 10


class TestConditionEdits:
    """Tests for adding, removing and setting conditions."""

    def test_add_valued_condition(self, blank_character: Character, catalog: ReferenceTables) -> None:
        """A valued condition defaults to value 1."""
        updated = add_condition(blank_character, "Clumsy", refs=catalog)
        condition = updated.condition("clumsy")
        assert isinstance(condition, ValuedCondition)
        assert condition.value == 1
        assert blank_character.conditions == []

    def test_readding_keeps_more_severe(self, blank_character: Character) -> None:
        """Re-applying frightened 1 onto frightened 2 keeps 2."""
        character = add_condition(blank_character, "frightened", value=2)
        character = add_condition(character, "frightened", value=1)
        assert character.condition("frightened").value == 2
        character = add_condition(character, "frightened", value=3)
        assert character.condition("frightened").value == 3
        assert len(character.conditions) == 1

    def test_readding_keeps_longer_duration(self, blank_character: Character) -> None:
        """The longer duration wins and no duration means indefinite."""
        character = add_condition(blank_character, "off-guard", duration=1)
        character = add_condition(character, "off-guard", duration=3)
        assert character.condition("off-guard").duration == 3
        character = add_condition(character, "off-guard")
        assert character.condition("off-guard").duration is None

    def test_non_positive_value_rejected(self, blank_character: Character) -> None:
        """Adding a condition at value 0 is a no-op."""
        assert add_condition(blank_character, "frightened", value=0) is blank_character

    def test_remove_condition(self, blank_character: Character) -> None:
        """Removing drops the condition; missing ids are a no-op."""
        character = add_condition(blank_character, "prone")
        assert remove_condition(character, "prone").conditions == []
        assert remove_condition(character, "stunned") is character

    def test_set_condition_value(self, blank_character: Character) -> None:
        """Setting overwrites the value; zero removes the condition."""
        character = add_condition(blank_character, "drained", value=3, duration=5)
        lowered = set_condition_value(character, "drained", 1)
        assert lowered.condition("drained").value == 1
        assert lowered.condition("drained").duration == 5
        assert set_condition_value(character, "drained", 0).conditions == []


class TestBuffEdits:
    """Tests for buff edits."""

    def test_add_buff_replaces_same_id(self, blank_character: Character) -> None:
        """A buff with the same id replaces the old one."""
        character = add_buff(blank_character, Buff(id="bless", modifiers=[{"selector": "attack", "value": 1}]))
        character = add_buff(character, Buff(id="bless", modifiers=[{"selector": "attack", "value": 2}]))
        assert len(character.buffs) == 1
        assert character.buffs[0].modifiers[0].value == 2

    def test_remove_buff(self, blank_character: Character) -> None:
        """Removing a buff by id; unknown ids are a no-op."""
        character = add_buff(blank_character, Buff(id="bless"))
        assert remove_buff(character, "bless").buffs == []
        assert remove_buff(character, "haste") is character


class TestAdvanceRound:
    """Tests for end-of-round ticking."""

    def test_durations_tick_and_expire(self, blank_character: Character) -> None:
        """Durations drop by 1 and effects at 0 are removed."""
        character = add_condition(blank_character, "off-guard", duration=1)
        character = add_condition(character, "prone", duration=2)
        character = add_buff(character, Buff(id="bless", duration=1))
        advanced = advance_round(character)
        assert advanced.condition("off-guard") is None
        assert advanced.condition("prone").duration == 1
        assert advanced.buffs == []

    def test_frightened_decays_above_one(self, blank_character: Character) -> None:
        """Frightened drops by 1 per round while above 1."""
        character = add_condition(blank_character, "frightened", value=2)
        advanced = advance_round(character)
        assert advanced.condition("frightened").value == 1
        advanced = advance_round(advanced)
        assert advanced.condition("frightened").value == 1

    def test_other_valued_conditions_do_not_decay(self, blank_character: Character) -> None:
        """Only frightened decays on its own."""
        character = add_condition(blank_character, "drained", value=2)
        assert advance_round(character).condition("drained").value == 2
