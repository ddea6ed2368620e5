"""Integration tests for full-snapshot recalculation.

These tests drive complete characters through the recalculator and the
rest resolver, the same way a persistence layer would after every edit.
"""

from __future__ import annotations

from typing import Any

import pytest

from pf2e_builder.core.exceptions import MalformedCharacterError
from pf2e_builder.engine import RestResolver, add_condition, consume_spell_slot, recalculate
from pf2e_builder.models import (
    Ability,
    Character,
    ProficiencyRank,
    ReferenceTables,
    SaveKind,
    Skill,
)


# =============================================================================
# Fighter Flow
# =============================================================================


class TestFighterRecalculation:
    """Full recalculation of a level 3 martial character."""

    def test_ability_scores_from_boosts(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Boosts resolve to the final scores and modifiers."""
        fighter = recalculate(fighter_data, refs)
        scores = fighter.ability_scores
        assert (scores.strength, scores.dexterity, scores.constitution) == (18, 14, 12)
        assert (scores.intelligence, scores.wisdom, scores.charisma) == (12, 12, 10)
        assert fighter.derived.ability_modifiers[Ability.STR] == 4

    def test_hit_points(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """8 ancestry HP plus (10 class HP + 1 Con) per level; fresh HP starts full."""
        fighter = recalculate(fighter_data, refs)
        assert fighter.derived.max_hp == 41
        assert fighter.hit_points.max == 41
        assert fighter.hit_points.current == 41

    def test_defenses(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """AC, saves and Perception."""
        derived = recalculate(fighter_data, refs).derived
        assert derived.armor_class.total == 18
        assert derived.saves[SaveKind.FORTITUDE].total == 8
        assert derived.saves[SaveKind.REFLEX].total == 9
        assert derived.saves[SaveKind.WILL].total == 6
        assert derived.perception.total == 8
        assert derived.class_dc == 19

    def test_skills(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Class and background training both apply."""
        skills = recalculate(fighter_data, refs).derived.skills
        assert skills[Skill.ATHLETICS].rank == ProficiencyRank.TRAINED
        assert skills[Skill.ATHLETICS].total == 9
        assert skills[Skill.INTIMIDATION].total == 5
        assert skills[Skill.RELIGION].total == 1

    def test_strikes_and_bulk(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """The wielded longsword produces one Strike; bulk and speed follow."""
        derived = recalculate(fighter_data, refs).derived
        assert len(derived.strikes) == 1
        assert derived.strikes[0].multiple_attack_penalty == (11, 6, 1)
        assert derived.strikes[0].damage == "1d8+4"
        assert derived.encumbrance.current_bulk == 3
        assert derived.encumbrance.max_bulk == 9
        assert not derived.encumbrance.encumbered
        assert derived.speed == 25
        assert derived.shield is not None
        assert derived.spellcasting is None

    def test_coins_count_toward_bulk(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Carried coins add Bulk and show up as wealth in gold."""
        fighter_data["currency"] = {"gp": 15, "sp": 2000}
        derived = recalculate(fighter_data, refs).derived
        assert derived.encumbrance.coin_bulk == 2
        assert derived.encumbrance.current_bulk == 5
        assert derived.wealth_gp == pytest.approx(215)

    def test_toughness_adds_hit_points(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Toughness adds 1 HP per level."""
        fighter_data["feats"] = [{"feat_id": "toughness", "level": 1}]
        assert recalculate(fighter_data, refs).derived.max_hp == 44

    def test_level_up_boost_milestones(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Milestone boosts apply once the level is reached; later ones wait."""
        fighter_data["boosts"]["level_up"] = {
            5: ["str", "dex", "con", "wis"],
            10: ["str", "dex", "con", "wis"],
        }
        at_three = recalculate(fighter_data, refs)
        assert at_three.ability_scores.strength == 18

        fighter_data["level"] = 5
        at_five = recalculate(fighter_data, refs)
        scores = at_five.ability_scores
        assert (scores.strength, scores.dexterity, scores.constitution, scores.wisdom) == (19, 16, 14, 14)
        assert at_five.derived.max_hp == 8 + (10 + 2) * 5

    def test_conditions_flow_into_statistics(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Adding frightened lowers checks and DCs after recalculation."""
        fighter = recalculate(fighter_data, refs)
        frightened = recalculate(add_condition(fighter, "frightened", value=2, refs=refs), refs)
        assert frightened.derived.armor_class.total == 16
        assert frightened.derived.strikes[0].attack_bonus == 9
        assert frightened.derived.speed == 25

    def test_lower_level_clamps_current_hp(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Current HP never exceeds a reduced maximum."""
        fighter = recalculate(fighter_data, refs)
        data = fighter.model_dump()
        data["level"] = 1
        assert recalculate(data, refs).hit_points.current == 8 + 11


# =============================================================================
# Caster Flow
# =============================================================================


class TestClericRecalculation:
    """Full recalculation of a level 1 caster with focus feats."""

    def test_caster_statistics(self, cleric_data: dict[str, Any], refs: ReferenceTables) -> None:
        """HP, spell DC, slots and the focus pool."""
        cleric = recalculate(cleric_data, refs)
        assert cleric.ability_scores.wisdom == 18
        assert cleric.ability_scores.charisma == 10
        assert cleric.derived.max_hp == 21
        assert cleric.derived.spellcasting.spell_dc == 17
        assert cleric.derived.spellcasting.known_spells == ["heal", "bless"]
        assert {rank: slot.max for rank, slot in cleric.spellcasting.spell_slots.items()} == {1: 2}
        assert cleric.spellcasting.focus_pool.current == 3
        assert cleric.spellcasting.focus_pool.max == 3
        assert cleric.derived.max_focus_points == 3
        assert cleric.derived.speed == 20

    def test_long_rest_restores_resources(self, cleric_data: dict[str, Any], refs: ReferenceTables) -> None:
        """A long rest refills HP, slots and focus; persistent conditions and indefinite buffs stay."""
        cleric = recalculate(cleric_data, refs)
        data = cleric.model_dump()
        data["hit_points"]["current"] = 3
        data["spellcasting"]["focus_pool"]["current"] = 0
        data["conditions"] = [{"id": "frightened", "value": 2}, {"id": "cursed"}]
        data["buffs"] = [
            {"id": "bless", "duration": 10, "modifiers": [{"selector": "attack", "value": 1}]},
            {"id": "heroism", "modifiers": [{"selector": "attack", "value": 1}]},
        ]
        tired = consume_spell_slot(consume_spell_slot(Character.model_validate(data), 1), 1)
        assert tired.spellcasting.spell_slots[1].used == 2

        rested = RestResolver(refs).apply("long_rest", tired)
        assert rested.hit_points.current == 21
        assert rested.spellcasting.spell_slots[1].used == 0
        assert rested.spellcasting.focus_pool.current == 3
        assert [condition.id for condition in rested.conditions] == ["cursed"]
        assert [buff.id for buff in rested.buffs] == ["heroism"]
        assert rested.derived.armor_class.total == cleric.derived.armor_class.total


# =============================================================================
# Idempotence
# =============================================================================


class TestIdempotence:
    """Recalculating a recalculated snapshot changes nothing."""

    @pytest.mark.parametrize("fixture_name", ["fighter_data", "cleric_data"])
    def test_second_pass_is_identical(
        self, fixture_name: str, refs: ReferenceTables, request: pytest.FixtureRequest
    ) -> None:
        """The serialized JSON is stable across passes and reloads."""
        once = recalculate(request.getfixturevalue(fixture_name), refs)
        twice = recalculate(once, refs)
        assert twice.model_dump_json() == once.model_dump_json()

        reloaded = recalculate(Character.model_validate_json(once.model_dump_json()), refs)
        assert reloaded.model_dump_json() == once.model_dump_json()

    def test_input_not_mutated(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Recalculation never modifies the caller's snapshot."""
        fighter = Character.model_validate(fighter_data)
        before = fighter.model_dump_json()
        recalculate(fighter, refs)
        assert fighter.model_dump_json() == before


# =============================================================================
# Normalization and Malformed Input
# =============================================================================


class TestNormalization:
    """Inconsistent snapshots are repaired, not rejected."""

    def test_duplicate_equipment_and_bad_links(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Duplicate ids keep the first item; dangling container links are dropped."""
        fighter_data["equipment"].extend(
            [
                {"id": "sword-1", "item_id": "dagger", "bulk": 5},
                {"id": "rope", "name": "Rope", "bulk": 0.1, "container_id": "nowhere"},
            ]
        )
        fighter = recalculate(fighter_data, refs)
        ids = [item.id for item in fighter.equipment]
        assert ids.count("sword-1") == 1
        assert fighter.equipment[ids.index("sword-1")].item_id == "longsword"
        assert fighter.equipment[ids.index("rope")].container_id is None

    def test_unknown_equipped_armor_cleared(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """An equipped armor id with no matching item falls back to unarmored."""
        fighter_data["equipped_armor"] = "ghost-armor"
        fighter = recalculate(fighter_data, refs)
        assert fighter.equipped_armor is None
        assert fighter.derived.armor_class.total == 10 + 2 + 5

    def test_duplicate_conditions_merge(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Duplicate conditions merge to the more severe value."""
        fighter_data["conditions"] = [
            {"id": "frightened", "value": 1},
            {"id": "frightened", "value": 3},
        ]
        fighter = recalculate(fighter_data, refs)
        assert len(fighter.conditions) == 1
        assert fighter.condition("frightened").value == 3
        assert fighter.derived.armor_class.total == 15

    def test_unknown_feats_filtered(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Unknown feat ids stay in the snapshot but not in the derived view."""
        fighter_data["feats"] = [{"feat_id": "toughness"}, {"feat_id": "homebrew-feat"}]
        fighter = recalculate(fighter_data, refs)
        assert fighter.derived.feats == ["toughness"]
        assert len(fighter.feats) == 2

    def test_missing_ability_scores(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """A snapshot without its ability-score object is malformed."""
        del fighter_data["ability_scores"]
        with pytest.raises(MalformedCharacterError) as exc_info:
            recalculate(fighter_data, refs)
        assert exc_info.value.details["missing_field"] == "ability_scores"

    def test_non_mapping_input(self, refs: ReferenceTables) -> None:
        """Non-object input is malformed."""
        with pytest.raises(MalformedCharacterError):
            recalculate(["not", "a", "character"], refs)  # type: ignore[arg-type]

    def test_malformed_list_entries_dropped(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """Bad entries inside a list are filtered; the rest of the snapshot loads."""
        fighter_data["conditions"] = [{"value": 2}, {"id": "frightened", "value": 1}]
        fighter_data["equipment"].append({"bulk": 2})
        fighter_data["feats"] = [{"level": 1}, {"feat_id": "toughness"}]
        fighter = recalculate(fighter_data, refs)
        assert [condition.id for condition in fighter.conditions] == ["frightened"]
        assert all(item.id for item in fighter.equipment)
        assert fighter.derived.max_hp == 44

    def test_wrong_field_shapes(self, fighter_data: dict[str, Any], refs: ReferenceTables) -> None:
        """A list field that is not a list at all is reported as malformed."""
        fighter_data["equipment"] = "sword"
        with pytest.raises(MalformedCharacterError):
            recalculate(fighter_data, refs)
