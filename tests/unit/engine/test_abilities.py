"""Tests for ability score resolution."""

from __future__ import annotations

import pytest

from pf2e_builder.engine.abilities import (
    apply_boost,
    apply_flaw,
    iter_boosts,
    resolve_ability_scores,
)
from pf2e_builder.models import Ability, BoostLedger, ReferenceTables


class TestBoostArithmetic:
    """Tests for single boosts and flaws."""

    @pytest.mark.parametrize("score", [8, 10, 12, 14])
    def test_two_boosts_below_18_add_four(self, score: int) -> None:
        """Two boosts on a score that stays below 18 add exactly 4."""
        assert apply_boost(apply_boost(score)) == score + 4

    def test_boost_at_18_adds_one(self) -> None:
        """Once the running score reaches 18 a boost adds 1."""
        assert apply_boost(16) == 18
        assert apply_boost(18) == 19
        assert apply_boost(19) == 20

    def test_flaw_floor(self) -> None:
        """A flaw subtracts 2 but never drops a score below 1."""
        assert apply_flaw(10) == 8
        assert apply_flaw(2) == 1


class TestResolveAbilityScores:
    """Tests for replaying the boost ledger."""

    def test_empty_ledger_is_all_tens(self) -> None:
        """No boosts means every score is 10."""
        scores = resolve_ability_scores(BoostLedger(), level=1)
        assert scores.modifiers() == {ability: 0 for ability in Ability}

    def test_independent_sources_stack(self) -> None:
        """Boosts from different sources each apply."""
        ledger = BoostLedger(class_key=["str"], creation_free=["str", "dex"])
        scores = resolve_ability_scores(ledger, level=1)
        assert scores.strength == 14
        assert scores.dexterity == 12

    def test_soft_cap_past_18(self) -> None:
        """The fifth boost to one ability only adds 1."""
        ledger = BoostLedger(
            ancestry_free=["str"],
            background_choice=["str"],
            class_key=["str"],
            creation_free=["str"],
            level_up={5: ["str"]},
        )
        scores = resolve_ability_scores(ledger, level=5)
        assert scores.strength == 19

    def test_future_milestones_ignored(self) -> None:
        """Level-up boosts above the current level do not apply."""
        ledger = BoostLedger(level_up={5: ["dex"], 10: ["dex"]})
        assert resolve_ability_scores(ledger, level=4).dexterity == 10
        assert resolve_ability_scores(ledger, level=9).dexterity == 12
        assert resolve_ability_scores(ledger, level=10).dexterity == 14

    def test_ancestry_flaws_and_fixed_boosts(self, refs: ReferenceTables) -> None:
        """Ancestry flaws apply before any boost."""
        ledger = BoostLedger(creation_free=["cha"])
        scores = resolve_ability_scores(ledger, level=1, ancestry=refs.ancestry("dwarf"))
        assert scores.constitution == 12
        assert scores.wisdom == 12
        assert scores.charisma == 10

    def test_invalid_background_and_class_entries_skipped(self, refs: ReferenceTables) -> None:
        """Boosts that contradict the reference entries are skipped."""
        ledger = BoostLedger(
            background_choice=["cha"],
            background_free=["wis"],
            class_key=["int"],
        )
        scores = resolve_ability_scores(
            ledger,
            level=1,
            background=refs.background("acolyte"),
            class_entry=refs.class_("fighter"),
        )
        assert scores.charisma == 10
        assert scores.wisdom == 10
        assert scores.intelligence == 10

    def test_ancestry_free_limited_to_slot_count(self, refs: ReferenceTables) -> None:
        """Only the ancestry's number of free boosts apply."""
        ledger = BoostLedger(ancestry_free=["str", "dex"])
        sources = list(iter_boosts(ledger, level=1, ancestry=refs.ancestry("dwarf")))
        assert ("ancestry_free", Ability.DEX) in sources
        assert ("ancestry_free", Ability.STR) not in sources

    def test_unknown_ancestry_uses_default_slot_count(self) -> None:
        """Without an ancestry entry at most two free boosts apply."""
        ledger = BoostLedger(ancestry_free=["str"] * 4)
        assert resolve_ability_scores(ledger, level=1).strength == 14

        widened = ledger.with_boost("ancestry_free", "str", capacity=3)
        assert len(widened.ancestry_free) == 3
        assert resolve_ability_scores(widened, level=1).strength == 14

    def test_canonical_order(self, refs: ReferenceTables) -> None:
        """Boosts are yielded in the fixed canonical order."""
        ledger = BoostLedger(
            level_up={5: ["int"]},
            creation_free=["cha"],
            class_key=["str"],
            background_free=["dex"],
            background_choice=["con"],
            ancestry_free=["wis"],
        )
        order = [source for source, _ability in iter_boosts(ledger, level=5, ancestry=refs.ancestry("dwarf"))]
        assert order == [
            "ancestry_fixed",
            "ancestry_fixed",
            "ancestry_free",
            "background_choice",
            "background_free",
            "class_key",
            "creation_free",
            "level_up",
        ]

    def test_replay_is_deterministic(self) -> None:
        """Replaying the same ledger always yields the same scores."""
        ledger = BoostLedger(ancestry_free=["dex"], creation_free=["dex", "str"])
        first = resolve_ability_scores(ledger, level=1)
        second = resolve_ability_scores(ledger, level=1)
        assert first == second
