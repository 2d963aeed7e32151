import json
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from deathmountain.application.mappers.row_mapper import to_adventurer, to_beast
from deathmountain.application.services.combat_math import (
    ability_based_percentage,
    ambush_chance,
    build_adventurer_outlook,
    build_combat_preview,
    calculate_beast_damage,
    calculate_player_damage,
    calculate_slot_damage,
    crit_chance,
    discovery_chance,
    elemental_adjusted_damage,
    estimate_outcome,
    flee_chance,
    obstacle_dodge_chances,
    strength_bonus,
    unarmored_slot_damage,
)
from deathmountain.domain.models.adventurer import Adventurer
from deathmountain.domain.models.item import Equipment, Item
from deathmountain.domain.models.stats import Stats
from deathmountain.domain.services.beast_catalog import build_beast
from deathmountain.domain.services.item_catalog import build_item

FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "golden_game.json"


def _golden():
    row = json.loads(FIXTURE.read_text(encoding="utf-8"))["events"][0]
    return to_adventurer(row, 1), to_beast(row)


def _adventurer(equipment: Equipment | None = None, **stats) -> Adventurer:
    return Adventurer(
        id=1,
        health=100,
        xp=16,
        level=4,
        gold=0,
        stats=Stats(**stats),
        equipment=equipment or Equipment(),
    )


class ElementalTests(unittest.TestCase):
    def test_all_attack_and_armor_pairs(self) -> None:
        expected = {
            ("Magic", "Metal"): 15,
            ("Magic", "Hide"): 5,
            ("Magic", "Cloth"): 10,
            ("Blade", "Cloth"): 15,
            ("Blade", "Metal"): 5,
            ("Blade", "Hide"): 10,
            ("Bludgeon", "Hide"): 15,
            ("Bludgeon", "Cloth"): 5,
            ("Bludgeon", "Metal"): 10,
        }
        for (attack, armor), damage in expected.items():
            with self.subTest(attack=attack, armor=armor):
                self.assertEqual(damage, elemental_adjusted_damage(10, attack, armor))

    def test_strength_bonus_is_ten_percent_per_point(self) -> None:
        self.assertEqual(3, strength_bonus(8, 4))
        self.assertEqual(0, strength_bonus(8, 0))


class PlayerDamageTests(unittest.TestCase):
    def test_golden_fixture(self) -> None:
        adventurer, beast = _golden()

        damage = calculate_player_damage(adventurer, beast)

        self.assertEqual(4, damage.base)
        self.assertEqual(7, damage.critical)
        self.assertEqual(-7, damage.elemental_bonus)
        self.assertEqual(3, damage.strength_bonus)

    def test_unarmed_adventurer_hits_for_minimum(self) -> None:
        beast = build_beast(47, health=21, level=12)

        damage = calculate_player_damage(_adventurer(), beast)

        self.assertEqual(4, damage.base)
        self.assertEqual(8, damage.critical)

    def test_titanium_ring_only_boosts_critical(self) -> None:
        katana = build_item(42, 100)
        beast = build_beast(1, health=100, level=1)

        plain = calculate_player_damage(_adventurer(Equipment(weapon=katana)), beast)
        ringed = calculate_player_damage(_adventurer(Equipment(weapon=katana, ring=build_item(7, 100))), beast)

        self.assertEqual(70, plain.base)
        self.assertEqual(145, plain.critical)
        self.assertEqual(70, ringed.base)
        self.assertEqual(167, ringed.critical)

    def test_platinum_ring_boosts_special_match_damage(self) -> None:
        weapon = Item(
            id=42, xp=400, level=20, base_name="Katana", tier=1, type="Blade", slot="Weapon",
            prefix="Agony", suffix="Bane",
        )
        beast = build_beast(1, health=100, level=20, special2=1, special3=1)

        plain = calculate_player_damage(_adventurer(Equipment(weapon=weapon)), beast)
        ringed = calculate_player_damage(_adventurer(Equipment(weapon=weapon, ring=build_item(6, 100))), beast)

        self.assertEqual(1500, plain.special_bonus)
        self.assertEqual(1550, plain.base)
        self.assertEqual(1950, ringed.special_bonus)
        self.assertEqual(2000, ringed.base)


class BeastDamageTests(unittest.TestCase):
    def test_golden_fixture(self) -> None:
        adventurer, beast = _golden()

        damage = calculate_beast_damage(adventurer, beast)

        self.assertEqual(15, damage.max)
        self.assertEqual({"head": 15, "chest": 15, "waist": 15, "hand": 15, "foot": 15}, damage.per_slot)
        self.assertEqual(18, damage.protection_percent)
        self.assertEqual(15, damage.average)

    def test_unarmored_slots_take_one_and_a_half_attack(self) -> None:
        beast = build_beast(47, health=21, level=12)

        damage = calculate_beast_damage(_adventurer(), beast)

        self.assertEqual(18, unarmored_slot_damage(beast))
        self.assertEqual(18, damage.max)
        self.assertEqual(0, damage.protection_percent)
        self.assertEqual(18, damage.average)

    def test_unarmored_floor(self) -> None:
        self.assertEqual(2, unarmored_slot_damage(build_beast(47, health=1, level=1)))

    def test_matching_neck_reduces_armor_damage(self) -> None:
        beast = build_beast(47, health=100, level=60)
        robe = build_item(17, 100)

        self.assertEqual(40, calculate_slot_damage(beast, robe))
        self.assertEqual(25, calculate_slot_damage(beast, robe, build_item(3, 100)))
        self.assertEqual(40, calculate_slot_damage(beast, robe, build_item(1, 100)))

    def test_slot_damage_has_floor(self) -> None:
        beast = build_beast(47, health=5, level=1)
        self.assertEqual(2, calculate_slot_damage(beast, build_item(17, 400)))


class ChanceTests(unittest.TestCase):
    def test_flee_and_ambush(self) -> None:
        self.assertEqual(75, flee_chance(4, 3))
        self.assertEqual(75, ambush_chance(4, 1))
        self.assertEqual(100, flee_chance(4, 9))
        self.assertEqual(0, ambush_chance(4, 4))
        self.assertEqual(50, discovery_chance(4, 2))

    def test_level_zero_adventurer_is_capped(self) -> None:
        self.assertEqual(100, flee_chance(0, 0))
        self.assertEqual(0, ambush_chance(0, 0))
        self.assertEqual(100, ability_based_percentage(0, 0))

    def test_obstacle_dodge_uses_intelligence_for_magic(self) -> None:
        self.assertEqual({"Magic": 100, "Blade": 0, "Bludgeon": 0}, obstacle_dodge_chances(4, 4, 0))
        self.assertEqual({"Magic": 0, "Blade": 50, "Bludgeon": 50}, obstacle_dodge_chances(4, 0, 2))

    def test_crit_chance_is_clamped_luck(self) -> None:
        self.assertEqual(0, crit_chance(-5))
        self.assertEqual(35, crit_chance(35))
        self.assertEqual(100, crit_chance(150))


class OutcomeTests(unittest.TestCase):
    def test_win_with_damage(self) -> None:
        outcome = estimate_outcome(99, 21, 4, 15)

        self.assertTrue(outcome.adventurer_wins)
        self.assertEqual(6, outcome.rounds)
        self.assertEqual(75, outcome.damage_taken)
        self.assertEqual("Win in 6 rounds, take 75 damage", outcome.summary)

    def test_first_strike_win_takes_no_damage(self) -> None:
        self.assertEqual("Win in 1 round, no damage", estimate_outcome(50, 4, 10, 5).summary)

    def test_harmless_beast(self) -> None:
        outcome = estimate_outcome(50, 40, 4, 0)

        self.assertTrue(outcome.adventurer_wins)
        self.assertEqual(10, outcome.rounds)
        self.assertEqual(0, outcome.damage_taken)

    def test_loss(self) -> None:
        outcome = estimate_outcome(10, 100, 4, 15)

        self.assertFalse(outcome.adventurer_wins)
        self.assertEqual("Lose in 1 round", outcome.summary)
        self.assertEqual(10, outcome.damage_taken)

    def test_golden_preview(self) -> None:
        adventurer, beast = _golden()

        preview = build_combat_preview(adventurer, beast)

        self.assertEqual(4, preview.player_damage.base)
        self.assertEqual(15, preview.beast_damage.max)
        self.assertEqual(75, preview.flee_chance)
        self.assertEqual(75, preview.ambush_chance)
        self.assertEqual(0, preview.crit_chance)
        self.assertFalse(preview.collectable.eligible)
        self.assertEqual("Win in 6 rounds, take 75 damage", preview.outcome.summary)
        self.assertEqual("Win in 6 rounds, take 75 damage", preview.as_dict()["outcome"])


class OutlookTests(unittest.TestCase):
    def test_golden_outlook(self) -> None:
        adventurer, _ = _golden()

        outlook = build_adventurer_outlook(adventurer)

        self.assertEqual(130, outlook.max_health)
        self.assertEqual(25, outlook.next_level_xp)
        self.assertAlmostEqual(33.33, outlook.level_progress)
        self.assertEqual(1, outlook.potion_price)
        self.assertEqual(25, outlook.discovery_chance)
        self.assertEqual({"Magic": 25, "Blade": 25, "Bludgeon": 25}, outlook.dodge_chances)

    def test_level_zero_adventurer_has_capped_chances(self) -> None:
        adventurer = Adventurer(id=1, health=100, xp=0, level=0, gold=0)

        outlook = build_adventurer_outlook(adventurer)

        self.assertEqual(100, outlook.discovery_chance)
        self.assertEqual(1, outlook.next_level_xp)
        self.assertEqual(100, outlook.max_health)


if __name__ == "__main__":
    unittest.main()
