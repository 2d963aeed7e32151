import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from deathmountain.domain.services.beast_catalog import (
    BEAST_NAMES,
    beast_armor_type,
    beast_attack_type,
    beast_name,
    beast_rewards,
    beast_tier,
    beast_type,
    build_beast,
    collectable_traits,
    parse_beast_seed,
)
from deathmountain.domain.services.obstacle_catalog import (
    OBSTACLE_NAMES,
    obstacle_name,
    obstacle_tier,
    obstacle_type,
)


class BeastCatalogTests(unittest.TestCase):
    def test_names_cover_three_bands(self) -> None:
        self.assertEqual(75, len(BEAST_NAMES))
        self.assertEqual("Warlock", beast_name(1))
        self.assertEqual("Wolf", beast_name(47))
        self.assertEqual("Skeleton", beast_name(75))
        self.assertEqual("Beast 99", beast_name(99))

    def test_band_decides_type_armor_and_attack(self) -> None:
        self.assertEqual(("Magic", "Cloth", "Magic"), (beast_type(1), beast_armor_type(1), beast_attack_type(1)))
        self.assertEqual(("Hunter", "Hide", "Blade"), (beast_type(47), beast_armor_type(47), beast_attack_type(47)))
        self.assertEqual(("Brute", "Metal", "Bludgeon"), (beast_type(60), beast_armor_type(60), beast_attack_type(60)))
        self.assertEqual("None", beast_type(0))
        self.assertEqual("None", beast_armor_type(76))

    def test_tiers_step_every_five_ids_within_a_band(self) -> None:
        self.assertEqual(1, beast_tier(1))
        self.assertEqual(2, beast_tier(6))
        self.assertEqual(4, beast_tier(20))
        self.assertEqual(5, beast_tier(21))
        self.assertEqual(5, beast_tier(25))
        self.assertEqual(1, beast_tier(26))
        self.assertEqual(5, beast_tier(47))
        self.assertEqual(5, beast_tier(0))
        self.assertEqual(5, beast_tier(76))

    def test_rewards_scale_with_level_and_tier(self) -> None:
        rewards = beast_rewards(12, 5)
        self.assertEqual(6, rewards.gold)
        self.assertEqual(24, rewards.xp)

        low = beast_rewards(1, 1)
        self.assertEqual(2, low.gold)
        self.assertEqual(4, low.xp)

    def test_seed_parsing_accepts_hex_and_decimal(self) -> None:
        self.assertEqual(31, parse_beast_seed("0x1f"))
        self.assertEqual(42, parse_beast_seed("42"))
        self.assertEqual(7, parse_beast_seed(7))
        self.assertEqual(0, parse_beast_seed("zz"))
        self.assertEqual(0, parse_beast_seed(None))
        self.assertEqual(0, parse_beast_seed(True))
        self.assertEqual(0, parse_beast_seed(-5))

    def test_collectable_traits_read_each_seed_half(self) -> None:
        seed = (9999 << 32) | 100

        traits = collectable_traits(seed, True)

        self.assertTrue(traits.eligible)
        self.assertTrue(traits.shiny)
        self.assertFalse(traits.animated)
        self.assertEqual(traits, collectable_traits(seed, True))

    def test_collectable_traits_need_flag_and_seed(self) -> None:
        self.assertFalse(collectable_traits((9999 << 32) | 100, False).eligible)
        self.assertFalse(collectable_traits(0, True).eligible)
        self.assertFalse(collectable_traits(0, True).shiny)

    def test_beast_specials_only_from_level_nineteen(self) -> None:
        named = build_beast(47, health=50, level=19, special2=1, special3=1)
        plain = build_beast(47, health=50, level=18, special2=1, special3=1)

        self.assertEqual('"Agony Bane" Wolf', named.name)
        self.assertEqual("Wolf", plain.name)
        self.assertEqual(12, build_beast(47, health=21, level=12).power)

    def test_build_beast_parses_seed(self) -> None:
        beast = build_beast(47, health=21, level=12, seed="0xff", is_collectable=True)

        self.assertEqual(255, beast.seed)
        self.assertTrue(beast.is_collectable)
        self.assertFalse(beast.placeholder)


class ObstacleCatalogTests(unittest.TestCase):
    def test_names_and_fallback(self) -> None:
        self.assertEqual(75, len(OBSTACLE_NAMES))
        self.assertEqual("Demonic Altar", obstacle_name(1))
        self.assertEqual("Unknown Obstacle", obstacle_name(0))

    def test_type_bands_and_tiers(self) -> None:
        self.assertEqual("Magic", obstacle_type(1))
        self.assertEqual("Blade", obstacle_type(30))
        self.assertEqual("Bludgeon", obstacle_type(60))
        self.assertEqual("None", obstacle_type(99))
        self.assertEqual(1, obstacle_tier(1))
        self.assertEqual(5, obstacle_tier(25))
        self.assertEqual(5, obstacle_tier(99))


if __name__ == "__main__":
    unittest.main()
