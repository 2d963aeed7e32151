from __future__ import annotations

from typing import Dict

from deathmountain.domain.models.item import ItemType


OBSTACLE_BAND_SIZE = 25
MAX_OBSTACLE_ID = 75

OBSTACLE_NAMES: Dict[int, str] = dict(
    enumerate(
        (
            # Magic
            "Demonic Altar", "Vortex of Despair", "Eldritch Barrier", "Soul Trap", "Phantom Vortex",
            "Ectoplasmic Web", "Spectral Chains", "Infernal Pact", "Arcane Explosion", "Hypnotic Essence",
            "Mischievous Sprites", "Soul Draining Statue", "Petrifying Gaze", "Summoning Circle", "Ethereal Void",
            "Magic Lock", "Bewitching Fog", "Illusionary Maze", "Spellbound Mirror", "Ensnaring Shadow",
            "Dark Mist", "Curse", "Haunting Echo", "Hex", "Ghostly Whispers",
            # Blade
            "Pendulum Blades", "Icy Razor Winds", "Acidic Thorns", "Dragons Breath", "Pendulum Scythe",
            "Flame Jet", "Piercing Ice Darts", "Glass Sand Storm", "Poisoned Dart Wall", "Spinning Blade Wheel",
            "Poison Dart", "Spiked Tumbleweed", "Thunderbolt", "Giant Bear Trap", "Steel Needle Rain",
            "Spiked Pit", "Diamond Dust Storm", "Trapdoor Scorpion Pit", "Bladed Fan", "Bear Trap",
            "Porcupine Quill", "Hidden Arrow", "Glass Shard", "Thorn Bush", "Jagged Rocks",
            # Bludgeon
            "Collapsing Ceiling", "Rockslide", "Flash Flood", "Clinging Roots", "Collapsing Cavern",
            "Crushing Walls", "Smashing Pillars", "Rumbling Catacomb", "Whirling Cyclone", "Erupting Earth",
            "Subterranean Tremor", "Falling Chandelier", "Collapsing Bridge", "Raging Sandstorm", "Avalanching Rocks",
            "Tumbling Boulders", "Slamming Iron Gate", "Shifting Sandtrap", "Erupting Mud Geyser", "Crumbling Staircase",
            "Swinging Logs", "Unstable Cliff", "Toppling Statue", "Tumbling Barrels", "Rolling Boulder",
        ),
        start=1,
    )
)

OBSTACLE_ATTACK_TYPES = (ItemType.MAGIC.value, ItemType.BLADE.value, ItemType.BLUDGEON.value)


def obstacle_name(obstacle_id: int) -> str:
    return OBSTACLE_NAMES.get(int(obstacle_id), "Unknown Obstacle")


def obstacle_type(obstacle_id: int) -> str:
    obstacle_id = int(obstacle_id)
    if obstacle_id < 1 or obstacle_id > MAX_OBSTACLE_ID:
        return ItemType.NONE.value
    return OBSTACLE_ATTACK_TYPES[(obstacle_id - 1) // OBSTACLE_BAND_SIZE]


def obstacle_tier(obstacle_id: int) -> int:
    obstacle_id = int(obstacle_id)
    if obstacle_id < 1 or obstacle_id > MAX_OBSTACLE_ID:
        return 5
    return min(5, ((obstacle_id - 1) % OBSTACLE_BAND_SIZE) // 5 + 1)
