CONTRACT_VERSION = "1.0.0"

CONTEXT_KEYS = (
    "game",
    "adventurer",
    "currentBeast",
    "damagePreview",
    "market",
    "recentEvents",
)

GAME_PHASES = (
    "death",
    "combat",
    "level_up",
    "exploration",
)

OUTPUT_FORMATS = (
    "xml",
    "json",
    "summary",
)
