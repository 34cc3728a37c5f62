"""Lab enumerations and tuning constants."""
from enum import Enum


class WeaponType(Enum):
    """How a weapon resolves its damage."""
    PHYSICAL = "physical"   # ATK vs DEF
    MAGIC = "magic"         # MATK vs MDEF
    HEAL = "heal"           # negative damage, ignores defense


class Side(Enum):
    """Which team a unit belongs to."""
    PLAYER = "player"
    ENEMY = "enemy"


class ComparisonScope(Enum):
    """Which units take part in a unit-vs-standard table."""
    PLAYER = "player"
    ENEMY = "enemy"
    ALL = "all"


class Verdict(Enum):
    """Outcome of a rule check."""
    OK = "ok"
    WARN = "warn"
    FAIL = "fail"


class MissDirection(Enum):
    """Where a value sits relative to its target band."""
    UNDER = "under"
    INSIDE = "inside"
    OVER = "over"
    UNKNOWN = "unknown"


# String mappings for JSON parsing
WEAPON_TYPE_NAMES = {
    "physical": WeaponType.PHYSICAL,
    "magic": WeaponType.MAGIC,
    "heal": WeaponType.HEAL,
}

SIDE_NAMES = {
    "player": Side.PLAYER,
    "enemy": Side.ENEMY,
}

SCOPE_NAMES = {
    "player": ComparisonScope.PLAYER,
    "enemy": ComparisonScope.ENEMY,
    "all": ComparisonScope.ALL,
}


STAT_KEYS = ("hp", "atk", "def", "matk", "mdef", "spd")

# Combat rules
DOUBLING_SPEED_GAP = 4
DEFAULT_CRIT_MULTIPLIER = 3.0

# Frustration / tempo band used by the tables and reports
LOW_HIT_THRESHOLD = 0.5
ONE_SHOT_TTK = 1.2
SLOW_TTK = 4.0

# Main panel verdict bands (ok band, warn band)
HIT_OK_BAND = (0.7, 0.9)
HIT_WARN_BAND = (0.6, 0.95)
TTK_OK_BAND = (2.0, 3.0)
TTK_WARN_BAND = (1.5, 4.0)
REACHABLE_HIT = 0.7

# Checklist
WARN_BAND_LOW = 0.9
WARN_BAND_HIGH = 1.1
MAGE_EHP_MAX_TURNS = 3.0

# Class ids / roles that identify an archetype, in priority order
ARCHETYPE_ROLES = {
    "priest": ("priest", "support", "healer", "cleric"),
    "mage": ("mage", "magic", "caster", "wizard"),
    "tank": ("tank", "armor", "knight", "defender"),
}

DEFAULT_MACRO_RADIUS = 8
NO_TERRAIN_NAME = "—"
