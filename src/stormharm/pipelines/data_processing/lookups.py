"""Static lookup tables for cleaning the Storm Data archive.

Three tables drive the cleaning nodes:
- timezone codes → fixed-offset zone names (or ``INVALID_ZONE``)
- raw EVTYPE labels → the 48 canonical event types of NWS Directive 10-1605
- damage exponent codes → dollar multipliers

All tables are read-only mappings. ``_frozen_table`` refuses duplicate
keys, so a copy-paste slip in a literal below fails at import time
instead of silently overwriting an entry.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

INVALID_ZONE = "invalid"


def _frozen_table(pairs: Iterable[tuple[str, object]]) -> Mapping:
    table: dict = {}
    for key, value in pairs:
        if key in table:
            raise ValueError(f"Duplicate lookup key: {key!r}")
        table[key] = value
    return MappingProxyType(table)


# ── Timezone codes ──────────────────────────────────────────────────
# Etc/GMT signs are inverted: Etc/GMT+6 is UTC-6.
# Codes are matched exactly; the lowercase-suffixed spellings seen in
# the archive are listed explicitly.
TIMEZONE_CODES: Mapping[str, str] = _frozen_table(
    [
        ("EST", "Etc/GMT+5"),
        ("ESt", "Etc/GMT+5"),
        ("EDT", "Etc/GMT+4"),
        ("CST", "Etc/GMT+6"),
        ("CSt", "Etc/GMT+6"),
        ("CDT", "Etc/GMT+5"),
        ("MST", "Etc/GMT+7"),
        ("MDT", "Etc/GMT+6"),
        ("PST", "Etc/GMT+8"),
        ("PDT", "Etc/GMT+7"),
        ("AKS", "Etc/GMT+9"),
        ("AST", "Etc/GMT+4"),
        ("ADT", "Etc/GMT+3"),
        ("HST", "Etc/GMT+10"),
        ("SST", "Etc/GMT+11"),
        ("GST", "Etc/GMT-10"),
        ("GMT", "UTC"),
        ("UTC", "UTC"),
        # Unknown or ambiguous codes
        ("UNK", INVALID_ZONE),
        ("ESY", INVALID_ZONE),
        ("CSC", INVALID_ZONE),
        ("SCT", INVALID_ZONE),
    ]
)

REFERENCE_ZONE = "UTC"


# ── Event categories ────────────────────────────────────────────────
# Keys are upper-cased raw EVTYPE labels as they appear from 2007 on.
EVENT_CATEGORIES: Mapping[str, str] = _frozen_table(
    [
        ("ASTRONOMICAL LOW TIDE", "Astronomical Low Tide"),
        ("AVALANCHE", "Avalanche"),
        ("BLIZZARD", "Blizzard"),
        ("COASTAL FLOOD", "Coastal Flood"),
        ("COLD/WIND CHILL", "Cold/Wind Chill"),
        ("LANDSLIDE", "Debris Flow"),
        ("DENSE FOG", "Dense Fog"),
        ("DENSE SMOKE", "Dense Smoke"),
        ("DROUGHT", "Drought"),
        ("DUST DEVIL", "Dust Devil"),
        ("DUST STORM", "Dust Storm"),
        ("EXCESSIVE HEAT", "Excessive Heat"),
        ("EXTREME COLD/WIND CHILL", "Extreme Cold/Wind Chill"),
        ("FLASH FLOOD", "Flash Flood"),
        ("FLOOD", "Flood"),
        ("FROST/FREEZE", "Frost/Freeze"),
        ("FUNNEL CLOUD", "Funnel Cloud"),
        ("FREEZING FOG", "Freezing Fog"),
        ("HAIL", "Hail"),
        ("HEAT", "Heat"),
        ("HEAVY RAIN", "Heavy Rain"),
        ("HEAVY SNOW", "Heavy Snow"),
        ("HIGH SURF", "High Surf"),
        ("HIGH WIND", "High Wind"),
        ("HURRICANE", "Hurricane (Typhoon)"),
        ("ICE STORM", "Ice Storm"),
        ("LAKE-EFFECT SNOW", "Lake-Effect Snow"),
        ("LAKESHORE FLOOD", "Lakeshore Flood"),
        ("LIGHTNING", "Lightning"),
        ("MARINE HAIL", "Marine Hail"),
        ("MARINE HIGH WIND", "Marine High Wind"),
        ("MARINE STRONG WIND", "Marine Strong Wind"),
        ("MARINE TSTM WIND", "Marine Thunderstorm Wind"),
        ("RIP CURRENT", "Rip Current"),
        ("SEICHE", "Seiche"),
        ("SLEET", "Sleet"),
        ("STORM SURGE/TIDE", "Storm Surge/Tide"),
        ("STRONG WIND", "Strong Wind"),
        ("TSTM WIND", "Thunderstorm Wind"),
        ("TORNADO", "Tornado"),
        ("TROPICAL DEPRESSION", "Tropical Depression"),
        ("TROPICAL STORM", "Tropical Storm"),
        ("TSUNAMI", "Tsunami"),
        ("VOLCANIC ASHFALL", "Volcanic Ash"),
        ("WATERSPOUT", "Waterspout"),
        ("WILDFIRE", "Wildfire"),
        ("WINTER STORM", "Winter Storm"),
        ("WINTER WEATHER", "Winter Weather"),
    ]
)

CANONICAL_CATEGORIES: frozenset[str] = frozenset(EVENT_CATEGORIES.values())


# ── Damage exponents ────────────────────────────────────────────────
DAMAGE_MULTIPLIERS: Mapping[str, float] = _frozen_table(
    [
        ("B", 1e9),
        ("M", 1e6),
        ("K", 1e3),
        ("0", 1e0),
    ]
)
