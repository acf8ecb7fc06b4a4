"""Word lists and phrase patterns used by the reconciliation heuristics.

Everything the normalizer and comparator treat as "known vocabulary" lives on one
frozen :class:`Vocabulary` so callers (and tests) can swap in a smaller fixture.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from taskrecon.domain.model import ObjectiveIntent

type PatternGroup = tuple[re.Pattern[str], ...]

TRADERS: tuple[str, ...] = (
    "prapor",
    "therapist",
    "skier",
    "peacekeeper",
    "mechanic",
    "ragman",
    "jaeger",
    "fence",
    "lightkeeper",
    "ref",
)

# plural -> singular for nouns that follow a count ("3 scavs", "headshots: 5")
COUNT_NOUN_FORMS: tuple[tuple[str, str], ...] = (
    ("times", "time"),
    ("kills", "kill"),
    ("targets", "target"),
    ("pmcs", "pmc"),
    ("scavs", "scav"),
    ("operatives", "operative"),
    ("headshots", "headshot"),
    ("shots", "shot"),
    ("enemies", "enemy"),
    ("guards", "guard"),
    ("bosses", "boss"),
    ("matches", "match"),
    ("raiders", "raider"),
    ("rogues", "rogue"),
    ("snipers", "sniper"),
    ("dogtags", "dogtag"),
    ("tags", "tag"),
)

# Count nouns that never carry the objective's own count when extracting numbers.
NON_COUNTING_NOUNS: frozenset[str] = frozenset({"enemy", "guard", "boss"})

COUNT_VERBS: tuple[str, ...] = (
    "find",
    "hand over",
    "handover",
    "turn in",
    "submit",
    "deliver",
    "give",
    "bring",
    "obtain",
    "collect",
    "stash",
    "sell",
    "win",
)

COUNT_EXTRACTION_VERBS: tuple[str, ...] = (
    "kill",
    "eliminate",
    "neutralize",
    "find",
    "locate",
    "obtain",
    "get",
    "hand over",
    "handover",
    "turn in",
    "submit",
    "deliver",
    "give",
    "bring",
    "collect",
    "stash",
    "install",
    "mark",
    "plant",
    "place",
    "reach",
    "visit",
    "use",
    "transfer",
    "complete",
    "survive",
    "extract",
    "escape",
    "hit",
    "shoot",
)

UNIT_NOUNS: tuple[str, ...] = ("items?", "pcs?", "pieces?", "packs?", "bottles?", "units?")

LOCATION_NOUNS: tuple[str, ...] = (
    "room",
    "dorm",
    "gate",
    "floor",
    "level",
    "block",
    "sector",
    "wing",
    "building",
    "office",
    "warehouse",
    "shop",
    "store",
    "hangar",
    "checkpoint",
    "bunker",
)

NUMBER_WORDS: tuple[tuple[str, str], ...] = (
    ("one", "1"),
    ("two", "2"),
    ("three", "3"),
    ("four", "4"),
    ("five", "5"),
    ("six", "6"),
    ("seven", "7"),
    ("eight", "8"),
    ("nine", "9"),
    ("ten", "10"),
    ("eleven", "11"),
    ("twelve", "12"),
)

# Cyrillic letters that render identically to Latin ones.
LOOKALIKE_LETTERS: tuple[tuple[str, str], ...] = (
    ("А", "a"),
    ("а", "a"),
    ("В", "b"),
    ("С", "c"),
    ("с", "c"),
    ("Е", "e"),
    ("е", "e"),
    ("Н", "h"),
    ("К", "k"),
    ("М", "m"),
    ("О", "o"),
    ("о", "o"),
    ("Р", "p"),
    ("р", "p"),
    ("Т", "t"),
    ("Х", "x"),
    ("х", "x"),
    ("у", "y"),
)

# Link targets on the wiki that name people, categories or skills rather than items.
EXCLUDED_ITEM_MENTIONS: frozenset[str] = frozenset(
    {
        "found in raid",
        "in raid",
        "fi r",
        "weapon",
        "weapons",
        "assault rifles",
        "sniper rifles",
        "bolt-action rifles",
        "melee weapon",
        "melee weapons",
        "grenade",
        "grenades",
        "grenade launcher",
        "grenade launchers",
        "dmrs",
        "smgs",
        "lmgs",
        "shotguns",
        "pistols",
        "usec",
        "bear",
        "pmc",
        "pmcs",
        "scav",
        "scavs",
        "boss",
        "bosses",
        "rogues",
        "raiders",
        "scav raiders",
        "glukhar",
        "killa",
        "vengeful killa",
        "reshala",
        "shturman",
        "tagilla",
        "shadow of tagilla",
        "sanitar",
        "kaban",
        "kollontay",
        "basmach",
        "gus",
        "partisan",
        "goons",
        "minotaur",
        "zryachiy",
        "birdeye",
        "big pipe",
        "knight",
        "medical",
        "medicine",
        "meds",
        "medication",
        "backpack",
        "backpacks",
        "tactical rig",
        "tactical rigs",
        "chest rig",
        "chest rigs",
        "plate carrier",
        "plate carriers",
        "armored rig",
        "armored rigs",
        "body armor",
        "body armour",
        "helmet",
        "helmets",
        "armor plate",
        "armor plates",
        "ballistic plate",
        "ballistic plates",
        "weapon mods",
        "weapon_mods",
        "search",
        "stress resistance",
        "strength",
        "endurance",
        "metabolism",
        "immunity",
        "intellect",
        "attention",
        "perception",
        "memory",
        "charisma",
        "health",
        "arena",
        *TRADERS,
    }
)

ITEM_TOKEN_STOP_WORDS: frozenset[str] = frozenset(
    {
        "machine",
        "gun",
        "rifle",
        "pistol",
        "launcher",
        "grenade",
        "automatic",
        "assault",
        "sniper",
        "marksman",
        "bolt",
        "action",
        "submachine",
        "smg",
        "lmg",
        "dmr",
        "carbine",
        "weapon",
        "weapons",
        "heavy",
        "light",
    }
)

# Place-like words shared by many key names; they say nothing about which key is meant.
COVERAGE_STOP_WORDS: frozenset[str] = frozenset(
    {
        "key",
        "keys",
        "keycard",
        "keycards",
        "card",
        "cards",
        "room",
        "rooms",
        "dorm",
        "dorms",
        "office",
        "offices",
        "door",
        "doors",
        "bunker",
        "bunkers",
        "warehouse",
        "warehouses",
        "shop",
        "shops",
        "store",
        "stores",
        "station",
        "stations",
        "base",
        "bases",
        "floor",
        "floors",
        "building",
        "buildings",
        "hangar",
        "hangars",
        "checkpoint",
        "checkpoints",
        "gate",
        "gates",
        "corridor",
        "hall",
        "hallway",
        "hallways",
        "exit",
        "entrance",
        "entrances",
        "route",
        "road",
        "bridge",
        "tunnel",
        "yard",
        "roof",
    }
)

CATEGORY_ITEM_PATTERNS: PatternGroup = tuple(
    re.compile(pattern)
    for pattern in (
        r"\bany\b.*\b(weapon|gun|firearm)\b",
        r"\bmelee weapons?\b",
        r"\bgrenades?\b",
        r"\bgrenade launchers?\b",
        r"\bassault rifles?\b",
        r"\bbolt[-\s]?action rifles?\b",
        r"\bsniper rifles?\b",
        r"\bmarksman rifles?\b",
        r"\bdmrs?\b",
        r"\bsmgs?\b",
        r"\blmgs?\b",
        r"\bshotguns?\b",
        r"\bpistols?\b",
        r"\brevolvers?\b",
        r"\bak[-\s]?series\b",
        r"\bar[-\s]?15\b",
        r"\bplatform weapons?\b",
        r"\bseries\b.*\bweapons?\b",
        r"\bsuppressed\b.*\bweapons?\b",
        r"\bsilenced\b.*\bweapons?\b",
        r"\bsuppressors?\b",
        r"\bsilencers?\b",
        r"\bbrand equipment\b",
        r"\bbrand items?\b",
        r"\bany\b.*\b(backpacks?|tactical rigs?|chest rigs?|plate carriers?|armored rigs?"
        r"|body armou?r|helmets?)\b",
        r"\bany\b.*\b(medical|medicine|meds|medication)\b",
        r"\b(ballistic plates?|armor plates?)\b",
    )
)

# Checked in order; the first intent whose keywords appear wins.
INTENT_PATTERNS: tuple[tuple[ObjectiveIntent, re.Pattern[str]], ...] = (
    (
        ObjectiveIntent.HAND_OVER,
        re.compile(
            r"\bhand over\b|\bhandover\b|\bturn in\b|\bsubmit\b|\bdeliver\b|\bgive\b|\bbring\b"
        ),
    ),
    (ObjectiveIntent.LOCATE, re.compile(r"\bfind\b|\bloc(?:at|ate)\b|\bobtain\b|\bcollect\b")),
    (ObjectiveIntent.MARK, re.compile(r"\bmark\b|\bplace\b|\bplant\b|\binstall\b|\bstash\b")),
    (ObjectiveIntent.USE, re.compile(r"\buse\b|\butilize\b")),
    (ObjectiveIntent.ELIMINATE, re.compile(r"\beliminate\b|\bkill\b|\bshoot\b")),
    (ObjectiveIntent.EXTRACT, re.compile(r"\bextract\b|\bsurvive\b|\bescape\b")),
)

TRANSIT_PATTERN = re.compile(r"\btransit\b|\btransfer\b|\bpassage\b|\bleading to\b", re.IGNORECASE)
SKILL_OBJECTIVE_PATTERN = re.compile(r"\bskill level\b", re.IGNORECASE)
ANY_ITEM_PATTERN = re.compile(r"\bany\b", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class Vocabulary:
    traders: tuple[str, ...] = TRADERS
    count_noun_forms: tuple[tuple[str, str], ...] = COUNT_NOUN_FORMS
    non_counting_nouns: frozenset[str] = NON_COUNTING_NOUNS
    count_verbs: tuple[str, ...] = COUNT_VERBS
    count_extraction_verbs: tuple[str, ...] = COUNT_EXTRACTION_VERBS
    unit_nouns: tuple[str, ...] = UNIT_NOUNS
    location_nouns: tuple[str, ...] = LOCATION_NOUNS
    number_words: tuple[tuple[str, str], ...] = NUMBER_WORDS
    lookalike_letters: tuple[tuple[str, str], ...] = LOOKALIKE_LETTERS
    excluded_item_mentions: frozenset[str] = EXCLUDED_ITEM_MENTIONS
    item_token_stop_words: frozenset[str] = ITEM_TOKEN_STOP_WORDS
    coverage_stop_words: frozenset[str] = COVERAGE_STOP_WORDS
    category_item_patterns: PatternGroup = CATEGORY_ITEM_PATTERNS
    intent_patterns: tuple[tuple[ObjectiveIntent, re.Pattern[str]], ...] = INTENT_PATTERNS

    def count_noun_alternation(self, *, counting_only: bool = False) -> str:
        """Regex alternation matching singular and plural count nouns."""

        words: list[str] = []
        for plural, singular in self.count_noun_forms:
            if counting_only and singular in self.non_counting_nouns:
                continue
            words.extend((plural, singular))
        return "|".join(sorted(dict.fromkeys(words), key=len, reverse=True))


DEFAULT_VOCABULARY = Vocabulary()
