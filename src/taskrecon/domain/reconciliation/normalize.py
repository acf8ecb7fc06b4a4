"""Text normalization for objective comparison keys.

``normalize`` runs a fixed, ordered pipeline of named stages. Each stage is an
ordered tuple of named rewrite rules, and later stages rely on the cleanup done
by earlier ones:

1. ``markup``: strip HTML-like tags, emphasis quotes and wiki link syntax
   (keeping the display text). Repeated until the text stops changing.
2. ``fold``: map Cyrillic look-alike letters to Latin, lowercase, collapse
   whitespace.
3. ``clock``: drop the leading zero of clock times (``07:30`` -> ``7:30``).
4. ``quantities``: strip counts and other numbers (ranges, distances, calibers,
   decimals, model codes, room numbers) so they never reach the text key.
5. ``vocabulary``: drop punctuation, rewrite verbs and nouns to the controlled
   vocabulary, drop filler words, singularize count nouns.
6. ``map_aliases``: remove known map names, with any leading preposition.
   Only runs when an alias table is supplied.

``strip_markup_only`` is the display variant (stage 1 alone). Because stage 1
runs to a fixed point, ``normalize(strip_markup_only(t)) == normalize(t)``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

if TYPE_CHECKING:
    from collections.abc import Iterable

    from taskrecon.domain.model import ObjectiveIntent

    from .aliases import AliasTable

type Replacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True, slots=True)
class RewriteRule:
    name: str
    pattern: re.Pattern[str]
    replacement: Replacement

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


@dataclass(frozen=True, slots=True)
class TextTransform:
    name: str
    func: Callable[[str], str]

    def apply(self, text: str) -> str:
        return self.func(text)


type Rule = RewriteRule | TextTransform


@dataclass(frozen=True, slots=True)
class NormalizationStage:
    name: str
    rules: tuple[Rule, ...]
    until_stable: bool = False

    def apply(self, text: str) -> str:
        current = text
        while True:
            result = current
            for rule in self.rules:
                result = rule.apply(result)
            if not self.until_stable or result == current:
                return result
            current = result

    def rule(self, name: str) -> Rule:
        for rule in self.rules:
            if rule.name == name:
                return rule
        raise KeyError(name)


def _rule(name: str, pattern: str, replacement: Replacement) -> RewriteRule:
    return RewriteRule(name=name, pattern=re.compile(pattern), replacement=replacement)


def _alternation(words: Iterable[str]) -> str:
    return "|".join(re.escape(word) for word in sorted(words, key=len, reverse=True))


_COLLAPSE_WHITESPACE = _rule("collapse_whitespace", r"\s+", " ")
_TRIM = TextTransform(name="trim", func=str.strip)

MARKUP_STAGE = NormalizationStage(
    name="markup",
    rules=(
        _rule("html_tags", r"<[^>]+>", ""),
        _rule("emphasis", r"''+", ""),
        _rule("wiki_links", r"\[\[(?:[^|\]]*\|)?([^\]]+)\]\]", r"\1"),
        _COLLAPSE_WHITESPACE,
        _TRIM,
    ),
    until_stable=True,
)

CLOCK_STAGE = NormalizationStage(
    name="clock",
    rules=(_rule("leading_zero_hour", r"\b0(\d):(\d{2})\b", r"\1:\2"),),
)


def _fold_stage(vocabulary: Vocabulary) -> NormalizationStage:
    table = str.maketrans(dict(vocabulary.lookalike_letters))
    return NormalizationStage(
        name="fold",
        rules=(
            TextTransform(name="lookalike_letters", func=lambda text: text.translate(table)),
            TextTransform(name="lowercase", func=str.lower),
            _COLLAPSE_WHITESPACE,
            _TRIM,
        ),
    )


def _quantities_stage(vocabulary: Vocabulary) -> NormalizationStage:
    numbers = dict(vocabulary.number_words)
    nouns = vocabulary.count_noun_alternation()
    verbs = _alternation(vocabulary.count_verbs)
    traders = _alternation(vocabulary.traders)
    places = _alternation(vocabulary.location_nouns)

    def verb_with_article(match: re.Match[str]) -> str:
        return f"{match[1]} {match[2] or ''}".strip()

    return NormalizationStage(
        name="quantities",
        rules=(
            _rule(
                "number_words",
                rf"\b(?:{_alternation(numbers)})\b",
                lambda match: numbers[match[0]],
            ),
            _rule(
                "series_rifle",
                r"\b([a-z]{2,4}\s?-?\d{1,3}[a-z0-9]*)\s+series\s+assault\s+rifles?\b",
                r"\1",
            ),
            _rule("distances", r"\b\d+\s*meters?\b", " "),
            _rule("percentage_ranges", r"\b\d+\s*[-–]\s*\d+\s*%", " "),
            _rule("percentages", r"\b\d+\s*%", " "),
            _rule("ranges", r"\b\d+\s*[-–]\s*\d+\b", " "),
            _rule("calibers", r"\b\d+(?:\.\d+)?\s*[x×]\s*\d+(?:\.\d+)?\b", " "),
            _rule("decimals", r"\b\d+\.\d+\b", " "),
            _rule("numbered_marks", r"#\d+\b", " "),
            _rule("padded_ids", r"\b0\d{3,}\b", " "),
            _rule("model_codes_letter_first", r"\b[a-z]+-?\d+[a-z0-9-]*\b", " "),
            _rule("model_codes_digit_dash", r"\b\d+-[a-z0-9-]+\b", " "),
            _rule("model_codes_dash_digit", r"\b[a-z0-9-]+-\d+\b", " "),
            _rule("model_codes_digit_first", r"\b\d+[a-z][a-z0-9-]*\b", " "),
            _rule("location_numbers", rf"\b({places})\s+\d+\b", r"\1"),
            _rule("win_out_of", r"\bwin\s+\d+\s+out\s+of\s+\d+\b", "win"),
            _rule("repetitions", r"\b\d+\s+times?\b", " "),
            _rule("number_of", r"\b\d+\s+of\b", " "),
            _rule(
                "number_before_noun",
                rf"\b\d+\s+((?:[a-z]+\s+){{0,2}}(?:{nouns}))\b",
                r"\1",
            ),
            _rule("number_after_noun", rf"\b({nouns})\s*\d+\b", r"\1"),
            _rule("item_tally", r"\b(items?)\s*:\s*\d+\b", r"\1:"),
            _rule(
                "verb_count",
                rf"\b({verbs})\s+(?:any\s+)?(the\s+)?\d+\b",
                verb_with_article,
            ),
            _rule("sell_to_trader", rf"\b(sell)\s+({traders})\s+(?:any\s+)?\d+\b", r"\1 \2"),
            _COLLAPSE_WHITESPACE,
            _TRIM,
        ),
    )


def _vocabulary_stage(vocabulary: Vocabulary) -> NormalizationStage:
    singular = dict(vocabulary.count_noun_forms)
    traders = _alternation(vocabulary.traders)
    return NormalizationStage(
        name="vocabulary",
        rules=(
            _rule("apostrophes", r"[’']", ""),
            _rule("punctuation", r"[^a-z0-9]+", " "),
            _rule(
                "tarkov_territory",
                r"\b(?:all over|throughout)\s+the\s+tarkov\s+territory\b",
                " ",
            ),
            _rule("over_territory", r"\bover\s+(?:the\s+)?tarkov\s+territory\b", " "),
            _rule("on_any_location", r"\bon\s+any\s+(?:location|map)\b", " "),
            _rule("any_location", r"\bany\s+location\b", " "),
            _rule("on_location", r"\bon\s+(?:the\s+)?location\b", " "),
            _rule("find_a_way_inside", r"\bfind a way (?:inside|into)\b", "enter"),
            _rule("articles", r"\b(?:the|a|an|any|all)\b", " "),
            _rule("skill_level_value", r"\bskill level of \d+\b", "skill level"),
            _rule(
                "required_skill_value",
                r"\brequired\s+\d+\s+([a-z]+)\s+skill\s+level\b",
                r"required \1 skill level",
            ),
            _rule("locate_and_check", r"\blocate and check\b", "locate"),
            _rule("locate_and_obtain", r"\blocate and obtain\b", "locate"),
            _rule("locate_and_mark", r"\blocate and mark\b", "mark"),
            _rule("locate_and_eliminate", r"\blocate and (?:neutralize|eliminate)\b", "eliminate"),
            _rule("neutralize", r"\bneutralize\b", "eliminate"),
            _rule("kill", r"\bkill\b", "eliminate"),
            _rule("get_into", r"\bget into\b", "enter"),
            _rule("find", r"\bfind\b", "locate"),
            _rule("while_using", r"\bwhile using\b", "using"),
            _rule("with", r"\bwith\b", "using"),
            _rule("bunkhouses", r"\bbunkhouses\b", "bunkhouse"),
            _rule("conjunctions", r"\b(?:and|that)\b", " "),
            _rule("copulas", r"\b(?:is|are|was|were)\b", " "),
            _rule("away", r"\baway\b", " "),
            _rule("optional", r"\boptional\b", " "),
            _rule("found_in_raid_items", r"\bfound in raid items?\b", "found in raid"),
            _rule("hand_grenades", r"\bhand grenades?\b", "grenades"),
            _rule("scav_groups", r"\bscav\s+(bosses?|raiders?)\b", r"\1"),
            _rule("trader_recipient", rf"\bto\s+(?:{traders})\b", " "),
            _rule("pmc_operatives", r"\bpmc operatives?\b", "pmc"),
            _rule("pmcs", r"\bpmcs\b", "pmc"),
            _rule("enemies", r"\benem(?:y|ies)\b", "target"),
            _rule(
                "singular_count_nouns",
                rf"\b(?:{_alternation(singular)})\b",
                lambda match: singular[match[0]],
            ),
            _COLLAPSE_WHITESPACE,
            _TRIM,
        ),
    )


@lru_cache(maxsize=8)
def build_pipeline(vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> tuple[NormalizationStage, ...]:
    """Stages 1-5 in their fixed order."""

    return (
        MARKUP_STAGE,
        _fold_stage(vocabulary),
        CLOCK_STAGE,
        _quantities_stage(vocabulary),
        _vocabulary_stage(vocabulary),
    )


@lru_cache(maxsize=16)
def build_map_alias_stage(
    aliases: tuple[str, ...],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> NormalizationStage:
    """Stage 6 for one alias set; longer aliases are removed first."""

    rules: list[Rule] = []
    seen: set[str] = set()
    for alias in sorted(aliases, key=len, reverse=True):
        key = _run(alias, build_pipeline(vocabulary))
        if not key or key in seen:
            continue
        seen.add(key)
        escaped = re.escape(key)
        rules.append(
            _rule(f"after_preposition:{key}", rf"\b(?:on|in|at|from|near)\s+{escaped}\b", " ")
        )
        rules.append(_rule(f"bare:{key}", rf"\b{escaped}\b", " "))
    rules.extend((_COLLAPSE_WHITESPACE, _TRIM))
    return NormalizationStage(name="map_aliases", rules=tuple(rules))


def _run(text: str, stages: Iterable[NormalizationStage]) -> str:
    result = text
    for stage in stages:
        result = stage.apply(result)
    return result


def normalize(
    text: str,
    *,
    map_aliases: AliasTable | None = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> str:
    """Return the comparison key for a piece of objective text."""

    key = _run(text, build_pipeline(vocabulary))
    if map_aliases is None or not key:
        return key
    return build_map_alias_stage(map_aliases.aliases, vocabulary).apply(key)


def strip_markup_only(text: str) -> str:
    """Display form: markup removed, whitespace collapsed, nothing else touched."""

    return MARKUP_STAGE.apply(text)


def strip_map_mentions(
    text: str,
    map_aliases: AliasTable,
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> str:
    """Apply only the map-alias stage to an already normalized key."""

    return build_map_alias_stage(map_aliases.aliases, vocabulary).apply(text)


def normalize_whitespace(value: str) -> str:
    return " ".join(value.split())


def normalize_map_name(value: str) -> str:
    lowered = value.strip().lower()
    lowered = re.sub(r"\bnight factory\b", "factory", lowered)
    lowered = re.sub(r"\s+21\+", "", lowered)
    return normalize_whitespace(lowered)


def normalize_item_name(value: str) -> str:
    lowered = value.strip().lower()
    lowered = re.sub(r"^#+", "", lowered)
    lowered = re.sub(r"#(?=\d)", "", lowered)
    return normalize_whitespace(lowered)


def normalize_task_name(value: str) -> str:
    """Lowercase a task name, drop disambiguation suffixes and unify hyphenation."""

    lowered = value.strip().lower()
    lowered = re.sub(r"\s*\[pvp zone\]\s*$", "", lowered)
    lowered = re.sub(r"\s*\(quest\)\s*$", "", lowered)
    return normalize_whitespace(lowered.replace("-", " "))


def classify_intent(
    text: str,
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> ObjectiveIntent | None:
    lowered = text.lower()
    for intent, pattern in vocabulary.intent_patterns:
        if pattern.search(lowered):
            return intent
    return None


@dataclass(frozen=True, slots=True)
class _CountPatterns:
    scrubs: tuple[re.Pattern[str], ...]
    searches: tuple[re.Pattern[str], ...]


_NUMBER = r"\d{1,3}(?:,\d{3})*"


@lru_cache(maxsize=8)
def _count_patterns(vocabulary: Vocabulary) -> _CountPatterns:
    places = _alternation(vocabulary.location_nouns)
    nouns = vocabulary.count_noun_alternation(counting_only=True)
    verbs = _alternation(vocabulary.count_extraction_verbs)
    units = "|".join(vocabulary.unit_nouns)
    scrubs = (
        r"\b\d+\s*meters?\b",
        r"\b\d+\s*[-–]\s*\d+\s*%",
        r"\b\d+\s*%",
        r"\b\d+\s*[-–]\s*\d+\b",
        r"\b\d+(?:\.\d+)?\s*[x×]\s*\d+(?:\.\d+)?\b",
        r"\b\d+\.\d+\b",
        r"#\d+\b",
        r"\b0\d{3,}\b",
        r"\b[a-z]+-?\d+[a-z0-9-]*\b",
        r"\b\d+-[a-z0-9-]+\b",
        r"\b[a-z0-9-]+-\d+\b",
        r"\b\d+[a-z][a-z0-9-]*\b",
        r"\b[a-z]+\d+[a-z0-9-]*\b",
        rf"\b(?:{places})\s+\d+\b",
    )
    searches = (
        rf"\b({_NUMBER})\b\s*(?:{nouns})\b",
        rf"\b(?:{nouns})\b\s*({_NUMBER})\b",
        rf"\b({_NUMBER})\b\s*x\b",
        rf"\bx\s*({_NUMBER})\b",
        rf"\b(?:{verbs})\b[^\d]{{0,24}}\b({_NUMBER})\b",
        rf"\b({_NUMBER})\b\s*(?:{units})\b",
    )
    return _CountPatterns(
        scrubs=tuple(re.compile(pattern) for pattern in scrubs),
        searches=tuple(re.compile(pattern) for pattern in searches),
    )


def extract_count(
    text: str,
    known_items: Iterable[str] = (),
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> int | None:
    """Pull the objective count out of prose, or ``None`` when no count is stated.

    Numbers inside ``known_items`` (item names already linked in the text) and
    numbers that are clearly not counts are scrubbed before the ordered search.
    """

    scrubbed = strip_markup_only(text).lower()
    if not re.search(r"\d", scrubbed):
        return None

    for item in known_items:
        item_text = item.strip().lower()
        if item_text:
            scrubbed = scrubbed.replace(item_text, "")

    patterns = _count_patterns(vocabulary)
    for pattern in patterns.scrubs:
        scrubbed = pattern.sub("", scrubbed)
    for pattern in patterns.searches:
        match = pattern.search(scrubbed)
        if match:
            return int(match[1].replace(",", ""))
    return None
