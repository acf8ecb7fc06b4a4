"""Alias resolution for map names and item names.

Maps get a per-run :class:`AliasTable` seeded from the structured feed. Items are
aliased on the fly because the right alias depends on the task being compared: a
parenthesised suffix naming the task itself is dropped inside that task.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from logging import getLogger
from typing import TYPE_CHECKING

from .normalize import normalize, normalize_item_name, normalize_map_name, strip_markup_only
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from taskrecon.domain.model import ItemRef, StructuredTask, WikiLink

log = getLogger(__name__)

# canonical name (lowercase) -> shorthands registered when that map exists
MAP_SHORTHANDS: dict[str, tuple[str, ...]] = {
    "the lab": ("lab", "laboratory"),
    "streets of tarkov": ("streets",),
    "ground zero": ("gz",),
}

_EXCLUSION_CLAUSE = re.compile(r"\b(?:excluding|except)\b([^.)]*)", re.IGNORECASE)
_TRAILING_PARENTHETICAL = re.compile(r"\s*\(([^)]+)\)\s*$")
_QUEST_ITEM_SUFFIX = re.compile(r"\(quest item\)", re.IGNORECASE)
_DOGTAG = re.compile(r"dogtag", re.IGNORECASE)
_NUMERIC_TOKEN = re.compile(r"\b\d+(?:\.\d+)?(?:x\d+(?:\.\d+)?)?\b")


class AliasConflictError(ValueError):
    """Raised when one alias would resolve to two different canonical names."""


class AliasTable:
    """Normalized alias -> canonical name, for one reconciliation run.

    Every key is produced by ``normalize_map_name`` and every registered
    canonical name resolves to itself.
    """

    def __init__(self) -> None:
        self._canonical_by_alias: dict[str, str] = {}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_map_name(name) in self._canonical_by_alias

    def __len__(self) -> int:
        return len(self._canonical_by_alias)

    def __iter__(self) -> Iterator[str]:
        return iter(self._canonical_by_alias)

    @property
    def aliases(self) -> tuple[str, ...]:
        return tuple(self._canonical_by_alias)

    @property
    def canonical_names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(self._canonical_by_alias.values()))

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._canonical_by_alias.items())

    def resolve(self, name: str) -> str | None:
        return self._canonical_by_alias.get(normalize_map_name(name))

    def register_canonical(self, name: str) -> str | None:
        """Register ``name`` as its own canonical unless an earlier name owns its key."""

        key = normalize_map_name(name)
        if not key:
            return None
        existing = self._canonical_by_alias.setdefault(key, name)
        if existing != name:
            log.debug("Map %r folds into canonical %r", name, existing)
        return existing

    def add_variant(self, alias: str, canonical: str) -> None:
        """Register a derived spelling; the first registration of a key wins."""

        key = normalize_map_name(alias)
        if key:
            self._canonical_by_alias.setdefault(key, canonical)

    def add_shorthand(self, alias: str, canonical: str) -> None:
        """Register a hand-maintained shorthand, refusing to repoint an existing key."""

        key = normalize_map_name(alias)
        if not key:
            return
        existing = self._canonical_by_alias.get(key)
        if existing is not None and existing != canonical:
            raise AliasConflictError(
                f"Alias {alias!r} already resolves to {existing!r}, not {canonical!r}"
            )
        self._canonical_by_alias[key] = canonical


def collect_map_names(tasks: Iterable[StructuredTask]) -> list[str]:
    names: dict[str, None] = {}
    for task in tasks:
        for name in task.map_names():
            names[name] = None
    return list(names)


def build_alias_table(
    map_names: Iterable[str],
    *,
    shorthands: dict[str, tuple[str, ...]] | None = None,
) -> AliasTable:
    table = AliasTable()
    canonicals: list[str] = []
    for name in sorted(set(map_names)):
        canonical = table.register_canonical(name)
        if canonical == name:
            canonicals.append(name)

    for name in canonicals:
        lowered = name.lower()
        if lowered.startswith("the "):
            table.add_variant(name[4:], name)
        if lowered.endswith(" of tarkov"):
            table.add_variant(re.sub(r"\s+of tarkov$", "", name, flags=re.IGNORECASE), name)

    by_lowercase = {name.lower(): name for name in canonicals}
    if shorthands is None:
        shorthands = MAP_SHORTHANDS
    for canonical_key, aliases in shorthands.items():
        canonical = by_lowercase.get(canonical_key)
        if canonical is None:
            continue
        for alias in aliases:
            table.add_shorthand(alias, canonical)
    return table


def build_map_alias_table(tasks: Iterable[StructuredTask]) -> AliasTable:
    """Alias table for every map named anywhere in the structured feed."""

    table = build_alias_table(collect_map_names(tasks))
    log.debug("Built map alias table with %d aliases", len(table))
    return table


def is_excluded_map_mention(text: str, map_name: str) -> bool:
    """True when ``map_name`` only appears inside an "excluding ..." / "except ..." clause."""

    lowered = text.lower()
    target = map_name.lower()
    if target not in lowered:
        return False
    mention = re.compile(rf"\b{re.escape(target)}\b")
    return any(mention.search(clause[1]) for clause in _EXCLUSION_CLAUSE.finditer(lowered))


def extract_maps_from_text(text: str, table: AliasTable) -> list[str]:
    found: dict[str, None] = {}
    for alias, canonical in table.items():
        if is_excluded_map_mention(text, alias):
            continue
        suffix = r"(?!\s+scientist)" if alias in {"lab", "the lab"} else ""
        if re.search(rf"\b{re.escape(alias)}\b{suffix}", text, re.IGNORECASE):
            found[canonical] = None
    return list(found)


def canonical_map_set(names: Iterable[str], table: AliasTable) -> frozenset[str]:
    """Normalized map keys after folding every alias onto its canonical name."""

    keys: set[str] = set()
    for name in names:
        canonical = table.resolve(name) or name
        key = normalize_map_name(canonical)
        if key:
            keys.add(key)
    return frozenset(keys)


def _unique(values: Iterable[str]) -> list[str]:
    return [value for value in dict.fromkeys(values) if value.strip()]


def _strip_context_suffix(name: str, context: str | None) -> str | None:
    """Name without a trailing ``(...)`` whose text contains the task-name context."""

    if not context:
        return None
    context_key = normalize_item_name(context)
    match = _TRAILING_PARENTHETICAL.search(name)
    if not context_key or match is None:
        return None
    suffix = normalize_item_name(match[1])
    if not suffix or context_key not in suffix:
        return None
    stripped = normalize_item_name(_TRAILING_PARENTHETICAL.sub("", name))
    return stripped or None


def structured_item_aliases(item: ItemRef, context: str | None = None) -> list[str]:
    aliases: list[str] = []
    for value in (item.name, item.short_name):
        if not value:
            continue
        aliases.append(normalize_item_name(value))
        if _DOGTAG.search(value):
            aliases.append("dogtag")
    if item.name:
        stripped = _strip_context_suffix(item.name, context)
        if stripped:
            aliases.append(stripped)
    return _unique(aliases)


def free_text_item_aliases(name: str, context: str | None = None) -> list[str]:
    aliases = [normalize_item_name(name)]
    if _QUEST_ITEM_SUFFIX.search(name):
        stripped = normalize_item_name(_TRAILING_PARENTHETICAL.sub("", name))
        if stripped:
            aliases.append(stripped)
    stripped = _strip_context_suffix(name, context)
    if stripped:
        aliases.append(stripped)
    return _unique(aliases)


def build_alias_set(items: Iterable[ItemRef], context: str | None = None) -> frozenset[str]:
    return frozenset(
        alias for item in items for alias in structured_item_aliases(item, context)
    )


def has_item_intersection(
    items: Sequence[ItemRef],
    mentions: Sequence[str],
    context: str | None = None,
) -> bool:
    if not items or not mentions:
        return False
    alias_set = build_alias_set(items, context)
    return any(
        alias in alias_set
        for mention in mentions
        for alias in free_text_item_aliases(mention, context)
    )


def alias_set_intersects(alias_set: frozenset[str], mentions: Sequence[str]) -> bool:
    return any(normalize_item_name(mention) in alias_set for mention in mentions)


def items_match(
    items: Sequence[ItemRef],
    mentions: Sequence[str],
    context: str | None = None,
) -> bool:
    """Every structured item is mentioned and every mention is claimed by some item."""

    if not items and not mentions:
        return True
    if not items or not mentions:
        return False

    mention_aliases = [set(free_text_item_aliases(mention, context)) for mention in mentions]
    claimed: set[int] = set()
    for item in items:
        aliases = set(structured_item_aliases(item, context))
        index = next(
            (i for i, candidates in enumerate(mention_aliases) if candidates & aliases),
            None,
        )
        if index is None:
            return False
        claimed.add(index)
    return len(claimed) == len(mention_aliases)


def is_excluded_item(name: str, *, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    """Link targets naming people, categories or skills are not item mentions."""

    return normalize_item_name(name) in vocabulary.excluded_item_mentions


def filter_items(
    names: Iterable[str],
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> tuple[str, ...]:
    return tuple(
        name for name in dict.fromkeys(names) if not is_excluded_item(name, vocabulary=vocabulary)
    )


def select_link_label(
    link: WikiLink,
    table: AliasTable,
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> str:
    """Pick the item name a link stands for: its target, or a more specific display text."""

    target = link.target
    display = (link.display or "").strip()
    if not display:
        return target

    target_key = normalize_item_name(target)
    display_key = normalize_item_name(display)
    if target_key == display_key:
        return target
    if target in table or display in table:
        return target
    if is_excluded_item(target, vocabulary=vocabulary) or is_excluded_item(
        display, vocabulary=vocabulary
    ):
        return target
    if target_key in display_key or display_key in target_key:
        return display if len(display_key) >= len(target_key) else target
    return target


def item_tokens(value: str, *, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> list[str]:
    cleaned = _NUMERIC_TOKEN.sub(" ", normalize_item_name(value))
    cleaned = re.sub(r"[^a-z0-9]+", " ", cleaned)
    tokens = (
        token
        for token in cleaned.split()
        if len(token) > 1 and token not in vocabulary.item_token_stop_words and not token.isdigit()
    )
    return list(dict.fromkeys(tokens))


def coverage_tokens(value: str, *, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> list[str]:
    return [
        token
        for token in item_tokens(value, vocabulary=vocabulary)
        if token not in vocabulary.coverage_stop_words
    ]


def objective_mentions_item(
    item_name: str,
    text: str,
    table: AliasTable,
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    if not text.strip():
        return False
    key = normalize(text, map_aliases=table, vocabulary=vocabulary)
    if not key:
        return False
    return any(token in key for token in item_tokens(item_name, vocabulary=vocabulary))


def text_covers_items(
    items: Sequence[ItemRef],
    text: str,
    table: AliasTable,
    *,
    ratio: float = 0.5,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    """True when the text names a token shared by at least ``ratio`` of the item names.

    Covers objectives such as "Use any Dorm room key" whose structured side lists
    every qualifying item.
    """

    names = [item.name for item in items if item.name]
    if not names or not text.strip():
        return False
    key = normalize(text, map_aliases=table, vocabulary=vocabulary)
    if not key:
        return False

    counts = Counter(
        token for name in names for token in coverage_tokens(name, vocabulary=vocabulary)
    )
    threshold = max(1, math.floor(len(names) * ratio))
    return any(count >= threshold and token in key for token, count in counts.items())


def has_category_item_requirement(
    text: str,
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    """True when the text asks for a class of items ("any assault rifle") rather than one item."""

    lowered = strip_markup_only(text).lower()
    return any(pattern.search(lowered) for pattern in vocabulary.category_item_patterns)
