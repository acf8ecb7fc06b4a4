"""Parse MediaWiki task page markup into a :class:`FreeTextTask`.

Page layout anomalies never raise: a missing section, infobox field or table
simply yields empty fields.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import TYPE_CHECKING

from taskrecon.domain.model import (
    FreeTextObjective,
    FreeTextRewards,
    FreeTextTask,
    RelatedItem,
    RewardItem,
    TraderReputation,
    WikiLink,
)

from .aliases import (
    extract_maps_from_text,
    filter_items,
    is_excluded_map_mention,
    select_link_label,
)
from .normalize import extract_count, strip_markup_only
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taskrecon.domain.model import Revision

    from .aliases import AliasTable

REQUIREMENTS_HEADING = "Requirements"
OBJECTIVES_HEADING = "Objectives"
REWARDS_HEADING = "Rewards"

INFOBOX_MAP_FIELDS = ("location", "map", "maps", "locations")
INFOBOX_NEXT_FIELDS = ("next", "next_task", "next task", "next_quest", "next quest")
INFOBOX_PREVIOUS_FIELD = "previous"

_LINK = re.compile(r"\[\[([^|\]]+)(?:\|([^\]]+))?\]\]")
_LINK_TARGET = re.compile(r"\[\[([^|\]]+)")
_NAMESPACED_LINK = re.compile(r"^(?:File|Category):", re.IGNORECASE)
_LIST_MARKER = re.compile(r"^[*#]+\s*")
_NOTE_LINE = re.compile(r"^'''?Note:?'''?", re.IGNORECASE)
_PVE_NOTE = re.compile(r"PvE\s*mode|PVE", re.IGNORECASE)
_MIN_LEVEL = re.compile(r"level\s+(\d+)", re.IGNORECASE)

_EXPERIENCE = re.compile(r"\+?([\d,]+)\s*EXP", re.IGNORECASE)
_REPUTATION = re.compile(r"(\w+)\s+Rep\s*([+\-\u2212]?)\s*([0-9.]+)", re.IGNORECASE)
_MONEY = re.compile(r"([\d,]+)\s*Roubles", re.IGNORECASE)
_REWARD_ITEM = re.compile(r"^(\d+)\s*[x×]\s*(.+)$", re.IGNORECASE)

_RELATED_ITEMS_CAPTION = re.compile(r"Related Quest Items", re.IGNORECASE)
_TABLE_CELL_SEPARATOR = re.compile(r"\s*(?:\|\||!!)\s*")


def _is_top_level_heading(line: str) -> bool:
    return (
        line.startswith("==")
        and not line.startswith("===")
        and line.endswith("==")
        and not line.endswith("===")
    )


def section_lines(markup: str, heading: str) -> list[str]:
    """List entries (markers stripped) and ``Note:`` lines under a ``== heading ==``."""

    lines = markup.split("\n")
    heading_pattern = re.compile(rf"^==\s*{re.escape(heading)}\s*==\s*$", re.IGNORECASE)
    start = next(
        (index for index, line in enumerate(lines) if heading_pattern.match(line.strip())),
        None,
    )
    if start is None:
        return []

    entries: list[str] = []
    for line in lines[start + 1 :]:
        raw = line.strip()
        if _is_top_level_heading(raw):
            break
        if raw.startswith(("*", "#")):
            entries.append(_LIST_MARKER.sub("", raw))
        elif raw.startswith(("'''Note:", "''Note:")):
            entries.append(raw)
    return entries


def wiki_links(line: str) -> list[WikiLink]:
    links: list[WikiLink] = []
    for match in _LINK.finditer(line):
        target = match[1].strip()
        if not target or _NAMESPACED_LINK.match(target):
            continue
        display = match[2].strip() if match[2] else None
        links.append(
            WikiLink(
                target=strip_markup_only(target.split("#")[0]),
                display=strip_markup_only(display.split("#")[0]) if display else None,
            )
        )
    return links


def parse_objectives(
    lines: Sequence[str],
    map_aliases: AliasTable,
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[FreeTextObjective]:
    objectives: list[FreeTextObjective] = []
    for line in lines:
        clean = strip_markup_only(line)

        if _PVE_NOTE.search(line) and objectives:
            alternate = extract_count(clean, vocabulary=vocabulary)
            if alternate is not None:
                objectives[-1] = replace(objectives[-1], alternate_count=alternate)
            continue
        if _NOTE_LINE.match(line.strip()):
            continue

        links = wiki_links(line)
        link_maps: list[tuple[str, str]] = []
        map_link_indexes: set[int] = set()
        for index, link in enumerate(links):
            for candidate in (link.target, link.display):
                if not candidate:
                    continue
                canonical = map_aliases.resolve(candidate)
                if canonical is not None:
                    link_maps.append((candidate, canonical))
                    map_link_indexes.add(index)

        maps = [
            canonical
            for mention, canonical in link_maps
            if not is_excluded_map_mention(clean, mention)
        ]
        if not maps:
            maps = extract_maps_from_text(clean, map_aliases)

        items = filter_items(
            (
                select_link_label(link, map_aliases, vocabulary=vocabulary)
                for index, link in enumerate(links)
                if index not in map_link_indexes
            ),
            vocabulary=vocabulary,
        )
        objectives.append(
            FreeTextObjective(
                text=clean,
                count=extract_count(
                    clean, [link.target for link in links], vocabulary=vocabulary
                ),
                maps=tuple(dict.fromkeys(maps)),
                items=items,
                links=tuple(links),
            )
        )
    return objectives


def _to_int(value: str) -> int:
    return int(value.replace(",", ""))


def parse_rewards(lines: Sequence[str]) -> FreeTextRewards:
    experience: int | None = None
    money: int | None = None
    reputations: list[TraderReputation] = []
    items: list[RewardItem] = []

    for line in lines:
        clean = strip_markup_only(line)

        if match := _EXPERIENCE.search(clean):
            experience = _to_int(match[1])
            continue
        if match := _REPUTATION.search(clean):
            try:
                value = float(match[3])
            except ValueError:
                continue
            if match[2] not in ("", "+"):
                value = -value
            reputations.append(TraderReputation(trader=match[1], value=value))
            continue
        # only the first amount counts; later ones are bonuses
        if money is None and (match := _MONEY.search(clean)):
            money = _to_int(match[1])
            continue
        if match := _REWARD_ITEM.match(clean):
            items.append(RewardItem(name=match[2].strip(), count=int(match[1])))

    return FreeTextRewards(
        experience=experience,
        reputations=tuple(reputations),
        money=money,
        items=tuple(items),
        raw=tuple(strip_markup_only(line) for line in lines),
    )


def parse_min_level(requirements: Sequence[str]) -> int | None:
    for line in requirements:
        if match := _MIN_LEVEL.search(strip_markup_only(line)):
            return int(match[1])
    return None


def infobox_value(markup: str, field: str) -> str | None:
    pattern = re.compile(
        rf"^\|\s*{re.escape(field)}\s*=[ \t]*(.+)$", re.IGNORECASE | re.MULTILINE
    )
    match = pattern.search(markup)
    return match[1].strip() if match else None


def infobox_links(markup: str, field: str) -> list[str]:
    value = infobox_value(markup, field)
    if value is None:
        return []
    return [strip_markup_only(match[1]) for match in _LINK_TARGET.finditer(value)]


def parse_infobox_maps(markup: str, map_aliases: AliasTable) -> list[str]:
    maps: dict[str, None] = {}
    for field in INFOBOX_MAP_FIELDS:
        raw_value = infobox_value(markup, field)
        if raw_value is None:
            continue
        links = infobox_links(markup, field)
        for link in links:
            canonical = map_aliases.resolve(link)
            if canonical is not None and not is_excluded_map_mention(raw_value, link):
                maps[canonical] = None
        if not links:
            for name in extract_maps_from_text(raw_value, map_aliases):
                maps[name] = None
    return list(maps)


def parse_related_items(markup: str) -> list[RelatedItem]:
    """Rows of the "Related Quest Items" table: item name and requirement text."""

    items: list[RelatedItem] = []
    row: list[str] = []
    in_table = False

    def flush() -> None:
        if len(row) >= 4:
            item_cell = row[1]
            links = wiki_links(item_cell)
            name = links[0].target if links else strip_markup_only(item_cell)
            if name:
                items.append(RelatedItem(name=name, requirement=strip_markup_only(row[3])))
        row.clear()

    for line in markup.split("\n"):
        if not in_table:
            in_table = bool(_RELATED_ITEMS_CAPTION.search(line))
            continue
        trimmed = line.strip()
        if trimmed.startswith("|}"):
            flush()
            break
        if trimmed.startswith("|-"):
            flush()
            continue
        # header rows start with "!"
        if trimmed.startswith("|"):
            row.extend(cell.strip() for cell in _TABLE_CELL_SEPARATOR.split(trimmed[1:]))
    return items


def parse_free_text_task(
    title: str,
    markup: str,
    map_aliases: AliasTable,
    last_revision: Revision | None = None,
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> FreeTextTask:
    requirements = section_lines(markup, REQUIREMENTS_HEADING)
    next_tasks = [name for field in INFOBOX_NEXT_FIELDS for name in infobox_links(markup, field)]
    return FreeTextTask(
        title=title,
        requirements=tuple(requirements),
        objectives=tuple(
            parse_objectives(
                section_lines(markup, OBJECTIVES_HEADING), map_aliases, vocabulary=vocabulary
            )
        ),
        rewards=parse_rewards(section_lines(markup, REWARDS_HEADING)),
        min_player_level=parse_min_level(requirements),
        previous_tasks=tuple(infobox_links(markup, INFOBOX_PREVIOUS_FIELD)),
        next_tasks=tuple(dict.fromkeys(next_tasks)),
        maps=tuple(parse_infobox_maps(markup, map_aliases)),
        related_items=tuple(parse_related_items(markup)),
        last_revision=last_revision,
    )


__all__ = [
    "infobox_links",
    "infobox_value",
    "parse_free_text_task",
    "parse_infobox_maps",
    "parse_min_level",
    "parse_objectives",
    "parse_related_items",
    "parse_rewards",
    "section_lines",
    "wiki_links",
]
