"""Pair structured objectives with free-text objective lines.

Matching is a fold of four passes over an immutable :class:`MatchState`. Each
pass only looks at what earlier passes left unmatched, so the result is a
partial one-to-one pairing in both directions:

1. exact normalized key, earliest free-text index wins;
2. substring of a long enough key, only when exactly one candidate qualifies;
3. same verb intent plus a shared item alias, with a found-in-raid hand-over
   also accepting a free-text "locate" line;
4. singleton, when nothing matched and one objective remains on each side.

Free-text "locate" lines left over after the passes whose items are already
covered by a found-in-raid structured objective are restatements of that
objective and land in ``redundant_free_text``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING

from taskrecon.domain.model import MatchKind, ObjectiveIntent

from .aliases import alias_set_intersects, build_alias_set, has_item_intersection
from .normalize import classify_intent, normalize
from .policy import DEFAULT_POLICY
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taskrecon.domain.model import FreeTextObjective, StructuredObjective

    from .aliases import AliasTable
    from .policy import ReconciliationPolicy

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ObjectiveMatch:
    structured: StructuredObjective
    free_text: FreeTextObjective
    kind: MatchKind


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchResult:
    matched: tuple[ObjectiveMatch, ...] = ()
    unmatched_structured: tuple[StructuredObjective, ...] = ()
    unmatched_free_text: tuple[FreeTextObjective, ...] = ()
    redundant_free_text: tuple[FreeTextObjective, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class _Side[T]:
    objective: T
    key: str
    intent: ObjectiveIntent | None

    @property
    def tokens(self) -> int:
        return len(self.key.split())


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchInputs:
    """Per-objective keys and intents, computed once before the passes run."""

    structured: tuple[_Side[StructuredObjective], ...]
    free_text: tuple[_Side[FreeTextObjective], ...]
    task_name: str
    policy: ReconciliationPolicy


@dataclass(frozen=True, slots=True)
class MatchState:
    """Pairs found so far as ``(structured index, free-text index, kind)``."""

    pairs: tuple[tuple[int, int, MatchKind], ...] = ()
    structured_used: frozenset[int] = field(default_factory=frozenset)
    free_text_used: frozenset[int] = field(default_factory=frozenset)

    def pair(self, structured_index: int, free_text_index: int, kind: MatchKind) -> MatchState:
        if structured_index in self.structured_used or free_text_index in self.free_text_used:
            raise ValueError("objective already matched")
        return replace(
            self,
            pairs=(*self.pairs, (structured_index, free_text_index, kind)),
            structured_used=self.structured_used | {structured_index},
            free_text_used=self.free_text_used | {free_text_index},
        )

    def open_structured(self, inputs: MatchInputs) -> list[int]:
        return [i for i in range(len(inputs.structured)) if i not in self.structured_used]

    def open_free_text(self, inputs: MatchInputs) -> list[int]:
        return [i for i in range(len(inputs.free_text)) if i not in self.free_text_used]


type MatchPass = Callable[[MatchState, MatchInputs], MatchState]


def exact_pass(state: MatchState, inputs: MatchInputs) -> MatchState:
    for s_index in state.open_structured(inputs):
        key = inputs.structured[s_index].key
        if not key:
            continue
        candidate = next(
            (f for f in state.open_free_text(inputs) if inputs.free_text[f].key == key),
            None,
        )
        if candidate is not None:
            state = state.pair(s_index, candidate, MatchKind.EXACT_TEXT)
    return state


def substring_pass(state: MatchState, inputs: MatchInputs) -> MatchState:
    minimum = inputs.policy.substring_min_tokens
    for s_index in state.open_structured(inputs):
        structured = inputs.structured[s_index]
        if structured.tokens < minimum:
            continue
        candidates = [
            f
            for f in state.open_free_text(inputs)
            if inputs.free_text[f].tokens >= minimum
            and (
                structured.key in inputs.free_text[f].key
                or inputs.free_text[f].key in structured.key
            )
        ]
        if len(candidates) == 1:
            state = state.pair(s_index, candidates[0], MatchKind.SUBSTRING)
        elif candidates:
            log.debug("Ambiguous substring match for %r declined", structured.key)
    return state


def _shares_items(
    candidate: _Side[FreeTextObjective],
    intent: ObjectiveIntent,
    objective: StructuredObjective,
    task_name: str,
) -> bool:
    return candidate.intent is intent and has_item_intersection(
        objective.items, candidate.objective.items, task_name
    )


def verb_item_pass(state: MatchState, inputs: MatchInputs) -> MatchState:
    for s_index in state.open_structured(inputs):
        structured = inputs.structured[s_index]
        objective = structured.objective
        if structured.intent is None or not objective.items:
            continue

        intents = [structured.intent]
        if structured.intent is ObjectiveIntent.HAND_OVER and objective.is_found_in_raid:
            intents.append(ObjectiveIntent.LOCATE)
        open_free = state.open_free_text(inputs)
        candidate = next(
            (
                f
                for intent in intents
                for f in open_free
                if _shares_items(inputs.free_text[f], intent, objective, inputs.task_name)
            ),
            None,
        )
        if candidate is not None:
            state = state.pair(s_index, candidate, MatchKind.VERB_ITEM)
    return state


def singleton_pass(state: MatchState, inputs: MatchInputs) -> MatchState:
    if state.pairs or len(inputs.structured) != 1 or len(inputs.free_text) != 1:
        return state
    return state.pair(0, 0, MatchKind.SINGLETON)


MATCH_PASSES: tuple[MatchPass, ...] = (exact_pass, substring_pass, verb_item_pass, singleton_pass)


def build_inputs(
    structured: Sequence[StructuredObjective],
    free_text: Sequence[FreeTextObjective],
    task_name: str,
    *,
    map_aliases: AliasTable,
    policy: ReconciliationPolicy = DEFAULT_POLICY,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> MatchInputs:
    def key(text: str) -> str:
        return normalize(text, map_aliases=map_aliases, vocabulary=vocabulary)

    return MatchInputs(
        structured=tuple(
            _Side(
                objective=objective,
                key=key(objective.description),
                intent=classify_intent(objective.description, vocabulary=vocabulary),
            )
            for objective in structured
        ),
        free_text=tuple(
            _Side(
                objective=objective,
                key=key(objective.text),
                intent=classify_intent(objective.text, vocabulary=vocabulary),
            )
            for objective in free_text
        ),
        task_name=task_name,
        policy=policy,
    )


def _is_redundant_locate(candidate: _Side[FreeTextObjective], inputs: MatchInputs) -> bool:
    if candidate.intent is not ObjectiveIntent.LOCATE or not candidate.objective.items:
        return False
    return any(
        alias_set_intersects(
            build_alias_set(side.objective.items), candidate.objective.items
        )
        for side in inputs.structured
        if side.objective.is_found_in_raid
    )


def match_objectives(
    structured: Sequence[StructuredObjective],
    free_text: Sequence[FreeTextObjective],
    task_name: str,
    *,
    map_aliases: AliasTable,
    policy: ReconciliationPolicy = DEFAULT_POLICY,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    passes: Sequence[MatchPass] = MATCH_PASSES,
) -> MatchResult:
    inputs = build_inputs(
        structured,
        free_text,
        task_name,
        map_aliases=map_aliases,
        policy=policy,
        vocabulary=vocabulary,
    )
    state = MatchState()
    for match_pass in passes:
        state = match_pass(state, inputs)

    unmatched_free: list[FreeTextObjective] = []
    redundant: list[FreeTextObjective] = []
    for f_index in state.open_free_text(inputs):
        candidate = inputs.free_text[f_index]
        target = redundant if _is_redundant_locate(candidate, inputs) else unmatched_free
        target.append(candidate.objective)

    matched = sorted(state.pairs, key=lambda pair: pair[0])
    return MatchResult(
        matched=tuple(
            ObjectiveMatch(
                structured=inputs.structured[s_index].objective,
                free_text=inputs.free_text[f_index].objective,
                kind=kind,
            )
            for s_index, f_index, kind in matched
        ),
        unmatched_structured=tuple(
            inputs.structured[i].objective for i in state.open_structured(inputs)
        ),
        unmatched_free_text=tuple(unmatched_free),
        redundant_free_text=tuple(redundant),
    )
