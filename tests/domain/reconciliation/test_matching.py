from __future__ import annotations

from typing import TYPE_CHECKING

from taskrecon.domain.model import MatchKind, ObjectiveType
from taskrecon.domain.reconciliation import ReconciliationPolicy, match_objectives
from taskrecon.domain.reconciliation.aliases import build_alias_table
from tests.helpers.tasks import make_free_text_objective, make_item, make_objective

if TYPE_CHECKING:
    from taskrecon.domain.model import StructuredObjective

NO_MAPS = build_alias_table([])

LION = make_item("Bronze lion figurine", short_name="Lion", item_id="lion")


def _hand_over_lions() -> StructuredObjective:
    return make_objective(
        "Hand over 5 Bronze lion figurines, found in raid",
        objective_id="obj-lion",
        objective_type=ObjectiveType.GIVE_ITEM,
        count=5,
        items=(LION,),
        found_in_raid=True,
    )


def test_exact_pass_pairs_the_earliest_free_text_line() -> None:
    structured = [make_objective("Eliminate 5 Scavs", count=5)]
    free_text = [
        make_free_text_objective("Kill 3 Scavs", count=3),
        make_free_text_objective("Eliminate 10 Scavs", count=10),
    ]

    result = match_objectives(structured, free_text, "Example", map_aliases=NO_MAPS)

    assert [(m.free_text.text, m.kind) for m in result.matched] == [
        ("Kill 3 Scavs", MatchKind.EXACT_TEXT)
    ]
    assert result.unmatched_free_text == (free_text[1],)


def test_substring_pass_and_leftovers() -> None:
    stash = make_objective("Locate the hidden stash in the old gas station", objective_id="s1")
    extract = make_objective("Survive and extract from Woods", objective_id="s2")
    stash_line = make_free_text_objective(
        "Locate the hidden stash in the old gas station on Customs"
    )
    watch_line = make_free_text_objective("Obtain the Bronze pocket watch")

    result = match_objectives(
        [stash, extract], [stash_line, watch_line], "Example", map_aliases=NO_MAPS
    )

    assert len(result.matched) == 1
    assert result.matched[0].structured is stash
    assert result.matched[0].free_text is stash_line
    assert result.matched[0].kind is MatchKind.SUBSTRING
    assert result.unmatched_structured == (extract,)
    assert result.unmatched_free_text == (watch_line,)
    assert result.redundant_free_text == ()


def test_ambiguous_substring_is_declined() -> None:
    stash = make_objective("Locate the hidden stash in the old gas station")
    other = make_objective("Survive and extract from Woods", objective_id="obj-2")
    free_text = [
        make_free_text_objective("Locate the hidden stash in the old gas station on Customs"),
        make_free_text_objective("Locate the hidden stash in the old gas station near Woods"),
    ]

    result = match_objectives([stash, other], free_text, "Example", map_aliases=NO_MAPS)

    assert result.matched == ()
    assert len(result.unmatched_free_text) == 2


def test_short_keys_skip_the_substring_pass() -> None:
    stash = make_objective("Locate the hidden stash in the old gas station")
    other = make_objective("Survive and extract from Woods", objective_id="obj-2")
    line = make_free_text_objective("Locate the hidden stash in the old gas station on Customs")
    policy = ReconciliationPolicy(substring_min_tokens=10)

    result = match_objectives(
        [stash, other], [line], "Example", map_aliases=NO_MAPS, policy=policy
    )

    assert result.matched == ()


def test_found_in_raid_hand_over_accepts_a_locate_line() -> None:
    line = make_free_text_objective(
        "Find 5 Bronze lion figurines", count=5, items=("Bronze lion figurine",)
    )

    result = match_objectives([_hand_over_lions()], [line], "Shortage", map_aliases=NO_MAPS)

    assert [m.kind for m in result.matched] == [MatchKind.VERB_ITEM]
    assert result.unmatched_free_text == ()


def test_leftover_locate_line_for_found_in_raid_item_is_redundant() -> None:
    hand_over = make_free_text_objective(
        "Hand over 5 Bronze lion figurines", count=5, items=("Bronze lion figurine",)
    )
    locate = make_free_text_objective(
        "Find 5 Bronze lion figurines in raid", count=5, items=("Bronze lion figurine",)
    )

    result = match_objectives(
        [_hand_over_lions()], [hand_over, locate], "Shortage", map_aliases=NO_MAPS
    )

    assert [(m.free_text, m.kind) for m in result.matched] == [(hand_over, MatchKind.SUBSTRING)]
    assert result.unmatched_free_text == ()
    assert result.redundant_free_text == (locate,)


def test_singleton_pass_pairs_lone_objectives() -> None:
    structured = [make_objective("Survive and extract from Woods")]
    free_text = [make_free_text_objective("Get out of Woods alive")]

    result = match_objectives(structured, free_text, "Example", map_aliases=NO_MAPS)

    assert [m.kind for m in result.matched] == [MatchKind.SINGLETON]


def test_matching_is_one_to_one() -> None:
    structured = [
        make_objective("Eliminate 5 Scavs", objective_id="a"),
        make_objective("Eliminate 10 Scavs", objective_id="b"),
    ]
    free_text = [make_free_text_objective("Eliminate 5 Scavs")]

    result = match_objectives(structured, free_text, "Example", map_aliases=NO_MAPS)

    assert [m.structured.id for m in result.matched] == ["a"]
    assert [objective.id for objective in result.unmatched_structured] == ["b"]
