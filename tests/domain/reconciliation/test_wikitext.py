from __future__ import annotations

from taskrecon.domain.model import RelatedItem, RewardItem, TraderReputation, WikiLink
from taskrecon.domain.reconciliation.aliases import build_alias_table
from taskrecon.domain.reconciliation.wikitext import (
    parse_free_text_task,
    parse_infobox_maps,
    parse_related_items,
    parse_rewards,
    section_lines,
    wiki_links,
)
from tests.helpers.tasks import SHORTAGE_MARKUP


def test_shortage_page_parses_into_every_field() -> None:
    table = build_alias_table(["Customs"])

    task = parse_free_text_task("Shortage", SHORTAGE_MARKUP, table)

    assert task.min_player_level == 10
    assert task.previous_tasks == ("Debut",)
    assert task.next_tasks == ("Shootout picnic", "Delivery from the past")
    assert task.maps == ("Customs",)

    lion, scavs = task.objectives
    assert lion.text == "Find 5 Bronze lion figurines in raid"
    assert lion.count == 5
    assert lion.alternate_count == 3
    assert lion.items == ("Bronze lion figurine",)
    assert lion.maps == ()
    assert scavs.text == "Eliminate 5 Scavs on Customs"
    assert scavs.count == 5
    assert scavs.maps == ("Customs",)
    assert scavs.items == ()

    assert task.rewards.experience == 1700
    assert task.rewards.money == 15000
    assert task.rewards.reputations == (TraderReputation(trader="Therapist", value=0.03),)
    assert task.rewards.items == (RewardItem(name="Salewa first aid kit", count=2),)
    assert task.related_items == (
        RelatedItem(name="Bronze lion figurine", requirement="Handover (found in raid)"),
    )


def test_page_without_sections_yields_empty_fields() -> None:
    task = parse_free_text_task("Stub", "Just a stub article.", build_alias_table([]))

    assert task.objectives == ()
    assert task.requirements == ()
    assert task.min_player_level is None
    assert task.next_tasks == ()
    assert task.rewards.experience is None


def test_section_lines_stop_at_next_heading() -> None:
    markup = "==Objectives==\n* First\n===Hints===\n* Hint\n==Rewards==\n* +100 EXP\n"

    assert section_lines(markup, "Objectives") == ["First", "Hint"]
    assert section_lines(markup, "Rewards") == ["+100 EXP"]
    assert section_lines(markup, "Dialogue") == []


def test_wiki_links_skip_files_and_anchors() -> None:
    line = "[[File:Icon.png]] Find [[Bronze lion figurine#Location|the lion]] on [[Customs]]"

    assert wiki_links(line) == [
        WikiLink(target="Bronze lion figurine", display="the lion"),
        WikiLink(target="Customs"),
    ]


def test_only_the_first_money_amount_counts() -> None:
    rewards = parse_rewards(["+2,500 EXP", "25,000 Roubles", "5,000 Roubles (bonus)"])

    assert rewards.experience == 2500
    assert rewards.money == 25000
    assert len(rewards.raw) == 3


def test_infobox_maps_skip_excluded_locations() -> None:
    table = build_alias_table(["Customs", "Factory", "Woods"])
    markup = "{{Infobox quest\n|location = Any location excluding Factory\n}}"

    assert parse_infobox_maps(markup, table) == []

    markup = "{{Infobox quest\n|location = [[Customs]], [[Woods]]\n}}"
    assert parse_infobox_maps(markup, table) == ["Customs", "Woods"]


def test_related_items_without_table_are_empty() -> None:
    assert parse_related_items("==Objectives==\n* Find the stash\n") == []


def test_reputation_penalties_keep_their_sign() -> None:
    rewards = parse_rewards(["[[Fence]] Rep -0.05", "[[Prapor]] Rep \u22120.02", "Skier Rep 0.01"])

    assert rewards.reputations == (
        TraderReputation(trader="Fence", value=-0.05),
        TraderReputation(trader="Prapor", value=-0.02),
        TraderReputation(trader="Skier", value=0.01),
    )
