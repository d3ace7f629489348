from unittest.mock import MagicMock

import pytest

from jobassist.errors import ProviderMalformedResponse, ProviderUnconfigured, ProviderUnreachable
from jobassist.models import ExperienceLevel, Profile, ProviderKind
from jobassist.scorer import (
    BASE_SCORE,
    HEURISTIC_REASON,
    RelevanceScorer,
    apply_ranking,
    heuristic_score,
    rank_heuristically,
)


# ── heuristic path ───────────────────────────────────────────────────────

def test_react_developer_ranks_above_sales_manager(make_item):
    profile = Profile(skills=("React", "Node.js"))
    items = [make_item("2", title="Sales Manager"), make_item("1", title="React Developer")]

    ranked = rank_heuristically(items, profile)

    assert [i.id for i in ranked] == ["1", "2"]
    assert ranked[0].score > ranked[1].score


def test_zero_overlap_floors_at_base_score(make_item):
    score, reason = heuristic_score(make_item("x", title="Barista"), Profile(skills=("Rust",)))
    assert score == BASE_SCORE
    assert reason == HEURISTIC_REASON


def test_score_stays_within_bounds(make_item):
    skills = tuple(f"skill{n}" for n in range(30))
    item = make_item(
        "x",
        title="Senior " + " ".join(skills),
        location="Remote",
    )
    profile = Profile(
        skills=skills,
        experience_level=ExperienceLevel.SENIOR,
        location="Remote",
        remote_allowed=True,
    )
    score, _ = heuristic_score(item, profile)
    assert 0 <= score <= 100
    # skill contribution is capped at +10
    assert score == BASE_SCORE + 10 + 10 + 5


def test_location_alias_match(make_item):
    profile = Profile(location="New York")
    score, reason = heuristic_score(make_item("x", location="NYC"), profile)
    assert score == BASE_SCORE + 10
    assert "location match" in reason


def test_remote_match_only_when_remote_allowed(make_item):
    item = make_item("x", location="Remote")
    assert heuristic_score(item, Profile(location="Berlin"))[0] == BASE_SCORE
    assert heuristic_score(item, Profile(location="Berlin", remote_allowed=True))[0] == BASE_SCORE + 10


def test_empty_profile_location_gives_no_bonus(make_item):
    assert heuristic_score(make_item("x", location="Austin, TX"), Profile())[0] == BASE_SCORE


def test_level_keyword_bonus(make_item):
    profile = Profile(skills=("React",), experience_level=ExperienceLevel.SENIOR)
    score, reason = heuristic_score(make_item("x", title="Senior React Developer"), profile)
    assert score == BASE_SCORE + 1 + 5
    assert "senior level fit" in reason


def test_skill_match_is_whole_term(make_item):
    profile = Profile(skills=("Java",))
    assert heuristic_score(make_item("x", title="JavaScript Engineer"), profile)[0] == BASE_SCORE


def test_heuristic_is_deterministic(make_item, profile):
    items = [make_item(str(n), title=t) for n, t in enumerate(
        ["React Developer", "Node.js Engineer", "Accountant", "React Node.js Lead"]
    )]
    first = rank_heuristically(items, profile)
    second = rank_heuristically(items, profile)
    assert [(i.id, i.score, i.score_reason) for i in first] == [
        (i.id, i.score, i.score_reason) for i in second
    ]


def test_ties_keep_merge_order(make_item):
    items = [make_item("b"), make_item("a"), make_item("c")]
    assert [i.id for i in rank_heuristically(items, Profile())] == ["b", "a", "c"]


def test_inputs_are_not_mutated(make_item, profile):
    item = make_item("1", title="React Developer")
    rank_heuristically([item], profile)
    assert item.score is None


# ── AI ranking ───────────────────────────────────────────────────────────

def test_apply_ranking_orders_by_score_and_appends_unranked(make_item):
    items = [make_item("a"), make_item("b"), make_item("c")]
    ranking = [
        {"itemIndex": 1, "score": 40, "reason": "ok"},
        {"itemIndex": 3, "score": 95, "reason": "great"},
    ]

    ranked = apply_ranking(items, ranking)

    assert [i.id for i in ranked] == ["c", "a", "b"]
    assert ranked[0].score == 95
    assert ranked[2].score is None


def test_apply_ranking_ignores_unknown_and_repeated_indices(make_item):
    items = [make_item("a"), make_item("b")]
    ranking = [
        {"itemIndex": 2, "score": 80, "reason": ""},
        {"itemIndex": 2, "score": 10, "reason": ""},
        {"itemIndex": 7, "score": 99, "reason": ""},
    ]
    ranked = apply_ranking(items, ranking)
    assert [(i.id, i.score) for i in ranked] == [("b", 80.0), ("a", None)]


def test_apply_ranking_with_no_usable_entry_is_malformed(make_item):
    with pytest.raises(ProviderMalformedResponse):
        apply_ranking([make_item("a")], [{"itemIndex": 5, "score": 50, "reason": ""}])


def test_empty_items_never_call_adapter():
    adapter = MagicMock()
    outcome = RelevanceScorer(adapter).score([], Profile())
    assert outcome.items == []
    assert outcome.used_fallback is False
    assert adapter.call.call_count == 0


def test_ai_ranking_used_when_available(make_item, profile):
    adapter = MagicMock()
    adapter.call.return_value = [
        {"itemIndex": 2, "score": 90, "reason": "skills"},
        {"itemIndex": 1, "score": 30, "reason": "weak"},
    ]
    items = [make_item("1", title="Sales Manager"), make_item("2", title="React Developer")]

    outcome = RelevanceScorer(adapter).score(items, profile)

    assert outcome.used_fallback is False
    assert [i.id for i in outcome.items] == ["2", "1"]
    kind, request = adapter.call.call_args.args
    assert kind == ProviderKind.AI_GENERATE
    assert request.generation == "ranking"
    assert "1. Sales Manager" in request.prompt


@pytest.mark.parametrize("error", [
    ProviderUnreachable("timeout", "llm"),
    ProviderUnconfigured("no key", "llm"),
    ProviderMalformedResponse("not json", "llm"),
])
def test_provider_errors_fall_back_to_heuristic(make_item, profile, error):
    adapter = MagicMock()
    adapter.call.side_effect = error
    items = [make_item("2", title="Sales Manager"), make_item("1", title="React Developer")]

    outcome = RelevanceScorer(adapter).score(items, profile)

    assert outcome.used_fallback is True
    assert [i.id for i in outcome.items] == ["1", "2"]
    assert all(i.score_reason.startswith(HEURISTIC_REASON) for i in outcome.items)


def test_ranking_with_only_unknown_indices_falls_back(make_item, profile):
    adapter = MagicMock()
    adapter.call.return_value = [{"itemIndex": 42, "score": 99, "reason": ""}]
    outcome = RelevanceScorer(adapter).score([make_item("a")], profile)
    assert outcome.used_fallback is True
    assert outcome.items[0].score == BASE_SCORE
