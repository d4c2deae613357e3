from __future__ import annotations

import random

from filamenthub.core.reconcile import apply_download, apply_vote, reconcile_vote
from filamenthub.domain.profile import VoteDirection

UP, DOWN = VoteDirection.UP, VoteDirection.DOWN


def tally(profile):
    return profile.upvotes, profile.downvotes, dict(profile.voted_users)


def test_scenario_vote_then_switch(make_profile):
    profiles = [make_profile("a", upvotes=5, downvotes=1)]

    profiles = apply_vote(profiles, "a", "u1", UP)
    assert profiles[0].upvotes == 6
    assert profiles[0].voted_users == {"u1": UP}

    profiles = apply_vote(profiles, "a", "u1", DOWN)
    assert (profiles[0].upvotes, profiles[0].downvotes) == (5, 2)
    assert profiles[0].voted_users == {"u1": DOWN}


def test_retraction_round_trip(make_profile):
    original = [make_profile("a", upvotes=2, downvotes=3, voted_users={"x": UP, "y": UP, "z": DOWN})]
    after = apply_vote(apply_vote(original, "a", "u", UP), "a", "u", None)
    assert tally(after[0]) == tally(original[0])


def test_toggle_law(make_profile):
    original = [make_profile("a", upvotes=1, voted_users={"x": UP})]
    once = apply_vote(original, "a", "u", UP)
    assert tally(apply_vote(once, "a", "u", UP)[0]) == tally(apply_vote(once, "a", "u", None)[0])
    assert tally(apply_vote(once, "a", "u", UP)[0]) == tally(original[0])


def test_switch_law(make_profile):
    original = [make_profile("a", upvotes=4, downvotes=2)]
    result = apply_vote(apply_vote(original, "a", "u", UP), "a", "u", DOWN)[0]
    assert result.upvotes == 4
    assert result.downvotes == 3
    assert result.voted_users["u"] is DOWN


def test_retract_without_vote_is_noop(make_profile):
    profiles = [make_profile("a", upvotes=0)]
    result = apply_vote(profiles, "a", "u", None)
    assert result is profiles
    assert result[0].upvotes == 0


def test_counters_are_floored_at_zero(make_profile):
    # local state already disagrees with the ledger
    profiles = [make_profile("a", upvotes=0, downvotes=0, voted_users={"u": UP})]
    retracted = apply_vote(profiles, "a", "u", None)[0]
    assert retracted.upvotes == 0
    assert retracted.voted_users == {}

    switched = apply_vote(profiles, "a", "u", DOWN)[0]
    assert (switched.upvotes, switched.downvotes) == (0, 1)


def test_unknown_profile_returns_input_unchanged(make_profile):
    profiles = [make_profile("a")]
    assert apply_vote(profiles, "missing", "u", UP) is profiles


def test_only_target_is_replaced(make_profile):
    profiles = [make_profile("a"), make_profile("b"), make_profile("c")]
    snapshot = list(profiles)
    result = apply_vote(profiles, "b", "u", UP)
    assert result is not profiles
    assert result[0] is profiles[0]
    assert result[2] is profiles[2]
    assert result[1] is not profiles[1]
    assert profiles == snapshot
    assert profiles[1].upvotes == 0
    assert profiles[1].voted_users == {}


def test_raw_string_ledger_values_are_understood(make_profile):
    profile = make_profile("a", upvotes=1, voted_users={"u": "up"})
    result = reconcile_vote(profile, "u", UP)
    assert result.upvotes == 0
    assert result.voted_users == {}


def test_ledger_matches_tallies_under_random_actions(make_profile):
    rng = random.Random(3)
    profiles = [make_profile("a"), make_profile("b")]
    users = [f"u{i}" for i in range(6)]
    for _ in range(500):
        profiles = apply_vote(profiles, rng.choice(["a", "b", "gone"]), rng.choice(users), rng.choice([UP, DOWN, None]))
        for p in profiles:
            assert p.upvotes == sum(1 for v in p.voted_users.values() if v is UP)
            assert p.downvotes == sum(1 for v in p.voted_users.values() if v is DOWN)


def test_apply_download(make_profile):
    profiles = [make_profile("a", download_count=4), make_profile("b")]
    result = apply_download(profiles, "a")
    assert result[0].download_count == 5
    assert profiles[0].download_count == 4
    assert result[1] is profiles[1]
    assert apply_download(profiles, "missing") is profiles
