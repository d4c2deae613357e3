"""Optimistic vote and download tally updates.

Every function here returns new values and leaves its inputs untouched: the
target profile is replaced by a fresh object, every other profile keeps its
identity so consumers can detect changes with ``is`` checks.
"""
from __future__ import annotations

import dataclasses
from typing import List, Optional, Sequence

from ..domain.profile import Profile, VoteDirection


def _index_of(profiles: Sequence[Profile], profile_id: str) -> Optional[int]:
    for i, p in enumerate(profiles):
        if p.id == profile_id:
            return i
    return None


def _counter(direction: VoteDirection) -> str:
    return "upvotes" if direction == VoteDirection.UP else "downvotes"


def reconcile_vote(profile: Profile, user_id: str, action: Optional[VoteDirection]) -> Profile:
    """Apply one vote action to a single profile.

    ``action`` None retracts. Repeating the recorded direction toggles it off.
    Counters never go below zero. Returns ``profile`` itself when nothing changes.
    """
    previous = profile.voted_users.get(user_id)
    if action is not None and action == previous:
        action = None
    if action is None and previous is None:
        return profile

    ledger = dict(profile.voted_users)
    counts = {"upvotes": profile.upvotes, "downvotes": profile.downvotes}

    if previous is not None:
        key = _counter(previous)
        counts[key] = max(0, counts[key] - 1)
    if action is None:
        del ledger[user_id]
    else:
        ledger[user_id] = action
        counts[_counter(action)] += 1

    return dataclasses.replace(profile, voted_users=ledger, **counts)


def apply_vote(
    profiles: Sequence[Profile],
    profile_id: str,
    user_id: str,
    action: Optional[VoteDirection],
) -> Sequence[Profile]:
    """Predict the collection after ``user_id`` votes on ``profile_id``.

    An unknown ``profile_id`` (deleted or stale) returns ``profiles`` as is.
    """
    index = _index_of(profiles, profile_id)
    if index is None:
        return profiles
    updated = reconcile_vote(profiles[index], user_id, action)
    if updated is profiles[index]:
        return profiles
    result: List[Profile] = list(profiles)
    result[index] = updated
    return result


def apply_download(profiles: Sequence[Profile], profile_id: str) -> Sequence[Profile]:
    index = _index_of(profiles, profile_id)
    if index is None:
        return profiles
    target = profiles[index]
    result: List[Profile] = list(profiles)
    result[index] = dataclasses.replace(target, download_count=max(0, target.download_count) + 1)
    return result
