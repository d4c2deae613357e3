"""Server-side vote writes; the stored tally is the source of truth."""
from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from ..core.reconcile import reconcile_vote
from ..db.repositories.factory import profile_repo
from ..domain.profile import Profile, VoteDirection
from ..errors import NotFoundError


class VoteService:
    def __init__(self, session: Session) -> None:
        self.repo = profile_repo(session)

    def _write(self, profile_id: str, user_id: str, action: Optional[VoteDirection]) -> Profile:
        def step(profile: Profile) -> Profile:
            # A stored write is a "set": re-sending the current direction changes nothing.
            if action is not None and profile.voted_users.get(user_id) == action:
                return profile
            return reconcile_vote(profile, user_id, action)

        updated = self.repo.update_tally(profile_id, step)
        if updated is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        logger.info(
            "vote {} on {} by {} -> +{}/-{}",
            action.value if action else "retract", profile_id, user_id, updated.upvotes, updated.downvotes,
        )
        return updated

    def persist_vote(self, profile_id: str, user_id: str, direction: VoteDirection) -> Profile:
        return self._write(profile_id, user_id, direction)

    def retract_vote(self, profile_id: str, user_id: str) -> Profile:
        return self._write(profile_id, user_id, None)
