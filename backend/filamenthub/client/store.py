"""Client-side profile state.

``ProfileStore`` owns the cached collection, the current filter selection and
the signed-in user. The collection is only ever replaced wholesale, through
the pure functions in ``filamenthub.core``. Remote writes are submitted to an
executor and not awaited: the local snapshot reflects a vote immediately.

Known gaps, kept on purpose:

* A failed remote write is logged, not rolled back. The next ``refresh()``
  brings the snapshot back in line with the server.
* Two votes issued before the first remote write lands both compute from the
  local snapshot; nothing debounces or sequences them.
"""
from __future__ import annotations

import dataclasses
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from loguru import logger

from ..core.filtering import facet_values, filter_and_sort
from ..core.reconcile import apply_download, apply_vote
from ..domain.profile import FilterSelection, Profile, SortKey, VoteDirection, facet_value


class ProfileBackend(Protocol):
    def fetch_all_profiles(self) -> List[Profile]: ...
    def persist_vote(self, profile_id: str, direction: VoteDirection) -> None: ...
    def retract_vote(self, profile_id: str) -> None: ...
    def record_download(self, profile_id: str) -> None: ...


class ProfileStore:
    def __init__(
        self,
        backend: ProfileBackend,
        user_id: Optional[str] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self.backend = backend
        self.user_id = user_id
        self.executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="profile-writes")
        self._profiles: Sequence[Profile] = []
        self._selection = FilterSelection()

    @property
    def profiles(self) -> Sequence[Profile]:
        return self._profiles

    @property
    def selection(self) -> FilterSelection:
        return self._selection

    @property
    def can_vote(self) -> bool:
        return self.user_id is not None

    def refresh(self) -> Sequence[Profile]:
        self._profiles = list(self.backend.fetch_all_profiles())
        logger.debug("fetched {} profiles", len(self._profiles))
        return self._profiles

    def select(self, **changes: Any) -> FilterSelection:
        """Change filters; facets accept 'all' or None to clear them."""
        for facet in ("producer", "material", "printer"):
            if facet in changes:
                changes[facet] = facet_value(changes[facet])
        if "sort" in changes:
            changes["sort"] = SortKey.parse(changes["sort"])
        if "search" in changes:
            changes["search"] = changes["search"] or ""
        self._selection = dataclasses.replace(self._selection, **changes)
        return self._selection

    def visible(self) -> List[Profile]:
        return filter_and_sort(self._profiles, self._selection)

    def facets(self) -> Dict[str, List[str]]:
        return facet_values(self._profiles)

    def vote_of(self, profile_id: str) -> Optional[VoteDirection]:
        if self.user_id is None:
            return None
        for p in self._profiles:
            if p.id == profile_id:
                return p.voted_users.get(self.user_id)
        return None

    def vote(self, profile_id: str, direction: VoteDirection) -> Optional[Future]:
        """Click on a vote button. Clicking the current direction retracts it."""
        if self.user_id is None:
            logger.debug("vote ignored: no signed-in user")
            return None
        previous = self.vote_of(profile_id)
        action = None if previous == direction else direction
        self._profiles = apply_vote(self._profiles, profile_id, self.user_id, action)
        if action is None:
            return self._submit(self.backend.retract_vote, profile_id)
        return self._submit(self.backend.persist_vote, profile_id, action)

    def retract(self, profile_id: str) -> Optional[Future]:
        if self.user_id is None or self.vote_of(profile_id) is None:
            return None
        self._profiles = apply_vote(self._profiles, profile_id, self.user_id, None)
        return self._submit(self.backend.retract_vote, profile_id)

    def record_download(self, profile_id: str) -> Future:
        self._profiles = apply_download(self._profiles, profile_id)
        return self._submit(self.backend.record_download, profile_id)

    def _submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        future = self.executor.submit(fn, *args)
        future.add_done_callback(lambda f: self._log_failure(fn, args, f))
        return future

    @staticmethod
    def _log_failure(fn: Callable[..., Any], args: tuple, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.warning("remote {}{} failed: {}", getattr(fn, "__name__", fn), args, error)

    def close(self) -> None:
        self.executor.shutdown(wait=True)

    def __enter__(self) -> "ProfileStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
