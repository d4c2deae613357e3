"""Domain dataclasses for filament profiles (DB-agnostic)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"

    @classmethod
    def parse(cls, value: Any) -> Optional["VoteDirection"]:
        """Map a wire value to a direction; unknown values map to None."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


class SortKey(str, Enum):
    NEWEST = "newest"
    VOTES = "votes"
    DOWNLOADS = "downloads"

    @classmethod
    def parse(cls, value: Any) -> "SortKey":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.NEWEST


ALL = "all"


def facet_value(value: Optional[str]) -> Optional[str]:
    """Convert the boundary 'all' sentinel (or blank) to None, meaning no filter."""
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == ALL:
        return None
    return value


@dataclass(slots=True)
class Profile:
    id: str
    name: str
    producer: str
    material: str
    description: str = ""
    file_url: str = ""
    file_name: str = ""
    file_key: Optional[str] = None
    file_size: int = 0
    uploaded_by: str = ""
    printers: List[str] = field(default_factory=list)
    # Optional printer-specific config attached after upload.
    config_file_name: Optional[str] = None
    config_file_key: Optional[str] = None
    config_file_url: str = ""
    config_printers: List[str] = field(default_factory=list)
    uploaded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    download_count: int = 0
    upvotes: int = 0
    downvotes: int = 0
    voted_users: Dict[str, VoteDirection] = field(default_factory=dict)

    @property
    def net_score(self) -> int:
        return self.upvotes - self.downvotes


@dataclass(slots=True, frozen=True)
class FilterSelection:
    """Facets plus sort key. A facet set to None is not filtered on."""

    producer: Optional[str] = None
    material: Optional[str] = None
    printer: Optional[str] = None
    search: str = ""
    sort: SortKey = SortKey.NEWEST

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "FilterSelection":
        return cls(
            producer=facet_value(params.get("producer")),
            material=facet_value(params.get("material")),
            printer=facet_value(params.get("printer")),
            search=params.get("search") or "",
            sort=SortKey.parse(params.get("sort") or SortKey.NEWEST),
        )


def parse_ledger(raw: Optional[Mapping[str, Any]]) -> Dict[str, VoteDirection]:
    ledger: Dict[str, VoteDirection] = {}
    for user_id, value in (raw or {}).items():
        direction = VoteDirection.parse(value)
        if direction is None:
            logger.warning("dropping unknown vote value {!r} for user {}", value, user_id)
            continue
        ledger[str(user_id)] = direction
    return ledger


def dump_ledger(ledger: Mapping[str, VoteDirection]) -> Dict[str, str]:
    return {user_id: direction.value for user_id, direction in ledger.items()}
