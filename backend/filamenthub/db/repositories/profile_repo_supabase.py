"""Supabase-backed Profile repository using supabase-py v2."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from ...domain.profile import Profile, dump_ledger, parse_ledger
from ...errors import ConflictError

UPDATABLE_FIELDS = {"name", "producer", "material", "description", "printers"}

UNIQUE_VIOLATION = "23505"


def _ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _row_to_dc(row: Dict[str, Any]) -> Profile:
    return Profile(
        id=str(row.get("id")),
        name=row.get("name", ""),
        producer=row.get("producer", ""),
        material=row.get("material", ""),
        description=row.get("description") or "",
        file_url=row.get("file_url", ""),
        file_name=row.get("file_name", ""),
        file_key=row.get("file_key"),
        file_size=int(row.get("file_size") or 0),
        uploaded_by=row.get("uploaded_by", ""),
        printers=list(row.get("printers") or []),
        config_file_name=row.get("config_file_name"),
        config_file_key=row.get("config_file_key"),
        config_printers=list(row.get("config_printers") or []),
        uploaded_at=_ts(row.get("uploaded_at")),
        created_at=_ts(row.get("created_at")),
        updated_at=_ts(row.get("updated_at")),
        download_count=int(row.get("download_count") or 0),
        upvotes=int(row.get("upvotes") or 0),
        downvotes=int(row.get("downvotes") or 0),
        voted_users=parse_ledger(row.get("voted_users")),
    )


class ProfileRepositorySupabase:
    def __init__(self, client: Client, table: str = "filament_profiles") -> None:
        self.client = client
        self.table = client.table(table)

    @staticmethod
    def _execute(query: Any, name: str) -> Any:
        try:
            return query.execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ConflictError(f'A profile with the name "{name}" already exists.') from e
            raise

    def list(self, *, uploaded_by: str | None = None) -> List[Profile]:
        q = self.table.select("*").order("uploaded_at", desc=True)
        if uploaded_by:
            q = q.eq("uploaded_by", uploaded_by)
        res = q.execute()
        rows = res.data or []
        return [_row_to_dc(r) for r in rows]

    def get(self, profile_id: str) -> Optional[Profile]:
        res = self.table.select("*").eq("id", profile_id).limit(1).execute()
        rows = res.data or []
        return _row_to_dc(rows[0]) if rows else None

    def get_by_name(self, name: str) -> Optional[Profile]:
        res = self.table.select("*").eq("name", name).limit(1).execute()
        rows = res.data or []
        return _row_to_dc(rows[0]) if rows else None

    def distinct_values(self, column: str) -> Iterable[str]:
        res = self.table.select(column).execute()
        return sorted({r.get(column) for r in res.data or [] if r.get(column)})

    def create(self, data: Profile) -> Profile:
        now = datetime.now(timezone.utc).isoformat()
        row = {
            "id": data.id or str(uuid.uuid4()),
            "name": data.name,
            "producer": data.producer,
            "material": data.material,
            "description": data.description or "",
            "printers": list(data.printers or []),
            "file_url": data.file_url,
            "file_name": data.file_name,
            "file_key": data.file_key,
            "file_size": data.file_size or 0,
            "uploaded_by": data.uploaded_by,
            "config_printers": [],
            "download_count": 0,
            "upvotes": 0,
            "downvotes": 0,
            "voted_users": {},
            "uploaded_at": now,
            "created_at": now,
            "updated_at": now,
        }
        res = self._execute(self.table.insert(row), data.name)
        created = (res.data or [])[0]
        return _row_to_dc(created)

    def update(self, profile_id: str, **fields) -> Optional[Profile]:
        body = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if not body:
            return self.get(profile_id)
        body["updated_at"] = datetime.now(timezone.utc).isoformat()
        res = self._execute(self.table.update(body).eq("id", profile_id), body.get("name", ""))
        rows = res.data or []
        return _row_to_dc(rows[0]) if rows else None

    def attach_config(
        self, profile_id: str, *, file_key: str, file_name: str, printers: List[str]
    ) -> Optional[Profile]:
        body = {
            "config_file_key": file_key,
            "config_file_name": file_name,
            "config_printers": list(printers),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        res = self.table.update(body).eq("id", profile_id).execute()
        rows = res.data or []
        return _row_to_dc(rows[0]) if rows else None

    def update_tally(self, profile_id: str, fn: Callable[[Profile], Profile]) -> Optional[Profile]:
        # PostgREST has no row locks; this is a plain read-modify-write.
        current = self.get(profile_id)
        if current is None:
            return None
        updated = fn(current)
        if updated is current:
            return current
        body = {
            "upvotes": updated.upvotes,
            "downvotes": updated.downvotes,
            "voted_users": dump_ledger(updated.voted_users),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        res = self.table.update(body).eq("id", profile_id).execute()
        rows = res.data or []
        return _row_to_dc(rows[0]) if rows else updated

    def increment_downloads(self, profile_id: str) -> Optional[int]:
        current = self.get(profile_id)
        if current is None:
            return None
        count = current.download_count + 1
        self.table.update({"download_count": count}).eq("id", profile_id).execute()
        return count

    def delete(self, profile_id: str) -> bool:
        res = self.table.delete().eq("id", profile_id).execute()
        return bool(res.data)
