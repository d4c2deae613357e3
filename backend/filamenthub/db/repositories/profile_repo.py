"""SQLAlchemy-backed Profile repository returning dataclasses."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from sqlalchemy import Select, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.profile import ProfileModel
from ...domain.profile import Profile, dump_ledger, parse_ledger
from ...errors import ConflictError

UPDATABLE_FIELDS = {"name", "producer", "material", "description", "printers"}


def _to_dc(m: ProfileModel) -> Profile:
    return Profile(
        id=m.id,
        name=m.name,
        producer=m.producer,
        material=m.material,
        description=m.description or "",
        file_url=m.file_url,
        file_name=m.file_name,
        file_key=m.file_key,
        file_size=m.file_size or 0,
        uploaded_by=m.uploaded_by,
        printers=list(m.printers or []),
        config_file_name=m.config_file_name,
        config_file_key=m.config_file_key,
        config_printers=list(m.config_printers or []),
        uploaded_at=m.uploaded_at,
        created_at=m.created_at,
        updated_at=m.updated_at,
        download_count=m.download_count or 0,
        upvotes=m.upvotes or 0,
        downvotes=m.downvotes or 0,
        voted_users=parse_ledger(m.voted_users),
    )


class ProfileRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _commit(self, name: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            # name is the only unique column besides the primary key
            raise ConflictError(f'A profile with the name "{name}" already exists.') from e

    def list(self, *, uploaded_by: str | None = None) -> List[Profile]:
        stmt: Select = select(ProfileModel).order_by(ProfileModel.uploaded_at.desc())
        if uploaded_by:
            stmt = stmt.where(ProfileModel.uploaded_by == uploaded_by)
        return [_to_dc(m) for m in self.session.scalars(stmt).all()]

    def get(self, profile_id: str) -> Optional[Profile]:
        m = self.session.get(ProfileModel, profile_id)
        return _to_dc(m) if m else None

    def get_by_name(self, name: str) -> Optional[Profile]:
        stmt = select(ProfileModel).where(ProfileModel.name == name).limit(1)
        m = self.session.scalars(stmt).first()
        return _to_dc(m) if m else None

    def distinct_values(self, column: str) -> Iterable[str]:
        col = getattr(ProfileModel, column)
        stmt = select(col).distinct()
        return [v for v in self.session.scalars(stmt).all() if v]

    def create(self, data: Profile) -> Profile:
        now = datetime.now(timezone.utc)
        m = ProfileModel(
            id=data.id or str(uuid.uuid4()),
            name=data.name,
            producer=data.producer,
            material=data.material,
            description=data.description or "",
            printers=list(data.printers or []),
            file_url=data.file_url,
            file_name=data.file_name,
            file_key=data.file_key,
            file_size=data.file_size or 0,
            uploaded_by=data.uploaded_by,
            config_printers=[],
            download_count=0,
            upvotes=0,
            downvotes=0,
            voted_users={},
            uploaded_at=data.uploaded_at or now,
            created_at=now,
            updated_at=now,
        )
        self.session.add(m)
        self._commit(data.name)
        self.session.refresh(m)
        return _to_dc(m)

    def update(self, profile_id: str, **fields) -> Optional[Profile]:
        m = self.session.get(ProfileModel, profile_id)
        if not m:
            return None
        for k, v in fields.items():
            if k in UPDATABLE_FIELDS:
                setattr(m, k, v)
        m.updated_at = datetime.now(timezone.utc)
        self._commit(fields.get("name", m.name))
        self.session.refresh(m)
        return _to_dc(m)

    def attach_config(
        self, profile_id: str, *, file_key: str, file_name: str, printers: List[str]
    ) -> Optional[Profile]:
        m = self.session.get(ProfileModel, profile_id)
        if not m:
            return None
        m.config_file_key = file_key
        m.config_file_name = file_name
        m.config_printers = list(printers)
        m.updated_at = datetime.now(timezone.utc)
        self.session.commit()
        self.session.refresh(m)
        return _to_dc(m)

    def update_tally(self, profile_id: str, fn: Callable[[Profile], Profile]) -> Optional[Profile]:
        """Read the row under lock, apply ``fn`` and store the vote fields it returns."""
        stmt = select(ProfileModel).where(ProfileModel.id == profile_id).with_for_update()
        m = self.session.scalars(stmt).first()
        if not m:
            self.session.rollback()
            return None
        current = _to_dc(m)
        updated = fn(current)
        if updated is not current:
            m.upvotes = updated.upvotes
            m.downvotes = updated.downvotes
            m.voted_users = dump_ledger(updated.voted_users)
            m.updated_at = datetime.now(timezone.utc)
        self.session.commit()
        self.session.refresh(m)
        return _to_dc(m)

    def increment_downloads(self, profile_id: str) -> Optional[int]:
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == profile_id)
            .values(download_count=ProfileModel.download_count + 1)
        )
        result = self.session.execute(stmt)
        self.session.commit()
        if not result.rowcount:
            return None
        return self.session.scalar(
            select(ProfileModel.download_count).where(ProfileModel.id == profile_id)
        )

    def delete(self, profile_id: str) -> bool:
        m = self.session.get(ProfileModel, profile_id)
        if not m:
            return False
        self.session.delete(m)
        self.session.commit()
        return True
