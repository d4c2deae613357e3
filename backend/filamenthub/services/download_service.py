"""Download counting and file retrieval."""
from __future__ import annotations

from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.orm import Session

from ..db.repositories.factory import profile_repo
from ..errors import NotFoundError
from .file_service import FileService


class DownloadService:
    def __init__(self, session: Session) -> None:
        self.repo = profile_repo(session)

    def record_download(self, profile_id: str, user_id: Optional[str] = None) -> int:
        count = self.repo.increment_downloads(profile_id)
        if count is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        logger.info("Profile {} downloaded by {} ({} total)", profile_id, user_id or "anonymous", count)
        return count

    def fetch_file(self, profile_id: str, user_id: Optional[str] = None) -> Tuple[bytes, str]:
        """Return (content, file_name) and count the download."""
        profile = self.repo.get(profile_id)
        if profile is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        if not profile.file_key:
            raise NotFoundError(f"Profile {profile_id} has no stored file")
        try:
            content = FileService.load_file(profile.file_key)
        except FileNotFoundError as e:
            raise NotFoundError(f"File for profile {profile_id} is missing") from e
        self.record_download(profile_id, user_id)
        return content, profile.file_name
