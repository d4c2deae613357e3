"""Profile service encapsulating business rules."""
from __future__ import annotations

import uuid
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy.orm import Session
from werkzeug.datastructures import FileStorage

from ..core.filtering import facet_values, filter_and_sort
from ..db.repositories.factory import profile_repo
from ..domain.catalog import PRINTERS, all_material_names, material_options
from ..domain.profile import FilterSelection, Profile
from ..errors import ConflictError, ForbiddenError, InvalidUploadError, NotFoundError
from .file_service import FileService

REQUIRED_MESSAGES = {
    "name": "Please enter a filament name.",
    "producer": "Please select or add a producer.",
    "material": "Please select or add a material.",
}


def _required(field: str, value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidUploadError(REQUIRED_MESSAGES[field])
    return value


def _clean_printers(printers: Optional[List[str]]) -> List[str]:
    return [p.strip() for p in printers or [] if p.strip()]


class ProfileService:
    def __init__(self, session: Session) -> None:
        self.repo = profile_repo(session)

    def list_profiles(self, selection: FilterSelection | None = None) -> List[Profile]:
        profiles = self.repo.list()
        if selection is None:
            return profiles
        return filter_and_sort(profiles, selection)

    def list_user_profiles(self, user_id: str) -> List[Profile]:
        return self.repo.list(uploaded_by=user_id)

    def get_profile(self, profile_id: str) -> Profile:
        profile = self.repo.get(profile_id)
        if profile is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        return profile

    def _check_name_free(self, name: str, profile_id: str | None = None) -> None:
        clash = self.repo.get_by_name(name)
        if clash and clash.id != profile_id:
            raise ConflictError(f'A profile with the name "{name}" already exists.')

    def upload_profile(
        self,
        *,
        user_id: str,
        name: str,
        producer: str,
        material: str,
        description: str = "",
        printers: Optional[List[str]] = None,
        file: FileStorage | None = None,
    ) -> Profile:
        name = _required("name", name)
        producer = _required("producer", producer)
        material = _required("material", material)
        file_name, content = FileService.validate_profile_file(file)
        self._check_name_free(name)

        stored = FileService.store_profile_file(file_name, content)
        profile = Profile(
            id=str(uuid.uuid4()),
            name=name,
            producer=producer,
            material=material,
            description=description.strip(),
            printers=_clean_printers(printers),
            file_url=stored.url,
            file_name=stored.file_name,
            file_key=stored.key,
            file_size=stored.size,
            uploaded_by=user_id,
        )
        try:
            created = self.repo.create(profile)
        except ConflictError:
            # lost a race on the unique name after the check above
            FileService.delete_file(stored.key)
            raise
        logger.info("Profile {} '{}' uploaded by {}", created.id, created.name, user_id)
        return created

    def _owned(self, profile_id: str, user_id: str) -> Profile:
        profile = self.get_profile(profile_id)
        if profile.uploaded_by != user_id:
            raise ForbiddenError("Only the uploader can change this profile")
        return profile

    def update_profile(self, profile_id: str, user_id: str, **fields) -> Profile:
        self._owned(profile_id, user_id)
        for field in REQUIRED_MESSAGES:
            if field in fields:
                fields[field] = _required(field, fields[field])
        if "description" in fields:
            fields["description"] = (fields["description"] or "").strip()
        if "printers" in fields:
            fields["printers"] = _clean_printers(fields["printers"])
        if "name" in fields:
            self._check_name_free(fields["name"], profile_id)
        updated = self.repo.update(profile_id, **fields)
        if updated is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        return updated

    def attach_config(
        self,
        profile_id: str,
        user_id: str,
        *,
        printers: Optional[List[str]] = None,
        file: FileStorage | None = None,
    ) -> Profile:
        """Attach (or replace) the printer-specific config file of a profile."""
        previous = self._owned(profile_id, user_id)
        printers = _clean_printers(printers)
        if not printers:
            raise InvalidUploadError("Please select a printer for this config file.")
        file_name, content = FileService.validate_profile_file(file)

        stored = FileService.store_profile_file(file_name, content, prefix="configs")
        updated = self.repo.attach_config(
            profile_id, file_key=stored.key, file_name=stored.file_name, printers=printers
        )
        if updated is None:
            FileService.delete_file(stored.key)
            raise NotFoundError(f"Profile {profile_id} not found")
        if previous.config_file_key and previous.config_file_key != stored.key:
            FileService.delete_file(previous.config_file_key)
        logger.info("Config {} attached to profile {} for {}", stored.key, profile_id, ", ".join(printers))
        return updated

    def delete_profile(self, profile_id: str, user_id: str) -> bool:
        profile = self._owned(profile_id, user_id)
        deleted = self.repo.delete(profile_id)
        if deleted:
            FileService.delete_file(profile.file_key)
            FileService.delete_file(profile.config_file_key)
            logger.info("Profile {} deleted by {}", profile_id, user_id)
        return deleted

    def facets(self) -> Dict[str, List[str]]:
        """Producers and printers in use; materials merged with the catalogue."""
        stored = facet_values(self.repo.list())
        return {
            "producers": stored["producers"],
            "materials": sorted(set(all_material_names()) | set(stored["materials"])),
            "printers": sorted(set(PRINTERS) | set(stored["printers"])),
        }

    def material_options(self) -> List[Dict[str, str]]:
        return material_options(self.repo.distinct_values("material"))
