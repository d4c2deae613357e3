"""Pydantic request/response schemas for the Profiles API (camelCase on the wire)."""
from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ...domain.profile import Profile, VoteDirection


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _split_printers(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(v).strip() for v in value if str(v).strip()]


class ProfileUploadIn(_CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    producer: str = Field(..., min_length=1, max_length=200)
    material: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    printers: List[str] = Field(default_factory=list)

    @field_validator("printers", mode="before")
    @classmethod
    def split_printers(cls, value: Any) -> List[str]:
        return _split_printers(value)


class ProfileUpdateIn(_CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    producer: Optional[str] = Field(default=None, min_length=1, max_length=200)
    material: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    printers: Optional[List[str]] = None

    @field_validator("printers", mode="before")
    @classmethod
    def split_printers(cls, value: Any) -> Optional[List[str]]:
        return None if value is None else _split_printers(value)


class ConfigUploadIn(_CamelModel):
    printers: List[str] = Field(default_factory=list)

    @field_validator("printers", mode="before")
    @classmethod
    def split_printers(cls, value: Any) -> List[str]:
        return _split_printers(value)


class VoteIn(_CamelModel):
    direction: VoteDirection


class ProfileOut(_CamelModel):
    id: str
    name: str
    producer: str
    material: str
    description: str
    printers: List[str]
    file_url: str
    file_name: str
    file_size: int = 0
    uploaded_by: str
    config_file_name: Optional[str] = None
    config_file_url: str = ""
    config_printers: List[str] = Field(default_factory=list)
    uploaded_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    download_count: int
    upvotes: int
    downvotes: int
    voted_users: Dict[str, VoteDirection]


class FacetsOut(_CamelModel):
    producers: List[str]
    materials: List[str]
    printers: List[str]


def dump_profile(p: Profile) -> Dict[str, Any]:
    return ProfileOut.model_validate(asdict(p)).model_dump(mode="json", by_alias=True)
