"""Filament profile ORM model compatible with PostgreSQL(Supabase), MySQL and SQLite."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from ..base import Base


class ProfileModel(Base):
    __tablename__ = "filament_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # UUID string
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    producer: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    material: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    printers: Mapped[List[str]] = mapped_column(JSON, default=list)

    file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_key: Mapped[Optional[str]] = mapped_column(String(500), default=None)
    file_size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    uploaded_by: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    config_file_name: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    config_file_key: Mapped[Optional[str]] = mapped_column(String(500), default=None)
    config_printers: Mapped[List[str]] = mapped_column(JSON, default=list)

    download_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    upvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    downvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    voted_users: Mapped[Dict[str, str]] = mapped_column(JSON, default=dict)

    uploaded_at: Mapped[datetime] = mapped_column(default=func.now(), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now(), nullable=False)
