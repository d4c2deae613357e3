"""SQLAlchemy engine/session initialization and lifecycle management."""
from __future__ import annotations

from flask import Flask
from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool


class Database:
    def __init__(self) -> None:
        self.engine = None
        self.Session = None  # type: ignore[assignment]

    def init_app(self, app: Flask) -> None:
        url: str = app.config["DATABASE_URL"]
        echo: bool = app.config.get("SQL_ECHO", False)

        if url.startswith("sqlite"):
            # One shared connection so an in-memory database survives across sessions.
            self.engine = create_engine(
                url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                future=True,
            )
        else:
            self.engine = create_engine(
                url,
                echo=echo,
                pool_pre_ping=True,
                pool_size=app.config.get("POOL_SIZE", 10),
                max_overflow=app.config.get("MAX_OVERFLOW", 20),
                future=True,
            )
        self.Session = scoped_session(
            sessionmaker(bind=self.engine, expire_on_commit=False, autoflush=False, future=True)
        )

        if app.config.get("AUTO_CREATE_TABLES"):
            self.create_all()

        @app.teardown_appcontext
        def remove_session(_: object | None) -> None:
            if self.Session is not None:
                self.Session.remove()

    def create_all(self) -> None:
        from .base import Base
        from .models import profile  # noqa: F401

        assert self.engine is not None, "engine is not initialized"
        Base.metadata.create_all(self.engine)
        logger.info("Tables created on {}", self.engine.url.render_as_string(hide_password=True))


db = Database()
