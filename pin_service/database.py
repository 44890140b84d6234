"""SQLAlchemy helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import PinSettings

SQLITE_BUSY_TIMEOUT = 30


class Base(DeclarativeBase):
    pass


def build_url(settings: PinSettings):
    url = make_url(settings.database_url)
    if settings.database_credential is not None:
        url = url.set(password=settings.database_credential.get_secret_value())
    return url


class Database:
    def __init__(self, settings: PinSettings):
        url = build_url(settings)
        connect_args = {}
        if url.get_backend_name() == "sqlite":
            connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
        self.engine = create_engine(url, future=True, connect_args=connect_args)
        self.SessionLocal = sessionmaker(self.engine, expire_on_commit=False, future=True)

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
