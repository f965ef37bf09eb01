"""Shared fixtures."""
from datetime import datetime

import pytest
from sqlalchemy import DateTime, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from typed_support.core.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are re-read from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def lenient_numbers(monkeypatch):
    monkeypatch.setenv("TYPED_SUPPORT_LENIENT_NUMBERS", "true")
    get_settings.cache_clear()
    assert get_settings().LENIENT_NUMBERS is True


class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(50))
    surname: Mapped[str] = mapped_column(String(50))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


@pytest.fixture
def session():
    """In-memory SQLite session; objects stay loaded after commit."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine, expire_on_commit=False) as s:
        yield s
    engine.dispose()
