"""
Durable key/value storage for client state.

SQLStorage keeps each key as a row of a small SQLAlchemy table (SQLite by default);
MemoryStorage is the in-process equivalent used for guests and in tests.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from moodplaces.core.config import settings

logger = logging.getLogger(__name__)

StorageBase = declarative_base()


class StorageEntry(StorageBase):
    __tablename__ = "client_storage"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SQLStorage:
    """Key/value rows in the `client_storage` table. The table is created on first use."""

    def __init__(self, url: str | None = None):
        url = url or settings.client_storage_url
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self._engine = create_engine(url, connect_args=connect_args)
        StorageBase.metadata.create_all(bind=self._engine)
        self._session_factory = sessionmaker(bind=self._engine, autocommit=False, autoflush=False)

    def get_item(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            entry = session.get(StorageEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            entry = session.get(StorageEntry, key)
            if entry:
                entry.value = value
            else:
                session.add(StorageEntry(key=key, value=value))
            session.commit()

    def remove_item(self, key: str) -> None:
        with self._session_factory() as session:
            entry = session.get(StorageEntry, key)
            if entry:
                session.delete(entry)
                session.commit()

    def close(self) -> None:
        self._engine.dispose()
