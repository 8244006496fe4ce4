"""Settings repository for app-level key/value pairs."""

from __future__ import annotations

from typing import Callable, ContextManager, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ...errors import PersistenceError
from ...models.ledger import utcnow
from ...models.settings import AppSetting


class SQLModelSettingsRepository:
    """SQLModel-based key-value repository.

    Database errors surface as ``PersistenceError``.
    """

    def __init__(self, session_factory: Callable[[], ContextManager[Session]]):
        self.session_factory = session_factory

    def get_value(self, key: str) -> Optional[str]:
        try:
            with self.session_factory() as session:
                setting = session.get(AppSetting, key)
                return setting.value if setting else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not read {key!r}.") from exc

    def set_value(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, str]) -> None:
        try:
            with self.session_factory() as session:
                for key, value in values.items():
                    setting = session.get(AppSetting, key)
                    if setting:
                        setting.value = value
                        setting.updated_at = utcnow()
                    else:
                        session.add(AppSetting(key=key, value=value))
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError("Could not save settings.") from exc

    def keys(self) -> list[str]:
        with self.session_factory() as session:
            return list(session.exec(select(AppSetting.key)).all())


__all__ = ["SQLModelSettingsRepository"]
