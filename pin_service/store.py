"""PIN record store backed by SQLAlchemy.

Every method runs in its own short transaction. The only mutation with a
concurrency requirement, :meth:`PinStore.mark_used`, is a single conditional
``UPDATE ... WHERE used_at IS NULL RETURNING`` statement so that the database
decides which of several concurrent redemptions wins.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from .database import Database
from .errors import InternalInconsistency, PersistenceError
from .models import Pin
from .schemas import PinRecord

LOGGER = logging.getLogger(__name__)

_COLUMNS = tuple(Pin.__table__.c)


def record_from_row(row: Mapping[str, Any]) -> PinRecord:
    """Re-validate a raw store row against the expected record shape."""
    try:
        return PinRecord.model_validate(dict(row))
    except ValueError as exc:
        raise InternalInconsistency("Invalid stored PIN record") from exc


class PinStore:
    def __init__(self, db: Database):
        self.db = db

    def find_by_code(self, code: str) -> Optional[PinRecord]:
        stmt = (
            select(*_COLUMNS)
            .where(Pin.pin == code)
            .order_by(Pin.created_at.desc())
            .limit(1)
        )
        row = self._fetch_one(stmt, "Failed to query PIN store")
        return record_from_row(row) if row is not None else None

    def code_exists(self, code: str) -> bool:
        stmt = select(Pin.id).where(Pin.pin == code).limit(1)
        return self._fetch_one(stmt, "Failed to query PIN store") is not None

    def delete_for_owner(self, owner_id: str) -> int:
        stmt = delete(Pin).where(Pin.user_id == owner_id)
        try:
            with self.db.session() as session:
                removed = session.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            LOGGER.error("Deleting PINs for owner failed: %s", exc)
            raise PersistenceError("Failed to clean existing keys for user") from exc
        return removed

    def insert(
        self,
        code: str,
        owner_id: Optional[str],
        created_at: datetime,
        expires_at: datetime,
    ) -> PinRecord:
        pin = Pin(
            pin=code,
            user_id=owner_id,
            created_at=created_at,
            expires_at=expires_at,
            used_at=None,
        )
        try:
            with self.db.session() as session:
                session.add(pin)
                session.flush()
                record = PinRecord.model_validate(pin)
        except SQLAlchemyError as exc:
            LOGGER.error("Failed to persist PIN: %s", exc)
            raise PersistenceError("Failed to persist PIN") from exc
        except ValueError as exc:
            raise InternalInconsistency("Invalid stored PIN record") from exc
        return record

    def mark_used(self, record_id: str, used_at: datetime) -> Optional[PinRecord]:
        """Set ``used_at`` if, and only if, it is still unset.

        Returns the updated record, or ``None`` when no row matched because a
        concurrent redemption already consumed the PIN.
        """
        stmt = (
            update(Pin)
            .where(Pin.id == record_id, Pin.used_at.is_(None))
            .values(used_at=used_at)
            .returning(*_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = self._fetch_one(stmt, "Failed to update PIN usage")
        return record_from_row(row) if row is not None else None

    def _fetch_one(self, stmt, failure: str) -> Optional[Mapping[str, Any]]:
        try:
            with self.db.session() as session:
                row = session.execute(stmt).mappings().one_or_none()
        except SQLAlchemyError as exc:
            LOGGER.error("%s: %s", failure, exc)
            raise PersistenceError(failure) from exc
        except ValueError as exc:
            raise InternalInconsistency("Invalid stored PIN record") from exc
        return row
