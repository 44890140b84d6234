"""PIN lifecycle: issuance and exactly-once redemption."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .config import PinSettings
from .errors import AlreadyUsed, Expired, GenerationExhausted, NotFound, ValidationError
from .generator import PinGenerator
from .schemas import PinRecord
from .store import PinStore

LOGGER = logging.getLogger(__name__)

MAX_OWNER_ID_LENGTH = 64
MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 64


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def mask_pin(code: str) -> str:
    return f"{code[:4]}…" if len(code) > 4 else code


def normalize_pin(code: str) -> str:
    return code.strip().upper()


class PinLifecycle:
    """Issues PINs and redeems them at most once.

    Expiry is checked before use-state: a PIN that has passed ``expires_at``
    reports :class:`Expired` whether or not it was redeemed earlier.
    """

    def __init__(
        self,
        settings: PinSettings,
        store: PinStore,
        generator: Optional[PinGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.settings = settings
        self.store = store
        self.generator = generator or PinGenerator(settings.pin_alphabet, settings.pin_length)
        self.clock = clock

    # Issuance ----------------------------------------------------------
    def issue(self, owner_id: Optional[str] = None, ttl_minutes: Optional[int] = None) -> PinRecord:
        ttl = self._validate_issue(owner_id, ttl_minutes)
        if owner_id is not None:
            removed = self.store.delete_for_owner(owner_id)
            if removed:
                LOGGER.info("Removed %d prior PIN(s) for owner %s", removed, owner_id)

        code = self._unique_code()
        created_at = self.clock()
        expires_at = created_at + timedelta(minutes=ttl)
        record = self.store.insert(code, owner_id, created_at, expires_at)
        LOGGER.info("Issued PIN %s expiring at %s", mask_pin(record.pin), record.expires_at.isoformat())
        return record

    def _validate_issue(self, owner_id: Optional[str], ttl_minutes: Optional[int]) -> int:
        if owner_id is not None:
            if not isinstance(owner_id, str) or not owner_id:
                raise ValidationError("ownerId must be a non-empty string")
            if len(owner_id) > MAX_OWNER_ID_LENGTH:
                raise ValidationError(f"ownerId must be at most {MAX_OWNER_ID_LENGTH} characters")
        if ttl_minutes is None:
            return self.settings.default_ttl_minutes
        if isinstance(ttl_minutes, bool) or not isinstance(ttl_minutes, int):
            raise ValidationError("ttlMinutes must be an integer")
        if not 0 < ttl_minutes <= self.settings.max_ttl_minutes:
            raise ValidationError(f"ttlMinutes must be between 1 and {self.settings.max_ttl_minutes}")
        return ttl_minutes

    def _unique_code(self) -> str:
        for attempt in range(1, self.settings.max_generation_attempts + 1):
            candidate = self.generator.generate()
            if not self.store.code_exists(candidate):
                return candidate
            LOGGER.warning("PIN collision on attempt %d, regenerating", attempt)
        raise GenerationExhausted()

    # Redemption --------------------------------------------------------
    def redeem(self, code: str) -> PinRecord:
        if not isinstance(code, str):
            raise ValidationError("pin must be a string")
        code = normalize_pin(code)
        if not MIN_CODE_LENGTH <= len(code) <= MAX_CODE_LENGTH:
            raise ValidationError(
                f"pin must be between {MIN_CODE_LENGTH} and {MAX_CODE_LENGTH} characters"
            )

        record = self.store.find_by_code(code)
        if record is None:
            raise NotFound()

        now = self.clock()
        if record.expires_at < now:
            raise Expired()
        if record.used_at is not None:
            raise AlreadyUsed()

        updated = self.store.mark_used(record.id, now)
        if updated is None:
            # Lost the race to a concurrent redemption.
            LOGGER.info("PIN %s consumed concurrently", mask_pin(code))
            raise AlreadyUsed()
        LOGGER.info("Redeemed PIN %s", mask_pin(code))
        return updated
