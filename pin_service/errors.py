"""Error taxonomy shared by the lifecycle engine and the HTTP boundary."""

from __future__ import annotations


class PinServiceError(RuntimeError):
    status = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PinServiceError):
    status = 400
    default_message = "Invalid request"


class Unauthorized(PinServiceError):
    status = 401
    default_message = "Unauthorized"


class NotFound(PinServiceError):
    status = 404
    default_message = "PIN not found"


class Expired(PinServiceError):
    status = 410
    default_message = "PIN expired"


class AlreadyUsed(PinServiceError):
    status = 410
    default_message = "PIN already used"


class PersistenceError(PinServiceError):
    status = 500
    default_message = "Failed to access the PIN store"


class InternalInconsistency(PinServiceError):
    status = 500
    default_message = "Invalid stored PIN record"


class GenerationExhausted(PinServiceError):
    status = 503
    default_message = "Unable to generate a unique PIN"
