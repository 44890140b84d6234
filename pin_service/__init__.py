"""Single-use PIN issuing and redemption service."""

from .app import create_app
from .config import PinSettings
from .generator import PinGenerator
from .lifecycle import PinLifecycle
from .store import PinStore

__all__ = [
    "create_app",
    "PinSettings",
    "PinGenerator",
    "PinLifecycle",
    "PinStore",
]
