"""Capability checks for administrative endpoints."""

from __future__ import annotations

import hmac
from typing import Protocol

from flask import Request


class AdminAuthorizer(Protocol):
    def __call__(self, request: Request) -> bool:
        ...


class BearerTokenAuthorizer:
    """Accepts ``Authorization: Bearer <token>`` matching the configured secret."""

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("token must not be empty")
        self._token = token.encode("utf-8")

    def __call__(self, request: Request) -> bool:
        header = request.headers.get("Authorization")
        if not header:
            return False
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return False
        return hmac.compare_digest(token.strip().encode("utf-8"), self._token)


class AllowAll:
    def __call__(self, request: Request) -> bool:
        return True
