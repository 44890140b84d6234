"""Flask application exposing the PIN endpoints."""

from __future__ import annotations

import json
import logging
import secrets
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from .auth import AdminAuthorizer, BearerTokenAuthorizer
from .config import PinSettings
from .database import Database
from .errors import PinServiceError, Unauthorized
from .lifecycle import PinLifecycle, mask_pin, utcnow
from .schemas import (
    CreatePinRequest,
    CreatePinResponse,
    ErrorResponse,
    HealthResponse,
    VerifyPinRequest,
    VerifyPinResponse,
)
from .store import PinStore

LOGGER = logging.getLogger(__name__)

STAGE_LABELS = {
    "issue": "Issue",
    "redeem": "Redeem",
}

EVENT_LABELS = {
    ("issue", "start"): "Issuing PIN",
    ("issue", "denied"): "Issue Request Unauthorized",
    ("issue", "success"): "Issued PIN",
    ("redeem", "start"): "Verifying PIN",
    ("redeem", "success"): "PIN Redeemed",
}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


def _truncate(value: str, limit: int = 64) -> str:
    if len(value) <= limit:
        return value
    half = limit // 2
    return f"{value[:half]}…{value[-half:]}"


def _build_payload(req: str, **fields: object) -> dict[str, object]:
    payload: dict[str, object] = {"request_id": req}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, str):
            payload[key] = _truncate(value)
        else:
            payload[key] = value
    return payload


def _log(stage: str, event: str, req: str, level: int = logging.INFO, **fields: object) -> None:
    stage_label = STAGE_LABELS.get(stage, stage.title())
    event_label = EVENT_LABELS.get((stage, event), event)
    payload = json.dumps(_build_payload(req, **fields), indent=2, sort_keys=True)
    message = f"[PIN Service: {stage_label}]: {event_label}\n{payload}"
    LOGGER.log(level, message)


def _error(message: str, status: int):
    return jsonify(ErrorResponse(message=message).model_dump()), status


def create_app(
    settings: PinSettings | None = None,
    authorizer: Optional[AdminAuthorizer] = None,
    lifecycle: Optional[PinLifecycle] = None,
) -> Flask:
    settings = settings or PinSettings()
    if lifecycle is None:
        db = Database(settings)
        db.create_all()
        lifecycle = PinLifecycle(settings, PinStore(db))
    authorizer = authorizer or BearerTokenAuthorizer(settings.admin_token.get_secret_value())

    app = Flask(__name__)
    app.extensions["pin_lifecycle"] = lifecycle
    CORS(app, origins=settings.cors_origins)
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    def create_pin():
        req_id = secrets.token_hex(4)
        if not authorizer(request):
            _log("issue", "denied", req_id, level=logging.WARNING, remote=request.remote_addr)
            raise Unauthorized()
        payload = CreatePinRequest.model_validate(request.get_json(silent=True) or {})
        _log("issue", "start", req_id, owner=payload.owner_id, ttl=payload.ttl_minutes)
        record = lifecycle.issue(payload.owner_id, payload.ttl_minutes)
        _log(
            "issue",
            "success",
            req_id,
            pin=mask_pin(record.pin),
            owner=record.user_id,
            expires_at=record.expires_at.isoformat(),
        )
        return jsonify(CreatePinResponse.from_record(record).model_dump(mode="json")), 201

    def verify_pin():
        payload = VerifyPinRequest.model_validate(request.get_json(silent=True) or {})
        req_id = secrets.token_hex(4)
        _log("redeem", "start", req_id, pin=mask_pin(payload.pin))
        record = lifecycle.redeem(payload.pin)
        _log(
            "redeem",
            "success",
            req_id,
            pin=mask_pin(record.pin),
            owner=record.user_id,
            used_at=record.used_at.isoformat(),
        )
        return jsonify(VerifyPinResponse.from_record(record).model_dump(mode="json"))

    def health():
        response = HealthResponse(service=settings.service_name, time=utcnow())
        return jsonify(response.model_dump(mode="json"))

    for prefix in ("", "/api"):
        app.add_url_rule(f"{prefix}/pins", f"create_pin{prefix}", create_pin, methods=["POST"])
        app.add_url_rule(f"{prefix}/pins/verify", f"verify_pin{prefix}", verify_pin, methods=["POST"])
    app.add_url_rule("/health", "health", health, methods=["GET"])

    @app.after_request
    def apply_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    @app.errorhandler(PinServiceError)
    def handle_pin_error(error: PinServiceError):
        level = logging.ERROR if error.status >= 500 else logging.INFO
        LOGGER.log(level, "Request failed with %s: %s", error.status, error.message)
        return _error(error.message, error.status)

    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(error: SchemaValidationError):
        message = ", ".join(issue["msg"] for issue in error.errors())
        return _error(message, 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return _error(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        LOGGER.exception("Unhandled error", exc_info=error)
        return _error("Internal Server Error", 500)

    return app
