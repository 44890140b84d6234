"""Command-line entry point for the PIN service."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from .app import create_app
from .config import PinSettings
from .database import Database
from .errors import PinServiceError
from .lifecycle import PinLifecycle
from .schemas import CreatePinResponse, ErrorResponse, VerifyPinResponse
from .store import PinStore

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Single-use PIN service")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    serve.add_argument("--port", type=int, default=None, help="Port to listen on")

    issue = commands.add_parser("issue", help="Issue a PIN")
    issue.add_argument("--owner", default=None, help="Owner the PIN is bound to")
    issue.add_argument("--ttl", type=int, default=None, help="Lifetime in minutes")

    redeem = commands.add_parser("redeem", help="Redeem a PIN")
    redeem.add_argument("code", help="PIN to redeem")
    return parser.parse_args(argv)


def _lifecycle(settings: PinSettings) -> PinLifecycle:
    db = Database(settings)
    db.create_all()
    return PinLifecycle(settings, PinStore(db))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    settings = PinSettings()

    if args.command == "serve":
        port = args.port or settings.port
        app = create_app(settings)
        LOGGER.info("[%s] listening on port %d", settings.service_name, port)
        app.run(host=args.host, port=port)
        return 0

    lifecycle = _lifecycle(settings)
    try:
        if args.command == "issue":
            record = lifecycle.issue(args.owner, args.ttl)
            payload = CreatePinResponse.from_record(record).model_dump(mode="json")
        else:
            record = lifecycle.redeem(args.code)
            payload = VerifyPinResponse.from_record(record).model_dump(mode="json")
    except PinServiceError as exc:
        print(json.dumps(ErrorResponse(message=exc.message).model_dump()))
        return 1
    print(json.dumps(payload))
    return 0


if __name__ == "__main__":
    sys.exit(main())
