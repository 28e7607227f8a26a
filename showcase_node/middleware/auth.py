"""Session-token authentication for the read API.

The engine does not authenticate anyone. An external auth layer issues
session tokens; this module only extracts the token from a request and checks
it against a validator.

The token can be sent as:
- `Authorization: Bearer <token>` header
- `X-Session-Token: <token>` header
- `?session_token=<token>` query parameter

Configuration via environment variables:

- `SHOWCASE_SESSION_TOKENS`: comma-separated accepted tokens. When unset, every
  read is denied (there is no anonymous leaderboard).
"""
from __future__ import annotations

import hmac
import logging
from typing import Iterable

from starlette.requests import Request

from showcase_node.config.runtime import RuntimeSettings

logger = logging.getLogger(__name__)


class StaticSessionValidator:
    """Accepts a fixed set of tokens. Callable as `validator(token) -> bool`."""

    def __init__(self, tokens: Iterable[str]):
        self._tokens = tuple(t for t in tokens if t)

    def __call__(self, token: str | None) -> bool:
        if not token:
            return False
        return any(hmac.compare_digest(token, accepted) for accepted in self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    @classmethod
    def from_settings(cls, settings: RuntimeSettings) -> "StaticSessionValidator":
        validator = cls(settings.session_tokens)
        if len(validator):
            logger.info("session auth enabled (%d tokens)", len(validator))
        else:
            logger.warning("no session tokens configured, all leaderboard reads will be denied")
        return validator


def extract_session_token(request: Request) -> str | None:
    """Extract the session token from a request, or None."""
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        if token:
            return token

    token = request.headers.get("x-session-token")
    if token:
        return token.strip()

    token = request.query_params.get("session_token")
    if token:
        return token.strip()

    return None
