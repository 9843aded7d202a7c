"""
Booth sign-in state.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class AuthState:
    """Access token of the signed-in booth. Lives in memory only."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def sign_in(self, token: str) -> None:
        self._token = token
        logger.info("booth signed in")

    def sign_out(self) -> None:
        if self._token is not None:
            logger.info("booth signed out")
        self._token = None

    def headers(self) -> dict[str, str]:
        if self._token is None:
            return {}
        return {"Authorization": f"Bearer {self._token}"}


__all__ = ("AuthState",)
