"""Interactive authentication state machine.

::

    NO_TOKEN -> VERIFYING -> VERIFIED
                          -> NEEDS_INTERACTIVE -> LISTENER_UP -> HAVE_TOKEN
                             -> VERIFYING -> VERIFIED | FAILED

A cached token that the identity check accepts ends the flow immediately.
Otherwise the browser login runs once; if the freshly issued token is also
rejected, or no redirect arrives in time, the state becomes ``FAILED`` and
:class:`AuthError` is raised.
"""

from __future__ import annotations

import logging
import webbrowser
from enum import StrEnum
from typing import TYPE_CHECKING

from simbridge.api.errors import AuthError
from simbridge.auth.oauth import interactive_login, verify_token
from simbridge.models.auth import TokenSource
from simbridge.session import BridgeSession

if TYPE_CHECKING:
    from collections.abc import Callable

    from simbridge.auth.token_store import TokenStore
    from simbridge.models.auth import UserInfo
    from simbridge.models.config import AppSettings

logger = logging.getLogger(__name__)


class AuthState(StrEnum):
    NO_TOKEN = "no_token"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    NEEDS_INTERACTIVE = "needs_interactive"
    LISTENER_UP = "listener_up"
    HAVE_TOKEN = "have_token"
    FAILED = "failed"


class AuthSession:
    """Obtain, validate, cache and reuse the bearer token for one run."""

    def __init__(
        self,
        settings: AppSettings,
        store: TokenStore,
        *,
        open_browser: Callable[[str], object] = webbrowser.open,
        on_prompt: Callable[[str], None] | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._open_browser = open_browser
        self._on_prompt = on_prompt
        self.state = AuthState.NO_TOKEN
        self.history: list[AuthState] = [AuthState.NO_TOKEN]

    def _enter(self, state: AuthState) -> None:
        logger.debug("auth: %s -> %s", self.state, state)
        self.state = state
        self.history.append(state)

    async def authenticate(self) -> BridgeSession:
        """Reuse the cached token if it verifies, otherwise log in via the browser."""
        token = self._store.load()
        self._enter(AuthState.VERIFYING)
        if token:
            user = await self._verify(token)
            if user is not None:
                return self._verified(token, user, TokenSource.CACHED)
            logger.info("Cached token was rejected; requesting a new one")
        else:
            logger.info("No cached token at %s", self._store.path)

        return await self._interactive()

    async def login(self) -> BridgeSession:
        """Force the browser flow regardless of any cached token."""
        return await self._interactive()

    # -- states --------------------------------------------------------------

    async def _interactive(self) -> BridgeSession:
        self._enter(AuthState.NEEDS_INTERACTIVE)

        def _prompt(url: str) -> None:
            self._enter(AuthState.LISTENER_UP)
            if self._on_prompt is not None:
                self._on_prompt(url)

        try:
            token = await interactive_login(
                self._settings.login_url,
                self._settings.callback_port,
                callback_timeout=self._settings.callback_timeout,
                shutdown_timeout=self._settings.shutdown_timeout,
                open_browser=self._open_browser,
                on_prompt=_prompt,
            )
        except AuthError:
            self._enter(AuthState.FAILED)
            raise
        self._enter(AuthState.HAVE_TOKEN)

        self._enter(AuthState.VERIFYING)
        user = await self._verify(token)
        if user is None:
            self._enter(AuthState.FAILED)
            raise AuthError("The token issued by the login page was rejected by /api/user/me")
        return self._verified(token, user, TokenSource.FRESH)

    async def _verify(self, token: str) -> UserInfo | None:
        return await verify_token(
            self._settings.api_url, token, timeout=self._settings.request_timeout
        )

    def _verified(self, token: str, user: UserInfo, source: TokenSource) -> BridgeSession:
        try:
            self._store.save(token)
        except OSError as exc:
            logger.warning("Could not cache the bearer token at %s: %s", self._store.path, exc)
        self._enter(AuthState.VERIFIED)
        return BridgeSession(token=token, source=source, user=user)
