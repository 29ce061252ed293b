"""Login URL construction, token verification, and the interactive browser flow."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from simbridge.api.client import IngestClient
from simbridge.api.errors import AuthError, SimBridgeError
from simbridge.api.user import UserAPI
from simbridge.auth.server import OAuthCallbackServer

if TYPE_CHECKING:
    from collections.abc import Callable

    from simbridge.models.auth import UserInfo

logger = logging.getLogger(__name__)


def build_login_url(login_url: str, redirect_uri: str) -> str:
    """Append ``redirect_uri`` to the identity provider's login page URL."""
    sep = "&" if "?" in login_url else "?"
    return f"{login_url}{sep}{urlencode({'redirect_uri': redirect_uri})}"


async def verify_token(api_url: str, token: str, *, timeout: float = 10.0) -> UserInfo | None:
    """Return the user owning *token*, or *None* if the service does not accept it.

    Network failures count as "not verified": the caller falls back to the
    interactive flow instead of trusting an unchecked token.
    """
    async with IngestClient(api_url, token, timeout=timeout) as client:
        try:
            user = await UserAPI(client).me()
        except SimBridgeError as exc:
            logger.info("Token verification failed: %s", exc)
            return None
        except ValueError as exc:
            logger.warning("Unreadable /api/user/me response: %s", exc)
            return None
    logger.info("Token verified for user %s (id=%d)", user.name or "?", user.id)
    return user


async def interactive_login(
    login_url: str,
    port: int,
    *,
    callback_timeout: float | None = 300.0,
    shutdown_timeout: float = 60.0,
    open_browser: Callable[[str], object] = webbrowser.open,
    on_prompt: Callable[[str], None] | None = None,
) -> str:
    """Run the browser login and return the token from the loopback redirect.

    1. Start the loopback listener
    2. Open the browser at the login page with ``redirect_uri`` pointing back
    3. Wait for the single redirect carrying ``?token=``
    4. Shut the listener down (bounded by *shutdown_timeout*)
    """
    server = OAuthCallbackServer(port=port)
    server.start()
    try:
        url = build_login_url(login_url, server.redirect_uri)
        if on_prompt is not None:
            on_prompt(url)
        logger.info("Opening browser at %s", url)
        open_browser(url)

        try:
            token = await asyncio.wait_for(
                asyncio.wrap_future(server.result), timeout=callback_timeout
            )
        except TimeoutError as exc:
            raise AuthError(
                f"No login redirect received within {callback_timeout:.0f}s"
            ) from exc
    finally:
        await asyncio.to_thread(server.stop, timeout=shutdown_timeout)

    return token
