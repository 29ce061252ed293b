"""Tests for the authentication state machine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from simbridge.api.errors import AuthError
from simbridge.auth.session import AuthSession, AuthState
from simbridge.auth.token_store import TokenStore
from simbridge.bridge import run_bridge
from simbridge.models.auth import TokenSource

if TYPE_CHECKING:
    from collections.abc import Callable

    from pytest_httpx import HTTPXMock

    from simbridge.models.config import AppSettings

ME_URL = "http://ingest.test/api/user/me"

INTERACTIVE = [
    AuthState.NO_TOKEN,
    AuthState.VERIFYING,
    AuthState.NEEDS_INTERACTIVE,
    AuthState.LISTENER_UP,
    AuthState.HAVE_TOKEN,
    AuthState.VERIFYING,
]


def _no_browser(url: str) -> None:
    raise AssertionError(f"browser should not open: {url}")


def _accept(httpx_mock: HTTPXMock, token: str, user_id: int = 7) -> None:
    httpx_mock.add_response(
        url=ME_URL,
        match_headers={"Authorization": f"Bearer {token}"},
        json={"id": user_id, "name": "pilot"},
    )


def _reject(httpx_mock: HTTPXMock, token: str) -> None:
    httpx_mock.add_response(
        url=ME_URL, match_headers={"Authorization": f"Bearer {token}"}, status_code=401
    )


class TestCachedToken:
    async def test_verified_cached_token_skips_browser(
        self, httpx_mock: HTTPXMock, settings: AppSettings
    ) -> None:
        store = TokenStore(settings.token_path)
        store.save("cached-token")
        _accept(httpx_mock, "cached-token")

        auth = AuthSession(settings, store, open_browser=_no_browser)
        session = await auth.authenticate()

        assert session.token == "cached-token"
        assert session.source is TokenSource.CACHED
        assert session.user is not None and session.user.id == 7
        assert auth.state is AuthState.VERIFIED
        assert auth.history == [AuthState.NO_TOKEN, AuthState.VERIFYING, AuthState.VERIFIED]

    async def test_rejected_cached_token_triggers_login(
        self,
        httpx_mock: HTTPXMock,
        settings: AppSettings,
        browser: Callable[[str], Callable[[str], object]],
    ) -> None:
        store = TokenStore(settings.token_path)
        store.save("expired")
        _reject(httpx_mock, "expired")
        _accept(httpx_mock, "abc123")

        auth = AuthSession(settings, store, open_browser=browser("abc123"))
        session = await auth.authenticate()

        assert session.token == "abc123"
        assert session.source is TokenSource.FRESH
        assert store.load() == "abc123"


class TestInteractive:
    async def test_missing_token_runs_browser_flow(
        self,
        httpx_mock: HTTPXMock,
        settings: AppSettings,
        browser: Callable[[str], Callable[[str], object]],
    ) -> None:
        _accept(httpx_mock, "abc123")
        prompts: list[str] = []

        auth = AuthSession(
            settings,
            TokenStore(settings.token_path),
            open_browser=browser("abc123"),
            on_prompt=prompts.append,
        )
        session = await auth.authenticate()

        assert session.token == "abc123"
        assert settings.token_path.read_text() == "abc123"
        assert auth.history == [*INTERACTIVE, AuthState.VERIFIED]
        assert len(prompts) == 1

    async def test_directory_in_place_of_token_file(
        self,
        httpx_mock: HTTPXMock,
        settings: AppSettings,
        browser: Callable[[str], Callable[[str], object]],
    ) -> None:
        settings.token_path.mkdir()
        _accept(httpx_mock, "abc123")

        store = TokenStore(settings.token_path)
        auth = AuthSession(settings, store, open_browser=browser("abc123"))
        session = await auth.authenticate()

        assert session.token == "abc123"
        assert session.source is TokenSource.FRESH
        assert auth.history == [*INTERACTIVE, AuthState.VERIFIED]
        assert settings.token_path.is_dir()

    async def test_rejected_fresh_token_fails(
        self,
        httpx_mock: HTTPXMock,
        settings: AppSettings,
        browser: Callable[[str], Callable[[str], object]],
    ) -> None:
        _reject(httpx_mock, "bogus")

        store = TokenStore(settings.token_path)
        auth = AuthSession(settings, store, open_browser=browser("bogus"))
        with pytest.raises(AuthError, match="rejected"):
            await auth.authenticate()

        assert auth.state is AuthState.FAILED
        assert auth.history == [*INTERACTIVE, AuthState.FAILED]
        assert store.load() is None

    async def test_login_ignores_cached_token(
        self,
        httpx_mock: HTTPXMock,
        settings: AppSettings,
        browser: Callable[[str], Callable[[str], object]],
    ) -> None:
        store = TokenStore(settings.token_path)
        store.save("still-valid")
        _accept(httpx_mock, "replacement")

        auth = AuthSession(settings, store, open_browser=browser("replacement"))
        session = await auth.login()

        assert session.token == "replacement"
        assert store.load() == "replacement"

    async def test_no_redirect_times_out(self, settings: AppSettings) -> None:
        quick = settings.model_copy(update={"callback_timeout": 0.1})
        auth = AuthSession(quick, TokenStore(quick.token_path), open_browser=lambda url: None)
        with pytest.raises(AuthError, match="No login redirect"):
            await auth.authenticate()
        assert auth.state is AuthState.FAILED
        assert auth.history[-2:] == [AuthState.LISTENER_UP, AuthState.FAILED]


class TestLoginThenRun:
    async def test_fresh_login_reaches_dispatch_loop(
        self,
        httpx_mock: HTTPXMock,
        settings: AppSettings,
        browser: Callable[[str], Callable[[str], object]],
        connection: Any,
        frames: dict[str, Any],
    ) -> None:
        _accept(httpx_mock, "abc123")
        httpx_mock.add_response(
            url="http://ingest.test/api/aircraft/register?name=C172",
            match_headers={"Authorization": "Bearer abc123"},
            text="42",
        )
        httpx_mock.add_response(
            url="http://ingest.test/api/position",
            method="POST",
            match_headers={"Authorization": "Bearer abc123"},
        )
        connection.push(frames["data"](1, frames["report"]("C172")))
        connection.push(frames["quit"]())

        store = TokenStore(settings.token_path)
        auth = AuthSession(settings, store, open_browser=browser("abc123"))
        session = await auth.authenticate()
        stats = await run_bridge(connection, session, settings)

        assert settings.token_path.read_text() == "abc123"
        assert stats.forwarded == 1
        assert session.aircraft_ids == {"C172": 42}
        assert connection.closed
