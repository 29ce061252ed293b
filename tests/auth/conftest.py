"""Fixtures for talking to the loopback callback listener."""

from __future__ import annotations

import urllib.error
import urllib.request
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlsplit

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable

# Ignore any proxy configured in the environment; the listener is on loopback.
_OPENER = urllib.request.build_opener(urllib.request.ProxyHandler({}))


def _fetch(url: str) -> tuple[int, str]:
    try:
        with _OPENER.open(url, timeout=5) as resp:
            return resp.status, resp.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        return exc.code, exc.read().decode("utf-8")


@pytest.fixture()
def fetch() -> Callable[[str], tuple[int, str]]:
    """GET *url* and return ``(status, body)`` without raising on 4xx."""
    return _fetch


@pytest.fixture()
def browser() -> Callable[[str], Callable[[str], object]]:
    """Build an ``open_browser`` stand-in that follows the login redirect with *token*."""

    def _make(token: str) -> Callable[[str], object]:
        def _open(login_url: str) -> object:
            redirect = parse_qs(urlsplit(login_url).query)["redirect_uri"][0]
            return _fetch(f"{redirect}?token={token}")

        return _open

    return _make
