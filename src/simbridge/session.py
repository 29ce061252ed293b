"""Process-wide state for one bridge run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from simbridge.models.auth import TokenSource, UserInfo


@dataclass
class BridgeSession:
    """Bearer token plus the aircraft-id cache, shared by reference.

    Written only from the event-loop thread that owns the run.
    """

    token: str
    source: TokenSource
    user: UserInfo | None = None
    aircraft_ids: dict[str, int] = field(default_factory=dict)
