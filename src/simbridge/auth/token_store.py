"""File-backed bearer token persistence."""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class TokenStore:
    """Read / write the cached bearer token as a plain-text file.

    A missing file, an empty file, or a directory sitting where the file
    should be all mean "no cached token".
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    # -- properties ----------------------------------------------------------

    @property
    def has_token(self) -> bool:
        """Return *True* if a non-empty token file exists."""
        return self.load() is not None

    # -- accessors -----------------------------------------------------------

    def load(self) -> str | None:
        """Return the stored token, or *None*."""
        if not self._path.is_file():
            if self._path.is_dir():
                logger.warning("Token path %s is a directory; ignoring it", self._path)
            return None
        token = self._path.read_text(encoding="utf-8").strip()
        return token or None

    # -- mutators ------------------------------------------------------------

    def save(self, token: str) -> None:
        """Persist *token*, replacing any previous content."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(token, encoding="utf-8")
        with contextlib.suppress(OSError):
            self._path.chmod(0o600)
        logger.debug("Saved bearer token to %s", self._path)

    def clear(self) -> bool:
        """Delete the token file. Returns *True* if a file was removed."""
        if not self._path.is_file():
            return False
        self._path.unlink()
        return True
