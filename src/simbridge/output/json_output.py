from __future__ import annotations

import dataclasses
import json
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel


def _serialize(obj: Any) -> Any:
    """Convert *obj* to a JSON-friendly structure.

    Pydantic models are dumped by alias (the service's wire names),
    dataclasses via :func:`dataclasses.asdict`, lists element-wise.
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True, exclude_none=True)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, list):
        return [_serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {key: _serialize(value) for key, value in obj.items()}
    return obj


def _now() -> str:
    return datetime.now(UTC).isoformat()


def format_json_response(*, data: Any, command: str) -> str:
    """Return ``{"ok": true, "command", "data", "timestamp"}`` as indented JSON."""
    envelope: dict[str, Any] = {
        "ok": True,
        "command": command,
        "data": _serialize(data),
        "timestamp": _now(),
    }
    return json.dumps(envelope, indent=2, default=str)


def format_json_error(*, code: str, message: str, command: str, **extra: Any) -> str:
    """Return ``{"ok": false, "command", "error": {code, message, ...}, "timestamp"}``."""
    envelope: dict[str, Any] = {
        "ok": False,
        "command": command,
        "error": {"code": code, "message": message, **extra},
        "timestamp": _now(),
    }
    return json.dumps(envelope, indent=2, default=str)
