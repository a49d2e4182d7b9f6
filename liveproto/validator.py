from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from .errors import ErrorCode, ProtocolError, StatusCode

SCHEMA_DIR = Path(__file__).parent / "schemas"

# Mapping schema name -> filename (relative to SCHEMA_DIR)
SCHEMA_REGISTRY: Dict[str, str] = {
    "push_frame": "push_frame.json",
    "room_params": "room_params.json",
}


def _schema_path(name: str) -> Optional[Path]:
    filename = SCHEMA_REGISTRY.get(name)
    if not filename:
        return None
    path = SCHEMA_DIR / filename
    return path if path.exists() else None


@lru_cache(maxsize=8)
def load_schema(name: str) -> Optional[dict]:
    """Load JSON schema by registry name if present."""
    path = _schema_path(name)
    if not path:
        return None
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def _validate(instance: Dict[str, Any], name: str, code: ErrorCode) -> None:
    schema = load_schema(name)
    if not schema:
        return
    try:
        jsonschema.validate(instance=instance, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ProtocolError(StatusCode.BAD_REQUEST, code, f"Schema validation failed: {exc.message}") from exc


def validate_frame(frame: Dict[str, Any]) -> None:
    """Check the structure of an outbound frame (see ``PushFrame.to_schema_dict``)."""
    _validate(frame, "push_frame", ErrorCode.INVALID_FRAME)


def validate_room_params(params: Dict[str, Any]) -> None:
    """Room parameters become the endpoint query string; ``room_id`` must be numeric."""
    _validate(params, "room_params", ErrorCode.INVALID_PARAMS)


__all__ = ["load_schema", "validate_frame", "validate_room_params"]
