from __future__ import annotations

import hashlib
import json
from typing import Any, Dict


def _normalize(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    if isinstance(value, float):
        # Round so rebuilt geometry with float noise keeps its id.
        return round(float(value), 6)
    return value


def stable_id(prefix: str, payload: Dict[str, Any]) -> str:
    raw = json.dumps(_normalize(dict(payload)), separators=(",", ":"), sort_keys=True).encode("utf-8")
    return f"{prefix}:{hashlib.sha256(raw).hexdigest()[:12]}"


def wall_id(room_id: str, edge_index: int) -> str:
    return stable_id(f"{room_id}:wall", {"room_id": room_id, "edge_index": int(edge_index)})
