from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


class SnapshotStore:
    """JSON snapshot of the bot state, shared with the dashboard process."""

    def __init__(self, data_dir: str):
        self.path = Path(data_dir) / "dashboard_snapshot.json"
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, payload: dict[str, Any]) -> None:
        tmp = self.path.with_suffix(".tmp")
        tmp.write_bytes(orjson.dumps(payload, default=str))
        tmp.replace(self.path)

    def read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"ok": True, "round": None, "analysis": {}, "message": "snapshot not ready"}
        try:
            return orjson.loads(self.path.read_bytes())
        except (OSError, orjson.JSONDecodeError):
            return {"ok": False, "round": None, "analysis": {}, "message": "snapshot parse error"}
