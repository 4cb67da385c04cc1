from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AuditLogger:
    """Append-only JSON-lines audit trail.

    Writes are best-effort: a failed write is logged and dropped so it never
    aborts the operation being audited.
    """

    def __init__(self, event_path: Path) -> None:
        self.event_path = event_path
        self.event_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = RLock()

    def log_event(
        self,
        event_type: str,
        actor_id: Optional[str],
        actor_role: Optional[int],
        details: dict[str, Any],
    ) -> None:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "actor_id": actor_id,
            "actor_role": actor_role,
            "details": details,
        }
        try:
            line = json.dumps(payload, default=str)
            with self.lock:
                with self.event_path.open("a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except (OSError, TypeError, ValueError):
            logger.warning("Dropped audit event %s", event_type, exc_info=True)

    def read_events(self) -> list[dict[str, Any]]:
        if not self.event_path.exists():
            return []

        with self.lock:
            lines = self.event_path.read_text(encoding="utf-8").splitlines()

        events: list[dict[str, Any]] = []
        for raw in lines:
            if not raw.strip():
                continue
            try:
                events.append(json.loads(raw))
            except json.JSONDecodeError:
                continue
        return events

    def recent_events(
        self,
        limit: int = 100,
        event_type: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        events = self.read_events()
        if event_type:
            events = [e for e in events if e.get("event_type") == event_type]
        if actor_id:
            events = [e for e in events if e.get("actor_id") == actor_id]
        return list(reversed(events[-limit:]))
