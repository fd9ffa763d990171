"""
log_entry.py

Dataclass für einen Audit-Logeintrag.

• from_row()  – baut das Objekt aus einer DB-Zeile / einem Dict
• as_dict()   – liefert für die GUI zusätzlich die lokale Werkszeit
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

import core.helpers.date_time_helper as dt


@dataclass(slots=True)
class LogEntry:
    id: Optional[int]
    timestamp: datetime          # immer UTC
    log_level: str
    user_id: Optional[int]
    username: Optional[str]
    feature: str
    event: str
    reference_id: Optional[str]
    message: Optional[str]

    @classmethod
    def from_row(cls, data: Mapping[str, Any]) -> "LogEntry":
        ts = data["timestamp"]
        if isinstance(ts, str):
            ts = datetime.fromisoformat(ts)
        return cls(
            id=data["id"] if "id" in data.keys() else None,
            timestamp=ts,
            log_level=data["log_level"] or "INFO",
            user_id=data["user_id"],
            username=data["username"],
            feature=data["feature"] or "",
            event=data["event"] or "",
            reference_id=data["reference_id"],
            message=data["message"],
        )

    def as_dict(self) -> dict:
        utc_iso = self.timestamp.replace(microsecond=0).isoformat()
        return {
            "id": self.id,
            "timestamp_utc": utc_iso,
            "timestamp": dt.utc_to_local_str(utc_iso),
            "log_level": self.log_level,
            "user_id": self.user_id,
            "username": self.username,
            "feature": self.feature,
            "event": self.event,
            "reference_id": self.reference_id,
            "message": self.message,
        }
