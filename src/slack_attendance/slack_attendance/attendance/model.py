from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceAction


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one start/end event of a workplace.

    ``timestamp`` is kept in its stored text form (ISO-8601 with offset) so the
    month query can match on its ``YYYY-MM`` prefix. ``workplace_name`` is only
    filled for display and is never persisted.
    """

    log_id: str
    team_id: str
    user_id: str
    channel_id: str
    workplace_id: str
    action: AttendanceAction
    timestamp: str
    workplace_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.log_id,
            "team_id": self.team_id,
            "user_id": self.user_id,
            "channel_id": self.channel_id,
            "workplace_id": self.workplace_id,
            "workplace_name": self.workplace_name,
            "action": self.action.value,
            "timestamp": self.timestamp,
        }
