from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import COMPOSITE_KEY_SEPARATOR
from ..core.enums import WorkplaceStatus


def composite_key(team_id: str, channel_id: str, user_id: str) -> str:
    return COMPOSITE_KEY_SEPARATOR.join((team_id, channel_id, user_id))


@dataclass(frozen=True)
class WorkplaceBinding:
    """Domain entity: a Slack team/channel/user bound to one workplace.

    ``status`` mirrors the latest attendance log of the workplace. It is None only
    for rows written before the column existed; the attendance service derives it
    from the log in that case.
    """

    binding_id: str
    team_id: str
    channel_id: str
    user_id: str
    workplace_name: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    status: Optional[WorkplaceStatus] = WorkplaceStatus.NO_HISTORY

    @property
    def composite_key(self) -> str:
        return composite_key(self.team_id, self.channel_id, self.user_id)

    def to_dict(self) -> dict:
        return {
            "id": self.binding_id,
            "team_id": self.team_id,
            "channel_id": self.channel_id,
            "user_id": self.user_id,
            "workplace": self.workplace_name,
            "composite_key": self.composite_key,
            "status": self.status.value if self.status else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }
