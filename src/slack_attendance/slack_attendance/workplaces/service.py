from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.ids import new_id
from ..common.validators import require_non_empty
from ..core.enums import WorkplaceStatus
from ..core.exceptions import AlreadySubscribedError, BindingNotFoundError
from .model import WorkplaceBinding, composite_key
from .repository import WorkplaceRepository

logger = logging.getLogger(__name__)


class WorkplaceService:
    """Use case: bind a Slack team/channel/user to a workplace."""

    def __init__(self, workplaces: WorkplaceRepository, *, tz: tzinfo):
        self._workplaces = workplaces
        self._tz = tz

    def find_binding(self, *, team_id: str, channel_id: str, user_id: str) -> Optional[WorkplaceBinding]:
        return self._workplaces.get_by_composite_key(composite_key(team_id, channel_id, user_id))

    def require_binding(self, *, team_id: str, channel_id: str, user_id: str) -> WorkplaceBinding:
        binding = self.find_binding(team_id=team_id, channel_id=channel_id, user_id=user_id)
        if not binding:
            raise BindingNotFoundError("WorkplaceBinding not found")
        return binding

    def subscribe(
        self,
        *,
        team_id: str,
        channel_id: str,
        user_id: str,
        workplace_name: str,
        now: datetime | None = None,
    ) -> WorkplaceBinding:
        workplace_name = require_non_empty(workplace_name, "workplace_name")
        now = now or now_local(self._tz)

        # PersistenceError from the lookup propagates: only "nothing found" may proceed.
        if self.find_binding(team_id=team_id, channel_id=channel_id, user_id=user_id):
            raise AlreadySubscribedError("already subscribed to workplace")

        binding = WorkplaceBinding(
            binding_id=new_id(),
            team_id=team_id,
            channel_id=channel_id,
            user_id=user_id,
            workplace_name=workplace_name,
            created_at=now,
            updated_at=now,
            deleted_at=None,
            status=WorkplaceStatus.NO_HISTORY,
        )
        if not self._workplaces.create(binding):
            raise AlreadySubscribedError("already subscribed to workplace")

        logger.info("workplace subscribed: %s -> %s (%s)", binding.composite_key, workplace_name, binding.binding_id)
        return binding
