from __future__ import annotations

from datetime import datetime
from typing import Optional

from mysql.connector.errors import IntegrityError

from ..core.enums import WorkplaceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, to_db_datetime
from .model import WorkplaceBinding
from .repository import WorkplaceRepository

_COLUMNS = "binding_id, team_id, channel_id, user_id, workplace_name, status, created_at, updated_at, deleted_at"


def _row_to_binding(r: dict) -> WorkplaceBinding:
    return WorkplaceBinding(
        binding_id=r["binding_id"],
        team_id=r["team_id"],
        channel_id=r["channel_id"],
        user_id=r["user_id"],
        workplace_name=r["workplace_name"],
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        deleted_at=r.get("deleted_at"),
        status=WorkplaceStatus(r["status"]) if r.get("status") else None,
    )


class MySQLWorkplaceRepository(WorkplaceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_composite_key(self, composite_key: str) -> Optional[WorkplaceBinding]:
        with db_cursor(self._conn_factory, operation="get WorkplaceBinding") as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM workplace_bindings
                WHERE composite_key=%s AND deleted_at IS NULL
                LIMIT 1
                """,
                (composite_key,),
            )
            r = fetchone(cur)
            return _row_to_binding(r) if r else None

    def get_by_id(self, binding_id: str) -> Optional[WorkplaceBinding]:
        with db_cursor(self._conn_factory, operation="get WorkplaceBinding") as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM workplace_bindings WHERE binding_id=%s",
                (binding_id,),
            )
            r = fetchone(cur)
            return _row_to_binding(r) if r else None

    def create(self, binding: WorkplaceBinding) -> bool:
        with db_cursor(self._conn_factory, operation="save WorkplaceBinding") as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO workplace_bindings(
                        binding_id, team_id, channel_id, user_id, workplace_name,
                        composite_key, status, created_at, updated_at, deleted_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        binding.binding_id,
                        binding.team_id,
                        binding.channel_id,
                        binding.user_id,
                        binding.workplace_name,
                        binding.composite_key,
                        binding.status.value if binding.status else None,
                        to_db_datetime(binding.created_at),
                        to_db_datetime(binding.updated_at),
                        to_db_datetime(binding.deleted_at),
                    ),
                )
            except IntegrityError:
                # uq_workplace_bindings_composite_key
                return False
            return True

    def set_status(self, binding_id: str, status: WorkplaceStatus, *, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory, operation="update WorkplaceBinding status") as (_, cur):
            cur.execute(
                "UPDATE workplace_bindings SET status=%s, updated_at=%s WHERE binding_id=%s",
                (status.value, to_db_datetime(updated_at), binding_id),
            )
            return cur.rowcount > 0
