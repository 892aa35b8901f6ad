"""Database bootstrap: create the database, apply ``database/schema.sql`` and
upgrade older ``workplace_bindings`` tables that predate the ``status`` column.

Every statement is idempotent, so this is safe to run on each start.
"""

from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parents[4] / "database" / "schema.sql"

# The target database comes from DB_CONFIG, not from the file.
_DB_SELECTION_RE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;")
_LINE_COMMENT_RE = re.compile(r"(?m)^\s*--.*$")


def split_statements(sql: str) -> Iterator[str]:
    """Yield the statements of a schema script, ignoring ';' inside quoted strings."""

    sql = _LINE_COMMENT_RE.sub("", _DB_SELECTION_RE.sub("", sql))
    start = 0
    quote = None
    for i, ch in enumerate(sql):
        if quote:
            if ch == quote and sql[i - 1] != "\\":
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
    tail = sql[start:].strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with closing(_connect(target, with_database=False)) as conn:
        with closing(conn.cursor()) as cur:
            cur.execute(
                f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )
        conn.commit()


def _ensure_status_column(cur, database: str) -> None:
    cur.execute(
        """
        SELECT COUNT(*) FROM information_schema.COLUMNS
        WHERE TABLE_SCHEMA=%s AND TABLE_NAME='workplace_bindings' AND COLUMN_NAME='status'
        """,
        (database,),
    )
    (count,) = cur.fetchone()
    if not count:
        # rows keep a NULL status; the attendance service derives it from the latest log
        cur.execute("ALTER TABLE workplace_bindings ADD COLUMN status VARCHAR(16) NULL AFTER composite_key")
        logger.info("added workplace_bindings.status to %s", database)


def apply_schema(db_config: dict, *, schema_path: str | Path = DEFAULT_SCHEMA_PATH) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    script = Path(schema_path).read_text(encoding="utf-8")
    with closing(_connect(target)) as conn:
        with closing(conn.cursor()) as cur:
            for stmt in split_statements(script):
                cur.execute(stmt)
            _ensure_status_column(cur, target.database)
        conn.commit()
    logger.info("schema applied to %s@%s:%s/%s", target.user, target.host, target.port, target.database)


def list_tables(db_config: dict) -> list[str]:
    with closing(_connect(DBConfig.from_dict(db_config))) as conn:
        with closing(conn.cursor()) as cur:
            cur.execute("SHOW TABLES")
            return [row[0] for row in cur.fetchall()]
