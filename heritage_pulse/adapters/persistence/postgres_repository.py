"""PostgreSQL itinerary repository.

Connections come from a psycopg2 ``ThreadedConnectionPool`` borrowed
through ``connection()``, which commits on clean exit, rolls back on
exception and always returns the connection to the pool:

    with repo.connection() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1")
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

import psycopg2
import psycopg2.pool
from psycopg2.extras import Json

from ...config import PersistenceConfig, get_config
from ...domain.errors import PersistenceError
from ...domain.ids import generate_id
from ...domain.models import ItineraryRecord

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS itineraries (
    id            TEXT PRIMARY KEY,
    location_name TEXT NOT NULL,
    days          INTEGER NOT NULL,
    preferences   JSONB NOT NULL DEFAULT '{}'::jsonb,
    schedule      JSONB NOT NULL DEFAULT '[]'::jsonb,
    summary       TEXT,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

_INSERT_SQL = """
INSERT INTO itineraries (id, location_name, days, preferences, schedule, summary, created_at)
VALUES (%(id)s, %(location_name)s, %(days)s, %(preferences)s, %(schedule)s, %(summary)s, %(created_at)s)
RETURNING id
"""

_SELECT_SQL = """
SELECT id, location_name, days, preferences, schedule, summary, created_at
FROM itineraries
WHERE id = %s
"""


@dataclass
class PostgresItineraryRepository:
    """Itinerary storage in a PostgreSQL ``itineraries`` table.

    Implements ItineraryRepositoryPort. The pool is created on first use,
    and unless ``config.create_schema`` is off the table is created in the
    same transaction as the first read or write.

    Attributes:
        config: Persistence configuration (DSN and pool bounds)
    """

    config: PersistenceConfig = field(default_factory=lambda: get_config().persistence)

    _pool: Optional[psycopg2.pool.ThreadedConnectionPool] = field(default=None, repr=False)
    _pool_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _schema_ready: bool = field(default=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_pool(self) -> psycopg2.pool.ThreadedConnectionPool:
        with self._pool_lock:
            if self._pool is None or self._pool.closed:
                self._pool = psycopg2.pool.ThreadedConnectionPool(
                    minconn=self.config.min_connections,
                    maxconn=self.config.max_connections,
                    dsn=self.config.database_url,
                    connect_timeout=self.config.connect_timeout_seconds,
                )
            return self._pool

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Borrow a pooled connection inside a transaction."""
        pool = self._get_pool()
        conn = pool.getconn()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            pool.putconn(conn)

    def ensure_schema(self) -> None:
        """Create the itineraries table if it does not exist."""
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(SCHEMA_SQL)
        except psycopg2.Error as e:
            raise PersistenceError("Could not create schema", cause=e, operation="ensure_schema")
        self._schema_ready = True

    def _prepare(self, cur: Any) -> None:
        """Create the table inside the caller's transaction if still needed."""
        if not self._schema_ready and self.config.create_schema:
            cur.execute(SCHEMA_SQL)

    def save(self, record: ItineraryRecord) -> str:
        row = {
            "id": record.id or generate_id("itin"),
            "location_name": record.location_name,
            "days": record.days,
            "preferences": Json(dict(record.preferences)),
            "schedule": Json([dict(day) for day in record.schedule], dumps=_dumps),
            "summary": record.summary,
            "created_at": record.created_at,
        }
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    self._prepare(cur)
                    cur.execute(_INSERT_SQL, row)
                    itinerary_id = cur.fetchone()[0]
        except psycopg2.Error as e:
            raise PersistenceError("Could not save itinerary", cause=e, operation="save")
        self._schema_ready = True

        self._logger.info("Itinerary saved", extra={"itinerary_id": itinerary_id})
        return str(itinerary_id)

    def get(self, itinerary_id: str) -> Optional[ItineraryRecord]:
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    self._prepare(cur)
                    cur.execute(_SELECT_SQL, (itinerary_id,))
                    row = cur.fetchone()
        except psycopg2.Error as e:
            raise PersistenceError("Could not load itinerary", cause=e, operation="get")
        self._schema_ready = True

        if row is None:
            return None
        id_, location_name, days, preferences, schedule, summary, created_at = row
        return ItineraryRecord(
            id=str(id_),
            location_name=location_name,
            days=int(days),
            preferences=preferences or {},
            schedule=tuple(schedule or ()),
            summary=summary or "",
            created_at=created_at,
        )

    def close(self) -> None:
        """Close all pooled connections (call at shutdown)."""
        with self._pool_lock:
            if self._pool is not None and not self._pool.closed:
                self._pool.closeall()
            self._pool = None


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)
