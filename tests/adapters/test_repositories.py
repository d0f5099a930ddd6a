"""Tests for the itinerary repositories."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import psycopg2
import pytest

from heritage_pulse.adapters.persistence import (
    InMemoryItineraryRepository,
    PostgresItineraryRepository,
)
from heritage_pulse.config import PersistenceConfig
from heritage_pulse.domain.errors import PersistenceError
from heritage_pulse.domain.models import ItineraryRecord

CREATED = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


def _record(record_id="itin_abc"):
    return ItineraryRecord(
        id=record_id,
        location_name="New Delhi, Delhi, India",
        days=2,
        preferences={"pace": "moderate"},
        schedule=({"day": 1, "sites": []},),
        summary="A 2-day trip to Delhi",
        created_at=CREATED,
    )


class TestInMemoryItineraryRepository:
    def test_save_and_get(self):
        repository = InMemoryItineraryRepository()

        itinerary_id = repository.save(_record())

        assert itinerary_id == "itin_abc"
        assert repository.get("itin_abc").summary == "A 2-day trip to Delhi"
        assert repository.get("itin_missing") is None

    def test_generates_id_when_missing(self):
        repository = InMemoryItineraryRepository()

        itinerary_id = repository.save(_record(record_id=""))

        assert itinerary_id.startswith("itin_")
        assert repository.get(itinerary_id).id == itinerary_id
        assert len(repository) == 1


@pytest.fixture
def cursor():
    return MagicMock()


@pytest.fixture
def connection(cursor):
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


@pytest.fixture
def repository(connection):
    repository = PostgresItineraryRepository(
        config=PersistenceConfig(database_url="postgresql://localhost/heritage")
    )
    pool = MagicMock()
    pool.closed = False
    pool.getconn.return_value = connection
    repository._pool = pool
    return repository


class TestPostgresItineraryRepository:
    def test_save_commits_and_returns_id(self, repository, connection, cursor):
        cursor.fetchone.return_value = ("itin_abc",)

        assert repository.save(_record()) == "itin_abc"

        sql, row = cursor.execute.call_args[0]
        assert "INSERT INTO itineraries" in sql
        assert row["id"] == "itin_abc"
        assert row["days"] == 2
        connection.commit.assert_called_once()
        repository._pool.putconn.assert_called_once_with(connection)

    def test_get_builds_record(self, repository, cursor):
        cursor.fetchone.return_value = (
            "itin_abc", "New Delhi", 2, {"pace": "relaxed"}, [{"day": 1}], "Trip", CREATED,
        )

        record = repository.get("itin_abc")

        assert record.id == "itin_abc"
        assert record.preferences == {"pace": "relaxed"}
        assert record.schedule == ({"day": 1},)
        assert record.created_at == CREATED

    def test_get_missing(self, repository, cursor):
        cursor.fetchone.return_value = None

        assert repository.get("itin_missing") is None

    def test_database_error_rolls_back(self, repository, connection, cursor):
        cursor.execute.side_effect = psycopg2.OperationalError("connection lost")

        with pytest.raises(PersistenceError) as excinfo:
            repository.save(_record())

        assert excinfo.value.operation == "save"
        connection.rollback.assert_called_once()
        repository._pool.putconn.assert_called_once_with(connection)

    def test_ensure_schema(self, repository, cursor):
        repository.ensure_schema()

        assert "CREATE TABLE IF NOT EXISTS itineraries" in cursor.execute.call_args[0][0]

    def test_first_write_creates_table_once(self, repository, cursor):
        cursor.fetchone.return_value = ("itin_abc",)

        repository.save(_record())
        repository.save(_record("itin_def"))

        statements = [c[0][0] for c in cursor.execute.call_args_list]
        assert "CREATE TABLE IF NOT EXISTS itineraries" in statements[0]
        assert sum("CREATE TABLE" in sql for sql in statements) == 1
        assert sum("INSERT INTO itineraries" in sql for sql in statements) == 2

    def test_first_read_creates_table(self, repository, cursor):
        cursor.fetchone.return_value = None

        repository.get("itin_missing")

        assert "CREATE TABLE" in cursor.execute.call_args_list[0][0][0]

    def test_failed_creation_is_retried(self, repository, cursor):
        cursor.execute.side_effect = [psycopg2.OperationalError("down"), None, None]
        cursor.fetchone.return_value = ("itin_abc",)

        with pytest.raises(PersistenceError):
            repository.save(_record())
        repository.save(_record())

        assert "CREATE TABLE" in cursor.execute.call_args_list[1][0][0]

    def test_schema_creation_can_be_disabled(self, repository, cursor):
        repository.config = PersistenceConfig(
            database_url="postgresql://localhost/heritage", create_schema=False
        )
        cursor.fetchone.return_value = ("itin_abc",)

        repository.save(_record())

        assert all("CREATE TABLE" not in c[0][0] for c in cursor.execute.call_args_list)

    def test_close(self, repository):
        pool = repository._pool

        repository.close()

        pool.closeall.assert_called_once()
        assert repository._pool is None
