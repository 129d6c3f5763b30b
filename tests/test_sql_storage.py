"""Tests for the SQLAlchemy storage backend on in-memory SQLite."""

import json

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.pool import StaticPool

from profile_accounts.manager import AccountManager
from profile_accounts.models import AccountUser, Scope
from profile_accounts.services import (
    DuplicateError,
    InMemoryEventBus,
    InMemoryJobQueue,
    NotFoundError,
    SqlAccountStorage,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def sql_storage(engine):
    storage = SqlAccountStorage(engine=engine, blob_table="accounts", index_table="accounts_data")
    storage.create_tables()
    return storage


def count_rows(storage, table):
    with storage._connect() as conn:
        return conn.execute(select(func.count()).select_from(table)).scalar_one()


class TestBlobTable:

    def test_insert_and_fetch(self, sql_storage):
        sql_storage.insert_blob("alice", '{"a": 1}')
        assert sql_storage.fetch_blob("alice") == '{"a": 1}'
        assert sql_storage.fetch_blob("bob") is None

    def test_duplicate_insert(self, sql_storage):
        sql_storage.insert_blob("alice", "{}")
        with pytest.raises(DuplicateError):
            sql_storage.insert_blob("alice", "{}")

    def test_update(self, sql_storage):
        sql_storage.insert_blob("alice", "{}")
        sql_storage.update_blob("alice", '{"b": 2}')
        assert sql_storage.fetch_blob("alice") == '{"b": 2}'

    def test_update_missing(self, sql_storage):
        with pytest.raises(NotFoundError):
            sql_storage.update_blob("nobody", "{}")

    def test_delete_is_idempotent(self, sql_storage):
        sql_storage.insert_blob("alice", "{}")
        sql_storage.delete_blob("alice")
        sql_storage.delete_blob("alice")
        assert sql_storage.fetch_blob("alice") is None


class TestIndexTable:

    def test_insert_and_select(self, sql_storage):
        sql_storage.insert_index_rows("alice", [("email", "a@example.com"), ("twitter", "@a")])
        sql_storage.insert_index_rows("bob", [("email", "b@example.com")])

        rows = sql_storage.select_index_rows("email", ["a@example.com", "b@example.com", "x"])

        assert [(row.uid, row.value) for row in rows] == [
            ("alice", "a@example.com"),
            ("bob", "b@example.com"),
        ]

    def test_select_with_no_values(self, sql_storage):
        assert sql_storage.select_index_rows("email", []) == []

    def test_insert_nothing(self, sql_storage):
        sql_storage.insert_index_rows("alice", [])
        assert count_rows(sql_storage, sql_storage.accounts_data) == 0

    def test_delete_rows_of_one_user(self, sql_storage):
        sql_storage.insert_index_rows("alice", [("email", "a@example.com")])
        sql_storage.insert_index_rows("bob", [("email", "b@example.com")])

        sql_storage.delete_index_rows("alice")

        rows = sql_storage.select_index_rows("email", ["a@example.com", "b@example.com"])
        assert [row.uid for row in rows] == ["bob"]


class TestTransaction:

    def test_commit(self, sql_storage):
        with sql_storage.transaction("alice"):
            sql_storage.insert_blob("alice", "{}")
            sql_storage.insert_index_rows("alice", [("email", "a@example.com")])
        assert sql_storage.fetch_blob("alice") == "{}"
        assert count_rows(sql_storage, sql_storage.accounts_data) == 1

    def test_rollback_on_error(self, sql_storage):
        with pytest.raises(RuntimeError):
            with sql_storage.transaction("alice"):
                sql_storage.insert_blob("alice", "{}")
                sql_storage.insert_index_rows("alice", [("email", "a@example.com")])
                raise RuntimeError("boom")

        assert sql_storage.fetch_blob("alice") is None
        assert count_rows(sql_storage, sql_storage.accounts_data) == 0

    def test_nested_transaction_joins_outer(self, sql_storage):
        with pytest.raises(RuntimeError):
            with sql_storage.transaction("alice"):
                with sql_storage.transaction("alice"):
                    sql_storage.insert_blob("alice", "{}")
                raise RuntimeError("boom")
        assert sql_storage.fetch_blob("alice") is None


class TestConnection:

    def test_check_connection(self, sql_storage):
        sql_storage.check_connection()


class TestManagerOnSql:

    @pytest.fixture
    def sql_manager(self, sql_storage, audit_logger, settings):
        return AccountManager(
            storage=sql_storage,
            job_scheduler=InMemoryJobQueue(),
            event_bus=InMemoryEventBus(),
            audit_logger=audit_logger,
            settings=settings,
        )

    def test_save_search_delete(self, sql_manager, sql_storage, user):
        account = sql_manager.get_account(user)
        account.set_property("twitter", "@alice", Scope.PUBLISHED.value)
        sql_manager.update_account(account)

        data = json.loads(sql_storage.fetch_blob("alice"))
        assert data["twitter"] == {
            "value": "@alice",
            "scope": "v2-published",
            "verified": "0",
            "verificationData": "",
        }
        assert sql_manager.search_users("twitter", ["@alice"]) == {"@alice": "alice"}
        assert sql_manager.search_users("email", ["alice@example.com"]) == {
            "alice@example.com": "alice",
        }

        sql_manager.delete(user)

        assert sql_storage.fetch_blob("alice") is None
        assert count_rows(sql_storage, sql_storage.accounts_data) == 0

    def test_other_users_are_untouched(self, sql_manager, sql_storage, user):
        sql_manager.get(user)
        sql_manager.get(AccountUser(uid="bob", display_name="Bob"))

        sql_manager.delete(user)

        assert sql_storage.fetch_blob("bob") is not None
        assert count_rows(sql_storage, sql_storage.accounts_data) == 6
