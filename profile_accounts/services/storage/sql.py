"""
SQL Storage Implementation

Stores both account tables in any database SQLAlchemy supports.

DESIGN DECISION: transaction() opens one database transaction and every
statement issued inside it for that thread joins it. The AccountManager
uses this to make the blob write and the index rewrite of one save atomic.
Outside a transaction each call commits on its own.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import (
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from tenacity import retry, stop_after_attempt, wait_exponential

from profile_accounts.config import get_settings
from profile_accounts.services.storage.interface import (
    AccountStorageInterface,
    ConnectionError,
    DuplicateError,
    IndexRow,
    NotFoundError,
)


def build_tables(
    metadata: MetaData,
    blob_table: str = "accounts",
    index_table: str = "accounts_data",
) -> tuple[Table, Table]:
    """Define the blob table and the flattened index table."""
    accounts = Table(
        blob_table,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("uid", String(64), nullable=False, unique=True),
        Column("data", Text, nullable=False, default=""),
    )
    accounts_data = Table(
        index_table,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("uid", String(64), nullable=False, index=True),
        Column("name", String(64), nullable=False),
        Column("value", String(2048), nullable=False, default=""),
        Index(f"{index_table}_name_value", "name", "value"),
    )
    return accounts, accounts_data


class SqlAccountStorage(AccountStorageInterface):
    """SQLAlchemy Core implementation of account storage."""

    def __init__(
        self,
        engine: Optional[Engine] = None,
        blob_table: Optional[str] = None,
        index_table: Optional[str] = None,
    ):
        settings = get_settings().accounts
        self._engine = engine or create_engine(
            settings.database_url,
            echo=settings.echo_sql,
            pool_pre_ping=True,
        )
        self._metadata = MetaData()
        self.accounts, self.accounts_data = build_tables(
            self._metadata,
            blob_table or settings.blob_table,
            index_table or settings.index_table,
        )
        self._local = threading.local()

    def create_tables(self) -> None:
        """Create both tables if they do not exist."""
        self._metadata.create_all(self._engine)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def check_connection(self) -> None:
        """Probe the database; retried a few times at startup."""
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except OperationalError as e:
            raise ConnectionError(f"Failed to connect to account database: {e}") from e

    @contextmanager
    def transaction(self, uid: str) -> Iterator[None]:
        if getattr(self._local, "connection", None) is not None:
            yield
            return
        with self._engine.begin() as conn:
            self._local.connection = conn
            try:
                yield
            finally:
                self._local.connection = None

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        conn = getattr(self._local, "connection", None)
        if conn is not None:
            yield conn
            return
        with self._engine.begin() as conn:
            yield conn

    def fetch_blob(self, uid: str) -> Optional[str]:
        query = select(self.accounts.c.data).where(self.accounts.c.uid == uid)
        with self._connect() as conn:
            row = conn.execute(query).first()
        return None if row is None else row.data

    def insert_blob(self, uid: str, data: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute(insert(self.accounts).values(uid=uid, data=data))
        except IntegrityError as e:
            raise DuplicateError(f"Account record for {uid} already exists") from e

    def update_blob(self, uid: str, data: str) -> None:
        statement = (
            update(self.accounts)
            .where(self.accounts.c.uid == uid)
            .values(data=data)
        )
        with self._connect() as conn:
            result = conn.execute(statement)
        if result.rowcount == 0:
            raise NotFoundError(f"No account record for {uid}")

    def delete_blob(self, uid: str) -> None:
        with self._connect() as conn:
            conn.execute(delete(self.accounts).where(self.accounts.c.uid == uid))

    def delete_index_rows(self, uid: str) -> None:
        with self._connect() as conn:
            conn.execute(delete(self.accounts_data).where(self.accounts_data.c.uid == uid))

    def insert_index_rows(self, uid: str, rows: list[tuple[str, str]]) -> None:
        if not rows:
            return
        with self._connect() as conn:
            conn.execute(
                insert(self.accounts_data),
                [{"uid": uid, "name": name, "value": value} for name, value in rows],
            )

    def select_index_rows(self, name: str, values: list[str]) -> list[IndexRow]:
        if not values:
            return []
        table = self.accounts_data
        query = (
            select(table.c.uid, table.c.name, table.c.value)
            .where(table.c.name == name)
            .where(table.c.value.in_(values))
            .order_by(table.c.id)
        )
        with self._connect() as conn:
            rows = conn.execute(query).all()
        return [IndexRow(uid=row.uid, name=row.name, value=row.value) for row in rows]
