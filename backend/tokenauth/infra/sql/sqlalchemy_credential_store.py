# comments in English; reST docstrings
from __future__ import annotations

from typing import Any, Final

from sqlalchemy import Engine, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql.expression import Executable

from tokenauth.core.security import RefreshTokenHasher
from tokenauth.core.timeouts import call_with_timeout
from tokenauth.models import AuthRecordRow, Base
from tokenauth.services._shared.errors import PersistenceError
from tokenauth.services._shared.ports import AuthRecord, CredentialStore, verified

UPSERT_DIALECTS: Final[frozenset[str]] = frozenset({"postgresql", "sqlite", "mysql", "mariadb"})
# Columns replaced when the user already has a row
UPDATED_COLUMNS: Final[tuple[str, ...]] = ("refresh_token_hash", "updated_at")


class SQLAlchemyCredentialStore(CredentialStore):
    """
    SQL-backed credential store (table ``auth_records``).

    Each call opens its own short session or connection on the worker thread,
    so none cross threads. ``save`` is one native upsert statement, so two
    concurrent first saves for the same user never race on the primary key.

    :param engine: SQLAlchemy engine on PostgreSQL, SQLite or MySQL/MariaDB.
        SQLite engines must allow cross-thread use.
    :param hasher: Verifier matching the hashes written by the generator.
    :raises RuntimeError: Dialect without a native upsert.
    """

    def __init__(self, engine: Engine, hasher: RefreshTokenHasher | None = None) -> None:
        self.dialect = engine.dialect.name
        if self.dialect not in UPSERT_DIALECTS:
            raise RuntimeError(f"No atomic upsert support for SQL dialect {self.dialect!r}")
        self.engine = engine
        self.hasher = hasher or RefreshTokenHasher()
        self._sessions: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)

    def create_schema(self) -> None:
        """Create the ``auth_records`` table when missing."""
        Base.metadata.create_all(self.engine)

    # -------------------- workers (run off-thread) --------------------

    def _upsert_statement(self, values: dict[str, Any]) -> Executable:
        """Single INSERT ... ON CONFLICT (user_id) DO UPDATE for the engine's dialect."""
        table = AuthRecordRow.__table__
        if self.dialect in ("postgresql", "sqlite"):
            insert = postgresql.insert if self.dialect == "postgresql" else sqlite.insert
            stmt = insert(table).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=[table.c.user_id],
                set_={col: stmt.excluded[col] for col in UPDATED_COLUMNS},
            )
        stmt = mysql.insert(table).values(**values)
        return stmt.on_duplicate_key_update({col: stmt.inserted[col] for col in UPDATED_COLUMNS})

    def _upsert(self, record: AuthRecord) -> None:
        stmt = self._upsert_statement(
            {
                "user_id": record.user_id,
                "refresh_token_hash": record.refresh_token_hash,
                "updated_at": record.updated_at,
            }
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)

    def _load(self, user_id: str) -> AuthRecord | None:
        with self._sessions() as session:
            row = session.scalars(
                select(AuthRecordRow).where(AuthRecordRow.user_id == user_id)
            ).one_or_none()
            if row is None:
                return None
            return AuthRecord(
                user_id=row.user_id,
                refresh_token_hash=row.refresh_token_hash,
                updated_at=row.updated_at,
            )

    def _ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
        return True

    # -------------------- API ------------------------

    def save(self, record: AuthRecord, *, timeout: float) -> None:
        try:
            call_with_timeout(self._upsert, record, timeout=timeout)
        except (TimeoutError, SQLAlchemyError) as exc:
            raise PersistenceError(op="store.sql.save") from exc

    def verify_and_fetch(self, user_id: str, presented_token: str, *, timeout: float) -> AuthRecord:
        op = "store.sql.verify_and_fetch"
        try:
            record = call_with_timeout(self._load, user_id, timeout=timeout)
        except (TimeoutError, SQLAlchemyError) as exc:
            raise PersistenceError(op=op) from exc
        return verified(record, presented_token, self.hasher, op=op)

    def ping(self, *, timeout: float) -> bool:
        try:
            return call_with_timeout(self._ping, timeout=timeout)
        except (TimeoutError, SQLAlchemyError):
            return False
