"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction, scoped_session

from authkit.core.extensions import db
from authkit.repositories import RefreshTokenRepository, UserRepository
from authkit.services._shared.errors import StoreFailure
from authkit.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW using the Flask-scoped session.

    Exactly one of commit or rollback runs per scope:

    * clean exit → ``commit()``; a failing commit is rolled back and raised as
      :class:`StoreFailure`;
    * any exception, including ``KeyboardInterrupt``/``SystemExit`` → ``rollback()``
      and the exception propagates unchanged. A failing rollback is logged and
      attached to that exception as a note.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except SQLAlchemyError as commit_exc:
                self._rollback_after(commit_exc)
                raise StoreFailure("commit failed") from commit_exc
            return
        self._rollback_after(exc)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def _rollback_after(self, original: BaseException) -> None:
        """Roll back, keeping any rollback failure attached to ``original``."""
        try:
            self.rollback()
        except Exception as rollback_exc:
            log.error(
                "uow.rollback_failed",
                extra={"error": repr(original)},
                exc_info=rollback_exc,
            )
            original.add_note(f"rollback failed: {rollback_exc!r}")


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Sets the isolation level and ``READ ONLY`` on PostgreSQL/MySQL when it
      owns the transaction.
    - Installs write-guards (ORM flush and raw DML) and always rolls back on exit.
    - Disallows ``commit()``.

    Parameters
    ----------
    isolation_level:
        Transaction isolation level hint, ``"READ COMMITTED"`` by default.
    enforce_db_readonly:
        If ``True`` (default), applies ``SET TRANSACTION READ ONLY`` when supported.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
    )
    _ISOLATION_LEVELS = ("READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE")
    _SET_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._listeners_installed = False
        self._guard_active = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Own a fresh transaction when possible, else attach to the running one.

        When a transaction is already open on the session (autobegin, outer
        test fixture) the scope attaches to it: guards are still installed but
        no ``SET TRANSACTION`` is issued and nothing is rolled back on exit.
        """
        self._txn_ctx = None
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            pass

        self._conn = self.session.connection()
        self._install_listeners()

        if self._txn_ctx is not None and self._conn.dialect.name in self._SET_TRANSACTION_DIALECTS:
            try:
                if self.isolation_level:
                    iso = self.isolation_level.upper().strip()
                    if iso not in self._ISOLATION_LEVELS:
                        raise ValueError(f"Unsupported isolation level: {iso!r}")
                    self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
                if self.enforce_db_readonly:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
            except SQLAlchemyError as exc:
                log.warning("SET TRANSACTION directives failed (%s). Using guards only.", exc)

        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        """Always remove guards. Roll back only if we own the transaction."""
        try:
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._remove_listeners()
            self._conn = None

    def commit(self) -> None:
        """:raises RuntimeError: always, to prevent accidental writes."""
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards ----------------------------------

    def _concrete_session(self) -> Session:
        """Resolve the thread's real session behind a ``scoped_session`` proxy."""
        if isinstance(self.session, scoped_session):
            return self.session()
        return self.session

    def _install_listeners(self) -> None:
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if not self._guard_active:
                return
            if session.new or session.dirty or session.deleted:
                raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if not self._guard_active:
                return
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        event.listen(self._concrete_session(), "before_flush", _before_flush)
        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(target, "before_cursor_execute", _before_cursor_execute)

        self._ro_before_flush = _before_flush
        self._ro_before_cursor_execute = _before_cursor_execute
        self._guard_active = True
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        if not self._listeners_installed:
            return
        # A listener that cannot be detached stays inert.
        self._guard_active = False
        with suppress(InvalidRequestError):
            event.remove(self._concrete_session(), "before_flush", self._ro_before_flush)
        with suppress(InvalidRequestError):
            target = self._conn if self._conn is not None else self.session.get_bind()
            event.remove(target, "before_cursor_execute", self._ro_before_cursor_execute)
        self._listeners_installed = False
