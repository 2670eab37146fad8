"""Generic repository base for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Access to the session bound to the current Unit of Work.
- Primary-key and criteria lookups.
- Translation of unexpected SQLAlchemy faults into ``StoreFailure``.
- No business logic, no commit/rollback; the Unit of Work owns transactions.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, Generic, ParamSpec, TypeVar, cast

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import InstrumentedAttribute, Session

from authkit.core.extensions import db
from authkit.services._shared.errors import StoreFailure

E = TypeVar("E")  # SQLAlchemy mapped entity type
P = ParamSpec("P")
R = TypeVar("R")


def store_operation(name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap a repository method so raw SQLAlchemy faults surface as ``StoreFailure``.

    Domain errors raised by the method itself pass through untouched; the
    original SQLAlchemy exception is chained as ``__cause__``.

    :param name: Operation name used in the error message (e.g. ``"users.find_by_id"``).
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except SQLAlchemyError as exc:
                raise StoreFailure(f"{name} failed") from exc

        return wrapper

    return decorator


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model``: the SQLAlchemy mapped class.

    This class NEVER:

    * opens/commits/rolls back transactions,
    * implements business rules or cross-aggregate coordination.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``authkit.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session, or the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def add(self, instance: E) -> E:
        """Stage a new entity and flush to materialize defaults and the PK.

        :param instance: New entity instance.
        :returns: The same instance after ``flush()``.
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key, or ``None``."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt: Select[Any] = select(self.model).where(pk_attr == entity_id)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one(self, *criteria: Any) -> E | None:
        """Return the first entity matching the given SQL criteria, or ``None``."""
        stmt: Select[Any] = select(self.model).where(*criteria)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        self.session.flush()
