"""Unit tests for SQLAlchemyReadOnlyUnitOfWork."""

from __future__ import annotations

import pytest
from authkit.models import User
from authkit.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork
from sqlalchemy import text
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_reads_committed_rows(self, session):
        user = UserFactory(email="reader@example.com")
        session.commit()

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            found = uow.users.find_by_email("reader@example.com")
            assert found.id == user.id

    def test_orm_flush_is_blocked(self, session):
        with pytest.raises(RuntimeError, match="flush blocked"), SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.users.insert_user(email="sneaky@example.com", password_hash="h")

    def test_raw_dml_is_blocked(self, session):
        with pytest.raises(RuntimeError, match="statement blocked"), SQLAlchemyReadOnlyUnitOfWork():
            session.execute(text("DELETE FROM users"))

    def test_commit_is_disallowed(self, session):
        with pytest.raises(RuntimeError), SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.commit()

    def test_guards_are_lifted_after_exit(self, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.users.email_exists("nobody@example.com")

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.insert_user(email="after@example.com", password_hash="h")

        assert session.query(User).filter_by(email="after@example.com").count() == 1
