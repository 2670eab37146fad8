"""Unit tests for TransactionCoordinator."""

from __future__ import annotations

import time

import pytest
from authkit.models import User
from authkit.services._shared.deadline import Deadline
from authkit.services._shared.errors import OperationTimeout
from authkit.uow import TransactionCoordinator
from sqlalchemy import func, select


def _user_count(session) -> int:
    return session.execute(select(func.count()).select_from(User)).scalar_one()


@pytest.fixture()
def coordinator() -> TransactionCoordinator:
    return TransactionCoordinator()


def test_run_in_transaction_returns_work_result_and_commits(coordinator, session):
    user_id = coordinator.run_in_transaction(
        lambda uow: uow.users.insert_user(email="tx@example.com", password_hash="h").id
    )

    assert user_id
    assert _user_count(session) == 1


def test_run_in_transaction_rolls_back_and_reraises(coordinator, session):
    def work(uow):
        uow.users.insert_user(email="tx-fail@example.com", password_hash="h")
        raise LookupError("step two failed")

    with pytest.raises(LookupError, match="step two failed"):
        coordinator.run_in_transaction(work)

    assert _user_count(session) == 0


def test_deadline_expiring_during_work_rolls_back(coordinator, session):
    deadline = Deadline.after(60)

    def work(uow):
        uow.users.insert_user(email="late@example.com", password_hash="h")
        deadline.cancel()
        return "done"

    with pytest.raises(OperationTimeout, match="commit"):
        coordinator.run_in_transaction(work, deadline=deadline)

    assert _user_count(session) == 0


def test_expired_deadline_never_opens_a_transaction(session):
    opened: list[str] = []

    def factory():
        opened.append("uow")
        raise AssertionError("should not be reached")

    coordinator = TransactionCoordinator(uow_factory=factory, ro_uow_factory=factory)
    expired = Deadline(expires_at=time.monotonic() - 1)

    with pytest.raises(OperationTimeout):
        coordinator.run_in_transaction(lambda uow: None, deadline=expired)
    with pytest.raises(OperationTimeout):
        coordinator.run_read(lambda uow: None, deadline=expired)

    assert opened == []


def test_run_read_returns_value(coordinator, session):
    assert coordinator.run_read(lambda uow: uow.users.email_exists("none@example.com")) is False
