"""Unit of Work abstractions, concrete implementations and the coordinator.

This package re-exports the SQLAlchemy-backed units of work used throughout
the application, alongside the abstract contracts that service layers depend on.
"""

from .base import UnitOfWork
from .coordinator import TransactionCoordinator
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "TransactionCoordinator",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
