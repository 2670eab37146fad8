"""Unit tests for UserRepository."""

import pytest
from authkit.repositories.user import UserRepository
from authkit.services._shared.errors import EmailAlreadyExists, NotFoundError, StoreFailure
from sqlalchemy.exc import OperationalError
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` honours the user store contract."""

    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_insert_assigns_id_and_timestamps(self, repo, session):
        user = repo.insert_user(email="alice@example.com", password_hash="hash")
        session.commit()

        assert user.id and len(user.id) == 32
        assert user.created_at is not None
        assert user.updated_at is not None

    def test_find_by_email_and_id(self, repo, session):
        u = UserFactory(email="bob@example.com")
        session.commit()

        assert repo.find_by_email("bob@example.com").id == u.id
        assert repo.find_by_id(u.id).email == "bob@example.com"

    def test_lookups_raise_not_found(self, repo):
        with pytest.raises(NotFoundError):
            repo.find_by_email("ghost@example.com")
        with pytest.raises(NotFoundError):
            repo.find_by_id("f" * 32)

    def test_email_exists_is_exact_match(self, repo, session):
        UserFactory(email="Carol@example.com")
        session.commit()

        assert repo.email_exists("Carol@example.com")
        assert not repo.email_exists("carol@example.com")

    def test_duplicate_insert_maps_to_email_already_exists(self, repo, session):
        UserFactory(email="dave@example.com")
        session.commit()

        with pytest.raises(EmailAlreadyExists):
            repo.insert_user(email="dave@example.com", password_hash="hash")
        session.rollback()

    def test_driver_faults_surface_as_store_failure(self):
        class _BrokenSession:
            def execute(self, *args, **kwargs):
                raise OperationalError("SELECT", {}, Exception("server closed the connection"))

        repo = UserRepository(session=_BrokenSession())

        with pytest.raises(StoreFailure) as excinfo:
            repo.email_exists("x@example.com")
        assert isinstance(excinfo.value.__cause__, OperationalError)
