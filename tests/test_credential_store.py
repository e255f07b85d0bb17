"""Unit tests for auth/store.py -- CredentialStore register/verify.

Covers:
- register then verify with the same password returns the new user id
- wrong password -> InvalidCredential; unknown username -> UserNotFound
- both failures carry the same client-facing code and message
- duplicate username -> DuplicateIdentity (UNIQUE index, not a pre-check)
- usernames are case-sensitive
- only a bcrypt hash is persisted
"""

import pytest

from auth.passwords import hash_password, verify_password
from auth.store import CredentialStore
from core.errors import DuplicateIdentity, InvalidCredential, UserNotFound


@pytest.fixture
def store():
    s = CredentialStore("sqlite:///:memory:")
    yield s
    s.close()


class TestRegisterVerify:
    def test_register_then_verify(self, store: CredentialStore) -> None:
        user_id = store.register("alice", "alice@x.com", "pw123")
        assert store.verify("alice", "pw123") == user_id

    def test_wrong_password(self, store: CredentialStore) -> None:
        store.register("alice", "alice@x.com", "pw123")
        with pytest.raises(InvalidCredential):
            store.verify("alice", "pw124")

    def test_unknown_username(self, store: CredentialStore) -> None:
        with pytest.raises(UserNotFound):
            store.verify("nobody", "pw123")

    def test_failures_are_indistinguishable_to_clients(self) -> None:
        assert UserNotFound.code == InvalidCredential.code
        assert UserNotFound.message == InvalidCredential.message
        assert UserNotFound.status_code == InvalidCredential.status_code == 401

    def test_ids_are_distinct(self, store: CredentialStore) -> None:
        a = store.register("alice", "alice@x.com", "pw123")
        b = store.register("bob", "bob@x.com", "pw123")
        assert a != b
        assert store.verify("bob", "pw123") == b


class TestUniqueness:
    def test_duplicate_username_rejected(self, store: CredentialStore) -> None:
        store.register("alice", "alice@x.com", "pw123")
        with pytest.raises(DuplicateIdentity):
            store.register("alice", "other@x.com", "different")

    def test_duplicate_does_not_replace_original(self, store: CredentialStore) -> None:
        user_id = store.register("alice", "alice@x.com", "pw123")
        with pytest.raises(DuplicateIdentity):
            store.register("alice", "other@x.com", "different")
        assert store.verify("alice", "pw123") == user_id

    def test_usernames_are_case_sensitive(self, store: CredentialStore) -> None:
        lower = store.register("alice", "alice@x.com", "pw123")
        upper = store.register("Alice", "alice2@x.com", "pw456")
        assert lower != upper
        with pytest.raises(InvalidCredential):
            store.verify("Alice", "pw123")


def test_plaintext_never_stored(store: CredentialStore) -> None:
    store.register("alice", "alice@x.com", "pw123")
    user = store.get_by_username("alice")
    assert user is not None
    assert user.hashed_password != "pw123"
    assert user.hashed_password.startswith("$2")
    assert user.email == "alice@x.com"


def test_ping(store: CredentialStore) -> None:
    assert store.ping() is True


class TestPasswordBytes:
    def test_whitespace_is_significant(self, store: CredentialStore) -> None:
        store.register("alice", "alice@x.com", "pw123")
        with pytest.raises(InvalidCredential):
            store.verify("alice", "  pw123  ")

    def test_hash_refuses_over_72_bytes(self) -> None:
        with pytest.raises(ValueError):
            hash_password("é" * 36 + "A")

    def test_passwords_sharing_72_bytes_do_not_collide(self, store: CredentialStore) -> None:
        store.register("alice", "alice@x.com", "é" * 36)
        assert verify_password("é" * 36 + "Z", store.get_by_username("alice").hashed_password) is False
        with pytest.raises(InvalidCredential):
            store.verify("alice", "é" * 36 + "Z")
