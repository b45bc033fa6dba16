"""Tests for the user repository"""

import pytest

from pasteforge.auth.passwords import is_bcrypt_hash
from pasteforge.models.user import Identity
from pasteforge.utils.exceptions import (
    AuthenticationRequired,
    ConflictError,
    InvalidCredentials,
    NotFoundError,
    StoreError,
    ValidationError,
)

USERS_DOC = "users-doc"


def test_register_then_authenticate(forge, store):
    user = forge.users.register("alice", "secret1")

    assert user.username == "alice"
    assert user.name == "alice"
    assert user.description == ""
    assert user.id.isdigit()
    stored = store.documents[USERS_DOC]["users"]
    assert [u["username"] for u in stored] == ["alice"]
    assert stored[0]["createdAt"].endswith("Z")

    assert forge.users.authenticate("alice", "secret1").id == user.id
    assert forge.codec.verify(forge.codec.issue(user.id, user.username)) == Identity(
        user_id=user.id, username="alice"
    )


def test_register_stores_password_as_submitted_by_default(forge, store):
    forge.users.register("alice", "secret1")
    assert store.documents[USERS_DOC]["users"][0]["password"] == "secret1"


def test_duplicate_username_conflicts_without_writing(forge, store):
    forge.users.register("alice", "secret1")
    writes_before = store.writes
    snapshot = store.documents[USERS_DOC]

    with pytest.raises(ConflictError):
        forge.users.register("alice", "another-password")

    assert store.writes == writes_before
    assert store.documents[USERS_DOC] == snapshot


def test_usernames_are_case_sensitive(forge):
    forge.users.register("alice", "secret1")
    assert forge.users.register("Alice", "secret1").username == "Alice"


@pytest.mark.parametrize(
    "username,password",
    [("", "secret1"), ("alice", ""), (None, "secret1"), ("alice", None), ("alice", "12345")],
)
def test_register_validation_happens_before_any_write(forge, store, username, password):
    with pytest.raises(ValidationError):
        forge.users.register(username, password)
    assert store.writes == 0


def test_register_bootstraps_missing_users_document(forge, store):
    del store.documents[USERS_DOC]
    forge.users.register("alice", "secret1")
    assert len(store.documents[USERS_DOC]["users"]) == 1


def test_register_does_not_overwrite_on_store_failure(forge, store):
    forge.users.register("alice", "secret1")
    store.failing_reads.add(USERS_DOC)
    writes_before = store.writes

    with pytest.raises(StoreError):
        forge.users.register("bob", "secret2")
    assert store.writes == writes_before


def test_wrong_password_and_unknown_user_fail_the_same_way(forge):
    forge.users.register("alice", "secret1")

    with pytest.raises(InvalidCredentials) as wrong_password:
        forge.users.authenticate("alice", "wrong-one")
    with pytest.raises(InvalidCredentials) as unknown_user:
        forge.users.authenticate("nobody", "secret1")

    assert wrong_password.value.message == unknown_user.value.message


def test_get_by_username_returns_public_fields_only(forge):
    forge.users.register("alice", "secret1")
    profile = forge.users.get_by_username("alice")

    dumped = profile.model_dump(by_alias=True)
    assert "password" not in dumped
    assert dumped["username"] == "alice"
    assert dumped["name"] == "alice"


def test_get_by_username_unknown(forge):
    with pytest.raises(NotFoundError):
        forge.users.get_by_username("ghost")


def test_unknown_fields_survive_whole_array_rewrite(forge, store):
    store.documents[USERS_DOC] = {
        "users": [
            {
                "id": "1",
                "username": "legacy",
                "password": "secret1",
                "createdAt": "2023-01-01T00:00:00.000Z",
                "avatar": "cat.png",
            }
        ]
    }
    forge.users.register("alice", "secret1")
    legacy = store.documents[USERS_DOC]["users"][0]
    assert legacy["avatar"] == "cat.png"


def test_update_profile_round_trip(forge, store):
    forge.users.register("alice", "secret1")
    store.documents[USERS_DOC]["users"][0]["createdAt"] = "2024-01-01T00:00:00.000Z"
    identity = Identity(user_id=store.documents[USERS_DOC]["users"][0]["id"], username="alice")

    forge.users.update_profile("alice", "  X  ", "  Y ", identity)
    profile = forge.users.get_by_username("alice")

    assert profile.name == "X"
    assert profile.description == "Y"
    assert profile.updated_at > profile.created_at


def test_update_profile_allows_empty_description(forge):
    user = forge.users.register("alice", "secret1")
    identity = Identity(user_id=user.id, username="alice")
    assert forge.users.update_profile("alice", "Alice", None, identity).description == ""


@pytest.mark.parametrize("identity", [None, Identity(user_id="x", username="mallory")])
def test_update_profile_requires_matching_session(forge, store, identity):
    forge.users.register("alice", "secret1")
    writes_before = store.writes
    with pytest.raises(AuthenticationRequired):
        forge.users.update_profile("alice", "Evil", "", identity)
    assert store.writes == writes_before


@pytest.mark.parametrize("name", [None, "", "   "])
def test_update_profile_requires_name(forge, name):
    user = forge.users.register("alice", "secret1")
    with pytest.raises(ValidationError):
        forge.users.update_profile("alice", name, "desc", Identity(user_id=user.id, username="alice"))


def test_update_profile_of_vanished_user(forge):
    with pytest.raises(NotFoundError):
        forge.users.update_profile("ghost", "Ghost", "", Identity(user_id="1", username="ghost"))


def test_hash_passwords_mode_stores_bcrypt_and_still_accepts_plaintext_records(forge, store):
    store.documents[USERS_DOC] = {
        "users": [{"id": "1", "username": "old", "password": "plain-pass"}]
    }
    forge.users.hash_passwords = True

    forge.users.register("alice", "secret1")
    stored = store.documents[USERS_DOC]["users"][1]["password"]

    assert is_bcrypt_hash(stored)
    assert forge.users.authenticate("alice", "secret1").username == "alice"
    assert forge.users.authenticate("old", "plain-pass").username == "old"
    with pytest.raises(InvalidCredentials):
        forge.users.authenticate("alice", stored)


def test_missing_users_document_reads_as_no_users(forge, store):
    del store.documents[USERS_DOC]

    with pytest.raises(InvalidCredentials):
        forge.users.authenticate("alice", "secret1")
    with pytest.raises(NotFoundError) as excinfo:
        forge.users.get_by_username("alice")
    assert excinfo.value.message == "User not found"
    with pytest.raises(NotFoundError):
        forge.users.update_profile("alice", "Alice", "", Identity(user_id="1", username="alice"))
    assert store.writes == 0


def test_invalid_user_entries_are_skipped_and_kept(forge, store):
    broken = {"id": "1", "username": "ghost"}
    store.documents[USERS_DOC] = {
        "users": [
            broken,
            "not-a-user",
            {"id": "2", "username": "alice", "password": "secret1"},
        ]
    }

    assert [u.username for u in forge.users.load_users()] == ["alice"]
    assert forge.users.authenticate("alice", "secret1").id == "2"

    forge.users.register("bob", "secret2")
    stored = store.documents[USERS_DOC]["users"]
    assert broken in stored
    assert "not-a-user" in stored
    assert {u.get("username") for u in stored if isinstance(u, dict)} == {"ghost", "alice", "bob"}

    forge.users.update_profile("alice", "Alice", "", Identity(user_id="2", username="alice"))
    stored = store.documents[USERS_DOC]["users"]
    assert broken in stored
    assert "not-a-user" in stored


def test_invalid_entry_still_reserves_its_username(forge, store):
    store.documents[USERS_DOC] = {"users": [{"id": "1", "username": "ghost"}]}
    with pytest.raises(ConflictError):
        forge.users.register("ghost", "secret1")


def test_malformed_users_document_is_a_store_error(forge, store):
    store.documents[USERS_DOC] = {"users": "everyone"}
    with pytest.raises(StoreError):
        forge.users.authenticate("alice", "secret1")
