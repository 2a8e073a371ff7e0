"""
Unit tests for IdentityStore.

Covers:
    - register: required fields, password length, duplicate email/username
      (case-insensitive), no user created on failure
    - authenticate: NotFound vs InvalidCredentials
    - tokens: issue, validate, expiry, tampering, deleted users
    - session pointer: save, restore, clear
    - search and theme updates
"""

from datetime import timedelta

import pytest

from linkpro.errors import (
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    NotFound,
    ValidationError,
)
from linkpro.identity.identity_store import IdentityStore


# -------------------------
# register
# -------------------------

def test_register_creates_user_with_light_theme(identity, clock):
    user = identity.register("ana", "ana@x.com", "Ana", "secret1")
    assert user.username == "ana"
    assert user.email == "ana@x.com"
    assert user.theme == "light"
    assert user.created_at == clock.now
    assert identity.get_user(user.id) == user


def test_register_stores_credential_separately(identity, store):
    user = identity.register("ana", "ana@x.com", "Ana", "secret1")
    assert "password" not in store.snapshot("users")[user.id]
    assert store.snapshot("credentials")[user.id] == {"user_id": user.id, "password": "secret1"}


@pytest.mark.parametrize(
    "username,email,name,password",
    [
        ("", "a@x.com", "A", "secret1"),
        ("a", "", "A", "secret1"),
        ("a", "a@x.com", "", "secret1"),
        ("a", "a@x.com", "A", ""),
        ("   ", "a@x.com", "A", "secret1"),
    ],
)
def test_register_requires_all_fields(identity, username, email, name, password):
    with pytest.raises(ValidationError, match="All fields are required."):
        identity.register(username, email, name, password)
    assert identity.list_users() == []


def test_register_rejects_short_password(identity):
    with pytest.raises(ValidationError, match="at least 6 characters"):
        identity.register("ana", "ana@x.com", "Ana", "12345")
    assert identity.list_users() == []


def test_register_accepts_exact_minimum_password(identity):
    assert identity.register("ana", "ana@x.com", "Ana", "123456").username == "ana"


@pytest.mark.parametrize("username", ["auth", "Links", " analytics ", "SEARCH"])
def test_register_rejects_reserved_username(identity, username):
    with pytest.raises(ValidationError, match="reserved"):
        identity.register(username, "x@x.com", "X", "secret1")
    assert identity.list_users() == []


def test_reserved_word_inside_username_is_fine(identity):
    assert identity.register("authority", "a@x.com", "A", "secret1").username == "authority"


def test_duplicate_email_scenario(identity):
    identity.register("ana", "ana@x.com", "Ana", "secret1")
    with pytest.raises(DuplicateEmail):
        identity.register("ana2", "ana@x.com", "Ana Two", "secret1")
    assert [u.username for u in identity.list_users()] == ["ana"]


def test_duplicate_email_is_case_insensitive(identity):
    identity.register("ana", "ana@x.com", "Ana", "secret1")
    with pytest.raises(DuplicateEmail):
        identity.register("other", "ANA@X.com", "Other", "secret1")


def test_duplicate_username_is_case_insensitive(identity):
    identity.register("ana", "ana@x.com", "Ana", "secret1")
    with pytest.raises(DuplicateUsername):
        identity.register("ANA", "other@x.com", "Other", "secret1")
    assert len(identity.list_users()) == 1


def test_email_checked_before_username(identity):
    identity.register("ana", "ana@x.com", "Ana", "secret1")
    with pytest.raises(DuplicateEmail):
        identity.register("ana", "ana@x.com", "Ana", "secret1")


def test_user_ids_are_unique(identity):
    ids = {identity.register(f"u{i}", f"u{i}@x.com", "U", "secret1").id for i in range(20)}
    assert len(ids) == 20


def test_exists_helpers(identity, ana):
    assert identity.user_exists_by_email("Ana@X.com") is True
    assert identity.user_exists_by_email("nobody@x.com") is False
    assert identity.username_exists("ANA") is True
    assert identity.username_exists("bob") is False


# -------------------------
# authenticate
# -------------------------

def test_authenticate_success(identity, ana):
    assert identity.authenticate("ana@x.com", "secret1") == ana


def test_authenticate_email_case_insensitive(identity, ana):
    assert identity.authenticate("ANA@x.com", "secret1").id == ana.id


def test_authenticate_wrong_password(identity, ana):
    with pytest.raises(InvalidCredentials, match="Invalid password"):
        identity.authenticate("ana@x.com", "wrong")


def test_authenticate_password_is_exact(identity, ana):
    with pytest.raises(InvalidCredentials):
        identity.authenticate("ana@x.com", "SECRET1")


def test_authenticate_unknown_email(identity, ana):
    with pytest.raises(NotFound, match="No account found"):
        identity.authenticate("nouser@x.com", "x")


# -------------------------
# tokens
# -------------------------

def test_issue_token_is_deterministic(identity, ana, clock):
    t1 = identity.issue_token(ana, issued_at=clock.now)
    t2 = identity.issue_token(ana, issued_at=clock.now)
    assert t1 == t2
    assert t1.user_id == ana.id
    assert t1.username == "ana"
    assert t1.issued_at == clock.now


def test_validate_token_round_trip(identity, ana):
    token = identity.issue_token(ana)
    assert identity.validate_token(token.value) == ana


def test_validate_token_rejects_tampering(identity, ana):
    token = identity.issue_token(ana)
    header, payload, signature = token.value.split(".")
    with pytest.raises(InvalidCredentials):
        identity.validate_token(f"{header}.{payload}x.{signature}")
    with pytest.raises(InvalidCredentials):
        identity.validate_token("not-a-token")


def test_validate_token_unknown_user(identity, ana, store):
    token = identity.issue_token(ana)
    with store.transaction() as txn:
        txn.write("users", {})
    with pytest.raises(NotFound):
        identity.validate_token(token.value)


def test_no_expiry_by_default(identity, ana, clock):
    token = identity.issue_token(ana)
    clock.advance(days=3650)
    assert identity.validate_token(token.value) == ana


def test_configured_expiry(store, clock):
    identity = IdentityStore(store, session_ttl=timedelta(hours=1), clock=clock)
    user = identity.register("ana", "ana@x.com", "Ana", "secret1")
    token = identity.issue_token(user)
    clock.advance(minutes=59)
    assert identity.validate_token(token.value) == user
    clock.advance(minutes=2)
    with pytest.raises(InvalidCredentials, match="expired"):
        identity.validate_token(token.value)


# -------------------------
# session pointer
# -------------------------

def test_restore_session_empty_is_none(identity):
    assert identity.restore_session() is None


def test_save_and_restore_session(identity, ana):
    identity.save_session(identity.issue_token(ana))
    assert identity.restore_session() == ana


def test_restore_survives_new_identity_store(identity, ana, store, clock):
    identity.save_session(identity.issue_token(ana))
    fresh = IdentityStore(store, clock=clock)
    assert fresh.restore_session() == ana


def test_clear_session(identity, ana):
    identity.save_session(identity.issue_token(ana))
    identity.clear_session()
    assert identity.restore_session() is None


def test_restore_garbage_session_is_none(identity, store):
    with store.transaction() as txn:
        txn.write("session", {"token": "garbage", "user_id": "x"})
    assert identity.restore_session() is None


@pytest.mark.parametrize("sub", [["x"], {"id": "x"}, 42])
def test_validate_token_with_non_string_subject(identity, forge_token, sub):
    token = forge_token({"sub": sub, "username": "ana", "iat": 0})
    with pytest.raises(InvalidCredentials):
        identity.validate_token(token)


def test_restore_forged_session_is_none(identity, store, forge_token):
    token = forge_token({"sub": ["x"], "username": "ana", "iat": 0})
    with store.transaction() as txn:
        txn.write("session", {"token": token, "user_id": "x"})
    assert identity.restore_session() is None


@pytest.mark.parametrize(
    "pointer",
    ["oops", ["token"], 42, {"token": 42}, {"token": None}, {"user_id": "x"}],
)
def test_restore_malformed_pointer_is_none(identity, store, pointer):
    with store.transaction() as txn:
        txn.write("session", pointer)
    assert identity.restore_session() is None


def test_expiry_check_rejects_out_of_range_issue_time(store, clock, forge_token, ana):
    strict = IdentityStore(store, session_ttl=timedelta(hours=1), clock=clock)
    token = forge_token({"sub": ana.id, "username": "ana", "iat": 10 ** 20})
    with pytest.raises(InvalidCredentials):
        strict.validate_token(token)


# -------------------------
# lookups / preferences
# -------------------------

def test_search_by_name_or_username(identity):
    identity.register("ana", "ana@x.com", "Ana Silva", "secret1")
    identity.register("bruno", "bruno@x.com", "Bruno Costa", "secret1")
    identity.register("carla_dev", "c@x.com", "Carla", "secret1")

    assert [u.username for u in identity.search("silva")] == ["ana"]
    assert [u.username for u in identity.search("DEV")] == ["carla_dev"]
    assert [u.username for u in identity.search("a")] == ["ana", "bruno", "carla_dev"]
    assert identity.search("   ") == []


def test_get_user_by_username(identity, ana):
    assert identity.get_user_by_username("Ana") == ana
    assert identity.get_user_by_username("ghost") is None


def test_get_user_unknown(identity):
    with pytest.raises(NotFound):
        identity.get_user("missing")


def test_update_theme(identity, ana):
    updated = identity.update_theme(ana.id, "dark")
    assert updated.theme == "dark"
    assert identity.get_user(ana.id).theme == "dark"
    assert updated.username == ana.username


def test_update_theme_rejects_unknown_theme(identity, ana):
    with pytest.raises(ValidationError):
        identity.update_theme(ana.id, "purple")
    assert identity.get_user(ana.id).theme == "light"


def test_update_theme_unknown_user(identity):
    with pytest.raises(NotFound):
        identity.update_theme("missing", "dark")
