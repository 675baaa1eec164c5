"""Tests for the credential store and the auth service, on both storage backends"""

import pytest

from taskboard.auth.service import extract_bearer_token
from taskboard.utils.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)


class TestUserStore:
    def test_create_and_find(self, taskboard):
        store = taskboard.user_store
        user = store.create("Ann", "Ann@X.com", "hash")

        assert user.email == "ann@x.com"
        assert store.find_by_id(user.id).name == "Ann"
        assert store.find_by_email("ANN@x.com").id == user.id
        assert store.find_by_email("bob@x.com") is None
        assert store.find_by_id("missing") is None

    def test_duplicate_email(self, taskboard):
        store = taskboard.user_store
        store.create("Ann", "ann@x.com", "hash")
        with pytest.raises(DuplicateEmailError):
            store.create("Other Ann", "ann@x.com", "hash2")

    def test_update_fields(self, taskboard):
        store = taskboard.user_store
        user = store.create("Ann", "ann@x.com", "hash")

        updated = store.update(user.id, name="Annie")
        assert updated.name == "Annie"
        assert updated.email == "ann@x.com"
        assert updated.password_hash == "hash"

    def test_update_unknown_user(self, taskboard):
        with pytest.raises(NotFoundError):
            taskboard.user_store.update("missing", name="Nobody")


class TestRegister:
    def test_register_returns_identity_and_token(self, taskboard):
        result = taskboard.auth_service.register("Ann", "ann@x.com", "secret1")

        assert result.name == "Ann"
        assert result.email == "ann@x.com"
        assert taskboard.tokens.verify(result.token) == result.id
        assert "password" not in result.model_dump(by_alias=True)

    def test_password_stored_hashed(self, taskboard):
        result = taskboard.auth_service.register("Ann", "ann@x.com", "secret1")
        stored = taskboard.user_store.find_by_id(result.id)
        assert stored.password_hash != "secret1"
        assert stored.password_hash.startswith("$2")

    def test_second_registration_with_same_email_fails(self, taskboard):
        auth = taskboard.auth_service
        auth.register("Ann", "ann@x.com", "secret1")

        with pytest.raises(DuplicateEmailError):
            auth.register("Ann Again", "ANN@x.com", "another1")
        assert taskboard.user_store.users.count({}) == 1

    @pytest.mark.parametrize(
        "name,email,password,message",
        [
            ("A", "ann@x.com", "secret1", "Name must be at least 2 characters"),
            ("Ann", "not-an-email", "secret1", "Invalid email"),
            ("Ann", "ann@localhost", "secret1", "Invalid email"),
            ("Ann", "ann@x.com", "12345", "Password must be at least 6 characters"),
            (None, "ann@x.com", "secret1", "Name is required"),
            ("Ann", None, "secret1", "Email is required"),
            ("Ann", "ann@x.com", None, "Password is required"),
            (42, "ann@x.com", "secret1", "Name must be a string"),
        ],
    )
    def test_validation(self, taskboard, name, email, password, message):
        with pytest.raises(ValidationError) as exc_info:
            taskboard.auth_service.register(name, email, password)
        assert exc_info.value.message == message

    @pytest.mark.parametrize("email", ["ann@corp.local", "ann@host.test", "ann@example.invalid"])
    def test_special_use_domains_are_valid_syntax(self, taskboard, email):
        auth = taskboard.auth_service
        registered = auth.register("Ann", email, "secret1")

        assert registered.email == email
        assert auth.login(email, "secret1").id == registered.id

    def test_first_violated_field_reported(self, taskboard):
        with pytest.raises(ValidationError) as exc_info:
            taskboard.auth_service.register("A", "bad", "1")
        assert exc_info.value.field == "name"


class TestLogin:
    def test_login_success(self, taskboard):
        auth = taskboard.auth_service
        registered = auth.register("Ann", "ann@x.com", "secret1")

        result = auth.login("ann@x.com", "secret1")
        assert result.id == registered.id
        assert taskboard.tokens.verify(result.token) == registered.id

    def test_wrong_password_and_unknown_email_look_the_same(self, taskboard):
        auth = taskboard.auth_service
        auth.register("Ann", "ann@x.com", "secret1")

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            auth.login("ann@x.com", "wrong")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            auth.login("nobody@x.com", "secret1")

        assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"
        assert wrong_password.value.status_code == unknown_email.value.status_code == 401

    def test_login_validation(self, taskboard):
        with pytest.raises(ValidationError):
            taskboard.auth_service.login("not-an-email", "secret1")
        with pytest.raises(ValidationError) as exc_info:
            taskboard.auth_service.login("ann@x.com", "")
        assert exc_info.value.message == "Password is required"


class TestAuthenticate:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc", "abc"),
            ("bearer abc ", "abc"),
            ("Basic abc", None),
            ("Bearer ", None),
            (None, None),
        ],
    )
    def test_extract_bearer_token(self, header, expected):
        assert extract_bearer_token(header) == expected

    def test_valid_token_resolves_user(self, taskboard):
        auth = taskboard.auth_service
        result = auth.register("Ann", "ann@x.com", "secret1")

        user = auth.authenticate_header(f"Bearer {result.token}")
        assert user.id == result.id
        assert user.name == "Ann"

    def test_missing_and_bad_tokens(self, taskboard):
        auth = taskboard.auth_service
        with pytest.raises(UnauthenticatedError) as missing:
            auth.authenticate(None)
        assert missing.value.message == "Not authorized, no token"

        with pytest.raises(UnauthenticatedError) as bad:
            auth.authenticate("garbage")
        assert bad.value.message == "Not authorized, token failed"

    def test_token_for_vanished_user(self, taskboard):
        token = taskboard.tokens.issue("ghost-user-id")
        with pytest.raises(UnauthenticatedError):
            taskboard.auth_service.authenticate(token)


class TestUpdateProfile:
    def test_update_name_reissues_token(self, taskboard):
        auth = taskboard.auth_service
        registered = auth.register("Ann", "ann@x.com", "secret1")

        result = auth.update_profile(registered.id, {"name": "Annie"})
        assert result.name == "Annie"
        assert result.email == "ann@x.com"
        assert taskboard.tokens.verify(result.token) == registered.id

    def test_update_email_then_login_with_it(self, taskboard):
        auth = taskboard.auth_service
        registered = auth.register("Ann", "ann@x.com", "secret1")

        auth.update_profile(registered.id, {"email": "ann@new.com"})
        assert auth.login("ann@new.com", "secret1").id == registered.id
        with pytest.raises(InvalidCredentialsError):
            auth.login("ann@x.com", "secret1")

    def test_empty_update_keeps_fields(self, taskboard):
        auth = taskboard.auth_service
        registered = auth.register("Ann", "ann@x.com", "secret1")
        result = auth.update_profile(registered.id, {})
        assert (result.name, result.email) == ("Ann", "ann@x.com")

    def test_invalid_fields(self, taskboard):
        auth = taskboard.auth_service
        registered = auth.register("Ann", "ann@x.com", "secret1")
        with pytest.raises(ValidationError):
            auth.update_profile(registered.id, {"name": "A"})
        with pytest.raises(ValidationError):
            auth.update_profile(registered.id, {"email": "nope"})

    def test_email_taken_by_someone_else(self, taskboard):
        auth = taskboard.auth_service
        auth.register("Bob", "bob@x.com", "secret1")
        ann = auth.register("Ann", "ann@x.com", "secret1")
        with pytest.raises(DuplicateEmailError):
            auth.update_profile(ann.id, {"email": "bob@x.com"})

    def test_vanished_user(self, taskboard):
        with pytest.raises(NotFoundError):
            taskboard.auth_service.update_profile("missing", {"name": "Nobody"})
