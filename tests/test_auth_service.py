"""Unit tests for the authentication core.

Covers:
- local signup and login
- Google identity login and account creation
- session resolution and logout
"""

import pytest

from taskmanager.errors import Conflict, InvalidCredentials, Unauthorized, ValidationFailed
from taskmanager.models import User, UserSession
from taskmanager.services import auth as auth_module
from taskmanager.services.auth import ExternalIdentity, LocalCredentials, normalize_email


class TestSignup:
    def test_signup_creates_user_session_and_token(self, db, auth_service, token_issuer):
        result = auth_service.signup(db, "a@x.com", "Secret123!")

        assert result.user.email == "a@x.com"
        assert result.user.google_id is None
        assert token_issuer.verify(result.token) == result.user.id
        assert auth_service.sessions.resolve(db, result.session_id) == result.user.id

    def test_password_is_stored_hashed(self, db, auth_service, hasher):
        result = auth_service.signup(db, "a@x.com", "Secret123!")
        stored = db.get(User, result.user.id)
        assert stored.password_hash != "Secret123!"
        assert hasher.verify("Secret123!", stored.password_hash)

    def test_duplicate_email_conflicts(self, db, auth_service):
        auth_service.signup(db, "a@x.com", "Secret123!")
        with pytest.raises(Conflict):
            auth_service.signup(db, "a@x.com", "Other456!")
        assert db.query(User).count() == 1

    @pytest.mark.parametrize("email,password", [("", "pw"), ("a@x.com", ""), (None, "pw"), ("a@x.com", None)])
    def test_missing_fields(self, db, auth_service, email, password):
        with pytest.raises(ValidationFailed):
            auth_service.signup(db, email, password)
        assert db.query(User).count() == 0

    def test_duplicate_that_slips_past_lookup_conflicts(self, db, auth_service, monkeypatch):
        auth_service.signup(db, "a@x.com", "Secret123!")
        monkeypatch.setattr(auth_module, "get_user_by_email", lambda db, email: None)

        with pytest.raises(Conflict):
            auth_service.signup(db, "a@x.com", "Other456!")
        assert db.query(User).count() == 1


class TestLocalLogin:
    def test_signup_then_login_returns_same_user(self, db, auth_service):
        signed_up = auth_service.signup(db, "a@x.com", "Secret123!")
        logged_in = auth_service.login_local(db, "a@x.com", "Secret123!")

        assert logged_in.user.id == signed_up.user.id
        assert logged_in.session_id != signed_up.session_id

    def test_wrong_password_and_unknown_email_look_the_same(self, db, auth_service):
        auth_service.signup(db, "a@x.com", "Secret123!")

        with pytest.raises(InvalidCredentials) as wrong_password:
            auth_service.login_local(db, "a@x.com", "nope")
        with pytest.raises(InvalidCredentials) as unknown_email:
            auth_service.login_local(db, "b@x.com", "Secret123!")

        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.status_code == unknown_email.value.status_code == 401

    def test_google_only_account_cannot_use_password(self, db, auth_service):
        auth_service.login_with_external_identity(db, "google", "g-1", "g@x.com")
        with pytest.raises(InvalidCredentials):
            auth_service.login_local(db, "g@x.com", "")

    def test_failed_login_creates_no_session(self, db, auth_service):
        auth_service.signup(db, "a@x.com", "Secret123!")
        before = db.query(UserSession).count()
        with pytest.raises(InvalidCredentials):
            auth_service.login_local(db, "a@x.com", "wrong")
        assert db.query(UserSession).count() == before

    def test_login_matches_email_normalized_at_signup(self, db, auth_service):
        signed_up = auth_service.signup(db, "a@X.com", "Secret123!")
        assert signed_up.user.email == "a@x.com"

        logged_in = auth_service.login_local(db, "a@X.com", "Secret123!")
        assert logged_in.user.id == signed_up.user.id

    def test_authenticate_dispatches_local_credentials(self, db, auth_service):
        signed_up = auth_service.signup(db, "a@x.com", "Secret123!")
        result = auth_service.authenticate(db, LocalCredentials("a@x.com", "Secret123!"))
        assert result.user.id == signed_up.user.id

    def test_authenticate_rejects_unknown_variant(self, db, auth_service):
        with pytest.raises(TypeError):
            auth_service.authenticate(db, ("a@x.com", "Secret123!"))


class TestExternalIdentity:
    def test_unseen_identity_creates_one_user(self, db, auth_service):
        result = auth_service.login_with_external_identity(db, "google", "g-1", "g@x.com")

        assert result.user.google_id == "g-1"
        assert result.user.email == "g@x.com"
        assert result.user.password_hash is None
        assert db.query(User).count() == 1

    def test_second_login_reuses_user(self, db, auth_service):
        first = auth_service.login_with_external_identity(db, "google", "g-1", "g@x.com")
        second = auth_service.login_with_external_identity(db, "google", "g-1", "g@x.com")

        assert second.user.id == first.user.id
        assert db.query(User).count() == 1

    def test_email_is_optional(self, db, auth_service):
        result = auth_service.login_with_external_identity(db, "google", "g-1", None)
        assert result.user.email is None
        assert result.user.google_id == "g-1"

    def test_email_owned_by_local_account_is_not_linked(self, db, auth_service):
        local = auth_service.signup(db, "a@x.com", "Secret123!")
        result = auth_service.authenticate(db, ExternalIdentity("google", "g-1", "a@x.com"))

        assert result.user.id != local.user.id
        assert result.user.email is None
        assert db.get(User, local.user.id).google_id is None

    def test_concurrently_created_identity_is_reused(self, db, auth_service, monkeypatch):
        first = auth_service.login_with_external_identity(db, "google", "g-1", "g@x.com")

        real_lookup = auth_module.get_user_by_google_id
        calls = []

        def miss_once(db, google_id):
            calls.append(google_id)
            return None if len(calls) == 1 else real_lookup(db, google_id)

        monkeypatch.setattr(auth_module, "get_user_by_google_id", miss_once)
        second = auth_service.login_with_external_identity(db, "google", "g-1", None)

        assert second.user.id == first.user.id
        assert db.query(User).count() == 1

    def test_email_claimed_concurrently_is_dropped(self, db, auth_service, monkeypatch):
        local = auth_service.signup(db, "a@x.com", "Secret123!")
        monkeypatch.setattr(auth_module, "get_user_by_email", lambda db, email: None)

        result = auth_service.login_with_external_identity(db, "google", "g-1", "a@x.com")

        assert result.user.id != local.user.id
        assert result.user.google_id == "g-1"
        assert result.user.email is None
        assert db.query(User).count() == 2

    def test_unknown_provider(self, db, auth_service):
        with pytest.raises(ValidationFailed):
            auth_service.login_with_external_identity(db, "myspace", "m-1", None)

    def test_missing_subject(self, db, auth_service):
        with pytest.raises(ValidationFailed):
            auth_service.login_with_external_identity(db, "google", "", None)


class TestCurrentUserAndLogout:
    def test_current_user_from_session(self, db, auth_service):
        result = auth_service.signup(db, "a@x.com", "Secret123!")
        assert auth_service.get_current_user(db, result.session_id).id == result.user.id

    def test_current_user_reflects_profile_changes(self, db, auth_service):
        result = auth_service.signup(db, "a@x.com", "Secret123!")
        user = db.get(User, result.user.id)
        user.email = "new@x.com"
        db.commit()
        assert auth_service.get_current_user(db, result.session_id).email == "new@x.com"

    def test_no_session_is_unauthorized(self, db, auth_service):
        with pytest.raises(Unauthorized):
            auth_service.get_current_user(db, None)

    def test_logout_invalidates_session(self, db, auth_service):
        result = auth_service.signup(db, "a@x.com", "Secret123!")
        auth_service.logout(db, result.session_id)
        with pytest.raises(Unauthorized):
            auth_service.get_current_user(db, result.session_id)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("a@X.com", "a@x.com"),
        ("  a@x.com ", "a@x.com"),
        ("Mixed.Case@Mail.COM", "Mixed.Case@mail.com"),
        ("not-an-email", "not-an-email"),
    ],
)
def test_normalize_email(raw, expected):
    assert normalize_email(raw) == expected
