import jwt
import pytest

from guidebook.auth import decode_access_token, verify_password
from guidebook.core.config import Settings
from guidebook.core.exceptions import ConflictException, UnauthorizedException
from guidebook.services.auth_service import AuthService

PASSWORD = "Str0ng!pass"


@pytest.fixture
def service(db) -> AuthService:
    return AuthService(db)


class TestRegisterUser:
    def test_register_hashes_password_and_issues_token(self, service):
        user, token = service.register_user("Grace", "Grace@Example.com", PASSWORD)

        assert user.id is not None
        assert user.email == "grace@example.com"
        assert user.hashed_password != PASSWORD
        assert verify_password(PASSWORD, user.hashed_password)
        assert decode_access_token(token)["sub"] == str(user.id)

    def test_duplicate_email_is_a_conflict(self, service):
        service.register_user("Grace", "grace@example.com", PASSWORD)

        with pytest.raises(ConflictException) as exc_info:
            service.register_user("Other", "GRACE@example.com", PASSWORD)

        assert exc_info.value.code == "EMAIL_EXISTS"

    def test_token_is_signed_with_injected_settings(self, db):
        config = Settings(secret_key="another-secret-key-for-this-app-only-32b")
        user, token = AuthService(db, config=config).register_user(
            "Grace", "grace@example.com", PASSWORD
        )

        assert decode_access_token(token, config)["sub"] == str(user.id)
        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(token)


class TestAuthenticateUser:
    def test_valid_credentials(self, service):
        registered, _ = service.register_user("Grace", "grace@example.com", PASSWORD)

        user, token = service.authenticate_user("grace@example.com", PASSWORD)

        assert user.id == registered.id
        assert decode_access_token(token)["sub"] == str(user.id)

    def test_wrong_password(self, service):
        service.register_user("Grace", "grace@example.com", PASSWORD)

        with pytest.raises(UnauthorizedException):
            service.authenticate_user("grace@example.com", "Wr0ng!pass")

    def test_unknown_email(self, service):
        with pytest.raises(UnauthorizedException) as exc_info:
            service.authenticate_user("nobody@example.com", PASSWORD)

        assert exc_info.value.code == "INVALID_CREDENTIALS"
