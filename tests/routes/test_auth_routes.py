import pytest

from guidebook.auth import decode_access_token

PASSWORD = "Str0ng!pass"


def _register(client, **overrides):
    payload = {"name": "Grace Hopper", "email": "grace@example.com", "password": PASSWORD}
    payload.update(overrides)
    return client.post("/api/v1/auth/register", json=payload)


class TestRegister:
    def test_register_returns_token_and_user(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["name"] == "Grace Hopper"
        assert body["user"]["email"] == "grace@example.com"
        assert decode_access_token(body["token"])["sub"] == str(body["user"]["id"])
        assert "hashed_password" not in body["user"]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "Al"},
            {"name": "x" * 51},
            {"email": "not-an-email"},
            {"password": "short1!"},
            {"password": "alllowercase1!"},
            {"password": "NoDigitsHere!"},
            {"password": "NoSpecial123"},
        ],
    )
    def test_invalid_input_is_a_400(self, client, overrides):
        response = _register(client, **overrides)

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_FORMAT"
        assert body["errors"]

    def test_unknown_fields_are_rejected(self, client):
        assert _register(client, role="admin").status_code == 400

    def test_duplicate_email_is_a_409(self, client):
        _register(client)

        response = _register(client, email="GRACE@example.com")

        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_EXISTS"


class TestLogin:
    def test_login_with_valid_credentials(self, client):
        registered = _register(client).json()

        response = client.post(
            "/api/v1/auth/login", json={"email": "grace@example.com", "password": PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["user"]["id"] == registered["user"]["id"]

    def test_wrong_password_is_a_401(self, client):
        _register(client)

        response = client.post(
            "/api/v1/auth/login", json={"email": "grace@example.com", "password": "Wr0ng!pass"}
        )

        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_malformed_login_is_a_400(self, client):
        response = client.post("/api/v1/auth/login", json={"email": "grace", "password": "x"})

        assert response.status_code == 400
