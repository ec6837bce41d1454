"""
Tests for GoogleTokenManager (static token and service-account JWT flow).
"""

import json
import time
from urllib.parse import parse_qs

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from portal_resources.core.auth.google_token_manager import GoogleTokenManager

TOKEN_URL = "https://oauth.test/token"


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def service_account_info(rsa_key):
    pem = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    return {
        "client_email": "portal@project.iam.gserviceaccount.com",
        "private_key": pem,
        "private_key_id": "key-1",
    }


def token_client(calls, token="ya29.token"):
    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"access_token": token, "expires_in": 3599})

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestStaticToken:

    def test_never_expires(self):
        manager = GoogleTokenManager(static_token="static")
        assert not manager.is_token_expired()
        assert manager.get_headers(httpx.Client()) == {"Authorization": "Bearer static"}

    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            GoogleTokenManager()


class TestServiceAccount:

    def test_exchanges_signed_assertion(self, service_account_info, rsa_key):
        calls = []
        manager = GoogleTokenManager(service_account_info=service_account_info, token_url=TOKEN_URL)

        token = manager.get_valid_token(token_client(calls))

        assert token == "ya29.token"
        form = parse_qs(calls[0].content.decode())
        assert form["grant_type"] == ["urn:ietf:params:oauth:grant-type:jwt-bearer"]
        assertion = form["assertion"][0]
        assert jwt.get_unverified_header(assertion)["kid"] == "key-1"
        claims = jwt.decode(assertion, rsa_key.public_key(), algorithms=["RS256"], audience=TOKEN_URL)
        assert claims["iss"] == "portal@project.iam.gserviceaccount.com"
        assert "https://www.googleapis.com/auth/drive" in claims["scope"]
        assert "https://www.googleapis.com/auth/spreadsheets" in claims["scope"]

    def test_token_is_reused_until_threshold(self, service_account_info):
        calls = []
        client = token_client(calls)
        manager = GoogleTokenManager(service_account_info=service_account_info, token_url=TOKEN_URL)

        manager.get_valid_token(client)
        manager.get_valid_token(client)
        assert len(calls) == 1

        manager._token_acquired_at = time.time() - GoogleTokenManager.TOKEN_REFRESH_THRESHOLD_SECONDS
        manager.get_valid_token(client)
        assert len(calls) == 2

    def test_token_endpoint_error(self, service_account_info):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(401, text="invalid_grant")))
        manager = GoogleTokenManager(service_account_info=service_account_info, token_url=TOKEN_URL)
        with pytest.raises(httpx.HTTPStatusError):
            manager.get_valid_token(client)

    def test_from_service_account_file(self, tmp_path, service_account_info):
        key_file = tmp_path / "key.json"
        key_file.write_text(json.dumps(service_account_info))

        manager = GoogleTokenManager.from_service_account_file(str(key_file), token_url=TOKEN_URL)

        assert manager.service_account_info["client_email"] == service_account_info["client_email"]
        assert manager.is_token_expired()
