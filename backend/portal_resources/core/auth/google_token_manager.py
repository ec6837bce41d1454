"""Google OAuth access tokens for the Drive and Sheets REST clients."""
from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Dict, Optional

import httpx
import jwt

logger = logging.getLogger("portal_resources.google_auth")

GOOGLE_SCOPES = (
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/spreadsheets",
)


class GoogleTokenManager:
    """
    Manages Google API access tokens with automatic refresh.

    Two modes:
    - static: a pre-issued access token (``GOOGLE_ACCESS_TOKEN``), never refreshed
    - service account: an RS256-signed JWT assertion exchanged at the token
      endpoint, refreshed proactively before expiry (at 50 minutes)
    """

    # Refresh token at 50 minutes (tokens expire at 60 minutes)
    TOKEN_REFRESH_THRESHOLD_SECONDS = 50 * 60
    ASSERTION_LIFETIME_SECONDS = 60 * 60

    def __init__(
        self,
        service_account_info: Optional[Dict[str, str]] = None,
        static_token: Optional[str] = None,
        token_url: str = "https://oauth2.googleapis.com/token",
        scopes: tuple = GOOGLE_SCOPES,
    ):
        if not service_account_info and not static_token:
            raise ValueError("Either a service account or a static access token is required")
        self.service_account_info = service_account_info
        self.token_url = token_url
        self.scopes = scopes
        self._token: Optional[str] = static_token
        self._static = static_token is not None
        self._token_acquired_at: float = time.time() if static_token else 0
        self._refresh_count = 0

    @classmethod
    def from_service_account_file(cls, path: str, **kwargs) -> "GoogleTokenManager":
        info = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(service_account_info=info, **kwargs)

    @property
    def token(self) -> Optional[str]:
        """Get current token (may be expired - use get_valid_token() instead)."""
        return self._token

    def is_token_expired(self) -> bool:
        """Check if token needs refresh based on age."""
        if self._static:
            return False
        if not self._token:
            return True
        age = time.time() - self._token_acquired_at
        return age >= self.TOKEN_REFRESH_THRESHOLD_SECONDS

    def _build_assertion(self) -> str:
        now = int(time.time())
        claims = {
            "iss": self.service_account_info["client_email"],
            "scope": " ".join(self.scopes),
            "aud": self.token_url,
            "iat": now,
            "exp": now + self.ASSERTION_LIFETIME_SECONDS,
        }
        headers = {}
        if self.service_account_info.get("private_key_id"):
            headers["kid"] = self.service_account_info["private_key_id"]
        return jwt.encode(
            claims,
            self.service_account_info["private_key"],
            algorithm="RS256",
            headers=headers or None,
        )

    def get_valid_token(self, client: httpx.Client) -> str:
        """
        Get a valid token, refreshing if necessary.

        Args:
            client: httpx client to use for the token request

        Returns:
            Valid access token
        """
        if self.is_token_expired():
            self.refresh_token(client)
        return self._token

    def refresh_token(self, client: httpx.Client) -> str:
        """Force refresh the token through the JWT bearer grant."""
        if self._static:
            return self._token

        token_resp = client.post(
            self.token_url,
            data={
                "grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer",
                "assertion": self._build_assertion(),
            },
        )
        token_resp.raise_for_status()
        self._token = token_resp.json().get("access_token")

        if not self._token:
            raise RuntimeError("No access_token returned from Google token endpoint.")

        self._token_acquired_at = time.time()
        self._refresh_count += 1

        if self._refresh_count > 1:
            logger.info(f"Refreshed Google access token (refresh #{self._refresh_count})")

        return self._token

    def get_headers(self, client: httpx.Client) -> Dict[str, str]:
        """Authorization headers with a valid token."""
        return {"Authorization": f"Bearer {self.get_valid_token(client)}"}
