"""Google OAuth 2.0 access tokens for the Gmail alert sender.

The relay only ever holds a long-lived refresh token (see scripts/get_token.py)
and trades it for short-lived access tokens here.
"""

import time

import httpx
from pydantic import BaseModel

from relay.config import Settings


GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

# The refresh token must have been granted these
GMAIL_SEND_SCOPES = [
    "https://www.googleapis.com/auth/gmail.send",
]


class TokenData(BaseModel):
    access_token: str
    expires_at: int
    token_type: str = "Bearer"
    scope: str | None = None


class GoogleOAuth:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    async def refresh_token(self, refresh_token: str) -> TokenData:
        """Exchange ``refresh_token`` for a fresh access token. Raises httpx.HTTPStatusError."""
        async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
            response = await client.post(GOOGLE_TOKEN_URL, data={
                "client_id": self.settings.google_client_id,
                "client_secret": self.settings.google_client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            })
            response.raise_for_status()
            data = response.json()

        return TokenData(
            access_token=data["access_token"],
            expires_at=int(time.time()) + data.get("expires_in", 3600),
            token_type=data.get("token_type", "Bearer"),
            scope=data.get("scope"),
        )

    def is_token_expired(self, token: TokenData, buffer_seconds: int = 60) -> bool:
        return time.time() >= (token.expires_at - buffer_seconds)
