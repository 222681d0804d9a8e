#!/usr/bin/env python3
"""
Gmail Refresh Token Generator

Run once to get a refresh token that lets the relay send alert emails
as GMAIL_SENDER (scope: gmail.send).

Usage:
    python scripts/get_token.py

1. Open the printed URL and authorize with the sending account
2. Copy the redirect URL (or just its 'code' value) from the address bar
3. Paste it into the terminal
4. Put the printed token into .env as GOOGLE_REFRESH_TOKEN
"""

import sys
from pathlib import Path
from urllib.parse import parse_qs, urlencode, urlparse

import httpx

# Add parent directory to path so we can import relay without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from relay.auth.google import GMAIL_SEND_SCOPES, GOOGLE_TOKEN_URL  # noqa: E402
from relay.config import Settings  # noqa: E402

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
# Nothing listens here; the code is copied from the URL bar
REDIRECT_URI = "http://localhost:8080"


def build_auth_url(settings: Settings, state: str) -> str:
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(GMAIL_SEND_SCOPES),
        "access_type": "offline",
        "prompt": "consent",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def exchange_code(settings: Settings, code: str) -> dict:
    response = httpx.post(GOOGLE_TOKEN_URL, timeout=30.0, data={
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "code": code,
        "grant_type": "authorization_code",
        "redirect_uri": REDIRECT_URI,
    })
    response.raise_for_status()
    return response.json()


def _extract_code(user_input: str) -> str:
    if "code=" not in user_input:
        return user_input
    query = urlparse(user_input).query or user_input.split("?", 1)[-1]
    return parse_qs(query).get("code", [""])[0]


def main():
    settings = Settings()
    if not settings.google_client_id or not settings.google_client_secret:
        print("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set in .env")
        sys.exit(1)

    print("Scopes requested:")
    for scope in GMAIL_SEND_SCOPES:
        print(f"  - {scope}")
    print()
    print("Visit this URL and authorize the sending account:")
    print()
    print(build_auth_url(settings, state="payment-relay"))
    print()
    print(f"Google will redirect to {REDIRECT_URI}/?code=... (the page will not load).")
    code = _extract_code(input("Paste the redirect URL or the code: ").strip())

    try:
        token_data = exchange_code(settings, code)
    except httpx.HTTPError as e:
        print(f"\nERROR: {e}")
        print(f"Check the client credentials and that {REDIRECT_URI} is an authorized redirect URI.")
        sys.exit(1)

    refresh_token = token_data.get("refresh_token")
    if not refresh_token:
        print("\nNo refresh token returned. Revoke the app's access in your Google account and retry.")
        sys.exit(1)

    print("\nAdd this to your .env file:\n")
    print(f"GOOGLE_REFRESH_TOKEN={refresh_token}")


if __name__ == "__main__":
    main()
