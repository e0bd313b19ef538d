import os
from typing import Dict, Optional
from urllib.parse import urlencode

import requests

AUTHORIZE_URL = os.getenv("GOOGLE_AUTHORIZE_URL", "https://accounts.google.com/o/oauth2/v2/auth")
TOKEN_URL     = os.getenv("GOOGLE_TOKEN_URL",     "https://oauth2.googleapis.com/token")
USERINFO_URL  = os.getenv("GOOGLE_USERINFO_URL",  "https://openidconnect.googleapis.com/v1/userinfo")

CLIENT_ID     = os.getenv("GOOGLE_CLIENT_ID")
CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
CALLBACK_URL  = os.getenv("GOOGLE_CALLBACK_URL", "http://localhost:8000/api/auth/google/callback")

SCOPES = ("openid", "email", "profile")
DEFAULT_TIMEOUT = (6, 20)  # (connect, read)


class GoogleOAuthClient:
    def __init__(self, client_id: Optional[str] = None, client_secret: Optional[str] = None,
                 callback_url: Optional[str] = None):
        self.client_id = client_id or CLIENT_ID
        self.client_secret = client_secret or CLIENT_SECRET
        self.callback_url = callback_url or CALLBACK_URL
        if not (self.client_id and self.client_secret):
            raise RuntimeError("GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET 가 설정되지 않았습니다.")

    def authorization_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "online",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> Dict:
        resp = requests.post(
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.callback_url,
                "grant_type": "authorization_code",
            },
            timeout=DEFAULT_TIMEOUT,
        )
        resp.raise_for_status()
        return resp.json()

    def get_userinfo(self, access_token: str) -> Dict:
        resp = requests.get(
            USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=DEFAULT_TIMEOUT,
        )
        resp.raise_for_status()
        return resp.json()
