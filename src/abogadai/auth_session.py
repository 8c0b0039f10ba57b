"""Explicit auth session context.

Replaces ambient token/user globals with one object that has a defined
lifecycle:
    - load() on app start reads a persisted token/user, if any
    - login() persists the new token
    - logout() clears everything, in memory and on disk
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .api_client import ApiClient

logger = logging.getLogger(__name__)


class AuthSession:
    def __init__(self, session_file: Path):
        self._session_file = Path(session_file)
        self.token: str | None = None
        self.user: dict | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def get_token(self) -> str | None:
        """Token provider for ApiClient."""
        return self.token

    def load(self) -> None:
        if not self._session_file.exists():
            return
        try:
            data = json.loads(self._session_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self._session_file}: {e}")
            return
        self.token = data.get("token")
        self.user = data.get("user")

    def _persist(self) -> None:
        self._session_file.parent.mkdir(parents=True, exist_ok=True)
        payload = {"token": self.token, "user": self.user}
        self._session_file.write_text(json.dumps(payload), encoding="utf-8")

    async def signup(self, client: ApiClient, user_data: dict) -> dict:
        return await client.post("/auth/signup", json=user_data)

    async def login(self, client: ApiClient, email: str, password: str) -> dict:
        data = await client.post("/auth/login", json={"email": email, "password": password})
        if data and data.get("access_token"):
            self.token = data["access_token"]
            self._persist()
        return data

    async def current_user(self, client: ApiClient) -> dict:
        """Fetch the user and cache it for offline reads."""
        self.user = await client.get("/auth/me")
        self._persist()
        return self.user

    async def change_password(self, client: ApiClient, current: str, new: str) -> None:
        await client.post(
            "/auth/cambiar-password",
            json={"current_password": current, "new_password": new},
        )

    def logout(self) -> None:
        self.token = None
        self.user = None
        try:
            self._session_file.unlink()
        except FileNotFoundError:
            pass

    @property
    def is_admin(self) -> bool:
        if not self.user:
            return False
        return bool(
            self.user.get("es_admin") or self.user.get("is_admin") or self.user.get("rol") == "admin"
        )
