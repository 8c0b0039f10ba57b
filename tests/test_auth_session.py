import asyncio

import httpx

from abogadai.api_client import ApiClient
from abogadai.auth_session import AuthSession


def _backend(seen):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/auth/login":
            return httpx.Response(200, json={"access_token": "jwt-1", "token_type": "bearer"})
        if request.url.path == "/auth/me":
            return httpx.Response(200, json={"id": 1, "nombre": "Ana", "es_admin": False})
        return httpx.Response(404, json={"detail": "no"})

    return httpx.MockTransport(handler)


def test_login_persists_and_load_restores(tmp_path):
    session_file = tmp_path / "session.json"
    auth = AuthSession(session_file)
    seen = []

    async def scenario():
        client = ApiClient("https://api.test", token_provider=auth.get_token, transport=_backend(seen))
        await auth.login(client, "ana@example.com", "secreto")
        await auth.current_user(client)
        await client.aclose()

    asyncio.run(scenario())

    assert auth.is_authenticated
    assert seen[1].headers["Authorization"] == "Bearer jwt-1"
    assert "Authorization" not in seen[0].headers

    restored = AuthSession(session_file)
    restored.load()
    assert restored.token == "jwt-1"
    assert restored.user["nombre"] == "Ana"
    assert restored.is_admin is False


def test_logout_clears_memory_and_disk(tmp_path):
    session_file = tmp_path / "session.json"
    session_file.write_text('{"token": "jwt-1", "user": {"rol": "admin"}}', encoding="utf-8")
    auth = AuthSession(session_file)
    auth.load()
    assert auth.is_admin

    auth.logout()
    auth.logout()

    assert not auth.is_authenticated
    assert auth.user is None
    assert not session_file.exists()


def test_load_ignores_corrupt_file(tmp_path):
    session_file = tmp_path / "session.json"
    session_file.write_text("{not json", encoding="utf-8")
    auth = AuthSession(session_file)
    auth.load()
    assert not auth.is_authenticated
