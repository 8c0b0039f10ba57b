"""SessionsApi adapter over the REST backend."""

from __future__ import annotations

from ..api_client import ApiClient, decode
from ..core.models import RoomCredentials


def _case_id(data: dict) -> int:
    return int(data["caso_id"])


class HttpSessionsApi:
    def __init__(self, client: ApiClient):
        self._client = client

    async def validate_limit(self) -> dict:
        return await self._client.get("/sesiones/validar-limite")

    async def start(self) -> int:
        return decode(_case_id, await self._client.post("/sesiones/iniciar"))

    async def connect(self, case_id: int) -> RoomCredentials:
        data = await self._client.post(f"/sesiones/{case_id}/conectar")
        return decode(RoomCredentials.from_dict, data)

    async def finish(self, case_id: int) -> None:
        await self._client.put(f"/sesiones/{case_id}/finalizar")
