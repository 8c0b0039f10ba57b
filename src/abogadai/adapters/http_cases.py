"""CasesApi adapter over the REST backend, plus case-list/document calls."""

from __future__ import annotations

from ..api_client import ApiClient, decode
from ..core.models import Case, CriticalFieldsStatus, Message


def _message_list(items: list) -> list[Message]:
    return [Message.from_dict(item) for item in items or []]


def _case_list(items: list) -> list[Case]:
    return [Case.from_dict(item) for item in items or []]


class HttpCasesApi:
    def __init__(self, client: ApiClient):
        self._client = client

    # Session pipeline

    async def process_transcription(self, case_id: int) -> Case:
        return decode(Case.from_dict, await self._client.post(f"/casos/{case_id}/procesar-transcripcion"))

    async def messages(self, case_id: int) -> list[Message]:
        data = await self._client.get(f"/mensajes/caso/{case_id}")
        return decode(_message_list, data)

    async def critical_fields(self, case_id: int) -> CriticalFieldsStatus:
        return decode(CriticalFieldsStatus.from_dict, await self._client.get(f"/casos/{case_id}/campos-criticos"))

    async def update(self, case_id: int, fields: dict) -> Case:
        return decode(Case.from_dict, await self._client.put(f"/casos/{case_id}", json=fields))

    async def generate(self, case_id: int) -> Case:
        return decode(Case.from_dict, await self._client.post(f"/casos/{case_id}/generar"))

    async def delete(self, case_id: int) -> None:
        await self._client.delete(f"/casos/{case_id}")

    # Case list and documents

    async def list_cases(self) -> list[Case]:
        data = await self._client.get("/casos/")
        return decode(_case_list, data)

    async def get_case(self, case_id: int) -> Case:
        return decode(Case.from_dict, await self._client.get(f"/casos/{case_id}"))

    async def get_document(self, case_id: int) -> dict:
        """Preview or full document, depending on payment state."""
        return await self._client.get(f"/casos/{case_id}/documento")

    async def simulate_payment(self, case_id: int) -> dict:
        return await self._client.post(f"/casos/{case_id}/simular-pago")

    async def download_pdf(self, case_id: int) -> bytes:
        return await self._client.get(f"/casos/{case_id}/descargar/pdf", raw=True)

    async def has_news(self) -> bool:
        data = await self._client.get("/casos/tiene-novedades")
        if isinstance(data, dict):
            return bool(data.get("tiene_novedades"))
        return bool(data)

    async def mark_seen(self) -> None:
        await self._client.post("/casos/marcar-vistos")
