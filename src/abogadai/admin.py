"""Admin back-office: platform metrics and refund review."""

from __future__ import annotations

from .api_client import ApiClient

REFUND_FILTERS = {
    "todas": None,
    "pendientes": "pendiente",
    "aprobadas": "aprobado",
    "rechazadas": "rechazado",
}


def share(value: float, total: float) -> int:
    """Rounded percentage for dashboard cards; 0 when total is 0."""
    if total == 0:
        return 0
    return round(value / total * 100)


def filter_refunds(refunds: list[dict], filtro: str = "todas") -> list[dict]:
    if filtro not in REFUND_FILTERS:
        raise ValueError(f"Unknown refund filter: {filtro}")
    estado = REFUND_FILTERS[filtro]
    if estado is None:
        return list(refunds)
    return [refund for refund in refunds if refund.get("estado") == estado]


def count_refunds(refunds: list[dict]) -> dict[str, int]:
    return {name: len(filter_refunds(refunds, name)) for name in REFUND_FILTERS}


class AdminClient:
    def __init__(self, client: ApiClient):
        self._client = client

    async def metrics(self) -> dict:
        return await self._client.get("/admin/metricas")

    async def list_refunds(self, estado: str = "todas") -> list[dict]:
        return await self._client.get("/admin/reembolsos", params={"estado": estado}) or []

    async def approve_refund(self, case_id: int) -> None:
        await self._client.post(f"/admin/reembolsos/{case_id}/aprobar")

    async def reject_refund(self, case_id: int, reason: str) -> None:
        reason = reason.strip()
        if not reason:
            raise ValueError("Debes proporcionar una razón para el rechazo")
        await self._client.post(f"/admin/reembolsos/{case_id}/rechazar", json={"razon": reason})
