"""Data contracts exchanged with the backend.

The core only reads a handful of fields from a case; everything the server
returns is kept in ``raw`` so callers can still reach the rest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Fields the review form edits and the autosave sends back.
EDITABLE_FIELDS: dict[str, Any] = {
    "tipo_documento": "tutela",
    "actua_en_representacion": False,
    "nombre_representado": "",
    "identificacion_representado": "",
    "relacion_representado": "",
    "tipo_representado": "",
    "entidad_accionada": "",
    "direccion_entidad": "",
    "representante_legal": "",
    "hechos": "",
    "derechos_vulnerados": "",
    "pretensiones": "",
    "fundamentos_derecho": "",
    "pruebas": "",
}


@dataclass
class Case:
    """A legal document record (tutela / derecho de peticion)."""

    id: int
    tipo_documento: str = "tutela"
    estado: str | None = None

    # Solicitant (read-only, comes from the user profile)
    nombre_solicitante: str = ""
    identificacion_solicitante: str = ""
    direccion_solicitante: str = ""
    telefono_solicitante: str = ""
    email_solicitante: str = ""

    # Target entity
    entidad_accionada: str = ""
    direccion_entidad: str = ""

    # Narrative
    hechos: str = ""
    derechos_vulnerados: str = ""
    pretensiones: str = ""

    documento_generado: str | None = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Case":
        def text(key: str) -> str:
            return data.get(key) or ""

        return cls(
            id=data["id"],
            tipo_documento=data.get("tipo_documento") or "tutela",
            estado=data.get("estado"),
            nombre_solicitante=text("nombre_solicitante"),
            identificacion_solicitante=text("identificacion_solicitante"),
            direccion_solicitante=text("direccion_solicitante"),
            telefono_solicitante=text("telefono_solicitante"),
            email_solicitante=text("email_solicitante"),
            entidad_accionada=text("entidad_accionada"),
            direccion_entidad=text("direccion_entidad"),
            hechos=text("hechos"),
            derechos_vulnerados=text("derechos_vulnerados"),
            pretensiones=text("pretensiones"),
            documento_generado=data.get("documento_generado"),
            raw=dict(data),
        )

    def editable_fields(self) -> dict[str, Any]:
        """Initial review-form values, server value or the field default."""
        values = {}
        for key, default in EDITABLE_FIELDS.items():
            value = self.raw.get(key)
            values[key] = default if value in (None, "") else value
        return values

    @property
    def has_document(self) -> bool:
        return bool(self.documento_generado)


@dataclass(frozen=True)
class CriticalFieldsStatus:
    can_generate: bool
    missing_required: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "CriticalFieldsStatus":
        return cls(
            can_generate=bool(data.get("puede_generar", False)),
            missing_required=tuple(data.get("bloqueantes_faltantes") or ()),
        )


@dataclass(frozen=True)
class Message:
    """One conversation turn (``remitente`` is "usuario" or the assistant)."""

    sender: str
    text: str

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(sender=data.get("remitente", ""), text=data.get("texto", ""))

    @property
    def from_user(self) -> bool:
        return self.sender == "usuario"


@dataclass(frozen=True)
class RoomCredentials:
    access_token: str
    url: str

    @classmethod
    def from_dict(cls, data: dict) -> "RoomCredentials":
        return cls(access_token=data["access_token"], url=data["livekit_url"])
