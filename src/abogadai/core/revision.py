"""Review step: edit extracted fields, validate, generate the document."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..api_client import ApiError
from .models import EDITABLE_FIELDS, Case, CriticalFieldsStatus
from .outcome import Outcome, attempt
from .ports import CasesApi

logger = logging.getLogger(__name__)

GENERATION_FALLBACK_ERROR = "Error al generar el documento"
GENERATION_BLOCKED_MESSAGE = (
    "Por favor completa todos los campos obligatorios antes de generar el documento"
)

FIELD_LABELS: dict[str, str] = {
    "tipo_documento": "Tipo de documento",
    "nombre_solicitante": "Nombre del solicitante",
    "identificacion_solicitante": "Identificación del solicitante",
    "direccion_solicitante": "Dirección del solicitante",
    "nombre_representado": "Nombre del representado",
    "identificacion_representado": "Identificación del representado",
    "relacion_representado": "Relación con el representado",
    "entidad_accionada": "Entidad accionada",
    "direccion_entidad": "Dirección de la entidad",
    "representante_legal": "Representante legal",
    "hechos": "Hechos",
    "derechos_vulnerados": "Derechos vulnerados",
    "pretensiones": "Pretensiones",
    "fundamentos_derecho": "Fundamentos de derecho",
    "pruebas": "Pruebas",
}


class GenerationBlocked(ValueError):
    """Generation requested while required fields are still missing."""


def can_generate(status: CriticalFieldsStatus | None) -> bool:
    """Server verdict; False until the first validation has loaded."""
    return bool(status and status.can_generate)


def field_label(key: str, tipo_documento: str = "tutela") -> str:
    if key == "pretensiones" and tipo_documento != "tutela":
        return "Peticiones"
    return FIELD_LABELS.get(key, key)


@dataclass(frozen=True)
class ConfirmationSummary:
    """Sensitive data shown back to the user before generating."""

    tipo_documento: str
    nombre_solicitante: str
    identificacion_solicitante: str
    direccion_solicitante: str
    entidad_accionada: str
    direccion_entidad: str
    nombre_representado: str | None = None
    identificacion_representado: str | None = None

    def lines(self) -> list[str]:
        lines = [
            f"Documento: {self.tipo_documento}",
            f"Solicitante: {self.nombre_solicitante or '-'} ({self.identificacion_solicitante or '-'})",
            f"Dirección: {self.direccion_solicitante or '-'}",
            f"Entidad accionada: {self.entidad_accionada or '-'}",
            f"Dirección de la entidad: {self.direccion_entidad or '-'}",
        ]
        if self.nombre_representado is not None:
            lines.append(
                f"En representación de: {self.nombre_representado} - {self.identificacion_representado}"
            )
        return lines


class RevisionStep:
    """Holds the review form for one case and talks to the case endpoints."""

    def __init__(self, cases: CasesApi, case: Case):
        self._cases = cases
        self.case = case
        self.form = case.editable_fields()
        self.validation: CriticalFieldsStatus | None = None
        self.saving = False
        self.generating = False
        self.error: str | None = None

    def update_form(self, changes: dict) -> None:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        self.form.update(changes)

    async def refresh_validation(self) -> Outcome[CriticalFieldsStatus]:
        outcome = await attempt(self._cases.critical_fields(self.case.id))
        if outcome.ok:
            self.validation = outcome.value
        return outcome.log_if_failed(logger, f"Loading critical fields for case {self.case.id}")

    async def save(self) -> Outcome[Case]:
        """Write the form and re-read the server's validation verdict."""
        self.saving = True
        try:
            outcome = await attempt(self._cases.update(self.case.id, dict(self.form)))
            if outcome.ok:
                self.case = outcome.value
                await self.refresh_validation()
        finally:
            self.saving = False
        return outcome.log_if_failed(logger, f"Autosave of case {self.case.id}")

    def can_generate(self) -> bool:
        return can_generate(self.validation)

    @property
    def missing_required(self) -> tuple[str, ...]:
        return self.validation.missing_required if self.validation else ()

    def missing_labels(self) -> list[str]:
        tipo = self.form.get("tipo_documento") or "tutela"
        return [field_label(key, tipo) for key in self.missing_required]

    def confirmation_summary(self) -> ConfirmationSummary:
        represented = bool(self.form.get("actua_en_representacion"))
        return ConfirmationSummary(
            tipo_documento=self.form.get("tipo_documento") or "tutela",
            nombre_solicitante=self.case.nombre_solicitante,
            identificacion_solicitante=self.case.identificacion_solicitante,
            direccion_solicitante=self.case.direccion_solicitante,
            entidad_accionada=self.form.get("entidad_accionada", ""),
            direccion_entidad=self.form.get("direccion_entidad", ""),
            nombre_representado=self.form.get("nombre_representado") if represented else None,
            identificacion_representado=(
                self.form.get("identificacion_representado") if represented else None
            ),
        )

    async def generate(self) -> Outcome[Case]:
        """Generate the document; never touches the network when blocked.

        Raises:
            GenerationBlocked: If the server has not cleared generation
        """
        if not self.can_generate():
            raise GenerationBlocked(GENERATION_BLOCKED_MESSAGE)

        self.generating = True
        try:
            outcome = await attempt(self._cases.generate(self.case.id))
        finally:
            self.generating = False

        if outcome.ok:
            self.case = outcome.value
            self.error = None
        else:
            error = outcome.error
            detail = error.detail if isinstance(error, ApiError) else None
            self.error = detail or GENERATION_FALLBACK_ERROR
            logger.error("Generating document for case %s failed: %s", self.case.id, error)
        return outcome
