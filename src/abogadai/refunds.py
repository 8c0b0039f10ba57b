"""Refund requests for paid documents."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

from .api_client import ApiClient

MIN_REASON_LENGTH = 20
MAX_EVIDENCE_BYTES = 5 * 1024 * 1024
ALLOWED_EVIDENCE_SUFFIXES = {".pdf", ".jpg", ".jpeg", ".png"}


class RefundValidationError(ValueError):
    """Refund form rejected before it reached the server.

    Attributes:
        errors: Field name -> message, for every invalid field
    """

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


@dataclass
class RefundRequest:
    reason: str
    evidence_path: Path | None = None

    def validate(self) -> None:
        errors = {}
        reason = self.reason.strip()
        if not reason:
            errors["motivo"] = "El motivo es obligatorio"
        elif len(reason) < MIN_REASON_LENGTH:
            errors["motivo"] = f"El motivo debe tener al menos {MIN_REASON_LENGTH} caracteres"

        if self.evidence_path is not None:
            path = Path(self.evidence_path)
            if path.suffix.lower() not in ALLOWED_EVIDENCE_SUFFIXES:
                errors["evidencia"] = "Solo se permiten archivos PDF, JPG o PNG"
            elif path.stat().st_size > MAX_EVIDENCE_BYTES:
                errors["evidencia"] = "El archivo no debe superar los 5 MB"

        if errors:
            raise RefundValidationError(errors)


async def submit_refund(client: ApiClient, case_id: int, request: RefundRequest) -> dict:
    """Validate and post a refund request as multipart form data.

    Raises:
        RefundValidationError: If the form is invalid (nothing is sent)
        ApiError: If the server rejects it; ``detail`` carries the reason
    """
    request.validate()

    files = None
    if request.evidence_path is not None:
        path = Path(request.evidence_path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        files = {"evidencia": (path.name, path.read_bytes(), content_type)}

    return await client.post(
        f"/casos/{case_id}/solicitar-reembolso",
        data={"motivo": request.reason.strip()},
        files=files,
    )
