import asyncio

import pytest

from abogadai.api_client import ApiError
from abogadai.core.models import Case, CriticalFieldsStatus, Message, RoomCredentials
from abogadai.core.ports import CasesApi, Navigator, SessionsApi


def make_case(case_id=77, **fields):
    data = {
        "id": case_id,
        "tipo_documento": "tutela",
        "nombre_solicitante": "Ana Pérez",
        "identificacion_solicitante": "1020304050",
        "direccion_solicitante": "Calle 1 # 2-3",
        "entidad_accionada": "EPS Salud",
        "hechos": "Me negaron un medicamento",
    }
    data.update(fields)
    return Case.from_dict(data)


class _Sessions(SessionsApi):
    def __init__(self, case_id=77, fail_on=None, gate=None, gate_error=None):
        self.case_id = case_id
        self.fail_on = fail_on or set()
        self.gate = gate
        self.gate_error = gate_error
        self.calls = []

    def _maybe_fail(self, name):
        if name in self.fail_on:
            raise ApiError(f"{name} failed", status_code=500)

    async def validate_limit(self):
        self.calls.append("validate_limit")
        if self.gate_error is not None:
            raise self.gate_error
        return self.gate

    async def start(self):
        self.calls.append("start")
        self._maybe_fail("start")
        return self.case_id

    async def connect(self, case_id):
        self.calls.append(("connect", case_id))
        self._maybe_fail("connect")
        return RoomCredentials(access_token="tok-123", url="wss://room.example")

    async def finish(self, case_id):
        self.calls.append(("finish", case_id))
        self._maybe_fail("finish")


class _Cases(CasesApi):
    def __init__(self, case=None, validation=None, fail_on=None, update_delay=0):
        self.case = case or make_case()
        self.validation = validation or CriticalFieldsStatus(can_generate=True)
        self.fail_on = fail_on or set()
        self.generate_error = None
        self.update_delay = update_delay
        self.calls = []

    def _maybe_fail(self, name):
        if name in self.fail_on:
            raise ApiError(f"{name} failed", status_code=500)

    async def process_transcription(self, case_id):
        self.calls.append(("process_transcription", case_id))
        self._maybe_fail("process_transcription")
        return self.case

    async def messages(self, case_id):
        self.calls.append(("messages", case_id))
        self._maybe_fail("messages")
        return [Message("asistente", "Hola"), Message("usuario", "Necesito ayuda")]

    async def critical_fields(self, case_id):
        self.calls.append(("critical_fields", case_id))
        self._maybe_fail("critical_fields")
        return self.validation

    async def update(self, case_id, fields):
        self.calls.append(("update", case_id, dict(fields)))
        self._maybe_fail("update")
        if self.update_delay:
            await asyncio.sleep(self.update_delay)
            self.calls.append(("update_done", case_id))
        self.case = Case.from_dict({**self.case.raw, **fields})
        return self.case

    async def generate(self, case_id):
        self.calls.append(("generate", case_id))
        if self.generate_error is not None:
            raise self.generate_error
        return Case.from_dict({**self.case.raw, "documento_generado": "<html>tutela</html>"})

    async def delete(self, case_id):
        self.calls.append(("delete", case_id))
        self._maybe_fail("delete")


class _Navigator(Navigator):
    def __init__(self):
        self.destinations = []

    def navigate(self, destination):
        self.destinations.append(destination)


@pytest.fixture
def sessions():
    return _Sessions()


@pytest.fixture
def cases():
    return _Cases()


@pytest.fixture
def navigator():
    return _Navigator()
