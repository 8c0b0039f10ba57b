import asyncio

from abogadai.api_client import ApiError
from abogadai.limit_gate import (
    GATE_ERROR_MESSAGE,
    Allowed,
    BlockedByError,
    BlockedByLimit,
    LimitGate,
)
from abogadai.usage import SEVERITY_OK, SEVERITY_WARNING, UsageSnapshot, UsageSnapshotReader

from conftest import _Sessions


def _check(sessions):
    return asyncio.run(LimitGate(sessions).check())


def test_gate_allowed():
    sessions = _Sessions(
        gate={
            "permitido": True,
            "sesiones_usadas": 4,
            "sesiones_disponibles": 5,
            "minutos_usados": 10,
            "minutos_disponibles": 50,
            "duracion_maxima_sesion": 10,
        }
    )
    result = _check(sessions)

    assert isinstance(result, Allowed)
    assert result.sessions_remaining == 1
    assert result.max_session_duration_minutes == 10
    assert result.sessions_severity == SEVERITY_WARNING
    assert result.minutes_severity == SEVERITY_OK
    assert result.warn_sessions and not result.warn_minutes
    assert sessions.calls == ["validate_limit"]


def test_gate_blocked_by_limit_on_429():
    error = ApiError(
        "Has alcanzado el límite de sesiones diarias",
        status_code=429,
        payload={
            "detail": "Has alcanzado el límite de sesiones diarias",
            "sesiones_usadas": 3,
            "sesiones_maximas": 3,
        },
    )
    result = _check(_Sessions(gate_error=error))

    assert result == BlockedByLimit(
        message="Has alcanzado el límite de sesiones diarias",
        sessions_used=3,
        sessions_maximum=3,
    )


def test_gate_blocked_by_error_on_other_failures():
    assert _check(_Sessions(gate_error=ApiError("down", status_code=500))) == BlockedByError()
    result = _check(_Sessions(gate_error=ApiError("Connection error")))
    assert isinstance(result, BlockedByError)
    assert result.message == GATE_ERROR_MESSAGE


def test_gate_not_permitted_body_is_a_limit_block():
    result = _check(_Sessions(gate={"permitido": False, "sesiones_usadas": 2, "sesiones_maximas": 2}))
    assert isinstance(result, BlockedByLimit)
    assert result.sessions_used == 2


def test_gate_malformed_body_is_an_error():
    assert isinstance(_check(_Sessions(gate=None)), BlockedByError)


def test_gate_error_leaves_previous_snapshot_untouched():
    async def fetch():
        return UsageSnapshot(1, 5, 5, 50)

    reader = UsageSnapshotReader(fetch, poll_interval=1)
    sessions = _Sessions(gate_error=ApiError("down", status_code=502))

    async def scenario():
        await reader.refresh()
        before = reader.snapshot
        result = await LimitGate(sessions).check()
        return before, result

    before, result = asyncio.run(scenario())

    assert isinstance(result, BlockedByError)
    assert reader.snapshot is before
    assert reader.snapshot.sessions_remaining == 4
    assert reader.error is None
