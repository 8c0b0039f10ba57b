import asyncio

import pytest

from abogadai.core.models import CriticalFieldsStatus
from abogadai.core.revision import GenerationBlocked, RevisionStep, can_generate, field_label

from conftest import _Cases, make_case


def test_can_generate_follows_server_verdict():
    assert can_generate(None) is False
    assert can_generate(CriticalFieldsStatus(can_generate=False, missing_required=("hechos",))) is False
    assert can_generate(CriticalFieldsStatus(can_generate=True)) is True


def test_pretensiones_label_depends_on_document_type():
    assert field_label("pretensiones", "tutela") == "Pretensiones"
    assert field_label("pretensiones", "derecho_peticion") == "Peticiones"
    assert field_label("campo_nuevo") == "campo_nuevo"


def test_missing_labels_for_petition():
    case = make_case(tipo_documento="derecho_peticion")
    cases = _Cases(
        case=case,
        validation=CriticalFieldsStatus(can_generate=False, missing_required=("hechos", "pretensiones")),
    )
    step = RevisionStep(cases, case)
    asyncio.run(step.refresh_validation())

    assert step.missing_labels() == ["Hechos", "Peticiones"]
    assert len(step.missing_labels()) == len(step.missing_required)


def test_generate_refuses_without_network_when_blocked():
    case = make_case()
    cases = _Cases(case=case)
    step = RevisionStep(cases, case)

    with pytest.raises(GenerationBlocked):
        asyncio.run(step.generate())
    assert cases.calls == []


def test_update_form_rejects_unknown_fields():
    case = make_case()
    step = RevisionStep(_Cases(case=case), case)
    with pytest.raises(ValueError):
        step.update_form({"nombre_solicitante": "Otra persona"})


def test_confirmation_summary_includes_represented_person():
    case = make_case(
        actua_en_representacion=True,
        nombre_representado="Luis Pérez",
        identificacion_representado="998877",
    )
    step = RevisionStep(_Cases(case=case), case)
    summary = step.confirmation_summary()

    assert summary.identificacion_solicitante == "1020304050"
    assert summary.direccion_solicitante == "Calle 1 # 2-3"
    assert "En representación de: Luis Pérez - 998877" in summary.lines()


def test_form_defaults_fill_missing_values():
    case = make_case(hechos=None)
    step = RevisionStep(_Cases(case=case), case)
    assert step.form["hechos"] == ""
    assert step.form["tipo_documento"] == "tutela"
    assert step.form["actua_en_representacion"] is False
