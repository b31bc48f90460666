import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

gr = pytest.importorskip("gradio")


def test_build_demo():
    from copd.ui import build_demo

    demo = build_demo()
    assert isinstance(demo, gr.Blocks)


def test_treatment_markdown_unknown_group():
    from copd.ui import _treatment_markdown
    from copd.wizard import Wizard

    text = _treatment_markdown(Wizard())
    assert "Groupe **Inconnu**" in text
    assert "Mesures essentielles" in text


def _actions():
    from copd.ui import WizardActions

    return WizardActions(["name", "age"])


def test_age_outside_range_reaches_validator():
    from copd.validate import PATIENT_INFO

    out = _actions().next(PATIENT_INFO, {}, "Jean", 17)
    assert out[0] == PATIENT_INFO
    assert out[-1] == {"age": "Âge doit être entre 18 et 120"}
    assert any(isinstance(o, str) and "Âge doit être entre 18 et 120" in o for o in out)


def test_number_widgets_accept_any_value():
    from copd.ui import build_demo

    demo = build_demo()
    numbers = [b for b in demo.blocks.values() if isinstance(b, gr.Number)]
    assert numbers
    for comp in numbers:
        assert comp.preprocess(17) == 17
        assert comp.preprocess(121) == 121


def test_edit_clears_only_that_fields_message():
    from copd.validate import PATIENT_INFO

    actions = _actions()
    errors = actions.next(PATIENT_INFO, {}, "", None)[-1]
    assert set(errors) == {"name", "age"}

    out = actions.refresh("name", PATIENT_INFO, errors, "Jean", None)
    assert out[-1] == {"age": "Âge requis"}
    assert "Âge requis" in out[11]
    assert "Nom requis" not in out[11]


def test_valid_step_moves_on():
    from copd.validate import DIAGNOSTIC, PATIENT_INFO

    out = _actions().next(PATIENT_INFO, {}, "Jean", 65.0)
    assert out[0] == DIAGNOSTIC
    assert out[-1] == {}


def test_report_failure_shows_traceback(monkeypatch):
    from copd.ui import _guarded
    from copd.validate import ASSESSMENT
    from copd.wizard import Wizard

    def boom(self):
        raise RuntimeError("report exploded")

    monkeypatch.setattr(Wizard, "report", boom)
    actions = _actions()
    out = _guarded(actions.report, actions.report_failed)(ASSESSMENT, {}, "Jean", 65)
    assert len(out) == 4
    assert "### Erreur" in out[2]
    assert "report exploded" in out[2]
