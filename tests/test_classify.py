import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from copd.classify import RiskGroup, classify_risk_group, coherence_checks
from copd.record import Field, create_initial_record, update_fields


def _rec(mmrc="0", exa="0", hosp="0", **extra):
    values = {
        Field.DYSPNEA_SCALE: mmrc,
        Field.EXACERBATIONS_LAST_YEAR: exa,
        Field.HOSPITALIZATIONS_LAST_YEAR: hosp,
    }
    values.update({Field(k): v for k, v in extra.items()})
    return update_fields(create_initial_record(), values)


def test_group_e_from_history():
    assert classify_risk_group(_rec(exa="2"), 5) is RiskGroup.E
    assert classify_risk_group(_rec(hosp="1"), 5) is RiskGroup.E
    # history dominates symptoms
    assert classify_risk_group(_rec(mmrc="4", exa="3"), 30) is RiskGroup.E


def test_group_b_from_symptoms():
    assert classify_risk_group(_rec(mmrc="2"), 0) is RiskGroup.B
    assert classify_risk_group(_rec(mmrc="0"), 10) is RiskGroup.B


def test_group_a_low_symptoms():
    assert classify_risk_group(_rec(mmrc="1", exa="1"), 9) is RiskGroup.A


def test_questionnaire_boundary_9_10():
    rec = _rec(mmrc="1")
    assert classify_risk_group(rec, 9) is RiskGroup.A
    assert classify_risk_group(rec, 10) is RiskGroup.B


def test_unknown_inputs_give_unknown_group():
    assert classify_risk_group(_rec(), None) is RiskGroup.UNKNOWN
    assert classify_risk_group(_rec(mmrc=""), 5) is RiskGroup.UNKNOWN
    assert classify_risk_group(_rec(exa=""), 5) is RiskGroup.UNKNOWN
    assert classify_risk_group(_rec(hosp="x"), 5) is RiskGroup.UNKNOWN
    assert not RiskGroup.UNKNOWN.known


def test_group_rule_overrides():
    rules = {"risk": {"cat_ge": 15}}
    assert classify_risk_group(_rec(mmrc="1"), 12, rules) is RiskGroup.A


def test_coherence_not_confirmed():
    adv = coherence_checks(_rec(post_ratio="0.75"), 5, RiskGroup.A)
    assert adv
    assert any("0.70" in w for w in adv.warnings)
    assert not coherence_checks(_rec(post_ratio="0.55"), 5, RiskGroup.A)


def test_coherence_symptom_discordance():
    adv = coherence_checks(_rec(mmrc="3"), 4, RiskGroup.B)
    assert len(adv.warnings) == 1
    assert "mMRC (≥2" in adv.warnings[0]

    adv = coherence_checks(_rec(mmrc="0"), 20, RiskGroup.B)
    assert len(adv.warnings) == 1
    assert "mMRC (<2" in adv.warnings[0]


def test_coherence_group_e_with_low_history():
    adv = coherence_checks(_rec(exa="0", hosp="0"), 5, RiskGroup.E)
    assert any("Groupe E" in w for w in adv.warnings)
    assert adv.to_markdown().startswith("### Points d'attention")


def test_history_alone_gives_e_with_no_symptoms():
    assert classify_risk_group(_rec(mmrc="0", exa="2", hosp="0"), 0) is RiskGroup.E


def test_decimal_history_is_truncated():
    assert classify_risk_group(_rec(exa="1.5"), 0) is RiskGroup.A
    assert classify_risk_group(_rec(exa="2.7"), 0) is RiskGroup.E
