import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from copd.record import QUESTIONNAIRE_FIELDS, Field, create_initial_record, update_field, update_fields
from copd.scores import (
    CAT_QUESTIONS,
    MMRC_OPTIONS,
    SeverityGrade,
    check_obstruction,
    compute_questionnaire_total,
    compute_severity_grade,
    questionnaire_impact,
    severity_from_percent,
)


def _cat(values):
    return update_fields(create_initial_record(), dict(zip(QUESTIONNAIRE_FIELDS, values)))


def test_catalogs():
    assert [q.field for q in CAT_QUESTIONS] == list(QUESTIONNAIRE_FIELDS)
    assert [v for v, _ in MMRC_OPTIONS] == ["0", "1", "2", "3", "4"]


def test_questionnaire_total_complete():
    assert compute_questionnaire_total(_cat([1, 2, 3, 4, 5, 0, 1, 2])) == 18
    assert compute_questionnaire_total(_cat([0] * 8)) == 0
    assert compute_questionnaire_total(_cat([5] * 8)) == 40


def test_questionnaire_total_partial_is_unknown():
    rec = _cat([2] * 8)
    rec = update_field(rec, Field.CAT_SLEEP, "")
    assert compute_questionnaire_total(rec) is None
    assert compute_questionnaire_total(create_initial_record()) is None


def test_questionnaire_total_invalid_item_is_unknown():
    rec = update_field(_cat([2] * 8), Field.CAT_ENERGY, "beaucoup")
    assert compute_questionnaire_total(rec) is None


def test_questionnaire_impact():
    assert questionnaire_impact(None) == "unknown"
    assert questionnaire_impact(9) == "low"
    assert questionnaire_impact(10) == "high"


def test_severity_boundaries():
    assert severity_from_percent(80) is SeverityGrade.GOLD_1
    assert severity_from_percent(79) is SeverityGrade.GOLD_2
    assert severity_from_percent(50) is SeverityGrade.GOLD_2
    assert severity_from_percent(49) is SeverityGrade.GOLD_3
    assert severity_from_percent(30) is SeverityGrade.GOLD_3
    assert severity_from_percent(29) is SeverityGrade.GOLD_4
    assert severity_from_percent(None) is SeverityGrade.UNKNOWN


def test_severity_from_record():
    rec = create_initial_record()
    assert compute_severity_grade(rec) is SeverityGrade.UNKNOWN
    assert compute_severity_grade(update_field(rec, Field.PERCENT_PREDICTED, "45")) is SeverityGrade.GOLD_3
    assert compute_severity_grade(update_field(rec, Field.PERCENT_PREDICTED, "abc")) is SeverityGrade.UNKNOWN
    assert SeverityGrade.GOLD_4.label == "GOLD 4 (Très sévère)"
    assert not SeverityGrade.UNKNOWN.known


def test_severity_uses_rule_overrides():
    rules = {"severity": {"gold1_ge": 70}}
    assert severity_from_percent(75, rules) is SeverityGrade.GOLD_1
    assert severity_from_percent(75) is SeverityGrade.GOLD_2


def test_obstruction_check():
    rec = create_initial_record()
    assert check_obstruction(rec) is None
    assert check_obstruction(update_field(rec, Field.POST_RATIO, "0.65")) is True
    assert check_obstruction(update_field(rec, Field.POST_RATIO, "0.70")) is False


def test_severity_truncates_decimal_percent():
    rec = update_field(create_initial_record(), Field.PERCENT_PREDICTED, "79.5")
    assert compute_severity_grade(rec) is SeverityGrade.GOLD_2
    rec = update_field(rec, Field.PERCENT_PREDICTED, 49.9)
    assert compute_severity_grade(rec) is SeverityGrade.GOLD_3
