import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from copd import textdb
from copd.classify import RiskGroup
from copd.scores import SeverityGrade
from copd.treatment import (
    EosinophilTier,
    eosinophil_advisory,
    eosinophil_tier,
    exacerbation_management,
    follow_up,
    interventional_options,
    non_pharmacological,
    report_sentence,
    resolve_treatment,
)
from copd.util import NumericSpec, parse_numeric


def test_eosinophil_tiers():
    assert eosinophil_tier(None) is EosinophilTier.LOW
    assert eosinophil_tier(99) is EosinophilTier.LOW
    assert eosinophil_tier(100) is EosinophilTier.CONDITIONAL
    assert eosinophil_tier(299) is EosinophilTier.CONDITIONAL
    assert eosinophil_tier(300) is EosinophilTier.STRONG
    assert eosinophil_tier(parse_numeric("450", NumericSpec("int", 0))) is EosinophilTier.STRONG


def test_group_a_ignores_eosinophils():
    low = resolve_treatment(RiskGroup.A, 50)
    high = resolve_treatment(RiskGroup.A, 900)
    assert low == high
    assert low.primary == "Un bronchodilatateur"
    assert low.options


def test_group_b_dual_bronchodilation():
    rec = resolve_treatment(RiskGroup.B, 150)
    assert rec.primary == "Association LABA + LAMA"
    assert rec.sub_note is None
    assert rec.tier is EosinophilTier.CONDITIONAL


def test_group_b_high_eosinophils_adds_note_only():
    plain = resolve_treatment(RiskGroup.B, 299)
    high = resolve_treatment(RiskGroup.B, 300)
    assert high.primary == plain.primary
    assert high.options == plain.options
    assert high.sub_note is not None and "300" in high.sub_note


def test_group_e_tiers():
    strong = resolve_treatment(RiskGroup.E, 300)
    conditional = resolve_treatment(RiskGroup.E, 299)
    low = resolve_treatment(RiskGroup.E, 99)
    unknown = resolve_treatment(RiskGroup.E, None)

    assert strong.block_id == "T-E-STRONG"
    assert "CSI" in strong.primary
    assert conditional.block_id == "T-E-CONDITIONAL"
    assert strong != conditional
    assert low.block_id == "T-E-LOW"
    assert unknown.block_id == "T-E-LOW"
    assert unknown.tier is EosinophilTier.LOW
    assert any("Roflumilast" in o for o in low.options)
    assert "100" in conditional.note and "300" in conditional.note


def test_unknown_group_placeholder():
    rec = resolve_treatment(RiskGroup.UNKNOWN, 400)
    assert rec.options == ()
    assert rec.block_id == "T-UNKNOWN"
    assert "compléter" in report_sentence(rec)


def test_every_group_and_tier_resolves():
    for group in RiskGroup:
        for eos in (None, 0, 99, 100, 299, 300, 1200):
            rec = resolve_treatment(group, eos)
            assert rec.primary
            assert rec.block_id in textdb.T_BLOCKS
            assert isinstance(rec.as_dict()["options"], list)


def test_eosinophil_advisory():
    assert eosinophil_advisory(None) is None
    assert "350" in eosinophil_advisory(350)
    assert eosinophil_advisory(50) == textdb.EOS_BLOCKS["EOS-LOW"].template.replace("{eos}", "50")


def test_interventional_from_gold_3():
    assert interventional_options(SeverityGrade.GOLD_2) == []
    assert interventional_options(SeverityGrade.UNKNOWN) == []
    assert interventional_options(SeverityGrade.GOLD_3)
    assert interventional_options(SeverityGrade.GOLD_4) == interventional_options(SeverityGrade.GOLD_3)


def test_non_pharmacological_ordering():
    selected_title = textdb.NP_BLOCKS["NP-SELECTED"].title
    first = textdb.NP_BLOCKS["NP-SELECTED"].items[0]
    assert non_pharmacological(RiskGroup.E)[selected_title][0] == first
    assert non_pharmacological(RiskGroup.A)[selected_title][-1] == first
    assert textdb.NP_BLOCKS["NP-ESSENTIAL"].title in non_pharmacological(RiskGroup.UNKNOWN)


def test_static_guidance():
    definition, steps = exacerbation_management()
    assert definition and steps
    intro, items = follow_up()
    assert intro and items
