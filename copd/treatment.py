# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from . import textdb
from .classify import RiskGroup
from .rules import rule
from .scores import SeverityGrade
from .util import ParsedNumeric, SafeDict, fmt_num


class EosinophilTier(str, Enum):
    STRONG = "strong"            # >= 300 cells/µL
    CONDITIONAL = "conditional"  # 100-299
    LOW = "low"                  # < 100 or unknown


@dataclass(frozen=True)
class TreatmentRecommendation:
    primary: str
    options: Tuple[str, ...]
    note: str
    block_id: str
    tier: Optional[EosinophilTier] = None
    sub_note: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary,
            "options": list(self.options),
            "note": self.note,
            "tier": self.tier.value if self.tier else None,
            "sub_note": self.sub_note,
        }


Eosinophils = Union[None, int, float, ParsedNumeric]


def _eos_value(eosinophils: Eosinophils) -> Optional[float]:
    if isinstance(eosinophils, ParsedNumeric):
        return eosinophils.value
    if isinstance(eosinophils, bool):
        return None
    return eosinophils


def eosinophil_tier(eosinophils: Eosinophils, rules: Optional[Dict[str, Any]] = None) -> EosinophilTier:
    eos = _eos_value(eosinophils)
    if eos is None:
        return EosinophilTier.LOW
    if eos >= rule(rules, "eosinophils", "strong_ge"):
        return EosinophilTier.STRONG
    if eos >= rule(rules, "eosinophils", "conditional_ge"):
        return EosinophilTier.CONDITIONAL
    return EosinophilTier.LOW


def eosinophil_advisory(eosinophils: Eosinophils, rules: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Tier sentence shown under the recommendation; None when no count was entered."""
    eos = _eos_value(eosinophils)
    if eos is None:
        return None
    tier = eosinophil_tier(eos, rules)
    blk = textdb.EOS_BLOCKS[f"EOS-{tier.name}"]
    return blk.template.format_map(SafeDict(eos=fmt_num(eos, 0)))


def _render(block_id: str, rules: Optional[Dict[str, Any]]) -> Tuple[textdb.TextBlock, str]:
    blk = textdb.T_BLOCKS[block_id]
    ctx = SafeDict(
        strong_ge=fmt_num(rule(rules, "eosinophils", "strong_ge"), 0),
        conditional_ge=fmt_num(rule(rules, "eosinophils", "conditional_ge"), 0),
    )
    note = blk.variants.get("note", "").format_map(ctx)
    return blk, note


def resolve_treatment(
    group: RiskGroup,
    eosinophils: Eosinophils = None,
    rules: Optional[Dict[str, Any]] = None,
) -> TreatmentRecommendation:
    """
    Initial pharmacological treatment for an ABE group.

    Total over every (group, eosinophils) pair, including unknown eosinophils:
      A       -> one bronchodilator (eosinophils not consulted)
      B       -> LABA + LAMA; eos >= 300 adds a sub-note only
      E       -> eos >= 300: triple therapy; 100-299: dual, ICS conditional;
                 < 100 or unknown: dual, roflumilast/azithromycin alternatives
      UNKNOWN -> "incomplete evaluation" placeholder, no options
    """
    if group is RiskGroup.A:
        blk, note = _render("T-A", rules)
        return TreatmentRecommendation(blk.template, blk.items, note, blk.id)

    if group is RiskGroup.B:
        blk, note = _render("T-B", rules)
        sub_note = None
        tier = eosinophil_tier(eosinophils, rules)
        if tier is EosinophilTier.STRONG:
            sub_note = blk.variants["eos_high"].format_map(
                SafeDict(strong_ge=fmt_num(rule(rules, "eosinophils", "strong_ge"), 0))
            )
        return TreatmentRecommendation(blk.template, blk.items, note, blk.id, tier=tier, sub_note=sub_note)

    if group is RiskGroup.E:
        tier = eosinophil_tier(eosinophils, rules)
        blk, note = _render(f"T-E-{tier.name}", rules)
        return TreatmentRecommendation(blk.template, blk.items, note, blk.id, tier=tier)

    blk, note = _render("T-UNKNOWN", rules)
    return TreatmentRecommendation(blk.template, (), note, blk.id)


def report_sentence(rec: TreatmentRecommendation) -> str:
    blk = textdb.T_BLOCKS.get(rec.block_id)
    if blk is None:
        return rec.primary
    return blk.variants.get("report", rec.primary)


def interventional_options(grade: SeverityGrade, rules: Optional[Dict[str, Any]] = None) -> List[str]:
    """Interventional approaches to discuss for severe/very severe obstruction (GOLD 3-4)."""
    if not grade.known or grade.value < rule(rules, "interventional", "min_grade"):
        return []
    return list(textdb.INT_BLOCKS["INT-SEVERE"].items)


def non_pharmacological(group: RiskGroup) -> Dict[str, List[str]]:
    """Essential measures for every patient, plus the selected measures (rehabilitation first for B/E)."""
    essential = textdb.NP_BLOCKS["NP-ESSENTIAL"]
    selected = list(textdb.NP_BLOCKS["NP-SELECTED"].items)
    if group not in (RiskGroup.B, RiskGroup.E):
        # rehabilitation stays listed, just not first
        selected = selected[1:] + selected[:1]
    return {
        essential.title: list(essential.items),
        textdb.NP_BLOCKS["NP-SELECTED"].title: selected,
    }


def exacerbation_management() -> Tuple[str, List[str]]:
    return textdb.EX_BLOCKS["EX-DEFINITION"].template, list(textdb.EX_BLOCKS["EX-MANAGEMENT"].items)


def follow_up() -> Tuple[str, List[str]]:
    blk = textdb.FU_BLOCKS["FU-INTRO"]
    return blk.template, list(blk.items)
