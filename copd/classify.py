# -*- coding: utf-8 -*-
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from . import textdb
from .record import Field, PatientRecord, parse_field
from .rules import rule
from .scores import check_obstruction
from .util import AdvisoryReport, SafeDict, fmt_num


class RiskGroup(str, Enum):
    A = "A"
    B = "B"
    E = "E"
    UNKNOWN = "Inconnu"

    @property
    def known(self) -> bool:
        return self is not RiskGroup.UNKNOWN


def classify_risk_group(
    record: PatientRecord,
    questionnaire_total: Optional[int],
    rules: Optional[Dict[str, Any]] = None,
) -> RiskGroup:
    """
    GOLD 2025 ABE assessment. First match wins:
      1. exacerbations >= 2 or hospitalizations >= 1 -> E (history dominates symptoms)
      2. mMRC >= 2 or CAT >= 10                      -> B
      3. otherwise                                   -> A
    Any of the four inputs unknown -> UNKNOWN.
    """
    mmrc = parse_field(record, Field.DYSPNEA_SCALE).value
    exacerbations = parse_field(record, Field.EXACERBATIONS_LAST_YEAR).value
    hospitalizations = parse_field(record, Field.HOSPITALIZATIONS_LAST_YEAR).value
    if mmrc is None or questionnaire_total is None or exacerbations is None or hospitalizations is None:
        return RiskGroup.UNKNOWN

    if exacerbations >= rule(rules, "risk", "exacerbations_ge") or hospitalizations >= rule(
        rules, "risk", "hospitalizations_ge"
    ):
        return RiskGroup.E

    high_symptoms = mmrc >= rule(rules, "risk", "mmrc_ge") or questionnaire_total >= rule(rules, "risk", "cat_ge")
    return RiskGroup.B if high_symptoms else RiskGroup.A


def coherence_checks(
    record: PatientRecord,
    questionnaire_total: Optional[int],
    group: RiskGroup,
    rules: Optional[Dict[str, Any]] = None,
) -> AdvisoryReport:
    warnings: List[str] = []

    def add(block_id: str, **ctx: Any) -> None:
        blk = textdb.get_block(block_id)
        if blk:
            warnings.append(blk.template.format_map(SafeDict(ctx)))

    ratio_cut = rule(rules, "diagnosis", "post_ratio_obstruction_lt")
    if check_obstruction(record, rules) is False:
        add("W-NOT-CONFIRMED", ratio_cut=fmt_num(ratio_cut, 2))

    if group is RiskGroup.E:
        # missing history counts as 0 here, as in the entry form
        exa = parse_field(record, Field.EXACERBATIONS_LAST_YEAR).value or 0
        hosp = parse_field(record, Field.HOSPITALIZATIONS_LAST_YEAR).value or 0
        if exa < rule(rules, "risk", "exacerbations_ge") and hosp < rule(rules, "risk", "hospitalizations_ge"):
            add("W-E-LOW-HISTORY")

    mmrc = parse_field(record, Field.DYSPNEA_SCALE).value
    if questionnaire_total is not None and mmrc is not None:
        mmrc_high = mmrc >= rule(rules, "risk", "mmrc_ge")
        cat_high = questionnaire_total >= rule(rules, "risk", "cat_ge")
        if mmrc_high and not cat_high:
            add("W-MMRC-HIGH-CAT-LOW")
        elif cat_high and not mmrc_high:
            add("W-MMRC-LOW-CAT-HIGH")

    return AdvisoryReport(warnings=warnings)
