# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .record import QUESTIONNAIRE_FIELDS, Field, PatientRecord, parse_field
from .rules import rule


@dataclass(frozen=True)
class CATQuestion:
    field: Field
    question: str  # wording for 0
    opposite: str  # wording for 5
    description: str


CAT_QUESTIONS: Tuple[CATQuestion, ...] = (
    CATQuestion(Field.CAT_COUGH, "Je ne tousse jamais", "Je tousse tout le temps", "Fréquence de la toux"),
    CATQuestion(
        Field.CAT_PHLEGM,
        "Je n'ai pas de glaires (mucus) dans la poitrine",
        "Ma poitrine est complètement pleine de glaires (mucus)",
        "Production d'expectorations",
    ),
    CATQuestion(
        Field.CAT_CHEST_TIGHTNESS,
        "Ma poitrine ne me semble pas du tout serrée",
        "Ma poitrine me semble très serrée",
        "Sensation d'oppression thoracique",
    ),
    CATQuestion(
        Field.CAT_BREATHLESSNESS,
        "Quand je marche en montée ou que je monte un étage, je ne suis pas essoufflé(e)",
        "Quand je marche en montée ou que je monte un étage, je suis très essoufflé(e)",
        "Dyspnée à l'effort",
    ),
    CATQuestion(
        Field.CAT_ACTIVITY_LIMITATION,
        "Mes activités à la maison ne sont pas du tout limitées",
        "Mes activités à la maison sont très limitées",
        "Limitation des activités domestiques",
    ),
    CATQuestion(
        Field.CAT_CONFIDENCE_LEAVING,
        "Je sors de chez moi en toute confiance malgré ma maladie pulmonaire",
        "Je n'ai pas du tout confiance à sortir de chez moi à cause de ma maladie pulmonaire",
        "Confiance pour sortir",
    ),
    CATQuestion(
        Field.CAT_SLEEP,
        "Je dors très bien",
        "Je ne dors pas bien du tout à cause de ma maladie pulmonaire",
        "Qualité du sommeil",
    ),
    CATQuestion(Field.CAT_ENERGY, "J'ai beaucoup d'énergie", "Je n'ai pas d'énergie du tout", "Niveau d'énergie"),
)

MMRC_OPTIONS: Tuple[Tuple[str, str], ...] = (
    ("0", "Dyspnée uniquement lors d'efforts intenses"),
    ("1", "Dyspnée en montant une côte ou en marchant rapidement"),
    ("2", "Marche plus lentement que les personnes du même âge ou doit s'arrêter pour respirer "
          "en marchant à son propre rythme sur terrain plat"),
    ("3", "S'arrête pour reprendre son souffle après avoir marché environ 100m ou après quelques "
          "minutes sur terrain plat"),
    ("4", "Trop dyspnéique pour sortir de chez soi ou dyspnée en s'habillant/se déshabillant"),
)


def compute_questionnaire_total(record: PatientRecord) -> Optional[int]:
    """
    CAT total (0-40). All eight items must be answered; otherwise None (unknown),
    never a partial sum. Item range is enforced by the entry UI, not here.
    """
    total = 0
    for f in QUESTIONNAIRE_FIELDS:
        item = parse_field(record, f)
        if not item.known:
            return None
        total += item.as_int()
    return total


def questionnaire_impact(total: Optional[int], rules: Optional[Dict[str, Any]] = None) -> str:
    """'low' | 'high' | 'unknown'"""
    if total is None:
        return "unknown"
    return "high" if total >= rule(rules, "risk", "cat_ge") else "low"


IMPACT_LABELS: Dict[str, str] = {
    "low": "Faible",
    "high": "Moyen à élevé",
    "unknown": "Non évalué",
}


class SeverityGrade(Enum):
    GOLD_1 = 1
    GOLD_2 = 2
    GOLD_3 = 3
    GOLD_4 = 4
    UNKNOWN = None

    @property
    def label(self) -> str:
        return {
            1: "GOLD 1 (Léger)",
            2: "GOLD 2 (Modéré)",
            3: "GOLD 3 (Sévère)",
            4: "GOLD 4 (Très sévère)",
        }.get(self.value, "Non renseigné")

    @property
    def known(self) -> bool:
        return self is not SeverityGrade.UNKNOWN


def severity_from_percent(percent: Optional[float], rules: Optional[Dict[str, Any]] = None) -> SeverityGrade:
    if percent is None:
        return SeverityGrade.UNKNOWN
    if percent >= rule(rules, "severity", "gold1_ge"):
        return SeverityGrade.GOLD_1
    if percent >= rule(rules, "severity", "gold2_ge"):
        return SeverityGrade.GOLD_2
    if percent >= rule(rules, "severity", "gold3_ge"):
        return SeverityGrade.GOLD_3
    return SeverityGrade.GOLD_4


def compute_severity_grade(record: PatientRecord, rules: Optional[Dict[str, Any]] = None) -> SeverityGrade:
    return severity_from_percent(parse_field(record, Field.PERCENT_PREDICTED).value, rules)


def check_obstruction(record: PatientRecord, rules: Optional[Dict[str, Any]] = None) -> Optional[bool]:
    """
    Post-bronchodilator FEV1/FVC < 0.70 -> True (obstruction confirmed).
    Advisory only; None when the ratio is missing or unparseable.
    """
    ratio = parse_field(record, Field.POST_RATIO).value
    if ratio is None:
        return None
    return ratio < rule(rules, "diagnosis", "post_ratio_obstruction_lt")


def obstruction_label(confirmed: Optional[bool]) -> str:
    if confirmed is None:
        return "Non renseigné"
    if confirmed:
        return "✓ Obstruction bronchique présente (compatible BPCO)"
    return "✗ Pas d'obstruction bronchique selon ce critère"
