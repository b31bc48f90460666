# -*- coding: utf-8 -*-
from __future__ import annotations

import datetime as _dt
import html
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from . import textdb
from .classify import RiskGroup, classify_risk_group, coherence_checks
from .record import RISK_FACTOR_FLAGS, SYMPTOM_FLAGS, Field, PatientRecord, iter_flags, parse_field
from .rules import DEFAULT_RULES
from .scores import (
    IMPACT_LABELS,
    SeverityGrade,
    check_obstruction,
    compute_questionnaire_total,
    compute_severity_grade,
    obstruction_label,
    questionnaire_impact,
)
from .treatment import (
    EosinophilTier,
    TreatmentRecommendation,
    eosinophil_advisory,
    eosinophil_tier,
    interventional_options,
    non_pharmacological,
    report_sentence,
    resolve_treatment,
)
from .util import AdvisoryReport, fmt_num, join_nonempty
from .version import GUIDELINE


FLAG_LABELS: Dict[Field, str] = {
    Field.DYSPNEA: "Dyspnée progressive",
    Field.CHRONIC_COUGH: "Toux chronique",
    Field.SPUTUM_PRODUCTION: "Expectorations chroniques",
    Field.RECURRENT_INFECTIONS: "Infections respiratoires basses récurrentes",
    Field.SMOKING_HISTORY: "Tabagisme",
    Field.OCCUPATIONAL_EXPOSURE: "Exposition professionnelle",
    Field.BIOMASS_EXPOSURE: "Fumée de biomasse",
    Field.AIR_POLLUTION: "Pollution de l'air extérieur",
}


@dataclass(frozen=True)
class DerivedState:
    questionnaire_total: Optional[int]
    impact: str
    severity_grade: SeverityGrade
    obstruction: Optional[bool]
    risk_group: RiskGroup
    eosinophils: Optional[int]
    eosinophil_tier: EosinophilTier
    eosinophil_note: Optional[str]
    treatment: TreatmentRecommendation
    interventional: List[str]
    advisories: AdvisoryReport


def compute_all(record: PatientRecord, rules: Optional[Dict[str, Any]] = None) -> DerivedState:
    """Pure recomputation pipeline: record -> every derived value the wizard and report show."""
    rules = rules or DEFAULT_RULES

    total = compute_questionnaire_total(record)
    grade = compute_severity_grade(record, rules)
    group = classify_risk_group(record, total, rules)
    eos = parse_field(record, Field.BLOOD_EOSINOPHILS).as_int()

    return DerivedState(
        questionnaire_total=total,
        impact=questionnaire_impact(total, rules),
        severity_grade=grade,
        obstruction=check_obstruction(record, rules),
        risk_group=group,
        eosinophils=eos,
        eosinophil_tier=eosinophil_tier(eos, rules),
        eosinophil_note=eosinophil_advisory(eos, rules),
        treatment=resolve_treatment(group, eos, rules),
        interventional=interventional_options(grade, rules),
        advisories=coherence_checks(record, total, group, rules),
    )


def _or_missing(v: str, suffix: str = "") -> str:
    v = (v or "").strip()
    if not v:
        return "Non renseigné"
    return f"{v}{suffix}"


def _flags_line(record: PatientRecord, flags) -> str:
    present = [FLAG_LABELS[f] for f in iter_flags(record, flags)]
    return ", ".join(present) if present else "Aucun"


class ReportGenerator:
    """
    Markdown report of the evaluation. It reads the same DerivedState as the live wizard,
    so totals, grade, group and treatment always match what the clinician saw.
    """

    def __init__(self, rules: Optional[Dict[str, Any]] = None):
        self.rules = rules or DEFAULT_RULES

    def generate(
        self,
        record: PatientRecord,
        derived: Optional[DerivedState] = None,
        today: Optional[_dt.date] = None,
    ) -> str:
        d = derived if derived is not None else compute_all(record, self.rules)
        today = today or _dt.date.today()

        lines: List[str] = [
            "# RAPPORT D'ÉVALUATION BPCO",
            f"Selon les recommandations {GUIDELINE}",
            "",
            f"Date de l'évaluation : {today.strftime('%d/%m/%Y')}",
            "",
        ]
        lines += self._patient_section(record)
        lines += self._diagnostic_section(record, d)
        lines += self._assessment_section(record, d)
        lines += self._history_section(record, d)
        lines += self._treatment_section(d)
        lines += ["## Avertissement", textdb.DISCLAIMER, ""]
        return "\n".join(lines)

    def _patient_section(self, record: PatientRecord) -> List[str]:
        return [
            "## Informations Patient",
            f"- **Nom :** {_or_missing(record.name)}",
            f"- **Âge :** {_or_missing(record.age, ' ans')}",
            f"- **Symptômes :** {_flags_line(record, SYMPTOM_FLAGS)}",
            f"- **Facteurs de risque :** {_flags_line(record, RISK_FACTOR_FLAGS)}",
            "",
        ]

    def _diagnostic_section(self, record: PatientRecord, d: DerivedState) -> List[str]:
        return [
            "## Diagnostic Spirométrique",
            f"- **VEMS/CVF pré-BD :** {_or_missing(record.pre_ratio)}",
            f"- **VEMS/CVF post-BD :** {_or_missing(record.post_ratio)}",
            f"- {obstruction_label(d.obstruction)}",
            f"- **Sévérité de l'obstruction :** {d.severity_grade.label}"
            + (f" (VEMS {record.percent_predicted.strip()}% prédit)" if record.percent_predicted.strip() else ""),
            "",
        ]

    def _assessment_section(self, record: PatientRecord, d: DerivedState) -> List[str]:
        cat = f"{d.questionnaire_total}/40" if d.questionnaire_total is not None else "Non évalué"
        return [
            "## Évaluation des Symptômes et Risque",
            f"- **mMRC :** {_or_missing(record.dyspnea_scale)}",
            f"- **CAT :** {cat} — Impact : {IMPACT_LABELS[d.impact]}",
            f"- **Groupe GOLD (ABE) :** {d.risk_group.value}",
            "",
        ]

    def _history_section(self, record: PatientRecord, d: DerivedState) -> List[str]:
        eos = f"{d.eosinophils} cellules/μL" if d.eosinophils is not None else "Non renseigné"
        return [
            "## Historique d'Exacerbations & Éosinophiles",
            f"- **Exacerbations (dernière année) :** {_or_missing(record.exacerbations_last_year)}",
            f"- **Hospitalisations (dernière année) :** {_or_missing(record.hospitalizations_last_year)}",
            f"- **Éosinophiles sanguins :** {eos}",
            "",
        ]

    def _treatment_section(self, d: DerivedState) -> List[str]:
        lines = [
            "## Recommandations Thérapeutiques Initiales (Pharmacologiques)",
            f"**Groupe {d.risk_group.value} - Approche recommandée :** {report_sentence(d.treatment)}",
        ]
        if d.treatment.options:
            lines.append("")
            lines.append("Options thérapeutiques (exemples) :")
            lines += [f"- {o}" for o in d.treatment.options]
        if d.treatment.sub_note:
            lines += ["", f"_{d.treatment.sub_note}_"]
        if d.eosinophil_note:
            lines += ["", d.eosinophil_note]
        if d.interventional:
            lines += ["", "### " + textdb.INT_BLOCKS["INT-SEVERE"].title]
            lines += [f"- {o}" for o in d.interventional]
        if d.advisories:
            lines += ["", d.advisories.to_markdown()]

        lines += ["", "## Recommandations Thérapeutiques (Non-Pharmacologiques)"]
        for title, items in non_pharmacological(d.risk_group).items():
            lines.append(f"**{title}**")
            lines += [f"- {i}" for i in items]
        lines.append("")
        return lines


def _badge(label: str, color: str) -> str:
    return (
        f'<span style="display:inline-block;padding:6px 10px;border-radius:999px;background:{color};'
        f'color:white;font-weight:700;font-size:12px;">{html.escape(label)}</span>'
    )


def build_summary_html(record: PatientRecord, derived: DerivedState) -> str:
    """Live 'Résumé Patient Actuel' strip; empty until something has been entered."""
    if record.is_blank():
        return "<div>—</div>"

    facts = join_nonempty([
        f"<b>Patient:</b> {html.escape(record.name)}" if record.name.strip() else "",
        f"<b>Âge:</b> {html.escape(record.age)} ans" if record.age.strip() else "",
        f"<b>VEMS/CVF:</b> {html.escape(record.post_ratio)}" if record.post_ratio.strip() else "",
        f"<b>VEMS %préd:</b> {html.escape(record.percent_predicted)}%" if record.percent_predicted.strip() else "",
        f"<b>mMRC:</b> {html.escape(record.dyspnea_scale)}" if record.dyspnea_scale.strip() else "",
        f"<b>CAT:</b> {derived.questionnaire_total}" if derived.questionnaire_total is not None else "",
    ], sep=" &nbsp;•&nbsp; ")

    badges: List[str] = []
    if derived.severity_grade.known:
        color = {1: "#16a34a", 2: "#f59e0b", 3: "#f97316", 4: "#dc2626"}[derived.severity_grade.value]
        badges.append(_badge(derived.severity_grade.label, color))
    if derived.risk_group.known:
        color = {"A": "#16a34a", "B": "#f59e0b", "E": "#dc2626"}[derived.risk_group.value]
        badges.append(_badge(f"Groupe {derived.risk_group.value}", color))
    if derived.eosinophils is not None:
        badges.append(_badge(f"Éos {fmt_num(derived.eosinophils, 0)}/µL", "#64748b"))

    return (
        "<div style='display:flex;flex-wrap:wrap;gap:8px;align-items:center'>"
        + "".join(badges)
        + f"<span style='font-size:12px'>{facts}</span></div>"
    )
