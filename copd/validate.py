# -*- coding: utf-8 -*-
"""
Per-step validation gating the wizard's "next" action.

Validation never raises: problems come back as a field-keyed message map.
The CAT questionnaire is checked as a whole under the synthetic key ``cat_score``.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple

from .record import Field, PatientRecord, parse_field

ValidationErrors = Dict[str, str]

CAT_SCORE_KEY = "cat_score"

PATIENT_INFO = "patient-info"
DIAGNOSTIC = "diagnostic"
ASSESSMENT = "assessment"
TREATMENT = "treatment"
EXACERBATION = "exacerbation-management"
FOLLOW_UP = "follow-up"

STEP_IDS: Tuple[str, ...] = (PATIENT_INFO, DIAGNOSTIC, ASSESSMENT, TREATMENT, EXACERBATION, FOLLOW_UP)

REQUIRED_FIELDS: Dict[str, Tuple[Field, ...]] = {
    PATIENT_INFO: (Field.NAME, Field.AGE),
    DIAGNOSTIC: (Field.POST_RATIO,),
    ASSESSMENT: (Field.PERCENT_PREDICTED, Field.DYSPNEA_SCALE),
}


def _validate_patient_info(record: PatientRecord, errors: ValidationErrors) -> None:
    if not record.name.strip():
        errors[Field.NAME.value] = "Nom requis"
    age = parse_field(record, Field.AGE)
    if age.is_empty:
        errors[Field.AGE.value] = "Âge requis"
    elif not age.ok:
        errors[Field.AGE.value] = "Âge doit être entre 18 et 120"


def _validate_diagnostic(record: PatientRecord, errors: ValidationErrors) -> None:
    ratio = parse_field(record, Field.POST_RATIO)
    if ratio.is_empty:
        errors[Field.POST_RATIO.value] = "VEMS/CVF post-bronchodilatateur requis pour le diagnostic"
    elif not ratio.ok:
        errors[Field.POST_RATIO.value] = "VEMS/CVF doit être entre 0 et 1"


def _validate_assessment(
    record: PatientRecord, questionnaire_total: Optional[int], errors: ValidationErrors
) -> None:
    percent = parse_field(record, Field.PERCENT_PREDICTED)
    if percent.is_empty:
        errors[Field.PERCENT_PREDICTED.value] = "VEMS % prédit requis"
    elif not percent.ok:
        errors[Field.PERCENT_PREDICTED.value] = "VEMS % prédit doit être entre 0 et 100"
    # fixed choice set: presence is enough
    if not record.dyspnea_scale.strip():
        errors[Field.DYSPNEA_SCALE.value] = "Score mMRC requis"
    if questionnaire_total is None:
        errors[CAT_SCORE_KEY] = (
            "Score CAT incomplet. Veuillez répondre à toutes les questions dans la fenêtre dédiée."
        )


def validate_step(step_id: str, record: PatientRecord, questionnaire_total: Optional[int]) -> ValidationErrors:
    errors: ValidationErrors = {}
    if step_id == PATIENT_INFO:
        _validate_patient_info(record, errors)
    elif step_id == DIAGNOSTIC:
        _validate_diagnostic(record, errors)
    elif step_id == ASSESSMENT:
        _validate_assessment(record, questionnaire_total, errors)
    return errors


def can_proceed(
    step_id: str,
    record: PatientRecord,
    questionnaire_total: Optional[int],
    errors: ValidationErrors,
) -> bool:
    """
    True when the error map is empty AND every required field of the step is filled in.
    Both checks are kept even though the validator already covers the second one.
    Informational steps can always proceed except the last one, which has no next step.
    """
    if step_id in REQUIRED_FIELDS:
        if errors:
            return False
        for f in REQUIRED_FIELDS[step_id]:
            if not getattr(record, f.value).strip():
                return False
        if step_id == ASSESSMENT and questionnaire_total is None:
            return False
        return True
    if errors:
        return False
    return step_id in STEP_IDS and STEP_IDS.index(step_id) < len(STEP_IDS) - 1
