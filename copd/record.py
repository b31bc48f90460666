# -*- coding: utf-8 -*-
"""
Patient record for one wizard session.

Numeric fields are kept as the raw text the clinician typed ("" = not entered);
they are only interpreted through ``parse_field`` so that empty or malformed text
stays "unknown" instead of silently becoming 0.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from .util import NumericSpec, ParsedNumeric, number_to_text, parse_numeric


class Field(str, Enum):
    NAME = "name"
    AGE = "age"
    GENDER = "gender"

    DYSPNEA = "dyspnea"
    CHRONIC_COUGH = "chronic_cough"
    SPUTUM_PRODUCTION = "sputum_production"
    RECURRENT_INFECTIONS = "recurrent_infections"

    SMOKING_HISTORY = "smoking_history"
    OCCUPATIONAL_EXPOSURE = "occupational_exposure"
    BIOMASS_EXPOSURE = "biomass_exposure"
    AIR_POLLUTION = "air_pollution"

    PRE_RATIO = "pre_ratio"
    POST_RATIO = "post_ratio"
    PERCENT_PREDICTED = "percent_predicted"

    DYSPNEA_SCALE = "dyspnea_scale"

    CAT_COUGH = "cat_cough"
    CAT_PHLEGM = "cat_phlegm"
    CAT_CHEST_TIGHTNESS = "cat_chest_tightness"
    CAT_BREATHLESSNESS = "cat_breathlessness"
    CAT_ACTIVITY_LIMITATION = "cat_activity_limitation"
    CAT_CONFIDENCE_LEAVING = "cat_confidence_leaving"
    CAT_SLEEP = "cat_sleep"
    CAT_ENERGY = "cat_energy"

    EXACERBATIONS_LAST_YEAR = "exacerbations_last_year"
    HOSPITALIZATIONS_LAST_YEAR = "hospitalizations_last_year"

    BLOOD_EOSINOPHILS = "blood_eosinophils"

    CURRENT_TREATMENT = "current_treatment"
    COMORBIDITIES = "comorbidities"


SYMPTOM_FLAGS: Tuple[Field, ...] = (
    Field.DYSPNEA,
    Field.CHRONIC_COUGH,
    Field.SPUTUM_PRODUCTION,
    Field.RECURRENT_INFECTIONS,
)

RISK_FACTOR_FLAGS: Tuple[Field, ...] = (
    Field.SMOKING_HISTORY,
    Field.OCCUPATIONAL_EXPOSURE,
    Field.BIOMASS_EXPOSURE,
    Field.AIR_POLLUTION,
)

QUESTIONNAIRE_FIELDS: Tuple[Field, ...] = (
    Field.CAT_COUGH,
    Field.CAT_PHLEGM,
    Field.CAT_CHEST_TIGHTNESS,
    Field.CAT_BREATHLESSNESS,
    Field.CAT_ACTIVITY_LIMITATION,
    Field.CAT_CONFIDENCE_LEAVING,
    Field.CAT_SLEEP,
    Field.CAT_ENERGY,
)

FLAG_FIELDS: Tuple[Field, ...] = SYMPTOM_FLAGS + RISK_FACTOR_FLAGS
SET_FIELDS: Tuple[Field, ...] = (Field.CURRENT_TREATMENT, Field.COMORBIDITIES)
TEXT_FIELDS: Tuple[Field, ...] = (Field.NAME, Field.GENDER)

# One parse-and-validate spec per numeric field.
NUMERIC_SPECS: Dict[Field, NumericSpec] = {
    Field.AGE: NumericSpec("int", 18, 120),
    Field.PRE_RATIO: NumericSpec("float", 0, 1),
    Field.POST_RATIO: NumericSpec("float", 0, 1),
    Field.PERCENT_PREDICTED: NumericSpec("int", 0, 100),
    Field.DYSPNEA_SCALE: NumericSpec("int", 0, 4),
    Field.EXACERBATIONS_LAST_YEAR: NumericSpec("int", 0),
    Field.HOSPITALIZATIONS_LAST_YEAR: NumericSpec("int", 0),
    Field.BLOOD_EOSINOPHILS: NumericSpec("int", 0),
}
for _f in QUESTIONNAIRE_FIELDS:
    NUMERIC_SPECS[_f] = NumericSpec("int", 0, 5)

NUMERIC_FIELDS: Tuple[Field, ...] = tuple(NUMERIC_SPECS)
FIELD_NAMES = frozenset(f.value for f in Field)


class UnknownFieldError(KeyError):
    pass


@dataclass(frozen=True)
class PatientRecord:
    name: str = ""
    age: str = ""
    gender: str = ""

    dyspnea: bool = False
    chronic_cough: bool = False
    sputum_production: bool = False
    recurrent_infections: bool = False

    smoking_history: bool = False
    occupational_exposure: bool = False
    biomass_exposure: bool = False
    air_pollution: bool = False

    pre_ratio: str = ""
    post_ratio: str = ""
    percent_predicted: str = ""

    dyspnea_scale: str = ""

    cat_cough: str = ""
    cat_phlegm: str = ""
    cat_chest_tightness: str = ""
    cat_breathlessness: str = ""
    cat_activity_limitation: str = ""
    cat_confidence_leaving: str = ""
    cat_sleep: str = ""
    cat_energy: str = ""

    exacerbations_last_year: str = ""
    hospitalizations_last_year: str = ""

    blood_eosinophils: str = ""

    current_treatment: FrozenSet[str] = field(default_factory=frozenset)
    comorbidities: FrozenSet[str] = field(default_factory=frozenset)

    def is_blank(self) -> bool:
        return self == PatientRecord()


def create_initial_record() -> PatientRecord:
    return PatientRecord()


def as_field(f: Union[Field, str]) -> Field:
    if isinstance(f, Field):
        return f
    try:
        return Field(f)
    except ValueError:
        raise UnknownFieldError(f) from None


def get_value(record: PatientRecord, f: Union[Field, str]) -> Any:
    return getattr(record, as_field(f).value)


def _coerce(f: Field, value: Any) -> Any:
    if f in FLAG_FIELDS:
        return bool(value)
    if f in SET_FIELDS:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset([value]) if value.strip() else frozenset()
        return frozenset(str(v) for v in value if v is not None and str(v).strip())
    if f in NUMERIC_SPECS:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return number_to_text(value)
    if value is None:
        return ""
    return str(value)


def update_field(record: PatientRecord, f: Union[Field, str], value: Any) -> PatientRecord:
    """Returns a new record with one field changed; the input record is left untouched."""
    fld = as_field(f)
    return dataclasses.replace(record, **{fld.value: _coerce(fld, value)})


def update_fields(record: PatientRecord, values: Mapping[Union[Field, str], Any]) -> PatientRecord:
    changes = {}
    for k, v in values.items():
        fld = as_field(k)
        changes[fld.value] = _coerce(fld, v)
    return dataclasses.replace(record, **changes)


def parse_field(record: PatientRecord, f: Union[Field, str]) -> ParsedNumeric:
    fld = as_field(f)
    spec = NUMERIC_SPECS.get(fld)
    if spec is None:
        raise UnknownFieldError(f"{fld.value} is not a numeric field")
    return parse_numeric(getattr(record, fld.value), spec)


def record_to_dict(record: PatientRecord) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in Field:
        v = getattr(record, f.value)
        out[f.value] = sorted(v) if f in SET_FIELDS else v
    return out


def record_from_dict(values: Mapping[str, Any]) -> PatientRecord:
    """Builds a record from a flat UI mapping; keys that are not record fields are ignored."""
    known = {k: v for k, v in values.items() if k in FIELD_NAMES}
    return update_fields(create_initial_record(), known)


def apply_questionnaire(
    record: PatientRecord, answers: Mapping[Union[Field, str], Any]
) -> Tuple[PatientRecord, Optional[str]]:
    """
    Applies the eight CAT answers at once.
    Incomplete answer sets are rejected as a whole and the record is returned unchanged.
    """
    normalized: Dict[Field, Any] = {as_field(k): v for k, v in answers.items()}
    for f in QUESTIONNAIRE_FIELDS:
        v = normalized.get(f)
        if v is None or (isinstance(v, str) and not v.strip()):
            return record, "Veuillez répondre à toutes les questions du score CAT pour valider."
    extra = [f for f in normalized if f not in QUESTIONNAIRE_FIELDS]
    if extra:
        raise UnknownFieldError(f"not a questionnaire field: {extra[0].value}")
    return update_fields(record, normalized), None


def iter_flags(record: PatientRecord, flags: Iterable[Field]) -> Tuple[Field, ...]:
    return tuple(f for f in flags if getattr(record, f.value))
