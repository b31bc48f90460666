# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .generator import DerivedState, ReportGenerator, compute_all
from .record import QUESTIONNAIRE_FIELDS, Field, PatientRecord, apply_questionnaire, as_field, create_initial_record, update_field
from .validate import (
    ASSESSMENT,
    CAT_SCORE_KEY,
    DIAGNOSTIC,
    EXACERBATION,
    FOLLOW_UP,
    PATIENT_INFO,
    TREATMENT,
    ValidationErrors,
    can_proceed,
    validate_step,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    id: str
    title: str


STEPS: Tuple[Step, ...] = (
    Step(PATIENT_INFO, "Patient"),
    Step(DIAGNOSTIC, "Diagnostic"),
    Step(ASSESSMENT, "Évaluation"),
    Step(TREATMENT, "Traitement"),
    Step(EXACERBATION, "Exacerbations"),
    Step(FOLLOW_UP, "Suivi"),
)

NEXT_LABEL = "Suivant"
TERMINAL_LABEL = "Terminer"


class UnknownStepError(KeyError):
    pass


def step_index(step_id: str) -> int:
    for i, s in enumerate(STEPS):
        if s.id == step_id:
            return i
    raise UnknownStepError(step_id)


def get_step(step_id: str) -> Step:
    return STEPS[step_index(step_id)]


class Wizard:
    """
    Controller for one session: owns the single PatientRecord, the current step,
    the expanded sub-sections and the last validation result.

    go_next is gated by the step validator; go_previous and jump_to_step are not.
    """

    def __init__(self, rules: Optional[Dict[str, Any]] = None):
        self.rules = rules
        self.record: PatientRecord = create_initial_record()
        self.current_step: str = STEPS[0].id
        self.expanded_sections: Dict[str, bool] = {}
        self.errors: ValidationErrors = {}
        self._reporter = ReportGenerator(rules)

    # -- position -------------------------------------------------------

    @property
    def index(self) -> int:
        return step_index(self.current_step)

    @property
    def step(self) -> Step:
        return STEPS[self.index]

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == len(STEPS) - 1

    @property
    def action_label(self) -> str:
        return TERMINAL_LABEL if self.is_last else NEXT_LABEL

    # -- data -----------------------------------------------------------

    def update_field(self, f: Union[Field, str], value: Any) -> PatientRecord:
        fld = as_field(f)
        self.record = update_field(self.record, fld, value)
        self.errors.pop(fld.value, None)
        if fld in QUESTIONNAIRE_FIELDS and self.derived().questionnaire_total is not None:
            self.errors.pop(CAT_SCORE_KEY, None)
        return self.record

    def submit_questionnaire(self, answers: Mapping[Union[Field, str], Any]) -> Optional[str]:
        """Applies all CAT answers at once; returns a message (and changes nothing) when incomplete."""
        record, message = apply_questionnaire(self.record, answers)
        if message is None:
            self.record = record
            self.errors.pop(CAT_SCORE_KEY, None)
        return message

    def toggle_section(self, key: str) -> bool:
        self.expanded_sections[key] = not self.expanded_sections.get(key, False)
        return self.expanded_sections[key]

    def derived(self) -> DerivedState:
        return compute_all(self.record, self.rules)

    # -- transitions ----------------------------------------------------

    def validate(self) -> ValidationErrors:
        self.errors = validate_step(self.current_step, self.record, self.derived().questionnaire_total)
        return self.errors

    def can_proceed(self) -> bool:
        total = self.derived().questionnaire_total
        errors = validate_step(self.current_step, self.record, total)
        return can_proceed(self.current_step, self.record, total, errors)

    def go_next(self) -> bool:
        errors = self.validate()
        if errors:
            logger.debug("Step %s blocked: %s", self.current_step, ", ".join(sorted(errors)))
            return False
        if not can_proceed(self.current_step, self.record, self.derived().questionnaire_total, errors):
            return False
        nxt = min(len(STEPS) - 1, self.index + 1)
        logger.debug("Step %s -> %s", self.current_step, STEPS[nxt].id)
        self.current_step = STEPS[nxt].id
        return True

    def go_previous(self) -> str:
        self.current_step = STEPS[max(0, self.index - 1)].id
        return self.current_step

    def jump_to_step(self, step_id: str) -> str:
        step_index(step_id)
        logger.debug("Jump %s -> %s", self.current_step, step_id)
        self.current_step = step_id
        return self.current_step

    # -- report ---------------------------------------------------------

    @property
    def can_offer_report(self) -> bool:
        return self.index >= step_index(ASSESSMENT)

    def report(self) -> Optional[str]:
        """Validates the current step first; None when it is not valid."""
        if self.validate():
            return None
        return self._reporter.generate(self.record, self.derived())
