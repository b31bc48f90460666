# -*- coding: utf-8 -*-
from __future__ import annotations

import functools
import logging
import traceback
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import gradio as gr

from .generator import FLAG_LABELS, build_summary_html
from .record import RISK_FACTOR_FLAGS, SYMPTOM_FLAGS, Field, get_value, record_from_dict
from .rules import load_rules
from .scores import CAT_QUESTIONS, IMPACT_LABELS, MMRC_OPTIONS, obstruction_label
from .treatment import exacerbation_management, follow_up, non_pharmacological
from .validate import STEP_IDS
from .version import APP_NAME, APP_VERSION, GUIDELINE
from .wizard import STEPS, Wizard

logger = logging.getLogger(__name__)

GENDER_CHOICES = ["", "Femme", "Homme", "Autre"]
TREATMENT_CHOICES = ["SABA", "SAMA", "LABA", "LAMA", "LABA + LAMA", "LABA + CSI", "LABA + LAMA + CSI", "Roflumilast", "Azithromycine"]
COMORBIDITY_CHOICES = [
    "Insuffisance cardiaque",
    "Cardiopathie ischémique",
    "Hypertension artérielle",
    "Diabète",
    "Ostéoporose",
    "Anxiété / dépression",
    "Cancer bronchique",
    "Reflux gastro-œsophagien",
    "Syndrome d'apnées du sommeil",
]

CSS = """
.copd-container { max-width: 1100px; margin: 0 auto; }
#nav_bottom {
    position: sticky;
    bottom: 8px;
    background: rgba(255,255,255,0.92);
    z-index: 50;
    padding: 10px;
    border: 1px solid rgba(0,0,0,0.08);
    border-radius: 12px;
}
.error-box { color: #b91c1c; }
.small-note { font-size: 12px; opacity: 0.75; }
"""


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {i}" for i in items)


def _treatment_markdown(wiz: Wizard) -> str:
    d = wiz.derived()
    rec = d.treatment
    lines = [
        f"**Basé sur l'évaluation :** Groupe **{d.risk_group.value}** | "
        f"mMRC: {wiz.record.dyspnea_scale or 'N/A'} | "
        f"CAT: {d.questionnaire_total if d.questionnaire_total is not None else 'N/A'}",
        "",
    ]
    if d.advisories:
        lines += [d.advisories.to_markdown(), ""]
    lines += [f"### Groupe {d.risk_group.value} - Traitement recommandé", f"**{rec.primary}**"]
    if rec.note:
        lines += ["", f"_{rec.note}_"]
    if rec.options:
        lines += ["", "**Options thérapeutiques (exemples) :**", _bullets(list(rec.options))]
    if rec.sub_note:
        lines += ["", rec.sub_note]
    if d.eosinophil_note:
        lines += ["", "**Considération des éosinophiles :** " + d.eosinophil_note]
    if d.interventional:
        lines += ["", "### Traitements interventionnels (à discuter en centre expert)", _bullets(d.interventional)]
    lines += ["", "### Traitement non-pharmacologique"]
    for title, items in non_pharmacological(d.risk_group).items():
        lines += [f"**{title}**", _bullets(items)]
    return "\n".join(lines)


def _cat_markdown(wiz: Wizard) -> str:
    d = wiz.derived()
    if d.questionnaire_total is None:
        return "**Score CAT total :** Non saisi ou incomplet"
    return f"**Score CAT total :** {d.questionnaire_total}/40 — Impact {IMPACT_LABELS[d.impact].lower()}"


def _errors_markdown(errors: Dict[str, str]) -> str:
    if not errors:
        return ""
    return "\n".join(f"- ⚠️ {msg}" for msg in errors.values())


def _traceback_markdown(tb: str) -> str:
    return f"### Erreur\n```\n{tb}\n```"


def _guarded(fn: Callable[..., Any], on_error: Callable[[Tuple[Any, ...], str], Any]) -> Callable[..., Any]:
    def run(*args):
        try:
            return fn(*args)
        except Exception:
            tb = traceback.format_exc()
            logger.error("UI action failed\n%s", tb)
            return on_error(args, _traceback_markdown(tb))
    return run


class WizardActions:
    """
    Gradio event handlers. Each event rebuilds a Wizard from the current step, the
    field-keyed error map kept in a gr.State and the submitted widget values
    (in ``field_ids`` order).

    Navigation outputs: step, step selector, one column per step, prev / next / report
    buttons, error markdown, summary, obstruction, CAT, treatment, error state.
    """

    def __init__(self, field_ids: Sequence[str], rules: Optional[Dict[str, Any]] = None):
        self.field_ids = list(field_ids)
        self.rules = rules

    def wizard(self, step_id: str, errors: Optional[Dict[str, str]], vals: Sequence[Any]) -> Wizard:
        wiz = Wizard(self.rules)
        wiz.record = record_from_dict(dict(zip(self.field_ids, vals)))
        wiz.current_step = step_id if step_id in STEP_IDS else STEPS[0].id
        wiz.errors = dict(errors or {})
        return wiz

    def render(self, wiz: Wizard, errors_md: Optional[str] = None) -> List[Any]:
        d = wiz.derived()
        out: List[Any] = [wiz.current_step, gr.update(value=wiz.current_step)]
        out += [gr.update(visible=(i == wiz.index)) for i in range(len(STEPS))]
        out += [
            gr.update(interactive=not wiz.is_first),
            gr.update(value=wiz.action_label, interactive=not wiz.is_last),
            gr.update(visible=wiz.can_offer_report),
            _errors_markdown(wiz.errors) if errors_md is None else errors_md,
            build_summary_html(wiz.record, d),
            obstruction_label(d.obstruction) if d.obstruction is not None else "",
            _cat_markdown(wiz),
            _treatment_markdown(wiz),
            dict(wiz.errors),
        ]
        return out

    # -- handlers -------------------------------------------------------

    def refresh(self, field_id: str, step_id: str, errors: Dict[str, str], *vals):
        """One widget edited: only that field's message (and a completed CAT's) is cleared."""
        wiz = self.wizard(step_id, errors, vals)
        wiz.update_field(field_id, get_value(wiz.record, field_id))
        return self.render(wiz)

    def next(self, step_id: str, errors: Dict[str, str], *vals):
        wiz = self.wizard(step_id, errors, vals)
        wiz.go_next()
        return self.render(wiz)

    def previous(self, step_id: str, errors: Dict[str, str], *vals):
        wiz = self.wizard(step_id, {}, vals)
        wiz.go_previous()
        return self.render(wiz)

    def jump(self, step_id: str, target: str, errors: Dict[str, str], *vals):
        wiz = self.wizard(step_id, {}, vals)
        if target:
            wiz.jump_to_step(target)
        return self.render(wiz)

    def report(self, step_id: str, errors: Dict[str, str], *vals):
        """Outputs: report accordion, report markdown, error markdown, error state."""
        wiz = self.wizard(step_id, errors, vals)
        text = wiz.report()
        if text is None:
            return gr.update(visible=False), "", _errors_markdown(wiz.errors), dict(wiz.errors)
        return gr.update(visible=True), text, "", dict(wiz.errors)

    # -- failure outputs ------------------------------------------------

    def nav_failed(self, args: Tuple[Any, ...], errors_md: str) -> List[Any]:
        step_id = args[0] if args and isinstance(args[0], str) else STEPS[0].id
        return self.render(self.wizard(step_id, {}, ()), errors_md)

    def report_failed(self, args: Tuple[Any, ...], errors_md: str):
        return gr.update(visible=False), "", errors_md, {}


def build_demo() -> gr.Blocks:
    # --- UI registry: keeps component order and record field names in sync ---
    field_components: List[Tuple[str, Any]] = []

    def reg(field_id: Field, comp: Any) -> Any:
        field_components.append((field_id.value, comp))
        return comp

    step_columns: List[Any] = []
    rules = load_rules()

    with gr.Blocks(css=CSS, title=f"{APP_NAME} v{APP_VERSION}") as demo:
        gr.HTML(
            f"<div class='copd-container'><h2 style='margin-bottom:0'>{APP_NAME} "
            f"<span style='opacity:0.6;font-size:14px'>v{APP_VERSION}</span></h2>"
            f"<div class='small-note'>Basé sur les recommandations {GUIDELINE} • "
            f"Ne remplace pas le jugement clinique</div></div>"
        )

        current_step = gr.State(STEPS[0].id)
        step_selector = gr.Radio(
            choices=[(s.title, s.id) for s in STEPS],
            value=STEPS[0].id,
            label="Étapes de l'évaluation",
        )
        error_md = gr.Markdown("", elem_classes=["error-box"])

        with gr.Column(visible=True) as col_patient:
            gr.Markdown("### Informations du patient\nSaisissez les informations de base du patient pour commencer l'évaluation.")
            with gr.Row():
                reg(Field.NAME, gr.Textbox(label="Nom et prénom du patient *", placeholder="Nom Prénom"))
                reg(Field.AGE, gr.Number(label="Âge *"))
                reg(Field.GENDER, gr.Dropdown(GENDER_CHOICES, label="Sexe", value=""))
        step_columns.append(col_patient)

        with gr.Column(visible=False) as col_diag:
            gr.Markdown("### Indicateurs cliniques pour considérer un diagnostic de BPCO")
            with gr.Accordion("Symptômes", open=False):
                for f in SYMPTOM_FLAGS:
                    reg(f, gr.Checkbox(label=FLAG_LABELS[f]))
            with gr.Accordion("Facteurs de risque", open=False):
                for f in RISK_FACTOR_FLAGS:
                    reg(f, gr.Checkbox(label=FLAG_LABELS[f]))
            with gr.Accordion("Spirométrie *", open=True):
                gr.Markdown(
                    "Une spirométrie post-bronchodilatateur montrant un rapport VEMS/CVF < 0,7 "
                    "est nécessaire pour confirmer le diagnostic de BPCO."
                )
                with gr.Row():
                    reg(Field.PRE_RATIO, gr.Number(label="VEMS/CVF pré-bronchodilatateur", step=0.01))
                    reg(Field.POST_RATIO, gr.Number(label="VEMS/CVF post-bronchodilatateur *", step=0.01))
                obstruction_md = gr.Markdown("")
        step_columns.append(col_diag)

        with gr.Column(visible=False) as col_assess:
            gr.Markdown(f"### Évaluation initiale selon {GUIDELINE}")
            with gr.Accordion("Classification de la sévérité (GOLD 1-4) *", open=True):
                reg(Field.PERCENT_PREDICTED, gr.Number(label="VEMS (% de la valeur prédite) post-bronchodilatateur *"))
            with gr.Accordion("Évaluation des symptômes *", open=True):
                reg(Field.DYSPNEA_SCALE, gr.Radio(
                    choices=[(f"{v} – {lab}", v) for v, lab in MMRC_OPTIONS],
                    label="Échelle mMRC (dyspnée) *",
                ))
                with gr.Accordion("Saisir / Modifier Score CAT", open=False):
                    gr.Markdown("Pour chaque item, choisir la valeur qui décrit le mieux l'état actuel (0 = pas du tout, 5 = extrêmement).")
                    for i, q in enumerate(CAT_QUESTIONS, start=1):
                        reg(q.field, gr.Radio(
                            choices=[str(n) for n in range(6)],
                            label=f"Question {i}: {q.description}",
                            info=f"0: {q.question} — 5: {q.opposite}",
                        ))
                cat_md = gr.Markdown("")
            with gr.Accordion("Historique d'exacerbations et Éosinophiles", open=True):
                with gr.Row():
                    reg(Field.EXACERBATIONS_LAST_YEAR, gr.Number(label="Exacerbations modérées/sévères (dernière année)"))
                    reg(Field.HOSPITALIZATIONS_LAST_YEAR, gr.Number(label="Hospitalisations pour BPCO (dernière année)"))
                    reg(Field.BLOOD_EOSINOPHILS, gr.Number(label="Éosinophiles sanguins (cellules/μL)"))
        step_columns.append(col_assess)

        with gr.Column(visible=False) as col_treat:
            gr.Markdown(f"### Recommandations thérapeutiques {GUIDELINE}")
            treatment_md = gr.Markdown("")
            with gr.Row():
                reg(Field.CURRENT_TREATMENT, gr.CheckboxGroup(TREATMENT_CHOICES, label="Traitement actuel"))
                reg(Field.COMORBIDITIES, gr.CheckboxGroup(COMORBIDITY_CHOICES, label="Comorbidités"))
        step_columns.append(col_treat)

        with gr.Column(visible=False) as col_exa:
            definition, management = exacerbation_management()
            gr.Markdown(f"### Prise en charge des exacerbations\n{definition}\n\n{_bullets(management)}")
        step_columns.append(col_exa)

        with gr.Column(visible=False) as col_fu:
            intro, items = follow_up()
            gr.Markdown(f"### Suivi\n{intro}\n\n{_bullets(items)}")
        step_columns.append(col_fu)

        gr.Markdown("**Résumé Patient Actuel**")
        summary_html = gr.HTML("<div>—</div>")

        with gr.Row(elem_id="nav_bottom"):
            btn_prev = gr.Button("Précédent", variant="secondary", interactive=False)
            btn_report = gr.Button("Générer Rapport", variant="secondary", visible=False)
            btn_next = gr.Button("Suivant", variant="primary")

        with gr.Accordion("Rapport", open=True, visible=False) as acc_report:
            report_md = gr.Markdown("")

        errors_state = gr.State({})
        input_components = [c for _, c in field_components]
        actions = WizardActions([fid for fid, _ in field_components], rules)

        nav_outputs = [current_step, step_selector] + step_columns + [
            btn_prev, btn_next, btn_report, error_md, summary_html, obstruction_md, cat_md, treatment_md, errors_state,
        ]
        nav_inputs = [current_step, errors_state] + input_components

        # Bind actions
        btn_next.click(_guarded(actions.next, actions.nav_failed), inputs=nav_inputs, outputs=nav_outputs)
        btn_prev.click(_guarded(actions.previous, actions.nav_failed), inputs=nav_inputs, outputs=nav_outputs)
        step_selector.input(
            _guarded(actions.jump, actions.nav_failed),
            inputs=[current_step, step_selector, errors_state] + input_components,
            outputs=nav_outputs,
        )
        btn_report.click(
            _guarded(actions.report, actions.report_failed),
            inputs=nav_inputs,
            outputs=[acc_report, report_md, error_md, errors_state],
        )

        # Every edit recomputes the derived values
        for fid, comp in field_components:
            handler = _guarded(functools.partial(actions.refresh, fid), actions.nav_failed)
            if hasattr(comp, "input"):
                comp.input(handler, inputs=nav_inputs, outputs=nav_outputs)
            else:
                comp.change(handler, inputs=nav_inputs, outputs=nav_outputs)

    return demo
