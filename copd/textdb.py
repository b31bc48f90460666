# -*- coding: utf-8 -*-
"""
Text catalog for the BPCO assistant (GOLD 2025).

Contains:
- initial pharmacological treatment blocks per ABE group (T..)
- eosinophil advisory sentences (EOS..)
- interventional approaches for severe obstruction (INT..)
- non-pharmacological measures, exacerbation management and follow-up (NP.., EX.., FU..)

Templates are Python format strings rendered with ``str.format_map``.
Clinical content must be reviewed by a physician before release.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class TextBlock:
    id: str
    title: str
    template: str
    category: str = "MISC"
    items: Tuple[str, ...] = ()
    variants: Dict[str, str] = field(default_factory=dict)


# -------------------------
# Initial pharmacological treatment (T...)
# -------------------------

T_BLOCKS: Dict[str, TextBlock] = {
    "T-A": TextBlock(
        id="T-A",
        title="Groupe A",
        template="Un bronchodilatateur",
        category="T",
        items=(
            "SABA (Salbutamol, Terbutaline) au besoin",
            "SAMA (Ipratropium) au besoin",
            "LABA (Formotérol, Salmétérol, Indacatérol, Olodatérol)",
            "LAMA (Tiotropium, Glycopyrronium, Uméclidinium, Aclidinium)",
        ),
        variants={
            "note": (
                "Le choix dépend de la disponibilité et de la réponse individuelle. "
                "Un traitement de fond par LABA ou LAMA peut être envisagé si les symptômes "
                "sont plus persistants malgré l'utilisation de BDCA."
            ),
            "report": (
                "Un bronchodilatateur (BDCA au besoin, ou LABA ou LAMA en traitement de fond "
                "si symptômes plus persistants)."
            ),
        },
    ),
    "T-B": TextBlock(
        id="T-B",
        title="Groupe B",
        template="Association LABA + LAMA",
        category="T",
        items=(
            "Formotérol/Glycopyrronium",
            "Indacatérol/Glycopyrronium",
            "Vilanterol/Umeclidinium",
            "Formotérol/Aclidinium",
            "Tiotropium/Olodatérol",
        ),
        variants={
            "note": "Une combinaison en un seul inhalateur est généralement préférée pour améliorer l'observance.",
            "eos_high": (
                "Éosinophiles ≥ {strong_ge} cellules/µL : pas d'indication de CSI en initiation dans le groupe B, "
                "mais ce phénotype prédit une réponse aux CSI en cas d'exacerbations ultérieures."
            ),
            "report": "Association LABA + LAMA.",
        },
    ),
    "T-E-STRONG": TextBlock(
        id="T-E-STRONG",
        title="Groupe E – éosinophiles élevés",
        template="Association LABA + LAMA + CSI (trithérapie).",
        category="T",
        items=(
            "Formotérol/Glycopyrronium/Budésonide",
            "Vilanterol/Umeclidinium/Fluticasone furoate",
            "Formotérol/Glycopyrronium/Béclométasone",
        ),
        variants={
            "note": (
                "Éosinophiles ≥ {strong_ge} cellules/µL : fort support pour l'ajout de CSI. "
                "Une surveillance étroite des exacerbations et des effets secondaires des CSI est nécessaire."
            ),
            "report": "Association LABA + LAMA. Ajouter CSI (LABA+LAMA+CSI).",
        },
    ),
    "T-E-CONDITIONAL": TextBlock(
        id="T-E-CONDITIONAL",
        title="Groupe E – éosinophiles intermédiaires",
        template="Association LABA + LAMA.",
        category="T",
        items=(
            "Formotérol/Glycopyrronium",
            "Indacatérol/Glycopyrronium",
            "Vilanterol/Umeclidinium",
            "Tiotropium/Olodatérol",
            "Ajout de CSI à discuter au cas par cas si exacerbations persistantes malgré LABA+LAMA",
        ),
        variants={
            "note": (
                "Éosinophiles entre {conditional_ge} et {strong_ge} cellules/µL : support conditionnel pour CSI, "
                "à discuter en fonction du phénotype et du risque d'exacerbation."
            ),
            "report": "Association LABA + LAMA. Considérer CSI si exacerbations fréquentes/sévères.",
        },
    ),
    "T-E-LOW": TextBlock(
        id="T-E-LOW",
        title="Groupe E – éosinophiles bas ou inconnus",
        template="Association LABA + LAMA.",
        category="T",
        items=(
            "Formotérol/Glycopyrronium",
            "Vilanterol/Umeclidinium",
            "Tiotropium/Olodatérol",
            "Roflumilast (si VEMS < 50% et bronchite chronique) si exacerbations persistantes",
            "Azithromycine (chez les anciens fumeurs) si exacerbations persistantes",
        ),
        variants={
            "note": (
                "Éosinophiles < {conditional_ge} cellules/µL ou non renseignés : peu de support pour les CSI "
                "en initiation, sauf asthme concomitant. Surveiller étroitement les exacerbations."
            ),
            "report": (
                "Association LABA + LAMA. CSI peu recommandés (éosinophiles bas ou inconnus) ; "
                "alternatives : roflumilast, azithromycine."
            ),
        },
    ),
    "T-UNKNOWN": TextBlock(
        id="T-UNKNOWN",
        title="Groupe inconnu",
        template="Évaluation incomplète pour déterminer le groupe GOLD.",
        category="T",
        variants={
            "note": "Veuillez compléter les étapes précédentes.",
            "report": "Veuillez compléter l'évaluation pour des recommandations spécifiques.",
        },
    ),
}


# -------------------------
# Eosinophil advisory (EOS...)
# -------------------------

EOS_BLOCKS: Dict[str, TextBlock] = {
    "EOS-STRONG": TextBlock(
        id="EOS-STRONG",
        title="Éosinophiles élevés",
        template="Éosinophiles : {eos} cellules/μL - Fort support pour l'ajout de CSI si exacerbations ou symptômes persistants.",
        category="EOS",
    ),
    "EOS-CONDITIONAL": TextBlock(
        id="EOS-CONDITIONAL",
        title="Éosinophiles intermédiaires",
        template=(
            "Éosinophiles : {eos} cellules/μL - Support conditionnel pour CSI, à discuter en fonction "
            "du phénotype et du risque d'exacerbation."
        ),
        category="EOS",
    ),
    "EOS-LOW": TextBlock(
        id="EOS-LOW",
        title="Éosinophiles bas",
        template="Éosinophiles : {eos} cellules/μL - Peu de support pour CSI en initiation, sauf si asthme concomitant.",
        category="EOS",
    ),
}


# -------------------------
# Interventional approaches (INT...)
# -------------------------

INT_BLOCKS: Dict[str, TextBlock] = {
    "INT-SEVERE": TextBlock(
        id="INT-SEVERE",
        title="Traitements interventionnels (à discuter en centre expert)",
        template="Obstruction sévère ({grade}) : discuter les options interventionnelles en centre expert.",
        category="INT",
        items=(
            "Réduction de volume pulmonaire chirurgicale (emphysème hétérogène à prédominance lobaire supérieure)",
            "Valves endobronchiques (emphysème hétérogène ou homogène sans ventilation collatérale)",
            "Bullectomie en cas de bulle géante",
            "Évaluation pour transplantation pulmonaire (maladie très sévère et progressive)",
            "Oxygénothérapie de longue durée / ventilation non invasive selon les gaz du sang",
        ),
    ),
}


# -------------------------
# Non-pharmacological, exacerbations, follow-up
# -------------------------

NP_BLOCKS: Dict[str, TextBlock] = {
    "NP-ESSENTIAL": TextBlock(
        id="NP-ESSENTIAL",
        title="Mesures essentielles (tous les patients)",
        template="",
        category="NP",
        items=(
            "Arrêt du tabac (conseil et aide au sevrage).",
            "Activité physique régulière adaptée.",
            "Vaccinations (grippe annuelle, pneumocoque, COVID-19, coqueluche).",
        ),
    ),
    "NP-SELECTED": TextBlock(
        id="NP-SELECTED",
        title="Selon le profil du patient",
        template="",
        category="NP",
        items=(
            "Réhabilitation respiratoire (pour patients symptomatiques et/ou post-exacerbation, groupes B et E notamment).",
            "Éducation thérapeutique et autogestion (plan d'action personnalisé).",
            "Support nutritionnel si nécessaire.",
            "Oxygénothérapie de longue durée (si hypoxémie sévère au repos).",
            "Ventilation non invasive (pour certains patients en hypercapnie chronique sévère).",
        ),
    ),
}

EX_BLOCKS: Dict[str, TextBlock] = {
    "EX-DEFINITION": TextBlock(
        id="EX-DEFINITION",
        title="Définition d'une exacerbation",
        template=(
            "Un événement aigu caractérisé par une aggravation des symptômes respiratoires du patient "
            "au-delà des variations quotidiennes habituelles, conduisant à un changement de traitement."
        ),
        category="EX",
    ),
    "EX-MANAGEMENT": TextBlock(
        id="EX-MANAGEMENT",
        title="Prise en charge",
        template="",
        category="EX",
        items=(
            "Augmentation des bronchodilatateurs à courte durée d'action (SABA ± SAMA).",
            "Corticostéroïdes systémiques (ex: Prednisone 40mg/jour pour 5 jours).",
            "Antibiothérapie si signes d'infection bactérienne (augmentation du volume et/ou de la purulence "
            "des expectorations, et/ou augmentation de la dyspnée).",
            "Évaluer la nécessité d'une hospitalisation (sévérité des symptômes, comorbidités, support social).",
            "Prévention des futures exacerbations (optimisation du traitement de fond, réhabilitation, plan d'action).",
        ),
    ),
}

FU_BLOCKS: Dict[str, TextBlock] = {
    "FU-INTRO": TextBlock(
        id="FU-INTRO",
        title="Suivi",
        template=(
            "Une évaluation régulière est cruciale pour ajuster le traitement, surveiller la progression "
            "de la maladie et gérer les comorbidités."
        ),
        category="FU",
        items=(
            "Réévaluation des symptômes (mMRC, CAT) et de l'historique d'exacerbations.",
            "Vérification de la technique d'inhalation et de l'observance thérapeutique.",
            "Spirométrie (au moins annuelle, plus si changement clinique).",
            "Dépistage et prise en charge des comorbidités (cardiovasculaires, ostéoporose, anxiété/dépression, etc.).",
            "Promotion de l'activité physique et du sevrage tabagique continu.",
            "Mise à jour du plan d'action personnalisé.",
        ),
    ),
}


# -------------------------
# Coherence checks (W...)
# -------------------------

W_BLOCKS: Dict[str, TextBlock] = {
    "W-NOT-CONFIRMED": TextBlock(
        id="W-NOT-CONFIRMED",
        title="Diagnostic non confirmé",
        template=(
            "VEMS/CVF post-BD ≥ {ratio_cut} : le diagnostic de BPCO n'est pas confirmé par spirométrie. "
            "Reconsidérer le diagnostic."
        ),
        category="W",
    ),
    "W-E-LOW-HISTORY": TextBlock(
        id="W-E-LOW-HISTORY",
        title="Groupe E avec historique bas",
        template=(
            "Groupe E mais historique d'exacerbations semble bas. Vérifier les critères saisis pour le groupe E "
            "(≥2 exacerbations modérées ou ≥1 hospitalisation)."
        ),
        category="W",
    ),
    "W-MMRC-HIGH-CAT-LOW": TextBlock(
        id="W-MMRC-HIGH-CAT-LOW",
        title="Discordance mMRC/CAT",
        template=(
            "Discordance possible entre mMRC (≥2, symptomatique) et CAT (<10, peu symptomatique). "
            "Privilégier l'évaluation clinique globale."
        ),
        category="W",
    ),
    "W-MMRC-LOW-CAT-HIGH": TextBlock(
        id="W-MMRC-LOW-CAT-HIGH",
        title="Discordance mMRC/CAT",
        template=(
            "Discordance possible entre mMRC (<2, peu symptomatique) et CAT (≥10, symptomatique). "
            "Privilégier l'évaluation clinique globale."
        ),
        category="W",
    ),
}


DISCLAIMER = (
    "Ce rapport est un outil d'aide à la décision généré sur la base des informations fournies et des "
    "recommandations GOLD 2025. Il ne remplace pas le jugement clinique. Il doit être interprété et utilisé "
    "par un professionnel de santé qualifié dans le contexte clinique global du patient."
)


ALL_BLOCKS: Dict[str, TextBlock] = {}
for _blocks in (T_BLOCKS, EOS_BLOCKS, INT_BLOCKS, NP_BLOCKS, EX_BLOCKS, FU_BLOCKS, W_BLOCKS):
    ALL_BLOCKS.update(_blocks)


def get_block(block_id: str) -> Optional[TextBlock]:
    return ALL_BLOCKS.get(block_id)


def list_blocks(prefix: str) -> List[TextBlock]:
    return [b for k, b in sorted(ALL_BLOCKS.items()) if k.startswith(prefix)]
