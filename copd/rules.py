# -*- coding: utf-8 -*-
"""
Clinical cut-offs (GOLD 2025) and the optional YAML rulebook that overrides them.

Every calculator accepts a ``rules`` mapping; ``None`` means DEFAULT_RULES.
The rulebook path comes from the argument or from the COPD_RULEBOOK env var.
"""
from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

RULEBOOK_ENV = "COPD_RULEBOOK"


DEFAULT_RULES: Dict[str, Any] = {
    # Post-bronchodilator FEV1/FVC < 0.70 confirms persistent airflow obstruction
    "diagnosis": {
        "post_ratio_obstruction_lt": 0.70,
    },
    # GOLD 1-4 from FEV1 % predicted; each band includes its lower bound
    "severity": {
        "gold1_ge": 80,
        "gold2_ge": 50,
        "gold3_ge": 30,
    },
    # ABE groups
    "risk": {
        "exacerbations_ge": 2,
        "hospitalizations_ge": 1,
        "mmrc_ge": 2,
        "cat_ge": 10,
    },
    # Blood eosinophils (cells/µL) for ICS decisions
    "eosinophils": {
        "strong_ge": 300,
        "conditional_ge": 100,
    },
    # Interventional approaches are listed from this GOLD grade onward
    "interventional": {
        "min_grade": 3,
    },
}


class RulebookError(ValueError):
    pass


def deep_merge_dict(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursive merge:
    - dict + dict -> merge
    - otherwise patch overrides base
    """
    out = copy.deepcopy(base)
    for k, v in patch.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge_dict(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def load_rules(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    if path is None:
        path = os.environ.get(RULEBOOK_ENV) or None
    if path is None:
        return copy.deepcopy(DEFAULT_RULES)

    p = Path(path)
    if not p.exists():
        logger.warning("Rulebook %s not found, using default cut-offs", p)
        return copy.deepcopy(DEFAULT_RULES)

    try:
        with p.open("r", encoding="utf-8") as f:
            doc = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise RulebookError(f"Invalid rulebook {p}: {exc}") from exc

    if not isinstance(doc, dict):
        raise RulebookError(f"Rulebook {p} must contain a mapping at top level")

    logger.debug("Loaded rulebook %s (sections: %s)", p, ", ".join(sorted(doc)))
    return deep_merge_dict(DEFAULT_RULES, doc)


def rule(rules: Optional[Dict[str, Any]], section: str, key: str) -> float:
    """Reads one cut-off, falling back to the default when the rulebook omits it."""
    sec = (rules or DEFAULT_RULES).get(section) or {}
    if key in sec:
        return float(sec[key])
    return float(DEFAULT_RULES[section][key])
