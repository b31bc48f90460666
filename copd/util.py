# -*- coding: utf-8 -*-
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence


def to_float(x: Any) -> Optional[float]:
    """Best-effort conversion. Returns None for empty/invalid."""
    if x is None:
        return None
    if isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        v = float(x)
        if math.isnan(v) or math.isinf(v):
            return None
        return v
    s = str(x).strip().replace(",", ".")
    if not s:
        return None
    try:
        v = float(s)
    except ValueError:
        return None
    if math.isnan(v) or math.isinf(v):
        return None
    return v


def is_intish(v: float, tol: float = 1e-6) -> bool:
    return abs(v - round(v)) < tol


@dataclass(frozen=True)
class NumericSpec:
    kind: str  # "int" | "float"
    lo: Optional[float] = None
    hi: Optional[float] = None


@dataclass(frozen=True)
class ParsedNumeric:
    """
    Result of parsing one raw text field.

    status:
      - "ok":           parsed and inside the field's domain
      - "empty":        nothing entered
      - "invalid":      text present but not a number of the right kind
      - "out_of_range": parsed, but outside [lo, hi]; value is still carried
    """
    raw: str
    value: Optional[float]
    status: str

    @property
    def known(self) -> bool:
        return self.value is not None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def is_empty(self) -> bool:
        return self.status == "empty"

    def as_int(self) -> Optional[int]:
        if self.value is None:
            return None
        return int(round(self.value))


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def to_int_prefix(x: Any) -> Optional[int]:
    """Leading integer of the text, truncated ("65.5" -> 65, "12 ans" -> 12); None without one."""
    m = _LEADING_INT.match("" if x is None else str(x))
    if m is None:
        return None
    return int(m.group(1))


def parse_numeric(raw: Any, spec: NumericSpec) -> ParsedNumeric:
    txt = "" if raw is None else str(raw)
    if not txt.strip():
        return ParsedNumeric(txt, None, "empty")
    if spec.kind == "int":
        n = to_int_prefix(txt)
        v = None if n is None else float(n)
    else:
        v = to_float(txt)
    if v is None:
        return ParsedNumeric(txt, None, "invalid")
    if (spec.lo is not None and v < spec.lo) or (spec.hi is not None and v > spec.hi):
        return ParsedNumeric(txt, v, "out_of_range")
    return ParsedNumeric(txt, v, "ok")


def number_to_text(v: Any) -> str:
    """Renders a widget number (int/float) as record text; integral floats lose the '.0'."""
    if v is None:
        return ""
    if isinstance(v, bool):
        return ""
    if isinstance(v, float):
        if math.isnan(v) or math.isinf(v):
            return ""
        if is_intish(v):
            return str(int(round(v)))
        return repr(v)
    return str(v)


def fmt_num(v: Optional[float], decimals: int = 1) -> str:
    if v is None:
        return "Non renseigné"
    if isinstance(v, float) and (math.isnan(v) or math.isinf(v)):
        return "Non renseigné"
    if is_intish(v):
        return str(int(round(v)))
    return f"{v:.{decimals}f}"


def join_nonempty(parts: Sequence[str], sep: str = " | ") -> str:
    return sep.join([p for p in parts if p and str(p).strip()])


class SafeDict(dict):
    """Format-map helper that never raises KeyError."""

    def __missing__(self, key: str) -> str:  # type: ignore[override]
        return "Non renseigné"


@dataclass(frozen=True)
class AdvisoryReport:
    """Non-blocking hints shown next to the recommendation."""
    warnings: List[str]

    def __bool__(self) -> bool:
        return bool(self.warnings)

    def to_markdown(self) -> str:
        if not self.warnings:
            return "—"
        lines = ["### Points d'attention / Contrôles de cohérence"]
        for w in self.warnings:
            lines.append(f"- {w}")
        return "\n".join(lines)
