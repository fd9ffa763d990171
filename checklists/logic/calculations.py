"""
Derived values shared by the checklist forms.

All inputs arrive as the strings the monitor typed; helpers return
``None`` (or an empty status) when a value is blank or not a number.
"""
from __future__ import annotations

import math
import re
from enum import Enum
from typing import Iterable, Optional, Sequence

# ------------------------------------------------------------------ #
#  Bioluminescence (ATP swab) results                                #
# ------------------------------------------------------------------ #
RLU_ACCEPT_BELOW = 20.0
RLU_CAUTION_MAX = 60.0


class RluStatus(str, Enum):
    EMPTY = ""
    ACCEPT = "accept"
    CAUTION = "caution"
    REJECT = "reject"

    @property
    def label(self) -> str:
        return {
            RluStatus.EMPTY: "",
            RluStatus.ACCEPT: "ACCEPT",
            RluStatus.CAUTION: "CAUTION",
            RluStatus.REJECT: "REJECTS",
        }[self]

    @property
    def needs_retest(self) -> bool:
        return self in (RluStatus.CAUTION, RluStatus.REJECT)


def parse_float(value: object) -> Optional[float]:
    """Float of *value*, or None for blanks, garbage, NaN and infinities."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def rlu_status(value: object) -> RluStatus:
    """< 20 accept, 20..60 caution, > 60 reject."""
    rlu = parse_float(value)
    if rlu is None:
        return RluStatus.EMPTY
    if rlu < RLU_ACCEPT_BELOW:
        return RluStatus.ACCEPT
    if rlu <= RLU_CAUTION_MAX:
        return RluStatus.CAUTION
    return RluStatus.REJECT


# ------------------------------------------------------------------ #
#  Sensory grades                                                    #
# ------------------------------------------------------------------ #
GRADE_MIN = 3.0
GRADE_MAX = 6.0


def is_valid_grade(value: object) -> bool:
    grade = parse_float(value)
    return grade is not None and GRADE_MIN <= grade <= GRADE_MAX


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def mean_grade(values: Iterable[object]) -> float:
    """Mean of the valid grades, rounded to one decimal; 0 when there are none."""
    grades = [g for g in (parse_float(v) for v in values)
              if g is not None and GRADE_MIN <= g <= GRADE_MAX]
    if not grades:
        return 0.0
    return round_half_up(sum(grades) / len(grades), 1)


def final_grade(means: Sequence[float]) -> float:
    """Average of the non-zero attribute means, one decimal; 0 when all are zero."""
    used = [m for m in means if m]
    if not used:
        return 0.0
    return round_half_up(sum(used) / len(used), 1)


# ------------------------------------------------------------------ #
#  Weights                                                           #
# ------------------------------------------------------------------ #
def average_weight(weights: Iterable[object]) -> Optional[float]:
    """Average of the filled weights, or None when no weight was entered."""
    filled = [w for w in (parse_float(v) for v in weights) if w is not None]
    if not filled:
        return None
    return sum(filled) / len(filled)


def format_average_weight(weights: Iterable[object]) -> str:
    avg = average_weight(weights)
    return "" if avg is None else f"{avg:.2f}"


# ------------------------------------------------------------------ #
#  Mixed product composition                                         #
# ------------------------------------------------------------------ #
MIX_TOLERANCE_PCT = 5.0
_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d*\.?\d+")


def parse_measure(value: object) -> Optional[float]:
    """Number in a free-text measurement such as ``"1.250 gr"``."""
    match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", str(value or "")))
    return float(match.group(0)) if match else None


def mix_percentage(fruit_weight: object, bag_weight: object) -> Optional[float]:
    fruit = parse_measure(fruit_weight)
    bag = parse_measure(bag_weight)
    if fruit is None or bag is None or bag <= 0:
        return None
    return fruit / bag * 100.0


def mix_within_tolerance(percentage: Optional[float], expected_fraction: float,
                         tolerance: float = MIX_TOLERANCE_PCT) -> bool:
    """True when *percentage* deviates at most *tolerance* points from the recipe."""
    if percentage is None:
        return False
    return abs(percentage - expected_fraction * 100.0) <= tolerance
