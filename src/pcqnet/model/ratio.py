"""
Quantitative ratios and their confidence scores.

Ratios arrive from the upstream integration engine already computed. They are
stored as log2 values between two conditions and may legitimately be NaN
(not computable) or +/-Infinity (signal in only one condition).

Engineering Design:
    - Immutable value objects (frozen dataclasses)
    - Scores keep their raw value: upstream tools sometimes write scores as
      text, so numeric access goes through ``Score.numeric_value`` which
      returns None instead of raising
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

__all__ = [
    'FDR_SCORE_NAME',
    'INTEGRATED_PEPTIDE_NODE_RATIO',
    'Score',
    'Ratio',
    'IonCountRatio',
    'parse_float',
]

FDR_SCORE_NAME = "FDR"
"""Score name produced by the ratio-integration engine for false discovery rates."""

INTEGRATED_PEPTIDE_NODE_RATIO = "Integrated peptide node ratio"


def parse_float(value: Union[str, float, int, None]) -> Optional[float]:
    """
    Parse a number leniently.

    Returns None for missing or unparseable input. Accepts the spellings
    ``NaN``, ``Infinity`` and ``-Infinity`` as well as Python's ``nan``/``inf``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        logger.debug(f"Unparseable numeric value: {value!r}")
        return None


@dataclass(frozen=True)
class Score:
    """Confidence score attached to a ratio (e.g. FDR, standard deviation)."""
    name: str
    value: Union[str, float, None]

    @property
    def numeric_value(self) -> Optional[float]:
        return parse_float(self.value)


@dataclass(frozen=True)
class Ratio:
    """
    A log2 abundance ratio of ``condition1`` over ``condition2``.

    Attributes:
        log2_value: log2 ratio; NaN and +/-Infinity are valid values
        condition1: Numerator condition name
        condition2: Denominator condition name
        description: Human-readable ratio kind shown in tooltips
        score: Optional associated confidence score
    """
    log2_value: float
    condition1: str = "cond1"
    condition2: str = "cond2"
    description: str = "RATIO"
    score: Optional[Score] = None

    def log2_ratio(self, condition1: str, condition2: str) -> float:
        """log2 ratio oriented as ``condition1 / condition2``."""
        if condition1 == self.condition2 and condition2 == self.condition1:
            return -self.log2_value
        return self.log2_value

    def inverted(self) -> "Ratio":
        return replace(
            self,
            log2_value=-self.log2_value,
            condition1=self.condition2,
            condition2=self.condition1,
        )

    @property
    def is_infinite(self) -> bool:
        return math.isinf(self.log2_value)

    @property
    def is_nan(self) -> bool:
        return math.isnan(self.log2_value)


@dataclass(frozen=True)
class IonCountRatio(Ratio):
    """
    Ratio computed from normalized isobaric ion counts.

    ``ion_counts`` maps each condition to its normalized ion count.
    """
    description: str = "Ion count ratio"
    ion_counts: Dict[str, float] = field(default_factory=dict)

    def ion_count(self, condition: str) -> float:
        return self.ion_counts.get(condition, 0.0)

    def inverted(self) -> "IonCountRatio":
        return replace(
            self,
            log2_value=-self.log2_value,
            condition1=self.condition2,
            condition2=self.condition1,
        )
