"""Mapping from raw classifier scores to a labelled verdict."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..errors import ClassificationError

# Compared against the percentage-scaled score, so nearly any non-zero
# score lands on the positive outcome.
DECISION_THRESHOLD = 0.5


@dataclass(frozen=True, slots=True)
class Verdict:
    result: str
    suggestion: str
    confidence: float = 0.0


VERDICTS = {
    0: ("Non-cancer", "Penyakit kanker tidak terdeteksi."),
    1: ("Cancer", "Segera periksa ke dokter!"),
}
UNKNOWN_VERDICT = ("Unknown", "Hasil tidak dapat diinterpretasikan.")


def confidence_score(scores: Sequence[float] | np.ndarray) -> float:
    values = np.asarray(scores, dtype=np.float64).reshape(-1)
    if values.size == 0:
        raise ClassificationError("Score vector is empty")
    return float(values.max()) * 100


def verdict_for_outcome(outcome: int, confidence: float = 0.0) -> Verdict:
    result, suggestion = VERDICTS.get(outcome, UNKNOWN_VERDICT)
    return Verdict(result=result, suggestion=suggestion, confidence=confidence)


def classify_scores(scores: Sequence[float] | np.ndarray) -> Verdict:
    """Threshold the maximum score and look up the matching label and suggestion."""
    confidence = confidence_score(scores)
    outcome = 1 if confidence > DECISION_THRESHOLD else 0
    return verdict_for_outcome(outcome, confidence)
