"""Maturity classification.

Four equal-width bands partition [0, 1]. The table is shared by every rollup
so equal scores always render the same level and color; ``bands_from_config``
lets a project use different cut points without touching the engine.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from pydantic import BaseModel

from ..models.metrics import MaturityLevel


class MaturityBand(BaseModel):
    level: int
    name: str
    min_score: float
    color: str

    def to_level(self) -> MaturityLevel:
        return MaturityLevel(level=self.level, name=self.name, color=self.color)


MATURITY_BANDS: tuple[MaturityBand, ...] = (
    MaturityBand(level=0, name="Nonexistent", min_score=0.0, color="#dc2626"),
    MaturityBand(level=1, name="Initial", min_score=0.25, color="#f97316"),
    MaturityBand(level=2, name="Defined", min_score=0.5, color="#eab308"),
    MaturityBand(level=3, name="Managed", min_score=0.75, color="#16a34a"),
)


def clamp_score(score: Optional[float]) -> float:
    """Clamp to [0, 1]; None and NaN map to 0."""
    if score is None or math.isnan(score):
        return 0.0
    return min(1.0, max(0.0, score))


def classify(
    score: Optional[float],
    bands: Sequence[MaturityBand] = MATURITY_BANDS,
) -> MaturityLevel:
    """Map a score to the highest band whose lower bound it reaches."""
    value = clamp_score(score)
    ordered = sorted(bands, key=lambda b: b.min_score)
    chosen = ordered[0]
    for band in ordered:
        if value >= band.min_score:
            chosen = band
    return chosen.to_level()


def bands_from_config(raw: Optional[list[dict]]) -> tuple[MaturityBand, ...]:
    """Build a band table from config entries, falling back to the default."""
    if not raw:
        return MATURITY_BANDS
    if not isinstance(raw, list):
        raise ValueError(f"maturity.bands must be a list, got {type(raw).__name__}")

    bands: list[MaturityBand] = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ValueError(f"maturity.bands[{idx}] must be a mapping, got {entry!r}")
        try:
            bands.append(MaturityBand(
                level=int(entry.get("level", idx)),
                name=str(entry.get("name", f"Level {idx}")),
                min_score=clamp_score(float(entry.get("min_score", 0.0))),
                color=str(entry.get("color", "#6b7280")),
            ))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid maturity.bands[{idx}]: {e}") from e
    return tuple(sorted(bands, key=lambda b: b.min_score))
