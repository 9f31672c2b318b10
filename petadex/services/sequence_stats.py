"""Summary statistics over per-residue sequence features."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from petadex.core.schemas import SequenceFeatureSet

HYDROPHOBIC_THRESHOLD = 0.5

FeatureInput = Union[SequenceFeatureSet, Mapping[str, Any], None]


@dataclass(frozen=True)
class SummaryStats:
    """Full-precision summary; :meth:`display` applies the fixed rounding."""

    total_mass: float = 0.0
    avg_pi: float = 0.0
    percent_hydrophobic: float = 0.0
    sequence_length: int = 0

    def display(self) -> Dict[str, Any]:
        return {
            "totalMass": f"{self.total_mass:.2f}",
            "avgPI": f"{self.avg_pi:.2f}",
            "percentHydrophobic": f"{self.percent_hydrophobic:.1f}",
            "sequenceLength": self.sequence_length,
        }

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_stats(features: FeatureInput) -> SummaryStats:
    """Reduce mass, pI and hydropathy arrays to summary statistics.

    Never raises. Missing arrays, empty arrays, a zero or missing sequence
    length and non-numeric entries all degrade to zero-valued output.
    """
    if isinstance(features, SequenceFeatureSet):
        mass: Any = features.mass
        pi: Any = features.pi
        hydropathy: Any = features.hydropathy
        length: Any = features.sequence_length
    elif isinstance(features, Mapping):
        mass = features.get("mass")
        pi = _first_present(features, "pI", "pi")
        hydropathy = _first_present(features, "hydropathy", "hpath")
        length = _first_present(features, "sequence_length", "sequenceLength")
    else:
        return SummaryStats()

    masses = _numbers(mass)
    pis = _numbers(pi)
    hydro = _numbers(hydropathy)
    sequence_length = _length(length)

    total_mass = _total(masses)
    avg_pi = _total(pis) / len(pis) if pis else 0.0
    hydrophobic = sum(1 for value in hydro if value > HYDROPHOBIC_THRESHOLD)
    percent = hydrophobic / sequence_length * 100 if sequence_length > 0 else 0.0

    return SummaryStats(
        total_mass=total_mass,
        avg_pi=avg_pi,
        percent_hydrophobic=percent,
        sequence_length=sequence_length,
    )


def _first_present(features: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if features.get(key) is not None:
            return features[key]
    return None


def _numbers(values: Optional[Iterable[Any]]) -> List[float]:
    if values is None or isinstance(values, (str, bytes, Mapping)):
        return []
    try:
        items = list(values)
    except TypeError:
        return []
    numbers: List[float] = []
    for item in items:
        number = _finite(item)
        if number is not None:
            numbers.append(number)
    return numbers


def _finite(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it cannot be one."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _total(values: List[float]) -> float:
    # finite inputs can still overflow once summed
    try:
        return math.fsum(values)
    except OverflowError:
        return 0.0


def _length(value: Any) -> int:
    number = _finite(value)
    if number is None or number <= 0:
        return 0
    return int(value)


__all__ = ["HYDROPHOBIC_THRESHOLD", "SummaryStats", "compute_stats"]
