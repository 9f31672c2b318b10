"""Service layer exports."""

from .plates import PlateAggregator
from .sequence_stats import SummaryStats, compute_stats
from .sequences import SequenceCatalog
from .taxonomy import TaxonomyService

__all__ = [
    "PlateAggregator",
    "SequenceCatalog",
    "SummaryStats",
    "TaxonomyService",
    "compute_stats",
]
