"""Smurf detection algorithms."""

from .associations import AssociationAnalyzer
from .champion_first_time import ChampionFirstTimeAnalyzer
from .features import FeatureExtractor, calculate_kda
from .gaps import GapAnalyzer
from .outliers import OutlierGameDetector
from .performance import PerformanceAnalyzer
from .scoring import AggregateScore, ScoreAggregator
from .spell_usage import SpellUsageAnalyzer

__all__ = [
    "AssociationAnalyzer",
    "ChampionFirstTimeAnalyzer",
    "FeatureExtractor",
    "calculate_kda",
    "GapAnalyzer",
    "OutlierGameDetector",
    "PerformanceAnalyzer",
    "AggregateScore",
    "ScoreAggregator",
    "SpellUsageAnalyzer",
]
