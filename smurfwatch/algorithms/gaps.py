"""
Inactivity gap analysis.

Long breaks between games are a weak smurf signal: an experienced player
returning on a fresh or shared account. Each gap over the threshold gets a
suspicion level that saturates at twice the threshold.
"""

from datetime import datetime, timezone
from typing import List
import structlog

from ..schemas.analysis import GapAnalysis, GapRecord
from ..schemas.matches import MatchRecord
from ..services.detection_config import DetectionConfig
from ..utils.statistics import safe_mean

logger = structlog.get_logger(__name__)

MS_PER_HOUR = 60 * 60 * 1000


def _to_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


class GapAnalyzer:
    """Detects suspicious gaps between consecutive matches."""

    def __init__(self, config: DetectionConfig):
        self.config = config

    def gap_suspicion(self, gap_hours: float) -> float:
        """min(1, hours / (2 * threshold))."""
        return min(1.0, gap_hours / (2 * self.config.suspicious_gap_hours))

    def analyze(self, matches: List[MatchRecord]) -> GapAnalysis:
        """
        Find gaps longer than ``suspicious_gap_hours``.

        Args:
            matches: Matches in any order

        Returns:
            GapAnalysis; empty when there are fewer than two matches
        """
        if len(matches) < 2:
            return GapAnalysis()

        ordered = sorted(matches, key=lambda m: m.creation_timestamp_ms)
        threshold = self.config.suspicious_gap_hours
        gaps: List[GapRecord] = []

        for previous, current in zip(ordered, ordered[1:]):
            gap_hours = (
                current.creation_timestamp_ms - previous.creation_timestamp_ms
            ) / MS_PER_HOUR
            if gap_hours > threshold:
                gaps.append(
                    GapRecord(
                        start_time=_to_datetime(previous.creation_timestamp_ms),
                        end_time=_to_datetime(current.creation_timestamp_ms),
                        duration_hours=gap_hours,
                        suspicion_level=self.gap_suspicion(gap_hours),
                    )
                )

        result = GapAnalysis(
            gaps=gaps,
            total_gap_score=sum(g.suspicion_level for g in gaps),
            average_gap_hours=safe_mean([g.duration_hours for g in gaps]),
        )

        if gaps:
            logger.debug(
                "Suspicious gaps found",
                gap_count=len(gaps),
                total_gap_score=result.total_gap_score,
            )
        return result
