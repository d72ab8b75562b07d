"""High-elo association analysis: repeat teammates who sit on the challenger ladder."""

from collections import Counter
from typing import Iterable, List
import structlog

from ..schemas.analysis import AssociationAnalysis, PlayerAssociation
from ..schemas.matches import MatchRecord
from ..services.detection_config import DetectionConfig

logger = structlog.get_logger(__name__)


class AssociationAnalyzer:
    """Finds duo partners from the top of the ladder."""

    def __init__(self, config: DetectionConfig):
        self.config = config

    def analyze(
        self,
        matches: List[MatchRecord],
        puuid: str,
        high_elo_puuids: Iterable[str],
    ) -> AssociationAnalysis:
        """
        Count same-team repeat teammates that are known high-elo players.

        Args:
            matches: Player's matches
            puuid: Target player
            high_elo_puuids: PUUIDs from the challenger ladder

        Returns:
            AssociationAnalysis with ``min(1, associations / saturation)``
        """
        ladder = set(high_elo_puuids)
        if not ladder:
            return AssociationAnalysis()

        teammates: Counter = Counter()
        for match in matches:
            player = match.participant(puuid)
            if player is None:
                continue
            for mate in match.teammates_of(player):
                if mate.puuid != puuid:
                    teammates[mate.puuid] += 1

        associations = [
            PlayerAssociation(puuid=mate, games_together=count)
            for mate, count in teammates.most_common()
            if count >= self.config.association_min_shared_games and mate in ladder
        ]

        if associations:
            logger.debug("High-elo associations found", count=len(associations))

        return AssociationAnalysis(
            high_elo_associations=associations,
            association_score=min(
                1.0, len(associations) / self.config.association_saturation
            ),
        )
