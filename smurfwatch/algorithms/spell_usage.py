"""
Summoner spell placement analysis.

Players keep Flash on the same key out of habit. Flash moving between the
D and F slots across consecutive games hints at several people sharing the
account.
"""

from datetime import datetime, timezone
from typing import List, Optional

from ..core.riot_api.constants import FLASH_SPELL_ID
from ..schemas.analysis import SpellPlacementChange, SpellUsageAnalysis
from ..schemas.matches import MatchRecord, ParticipantStat


class SpellUsageAnalyzer:
    """Counts Flash slot swaps between consecutive games."""

    def __init__(self, tracked_spell_id: int = FLASH_SPELL_ID):
        self.tracked_spell_id = tracked_spell_id

    def _slot(self, player: ParticipantStat) -> Optional[int]:
        if player.summoner_spell1_id == self.tracked_spell_id:
            return 1
        if player.summoner_spell2_id == self.tracked_spell_id:
            return 2
        return None

    def analyze(self, matches: List[MatchRecord], puuid: str) -> SpellUsageAnalysis:
        ordered = sorted(matches, key=lambda m: m.creation_timestamp_ms)

        changes: List[SpellPlacementChange] = []
        games = 0
        previous_slot: Optional[int] = None

        for match in ordered:
            player = match.participant(puuid)
            if player is None:
                continue
            games += 1

            slot = self._slot(player)
            if slot is None:
                continue
            if previous_slot is not None and slot != previous_slot:
                changes.append(
                    SpellPlacementChange(
                        match_id=match.match_id,
                        timestamp=datetime.fromtimestamp(
                            match.creation_timestamp_ms / 1000, tz=timezone.utc
                        ),
                        previous_slot=previous_slot,
                        new_slot=slot,
                    )
                )
            previous_slot = slot

        score = min(1.0, len(changes) / (games - 1)) if games > 1 else 0.0
        return SpellUsageAnalysis(
            spell_placement_changes=changes,
            pattern_change_score=score,
        )
