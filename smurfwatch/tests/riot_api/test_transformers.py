"""
Tests for DTO to domain record transformation.
"""

from smurfwatch.core.riot_api.models import AccountDTO, MatchDTO, SummonerDTO
from smurfwatch.core.riot_api.transformers import MatchTransformer


class TestMatchTransformer:
    """Test cases for MatchTransformer."""

    def test_to_match_record(self, sample_match_payload):
        record = MatchTransformer().to_match_record(MatchDTO(**sample_match_payload))

        assert record.match_id == "NA1_4800000001"
        assert record.duration_seconds == 1800
        assert record.queue_id == 420
        assert len(record.participants) == 2

        player = record.participant("target-puuid")
        assert player.total_cs == 240
        assert player.role == "MIDDLE"
        assert player.summoner_spell1_id == 4
        assert player.total_damage_dealt_to_champions == 30000

    def test_role_falls_back_to_individual_position(self, sample_match_payload):
        record = MatchTransformer().to_match_record(MatchDTO(**sample_match_payload))
        assert record.participant("mate-1").role == "JUNGLE"

    def test_legacy_millisecond_duration(self, sample_match_payload):
        sample_match_payload["info"]["gameDuration"] = 1_800_000
        record = MatchTransformer().to_match_record(MatchDTO(**sample_match_payload))
        assert record.duration_seconds == 1800

    def test_to_player_identity_with_account(self):
        summoner = SummonerDTO(
            id="sid", puuid="abc", name="OldName", summonerLevel=31
        )
        account = AccountDTO(puuid="abc", gameName="NewName", tagLine="NA1")

        identity = MatchTransformer().to_player_identity(summoner, "na1", account)

        assert identity.display_name == "NewName"
        assert identity.riot_id == "NewName#NA1"
        assert identity.account_level == 31
        assert identity.summoner_id == "sid"

    def test_to_player_identity_legacy_name(self):
        summoner = SummonerDTO(puuid="abc", name="OldName", summonerLevel=31)

        identity = MatchTransformer().to_player_identity(summoner, "na1")

        assert identity.display_name == "OldName"
        assert identity.riot_id is None
