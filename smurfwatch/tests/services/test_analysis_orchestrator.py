"""
Tests for the analysis orchestrator.

The Riot API client is mocked except in TestUpstreamFailures, which drives the
real client over a fake aiohttp session. The cache, transformer and analyzers
are real.
"""

import asyncio
import json
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from smurfwatch.core.cache import CacheNamespace, TieredCache
from smurfwatch.core.enums import Tier
from smurfwatch.core.exceptions import InsufficientDataError, ValidationError, http_status_for
from smurfwatch.core.riot_api.client import RiotAPIClient
from smurfwatch.core.riot_api.constants import Platform
from smurfwatch.core.riot_api.errors import NotFoundError, UpstreamUnavailableError
from smurfwatch.core.riot_api.models import (
    AccountDTO,
    LeagueEntryDTO,
    LeagueListDTO,
    MatchDTO,
    SummonerDTO,
)
from smurfwatch.core.riot_api.rate_limiter import RateLimiter
from smurfwatch.schemas.analysis import AnalysisResult
from smurfwatch.services.analysis import AnalysisOptions, AnalysisOrchestrator
from smurfwatch.services.detection_config import DetectionConfig

PUUID = "target-puuid"
BASE_MS = 1_700_000_000_000
HOUR_MS = 60 * 60 * 1000
NOW = 1_800_000_000.0


def match_payload(match_id: str, index: int) -> dict:
    """A small but valid match-v5 payload with the target player on team 100."""
    return {
        "metadata": {"matchId": match_id, "participants": [PUUID, "mate-1", "enemy-1"]},
        "info": {
            "gameCreation": BASE_MS + index * HOUR_MS,
            "gameDuration": 1800,
            "queueId": 420,
            "platformId": "NA1",
            "participants": [
                {
                    "puuid": PUUID,
                    "teamId": 100,
                    "win": index % 2 == 0,
                    "championId": index % 4 + 1,
                    "championName": f"Champ{index % 4 + 1}",
                    "kills": 5,
                    "deaths": 4,
                    "assists": 6,
                    "totalMinionsKilled": 170,
                    "goldEarned": 10000,
                    "totalDamageDealtToChampions": 18000,
                    "visionScore": 18,
                    "summoner1Id": 4,
                    "summoner2Id": 14,
                },
                {
                    "puuid": "mate-1",
                    "teamId": 100,
                    "win": index % 2 == 0,
                    "championId": 99,
                    "kills": 4,
                    "totalDamageDealtToChampions": 20000,
                },
                {
                    "puuid": "enemy-1",
                    "teamId": 200,
                    "win": index % 2 == 1,
                    "championId": 98,
                    "kills": 6,
                },
            ],
        },
    }


class FakeMatchSource:
    """Stands in for ``get_match``; tracks how many calls run at once."""

    def __init__(self, failing=(), delay: float = 0.005):
        self.failing = set(failing)
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        # Let AsyncMock(side_effect=...) recognize and await this callable.
        self._is_coroutine = asyncio.coroutines._is_coroutine

    async def __call__(self, match_id: str, platform=None) -> MatchDTO:
        self.calls.append(match_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if match_id in self.failing:
                raise UpstreamUnavailableError("Riot API unavailable", status_code=503)
            return MatchDTO(**match_payload(match_id, int(match_id.split("_")[1])))
        finally:
            self.in_flight -= 1


def match_id_pages(total: int):
    """``get_match_ids`` double serving ``total`` IDs, newest first."""

    async def get_match_ids(puuid, start=0, count=20, platform=None, use_cache=True):
        ids = [f"NA1_{i}" for i in range(total - 1, -1, -1)]
        return ids[start:start + count]

    return get_match_ids


@pytest.fixture
def match_source():
    return FakeMatchSource()


@pytest.fixture
def mock_riot_client(match_source):
    """Mock Riot API client."""
    client = MagicMock()
    client.get_summoner_by_puuid = AsyncMock(
        return_value=SummonerDTO(id="sid", puuid=PUUID, name="Legacy", summonerLevel=42)
    )
    client.get_summoner_by_name = AsyncMock(
        return_value=SummonerDTO(id="sid", puuid=PUUID, name="Legacy", summonerLevel=42)
    )
    client.get_account_by_puuid = AsyncMock(
        return_value=AccountDTO(puuid=PUUID, gameName="Target", tagLine="NA1")
    )
    client.get_account_by_riot_id = AsyncMock(
        return_value=AccountDTO(puuid=PUUID, gameName="Target", tagLine="NA1")
    )
    client.get_match_ids = AsyncMock(side_effect=match_id_pages(12))
    client.get_match = AsyncMock(side_effect=match_source)
    client.get_league_entries_by_puuid = AsyncMock(
        return_value=[
            LeagueEntryDTO(queueType="RANKED_FLEX_SR", tier="SILVER", rank="I"),
            LeagueEntryDTO(queueType="RANKED_SOLO_5x5", tier="DIAMOND", rank="II"),
        ]
    )
    client.get_challenger_league = AsyncMock(
        return_value=LeagueListDTO(tier="CHALLENGER", entries=[{"puuid": "mate-1"}])
    )
    return client


@pytest.fixture
def cache(tmp_path):
    return TieredCache(base_dir=tmp_path, clock=lambda: NOW)


@pytest.fixture
def orchestrator(mock_riot_client, cache):
    return AnalysisOrchestrator(
        client=mock_riot_client,
        cache=cache,
        config=DetectionConfig(),
        fast_mode_batch_pause=0,
        clock=lambda: NOW,
    )


class TestUnifiedAnalysis:
    """Test cases for get_unified_analysis."""

    @pytest.mark.asyncio
    async def test_normal_analysis(self, orchestrator, mock_riot_client, cache):
        result = await orchestrator.get_unified_analysis(PUUID)

        assert isinstance(result, AnalysisResult)
        assert result.matches_analyzed == 12
        assert result.player.display_name == "Target"
        assert result.player.account_level == 42
        assert result.player.region == "na1"
        assert result.estimated_tier == Tier.DIAMOND
        assert result.fast_mode is False
        assert result.confidence == 75
        assert result.outlier_summary.total_games_analyzed == 12
        assert result.performance_consistency.consistency_score is not None
        assert 0.0 <= result.smurf_probability <= 1.0
        assert result.cache_expiry - result.generated_at == timedelta(minutes=30)

        # mate-1 is on the ladder and shares all twelve games
        assert result.association_analysis.high_elo_associations[0].puuid == "mate-1"
        mock_riot_client.get_challenger_league.assert_called_once()

        assert cache.list_keys(CacheNamespace.ANALYSES) == [f"{PUUID}_200"]

    @pytest.mark.asyncio
    async def test_no_matches(self, orchestrator, mock_riot_client):
        mock_riot_client.get_match_ids.side_effect = match_id_pages(0)

        with pytest.raises(InsufficientDataError) as exc_info:
            await orchestrator.get_unified_analysis(PUUID)

        assert exc_info.value.message == "No matches found"
        mock_riot_client.get_match.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_match_fetches_fail(self, orchestrator, mock_riot_client):
        mock_riot_client.get_match.side_effect = FakeMatchSource(
            failing={f"NA1_{i}" for i in range(12)}
        )

        with pytest.raises(InsufficientDataError):
            await orchestrator.get_unified_analysis(PUUID)

    @pytest.mark.asyncio
    async def test_failed_matches_dropped(self, orchestrator, mock_riot_client):
        mock_riot_client.get_match.side_effect = FakeMatchSource(failing={"NA1_3", "NA1_7"})

        result = await orchestrator.get_unified_analysis(PUUID)

        assert result.matches_analyzed == 10

    @pytest.mark.asyncio
    async def test_cached_result_returned(self, orchestrator, mock_riot_client):
        first = await orchestrator.get_unified_analysis(PUUID)
        second = await orchestrator.get_unified_analysis(PUUID)

        assert second == first
        assert mock_riot_client.get_match_ids.call_count == 1
        assert mock_riot_client.get_summoner_by_puuid.call_count == 1

    @pytest.mark.asyncio
    async def test_cache_key_includes_match_count(self, orchestrator, mock_riot_client):
        await orchestrator.get_unified_analysis(PUUID, AnalysisOptions(match_count=20))
        await orchestrator.get_unified_analysis(PUUID, AnalysisOptions(match_count=10))

        assert mock_riot_client.get_match_ids.call_count == 2

    @pytest.mark.asyncio
    async def test_force_refresh(self, orchestrator, mock_riot_client):
        await orchestrator.get_unified_analysis(PUUID)
        await orchestrator.get_unified_analysis(PUUID, AnalysisOptions(force_refresh=True))

        assert mock_riot_client.get_match_ids.call_count == 2
        assert mock_riot_client.get_summoner_by_puuid.call_args.kwargs["use_cache"] is False
        assert mock_riot_client.get_match_ids.call_args.kwargs["use_cache"] is False

    @pytest.mark.asyncio
    async def test_unreadable_cached_result_ignored(self, orchestrator, mock_riot_client, cache):
        cache.set(CacheNamespace.ANALYSES, f"{PUUID}_200", {"unexpected": True}, ttl_ms=60_000)

        result = await orchestrator.get_unified_analysis(PUUID)

        assert result.matches_analyzed == 12
        mock_riot_client.get_match_ids.assert_called_once()

    @pytest.mark.asyncio
    async def test_fast_mode(self, orchestrator, mock_riot_client, match_source):
        mock_riot_client.get_match_ids.side_effect = match_id_pages(80)

        result = await orchestrator.get_unified_analysis(
            PUUID, AnalysisOptions(fast_mode=True, match_count=100)
        )

        assert result.matches_analyzed == 50
        assert result.fast_mode is True
        assert result.confidence == 65
        assert result.cache_expiry - result.generated_at == timedelta(minutes=15)
        assert match_source.max_in_flight <= 5
        mock_riot_client.get_challenger_league.assert_not_called()
        assert result.association_analysis.high_elo_associations == []

    @pytest.mark.asyncio
    async def test_normal_mode_worker_pool_bounded(self, mock_riot_client, cache, match_source):
        orchestrator = AnalysisOrchestrator(
            client=mock_riot_client,
            cache=cache,
            normal_mode_concurrency=3,
            clock=lambda: NOW,
        )

        await orchestrator.get_unified_analysis(PUUID)

        assert len(match_source.calls) == 12
        assert 1 < match_source.max_in_flight <= 3

    @pytest.mark.asyncio
    async def test_match_count_capped_in_normal_mode(self, orchestrator):
        assert orchestrator.effective_match_count(AnalysisOptions(match_count=500)) == 200
        assert orchestrator.effective_match_count(AnalysisOptions()) == 200
        assert orchestrator.effective_match_count(
            AnalysisOptions(fast_mode=True)
        ) == 50

    @pytest.mark.asyncio
    async def test_resolve_by_riot_id(self, orchestrator, mock_riot_client):
        result = await orchestrator.get_unified_analysis(
            "", AnalysisOptions(riot_id="Target#NA1", region="EUW1")
        )

        mock_riot_client.get_account_by_riot_id.assert_called_once_with(
            "Target", "NA1", platform=Platform.EUW1, use_cache=True
        )
        assert result.player.puuid == PUUID
        assert result.player.region == "euw1"

    @pytest.mark.asyncio
    async def test_resolve_by_summoner_name(self, orchestrator, mock_riot_client):
        result = await orchestrator.get_unified_analysis(
            "", AnalysisOptions(summoner_name=" Legacy ")
        )

        mock_riot_client.get_summoner_by_name.assert_called_once_with(
            "Legacy", platform=Platform.NA1, use_cache=True
        )
        assert result.player.display_name == "Legacy"

    @pytest.mark.asyncio
    async def test_malformed_riot_id(self, orchestrator, mock_riot_client):
        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.get_unified_analysis("", AnalysisOptions(riot_id="NoTagLine"))

        assert exc_info.value.context["field"] == "riot_id"
        mock_riot_client.get_account_by_riot_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_identifier(self, orchestrator):
        with pytest.raises(ValidationError):
            await orchestrator.get_unified_analysis("")

    @pytest.mark.asyncio
    async def test_unknown_region(self, orchestrator):
        with pytest.raises(ValidationError, match="Unknown platform"):
            await orchestrator.get_unified_analysis(PUUID, AnalysisOptions(region="moon1"))

    @pytest.mark.asyncio
    async def test_identity_not_found_is_fatal(self, orchestrator, mock_riot_client):
        mock_riot_client.get_summoner_by_puuid.side_effect = NotFoundError(
            "Resource not found", status_code=404
        )

        with pytest.raises(NotFoundError):
            await orchestrator.get_unified_analysis(PUUID)

        mock_riot_client.get_match_ids.assert_not_called()

    @pytest.mark.asyncio
    async def test_league_failure_falls_back_to_gold(self, orchestrator, mock_riot_client):
        mock_riot_client.get_league_entries_by_puuid.side_effect = UpstreamUnavailableError(
            "Riot API unavailable", status_code=503
        )
        mock_riot_client.get_challenger_league.side_effect = UpstreamUnavailableError(
            "Riot API unavailable", status_code=503
        )

        result = await orchestrator.get_unified_analysis(PUUID)

        assert result.estimated_tier == Tier.GOLD
        assert result.association_analysis.association_score == 0


class TestMatchFetching:
    """Test cases for match ID paging and detail fetching."""

    @pytest.mark.asyncio
    async def test_match_ids_paged(self, orchestrator, mock_riot_client):
        mock_riot_client.get_match_ids.side_effect = match_id_pages(300)

        ids = await orchestrator.fetch_match_ids(PUUID, 150, Platform.NA1)

        assert len(ids) == 150
        calls = [
            (c.kwargs["start"], c.kwargs["count"])
            for c in mock_riot_client.get_match_ids.call_args_list
        ]
        assert calls == [(0, 100), (100, 50)]

    @pytest.mark.asyncio
    async def test_match_ids_stop_on_short_page(self, orchestrator, mock_riot_client):
        mock_riot_client.get_match_ids.side_effect = match_id_pages(30)

        ids = await orchestrator.fetch_match_ids(PUUID, 200, Platform.NA1)

        assert len(ids) == 30
        assert mock_riot_client.get_match_ids.call_count == 1

    @pytest.mark.asyncio
    async def test_worker_pool_preserves_order(self, orchestrator):
        ids = ["NA1_5", "NA1_1", "NA1_9", "NA1_2"]

        matches = await orchestrator.fetch_matches_with_workers(ids, Platform.NA1)

        assert [m.match_id for m in matches] == ids

    @pytest.mark.asyncio
    async def test_worker_failure_cancels_other_workers(self, mock_riot_client, cache):
        fetched = []

        async def get_match(match_id, platform=None):
            if match_id == "NA1_11":
                raise RuntimeError("transformer bug")
            await asyncio.sleep(0.01)
            fetched.append(match_id)
            return MatchDTO(**match_payload(match_id, int(match_id.split("_")[1])))

        mock_riot_client.get_match.side_effect = get_match
        orchestrator = AnalysisOrchestrator(
            client=mock_riot_client, cache=cache, normal_mode_concurrency=2
        )
        ids = [f"NA1_{i}" for i in range(11, -1, -1)]

        with pytest.raises(RuntimeError):
            await orchestrator.fetch_matches_with_workers(ids, Platform.NA1)

        await asyncio.sleep(0.05)
        assert fetched == []
        assert mock_riot_client.get_match.call_count == 2

    @pytest.mark.asyncio
    async def test_batches_pause_between(self, mock_riot_client, cache, match_source):
        orchestrator = AnalysisOrchestrator(
            client=mock_riot_client,
            cache=cache,
            fast_mode_batch_size=5,
            fast_mode_batch_pause=0.05,
        )
        ids = [f"NA1_{i}" for i in range(11)]

        loop = asyncio.get_running_loop()
        start = loop.time()
        matches = await orchestrator.fetch_matches_in_batches(ids, Platform.NA1)
        elapsed = loop.time() - start

        assert len(matches) == 11
        assert match_source.max_in_flight <= 5
        # three batches -> two pauses
        assert elapsed >= 0.1


class TestCacheManagement:
    """Test cases for per-player cache invalidation."""

    @pytest.mark.asyncio
    async def test_clear_player_cache(self, orchestrator, cache):
        await orchestrator.get_unified_analysis(PUUID, AnalysisOptions(match_count=10))
        await orchestrator.get_unified_analysis(PUUID, AnalysisOptions(match_count=20))
        cache.set(CacheNamespace.ANALYSES, "other-puuid_200", {}, ttl_ms=60_000)

        assert orchestrator.clear_player_cache(PUUID) == 2
        assert cache.list_keys(CacheNamespace.ANALYSES) == ["other-puuid_200"]

    def test_cache_stats(self, orchestrator):
        stats = orchestrator.get_cache_stats()
        assert "hit_rate" in stats


def routed_session(match_count: int, undecodable=()):
    """aiohttp session double answering Riot URLs for one player."""
    match_ids = [f"NA1_{i}" for i in range(match_count - 1, -1, -1)]

    def body_for(url: str):
        if "/riot/account/v1/accounts/by-puuid/" in url:
            return {"puuid": PUUID, "gameName": "Target", "tagLine": "NA1"}
        if "/lol/summoner/v4/summoners/by-puuid/" in url:
            return {"id": "sid", "puuid": PUUID, "name": "Legacy", "summonerLevel": 42}
        if "/lol/league/v4/entries/by-puuid/" in url:
            return []
        if "/challengerleagues/" in url:
            return {"tier": "CHALLENGER", "queue": "RANKED_SOLO_5x5", "entries": []}
        if "/ids?" in url:
            return match_ids
        match_id = url.rsplit("/", 1)[1]
        return match_payload(match_id, int(match_id.split("_")[1]))

    def get(url):
        response = MagicMock()
        response.status = 200
        response.headers = {}
        match_id = url.rsplit("/", 1)[1]
        if match_id in undecodable:
            response.json = AsyncMock(
                side_effect=json.JSONDecodeError("Expecting value", "<html>", 0)
            )
        else:
            response.json = AsyncMock(return_value=body_for(url))

        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=False)
        return context

    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    session.get = MagicMock(side_effect=get)
    return session


class TestUpstreamFailures:
    """Test cases for malformed upstream responses."""

    @pytest_asyncio.fixture
    async def riot_client(self, cache):
        client = RiotAPIClient(
            api_key="test_api_key",
            cache=cache,
            rate_limiter=RateLimiter(requests_per_second=1000),
        )
        client.session = routed_session(5, undecodable={"NA1_2"})
        yield client
        await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fast_mode", [False, True])
    async def test_undecodable_match_dropped(self, riot_client, cache, fast_mode):
        orchestrator = AnalysisOrchestrator(
            client=riot_client, cache=cache, fast_mode_batch_pause=0, clock=lambda: NOW
        )

        result = await orchestrator.get_unified_analysis(
            PUUID, AnalysisOptions(match_count=5, fast_mode=fast_mode)
        )

        assert result.matches_analyzed == 4
        assert "NA1_2" not in {g.match_id for g in result.outlier_summary.outlier_games}

    @pytest.mark.asyncio
    async def test_malformed_identity_payload(self, orchestrator, mock_riot_client):
        async def summoner_without_puuid(puuid, platform=None, use_cache=True):
            return SummonerDTO(**{"name": "Legacy"})

        mock_riot_client.get_summoner_by_puuid.side_effect = summoner_without_puuid

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await orchestrator.get_unified_analysis(PUUID)

        assert http_status_for(exc_info.value) == 503
        mock_riot_client.get_match_ids.assert_not_called()
