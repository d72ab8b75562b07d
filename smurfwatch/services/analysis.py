"""
Unified smurf analysis orchestration.

The orchestrator resolves a player, pulls their match history through the
rate-limited gateway, runs every analyzer over the matches that came back
and caches the assembled result.
"""

import asyncio
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Set

import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..algorithms.associations import AssociationAnalyzer
from ..algorithms.champion_first_time import ChampionFirstTimeAnalyzer
from ..algorithms.features import FeatureExtractor
from ..algorithms.gaps import GapAnalyzer
from ..algorithms.outliers import OutlierGameDetector
from ..algorithms.performance import PerformanceAnalyzer
from ..algorithms.scoring import ScoreAggregator
from ..algorithms.spell_usage import SpellUsageAnalyzer
from ..core.cache import CacheNamespace, TieredCache
from ..core.decorators import service_error_handler
from ..core.enums import Tier
from ..core.exceptions import InsufficientDataError, ValidationError
from ..core.riot_api.client import RiotAPIClient
from ..core.riot_api.constants import (
    MATCH_IDS_MAX_START,
    MATCH_IDS_PAGE_SIZE,
    RANKED_SOLO_QUEUE,
    Platform,
)
from ..core.riot_api.endpoints import parse_riot_id, resolve_platform
from ..core.riot_api.errors import RiotAPIError
from ..core.riot_api.transformers import MatchTransformer
from ..schemas.analysis import AnalysisResult
from ..schemas.matches import MatchRecord, PlayerIdentity
from .detection_config import DetectionConfig, FALLBACK_TIER, resolve_tier

logger = structlog.get_logger(__name__)

SERVICE_NAME = "AnalysisOrchestrator"


class AnalysisOptions(BaseModel):
    """Per-request analysis options."""

    region: Optional[str] = Field(None, description="Platform, e.g. na1 or euw1")
    match_count: Optional[int] = Field(None, ge=1, description="Matches to analyze")
    fast_mode: bool = Field(False, description="Fewer matches, smaller batches")
    force_refresh: bool = Field(False, description="Ignore cached analysis and identity")
    riot_id: Optional[str] = Field(None, description="gameName#tagLine")
    summoner_name: Optional[str] = Field(None, description="Legacy summoner name")


class AnalysisOrchestrator:
    """Coordinates fetching, analysis and result caching for one player."""

    def __init__(
        self,
        client: RiotAPIClient,
        cache: TieredCache,
        config: Optional[DetectionConfig] = None,
        transformer: Optional[MatchTransformer] = None,
        default_platform: Platform = Platform.NA1,
        normal_mode_concurrency: int = 20,
        fast_mode_batch_size: int = 5,
        fast_mode_batch_pause: float = 0.2,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Riot API gateway
            cache: Cache for finished analyses
            config: Detection thresholds and weights
            transformer: DTO to domain record transformer
            default_platform: Platform used when a request names none
            normal_mode_concurrency: Worker count for normal-mode match fetching
            fast_mode_batch_size: Matches fetched per fast-mode batch
            fast_mode_batch_pause: Seconds between fast-mode batches
            clock: Time source in seconds
        """
        self.client = client
        self.cache = cache
        self.config = config or DetectionConfig()
        self.transformer = transformer or MatchTransformer()
        self.default_platform = default_platform
        self.normal_mode_concurrency = normal_mode_concurrency
        self.fast_mode_batch_size = fast_mode_batch_size
        self.fast_mode_batch_pause = fast_mode_batch_pause
        self._clock = clock

        self.features = FeatureExtractor()
        self.gap_analyzer = GapAnalyzer(self.config)
        self.champion_analyzer = ChampionFirstTimeAnalyzer(self.config)
        self.outlier_detector = OutlierGameDetector(self.config, self.features)
        self.spell_analyzer = SpellUsageAnalyzer()
        self.association_analyzer = AssociationAnalyzer(self.config)
        self.performance_analyzer = PerformanceAnalyzer(
            min_games_for_analysis=self.config.min_games_for_consistency
        )
        self.aggregator = ScoreAggregator(self.config)

    def effective_match_count(self, options: AnalysisOptions) -> int:
        """Requested match count capped by the mode's maximum."""
        requested = options.match_count or self.config.default_match_count
        cap = (
            self.config.fast_mode_max_matches
            if options.fast_mode
            else self.config.normal_mode_max_matches
        )
        return min(requested, cap)

    @staticmethod
    def cache_key(puuid: str, match_count: int) -> str:
        return f"{puuid}_{match_count}"

    def _cached_result(self, puuid: str, match_count: int) -> Optional[AnalysisResult]:
        cached = self.cache.get(CacheNamespace.ANALYSES, self.cache_key(puuid, match_count))
        if cached is None:
            return None
        try:
            return AnalysisResult.model_validate(cached)
        except PydanticValidationError as e:
            logger.warning(
                "Discarding unreadable cached analysis", puuid=puuid, error=str(e)
            )
            return None

    @service_error_handler(SERVICE_NAME)
    async def get_unified_analysis(
        self, puuid: str, options: Optional[AnalysisOptions] = None
    ) -> AnalysisResult:
        """
        Produce (or return a cached) smurf analysis for a player.

        Args:
            puuid: Player PUUID; may be empty when a Riot ID or summoner name
                is supplied in ``options``
            options: Analysis options

        Returns:
            AnalysisResult

        Raises:
            ValidationError: No usable identifier, or a malformed Riot ID
            InsufficientDataError: No match could be fetched
            RiotAPIError: Identity resolution or match listing failed upstream
        """
        options = options or AnalysisOptions()
        match_count = self.effective_match_count(options)

        if puuid and not options.force_refresh:
            cached = self._cached_result(puuid, match_count)
            if cached is not None:
                logger.info("Returning cached analysis", puuid=puuid, match_count=match_count)
                return cached

        platform = resolve_platform(options.region, self.default_platform)
        player = await self.resolve_identity(puuid, options, platform)

        if player.puuid != puuid and not options.force_refresh:
            cached = self._cached_result(player.puuid, match_count)
            if cached is not None:
                logger.info("Returning cached analysis", puuid=player.puuid, match_count=match_count)
                return cached

        logger.info(
            "Starting analysis",
            puuid=player.puuid,
            platform=platform.value,
            match_count=match_count,
            fast_mode=options.fast_mode,
        )

        match_ids = await self.fetch_match_ids(
            player.puuid, match_count, platform, use_cache=not options.force_refresh
        )
        if options.fast_mode:
            matches = await self.fetch_matches_in_batches(match_ids, platform)
        else:
            matches = await self.fetch_matches_with_workers(match_ids, platform)

        if not matches:
            raise InsufficientDataError(
                service=SERVICE_NAME,
                operation="get_unified_analysis",
                context={"puuid": player.puuid, "match_ids": len(match_ids)},
            )

        tier = await self.estimate_tier(player, platform)
        high_elo_puuids: Set[str] = set()
        if not options.fast_mode:
            high_elo_puuids = await self.fetch_high_elo_puuids(platform)

        result = self.analyze_matches(
            player, matches, tier, high_elo_puuids, fast_mode=options.fast_mode
        )

        ttl_ms = (
            self.config.fast_analysis_ttl_ms
            if options.fast_mode
            else self.config.normal_analysis_ttl_ms
        )
        self.cache.set(
            CacheNamespace.ANALYSES,
            self.cache_key(player.puuid, match_count),
            result.model_dump(mode="json"),
            ttl_ms,
        )

        logger.info(
            "Analysis completed",
            puuid=player.puuid,
            matches_analyzed=result.matches_analyzed,
            smurf_probability=result.smurf_probability,
            risk_level=result.risk_level.value,
        )
        return result

    async def resolve_identity(
        self, puuid: str, options: AnalysisOptions, platform: Platform
    ) -> PlayerIdentity:
        """
        Resolve the player by Riot ID, else legacy summoner name, else PUUID.

        Raises:
            ValidationError: Malformed Riot ID or no identifier at all
        """
        use_cache = not options.force_refresh
        account = None

        if options.riot_id:
            try:
                game_name, tag_line = parse_riot_id(options.riot_id)
            except ValueError as e:
                raise ValidationError(
                    str(e),
                    service=SERVICE_NAME,
                    operation="resolve_identity",
                    field="riot_id",
                    value=options.riot_id,
                ) from e
            account = await self.client.get_account_by_riot_id(
                game_name, tag_line, platform=platform, use_cache=use_cache
            )
            summoner = await self.client.get_summoner_by_puuid(
                account.puuid, platform=platform, use_cache=use_cache
            )
        elif options.summoner_name and options.summoner_name.strip():
            summoner = await self.client.get_summoner_by_name(
                options.summoner_name.strip(), platform=platform, use_cache=use_cache
            )
        elif puuid:
            summoner = await self.client.get_summoner_by_puuid(
                puuid, platform=platform, use_cache=use_cache
            )
            account = await self.client.get_account_by_puuid(
                puuid, platform=platform, use_cache=use_cache
            )
        else:
            raise ValidationError(
                "A PUUID, Riot ID or summoner name is required",
                service=SERVICE_NAME,
                operation="resolve_identity",
                field="puuid",
            )

        return self.transformer.to_player_identity(summoner, platform.value, account)

    async def fetch_match_ids(
        self,
        puuid: str,
        match_count: int,
        platform: Platform,
        use_cache: bool = True,
    ) -> List[str]:
        """Page through match IDs, newest first, up to ``match_count``."""
        match_ids: List[str] = []
        start = 0

        while len(match_ids) < match_count and start < MATCH_IDS_MAX_START:
            count = min(MATCH_IDS_PAGE_SIZE, match_count - len(match_ids))
            page = await self.client.get_match_ids(
                puuid, start=start, count=count, platform=platform, use_cache=use_cache
            )
            match_ids.extend(page)
            if len(page) < count:
                break
            start += count

        # Pages can overlap if new games finish while paging
        return list(dict.fromkeys(match_ids))[:match_count]

    async def _fetch_match(self, match_id: str, platform: Platform) -> Optional[MatchRecord]:
        try:
            match = await self.client.get_match(match_id, platform=platform)
            return self.transformer.to_match_record(match)
        except (RiotAPIError, PydanticValidationError) as e:
            logger.warning(
                "Skipping match that failed to load",
                match_id=match_id,
                error_type=e.__class__.__name__,
                error=str(e),
            )
            return None

    async def fetch_matches_in_batches(
        self, match_ids: List[str], platform: Platform
    ) -> List[MatchRecord]:
        """Fast mode: small concurrent batches with a pause between them."""
        matches: List[MatchRecord] = []
        size = self.fast_mode_batch_size

        for offset in range(0, len(match_ids), size):
            if offset > 0 and self.fast_mode_batch_pause > 0:
                await asyncio.sleep(self.fast_mode_batch_pause)
            batch = await asyncio.gather(
                *(self._fetch_match(match_id, platform) for match_id in match_ids[offset:offset + size])
            )
            matches.extend(record for record in batch if record is not None)

        return matches

    async def fetch_matches_with_workers(
        self, match_ids: List[str], platform: Platform
    ) -> List[MatchRecord]:
        """Normal mode: a fixed pool of workers draining a queue of match IDs."""
        queue: "asyncio.Queue[str]" = asyncio.Queue()
        for match_id in match_ids:
            queue.put_nowait(match_id)

        fetched: Dict[str, MatchRecord] = {}

        async def worker() -> None:
            while True:
                try:
                    match_id = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                record = await self._fetch_match(match_id, platform)
                if record is not None:
                    fetched[match_id] = record

        workers = [
            asyncio.create_task(worker())
            for _ in range(min(self.normal_mode_concurrency, len(match_ids)))
        ]
        try:
            await asyncio.gather(*workers)
        except BaseException:
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise

        return [fetched[match_id] for match_id in match_ids if match_id in fetched]

    async def estimate_tier(self, player: PlayerIdentity, platform: Platform) -> Tier:
        """Solo queue tier from league entries; GOLD when unranked or unavailable."""
        try:
            entries = await self.client.get_league_entries_by_puuid(
                player.puuid, platform=platform
            )
        except (RiotAPIError, PydanticValidationError) as e:
            logger.warning(
                "Could not fetch league entries, using fallback tier",
                puuid=player.puuid,
                error=str(e),
            )
            return FALLBACK_TIER

        solo = next((e for e in entries if e.queue_type == RANKED_SOLO_QUEUE), None)
        entry = solo or (entries[0] if entries else None)
        return resolve_tier(entry.tier) if entry else FALLBACK_TIER

    async def fetch_high_elo_puuids(self, platform: Platform) -> Set[str]:
        """PUUIDs on the solo queue challenger ladder; empty when unavailable."""
        try:
            league = await self.client.get_challenger_league(
                RANKED_SOLO_QUEUE, platform=platform
            )
        except (RiotAPIError, PydanticValidationError) as e:
            logger.warning("Could not fetch challenger ladder", error=str(e))
            return set()
        return {entry.puuid for entry in league.entries if entry.puuid}

    def analyze_matches(
        self,
        player: PlayerIdentity,
        matches: List[MatchRecord],
        tier: Tier,
        high_elo_puuids: Set[str],
        fast_mode: bool = False,
    ) -> AnalysisResult:
        """Run every analyzer over fetched matches and assemble the result."""
        puuid = player.puuid
        cfg = self.config

        gap_analysis = self.gap_analyzer.analyze(matches)
        champion_analysis = self.champion_analyzer.analyze(matches, puuid)
        spell_usage = self.spell_analyzer.analyze(matches, puuid)
        associations = self.association_analyzer.analyze(matches, puuid, high_elo_puuids)
        outlier_summary = self.outlier_detector.analyze(matches, puuid, tier)
        consistency = self.performance_analyzer.analyze(
            [metrics for _, _, metrics in self.features.extract_all(matches, puuid)]
        )

        score = self.aggregator.aggregate(
            gap_analysis=gap_analysis,
            champion_analysis=champion_analysis,
            spell_usage=spell_usage,
            associations=associations,
            outlier_summary=outlier_summary,
            consistency=consistency.consistency_score,
            games=len(matches),
            fast_mode=fast_mode,
        )

        generated_at = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        ttl_ms = cfg.fast_analysis_ttl_ms if fast_mode else cfg.normal_analysis_ttl_ms

        return AnalysisResult(
            player=player,
            factor_scores=score.factor_scores,
            gap_analysis=gap_analysis,
            champion_analysis=champion_analysis,
            spell_usage_analysis=spell_usage,
            association_analysis=associations,
            outlier_summary=outlier_summary,
            performance_consistency=consistency,
            smurf_probability=score.smurf_probability,
            suspicion_level=score.suspicion_level,
            overall_risk_score=score.overall_risk_score,
            risk_level=score.risk_level,
            confidence=score.confidence,
            indicators=score.indicators,
            matches_analyzed=len(matches),
            estimated_tier=tier,
            fast_mode=fast_mode,
            generated_at=generated_at,
            cache_expiry=generated_at + timedelta(milliseconds=ttl_ms),
        )

    def clear_player_cache(self, puuid: str) -> int:
        """
        Remove every cached analysis of a player.

        Returns:
            Number of cached analyses removed
        """
        prefix = f"{puuid}_"
        keys = [k for k in self.cache.list_keys(CacheNamespace.ANALYSES) if k.startswith(prefix)]
        for key in keys:
            self.cache.delete(CacheNamespace.ANALYSES, key)
        logger.info("Cleared cached analyses", puuid=puuid, removed=len(keys))
        return len(keys)

    def get_cache_stats(self) -> Dict:
        return self.cache.get_stats()
