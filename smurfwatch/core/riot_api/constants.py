"""Riot API constants and enum definitions."""

from enum import Enum
from typing import Dict


class Region(str, Enum):
    """Riot API regions for regional routing."""

    AMERICAS = "americas"
    ASIA = "asia"
    EUROPE = "europe"
    SEA = "sea"


class Platform(str, Enum):
    """Riot API platforms for platform routing."""

    BR1 = "br1"
    EUN1 = "eun1"
    EUW1 = "euw1"
    JP1 = "jp1"
    KR = "kr"
    LA1 = "la1"
    LA2 = "la2"
    NA1 = "na1"
    OC1 = "oc1"
    PH2 = "ph2"
    RU = "ru"
    SG2 = "sg2"
    TH2 = "th2"
    TR1 = "tr1"
    TW2 = "tw2"
    VN2 = "vn2"


# Match-v5 and account-v1 live on the regional cluster for each platform
PLATFORM_TO_REGION: Dict[Platform, Region] = {
    Platform.BR1: Region.AMERICAS,
    Platform.LA1: Region.AMERICAS,
    Platform.LA2: Region.AMERICAS,
    Platform.NA1: Region.AMERICAS,
    Platform.EUN1: Region.EUROPE,
    Platform.EUW1: Region.EUROPE,
    Platform.TR1: Region.EUROPE,
    Platform.RU: Region.EUROPE,
    Platform.JP1: Region.ASIA,
    Platform.KR: Region.ASIA,
    Platform.OC1: Region.SEA,
    Platform.PH2: Region.SEA,
    Platform.SG2: Region.SEA,
    Platform.TH2: Region.SEA,
    Platform.TW2: Region.SEA,
    Platform.VN2: Region.SEA,
}


def region_for_platform(platform: Platform) -> Region:
    """Return the regional routing value for a platform (americas if unknown)."""
    return PLATFORM_TO_REGION.get(platform, Region.AMERICAS)


class QueueType(int, Enum):
    """Riot API queue types for match filtering."""

    # Ranked queues
    RANKED_SOLO_5X5 = 420
    RANKED_FLEX_5X5 = 440

    # Normal queues
    NORMAL_DRAFT_5X5 = 400
    NORMAL_BLIND_PICK_5X5 = 430
    ARAM = 450

    # Rotating modes
    URF = 900
    ONE_FOR_ALL = 1020


# League-v4 queue identifiers (string form used by league endpoints)
RANKED_SOLO_QUEUE = "RANKED_SOLO_5x5"

# Match-v5 limits
MATCH_IDS_PAGE_SIZE = 100
MATCH_IDS_MAX_START = 1000

FLASH_SPELL_ID = 4
