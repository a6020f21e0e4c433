"""hotelmatch - Supplier-to-master hotel matching system."""

from hotelmatch.config import MatchConfig, ServiceConfig, load_config
from hotelmatch.matcher import Matcher, MatcherStats
from hotelmatch.service import MappingService
from hotelmatch.store import MappingStore, SqliteMappingStore
from hotelmatch.types import MappingStatus, MatchResult, Recommendation, RecommendedAction

__all__ = [
    "MappingService",
    "MappingStatus",
    "MappingStore",
    "MatchConfig",
    "MatchResult",
    "Matcher",
    "MatcherStats",
    "Recommendation",
    "RecommendedAction",
    "ServiceConfig",
    "SqliteMappingStore",
    "load_config",
]
