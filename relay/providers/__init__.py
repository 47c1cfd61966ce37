from .adapter import DubPolicy, ProviderAdapter, normalize_episode_id
from .aggregator import CANDIDATE_SERVERS, StreamAggregator
from .backoff import RetryPolicy, retry_with_backoff

__all__ = [
    "CANDIDATE_SERVERS",
    "DubPolicy",
    "ProviderAdapter",
    "RetryPolicy",
    "StreamAggregator",
    "normalize_episode_id",
    "retry_with_backoff",
]
