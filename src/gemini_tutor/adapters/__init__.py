"""Model provider adapters."""

from .base import GenerationAdapter, ProviderSession, classify_error, is_quota_error
from .mock import MockAdapter

__all__ = [
    "GenerationAdapter",
    "MockAdapter",
    "ProviderSession",
    "classify_error",
    "is_quota_error",
]
