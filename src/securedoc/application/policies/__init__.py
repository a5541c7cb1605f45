"""Application policies."""

from securedoc.application.policies.retry_policy import RetryPolicy

__all__ = [
    "RetryPolicy",
]
