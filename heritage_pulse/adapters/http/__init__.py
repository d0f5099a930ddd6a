"""HTTP plumbing shared by the upstream adapters."""

from .client import HttpClient
from .retry import RetryPolicy

__all__ = ["HttpClient", "RetryPolicy"]
