"""Services layer - Heritage discovery and planning.

Available services:
- HeritagePlannerService: Discovery and itinerary orchestration
- ChatService: Heritage guide chat with session history
- SiteEnricher: Bounded concurrent narrative enrichment
- RouteOptimizer: Greedy multi-day scheduler
"""

from .aggregation import deduplicate_sites, merge_sources, select_candidates
from .chat import ChatService
from .enrichment import SiteEnricher
from .planner import HeritagePlannerService
from .route_optimizer import RouteOptimizer
from .validation import validate_itinerary

__all__ = [
    "HeritagePlannerService",
    "ChatService",
    "SiteEnricher",
    "RouteOptimizer",
    "deduplicate_sites",
    "merge_sources",
    "select_candidates",
    "validate_itinerary",
]
