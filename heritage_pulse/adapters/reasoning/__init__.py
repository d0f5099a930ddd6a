"""Reasoning model adapters - Implementations of the ReasoningModelPort."""

from .json_extraction import extract_json_object, strip_reasoning
from .openrouter_adapter import OpenRouterReasoningAdapter, parse_itinerary

__all__ = [
    "OpenRouterReasoningAdapter",
    "extract_json_object",
    "parse_itinerary",
    "strip_reasoning",
]
