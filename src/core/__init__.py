"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Earthquake feed parsing
- Magnitude/recency filtering
- Summary statistics
- Prompt construction and response sanitization
- Conversation and feed state transitions

All functions here are deterministic and have no I/O.
"""

from src.core.earthquake import Earthquake, parse_earthquakes
from src.core.filters import FilterCriteria, TimeWindow, apply_filters
from src.core.stats import StatsSummary, summarize
from src.core.prompt import build_prompt
from src.core.sanitize import sanitize
from src.core.conversation import Conversation
from src.core.feed import FeedState

__all__ = [
    # Earthquake
    "Earthquake",
    "parse_earthquakes",
    # Filters
    "FilterCriteria",
    "TimeWindow",
    "apply_filters",
    # Stats
    "StatsSummary",
    "summarize",
    # Insights
    "build_prompt",
    "sanitize",
    "Conversation",
    # Feed
    "FeedState",
]
