"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the src package.
"""

from src.main import (
    earthquake_dashboard,
    earthquake_insights,
    earthquake_refresh,
)

__all__ = [
    "earthquake_dashboard",
    "earthquake_insights",
    "earthquake_refresh",
]
