"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS feed client (HTTP)
- Gemini client (HTTP)
- Secret Manager client (credentials)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from src.shell.usgs_client import USGSClient
from src.shell.gemini_client import GeminiClient
from src.shell.config_loader import load_config, Config

__all__ = [
    "USGSClient",
    "GeminiClient",
    "load_config",
    "Config",
]
