"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in src/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from src.core.config import Config, DEFAULT_FEED_URL, DEFAULT_GEMINI_MODEL
from src.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Create a Secret Manager client if a GCP project is known.

    Returns None if neither GCP_PROJECT nor GOOGLE_CLOUD_PROJECT is set
    (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT") or os.environ.get("GOOGLE_CLOUD_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        reference = value[2:-1]
        if not reference.startswith("secret:"):
            env_value = os.environ.get(reference)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", reference)

    return value


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()

    feed = data.get("feed", {}) or {}
    gemini = data.get("gemini", {}) or {}

    api_key = gemini.get("api_key")
    if api_key is not None:
        api_key = _resolve_value(str(api_key), secret_client)
    else:
        # Fall back to the environment so the key can stay out of the file
        api_key = os.environ.get("GEMINI_API_KEY")

    return Config(
        feed_url=_resolve_value(feed.get("url", DEFAULT_FEED_URL), secret_client),
        feed_timeout_seconds=int(feed.get("timeout_seconds", 30)),
        gemini_model=gemini.get("model", DEFAULT_GEMINI_MODEL),
        gemini_api_key=api_key or None,
        gemini_timeout_seconds=int(gemini.get("timeout_seconds", 60)),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using environment")
        return load_config_from_env()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: feed=%s, model=%s, api key %s",
        config.feed_url,
        config.gemini_model,
        "configured" if config.has_credential else "missing",
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Environment variables:
        USGS_FEED_URL: GeoJSON feed endpoint
        FEED_TIMEOUT_SECONDS: Feed request timeout
        GEMINI_API_KEY: Gemini API key (or use Secret Manager)
        GEMINI_API_KEY_SECRET: Secret name in Secret Manager
        GEMINI_MODEL: Model name
        GEMINI_TIMEOUT_SECONDS: Model request timeout

    Returns:
        Config object from environment
    """
    api_key = os.environ.get("GEMINI_API_KEY")

    if not api_key:
        secret_client = _get_secret_manager_client()
        if secret_client:
            secret_name = os.environ.get("GEMINI_API_KEY_SECRET", "gemini-api-key")
            api_key = secret_client.get_secret(secret_name)
            if api_key:
                logger.info("Using Gemini API key from Secret Manager")

    if not api_key:
        logger.warning("GEMINI_API_KEY not set and no secret found")

    return Config(
        feed_url=os.environ.get("USGS_FEED_URL", DEFAULT_FEED_URL),
        feed_timeout_seconds=int(os.environ.get("FEED_TIMEOUT_SECONDS", "30")),
        gemini_model=os.environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        gemini_api_key=api_key or None,
        gemini_timeout_seconds=int(os.environ.get("GEMINI_TIMEOUT_SECONDS", "60")),
    )
