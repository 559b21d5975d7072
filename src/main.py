"""Cloud Function Entry Point.

This module provides the entry points for Google Cloud Functions.
It's a thin wrapper that loads configuration and invokes the orchestrator.
"""

import json
import logging
import os
from typing import Any

import functions_framework
from flask import Request

from src.core.config import validate_config
from src.core.filters import parse_filter_criteria
from src.orchestrator import Orchestrator, conversation_to_dict, dashboard_to_dict
from src.shell.config_loader import load_config


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


_orchestrator: Orchestrator | None = None


def _get_config():
    """Load configuration from CONFIG_PATH or config/config.yaml.

    Falls back to the environment when the file is missing.
    """
    return load_config()


def get_orchestrator() -> Orchestrator:
    """Return the process-wide orchestrator, creating it on first use."""
    global _orchestrator

    if _orchestrator is None:
        config = _get_config()
        validation = validate_config(config)
        for error in validation.errors:
            log = logger.error if error.severity == "error" else logger.warning
            log("Config %s: %s", error.field, error.message)
        _orchestrator = Orchestrator(config)

    return _orchestrator


def _apply_filter_args(orchestrator: Orchestrator, args: Any) -> None:
    """Set filters from request arguments, if any were given.

    Raises:
        ValueError: If the arguments are not recognized filter values
    """
    if "min_magnitude" not in args and "time_window" not in args:
        return

    orchestrator.set_filters(parse_filter_criteria(
        min_magnitude=args.get("min_magnitude"),
        time_window=args.get("time_window"),
    ))


@functions_framework.http
def earthquake_dashboard(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function: filtered events, statistics and chat history.

    Query parameters:
        min_magnitude: Magnitude floor in [0, 7], step 0.5
        time_window: all, 1h, 6h or 24h

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    try:
        orchestrator = get_orchestrator()
        _apply_filter_args(orchestrator, request.args)
        orchestrator.refresh_if_stale()
        return dashboard_to_dict(orchestrator.dashboard()), 200

    except ValueError as e:
        return {"status": "error", "message": str(e)}, 400
    except Exception as e:
        logger.exception("Unexpected error in earthquake dashboard")
        return {"status": "error", "message": str(e)}, 500


@functions_framework.http
def earthquake_insights(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function: ask the insight assistant a question.

    JSON body:
        question: The user's question
        min_magnitude, time_window: Optional filter update

    Returns:
        Tuple of (conversation dict, HTTP status code)
    """
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        return {"status": "error", "message": "request body must be a JSON object"}, 400

    question = body.get("question", "")

    if not isinstance(question, str):
        return {"status": "error", "message": "question must be a string"}, 400

    try:
        orchestrator = get_orchestrator()
        _apply_filter_args(orchestrator, body)
        orchestrator.refresh_if_stale()
        state = orchestrator.ask(question)
        return conversation_to_dict(state), 200

    except ValueError as e:
        return {"status": "error", "message": str(e)}, 400
    except Exception as e:
        logger.exception("Unexpected error in earthquake insights")
        return {"status": "error", "message": str(e)}, 500


@functions_framework.cloud_event
def earthquake_refresh(cloud_event: Any) -> None:
    """Pub/Sub Cloud Function entry point.

    Triggered by Cloud Scheduler every refresh interval.

    Args:
        cloud_event: CloudEvent from Pub/Sub
    """
    logger.info("Starting feed refresh (Pub/Sub trigger)")

    result = get_orchestrator().refresh()

    if result.success:
        logger.info("Refresh complete: %d earthquakes", result.earthquakes_fetched)
    else:
        logger.error("Refresh failed: %s", result.error.message if result.error else "unknown")


# For local testing
if __name__ == "__main__":
    import sys

    print("Running earthquake insights locally...")

    orchestrator = get_orchestrator()
    orchestrator.refresh()
    dashboard = orchestrator.dashboard()

    print(f"Loaded {dashboard.stats.total} earthquakes "
          f"(activity: {dashboard.activity_level})")

    if len(sys.argv) > 1:
        state = orchestrator.ask(" ".join(sys.argv[1:]))
        print(json.dumps(conversation_to_dict(state), indent=2, ensure_ascii=False))
