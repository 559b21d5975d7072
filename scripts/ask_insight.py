#!/usr/bin/env python3
"""Query the live feed and optionally ask the insight assistant.

Fetches the USGS feed once, applies the given filters and prints the
summary statistics. When a question is given, it is sent to the
language model and the conversation is printed.

Usage:
    # Stats only
    python scripts/ask_insight.py --min-magnitude 2.5 --window 24h

    # Ask a question
    python scripts/ask_insight.py "Any tsunami threats?"

    # Print the prompt without calling the model
    python scripts/ask_insight.py --dry-run "What is the strongest earthquake?"

Environment:
    CONFIG_PATH: Path to config file (optional)
    GEMINI_API_KEY: Language-model API key
"""

import argparse
import json
import logging
import os
import sys
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.filters import TimeWindow, parse_filter_criteria
from src.core.prompt import QUICK_QUESTIONS, build_prompt
from src.core.stats import summary_to_dict
from src.orchestrator import Orchestrator, conversation_to_dict
from src.shell.config_loader import load_config

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Earthquake feed insights")
    parser.add_argument("question", nargs="*", help="Question for the assistant")
    parser.add_argument("--min-magnitude", default=None, help="Magnitude floor (0-7, step 0.5)")
    parser.add_argument(
        "--window",
        default=TimeWindow.ALL.value,
        choices=[w.value for w in TimeWindow],
        help="Time window",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print the prompt, don't call the model")
    parser.add_argument("--list-questions", action="store_true", help="Show suggested questions")
    args = parser.parse_args()

    if args.list_questions:
        for question in QUICK_QUESTIONS:
            print(question)
        return 0

    try:
        criteria = parse_filter_criteria(args.min_magnitude, args.window)
    except ValueError as e:
        parser.error(str(e))

    orchestrator = Orchestrator(load_config(os.environ.get("CONFIG_PATH")))
    orchestrator.set_filters(criteria)

    result = orchestrator.refresh()
    if not result.success:
        logger.error("Could not load feed: %s", result.error.message if result.error else "unknown")
        return 1

    now = datetime.now(timezone.utc)
    summary = orchestrator.stats(now)
    print(json.dumps(summary_to_dict(summary), indent=2))

    if not args.question:
        return 0

    question = " ".join(args.question)

    if args.dry_run:
        print(build_prompt(question, summary))
        return 0

    state = orchestrator.ask(question, now)
    print(json.dumps(conversation_to_dict(state), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
