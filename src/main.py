"""Local console session for the coaching engine (no language-model call)"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from src.config import DATA_PATH, LOG_LEVEL, validate_config
from src.exceptions import CoachBotError
from src.services.container import init_container

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a console coaching session")
    parser.add_argument("--user", required=True, help="User id")
    parser.add_argument("--day", required=True, type=int, help="Program day")
    parser.add_argument("--data", type=Path, default=DATA_PATH, help="Directory holding the JSON stores")
    return parser.parse_args(argv)


async def run_session(user_id: str, day: int, data_path: Path, lines) -> int:
    """Feed each non-empty input line through the pipeline; returns an exit code"""
    container = init_container(data_path)
    orchestrator = container.orchestrator

    for line in lines:
        text = line.strip()
        if not text:
            continue
        try:
            outcome = await orchestrator.handle_incoming_message(user_id, day, text)
        except CoachBotError as e:
            print(json.dumps(e.to_dict(), ensure_ascii=False), file=sys.stderr)
            if not e.retryable:
                return 2
            continue

        prompt = await orchestrator.render_prompt(user_id, outcome.context)
        print(prompt["user"])
        print(json.dumps({
            "points_awarded": outcome.points_awarded,
            "total_points": outcome.total_points,
            "streak": outcome.streak,
            "level": outcome.level.number,
            "leveled_up": outcome.leveled_up,
            "new_badges": outcome.new_badges,
        }, ensure_ascii=False))

    snapshot = await orchestrator.gamification_snapshot(user_id)
    print(json.dumps(snapshot, ensure_ascii=False, indent=2))
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main application entry point"""
    args = parse_args(argv)
    try:
        logger.info("Validating configuration...")
        validate_config()
    except CoachBotError as e:
        logger.error(f"Configuration invalid: {e.message}")
        return 1

    try:
        return asyncio.run(run_session(args.user, args.day, args.data, sys.stdin))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
