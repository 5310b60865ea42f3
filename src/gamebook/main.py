"""Entry-point for launching the gamebook."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .data import DataError, StoryLoader
from .presentation.cli import config
from .presentation.cli.app import main as cli_main
from .services import SessionStore
from .services.story_graph_validator import format_issue, has_errors, validate_story_graph

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play or validate a gamebook story.")
    parser.add_argument("--story", help="Path to the story JSON file.")
    parser.add_argument("--config", help="Path to the config file.")
    parser.add_argument("--session", help="Session id to resume.")
    parser.add_argument("--new", action="store_true", help="Discard saved progress for the session.")
    parser.add_argument("--validate", action="store_true", help="Check the story and exit.")
    parser.add_argument(
        "--init-config", action="store_true", help="Write the current settings to the config file and exit."
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI presentation layer."""
    args = parse_args(argv)
    config_path = Path(args.config) if args.config else None
    settings = config.load_config(config_path)
    configure_logging(settings["log_level"])

    if args.init_config:
        if args.story:
            settings["story_path"] = str(Path(args.story).resolve())
        config.save_config(settings, config_path)
        print(f"Wrote config to {config_path or config.get_default_config_path()}.")
        return 0

    story_path = Path(args.story or settings["story_path"])
    try:
        graph = StoryLoader().load_file(story_path)
    except DataError as exc:
        logger.error("Story failed to load: %s", exc)
        print(f"Cannot start: {exc}", file=sys.stderr)
        return 1

    if args.validate:
        issues = validate_story_graph(graph)
        for issue in issues:
            print(format_issue(issue))
        if has_errors(issues):
            print(f"Validation failed for {story_path}.")
            return 1
        print(f"Validation passed for {story_path}.")
        return 0

    store = SessionStore(settings["save_dir"])
    try:
        cli_main(graph, store, args.session, fresh=args.new)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except (KeyboardInterrupt, EOFError):
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
