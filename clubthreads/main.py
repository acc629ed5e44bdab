"""Command line interface for clubthreads.

Subcommands:
    show        Print a topic's threaded discussion (text or JSON)
    reset-view  Clear a viewer session's collapse state for a topic
"""

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from clubthreads.core.config import ThreadsConfig
from clubthreads.core.exceptions import ClubThreadsError
from clubthreads.di.container import Container
from clubthreads.observability.logging_config import get_logger, setup_logging
from clubthreads.services.collapse.collapse_state import reset_topic_collapse_state
from clubthreads.services.discussion.presentation import render_text

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser with subcommands.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="clubthreads",
        description="Threaded book-club discussions.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show_parser = subparsers.add_parser("show", help="Print a topic's threads")
    show_parser.add_argument("topic_id", help="Discussion topic identifier")
    show_parser.add_argument(
        "--json", action="store_true", help="Print the forest as JSON"
    )
    show_parser.add_argument(
        "--collapsed",
        nargs="+",
        default=[],
        metavar="POST_ID",
        help="Post ids whose replies are hidden",
    )
    show_parser.add_argument(
        "--orphans",
        dest="orphan_policy",
        choices=["drop", "promote"],
        help="Override ORPHAN_POLICY",
    )
    show_parser.add_argument(
        "--session",
        dest="session_id",
        help="Viewer session whose stored collapse state is applied",
    )
    show_parser.add_argument(
        "--data-dir", dest="data_dir", help="Override DATA_DIR"
    )

    reset_parser = subparsers.add_parser(
        "reset-view", help="Clear collapse state for a topic"
    )
    reset_parser.add_argument("topic_id", help="Discussion topic identifier")
    reset_parser.add_argument(
        "--session",
        dest="session_id",
        help="Viewer session to clear (without one there is nothing to reset)",
    )
    reset_parser.add_argument(
        "--data-dir", dest="data_dir", help="Override DATA_DIR"
    )

    return parser


def _load_config(args: argparse.Namespace) -> Optional[ThreadsConfig]:
    """Load configuration from environment and apply CLI overrides.

    Returns None if validation failed (errors are printed).
    """
    overrides = {
        k: v
        for k, v in {
            "data_dir": getattr(args, "data_dir", None),
            "orphan_policy": getattr(args, "orphan_policy", None),
        }.items()
        if v is not None
    }
    try:
        return ThreadsConfig(**overrides)
    except ValidationError as e:
        print(f"Configuration validation error:\n{e}", file=sys.stderr)
        return None


def _run_show(args: argparse.Namespace, container: Container) -> int:
    use_case = container.provide_topic_threads(session_id=args.session_id)
    result = use_case.load(args.topic_id)
    collapsed = result.collapsed_ids | set(args.collapsed)

    if args.json:
        payload = {
            "topic_id": result.topic_id,
            "summary": result.summary.model_dump(),
            "collapsed_ids": sorted(collapsed),
            "threads": [node.model_dump(mode="json") for node in result.forest],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        config = container.config
        print(
            render_text(
                result.forest,
                collapsed,
                max_depth=config.max_render_depth,
                max_indent=config.max_indent_level,
            )
        )
    return EXIT_OK


def _run_reset(args: argparse.Namespace, container: Container) -> int:
    reset_topic_collapse_state(
        container.provide_session_store(args.session_id),
        args.topic_id,
        container.config.session_key_prefix,
        metrics=container.metrics,
    )
    return EXIT_OK


def _warn_if_session_not_persisted(
    args: argparse.Namespace, config: ThreadsConfig, logger: logging.Logger
) -> None:
    # A memory store lives only as long as this process, so a later run never
    # sees state written by an earlier one
    if args.session_id and config.collapse_store != "redis":
        logger.warning(
            f"--session {args.session_id} has no effect with "
            f"COLLAPSE_STORE={config.collapse_store}; collapse state is not "
            "kept between runs (set COLLAPSE_STORE=redis)",
            extra={
                "topic_id": args.topic_id,
                "session_id": args.session_id,
                "collapse_store": config.collapse_store,
            },
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, run the chosen subcommand and return an exit code."""
    args = _build_parser().parse_args(argv)

    config = _load_config(args)
    if config is None:
        return EXIT_CONFIG

    setup_logging(
        level=config.log_level,
        log_format=config.log_format,
        service_name=config.service_name,
        loki_url=config.loki_url,
    )
    logger = get_logger(__name__)
    _warn_if_session_not_persisted(args, config, logger)

    container = Container(config=config)
    container.initialize_runtime()
    try:
        if args.command == "show":
            return _run_show(args, container)
        return _run_reset(args, container)
    except ClubThreadsError as e:
        logger.error(
            f"{args.command} failed: {e}",
            extra={"topic_id": args.topic_id, "error_type": type(e).__name__},
        )
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        container.close()


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())
