"""Command line entry point for the workflow archiver."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .config import ArchiverConfig, load_config
from .pipeline import WorkflowArchiver

LOGGER = logging.getLogger(__name__)

NULL_REPOSITORY_TOKENS = {"", "-", "null", "none"}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="workflow-archiver",
        description="Move completed workflow rows into the workflow archive table.",
    )
    parser.add_argument("--config", type=Path, help="YAML file with archiver settings.")
    parser.add_argument("--db-uri", help="Workflow database URL (defaults to $WORKFLOW_DB_URI).")
    parser.add_argument("--dor-service-uri", help="DOR service base URL (defaults to $DOR_SERVICE_URI).")
    parser.add_argument("--wf-table", help="Active workflow table name.")
    parser.add_argument("--wfa-table", help="Workflow archive table name.")
    parser.add_argument("--retry-delay", type=float, help="Seconds to wait between retries.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set log verbosity.",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("run", help="Archive every workflow group whose steps are all complete.")
    one = commands.add_parser("one", help="Archive a single object's datastream at a known version.")
    one.add_argument("repository", help="Repository name, or '-' for rows without one.")
    one.add_argument("druid")
    one.add_argument("datastream")
    one.add_argument("version")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ArchiverConfig:
    overrides = {
        "db_uri": args.db_uri,
        "dor_service_uri": args.dor_service_uri,
        "wf_table": args.wf_table,
        "wfa_table": args.wfa_table,
        "retry_delay": args.retry_delay,
    }
    if args.config:
        return load_config(args.config, **overrides)
    return ArchiverConfig.from_env(**overrides)


def _repository_arg(value: str) -> Optional[str]:
    return None if value.strip().lower() in NULL_REPOSITORY_TOKENS else value


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        force=True,
    )

    config = build_config(args)
    with WorkflowArchiver(config) as archiver:
        if args.command == "one":
            summary = archiver.archive_one_datastream(
                _repository_arg(args.repository),
                args.druid,
                args.datastream,
                args.version,
            )
        else:
            summary = archiver.run()
    LOGGER.info("Summary: %s", summary.as_dict())
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
