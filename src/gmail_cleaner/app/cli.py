from __future__ import annotations

import argparse
import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Dict, List, Optional

from gmail_cleaner.app.run import DEFAULT_CAP, load_gmail_config, resolve_mode, run_cleanup, validate_cap
from gmail_cleaner.config.log import setup_logging
from gmail_cleaner.config.paths import (
    CONFIG_DIR_ENV,
    FULL_SCOPE_ENV,
    default_log_level,
    resolve_config_dir,
    wants_full_scope,
)
from gmail_cleaner.errors import CleanerError, ConfigError
from gmail_cleaner.gmail.client import GmailClient
from gmail_cleaner.models import CleanupMode, FilterSpec
from gmail_cleaner.pipeline.query import build_query

logger = logging.getLogger(__name__)


def package_version() -> str:
    try:
        return version("gmail-cleaner")
    except PackageNotFoundError:
        return "<dev>"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="gmail-cleaner",
        description="Find Gmail threads by label and age, then optionally trash or delete them.",
    )
    p.add_argument("--label", default="", help="Label to clean (required)")
    p.add_argument(
        "--older",
        default="",
        help="Gmail-style \"older than\" search string (eg. '1y' for 1 year, '3m' for 3 months) (required)",
    )
    p.add_argument("--exclude", default="", help="Additional Gmail-style search string specifying results to exclude.")
    p.add_argument(
        "--cap",
        type=int,
        default=DEFAULT_CAP,
        help="Cap on the number of threads to act on. If the (estimated) result count exceeds this, no data will be modified.",
    )
    p.add_argument("--trash", action="store_true", help="Move discovered threads to Trash. By default, no data will be modified.")
    p.add_argument(
        "--delete-permanently",
        action="store_true",
        help="Irreversibly delete discovered threads. You should probably use --trash instead.",
    )
    p.add_argument(
        "--include-spam-trash",
        action="store_true",
        help="Whether to include threads in Spam and Trash in the search.",
    )
    p.add_argument(
        "--include-starred",
        action="store_true",
        help="Do not exclude starred threads (by default the search adds -is:starred).",
    )
    p.add_argument(
        "--config-dir",
        default=None,
        help=f"Directory where credentials & user authorization tokens are stored. Overrides {CONFIG_DIR_ENV}.",
    )
    p.add_argument("--log-level", default=None, help="Logging level (default: INFO).")
    p.add_argument("--version", action="version", version=package_version())
    return p


def log_progress(step: str, payload: Dict[str, Any]) -> None:
    # Visible with --log-level DEBUG.
    logger.debug("[%s] %s", step, payload)


def run(args: argparse.Namespace, client: Optional[GmailClient] = None) -> int:
    # Flags are fully validated before credentials are touched.
    mode = resolve_mode(trash=args.trash, delete_permanently=args.delete_permanently)
    validate_cap(args.cap)
    spec = FilterSpec(
        label=args.label,
        older_than=args.older,
        exclude=args.exclude,
        skip_starred=not args.include_starred,
    )
    build_query(spec)

    if mode == CleanupMode.PERMANENT_DELETE and not wants_full_scope():
        logger.warning(
            "--delete-permanently needs the full mail.google.com scope; Gmail will reject "
            "the delete unless %s=true (and token.json was issued for that scope)",
            FULL_SCOPE_ENV,
        )

    if client is None:
        cfg = load_gmail_config(resolve_config_dir(args.config_dir))
        client = GmailClient(cfg)
        try:
            client.connect()
        except Exception as exc:
            raise ConfigError(f"unable to build Gmail client: {exc}") from exc

    run_cleanup(
        client,
        spec,
        mode=mode,
        cap=args.cap,
        include_spam_trash=args.include_spam_trash,
        progress_cb=log_progress,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level or default_log_level())

    try:
        return run(args)
    except CleanerError as exc:
        logger.error("error: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
