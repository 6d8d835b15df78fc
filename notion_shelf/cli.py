# notion_shelf/cli.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import AppConfig, load_dotenv, load_settings
from .errors import NotionShelfError
from .importer import ImportResult, Importer
from .integrations.http_client import DEFAULT_TIMEOUT_S, FixedIntervalThrottle, TokenBucket, make_session
from .integrations.notion import NotionClient, make_notion_session
from .integrations.openlibrary import OpenLibraryLookup
from .io.failure_log import flush_failures
from .io.report import log_summary
from .maintenance import MaintenanceResult, backfill_total_pages, update_icons

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

logger = logging.getLogger(__name__)


def _add_common_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--config", default=None, help="YAML settings file (default: ./notion_shelf.yaml if present)")
    ap.add_argument("--env", default=".env", help="Path to .env with NOTION_API_KEY / NOTION_DATABASE_ID")
    ap.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_S, help="HTTP timeout seconds")
    ap.add_argument("--failed-dir", default=".", help="Directory for failed-isbns-*.txt logs")
    ap.add_argument("--log-level", default="info", help="Log level: debug, info, warning, error")


def _setup_logging(level_name: str) -> None:
    level = LOG_LEVELS.get(level_name.lower(), logging.INFO)
    # progress on stdout, warnings and errors on stderr
    out = RichHandler(rich_tracebacks=True, show_path=False)
    out.addFilter(lambda record: record.levelno < logging.WARNING)
    err = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
    err.setLevel(logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[out, err],
        force=True,
    )
    # request lines from urllib3 only at debug
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))


def _load_config(args: argparse.Namespace) -> AppConfig:
    used = load_dotenv(args.env)
    if used:
        logger.debug("loaded .env: %s", used)
    else:
        logger.warning(".env not found via search paths; relying on existing environment variables")
    cfg = AppConfig.from_env(
        timeout_s=args.timeout,
        failed_dir=args.failed_dir,
        settings=load_settings(args.config),
    )
    cfg.validate()
    return cfg


def _make_notion(cfg: AppConfig) -> NotionClient:
    s = cfg.settings
    return NotionClient(
        make_notion_session(cfg.notion_api_key),
        cfg.notion_database_id,
        names=s.properties,
        timeout_s=cfg.timeout_s,
        rate_limiter=TokenBucket(s.notion_rate_per_sec, s.notion_burst),
    )


def import_main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="notion-import", description="Add books to Notion database by ISBN")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--isbn", default=None, help="Process a single ISBN")
    src.add_argument("--file", default=None, help="Process multiple ISBNs from a file (one per line)")
    src.add_argument("--goodreads", default=None, help="Process ISBNs from a Goodreads CSV export file")
    _add_common_args(ap)
    args = ap.parse_args(argv)

    if not (args.isbn or args.file or args.goodreads):
        ap.print_usage(sys.stderr)
        ap.exit(
            2,
            "Please provide either an ISBN, a path to an ISBN file, or a path to a Goodreads export CSV file\n",
        )

    _setup_logging(args.log_level)
    cfg = _load_config(args)

    importer = Importer(
        _make_notion(cfg),
        OpenLibraryLookup(make_session(), timeout_s=cfg.timeout_s),
        throttle=FixedIntervalThrottle(cfg.settings.import_interval_s),
        names=cfg.settings.properties,
    )

    result = ImportResult()
    failed_file = None
    exit_code = 0
    try:
        if args.isbn:
            importer.import_isbn(args.isbn, result)
        elif args.file:
            importer.import_file(args.file, result)
        else:
            importer.import_goodreads(args.goodreads, result)
    except (NotionShelfError, OSError) as e:
        logger.error("Import aborted: %s", e)
        exit_code = 1
    finally:
        failed_file = flush_failures(result.failures, cfg.failed_dir)

    log_summary(result.stats, "Import summary", str(failed_file) if failed_file else None)
    if exit_code:
        raise SystemExit(exit_code)


def update_icons_main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(
        prog="notion-update-icons",
        description="Set each book's page icon from its reading status",
    )
    ap.add_argument("--dry-run", action="store_true", help="Decide and count, but do not update pages")
    _add_common_args(ap)
    args = ap.parse_args(argv)

    _setup_logging(args.log_level)
    cfg = _load_config(args)

    result = MaintenanceResult.for_icons()
    try:
        update_icons(
            _make_notion(cfg),
            throttle=FixedIntervalThrottle(cfg.settings.icon_interval_s),
            table=cfg.settings.status_icons,
            dry_run=args.dry_run,
            result=result,
        )
    except NotionShelfError as e:
        logger.error("Error updating book icons: %s", e)
        log_summary(result.stats, "Icon summary")
        raise SystemExit(1)
    log_summary(result.stats, "Icon summary")


def update_pages_main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(
        prog="notion-update-pages",
        description="Backfill Total Pages from Open Library by ISBN",
    )
    ap.add_argument("-f", "--force", action="store_true", help="Force update of Total Pages even if already populated")
    ap.add_argument("--dry-run", action="store_true", help="Decide and count, but do not update pages")
    _add_common_args(ap)
    args = ap.parse_args(argv)

    _setup_logging(args.log_level)
    cfg = _load_config(args)

    result = MaintenanceResult.for_page_counts()
    exit_code = 0
    try:
        backfill_total_pages(
            _make_notion(cfg),
            OpenLibraryLookup(make_session(), timeout_s=cfg.timeout_s),
            throttle=FixedIntervalThrottle(cfg.settings.pages_interval_s),
            force=args.force,
            dry_run=args.dry_run,
            failed_dir=cfg.failed_dir,
            result=result,
        )
    except NotionShelfError as e:
        logger.error("Error updating book total pages: %s", e)
        exit_code = 1
    log_summary(result.stats, "Summary", str(result.failed_file) if result.failed_file else None)
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    import_main()
