"""
Command-line entry point for mpvault.
"""

import argparse
import logging
import sys
from typing import List, Optional

import requests

from mpvault.core.config import DEFAULT_BASE_URL, ClientConfig, RunConfig
from mpvault.core.controller import ArchiveController
from mpvault.core.article_list import ArticleListClient
from mpvault.core.exceptions import SessionExpiredError, VaultError
from mpvault.core.formatters import format_timestamp
from mpvault.core.logger import get_logger, initialize_logging


EXIT_ERROR = 1
EXIT_SESSION_EXPIRED = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    common.add_argument("--base-url", default=DEFAULT_BASE_URL, help="Backend service URL")
    common.add_argument("--timeout", type=float, default=30, help="Request timeout in seconds")
    common.add_argument("-w", "--workers", type=int, default=1, help="Parallel asset downloads per article")
    common.add_argument("--log-dir", default="logs", help="Directory for log files")

    parser = argparse.ArgumentParser(prog="mpvault", description="Archive public-account articles")
    sub = parser.add_subparsers(dest="command", required=True)

    pack = sub.add_parser("pack", parents=[common], help="Download and pack article URLs")
    pack.add_argument("urls", nargs="+", help="Article URLs")
    pack.add_argument("-o", "--output", default="articles.zip", help="Zip file to write")

    lst = sub.add_parser("list", parents=[common], help="Print one page of an account's articles")
    lst.add_argument("fakeid")
    lst.add_argument("token")
    lst.add_argument("--page", type=int, default=1)
    lst.add_argument("--keyword", default="")

    account = sub.add_parser("account", parents=[common], help="Archive every article of an account")
    account.add_argument("fakeid")
    account.add_argument("token")
    account.add_argument("-o", "--output", default="articles.zip", help="Zip file to write")
    account.add_argument("--keyword", default="")
    account.add_argument("--max-pages", type=int, default=0, help="0 = no cap")
    account.add_argument("--max-articles", type=int, default=0, help="0 = no cap")

    return parser.parse_args(argv)


def _client_config(args: argparse.Namespace) -> ClientConfig:
    return ClientConfig(base_url=args.base_url, request_timeout=args.timeout, asset_workers=args.workers)


def _print_progress(event) -> None:
    if isinstance(event, dict) and event.get("type") == "article":
        print(f"[{event['index']}] {event['stage']}: {event['url']}")


def run_list(args: argparse.Namespace) -> int:
    client = ArticleListClient(_client_config(args))
    try:
        articles = client.get_article_list(args.fakeid, args.token, args.page, args.keyword)
    finally:
        client.close()

    if not articles:
        print("No more articles.")
    for article in articles:
        ts = article.get("create_time") or article.get("update_time")
        when = "----------------"
        if ts:
            try:
                when = format_timestamp(ts)
            except (TypeError, ValueError, OverflowError, OSError):
                pass
        print(f"{when}  {article.get('title', '')}  {article.get('link', '')}")
    return 0


def run_archive(args: argparse.Namespace) -> int:
    config = RunConfig(
        output_path=args.output,
        fakeid=getattr(args, "fakeid", None),
        token=getattr(args, "token", None),
        keyword=getattr(args, "keyword", ""),
        max_pages=getattr(args, "max_pages", 0),
        max_articles=getattr(args, "max_articles", 0),
        client=_client_config(args),
    )
    controller = ArchiveController(config)
    try:
        if args.command == "pack":
            stats = controller.archive_articles([{"link": url} for url in args.urls], _print_progress)
        else:
            stats = controller.archive_account(_print_progress)
        if stats["packed"]:
            path = controller.save()
            print(f"Saved {stats['packed']} article(s) to {path}")
        summary = controller.error_tracker.get_error_summary()
        print(f"{summary['total_errors']} error(s), {summary['total_warnings']} warning(s)")
        for error_type, count in summary["error_types"].items():
            print(f"  {error_type}: {count}")
    finally:
        controller.close()
    return 0 if stats["failed"] == 0 else EXIT_ERROR


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    initialize_logging(args.log_dir, logging.DEBUG if args.verbose else logging.INFO)
    logger = get_logger("cli")

    try:
        if args.command == "list":
            return run_list(args)
        return run_archive(args)
    except SessionExpiredError:
        logger.error("Session expired, log in again and pass the new token")
        return EXIT_SESSION_EXPIRED
    except (VaultError, ValueError, requests.RequestException) as e:
        logger.error(f"{args.command} failed: {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
