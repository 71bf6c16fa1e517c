"""CLI entry point for the hh vacancy poller."""

import argparse
import asyncio
import logging
import signal
import sys
import time

from src.core.config import OAuthClientConfig, Settings
from src.core.db import init_db
from src.core.errors import AuthError, PersistenceError
from src.core.schemas import RunSummary
from src.pipeline.fetcher import VacancyFetcher
from src.pipeline.ingest import IngestionPipeline
from src.pipeline.orchestrator import FetchResult, export_vacancies_json, run_fetch_cycle
from src.pipeline.scheduler import Scheduler
from src.pipeline.token_refresher import TokenRefresher
from src.platforms.hh.client import HHClient
from src.platforms.hh.oauth import AccountLinker
from src.storage.sqlite import SQLiteCredentialStore, SQLiteVacancyStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    parser = argparse.ArgumentParser(
        description="hh.ru vacancy poller - refresh tokens and collect similar vacancies",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- run subcommand (default) ---
    run_parser = subparsers.add_parser(
        "run", parents=[common], help="Run the refresh and fetch schedulers",
    )
    run_parser.add_argument(
        "--once",
        action="store_true",
        help="Run one token refresh and one fetch cycle, then exit",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show linked accounts and searches without calling the provider",
    )

    # --- account linking ---
    subparsers.add_parser(
        "authorize-url", parents=[common], help="Print the OAuth authorization URL",
    )
    link_parser = subparsers.add_parser(
        "link", parents=[common], help="Link an account from an OAuth authorization code",
    )
    link_parser.add_argument("--code", required=True, help="Authorization code from the callback")

    # --- vacancies subcommand ---
    vacancies_parser = subparsers.add_parser(
        "vacancies", parents=[common], help="List stored vacancies",
    )
    vacancies_parser.add_argument(
        "--unnotified",
        action="store_true",
        help="Only vacancies not yet notified",
    )
    vacancies_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export vacancies to format (json)",
    )

    # Default to run when no subcommand given
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or (argv[0] not in subparsers.choices and argv[0] not in ("-h", "--help")):
        argv = ["run", *argv]

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def dry_run(settings: Settings) -> None:
    """Print what would happen without contacting the provider."""
    conn = init_db(settings.database.path)
    credentials = SQLiteCredentialStore(conn).find_all()
    now = time.time()

    print(f"[DRY RUN] {len(settings.searches)} searches configured")
    for search in settings.searches:
        print(f"  '{search.keyword}'")

    print(f"[DRY RUN] {len(credentials)} linked accounts")
    for cred in credentials:
        status = "VALID" if cred.is_valid(now) else "EXPIRED"
        print(f"  resume {cred.subject_id}: token {status} (expires at {cred.expires_at})")

    print(
        f"[DRY RUN] Would refresh every {settings.scheduler.refresh_interval_seconds:g}s "
        f"and fetch every {settings.scheduler.fetch_interval_seconds:g}s",
    )
    conn.close()


def print_once_summary(summary: RunSummary, results: list[FetchResult]) -> None:
    """Print the outcome of a single ``run --once`` pass."""
    total_new = sum(r.ingest.new for r in results if r.ingest is not None)
    print(f"\nTokens: {summary.refreshed} refreshed, {summary.skipped} valid, "
          f"{summary.failed} failed.")
    print(f"Vacancies: {len(results)} queries, {total_new} new written to DB.")
    for r in results:
        if r.ingest is None:
            print(f"  '{r.keyword}' / {r.subject_id}: fetch failed")
        elif not r.ingest.decoded:
            print(f"  '{r.keyword}' / {r.subject_id}: unreadable response")
        else:
            line = f"  '{r.keyword}' / {r.subject_id}: {r.ingest.found} found, {r.ingest.new} new"
            if r.ingest.failed:
                line += f", {r.ingest.failed} failed"
            print(line)


async def run(settings: Settings, once: bool) -> None:
    """Run the schedulers (or a single pass) against the real provider."""
    conn = init_db(settings.database.path)
    credential_store = SQLiteCredentialStore(conn)
    vacancy_store = SQLiteVacancyStore(conn)

    try:
        async with HHClient(settings.provider) as client:
            refresher = TokenRefresher(credential_store, client)
            fetcher = VacancyFetcher(client)
            pipeline = IngestionPipeline(vacancy_store)

            async def fetch_cycle() -> None:
                await run_fetch_cycle(credential_store, fetcher, pipeline, settings.searches)

            if once:
                summary = await refresher.refresh_all()
                results = await run_fetch_cycle(
                    credential_store, fetcher, pipeline, settings.searches,
                )
                print_once_summary(summary, results)
            else:
                scheduler = Scheduler(
                    refresher.refresh_all,
                    fetch_cycle,
                    settings.scheduler.refresh_interval_seconds,
                    settings.scheduler.fetch_interval_seconds,
                )
                loop = asyncio.get_running_loop()
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, scheduler.stop)
                await scheduler.start()
    finally:
        conn.close()


def cmd_authorize_url(settings: Settings) -> None:
    """Handle authorize-url subcommand."""
    oauth = OAuthClientConfig.from_env()
    print(HHClient(settings.provider, oauth).authorize_url())
    print("Open the URL, approve access, then run: python main.py link --code <code>")


async def cmd_link(settings: Settings, code: str) -> None:
    """Handle link subcommand."""
    oauth = OAuthClientConfig.from_env()
    conn = init_db(settings.database.path)
    try:
        async with HHClient(settings.provider, oauth) as client:
            credential = await AccountLinker(client, SQLiteCredentialStore(conn)).link(code)
    finally:
        conn.close()
    print(f"Linked resume {credential.subject_id} "
          f"(token valid for {credential.expires_in}s)")


def cmd_vacancies(settings: Settings, unnotified: bool, export_format: str | None) -> None:
    """Handle vacancies subcommand."""
    conn = init_db(settings.database.path)
    vacancies = SQLiteVacancyStore(conn).find_all(unnotified_only=unnotified)
    conn.close()

    if export_format == "json":
        print(export_vacancies_json(vacancies))
        return

    print(f"{len(vacancies)} vacancies")
    for v in vacancies:
        salary = ""
        if v.salary_from is not None or v.salary_to is not None:
            salary = f" [{v.salary_from or '?'}-{v.salary_to or '?'} {v.salary_currency or ''}]"
        flag = " (notified)" if v.notified else ""
        print(f"  {v.vacancy_id}: {v.name}{salary}{flag}")
        print(f"    {v.alternate_url or v.url}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "authorize-url":
            cmd_authorize_url(settings)
        elif args.command == "link":
            asyncio.run(cmd_link(settings, args.code))
        elif args.command == "vacancies":
            cmd_vacancies(settings, args.unnotified, args.export)
        elif args.dry_run:
            dry_run(settings)
        else:
            asyncio.run(run(settings, args.once))
    except (ValueError, AuthError, PersistenceError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
