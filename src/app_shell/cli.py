import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from src.adapters.auth.identity import StaticIdentityProvider
from src.adapters.clock import SystemClock
from src.adapters.dev_seed import DevSeedContent
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteProfileStore
from src.components.bootstrap import BootstrapInput, run_bootstrap, run_reset_and_reseed
from src.components.profile_admin import run_backfill_missing_emails, run_probe_missing_emails
from src.components.profile_reader import EmailFallbackReader
from src.components.seed import run_release_stale_claim
from src.core.errors import MissingRequiredAttributeError, error_to_message
from src.core.ports.identity import NotAuthenticatedError
from src.core.ports.store import StoreError
from src.domain.entities import Identity, IdentityAttributes, SessionClaims
from src.rules.loader import bootstrap_config, load_rules
from src.rules.models import Rules

logger = logging.getLogger("cli")

DATA_DIR = os.environ.get("PB_DATA_DIR", "./data")
DB_PATH = str(Path(DATA_DIR) / "profiles.db")
RULES_PATH = os.environ.get("PB_RULES_PATH", "rules.yaml")


@dataclass
class CliContext:
    store: SQLiteProfileStore
    rules: Rules


def get_context(args: argparse.Namespace) -> CliContext:
    rules_path = Path(args.rules)
    if not rules_path.exists():
        logger.error("Rules file %s not found.", rules_path)
        sys.exit(1)

    rules = load_rules(rules_path)
    Path(args.db).parent.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(args.db).run_migrations()
    return CliContext(store=SQLiteProfileStore(args.db), rules=rules)


def handle_migrate(args: argparse.Namespace) -> None:
    Path(args.db).parent.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(args.db).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def _provider(args: argparse.Namespace) -> StaticIdentityProvider:
    return StaticIdentityProvider(
        Identity(id=args.sub, username=args.username),
        IdentityAttributes(email=args.email, name=args.name),
        SessionClaims(groups=set(args.group or [])),
    )


def handle_bootstrap(ctx: CliContext, args: argparse.Namespace) -> None:
    result = run_bootstrap(
        BootstrapInput(want_seed=args.seed),
        _provider(args),
        ctx.store,
        DevSeedContent(),
        SystemClock(),
        bootstrap_config(ctx.rules),
    )
    print(f"Profile: {result.profile_id} (created={result.created})")
    print(f"Seeded demo: {result.did_seed_demo}")


def handle_reset_seed(ctx: CliContext, args: argparse.Namespace) -> None:
    result = run_reset_and_reseed(
        _provider(args),
        ctx.store,
        DevSeedContent(),
        SystemClock(),
        bootstrap_config(ctx.rules),
    )
    if not result.reset:
        print(f"{args.sub}: seed gate not reset (claim in progress or no profile).")
    print(f"Seeded demo: {result.did_seed_demo}")


def handle_list(ctx: CliContext, args: argparse.Namespace) -> None:
    reader = EmailFallbackReader(ctx.store, page_size=ctx.rules.reader.page_size)
    result = reader.find_by_email(args.email) if args.email else reader.list_all()
    print(f"Profiles ({len(result.items)}, provenance={result.provenance}):")
    for p in result.items:
        print(f" - {p.id}  {p.email or '<no email>'}  tier={p.tier.value}  seed={p.seed_version}")


def handle_backfill(ctx: CliContext, args: argparse.Namespace) -> None:
    result = run_backfill_missing_emails(
        ctx.store,
        domain=ctx.rules.reader.placeholder_email_domain,
        page_size=ctx.rules.reader.page_size,
    )
    print(f"Updated: {result.updated}  Skipped: {result.skipped}  Failed: {result.failed}")


def handle_probe(ctx: CliContext, args: argparse.Namespace) -> None:
    result = run_probe_missing_emails(
        ctx.store,
        page_size=ctx.rules.reader.page_size,
        domain=ctx.rules.reader.placeholder_email_domain,
    )
    print(f"OK: {result.ok}  Missing: {len(result.missing)}  Failed: {len(result.failed)}")
    for profile_id in result.missing:
        print(f" missing: {profile_id}")
    for failure in result.failed:
        print(f" failed: {failure.profile_id}: {failure.message}")


def handle_release(ctx: CliContext, args: argparse.Namespace) -> None:
    if run_release_stale_claim(ctx.store, args.profile_id):
        print(f"Released seed claim for {args.profile_id}.")
    else:
        print(f"{args.profile_id} holds no seed claim.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Profile Bootstrap CLI")
    parser.add_argument("--db", default=DB_PATH, help="SQLite database path")
    parser.add_argument("--rules", default=RULES_PATH, help="Rules file path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply database migrations")

    # bootstrap
    bootstrap_parser = subparsers.add_parser("bootstrap", help="Bootstrap a profile for an identity")
    bootstrap_parser.add_argument("sub", help="Identity subject id")
    bootstrap_parser.add_argument("--username")
    bootstrap_parser.add_argument("--email")
    bootstrap_parser.add_argument("--name")
    bootstrap_parser.add_argument("--group", action="append", help="Session group (repeatable)")
    bootstrap_parser.add_argument("--seed", action="store_true", help="Seed demo content")

    # reset-seed
    reset_parser = subparsers.add_parser("reset-seed", help="Reset the seed gate and seed again")
    reset_parser.add_argument("sub", help="Identity subject id")
    reset_parser.add_argument("--username")
    reset_parser.add_argument("--email")
    reset_parser.add_argument("--name")
    reset_parser.add_argument("--group", action="append", help="Session group (repeatable)")

    # list-profiles
    list_parser = subparsers.add_parser("list-profiles", help="List all profiles")
    list_parser.add_argument("--email", help="Only profiles with this email")

    # backfill-emails
    subparsers.add_parser("backfill-emails", help="Give email-less profiles a placeholder email")

    # probe-emails
    subparsers.add_parser("probe-emails", help="Report profiles without an email")

    # release-claim
    release_parser = subparsers.add_parser("release-claim", help="Release a stuck seed claim")
    release_parser.add_argument("profile_id")

    return parser


HANDLERS = {
    "bootstrap": handle_bootstrap,
    "reset-seed": handle_reset_seed,
    "list-profiles": handle_list,
    "backfill-emails": handle_backfill,
    "probe-emails": handle_probe,
    "release-claim": handle_release,
}


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    if args.command == "migrate":
        handle_migrate(args)
        return

    ctx = get_context(args)
    try:
        HANDLERS[args.command](ctx, args)
    except (NotAuthenticatedError, MissingRequiredAttributeError, StoreError) as e:
        logger.error("%s failed: %s", args.command, error_to_message(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
