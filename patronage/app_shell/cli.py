import argparse
import logging
import sys
from pathlib import Path

from patronage.adapters.clock import SystemClock
from patronage.adapters.sqlite.migrator import MigrationError, SQLiteMigrator
from patronage.adapters.sqlite.repos import SQLiteCommerceRepo, SQLiteCounterRepo
from patronage.api.deps import Settings
from patronage.app_shell.config import ConfigurationError, validate_ops_rules
from patronage.components.commerce import expire_lapsed_subscriptions
from patronage.components.counters import reconcile_counters
from patronage.rules.loader import load_rules
from patronage.rules.models import Rules

logger = logging.getLogger("cli")


def get_rules(settings: Settings) -> Rules:
    if not Path(settings.rules_path).exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)

    rules = load_rules(Path(settings.rules_path))
    try:
        validate_ops_rules(rules)
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(1)
    return rules


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    migrator = SQLiteMigrator(settings.db_path, str(args.migrations_dir))
    try:
        if args.dry_run:
            names = migrator.pending_migrations()
            print(f"{len(names)} pending migrations.")
        else:
            names = migrator.run_migrations()
            print(f"Applied {len(names)} migrations.")
    except MigrationError as e:
        logger.error("%s", e)
        sys.exit(1)
    for filename in names:
        print(f" - {filename}")


def handle_reconcile(settings: Settings, args: argparse.Namespace) -> None:
    report = reconcile_counters(repo=SQLiteCounterRepo(settings.db_path), dry_run=args.dry_run)
    verb = "Would repair" if args.dry_run else "Repaired"
    print(
        f"Checked {report.posts_checked} posts and {report.comments_checked} comments. "
        f"{verb} {report.repaired_rows} rows."
    )
    for repair in report.repairs:
        print(
            f" - {repair.target_type.value} {repair.target_id} {repair.field}: "
            f"{repair.stored} -> {repair.actual}"
        )


def handle_expire(settings: Settings, args: argparse.Namespace) -> None:
    count = expire_lapsed_subscriptions(
        repo=SQLiteCommerceRepo(settings.db_path), time=SystemClock()
    )
    print(f"Expired {count} subscriptions.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Patronage operator CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending SQL migrations")
    migrate_parser.add_argument(
        "--migrations-dir", default="migrations", help="Directory holding *.sql migrations"
    )
    migrate_parser.add_argument(
        "--dry-run", action="store_true", help="List pending migrations without applying them"
    )

    # reconcile-counters
    reconcile_parser = subparsers.add_parser(
        "reconcile-counters", help="Recompute like and comment counters from fact tables"
    )
    reconcile_parser.add_argument(
        "--dry-run", action="store_true", help="Report drift without rewriting counters"
    )

    # expire-subscriptions
    subparsers.add_parser(
        "expire-subscriptions", help="Mark active subscriptions past their period as expired"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    settings = Settings()
    get_rules(settings)

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "reconcile-counters":
        handle_reconcile(settings, args)
    elif args.command == "expire-subscriptions":
        handle_expire(settings, args)


if __name__ == "__main__":
    main()
