import argparse
import logging
import sys
from uuid import UUID

from humsafar.adapters.sqlite.migrator import SQLiteMigrator
from humsafar.api.deps import Settings
from humsafar.app_shell.context import ServiceContext
from humsafar.components.moderation import SetStatusInput, run_set_status
from humsafar.domain.errors import HumsafarError
from humsafar.rules.loader import load_rules

logger = logging.getLogger("cli")

PROFILE_STATUSES = ("pending", "approved", "rejected", "terminated", "flagged")


def get_context(settings: Settings) -> ServiceContext:
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)

    rules = load_rules(settings.rules_path)
    return ServiceContext.create(settings.db_path, rules)


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path).run_migrations()
    print(f"Applied {len(applied)} migrations.")


def handle_sync(ctx: ServiceContext, args: argparse.Namespace) -> None:
    user_id = UUID(args.user_id) if args.user_id else None
    result = ctx.entitlement_service.sync_from_payments(ctx.payment_repo, user_id=user_id)
    for item in result.updated:
        print(f"{item.user_id}: views_limit={item.views_limit} status={item.subscription_status}")
    print(f"Synced {len(result.updated)} members, skipped {len(result.skipped)}.")


def handle_set_status(ctx: ServiceContext, args: argparse.Namespace) -> None:
    change = run_set_status(
        SetStatusInput(user_id=UUID(args.user_id), new_status=args.status),
        ctx.moderation_service,
    )
    if change.changed:
        print(f"{args.user_id}: {change.previous_status} -> {change.record.profile_status}")
    else:
        print(f"{args.user_id}: already {change.record.profile_status}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Humsafar admin CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")

    sync_parser = subparsers.add_parser(
        "sync-subscriptions", help="Recompute quota from accepted payments"
    )
    sync_parser.add_argument("--user-id", help="Only sync this member")

    status_parser = subparsers.add_parser("set-status", help="Move a profile to a moderation state")
    status_parser.add_argument("user_id")
    status_parser.add_argument("status", choices=PROFILE_STATUSES)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    settings = Settings()

    try:
        if args.command == "migrate":
            handle_migrate(settings, args)
            return 0

        ctx = get_context(settings)
        if args.command == "sync-subscriptions":
            handle_sync(ctx, args)
        elif args.command == "set-status":
            handle_set_status(ctx, args)
    except HumsafarError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
