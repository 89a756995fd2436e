"""CLI commands for database operations."""

import argparse
import sys
from typing import NoReturn

from flask import Flask

from app import create_app
from app.app import App
from app.database import (
    check_db_connection,
    get_current_revision,
    get_pending_migrations,
    upgrade_database,
)
from app.models.part import PartType


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Assembly Inventory CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    upgrade_parser = subparsers.add_parser(
        "upgrade-db",
        help="Apply database migrations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Apply pending database migrations using Alembic.

Examples:
  assembly-inventory-cli upgrade-db                    Apply pending migrations
  assembly-inventory-cli upgrade-db --recreate --yes-i-am-sure  Drop all tables and recreate
        """,
    )
    upgrade_parser.add_argument(
        "--recreate",
        action="store_true",
        help="Drop all tables first, then run all migrations from scratch",
    )
    upgrade_parser.add_argument(
        "--yes-i-am-sure",
        action="store_true",
        help="Required safety flag when using --recreate",
    )

    demo_parser = subparsers.add_parser(
        "load-demo-data",
        help="Recreate database and load a small demo bill of materials",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Recreate the database and load the Bolt/Nut/Widget demo:
raw parts Bolt and Nut, and an assembled Widget made of 2 Bolts and 1 Nut.

Examples:
  assembly-inventory-cli load-demo-data --yes-i-am-sure
        """,
    )
    demo_parser.add_argument(
        "--yes-i-am-sure",
        action="store_true",
        help="Required safety flag to confirm database recreation",
    )

    return parser


def _require_connection(app: Flask) -> None:
    if not check_db_connection():
        print(
            "❌ Cannot connect to database. Check your DATABASE_URL configuration.",
            file=sys.stderr,
        )
        sys.exit(1)

    # Let operator know which database is targeted
    print(f"🗄  Using database: {app.config['SQLALCHEMY_DATABASE_URI']}")


def handle_upgrade_db(
    app: Flask, recreate: bool = False, confirmed: bool = False
) -> None:
    """Handle upgrade-db command."""
    with app.app_context():
        _require_connection(app)

        if recreate and not confirmed:
            print(
                "❌ --recreate requires --yes-i-am-sure flag for safety",
                file=sys.stderr,
            )
            print(
                "   This will DROP ALL TABLES and recreate from migrations!",
                file=sys.stderr,
            )
            sys.exit(1)

        current_rev = get_current_revision()
        if current_rev:
            print(f"📍 Current database revision: {current_rev}")
        else:
            print("📍 Database has no migration version (empty or new database)")

        if not recreate and not get_pending_migrations():
            print("✅ Database is up to date. No migrations to apply.")
            return

        try:
            applied = upgrade_database(recreate=recreate)
        except Exception as e:
            print(f"❌ Migration failed: {e}", file=sys.stderr)
            sys.exit(1)

        print(f"✅ Successfully applied {len(applied)} migration(s)")
        for revision, description in applied:
            print(f"   • {revision}: {description}")


def handle_load_demo_data(app: App, confirmed: bool = False) -> None:
    """Handle load-demo-data command."""
    with app.app_context():
        _require_connection(app)

        if not confirmed:
            print(
                "❌ --yes-i-am-sure flag is required for safety",
                file=sys.stderr,
            )
            print(
                "   This will DROP ALL TABLES and recreate with demo data!",
                file=sys.stderr,
            )
            sys.exit(1)

        try:
            print("🔄 Recreating database from scratch...")
            upgrade_database(recreate=True)

            session = app.container.db_session()
            part_service = app.container.part_service()
            inventory_service = app.container.inventory_service()

            bolt = part_service.create_part("Bolt", PartType.RAW, "M4 x 20mm bolt")
            nut = part_service.create_part("Nut", PartType.RAW, "M4 hex nut")
            widget = part_service.create_part(
                "Widget",
                PartType.ASSEMBLED,
                "Two bolts and a nut",
                components=[(bolt.id, 2), (nut.id, 1)],
            )

            inventory_service.adjust_quantity(bolt.id, 100)
            inventory_service.adjust_quantity(nut.id, 100)
            result = inventory_service.adjust_quantity(widget.id, 10)

            session.commit()
            print(f"✅ Demo data loaded: {result.message}")
            for part in part_service.list_parts():
                print(f"   • {part.part.name}: {part.part.quantity_in_stock} in stock")

        except Exception as e:
            print(f"❌ Failed to load demo data: {e}", file=sys.stderr)
            sys.exit(1)
        finally:
            app.container.db_session.reset()


def main() -> NoReturn:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Create Flask app for database operations
    app = create_app()

    if args.command == "upgrade-db":
        handle_upgrade_db(
            app=app,
            recreate=args.recreate,
            confirmed=args.yes_i_am_sure,
        )
    elif args.command == "load-demo-data":
        handle_load_demo_data(
            app=app,
            confirmed=args.yes_i_am_sure,
        )
    else:
        print(f"❌ Unknown command: {args.command}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
