"""Tests for CLI argument parsing and command handlers."""

import pytest
from flask import Flask
from sqlalchemy import select

from app.cli import create_parser, handle_load_demo_data, handle_upgrade_db
from app.models.part import Part


class TestCLIParser:
    """Test cases for the CLI parser."""

    def test_upgrade_db_flags(self):
        args = create_parser().parse_args(["upgrade-db", "--recreate", "--yes-i-am-sure"])

        assert args.command == "upgrade-db"
        assert args.recreate is True
        assert args.yes_i_am_sure is True

    def test_load_demo_data_defaults_unconfirmed(self):
        args = create_parser().parse_args(["load-demo-data"])

        assert args.command == "load-demo-data"
        assert args.yes_i_am_sure is False


class TestCLIHandlers:
    """Test cases for the CLI command handlers."""

    def test_recreate_requires_confirmation(self, app: Flask):
        with pytest.raises(SystemExit) as exc_info:
            handle_upgrade_db(app, recreate=True, confirmed=False)

        assert exc_info.value.code == 1

    def test_upgrade_db_up_to_date(self, app: Flask, capsys):
        handle_upgrade_db(app)

        assert "up to date" in capsys.readouterr().out

    def test_load_demo_data_requires_confirmation(self, app: Flask):
        with pytest.raises(SystemExit) as exc_info:
            handle_load_demo_data(app, confirmed=False)

        assert exc_info.value.code == 1

    def test_load_demo_data(self, app: Flask, capsys):
        handle_load_demo_data(app, confirmed=True)

        output = capsys.readouterr().out
        assert "Demo data loaded: Updated quantity for Widget" in output

        with app.app_context():
            session = app.container.db_session()
            stock = {
                part.name: part.quantity_in_stock
                for part in session.execute(select(Part)).scalars()
            }
            app.container.db_session.reset()

        assert stock == {"Bolt": 80, "Nut": 90, "Widget": 10}
