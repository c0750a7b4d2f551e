# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""CLI maintenance commands."""
from unittest.mock import MagicMock, patch

from click.testing import CliRunner
from sqlalchemy import create_engine, inspect

from checkin.cli import cli


class TestCli:
    def test_init_db_creates_tables(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'checkin.db'}"
        result = CliRunner().invoke(cli, ["init-db", "--database-url", url])
        assert result.exit_code == 0, result.output
        tables = inspect(create_engine(url)).get_table_names()
        assert {"users", "visits"} <= set(tables)

    def test_init_sheets_writes_headers(self):
        repo = MagicMock()
        with patch("checkin.cli.SheetVisitorRepository.from_service_account", return_value=repo):
            result = CliRunner().invoke(cli, ["init-sheets"])
        assert result.exit_code == 0, result.output
        repo.ensure_headers.assert_called_once()

    def test_clear_sheets_requires_confirmation(self):
        repo = MagicMock()
        with patch("checkin.cli.SheetVisitorRepository.from_service_account", return_value=repo):
            aborted = CliRunner().invoke(cli, ["clear-sheets"], input="n\n")
            confirmed = CliRunner().invoke(cli, ["clear-sheets", "--yes"])
        assert aborted.exit_code != 0
        assert confirmed.exit_code == 0
        repo.clear.assert_called_once()
