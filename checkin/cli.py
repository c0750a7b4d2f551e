# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""CLI tools for check-in service administration."""

import click

from checkin.core.config import settings
from checkin.core.database import create_sql_engine
from checkin.repositories.sheet_repository import SheetVisitorRepository
from checkin.repositories.sql_repository import SQLVisitorRepository


def _sheet_repo() -> SheetVisitorRepository:
    return SheetVisitorRepository.from_service_account(
        settings.GOOGLE_SERVICE_ACCOUNT_FILE, settings.GOOGLE_SPREADSHEET_ID,
    )


@click.group()
def cli():
    """Check-in service CLI tools."""
    pass


@cli.command("init-db")
@click.option("--database-url", default=None, help="Overrides DATABASE_URL")
def init_db(database_url):
    """Create the users and visits tables if they do not exist."""
    repo = SQLVisitorRepository(create_sql_engine(database_url))
    try:
        repo.create_schema()
    finally:
        repo.dispose()
    click.echo("✅ Database schema ready")


@cli.command("init-sheets")
def init_sheets():
    """Create the Users/Visits worksheets and their header rows."""
    _sheet_repo().ensure_headers()
    click.echo("✅ Worksheets ready")


@cli.command("clear-sheets")
@click.confirmation_option(prompt="Delete every user and visit row from the spreadsheet?")
def clear_sheets():
    """
    Remove all data rows from both worksheets, keeping the headers.

    Example:
        checkin clear-sheets --yes
    """
    _sheet_repo().clear()
    click.echo("✅ Users and Visits sheets cleared")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host, port, reload):
    """Run the HTTP API with uvicorn."""
    import uvicorn
    uvicorn.run("checkin.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
