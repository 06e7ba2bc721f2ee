"""``flask seed``: load the vaccine catalog and demo accounts."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from vaxtrack.core.extensions import db
from vaxtrack.seeds import seed_data

logger = logging.getLogger(__name__)

verbose_option = click.option(
    "-v", "--verbose", is_flag=True, help="Log every row the seeders touch."
)


def _print_summary(summary: dict[str, dict[str, int]]) -> None:
    click.echo("Seed summary:")
    if not summary:
        click.echo("  nothing to seed")
        return
    pad = max(map(len, summary))
    for table in sorted(summary):
        row = summary[table]
        click.echo(
            f"  {table:<{pad}}  created={row.get('created', 0):>2}"
            f"  existing={row.get('existing', 0):>2}"
        )


def _seed(verbose: bool) -> None:
    if verbose:
        logging.getLogger(seed_data.__name__).setLevel(logging.DEBUG)
    try:
        summary = seed_data.run_all(db, verbose=verbose)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise click.ClickException(f"Seeding failed: {exc}") from exc
    _print_summary(summary)


@click.group("seed")
def seed_cli() -> None:
    """Development and demo data."""


@seed_cli.command("run")
@verbose_option
@with_appcontext
def run_command(verbose: bool) -> None:
    """Insert missing catalog entries and demo accounts; existing rows are kept."""
    _seed(verbose)


@seed_cli.command("fresh")
@verbose_option
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@with_appcontext
def fresh_command(verbose: bool, yes: bool) -> None:
    """Drop and recreate every table, then seed. Refused when APP_ENV is production."""
    if str(current_app.config.get("APP_ENV", "")).lower() == "production":
        raise click.UsageError("'seed fresh' is disabled when APP_ENV=production.")
    if not yes:
        click.confirm("All vaccination data will be deleted. Continue?", abort=True)

    db.session.remove()
    logger.info("seed.fresh.drop_all")
    db.drop_all()
    db.create_all()
    _seed(verbose)
