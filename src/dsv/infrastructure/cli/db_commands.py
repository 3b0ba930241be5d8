"""CLI commands for the database."""

from __future__ import annotations

from pathlib import Path

import click

from dsv.infrastructure import bootstrap
from dsv.infrastructure.cli.formatting import USER_ERRORS
from dsv.infrastructure.persistence.catalog_loader import load_catalog
from dsv.infrastructure.persistence.unit_of_work import create_schema


@click.command("init")
def db_init() -> None:
    """Create the database tables."""
    create_schema(bootstrap.engine())
    click.echo(f"Database ready at {bootstrap.settings().database_url}")


@click.command("load-catalog")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def db_load_catalog(path: Path) -> None:
    """Load products (and saved carts) from a JSON file."""
    create_schema(bootstrap.engine())
    try:
        summary = load_catalog(path, bootstrap.sessions())
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Loaded {summary.products} products and {summary.cart_items} cart items.")
