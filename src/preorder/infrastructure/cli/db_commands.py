"""CLI commands for database setup."""

from __future__ import annotations

import click

from preorder.infrastructure import bootstrap
from preorder.infrastructure.persistence.database import init_schema


@click.command("init")
def db_init() -> None:
    """Create the database tables (existing tables are left alone)."""
    init_schema(bootstrap.engine())
    click.echo(f"Database ready at {bootstrap.settings().database_url}")
