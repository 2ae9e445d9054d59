"""CLI commands for batch stock."""

from __future__ import annotations

import click

from preorder.application.edit_stock import EditStockHandler
from preorder.domain.exceptions import DomainException
from preorder.infrastructure.bootstrap import unit_of_work


@click.command("edit")
@click.option("--batch", "batch_id", required=True, type=int, help="Batch ID.")
@click.option("--product", "product_id", required=True, type=int, help="Product ID.")
@click.option("--total", required=True, type=int, help="New total stock (reserved + available).")
def stock_edit(batch_id: int, product_id: int, total: int) -> None:
    """Set the total stock of a product in a batch."""
    handler = EditStockHandler(unit_of_work())

    try:
        line = handler.handle(batch_id, product_id, total)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"{line.product_name}: total={line.total} reserved={line.reserved} "
        f"available={line.available}"
    )
