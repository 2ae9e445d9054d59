"""CLI commands for the Batch aggregate."""

from __future__ import annotations

import click

from preorder.application.create_batch import CreateBatchHandler
from preorder.application.delete_batch import DeleteBatchHandler
from preorder.application.dto import StockSpec
from preorder.application.duplicate_batch import DuplicateBatchHandler
from preorder.application.publish_batch import CloseBatchHandler, PublishBatchHandler
from preorder.application.show_batches import (
    ListBatchesHandler,
    ShowBatchStockHandler,
    ShowOpenBatchHandler,
)
from preorder.domain.exceptions import DomainException
from preorder.infrastructure.bootstrap import unit_of_work


def _parse_stock(raw: str) -> list[StockSpec]:
    """Parse '1:20,2:15' (product ID:available) into StockSpec list."""
    specs: list[StockSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid stock format '{pair}'. Expected 'ProductID:Quantity'."
            )
        pid_str, qty_str = pair.split(":", 1)
        try:
            specs.append(StockSpec(product_id=int(pid_str), available=int(qty_str)))
        except ValueError:
            raise click.BadParameter(f"Invalid stock entry '{pair}'.")
        if specs[-1].available < 0:
            raise click.BadParameter(f"Stock for product {pid_str} cannot be negative.")
    return specs


@click.command("create")
@click.option("--title", required=True, help="Batch title.")
@click.option(
    "--delivery-date",
    required=True,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Delivery date (YYYY-MM-DD).",
)
@click.option("--stock", "stock_str", default="", help="Initial stock as 'ProductID:Qty,...'.")
def batch_create(title: str, delivery_date, stock_str: str) -> None:
    """Create a draft batch with its initial stock."""
    specs = _parse_stock(stock_str)
    handler = CreateBatchHandler(unit_of_work())

    try:
        dto = handler.handle(title, delivery_date.date(), specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch #{dto.id} '{dto.title}' created (status={dto.status})")


@click.command("list")
def batch_list() -> None:
    """List all batches, newest delivery first."""
    try:
        batches = ListBatchesHandler(unit_of_work()).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not batches:
        click.echo("No batches found.")
        return

    click.echo(
        f"{'ID':<6} {'Title':<24} {'Delivery':<12} {'Status':<8}"
        f" {'Orders':>7} {'Unpaid':>7} {'Revenue':>14} {'Reserved':>9} {'Left':>6}"
    )
    click.echo("-" * 99)
    for b in batches:
        click.echo(
            f"{b.id:<6} {b.title:<24} {b.delivery_date:<12} {b.status:<8}"
            f" {b.order_count:>7} {b.pending_payment_count:>7} {b.revenue:>14}"
            f" {b.reserved:>9} {b.available:>6}"
        )


@click.command("show")
@click.option("--id", "batch_id", type=int, default=None, help="Batch ID (default: the open batch).")
def batch_show(batch_id: int | None) -> None:
    """Show a batch's stock, or the menu of the open batch."""
    try:
        if batch_id is None:
            open_batch = ShowOpenBatchHandler(unit_of_work()).handle()
            if open_batch is None:
                click.echo("No batch is open for pre-order.")
                return
            _display_menu(open_batch)
            return
        dto, lines = ShowBatchStockHandler(unit_of_work()).handle(batch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch #{dto.id} '{dto.title}'  (status={dto.status}, delivery {dto.delivery_date})")
    click.echo(
        f"Orders: {dto.order_count} ({dto.pending_payment_count} awaiting payment)"
        f"  Revenue: {dto.revenue}"
    )
    click.echo(f"Stock: {dto.reserved} reserved, {dto.available} available")
    click.echo()
    click.echo(f"  {'Product':<24} {'Total':>7} {'Reserved':>9} {'Available':>10}")
    click.echo(f"  {'-'*53}")
    for line in lines:
        click.echo(
            f"  {line.product_name:<24} {line.total:>7} {line.reserved:>9} {line.available:>10}"
        )


def _display_menu(open_batch) -> None:
    batch = open_batch.batch
    click.echo(f"Batch #{batch.id} '{batch.title}'  (delivery {batch.delivery_date})")
    click.echo()
    click.echo(f"  {'ID':<5} {'Product':<24} {'Price':>10} {'Left':>6}")
    click.echo(f"  {'-'*48}")
    for line in open_batch.menu:
        left = "SOLD OUT" if line.sold_out else str(line.available)
        click.echo(f"  {line.product_id:<5} {line.product_name:<24} {line.price:>10} {left:>6}")


@click.command("publish")
@click.option("--id", "batch_id", required=True, type=int, help="Draft batch to open.")
def batch_publish(batch_id: int) -> None:
    """Open a draft batch for pre-orders (closes the current one)."""
    handler = PublishBatchHandler(unit_of_work())

    try:
        closed = handler.handle(batch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch #{batch_id} is now open.")
    for other in closed:
        click.echo(f"Batch #{other} closed.")


@click.command("close")
@click.option("--id", "batch_id", required=True, type=int, help="Open batch to close.")
def batch_close(batch_id: int) -> None:
    """Close the open batch."""
    try:
        CloseBatchHandler(unit_of_work()).handle(batch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch #{batch_id} closed.")


@click.command("duplicate")
@click.option("--id", "batch_id", required=True, type=int, help="Batch to copy.")
def batch_duplicate(batch_id: int) -> None:
    """Copy a batch and its stock into a new draft one week later."""
    try:
        dto = DuplicateBatchHandler(unit_of_work()).handle(batch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch #{dto.id} '{dto.title}' created for {dto.delivery_date}")


@click.command("delete")
@click.option("--id", "batch_id", required=True, type=int, help="Batch ID.")
def batch_delete(batch_id: int) -> None:
    """Delete a batch nobody has ordered from."""
    try:
        DeleteBatchHandler(unit_of_work()).handle(batch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch #{batch_id} deleted.")
