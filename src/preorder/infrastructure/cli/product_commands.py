"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from preorder.application.add_product import AddProductHandler
from preorder.application.delete_product import DeleteProductHandler
from preorder.application.update_product import UpdateProductHandler
from preorder.domain.exceptions import DomainException
from preorder.infrastructure.bootstrap import unit_of_work


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price in Rupiah (e.g. 15000).")
@click.option("--size", default=None, help="Bottle size (e.g. 250ml).")
@click.option("--description", default=None, help="Short description.")
def product_add(name: str, price: str, size: str | None, description: str | None) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(unit_of_work())

    try:
        product = handler.handle(name=name, price=price, size=size, description=description)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    try:
        with unit_of_work() as uow:
            products = uow.products.list_all()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Size':<8} {'Price':>12}")
    click.echo("-" * 53)
    for p in products:
        click.echo(f"{p.id:<6} {p.name:<24} {p.size or '-':<8} {str(p.price):>12}")


@click.command("update")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--price", default=None, help="New price (e.g. 18000).")
@click.option("--size", default=None, help="New size.")
@click.option("--description", default=None, help="New description.")
def product_update(
    product_id: int, price: str | None, size: str | None, description: str | None
) -> None:
    """Update a product's price or details (existing orders keep their price)."""
    handler = UpdateProductHandler(unit_of_work())

    try:
        product = handler.handle(
            product_id=product_id, new_price=price, size=size, description=description
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' updated ({product.price})")


@click.command("delete")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
def product_delete(product_id: int) -> None:
    """Delete a product that no active batch or order uses."""
    handler = DeleteProductHandler(unit_of_work())

    try:
        handler.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} deleted.")
