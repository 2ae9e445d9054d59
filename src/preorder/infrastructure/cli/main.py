import logging

import click

from preorder.infrastructure import bootstrap
from preorder.infrastructure.cli.batch_commands import (
    batch_close,
    batch_create,
    batch_delete,
    batch_duplicate,
    batch_list,
    batch_publish,
    batch_show,
)
from preorder.infrastructure.cli.db_commands import db_init
from preorder.infrastructure.cli.order_commands import (
    order_advance,
    order_bulk_advance,
    order_cancel,
    order_delete,
    order_list,
    order_lookup,
    order_place,
    order_proof,
    order_reset_method,
    order_set_method,
    order_show,
    order_start_payment,
    order_sweep_expired,
)
from preorder.infrastructure.cli.product_commands import (
    product_add,
    product_delete,
    product_list,
    product_update,
)
from preorder.infrastructure.cli.stock_commands import stock_edit


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output.")
def cli(verbose: bool) -> None:
    """Pre-order batches, stock and orders."""
    level = logging.DEBUG if verbose else bootstrap.settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def db() -> None:
    """Manage the database."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def batch() -> None:
    """Manage pre-order batches."""


@cli.group()
def stock() -> None:
    """Manage batch stock."""


@cli.group()
def order() -> None:
    """Manage orders."""


# Register subcommands
db.add_command(db_init)
product.add_command(product_add)
product.add_command(product_delete)
product.add_command(product_list)
product.add_command(product_update)
batch.add_command(batch_close)
batch.add_command(batch_create)
batch.add_command(batch_delete)
batch.add_command(batch_duplicate)
batch.add_command(batch_list)
batch.add_command(batch_publish)
batch.add_command(batch_show)
stock.add_command(stock_edit)
order.add_command(order_advance)
order.add_command(order_bulk_advance)
order.add_command(order_cancel)
order.add_command(order_delete)
order.add_command(order_list)
order.add_command(order_lookup)
order.add_command(order_place)
order.add_command(order_proof)
order.add_command(order_reset_method)
order.add_command(order_set_method)
order.add_command(order_show)
order.add_command(order_start_payment)
order.add_command(order_sweep_expired)
