"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from preorder.application.advance_order_status import (
    AdvanceOrderStatusHandler,
    BulkAdvanceOrderStatusHandler,
)
from preorder.application.cancel_order import CancelOrderHandler
from preorder.application.delete_order import DeleteOrderHandler
from preorder.application.dto import OrderItemSpec
from preorder.application.payment import (
    ResetPaymentMethodHandler,
    SetPaymentMethodHandler,
    StartPaymentHandler,
    SubmitPaymentProofHandler,
)
from preorder.application.place_order import PlaceOrderHandler
from preorder.application.show_order import (
    ListBatchOrdersHandler,
    LookupOrdersHandler,
    ShowOrderHandler,
)
from preorder.application.sweep_expired_orders import SweepExpiredOrdersHandler
from preorder.domain.exceptions import DomainException
from preorder.domain.model.order import OrderStatus, PaymentMethod
from preorder.infrastructure.bootstrap import settings, unit_of_work

_STATUS_CHOICE = click.Choice([s.value for s in OrderStatus])


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:3,2:1@12000' (product ID:qty[@unit price]) into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductID:Quantity[@Price]'."
            )
        pid_str, rest = pair.split(":", 1)
        qty_str, _, price = rest.partition("@")
        try:
            product_id = int(pid_str)
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(f"Invalid item '{pair}'.")
        specs.append(
            OrderItemSpec(product_id=product_id, quantity=qty, unit_price=price.strip() or None)
        )
    return specs


def _parse_ids(raw: str) -> list[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise click.BadParameter(f"Invalid order ID list '{raw}'.")


def _display_order(dto) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status}, batch #{dto.batch_id})")
    click.echo(f"Customer: {dto.customer_name}  {dto.customer_phone}")
    if dto.customer_address:
        click.echo(f"Address:  {dto.customer_address}")
    click.echo(f"Created:  {dto.created_at}")
    proof = "uploaded" if dto.has_payment_proof else "none"
    click.echo(f"Payment:  {dto.payment_method} (proof: {proof})")
    if dto.payment_started_at:
        click.echo(f"Payment started: {dto.payment_started_at}")
    click.echo()

    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("place")
@click.option("--batch", "batch_id", required=True, type=int, help="Open batch ID.")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--phone", required=True, help="Customer phone (08... or +628...).")
@click.option("--address", default=None, help="Delivery address.")
@click.option("--items", required=True, help="Items as 'ProductID:Qty[@Price],...'.")
@click.option(
    "--method",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=PaymentMethod.PENDING.value,
    show_default=True,
    help="Payment method.",
)
@click.option("--token", default=None, help="Checkout token; retrying with it never orders twice.")
def order_place(
    batch_id: int,
    customer: str,
    phone: str,
    address: str | None,
    items: str,
    method: str,
    token: str | None,
) -> None:
    """Place a pre-order, reserving its stock."""
    specs = _parse_items(items)
    uow = unit_of_work()

    try:
        order_id = PlaceOrderHandler(uow).handle(
            batch_id=batch_id,
            customer_name=customer,
            customer_phone=phone,
            item_specs=specs,
            customer_address=address,
            payment_method=method,
            request_token=token,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    # The order is committed; a failing read-back must not hide that.
    click.echo(f"Order #{order_id} placed.")
    try:
        dto = ShowOrderHandler(uow).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(f"Could not display order #{order_id}: {exc}")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    try:
        dto = ShowOrderHandler(unit_of_work()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("lookup")
@click.option("--phone", required=True, help="Phone number used at checkout.")
def order_lookup(phone: str) -> None:
    """List a customer's orders by phone number."""
    try:
        orders = LookupOrdersHandler(unit_of_work()).handle(phone)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_summaries(orders)


def _display_summaries(orders) -> None:
    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Customer':<20} {'Status':<17} {'Total':>12}  Created")
    click.echo("-" * 78)
    for o in orders:
        click.echo(f"{o.id:<6} {o.customer_name:<20} {o.status:<17} {o.total:>12}  {o.created_at}")


@click.command("list")
@click.option("--batch", "batch_id", required=True, type=int, help="Batch ID.")
@click.option("--status", type=_STATUS_CHOICE, default=None, help="Only orders in this status.")
def order_list(batch_id: int, status: str | None) -> None:
    """List the orders of a batch."""
    try:
        orders = ListBatchOrdersHandler(unit_of_work()).handle(batch_id, status=status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_summaries(orders)


@click.command("start-payment")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_start_payment(order_id: int) -> None:
    """Start the payment timer of an order."""
    try:
        started = StartPaymentHandler(unit_of_work()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    timeout = settings().payment_timeout_minutes
    click.echo(
        f"Payment for order #{order_id} started at {started:%Y-%m-%d %H:%M} UTC; "
        f"upload a proof within {timeout} minutes."
    )


@click.command("set-method")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--method",
    required=True,
    type=click.Choice([m.value for m in PaymentMethod if m != PaymentMethod.PENDING]),
    help="Payment method.",
)
def order_set_method(order_id: int, method: str) -> None:
    """Choose the payment method of an order."""
    try:
        SetPaymentMethodHandler(unit_of_work()).handle(order_id, method)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} will be paid by {method}.")


@click.command("reset-method")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_reset_method(order_id: int) -> None:
    """Clear the payment method (and any uploaded proof)."""
    try:
        ResetPaymentMethodHandler(unit_of_work()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment method of order #{order_id} cleared.")


@click.command("proof")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--file", "file_ref", default=None, help="Stored file reference (URL or path).")
@click.option("--type", "file_type", default=None, help="File type (e.g. image/jpeg).")
def order_proof(order_id: int, file_ref: str | None, file_type: str | None) -> None:
    """Record a payment proof (no file needed for cash on pickup)."""
    try:
        SubmitPaymentProofHandler(unit_of_work()).handle(order_id, file_ref, file_type)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment proof recorded for order #{order_id}.")


@click.command("advance")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--status", "new_status", required=True, type=_STATUS_CHOICE, help="Target status.")
def order_advance(order_id: int, new_status: str) -> None:
    """Move an order to another status."""
    try:
        changed = AdvanceOrderStatusHandler(unit_of_work()).handle(order_id, new_status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if changed:
        click.echo(f"Order #{order_id} is now {new_status}.")
    else:
        click.echo(f"Order #{order_id} was already {new_status}.")


@click.command("bulk-advance")
@click.option("--ids", required=True, help="Order IDs as '1,2,3'.")
@click.option("--status", "new_status", required=True, type=_STATUS_CHOICE, help="Target status.")
def order_bulk_advance(ids: str, new_status: str) -> None:
    """Move many orders to the same status, one transaction each."""
    order_ids = _parse_ids(ids)
    try:
        result = BulkAdvanceOrderStatusHandler(unit_of_work()).handle(order_ids, new_status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Updated: {', '.join(map(str, result.updated)) or 'none'}")
    if result.skipped:
        click.echo(f"Skipped: {', '.join(map(str, result.skipped))}")
    for order_id, reason in result.failed.items():
        click.echo(f"Failed #{order_id}: {reason}")
    if result.failed:
        raise click.exceptions.Exit(1)


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option(
    "--by-customer", is_flag=True, default=False, help="Apply the customer cancellation rules."
)
def order_cancel(order_id: int, by_customer: bool) -> None:
    """Cancel an order (restores its reserved stock)."""
    try:
        cancelled = CancelOrderHandler(unit_of_work()).handle(order_id, by_customer=by_customer)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if cancelled:
        click.echo(f"Order #{order_id} cancelled, stock restored.")
    else:
        click.echo(f"Order #{order_id} was already cancelled.")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Cancelled order to delete.")
def order_delete(order_id: int) -> None:
    """Delete a cancelled order."""
    try:
        DeleteOrderHandler(unit_of_work()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} deleted.")


@click.command("sweep-expired")
def order_sweep_expired() -> None:
    """Cancel orders whose payment timer ran out (run from cron)."""
    handler = SweepExpiredOrdersHandler(unit_of_work(), timeout=settings().payment_timeout)

    try:
        cancelled = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if cancelled:
        click.echo(f"Cancelled {len(cancelled)} expired orders: {', '.join(map(str, cancelled))}")
    else:
        click.echo("No expired orders.")
