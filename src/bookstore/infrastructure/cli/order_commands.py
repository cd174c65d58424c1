"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from bookstore.application.advance_status import AdvanceStatusHandler, ProgressOrderHandler
from bookstore.application.cancel_order import CancelOrderHandler
from bookstore.application.create_order import CreateOrderHandler
from bookstore.application.dto import OrderDTO, OrderItemSpec
from bookstore.application.list_orders import ListOrdersHandler
from bookstore.application.show_order import ShowOrderHandler
from bookstore.domain.exceptions import DomainException
from bookstore.domain.model.order import OrderStatus
from bookstore.infrastructure.bootstrap import repositories

STATUS_CHOICE = click.Choice([s.value for s in OrderStatus], case_sensitive=False)


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:3,2:5' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'BookId:Quantity'."
            )
        id_str, qty_str = pair.split(":", 1)
        try:
            book_id = int(id_str)
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid item '{pair}'. Book id and quantity must be integers."
            )
        specs.append(OrderItemSpec(book_id=book_id, quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"User:     #{dto.user_id}")
    click.echo(f"Ship to:  {dto.shipping_address}")
    if dto.payment_method:
        click.echo(f"Payment:  {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Book':<30} {'Qty':>5} {'Price':>14} {'Subtotal':>14}")
    click.echo(f"  {'-'*66}")
    for item in dto.items:
        click.echo(
            f"  {item.book_title:<30} {item.quantity:>5} {item.unit_price:>14} {item.subtotal:>14}"
        )
    click.echo(f"  {'-'*66}")
    click.echo(f"  {'Order Total':<36} {dto.total_amount:>29}")


def _display_list(dtos: list[OrderDTO]) -> None:
    if not dtos:
        click.echo("No orders found.")
        return
    click.echo(f"{'ID':<6} {'User':<6} {'Status':<10} {'Total':>16}  Created")
    click.echo("-" * 62)
    for dto in dtos:
        click.echo(
            f"{dto.id:<6} {dto.user_id:<6} {dto.status:<10} {dto.total_amount:>16}  {dto.created_at}"
        )


@click.command("create")
@click.option("--user", "user_id", required=True, type=int, help="Ordering user ID.")
@click.option("--address", required=True, help="Shipping address.")
@click.option("--payment", default=None, help="Payment method (stored as given).")
@click.option("--items", required=True, help="Items as 'BookId:Qty,BookId:Qty'.")
def order_create(user_id: int, address: str, payment: str | None, items: str) -> None:
    """Create a new order (reserves stock)."""
    specs = _parse_items(items)
    repos = repositories()
    handler = CreateOrderHandler(repos.orders, repos.catalog, repos.ledger)

    try:
        dto = handler.handle(
            user_id=user_id,
            shipping_address=address,
            item_specs=specs,
            payment_method=payment,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.option("--user", "user_id", default=None, type=int, help="Only show if owned by this user.")
def order_show(order_id: int, user_id: int | None) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(repositories().orders)

    try:
        dto = handler.handle(order_id, requesting_user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--user", "user_id", default=None, type=int, help="Only this user's orders.")
@click.option("--status", default=None, type=STATUS_CHOICE, help="Only orders in this status.")
@click.option("--from", "start", default=None, type=click.DateTime(), help="Created at or after (UTC).")
@click.option("--to", "end", default=None, type=click.DateTime(), help="Created at or before (UTC).")
def order_list(user_id: int | None, status: str | None, start, end) -> None:
    """List orders, newest first."""
    if user_id is not None and status is not None:
        raise click.UsageError("Use either --user or --status, not both.")
    if (start is not None or end is not None) and (user_id is not None or status is not None):
        raise click.UsageError("--from/--to cannot be combined with --user or --status.")

    handler = ListOrdersHandler(repositories().orders)
    if user_id is not None:
        dtos = handler.by_user(user_id)
    elif status is not None:
        dtos = handler.by_status(status)
    else:
        dtos = handler.between(start, end)

    _display_list(dtos)


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--user", "user_id", required=True, type=int, help="Requesting user ID.")
def order_cancel(order_id: int, user_id: int) -> None:
    """Cancel your own order (releases its stock)."""
    repos = repositories()
    handler = CancelOrderHandler(repos.orders, repos.catalog, repos.ledger)

    try:
        handler.handle(order_id, requesting_user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled — stock released.")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--status", "new_status", required=True, type=STATUS_CHOICE, help="New status.")
def order_status(order_id: int, new_status: str) -> None:
    """Set an order's status directly (staff override)."""
    repos = repositories()
    handler = AdvanceStatusHandler(repos.orders, repos.catalog, repos.ledger)

    try:
        dto = handler.handle(order_id, new_status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} status set to {dto.status}.")


def _progress_command(name: str, help_text: str):
    @click.command(name, help=help_text)
    @click.option("--id", "order_id", required=True, type=int, help="Order ID.")
    def command(order_id: int) -> None:
        repos = repositories()
        handler = ProgressOrderHandler(repos.orders, repos.catalog, repos.ledger)

        try:
            dto = getattr(handler, name)(order_id)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        click.echo(f"Order #{order_id} is now {dto.status}.")

    return command


order_confirm = _progress_command("confirm", "Confirm a pending order.")
order_ship = _progress_command("ship", "Mark a confirmed order as shipped.")
order_deliver = _progress_command("deliver", "Mark a shipped order as delivered.")
