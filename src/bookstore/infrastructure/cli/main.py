import click

from bookstore.infrastructure.cli.catalog_commands import book_add, book_list, user_add
from bookstore.infrastructure.cli.order_commands import (
    order_cancel,
    order_confirm,
    order_create,
    order_deliver,
    order_list,
    order_ship,
    order_show,
    order_status,
)
from bookstore.infrastructure.cli.stats_commands import (
    stats_largest,
    stats_monthly,
    stats_summary,
)
from bookstore.infrastructure.config import Settings
from bookstore.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """Bookstore — order management"""
    configure_logging(Settings())


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def book() -> None:
    """Manage books."""


@cli.group()
def user() -> None:
    """Manage users."""


@cli.group()
def stats() -> None:
    """Order statistics."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_confirm)
order.add_command(order_create)
order.add_command(order_deliver)
order.add_command(order_list)
order.add_command(order_ship)
order.add_command(order_show)
order.add_command(order_status)
book.add_command(book_add)
book.add_command(book_list)
user.add_command(user_add)
stats.add_command(stats_largest)
stats.add_command(stats_monthly)
stats.add_command(stats_summary)
