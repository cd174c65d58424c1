"""CLI commands for seeding the catalog (books and users)."""

from __future__ import annotations

import click

from bookstore.domain.exceptions import DomainException
from bookstore.domain.model.value_objects import Money
from bookstore.infrastructure.bootstrap import repositories


@click.command("add")
@click.option("--title", required=True, help="Book title.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, type=click.IntRange(min=0), help="Initial stock.")
def book_add(title: str, price: str, stock: int) -> None:
    """Add a book to the catalog."""
    try:
        book = repositories().catalog.add_book(title, Money.of(price), stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Book #{book.id} '{book.title}' added at {book.price} ({book.stock_quantity} in stock)")


@click.command("list")
def book_list() -> None:
    """List all books with their stock."""
    books = repositories().catalog.list_books()

    if not books:
        click.echo("No books found.")
        return

    click.echo(f"{'ID':<6} {'Title':<30} {'Price':>14} {'Stock':>7}")
    click.echo("-" * 60)
    for b in books:
        click.echo(f"{b.id:<6} {b.title:<30} {str(b.price):>14} {b.stock_quantity:>7}")


@click.command("add")
@click.option("--username", required=True, help="Username.")
def user_add(username: str) -> None:
    """Register a user who can place orders."""
    try:
        user = repositories().catalog.add_user(username)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"User #{user.id} '{user.username}' added")
