"""CLI commands for order statistics."""

from __future__ import annotations

import click

from bookstore.application.get_statistics import GetStatisticsHandler
from bookstore.domain.exceptions import DomainException
from bookstore.infrastructure.bootstrap import repositories


@click.command("summary")
@click.option("--from", "start", default=None, type=click.DateTime(), help="Created at or after (UTC).")
@click.option("--to", "end", default=None, type=click.DateTime(), help="Created at or before (UTC).")
def stats_summary(start, end) -> None:
    """Order counts per status and delivered revenue."""
    handler = GetStatisticsHandler(repositories().orders)

    try:
        stats = handler.handle(start, end)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{'Total orders':<16} {stats.total_orders:>8}")
    click.echo(f"{'Pending':<16} {stats.pending:>8}")
    click.echo(f"{'Confirmed':<16} {stats.confirmed:>8}")
    click.echo(f"{'Shipped':<16} {stats.shipped:>8}")
    click.echo(f"{'Delivered':<16} {stats.delivered:>8}")
    click.echo(f"{'Cancelled':<16} {stats.cancelled:>8}")
    click.echo(f"{'Revenue':<16} {stats.total_revenue:>8}")


@click.command("monthly")
def stats_monthly() -> None:
    """Delivered orders and revenue per month."""
    rows = GetStatisticsHandler(repositories().orders).monthly()

    if not rows:
        click.echo("No delivered orders yet.")
        return

    click.echo(f"{'Month':<8} {'Orders':>7} {'Revenue':>18}")
    click.echo("-" * 35)
    for row in rows:
        click.echo(f"{row.year:04d}-{row.month:02d} {row.order_count:>7} {row.revenue:>18}")


@click.command("largest")
@click.option("--limit", default=10, type=click.IntRange(min=1), help="How many orders.")
def stats_largest(limit: int) -> None:
    """The orders with the highest totals."""
    dtos = GetStatisticsHandler(repositories().orders).largest(limit)

    if not dtos:
        click.echo("No orders found.")
        return

    for dto in dtos:
        click.echo(f"#{dto.id:<6} {dto.status:<10} {dto.total_amount:>16}")
