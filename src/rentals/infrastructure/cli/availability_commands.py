"""CLI commands for availability queries."""

from __future__ import annotations

from datetime import datetime

import click

from rentals.application.check_availability import CheckAvailabilityHandler
from rentals.application.show_calendar import ShowCalendarHandler
from rentals.domain.exceptions import DomainException
from rentals.infrastructure.bootstrap import order_repository, product_repository

DATE = click.DateTime(formats=["%Y-%m-%d"])


@click.command("check")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--start", required=True, type=DATE, help="Delivery date (YYYY-MM-DD).")
@click.option("--end", required=True, type=DATE, help="Return date (YYYY-MM-DD).")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units wanted.")
@click.option("--exclude-order", default=None, help="Order being edited, if any.")
def availability_check(
    product_id: str,
    start: datetime,
    end: datetime,
    quantity: int,
    exclude_order: str | None,
) -> None:
    """Check whether units can be rented over a date range."""
    handler = CheckAvailabilityHandler(
        product_repo=product_repository(),
        order_repo=order_repository(),
    )

    try:
        dto = handler.handle(product_id, start.date(), end.date(), quantity, exclude_order)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    verdict = "AVAILABLE" if dto.admissible else "NOT AVAILABLE"
    click.echo(f"Product #{dto.product_id}: {verdict}")
    click.echo(f"  Peak reserved:  {dto.peak_reserved}")
    click.echo(f"  Available:      {dto.available_quantity}")


@click.command("calendar")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--start", required=True, type=DATE, help="First day (YYYY-MM-DD).")
@click.option("--end", required=True, type=DATE, help="Last day (YYYY-MM-DD).")
def availability_calendar(product_id: str, start: datetime, end: datetime) -> None:
    """Show reserved and available units for each day of a range."""
    handler = ShowCalendarHandler(
        product_repo=product_repository(),
        order_repo=order_repository(),
    )

    try:
        days = handler.handle(product_id, start.date(), end.date())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{'Day':<12} {'Reserved':>10} {'Available':>10}")
    click.echo("-" * 34)
    for day in days:
        click.echo(f"{day.day:<12} {day.reserved:>10} {day.available:>10}")
