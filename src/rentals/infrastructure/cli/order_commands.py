"""CLI commands for rental orders."""

from __future__ import annotations

from datetime import datetime

import click

from rentals.application.cancel_rental import CancelRentalHandler
from rentals.application.change_rental_status import TRANSITIONS, ChangeRentalStatusHandler
from rentals.application.create_rental import CreateRentalHandler
from rentals.application.dto import OrderDTO, RentalItemSpec
from rentals.application.modify_rental import ModifyRentalItemHandler
from rentals.application.show_order import ShowOrderHandler
from rentals.domain.exceptions import DomainException
from rentals.infrastructure.bootstrap import order_repository, product_repository
from rentals.infrastructure.config import get_settings

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _parse_items(
    raw: str, delivery: datetime, return_: datetime | None
) -> list[RentalItemSpec]:
    """Parse 'Dress:1,Suit:2' into RentalItemSpec list sharing one period."""
    specs: list[RentalItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'Product:Quantity'."
            )
        name, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{name}'."
            )
        specs.append(
            RentalItemSpec(
                product=name.strip(),
                quantity=qty,
                delivery_date=delivery.date(),
                return_date=return_.date() if return_ else None,
            )
        )
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status}, type={dto.transaction_type})")
    click.echo(f"Customer: {dto.customer_name}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Delivery':>12} {'Return':>12}")
    click.echo(f"  {'-'*52}")
    for item in dto.items:
        returned = "open" if item.open_ended else item.return_date
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.delivery_date:>12} {returned:>12}"
        )


@click.command("create")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--items", required=True, help="Items as 'Product:Qty,Product:Qty'.")
@click.option("--delivery", required=True, type=DATE, help="Delivery date (YYYY-MM-DD).")
@click.option("--return", "return_", default=None, type=DATE, help="Return date; omit for open-ended.")
def order_create(
    customer: str, items: str, delivery: datetime, return_: datetime | None
) -> None:
    """Create a rental order (reserves stock for every item)."""
    specs = _parse_items(items, delivery, return_)

    handler = CreateRentalHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        max_write_retries=get_settings().max_write_retries,
    )

    try:
        dto = handler.handle(customer_name=customer, item_specs=specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created — stock reserved.")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(order_id: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("modify")
@click.option("--id", "order_id", required=True, help="Order ID to modify.")
@click.option("--product", "product_id", required=True, help="Product ID on the order.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
@click.option("--delivery", required=True, type=DATE, help="New delivery date.")
@click.option("--return", "return_", default=None, type=DATE, help="New return date; omit for open-ended.")
def order_modify(
    order_id: str,
    product_id: str,
    quantity: int,
    delivery: datetime,
    return_: datetime | None,
) -> None:
    """Change the quantity or dates of one item on a rental."""
    handler = ModifyRentalItemHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        max_write_retries=get_settings().max_write_retries,
    )

    try:
        dto = handler.handle(
            order_id,
            product_id,
            delivery.date(),
            return_.date() if return_ else None,
            quantity,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} updated.")
    _display_order(dto)


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
def order_cancel(order_id: str) -> None:
    """Cancel an order (releases its reserved stock)."""
    handler = CancelRentalHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        max_write_retries=get_settings().max_write_retries,
    )

    try:
        handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")


@click.command("status")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.argument("action", type=click.Choice(sorted(TRANSITIONS)))
def order_status(order_id: str, action: str) -> None:
    """Move a rental along its lifecycle (prepare, deliver, start, overdue, complete, return)."""
    handler = ChangeRentalStatusHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        max_write_retries=get_settings().max_write_retries,
    )

    try:
        dto = handler.handle(order_id, action)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status}.")
