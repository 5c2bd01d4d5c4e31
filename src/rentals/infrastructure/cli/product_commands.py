"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from rentals.application.add_product import AddProductHandler
from rentals.application.set_stock import SetStockHandler
from rentals.application.show_products import ShowProductsHandler
from rentals.domain.exceptions import DomainException
from rentals.infrastructure.bootstrap import product_repository


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--stock", required=True, type=int, help="Units owned.")
def product_add(name: str, stock: int) -> None:
    """Add a new rentable product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(name=name, stock=stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added with {product.stock_quantity} in stock")


@click.command("list")
def product_list() -> None:
    """List all products with their stock and reserved counts."""
    handler = ShowProductsHandler(product_repo=product_repository())

    try:
        lines = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Stock':>8} {'Reserved':>10} {'Available':>10}")
    click.echo("-" * 58)
    for line in lines:
        click.echo(
            f"{line.id:<6} {line.name:<20} {line.stock:>8} {line.reserved:>10} {line.available:>10}"
        )


@click.command("set-stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Total units owned.")
def product_set_stock(product_id: str, quantity: int) -> None:
    """Set the stock level of a product."""
    handler = SetStockHandler(product_repo=product_repository())

    try:
        handler.handle(product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for product #{product_id} set to {quantity}")
