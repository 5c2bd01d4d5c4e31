import click

from rentals.infrastructure.cli.availability_commands import (
    availability_calendar,
    availability_check,
)
from rentals.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_modify,
    order_show,
    order_status,
)
from rentals.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_set_stock,
)
from rentals.infrastructure.cli.reconcile_commands import reconcile
from rentals.infrastructure.config import get_settings
from rentals.infrastructure.log_setup import configure_logging


@click.group()
def cli() -> None:
    """Rentals — reservation and availability engine"""
    configure_logging(get_settings().log_level)


@cli.group()
def rental() -> None:
    """Manage rental orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def availability() -> None:
    """Query availability."""


# Register subcommands
rental.add_command(order_cancel)
rental.add_command(order_create)
rental.add_command(order_modify)
rental.add_command(order_show)
rental.add_command(order_status)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_set_stock)
availability.add_command(availability_calendar)
availability.add_command(availability_check)
cli.add_command(reconcile)
