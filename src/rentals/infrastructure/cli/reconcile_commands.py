"""CLI command for the reconciliation job."""

from __future__ import annotations

import click

from rentals.application.dto import ReconciliationDTO
from rentals.application.reconcile import ReconcileHandler
from rentals.domain.exceptions import ReconciliationPartialFailure
from rentals.infrastructure.bootstrap import reconciliation_job


def _display_report(dto: ReconciliationDTO) -> None:
    click.echo(f"Checked {dto.checked} product(s)")
    if dto.corrected:
        click.echo()
        click.echo(f"  {'Product':<10} {'Before':>8} {'After':>8}")
        click.echo(f"  {'-'*28}")
        for d in dto.corrected:
            click.echo(f"  {d.product_id:<10} {d.before:>8} {d.after:>8}")
    else:
        click.echo("No discrepancies found.")

    for f in dto.failed:
        click.echo(f"FAILED {f.product_id}: {f.error}", err=True)


@click.command("reconcile")
@click.option(
    "--product",
    "product_ids",
    multiple=True,
    help="Product ID to reconcile (repeatable). Defaults to every product.",
)
def reconcile(product_ids: tuple[str, ...]) -> None:
    """Recompute reserved counters from the orders and fix any drift."""
    handler = ReconcileHandler(reconciliation_job())

    try:
        dto = handler.handle(list(product_ids) or None, strict=True)
    except ReconciliationPartialFailure as exc:
        _display_report(ReconcileHandler.to_dto(exc.report))
        raise click.ClickException(str(exc))

    _display_report(dto)
