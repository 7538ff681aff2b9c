# Overview: Flask CLI command groups for schema bootstrap and operator bookkeeping.

# backend/offerdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Offer pools:
# - python -m flask pool list
#   List pools with their accumulated and transferred/deducted totals.
# - python -m flask pool accrue 3 25 --reason "Unclaimed at Andheri route"
#   Add unclaimed free-item units to pool 3.
#
# Free stock:
# - python -m flask free-stock allocate 7 40
#   Set free_stock.allocated_to_offers for product 7 (0..free_stock_quantity).

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import ledger_service, offer_pool_service
from .validation import NotFoundError, ValidationError


@click.group('system')
def system_group():
    """Schema bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('pool')
def pool_group():
    """Offer pool inspection and accrual."""


@pool_group.command('list')
@with_appcontext
def list_pools():
    """List offer pools."""
    pools = offer_pool_service.list_pools()
    if not pools:
        click.echo("No offer pools.")
        return

    for pool in pools:
        click.echo(
            f"#{pool.id} offer={pool.offer_id} product={pool.product_id or '-'} "
            f"accumulated={pool.accumulated_quantity} "
            f"to_regular={pool.total_transferred_to_regular} "
            f"to_free={pool.total_transferred_to_free} "
            f"deducted={pool.total_deducted}"
        )


@pool_group.command('accrue')
@click.argument('pool_id', type=int)
@click.argument('quantity', type=int)
@click.option('--reason', default=None, help='Free-text note stored in pool history')
@with_appcontext
def accrue(pool_id, quantity, reason):
    """Add unclaimed free-item units to a pool."""
    try:
        movement = offer_pool_service.accumulate(pool_id, quantity, reason)
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Pool #{pool_id} now holds {movement.pool.accumulated_quantity} units.")


@click.group('free-stock')
def free_stock_group():
    """Free stock maintenance."""


@free_stock_group.command('allocate')
@click.argument('product_id', type=int)
@click.argument('quantity', type=int)
@with_appcontext
def allocate(product_id, quantity):
    """Set allocated_to_offers for a product's free stock."""
    try:
        record = ledger_service.set_allocated_to_offers(product_id, quantity)
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))
    click.echo(
        f"PASS Product {product_id}: allocated={record.allocated_to_offers} "
        f"available={record.available}"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(pool_group)
    app.cli.add_command(free_stock_group)
