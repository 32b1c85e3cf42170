# Overview: Flask CLI command groups for bootstrap, tenant management, and maintenance.

# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (use `flask db upgrade` for migrated databases).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Business (tenant) management:
# - python -m flask business create --name "Fade Masters" --slug fade-masters --owner "Jane Doe" --username jane --password "Secret123"
#   Register a shop with its Owner account and default settings.
# - python -m flask business list
# - python -m flask business suspend fade-masters
# - python -m flask business activate fade-masters
#
# Maintenance:
# - python -m flask maintenance purge-sessions --older-than-days 30
#   Delete expired and revoked session tokens.

import click
from flask.cli import with_appcontext

from .errors import DataAccessError
from .extensions import db
from .models import Business, StaffMember
from .models.tenancy import BUSINESS_ACTIVE, BUSINESS_PLANS, BUSINESS_SUSPENDED
from .services import session_service
from .services.tenant_service import create_business, set_business_status


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


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

    click.echo("PASS Database reset complete")


@click.group('business')
def business_group():
    """Business (tenant) management commands."""


@business_group.command('create')
@click.option('--name', required=True, help='Business name')
@click.option('--slug', help='Public shop id (defaults to a slug of the name)')
@click.option('--owner', 'owner_name', required=True, help='Owner display name')
@click.option('--username', required=True, help='Owner login name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--plan', type=click.Choice(BUSINESS_PLANS), default='Basic', show_default=True)
@with_appcontext
def create_business_cli(name, slug, owner_name, username, password, plan):
    """Register a shop with its Owner account and default settings."""
    try:
        business, owner = create_business(
            name=name,
            slug=slug,
            owner_name=owner_name,
            username=username,
            password=password,
            plan=plan,
        )
    except DataAccessError as e:
        db.session.rollback()
        click.echo(f"FAIL {e.message}")
        return

    click.echo(f"PASS Created business {business.name} (slug: {business.slug}, id: {business.id})")
    click.echo(f"PASS Owner login: {owner['username']}")


@business_group.command('list')
@with_appcontext
def list_businesses():
    """List all businesses."""
    businesses = db.session.query(Business).order_by(Business.created_at).all()

    if not businesses:
        click.echo("No businesses found.")
        return

    click.echo("\n" + "=" * 80)
    click.echo(f"{'Slug':<24} {'Name':<28} {'Status':<10} {'Plan':<10} {'Staff'}")
    click.echo("=" * 80)
    for business in businesses:
        staff_count = db.session.query(StaffMember).filter_by(business_id=business.id).count()
        click.echo(
            f"{business.slug:<24} {business.name[:27]:<28} {business.status:<10} {business.plan:<10} {staff_count}"
        )
    click.echo("=" * 80 + "\n")


def _set_status(slug: str, status: str) -> None:
    try:
        business = set_business_status(slug, status)
    except DataAccessError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS {business.slug} is now {business.status}")


@business_group.command('suspend')
@click.argument('slug')
@with_appcontext
def suspend_business(slug):
    """Suspend a shop: logins, sessions and the booking page stop working."""
    _set_status(slug, BUSINESS_SUSPENDED)


@business_group.command('activate')
@click.argument('slug')
@with_appcontext
def activate_business(slug):
    """Reactivate a suspended shop."""
    _set_status(slug, BUSINESS_ACTIVE)


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('purge-sessions')
@click.option('--older-than-days', type=int, default=30, show_default=True)
@with_appcontext
def purge_sessions(older_than_days):
    """Delete expired and revoked session tokens."""
    deleted = session_service.cleanup_expired_sessions(older_than_days=older_than_days)
    click.echo(f"Deleted {deleted} session tokens older than {older_than_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(business_group)
    app.cli.add_command(maintenance_group)
