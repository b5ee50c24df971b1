# Overview: Flask CLI command groups for bootstrap, identity sync, and inspection.

# backend/swapdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system create-tables
#   Create any missing tables (use `flask db upgrade` for migrated deployments).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Identity sync:
# - python -m flask users upsert --id auth0|123 --first-name Ada --last-name Lovelace --department Pharmacy --role staff
#   Create or update a user keyed on the identity provider's subject id.
# - python -m flask users list [--department Pharmacy] [--role manager]
#   List synced users.
# - python -m flask users issue-token auth0|123
#   Issue a bearer session token (printed once; only its hash is stored).
#
# Inspection:
# - python -m flask swaps pending
#   List swap requests awaiting a manager decision.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import USER_ROLES
from .services import session_service, swap_service, user_service
from .validation import NotFoundError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('create-tables')
@with_appcontext
def create_tables():
    """Create any missing tables. Idempotent."""
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


@click.group('users')
def users_group():
    """Identity sync and session commands."""


@users_group.command('upsert')
@click.option('--id', 'user_id', required=True, help='Identity provider subject id')
@click.option('--email', default=None)
@click.option('--first-name', default=None)
@click.option('--last-name', default=None)
@click.option('--department', default=None)
@click.option('--role', type=click.Choice(USER_ROLES), default=None)
@click.option('--profile-image-url', default=None)
@with_appcontext
def upsert_user(user_id, email, first_name, last_name, department, role, profile_image_url):
    """Create or update a user. Only the options given are written."""
    data = {
        "id": user_id,
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        "department": department,
        "role": role,
        "profile_image_url": profile_image_url,
    }
    data = {k: v for k, v in data.items() if v is not None}

    try:
        user = user_service.upsert_user(data)
    except ValidationError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Synced user {user.id} ({user.display_name}, {user.role}, {user.department or '-'})")


@users_group.command('list')
@click.option('--department', default=None, help='Filter by department')
@click.option('--role', type=click.Choice(USER_ROLES), default=None, help='Filter by role')
@with_appcontext
def list_users(department, role):
    """List synced users."""
    users = user_service.list_users(department=department, role=role)

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<24} {'Name':<28} {'Department':<20} {'Role':<8} {'Active'}")
    click.echo("="*90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<24} {user.display_name:<28} {(user.department or '-'):<20} {user.role:<8} {active_str}")

    click.echo("="*90 + "\n")


@users_group.command('issue-token')
@click.argument('user_id')
@with_appcontext
def issue_token(user_id):
    """Issue a bearer session token for USER_ID."""
    try:
        session, token = session_service.create_session(user_id)
    except (NotFoundError, ValidationError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Session {session.id} expires {session.to_dict()['expires_at']}")
    click.echo(token)


@click.group('swaps')
def swaps_group():
    """Swap request inspection commands."""


@swaps_group.command('pending')
@with_appcontext
def list_pending():
    """List swap requests awaiting a manager decision."""
    views = swap_service.list_pending_for_approval()

    if not views:
        click.echo("No pending swap requests.")
        return

    for v in views:
        volunteer = v.volunteer.display_name if v.volunteer else "-"
        click.echo(
            f"#{v.id:<5} {v.priority:<9} {v.shift.date} {v.shift.time_range:<11} "
            f"{v.shift.department:<16} {v.requester.display_name:<24} volunteer={volunteer}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(swaps_group)
