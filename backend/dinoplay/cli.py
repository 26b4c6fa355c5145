# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/dinoplay/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app dinoplay <group> <command> [options]
#
# System bootstrap/repair:
# - flask --app dinoplay system init [--email admin@dinoplay.local]
#   Idempotent bootstrap: creates tables and the default admin account.
# - flask --app dinoplay system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - flask --app dinoplay users list
#   List all users with role and active status.
# - flask --app dinoplay users create --email w@dinoplay.local --full-name "Ana" --password "Dino1234" --role worker
#   Create a user (prompts if options are omitted).
#
# Daily configuration:
# - flask --app dinoplay config set --date 2026-10-19 --base-money 60000 --tokens 100
#   Create or update the config for a date (keeps its product list).
# - flask --app dinoplay config show --date 2026-10-19
#   Show the config and product catalog for a date (defaults to today).
#
# Settlements:
# - flask --app dinoplay settlements list --limit 20
#   List recent settlements.
#
# Calculator:
# - flask --app dinoplay calc --initial 100 --final 20 --vr-uses 3 --arcade-coupons 2 --vr-coupons 1
#   Print the settlement breakdown for the given counters.

import click
from flask.cli import with_appcontext

from .calculator import CalculationError, calculate_settlement, format_cop
from .extensions import db
from .models import User
from .models.auth import ROLE_ADMIN, ROLES
from .services import daily_config_service, settlement_service, worker_service
from .services.auth_service import create_user, PasswordValidationError
from .services.daily_config_service import DailyConfigError, ProductSpec
from .time_utils import parse_venue_date, venue_locale, venue_today_date


def _date_option(value):
    if not value:
        return venue_today_date()
    try:
        return parse_venue_date(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--email', default='admin@dinoplay.local', help='Admin email')
@click.option('--password', default='DinoPlay2024', help='Admin password')
@click.option('--full-name', default='Administrador', help='Admin display name')
@with_appcontext
def init_system(email, password, full_name):
    """
    Initialize Dino Play: create tables and the default admin.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing Dino Play...")

    db.create_all()
    click.echo("PASS Tables ready")

    existing = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if existing:
        click.echo(f"WARN  User '{email}' already exists, skipping...")
    else:
        try:
            create_user(email, password, ROLE_ADMIN, full_name=full_name)
            click.echo(f"PASS Created admin: {email}")
        except PasswordValidationError as e:
            click.echo(f"FAIL Password validation failed: {str(e)}")
            return
        except ValueError as e:
            click.echo(f"FAIL Failed to create admin: {str(e)}")
            return

    click.echo("\n" + "="*60)
    click.echo("DONE Dino Play Initialized Successfully!")
    click.echo("="*60)
    click.echo("\nSECURITY Change the admin password in production!")


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

    click.echo("PASS Database reset complete. Run 'flask --app dinoplay system init' to initialize.")


# =============================================================================
# USER COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--full-name', prompt=True, help='Full name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), prompt=True, help='Role')
@click.option('--phone', default=None, help='Phone number')
@with_appcontext
def create_user_cli(email, full_name, password, role, phone):
    """
    Create a new user.

    Password must be 8+ characters with at least one letter and one digit.
    """
    try:
        user = create_user(email, password, role, full_name=full_name, phone=phone)
        click.echo(f"PASS Created user: {user.email} with role '{role}' (ID: {user.id})")
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 8+ chars, at least one letter and one digit")
    except ValueError as e:
        click.echo(f"FAIL Failed to create user: {str(e)}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<35} {'Active':<8} {'Role'}")
    click.echo("="*90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.full_name:<25} {user.email:<35} {active_str:<8} {user.role or 'none'}")

    click.echo("")


# =============================================================================
# DAILY CONFIG COMMANDS
# =============================================================================

@click.group('config')
def config_group():
    """Daily configuration commands."""


@config_group.command('set')
@click.option('--date', 'date_str', default=None, help='Venue date YYYY-MM-DD (default: today)')
@click.option('--base-money', type=int, required=True, help='Cash float in pesos')
@click.option('--tokens', type=int, required=True, help='Initial token count')
@click.option('--opening', default=None, help='Opening hour HH:MM')
@click.option('--closing', default=None, help='Closing hour HH:MM')
@with_appcontext
def set_config(date_str, base_money, tokens, opening, closing):
    """Create or update a day's configuration; existing products are kept."""
    config_date = _date_option(date_str)
    existing = daily_config_service.get_config(config_date)
    products = []
    if existing:
        products = [
            ProductSpec(p.product_name, p.quantity, p.unit_price)
            for p in existing.products
        ]

    try:
        config, created = daily_config_service.save_config(
            config_date=config_date,
            base_money=base_money,
            initial_tokens=tokens,
            opening_hour=opening or (existing.opening_hour if existing else None),
            closing_hour=closing or (existing.closing_hour if existing else None),
            products=products,
        )
    except DailyConfigError as e:
        click.echo(f"FAIL {str(e)}")
        click.get_current_context().exit(1)

    verb = "Created" if created else "Updated"
    click.echo(f"PASS {verb} config for {config.config_date.isoformat()}: "
               f"base {config.base_money}, tokens {config.initial_tokens}, "
               f"{config.opening_hour}-{config.closing_hour}")


@config_group.command('show')
@click.option('--date', 'date_str', default=None, help='Venue date YYYY-MM-DD (default: today)')
@with_appcontext
def show_config(date_str):
    """Show a day's configuration and product catalog."""
    config_date = _date_option(date_str)
    config = daily_config_service.get_config(config_date)
    if not config:
        click.echo(f"No configuration for {config_date.isoformat()}.")
        return

    locale = venue_locale()
    click.echo(f"\nDate:           {config.config_date.isoformat()}")
    click.echo(f"Base money:     {format_cop(config.base_money, locale)}")
    click.echo(f"Initial tokens: {config.initial_tokens}")
    click.echo(f"Hours:          {config.opening_hour} - {config.closing_hour}")

    if not config.products:
        click.echo("Products:       none")
        return

    click.echo("\n" + "="*60)
    click.echo(f"{'Product':<30} {'Qty':<8} {'Unit price'}")
    click.echo("="*60)
    for p in config.products:
        click.echo(f"{p.product_name:<30} {p.quantity:<8} {format_cop(p.unit_price, locale)}")
    click.echo("")


# =============================================================================
# SETTLEMENT COMMANDS
# =============================================================================

@click.group('settlements')
def settlements_group():
    """Settlement inspection commands."""


@settlements_group.command('list')
@click.option('--limit', default=20, type=int, help='Number of settlements to show')
@with_appcontext
def list_settlements(limit):
    """List recent settlements, latest first."""
    settlements = settlement_service.list_recent(limit)
    if not settlements:
        click.echo("No settlements found.")
        return

    names = worker_service.names_by_id(s.worker_id for s in settlements)
    locale = venue_locale()

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<6} {'Date':<12} {'Worker':<25} {'Tokens':<12} {'Total':<16} {'Net'}")
    click.echo("="*100)
    for s in settlements:
        tokens = f"{s.initial_tokens}->{s.final_tokens}"
        click.echo(
            f"{s.id:<6} {s.settlement_date.isoformat():<12} {names.get(s.worker_id, '?'):<25} "
            f"{tokens:<12} {format_cop(s.gross_total, locale):<16} {format_cop(s.net_profit, locale)}"
        )
    click.echo("")


# =============================================================================
# CALCULATOR
# =============================================================================

@click.command('calc')
@click.option('--initial', 'initial_tokens', type=int, required=True, help='Tokens at opening')
@click.option('--final', 'final_tokens', type=int, required=True, help='Tokens at close')
@click.option('--vr-uses', type=int, default=0)
@click.option('--arcade-coupons', type=int, default=0)
@click.option('--vr-coupons', type=int, default=0)
@click.option('--base-money', type=int, default=0)
@click.option('--nequi', 'nequi_deposits', type=int, default=0)
@click.option('--product-sales', type=int, default=0)
@click.option('--locale', default='es_CO', help='Locale for currency output')
def calc(initial_tokens, final_tokens, vr_uses, arcade_coupons, vr_coupons,
         base_money, nequi_deposits, product_sales, locale):
    """Compute a settlement breakdown without touching the database."""
    try:
        b = calculate_settlement(
            initial_tokens=initial_tokens,
            final_tokens=final_tokens,
            vr_uses=vr_uses,
            arcade_coupons=arcade_coupons,
            vr_coupons=vr_coupons,
            base_money=base_money,
            nequi_deposits=nequi_deposits,
            product_sales=product_sales,
        )
    except CalculationError as e:
        raise click.ClickException(str(e))

    click.echo(f"Tokens consumed: {b.tokens_consumed}")
    click.echo(f"Arcade sales:    {format_cop(b.arcade_sales, locale)}")
    click.echo(f"VR sales:        {format_cop(b.vr_sales, locale)}")
    click.echo(f"Product sales:   {format_cop(b.product_sales, locale)}")
    click.echo(f"Total sold:      {format_cop(b.total_sold, locale)}")
    click.echo(f"Nequi deposits:  {format_cop(b.nequi_deposits, locale)}")
    click.echo(f"Net profit:      {format_cop(b.net_profit, locale)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(config_group)
    app.cli.add_command(settlements_group)
    app.cli.add_command(calc)
