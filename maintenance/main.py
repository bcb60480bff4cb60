#!/usr/bin/env python3
"""
TreeHouse Books - Database Maintenance Entry Point

One-off maintenance tasks that run directly against the dashboard's MongoDB
database. Every command opens its own connection and closes it when done.

Usage:
    python -m maintenance.main dedupe-users --dry-run
    python -m maintenance.main seed-admin
    python -m maintenance.main drop-index oktaId_1
    python -m maintenance.main import-stops scripts/sampleTravelingStops.json
"""

import sys
from pathlib import Path
from typing import NoReturn

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from maintenance.backup import create_backup, list_backups
from maintenance.config import settings
from maintenance.database import TravelingStopStore, UserStore, connect
from maintenance.deduplication import CleanupReport, DuplicateResolver, KeepReason, ResolutionPlan
from maintenance.exceptions import DeletionAborted, MaintenanceError, StoreConnectionError
from maintenance.indexes import IndexInfo, IndexManager
from maintenance.ingesters import Outcome, RecordOutcome, TravelingStopImporter
from maintenance.seeding import seed_admin
from maintenance.telemetry import capture_exception, init_telemetry


console = Console()


def fail(error: Exception, command: str) -> NoReturn:
    """Report a fatal error and exit non-zero."""
    if isinstance(error, StoreConnectionError):
        console.print(f"[red]✗ MongoDB connection failed: {error}[/red]")
    else:
        console.print(f"[red]✗ Error: {error}[/red]")
    logger.error(f"{command} failed: {error}")
    capture_exception(error, command=command)
    sys.exit(1)


def print_users(users, title: str) -> None:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Email")
    table.add_column("Name")
    table.add_column("Role")
    table.add_column("Created")
    for position, user in enumerate(users, start=1):
        created = user.created_at.strftime("%Y-%m-%d %H:%M") if user.created_at else "-"
        table.add_row(str(position), user.email, user.full_name, user.role, created)
    console.print(table)


def print_indexes(indexes: list[IndexInfo], title: str) -> None:
    console.print(f"\n[bold]{title}[/bold]")
    for index in indexes:
        console.print(f"   - {index.describe()}")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug):
    """TreeHouse Books - Database Maintenance"""
    if debug:
        from maintenance.utils.logging import setup_logging
        setup_logging(level="DEBUG")
    init_telemetry()


# =============================================================================
# Users
# =============================================================================

def print_plan(plan: ResolutionPlan) -> None:
    for group in plan.groups:
        console.print(f"\n[yellow]⚠ Found {group.size} accounts with email: {group.email}[/yellow]")
        why = "most recent admin" if group.reason is KeepReason.ADMIN else "most recent account"
        console.print(f"   [green]✓ Keeping:[/green] {group.kept.describe()} [dim]({why})[/dim]")
        for user in group.removed:
            console.print(f"   [red]✗ Removing:[/red] {user.describe()}")


def print_report(report: CleanupReport) -> None:
    console.print(f"\n[bold]Deleted {report.deleted_count} duplicate users[/bold]")
    if report.already_gone:
        console.print(f"[dim]{len(report.already_gone)} were already gone[/dim]")
    if report.backup_path:
        console.print(f"Backup: {report.backup_path}")


@cli.command("dedupe-users")
@click.option("--dry-run", is_flag=True, help="Show what would be removed without deleting")
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation")
@click.option("--no-backup", is_flag=True, help="Skip the JSON backup of removed users")
def dedupe_users(dry_run: bool, yes: bool, no_backup: bool):
    """
    Remove duplicate user accounts.

    Users sharing an email (case-insensitive) are collapsed to one: the most
    recent admin if there is one, otherwise the most recent account.
    """
    console.print("\n[bold blue]TreeHouse Books - Duplicate User Cleanup[/bold blue]\n")

    backup_path = None
    try:
        with connect() as database:
            resolver = DuplicateResolver(UserStore.from_database(database))
            plan = resolver.plan()
            console.print(f"Found {plan.total_records} users total")

            if not plan.duplicates_found:
                console.print("[green]✓ No duplicates found![/green]")
                return

            print_plan(plan)
            to_delete = plan.records_to_delete

            if dry_run:
                console.print(f"\n[yellow]Dry run: {len(to_delete)} users would be removed[/yellow]")
                return

            if not yes and not click.confirm(f"\nDelete {len(to_delete)} duplicate users?"):
                console.print("Cancelled, nothing deleted")
                return

            if not no_backup:
                backup = create_backup("users", [user.to_document() for user in to_delete])
                if not backup.success:
                    raise MaintenanceError(f"{backup.error}; nothing deleted")
                backup_path = backup.path

            report = resolver.apply(plan)
            report.backup_path = backup_path
            print_report(report)
            console.print("[green]✓ Cleanup complete![/green]\n")

            print_users(resolver.store.list_by_email(), "Remaining users")

    except DeletionAborted as e:
        if e.report is not None:
            e.report.backup_path = backup_path
            print_report(e.report)
        fail(e, "dedupe-users")
    except MaintenanceError as e:
        fail(e, "dedupe-users")


@cli.command()
def users():
    """List every user account."""
    try:
        with connect() as database:
            accounts = UserStore.from_database(database).fetch_all()
    except MaintenanceError as e:
        fail(e, "users")

    console.print(f"\nTotal users in database: {len(accounts)}\n")
    if accounts:
        print_users(accounts, "Users")
    else:
        console.print("No users found in database.")


@cli.command("seed-admin")
@click.option("--email", default=None, help="Admin email (defaults to ADMIN_EMAIL)")
@click.option("--first-name", default=None, help="Defaults to ADMIN_FIRST_NAME")
@click.option("--last-name", default=None, help="Defaults to ADMIN_LAST_NAME")
def seed_admin_command(email: str | None, first_name: str | None, last_name: str | None):
    """Create the admin account if it does not exist yet."""
    overrides = {
        key: value
        for key, value in (("email", email), ("first_name", first_name), ("last_name", last_name))
        if value
    }
    profile = settings.admin.model_copy(update=overrides)

    try:
        with connect() as database:
            result = seed_admin(UserStore.from_database(database), profile)
    except MaintenanceError as e:
        fail(e, "seed-admin")

    if result.created:
        console.print(f"[green]✓ Admin created successfully:[/green] {result.user.email} - ID: {result.user.id}")
    else:
        console.print(f"[yellow]Admin already exists:[/yellow] {result.user.email} ({result.user.role})")


# =============================================================================
# Indexes
# =============================================================================

@cli.command()
@click.option("--collection", default=None, help="Collection name (defaults to users)")
def indexes(collection: str | None):
    """List indexes on a collection."""
    name = collection or settings.maintenance.users_collection
    try:
        with connect() as database:
            found = IndexManager(database[name]).list_indexes()
    except MaintenanceError as e:
        fail(e, "indexes")

    print_indexes(found, f"Current indexes on {name} collection:")


@cli.command("drop-index")
@click.argument("index_name", required=False)
@click.option("--collection", default=None, help="Collection name (defaults to users)")
def drop_index(index_name: str | None, collection: str | None):
    """
    Drop a secondary index.

    INDEX_NAME defaults to the legacy oktaId_1 unique index that blocks new
    registrations. A missing index is not an error.
    """
    index_name = index_name or settings.maintenance.legacy_index
    name = collection or settings.maintenance.users_collection

    try:
        with connect() as database:
            result = IndexManager(database[name]).migrate(index_name)
    except MaintenanceError as e:
        fail(e, "drop-index")

    print_indexes(result.before, f"Current indexes on {name} collection:")
    if result.dropped:
        console.print(f"\n[green]✓ Successfully dropped {index_name} index[/green]")
        print_indexes(result.after, "Remaining indexes:")
    else:
        console.print(f"\n[green]✓ {index_name} index does not exist (already removed or never existed)[/green]")


# =============================================================================
# Imports
# =============================================================================

def print_outcome(outcome: RecordOutcome) -> None:
    if outcome.outcome is Outcome.IMPORTED:
        console.print(f"  [green]✓ Imported:[/green] {outcome.label}")
    elif outcome.outcome is Outcome.SKIPPED:
        console.print(f"  [yellow]⚠ Skipped:[/yellow] {outcome.reason} - {outcome.label}")
    else:
        console.print(f"  [red]✗ Error importing {outcome.label}:[/red] {outcome.reason}")


@cli.command("import-stops")
@click.argument("file", type=click.Path(path_type=Path), required=False)
def import_stops(file: Path | None):
    """
    Import Traveling Tree House stops from a JSON file.

    FILE must contain an array of stop objects; it defaults to the configured
    sample file.
    """
    file = file or settings.maintenance.stops_file
    console.print("\n[bold blue]Traveling Tree House - Data Import[/bold blue]")
    console.print(f"Reading data from: {file}\n")

    try:
        with connect() as database:
            store = TravelingStopStore.from_database(database)
            importer = TravelingStopImporter(store, progress_callback=print_outcome)
            result = importer.run_file(file)
            total_in_db = store.count()
            by_type = store.stats_by_type()
    except MaintenanceError as e:
        fail(e, "import-stops")

    console.print("\n[bold]Import Summary[/bold]")
    summary = Table(show_header=False)
    summary.add_row("Total records in file", str(result.records_total))
    summary.add_row("[green]Successfully imported[/green]", str(result.imported))
    summary.add_row("[yellow]Skipped (validation)[/yellow]", str(result.skipped))
    summary.add_row("[red]Errors[/red]", str(result.errors))
    console.print(summary)

    console.print(f"\nTotal Traveling Stops in database: {total_in_db}")
    if by_type:
        table = Table(title="Stops by type")
        table.add_column("Type")
        table.add_column("Stops", justify="right")
        table.add_column("Books", justify="right")
        table.add_column("Avg books", justify="right")
        for row in by_type:
            table.add_row(
                str(row.get("stopType")),
                str(row.get("count", 0)),
                str(row.get("totalBooks", 0)),
                str(row.get("avgBooks", 0)),
            )
        console.print(table)


# =============================================================================
# Backups
# =============================================================================

@cli.command()
def backups():
    """List JSON backups written before destructive commands."""
    found = list_backups()
    if not found:
        console.print("No backups found.")
        return

    table = Table(title="Backups")
    table.add_column("Timestamp")
    table.add_column("Contents")
    table.add_column("Path")
    for timestamp, label, path in found:
        table.add_row(timestamp, label, str(path))
    console.print(table)


if __name__ == "__main__":
    cli()
