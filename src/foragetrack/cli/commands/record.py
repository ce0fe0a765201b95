"""Ledger record commands (purchases and sales)."""

import click
from foragetrack.cli.error_handling import handle_domain_error
from foragetrack.cli.user_resolution import resolve_user_or_exit
from foragetrack.cli.value_parsing import (
    CATEGORY_CHOICE,
    amount_or_exit,
    format_grams,
    format_money,
    quantity_or_exit,
    timestamp_or_exit,
    year_or_exit,
)
from foragetrack.domain.entities import LedgerRecord
from foragetrack.domain.errors import DomainError
from foragetrack.domain.inventory import InventoryService
from foragetrack.domain.ledger import LedgerService
from foragetrack.domain.legacy import LegacyImportService
from foragetrack.domain.users import UserService


def _echo_record(record: LedgerRecord) -> None:
    click.echo(f"  Kind: {record.kind.value}")
    click.echo(f"  Item: {record.category.value} / {record.species}")
    click.echo(f"  Quantity: {format_grams(record.quantity)}")
    click.echo(f"  Buy price: {format_money(record.buy_price)}/kg")
    click.echo(f"  Sell price: {format_money(record.sell_price)}/kg")
    click.echo(f"  Revenue: {format_money(record.total_revenue)}")
    click.echo(f"  Cost: {format_money(record.total_cost)}")
    click.echo(f"  Profit: {format_money(record.total_profit)}")
    if record.location:
        click.echo(f"  Location: {record.location}")
    if record.notes:
        click.echo(f"  Notes: {record.notes}")


def _echo_record_table(records: list[LedgerRecord]) -> None:
    click.echo("-" * 100)
    for r in records:
        click.echo(
            f"ID: {r.id:4d} | {r.created_at:%Y-%m-%d} | {r.kind.value:8s} | "
            f"{r.category.value:8s} | {r.species:18s} | {format_grams(r.quantity):>10s} | "
            f"Rev: {format_money(r.total_revenue):>9s} | Cost: {format_money(r.total_cost):>9s}"
        )


@click.group()
def record_group():
    """Record and manage purchases and sales."""
    pass


@record_group.command("sell")
@click.argument("user", metavar="USER")
@click.option("--category", required=True, type=CATEGORY_CHOICE, help="Goods class")
@click.option("--species", required=True, help="Species (e.g., 'blueberry')")
@click.option("--quantity", required=True, help="Quantity in grams (or e.g. '1.5kg')")
@click.option("--sell-price", help="Sell price per kg")
@click.option("--unit-price", help="Legacy name for --sell-price")
@click.option("--buy-price", help="Buy price per kg (cost basis)")
@click.option("--location", help="Where the goods were sold or collected")
@click.option("--notes", help="Notes")
@click.option("--date", help="Record date (YYYY-MM-DD or relative like 'yesterday')")
@click.option(
    "--use-current-price", is_flag=True, help="Fill missing prices from the price table"
)
@click.option(
    "--allow-oversell", is_flag=True, help="Record the sale even if stock on hand is short"
)
@click.pass_context
def sell(
    ctx,
    user: str,
    category: str,
    species: str,
    quantity: str,
    sell_price: str | None,
    unit_price: str | None,
    buy_price: str | None,
    location: str | None,
    notes: str | None,
    date: str | None,
    use_current_price: bool,
    allow_oversell: bool,
):
    """Record a sale.

    USER can be a user alias or ID.

    Examples:
        foragetrack record sell Alice --category berry --species blueberry --quantity 200 --sell-price 6 --buy-price 3
        foragetrack record sell 1 --category mushroom --species chanterelle --quantity 1kg --use-current-price
    """
    db = ctx.obj["db"]
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    if sell_price is not None and unit_price is not None:
        click.echo("Error: Use either --sell-price or --unit-price, not both", err=True)
        ctx.exit(1)
    if sell_price is None and unit_price is None and not use_current_price:
        click.echo("Error: Either --sell-price (or legacy --unit-price) or --use-current-price is required", err=True)
        ctx.exit(1)

    grams = quantity_or_exit(ctx, quantity)
    sell_amount = amount_or_exit(ctx, sell_price if sell_price is not None else unit_price, "sell price")
    buy_amount = amount_or_exit(ctx, buy_price, "buy price")
    created_at = timestamp_or_exit(ctx, date)

    ledger = LedgerService(db)
    try:
        if use_current_price:
            sell_amount, buy_amount = ledger.resolve_sale_prices(
                category, species, sell_price=sell_amount, buy_price=buy_amount
            )
        # A zero sell price records a purchase, which never draws on stock
        if not allow_oversell and sell_amount is not None and sell_amount > 0:
            InventoryService(db).ensure_available(user_id, category, species, grams)
        record = ledger.record_sale(
            user_id=user_id,
            category=category,
            species=species,
            quantity=grams,
            sell_price=sell_amount,
            buy_price=buy_amount,
            location=location,
            notes=notes,
            created_at=created_at,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created {'purchase' if record.is_purchase else 'sale'} {record.id}")
    _echo_record(record)
    if record.lacks_cost_basis:
        click.echo("Warning: no buy price given; this sale will be left out of profit reports.", err=True)


@record_group.command("buy")
@click.argument("user", metavar="USER")
@click.option("--category", required=True, type=CATEGORY_CHOICE, help="Goods class")
@click.option("--species", required=True, help="Species (e.g., 'blueberry')")
@click.option("--quantity", required=True, help="Quantity in grams (or e.g. '1.5kg')")
@click.option("--buy-price", help="Buy price per kg")
@click.option("--location", help="Where the goods were bought")
@click.option("--notes", help="Notes")
@click.option("--date", help="Record date (YYYY-MM-DD or relative like 'yesterday')")
@click.option(
    "--use-current-price", is_flag=True, help="Take the buy price from the price table"
)
@click.pass_context
def buy(
    ctx,
    user: str,
    category: str,
    species: str,
    quantity: str,
    buy_price: str | None,
    location: str | None,
    notes: str | None,
    date: str | None,
    use_current_price: bool,
):
    """Record a purchase.

    USER can be a user alias or ID.

    Examples:
        foragetrack record buy Alice --category berry --species blueberry --quantity 500 --buy-price 3
    """
    db = ctx.obj["db"]
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    if buy_price is None and not use_current_price:
        click.echo("Error: Either --buy-price or --use-current-price is required", err=True)
        ctx.exit(1)

    grams = quantity_or_exit(ctx, quantity)
    buy_amount = amount_or_exit(ctx, buy_price, "buy price")
    created_at = timestamp_or_exit(ctx, date)

    try:
        record = LedgerService(db).record_purchase(
            user_id=user_id,
            category=category,
            species=species,
            quantity=grams,
            buy_price=buy_amount,
            location=location,
            notes=notes,
            use_current_price=use_current_price,
            created_at=created_at,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created purchase {record.id}")
    _echo_record(record)


@record_group.command("list")
@click.argument("user", metavar="USER")
@click.option("--year", help="Only records from this year (e.g., 2024, 'last year')")
@click.pass_context
def list_records(ctx, user: str, year: str | None):
    """List a user's records, newest first."""
    db = ctx.obj["db"]
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    records = LedgerService(db).list_records(user_id, year=year_or_exit(ctx, year))
    if not records:
        click.echo("No records found.")
        return

    click.echo(f"\nRecords ({len(records)}):")
    _echo_record_table(records)


@record_group.command("purchases")
@click.argument("user", metavar="USER")
@click.option("--year", help="Only purchases from this year")
@click.pass_context
def list_purchases(ctx, user: str, year: str | None):
    """List a user's purchases, newest first."""
    db = ctx.obj["db"]
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    records = LedgerService(db).list_purchases(user_id, year=year_or_exit(ctx, year))
    if not records:
        click.echo("No purchases found.")
        return

    click.echo(f"\nPurchases ({len(records)}):")
    _echo_record_table(records)


@record_group.command("show")
@click.argument("record_id", type=int)
@click.pass_context
def show_record(ctx, record_id: int):
    """Show a record."""
    try:
        record = LedgerService(ctx.obj["db"]).require_record(record_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Record {record.id} (user {record.user_id}, {record.created_at:%Y-%m-%d %H:%M})")
    _echo_record(record)


@record_group.command("update")
@click.argument("record_id", type=int)
@click.option("--quantity", help="New quantity in grams")
@click.option("--buy-price", help="New buy price per kg")
@click.option("--sell-price", help="New sell price per kg")
@click.option("--location", help="New location (empty string to clear)")
@click.option("--notes", help="New notes (empty string to clear)")
@click.pass_context
def update_record(
    ctx,
    record_id: int,
    quantity: str | None,
    buy_price: str | None,
    sell_price: str | None,
    location: str | None,
    notes: str | None,
):
    """Update a record.

    Revenue, cost and profit are recalculated whenever the quantity or a
    price changes.

    Examples:
        foragetrack record update 5 --quantity 250
        foragetrack record update 5 --notes "Picked near the lake"
    """
    if all(v is None for v in (quantity, buy_price, sell_price, location, notes)):
        click.echo("Error: Nothing to update", err=True)
        ctx.exit(1)

    try:
        record = LedgerService(ctx.obj["db"]).update_record(
            record_id,
            quantity=quantity_or_exit(ctx, quantity),
            buy_price=amount_or_exit(ctx, buy_price, "buy price"),
            sell_price=amount_or_exit(ctx, sell_price, "sell price"),
            location=location,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if record is None:
        click.echo(f"Error: Record {record_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"Updated record {record.id}")
    _echo_record(record)


@record_group.command("delete")
@click.argument("record_id", type=int)
@click.option("--purchase-only", is_flag=True, help="Refuse unless the record is a purchase")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_record(ctx, record_id: int, purchase_only: bool, yes: bool):
    """Delete a record."""
    service = LedgerService(ctx.obj["db"])

    if not yes and not click.confirm(f"Are you sure you want to delete record {record_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        if purchase_only:
            deleted = service.delete_purchase(record_id)
        else:
            deleted = service.delete_record(record_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not deleted:
        click.echo(f"Error: Record {record_id} not found", err=True)
        ctx.exit(1)
    click.echo(f"Deleted record {record_id}")


@record_group.command("years")
@click.pass_context
def list_years(ctx):
    """List years that have records."""
    years = LedgerService(ctx.obj["db"]).list_years()
    if not years:
        click.echo("No records found.")
        return
    for year in years:
        click.echo(str(year))


@record_group.command("import")
@click.argument("export_file", type=click.Path(exists=True))
@click.option("--user", "user", required=True, help="User alias or ID that will own the records")
@click.option("--recompute", is_flag=True, help="Recalculate totals instead of keeping exported ones")
@click.pass_context
def import_records(ctx, export_file: str, user: str, recompute: bool):
    """Import records from a JSON export of the old store."""
    db = ctx.obj["db"]
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    try:
        result = LegacyImportService(db).import_file(export_file, user_id=user_id, recompute=recompute)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['imported']} records")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register record commands with main CLI."""
    cli.add_command(record_group, name="record")
