"""Report commands: profit, sales, market margins, inventory and audit."""

import click
from foragetrack.cli.user_resolution import resolve_user_or_exit
from foragetrack.cli.value_parsing import CATEGORY_CHOICE, format_grams, format_money
from foragetrack.domain.aggregation import AggregationService
from foragetrack.domain.audit import IntegrityAuditor
from foragetrack.domain.entities import YearlyTotals
from foragetrack.domain.inventory import InventoryService
from foragetrack.domain.users import UserService


def _echo_yearly_table(yearly: dict[int, YearlyTotals], count_label: str = "Items") -> None:
    click.echo("-" * 80)
    click.echo(f"{'Year':<8} {'Revenue':>16} {'Cost':>16} {'Profit':>16} {count_label:>10}")
    click.echo("-" * 80)
    for year in sorted(yearly):
        data = yearly[year]
        click.echo(
            f"{year:<8} {format_money(data.revenue):>16} {format_money(data.cost):>16} "
            f"{format_money(data.profit):>16} {data.item_count:>10d}"
        )


@click.group()
def report_group():
    """Profit, sales, inventory and integrity reports."""
    pass


@report_group.command("profit")
@click.argument("user", metavar="USER")
@click.option("--category", type=CATEGORY_CHOICE, help="Only this goods class")
@click.pass_context
def profit(ctx, user: str, category: str | None):
    """Show a user's sales profit per year.

    Only sales carrying both a buy and a sell price are counted.
    """
    db = ctx.obj["db"]
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    yearly = AggregationService(db).profit_by_user_year(user_id, category=category)
    if not yearly:
        click.echo("No sales found.")
        return

    click.echo("\nProfit by Year:")
    _echo_yearly_table(yearly, count_label="Sales")


@report_group.command("sales")
@click.option("--category", type=CATEGORY_CHOICE, help="Only this goods class")
@click.pass_context
def sales(ctx, category: str | None):
    """Show every user's sales per year and the yearly totals."""
    report = AggregationService(ctx.obj["db"]).all_users_sales_by_year(category=category)
    if not report.totals_by_year:
        click.echo("No sales found.")
        return

    for entry in report.per_user:
        if not entry.sales_by_year:
            continue
        click.echo(f"\n{entry.user.alias} (ID: {entry.user.id})")
        _echo_yearly_table(entry.sales_by_year, count_label="Sales")

    click.echo("\nAll Users")
    click.echo("=" * 80)
    _echo_yearly_table(report.totals_by_year, count_label="Sales")


@report_group.command("market")
@click.option("--category", type=CATEGORY_CHOICE, help="Only this goods class")
@click.pass_context
def market(ctx, category: str | None):
    """Show per-kilogram market margins per year from the price table."""
    yearly = AggregationService(ctx.obj["db"]).price_profit_analysis(category=category)
    if not yearly:
        click.echo("No prices found.")
        return

    click.echo("\nMarket Margins by Year (per kg, summed over price entries):")
    _echo_yearly_table(yearly, count_label="Entries")


@report_group.command("inventory")
@click.argument("user", metavar="USER")
@click.option("--category", type=CATEGORY_CHOICE, help="Only this goods class")
@click.option("--species", help="Only this species")
@click.pass_context
def inventory(ctx, user: str, category: str | None, species: str | None):
    """Show a user's stock on hand (purchased minus sold)."""
    db = ctx.obj["db"]
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    lines = InventoryService(db).available_inventory(user_id, category=category, species=species)
    if not lines:
        click.echo("No inventory found.")
        return

    click.echo("\nInventory:")
    click.echo("-" * 80)
    click.echo(f"{'Category':<10} {'Species':<20} {'Purchased':>14} {'Sold':>14} {'Available':>14}")
    click.echo("-" * 80)
    for line in lines:
        marker = " (oversold)" if line.is_oversold else ""
        click.echo(
            f"{line.category.value:<10} {line.species:<20} {format_grams(line.total_purchased):>14} "
            f"{format_grams(line.total_sold):>14} {format_grams(line.available_quantity):>14}{marker}"
        )


@report_group.command("audit")
@click.pass_context
def audit(ctx):
    """Check stored records for miscategorization and stale totals."""
    report = IntegrityAuditor(ctx.obj["db"]).audit()
    click.echo(f"Found {len(report.inconsistent_records)} inconsistent records")
    for warning in report.warnings:
        click.echo(f"  {warning}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
