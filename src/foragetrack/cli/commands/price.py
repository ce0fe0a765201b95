"""Market price commands."""

import click
from foragetrack.cli.error_handling import handle_domain_error
from foragetrack.cli.value_parsing import CATEGORY_CHOICE, amount_or_exit, format_money, year_or_exit
from foragetrack.domain.entities import PriceEntry
from foragetrack.domain.errors import DomainError
from foragetrack.domain.prices import PriceService


def _echo_price(price: PriceEntry) -> None:
    click.echo(
        f"ID: {price.id:3d} | {price.year} | {price.category.value:8s} | {price.species:18s} | "
        f"Buy: {format_money(price.buy_price):>8s}/kg | Sell: {format_money(price.sell_price):>8s}/kg | "
        f"Updated: {price.updated_at:%Y-%m-%d}"
    )


@click.group()
def price_group():
    """Manage market prices per kilogram."""
    pass


@price_group.command("set")
@click.option("--category", required=True, type=CATEGORY_CHOICE, help="Goods class")
@click.option("--species", required=True, help="Species (e.g., 'blueberry')")
@click.option("--year", required=True, help="Price year (e.g., 2024, 'this year')")
@click.option("--buy-price", required=True, help="Buy price per kg")
@click.option("--sell-price", required=True, help="Sell price per kg")
@click.pass_context
def set_price(ctx, category: str, species: str, year: str, buy_price: str, sell_price: str):
    """Create or overwrite the price for a species and year.

    Examples:
        foragetrack price set --category berry --species blueberry --year 2024 --buy-price 3 --sell-price 6
    """
    try:
        price = PriceService(ctx.obj["db"]).upsert_price(
            category=category,
            species=species,
            year=year_or_exit(ctx, year),
            buy_price=amount_or_exit(ctx, buy_price, "buy price"),
            sell_price=amount_or_exit(ctx, sell_price, "sell price"),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Saved price {price.id}")
    _echo_price(price)


@price_group.command("list")
@click.option("--year", help="Only prices for this year")
@click.option("--category", type=CATEGORY_CHOICE, help="Only this goods class")
@click.option("--species", help="Only this species")
@click.pass_context
def list_prices(ctx, year: str | None, category: str | None, species: str | None):
    """List prices, most recent year first."""
    prices = PriceService(ctx.obj["db"]).list_prices(
        year=year_or_exit(ctx, year), category=category, species=species
    )
    if not prices:
        click.echo("No prices found.")
        return

    click.echo("\nPrices:")
    click.echo("-" * 100)
    for price in prices:
        _echo_price(price)


@price_group.command("current")
@click.option("--category", required=True, type=CATEGORY_CHOICE, help="Goods class")
@click.option("--species", required=True, help="Species")
@click.pass_context
def current_price(ctx, category: str, species: str):
    """Show the price that applies now (current year, else most recent)."""
    price = PriceService(ctx.obj["db"]).get_current(category, species)
    if price is None:
        click.echo(f"Error: No price found for {category} '{species}'", err=True)
        ctx.exit(1)
    _echo_price(price)


@price_group.command("show")
@click.argument("price_id", type=int)
@click.pass_context
def show_price(ctx, price_id: int):
    """Show a price entry."""
    price = PriceService(ctx.obj["db"]).get_price(price_id)
    if price is None:
        click.echo(f"Error: Price {price_id} not found", err=True)
        ctx.exit(1)
    _echo_price(price)


@price_group.command("update")
@click.argument("price_id", type=int)
@click.option("--buy-price", help="New buy price per kg")
@click.option("--sell-price", help="New sell price per kg")
@click.pass_context
def update_price(ctx, price_id: int, buy_price: str | None, sell_price: str | None):
    """Update the prices of an entry."""
    if buy_price is None and sell_price is None:
        click.echo("Error: Nothing to update", err=True)
        ctx.exit(1)

    try:
        price = PriceService(ctx.obj["db"]).update_price(
            price_id,
            buy_price=amount_or_exit(ctx, buy_price, "buy price"),
            sell_price=amount_or_exit(ctx, sell_price, "sell price"),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if price is None:
        click.echo(f"Error: Price {price_id} not found", err=True)
        ctx.exit(1)
    click.echo(f"Updated price {price.id}")
    _echo_price(price)


@price_group.command("delete")
@click.argument("price_id", type=int)
@click.pass_context
def delete_price(ctx, price_id: int):
    """Delete a price entry."""
    if not PriceService(ctx.obj["db"]).delete_price(price_id):
        click.echo(f"Error: Price {price_id} not found", err=True)
        ctx.exit(1)
    click.echo(f"Deleted price {price_id}")


@price_group.command("years")
@click.pass_context
def list_years(ctx):
    """List years that have prices."""
    years = PriceService(ctx.obj["db"]).list_years()
    if not years:
        click.echo("No prices found.")
        return
    for year in years:
        click.echo(str(year))


def register_commands(cli):
    """Register price commands with main CLI."""
    cli.add_command(price_group, name="price")
