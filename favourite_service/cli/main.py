"""
CLI interface for the Favourite Service.

Provides command-line access to favourite storage and aggregation.
"""

import sys
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from favourite_service.config.loader import ServiceConfig, load_service_config
from favourite_service.core.errors import FavouriteNotFoundError, InvalidKeyError
from favourite_service.core.factory import open_aggregator
from favourite_service.core.keys import FavouriteId, format_like_date, parse_like_date
from favourite_service.logging_config import configure_logging
from favourite_service.storage.models import FavouriteAggregate
from favourite_service.storage.repository import initialize_schema

app = typer.Typer()
console = Console()

EXIT_CODE_OK = 0
EXIT_CODE_FAIL = 1

UNAVAILABLE = "[dim]unavailable[/]"


def _config(ctx: typer.Context) -> ServiceConfig:
    return ctx.obj["config"]


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML service configuration"
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR)"
    )
):
    """Favourite Service CLI."""
    try:
        configure_logging(log_level)
        ctx.obj = {"config": load_service_config(config_path)}
    except Exception as e:
        console.print(f"[red]Configuration error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def init(ctx: typer.Context):
    """Initialize the favourites database."""
    try:
        initialize_schema(_config(ctx).database.path)
        console.print("[green]✓[/] Database initialized successfully")
        sys.exit(EXIT_CODE_OK)
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command("list")
def list_favourites(ctx: typer.Context):
    """List every favourite with user and product detail."""
    try:
        with open_aggregator(_config(ctx)) as aggregator:
            aggregates = aggregator.find_all()
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    
    if not aggregates:
        console.print("\n[bold yellow]No favourites found[/]\n")
        sys.exit(EXIT_CODE_OK)
    
    _display_favourites(aggregates)
    sys.exit(EXIT_CODE_OK)


@app.command()
def show(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User id"),
    product_id: str = typer.Argument(..., help="Product id"),
    like_date: str = typer.Argument(..., help="Like date as DD-MM-YYYY__HH:mm:ss:SSSSSS")
):
    """Show one favourite with user and product detail."""
    try:
        key = FavouriteId.from_parts(user_id, product_id, like_date)
        with open_aggregator(_config(ctx)) as aggregator:
            aggregate = aggregator.find_by_id(key)
    except (InvalidKeyError, FavouriteNotFoundError) as e:
        console.print(f"[red]{str(e)}[/]")
        sys.exit(EXIT_CODE_FAIL)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    
    _display_favourite(aggregate)
    sys.exit(EXIT_CODE_OK)


@app.command()
def add(
    ctx: typer.Context,
    user_id: int = typer.Argument(..., help="User id"),
    product_id: int = typer.Argument(..., help="Product id"),
    like_date: Optional[str] = typer.Option(
        None,
        "--like-date",
        "-d",
        help="Like date as DD-MM-YYYY__HH:mm:ss:SSSSSS (defaults to now)"
    )
):
    """Record that a user liked a product."""
    _store(ctx, user_id, product_id, like_date, update=False)


@app.command()
def update(
    ctx: typer.Context,
    user_id: int = typer.Argument(..., help="User id"),
    product_id: int = typer.Argument(..., help="Product id"),
    like_date: str = typer.Argument(..., help="Like date as DD-MM-YYYY__HH:mm:ss:SSSSSS")
):
    """Overwrite an existing favourite."""
    _store(ctx, user_id, product_id, like_date, update=True)


@app.command()
def delete(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User id"),
    product_id: str = typer.Argument(..., help="Product id"),
    like_date: str = typer.Argument(..., help="Like date as DD-MM-YYYY__HH:mm:ss:SSSSSS")
):
    """Delete a favourite. Deleting a missing favourite succeeds."""
    try:
        key = FavouriteId.from_parts(user_id, product_id, like_date)
        with open_aggregator(_config(ctx)) as aggregator:
            aggregator.delete_by_id(key)
    except InvalidKeyError as e:
        console.print(f"[red]{str(e)}[/]")
        sys.exit(EXIT_CODE_FAIL)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    
    console.print(f"[green]✓[/] Deleted favourite {key.to_path()}")
    sys.exit(EXIT_CODE_OK)


def _store(
    ctx: typer.Context,
    user_id: int,
    product_id: int,
    like_date: Optional[str],
    update: bool
) -> None:
    try:
        liked_at = parse_like_date(like_date) if like_date else datetime.now()
        aggregate = FavouriteAggregate(
            user_id=user_id,
            product_id=product_id,
            like_date=liked_at
        )
        with open_aggregator(_config(ctx)) as aggregator:
            if update:
                saved = aggregator.update(aggregate)
            else:
                saved = aggregator.save(aggregate)
    except InvalidKeyError as e:
        console.print(f"[red]{str(e)}[/]")
        sys.exit(EXIT_CODE_FAIL)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    
    verb = "Updated" if update else "Saved"
    console.print(f"[green]✓[/] {verb} favourite {saved.key.to_path()}")
    sys.exit(EXIT_CODE_OK)


def _user_name(aggregate: FavouriteAggregate) -> str:
    user = aggregate.user
    if user is None:
        return UNAVAILABLE
    name = " ".join(part for part in (user.first_name, user.last_name) if part)
    return name or str(user.user_id)


def _product_title(aggregate: FavouriteAggregate) -> str:
    product = aggregate.product
    if product is None:
        return UNAVAILABLE
    return product.product_title or str(product.product_id)


def _display_favourites(aggregates):
    """Display favourites as a table."""
    table = Table(title="Favourites")
    table.add_column("User", justify="right")
    table.add_column("Product", justify="right")
    table.add_column("Liked at")
    table.add_column("User name")
    table.add_column("Product title")
    
    for aggregate in aggregates:
        table.add_row(
            str(aggregate.user_id),
            str(aggregate.product_id),
            format_like_date(aggregate.like_date),
            _user_name(aggregate),
            _product_title(aggregate)
        )
    
    console.print(table)


def _display_favourite(aggregate: FavouriteAggregate):
    """Display a single favourite."""
    console.print("\n[bold]Favourite[/bold]")
    console.print("-" * 40)
    console.print(f"User id: {aggregate.user_id}")
    console.print(f"Product id: {aggregate.product_id}")
    console.print(f"Liked at: {format_like_date(aggregate.like_date)}")
    console.print(f"User: {_user_name(aggregate)}")
    
    product = aggregate.product
    console.print(f"Product: {_product_title(aggregate)}")
    if product is not None and product.price_unit is not None:
        console.print(f"Price: ${product.price_unit:,.2f}")
    
    missing = aggregate.missing_sources()
    if missing:
        console.print(f"\n[yellow]Detail unavailable from: {', '.join(missing)}[/]")


if __name__ == "__main__":
    app()
