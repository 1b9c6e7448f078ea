"""
Lectio - Main CLI Application

Command-line interface for reading chapters and maintaining the caches.
"""
import asyncio
import json
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_config
from content.service import create_service
from core.books import get_book_catalog
from core.errors import LectioError, UnknownTranslation
from observability import setup_observability, shutdown_observability

# Initialize app
app = typer.Typer(
    name="lectio",
    help="Lectio - chapter retrieval and cache engine",
    add_completion=False
)

console = Console()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Configure logging and tracing before any command runs."""
    config = get_config()
    if verbose:
        config.logging.level = "DEBUG"
    setup_observability(config)


@app.command()
def books():
    """List the books with their chapter counts."""
    table = Table(title="Books")
    table.add_column("#", justify="right")
    table.add_column("Code", style="cyan")
    table.add_column("Name")
    table.add_column("Testament")
    table.add_column("Chapters", justify="right", style="green")

    for book in get_book_catalog():
        table.add_row(str(book.ordinal), book.id, book.name, book.testament.value, str(book.chapters))

    console.print(table)


@app.command()
def translations():
    """List the translations offered for selection."""
    async def _translations():
        async with create_service(get_config()) as service:
            return (
                await service.get_available_translations(),
                await service.get_preferred_translation(),
            )

    available, preferred = asyncio.run(_translations())

    table = Table(title="Translations")
    table.add_column("", width=1)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Language")
    for descriptor in available:
        marker = "*" if descriptor.id == preferred else ""
        table.add_row(marker, descriptor.id, descriptor.name, descriptor.language_name)

    console.print(table)


@app.command()
def read(
    book: str = typer.Argument(..., help="Book code or name (e.g., JHN or John)"),
    chapter: int = typer.Argument(..., help="Chapter number"),
    translation: Optional[str] = typer.Option(None, "--translation", "-t", help="Translation ID"),
    as_json: bool = typer.Option(False, "--json", help="Print the chapter as JSON"),
):
    """Print one chapter."""
    async def _read():
        async with create_service(get_config()) as service:
            return await service.get_chapter(book, chapter, translation)

    content = asyncio.run(_read())

    if as_json:
        console.print_json(json.dumps({
            "translation": content.key.translation_id,
            "book": content.key.book_name,
            "chapter": content.key.chapter,
            "served_by": content.served_by,
            "placeholder": content.placeholder,
            "verses": [verse.to_dict() for verse in content.verses],
        }))
        return

    title = f"{content.key.book_name} {content.key.chapter}"
    if content.placeholder:
        subtitle = "[yellow]content unavailable[/yellow]"
    else:
        subtitle = content.served_by or content.key.translation_id
    body = "\n".join(f"[bold]{verse.number}[/bold] {verse.text}" for verse in content.verses)
    console.print(Panel(body, title=title, subtitle=subtitle, border_style="blue"))


@app.command()
def prefer(
    translation_id: str = typer.Argument(..., help="Translation ID to read by default"),
):
    """Set the preferred translation."""
    async def _prefer():
        async with create_service(get_config()) as service:
            await service.set_preferred_translation(translation_id)

    try:
        asyncio.run(_prefer())
    except UnknownTranslation as e:
        console.print(f"[red]{e.message}[/red]")
        if e.suggestions:
            console.print(f"Available: {', '.join(e.suggestions)}")
        raise typer.Exit(1)

    console.print(f"[green]Preferred translation set to {translation_id}[/green]")


@app.command("clear-content")
def clear_content():
    """Remove cached chapter content."""
    async def _clear():
        async with create_service(get_config()) as service:
            return await service.clear_content_cache()

    try:
        removed = asyncio.run(_clear())
    except LectioError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Removed {removed} cached chapters[/green]")


@app.command("clear-catalog")
def clear_catalog():
    """Remove the cached translation catalog."""
    async def _clear():
        async with create_service(get_config()) as service:
            return await service.clear_catalog_cache()

    try:
        removed = asyncio.run(_clear())
    except LectioError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Removed {removed} catalog entries[/green]")


def main():
    """Main entry point."""
    try:
        app()
    finally:
        shutdown_observability()


if __name__ == "__main__":
    main()
