"""CLI commands for FORGE-Z.

Commands:
- init-db: Create the SQLite schema
- seed: Insert default reference data
- serve: Run the Web API
- achievements: List achievement definitions
- level: Show the level for an XP total
- progress: Show a player's progression
"""

import typer
from rich.console import Console
from rich.table import Table

from forgez.config.app_config import load_app_config
from forgez.core.achievements import (
    ACHIEVEMENTS,
    CATEGORY_LABELS,
    AchievementCategory,
    AchievementRarity,
)
from forgez.core.errors import ValidationError
from forgez.core.leveling import xp_to_next_level
from forgez.core.progression import load_player_progress
from forgez.core.quests import TOTAL_QUESTS
from forgez.db import init_db
from forgez.db.seed import seed_defaults

app = typer.Typer(
    name="forgez",
    help="FORGE-Z career exploration game: administration commands.",
    no_args_is_help=True,
)

console = Console()


@app.command(name="init-db")
def init_db_command() -> None:
    """Create the database schema."""
    config = load_app_config()
    init_db(config.db_path)
    console.print(f"[green]✓ Database ready at {config.db_path}[/green]")


@app.command()
def seed() -> None:
    """Insert the default skills taxonomy, a sample company, courses, roles and hackathons."""
    config = load_app_config()
    init_db(config.db_path)
    result = seed_defaults()

    if result.total == 0:
        console.print("[yellow]⚠ Reference data already present, nothing inserted[/yellow]")
        return

    console.print(f"[green]✓ Seeded {result.total} rows[/green]")
    console.print(f"  Skills: {result.skills}")
    console.print(f"  Companies: {result.companies}")
    console.print(f"  Learning resources: {result.resources}")
    console.print(f"  Roles: {result.roles}")
    console.print(f"  Hackathons: {result.hackathons}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    console.print(f"[green]✓ Serving FORGE-Z API on http://{host}:{port}[/green]")
    uvicorn.run("forgez.web.api:app", host=host, port=port, reload=reload)


@app.command()
def achievements(
    category: str | None = typer.Option(None, "--category", "-c", help="Filter by category"),
    rarity: str | None = typer.Option(None, "--rarity", "-r", help="Filter by rarity"),
) -> None:
    """List achievement definitions."""
    try:
        category_filter = AchievementCategory(category) if category else None
        rarity_filter = AchievementRarity(rarity) if rarity else None
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    items = [
        a
        for a in ACHIEVEMENTS
        if (category_filter is None or a.category == category_filter)
        and (rarity_filter is None or a.rarity == rarity_filter)
    ]

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Rarity")
    table.add_column("Trigger")
    table.add_column("XP", justify="right")

    for a in items:
        name = f"{a.name} [dim](secret)[/dim]" if a.is_secret else a.name
        table.add_row(
            a.id,
            name,
            CATEGORY_LABELS[a.category],
            a.rarity.value,
            a.trigger.value,
            str(a.xp_reward),
        )

    console.print(table)
    console.print(f"\n{len(items)} achievement(s)")


@app.command()
def level(xp: int = typer.Argument(..., help="Total XP")) -> None:
    """Show the level and next-level progress for an XP total."""
    info = xp_to_next_level(xp)
    console.print(f"[bold]Level {info.level}[/bold]")
    console.print(f"  Progress: {info.current}/{info.required} XP ({info.progress:.2f}%)")


@app.command()
def progress(user_id: str = typer.Argument(..., help="Player user id")) -> None:
    """Show a player's XP, level, quests and achievements."""
    config = load_app_config()
    try:
        player = load_player_progress(user_id, config.state_dir)
    except ValidationError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)

    info = xp_to_next_level(player.xp.total_xp)
    console.print(f"[bold]{user_id}[/bold]")
    console.print(f"  XP: {player.xp.total_xp}")
    console.print(f"  Level: {info.level} ({info.progress:.2f}% to next)")
    console.print(f"  Quests completed: {player.quests.completed_count()}/{TOTAL_QUESTS}")
    console.print(
        f"  Achievements unlocked: {player.achievements.unlocked_count()}/{len(ACHIEVEMENTS)}"
    )


if __name__ == "__main__":
    app()
