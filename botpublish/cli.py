"""
botpublish CLI - Command line interface for publishing bots.

Usage:
    botpublish --help                              Show all commands
    botpublish publish profile.yml ./mybot         Publish and wait for the deploy
    botpublish publish profile.yml ./mybot --no-wait
    botpublish history my-bot production           Show persisted publish history
    botpublish serve                               Run the HTTP API
"""

import asyncio
import json
from pathlib import Path

import typer
import yaml

app = typer.Typer(
    name="botpublish",
    help="botpublish CLI - stage and deploy bots",
    no_args_is_help=True,
)


# --- Output helpers ---


def _print_success(message: str) -> None:
    """Print a success message."""
    typer.echo(f"  ✅ {message}")


def _print_warning(message: str) -> None:
    """Print a warning message."""
    typer.echo(f"  ⚠️ {message}")


def _print_error(message: str) -> None:
    """Print an error message to stderr."""
    typer.echo(f"❌ {message}", err=True)


def _load_profile_data(profile_file: Path) -> dict:
    """Read a publishing profile from YAML or JSON."""
    with open(profile_file) as f:
        if profile_file.suffix == ".json":
            return json.load(f)
        return yaml.safe_load(f) or {}


def _read_bot_files(bot_dir: Path) -> list[dict[str, str]]:
    """Collect every text file under the bot directory."""
    files = []
    for path in sorted(bot_dir.rglob("*")):
        if not path.is_file():
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            _print_warning(f"Skipping binary file {path.relative_to(bot_dir)}")
            continue
        files.append({"relativePath": path.relative_to(bot_dir).as_posix(), "content": content})
    return files


@app.command()
def publish(
    profile_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Profile YAML/JSON"),
    bot_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Bot assets directory"),
    bot_id: str | None = typer.Option(None, "--bot-id", help="Bot id (defaults to directory name)"),
    comment: str | None = typer.Option(None, "--comment", "-c", help="Comment stored with the job"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for the deploy to finish"),
):
    """Stage a bot directory and deploy it with a publishing profile."""
    from botpublish.core.logging import setup_logging
    from botpublish.schemas.publish import BotProject, PublishMetadata, PublishProfile
    from botpublish.services.publisher import get_publisher

    setup_logging()

    profile = PublishProfile.model_validate(_load_profile_data(profile_file))
    bot_settings_file = bot_dir / "settings" / "appsettings.json"
    project = BotProject(
        id=bot_id or bot_dir.name,
        name=bot_dir.name,
        files=_read_bot_files(bot_dir),
        settings=json.loads(bot_settings_file.read_text()) if bot_settings_file.exists() else {},
    )

    async def run() -> int:
        publisher = get_publisher()
        record = await publisher.publish(profile, project, PublishMetadata(comment=comment))
        typer.echo(f"\n🚀 {record.status} {record.result.message} (job {record.result.id})")

        if record.status != 202 or not wait:
            return record.status

        await publisher.wait_for_pending()
        final = await publisher.get_status(profile, project)
        if final.result.log:
            typer.echo(final.result.log)
        if final.status == 200:
            _print_success(final.result.message)
        else:
            _print_error(final.result.message)
        return final.status

    status = asyncio.run(run())
    if status >= 400:
        raise typer.Exit(1)


@app.command()
def history(
    bot_id: str = typer.Argument(..., help="Bot id"),
    profile_name: str = typer.Argument(..., help="Publishing profile name"),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of entries to show"),
):
    """Show persisted publish history for a bot and profile."""
    from pydantic import ValidationError

    from botpublish.config import get_config
    from botpublish.services.history_store import read_history_file

    config = get_config()
    if not config.history.persist:
        _print_warning("History persistence is disabled (PERSIST_HISTORY=false)")

    try:
        table = read_history_file(config.history.file)
    except ValidationError as e:
        _print_error(f"Could not read history file {config.history.file}: {e}")
        raise typer.Exit(1)

    entries = table.get(bot_id, {}).get(profile_name, [])
    if not entries:
        typer.echo(f"No history for {bot_id}/{profile_name}")
        return

    for entry in entries[:limit]:
        icon = "✅" if entry.status == 200 else "❌"
        time = entry.time.strftime("%Y-%m-%d %H:%M:%S") if entry.time else "-"
        typer.echo(f"{icon} {time} [{entry.status}] {entry.message} ({entry.id})")
        if entry.comment:
            typer.echo(f"     {entry.comment}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
):
    """Run the publish HTTP API."""
    import uvicorn

    uvicorn.run("botpublish.main:app", host=host, port=port)


if __name__ == "__main__":
    app()
