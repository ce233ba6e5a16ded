"""CLI interface for revisioning."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from revisioning.config import RevisioningConfig, load_config, merge_cli_overrides
from revisioning.content import (
    Container,
    Revision,
    SequentialIdGenerator,
    load_container,
    save_container,
)
from revisioning.errors import DocumentError
from revisioning.tracking import UNKNOWN_REASON

app = typer.Typer(
    name="revisioning",
    help="Inspect and move the staged and published revisions of content containers.",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from revisioning import __version__

        console.print(f"revisioning {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a TOML config file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log state transitions."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Revisioning - content revision and publishing tools."""
    config = load_config(config_path)
    config = merge_cli_overrides(config, log_level="DEBUG" if verbose else None)
    logging.basicConfig(level=config.logging.level, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = config


def _config(ctx: typer.Context) -> RevisioningConfig:
    return ctx.obj if isinstance(ctx.obj, RevisioningConfig) else RevisioningConfig()


def _load(ctx: typer.Context, path: Path) -> Container:
    try:
        return load_container(path, **_config(ctx).container_options())
    except DocumentError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


def _find_revision(container: Container, revision_id: str) -> Revision:
    """Look up a revision by the id typed on the command line.

    Documents usually carry integer ids, so a numeric argument is tried
    as an int before falling back to the raw string.
    """
    revision = None
    if revision_id.lstrip("-").isdigit():
        revision = container.get_revision_by_id(int(revision_id))
    if revision is None:
        revision = container.get_revision_by_id(revision_id)
    if revision is None:
        console.print(f"[red]Error:[/red] revision {revision_id} not found")
        raise typer.Exit(1)
    return revision


def _slot_label(container: Container, revision: Revision) -> str:
    if container.published_revision is revision:
        return "published"
    if container.staged_revision is revision:
        return "staged"
    return ""


@app.command()
def show(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Container document (JSON).")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the JSON projection instead of tables."),
    ] = False,
) -> None:
    """Show a container and its revision history."""
    container = _load(ctx, path)

    if as_json:
        typer.echo(json.dumps(container.json_serialize(), indent=2))
        return

    summary = Table(title=f"{container.container_type}: {container.name or '(unnamed)'}", show_header=False)
    summary.add_column("Field", style="cyan")
    summary.add_column("Value")
    for key, value in container.to_array().items():
        summary.add_row(key, "" if value is None else str(value))
    console.print(summary)

    history = Table(title="Revisions")
    history.add_column("ID", style="cyan")
    history.add_column("Slot")
    history.add_column("Was published")
    history.add_column("Created by")
    history.add_column("Created")
    for revision in container.iter_revisions():
        history.add_row(
            str(revision.revision_id),
            _slot_label(container, revision),
            "yes" if revision.was_published else "no",
            revision.tracking.created_by_user_id,
            revision.tracking.created_date.strftime(container.date_format),
        )
    console.print(history)


@app.command("last-draft")
def last_draft(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Container document (JSON).")],
) -> None:
    """Print the id of the most recent untouched draft."""
    container = _load(ctx, path)
    revision = container.get_last_saved_draft_revision()
    if revision is None:
        console.print("[yellow]No saved draft.[/yellow]")
        return
    typer.echo(str(revision.revision_id))


@app.command()
def publish(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Container document (JSON).")],
    revision_id: Annotated[str, typer.Argument(help="Revision to publish.")],
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="Record this user as the modifier."),
    ] = None,
) -> None:
    """Publish a revision; any staged revision is dropped."""
    container = _load(ctx, path)
    revision = _find_revision(container, revision_id)
    container.set_published_revision(revision)
    if user:
        container.set_modified_by(user, "Published revision")
    save_container(container, path)
    console.print(f"[green]Published[/green] revision {revision.revision_id}")


@app.command()
def stage(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Container document (JSON).")],
    revision_id: Annotated[str, typer.Argument(help="Revision to stage.")],
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="Record this user as the modifier."),
    ] = None,
) -> None:
    """Stage a revision as the pending draft."""
    container = _load(ctx, path)
    revision = _find_revision(container, revision_id)
    container.set_staged_revision(revision)
    if user:
        container.set_modified_by(user, "Staged revision")
    save_container(container, path)
    console.print(f"[green]Staged[/green] revision {revision.revision_id}")


@app.command()
def clone(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Source container document (JSON).")],
    output: Annotated[Path, typer.Argument(help="Where to write the copy.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Creator of the copy.")],
    reason: Annotated[str, typer.Option("--reason", "-r", help="Why the copy is made.")] = UNKNOWN_REASON,
    published_only: Annotated[
        bool,
        typer.Option("--published-only", help="Copy live content only; fail if nothing is published."),
    ] = False,
) -> None:
    """Copy a container with fresh tracking and a cloned revision."""
    container = _load(ctx, path)
    id_generator = SequentialIdGenerator.following(container.iter_revisions())

    if published_only:
        copy = container.new_instance_if_has_revision(user, reason, id_generator=id_generator)
        if copy is None:
            console.print(f"[yellow]{container.name or path} has no published revision; nothing copied.[/yellow]")
            raise typer.Exit(1)
    else:
        copy = container.new_instance(user, reason, id_generator=id_generator)

    save_container(copy, output)
    console.print(f"[green]Copied[/green] {container.name or path} to {output}")


if __name__ == "__main__":
    app()
