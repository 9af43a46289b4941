"""ArchiveFlow CLI - Main commands."""
import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

app = typer.Typer(
    name="archiveflow",
    help="Publish audio to the Internet Archive",
    add_completion=False
)
console = Console()


def get_store_path() -> Path:
    """Credentials file: ~/.config/archiveflow/credentials.session"""
    from archiveflow.core.session import default_store_path
    return default_store_path()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def require_login(client):
    if client.keys is None:
        console.print("[red]Not logged in. Run 'archiveflow login' first.[/red]")
        raise typer.Exit(1)


@app.command()
def login(
    access_key: str = typer.Option(None, "--access-key", "-a", help="IA-S3 access key"),
    secret_key: str = typer.Option(None, "--secret-key", "-s", help="IA-S3 secret key"),
    no_verify: bool = typer.Option(False, "--no-verify", help="Save without testing the keys"),
):
    """Save IA-S3 keys (from https://archive.org/account/s3.php)."""
    from archiveflow import ArchiveClient

    if not access_key:
        access_key = typer.prompt("Access key")
    if not secret_key:
        secret_key = typer.prompt("Secret key", hide_input=True)

    async def do_login():
        async with ArchiveClient(get_store_path()) as client:
            try:
                with console.status("Testing keys..."):
                    verified = await client.login(access_key, secret_key, verify=not no_verify)
            except ValueError as e:
                console.print(f"[red]{e}[/red]")
                raise typer.Exit(1)

            if verified:
                console.print(f"[green]Keys verified and saved ({client.keys.masked()})[/green]")
            elif no_verify:
                console.print(f"[yellow]Keys saved without verification ({client.keys.masked()})[/yellow]")
            else:
                console.print("[yellow]Keys saved, but the archive rejected them or could not be reached.[/yellow]")
            console.print(f"Stored in: {client.store.path}")

    run_async(do_login())


@app.command()
def logout():
    """Delete stored keys."""
    store_file = get_store_path()
    if store_file.exists():
        store_file.unlink()
        console.print("[green]Logged out successfully[/green]")
    else:
        console.print("[yellow]No stored keys[/yellow]")


@app.command()
def whoami():
    """Show the stored access key."""
    from archiveflow.core.session import SQLiteCredentialStore

    store_file = get_store_path()
    if not store_file.exists():
        console.print("[red]Not logged in. Run 'archiveflow login' first.[/red]")
        raise typer.Exit(1)

    with SQLiteCredentialStore(store_file) as store:
        data = store.load()

    if data:
        console.print(f"Access key: {data.to_keys().masked()}")
        console.print(f"Verified: {'[green]yes[/green]' if data.verified else '[yellow]no[/yellow]'}")
        console.print(f"Updated: {data.updated_at:%Y-%m-%d %H:%M}")
        console.print(f"Store: {store_file}")
    else:
        console.print("[red]No keys stored. Run 'archiveflow login' again.[/red]")


@app.command()
def verify():
    """Test the stored keys against the archive and record the result."""
    from archiveflow import ArchiveClient

    async def do_verify():
        async with ArchiveClient(get_store_path()) as client:
            require_login(client)
            with console.status("Testing keys..."):
                verified = await client.login(client.keys.access_key, client.keys.secret_key)
            if verified:
                console.print("[green]Keys are valid[/green]")
            else:
                console.print("[red]Keys were rejected or the archive could not be reached[/red]")
                raise typer.Exit(1)

    run_async(do_verify())


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Audio file to publish", exists=True, dir_okay=False),
    title: str = typer.Option(None, "--title", help="Item title"),
    description: str = typer.Option(None, "--description", help="Item description"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Subject (repeatable)"),
    creator: str = typer.Option(None, "--creator", help="Creator"),
    context: str = typer.Option("", "--context", "-c", help="Notebook URL or source links"),
    no_wait: bool = typer.Option(False, "--no-wait", help="Don't wait for the item to finish processing"),
    skip_after: int = typer.Option(0, "--skip-after", help="Stop waiting after N seconds (0 waits until ready)"),
):
    """Publish an audio file as a new Internet Archive item."""
    from archiveflow import ArchiveClient, UploadFile
    from archiveflow.core.metadata import ContextLinkStatus, classify_context
    from archiveflow.core.workflow import Uploading, Succeeded, Failed
    from archiveflow.core.api import S3ErrorCodes

    async def do_upload():
        async with ArchiveClient(get_store_path()) as client:
            require_login(client)
            if not client.verified:
                console.print("[yellow]Stored keys were never verified. Run 'archiveflow verify'.[/yellow]")

            link_status = classify_context(context)
            if link_status is ContextLinkStatus.NOTEBOOK:
                console.print("[cyan]Notebook link detected[/cyan]")
            elif link_status is ContextLinkStatus.VALID:
                console.print("[cyan]Source link detected[/cyan]")

            flow = client.workflow()
            try:
                flow.select_file(UploadFile.from_path(file_path), context)
                with console.status("Generating metadata..."):
                    await flow.metadata_ready()

                changes = {
                    key: value for key, value in (
                        ('title', title),
                        ('description', description),
                        ('tags', tuple(tag) if tag else None),
                        ('creator', creator),
                    ) if value is not None
                }
                metadata = flow.update_metadata(**changes)

                table = Table(show_header=False)
                table.add_column("Field", style="cyan")
                table.add_column("Value")
                table.add_row("Title", metadata.title)
                table.add_row("Creator", metadata.creator)
                table.add_row("Tags", ", ".join(metadata.tags) or "-")
                table.add_row("Description", metadata.description or "-")
                console.print(table)

                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    BarColumn(),
                    TaskProgressColumn(),
                    console=console
                ) as progress:
                    task = progress.add_task(f"Uploading {file_path.name}", total=100)

                    def on_state(state):
                        if isinstance(state, Uploading):
                            progress.update(task, completed=state.progress)

                    flow.on('state', on_state)
                    await flow.publish()
                    flow.event_emitter.off('state', on_state)

                state = flow.state
                if isinstance(state, Failed):
                    console.print(f"[red]Upload failed: {state.message}[/red]")
                    code = S3ErrorCodes.find_code(state.message)
                    if code:
                        console.print(f"[yellow]{S3ErrorCodes.get_message(code)}[/yellow]")
                    if state.is_auth_error:
                        console.print("[yellow]The archive rejected your keys. Run 'archiveflow login' to enter new ones.[/yellow]")
                    raise typer.Exit(1)

                if not isinstance(state, Succeeded):
                    raise typer.Exit(1)

                console.print(f"[green]Published:[/green] {state.url}")
                console.print(f"Identifier: {state.identifier}")

                if no_wait:
                    flow.skip_verification()
                    return

                with console.status("Processing on archive.org...") as status:
                    def on_tick(elapsed):
                        minutes, seconds = divmod(elapsed, 60)
                        hint = " (Ctrl-C to stop waiting)" if flow.can_skip else ""
                        status.update(f"Processing on archive.org... {minutes}:{seconds:02d}{hint}")
                        if skip_after and elapsed >= skip_after:
                            flow.skip_verification()

                    flow.on('tick', on_tick)
                    result = await flow.wait_verified()

                if result is not None and result.done:
                    console.print(f"[green]Ready after {result.elapsed_formatted}[/green]")
                else:
                    console.print("[yellow]Stopped waiting; the item keeps processing on archive.org.[/yellow]")
            finally:
                await flow.close()

    try:
        run_async(do_upload())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped waiting; the item keeps processing on archive.org.[/yellow]")


@app.command()
def status(
    identifier: str = typer.Argument(..., help="Item identifier"),
):
    """Show the processing status of an item."""
    from archiveflow import ArchiveClient

    async def show_status():
        async with ArchiveClient() as client:
            item = await client.status(identifier)

        if not item.exists:
            console.print(f"[red]Not found (yet): {identifier}[/red]")
            raise typer.Exit(1)

        console.print(f"[bold]Identifier:[/bold] {item.identifier}")
        console.print(f"[bold]URL:[/bold] {client.config.details_url(item.identifier)}")
        console.print(f"[bold]Files:[/bold] {item.file_count}")
        console.print(f"[bold]Formats:[/bold] {', '.join(sorted(set(item.formats))) or '-'}")
        if item.ready:
            console.print("[bold]Status:[/bold] [green]ready[/green]")
        else:
            console.print("[bold]Status:[/bold] [yellow]processing[/yellow]")

    run_async(show_status())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
