"""
Artifact Vault Command Line Interface (CLI)

This module is the presentation layer of Artifact Vault. It renders the
state machine's view states with rich and turns user input into intents:
one-shot commands list or show artifacts, and the interactive shell walks
through the full create, edit, view and delete flow.
"""

import asyncio
import cmd
import json
import logging
import shlex
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from artifact_vault.core.client import ArtifactClient, ImageFile
from artifact_vault.core.errors import VaultError
from artifact_vault.core.events import (
    AppStarted,
    BackRequested,
    CancelRequested,
    DeleteRequested,
    DraftChanged,
    EntrySelectedForEdit,
    EntrySelectedForView,
    ErrorDismissed,
    Event,
    ImageChosen,
    NewEntryRequested,
    RefreshRequested,
    SubmitCreate,
    SubmitUpdate,
)
from artifact_vault.core.fallback import demo_artifacts, is_demo_id
from artifact_vault.core.formatting import (
    NO_FINGERPRINT,
    describe,
    fingerprint_rows,
    format_image_status,
)
from artifact_vault.core.machine import ArtifactStateMachine
from artifact_vault.core.settings import VaultSettings
from artifact_vault.models.artifact import Artifact
from artifact_vault.models.state import AppState, ViewState

app = typer.Typer(rich_markup_mode="markdown")
console = Console()


def output_json(data: Any) -> None:
    """Helper to output data as JSON."""
    print(json.dumps(data, default=str, indent=2))


def confirm_prompt(message: str) -> bool:
    return Confirm.ask(f"[yellow]{message}[/yellow]", console=console, default=False)


def get_settings(ctx: typer.Context) -> VaultSettings:
    if ctx.obj is None:
        return VaultSettings.from_env()
    return ctx.obj


def build_machine(settings: VaultSettings, confirm=None) -> ArtifactStateMachine:
    """Initializes a state machine wired to a client for the configured service."""
    client = ArtifactClient.from_settings(settings)
    return ArtifactStateMachine(client, confirm=confirm)


async def _load_artifact_image(
    machine: ArtifactStateMachine, artifact_id: str
) -> Optional[bytes]:
    """Fetch image bytes; any failure degrades to the placeholder."""
    if is_demo_id(artifact_id):
        return None
    try:
        return await machine.client.fetch_image(artifact_id)
    except VaultError as e:
        logging.debug(f"Image for {artifact_id} unavailable: {e}")
        return None


# --- Rendering ---


def _render_artifacts_table(artifacts: List[Artifact], fallback: bool = False) -> None:
    """Shared logic for displaying the artifact list."""
    title = "Artifacts"
    if fallback:
        title += " [yellow](demo data)[/yellow]"

    if not artifacts:
        console.print(Panel("[yellow]No artifacts found.[/yellow]", title=title))
        return

    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Description")
    table.add_column("Fingerprint", style="magenta")

    for artifact in artifacts:
        fingerprint = artifact.fingerprint_data
        if fingerprint is None:
            status = "[dim]none[/dim]"
        elif fingerprint.is_complete:
            status = "complete"
        else:
            status = "[yellow]partial[/yellow]"
        table.add_row(
            escape(artifact.id), escape(artifact.name), escape(describe(artifact)), status
        )

    console.print(table)


def _render_fingerprint(artifact: Artifact) -> None:
    rows = fingerprint_rows(artifact.fingerprint_data)
    if rows is None:
        console.print(f"[dim]{NO_FINGERPRINT}[/dim]")
        return
    metrics = Table(show_header=False, box=None)
    metrics.add_column(style="yellow")
    metrics.add_column()
    for label, value in rows.items():
        metrics.add_row(f"  {label}:", value)
    console.print(metrics)


def _render_artifact_details(
    artifact: Artifact, image_url: str, image: Optional[bytes]
) -> None:
    """Shared logic for displaying one artifact and its fingerprint."""
    info = Table.grid(padding=(0, 2))
    info.add_column(style="bold cyan")
    info.add_column()

    info.add_row("ID", escape(artifact.id))
    info.add_row("Name", escape(artifact.name))
    info.add_row("Description", escape(artifact.description) or "[dim]-[/dim]")
    info.add_row("Image", format_image_status(image_url, image))

    console.print(Panel(info, title="Artifact Details", border_style="cyan"))
    console.print("\n[bold]Computer Vision Fingerprint:[/]")
    _render_fingerprint(artifact)


def _render_form(state: AppState) -> None:
    title = "New Artifact" if state.view_state == ViewState.CREATE else "Edit Details"
    form = Table.grid(padding=(0, 2))
    form.add_column(style="bold cyan")
    form.add_column()
    form.add_row("Name", escape(state.draft.name) or "[red](required)[/red]")
    form.add_row("Description", escape(state.draft.description) or "[dim]-[/dim]")
    image = state.pending_image
    form.add_row("Image", image.filename if image else "[dim]none chosen[/dim]")
    console.print(Panel(form, title=title, border_style="green"))
    submit = "create" if state.view_state == ViewState.CREATE else "save"
    console.print(
        f"[dim]Commands: name VALUE, description VALUE, image PATH, "
        f"save ({submit}), cancel[/dim]"
    )


def render_state(
    state: AppState,
    machine: ArtifactStateMachine,
    image: Optional[bytes] = None,
) -> None:
    """Render whichever view the state machine is in."""
    if state.last_error is not None:
        console.print(f"[red]{escape(state.last_error.message)}[/red]")
    if state.is_loading:
        console.print("[dim]Working…[/dim]")

    if state.view_state == ViewState.LIST:
        _render_artifacts_table(state.artifacts, state.is_fallback_mode)
    elif state.view_state in (ViewState.CREATE, ViewState.EDIT):
        _render_form(state)
    elif state.view_state == ViewState.VIEW:
        artifact = state.selected_artifact
        if artifact is None:
            console.print("[red]Selected artifact is no longer available.[/red]")
            return
        _render_artifact_details(artifact, machine.image_url(artifact.id), image)


# --- Commands ---


@app.callback()
def main(
    ctx: typer.Context,
    api_url: Optional[str] = typer.Option(
        None, help="Artifact service URL (default: ARTIFACT_VAULT_API_URL)."
    ),
    timeout: Optional[float] = typer.Option(
        None, help="Request timeout in seconds."
    ),
    log_level: Optional[str] = typer.Option(
        None, help="Logging level, e.g. INFO or DEBUG."
    ),
) -> None:
    """Browse and manage artifact records on a remote artifact service."""
    settings = VaultSettings.from_env().with_overrides(
        api_url=api_url, timeout_seconds=timeout, log_level=log_level
    )
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


@app.command("list")
def list_artifacts(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False, "--json", help="Output the artifacts as JSON."
    ),
) -> None:
    """List all artifacts. Shows demo data when the service is unreachable."""
    machine = build_machine(get_settings(ctx))

    async def _load() -> AppState:
        try:
            return await machine.dispatch(AppStarted())
        finally:
            await machine.client.aclose()

    state = asyncio.run(_load())

    if json_output:
        output_json([artifact.model_dump() for artifact in state.artifacts])
        return

    if state.is_fallback_mode and state.last_error is not None:
        console.print(f"[yellow]{escape(state.last_error.message)}[/yellow]")
    _render_artifacts_table(state.artifacts, state.is_fallback_mode)


@app.command()
def show(
    ctx: typer.Context,
    artifact_id: str = typer.Argument(..., help="The ID of the artifact to inspect."),
) -> None:
    """Display detailed information about a specific artifact."""
    machine = build_machine(get_settings(ctx))

    async def _load() -> tuple:
        try:
            await machine.dispatch(AppStarted())
            state = await machine.dispatch(EntrySelectedForView(artifact_id))
            image = None
            if state.view_state == ViewState.VIEW:
                image = await _load_artifact_image(machine, artifact_id)
            return state, image
        finally:
            await machine.client.aclose()

    state, image = asyncio.run(_load())
    artifact = state.selected_artifact
    if artifact is None:
        console.print(f"[red]Artifact '{artifact_id}' not found.[/red]")
        raise typer.Exit(1)

    _render_artifact_details(artifact, machine.image_url(artifact.id), image)


@app.command()
def demo(
    json_output: bool = typer.Option(
        False, "--json", help="Output the artifacts as JSON."
    ),
) -> None:
    """Print the demonstration artifacts used when the service is unreachable."""
    artifacts = demo_artifacts()
    if json_output:
        output_json([artifact.model_dump() for artifact in artifacts])
        return
    _render_artifacts_table(artifacts, fallback=True)


class VaultShell(cmd.Cmd):
    """Interactive shell driving the artifact state machine."""

    intro = "Welcome to Artifact Vault. Type help or ? to list commands.\n"
    prompt = "(vault) "

    def __init__(self, machine: ArtifactStateMachine):
        super().__init__()
        self.machine = machine
        self._loop = asyncio.new_event_loop()

    @property
    def state(self) -> AppState:
        return self.machine.state

    def _dispatch(self, event: Event, image: Optional[bytes] = None) -> AppState:
        state = self._loop.run_until_complete(self.machine.dispatch(event))
        render_state(state, self.machine, image)
        return state

    def start(self) -> AppState:
        """Load the collection before the first prompt."""
        return self._dispatch(AppStarted())

    def close(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.run_until_complete(self.machine.client.aclose())
        self._loop.close()

    def do_list(self, arg: str) -> None:
        """Show the artifact list. Usage: list"""
        render_state(self.state, self.machine)

    def do_refresh(self, arg: str) -> None:
        """Reload the artifact list from the service. Usage: refresh"""
        self._dispatch(RefreshRequested())

    def do_new(self, arg: str) -> None:
        """Start a new artifact. Usage: new"""
        self._dispatch(NewEntryRequested())

    def do_view(self, arg: str) -> None:
        """Show one artifact. Usage: view <artifact_id>"""
        artifact_id = arg.strip()
        if not artifact_id:
            console.print("[red]Error: artifact_id required[/red]")
            return
        state = self._loop.run_until_complete(
            self.machine.dispatch(EntrySelectedForView(artifact_id))
        )
        image = None
        if state.view_state == ViewState.VIEW:
            image = self._loop.run_until_complete(
                _load_artifact_image(self.machine, artifact_id)
            )
        render_state(state, self.machine, image)

    def do_edit(self, arg: str) -> None:
        """Edit an artifact. Usage: edit <artifact_id>"""
        artifact_id = arg.strip()
        if not artifact_id:
            console.print("[red]Error: artifact_id required[/red]")
            return
        self._dispatch(EntrySelectedForEdit(artifact_id))

    def do_name(self, arg: str) -> None:
        """Set the draft name. Usage: name <value>"""
        self._dispatch(DraftChanged("name", arg.strip()))

    def do_description(self, arg: str) -> None:
        """Set the draft description. Usage: description <value>"""
        self._dispatch(DraftChanged("description", arg.strip()))

    def do_image(self, arg: str) -> None:
        """Choose an image to upload with the form. Usage: image <path>"""
        args = shlex.split(arg)
        if not args:
            console.print("[red]Error: path required[/red]")
            return
        path = Path(args[0]).expanduser()
        try:
            image = ImageFile.from_path(path)
        except OSError as exc:
            console.print(f"[red]Error: cannot read {path}: {exc}[/red]")
            return
        self._dispatch(ImageChosen(image))

    def do_save(self, arg: str) -> None:
        """Submit the open form. Usage: save"""
        if self.state.view_state == ViewState.CREATE:
            self._dispatch(SubmitCreate())
        elif self.state.view_state == ViewState.EDIT:
            self._dispatch(SubmitUpdate())
        else:
            console.print("[red]Error: no form is open[/red]")

    def do_delete(self, arg: str) -> None:
        """Delete an artifact after confirmation. Usage: delete [artifact_id]"""
        artifact_id = arg.strip() or self.state.selected_artifact_id
        if not artifact_id:
            console.print("[red]Error: artifact_id required[/red]")
            return
        self._dispatch(DeleteRequested(artifact_id))

    def do_cancel(self, arg: str) -> None:
        """Discard the open form. Usage: cancel"""
        self._dispatch(CancelRequested())

    def do_back(self, arg: str) -> None:
        """Return from the detail view to the list. Usage: back"""
        self._dispatch(BackRequested())

    def do_dismiss(self, arg: str) -> None:
        """Clear the current error message. Usage: dismiss"""
        self._dispatch(ErrorDismissed())

    def do_exit(self, arg: str) -> bool:
        """Exit the shell."""
        console.print("Goodbye!")
        return True

    def do_quit(self, arg: str) -> bool:
        """Exit the shell (alias)."""
        return self.do_exit(arg)

    def do_EOF(self, arg: str) -> bool:
        """Handle Ctrl+D."""
        print()
        return self.do_exit(arg)

    def emptyline(self) -> None:
        """Do nothing on empty line (prevent repeating last command)."""
        pass


@app.command()
def shell(ctx: typer.Context) -> None:
    """
    Start an interactive shell for managing artifacts.
    The artifact list is loaded once and kept in memory for the session.
    """
    settings = get_settings(ctx)
    machine = build_machine(settings, confirm=confirm_prompt)
    console.print(f"[green]✓ Using artifact service: {settings.api_url}[/green]")
    vault_shell = VaultShell(machine)
    try:
        vault_shell.start()
        vault_shell.cmdloop()
    finally:
        vault_shell.close()


if __name__ == "__main__":
    app()
