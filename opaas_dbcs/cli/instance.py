"""Service instance CLI commands.

Provides the ``opaas-dbcs instance`` subcommand group.  The last known
document of each instance is recorded in
``~/.config/opaas-dbcs/instances.json``, keyed by instance name.  Sensitive
values are never written there.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from opaas_dbcs.errors import RemoteAPIError, ValidationError

console = Console()

instance_app = typer.Typer(help="Database service instance commands")

STATE_PATH = Path.home() / ".config" / "opaas-dbcs" / "instances.json"

_SECRET_KEY_PARTS = ("password", "pwd", "decryptionkey", "walletfile")


# ---------------------------------------------------------------------------
# Local state
# ---------------------------------------------------------------------------


def _load_state() -> dict[str, Any]:
    """Load recorded instance documents."""
    if not STATE_PATH.exists():
        return {}
    try:
        return json.loads(STATE_PATH.read_text())
    except json.JSONDecodeError as exc:
        console.print(
            f"[red]✗[/red] Recorded state is not valid JSON: {escape(str(exc))} "
            f"({STATE_PATH})"
        )
        raise typer.Exit(1)


def _save_state(data: dict[str, Any]) -> None:
    """Persist recorded instance documents."""
    STATE_PATH.parent.mkdir(parents=True, exist_ok=True)
    STATE_PATH.write_text(json.dumps(data, indent=2, default=str) + "\n")


def _record(config: Any) -> None:
    state = _load_state()
    state[config.name] = {
        "document": config.to_state(),
        "refreshed_at": datetime.now(timezone.utc).isoformat(),
    }
    _save_state(state)


def _forget(name: str) -> None:
    state = _load_state()
    if state.pop(name, None) is not None:
        _save_state(state)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_document(path: Path) -> dict[str, Any]:
    """Read a YAML (or JSON) resource document."""
    if not path.exists():
        console.print(f"[red]✗[/red] Config file not found: {path}")
        raise typer.Exit(1)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        console.print(f"[red]✗[/red] Cannot parse {path}: {escape(str(exc))}")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        console.print(f"[red]✗[/red] {path} must contain a mapping")
        raise typer.Exit(1)
    return data


def _mask(value: Any) -> Any:
    """Replace sensitive values in a request payload with ``***``."""
    if isinstance(value, dict):
        masked = {}
        for key, val in value.items():
            flat = key.lower().replace("_", "")
            if val and any(part in flat for part in _SECRET_KEY_PARTS):
                masked[key] = "***"
            else:
                masked[key] = _mask(val)
        return masked
    if isinstance(value, list):
        return [_mask(v) for v in value]
    return value


def _build_resource():
    """Build a ``ServiceInstanceResource`` from the active provider settings."""
    from opaas_dbcs.client.service_instance import ServiceInstanceClient
    from opaas_dbcs.instance.resource import ServiceInstanceResource
    from opaas_dbcs.settings import get_provider_settings

    try:
        settings = get_provider_settings()
    except ValueError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    return ServiceInstanceResource(ServiceInstanceClient.from_settings(settings))


def _document_for(name: str):
    """Return the recorded document for ``name``, or a bare import document."""
    from opaas_dbcs.instance.config import ServiceInstanceConfig

    entry = _load_state().get(name)
    if entry and entry.get("document"):
        try:
            return ServiceInstanceConfig.from_state(entry["document"])
        except ValidationError:
            console.print(
                f"[yellow]⚠[/yellow]  Recorded state for {name} is unreadable; "
                "starting from the instance name."
            )
    return ServiceInstanceConfig.for_import(name)


def _print_instance(config: Any) -> None:
    table = Table(title=f"Database Service Instance ({config.name})")
    table.add_column("Attribute", style="cyan")
    table.add_column("Value")
    doc = config.to_state()
    for key in (
        "name",
        "edition",
        "level",
        "shape",
        "version",
        "subscription_type",
        "region",
        "availability_domain",
        "identity_domain",
        "connect_descriptor",
        "em_url",
        "dbaas_monitor_url",
        "glassfish_url",
        "uri",
    ):
        value = doc.get(key)
        table.add_row(key, str(value) if value not in (None, "") else "-")
    console.print(table)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@instance_app.command("validate")
def instance_validate(
    config_file: Path = typer.Argument(..., help="Resource document (YAML or JSON)"),
):
    """Validate a document and print the create request it maps to."""
    from opaas_dbcs.instance.config import ServiceInstanceConfig
    from opaas_dbcs.instance.mapper import build_create_request

    data = _load_document(config_file)
    try:
        config = ServiceInstanceConfig.from_dict(data)
        request = build_create_request(config)
    except ValidationError as exc:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(exc))}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] {config_file} is valid.")
    console.print_json(json.dumps(_mask(request.to_payload())))


@instance_app.command("create")
def instance_create(
    config_file: Path = typer.Argument(..., help="Resource document (YAML or JSON)"),
):
    """Create a database service instance and wait until it is running."""
    from rich.status import Status

    from opaas_dbcs.instance.config import ServiceInstanceConfig

    data = _load_document(config_file)
    try:
        config = ServiceInstanceConfig.from_dict(data)
    except ValidationError as exc:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(exc))}")
        raise typer.Exit(1)

    resource = _build_resource()

    console.print(f"\n[bold cyan]━━━ Create ({config.name}) ━━━[/bold cyan]")
    console.print(f"  Edition: {config.edition.value}")
    console.print(f"  Level:   {config.level.value}")
    console.print(f"  Shape:   {config.shape}")
    console.print(f"  Version: {config.version}")
    console.print()

    status_display = Status("Creating...", console=console, spinner="dots")

    def _progress_callback(status: str, elapsed: float) -> None:
        status_display.update(
            f"Creating... ({elapsed:.0f}s elapsed), status: {status}"
        )

    status_display.start()
    try:
        resource.create(config, callback=_progress_callback)
    except (ValidationError, RemoteAPIError) as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    finally:
        status_display.stop()

    _record(config)
    console.print(f"[green]✓[/green] Instance [bold]{config.name}[/bold] created.")
    if config.connect_descriptor:
        console.print(f"  Connect: [cyan]{config.connect_descriptor}[/cyan]")


@instance_app.command("show")
def instance_show(
    name: str = typer.Argument(..., help="Service instance name"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Read an instance from the API and show its attributes."""
    resource = _build_resource()
    config = _document_for(name)
    config.id = name

    try:
        resource.read(config)
    except RemoteAPIError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    if not config.id:
        _forget(name)
        console.print(f"[yellow]⚠[/yellow]  Instance {name} no longer exists.")
        raise typer.Exit(1)

    _record(config)
    if as_json:
        console.print_json(json.dumps(config.to_state()))
        return
    _print_instance(config)


@instance_app.command("import")
def instance_import(
    name: str = typer.Argument(..., help="Existing service instance name"),
):
    """Adopt an existing instance into local state."""
    resource = _build_resource()
    try:
        config = resource.import_instance(name)
    except RemoteAPIError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    if not config.id:
        console.print(f"[red]✗[/red] Instance {name} not found.")
        raise typer.Exit(1)

    _record(config)
    console.print(f"[green]✓[/green] Imported [bold]{name}[/bold].")


@instance_app.command("delete")
def instance_delete(
    name: str = typer.Argument(..., help="Service instance name"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
):
    """Delete a database service instance."""
    if not force:
        from rich.prompt import Confirm

        console.print(
            f"\n[yellow]⚠[/yellow]  This will delete instance [bold]{name}[/bold] "
            "and its data."
        )
        if not Confirm.ask("Proceed?", default=False):
            console.print("[dim]Cancelled.[/dim]")
            raise typer.Exit(0)

    resource = _build_resource()
    config = _document_for(name)
    config.id = name

    try:
        resource.delete(config)
    except RemoteAPIError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    _forget(name)
    console.print(f"[green]✓[/green] Instance [bold]{name}[/bold] deleted.")


@instance_app.command("list")
def instance_list(
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List instances recorded in local state."""
    state = _load_state()

    if as_json:
        console.print_json(json.dumps(state, default=str))
        return

    if not state:
        console.print("[dim]No recorded instances.[/dim]")
        return

    table = Table(title="Recorded Database Service Instances")
    table.add_column("Name", style="cyan")
    table.add_column("Edition")
    table.add_column("Level")
    table.add_column("Connect Descriptor")
    table.add_column("Refreshed", style="dim")

    for name, entry in state.items():
        doc = entry.get("document", {})
        table.add_row(
            name,
            str(doc.get("edition") or "-"),
            str(doc.get("level") or "-"),
            str(doc.get("connect_descriptor") or "-"),
            str(entry.get("refreshed_at") or "-"),
        )

    console.print(table)
