"""
Command-line interface for Minikube Toolkit
"""

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from minikube_toolkit import __version__
from minikube_toolkit.binary.models import CliState
from minikube_toolkit.clusters.creation import CREATION_PREFIX
from minikube_toolkit.core.config import Settings, get_settings
from minikube_toolkit.core.exceptions import ClusterNotFoundError, ReleaseNotFoundError, ToolkitError
from minikube_toolkit.extension import MinikubeExtension
from minikube_toolkit.host.local import ConsoleTaskLogger, LocalHost
from minikube_toolkit.images.mover import ImageInfo
from minikube_toolkit.releases.models import ReleaseMetadata, strip_version

console = Console()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def create_extension(settings: Settings, interactive: bool = True) -> MinikubeExtension:
    """Build an extension bound to a console host."""
    host = LocalHost(settings.storage_path, console=console, interactive=interactive)
    return MinikubeExtension(host, settings)


def run_with_extension(ctx: click.Context, action: Callable[[MinikubeExtension], Awaitable[Any]]) -> Any:
    """
    Run an async action against a fresh extension

    ToolkitError is reported on the console and turned into exit code 1.
    """
    extension = create_extension(ctx.obj["settings"], ctx.obj["interactive"])

    async def run() -> Any:
        try:
            return await action(extension)
        finally:
            extension.deactivate()

    try:
        return asyncio.run(run())
    except ToolkitError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Logging level (default: from settings)")
@click.option("--non-interactive", is_flag=True, help="Never prompt; prompts resolve as cancelled")
@click.pass_context
def main(ctx: click.Context, log_level: str | None, non_interactive: bool) -> None:
    """Minikube Toolkit - manage the minikube CLI and its local clusters"""
    settings = get_settings()
    configure_logging(log_level or settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["interactive"] = not non_interactive


# ============================================================
# minikube binary
# ============================================================


@main.command()
@click.option("--check-updates/--no-check-updates", default=True, help="Query the latest release")
@click.pass_context
def status(ctx: click.Context, check_updates: bool) -> None:
    """Show the detected minikube binary"""

    async def action(extension: MinikubeExtension) -> None:
        controller = extension.controller
        await controller.detect()
        if check_updates:
            try:
                await controller.check_for_update()
            except ToolkitError as e:
                console.print(f"[yellow]Unable to check for updates: {escape(str(e))}[/yellow]")

        binary = controller.binary
        lines = [f"State: [bold]{controller.state.value}[/bold]"]
        if binary is not None:
            lines.append(f"Version: [green]{binary.version}[/green]")
            lines.append(f"Path: [green]{escape(binary.path)}[/green]")
            lines.append(f"Installed by: {binary.installation_source.value}")
        if controller.latest_release is not None:
            lines.append(f"Latest release: {controller.latest_release.label}")
        console.print(Panel.fit("\n".join(lines), title="minikube", border_style="cyan"))

    run_with_extension(ctx, action)


@main.command()
@click.pass_context
def releases(ctx: click.Context) -> None:
    """List recent minikube releases"""

    async def action(extension: MinikubeExtension) -> None:
        recent = await extension.services.release_source.list_recent_releases()
        table = Table(title="minikube releases", show_header=True, header_style="bold cyan")
        table.add_column("Release", style="cyan")
        table.add_column("Tag", style="white")
        table.add_column("ID", style="dim")
        for release in recent:
            table.add_row(release.label, release.tag, str(release.id))
        console.print(table)

    run_with_extension(ctx, action)


async def _pick_release(extension: MinikubeExtension, version: str | None, select: bool) -> ReleaseMetadata:
    source = extension.services.release_source
    if select:
        return await extension.controller.select_version()
    if version is None:
        return await source.latest()

    wanted = strip_version(version)
    for release in await source.list_recent_releases():
        if release.version == wanted:
            return release
    raise ReleaseNotFoundError(f"minikube {version} is not among the recent releases")


@main.command()
@click.option("--version", "version", default=None, help="Release to install, e.g. v1.34.0 (default: latest)")
@click.option("--select", is_flag=True, help="Choose the release interactively")
@click.pass_context
def install(ctx: click.Context, version: str | None, select: bool) -> None:
    """Download and install minikube"""

    async def action(extension: MinikubeExtension) -> None:
        controller = extension.controller
        await controller.detect()
        release = await _pick_release(extension, version, select)

        console.print(f"\n[bold cyan]Installing minikube {release.label}...[/bold cyan]\n")
        binary = await controller.install(release, ConsoleTaskLogger(console))

        result = controller.last_install_result
        if result is not None and result.promotion_failed:
            console.print(
                f"[yellow]Could not copy minikube to the system path: {escape(str(result.promotion_error))}[/yellow]"
            )
        console.print(f"[bold green]minikube {binary.version} installed:[/bold green] {escape(binary.path)}")

    run_with_extension(ctx, action)


@main.command()
@click.pass_context
def update(ctx: click.Context) -> None:
    """Update minikube to the latest release"""

    async def action(extension: MinikubeExtension) -> None:
        controller = extension.controller
        await controller.detect()
        if not controller.is_installed():
            console.print("[yellow]minikube is not installed; run 'install' first[/yellow]")
            return

        latest = await controller.check_for_update()
        if latest is None:
            console.print(f"[green]minikube {controller.get_info().version} is up to date[/green]")
            return

        binary = await controller.update(latest, ConsoleTaskLogger(console))
        console.print(f"[bold green]minikube updated to {binary.version}[/bold green]")

    run_with_extension(ctx, action)


@main.command()
@click.pass_context
def uninstall(ctx: click.Context) -> None:
    """Remove a minikube installed by this toolkit"""

    async def action(extension: MinikubeExtension) -> None:
        controller = extension.controller
        await controller.detect()
        await controller.uninstall(ConsoleTaskLogger(console))
        if controller.state is CliState.UNINSTALLED:
            console.print("[bold green]minikube uninstalled[/bold green]")

    run_with_extension(ctx, action)


# ============================================================
# Clusters
# ============================================================


@main.command()
@click.pass_context
def clusters(ctx: click.Context) -> None:
    """List minikube clusters found in podman/docker"""

    async def action(extension: MinikubeExtension) -> None:
        await extension.activate(check_updates=False)
        found = extension.reconciler.clusters if extension.reconciler else []
        if not found:
            console.print("[yellow]No minikube clusters found[/yellow]")
            return

        table = Table(title="minikube clusters", show_header=True, header_style="bold cyan")
        table.add_column("Name", style="cyan")
        table.add_column("Status", style="white")
        table.add_column("API", style="green")
        table.add_column("Engine", style="dim")
        for cluster in found:
            connection = extension.reconciler.get_connection(cluster.name)
            api_url = connection.endpoint.api_url if connection else ""
            table.add_row(cluster.name, cluster.status.value, api_url, cluster.engine_type)
        console.print(table)

    run_with_extension(ctx, action)


@main.command()
@click.option("--name", default=None, help="Profile name (default: from settings)")
@click.option("--driver", default=None, help="minikube driver (default: from settings)")
@click.option("--runtime", default=None, help="Container runtime (default: from settings)")
@click.option("--base-image", default=None, help="Base image for the node container")
@click.option("--mount-string", default=None, help="host:guest mount")
@click.pass_context
def create(
    ctx: click.Context,
    name: str | None,
    driver: str | None,
    runtime: str | None,
    base_image: str | None,
    mount_string: str | None,
) -> None:
    """Create a new minikube cluster"""
    params = {
        f"{CREATION_PREFIX}name": name,
        f"{CREATION_PREFIX}driver": driver,
        f"{CREATION_PREFIX}runtime": runtime,
        f"{CREATION_PREFIX}base-image": base_image,
        f"{CREATION_PREFIX}mount-string": mount_string,
    }

    async def action(extension: MinikubeExtension) -> None:
        await extension.controller.detect()
        await extension.create_cluster({k: v for k, v in params.items() if v}, ConsoleTaskLogger(console))
        console.print("[bold green]minikube cluster created[/bold green]")

    run_with_extension(ctx, action)


def _lifecycle_command(operation: str) -> Callable[[click.Context, str], None]:
    @click.pass_context
    def command(ctx: click.Context, name: str) -> None:
        async def action(extension: MinikubeExtension) -> None:
            await extension.activate(check_updates=False)
            connection = extension.reconciler.get_connection(name) if extension.reconciler else None
            if connection is None:
                raise ClusterNotFoundError(f"No minikube cluster named '{name}'")
            await getattr(connection.lifecycle, operation)(ConsoleTaskLogger(console))
            console.print(f"[bold green]minikube cluster {escape(name)}: {operation} done[/bold green]")

        run_with_extension(ctx, action)

    command.__doc__ = f"{operation.capitalize()} an existing minikube cluster"
    return command


for _operation in ("start", "stop", "delete"):
    main.command(name=_operation)(click.argument("name")(_lifecycle_command(_operation)))


# ============================================================
# Images
# ============================================================


@main.command(name="move-image")
@click.argument("image")
@click.option("--engine", default="podman", type=click.Choice(["podman", "docker"]), help="Engine holding the image")
@click.pass_context
def move_image(ctx: click.Context, image: str, engine: str) -> None:
    """Push a local image into a running minikube cluster"""

    async def action(extension: MinikubeExtension) -> None:
        await extension.activate(check_updates=False)
        cluster = await extension.move_image(ImageInfo.parse(image, engine_id=engine))
        if cluster is None:
            console.print("[yellow]Image move cancelled[/yellow]")

    run_with_extension(ctx, action)


if __name__ == "__main__":
    main()
