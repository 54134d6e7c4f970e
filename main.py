#!/usr/bin/env python3
"""
IPTV Searcher — CLI principal.

Uso:
  python main.py serve    → Inicia el servidor web
  python main.py search   → Ejecuta una pasada manual
  python main.py latest   → Muestra el último snapshot
  python main.py watch    → Corre el scheduler sin servidor web
"""
import asyncio
import logging
import signal

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from config import settings

# Configurar logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
# Silenciar logs verbose de librerías
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)

console = Console()
app = typer.Typer(
    name="iptv-searcher",
    help="📡 IPTV Searcher — Agregador periódico de búsquedas IPTV/M3U",
    add_completion=False,
    rich_markup_mode="rich",
)


# ─────────────────────────────────────────────────────────────────────────────
# Comando: serve
# ─────────────────────────────────────────────────────────────────────────────

@app.command()
def serve(
    host: str = typer.Option(settings.HOST, help="Host del servidor"),
    port: int = typer.Option(settings.PORT, help="Puerto del servidor"),
    reload: bool = typer.Option(False, help="Auto-reload en desarrollo"),
):
    """
    🚀 Inicia el servidor web.
    """
    console.print(Panel(
        f"[bold blue]📡 {settings.APP_NAME}[/bold blue]\n"
        f"Servidor iniciando en [cyan]http://{host}:{port}[/cyan]\n"
        f"API Docs: [green]http://localhost:{port}/api/docs[/green]",
        title="[bold]Iniciando servidor[/bold]",
        border_style="blue",
    ))

    import uvicorn
    uvicorn.run(
        "api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Comando: search
# ─────────────────────────────────────────────────────────────────────────────

@app.command()
def search():
    """
    🔍 Ejecuta una pasada manual y guarda el snapshot.
    """
    asyncio.run(_run_search())


async def _run_search():
    from scheduler import create_controller

    controller = create_controller()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Consultando proveedores...", total=None)
        outcome = await controller.run_pass(triggered_by="cli")
        progress.update(task, description="✓ Pasada completada")

    _print_pass_summary(outcome)


def _print_pass_summary(outcome):
    status_emoji = {"success": "✅", "partial": "⚠️", "failed": "❌"}
    emoji = status_emoji.get(outcome.status.value, "❓")

    table = Table(title="Proveedores", box=box.ROUNDED)
    table.add_column("Proveedor", style="cyan")
    table.add_column("Estado")
    table.add_column("Resultados", justify="right")
    table.add_column("Motivo", style="dim")
    for report in outcome.providers:
        table.add_row(
            report.provider,
            report.status.value,
            str(len(report.items)),
            report.reason or "—",
        )

    console.print(Panel(
        f"{emoji} [bold]{outcome.snapshot_id}[/bold] — {outcome.status.value.upper()}\n\n"
        f"[bold green]Resultados filtrados: {len(outcome.results)}[/bold green]\n"
        f"Duración: {(outcome.duration_seconds or 0):.1f}s",
        title="Resultado",
        border_style="green" if outcome.status.value == "success" else "yellow",
    ))
    console.print(table)


# ─────────────────────────────────────────────────────────────────────────────
# Comando: latest
# ─────────────────────────────────────────────────────────────────────────────

@app.command()
def latest(
    limit: int = typer.Option(50, help="Máximo de filas a mostrar"),
):
    """📄 Muestra el snapshot más reciente."""
    asyncio.run(_show_latest(limit))


async def _show_latest(limit: int):
    from storage import SnapshotNotFoundError, SnapshotStore

    store = SnapshotStore(settings.SNAPSHOT_DIR, settings.SNAPSHOT_PREFIX)
    try:
        snapshot = await store.latest()
    except SnapshotNotFoundError:
        console.print("[yellow]No hay snapshots todavía[/yellow]")
        raise typer.Exit(code=1)

    table = Table(
        title=f"{snapshot.id} ({snapshot.created_at:%d/%m/%Y %H:%M:%S} UTC)",
        box=box.ROUNDED,
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Título", style="cyan")
    table.add_column("Link", style="blue")

    for i, result in enumerate(snapshot.results[:limit], start=1):
        table.add_row(str(i), result.title[:60], result.link)

    console.print(table)
    if len(snapshot.results) > limit:
        console.print(f"[dim]… {len(snapshot.results) - limit} más[/dim]")


# ─────────────────────────────────────────────────────────────────────────────
# Comando: watch
# ─────────────────────────────────────────────────────────────────────────────

@app.command()
def watch():
    """⏱️  Corre el scheduler en primer plano hasta SIGINT/SIGTERM."""
    asyncio.run(_watch())


async def _watch():
    from scheduler import create_controller

    controller = create_controller()
    stop_requested = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_requested.set)

    try:
        outcome = await controller.start()
        _print_pass_summary(outcome)
        console.print(
            f"[green]Scheduler corriendo cada {controller.interval_seconds}s. "
            f"Ctrl+C para salir.[/green]"
        )
        await stop_requested.wait()
    finally:
        controller.shutdown()
        console.print("[yellow]🛑 Scheduler detenido[/yellow]")


# ─────────────────────────────────────────────────────────────────────────────
# Entrypoint
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
