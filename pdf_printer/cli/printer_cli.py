"""Command-line interface for rendering HTML to PDF and screenshots."""

import asyncio
from pathlib import Path
from typing import Any, Optional

import structlog
import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..assets import AssetCache, AssetRegistryBuilder, embed_assets_in_html
from ..config.loader import OptionsLoader, load_request_fields
from ..constants import (
    DEFAULT_EXPORT_CONCURRENCY,
    EXIT_CODE_KEYBOARD_INTERRUPT,
    EXIT_CODE_RENDER_FAILED,
    OUTPUT_EXTENSIONS,
)
from ..core.config import get_settings
from ..core.exceptions import PrinterError
from ..rendering import ChromiumResolver, PrinterService, RenderRequest
from ..utils.logging import setup_logging

console = Console()
logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="pdf-printer", help="Render HTML to PDF and screenshots", no_args_is_help=True
)


def output_extension(fields: dict[str, Any]) -> str:
    """File extension for the artifact a request produces."""
    if fields.get("output_type", "pdf") == "pdf":
        return OUTPUT_EXTENSIONS["pdf"]
    screenshot = fields.get("screenshot_options")
    image_type = getattr(screenshot, "type", None) or "png"
    return OUTPUT_EXTENSIONS[image_type]


def build_request_fields(
    options_file: Optional[Path], output_type: Optional[str], dark: bool
) -> dict[str, Any]:
    """Profile file fields with command-line overrides applied."""
    fields = load_request_fields(options_file) if options_file else {}
    if output_type:
        fields["output_type"] = output_type
    if dark:
        fields["dark_mode"] = True
    return fields


async def load_html(
    path: Path,
    builder: Optional[AssetRegistryBuilder],
    static_dir: Optional[Path],
    fallback_static_dir: Optional[Path],
) -> str:
    html = path.read_text(encoding="utf-8")
    if builder is not None and static_dir is not None:
        registry = await builder.build(static_dir, fallback_static_dir)
        html = embed_assets_in_html(html, registry)
    return html


async def render_single(
    source: str,
    output: Path,
    is_url: bool,
    fields: dict[str, Any],
    static_dir: Optional[Path] = None,
    fallback_static_dir: Optional[Path] = None,
) -> int:
    """Render one file or URL and write the artifact."""
    if is_url:
        request = RenderRequest(url=source, **fields)
    else:
        builder = AssetRegistryBuilder(AssetCache()) if static_dir else None
        html = await load_html(Path(source), builder, static_dir, fallback_static_dir)
        request = RenderRequest(html=html, **fields)

    async with PrinterService() as printer:
        data = await printer.render_document(request)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    return len(data)


async def export_directory(
    directory: Path,
    output_dir: Path,
    fields: dict[str, Any],
    concurrency: int = DEFAULT_EXPORT_CONCURRENCY,
    static_dir: Optional[Path] = None,
    fallback_static_dir: Optional[Path] = None,
) -> dict[str, Any]:
    """Render every ``*.html`` file under ``directory`` into ``output_dir``."""
    sources = sorted(directory.rglob("*.html"))
    summary: dict[str, Any] = {"total": len(sources), "successful": 0, "failed": 0, "errors": {}}
    if not sources:
        return summary

    builder = AssetRegistryBuilder(AssetCache()) if static_dir else None
    extension = output_extension(fields)
    semaphore = asyncio.Semaphore(concurrency)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Rendering templates...", total=len(sources))

        async with PrinterService(pool_size=concurrency) as printer:

            async def render_one(path: Path) -> None:
                relative = path.relative_to(directory)
                async with semaphore:
                    try:
                        html = await load_html(path, builder, static_dir, fallback_static_dir)
                        data = await printer.render_document(html=html, **fields)
                        target = (output_dir / relative).with_suffix(extension)
                        target.parent.mkdir(parents=True, exist_ok=True)
                        target.write_bytes(data)
                        summary["successful"] += 1
                    except (PrinterError, OSError, ValueError) as e:
                        logger.error("Export failed", source=str(relative), error=str(e))
                        summary["failed"] += 1
                        summary["errors"][str(relative)] = str(e)
                    finally:
                        progress.advance(task)

            await asyncio.gather(*(render_one(path) for path in sources))

    return summary


@app.command()
def render(
    source: str = typer.Argument(..., help="HTML file to render, or a URL with --url"),
    output: Path = typer.Option(..., "--output", "-o", help="Output file path"),
    url: bool = typer.Option(False, "--url", help="Treat SOURCE as a URL to navigate to"),
    output_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Output type: pdf or screenshot"
    ),
    dark: bool = typer.Option(False, "--dark", help="Render in dark mode"),
    options_file: Optional[Path] = typer.Option(
        None, "--options", "-c", help="Render profile (YAML or JSON)"
    ),
    static_dir: Optional[Path] = typer.Option(
        None, "--static-dir", help="Directory of assets to embed as data URIs"
    ),
    fallback_static_dir: Optional[Path] = typer.Option(
        None, "--fallback-static-dir", help="Shared assets used when missing from --static-dir"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Render a single HTML file or URL."""
    setup_logging(verbose=verbose)

    try:
        fields = build_request_fields(options_file, output_type, dark)
        size = asyncio.run(
            render_single(source, output, url, fields, static_dir, fallback_static_dir)
        )
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(EXIT_CODE_KEYBOARD_INTERRUPT)
    except (PrinterError, ValueError, OSError) as e:
        console.print(f"❌ [red]Render failed: {e}[/red]")
        raise typer.Exit(EXIT_CODE_RENDER_FAILED)

    console.print(f"✅ [green]Wrote {size} bytes to[/green] [bold]{output}[/bold]")


@app.command()
def export(
    directory: Path = typer.Argument(..., help="Directory of HTML files", exists=True),
    output_dir: Path = typer.Option(Path("out"), "--output", "-o", help="Output directory"),
    output_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Output type: pdf or screenshot"
    ),
    dark: bool = typer.Option(False, "--dark", help="Render in dark mode"),
    options_file: Optional[Path] = typer.Option(
        None, "--options", "-c", help="Render profile (YAML or JSON)"
    ),
    concurrency: int = typer.Option(
        DEFAULT_EXPORT_CONCURRENCY, "--concurrency", "-j", min=1, help="Concurrent renders"
    ),
    static_dir: Optional[Path] = typer.Option(None, "--static-dir", help="Assets to embed"),
    fallback_static_dir: Optional[Path] = typer.Option(
        None, "--fallback-static-dir", help="Shared fallback assets"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Render every HTML file in a directory."""
    setup_logging(verbose=verbose)

    try:
        fields = build_request_fields(options_file, output_type, dark)
        summary = asyncio.run(
            export_directory(
                directory, output_dir, fields, concurrency, static_dir, fallback_static_dir
            )
        )
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(EXIT_CODE_KEYBOARD_INTERRUPT)
    except (PrinterError, ValueError) as e:
        console.print(f"❌ [red]Export failed: {e}[/red]")
        raise typer.Exit(EXIT_CODE_RENDER_FAILED)

    if summary["total"] == 0:
        console.print(f"[yellow]No HTML files found in {directory}[/yellow]")
        return

    console.print(f"🎉 [green]Rendered {summary['successful']}/{summary['total']} files[/green]")
    if summary["failed"]:
        for source, error in summary["errors"].items():
            console.print(f"  [red]{source}[/red]: {error}")
        raise typer.Exit(EXIT_CODE_RENDER_FAILED)


@app.command()
def doctor() -> None:
    """Show the Chromium launch configuration that would be used."""
    settings = get_settings()
    launch_config = asyncio.run(ChromiumResolver(settings).resolve())

    table = Table(title="Chromium launch configuration")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("source", launch_config.source.value)
    table.add_row("executable", launch_config.executable_path or "(Playwright bundled)")
    table.add_row("pool size", str(settings.POOL_SIZE))
    table.add_row("navigation timeout", f"{settings.NAVIGATION_TIMEOUT}s")
    table.add_row("args", "\n".join(launch_config.args))
    console.print(table)


@app.command("init-config")
def init_config(
    output: Path = typer.Argument(Path("render-options.yaml"), help="Where to write the profile"),
    format: str = typer.Option("yaml", "--format", "-f", help="yaml or json"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write an example render profile."""
    if output.exists() and not force:
        console.print(f"[red]{output} already exists (use --force)[/red]")
        raise typer.Exit(EXIT_CODE_RENDER_FAILED)

    try:
        OptionsLoader.save_example_config(output, format)
    except PrinterError as e:
        console.print(f"❌ [red]{e}[/red]")
        raise typer.Exit(EXIT_CODE_RENDER_FAILED)
    console.print(f"📝 Example profile written to [bold]{output}[/bold]")


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
