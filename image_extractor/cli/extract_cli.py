"""Typer-based command line front end for post-build image extraction."""

import asyncio
from pathlib import Path
from typing import Annotated, List, Optional

import typer

from image_extractor.config import get_settings
from image_extractor.logging_config import setup_logfire
from image_extractor.models.asset_models import SiteSummary
from image_extractor.models.config_models import ExtractorConfig
from image_extractor.services.image_extractor import ImageExtractor

app = typer.Typer(
    help="Download remote images of a generated static site and rewrite links to local copies."
)

OutputDirOption = Annotated[
    Optional[Path],
    typer.Option("--output-dir", "-o", help="Generated site root (default: settings)"),
]
PathOption = Annotated[
    Optional[str],
    typer.Option("--path", "-p", help="Public path for downloaded images, e.g. /assets"),
]
ExtensionOption = Annotated[
    Optional[List[str]],
    typer.Option("--extension", "-e", help="Image extension to extract (repeatable)"),
]
RouterBaseOption = Annotated[
    Optional[str], typer.Option("--router-base", help="Router base path, e.g. /blog/")
]
ReuseOption = Annotated[
    Optional[bool],
    typer.Option(
        "--reuse-downloads/--no-reuse-downloads",
        help="Fetch each image once per run instead of once per page and payload",
    ),
]


def _build_extractor(
    output_dir: Optional[Path] = None,
    path: Optional[str] = None,
    extensions: Optional[List[str]] = None,
    router_base: Optional[str] = None,
    reuse_downloads: Optional[bool] = None,
) -> ImageExtractor:
    """Build an extractor from settings with command line overrides applied."""
    config = ExtractorConfig.from_settings(
        get_settings(),
        output_dir=output_dir,
        path=path,
        extensions=extensions or None,
        router_base=router_base,
        reuse_downloads=reuse_downloads,
    )
    return ImageExtractor(config)


def _report(summary: SiteSummary) -> None:
    typer.echo(
        f"✓ {summary.pages_processed} pages, {summary.payloads_processed} payloads, "
        f"{summary.images_downloaded} images downloaded, "
        f"{summary.links_replaced} links replaced"
    )
    for failure in summary.failures:
        typer.echo(f"✗ {failure.href}: {failure.reason}", err=True)


@app.callback(invoke_without_command=True)
def _default(ctx: typer.Context):
    """Configure logging; run the whole-site pass when no subcommand is given."""
    setup_logfire()
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@app.command()
def run(
    output_dir: OutputDirOption = None,
    path: PathOption = None,
    extension: ExtensionOption = None,
    router_base: RouterBaseOption = None,
    reuse_downloads: ReuseOption = None,
    strict: Annotated[
        bool, typer.Option("--strict", help="Exit with status 1 if any download failed")
    ] = False,
):
    """
    Process a generated site:
    1) Create the assets directory
    2) Rewrite remote images in every HTML page
    3) Rewrite remote images in every payload file
    """
    extractor = _build_extractor(output_dir, path, extension, router_base, reuse_downloads)
    site_dir = extractor.config.output_dir
    if not site_dir.is_dir():
        typer.echo(f"✗ Output directory not found: {site_dir}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Extracting images in {site_dir}...")
    summary = asyncio.run(extractor.process_site())
    _report(summary)
    if strict and not summary.ok:
        raise typer.Exit(1)


@app.command()
def page(
    file: Annotated[Path, typer.Argument(help="HTML file to rewrite in place")],
    route: Annotated[
        Optional[str], typer.Option("--route", help="Route used in diagnostics")
    ] = None,
    output_dir: OutputDirOption = None,
    path: PathOption = None,
    extension: ExtensionOption = None,
):
    """Rewrite the remote images of a single HTML page."""
    extractor = _build_extractor(output_dir, path, extension)
    try:
        html = file.read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"✗ Error reading {file}: {e}", err=True)
        raise typer.Exit(1)

    extractor.prepare_output_dir()
    result = asyncio.run(extractor.process_page(route or f"/{file.stem}", html))
    if result.replaced_count:
        file.write_text(result.html, encoding="utf-8")

    failed = [o for o in result.outcomes if not o.ok]
    typer.echo(f"✓ Replaced {result.replaced_count} links in {file}")
    for outcome in failed:
        typer.echo(f"✗ {outcome.url.href}: {outcome.error}", err=True)


@app.command()
def payload(
    file: Annotated[Path, typer.Argument(help="Payload file to rewrite in place")],
    output_dir: OutputDirOption = None,
    path: PathOption = None,
    extension: ExtensionOption = None,
    router_base: RouterBaseOption = None,
):
    """Rewrite the remote images of a single serialized page-state file."""
    extractor = _build_extractor(output_dir, path, extension, router_base)
    extractor.prepare_output_dir()
    result = asyncio.run(extractor.process_payload_file(file))
    if result is None:
        typer.echo(f"✗ Could not rewrite {file}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Replaced {result.replaced_count} links in {file}")


if __name__ == "__main__":
    app()
