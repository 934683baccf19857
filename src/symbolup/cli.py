"""CLI entrypoint for symbolup."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from tqdm import tqdm

from symbolup.config import ServiceConfig, load_config
from symbolup.errors import UserFriendlyError
from symbolup.models import FileReference, ProgressCallback, ProgressInfo, UploadRequest
from symbolup.staging import cleanup_staging, prepare_artifacts
from symbolup.transfer import (
    MetadataFetchError,
    classify_and_log_error,
    fetch_metadata,
    get_uploader,
)

app = typer.Typer(
    name="symbolup",
    help="Upload debug symbols (iOS dSYMs, Android mapping files)",
    no_args_is_help=True,
)
ios_app = typer.Typer(help="iOS dSYM commands", no_args_is_help=True)
android_app = typer.Typer(help="Android mapping file commands", no_args_is_help=True)
app.add_typer(ios_app, name="ios")
app.add_typer(android_app, name="android")

console = Console()
logger = logging.getLogger("symbolup")

MAPPING_FILE_SUFFIXES = (".txt", ".gz")

RealmOption = Annotated[str | None, typer.Option(help="Realm of the observability service")]
TokenOption = Annotated[
    str | None, typer.Option(help="Access token (defaults to $SYMBOLUP_TOKEN)", show_default=False)
]
ConfigOption = Annotated[Path | None, typer.Option("--config", "-c", help="YAML config path")]
DryRunOption = Annotated[bool, typer.Option("--dry-run", help="Validate only, don't upload")]
MockOption = Annotated[bool, typer.Option("--mock", help="Simulate the upload")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging")]


def setup_logging(verbose: bool = False):
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def fail(message: str):
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def resolve_config(
    config: Path | None,
    realm: str | None,
    token: str | None,
    mock: bool,
) -> ServiceConfig:
    """Load config and apply command-line overrides."""
    try:
        service_config = load_config(config)
        overrides = {}
        if realm is not None:
            overrides["realm"] = realm
        if token is not None:
            overrides["token"] = token
        if mock:
            overrides["mock_upload"] = True
        if overrides:
            service_config = ServiceConfig(**{**service_config.model_dump(), **overrides})
    except (OSError, ValueError) as e:
        fail(str(e))
    return service_config


def require_token(service_config: ServiceConfig):
    if not service_config.token and not service_config.mock_upload:
        fail("No access token. Pass --token or set SYMBOLUP_TOKEN.")


def progress_to_bar(bar: tqdm) -> ProgressCallback:
    """Progress callback that drives a tqdm bar."""

    def on_progress(info: ProgressInfo):
        if bar.total != info.total:
            bar.total = info.total
        bar.update(info.loaded - bar.n)

    return on_progress


def upload_with_progress(request: UploadRequest, kind: str) -> bool:
    """Run one upload behind a progress bar; log and report failure instead of raising."""
    uploader = get_uploader(kind)
    size = request.file.path.stat().st_size

    with tqdm(total=size, unit="B", unit_scale=True, desc=request.file.path.name) as bar:
        request.on_progress = progress_to_bar(bar)
        try:
            uploader(request)
        except Exception as e:
            bar.close()
            classify_and_log_error(
                e, f"Failed to upload {request.file.path.name}", request.url, logger
            )
            return False

    return True


@ios_app.command("upload")
def ios_upload(
    path: Annotated[
        Path, typer.Option("--path", help="dSYMs directory, .dSYM directory, or .dSYM(s).zip file")
    ],
    realm: RealmOption = None,
    token: TokenOption = None,
    config: ConfigOption = None,
    dry_run: DryRunOption = False,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """Zip and upload iOS dSYMs."""
    setup_logging(verbose)
    service_config = resolve_config(config, realm, token, mock)
    if not dry_run:
        require_token(service_config)

    try:
        staged = prepare_artifacts(path)
    except UserFriendlyError as e:
        fail(e.message)

    failed = []
    try:
        if not staged.files:
            console.print(f"[yellow]No dSYMs found in {escape(str(path))}[/yellow]")
            return

        console.print(f"[bold]Staged {len(staged.files)} file(s) from {escape(str(path))}[/bold]")
        if dry_run:
            console.print("[yellow]DRY RUN - no changes will be made[/yellow]")
            for zip_file in staged.files:
                console.print(f"  {zip_file.name}")
            return

        url = service_config.dsym_url()
        kind = "mock" if service_config.mock_upload else "multipart"
        for zip_file in staged.files:
            request = UploadRequest(
                url=url,
                file=FileReference(zip_file, "file"),
                token=service_config.token,
                parameters={"filename": zip_file.name},
            )
            if not upload_with_progress(request, kind):
                failed.append(zip_file.name)
    finally:
        cleanup_staging(staged.staging_dir)

    if failed:
        console.print(f"\n[red]Failed uploads ({len(failed)}):[/red]")
        for name in failed:
            console.print(f"  {name}")
        raise typer.Exit(1)

    console.print("\n[green]Upload complete![/green]")


@android_app.command("upload")
def android_upload(
    file: Annotated[Path, typer.Option("--file", help="Mapping file (.txt or .gz)")],
    app_id: Annotated[str, typer.Option("--app-id", help="Application ID")],
    version_code: Annotated[int, typer.Option("--version-code", help="Version code")],
    uuid: Annotated[str | None, typer.Option("--uuid", help="Optional build UUID")] = None,
    realm: RealmOption = None,
    token: TokenOption = None,
    config: ConfigOption = None,
    dry_run: DryRunOption = False,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """Upload an Android mapping file."""
    setup_logging(verbose)
    service_config = resolve_config(config, realm, token, mock)

    if not file.is_file():
        fail(f"File not found: Ensure the provided file [{file}] exists before re-running.")
    if file.suffix.lower() not in MAPPING_FILE_SUFFIXES:
        fail(f"Invalid input: Expected a mapping file ending in {' or '.join(MAPPING_FILE_SUFFIXES)}.")

    url = service_config.mapping_url(app_id, version_code, uuid)
    console.print(f"[bold]Target:[/bold] {url}")
    if dry_run:
        console.print("[yellow]DRY RUN - no changes will be made[/yellow]")
        return

    require_token(service_config)
    request = UploadRequest(url=url, file=FileReference(file), token=service_config.token)
    kind = "mock" if service_config.mock_upload else "stream"
    if not upload_with_progress(request, kind):
        raise typer.Exit(1)

    console.print("\n[green]Upload complete![/green]")


@android_app.command("list")
def android_list(
    app_id: Annotated[str, typer.Option("--app-id", help="Application ID")],
    realm: RealmOption = None,
    token: TokenOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """List mapping files already uploaded for an application."""
    setup_logging(verbose)
    service_config = resolve_config(config, realm, token, mock=False)
    require_token(service_config)

    try:
        mappings = fetch_metadata(service_config.mapping_list_url(app_id), service_config.token)
    except MetadataFetchError as e:
        fail(str(e))

    table = Table(title=f"Mapping files for {app_id}", show_header=True)
    table.add_column("#", style="dim")
    table.add_column("Mapping")
    for i, mapping in enumerate(mappings):
        table.add_row(str(i + 1), str(mapping))
    console.print(table)


@app.command()
def version():
    """Show version information."""
    from symbolup import __version__

    console.print(f"symbolup version {__version__}")


if __name__ == "__main__":
    app()
