"""
Command-line interface for the asset sync tool.

Provides the ``upload`` command using the Click framework.
"""

import signal
import sys
import threading

import click
from rich.console import Console

from shared.constants import DEFAULT_PARALLEL_UPLOADS, MAX_PARALLEL_UPLOADS
from shared.models import SyncOptions
from .config import load_settings
from .errors import ConfigurationError, SyncCancelled, SyncError
from .provider_factory import StorageProviderFactory

console = Console()


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """
    Static asset sync for CDN-fronted buckets

    Uploads changed stylesheets, scripts and images (plus gzip variants)
    to S3, Cloudflare R2 or any S3-compatible storage.
    """
    pass


@cli.command()
@click.option('--verbose', '-v', is_flag=True, help='Print the decision for every key (+ upload, = unchanged)')
@click.option('--dryrun', is_flag=True, help='Compute every decision but do not write to the bucket')
@click.option('--force-write', is_flag=True, help='Upload even if the key already exists remotely')
@click.option('--parallel', default=DEFAULT_PARALLEL_UPLOADS, type=click.IntRange(1, MAX_PARALLEL_UPLOADS),
              help='Number of parallel upload threads')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              help='Path to asset_host.yml (default: config/asset_host.yml)')
@click.option('--env', 'environment', help='Configuration environment (default: production)')
def upload(verbose, dryrun, force_write, parallel, config_path, environment):
    """
    Upload changed assets to the bucket.

    Computes the key of every local asset, compares it with the keys
    already in the bucket and uploads only what is missing or must be
    refreshed.
    """
    from .uploader import UploadEngine

    try:
        config = load_settings(config_path, environment)
    except ConfigurationError as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        sys.exit(1)

    provider_name = StorageProviderFactory.get_provider_name(config.provider)
    console.print(f"\n[bold green]Starting {'Dry Run' if dryrun else 'Upload'}[/bold green]")
    console.print(f"Source: [cyan]{config.public_path}[/cyan] -> {provider_name} [cyan]{config.bucket}[/cyan]")
    console.print(f"Options: gzip={config.gzip}, rewrite_css={config.rewrite_css_path}, "
                  f"force_write={force_write}, parallel={parallel}\n")

    cancel_event = threading.Event()
    options = SyncOptions(verbose=verbose, dryrun=dryrun, force_write=force_write,
                          parallel=parallel, cancel_event=cancel_event)

    # Ctrl+C stops the run between keys instead of mid-upload
    previous_handler = signal.signal(signal.SIGINT, lambda *_: cancel_event.set())
    try:
        engine = UploadEngine(
            config, environment=environment,
            progress_callback=lambda msg: console.print(msg, markup=False, highlight=False))
        report = engine.run(options)
    except SyncCancelled:
        console.print("\n[yellow]Upload cancelled.[/yellow]")
        sys.exit(130)
    except SyncError as e:
        console.print(f"\n[red]❌ Upload failed: {e}[/red]")
        sys.exit(1)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    verb = "Would upload" if dryrun else "Uploaded"
    console.print(f"\n[green]✅ {verb} {len(report.uploaded)} objects, "
                  f"{len(report.unchanged)} unchanged.[/green]")


if __name__ == '__main__':
    cli()
