"""Command-line interface for objstore.

This module provides a CLI for directory-style operations on a bucket.

Commands:
    - ls: List one page of a directory (files and subdirectories)
    - mv: Rename an object
    - put: Upload a local file
    - mkdir: Create an empty directory
    - stat: Show an object's size and timestamps
    - cat: Print an object's content

Paths are relative to --base-prefix. Bucket and connection options fall
back to OBJSTORE_* environment settings.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from . import __version__
from .cli_params import (
    AccessKeyOption,
    BasePrefixOption,
    BucketOption,
    EndpointUrlOption,
    JsonOption,
    LimitOption,
    ProfileOption,
    RegionOption,
    SecretKeyOption,
    SessionTokenOption,
    StartAfterOption,
)
from .core import settings
from .core.exceptions import CompensationFailedError, ValidationError
from .core.observability import setup_logging
from .path import split_key
from .store import ObjectStore, open_store

EXIT_CLEANUP_REQUIRED = 3
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

app = typer.Typer(
    name="objstore",
    help="Directory-style listing and renaming for S3-compatible object storage.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"objstore {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Log level for stderr output."),
    ] = None,
) -> None:
    """
    objstore: browse and reorganise an object storage bucket like a filesystem.
    """
    if log_level:
        if log_level.upper() not in LOG_LEVELS:
            raise typer.BadParameter(
                f"must be one of {', '.join(LOG_LEVELS)}", param_hint="--log-level"
            )
        setup_logging(log_level)


def _open_store(
    bucket: Optional[str],
    base_prefix: Optional[str],
    access_key_id: Optional[str],
    secret_access_key: Optional[str],
    session_token: Optional[str],
    region_name: Optional[str],
    endpoint_url: Optional[str],
    aws_profile: Optional[str],
) -> ObjectStore:
    """Create the store for one command, falling back to settings."""
    bucket = bucket or settings.bucket_name
    if not bucket:
        raise ValidationError(
            "No bucket given: pass --bucket or set OBJSTORE_BUCKET_NAME"
        )

    return open_store(
        bucket,
        base_prefix=settings.base_prefix if base_prefix is None else base_prefix,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
        region_name=region_name or settings.region_name,
        endpoint_url=endpoint_url or settings.endpoint_url,
        aws_profile=aws_profile or settings.aws_profile,
    )


@app.command("ls")
def ls_cmd(
    prefix: Annotated[str, typer.Argument(help="Directory to list")] = "",
    start_after: StartAfterOption = "",
    limit: LimitOption = None,
    as_json: JsonOption = False,
    bucket: BucketOption = None,
    base_prefix: BasePrefixOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    List one page of a directory.

    Examples:
        objstore ls reports --bucket my-bucket --limit 50
        objstore ls reports --bucket my-bucket --start-after reports/q1.pdf
    """
    try:
        with _open_store(
            bucket,
            base_prefix,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        ) as store:
            page = store.list_page(prefix, start_after, limit)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(page.model_dump_json(indent=2))
        return

    if not page.entries:
        typer.echo("No entries found.")
    for entry in page.entries:
        marker = "d" if entry.is_dir else "-"
        name = f"{entry.name}{settings.delimiter}" if entry.is_dir else entry.name
        typer.echo(f"{marker} {entry.size:>12}  {name}")

    if page.has_more:
        typer.echo(
            f"More entries available. Continue with: --start-after '{page.last_key}'"
        )


@app.command("mv")
def mv_cmd(
    source: Annotated[str, typer.Argument(help="Object to rename")],
    destination: Annotated[str, typer.Argument(help="New path; must not exist")],
    bucket: BucketOption = None,
    base_prefix: BasePrefixOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Rename an object (copy to the new path, then delete the old one).

    Example:
        objstore mv drafts/report.txt final/report.txt --bucket my-bucket
    """
    try:
        separator = settings.delimiter
        source_prefix, source_name = split_key(source, separator)
        destination_prefix, destination_name = split_key(destination, separator)
        with _open_store(
            bucket,
            base_prefix,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        ) as store:
            store.rename_object(
                source_prefix, source_name, destination_prefix, destination_name
            )
    except CompensationFailedError as e:
        typer.echo(f"Error: {e}", err=True)
        typer.echo(
            f"Manual cleanup required: both {e.source_key} and "
            f"{e.destination_key} exist.",
            err=True,
        )
        raise typer.Exit(EXIT_CLEANUP_REQUIRED)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Renamed {source} -> {destination}")


@app.command("put")
def put_cmd(
    local_file: Annotated[
        Path, typer.Argument(help="Local file to upload", exists=True, dir_okay=False)
    ],
    prefix: Annotated[str, typer.Argument(help="Directory to upload into")] = "",
    name: Annotated[
        Optional[str],
        typer.Option("--name", help="Object name (default: the file's name)"),
    ] = None,
    bucket: BucketOption = None,
    base_prefix: BasePrefixOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Upload a local file.

    Example:
        objstore put ./q1.pdf reports --bucket my-bucket
    """
    filename = name or local_file.name
    try:
        with _open_store(
            bucket,
            base_prefix,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        ) as store, local_file.open("rb") as body:
            written = store.upload_file(body, prefix, filename)
            key = store.object_key(prefix, filename)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Uploaded {written:,} bytes to {key}")


@app.command("mkdir")
def mkdir_cmd(
    path: Annotated[str, typer.Argument(help="Directory to create")],
    bucket: BucketOption = None,
    base_prefix: BasePrefixOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Create an empty directory.

    Example:
        objstore mkdir reports/2024 --bucket my-bucket
    """
    try:
        prefix, dir_name = split_key(path, settings.delimiter)
        with _open_store(
            bucket,
            base_prefix,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        ) as store:
            marker = store.create_directory(prefix, dir_name)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Created {marker}")


@app.command("stat")
def stat_cmd(
    path: Annotated[str, typer.Argument(help="Object to describe")],
    bucket: BucketOption = None,
    base_prefix: BasePrefixOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """Show an object's size and timestamps."""
    try:
        prefix, name = split_key(path, settings.delimiter)
        with _open_store(
            bucket,
            base_prefix,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        ) as store:
            attributes = store.get_attributes(prefix, name)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Key: {attributes.key}")
    typer.echo(f"Size: {attributes.size:,} bytes")
    if attributes.content_type:
        typer.echo(f"Content type: {attributes.content_type}")
    if attributes.updated:
        typer.echo(f"Updated: {attributes.updated.isoformat()}")


@app.command("cat")
def cat_cmd(
    path: Annotated[str, typer.Argument(help="Object to print")],
    bucket: BucketOption = None,
    base_prefix: BasePrefixOption = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """Print an object's content."""
    try:
        prefix, name = split_key(path, settings.delimiter)
        with _open_store(
            bucket,
            base_prefix,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        ) as store:
            content = store.read_object(prefix, name)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(content, nl=False)


if __name__ == "__main__":
    app()
