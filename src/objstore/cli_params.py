"""Shared CLI parameter definitions.

Every command takes the same bucket and S3 connection options. They are
defined once here as ``Annotated`` aliases and used directly in command
signatures; unset options fall back to ``OBJSTORE_*`` settings.

Usage:
    @app.command()
    def my_command(bucket: BucketOption = None, region: RegionOption = None):
        pass
"""

from typing import Annotated, Optional

import typer

BucketOption = Annotated[
    Optional[str],
    typer.Option("--bucket", "-b", help="Bucket name (default: OBJSTORE_BUCKET_NAME)"),
]

BasePrefixOption = Annotated[
    Optional[str],
    typer.Option(
        "--base-prefix", help="Prefix all paths are rooted under (default: none)"
    ),
]

AccessKeyOption = Annotated[
    Optional[str],
    typer.Option("--access-key-id", help="AWS access key ID"),
]

SecretKeyOption = Annotated[
    Optional[str],
    typer.Option("--secret-access-key", help="AWS secret access key"),
]

SessionTokenOption = Annotated[
    Optional[str],
    typer.Option("--session-token", help="AWS session token"),
]

RegionOption = Annotated[
    Optional[str],
    typer.Option("--region", help="AWS region name (default: us-east-1)"),
]

EndpointUrlOption = Annotated[
    Optional[str],
    typer.Option("--endpoint-url", help="Custom S3 endpoint URL"),
]

ProfileOption = Annotated[
    Optional[str],
    typer.Option("--aws-profile", help="AWS CLI profile name"),
]

LimitOption = Annotated[
    Optional[int],
    typer.Option("--limit", "-n", min=1, help="Maximum number of entries per page"),
]

StartAfterOption = Annotated[
    str,
    typer.Option("--start-after", help="Cursor printed by the previous page"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Print the page as JSON"),
]
