"""Command line entry point for workspace preparation.

Usage:
    python -m src.release.main stage DIRECTORY
    python -m src.release.main release DIRECTORY --build-version V --bucket B

Configuration comes from RELEASE_* environment variables (see
config.py). Failures are logged and turned into a non-zero exit status.
"""

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from .config import ReleaseSettings, get_settings
from .errors import WorkspaceError
from .git.client import GitClient
from .objectstore.client import ObjectStore
from .workspace.releaser import WorkspaceReleaser
from .workspace.stager import WorkspaceStager

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters.

    Args:
        value: The secret value to redact.
        visible_chars: Number of characters to show at the start.

    Returns:
        Redacted string with asterisks replacing hidden characters.
    """
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: ReleaseSettings) -> None:
    """Log configuration values with the release token redacted."""
    token = os.environ.get(settings.token_env_key, "")
    logger.info("Release workspace configuration:")
    logger.info(f"  Repository: {settings.github_org}/{settings.github_repo}")
    logger.info(f"  Git Remote: {settings.git_remote}")
    logger.info(f"  Stage Path: {settings.stage_path}")
    logger.info(f"  Sources Archive: {settings.sources_archive}")
    logger.info(f"  Source Subpath: {settings.source_subpath}")
    logger.info(f"  License Cache Dir: {settings.license_cache_dir}")
    logger.info(f"  Storage Endpoint: {settings.storage_endpoint_url or 'default'}")
    logger.info(
        f"  {settings.token_env_key}: "
        f"{_redact_secret(token) if token else '(not set)'}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="release-workspace",
        description="Prepare a workspace for the stage or release phase.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    stage = subparsers.add_parser(
        "stage", help="clone the repository and warm the license cache"
    )
    stage.add_argument("directory", help="checkout directory")

    release = subparsers.add_parser(
        "release", help="extract staged sources and reset the push remote"
    )
    release.add_argument("directory", help="checkout directory from a prior stage")
    release.add_argument("--build-version", required=True, help="staged build version")
    release.add_argument("--bucket", required=True, help="staging bucket, e.g. gs://bucket")

    return parser


def build_stager(settings: ReleaseSettings) -> WorkspaceStager:
    identity = settings.identity()
    return WorkspaceStager(
        identity=identity,
        git_client=GitClient(remote=identity.remote),
        license_cache_dir=settings.license_cache_dir,
    )


def build_releaser(settings: ReleaseSettings) -> WorkspaceReleaser:
    identity = settings.identity()
    return WorkspaceReleaser(
        identity=identity,
        git_client=GitClient(remote=identity.remote),
        object_store=ObjectStore(endpoint_url=settings.storage_endpoint_url),
        temp_root=settings.temp_root,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the requested workspace pipeline and return the exit status."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid configuration: {exc}")
        return EXIT_USAGE

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    _log_configuration(settings)

    try:
        if args.command == "stage":
            build_stager(settings).prepare_stage(args.directory)
        else:
            build_releaser(settings).prepare_release(
                args.directory, args.build_version, args.bucket
            )
    except ValueError as exc:
        logger.error(f"Invalid arguments: {exc}")
        return EXIT_USAGE
    except WorkspaceError as exc:
        logger.error(f"Preparing workspace for {args.command} failed: {exc}")
        return EXIT_FAILURE

    logger.info(f"Workspace ready for {args.command}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
