"""Workspace preparation for the release phase.

Downloads the staged sources archive for a build version into an
ephemeral directory, extracts it over the workspace, and rewrites the
checkout's remote URL so later pushes authenticate with the release
token.

The ephemeral directory is removed on every exit path. Everything else
(extracted sources, remote changes) is kept even when a later step fails.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

from src.release.archive import extract_archive
from src.release.config import DEFAULT_IDENTITY, WorkspaceIdentity
from src.release.errors import ConfigurationError, WorkspaceEnvironmentError
from src.release.git.client import GitClient
from src.release.objectstore.client import ObjectStore
from src.release.paths import (
    authenticated_remote_url,
    extraction_destination,
    staged_archive_key,
)
from src.release.steps import Step, run_steps

logger = logging.getLogger(__name__)

STAGED_TEMP_PREFIX = "staged-"

STEP_FETCH = "fetch-staged-sources"
STEP_EXTRACT = "extract"
STEP_READ_TOKEN = "read-token"
STEP_SET_REMOTE = "set-remote"


class WorkspaceReleaser:
    """Prepares a staged workspace for release.

    Attributes:
        identity: Repository identity and staged archive layout.
        git_client: Opens the checkout and rewrites its remote.
        object_store: Downloads the staged archive.
        extractor: Extracts an archive into a destination directory.
        temp_root: Parent of ephemeral directories (system default if None).
    """

    def __init__(
        self,
        identity: WorkspaceIdentity = DEFAULT_IDENTITY,
        git_client: Optional[GitClient] = None,
        object_store: Optional[ObjectStore] = None,
        extractor: Callable[[Path, Path], None] = extract_archive,
        temp_root: Optional[Path] = None,
    ):
        self.identity = identity
        self.git_client = git_client or GitClient(remote=identity.remote)
        self.object_store = object_store or ObjectStore()
        self.extractor = extractor
        self.temp_root = temp_root

    def prepare_release(
        self,
        directory: Union[str, Path],
        build_version: str,
        bucket: str,
    ) -> None:
        """Fetch, extract, and re-authenticate the staged workspace.

        Args:
            directory: Existing checkout directory from a prior stage.
            build_version: Version used verbatim as a storage path segment.
            bucket: Object storage prefix, e.g. "gs://bucket".

        Raises:
            ValueError: If build_version or bucket is empty.
            WorkspaceEnvironmentError: If the ephemeral directory cannot be
                created or removed.
            CollaboratorError: Tagged "fetch-staged-sources", "extract" or
                "set-remote".
            ConfigurationError: If the token env variable is not set.
        """
        if not build_version:
            raise ValueError("build_version cannot be empty")
        if not bucket:
            raise ValueError("bucket cannot be empty")

        directory = str(directory)
        logger.info(
            "Preparing workspace for release",
            extra={"directory": directory, "build_version": build_version},
        )

        temp_dir = self._create_temp_dir()
        try:
            archive_path = temp_dir / self.identity.sources_archive
            run_steps(
                "release",
                self._release_steps(directory, build_version, bucket, archive_path),
            )
        finally:
            self._remove_temp_dir(temp_dir)

    def _release_steps(
        self,
        directory: str,
        build_version: str,
        bucket: str,
        archive_path: Path,
    ) -> list[Step]:
        # Filled in by read-token, consumed by set-remote
        token_holder: dict[str, str] = {}

        def read_token() -> None:
            token_holder["token"] = self._read_token()

        return [
            Step(
                STEP_FETCH,
                lambda: self._fetch_staged_sources(build_version, bucket, archive_path),
            ),
            Step(STEP_EXTRACT, lambda: self._extract(archive_path, directory)),
            Step(STEP_READ_TOKEN, read_token),
            Step(
                STEP_SET_REMOTE,
                lambda: self._set_remote(directory, token_holder["token"]),
            ),
        ]

    def _create_temp_dir(self) -> Path:
        try:
            return Path(tempfile.mkdtemp(prefix=STAGED_TEMP_PREFIX, dir=self.temp_root))
        except OSError as exc:
            raise WorkspaceEnvironmentError(
                f"create staged sources temp dir: {exc}"
            ) from exc

    def _remove_temp_dir(self, temp_dir: Path) -> None:
        try:
            shutil.rmtree(temp_dir)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise WorkspaceEnvironmentError(
                f"remove staged sources temp dir: {exc}", path=str(temp_dir)
            ) from exc

    def _fetch_staged_sources(
        self, build_version: str, bucket: str, archive_path: Path
    ) -> None:
        source = staged_archive_key(
            bucket,
            self.identity.stage_path,
            build_version,
            self.identity.sources_archive,
        )
        logger.info(
            "Searching for staged sources",
            extra={"source": source},
        )
        self.object_store.copy_to_local(source, archive_path, allow_missing=False)

    def _extract(self, archive_path: Path, directory: str) -> None:
        destination = extraction_destination(directory, self.identity.source_subpath)
        logger.info(
            "Got staged sources, extracting archive",
            extra={"archive": str(archive_path), "destination": destination},
        )
        self.extractor(archive_path, Path(destination))

    def _read_token(self) -> str:
        token = os.environ.get(self.identity.token_env_key)
        if not token:
            raise ConfigurationError(
                f"{self.identity.token_env_key} env variable is not set",
                env_key=self.identity.token_env_key,
            )
        return token

    def _set_remote(self, directory: str, token: str) -> None:
        repository = self.git_client.open_repo(directory)
        repository.set_remote_url(
            self.identity.remote,
            authenticated_remote_url(self.identity, token),
        )
