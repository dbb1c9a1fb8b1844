"""Workspace preparation for the stage phase.

Clones the canonical repository (or reopens an existing checkout), then
downloads the full SPDX license list into the license cache. License
data is fetched eagerly so that network or data problems fail the stage
immediately instead of surfacing mid-build.

A license cache failure does not roll back the checkout.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from src.release.config import (
    DEFAULT_IDENTITY,
    DEFAULT_LICENSE_CACHE_DIR,
    WorkspaceIdentity,
)
from src.release.git.client import GitClient
from src.release.license.downloader import DownloaderOptions, LicenseDownloader
from src.release.steps import Step, run_steps

logger = logging.getLogger(__name__)

STEP_CLONE = "clone"
STEP_LICENSE_CACHE = "license-cache"


class WorkspaceStager:
    """Prepares a workspace for staging.

    Attributes:
        identity: Repository identity to clone.
        git_client: Clones and opens checkouts.
        license_cache_dir: Directory the SPDX license list is cached in.
        downloader_factory: Builds a license downloader from its options.
    """

    def __init__(
        self,
        identity: WorkspaceIdentity = DEFAULT_IDENTITY,
        git_client: Optional[GitClient] = None,
        license_cache_dir: Path = DEFAULT_LICENSE_CACHE_DIR,
        downloader_factory: Callable[[DownloaderOptions], LicenseDownloader] = LicenseDownloader,
    ):
        self.identity = identity
        self.git_client = git_client or GitClient(remote=identity.remote)
        self.license_cache_dir = Path(license_cache_dir)
        self.downloader_factory = downloader_factory

    def prepare_stage(self, directory: Union[str, Path]) -> None:
        """Clone or open the checkout at directory and warm the license cache.

        Args:
            directory: Target checkout directory; may already hold a checkout.

        Raises:
            CollaboratorError: Tagged "clone" or "license-cache".
        """
        directory = Path(directory)
        logger.info(
            "Preparing workspace for staging",
            extra={"directory": str(directory)},
        )
        run_steps(
            "stage",
            [
                Step(STEP_CLONE, lambda: self._clone(directory)),
                Step(STEP_LICENSE_CACHE, self._warm_license_cache),
            ],
        )

    def _clone(self, directory: Path) -> None:
        self.git_client.clone_or_open(
            directory,
            self.identity.github_org,
            self.identity.github_repo,
            shallow=False,
        )

    def _warm_license_cache(self) -> None:
        logger.info(
            "Caching SPDX license set",
            extra={"cache_dir": str(self.license_cache_dir)},
        )
        downloader = self.downloader_factory(
            DownloaderOptions(cache_dir=self.license_cache_dir)
        )
        licenses = downloader.fetch_all()
        logger.info(
            "Cached SPDX license set",
            extra={"version": licenses.version, "license_count": len(licenses)},
        )
