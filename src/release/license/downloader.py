"""Downloader for the SPDX license list with an on-disk JSON cache.

Documents are fetched from the spdx/license-list-data repository. With
caching enabled, each document is stored under
``<cache_dir>/<version>/`` and later reads are served from disk.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from src.release.license.models import License, LicenseIndex, LicenseList

logger = logging.getLogger(__name__)

DEFAULT_LICENSE_DATA_URL = "https://raw.githubusercontent.com/spdx/license-list-data"
DEFAULT_LICENSE_DATA_VERSION = "main"


class LicenseDownloadError(Exception):
    """Raised when the license list cannot be downloaded or cached."""

    pass


@dataclass
class DownloaderOptions:
    """Configuration for the license downloader.

    Attributes:
        cache_dir: Directory holding cached license documents.
        enable_cache: Read from and write to cache_dir when True.
        version: Git ref of spdx/license-list-data to fetch.
        base_url: Raw content base URL of the license data repository.
        parallel_downloads: Concurrent license detail downloads.
        timeout: HTTP timeout in seconds.
    """

    cache_dir: Optional[Path] = None
    enable_cache: bool = True
    version: str = DEFAULT_LICENSE_DATA_VERSION
    base_url: str = DEFAULT_LICENSE_DATA_URL
    parallel_downloads: int = 5
    timeout: float = 30.0


class LicenseDownloader:
    """Fetches every SPDX license and populates the cache directory.

    Attributes:
        options: Downloader configuration.
    """

    def __init__(
        self,
        options: DownloaderOptions,
        http_client: Optional[httpx.Client] = None,
    ):
        """Validate options and prepare the cache directory.

        Raises:
            LicenseDownloadError: If the options are invalid or the cache
                directory cannot be created.
        """
        if options.parallel_downloads < 1:
            raise LicenseDownloadError("parallel_downloads must be at least 1")
        if options.enable_cache and options.cache_dir is None:
            raise LicenseDownloadError("cache_dir is required when caching is enabled")

        self.options = options
        self._http_client = http_client

        if options.enable_cache:
            try:
                self._version_cache_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise LicenseDownloadError(
                    f"cannot create license cache {self._version_cache_dir}: {exc}"
                ) from exc

    @property
    def _version_cache_dir(self) -> Path:
        return Path(self.options.cache_dir) / self.options.version

    def fetch_all(self) -> LicenseList:
        """Download (or read from cache) the full SPDX license list.

        Returns:
            LicenseList with every license in the index.

        Raises:
            LicenseDownloadError: On HTTP, parsing, or cache write failures.
        """
        client = self._http_client or httpx.Client(
            timeout=self.options.timeout, follow_redirects=True
        )
        try:
            index = self._fetch_index(client)
            logger.info(
                "Fetching SPDX licenses",
                extra={
                    "license_list_version": index.license_list_version,
                    "license_count": len(index.licenses),
                },
            )
            license_ids = [entry.license_id for entry in index.licenses]
            with ThreadPoolExecutor(
                max_workers=self.options.parallel_downloads
            ) as executor:
                licenses = list(
                    executor.map(
                        lambda license_id: self._fetch_license(client, license_id),
                        license_ids,
                    )
                )
        finally:
            if self._http_client is None:
                client.close()

        return LicenseList(
            version=index.license_list_version,
            licenses={item.license_id: item for item in licenses},
        )

    def _fetch_index(self, client: httpx.Client) -> LicenseIndex:
        document = self._get_document(client, "json/licenses.json", "licenses.json")
        try:
            return LicenseIndex.model_validate(document)
        except ValidationError as exc:
            raise LicenseDownloadError(f"invalid SPDX license index: {exc}") from exc

    def _fetch_license(self, client: httpx.Client, license_id: str) -> License:
        document = self._get_document(
            client,
            f"json/details/{license_id}.json",
            f"details/{license_id}.json",
        )
        try:
            return License.model_validate(document)
        except ValidationError as exc:
            raise LicenseDownloadError(
                f"invalid SPDX license {license_id}: {exc}"
            ) from exc

    def _get_document(
        self, client: httpx.Client, remote_path: str, cache_name: str
    ) -> Any:
        """Return a parsed JSON document, preferring the cached copy."""
        cache_file = self._version_cache_dir / cache_name if self.options.enable_cache else None

        if cache_file is not None and cache_file.is_file():
            try:
                return json.loads(cache_file.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                logger.warning(
                    "Ignoring unreadable license cache entry",
                    extra={"path": str(cache_file)},
                )

        url = f"{self.options.base_url.rstrip('/')}/{self.options.version}/{remote_path}"
        try:
            response = client.get(url)
            response.raise_for_status()
            document = response.json()
        except httpx.HTTPStatusError as exc:
            raise LicenseDownloadError(
                f"GET {url} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise LicenseDownloadError(f"GET {url} failed: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise LicenseDownloadError(f"GET {url} returned invalid JSON") from exc

        if cache_file is not None:
            self._write_cache(cache_file, document)
        return document

    def _write_cache(self, cache_file: Path, document: Any) -> None:
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            cache_file.write_text(json.dumps(document), encoding="utf-8")
        except OSError as exc:
            raise LicenseDownloadError(
                f"cannot write license cache {cache_file}: {exc}"
            ) from exc
