"""SPDX license list download and on-disk caching.

The release tooling attributes third-party dependencies using SPDX
license texts. Fetching the whole list during staging both warms the
cache and surfaces network problems before the build starts.
"""

from src.release.license.downloader import (
    DEFAULT_LICENSE_DATA_URL,
    DownloaderOptions,
    LicenseDownloadError,
    LicenseDownloader,
)
from src.release.license.models import (
    License,
    LicenseIndex,
    LicenseIndexEntry,
    LicenseList,
)

__all__ = [
    "DEFAULT_LICENSE_DATA_URL",
    "DownloaderOptions",
    "License",
    "LicenseDownloadError",
    "LicenseDownloader",
    "LicenseIndex",
    "LicenseIndexEntry",
    "LicenseList",
]
