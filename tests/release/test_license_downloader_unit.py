"""Unit tests for the SPDX license downloader.

HTTP traffic is served by httpx.MockTransport; the cache lives in tmp_path.
"""

import json

import httpx
import pytest

from src.release.license.downloader import (
    DEFAULT_LICENSE_DATA_URL,
    DownloaderOptions,
    LicenseDownloadError,
    LicenseDownloader,
)
from src.release.license.models import LicenseList

INDEX = {
    "licenseListVersion": "3.24",
    "releaseDate": "2024-05-22",
    "licenses": [
        {"licenseId": "MIT", "name": "MIT License", "isOsiApproved": True,
         "isDeprecatedLicenseId": False, "detailsUrl": "https://spdx.org/licenses/MIT.json"},
        {"licenseId": "Apache-2.0", "name": "Apache License 2.0", "isOsiApproved": True,
         "isDeprecatedLicenseId": False},
    ],
}

DETAILS = {
    "MIT": {"licenseId": "MIT", "name": "MIT License",
            "licenseText": "Permission is hereby granted...", "isOsiApproved": True},
    "Apache-2.0": {"licenseId": "Apache-2.0", "name": "Apache License 2.0",
                   "licenseText": "Apache License Version 2.0...", "isOsiApproved": True},
}


def make_transport(requests, index=INDEX, details=DETAILS, fail_paths=()):
    """Build a MockTransport serving the SPDX documents and recording paths."""

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        requests.append(path)
        if path in fail_paths:
            return httpx.Response(503)
        if path.endswith("/json/licenses.json"):
            return httpx.Response(200, json=index)
        license_id = path.rsplit("/", 1)[-1][: -len(".json")]
        if license_id in details:
            return httpx.Response(200, json=details[license_id])
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "spdx" / "licenses"


class TestFetchAll:

    def test_fetches_every_license(self, cache_dir):
        requests = []
        client = httpx.Client(transport=make_transport(requests))
        downloader = LicenseDownloader(DownloaderOptions(cache_dir=cache_dir), client)

        licenses = downloader.fetch_all()

        assert isinstance(licenses, LicenseList)
        assert licenses.version == "3.24"
        assert len(licenses) == 2
        assert licenses.get("MIT").license_text.startswith("Permission")
        assert licenses.get("GPL-3.0") is None
        assert "/spdx/license-list-data/main/json/licenses.json" in requests

    def test_populates_cache_directory(self, cache_dir):
        client = httpx.Client(transport=make_transport([]))
        LicenseDownloader(DownloaderOptions(cache_dir=cache_dir), client).fetch_all()

        version_dir = cache_dir / "main"
        assert json.loads((version_dir / "licenses.json").read_text()) == INDEX
        assert (version_dir / "details" / "MIT.json").is_file()
        assert (version_dir / "details" / "Apache-2.0.json").is_file()

    def test_second_fetch_is_served_from_cache(self, cache_dir):
        first_requests = []
        client = httpx.Client(transport=make_transport(first_requests))
        LicenseDownloader(DownloaderOptions(cache_dir=cache_dir), client).fetch_all()
        assert len(first_requests) == 3

        second_requests = []
        client = httpx.Client(transport=make_transport(second_requests))
        licenses = LicenseDownloader(
            DownloaderOptions(cache_dir=cache_dir), client).fetch_all()

        assert second_requests == []
        assert len(licenses) == 2

    def test_cache_disabled_writes_nothing(self, tmp_path):
        client = httpx.Client(transport=make_transport([]))
        options = DownloaderOptions(cache_dir=None, enable_cache=False)
        licenses = LicenseDownloader(options, client).fetch_all()
        assert len(licenses) == 2
        assert list(tmp_path.iterdir()) == []

    def test_version_selects_ref(self, cache_dir):
        requests = []
        client = httpx.Client(transport=make_transport(requests))
        options = DownloaderOptions(cache_dir=cache_dir, version="v3.24")
        LicenseDownloader(options, client).fetch_all()
        assert "/spdx/license-list-data/v3.24/json/details/MIT.json" in requests
        assert (cache_dir / "v3.24" / "licenses.json").is_file()


class TestFetchAllFailures:

    def test_index_http_error(self, cache_dir):
        client = httpx.Client(transport=make_transport(
            [], fail_paths={"/spdx/license-list-data/main/json/licenses.json"}))
        downloader = LicenseDownloader(DownloaderOptions(cache_dir=cache_dir), client)
        with pytest.raises(LicenseDownloadError, match="503"):
            downloader.fetch_all()

    def test_missing_detail_document(self, cache_dir):
        details = {"MIT": DETAILS["MIT"]}
        client = httpx.Client(transport=make_transport([], details=details))
        downloader = LicenseDownloader(DownloaderOptions(cache_dir=cache_dir), client)
        with pytest.raises(LicenseDownloadError, match="404"):
            downloader.fetch_all()

    def test_connection_error(self, cache_dir):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        downloader = LicenseDownloader(DownloaderOptions(cache_dir=cache_dir), client)
        with pytest.raises(LicenseDownloadError, match="failed"):
            downloader.fetch_all()

    def test_invalid_index_document(self, cache_dir):
        client = httpx.Client(transport=make_transport([], index={"licenses": []}))
        downloader = LicenseDownloader(DownloaderOptions(cache_dir=cache_dir), client)
        with pytest.raises(LicenseDownloadError, match="invalid SPDX license index"):
            downloader.fetch_all()


class TestDownloaderOptions:

    def test_defaults(self):
        options = DownloaderOptions()
        assert options.base_url == DEFAULT_LICENSE_DATA_URL
        assert options.enable_cache is True
        assert options.parallel_downloads == 5

    def test_cache_dir_required_with_cache(self):
        with pytest.raises(LicenseDownloadError, match="cache_dir"):
            LicenseDownloader(DownloaderOptions())

    def test_invalid_parallelism(self, cache_dir):
        with pytest.raises(LicenseDownloadError, match="parallel_downloads"):
            LicenseDownloader(DownloaderOptions(cache_dir=cache_dir, parallel_downloads=0))

    def test_unwritable_cache_dir(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(LicenseDownloadError, match="cannot create license cache"):
            LicenseDownloader(DownloaderOptions(cache_dir=blocker / "licenses"))
