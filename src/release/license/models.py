"""Pydantic models for the SPDX license list data.

Field aliases follow the JSON documents published in the
spdx/license-list-data repository (``json/licenses.json`` and
``json/details/<id>.json``). Unknown fields are ignored.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LicenseIndexEntry(BaseModel):
    """One license as listed in the SPDX license index."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    license_id: str = Field(..., alias="licenseId", min_length=1)
    name: str = Field(default="")
    reference: str = Field(default="")
    details_url: str = Field(default="", alias="detailsUrl")
    is_osi_approved: bool = Field(default=False, alias="isOsiApproved")
    is_deprecated: bool = Field(default=False, alias="isDeprecatedLicenseId")


class LicenseIndex(BaseModel):
    """The SPDX license index document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    license_list_version: str = Field(..., alias="licenseListVersion")
    release_date: str = Field(default="", alias="releaseDate")
    licenses: list[LicenseIndexEntry] = Field(default_factory=list)


class License(BaseModel):
    """Full details of a single SPDX license, including its text."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    license_id: str = Field(..., alias="licenseId", min_length=1)
    name: str = Field(default="")
    license_text: str = Field(default="", alias="licenseText")
    is_osi_approved: bool = Field(default=False, alias="isOsiApproved")
    is_deprecated: bool = Field(default=False, alias="isDeprecatedLicenseId")


class LicenseList(BaseModel):
    """The complete set of licenses returned by a full fetch.

    Attributes:
        version: SPDX license list version (e.g. "3.24").
        licenses: Licenses keyed by SPDX identifier.
    """

    version: str
    licenses: dict[str, License] = Field(default_factory=dict)

    def get(self, license_id: str) -> Optional[License]:
        """Return the license with the given SPDX identifier, if known."""
        return self.licenses.get(license_id)

    def __len__(self) -> int:
        return len(self.licenses)
