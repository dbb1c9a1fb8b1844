"""Release workspace configuration using pydantic-settings.

ReleaseSettings reads configuration from environment variables with the
RELEASE_ prefix. Every field has a default matching the upstream
kubernetes/kubernetes release layout, so an empty environment yields a
working configuration.

The fixed identity of the workspace (repository, remote, staged archive
layout) is exposed as an immutable WorkspaceIdentity which is injected into
the stager and releaser at construction.
"""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LICENSE_CACHE_DIR = Path(tempfile.gettempdir()) / "spdx" / "licenses"


@dataclass(frozen=True)
class WorkspaceIdentity:
    """Fixed constants shared by the stage and release pipelines.

    Attributes:
        github_org: Organization owning the canonical repository.
        github_repo: Canonical repository name.
        remote: Name of the git remote rewritten on release.
        stage_path: Path segment under the bucket holding staged builds.
        sources_archive: File name of the staged sources archive.
        source_subpath: Trailing part of the workspace path which mirrors the
            archive's internal path prefix.
        remote_user: Account name embedded in the authenticated remote URL.
        remote_host: Host of the authenticated remote URL.
        token_env_key: Environment variable holding the push token.
    """

    github_org: str = "kubernetes"
    github_repo: str = "kubernetes"
    remote: str = "origin"
    stage_path: str = "stage"
    sources_archive: str = "kubernetes-src.tar.gz"
    source_subpath: str = "/src/k8s.io/kubernetes"
    remote_user: str = "git"
    remote_host: str = "github.com"
    token_env_key: str = "GITHUB_TOKEN"


DEFAULT_IDENTITY = WorkspaceIdentity()


class ReleaseSettings(BaseSettings):
    """Workspace preparation configuration from environment variables.

    All environment variables are prefixed with RELEASE_
    (e.g., RELEASE_GITHUB_ORG, RELEASE_LICENSE_CACHE_DIR).
    """

    model_config = SettingsConfigDict(
        env_prefix="RELEASE_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Repository identity
    # -------------------------------------------------------------------------
    github_org: str = DEFAULT_IDENTITY.github_org
    github_repo: str = DEFAULT_IDENTITY.github_repo
    git_remote: str = DEFAULT_IDENTITY.remote

    # Account and host embedded in the push URL
    remote_user: str = DEFAULT_IDENTITY.remote_user
    remote_host: str = DEFAULT_IDENTITY.remote_host

    # Name of the env variable holding the push token (not the token itself)
    token_env_key: str = DEFAULT_IDENTITY.token_env_key

    # -------------------------------------------------------------------------
    # Staged archive layout
    # -------------------------------------------------------------------------
    stage_path: str = DEFAULT_IDENTITY.stage_path
    sources_archive: str = DEFAULT_IDENTITY.sources_archive
    source_subpath: str = DEFAULT_IDENTITY.source_subpath

    # Overrides the object storage endpoint chosen from the URL scheme
    storage_endpoint_url: Optional[str] = None

    # -------------------------------------------------------------------------
    # Local directories
    # -------------------------------------------------------------------------
    license_cache_dir: Path = DEFAULT_LICENSE_CACHE_DIR

    # Parent for ephemeral download directories (system temp dir when unset)
    temp_root: Optional[Path] = None

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator(
        "github_org",
        "github_repo",
        "git_remote",
        "remote_user",
        "remote_host",
        "token_env_key",
        "stage_path",
        "sources_archive",
    )
    @classmethod
    def validate_not_empty(cls, v: str, info: ValidationInfo) -> str:
        """Validate that identity fields are not empty."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return v

    @field_validator("source_subpath")
    @classmethod
    def validate_source_subpath(cls, v: str) -> str:
        """Validate that the source subpath is rooted."""
        if not v.startswith("/") or v == "/":
            raise ValueError("source_subpath must start with / and name a directory")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is a known logging level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log_level: {v}")
        return level

    def identity(self) -> WorkspaceIdentity:
        """Build the immutable workspace identity from these settings."""
        return WorkspaceIdentity(
            github_org=self.github_org,
            github_repo=self.github_repo,
            remote=self.git_remote,
            stage_path=self.stage_path,
            sources_archive=self.sources_archive,
            source_subpath=self.source_subpath,
            remote_user=self.remote_user,
            remote_host=self.remote_host,
            token_env_key=self.token_env_key,
        )


def get_settings() -> ReleaseSettings:
    """Create and return a ReleaseSettings instance.

    Raises:
        pydantic.ValidationError: If any environment override is invalid.
    """
    return ReleaseSettings()
