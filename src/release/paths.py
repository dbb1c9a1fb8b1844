"""Path and URL derivation for the staged sources layout."""

from urllib.parse import quote, urlunsplit

from src.release.config import WorkspaceIdentity


def staged_archive_key(
    bucket: str, stage_path: str, build_version: str, archive_name: str
) -> str:
    """Return the object storage key of a staged sources archive.

    The key is the plain "/" join of its parts, e.g.
    ``gs://bucket/stage/v1.30.0/kubernetes-src.tar.gz``. No normalization is
    applied, so the same inputs always address the same object.
    """
    return "/".join((bucket, stage_path, build_version, archive_name))


def extraction_destination(directory: str, source_subpath: str) -> str:
    """Return the directory the staged archive is extracted into.

    The archive stores the tree under ``source_subpath`` (relative), so
    stripping that suffix from the workspace path lands the contents back at
    the workspace itself. A directory without the suffix is returned as is.
    """
    if not directory.endswith(source_subpath):
        return directory
    trimmed = directory[: len(directory) - len(source_subpath)]
    return trimmed or "/"


def authenticated_remote_url(identity: WorkspaceIdentity, token: str) -> str:
    """Build the https remote URL carrying the push token as user info."""
    userinfo = f"{quote(identity.remote_user, safe='')}:{quote(token, safe='')}"
    path = f"/{identity.github_org}/{identity.github_repo}"
    return urlunsplit(("https", f"{userinfo}@{identity.remote_host}", path, "", ""))
