"""Git client built on the git command line.

Runs git as a blocking subprocess. Clone is idempotent: a directory which
already holds a checkout of the expected repository is opened without
touching the network.

Command arguments are never included in error messages or logs because
``remote set-url`` carries a credential URL.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

logger = logging.getLogger(__name__)

GIT_CLONE_TIMEOUT_SECONDS = 600
GIT_COMMAND_TIMEOUT_SECONDS = 60
DEFAULT_GIT_BASE_URL = "https://github.com"

PathLike = Union[str, Path]


class GitError(Exception):
    """Base exception for git client errors."""

    pass


class GitCommandError(GitError):
    """Raised when a git subprocess fails, times out, or cannot be started.

    Attributes:
        command: The git subcommand that failed (e.g. "clone").
        reason: Short description of the failure.
        stderr: Captured standard error, if any.
    """

    def __init__(self, command: str, message: str, stderr: str = ""):
        self.command = command
        self.reason = message
        self.stderr = stderr
        super().__init__(f"git {command} failed: {message}")


class GitCloneError(GitCommandError):
    """Raised when cloning the repository fails."""

    def __init__(self, clone_url: str, message: str, stderr: str = ""):
        self.clone_url = clone_url
        super().__init__("clone", f"{clone_url}: {message}", stderr)


class RepositoryMismatchError(GitError):
    """Raised when a directory holds a checkout of a different repository."""

    def __init__(self, directory: Path, expected: str, actual: str):
        self.directory = directory
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{directory} is a checkout of {actual}, expected {expected}"
        )


def _run_git(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    timeout: int = GIT_COMMAND_TIMEOUT_SECONDS,
) -> str:
    """Run a git command and return its stripped stdout.

    Raises:
        GitCommandError: On non-zero exit, timeout, or OS error.
    """
    command = args[0]
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitCommandError(command, f"timed out after {timeout}s") from exc
    except OSError as exc:
        raise GitCommandError(command, f"failed to execute git: {exc}") from exc

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise GitCommandError(
            command, stderr or f"exit code {result.returncode}", stderr
        )
    return result.stdout.strip()


def _repository_slug(remote_url: str) -> str:
    """Reduce a remote URL to its trailing "org/repo" part.

    Handles https, ssh ("git@host:org/repo.git") and local path remotes.
    """
    trimmed = remote_url.strip().rstrip("/")
    if trimmed.endswith(".git"):
        trimmed = trimmed[: -len(".git")]
    trimmed = trimmed.replace(":", "/")
    parts = [part for part in trimmed.split("/") if part]
    return "/".join(parts[-2:])


class Repository:
    """An opened git checkout.

    Attributes:
        path: Top-level directory of the checkout.
    """

    def __init__(self, path: Path):
        self.path = path

    def remote_url(self, remote: str) -> str:
        """Return the configured URL of the named remote."""
        return _run_git(["remote", "get-url", remote], cwd=self.path)

    def set_remote_url(self, remote: str, url: str) -> None:
        """Overwrite the URL of the named remote.

        Raises:
            GitCommandError: If the remote does not exist or git fails.
        """
        _run_git(["remote", "set-url", remote, url], cwd=self.path)
        logger.info(
            "Updated git remote URL",
            extra={"repository": str(self.path), "remote": remote},
        )

    def __repr__(self) -> str:
        return f"Repository(path={str(self.path)!r})"


class GitClient:
    """Clones and opens git checkouts using the git CLI.

    Attributes:
        base_url: Prefix for clone URLs; "{base_url}/{org}/{repo}" is cloned.
        remote: Remote name checked when reopening an existing checkout.
        clone_timeout_seconds: Maximum time allowed for a clone.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_GIT_BASE_URL,
        remote: str = "origin",
        clone_timeout_seconds: int = GIT_CLONE_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.remote = remote
        self.clone_timeout_seconds = clone_timeout_seconds

    def clone_url(self, org: str, repo: str) -> str:
        """Return the URL cloned for the given repository."""
        return f"{self.base_url}/{org}/{repo}"

    def clone_or_open(
        self, directory: PathLike, org: str, repo: str, shallow: bool = False
    ) -> Repository:
        """Open the checkout at directory, cloning it first if needed.

        Args:
            directory: Target checkout directory.
            org: Repository owner.
            repo: Repository name.
            shallow: Clone with ``--depth 1`` when True.

        Returns:
            The opened Repository.

        Raises:
            RepositoryMismatchError: If directory is a checkout of another repository.
            GitCloneError: If the clone fails.
        """
        directory = Path(directory)
        if self._is_checkout(directory):
            repository = self.open_repo(directory)
            self._verify_remote(repository, f"{org}/{repo}")
            logger.info(
                "Using existing checkout",
                extra={"directory": str(directory)},
            )
            return repository

        clone_url = self.clone_url(org, repo)
        self._clone(clone_url, directory, shallow)
        return self.open_repo(directory)

    def open_repo(self, directory: PathLike) -> Repository:
        """Open an existing checkout rooted at directory.

        Raises:
            GitError: If directory is not the top level of a git checkout.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise GitError(f"{directory} is not a directory")

        toplevel = Path(_run_git(["rev-parse", "--show-toplevel"], cwd=directory))
        if toplevel.resolve() != directory.resolve():
            raise GitError(f"{directory} is not the root of a git checkout")
        return Repository(directory)

    def _is_checkout(self, directory: Path) -> bool:
        return (directory / ".git").exists()

    def _verify_remote(self, repository: Repository, expected_slug: str) -> None:
        actual_slug = _repository_slug(repository.remote_url(self.remote))
        if actual_slug != expected_slug:
            raise RepositoryMismatchError(
                repository.path, expected_slug, actual_slug
            )

    def _clone(self, clone_url: str, directory: Path, shallow: bool) -> None:
        args = ["clone"]
        if shallow:
            args.extend(["--depth", "1"])
        args.extend([clone_url, str(directory)])

        logger.info(
            "Cloning repository",
            extra={"url": clone_url, "target": str(directory), "shallow": shallow},
        )
        try:
            _run_git(args, timeout=self.clone_timeout_seconds)
        except GitCommandError as exc:
            raise GitCloneError(clone_url, exc.reason, exc.stderr) from exc
