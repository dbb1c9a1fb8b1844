"""Git command-line client for cloning, opening, and re-pointing checkouts."""

from src.release.git.client import (
    GitClient,
    GitCloneError,
    GitCommandError,
    GitError,
    Repository,
    RepositoryMismatchError,
)

__all__ = [
    "GitClient",
    "GitCloneError",
    "GitCommandError",
    "GitError",
    "Repository",
    "RepositoryMismatchError",
]
