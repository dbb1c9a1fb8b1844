"""Stage and release workspace pipelines.

- WorkspaceStager: clone or reopen the checkout, then warm the license cache
- WorkspaceReleaser: fetch and unpack staged sources, then reset the push remote
"""

from src.release.workspace.releaser import WorkspaceReleaser
from src.release.workspace.stager import WorkspaceStager

__all__ = ["WorkspaceReleaser", "WorkspaceStager"]
