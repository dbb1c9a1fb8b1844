"""Workspace preparation for the staging and release phases.

This package implements the two workspace pipelines of a release run:
- stage: clone or reopen the source checkout and prewarm the SPDX license cache
- release: download and extract the staged sources, then re-authenticate
  the checkout's git remote for pushing

Collaborators (git, object storage, license downloads, archive extraction)
live in their own subpackages and are injected into the pipelines.
"""
