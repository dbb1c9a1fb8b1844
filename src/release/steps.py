"""Minimal ordered step runner for the workspace pipelines.

A pipeline is a list of named steps. Steps run in order and the first
failure aborts the rest. WorkspaceError subclasses propagate unchanged;
any other exception is wrapped in a CollaboratorError tagged with the
step name.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from src.release.errors import CollaboratorError, WorkspaceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    """A single named unit of work in a pipeline.

    Attributes:
        name: Tag used in logs and in CollaboratorError.step.
        action: Zero-argument callable doing the work.
    """

    name: str
    action: Callable[[], None]


def run_steps(pipeline: str, steps: Iterable[Step]) -> None:
    """Execute steps in order, halting on the first failure.

    Args:
        pipeline: Pipeline name, used for logging only.
        steps: Steps to execute.

    Raises:
        WorkspaceError: Raised by a step directly.
        CollaboratorError: Wrapping any other exception raised by a step.
    """
    for step in steps:
        logger.info(
            "Running step",
            extra={"pipeline": pipeline, "step": step.name},
        )
        try:
            step.action()
        except WorkspaceError:
            raise
        except Exception as exc:
            logger.error(
                "Step failed",
                extra={"pipeline": pipeline, "step": step.name},
            )
            raise CollaboratorError(step.name, exc) from exc
