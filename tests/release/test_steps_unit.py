"""Unit tests for the ordered step runner."""

import pytest

from src.release.errors import CollaboratorError, ConfigurationError
from src.release.steps import Step, run_steps


class TestRunSteps:

    def test_runs_steps_in_order(self):
        calls = []
        run_steps("test", [
            Step("first", lambda: calls.append("first")),
            Step("second", lambda: calls.append("second")),
            Step("third", lambda: calls.append("third")),
        ])
        assert calls == ["first", "second", "third"]

    def test_stops_at_first_failure(self):
        calls = []

        def fail():
            calls.append("fail")
            raise RuntimeError("boom")

        with pytest.raises(CollaboratorError):
            run_steps("test", [
                Step("ok", lambda: calls.append("ok")),
                Step("bad", fail),
                Step("never", lambda: calls.append("never")),
            ])
        assert calls == ["ok", "fail"]

    def test_wraps_collaborator_errors_with_step_name(self):
        cause = OSError("disk full")

        def fail():
            raise cause

        with pytest.raises(CollaboratorError) as exc_info:
            run_steps("test", [Step("extract", fail)])

        assert exc_info.value.step == "extract"
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause
        assert str(exc_info.value) == "extract: disk full"

    def test_workspace_errors_propagate_unwrapped(self):
        def fail():
            raise ConfigurationError("TOKEN env variable is not set", env_key="TOKEN")

        with pytest.raises(ConfigurationError) as exc_info:
            run_steps("test", [Step("read-token", fail)])
        assert exc_info.value.env_key == "TOKEN"

    def test_empty_pipeline_is_a_no_op(self):
        run_steps("test", [])
