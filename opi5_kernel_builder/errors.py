from __future__ import annotations


class ConfigError(ValueError):
    """Bad command line or config file."""


class StepFailed(RuntimeError):
    """A step hit a condition it cannot continue past."""

    def __init__(self, message: str, *, step_id: str | None = None):
        self.step_id = step_id
        super().__init__(message)
